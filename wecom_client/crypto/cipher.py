"""
AES-256-CBC message cipher for WeCom callbacks.

Plaintext layout (PlainFrame)::

    random(16) | msg_len(4, big-endian) | message | receiver_id | padding

Padding is PKCS#7-style but sized to 32 bytes, not the 16-byte AES block,
and the IV is the first 16 bytes of the key.
"""

import base64
import binascii
import os
import struct

from cryptography.hazmat.backends import default_backend
from cryptography.hazmat.primitives.ciphers import Cipher, algorithms, modes

from wecom_client.exceptions import DecryptionError, InvalidEncodingKeyError

_KEY_SIZE = 32
_IV_SIZE = 16
_BLOCK_SIZE = 16
_PAD_BOUNDARY = 32
_RANDOM_SIZE = 16
_LENGTH_SIZE = 4
_FRAME_HEADER_SIZE = _RANDOM_SIZE + _LENGTH_SIZE


def derive_key(encoding_aes_key: str) -> tuple[bytes, bytes]:
    """
    Derive the AES key and IV from an EncodingAESKey.

    Args:
        encoding_aes_key: 43-character base64 string without padding.

    Returns:
        Tuple of (32-byte key, 16-byte IV).

    Raises:
        InvalidEncodingKeyError: If the key is not valid base64 or not 32 bytes.
    """
    try:
        key = base64.b64decode(encoding_aes_key + "=", validate=True)
    except (ValueError, binascii.Error) as e:
        raise InvalidEncodingKeyError("EncodingAESKey is not valid base64") from e

    if len(key) != _KEY_SIZE:
        raise InvalidEncodingKeyError(f"EncodingAESKey must decode to 32 bytes, got {len(key)}")

    return key, key[:_IV_SIZE]


def encrypt_message(message: str, encoding_aes_key: str, receiver_id: str) -> str:
    """
    Encrypt a reply message.

    Args:
        message: Plaintext (usually XML) to encrypt.
        encoding_aes_key: EncodingAESKey configured on the platform.
        receiver_id: Corp id appended to the frame.

    Returns:
        Base64-encoded ciphertext.

    Raises:
        InvalidEncodingKeyError: If the EncodingAESKey is invalid.
    """
    key, iv = derive_key(encoding_aes_key)

    message_bytes = message.encode("utf-8")
    frame = (
        os.urandom(_RANDOM_SIZE)
        + struct.pack(">I", len(message_bytes))
        + message_bytes
        + receiver_id.encode("utf-8")
    )
    padded = _pad(frame)

    encryptor = Cipher(algorithms.AES(key), modes.CBC(iv), backend=default_backend()).encryptor()
    ciphertext = encryptor.update(padded) + encryptor.finalize()

    return base64.b64encode(ciphertext).decode("ascii")


def decrypt_frame(cipher_b64: str, encoding_aes_key: str) -> tuple[str, str]:
    """
    Decrypt a callback payload and split its frame.

    Args:
        cipher_b64: Base64 ciphertext (``Encrypt`` element or ``echostr``).
        encoding_aes_key: EncodingAESKey configured on the platform.

    Returns:
        Tuple of (message, receiver_id).

    Raises:
        DecryptionError: If the payload cannot be decoded, decrypted or unframed.
    """
    try:
        key, iv = derive_key(encoding_aes_key)
    except InvalidEncodingKeyError as e:
        raise DecryptionError(f"Cannot decrypt with this key: {e.message}") from e

    try:
        ciphertext = base64.b64decode(cipher_b64, validate=True)
    except (ValueError, binascii.Error) as e:
        raise DecryptionError("Ciphertext is not valid base64") from e

    if len(ciphertext) == 0 or len(ciphertext) % _BLOCK_SIZE != 0:
        raise DecryptionError(
            f"Ciphertext length {len(ciphertext)} is not a multiple of {_BLOCK_SIZE}"
        )

    decryptor = Cipher(algorithms.AES(key), modes.CBC(iv), backend=default_backend()).decryptor()
    plaintext = _unpad(decryptor.update(ciphertext) + decryptor.finalize())

    return _parse_frame(plaintext)


def decrypt_message(cipher_b64: str, encoding_aes_key: str) -> str:
    """
    Decrypt a callback payload.

    The trailing receiver id is not checked; use decrypt_frame() to read it.

    Raises:
        DecryptionError: If the payload cannot be decoded, decrypted or unframed.
    """
    message, _ = decrypt_frame(cipher_b64, encoding_aes_key)
    return message


def _pad(data: bytes) -> bytes:
    pad_length = _PAD_BOUNDARY - (len(data) % _PAD_BOUNDARY)
    return data + bytes([pad_length]) * pad_length


def _unpad(data: bytes) -> bytes:
    pad_length = data[-1]
    if pad_length < 1 or pad_length > _PAD_BOUNDARY or pad_length > len(data):
        raise DecryptionError(f"Invalid padding length: {pad_length}")
    return data[:-pad_length]


def _parse_frame(plaintext: bytes) -> tuple[str, str]:
    if len(plaintext) < _FRAME_HEADER_SIZE:
        raise DecryptionError(f"Decrypted frame too short: {len(plaintext)} bytes")

    (msg_len,) = struct.unpack(">I", plaintext[_RANDOM_SIZE:_FRAME_HEADER_SIZE])
    msg_end = _FRAME_HEADER_SIZE + msg_len
    if msg_end > len(plaintext):
        raise DecryptionError(
            f"Message length {msg_len} exceeds frame size {len(plaintext) - _FRAME_HEADER_SIZE}"
        )

    try:
        message = plaintext[_FRAME_HEADER_SIZE:msg_end].decode("utf-8")
        receiver_id = plaintext[msg_end:].decode("utf-8")
    except UnicodeDecodeError as e:
        raise DecryptionError("Decrypted frame is not valid UTF-8") from e

    return message, receiver_id
