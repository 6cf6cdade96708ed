"""
Cryptographic operations for WeCom callbacks.

This module provides:
- Callback and JS-SDK SHA-1 signatures
- AES-256-CBC message encryption with the platform's 32-byte padding
"""

from wecom_client.crypto.cipher import (
    decrypt_frame,
    decrypt_message,
    derive_key,
    encrypt_message,
)
from wecom_client.crypto.signature import sign, sign_jsapi, verify

__all__ = [
    "derive_key",
    "encrypt_message",
    "decrypt_message",
    "decrypt_frame",
    "sign",
    "verify",
    "sign_jsapi",
]
