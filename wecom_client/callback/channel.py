"""
Callback channel: verify and decrypt inbound callbacks, build encrypted replies.
"""

import secrets
import time

import structlog

from wecom_client.callback.extractor import extract_value
from wecom_client.callback.notifications import parse_notification
from wecom_client.crypto.cipher import decrypt_message, encrypt_message
from wecom_client.crypto.signature import sign, verify
from wecom_client.exceptions import MalformedInputError, SignatureMismatchError
from wecom_client.models.callback import CallbackEvent, CipherEnvelope

logger = structlog.get_logger(__name__)

_REPLY_TEMPLATE = """<xml>
   <Encrypt><![CDATA[{encrypt}]]></Encrypt>
   <MsgSignature><![CDATA[{signature}]]></MsgSignature>
   <TimeStamp>{timestamp}</TimeStamp>
   <Nonce><![CDATA[{nonce}]]></Nonce>
</xml>"""


class CallbackChannel:
    """
    Verifies, decrypts and answers platform callbacks.

    Holds only the static key material; every method is a pure function of
    its inputs and safe to call concurrently.

    Example:
        ```python
        channel = CallbackChannel(token, encoding_aes_key, corp_id)

        # GET: URL verification
        echo = channel.verify_url(msg_signature, timestamp, nonce, echostr)

        # POST: notification
        event = channel.receive_message(msg_signature, timestamp, nonce, body)
        ```
    """

    def __init__(self, token: str, encoding_aes_key: str, receiver_id: str) -> None:
        """
        Args:
            token: Callback token configured on the platform.
            encoding_aes_key: EncodingAESKey configured on the platform.
            receiver_id: Corp id appended to encrypted replies.
        """
        self._token = token
        self._encoding_aes_key = encoding_aes_key
        self._receiver_id = receiver_id

    def verify_url(self, msg_signature: str, timestamp: str, nonce: str, echostr: str) -> str:
        """
        Answer the URL verification handshake.

        Returns:
            The decrypted echo string, to be sent back verbatim.

        Raises:
            SignatureMismatchError: If the signature does not match.
            DecryptionError: If echostr cannot be decrypted.
        """
        envelope = CipherEnvelope(
            msg_signature=msg_signature, timestamp=timestamp, nonce=nonce, encrypt=echostr
        )
        return self._open(envelope)

    def parse_envelope(
        self, msg_signature: str, timestamp: str, nonce: str, body: str
    ) -> CipherEnvelope:
        """
        Build the envelope of a POSTed callback.

        Raises:
            MalformedInputError: If the body has no ``Encrypt`` element.
        """
        encrypt = extract_value(body, "Encrypt")
        if not encrypt:
            raise MalformedInputError("Callback body has no Encrypt element", tag="Encrypt")
        return CipherEnvelope(
            msg_signature=msg_signature, timestamp=timestamp, nonce=nonce, encrypt=encrypt
        )

    def decrypt_callback(self, msg_signature: str, timestamp: str, nonce: str, body: str) -> str:
        """
        Verify and decrypt a POSTed callback.

        Returns:
            The decrypted notification XML.

        Raises:
            MalformedInputError: If the body has no ``Encrypt`` element.
            SignatureMismatchError: If the signature does not match.
            DecryptionError: If the payload cannot be decrypted.
        """
        return self._open(self.parse_envelope(msg_signature, timestamp, nonce, body))

    def receive_message(
        self, msg_signature: str, timestamp: str, nonce: str, body: str
    ) -> CallbackEvent:
        """
        Verify, decrypt and parse a POSTed callback.

        Returns:
            The typed notification.

        Raises:
            MalformedInputError: If the body or the decrypted XML is incomplete.
            SignatureMismatchError: If the signature does not match.
            DecryptionError: If the payload cannot be decrypted.
        """
        xml = self.decrypt_callback(msg_signature, timestamp, nonce, body)
        event = parse_notification(xml)
        logger.debug("Callback received", msg_type=event.msg_type, event_name=event.event)
        return event

    def build_reply(
        self,
        reply: str,
        *,
        timestamp: str | int | None = None,
        nonce: str | None = None,
    ) -> str:
        """
        Encrypt and sign a passive reply.

        Args:
            reply: Serialized reply XML.
            timestamp: Reply timestamp, defaults to now.
            nonce: Reply nonce, defaults to a random token.

        Returns:
            The ``<xml>`` envelope to return as the HTTP response body.
        """
        timestamp = str(timestamp if timestamp is not None else int(time.time()))
        nonce = nonce or secrets.token_hex(8)

        encrypt = encrypt_message(reply, self._encoding_aes_key, self._receiver_id)
        signature = sign(self._token, timestamp, nonce, encrypt)

        return _REPLY_TEMPLATE.format(
            encrypt=encrypt, signature=signature, timestamp=timestamp, nonce=nonce
        )

    def _open(self, envelope: CipherEnvelope) -> str:
        if not verify(
            envelope.msg_signature,
            self._token,
            envelope.timestamp,
            envelope.nonce,
            envelope.encrypt,
        ):
            logger.warning("Callback signature mismatch", timestamp=envelope.timestamp)
            raise SignatureMismatchError(
                "Callback signature verification failed", timestamp=envelope.timestamp
            )
        return decrypt_message(envelope.encrypt, self._encoding_aes_key)
