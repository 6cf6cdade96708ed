"""
Inbound callback handling.

Provides signature verification, decryption and typed parsing of the
notifications pushed by the platform, and encrypted passive replies.
"""

from wecom_client.callback.channel import CallbackChannel
from wecom_client.callback.extractor import (
    extract_block,
    extract_value,
    parse_ext_attr,
    require_block,
)
from wecom_client.callback.notifications import parse_notification

__all__ = [
    "CallbackChannel",
    "extract_value",
    "extract_block",
    "require_block",
    "parse_ext_attr",
    "parse_notification",
]
