"""
Callback-related domain models.

These are immutable (frozen) dataclasses produced by the callback channel.
"""

from dataclasses import dataclass, field
from enum import IntEnum, StrEnum


class ExtAttrType(IntEnum):
    """Extended attribute types documented by the platform."""

    TEXT = 0
    WEB = 1


class ChangeType(StrEnum):
    """``ChangeType`` values of ``change_contact`` events."""

    CREATE_USER = "create_user"
    UPDATE_USER = "update_user"
    DELETE_USER = "delete_user"
    CREATE_PARTY = "create_party"
    UPDATE_PARTY = "update_party"
    DELETE_PARTY = "delete_party"
    UPDATE_TAG = "update_tag"


@dataclass(frozen=True, kw_only=True)
class CipherEnvelope:
    """
    Wire form of an encrypted callback.

    Attributes:
        msg_signature: Signature supplied by the platform.
        timestamp: Timestamp query parameter.
        nonce: Nonce query parameter.
        encrypt: Base64 ciphertext from the ``Encrypt`` element.
    """

    msg_signature: str
    timestamp: str
    nonce: str
    encrypt: str


@dataclass(frozen=True, kw_only=True)
class WebLink:
    title: str
    url: str


@dataclass(frozen=True, kw_only=True)
class ExtAttrItem:
    """
    One extended attribute of a directory member.

    Attributes:
        name: Attribute name.
        type: ExtAttrType for known types, the raw integer otherwise, None if absent.
        value: Text value (TEXT only).
        web: Web link (WEB only).
    """

    name: str
    type: int | None
    value: str | None = None
    web: WebLink | None = None


@dataclass(frozen=True, kw_only=True)
class CallbackEvent:
    """
    Common fields of every decrypted callback.

    Attributes:
        to_user_name: Receiving corp id.
        from_user_name: Sender (``sys`` for directory events).
        create_time: Unix timestamp of the event.
        msg_type: Message type (``event``, ``text``, ...).
        event: Event name, empty for plain messages.
        change_type: Change type, empty when not applicable.
        raw: The decrypted XML.
    """

    to_user_name: str
    from_user_name: str
    create_time: int | None
    msg_type: str
    event: str = ""
    change_type: str = ""
    raw: str = ""


@dataclass(frozen=True, kw_only=True)
class UserChangeEvent(CallbackEvent):
    """Member created, updated or deleted."""

    user_id: str
    new_user_id: str | None = None
    name: str | None = None
    department: tuple[int, ...] = ()
    main_department: int | None = None
    is_leader_in_dept: tuple[int, ...] = ()
    direct_leader: tuple[str, ...] = ()
    position: str | None = None
    mobile: str | None = None
    gender: int | None = None
    email: str | None = None
    biz_mail: str | None = None
    status: int | None = None
    avatar: str | None = None
    alias: str | None = None
    telephone: str | None = None
    address: str | None = None
    ext_attr: tuple[ExtAttrItem, ...] = field(default_factory=tuple)


@dataclass(frozen=True, kw_only=True)
class PartyChangeEvent(CallbackEvent):
    """Department created, updated or deleted."""

    id: int | None = None
    name: str | None = None
    parent_id: int | None = None
    order: int | None = None


@dataclass(frozen=True, kw_only=True)
class TagChangeEvent(CallbackEvent):
    """Tag membership changed."""

    tag_id: int | None = None
    add_user_items: tuple[str, ...] = ()
    del_user_items: tuple[str, ...] = ()
    add_party_items: tuple[int, ...] = ()
    del_party_items: tuple[int, ...] = ()


@dataclass(frozen=True, kw_only=True)
class BatchJob:
    job_id: str
    job_type: str
    err_code: int | None
    err_msg: str


@dataclass(frozen=True, kw_only=True)
class BatchJobResultEvent(CallbackEvent):
    """Asynchronous batch job finished."""

    batch_job: BatchJob


@dataclass(frozen=True, kw_only=True)
class JssdkConfig:
    """
    Parameters for the front-end ``wx.config`` / ``wx.agentConfig`` call.

    Attributes:
        app_id: Corp id.
        timestamp: Unix timestamp used in the signature.
        nonce_str: Random string used in the signature.
        signature: SHA-1 JS-SDK signature.
    """

    app_id: str
    timestamp: int
    nonce_str: str
    signature: str
