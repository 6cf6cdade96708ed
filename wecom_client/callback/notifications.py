"""
Typed parsing of decrypted callback notifications.

Directory-sync events (``change_contact``) and batch job results are turned
into dedicated models; anything else is returned as a plain CallbackEvent.
"""

from collections.abc import Callable
from typing import Any

import structlog

from wecom_client.callback.extractor import (
    extract_block,
    extract_value,
    parse_ext_attr,
    require_block,
)
from wecom_client.exceptions import MalformedInputError
from wecom_client.models.callback import (
    BatchJob,
    BatchJobResultEvent,
    CallbackEvent,
    ChangeType,
    PartyChangeEvent,
    TagChangeEvent,
    UserChangeEvent,
)

logger = structlog.get_logger(__name__)

_EVENT_CHANGE_CONTACT = "change_contact"
_EVENT_BATCH_JOB_RESULT = "batch_job_result"


def parse_notification(xml: str) -> CallbackEvent:
    """
    Parse a decrypted callback into its typed model.

    Args:
        xml: Decrypted callback XML.

    Returns:
        UserChangeEvent, PartyChangeEvent, TagChangeEvent or
        BatchJobResultEvent for known events, CallbackEvent otherwise.

    Raises:
        MalformedInputError: If the XML is empty or structurally incomplete.
    """
    if not xml or not xml.strip():
        raise MalformedInputError("Callback XML is empty")

    event = extract_value(xml, "Event")
    if event == _EVENT_BATCH_JOB_RESULT:
        return parse_batch_job_result(xml)

    if event == _EVENT_CHANGE_CONTACT:
        change_type = extract_value(xml, "ChangeType")
        if (parser := _CHANGE_PARSERS.get(change_type)) is not None:
            return parser(xml)
        logger.debug("Unknown contact change type", change_type=change_type)

    return CallbackEvent(**_common_fields(xml))


def parse_user_change(xml: str) -> UserChangeEvent:
    """Parse a create_user, update_user or delete_user event."""
    ext_attr_block = extract_block(xml, "ExtAttr")
    # ExtAttr items reuse tag names such as Name
    fields = xml.replace(ext_attr_block, "", 1) if ext_attr_block else xml

    return UserChangeEvent(
        **_common_fields(xml),
        user_id=extract_value(fields, "UserID"),
        new_user_id=_optional(fields, "NewUserID"),
        name=_optional(fields, "Name"),
        department=tuple(_int_list(fields, "Department")),
        main_department=_int(fields, "MainDepartment"),
        is_leader_in_dept=tuple(_int_list(fields, "IsLeaderInDept")),
        direct_leader=tuple(_str_list(fields, "DirectLeader")),
        position=_optional(fields, "Position"),
        mobile=_optional(fields, "Mobile"),
        gender=_int(fields, "Gender"),
        email=_optional(fields, "Email"),
        biz_mail=_optional(fields, "BizMail"),
        status=_int(fields, "Status"),
        avatar=_optional(fields, "Avatar"),
        alias=_optional(fields, "Alias"),
        telephone=_optional(fields, "Telephone"),
        address=_optional(fields, "Address"),
        ext_attr=tuple(parse_ext_attr(ext_attr_block)) if ext_attr_block else (),
    )


def parse_party_change(xml: str) -> PartyChangeEvent:
    """Parse a create_party, update_party or delete_party event."""
    return PartyChangeEvent(
        **_common_fields(xml),
        id=_int(xml, "Id"),
        name=_optional(xml, "Name"),
        parent_id=_int(xml, "ParentId"),
        order=_int(xml, "Order"),
    )


def parse_tag_change(xml: str) -> TagChangeEvent:
    """Parse an update_tag event."""
    return TagChangeEvent(
        **_common_fields(xml),
        tag_id=_int(xml, "TagId"),
        add_user_items=tuple(_str_list(xml, "AddUserItems")),
        del_user_items=tuple(_str_list(xml, "DelUserItems")),
        add_party_items=tuple(_int_list(xml, "AddPartyItems")),
        del_party_items=tuple(_int_list(xml, "DelPartyItems")),
    )


def parse_batch_job_result(xml: str) -> BatchJobResultEvent:
    """
    Parse a batch_job_result event.

    Raises:
        MalformedInputError: If the ``BatchJob`` block is missing.
    """
    block = require_block(xml, "BatchJob")
    batch_job = BatchJob(
        job_id=extract_value(block, "JobId"),
        job_type=extract_value(block, "JobType"),
        err_code=_int(block, "ErrCode"),
        err_msg=extract_value(block, "ErrMsg"),
    )
    return BatchJobResultEvent(**_common_fields(xml), batch_job=batch_job)


_CHANGE_PARSERS: dict[str, Callable[[str], CallbackEvent]] = {
    ChangeType.CREATE_USER: parse_user_change,
    ChangeType.UPDATE_USER: parse_user_change,
    ChangeType.DELETE_USER: parse_user_change,
    ChangeType.CREATE_PARTY: parse_party_change,
    ChangeType.UPDATE_PARTY: parse_party_change,
    ChangeType.DELETE_PARTY: parse_party_change,
    ChangeType.UPDATE_TAG: parse_tag_change,
}


def _common_fields(xml: str) -> dict[str, Any]:
    return {
        "to_user_name": extract_value(xml, "ToUserName"),
        "from_user_name": extract_value(xml, "FromUserName"),
        "create_time": _int(xml, "CreateTime"),
        "msg_type": extract_value(xml, "MsgType"),
        "event": extract_value(xml, "Event"),
        "change_type": extract_value(xml, "ChangeType"),
        "raw": xml,
    }


def _optional(xml: str, tag: str) -> str | None:
    return extract_value(xml, tag) or None


def _int(xml: str, tag: str) -> int | None:
    raw = extract_value(xml, tag).strip()
    if not raw:
        return None
    try:
        return int(raw)
    except ValueError as e:
        raise MalformedInputError(f"<{tag}> is not an integer: {raw!r}", tag=tag) from e


def _str_list(xml: str, tag: str) -> list[str]:
    raw = extract_value(xml, tag)
    return [part for part in raw.split(",") if part] if raw else []


def _int_list(xml: str, tag: str) -> list[int]:
    try:
        return [int(part) for part in _str_list(xml, tag)]
    except ValueError as e:
        raise MalformedInputError(f"<{tag}> is not a list of integers", tag=tag) from e
