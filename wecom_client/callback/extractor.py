"""
Tag extraction for the small XML documents pushed by the platform.

This is not an XML parser: matching is first-occurrence substring search,
tags carry no attributes and no namespaces. The platform's payloads are
assumed well-formed.
"""

import re
from functools import lru_cache

from wecom_client.exceptions import MalformedInputError
from wecom_client.models.callback import ExtAttrItem, ExtAttrType, WebLink

_CDATA = re.compile(r"<!\[CDATA\[(.*?)\]\]>", re.DOTALL)
_ITEM = re.compile(r"<Item>(.*?)</Item>", re.DOTALL)


@lru_cache(maxsize=128)
def _tag_pattern(tag: str) -> re.Pattern[str]:
    escaped = re.escape(tag)
    return re.compile(rf"<{escaped}>(.*?)</{escaped}>", re.DOTALL)


def extract_value(xml: str, tag: str) -> str:
    """
    Get the text of the first ``<tag>`` element.

    Args:
        xml: XML string.
        tag: Tag name without brackets.

    Returns:
        The CDATA payload if the content is CDATA-wrapped, the plain text
        otherwise, or "" if the tag is absent.
    """
    match = _tag_pattern(tag).search(xml)
    if match is None:
        return ""

    content = match.group(1)
    if (cdata := _CDATA.search(content)) is not None:
        return cdata.group(1)
    return content


def extract_block(xml: str, tag: str) -> str | None:
    """
    Get the whole ``<tag>...</tag>`` span, tags included.

    Returns:
        The block, or None if the start or end tag is missing.
    """
    start_tag = f"<{tag}>"
    end_tag = f"</{tag}>"
    start = xml.find(start_tag)
    end = xml.find(end_tag, start + len(start_tag)) if start != -1 else -1

    if start == -1 or end == -1:
        return None
    return xml[start : end + len(end_tag)]


def require_block(xml: str, tag: str) -> str:
    """
    Like extract_block(), for blocks the caller cannot do without.

    Raises:
        MalformedInputError: If the block is absent.
    """
    block = extract_block(xml, tag)
    if block is None:
        raise MalformedInputError(f"Missing <{tag}> block", tag=tag)
    return block


def parse_ext_attr(block: str) -> list[ExtAttrItem]:
    """
    Parse the ``<Item>`` children of an ``ExtAttr`` block.

    Unknown, missing or non-numeric types produce items with only
    ``name`` and ``type`` populated.

    Args:
        block: The ``<ExtAttr>...</ExtAttr>`` block.

    Returns:
        Items in document order.
    """
    items = []
    for match in _ITEM.finditer(block):
        content = match.group(1)
        name = extract_value(content, "Name")
        attr_type = _parse_type(extract_value(content, "Type"))

        if attr_type == ExtAttrType.TEXT:
            items.append(
                ExtAttrItem(name=name, type=attr_type, value=extract_value(content, "Value"))
            )
        elif attr_type == ExtAttrType.WEB:
            web = WebLink(
                title=extract_value(content, "Title"),
                url=extract_value(content, "Url"),
            )
            items.append(ExtAttrItem(name=name, type=attr_type, web=web))
        else:
            items.append(ExtAttrItem(name=name, type=attr_type))

    return items


def _parse_type(raw: str) -> int | None:
    try:
        value = int(raw.strip())
    except ValueError:
        return None
    try:
        return ExtAttrType(value)
    except ValueError:
        return value
