"""
Response normalization for AXL documents

AXL responses are inconsistent about shape: a collection with one member is
indistinguishable from a bare item, optional wrappers may be missing, and some
values arrive either as plain text or nested one element deeper. Every
resource client reads responses through these helpers rather than checking
shapes itself.
"""

from collections.abc import Iterable
from typing import Any, List, Optional
from xml.etree import ElementTree as ET

from .exceptions import ParseError
from .schemas import AXLFault

SOAP_ENV_NS = "http://schemas.xmlsoap.org/soap/envelope/"


def local_name(tag: Any) -> str:
    """Strip the {namespace} part of an element tag"""
    if not isinstance(tag, str):
        return ""
    return tag.rsplit("}", 1)[-1]


def as_sequence(value: Any) -> List[Any]:
    """
    Coerce a value that may be absent, a single item or a collection into a list.

    An Element is always one item; it is never expanded into its children.
    """
    if value is None:
        return []
    if isinstance(value, (ET.Element, str, bytes, dict)):
        return [value]
    if isinstance(value, Iterable):
        return [item for item in value if item is not None]
    return [value]


def child(node: Optional[ET.Element], name: str) -> Optional[ET.Element]:
    """First direct child with the given local name, ignoring namespaces"""
    if node is None:
        return None
    for element in node:
        if local_name(element.tag) == name:
            return element
    return None


def children(node: Optional[ET.Element], name: str) -> List[ET.Element]:
    """All direct children with the given local name"""
    if node is None:
        return []
    return as_sequence(element for element in node if local_name(element.tag) == name)


def text(node: Any) -> Optional[str]:
    """
    Safe text extraction.

    None for an absent node, the stripped text for a leaf, and a serialized
    representation for a node that has child structure.
    """
    if node is None:
        return None
    if isinstance(node, str):
        return node.strip()
    if not isinstance(node, ET.Element):
        return str(node)
    if len(node) == 0:
        return (node.text or "").strip()
    # tail text belongs to the parent
    tail, node.tail = node.tail, None
    try:
        return ET.tostring(node, encoding="unicode").strip()
    finally:
        node.tail = tail


def unwrap_text(node: Any) -> Optional[str]:
    """Text of a leaf, or of its first child when the value is nested one level deeper"""
    if isinstance(node, ET.Element) and len(node) > 0:
        return text(node[0])
    return text(node)


def child_text(node: Optional[ET.Element], name: str) -> Optional[str]:
    return text(child(node, name))


def as_bool(value: Any, default: bool = False) -> bool:
    if isinstance(value, ET.Element):
        value = text(value)
    if value is None or value == "":
        return default
    if isinstance(value, bool):
        return value
    return str(value).strip().lower() in ("true", "t", "1", "yes")


def as_int(value: Any) -> Optional[int]:
    if isinstance(value, ET.Element):
        value = text(value)
    if value is None or value == "":
        return None
    try:
        return int(str(value).strip())
    except ValueError:
        return None


def body_of(document: ET.Element) -> ET.Element:
    if document is None or local_name(document.tag) != "Envelope":
        raise ParseError("Response is not a SOAP envelope")
    body = child(document, "Body")
    if body is None:
        raise ParseError("SOAP envelope has no Body")
    return body


def return_of(document: ET.Element) -> Optional[ET.Element]:
    """The <return> element of the operation response, or None when absent"""
    body = body_of(document)
    for response in body:
        if local_name(response.tag) == "Fault":
            continue
        return child(response, "return")
    return None


def fault_of(document: ET.Element) -> Optional[AXLFault]:
    """Structured fault when the Body carries one, else None"""
    body = body_of(document)
    fault = child(body, "Fault")
    if fault is None:
        return None
    detail = child(fault, "detail")
    axl_error = child(detail, "axlError")
    vendor_message = child_text(axl_error, "axlmessage")
    if vendor_message is None and detail is not None and len(detail) == 0:
        vendor_message = text(detail) or None
    return AXLFault(
        code=child_text(fault, "faultcode") or "",
        message=child_text(fault, "faultstring") or "",
        detail=vendor_message,
        axl_code=child_text(axl_error, "axlcode"),
    )
