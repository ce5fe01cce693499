from typing import Optional
from xml.etree import ElementTree as ET

from .base import AXLResource
from .normalizer import as_int, child, child_text, children, return_of, unwrap_text
from .schemas import OperationResult, Phone, PhoneLine, PhoneSummary
from .transport import build_element


def parse_phone(node: Optional[ET.Element]) -> Optional[Phone]:
    if node is None:
        return None
    lines = []
    for container in children(node, "lines"):
        for line in children(container, "line"):
            dirn = child(line, "dirn")
            lines.append(PhoneLine(
                index=as_int(child(line, "index")),
                pattern=child_text(dirn, "pattern") or "",
                partition=unwrap_text(child(dirn, "routePartitionName")) or "",
                display=child_text(line, "display"),
            ))
    return Phone(
        name=child_text(node, "name") or "",
        description=child_text(node, "description"),
        model=child_text(node, "model"),
        css=unwrap_text(child(node, "callingSearchSpaceName")) or None,
        owner_user_id=unwrap_text(child(node, "ownerUserName")) or None,
        device_pool=unwrap_text(child(node, "devicePoolName")) or None,
        lines=lines,
    )


def parse_summary(node: ET.Element) -> PhoneSummary:
    return PhoneSummary(
        name=child_text(node, "name") or "",
        description=child_text(node, "description"),
        owner_user_id=unwrap_text(child(node, "ownerUserName")) or None,
        css=unwrap_text(child(node, "callingSearchSpaceName")) or None,
    )


class PhoneClient(AXLResource):
    def get(self, name: str) -> OperationResult:
        body = build_element("getPhone", {"name": name})
        return self._execute(body, lambda doc: parse_phone(child(return_of(doc), "phone")))

    def list(self, name_pattern: str = "%") -> OperationResult:
        """Phone summaries (name, description, owner, CSS) matching a name pattern"""
        body = build_element("listPhone", {
            "searchCriteria": {"name": name_pattern},
            "returnedTags": {
                "name": "",
                "description": "",
                "ownerUserName": "",
                "callingSearchSpaceName": "",
            },
        })
        return self._execute(body, lambda doc: [
            parse_summary(node) for node in children(return_of(doc), "phone")
        ])
