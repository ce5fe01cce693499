from typing import Optional
from xml.etree import ElementTree as ET

from .base import AXLResource
from .normalizer import child, child_text, children, return_of, unwrap_text
from .schemas import Line, OperationResult
from .transport import build_element


def parse_line(node: Optional[ET.Element]) -> Optional[Line]:
    if node is None:
        return None
    devices = [
        name for name in (
            unwrap_text(device)
            for container in children(node, "associatedDevices")
            for device in children(container, "device")
        ) if name
    ]
    return Line(
        pattern=child_text(node, "pattern") or "",
        partition=unwrap_text(child(node, "routePartitionName")) or "",
        description=child_text(node, "description"),
        css=unwrap_text(child(node, "shareLineAppearanceCssName")) or None,
        associated_devices=devices,
    )


class LineClient(AXLResource):
    @staticmethod
    def _line_key(pattern: str, partition: str) -> dict:
        return {"pattern": pattern, "routePartitionName": partition}

    def get(self, pattern: str, partition: str) -> OperationResult:
        body = build_element("getLine", dict(self._line_key(pattern, partition), returnedTags={
            "pattern": "",
            "routePartitionName": "",
            "description": "",
            "shareLineAppearanceCssName": "",
            "associatedDevices": "",
        }))
        return self._execute(body, lambda doc: parse_line(child(return_of(doc), "line")))

    def apply(self, pattern: str, partition: str) -> OperationResult:
        """Push pending directory number changes to the devices using it"""
        body = build_element("applyLine", self._line_key(pattern, partition))
        return self._execute(body, lambda doc: unwrap_text(return_of(doc)))

    def reset(self, pattern: str, partition: str) -> OperationResult:
        body = build_element("resetLine", self._line_key(pattern, partition))
        return self._execute(body, lambda doc: unwrap_text(return_of(doc)))
