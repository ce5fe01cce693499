import logging
from typing import Iterable, List, Optional
from xml.etree import ElementTree as ET

from .base import AXLResource
from .normalizer import as_int, child, child_text, children, return_of, unwrap_text
from .schemas import (
    OperationResult, RemoteDestinationProfileCreate, RemoteDestinationProfileRow,
)
from .transport import build_element

logger = logging.getLogger(__name__)


def profile_rows(node: Optional[ET.Element]) -> List[RemoteDestinationProfileRow]:
    """
    Flatten one profile into (profile, line) rows.

    A profile without lines still yields a single row with empty line fields.
    """
    if node is None:
        return []

    common = dict(
        name=child_text(node, "name") or "",
        description=child_text(node, "description"),
        device_pool=unwrap_text(child(node, "devicePoolName")) or None,
        css=unwrap_text(child(node, "callingSearchSpaceName")) or None,
        reroute_css=unwrap_text(child(node, "rerouteCallingSearchSpaceName")) or None,
        user_id=unwrap_text(child(node, "userId")) or None,
    )

    lines = [
        line
        for container in children(node, "lines")
        for line in children(container, "line")
    ]
    if not lines:
        return [RemoteDestinationProfileRow(**common)]

    rows = []
    for line in lines:
        dirn = child(line, "dirn")
        rows.append(RemoteDestinationProfileRow(
            **common,
            line_index=as_int(child(line, "index")),
            line_pattern=child_text(dirn, "pattern") or "",
            line_partition=unwrap_text(child(dirn, "routePartitionName")) or "",
        ))
    return rows


class RemoteDestinationProfileClient(AXLResource):
    def add(self, profile: RemoteDestinationProfileCreate) -> OperationResult:
        """Create a remote destination profile; data is the new uuid"""
        lines = None
        if profile.lines:
            lines = {"line": [
                {
                    "index": index,
                    "dirn": {"pattern": line.pattern, "routePartitionName": line.partition},
                }
                for index, line in enumerate(profile.lines, start=1)
            ]}

        body = build_element("addRemoteDestinationProfile", {"remoteDestinationProfile": {
            "name": profile.name,
            "description": profile.description,
            "product": "Remote Destination Profile",
            "class": "Remote Destination Profile",
            "protocol": "Remote Destination",
            "protocolSide": "User",
            "devicePoolName": profile.device_pool,
            "callingSearchSpaceName": profile.css or None,
            "rerouteCallingSearchSpaceName": profile.reroute_css or None,
            "userId": profile.user_id,
            "lines": lines,
        }})
        logger.info(f"Adding remote destination profile {profile.name} for {profile.user_id}")
        return self._execute(body, lambda doc: unwrap_text(return_of(doc)))

    def get(self, name: str) -> OperationResult:
        """Read one profile as a list of (profile, line) rows"""
        body = build_element("getRemoteDestinationProfile", {"name": name})
        return self._execute(
            body, lambda doc: profile_rows(child(return_of(doc), "remoteDestinationProfile"))
        )

    def list(self, names: Iterable[str]) -> OperationResult:
        """
        Rows for each named profile.

        Names the server does not know are skipped; any other failure fails
        the whole listing.
        """
        rows: List[RemoteDestinationProfileRow] = []
        for name in dict.fromkeys(name for name in names if name):
            result = self.get(name)
            if result.success:
                rows.extend(result.data or [])
            elif result.error.is_not_found:
                logger.info(f"Remote destination profile {name} not found")
            else:
                return OperationResult.failed("listRemoteDestinationProfile", result.error)
        return OperationResult.ok("listRemoteDestinationProfile", rows)

    def names(self, name_pattern: str = "%") -> OperationResult:
        body = build_element("listRemoteDestinationProfile", {
            "searchCriteria": {"name": name_pattern},
            "returnedTags": {"name": ""},
        })
        return self._execute(body, lambda doc: [
            name for name in (
                child_text(node, "name")
                for node in children(return_of(doc), "remoteDestinationProfile")
            ) if name
        ])

    def search(self, name_pattern: str = "%") -> OperationResult:
        """List profiles matching a name pattern and expand each into rows"""
        found = self.names(name_pattern)
        if not found.success:
            return found
        return self.list(found.data)
