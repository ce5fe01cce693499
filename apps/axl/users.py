import logging
from typing import Any, Dict, List, Optional
from xml.etree import ElementTree as ET

from .base import AXLResource
from .normalizer import (
    as_bool, as_int, child, child_text, children, local_name, return_of, unwrap_text,
)
from .schemas import LineRef, OperationResult, User
from .transport import build_element

logger = logging.getLogger(__name__)

# Servers disagree on the member tag inside associatedRemoteDestinationProfiles
PROFILE_NAME_TAGS = ("remoteDestinationProfileName", "remoteDestinationProfile")

USER_RETURNED_TAGS = {
    "userid": "",
    "firstName": "",
    "lastName": "",
    "enableMobility": "",
    "maxDeskPickupWaitTime": "",
    "remoteDestinationLimit": "",
    "primaryExtension": "",
    "associatedRemoteDestinationProfiles": "",
}


def parse_user(node: Optional[ET.Element]) -> Optional[User]:
    if node is None:
        return None

    primary = child(node, "primaryExtension")
    primary_extension = None
    if primary is not None:
        primary_extension = LineRef(
            pattern=child_text(primary, "pattern") or "",
            partition=unwrap_text(child(primary, "routePartitionName")) or "",
        )

    profiles: List[str] = []
    for container in children(node, "associatedRemoteDestinationProfiles"):
        for element in container:
            if local_name(element.tag) not in PROFILE_NAME_TAGS:
                continue
            name = unwrap_text(element)
            if name and name not in profiles:
                profiles.append(name)

    return User(
        user_id=child_text(node, "userid") or "",
        first_name=child_text(node, "firstName"),
        last_name=child_text(node, "lastName"),
        mobility_enabled=as_bool(child(node, "enableMobility")),
        max_desk_pickup_wait_time=as_int(child(node, "maxDeskPickupWaitTime")),
        remote_destination_limit=as_int(child(node, "remoteDestinationLimit")),
        primary_extension=primary_extension,
        associated_profiles=profiles,
    )


class UserClient(AXLResource):
    def get(self, user_id: str) -> OperationResult:
        """Read one end user; data is None when the response carries no user"""
        body = build_element("getUser", {
            "userid": user_id,
            "returnedTags": USER_RETURNED_TAGS,
        })
        return self._execute(body, lambda doc: parse_user(child(return_of(doc), "user")))

    def update(self, user_id: str, fields: Dict[str, Any]) -> OperationResult:
        """Apply an updateUser with the given AXL fields; data is the user uuid"""
        payload = {"userid": user_id}
        payload.update(fields)
        body = build_element("updateUser", payload)
        return self._execute(body, lambda doc: unwrap_text(return_of(doc)))

    def enable_mobility(
        self,
        user_id: str,
        max_desk_pickup_wait_time: int,
        remote_destination_limit: int,
    ) -> OperationResult:
        logger.info(f"Enabling mobility for {user_id}")
        return self.update(user_id, {
            "enableMobility": True,
            "maxDeskPickupWaitTime": max_desk_pickup_wait_time,
            "remoteDestinationLimit": remote_destination_limit,
        })
