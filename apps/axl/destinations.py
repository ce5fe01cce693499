import logging
from typing import Iterable, List, Optional
from xml.etree import ElementTree as ET

from .base import AXLResource
from .normalizer import (
    as_bool, as_int, child, child_text, children, return_of, unwrap_text,
)
from .schemas import LineRef, OperationResult, RemoteDestination
from .transport import build_element

logger = logging.getLogger(__name__)

DESTINATION_RETURNED_TAGS = {
    "name": "",
    "destination": "",
    "remoteDestinationProfileName": "",
    "ownerUserId": "",
    "callingSearchSpaceName": "",
    "enableUnifiedMobility": "",
    "isMobilePhone": "",
    "enableMobileConnect": "",
    "answerTooSoonTimer": "",
    "answerTooLateTimer": "",
    "delayBeforeRingingCell": "",
    "lineAssociations": "",
}


def parse_destination(node: ET.Element) -> RemoteDestination:
    line = None
    associations = [
        association
        for container in children(node, "lineAssociations")
        for association in children(container, "lineAssociation")
    ]
    if associations:
        line = LineRef(
            pattern=child_text(associations[0], "pattern") or "",
            partition=unwrap_text(child(associations[0], "routePartitionName")) or "",
        )

    return RemoteDestination(
        name=child_text(node, "name") or "",
        destination=child_text(node, "destination") or "",
        profile_name=unwrap_text(child(node, "remoteDestinationProfileName")) or None,
        owner_user_id=unwrap_text(child(node, "ownerUserId")) or None,
        mobility_css=unwrap_text(child(node, "callingSearchSpaceName")) or None,
        enable_unified_mobility=as_bool(child(node, "enableUnifiedMobility"), default=True),
        is_mobile_phone=as_bool(child(node, "isMobilePhone"), default=True),
        enable_mobile_connect=as_bool(child(node, "enableMobileConnect"), default=True),
        answer_too_soon_timer=as_int(child(node, "answerTooSoonTimer")),
        answer_too_late_timer=as_int(child(node, "answerTooLateTimer")),
        delay_before_ringing_cell=as_int(child(node, "delayBeforeRingingCell")),
        line=line,
    )


class RemoteDestinationClient(AXLResource):
    def add(self, destination: RemoteDestination) -> OperationResult:
        """Create a remote destination under its profile; data is the new uuid"""
        line_associations = None
        if destination.line is not None:
            line_associations = {"lineAssociation": {
                "pattern": destination.line.pattern,
                "routePartitionName": destination.line.partition,
            }}

        body = build_element("addRemoteDestination", {"remoteDestination": {
            "name": destination.name,
            "destination": destination.destination,
            "answerTooSoonTimer": destination.answer_too_soon_timer,
            "answerTooLateTimer": destination.answer_too_late_timer,
            "delayBeforeRingingCell": destination.delay_before_ringing_cell,
            "ownerUserId": destination.owner_user_id,
            "enableUnifiedMobility": destination.enable_unified_mobility,
            "remoteDestinationProfileName": destination.profile_name,
            "isMobilePhone": destination.is_mobile_phone,
            "enableMobileConnect": destination.enable_mobile_connect,
            "callingSearchSpaceName": destination.mobility_css or None,
            "lineAssociations": line_associations,
        }})
        logger.info(
            f"Adding remote destination {destination.name} ({destination.destination}) "
            f"under {destination.profile_name}"
        )
        return self._execute(body, lambda doc: unwrap_text(return_of(doc)))

    def list(self, profile_names: Optional[Iterable[str]] = None) -> OperationResult:
        """
        List remote destinations, optionally restricted to owning profile names.

        The server-side filter on remoteDestinationProfileName is not reliable,
        so the search is always the unrestricted wildcard and the profile
        filter is applied here.
        """
        body = build_element("listRemoteDestination", {
            "searchCriteria": {"name": "%"},
            "returnedTags": DESTINATION_RETURNED_TAGS,
        })
        wanted = None if profile_names is None else set(profile_names)

        def parse(doc: ET.Element) -> List[RemoteDestination]:
            destinations = [
                parse_destination(node)
                for node in children(return_of(doc), "remoteDestination")
            ]
            if wanted is None:
                return destinations
            return [d for d in destinations if d.profile_name in wanted]

        return self._execute(body, parse)
