import logging
from typing import List, Optional

from apps.axl.destinations import RemoteDestinationClient
from apps.axl.lines import LineClient
from apps.axl.profiles import RemoteDestinationProfileClient
from apps.axl.schemas import (
    LineRef, OperationResult, RemoteDestination, RemoteDestinationProfileCreate,
)
from apps.axl.transport import AXLTransport, get_transport
from apps.axl.users import UserClient
from .naming import destination_name_for, profile_name_for
from .schemas import (
    ProvisionRequest, ProvisionResult, ProvisionState, SNRSnapshot, StepResult,
)

logger = logging.getLogger(__name__)

# Write steps in order, with the state reached when each succeeds
WRITE_STEPS = (
    ("enable_mobility", ProvisionState.MOBILITY_ENABLED),
    ("add_profile", ProvisionState.PROFILE_CREATED),
    ("add_destination", ProvisionState.DESTINATION_CREATED),
)


class SingleNumberReachService:
    """
    Provisions and verifies Single Number Reach for one user at a time.

    The server gives no transactional guarantee across users, profiles and
    destinations, so every step runs even when an earlier one failed and the
    final read-back decides whether the user is actually configured.
    """

    def __init__(self, transport: Optional[AXLTransport] = None):
        transport = transport or get_transport()
        self.users = UserClient(transport)
        self.lines = LineClient(transport)
        self.profiles = RemoteDestinationProfileClient(transport)
        self.destinations = RemoteDestinationClient(transport)

    #===============================================Provisioning===============================================
    def provision(self, request: ProvisionRequest) -> ProvisionResult:
        user_id = request.user_id
        profile_name = profile_name_for(user_id)
        destination_name = destination_name_for(user_id)
        desk_line = LineRef(pattern=request.line_pattern, partition=request.line_partition)

        result = ProvisionResult(
            user_id=user_id,
            profile_name=profile_name,
            destination_name=destination_name,
            mobile_number=request.mobile_number,
        )
        logger.info(f"Provisioning SNR for {user_id}: {profile_name} / {destination_name}")

        # STEP 1: Enable mobility on the end user
        self._record(result, "enable_mobility", self.users.enable_mobility(
            user_id,
            max_desk_pickup_wait_time=request.max_desk_pickup_wait_time,
            remote_destination_limit=request.remote_destination_limit,
        ))

        # STEP 2: Remote destination profile on the desk line
        self._record(result, "add_profile", self.profiles.add(RemoteDestinationProfileCreate(
            name=profile_name,
            user_id=user_id,
            description=request.description or f"SNR {user_id}",
            device_pool=request.device_pool,
            css=request.css,
            reroute_css=request.reroute_css,
            lines=[desk_line],
        )))

        # STEP 3: Remote destination for the mobile number, attempted even if
        # the profile step failed (it may already exist)
        self._record(result, "add_destination", self.destinations.add(RemoteDestination(
            name=destination_name,
            destination=request.mobile_number,
            profile_name=profile_name,
            owner_user_id=user_id,
            mobility_css=request.mobility_css,
            enable_unified_mobility=request.enable_unified_mobility,
            is_mobile_phone=request.is_mobile_phone,
            enable_mobile_connect=request.enable_mobile_connect,
            answer_too_soon_timer=request.answer_too_soon_timer,
            answer_too_late_timer=request.answer_too_late_timer,
            delay_before_ringing_cell=request.delay_before_ringing_cell,
            line=desk_line,
        )))

        if request.apply_line:
            self._record(result, "apply_line", self.lines.apply(desk_line.pattern, desk_line.partition))

        result.state = self._reached_state(result.steps)

        # STEP 4: Read back live state; echoed write responses are not trusted
        snapshot = self.verify(user_id)
        result.snapshot = snapshot
        result.verified = (
            snapshot.mobility_enabled
            and snapshot.has_profile(profile_name)
            and snapshot.has_destination(destination_name, profile_name)
        )
        if result.verified:
            result.state = ProvisionState.VERIFIED

        failed = [step.step for step in result.failed_steps]
        if result.verified:
            logger.info(f"SNR verified for {user_id} (failed steps: {failed or 'none'})")
        else:
            logger.warning(f"SNR not verified for {user_id}; state {result.state.value}, failed steps: {failed}")
        return result

    @staticmethod
    def _record(result: ProvisionResult, step: str, outcome: OperationResult) -> None:
        result.steps.append(StepResult(step=step, success=outcome.success, error=outcome.error))
        if outcome.success:
            logger.info(f"{result.user_id}: {step} succeeded")
        else:
            logger.warning(f"{result.user_id}: {step} failed: {outcome.error.detail or outcome.error.message}")

    @staticmethod
    def _reached_state(steps: List[StepResult]) -> ProvisionState:
        """Last state of the unbroken chain of successful write steps"""
        outcomes = {step.step: step.success for step in steps}
        state = ProvisionState.INIT
        for name, reached in WRITE_STEPS:
            if not outcomes.get(name):
                break
            state = reached
        return state

    #===============================================Verification===============================================
    def verify(self, user_id: str) -> SNRSnapshot:
        """
        Read the user, its remote destination profiles and their destinations.

        When the user has no associated profiles yet, the conventional profile
        name is used so a freshly created profile is still found.
        """
        snapshot = SNRSnapshot(user_id=user_id)

        user_result = self.users.get(user_id)
        if user_result.success:
            snapshot.user = user_result.data
        else:
            snapshot.errors.append(user_result.error)

        names = list(snapshot.user.associated_profiles) if snapshot.user else []
        if not names:
            names = [profile_name_for(user_id)]
        snapshot.profile_names = names

        profiles = self.profiles.list(names)
        if profiles.success:
            snapshot.profiles = profiles.data
        else:
            snapshot.errors.append(profiles.error)

        destinations = self.destinations.list(profile_names=names)
        if destinations.success:
            snapshot.destinations = destinations.data
        else:
            snapshot.errors.append(destinations.error)

        return snapshot

