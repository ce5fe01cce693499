import json
from enum import Enum
from pydantic import BaseModel, Field, field_validator
from typing import List, Optional
from datetime import datetime

from apps.axl.schemas import (
    OperationError, RemoteDestination, RemoteDestinationProfileRow, User,
)
from config import (
    SNR_ANSWER_TOO_LATE_TIMER, SNR_ANSWER_TOO_SOON_TIMER, SNR_CSS, SNR_DELAY_BEFORE_RINGING_CELL,
    SNR_DEVICE_POOL, SNR_MAX_DESK_PICKUP_WAIT_TIME, SNR_MOBILITY_CSS, SNR_REMOTE_DESTINATION_LIMIT,
    SNR_REROUTE_CSS,
)


class ProvisionState(str, Enum):
    INIT = "INIT"
    MOBILITY_ENABLED = "MOBILITY_ENABLED"
    PROFILE_CREATED = "PROFILE_CREATED"
    DESTINATION_CREATED = "DESTINATION_CREATED"
    VERIFIED = "VERIFIED"


# Schema for a provisioning request
class ProvisionRequest(BaseModel):
    user_id: str = Field(..., min_length=1)
    line_pattern: str = Field(..., min_length=1, description="Desk line directory number")
    line_partition: str = ""
    mobile_number: str = Field(..., min_length=1)
    description: Optional[str] = None
    device_pool: str = SNR_DEVICE_POOL
    css: Optional[str] = SNR_CSS or None
    reroute_css: Optional[str] = SNR_REROUTE_CSS or None
    mobility_css: Optional[str] = SNR_MOBILITY_CSS or None
    max_desk_pickup_wait_time: int = SNR_MAX_DESK_PICKUP_WAIT_TIME
    remote_destination_limit: int = SNR_REMOTE_DESTINATION_LIMIT
    answer_too_soon_timer: int = SNR_ANSWER_TOO_SOON_TIMER
    answer_too_late_timer: int = SNR_ANSWER_TOO_LATE_TIMER
    delay_before_ringing_cell: int = SNR_DELAY_BEFORE_RINGING_CELL
    enable_unified_mobility: bool = True
    is_mobile_phone: bool = True
    enable_mobile_connect: bool = True
    apply_line: bool = False

    model_config = {
        "json_schema_extra": {
            "example": {
                "user_id": "testuser",
                "line_pattern": "2463",
                "line_partition": "ExtensionsPart",
                "mobile_number": "11235812463",
            }
        }
    }


class StepResult(BaseModel):
    step: str
    success: bool
    error: Optional[OperationError] = None


class SNRSnapshot(BaseModel):
    """Live server state for one user's Single Number Reach configuration"""
    user_id: str
    user: Optional[User] = None
    profile_names: List[str] = Field(default_factory=list)
    profiles: List[RemoteDestinationProfileRow] = Field(default_factory=list)
    destinations: List[RemoteDestination] = Field(default_factory=list)
    errors: List[OperationError] = Field(default_factory=list)

    @property
    def mobility_enabled(self) -> bool:
        return self.user is not None and self.user.mobility_enabled

    def has_profile(self, name: str) -> bool:
        return any(row.name == name for row in self.profiles)

    def has_destination(self, name: str, profile_name: Optional[str] = None) -> bool:
        return any(
            d.name == name and (profile_name is None or d.profile_name == profile_name)
            for d in self.destinations
        )


class ProvisionResult(BaseModel):
    user_id: str
    profile_name: str
    destination_name: str
    mobile_number: str
    state: ProvisionState = ProvisionState.INIT
    verified: bool = False
    steps: List[StepResult] = Field(default_factory=list)
    snapshot: Optional[SNRSnapshot] = None

    @property
    def failed_steps(self) -> List[StepResult]:
        return [step for step in self.steps if not step.success]


# Schema for a recorded provisioning run
class ProvisioningRunResponse(BaseModel):
    id: int
    user_id: str
    profile_name: Optional[str] = None
    destination_name: Optional[str] = None
    mobile_number: Optional[str] = None
    state: str
    verified: bool = False
    steps: List[StepResult] = Field(default_factory=list)
    created_at: Optional[datetime] = None

    model_config = {"from_attributes": True}

    @field_validator("steps", mode="before")
    @classmethod
    def load_steps(cls, v):
        if isinstance(v, str):
            return json.loads(v) if v else []
        return v
