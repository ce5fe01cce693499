from pydantic import BaseModel, Field
from typing import Any, Generic, List, Optional, TypeVar

from .exceptions import ParseError, ServerFault, TransportError

T = TypeVar("T")

# axlcode for "Item not valid: The specified ... was not found"
NOT_FOUND_CODES = ("5007",)


#======================================Outcomes=====================================
class AXLFault(BaseModel):
    code: str = ""
    message: str = ""
    detail: Optional[str] = None  # axlmessage
    axl_code: Optional[str] = None


class OperationError(BaseModel):
    kind: str  # "transport", "parse" or "fault"
    message: str
    code: Optional[str] = None  # axlcode when present, else faultcode
    fault_code: Optional[str] = None  # SOAP faultcode
    detail: Optional[str] = None
    status_code: Optional[int] = None

    @property
    def is_not_found(self) -> bool:
        """Fault the server raises for a get on an item that does not exist"""
        if self.kind != "fault":
            return False
        if self.code in NOT_FOUND_CODES:
            return True
        return "not found" in f"{self.detail or ''} {self.message}".lower()

    @classmethod
    def from_fault(cls, fault: AXLFault) -> "OperationError":
        return cls(
            kind="fault",
            message=fault.message,
            code=fault.axl_code or fault.code,
            fault_code=fault.code or None,
            detail=fault.detail,
        )


class OperationResult(BaseModel, Generic[T]):
    """Outcome of a single AXL operation"""
    operation: str
    success: bool
    data: Optional[T] = None
    error: Optional[OperationError] = None

    @classmethod
    def ok(cls, operation: str, data: Any = None) -> "OperationResult":
        return cls(operation=operation, success=True, data=data)

    @classmethod
    def failed(cls, operation: str, error: OperationError) -> "OperationResult":
        return cls(operation=operation, success=False, error=error)

    def raise_for_error(self) -> None:
        """Re-raise a failed outcome as the matching AXL exception"""
        if self.success or self.error is None:
            return
        if self.error.kind == "fault":
            raise ServerFault(AXLFault(
                code=self.error.fault_code or self.error.code or "",
                message=self.error.message,
                detail=self.error.detail,
                axl_code=self.error.code if self.error.code != self.error.fault_code else None,
            ))
        if self.error.kind == "parse":
            raise ParseError(self.error.message)
        raise TransportError(self.error.message, status_code=self.error.status_code)


#======================================Entities=====================================
class LineRef(BaseModel):
    pattern: str = ""
    partition: str = ""


class User(BaseModel):
    user_id: str
    first_name: Optional[str] = None
    last_name: Optional[str] = None
    mobility_enabled: bool = False
    max_desk_pickup_wait_time: Optional[int] = None
    remote_destination_limit: Optional[int] = None
    primary_extension: Optional[LineRef] = None
    associated_profiles: List[str] = Field(default_factory=list)


class RemoteDestinationProfileCreate(BaseModel):
    name: str
    user_id: str
    description: Optional[str] = None
    device_pool: Optional[str] = None
    css: Optional[str] = None
    reroute_css: Optional[str] = None
    lines: List[LineRef] = Field(default_factory=list)


class RemoteDestinationProfileRow(BaseModel):
    """One (profile, line) pair; line fields are empty for a line-less profile"""
    name: str
    description: Optional[str] = None
    device_pool: Optional[str] = None
    css: Optional[str] = None
    reroute_css: Optional[str] = None
    user_id: Optional[str] = None
    line_index: Optional[int] = None
    line_pattern: Optional[str] = None
    line_partition: Optional[str] = None


class RemoteDestination(BaseModel):
    name: str
    destination: str
    profile_name: Optional[str] = None
    owner_user_id: Optional[str] = None
    mobility_css: Optional[str] = None
    enable_unified_mobility: bool = True
    is_mobile_phone: bool = True
    enable_mobile_connect: bool = True
    answer_too_soon_timer: Optional[int] = None
    answer_too_late_timer: Optional[int] = None
    delay_before_ringing_cell: Optional[int] = None
    line: Optional[LineRef] = None


class Line(BaseModel):
    pattern: str
    partition: str = ""
    description: Optional[str] = None
    css: Optional[str] = None
    associated_devices: List[str] = Field(default_factory=list)


class PhoneLine(BaseModel):
    index: Optional[int] = None
    pattern: str = ""
    partition: str = ""
    display: Optional[str] = None
    css: Optional[str] = None


class PhoneSummary(BaseModel):
    name: str
    description: Optional[str] = None
    owner_user_id: Optional[str] = None
    css: Optional[str] = None


class Phone(BaseModel):
    name: str
    description: Optional[str] = None
    model: Optional[str] = None
    css: Optional[str] = None
    owner_user_id: Optional[str] = None
    device_pool: Optional[str] = None
    lines: List[PhoneLine] = Field(default_factory=list)


class PhoneSearchResult(BaseModel):
    phones: List[Phone] = Field(default_factory=list)
    candidate_count: int = 0
    truncated: bool = False
    errors: List[OperationError] = Field(default_factory=list)
