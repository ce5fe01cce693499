"""
Error taxonomy for the AXL client layer.

ConfigurationError is fatal and always propagates. TransportError, ParseError
and ServerFault are step-level failures; resource clients turn them into a
failed OperationResult instead of letting them escape.
"""

from typing import Optional, TYPE_CHECKING

if TYPE_CHECKING:
    from .schemas import AXLFault


class AXLError(Exception):
    """Base class for AXL client errors"""
    pass


class ConfigurationError(AXLError):
    """Connection context missing or invalid"""
    pass


class TransportError(AXLError):
    """Network, HTTP or authentication failure"""

    def __init__(self, message: str, status_code: Optional[int] = None):
        super().__init__(message)
        self.status_code = status_code


class ParseError(AXLError):
    """Response body is not well-formed or not shaped like a SOAP envelope"""
    pass


class ServerFault(AXLError):
    """SOAP fault reported inside an otherwise successful exchange"""

    def __init__(self, fault: "AXLFault"):
        super().__init__(fault.detail or fault.message)
        self.fault = fault

    @property
    def code(self) -> str:
        return self.fault.code

    @property
    def detail(self) -> Optional[str]:
        return self.fault.detail
