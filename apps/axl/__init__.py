# ============================================================================
# apps/axl/__init__.py - AXL administrative API client
# ============================================================================

from .context import ConnectionContext, initialize, get_context, reset
from .destinations import RemoteDestinationClient
from .exceptions import AXLError, ConfigurationError, ParseError, ServerFault, TransportError
from .lines import LineClient
from .phones import PhoneClient
from .profiles import RemoteDestinationProfileClient
from .search import PhoneSearch
from .transport import AXLTransport, get_transport
from .users import UserClient

__all__ = [
    "ConnectionContext",
    "initialize",
    "get_context",
    "reset",
    "AXLTransport",
    "get_transport",
    "AXLError",
    "ConfigurationError",
    "TransportError",
    "ParseError",
    "ServerFault",
    "UserClient",
    "LineClient",
    "PhoneClient",
    "RemoteDestinationProfileClient",
    "RemoteDestinationClient",
    "PhoneSearch",
]
