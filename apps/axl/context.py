"""
AXL connection context

Holds the endpoint, credentials and protocol version for one AXL session.
A process-wide default is set with initialize(); transports may also be
given an explicit ConnectionContext.
"""

import logging
from typing import Optional
from urllib.parse import urlsplit

import httpx
from pydantic import BaseModel, SecretStr

from .exceptions import ConfigurationError

logger = logging.getLogger(__name__)

AXL_PORT = 8443
AXL_PATH = "/axl/"
AXL_NAMESPACE = "http://www.cisco.com/AXL/API/{version}"


def canonical_endpoint(server: str) -> str:
    """Build https://<host>:8443/axl/ from a bare host, host:port or URL"""
    raw = server.strip()
    if "://" not in raw:
        raw = f"https://{raw}"
    host = urlsplit(raw).netloc.rstrip("/")
    if not host:
        raise ConfigurationError(f"Invalid AXL server: {server!r}")
    if ":" not in host.rsplit("]", 1)[-1]:
        host = f"{host}:{AXL_PORT}"
    return f"https://{host}{AXL_PATH}"


class ConnectionContext(BaseModel):
    server: str
    endpoint: str
    username: str
    password: SecretStr
    version: str

    model_config = {"frozen": True}

    @classmethod
    def create(cls, server: str, username: str, password: str, version: str) -> "ConnectionContext":
        missing = [
            name for name, value in (
                ("server", server), ("username", username),
                ("password", password), ("version", version),
            ) if not value
        ]
        if missing:
            raise ConfigurationError(f"AXL connection is missing: {', '.join(missing)}")
        return cls(
            server=server,
            endpoint=canonical_endpoint(server),
            username=username,
            password=password,
            version=str(version).strip(),
        )

    @property
    def namespace(self) -> str:
        return AXL_NAMESPACE.format(version=self.version)

    @property
    def auth(self) -> httpx.BasicAuth:
        return httpx.BasicAuth(self.username, self.password.get_secret_value())

    def soap_action(self, operation: str) -> str:
        return f'"CUCM:DB ver={self.version} {operation}"'

    def headers(self, operation: str) -> dict:
        return {
            "Content-Type": "text/xml; charset=utf-8",
            "SOAPAction": self.soap_action(operation),
        }


_context: Optional[ConnectionContext] = None


def initialize(server: str, username: str, password: str, version: str) -> ConnectionContext:
    """Set the process-wide AXL session; a later call replaces it"""
    global _context
    _context = ConnectionContext.create(server, username, password, version)
    logger.info(f"AXL session initialized for {_context.endpoint} (version {_context.version})")
    return _context


def get_context() -> ConnectionContext:
    if _context is None:
        raise ConfigurationError("AXL session not initialized; call initialize() first")
    return _context


def reset() -> None:
    """Forget the process-wide session (used by tests)"""
    global _context
    _context = None
