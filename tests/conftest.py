"""Shared fixtures: httpx mock transports standing in for an AXL server.

MockTransport returns queued responses in order. FakeAXLServer keeps users,
profiles, destinations, lines and phones in memory and answers AXL operations
against that state, so whole workflows can run without a real server.
"""

from typing import Dict, List, Optional, Tuple
from xml.etree import ElementTree as ET
from xml.sax.saxutils import escape

import httpx
import pytest
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

from apps.axl import context as axl_context
from apps.axl.context import ConnectionContext
from apps.axl.transport import AXLTransport

AXL_VERSION = "12.5"
AXL_NS = f"http://www.cisco.com/AXL/API/{AXL_VERSION}"
SOAP_NS = "http://schemas.xmlsoap.org/soap/envelope/"

NOT_FOUND_CODE = "5007"
DUPLICATE_CODE = "-239"


# =============================================================================
# Response builders
# =============================================================================


def soap_response(operation: str, inner: str) -> bytes:
    """Envelope for a successful <operation>Response carrying inner as <return>"""
    return (
        f'<?xml version="1.0" encoding="UTF-8"?>'
        f'<soapenv:Envelope xmlns:soapenv="{SOAP_NS}"><soapenv:Body>'
        f'<ns:{operation}Response xmlns:ns="{AXL_NS}"><return>{inner}</return>'
        f'</ns:{operation}Response></soapenv:Body></soapenv:Envelope>'
    ).encode()


def soap_fault(message: str, axl_code: str = "5007", request: str = "") -> bytes:
    return (
        f'<?xml version="1.0" encoding="UTF-8"?>'
        f'<soapenv:Envelope xmlns:soapenv="{SOAP_NS}"><soapenv:Body><soapenv:Fault>'
        f'<faultcode>soapenv:Server</faultcode><faultstring>{escape(message)}</faultstring>'
        f'<detail><axlError><axlcode>{axl_code}</axlcode><axlmessage>{escape(message)}</axlmessage>'
        f'<request>{request}</request></axlError></detail>'
        f'</soapenv:Fault></soapenv:Body></soapenv:Envelope>'
    ).encode()


def operation_of(request: httpx.Request) -> ET.Element:
    """The operation element inside a captured request envelope"""
    document = ET.fromstring(request.read())
    body = document.find(f"{{{SOAP_NS}}}Body")
    return body[0]


def _tag(name: str, value, nested: bool = False) -> str:
    if value is None:
        return ""
    if nested:
        return f"<{name}><name>{escape(str(value))}</name></{name}>"
    return f"<{name}>{escape(str(value))}</{name}>"


def _bool(value) -> str:
    return "true" if value else "false"


def _line_associations(line: Optional[Tuple[str, str]]) -> str:
    if line is None:
        return ""
    pattern, partition = line
    return (
        f"<lineAssociations><lineAssociation>{_tag('pattern', pattern)}"
        f"{_tag('routePartitionName', partition)}</lineAssociation></lineAssociations>"
    )


# =============================================================================
# Mock transports
# =============================================================================


class MockTransport(httpx.BaseTransport):
    """Mock HTTP transport that returns canned responses."""

    def __init__(self):
        self.responses: List[httpx.Response] = []
        self.requests: List[httpx.Request] = []

    def add_response(self, status_code: int = 200, content: bytes = b""):
        self.responses.append(httpx.Response(
            status_code=status_code,
            content=content,
            headers={"content-type": "text/xml; charset=utf-8"},
        ))

    def handle_request(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        if self.responses:
            return self.responses.pop(0)
        return httpx.Response(500, content=b"No mock response queued")


class ConnectErrorTransport(httpx.BaseTransport):
    """Transport that always fails to connect."""

    def __init__(self):
        self.calls = 0

    def handle_request(self, request: httpx.Request) -> httpx.Response:
        self.calls += 1
        raise httpx.ConnectError("Connection refused")


class FakeAXLServer(httpx.BaseTransport):
    """In-memory AXL server answering the operations the clients use."""

    def __init__(self):
        self.users: Dict[str, dict] = {}
        self.profiles: Dict[str, dict] = {}
        self.destinations: Dict[str, dict] = {}
        self.lines: Dict[Tuple[str, str], dict] = {}
        self.phones: Dict[str, dict] = {}
        self.faults: Dict[str, Tuple[str, str]] = {}
        self.operations: List[str] = []
        self.requests: List[ET.Element] = []

    # --- seeding -------------------------------------------------------------

    def add_user(self, user_id: str, pattern: str = "", partition: str = "",
                 profiles: Optional[List[str]] = None, mobility: bool = False):
        self.users[user_id] = {
            "enableMobility": _bool(mobility),
            "maxDeskPickupWaitTime": "",
            "remoteDestinationLimit": "",
            "pattern": pattern,
            "partition": partition,
            "profiles": list(profiles or []),
        }

    def add_line(self, pattern: str, partition: str = "", css: Optional[str] = None,
                 devices: Optional[List[str]] = None, description: str = "",
                 nested_css: bool = False):
        self.lines[(pattern, partition)] = {
            "description": description,
            "css": css,
            "devices": list(devices or []),
            "nested_css": nested_css,
        }

    def add_phone(self, name: str, description: str = "", owner: Optional[str] = None,
                  css: Optional[str] = None, lines: Optional[List[Tuple[str, str]]] = None,
                  nested_css: bool = False):
        self.phones[name] = {
            "description": description,
            "owner": owner,
            "css": css,
            "lines": list(lines or []),
            "nested_css": nested_css,
        }

    def add_destination(self, name: str, destination: str, profile_name: str, owner: str = "",
                        line: Optional[Tuple[str, str]] = None):
        self.destinations[name] = {
            "destination": destination,
            "profile": profile_name,
            "owner": owner,
            "enableUnifiedMobility": "true",
            "isMobilePhone": "true",
            "enableMobileConnect": "true",
            "answerTooSoonTimer": "1500",
            "answerTooLateTimer": "19000",
            "delayBeforeRingingCell": "4000",
            "line": line,
        }

    def fail(self, operation: str, message: str, axl_code: str = "5000"):
        """Make every call to operation return a SOAP fault."""
        self.faults[operation] = (message, axl_code)

    def count(self, operation: str) -> int:
        return self.operations.count(operation)

    # --- dispatch ------------------------------------------------------------

    def handle_request(self, request: httpx.Request) -> httpx.Response:
        operation = operation_of(request)
        name = operation.tag.rsplit("}", 1)[-1]
        self.operations.append(name)
        self.requests.append(operation)

        if name in self.faults:
            message, code = self.faults[name]
            return self._fault(message, code, name)

        handler = getattr(self, f"_{name}", None)
        if handler is None:
            return self._fault(f"Unsupported operation {name}", "5000", name)
        return handler(operation)

    def _ok(self, operation: str, inner: str) -> httpx.Response:
        return httpx.Response(200, content=soap_response(operation, inner),
                              headers={"content-type": "text/xml"})

    def _fault(self, message: str, code: str, operation: str) -> httpx.Response:
        return httpx.Response(500, content=soap_fault(message, code, operation),
                              headers={"content-type": "text/xml"})

    def _not_found(self, kind: str, operation: str) -> httpx.Response:
        return self._fault(f"Item not valid: The specified {kind} was not found", NOT_FOUND_CODE, operation)

    def _duplicate(self, operation: str) -> httpx.Response:
        return self._fault(
            "Could not insert new row - duplicate value in a UNIQUE INDEX column (Unique Index:).",
            DUPLICATE_CODE, operation,
        )

    # --- users ---------------------------------------------------------------

    def _getUser(self, op: ET.Element) -> httpx.Response:
        user_id = op.findtext("userid")
        user = self.users.get(user_id)
        if user is None:
            return self._not_found("User", "getUser")
        associated = ""
        if user["profiles"]:
            associated = "<associatedRemoteDestinationProfiles>" + "".join(
                _tag("remoteDestinationProfileName", name) for name in user["profiles"]
            ) + "</associatedRemoteDestinationProfiles>"
        inner = (
            f'<user uuid="{{U-{user_id}}}">'
            f"{_tag('userid', user_id)}"
            f"{_tag('enableMobility', user['enableMobility'])}"
            f"{_tag('maxDeskPickupWaitTime', user['maxDeskPickupWaitTime'])}"
            f"{_tag('remoteDestinationLimit', user['remoteDestinationLimit'])}"
            f"<primaryExtension>{_tag('pattern', user['pattern'])}"
            f"{_tag('routePartitionName', user['partition'])}</primaryExtension>"
            f"{associated}</user>"
        )
        return self._ok("getUser", inner)

    def _updateUser(self, op: ET.Element) -> httpx.Response:
        user_id = op.findtext("userid")
        user = self.users.get(user_id)
        if user is None:
            return self._not_found("User", "updateUser")
        for field in op:
            if field.tag != "userid":
                user[field.tag] = field.text or ""
        return self._ok("updateUser", f"{{U-{user_id}}}")

    # --- remote destination profiles ----------------------------------------

    def _addRemoteDestinationProfile(self, op: ET.Element) -> httpx.Response:
        rdp = op.find("remoteDestinationProfile")
        name = rdp.findtext("name")
        if name in self.profiles:
            return self._duplicate("addRemoteDestinationProfile")
        self.profiles[name] = {
            "description": rdp.findtext("description") or "",
            "devicePoolName": rdp.findtext("devicePoolName"),
            "callingSearchSpaceName": rdp.findtext("callingSearchSpaceName"),
            "rerouteCallingSearchSpaceName": rdp.findtext("rerouteCallingSearchSpaceName"),
            "userId": rdp.findtext("userId"),
            "lines": [
                (line.findtext("index"), line.findtext("dirn/pattern"),
                 line.findtext("dirn/routePartitionName"))
                for line in rdp.findall("lines/line")
            ],
        }
        return self._ok("addRemoteDestinationProfile", f"{{RDP-{name}}}")

    def _getRemoteDestinationProfile(self, op: ET.Element) -> httpx.Response:
        name = op.findtext("name")
        rdp = self.profiles.get(name)
        if rdp is None:
            return self._not_found("Remote Destination Profile", "getRemoteDestinationProfile")
        lines = ""
        if rdp["lines"]:
            lines = "<lines>" + "".join(
                f"<line>{_tag('index', index)}<dirn>{_tag('pattern', pattern)}"
                f"{_tag('routePartitionName', partition)}</dirn></line>"
                for index, pattern, partition in rdp["lines"]
            ) + "</lines>"
        inner = (
            f"<remoteDestinationProfile>{_tag('name', name)}"
            f"{_tag('description', rdp['description'])}"
            f"{_tag('devicePoolName', rdp['devicePoolName'])}"
            f"{_tag('callingSearchSpaceName', rdp['callingSearchSpaceName'])}"
            f"{_tag('rerouteCallingSearchSpaceName', rdp['rerouteCallingSearchSpaceName'])}"
            f"{_tag('userId', rdp['userId'])}{lines}</remoteDestinationProfile>"
        )
        return self._ok("getRemoteDestinationProfile", inner)

    def _listRemoteDestinationProfile(self, op: ET.Element) -> httpx.Response:
        inner = "".join(
            f"<remoteDestinationProfile>{_tag('name', name)}</remoteDestinationProfile>"
            for name in self.profiles
        )
        return self._ok("listRemoteDestinationProfile", inner)

    # --- remote destinations -------------------------------------------------

    def _addRemoteDestination(self, op: ET.Element) -> httpx.Response:
        rd = op.find("remoteDestination")
        name = rd.findtext("name")
        if name in self.destinations:
            return self._duplicate("addRemoteDestination")
        self.add_destination(
            name, rd.findtext("destination"), rd.findtext("remoteDestinationProfileName"),
            rd.findtext("ownerUserId") or "",
        )
        for field in ("enableUnifiedMobility", "isMobilePhone", "enableMobileConnect",
                      "answerTooSoonTimer", "answerTooLateTimer", "delayBeforeRingingCell"):
            if rd.find(field) is not None:
                self.destinations[name][field] = rd.findtext(field)
        association = rd.find("lineAssociations/lineAssociation")
        if association is not None:
            self.destinations[name]["line"] = (
                association.findtext("pattern"), association.findtext("routePartitionName") or "",
            )
        return self._ok("addRemoteDestination", f"{{RD-{name}}}")

    def _listRemoteDestination(self, op: ET.Element) -> httpx.Response:
        inner = "".join(
            f'<remoteDestination uuid="{{RD-{name}}}">{_tag("name", name)}'
            f"{_tag('destination', rd['destination'])}"
            f"{_tag('remoteDestinationProfileName', rd['profile'])}"
            f"{_tag('ownerUserId', rd['owner'])}"
            f"{_tag('enableUnifiedMobility', rd['enableUnifiedMobility'])}"
            f"{_tag('isMobilePhone', rd['isMobilePhone'])}"
            f"{_tag('enableMobileConnect', rd['enableMobileConnect'])}"
            f"{_tag('answerTooSoonTimer', rd['answerTooSoonTimer'])}"
            f"{_tag('answerTooLateTimer', rd['answerTooLateTimer'])}"
            f"{_tag('delayBeforeRingingCell', rd['delayBeforeRingingCell'])}"
            f"{_line_associations(rd['line'])}"
            f"</remoteDestination>"
            for name, rd in self.destinations.items()
        )
        return self._ok("listRemoteDestination", inner)

    # --- lines ---------------------------------------------------------------

    def _getLine(self, op: ET.Element) -> httpx.Response:
        key = (op.findtext("pattern"), op.findtext("routePartitionName") or "")
        line = self.lines.get(key)
        if line is None:
            return self._not_found("Line", "getLine")
        devices = ""
        if line["devices"]:
            devices = "<associatedDevices>" + "".join(
                _tag("device", device) for device in line["devices"]
            ) + "</associatedDevices>"
        inner = (
            f"<line>{_tag('pattern', key[0])}{_tag('routePartitionName', key[1])}"
            f"{_tag('description', line['description'])}"
            f"{_tag('shareLineAppearanceCssName', line['css'], line['nested_css'])}"
            f"{devices}</line>"
        )
        return self._ok("getLine", inner)

    def _applyLine(self, op: ET.Element) -> httpx.Response:
        return self._ok("applyLine", "")

    def _resetLine(self, op: ET.Element) -> httpx.Response:
        return self._ok("resetLine", "")

    # --- phones --------------------------------------------------------------

    def _getPhone(self, op: ET.Element) -> httpx.Response:
        name = op.findtext("name")
        phone = self.phones.get(name)
        if phone is None:
            return self._not_found("Phone", "getPhone")
        lines = ""
        if phone["lines"]:
            lines = "<lines>" + "".join(
                f"<line>{_tag('index', index)}<dirn>{_tag('pattern', pattern)}"
                f"{_tag('routePartitionName', partition)}</dirn></line>"
                for index, (pattern, partition) in enumerate(phone["lines"], start=1)
            ) + "</lines>"
        inner = (
            f"<phone>{_tag('name', name)}{_tag('description', phone['description'])}"
            f"{_tag('callingSearchSpaceName', phone['css'], phone['nested_css'])}"
            f"{_tag('ownerUserName', phone['owner'])}{lines}</phone>"
        )
        return self._ok("getPhone", inner)

    def _listPhone(self, op: ET.Element) -> httpx.Response:
        inner = "".join(
            f"<phone>{_tag('name', name)}{_tag('description', phone['description'])}"
            f"{_tag('ownerUserName', phone['owner'])}</phone>"
            for name, phone in self.phones.items()
        )
        return self._ok("listPhone", inner)


# =============================================================================
# Fixtures
# =============================================================================


@pytest.fixture(autouse=True)
def reset_axl_session():
    """Every test starts without a process-wide AXL session."""
    axl_context.reset()
    yield
    axl_context.reset()


@pytest.fixture
def axl_ctx() -> ConnectionContext:
    return ConnectionContext.create("cucm.example.com", "axladmin", "s3cret", AXL_VERSION)


@pytest.fixture
def mock_http() -> MockTransport:
    return MockTransport()


@pytest.fixture
def mock_transport(axl_ctx, mock_http) -> AXLTransport:
    """AXLTransport bound to an explicit context, answering from MockTransport."""
    return AXLTransport(context=axl_ctx, client=httpx.Client(transport=mock_http))


@pytest.fixture
def fake_server() -> FakeAXLServer:
    return FakeAXLServer()


@pytest.fixture
def fake_transport(axl_ctx, fake_server) -> AXLTransport:
    return AXLTransport(context=axl_ctx, client=httpx.Client(transport=fake_server))


@pytest.fixture
def db_session():
    """In-memory SQLite session with the application tables."""
    from shared.database import Base
    import apps.snr.models  # noqa: F401

    engine = create_engine(
        "sqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    Base.metadata.create_all(bind=engine)
    session = sessionmaker(autocommit=False, autoflush=False, bind=engine)()
    try:
        yield session
    finally:
        session.close()
        engine.dispose()
