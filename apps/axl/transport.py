"""
AXL SOAP transport

Wraps an operation fragment in a SOAP envelope, posts it to the AXL endpoint
and returns the parsed response envelope.
"""

import logging
import time
from typing import Any, Optional
from xml.etree import ElementTree as ET

import httpx

from config import AXL_MAX_RETRIES, AXL_TIMEOUT, AXL_VERIFY_TLS
from .context import ConnectionContext, get_context
from .exceptions import ParseError, TransportError
from .normalizer import SOAP_ENV_NS, fault_of, local_name

logger = logging.getLogger(__name__)

ET.register_namespace("soapenv", SOAP_ENV_NS)

RETRY_BACKOFF_SECONDS = 0.5


def build_element(tag: str, value: Any = None) -> ET.Element:
    """
    Build a request fragment from plain Python values.

    dict -> child elements, list -> repeated siblings, bool -> true/false,
    None -> omitted, "" -> empty element (used for returnedTags).
    """
    element = ET.Element(tag)
    _fill(element, value)
    return element


def _fill(element: ET.Element, value: Any) -> None:
    if value is None:
        return
    if isinstance(value, dict):
        for key, item in value.items():
            if item is None:
                continue
            for entry in (item if isinstance(item, list) else [item]):
                element.append(build_element(key, entry))
    elif isinstance(value, bool):
        element.text = "true" if value else "false"
    else:
        element.text = str(value)


class AXLTransport:
    def __init__(
        self,
        context: Optional[ConnectionContext] = None,
        client: Optional[httpx.Client] = None,
        timeout: Optional[float] = None,
        verify: Optional[bool] = None,
        max_retries: Optional[int] = None,
    ):
        self.context = context
        self.timeout = AXL_TIMEOUT if timeout is None else timeout
        self.verify = AXL_VERIFY_TLS if verify is None else verify
        self.max_retries = AXL_MAX_RETRIES if max_retries is None else max_retries
        self._client = client

    @property
    def client(self) -> httpx.Client:
        if self._client is None:
            self._client = httpx.Client(verify=self.verify, timeout=self.timeout)
        return self._client

    def close(self) -> None:
        if self._client is not None:
            self._client.close()
            self._client = None

    def __enter__(self) -> "AXLTransport":
        return self

    def __exit__(self, *exc_info) -> None:
        self.close()

    def envelope(self, operation: ET.Element, context: ConnectionContext) -> bytes:
        """Serialize the operation inside a SOAP envelope bound to the context version"""
        envelope = ET.Element(f"{{{SOAP_ENV_NS}}}Envelope")
        ET.SubElement(envelope, f"{{{SOAP_ENV_NS}}}Header")
        body = ET.SubElement(envelope, f"{{{SOAP_ENV_NS}}}Body")

        qualified = ET.SubElement(
            body, f"{{{context.namespace}}}{local_name(operation.tag)}", operation.attrib
        )
        qualified.text = operation.text
        qualified.extend(list(operation))

        return ET.tostring(envelope, encoding="utf-8", xml_declaration=True)

    def send(self, operation: ET.Element) -> ET.Element:
        """
        Post one AXL operation and return the parsed response envelope.

        Raises:
            ConfigurationError: no connection context is available
            TransportError: network, HTTP or authentication failure
            ParseError: the response body is not well-formed XML
        """
        context = self.context or get_context()
        name = local_name(operation.tag)
        payload = self.envelope(operation, context)

        response = self._post(context, name, payload)

        try:
            document = ET.fromstring(response.content)
        except ET.ParseError as e:
            if response.is_success:
                logger.error(f"AXL {name}: malformed response body: {e}")
                raise ParseError(f"Malformed AXL response for {name}: {e}")
            raise TransportError(
                f"AXL {name} failed with HTTP {response.status_code}",
                status_code=response.status_code,
            )

        if not response.is_success and not self._is_fault(document):
            raise TransportError(
                f"AXL {name} failed with HTTP {response.status_code}",
                status_code=response.status_code,
            )

        logger.debug(f"AXL {name} -> HTTP {response.status_code}")
        return document

    def _post(self, context: ConnectionContext, name: str, payload: bytes) -> httpx.Response:
        attempt = 0
        while True:
            try:
                response = self.client.post(
                    context.endpoint,
                    content=payload,
                    headers=context.headers(name),
                    auth=context.auth,
                )
            except (httpx.TimeoutException, httpx.ConnectError) as e:
                if attempt < self.max_retries:
                    backoff = RETRY_BACKOFF_SECONDS * (2 ** attempt)
                    attempt += 1
                    logger.warning(
                        f"AXL {name} to {context.endpoint} failed ({e}); "
                        f"retry {attempt}/{self.max_retries} in {backoff}s"
                    )
                    time.sleep(backoff)
                    continue
                logger.error(f"AXL {name} to {context.endpoint} failed: {e}")
                raise TransportError(f"AXL {name} request failed: {e}")
            except httpx.HTTPError as e:
                logger.error(f"AXL {name} to {context.endpoint} failed: {e}")
                raise TransportError(f"AXL {name} request failed: {e}")

            if response.status_code == 401:
                logger.error(f"AXL {name}: authentication rejected for {context.username}")
                raise TransportError("AXL authentication failed", status_code=401)
            return response

    @staticmethod
    def _is_fault(document: ET.Element) -> bool:
        # AXL reports faults with HTTP 500; the fault itself is the outcome
        try:
            return fault_of(document) is not None
        except ParseError:
            return False


def get_transport() -> AXLTransport:
    """Factory function for a transport bound to the process-wide session"""
    return AXLTransport()
