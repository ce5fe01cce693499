import logging
from typing import Any, Callable, Optional
from xml.etree import ElementTree as ET

from .exceptions import ParseError, TransportError
from .normalizer import fault_of, local_name
from .schemas import OperationError, OperationResult
from .transport import AXLTransport, get_transport

logger = logging.getLogger(__name__)


class AXLResource:
    """Common request/outcome handling shared by the per-resource clients"""

    def __init__(self, transport: Optional[AXLTransport] = None):
        self.transport = transport or get_transport()

    def _execute(
        self,
        body: ET.Element,
        parse: Callable[[ET.Element], Any],
    ) -> OperationResult:
        """
        Send one operation and turn every non-fatal failure into a result.

        The fault check runs before any parsing; ConfigurationError is not
        caught and aborts the caller.
        """
        operation = local_name(body.tag)
        try:
            document = self.transport.send(body)
        except TransportError as e:
            logger.error(f"{operation} transport failure: {e}")
            return OperationResult.failed(operation, OperationError(
                kind="transport", message=str(e), status_code=e.status_code,
            ))
        except ParseError as e:
            logger.error(f"{operation} parse failure: {e}")
            return OperationResult.failed(operation, OperationError(kind="parse", message=str(e)))

        try:
            fault = fault_of(document)
            if fault is not None:
                logger.warning(
                    f"{operation} fault {fault.axl_code or fault.code}: {fault.detail or fault.message}"
                )
                return OperationResult.failed(operation, OperationError.from_fault(fault))
            data = parse(document)
        except ParseError as e:
            logger.error(f"{operation} unexpected response shape: {e}")
            return OperationResult.failed(operation, OperationError(kind="parse", message=str(e)))

        return OperationResult.ok(operation, data)
