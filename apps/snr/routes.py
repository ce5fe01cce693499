from fastapi import APIRouter, Depends, HTTPException, Query, status
from sqlalchemy.orm import Session
from typing import Any, Dict, Iterator, List, Optional
import logging

from apps.axl.exceptions import ConfigurationError
from apps.axl.schemas import PhoneSearchResult
from apps.axl.search import PhoneSearch
from apps.axl.transport import AXLTransport
from shared.auth.basic_auth import verify_basic_auth
from shared.database import get_db
from .run_log import ProvisioningRunLogger
from .schemas import ProvisionRequest, ProvisionResult, ProvisioningRunResponse, SNRSnapshot
from .services import SingleNumberReachService

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/v1/snr", tags=["single-number-reach"])


def get_transport() -> Iterator[AXLTransport]:
    """One AXL transport per request, closed afterwards"""
    transport = AXLTransport()
    try:
        yield transport
    finally:
        transport.close()


def _not_configured(e: ConfigurationError) -> HTTPException:
    logger.error(f"AXL not configured: {e}")
    return HTTPException(status_code=status.HTTP_503_SERVICE_UNAVAILABLE, detail=str(e))


@router.post("/provision", response_model=ProvisionResult)
def provision(
    request: ProvisionRequest,
    transport: AXLTransport = Depends(get_transport),
    db: Session = Depends(get_db),
    auth: Dict[str, Any] = Depends(verify_basic_auth)
):
    """
    Provision Single Number Reach for a user:
    1. Enable mobility on the user
    2. Create the remote destination profile on the desk line
    3. Create the remote destination for the mobile number
    4. Read back and return live state
    """
    try:
        result = SingleNumberReachService(transport).provision(request)
    except ConfigurationError as e:
        raise _not_configured(e)

    # AXL writes are done; the outcome is returned even when it cannot be recorded
    try:
        ProvisioningRunLogger(db).log_run(result)
    except Exception as e:
        logger.error(f"Failed to record provisioning run for {result.user_id}: {str(e)}")

    return result


@router.get("/users/{user_id}", response_model=SNRSnapshot)
def verify_user(
    user_id: str,
    transport: AXLTransport = Depends(get_transport),
    auth: Dict[str, Any] = Depends(verify_basic_auth)
):
    """Current user, profile and destination state for a user"""
    try:
        return SingleNumberReachService(transport).verify(user_id)
    except ConfigurationError as e:
        raise _not_configured(e)


@router.get("/phones/search", response_model=PhoneSearchResult)
def search_phones(
    line_pattern: Optional[str] = Query(None, description="Directory number whose devices are included"),
    line_partition: Optional[str] = Query(None, description="Partition of line_pattern"),
    description: Optional[str] = Query(None, description="Substring of the phone description"),
    owner: Optional[str] = Query(None, description="Substring of the owner user id"),
    name: Optional[str] = Query(None, description="Substring of the device name"),
    max_results: Optional[int] = Query(None, ge=1, le=500, description="Phones expanded to full detail"),
    transport: AXLTransport = Depends(get_transport),
    auth: Dict[str, Any] = Depends(verify_basic_auth)
):
    """Phones on a line and/or matching text filters"""
    try:
        return PhoneSearch(transport).search(
            line_pattern=line_pattern,
            line_partition=line_partition,
            description=description,
            owner=owner,
            name=name,
            max_results=max_results,
        )
    except ConfigurationError as e:
        raise _not_configured(e)


@router.get("/runs", response_model=List[ProvisioningRunResponse])
def list_runs(
    user_id: Optional[str] = Query(None, description="Filter by user id"),
    limit: int = Query(50, ge=1, le=500, description="Number of runs to return"),
    db: Session = Depends(get_db),
    auth: Dict[str, Any] = Depends(verify_basic_auth)
):
    """Recorded provisioning runs, newest first"""
    runs = ProvisioningRunLogger(db).list_runs(user_id=user_id, limit=limit)
    return [ProvisioningRunResponse.model_validate(run) for run in runs]
