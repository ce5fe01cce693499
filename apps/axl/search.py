"""
Phone discovery by line association and text filters
"""

import logging
from typing import Dict, List, Optional, Tuple

from config import PHONE_SEARCH_MAX_RESULTS
from .lines import LineClient
from .phones import PhoneClient
from .schemas import Line, OperationError, PhoneSearchResult, PhoneSummary
from .transport import AXLTransport, get_transport

logger = logging.getLogger(__name__)


def _contains(value: Optional[str], needle: str) -> bool:
    return needle.casefold() in (value or "").casefold()


def matches_filters(
    phone: PhoneSummary,
    description: Optional[str] = None,
    owner: Optional[str] = None,
    name: Optional[str] = None,
) -> bool:
    """Case-insensitive substring match on every filter that is set"""
    if description and not _contains(phone.description, description):
        return False
    if owner and not _contains(phone.owner_user_id, owner):
        return False
    if name and not _contains(phone.name, name):
        return False
    return True


class PhoneSearch:
    def __init__(self, transport: Optional[AXLTransport] = None):
        transport = transport or get_transport()
        self.phones = PhoneClient(transport)
        self.lines = LineClient(transport)

    def search(
        self,
        line_pattern: Optional[str] = None,
        line_partition: Optional[str] = None,
        description: Optional[str] = None,
        owner: Optional[str] = None,
        name: Optional[str] = None,
        max_results: Optional[int] = None,
    ) -> PhoneSearchResult:
        """
        Union of phones on a line and phones matching text filters.

        Args:
            line_pattern / line_partition: directory number whose devices are included
            description, owner, name: substrings applied to an unrestricted phone list
            max_results: cap on phones expanded to full detail

        Returns:
            PhoneSearchResult; truncated is set when the cap dropped candidates

        Raises:
            ValueError: max_results is negative
        """
        limit = PHONE_SEARCH_MAX_RESULTS if max_results is None else max_results
        if limit < 0:
            raise ValueError(f"max_results must not be negative, got {limit}")
        errors: List[OperationError] = []
        candidates: Dict[str, str] = {}  # casefolded name -> name, insertion ordered

        if line_pattern:
            result = self.lines.get(line_pattern, line_partition or "")
            if result.success and result.data is not None:
                for device in result.data.associated_devices:
                    candidates.setdefault(device.casefold(), device)
            elif not result.success and not result.error.is_not_found:
                errors.append(result.error)

        if description or owner or name:
            result = self.phones.list("%")
            if result.success:
                for phone in result.data:
                    if matches_filters(phone, description, owner, name):
                        candidates.setdefault(phone.name.casefold(), phone.name)
            else:
                errors.append(result.error)

        names = list(candidates.values())
        truncated = len(names) > limit
        if truncated:
            logger.warning(f"Phone search matched {len(names)} phones, expanding the first {limit}")

        line_cache: Dict[Tuple[str, str], Optional[Line]] = {}
        phones = []
        for phone_name in names[:limit]:
            result = self.phones.get(phone_name)
            if not result.success:
                if result.error.is_not_found:
                    # line devices include profiles and other non-phone devices
                    logger.info(f"Device {phone_name} is not a phone, skipped")
                else:
                    errors.append(result.error)
                continue
            if result.data is None:
                continue
            phone = result.data
            for line in phone.lines:
                key = (line.pattern, line.partition)
                if key not in line_cache:
                    detail = self.lines.get(line.pattern, line.partition)
                    if not detail.success:
                        errors.append(detail.error)
                    line_cache[key] = detail.data
                if line_cache[key] is not None:
                    line.css = line_cache[key].css
            phones.append(phone)

        return PhoneSearchResult(
            phones=phones,
            candidate_count=len(names),
            truncated=truncated,
            errors=errors,
        )
