import logging
import re
from datetime import date, datetime, timedelta, timezone
from typing import Optional

from edifact_models import ResolvedDate

logger = logging.getLogger(__name__)

_OFFSET = re.compile(r'([+-])([0-9]{2})')


def parse_date(value: Optional[str], date_format: Optional[str]) -> ResolvedDate:
    """
    Resolves a DTM value by its format code.

    102: CCYYMMDD -> date
    203: CCYYMMDDHHMM -> datetime (UTC)
    303: CCYYMMDDHHMMSS with optional +hh/-hh offset -> datetime
    Unknown formats and values that do not fit return the text unchanged.
    """
    if not value:
        return None
    try:
        if date_format == '102' and len(value) == 8:
            return datetime.strptime(value, '%Y%m%d').date()
        if date_format == '203' and len(value) == 12:
            return datetime.strptime(value, '%Y%m%d%H%M').replace(tzinfo=timezone.utc)
        if date_format == '303' and len(value) >= 14:
            moment = datetime.strptime(value[:14], '%Y%m%d%H%M%S')
            suffix = value[14:]
            if not suffix:
                return moment.replace(tzinfo=timezone.utc)
            match = _OFFSET.fullmatch(suffix)
            if match:
                hours = int(match.group(2)) * (-1 if match.group(1) == '-' else 1)
                return moment.replace(tzinfo=timezone(timedelta(hours=hours)))
    except ValueError:
        logger.debug(f"Could not resolve date '{value}' with format '{date_format}'; keeping text.")
    return value


def keep_text(value: Optional[str], date_format: Optional[str]) -> ResolvedDate:
    return value


def as_comparable(value: ResolvedDate) -> Optional[datetime]:
    """Brings a resolved date onto a common, timezone-aware datetime scale."""
    if isinstance(value, datetime):
        return value if value.tzinfo else value.replace(tzinfo=timezone.utc)
    if isinstance(value, date):
        return datetime(value.year, value.month, value.day, tzinfo=timezone.utc)
    if isinstance(value, str):
        try:
            return as_comparable(datetime.fromisoformat(value))
        except ValueError:
            return None
    return None
