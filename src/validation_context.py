import logging
from datetime import datetime, timezone
from typing import Callable, List, Optional

from edifact_models import ResolvedDate, Severity, ValidationFinding, ValidationSummary

logger = logging.getLogger(__name__)

DateResolver = Callable[[Optional[str], Optional[str]], ResolvedDate]


class ValidationCollector:
    """
    Accumulates findings for exactly one transform call.

    All findings share the timestamp of the call, so transforming the same
    input twice only differs in that timestamp.
    """

    def __init__(self, timestamp: Optional[datetime] = None):
        self.timestamp = timestamp or datetime.now(timezone.utc)
        self.errors: List[ValidationFinding] = []
        self.warnings: List[ValidationFinding] = []

    def add_error(self, category: str, message: str, severity: Severity = Severity.ERROR):
        logger.warning(f"[{severity.value}] {category}: {message}")
        self.errors.append(ValidationFinding(category=category, message=message, severity=severity, timestamp=self.timestamp))

    def add_warning(self, category: str, message: str):
        logger.info(f"[WARNING] {category}: {message}")
        self.warnings.append(ValidationFinding(category=category, message=message, severity=Severity.WARNING, timestamp=self.timestamp))

    @property
    def has_findings(self) -> bool:
        return bool(self.errors or self.warnings)

    def summary(self) -> ValidationSummary:
        return ValidationSummary(is_valid=not self.errors, errors=list(self.errors), warnings=list(self.warnings))


class ExtractionContext:
    """What extractors may use: a warning hook and the date resolver."""

    def __init__(self, collector: ValidationCollector, parse_date: DateResolver):
        self.add_warning = collector.add_warning
        self.parse_date = parse_date
