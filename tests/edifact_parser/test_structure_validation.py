import pytest

from edifact_models import Severity, StructuralValidationError
from edifact_parser import EdifactParser
from structure_validator import validate_message_structure
from validation_context import ValidationCollector

pytestmark = pytest.mark.unit

VALID_ENVELOPE = "UNH+1+UTILMD:D:11A:UN:2.6'BGM+E01+1+9'UNT+3+1'"


def run_validation(edifact: str) -> ValidationCollector:
    collector = ValidationCollector()
    validate_message_structure(EdifactParser().parse(edifact), collector)
    return collector


def test_valid_envelope_has_no_findings():
    collector = run_validation(VALID_ENVELOPE)
    assert not collector.errors
    assert not collector.warnings


def test_missing_unh_is_fatal():
    collector = ValidationCollector()
    segments = EdifactParser().parse("BGM+E01+1+9'UNT+2+1'")
    with pytest.raises(StructuralValidationError, match="UNH"):
        validate_message_structure(segments, collector)
    assert len(collector.errors) == 1
    assert collector.errors[0].severity == Severity.CRITICAL
    assert collector.errors[0].category == "STRUCTURE"


def test_missing_unt_is_fatal():
    collector = ValidationCollector()
    segments = EdifactParser().parse("UNH+1+UTILMD'BGM+E01+1+9'")
    with pytest.raises(StructuralValidationError, match="UNT"):
        validate_message_structure(segments, collector)
    assert collector.errors[0].severity == Severity.CRITICAL


def test_reference_mismatch_is_recorded_as_error():
    collector = run_validation(VALID_ENVELOPE.replace("UNT+3+1'", "UNT+3+2'"))
    assert len(collector.errors) == 1
    assert collector.errors[0].severity == Severity.ERROR
    assert "UNH=1, UNT=2" in collector.errors[0].message
    assert not collector.warnings


def test_reference_comparison_uses_text():
    collector = run_validation("UNH+0001+UTILMD'UNT+2+1'")
    assert len(collector.errors) == 1


def test_segment_count_mismatch_is_warning():
    collector = run_validation(VALID_ENVELOPE.replace("UNT+3+1'", "UNT+9+1'"))
    assert not collector.errors
    assert len(collector.warnings) == 1
    assert collector.warnings[0].severity == Severity.WARNING
    assert "reported=9, actual=3" in collector.warnings[0].message


def test_non_numeric_segment_count_is_warning():
    collector = run_validation(VALID_ENVELOPE.replace("UNT+3+1'", "UNT+X+1'"))
    assert len(collector.warnings) == 1


def test_multiple_findings_are_accumulated():
    collector = run_validation(VALID_ENVELOPE.replace("UNT+3+1'", "UNT+7+5'"))
    assert len(collector.errors) == 1
    assert len(collector.warnings) == 1
