import logging
from typing import List

from edifact_models import EdifactSegment, Severity, StructuralValidationError
from validation_context import ValidationCollector

logger = logging.getLogger(__name__)

CATEGORY = 'STRUCTURE'


def validate_message_structure(segments: List[EdifactSegment], collector: ValidationCollector) -> bool:
    """
    Performs envelope checks on the tokenized message.

    A missing UNH or UNT is fatal and raises StructuralValidationError after
    recording a CRITICAL finding. Reference and segment count mismatches are
    recorded and processing continues.
    """
    unh = next((segment for segment in segments if segment.tag == 'UNH'), None)
    unt = next((segment for segment in segments if segment.tag == 'UNT'), None)

    if unh is None:
        message = "Missing UNH segment (message header)"
        collector.add_error(CATEGORY, message, Severity.CRITICAL)
        raise StructuralValidationError(message)

    if unt is None:
        message = "Missing UNT segment (message trailer)"
        collector.add_error(CATEGORY, message, Severity.CRITICAL)
        raise StructuralValidationError(message)

    unh_reference = unh.get_text(1)
    unt_reference = unt.get_text(2)
    if unh_reference != unt_reference:
        collector.add_error(CATEGORY, f"Reference number mismatch: UNH={unh_reference}, UNT={unt_reference}", Severity.ERROR)

    reported_count = unt.get_element(1)
    actual_count = len(segments)
    if reported_count != actual_count:
        collector.add_warning(CATEGORY, f"Segment count mismatch: reported={reported_count}, actual={actual_count}")

    logger.debug(f"Envelope checked: reference={unh_reference}, segments={actual_count}.")
    return True
