"""
Business rule (AHB) checks on an assembled message.

The rules cover the usual stumbling blocks of market communication:
missing check identifiers, missing party roles for a process, malformed
location IDs and inconsistent periods. Checks only report; they never
change the message and never abort.
"""
import logging
from typing import Dict, List, Optional

from date_utils import as_comparable
from edifact_models import EdifactSegment, Party, ResolvedDate, Severity, StammdatenData, StructuredMessage
from validation_context import ValidationCollector

logger = logging.getLogger(__name__)

CATEGORY = 'AHB'

PRUEFIDENTIFIKATOR_REQUIRED = ('UTILMD', 'ORDERS', 'ORDRSP')

# Tags expected per message type; absence is a warning.
EXPECTED_SEGMENTS = {
    'UTILMD': ['NAD', 'IDE', 'LOC'],
    'MSCONS': ['NAD', 'QTY', 'SEQ'],
    'ORDERS': ['NAD', 'LIN'],
    'INVOIC': ['NAD', 'MOA'],
}


def validate_ahb_rules(message: StructuredMessage, segments: List[EdifactSegment], collector: ValidationCollector) -> bool:
    pruef_id = message.metadata.pruefidentifikator.id if message.metadata.pruefidentifikator else None
    message_type = message.metadata.message_type

    if message_type in PRUEFIDENTIFIKATOR_REQUIRED and not pruef_id:
        collector.add_error(CATEGORY, f"Prüfidentifikator (RFF+Z13) missing for {message_type} message", Severity.ERROR)

    if pruef_id:
        validate_roles_for_process(pruef_id, message.parties, collector)

    if message_type == 'UTILMD':
        validate_location_ids(message.body.stammdaten, collector)

    validate_temporal_consistency(message.dates, collector)
    validate_expected_segments(message_type, segments, collector)
    return True


def validate_roles_for_process(pruef_id: str, parties: Dict[str, Party], collector: ValidationCollector):
    if pruef_id == '44001':
        if 'lieferant' not in parties and 'sender' not in parties:
            collector.add_error(CATEGORY, "Anmeldung NN requires the Lieferant role (NAD+DP or NAD+MS)", Severity.ERROR)
        if 'netzbetreiber' not in parties and 'receiver' not in parties:
            collector.add_error(CATEGORY, "Anmeldung NN requires the Netzbetreiber role (NAD+DDQ or NAD+MR)", Severity.ERROR)

    if pruef_id in ('17009', '19015') and 'messstellenbetreiber' not in parties:
        collector.add_error(CATEGORY, "WiM process requires the Messstellenbetreiber role (NAD+DDP)", Severity.ERROR)


def validate_location_ids(stammdaten: Optional[StammdatenData], collector: ValidationCollector):
    if stammdaten is None:
        return
    for idx, malo in enumerate(stammdaten.marktlokationen, start=1):
        if not malo.valid:
            collector.add_error(CATEGORY, f"Marktlokation ID {idx} invalid: {malo.id} (expected 11 characters)", Severity.ERROR)
    for idx, melo in enumerate(stammdaten.messlokationen, start=1):
        if not melo.valid:
            collector.add_error(CATEGORY, f"Messlokation ID {idx} invalid: {melo.id} (expected 33 characters)", Severity.ERROR)


def validate_temporal_consistency(dates: Dict[str, ResolvedDate], collector: ValidationCollector):
    start_value, end_value = dates.get('start_date'), dates.get('end_date')
    if not start_value or not end_value:
        return
    start, end = as_comparable(start_value), as_comparable(end_value)
    if start is None or end is None:
        logger.debug(f"Skipping period check; unresolved dates start={start_value!r}, end={end_value!r}.")
        return
    if start > end:
        collector.add_error(CATEGORY, f"Start date ({start_value}) is after end date ({end_value})", Severity.ERROR)


def validate_expected_segments(message_type: Optional[str], segments: List[EdifactSegment], collector: ValidationCollector):
    present = {segment.tag for segment in segments}
    for tag in EXPECTED_SEGMENTS.get(message_type, []):
        if tag not in present:
            collector.add_warning(CATEGORY, f"Expected segment {tag} missing for {message_type} message")
