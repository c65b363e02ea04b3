import logging
import re
from datetime import datetime
from typing import Dict, List, Optional

from config_models import CodeTables
from edifact_models import (
    EdifactSegment, MessageHeader, MessageMetadata, Party, Pruefidentifikator, ResolvedDate,
)
from validation_context import DateResolver

logger = logging.getLogger(__name__)

_MP_ID = re.compile(r'[0-9]{13}')


def _segments_with_tag(segments: List[EdifactSegment], tag: str) -> List[EdifactSegment]:
    return [segment for segment in segments if segment.tag == tag]


def extract_pruefidentifikator(segments: List[EdifactSegment], code_tables: CodeTables) -> Optional[Pruefidentifikator]:
    """Returns the first RFF+Z13 check identifier, or None."""
    for rff in _segments_with_tag(segments, 'RFF'):
        if rff.get_text(1, 1) == 'Z13':
            pruef_id = rff.get_text(1, 2)
            if not pruef_id:
                logger.debug("RFF+Z13 without a value; ignoring.")
                continue
            return Pruefidentifikator(
                id=pruef_id,
                description=code_tables.pruefidentifikatoren.get(pruef_id, 'Unbekannt'),
                segment=rff,
            )
    return None


def extract_metadata(segments: List[EdifactSegment], code_tables: CodeTables, parsed_at: datetime) -> MessageMetadata:
    unh = next((segment for segment in segments if segment.tag == 'UNH'), None)
    message_type = unh.get_text(2, 1) if unh else None
    info = code_tables.get_message_type(message_type)

    metadata = MessageMetadata(
        message_type=message_type,
        version=(unh.get_text(2, 5) if unh else None) or 'unknown',
        release=(unh.get_text(2, 3) if unh else None) or 'unknown',
        reference_number=unh.get_text(1) if unh else None,
        parsed_at=parsed_at,
        pruefidentifikator=extract_pruefidentifikator(segments, code_tables),
    )
    if info:
        metadata.message_name = info.name
        metadata.category = info.category
        metadata.applicable_processes = list(info.processes)
    else:
        logger.info(f"Unknown message type '{message_type}'.")
    return metadata


def extract_header(segments: List[EdifactSegment]) -> MessageHeader:
    bgm = next((segment for segment in segments if segment.tag == 'BGM'), None)
    if bgm is None:
        return MessageHeader()
    return MessageHeader(
        document_code=bgm.get_text(1),
        document_number=bgm.get_text(2),
        message_function=bgm.get_text(3),
    )


def extract_parties(segments: List[EdifactSegment], code_tables: CodeTables, add_warning=None) -> Dict[str, Party]:
    """
    Maps NAD segments to parties keyed by role name. Roles missing from the
    table are keyed by their code. A later NAD with the same role wins.
    """
    parties: Dict[str, Party] = {}

    for nad in _segments_with_tag(segments, 'NAD'):
        role = nad.get_text(1)
        party_id = nad.get_text(2, 1)
        is_valid_mp_id = bool(party_id and _MP_ID.fullmatch(party_id))

        if party_id and not is_valid_mp_id and add_warning is not None:
            add_warning('NAD', f"MP-ID does not have the expected format (13 digits): {party_id}")

        key = code_tables.party_roles.get(role, role) if role else 'unknown'
        parties[key] = Party(
            id=party_id,
            id_type=nad.get_text(2, 3),
            name=nad.get_text(4, 1),
            role=role,
            valid_mp_id=is_valid_mp_id,
        )
    return parties


def extract_dates(segments: List[EdifactSegment], code_tables: CodeTables, parse_date: DateResolver) -> Dict[str, ResolvedDate]:
    dates: Dict[str, ResolvedDate] = {}
    for dtm in _segments_with_tag(segments, 'DTM'):
        qualifier = dtm.get_text(1, 1)
        key = code_tables.date_qualifiers.get(qualifier) or f"date_{qualifier}"
        dates[key] = parse_date(dtm.get_text(1, 2), dtm.get_text(1, 3))
    return dates


def extract_references(segments: List[EdifactSegment], code_tables: CodeTables) -> Dict[str, Optional[str]]:
    references: Dict[str, Optional[str]] = {}
    for rff in _segments_with_tag(segments, 'RFF'):
        qualifier = rff.get_text(1, 1)
        key = code_tables.reference_qualifiers.get(qualifier) or f"ref_{qualifier}"
        references[key] = rff.get_text(1, 2)
    return references
