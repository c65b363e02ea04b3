"""
Message-type specific body extraction.

Each extractor filters the flat segment list for the tags its message type
carries and projects them onto a typed record. Length and format problems
are reported through the extraction context and never stop extraction.
New message types are added by writing an extractor and registering it in
EXTRACTORS.
"""
import logging
from typing import Callable, Dict, List, Optional, Tuple

from edifact_models import (
    Adjustment, BestellungData, Bilanzkreis, EdifactSegment, GenericData, Location, LocationId,
    MessageBody, Messperiode, Messwert, MesswerteData, MonetaryAmount, OrderLine, QuittierungData,
    RechnungData, ReportedError, StammdatenData, TaxAmount, Zeitreihe,
)
from validation_context import ExtractionContext

logger = logging.getLogger(__name__)

MALO_ID_LENGTH = 11
MELO_ID_LENGTH = 33
VALID_UNITS = ('KWH', 'MWH', 'KW', 'MW')


def _with_tag(segments: List[EdifactSegment], tag: str) -> List[EdifactSegment]:
    return [segment for segment in segments if segment.tag == tag]


def _identification(ide: EdifactSegment) -> Tuple[Optional[str], Optional[str]]:
    """Returns (object qualifier, object id) for IDE+24+<id> as well as IDE+24:<id>."""
    qualifier = ide.get_text(1, 1)
    first = ide.elements[0] if ide.elements else None
    if first is not None and first.is_composite:
        object_id = ide.get_text(1, 2)
        if object_id is None:
            object_id = ide.get_text(2, 1)
        return qualifier, object_id
    return qualifier, ide.get_text(2, 1)


def _location_id(object_id: Optional[str], expected_length: int, label: str, context: ExtractionContext) -> LocationId:
    valid = bool(object_id) and len(object_id) == expected_length
    if object_id and not valid:
        context.add_warning('UTILMD', f"{label} does not have the expected length of {expected_length} characters: {object_id}")
    return LocationId(id=object_id, valid=valid)


def extract_utilmd_data(segments: List[EdifactSegment], context: ExtractionContext) -> StammdatenData:
    data = StammdatenData()

    for ide in _with_tag(segments, 'IDE'):
        qualifier, object_id = _identification(ide)
        if qualifier == '24':
            data.marktlokationen.append(_location_id(object_id, MALO_ID_LENGTH, "Marktlokation ID", context))
        elif qualifier == '25':
            data.messlokationen.append(_location_id(object_id, MELO_ID_LENGTH, "Messlokation ID", context))
        else:
            data.sonstige_objekte.setdefault(f"ide_{qualifier}", []).append(object_id)

    for loc in _with_tag(segments, 'LOC'):
        data.locations.append(Location(qualifier=loc.get_text(1), id=loc.get_text(2, 1), code=loc.get_text(2, 2)))

    for cci in _with_tag(segments, 'CCI'):
        bilanzkreis = cci.get_text(3, 1)
        if cci.get_text(1) == 'Z19' and bilanzkreis:
            data.bilanzkreise.append(Bilanzkreis(id=bilanzkreis))

    logger.debug(f"UTILMD: {len(data.marktlokationen)} MaLo, {len(data.messlokationen)} MeLo, {len(data.locations)} LOC.")
    return data


def extract_mscons_data(segments: List[EdifactSegment], context: ExtractionContext) -> MesswerteData:
    data = MesswerteData()

    for qty in _with_tag(segments, 'QTY'):
        unit = qty.get_text(1, 3)
        data.messwerte.append(Messwert(
            qualifier=qty.get_text(1, 1),
            value=qty.get_component(1, 2),
            unit=unit,
            valid_unit=unit in VALID_UNITS,
        ))

    for seq in _with_tag(segments, 'SEQ'):
        data.zeitreihen.append(Zeitreihe(sequence_number=seq.get_text(1), action_code=seq.get_text(2)))

    for dtm in _with_tag(segments, 'DTM'):
        qualifier = dtm.get_text(1, 1)
        if qualifier in ('163', '164'):
            data.messperioden.append(Messperiode(
                type='start' if qualifier == '163' else 'end',
                datetime=context.parse_date(dtm.get_text(1, 2), dtm.get_text(1, 3)),
            ))
    return data


def _order_lines(segments: List[EdifactSegment]) -> List[OrderLine]:
    return [
        OrderLine(line_number=lin.get_text(1), item_id=lin.get_text(3, 1), item_type=lin.get_text(3, 2))
        for lin in _with_tag(segments, 'LIN')
    ]


def extract_order_data(segments: List[EdifactSegment], context: ExtractionContext) -> BestellungData:
    return BestellungData(order_lines=_order_lines(segments))


def extract_invoice_data(segments: List[EdifactSegment], context: ExtractionContext) -> RechnungData:
    data = RechnungData(line_items=_order_lines(segments))

    for moa in _with_tag(segments, 'MOA'):
        qualifier = moa.get_text(1, 1)
        key = qualifier if qualifier else 'unknown'
        data.totals[key] = MonetaryAmount(amount=moa.get_component(1, 2), currency=moa.get_text(1, 3))

    for tax in _with_tag(segments, 'TAX'):
        data.tax_amounts.append(TaxAmount(function=tax.get_text(1), type=tax.get_text(2, 1), rate=tax.get_component(5, 1)))
    return data


def extract_acknowledgement_data(segments: List[EdifactSegment], context: ExtractionContext) -> QuittierungData:
    data = QuittierungData()

    for erc in _with_tag(segments, 'ERC'):
        data.errors.append(ReportedError(code=erc.get_text(1, 1), description=erc.get_text(1, 2)))

    for ajt in _with_tag(segments, 'AJT'):
        data.adjustments.append(Adjustment(reason_code=ajt.get_text(1), action_code=ajt.get_text(2)))

    bgm = next((segment for segment in segments if segment.tag == 'BGM'), None)
    if bgm is not None:
        function_code = bgm.get_text(3)
        data.status = {'7': 'positive', '27': 'negative'}.get(function_code, 'unknown')
    return data


def extract_generic_data(segments: List[EdifactSegment], context: ExtractionContext) -> GenericData:
    return GenericData(segment_count=len(segments), segment_types=list(dict.fromkeys(segment.tag for segment in segments)))


# Message type -> (body field, extractor). Unlisted types use the generic extractor.
EXTRACTORS: Dict[str, Tuple[str, Callable]] = {
    'UTILMD': ('stammdaten', extract_utilmd_data),
    'MSCONS': ('messwerte', extract_mscons_data),
    'ORDERS': ('bestellung', extract_order_data),
    'ORDRSP': ('bestellung', extract_order_data),
    'INVOIC': ('rechnung', extract_invoice_data),
    'REMADV': ('rechnung', extract_invoice_data),
    'APERAK': ('quittierung', extract_acknowledgement_data),
    'CONTRL': ('quittierung', extract_acknowledgement_data),
}
GENERIC_EXTRACTOR = ('generic_data', extract_generic_data)


def extract_body(segments: List[EdifactSegment], message_type: Optional[str], context: ExtractionContext) -> MessageBody:
    field_name, extractor = EXTRACTORS.get(message_type, GENERIC_EXTRACTOR) if message_type else GENERIC_EXTRACTOR
    logger.info(f"Extracting body of {message_type or 'unknown'} message with {extractor.__name__}.")
    return MessageBody(message_type=message_type, **{field_name: extractor(segments, context)})
