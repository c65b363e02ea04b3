# Canonical data model for a parsed EDIFACT message.
from datetime import date, datetime
from decimal import Decimal
from enum import Enum
from typing import Any, Dict, List, Optional, Union

from pydantic import BaseModel, Field

# A scalar element value after classification; empty values become None.
Scalar = Optional[Union[int, Decimal, str]]
ElementValue = Union[Scalar, List[Scalar]]
ResolvedDate = Optional[Union[datetime, date, str]]


class Severity(str, Enum):
    CRITICAL = "CRITICAL"
    ERROR = "ERROR"
    WARNING = "WARNING"


class ValidationFinding(BaseModel):
    """Represents a single finding recorded while transforming a message."""
    category: str
    message: str
    severity: Severity
    timestamp: datetime


class EdifactElement(BaseModel):
    """A data element. Composite elements carry one value per component."""
    position: int
    value: ElementValue = None
    text: Optional[Union[str, List[Optional[str]]]] = None

    @property
    def is_composite(self) -> bool:
        return isinstance(self.value, list)


class EdifactSegment(BaseModel):
    """Represents a single EDIFACT segment."""
    tag: str
    elements: List[EdifactElement] = Field(default_factory=list)
    raw: Optional[str] = None  # Original (still escaped) segment text, if retained

    def _element(self, position: int) -> Optional[EdifactElement]:
        if 1 <= position <= len(self.elements):
            return self.elements[position - 1]
        return None

    def get_element(self, position: int) -> ElementValue:
        """Retrieves the value of an element by its position (1-based index)."""
        element = self._element(position)
        return element.value if element else None

    def get_component(self, position: int, index: int = 1) -> Scalar:
        """
        Retrieves one component (1-based) of an element. A scalar element is
        treated as a composite with a single component.
        """
        element = self._element(position)
        if element is None:
            return None
        if element.is_composite:
            return element.value[index - 1] if 1 <= index <= len(element.value) else None
        return element.value if index == 1 else None

    def get_text(self, position: int, index: int = 1) -> Optional[str]:
        """Same as get_component, but returns the decoded text instead of the typed value."""
        element = self._element(position)
        if element is None:
            return None
        if element.is_composite:
            return element.text[index - 1] if 1 <= index <= len(element.text) else None
        return element.text if index == 1 else None


class SegmentGroup(BaseModel):
    """
    A business group reconstructed from segment adjacency (party, location,
    identification block, ...). Groups nest up to three levels deep.
    """
    id: str
    type: str
    level: int
    starter_segment: str
    segments: List[EdifactSegment] = Field(default_factory=list)
    children: List['SegmentGroup'] = Field(default_factory=list)

    def add_child(self, group: 'SegmentGroup'):
        self.children.append(group)

    def get_segments(self, tag: str) -> List[EdifactSegment]:
        return [segment for segment in self.segments if segment.tag == tag]

    def get_children(self, group_type: str) -> List['SegmentGroup']:
        return [child for child in self.children if child.type == group_type]


# --- Metadata records ---

class Pruefidentifikator(BaseModel):
    id: str
    description: str
    segment: Optional[EdifactSegment] = None


class MessageMetadata(BaseModel):
    message_type: Optional[str] = None
    message_name: str = "Unbekannt"
    category: str = "unknown"
    applicable_processes: List[str] = Field(default_factory=list)
    version: str = "unknown"
    release: str = "unknown"
    reference_number: Optional[str] = None
    parsed_at: datetime
    standard: str = "EDIFACT"
    pruefidentifikator: Optional[Pruefidentifikator] = None


class MessageHeader(BaseModel):
    document_code: Optional[str] = None
    document_number: Optional[str] = None
    message_function: Optional[str] = None


class Party(BaseModel):
    id: Optional[str] = None
    id_type: Optional[str] = None
    name: Optional[str] = None
    role: Optional[str] = None
    valid_mp_id: bool = False


# --- Body records (one per message category) ---

class LocationId(BaseModel):
    id: Optional[str] = None
    valid: bool = False


class Location(BaseModel):
    qualifier: Optional[str] = None
    id: Optional[str] = None
    code: Optional[str] = None


class Bilanzkreis(BaseModel):
    id: str
    type: str = "Bilanzkreis"


class StammdatenData(BaseModel):
    marktlokationen: List[LocationId] = Field(default_factory=list)
    messlokationen: List[LocationId] = Field(default_factory=list)
    sonstige_objekte: Dict[str, List[Optional[str]]] = Field(default_factory=dict)
    locations: List[Location] = Field(default_factory=list)
    bilanzkreise: List[Bilanzkreis] = Field(default_factory=list)


class Messwert(BaseModel):
    qualifier: Optional[str] = None
    value: Scalar = None
    unit: Optional[str] = None
    valid_unit: bool = False


class Zeitreihe(BaseModel):
    sequence_number: Optional[str] = None
    action_code: Optional[str] = None


class Messperiode(BaseModel):
    type: str
    datetime: ResolvedDate = None


class MesswerteData(BaseModel):
    messwerte: List[Messwert] = Field(default_factory=list)
    zeitreihen: List[Zeitreihe] = Field(default_factory=list)
    messperioden: List[Messperiode] = Field(default_factory=list)


class OrderLine(BaseModel):
    line_number: Optional[str] = None
    item_id: Optional[str] = None
    item_type: Optional[str] = None


class BestellungData(BaseModel):
    order_lines: List[OrderLine] = Field(default_factory=list)


class MonetaryAmount(BaseModel):
    amount: Scalar = None
    currency: Optional[str] = None


class TaxAmount(BaseModel):
    function: Optional[str] = None
    type: Optional[str] = None
    rate: Scalar = None


class RechnungData(BaseModel):
    totals: Dict[str, MonetaryAmount] = Field(default_factory=dict)
    line_items: List[OrderLine] = Field(default_factory=list)
    tax_amounts: List[TaxAmount] = Field(default_factory=list)


class ReportedError(BaseModel):
    code: Optional[str] = None
    description: Optional[str] = None


class Adjustment(BaseModel):
    reason_code: Optional[str] = None
    action_code: Optional[str] = None


class QuittierungData(BaseModel):
    errors: List[ReportedError] = Field(default_factory=list)
    adjustments: List[Adjustment] = Field(default_factory=list)
    status: str = "unknown"


class GenericData(BaseModel):
    segment_count: int
    segment_types: List[str] = Field(default_factory=list)


class MessageBody(BaseModel):
    """Type-specific body; exactly one of the data fields is populated."""
    message_type: Optional[str] = None
    stammdaten: Optional[StammdatenData] = None
    messwerte: Optional[MesswerteData] = None
    bestellung: Optional[BestellungData] = None
    rechnung: Optional[RechnungData] = None
    quittierung: Optional[QuittierungData] = None
    generic_data: Optional[GenericData] = None


# --- Results ---

class ValidationSummary(BaseModel):
    is_valid: bool
    errors: List[ValidationFinding] = Field(default_factory=list)
    warnings: List[ValidationFinding] = Field(default_factory=list)


class GraphNode(BaseModel):
    type: str
    id: Optional[str] = None


class GraphRelation(BaseModel):
    from_entity: GraphNode
    to_entity: GraphNode
    relationship: str
    properties: Dict[str, Any] = Field(default_factory=dict)


class StructuredMessage(BaseModel):
    metadata: MessageMetadata
    header: MessageHeader
    body: MessageBody
    parties: Dict[str, Party] = Field(default_factory=dict)
    dates: Dict[str, ResolvedDate] = Field(default_factory=dict)
    references: Dict[str, Optional[str]] = Field(default_factory=dict)
    segment_groups: List[SegmentGroup] = Field(default_factory=list)
    raw_segments: Optional[List[EdifactSegment]] = None
    graph_relations: Optional[List[GraphRelation]] = None
    db_schema: Optional[Dict[str, Any]] = None
    validation: Optional[ValidationSummary] = None


class TransformError(BaseModel):
    """Terminal result of a transform that could not produce a message."""
    error: bool = True
    message: str
    validation_errors: List[ValidationFinding] = Field(default_factory=list)


# --- Exceptions ---

class EdifactTransformError(Exception):
    """Base class for errors raised while transforming a message."""


class StructuralValidationError(EdifactTransformError):
    """Raised when the message envelope is broken beyond further processing."""


class CodeTableError(EdifactTransformError):
    """Raised when a code table file cannot be used."""


SegmentGroup.model_rebuild()
