from enum import Enum
from typing import Dict, List, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator

import code_tables


class Separators(BaseModel):
    """Service characters used to split a message. Fixed for one parse."""
    model_config = ConfigDict(frozen=True)

    segment: str = "'"
    data_element: str = "+"
    component_element: str = ":"
    decimal: str = ","
    release: str = "?"

    @field_validator("segment", "data_element", "component_element", "decimal", "release")
    @classmethod
    def _single_character(cls, value: str) -> str:
        if len(value) != 1:
            raise ValueError(f"Separator must be a single character, got {value!r}")
        return value

    @classmethod
    def from_service_string(cls, una: str) -> "Separators":
        """
        Builds separators from a UNA service string advice, e.g. "UNA:+.? '".
        Character order: component, data element, decimal, release, reserved, segment.
        """
        if not una.startswith("UNA") or len(una) < 9:
            raise ValueError(f"Not a UNA service string advice: {una!r}")
        return cls(
            component_element=una[3],
            data_element=una[4],
            decimal=una[5],
            release=una[6],
            segment=una[8],
        )


class TargetSchema(str, Enum):
    GENERIC = "generic"
    NEO4J = "neo4j"
    MONGODB = "mongodb"
    POSTGRES = "postgres"


class TransformerOptions(BaseModel):
    include_raw_segments: bool = False
    generate_graph_relations: bool = True
    validate_structure: bool = True
    validate_business_rules: bool = True
    enable_ahb_validation: bool = True
    parse_timestamps: bool = True
    target_schema: TargetSchema = TargetSchema.GENERIC
    detect_service_string: bool = Field(True, description="Read separators from a leading UNA segment.")


class MessageTypeInfo(BaseModel):
    name: str
    category: str
    processes: List[str] = Field(default_factory=list)


class CodeTables(BaseModel):
    """Static lookup tables. Loaded once, never mutated during a parse."""
    model_config = ConfigDict(frozen=True)

    message_types: Dict[str, MessageTypeInfo] = Field(
        default_factory=lambda: {code: MessageTypeInfo(**info) for code, info in code_tables.MESSAGE_TYPES.items()}
    )
    pruefidentifikatoren: Dict[str, str] = Field(default_factory=lambda: dict(code_tables.PRUEFIDENTIFIKATOREN))
    party_roles: Dict[str, str] = Field(default_factory=lambda: dict(code_tables.PARTY_ROLES))
    date_qualifiers: Dict[str, str] = Field(default_factory=lambda: dict(code_tables.DATE_QUALIFIERS))
    reference_qualifiers: Dict[str, str] = Field(default_factory=lambda: dict(code_tables.REFERENCE_QUALIFIERS))

    def get_message_type(self, code: Optional[str]) -> Optional[MessageTypeInfo]:
        return self.message_types.get(code) if code else None
