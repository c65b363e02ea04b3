import pytest
from datetime import date, datetime, timezone

from pydantic import ValidationError

from config_models import CodeTables, TargetSchema, TransformerOptions
from edifact_models import Severity, StructuredMessage, TransformError
from edifact_transformer import EdifactTransformer, create_transformer

pytestmark = pytest.mark.integration


def test_transform_small_utilmd(transformer, valid_utilmd_edifact_string):
    result = transformer.transform(valid_utilmd_edifact_string)

    assert isinstance(result, StructuredMessage)
    assert result.metadata.message_type == "UTILMD"
    assert result.metadata.pruefidentifikator.id == "44001"
    assert result.header.document_code == "E01"
    assert result.parties["sender"].id == "9900123456789"
    assert result.parties["receiver"].id == "9900987654321"
    assert result.body.stammdaten.marktlokationen[0].id == "12345678901"
    assert result.body.stammdaten.marktlokationen[0].valid is True
    assert result.dates["message_date"] == date(2024, 10, 19)
    assert result.references["pruefidentifikator"] == "44001"

    # UNT reports 9 segments for a message of 8, and LOC is expected for UTILMD.
    assert result.validation.is_valid is True
    assert not result.validation.errors
    assert [finding.category for finding in result.validation.warnings] == ["STRUCTURE", "AHB"]
    assert "reported=9, actual=8" in result.validation.warnings[0].message


def test_transform_complete_utilmd_has_no_findings(transformer, complete_utilmd_edifact_string):
    result = transformer.transform(complete_utilmd_edifact_string)

    assert isinstance(result, StructuredMessage)
    assert result.validation is None
    assert result.metadata.reference_number == "ABC0001"
    assert result.metadata.version == "S1.1"
    assert result.dates["message_date"] == datetime(2024, 10, 19, 12, 30, tzinfo=timezone.utc)
    assert result.dates["start_date"] == date(2024, 11, 1)
    assert result.dates["end_date"] == date(2025, 12, 31)
    assert [bk.id for bk in result.body.stammdaten.bilanzkreise] == ["11YR000000011247"]
    assert result.body.stammdaten.messlokationen[0].valid is True
    assert result.segment_groups
    assert result.raw_segments is None
    assert result.graph_relations


def test_invalid_marktlokation_is_kept_and_reported(transformer, complete_utilmd_edifact_string):
    edifact = complete_utilmd_edifact_string.replace("IDE+24+51238696781'", "IDE+24+12345'")
    result = transformer.transform(edifact)

    assert isinstance(result, StructuredMessage)
    malo = result.body.stammdaten.marktlokationen[0]
    assert (malo.id, malo.valid) == ("12345", False)
    assert result.validation.is_valid is False
    assert [f.message for f in result.validation.errors] == ["Marktlokation ID 1 invalid: 12345 (expected 11 characters)"]
    assert [f.category for f in result.validation.warnings] == ["UTILMD"]


def test_period_ending_before_start_is_invalid(transformer, complete_utilmd_edifact_string):
    edifact = complete_utilmd_edifact_string.replace("DTM+163:20241101:102'", "DTM+163:20261101:102'")
    result = transformer.transform(edifact)
    assert result.validation.is_valid is False
    assert "is after end date" in result.validation.errors[0].message


@pytest.mark.parametrize("edifact, missing", [
    ("UNH+1+UTILMD:D:11A:UN:2.6'BGM+E01+1+9'", "UNT"),
    ("BGM+E01+1+9'UNT+2+1'", "UNH"),
])
def test_broken_envelope_yields_transform_error(transformer, edifact, missing):
    result = transformer.transform(edifact)

    assert isinstance(result, TransformError)
    assert result.error is True
    assert missing in result.message
    assert len(result.validation_errors) == 1
    assert result.validation_errors[0].severity == Severity.CRITICAL


def test_empty_input_yields_transform_error(transformer):
    result = transformer.transform("")
    assert isinstance(result, TransformError)
    assert "UNH" in result.message


def test_transform_is_repeatable(transformer, valid_utilmd_edifact_string):
    first = transformer.transform(valid_utilmd_edifact_string)
    second = transformer.transform(valid_utilmd_edifact_string)

    exclude = {"metadata": {"parsed_at"}, "validation": True}
    assert first.model_dump(exclude=exclude) == second.model_dump(exclude=exclude)
    assert [f.message for f in first.validation.warnings] == [f.message for f in second.validation.warnings]

    # Every finding carries the timestamp of its own transform call.
    assert {f.timestamp for f in first.validation.warnings} == {first.metadata.parsed_at}


def test_structure_check_can_be_disabled():
    transformer = create_transformer(validate_structure=False)
    result = transformer.transform("UNH+1+UTILMD:D:11A:UN:2.6'BGM+E01+1+9'")
    assert isinstance(result, StructuredMessage)
    assert result.metadata.message_type == "UTILMD"


def test_business_rules_can_be_disabled(valid_utilmd_edifact_string):
    transformer = create_transformer(enable_ahb_validation=False)
    result = transformer.transform(valid_utilmd_edifact_string)
    assert [f.category for f in result.validation.warnings] == ["STRUCTURE"]


def test_raw_segments_are_included_on_request(valid_utilmd_edifact_string):
    result = create_transformer(include_raw_segments=True).transform(valid_utilmd_edifact_string)
    assert len(result.raw_segments) == 8
    assert result.raw_segments[0].raw == "UNH+1+UTILMD:D:11A:UN:2.6"


def test_graph_relations_can_be_disabled(valid_utilmd_edifact_string):
    result = create_transformer(generate_graph_relations=False).transform(valid_utilmd_edifact_string)
    assert result.graph_relations is None


def test_timestamps_kept_as_text(valid_mscons_edifact_string):
    result = create_transformer(parse_timestamps=False).transform(valid_mscons_edifact_string)
    assert result.dates["start_date"] == "202410010000"
    assert result.body.messwerte.messperioden[0].datetime == "202410010000"


def test_target_schema_mapping(complete_utilmd_edifact_string):
    result = create_transformer(target_schema="postgres").transform(complete_utilmd_edifact_string)
    assert result.db_schema["tables"]["messages"]["params"][0] == "ABC0001"

    generic = create_transformer().transform(complete_utilmd_edifact_string)
    assert generic.db_schema is None


def test_create_transformer_validates_overrides():
    assert create_transformer(target_schema="neo4j").options.target_schema == TargetSchema.NEO4J
    with pytest.raises(ValidationError):
        create_transformer(target_schema="oracle")


def test_create_transformer_keeps_base_options():
    base = TransformerOptions(include_raw_segments=True)
    transformer = create_transformer(base, parse_timestamps=False)
    assert transformer.options.include_raw_segments is True
    assert transformer.options.parse_timestamps is False
    assert base.parse_timestamps is True


def test_custom_code_tables_are_used(valid_utilmd_edifact_string):
    tables = CodeTables.model_validate({"party_roles": {"MS": "absender", "MR": "empfaenger"}})
    result = EdifactTransformer(code_tables=tables).transform(valid_utilmd_edifact_string)
    assert set(result.parties) == {"absender", "empfaenger"}
    # Without sender/lieferant and receiver/netzbetreiber keys the Anmeldung lacks its roles.
    assert len(result.validation.errors) == 2


def test_una_message_is_transformed(transformer):
    edifact = "UNA:+.? 'UNH+1+MSCONS:D:04B:UN:2.4c'QTY+220:1.5:KWH'UNT+3+1'"
    result = transformer.transform(edifact)
    assert isinstance(result, StructuredMessage)
    assert str(result.body.messwerte.messwerte[0].value) == "1.5"
    assert not result.validation.errors


def test_result_serializes_to_json(transformer, complete_utilmd_edifact_string):
    result = transformer.transform(complete_utilmd_edifact_string)
    payload = result.model_dump_json(exclude_none=True)
    assert '"message_type":"UTILMD"' in payload
