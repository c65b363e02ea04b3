import pytest
import json
import sys
import os
from pathlib import Path

sys.path.insert(0, os.path.join(os.path.dirname(__file__), '..'))

from main import main

pytestmark = pytest.mark.integration

@pytest.fixture
def edifact_file(tmp_path: Path, complete_utilmd_edifact_string: str) -> Path:
    path = tmp_path / "utilmd.edi"
    path.write_text(complete_utilmd_edifact_string, encoding="utf-8")
    return path

def test_cli_writes_json_next_to_input(edifact_file: Path):
    assert main([str(edifact_file)]) == 0

    output = json.loads(edifact_file.with_suffix(".json").read_text(encoding="utf-8"))
    assert output["metadata"]["message_type"] == "UTILMD"
    assert output["body"]["stammdaten"]["marktlokationen"][0]["id"] == "51238696781"
    assert "validation" not in output
    assert "raw_segments" not in output
    assert output["graph_relations"]

def test_cli_options(edifact_file: Path, tmp_path: Path):
    output_file = tmp_path / "out.json"
    assert main([str(edifact_file), str(output_file), "--target", "neo4j", "--raw-segments", "--no-graph"]) == 0

    output = json.loads(output_file.read_text(encoding="utf-8"))
    assert len(output["raw_segments"]) == 13
    assert "graph_relations" not in output
    assert len(output["db_schema"]["statements"]) == 3

def test_cli_code_table_overrides(edifact_file: Path, tmp_path: Path):
    tables = tmp_path / "tables"
    tables.mkdir()
    (tables / "pruefidentifikatoren.json").write_text(json.dumps({"44001": "Lieferantenwechsel"}))
    output_file = tmp_path / "out.json"

    assert main([str(edifact_file), str(output_file), "--code-tables", str(tables)]) == 0
    output = json.loads(output_file.read_text(encoding="utf-8"))
    assert output["metadata"]["pruefidentifikator"]["description"] == "Lieferantenwechsel"

def test_cli_missing_input_file(tmp_path: Path):
    assert main([str(tmp_path / "missing.edi")]) == 1

def test_cli_broken_envelope(tmp_path: Path):
    path = tmp_path / "broken.edi"
    path.write_text("UNH+1+UTILMD'BGM+E01+1+9'", encoding="utf-8")
    assert main([str(path)]) == 1
    assert not path.with_suffix(".json").exists()
