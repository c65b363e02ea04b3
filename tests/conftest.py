# FILE: tests/conftest.py

import pytest
import sys
import os
import logging

# Add src directory to path for imports
sys.path.insert(0, os.path.join(os.path.dirname(__file__), '..', 'src'))

from config_models import Separators, TransformerOptions
from edifact_transformer import EdifactTransformer

# ==============================================================================
# PYTEST CONFIGURATION & HOOKS
# ==============================================================================

def pytest_configure(config):
    """Configure pytest settings and markers."""
    config.addinivalue_line("markers", "unit: Pure unit tests with no external dependencies.")
    config.addinivalue_line("markers", "integration: Tests running the complete transform pipeline.")

@pytest.fixture(scope="session", autouse=True)
def setup_test_environment(pytestconfig):
    """Set up test environment with logging configuration."""
    # Use pytest's log_cli_level if available, otherwise default to INFO
    log_level = pytestconfig.getoption("log_cli_level") or "INFO"
    logging.basicConfig(
        level=log_level.upper(),
        format="[%(asctime)s] [%(levelname)s] [%(name)s:%(lineno)d] - %(message)s",
        stream=sys.stdout,
        force=True,
    )
    logging.info(f"Test logging configured with level: {log_level.upper()}")
    yield

# ==============================================================================
# UNIT TEST FIXTURES
# ==============================================================================

@pytest.fixture(scope="session")
def separators() -> Separators:
    return Separators()

@pytest.fixture
def transformer() -> EdifactTransformer:
    return EdifactTransformer(TransformerOptions())

@pytest.fixture(scope="session")
def valid_utilmd_edifact_string() -> str:
    """A small UTILMD Anmeldung (Prüfidentifikator 44001) with one Marktlokation."""
    return (
        "UNH+1+UTILMD:D:11A:UN:2.6'"
        "BGM+E01+12345+9'"
        "DTM+137:20241019:102'"
        "NAD+MS+9900123456789::293'"
        "NAD+MR+9900987654321::293'"
        "RFF+Z13:44001'"
        "IDE+24+12345678901'"
        "UNT+9+1'"
    )

@pytest.fixture(scope="session")
def complete_utilmd_edifact_string() -> str:
    """
    A UTILMD message whose envelope is consistent (segment count matches) and
    which carries every segment the business rules expect, spread over lines.
    """
    return """
UNH+ABC0001+UTILMD:D:11A:UN:S1.1'
BGM+E01+DOC4711+9'
DTM+137:202410191230:203'
DTM+163:20241101:102'
DTM+164:20251231:102'
NAD+MS+9900123456789::293'
NAD+MR+9900987654321::293'
RFF+Z13:44001'
IDE+24+51238696781'
LOC+172+51238696781'
CCI+Z19++11YR000000011247'
IDE+25+DE0001234567890123456789012345678'
UNT+13+ABC0001'
""".strip()

@pytest.fixture(scope="session")
def valid_mscons_edifact_string() -> str:
    return (
        "UNH+M1+MSCONS:D:04B:UN:2.4c'"
        "BGM+7+MSC001+9'"
        "NAD+MS+9900123456789::293'"
        "NAD+MR+9900987654321::293'"
        "SEQ+Z02+1'"
        "QTY+220:1234,567:KWH'"
        "QTY+220:12:XYZ'"
        "DTM+163:202410010000:203'"
        "DTM+164:202411010000:203'"
        "UNT+10+M1'"
    )
