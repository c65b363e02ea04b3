import json
import logging
from pathlib import Path
from typing import Any, Dict, Optional

from pydantic import ValidationError

from config_models import CodeTables
from edifact_models import CodeTableError

logger = logging.getLogger(__name__)


class CodeTableManager:
    """
    Loads lookup-table overrides from a directory of JSON files.

    Each file is named after the table it replaces (e.g. "party_roles.json")
    and contains a JSON object. Tables without a file keep their defaults.
    """

    def __init__(self, base_path: Optional[str] = None):
        self.base_path = Path(base_path) if base_path else None
        self._overrides: Dict[str, Any] = {}
        self._tables: Optional[CodeTables] = None
        self._load_overrides()

    def _load_overrides(self):
        """Load table override files from the base directory."""
        if self.base_path is None:
            return
        if not self.base_path.exists():
            logger.warning(f"Code table path does not exist: {self.base_path}")
            return

        logger.info(f"Loading code tables from: {self.base_path}")
        known_tables = set(CodeTables.model_fields)

        for table_file in sorted(self.base_path.glob("*.json")):
            table_name = table_file.stem
            if table_name not in known_tables:
                logger.warning(f"Ignoring unknown code table file: {table_file.name}")
                continue
            try:
                with open(table_file, 'r', encoding='utf-8') as f:
                    table_data = json.load(f)
                # Validate each table on its own so one bad file does not discard the rest.
                CodeTables.model_validate({table_name: table_data})
                self._overrides[table_name] = table_data
                logger.info(f"Loaded code table: {table_file.name}")
            except (json.JSONDecodeError, ValidationError, OSError) as e:
                logger.error(f"Failed to load code table {table_file.name}: {e}")

    def get_code_tables(self) -> CodeTables:
        """Returns the effective tables: defaults merged with any loaded overrides."""
        if self._tables is None:
            try:
                self._tables = CodeTables.model_validate(self._overrides)
            except ValidationError as e:
                raise CodeTableError(f"Invalid code table configuration: {e}") from e
        return self._tables

    def list_loaded_tables(self) -> list[str]:
        """List names of tables that were overridden from files."""
        return list(self._overrides.keys())

    def reload_tables(self):
        """Reload all override files from the filesystem."""
        self._overrides.clear()
        self._tables = None
        self._load_overrides()
