import logging
from datetime import datetime, timezone
from typing import Any, Dict, List, Optional

from code_table_manager import CodeTableManager
from config_models import TargetSchema, TransformerOptions
from edifact_models import Severity, StructuredMessage, ValidationFinding
from edifact_transformer import EdifactTransformer

logger = logging.getLogger(__name__)


class ValidationResult:
    """Container for validation results."""
    def __init__(self, is_valid: bool, errors: List[ValidationFinding], warnings: List[ValidationFinding]):
        self.is_valid = is_valid
        self.errors = errors
        self.warnings = warnings


class EdifactValidationService:
    """Convenience entry points on top of EdifactTransformer."""

    def __init__(self, code_table_path: Optional[str] = None, options: Optional[TransformerOptions] = None):
        self.code_table_manager = CodeTableManager(code_table_path)
        self.options = options or TransformerOptions()

    def _transformer(self, **overrides) -> EdifactTransformer:
        options = TransformerOptions.model_validate({**self.options.model_dump(), **overrides})
        return EdifactTransformer(options=options, code_tables=self.code_table_manager.get_code_tables())

    def validate(self, edifact_content: str) -> ValidationResult:
        """
        Runs structural and business rule validation.

        Args:
            edifact_content: The raw EDIFACT message

        Returns:
            ValidationResult; a fatal structural failure yields is_valid=False
        """
        try:
            logger.info("Starting EDIFACT validation")
            result = self._transformer(enable_ahb_validation=True, validate_business_rules=True).transform(edifact_content)

            if not isinstance(result, StructuredMessage):
                errors = result.validation_errors or [self._finding(result.message)]
                return ValidationResult(is_valid=False, errors=errors, warnings=[])

            if result.validation is None:
                return ValidationResult(is_valid=True, errors=[], warnings=[])

            logger.info(f"Validation completed: valid={result.validation.is_valid}, "
                        f"errors={len(result.validation.errors)}, warnings={len(result.validation.warnings)}")
            return ValidationResult(
                is_valid=result.validation.is_valid,
                errors=result.validation.errors,
                warnings=result.validation.warnings,
            )

        except Exception as e:
            logger.error(f"EDIFACT validation failed: {e}", exc_info=True)
            return ValidationResult(is_valid=False, errors=[self._finding(f"Validation failed: {e}")], warnings=[])

    @staticmethod
    def _finding(message: str) -> ValidationFinding:
        return ValidationFinding(category='VALIDATION', message=message, severity=Severity.CRITICAL,
                                 timestamp=datetime.now(timezone.utc))

    def extract_all_marktlokation_ids(self, edifact_content: str) -> List[Optional[str]]:
        """Returns all Marktlokation IDs (IDE+24) of a message, or [] if it cannot be transformed."""
        result = self._transformer().transform(edifact_content)
        if not isinstance(result, StructuredMessage) or result.body.stammdaten is None:
            return []
        return [malo.id for malo in result.body.stammdaten.marktlokationen]

    def is_gpke_process(self, edifact_content: str) -> bool:
        result = self._transformer().transform(edifact_content)
        return isinstance(result, StructuredMessage) and 'GPKE' in result.metadata.applicable_processes

    def convert_to_neo4j_cypher(self, edifact_content: str) -> List[Dict[str, Any]]:
        result = self._transformer(target_schema=TargetSchema.NEO4J).transform(edifact_content)
        if not isinstance(result, StructuredMessage) or not result.db_schema:
            return []
        return result.db_schema.get('statements', [])
