import logging
from datetime import datetime, timezone
from typing import List, Optional, Union

from ahb_validator import validate_ahb_rules
from config_models import CodeTables, Separators, TargetSchema, TransformerOptions
from date_utils import keep_text, parse_date
from edifact_models import EdifactSegment, EdifactTransformError, StructuredMessage, TransformError
from edifact_parser import EdifactParser
from extractors import extract_body
from graph_relations import extract_graph_relations
from metadata_extractor import extract_dates, extract_header, extract_metadata, extract_parties, extract_references
from schema_mapping import map_to_target_schema
from segment_groups import build_segment_groups
from structure_validator import validate_message_structure
from validation_context import ExtractionContext, ValidationCollector

logger = logging.getLogger(__name__)


class EdifactTransformer:
    """
    Turns a raw EDIFACT message into a StructuredMessage.

    Pipeline: normalize and tokenize, check the envelope (fatal on a missing
    UNH/UNT), extract metadata, body, parties, dates, references and segment
    groups, then run the business rules. Each call owns its own
    ValidationCollector, so one transformer may be shared between threads.
    """

    def __init__(self, options: Optional[TransformerOptions] = None, separators: Optional[Separators] = None,
                 code_tables: Optional[CodeTables] = None):
        self.options = options or TransformerOptions()
        self.separators = separators or Separators()
        self.code_tables = code_tables or CodeTables()
        self.parser = EdifactParser(
            separators=self.separators,
            include_raw_segments=self.options.include_raw_segments,
            detect_service_string=self.options.detect_service_string,
        )

    def transform(self, edifact_string: str) -> Union[StructuredMessage, TransformError]:
        collector = ValidationCollector()
        try:
            segments = self.parser.parse(edifact_string)
            logger.info(f"=== TRANSFORMING MESSAGE ({len(segments)} segments) ===")

            if self.options.validate_structure:
                validate_message_structure(segments, collector)

            message = self.build_message(segments, collector)

            if self.options.enable_ahb_validation and self.options.validate_business_rules:
                validate_ahb_rules(message, segments, collector)

            if self.options.generate_graph_relations:
                message.graph_relations = extract_graph_relations(message)

            if self.options.target_schema != TargetSchema.GENERIC:
                message.db_schema = map_to_target_schema(message, self.options.target_schema)

            if collector.has_findings:
                message.validation = collector.summary()

            logger.info(f"=== TRANSFORMATION COMPLETE ({len(collector.errors)} errors, {len(collector.warnings)} warnings) ===")
            return message

        except EdifactTransformError as e:
            logger.warning(f"Transformation aborted: {e}")
            return TransformError(message=str(e), validation_errors=list(collector.errors))
        except Exception as e:
            logger.error(f"Critical error transforming message: {e}", exc_info=True)
            return TransformError(message=f"Critical transformation error: {e}", validation_errors=list(collector.errors))

    def build_message(self, segments: List[EdifactSegment], collector: ValidationCollector) -> StructuredMessage:
        """Assembles metadata, header, body, parties, dates, references and groups."""
        context = ExtractionContext(collector, parse_date if self.options.parse_timestamps else keep_text)
        metadata = extract_metadata(segments, self.code_tables, parsed_at=collector.timestamp)

        return StructuredMessage(
            metadata=metadata,
            header=extract_header(segments),
            body=extract_body(segments, metadata.message_type, context),
            parties=extract_parties(segments, self.code_tables, add_warning=collector.add_warning),
            dates=extract_dates(segments, self.code_tables, context.parse_date),
            references=extract_references(segments, self.code_tables),
            segment_groups=build_segment_groups(segments),
            raw_segments=segments if self.options.include_raw_segments else None,
        )


def create_transformer(options: Optional[TransformerOptions] = None, **overrides) -> EdifactTransformer:
    """Factory using the default options, optionally overriding single fields."""
    base = options or TransformerOptions()
    if overrides:
        base = TransformerOptions.model_validate({**base.model_dump(), **overrides})
    return EdifactTransformer(options=base)
