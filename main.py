#!/usr/bin/env python3
"""
EDIFACT Transformer Command Line Tool

Parses EDI@Energy EDIFACT messages to JSON with structural and AHB validation.

Usage:
    python main.py input.edi                               # Parse input.edi to input.json
    python main.py input.edi output.json                   # Parse to specific output file
    python main.py input.edi output.json --target neo4j    # Include Neo4j write statements
"""

import argparse
import logging
import sys
from pathlib import Path

# Try importing from installed package first, fallback to src path
try:
    from code_table_manager import CodeTableManager
    from config_models import TargetSchema, TransformerOptions
    from edifact_models import CodeTableError, StructuredMessage
    from edifact_transformer import EdifactTransformer
except ImportError:
    # Add src to path for imports when not installed
    sys.path.insert(0, str(Path(__file__).parent / "src"))
    from code_table_manager import CodeTableManager
    from config_models import TargetSchema, TransformerOptions
    from edifact_models import CodeTableError, StructuredMessage
    from edifact_transformer import EdifactTransformer


def transform_edifact_file(input_file: str, output_file: str, options: TransformerOptions,
                           code_table_path: str = None) -> int:
    """Transform an EDIFACT file and save the result as JSON."""

    print(f"EDIFACT Transformer - Processing {input_file}")
    print("=" * 50)

    try:
        print(f"Loading EDIFACT file: {input_file}")
        with open(input_file, 'r', encoding='utf-8') as f:
            edifact_content = f.read()
        print(f"Loaded {len(edifact_content)} characters")

        code_tables = CodeTableManager(code_table_path).get_code_tables()
        transformer = EdifactTransformer(options=options, code_tables=code_tables)

        print("\nTransforming EDIFACT content...")
        result = transformer.transform(edifact_content)

        if not isinstance(result, StructuredMessage):
            print(f"Error: {result.message}")
            for finding in result.validation_errors:
                print(f"  [{finding.severity.value}] {finding.category}: {finding.message}")
            return 1

        print("EDIFACT transformed successfully!")
        print(f"\nMessage:")
        print(f"  Type: {result.metadata.message_type} ({result.metadata.message_name})")
        print(f"  Reference Number: {result.metadata.reference_number}")
        if result.metadata.pruefidentifikator:
            pi = result.metadata.pruefidentifikator
            print(f"  Prüfidentifikator: {pi.id} ({pi.description})")
        print(f"  Parties: {', '.join(result.parties) or '-'}")
        print(f"  Segment Groups: {len(result.segment_groups)}")

        if result.validation is None:
            print("\nNo validation findings.")
        else:
            findings = result.validation.errors + result.validation.warnings
            print(f"\nValidation found {len(result.validation.errors)} errors and {len(result.validation.warnings)} warnings:")
            for i, finding in enumerate(findings[:10]):  # Show first 10 findings
                print(f"  {i+1}. [{finding.severity.value}] {finding.category}: {finding.message}")
            if len(findings) > 10:
                print(f"  ... and {len(findings) - 10} more findings")

        print(f"\nGenerating JSON output...")
        json_output = result.model_dump_json(indent=2, exclude_none=True)

        with open(output_file, 'w', encoding='utf-8') as f:
            f.write(json_output)

        print(f"JSON output saved to: {output_file}")
        print(f"Output size: {len(json_output):,} characters")
        return 0

    except OSError as e:
        print(f"Error: Could not read or write file: {e}")
        return 1
    except CodeTableError as e:
        print(f"Error: {e}")
        return 1


def main(argv=None):
    """Main entry point with command line argument parsing."""

    parser = argparse.ArgumentParser(
        description="Transform EDIFACT messages to JSON",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  python main.py utilmd.edi                          # Parse utilmd.edi -> utilmd.json
  python main.py utilmd.edi output.json              # Parse to specific output
  python main.py utilmd.edi out.json --target neo4j  # Add Neo4j statements
  python main.py utilmd.edi --code-tables ./tables   # Override code tables
        """
    )

    parser.add_argument('input_file', help='Input EDIFACT file')
    parser.add_argument('output_file', nargs='?',
                        help='Output JSON file (default: input_file.json)')
    parser.add_argument('--target', choices=[t.value for t in TargetSchema], default=TargetSchema.GENERIC.value,
                        help='Target database schema mapping (default: generic)')
    parser.add_argument('--code-tables', dest='code_tables',
                        help='Directory with code table JSON overrides')
    parser.add_argument('--raw-segments', action='store_true',
                        help='Include the tokenized segments in the output')
    parser.add_argument('--no-graph', action='store_true',
                        help='Do not derive graph relations')
    parser.add_argument('--log-level', default='WARNING',
                        help='Logging level (default: WARNING)')

    args = parser.parse_args(argv)

    logging.basicConfig(
        level=args.log_level.upper(),
        format="[%(asctime)s] [%(levelname)s] [%(name)s:%(lineno)d] - %(message)s",
        stream=sys.stderr,
    )

    # Set default output file if not provided
    if not args.output_file:
        args.output_file = str(Path(args.input_file).with_suffix('.json'))

    if not Path(args.input_file).exists():
        print(f"Error: Input file not found: {args.input_file}")
        return 1

    options = TransformerOptions(
        include_raw_segments=args.raw_segments,
        generate_graph_relations=not args.no_graph,
        target_schema=TargetSchema(args.target),
    )
    return transform_edifact_file(args.input_file, args.output_file, options, args.code_tables)


if __name__ == "__main__":
    sys.exit(main())
