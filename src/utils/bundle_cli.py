"""
Cocktail Bundle CLI Utility

Command-line interface for exporting cocktails and running the three import
phases against JSON files. No UI required - designed for scripted moves of
recipes between workspaces.

Usage Examples:
    # Create the database tables
    python -m src.utils.bundle_cli init-db

    # Export two cocktails of a workspace
    python -m src.utils.bundle_cli export <workspace-id> <cocktail-id> <cocktail-id> -o bundle.json

    # Check the structure of a bundle
    python -m src.utils.bundle_cli validate bundle.json

    # Write default decisions for a destination workspace
    python -m src.utils.bundle_cli prepare-mapping bundle.json -w <workspace-id> -o decisions.json

    # Import using (possibly edited) decisions
    python -m src.utils.bundle_cli execute bundle.json -w <workspace-id> -d decisions.json
"""

import sys
import argparse
import json
import logging
from pathlib import Path

# Add parent directory to path for imports
sys.path.insert(0, str(Path(__file__).parent.parent.parent))

from src.services.bundle_export_service import export_cocktails_to_json
from src.services.bundle_validation_service import validate_bundle
from src.services.database import initialize_app_database
from src.services.exceptions import ReconciliationError, ServiceError
from src.services.import_decisions import MappingDecisions
from src.services.mapping_proposal_service import prepare_mapping
from src.services.reconciliation_service import execute_import
from src.utils.constants import APP_NAME, APP_VERSION, ROOT_COLLECTION_KEY


def _load_json(file_path: str):
    with open(file_path, "r", encoding="utf-8") as f:
        return json.load(f)


def _write_json(file_path: str, data) -> None:
    with open(file_path, "w", encoding="utf-8") as f:
        json.dump(data, f, indent=2, ensure_ascii=False)


def init_db_cmd():
    """Create database tables."""
    print("Database ready.")
    return 0


def export_cmd(workspace_id: str, cocktail_ids, output_file: str):
    """Export cocktails to a bundle file."""
    print(f"Exporting {len(cocktail_ids)} cocktail(s) to {output_file}...")
    result = export_cocktails_to_json(output_file, workspace_id, cocktail_ids)

    if result.success:
        print(result.get_summary())
        return 0
    else:
        print(f"ERROR: {result.error}")
        return 1


def validate_cmd(input_file: str):
    """Validate the structure of a bundle file."""
    try:
        data = _load_json(input_file)
    except (OSError, ValueError) as e:
        print(f"ERROR: Could not read {input_file}: {e}")
        return 1

    result = validate_bundle(data)
    if not result.valid:
        print("Bundle is invalid:")
        for error in result.errors:
            print(f"  - {error}")
        return 1

    print(f"Bundle is valid: {result.cocktail_count} cocktail(s)")
    for cocktail in result.cocktails:
        print(f"  - {cocktail['name']} ({cocktail['id']})")
    return 0


def prepare_mapping_cmd(input_file: str, workspace_id: str, output_file: str = None):
    """Print or write default decisions for importing a bundle."""
    try:
        bundle = _load_json(input_file)
    except (OSError, ValueError) as e:
        print(f"ERROR: Could not read {input_file}: {e}")
        return 1

    validation = validate_bundle(bundle)
    if not validation.valid:
        print(f"ERROR: Invalid bundle: {'; '.join(validation.errors)}")
        return 1

    proposal = prepare_mapping(bundle, workspace_id)
    payload = proposal.to_dict()

    if output_file:
        _write_json(output_file, proposal.decisions.to_dict())
        print(f"Default decisions written to {output_file}")
    else:
        print(json.dumps(payload, indent=2, ensure_ascii=False))

    for conflict in proposal.cocktail_conflicts:
        if conflict.has_conflicts:
            print(
                f"Conflict: '{conflict.export_name}' already exists "
                f"({len(conflict.conflicts)} match(es)); defaulting to skip"
            )
    return 0


def execute_cmd(input_file: str, workspace_id: str, decisions_file: str):
    """Import a bundle using a decisions file."""
    try:
        bundle = _load_json(input_file)
        raw_decisions = _load_json(decisions_file)
    except (OSError, ValueError) as e:
        print(f"ERROR: Could not read input: {e}")
        return 1

    validation = validate_bundle(bundle)
    if not validation.valid:
        print(f"ERROR: Invalid bundle: {'; '.join(validation.errors)}")
        return 1

    try:
        decisions = MappingDecisions.from_dict(raw_decisions)
        print(
            f"Importing {len(bundle.get(ROOT_COLLECTION_KEY) or [])} cocktail(s) "
            f"into workspace {workspace_id}..."
        )
        result = execute_import(bundle, decisions, workspace_id)
    except ReconciliationError as e:
        print(f"ERROR: {e}")
        for error in e.errors:
            print(
                f"  - [{error['step']}] {error['entityType']} "
                f"'{error['entityName']}': {error['error']}"
            )
        return 1
    except ServiceError as e:
        print(f"ERROR: {e}")
        return 1

    print(result.get_summary())
    return 0


def main(argv=None):
    """Main CLI entry point."""
    parser = argparse.ArgumentParser(
        description=f"{APP_NAME} {APP_VERSION} - move cocktail recipes between workspaces",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  Export cocktails:
    python -m src.utils.bundle_cli export WORKSPACE_ID COCKTAIL_ID... -o bundle.json

  Validate a bundle:
    python -m src.utils.bundle_cli validate bundle.json

  Propose decisions, edit them, then import:
    python -m src.utils.bundle_cli prepare-mapping bundle.json -w WORKSPACE_ID -o decisions.json
    python -m src.utils.bundle_cli execute bundle.json -w WORKSPACE_ID -d decisions.json
""",
    )
    parser.add_argument("-v", "--verbose", action="store_true", help="Enable debug logging")

    subparsers = parser.add_subparsers(dest="command", help="Command to execute")

    subparsers.add_parser("init-db", help="Create database tables")

    export_parser = subparsers.add_parser("export", help="Export cocktails to a bundle file")
    export_parser.add_argument("workspace_id", help="Source workspace ID")
    export_parser.add_argument("cocktail_ids", nargs="+", help="Cocktail IDs to export")
    export_parser.add_argument(
        "-o", "--output", dest="output_file", required=True, help="Output JSON file"
    )

    validate_parser = subparsers.add_parser("validate", help="Validate a bundle file")
    validate_parser.add_argument("file", help="Bundle JSON file")

    mapping_parser = subparsers.add_parser(
        "prepare-mapping", help="Propose import decisions for a bundle"
    )
    mapping_parser.add_argument("file", help="Bundle JSON file")
    mapping_parser.add_argument(
        "-w", "--workspace", dest="workspace_id", required=True, help="Destination workspace ID"
    )
    mapping_parser.add_argument(
        "-o", "--output", dest="output_file", help="Write default decisions to this file"
    )

    execute_parser = subparsers.add_parser("execute", help="Import a bundle")
    execute_parser.add_argument("file", help="Bundle JSON file")
    execute_parser.add_argument(
        "-w", "--workspace", dest="workspace_id", required=True, help="Destination workspace ID"
    )
    execute_parser.add_argument(
        "-d", "--decisions", dest="decisions_file", required=True, help="Decisions JSON file"
    )

    args = parser.parse_args(argv)

    if args.command is None:
        parser.print_help()
        return 1

    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.WARNING,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )

    if args.command == "validate":
        return validate_cmd(args.file)

    # Initialize database (required for all other operations)
    print("Initializing database...")
    initialize_app_database()

    if args.command == "init-db":
        return init_db_cmd()
    elif args.command == "export":
        return export_cmd(args.workspace_id, args.cocktail_ids, args.output_file)
    elif args.command == "prepare-mapping":
        return prepare_mapping_cmd(args.file, args.workspace_id, args.output_file)
    elif args.command == "execute":
        return execute_cmd(args.file, args.workspace_id, args.decisions_file)
    else:
        print(f"Unknown command: {args.command}")
        return 1


if __name__ == "__main__":
    sys.exit(main())
