"""Entry point for running maintenance plans.

Usage:
    python -m maintenance_workflows plan.yaml [--validate-only] [--json]
    maintenance-workflows plan.yaml

Exit codes: 0 on success, 1 on load/validation errors or a raised failure.
"""

import argparse
import logging
import sys

from .engine.exceptions import ConfigurationFailure, ValidationFailure, WorkerFailure
from .engine.loader import build_plan, load_plan_from_file
from .engine.registry import create_default_registry
from .formatting import format_data, format_failure
from .settings import configure_logging

logger = logging.getLogger(__name__)


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="maintenance-workflows",
        description="Validate and run a YAML maintenance plan.",
    )
    parser.add_argument("plan", help="Path to the YAML plan file")
    parser.add_argument(
        "--validate-only",
        action="store_true",
        help="Load and validate the plan without running it",
    )
    parser.add_argument("--json", action="store_true", help="Print reports as JSON")
    parser.add_argument(
        "--log-level",
        default=None,
        help="Override MAINTENANCE_WORKFLOWS_LOG_LEVEL (DEBUG, INFO, WARNING, ERROR)",
    )
    return parser


def main(argv: list[str] | None = None) -> int:
    """Run the CLI and return the process exit code."""
    args = build_parser().parse_args(argv)
    configure_logging(args.log_level)

    loaded = load_plan_from_file(args.plan)
    if not loaded.is_success:
        print(loaded.error, file=sys.stderr)
        return 1
    schema = loaded.unwrap()

    try:
        plan = build_plan(schema, create_default_registry())
        plan.is_valid()
    except ConfigurationFailure as e:
        print(f"Invalid plan '{schema.name}': {e.message}", file=sys.stderr)
        return 1
    except ValidationFailure as e:
        print(f"Invalid plan '{schema.name}':", file=sys.stderr)
        print(format_failure(e, args.json), file=sys.stderr)
        return 1

    if args.validate_only:
        print(f"Plan '{schema.name}' is valid ({len(plan.actions)} action(s)).")
        return 0

    logger.info("Running plan '%s'", schema.name)
    try:
        plan.run()
    except WorkerFailure as e:
        logger.error("Plan '%s' failed: %s", schema.name, e.message)
        print(format_failure(e, args.json), file=sys.stderr)
        return 1

    print(format_data(plan.to_dict(), args.json))
    logger.info("Plan '%s' finished (succeeded: %s)", schema.name, plan.check_results())
    return 0


def cli() -> None:
    """Console-script entry point."""
    sys.exit(main())


if __name__ == "__main__":
    cli()
