"""
podguard CLI entry point.

This module provides the command-line interface for podguard.
"""

from __future__ import annotations

import argparse
import json
import logging
import sys
from typing import Any

from podguard import __version__
from podguard.config import ConfigurationError, PolicyConfig, load_config_from_env
from podguard.engine import RuleRegistry, default_registry
from podguard.models import AuditReport, Severity
from podguard.observability import configure_logging, configure_logging_from_env
from podguard.validator import ManifestError, WorkloadValidator, load_manifests

logger = logging.getLogger(__name__)

EXIT_OK = 0
EXIT_LOAD_ERROR = 1
EXIT_ERRORS_FOUND = 3
EXIT_WARNINGS_FOUND = 4


def create_parser() -> argparse.ArgumentParser:
    """Create CLI argument parser with subcommands."""
    parser = argparse.ArgumentParser(
        prog="podguard",
        description="podguard - Kubernetes workload best-practice checks",
        formatter_class=argparse.RawDescriptionHelpFormatter,
    )

    parser.add_argument(
        "--version",
        action="version",
        version=f"podguard {__version__}",
    )

    parser.add_argument(
        "-v",
        "--verbose",
        action="count",
        default=0,
        help="Increase verbosity (can be repeated)",
    )

    subparsers = parser.add_subparsers(dest="command", help="Available commands")

    # audit command
    audit_parser = subparsers.add_parser("audit", help="Audit workload manifests")
    audit_parser.add_argument(
        "paths",
        nargs="+",
        help="Manifest files or directories",
    )
    audit_parser.add_argument(
        "--config",
        help="Policy configuration file (default: $PODGUARD_CONFIG_FILE or built-in)",
    )
    audit_parser.add_argument(
        "--format",
        choices=["table", "json"],
        default="table",
        help="Output format (default: table)",
    )
    audit_parser.add_argument(
        "--only-failures",
        action="store_true",
        help="Only show failed checks",
    )
    audit_parser.add_argument(
        "--exit-code-on-error",
        action="store_true",
        help=f"Exit with {EXIT_ERRORS_FOUND} when any error-level check fails",
    )
    audit_parser.add_argument(
        "--exit-code-on-warning",
        action="store_true",
        help=f"Exit with {EXIT_WARNINGS_FOUND} when any warning-level check fails",
    )

    # checks command
    checks_parser = subparsers.add_parser("checks", help="List available checks")
    checks_parser.add_argument(
        "--config",
        help="Policy configuration file (default: $PODGUARD_CONFIG_FILE or built-in)",
    )
    checks_parser.add_argument(
        "--format",
        choices=["table", "json"],
        default="table",
        help="Output format (default: table)",
    )

    return parser


def load_config(path: str | None, registry: RuleRegistry) -> PolicyConfig:
    """
    Load the policy configuration for a command.

    Args:
        path: Explicit configuration file, if any
        registry: Registry whose rule IDs the configuration may reference

    Returns:
        PolicyConfig instance

    Raises:
        ConfigurationError: If the configuration is invalid
    """
    if path:
        return PolicyConfig.from_file(path, known_rules=registry.rule_ids())
    return load_config_from_env(known_rules=registry.rule_ids())


def format_table(data: list[dict[str, Any]]) -> str:
    """
    Format data as ASCII table.

    Args:
        data: List of dictionaries

    Returns:
        Formatted table string
    """
    if not data:
        return ""

    headers = list(data[0].keys())

    widths = {h: len(str(h)) for h in headers}
    for row in data:
        for h in headers:
            widths[h] = max(widths[h], len(str(row.get(h, ""))))

    lines = [
        " | ".join(str(h).ljust(widths[h]) for h in headers),
        "-+-".join("-" * widths[h] for h in headers),
    ]
    for row in data:
        lines.append(
            " | ".join(str(row.get(h, "")).ljust(widths[h]) for h in headers)
        )

    return "\n".join(lines)


def report_rows(report: AuditReport, only_failures: bool = False) -> list[dict[str, Any]]:
    """Flatten a report into one row per message."""
    rows = []
    for controller in report:
        for container in controller.containers:
            messages = (
                container.results.failures() if only_failures
                else container.results.messages()
            )
            for message in messages:
                rows.append({
                    "workload": f"{controller.kind}/{controller.name}",
                    "container": container.name,
                    "check": message.rule_id,
                    "category": message.category.value,
                    "severity": message.severity.value,
                    "result": message.outcome.value,
                    "message": message.message,
                })
    return rows


def report_to_dict(report: AuditReport, only_failures: bool = False) -> dict[str, Any]:
    """Convert a report to a dictionary, optionally dropping successes."""
    data = report.to_dict()
    if only_failures:
        for controller in data["controllers"]:
            for container in controller["containers"]:
                container["results"] = {
                    rule_id: result
                    for rule_id, result in container["results"].items()
                    if result["type"] != "success"
                }
    return data


def cmd_audit(args: argparse.Namespace) -> int:
    """
    Audit workload manifests.

    Returns:
        Exit code
    """
    registry = default_registry()

    try:
        config = load_config(args.config, registry)
        documents = []
        for path in args.paths:
            documents.extend(load_manifests(path))
        validator = WorkloadValidator(config, registry)
        report = validator.validate_manifests(documents)
    except (ConfigurationError, ManifestError) as e:
        logger.debug("Failed to load inputs", exc_info=True)
        print(f"Error: {e}", file=sys.stderr)
        return EXIT_LOAD_ERROR

    if args.format == "json":
        print(json.dumps(report_to_dict(report, args.only_failures), indent=2))
    else:
        rows = report_rows(report, args.only_failures)
        if rows:
            print(format_table(rows))
            print()
        summary = report.summary()
        print(
            f"Workloads: {len(report)}  Successes: {summary.successes}  "
            f"Warnings: {summary.warnings}  Errors: {summary.errors}  "
            f"Score: {summary.score}"
        )

    summary = report.summary()
    if args.exit_code_on_error and summary.errors > 0:
        return EXIT_ERRORS_FOUND
    if args.exit_code_on_warning and summary.warnings > 0:
        return EXIT_WARNINGS_FOUND
    return EXIT_OK


def cmd_checks(args: argparse.Namespace) -> int:
    """
    List the registered checks with their configured severities.

    Returns:
        Exit code
    """
    registry = default_registry()

    try:
        config = load_config(args.config, registry)
    except ConfigurationError as e:
        logger.debug("Failed to load inputs", exc_info=True)
        print(f"Error: {e}", file=sys.stderr)
        return EXIT_LOAD_ERROR

    data = []
    for rule in registry:
        severity = config.severity_for(rule.rule_id) or Severity.IGNORE
        data.append({
            "id": rule.rule_id,
            "category": rule.category.value,
            "severity": severity.value,
            "reports": rule.report_mode.value,
        })

    if args.format == "json":
        print(json.dumps(data, indent=2))
    else:
        print(format_table(data))
    return EXIT_OK


def main(argv: list[str] | None = None) -> int:
    """Main entry point for the CLI."""
    parser = create_parser()
    args = parser.parse_args(argv)

    try:
        if args.verbose:
            configure_logging(level="DEBUG" if args.verbose > 1 else "INFO")
        else:
            configure_logging_from_env()
    except ValueError as e:
        print(f"Error: {e}", file=sys.stderr)
        return EXIT_LOAD_ERROR

    if args.command is None:
        parser.print_help()
        return EXIT_OK

    command_handlers = {
        "audit": cmd_audit,
        "checks": cmd_checks,
    }

    handler = command_handlers.get(args.command)
    if handler:
        return handler(args)

    print(f"Unknown command: {args.command}")
    return EXIT_LOAD_ERROR


if __name__ == "__main__":
    sys.exit(main())
