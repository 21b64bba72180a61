"""apix command-line interface.

Usage:
    apix analyze [-d DIR] [--json]
    apix recommend [-d DIR]
    apix add token -n Acme -s ACM
    apix add wallet -p hashpack,blade --dry-run
    apix status [-d DIR]
    apix health [-q] [--fix] [--skip-type-check]
    apix classify "loyalty points for our shop"

Exit codes: 0 on success, 1 for an unhealthy project or a refused plan,
2 when the command cannot run at all.
"""

from __future__ import annotations

import argparse
import asyncio
import json
import logging
import sys
from typing import Any

from pydantic import BaseModel

from apix import __version__
from apix.config import Settings, load_settings, setup_logging
from apix.errors import ApixError
from apix.models.integration import AddResult
from apix.models.report import CheckStatus, HealthCheckReport
from apix.services.analyzer import analyze, analyze_partial, integration_status
from apix.services.health import HealthAuditor
from apix.services.intent import classify_requirement
from apix.services.pipeline import add_integration
from apix.services.recommender import recommend

logger = logging.getLogger(__name__)

EXIT_OK = 0
EXIT_UNHEALTHY = 1
EXIT_ERROR = 2

STATUS_ICONS = {
    CheckStatus.PASS: "✔",
    CheckStatus.WARN: "!",
    CheckStatus.FAIL: "✘",
}


def _emit_json(value: Any) -> None:
    if isinstance(value, BaseModel):
        print(value.model_dump_json(indent=2))
    else:
        print(json.dumps(value, indent=2, default=lambda v: v.model_dump(mode="json")))


def parse_option(raw: str) -> tuple[str, str]:
    key, sep, value = raw.partition("=")
    if not sep or not key.strip():
        raise argparse.ArgumentTypeError(f"expected KEY=VALUE, got '{raw}'")
    return key.strip(), value.strip()


def build_options(args: argparse.Namespace) -> dict[str, Any]:
    """Collect capability options from the shorthand flags and --option pairs."""
    options: dict[str, Any] = {}
    if args.name:
        options["name"] = args.name
    if args.symbol:
        options["symbol"] = args.symbol
    if args.providers:
        providers = [p.strip() for p in args.providers.split(",") if p.strip()]
        options["providers"] = providers
        options["default_provider"] = providers[0] if providers else None
    if args.type:
        options["type"] = args.type
    for key, value in args.option or []:
        options[key] = value
    return options


# Commands


def cmd_analyze(args: argparse.Namespace, settings: Settings) -> int:
    context = analyze(args.directory)
    recommendations = recommend(context)
    if args.json:
        _emit_json({"context": context, "recommendations": recommendations})
        return EXIT_OK

    print(f"\nProject: {context.root_path}")
    print(f"  Platform:        {context.platform.value}")
    print(f"  Language:        {context.language.value}")
    print(f"  Package manager: {context.package_manager}")
    print(f"  Dependencies:    {len(context.all_dependencies())}")
    if context.ui_library:
        print(f"  UI library:      {context.ui_library}")
    if context.state_management:
        print(f"  State:           {context.state_management}")
    for existing in context.existing_integrations:
        state = "active" if existing.active else "incomplete"
        print(f"  Integration:     {existing.type.value} ({state})")
    _print_recommendations(recommendations)
    return EXIT_OK


def cmd_recommend(args: argparse.Namespace, settings: Settings) -> int:
    recommendations = recommend(analyze(args.directory))
    if args.json:
        _emit_json(recommendations)
    else:
        _print_recommendations(recommendations)
    return EXIT_OK


def _print_recommendations(recommendations) -> None:
    if not recommendations:
        print("\nNo new integrations recommended.")
        return
    print("\nRecommended integrations:")
    for rec in recommendations:
        print(f"  [{rec.priority.value}] {rec.name}")
        print(f"      {rec.description}")
        print(f"      {rec.rationale}")
        print(f"      Effort: {rec.estimated_effort}   Run: apix add {rec.command}")


def cmd_add(args: argparse.Namespace, settings: Settings) -> int:
    result = add_integration(
        args.directory,
        args.capability,
        build_options(args),
        force=args.force,
        dry_run=args.dry_run,
        settings=settings,
    )
    if args.json:
        _emit_json(result)
    else:
        _print_add_result(result)
    return EXIT_UNHEALTHY if result.status == "refused" else EXIT_OK


def _print_add_result(result: AddResult) -> None:
    print(f"\n{result.message}")
    if result.validation:
        for issue in result.validation.errors:
            print(f"  ✘ {issue.code}: {issue.message}")
        for issue in result.validation.warnings:
            print(f"  ! {issue.code}: {issue.message}")
    if result.status == "planned" and result.plan:
        for path in result.plan.output_paths():
            print(f"  would write {path}")
    if result.generation:
        for path in result.generation.generated_files:
            print(f"  created  {path}")
        for path in result.generation.skipped_files:
            print(f"  kept     {path}")
        for path in result.generation.modified_files:
            print(f"  updated  {path}")
        if result.generation.next_steps:
            print("\nNext steps:")
            for i, step in enumerate(result.generation.next_steps, 1):
                print(f"  {i}. {step}")
    if result.health and not result.health.healthy:
        print("\nProject health issues:")
        for issue in result.health.critical_issues:
            print(f"  ✘ {issue}")


def cmd_status(args: argparse.Namespace, settings: Settings) -> int:
    status = integration_status(analyze(args.directory))
    if args.json:
        _emit_json(status)
        return EXIT_OK
    print("\nIntegration status:")
    for name, entry in status.items():
        print(f"  {name:<16} {entry.status}")
    return EXIT_OK


def cmd_health(args: argparse.Namespace, settings: Settings) -> int:
    if args.skip_type_check:
        settings = settings.model_copy(update={"run_type_check": False})
    auditor = HealthAuditor(analyze_partial(args.directory), settings)

    if args.quick:
        quick = auditor.run_quick()
        if args.json:
            _emit_json(quick)
        elif quick.healthy:
            print("✔ No critical issues found")
        else:
            for issue in quick.critical_issues:
                print(f"✘ {issue}")
        return EXIT_OK if quick.healthy else EXIT_UNHEALTHY

    report = auditor.run()
    if args.json:
        _emit_json(report)
    else:
        _print_health(report, show_fixes=args.fix)
    return EXIT_UNHEALTHY if report.overall == "critical" else EXIT_OK


def _print_health(report: HealthCheckReport, show_fixes: bool) -> None:
    print(f"\nHealth: {report.overall} (score {report.score}/100)")
    for name, check in report.checks.items():
        print(f"  {STATUS_ICONS[check.status]} {name}: {check.message}")
        if check.status != CheckStatus.PASS:
            for detail in check.details:
                print(f"      {detail}")
            if show_fixes and check.fix_suggestion:
                print(f"      fix: {check.fix_suggestion}")
    print(f"\n{report.critical_issues} critical issues, {report.warnings} warnings")


def cmd_classify(args: argparse.Namespace, settings: Settings) -> int:
    result = asyncio.run(classify_requirement(args.text, settings=settings))
    if args.json:
        _emit_json(result)
        return EXIT_OK
    print(f"Industry:     {result.industry}")
    print(f"Capabilities: {', '.join(c.value for c in result.capabilities)}")
    print(f"Confidence:   {result.confidence:.0%} ({result.source})")
    return EXIT_OK


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="apix",
        description="Add Hedera integrations to JavaScript and TypeScript projects",
    )
    parser.add_argument("--version", action="version", version=f"apix {__version__}")
    parser.add_argument("--debug", action="store_true", help="Enable debug logging")
    parser.add_argument("-v", "--verbose", action="store_true", help="Enable info logging")

    common = argparse.ArgumentParser(add_help=False)
    common.add_argument("-d", "--directory", default=".", help="Project directory (default: .)")
    common.add_argument("--json", action="store_true", help="Print machine-readable JSON")

    subparsers = parser.add_subparsers(dest="command", required=True, help="Command to run")

    p_analyze = subparsers.add_parser("analyze", parents=[common], help="Analyze a project")
    p_analyze.set_defaults(func=cmd_analyze)

    p_recommend = subparsers.add_parser("recommend", parents=[common], help="Recommend integrations")
    p_recommend.set_defaults(func=cmd_recommend)

    p_add = subparsers.add_parser("add", parents=[common], help="Add an integration")
    p_add.add_argument("capability", help="Capability to add (token, wallet, contract, consensus, account)")
    p_add.add_argument("-n", "--name", help="Token, contract or topic name")
    p_add.add_argument("-s", "--symbol", help="Token symbol")
    p_add.add_argument("-p", "--providers", help="Comma-separated wallet providers")
    p_add.add_argument("-t", "--type", help="Contract type")
    p_add.add_argument(
        "--option",
        action="append",
        type=parse_option,
        metavar="KEY=VALUE",
        help="Any other capability option; may be repeated",
    )
    p_add.add_argument("-f", "--force", action="store_true", help="Regenerate and overwrite existing files")
    p_add.add_argument("--dry-run", action="store_true", help="Show the plan without writing files")
    p_add.set_defaults(func=cmd_add)

    p_status = subparsers.add_parser("status", parents=[common], help="Show integration status")
    p_status.set_defaults(func=cmd_status)

    p_health = subparsers.add_parser("health", parents=[common], help="Check project health")
    p_health.add_argument("-q", "--quick", action="store_true", help="Run critical checks only")
    p_health.add_argument("--fix", action="store_true", help="Show fix suggestions")
    p_health.add_argument("--skip-type-check", action="store_true", help="Skip tsc --noEmit")
    p_health.set_defaults(func=cmd_health)

    p_classify = subparsers.add_parser("classify", help="Classify a business requirement")
    p_classify.add_argument("text", help="Requirement in plain language")
    p_classify.add_argument("--json", action="store_true", help="Print machine-readable JSON")
    p_classify.set_defaults(func=cmd_classify)

    return parser


def main(argv: list[str] | None = None) -> int:
    args = build_parser().parse_args(argv)
    settings = load_settings()

    if args.debug:
        level = "DEBUG"
    elif args.verbose:
        level = "INFO"
    else:
        level = settings.log_level
    # Command output goes to stdout; logs go to stderr.
    setup_logging(level, stream=sys.stderr)

    try:
        return args.func(args, settings)
    except ApixError as e:
        logger.debug(f"{e.code}: {e.message}")
        print(f"✘ {e.message}", file=sys.stderr)
        if e.hint:
            print(f"  {e.hint}", file=sys.stderr)
        return EXIT_ERROR


if __name__ == "__main__":
    sys.exit(main())
