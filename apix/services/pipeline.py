"""The add-integration flow: analyze, compile, validate, generate, re-check."""

from __future__ import annotations

import logging
import os
from typing import Any

from apix.config import Settings
from apix.models.context import Capability
from apix.models.integration import AddResult
from apix.services import planner
from apix.services.analyzer import analyze
from apix.services.capabilities import resolve_capability
from apix.services.generator import FileSystemGenerator, Generator
from apix.services.health import HealthAuditor
from apix.services.validator import validate

logger = logging.getLogger(__name__)


def add_integration(
    directory: str | os.PathLike,
    capability: str | Capability,
    options: dict[str, Any] | None = None,
    *,
    force: bool = False,
    dry_run: bool = False,
    settings: Settings | None = None,
    generator: Generator | None = None,
) -> AddResult:
    """Add one capability to the project at ``directory``.

    Raises UnsupportedCapability before touching the disk, and
    NoProjectFound, UnsupportedPlatform or InvalidOptions from the stages
    below. Every other outcome is reported through ``AddResult.status``.
    """
    resolved = resolve_capability(capability)
    settings = settings or Settings()
    generator = generator or FileSystemGenerator()

    context = analyze(directory)
    if context.is_active(resolved) and not force:
        logger.info(f"{resolved.value} is already configured, skipping")
        return AddResult(
            capability=resolved,
            status="skipped",
            message=f"{resolved.value} is already configured. Use --force to regenerate it.",
        )

    plan = planner.compile_plan(resolved, options, context, settings=settings, force=force)
    report = validate(context, plan)

    if not report.passed and not force:
        logger.warning(f"Plan for {resolved.value} refused with {len(report.errors)} errors")
        return AddResult(
            capability=resolved,
            status="refused",
            message=f"Plan validation failed with {len(report.errors)} errors",
            plan=plan,
            validation=report,
        )

    if dry_run:
        return AddResult(
            capability=resolved,
            status="planned",
            message=f"Dry run: {len(plan.output_paths())} files would be written",
            plan=plan,
            validation=report,
        )

    logger.info(f"Generating {resolved.value} integration")
    generation = generator.generate(plan)
    health = HealthAuditor(analyze(directory), settings).run_quick()
    if not health.healthy:
        logger.warning(f"Post-generation checks found issues: {health.critical_issues}")

    return AddResult(
        capability=resolved,
        status="generated",
        message=f"{resolved.value} integration added ({len(generation.generated_files)} files)",
        plan=plan,
        validation=report,
        generation=generation,
        health=health,
    )
