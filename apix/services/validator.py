"""Pre-generation plan validation.

Every check runs and contributes issues; nothing short-circuits, so a single
call reports all problems with a plan.
"""

from __future__ import annotations

import logging
import re
from collections import defaultdict
from pathlib import Path

from apix.errors import ErrorCategory
from apix.models.context import ProjectContext
from apix.models.plan import IntegrationPlan
from apix.models.report import ValidationIssue, ValidationReport
from apix.services.capabilities import get_spec
from apix.services.content import is_generated
from apix.services.templates import has_template

logger = logging.getLogger(__name__)

VERSION_PATTERN = re.compile(r"(\d+)(?:\.(\d+))?")


def parse_version(spec: str) -> tuple[int, int] | None:
    """Major/minor of a semver range such as ``^2.40.0`` or ``~1.2``."""
    match = VERSION_PATTERN.search(spec)
    if not match:
        return None
    return int(match.group(1)), int(match.group(2) or 0)


def check_duplicate_paths(plan: IntegrationPlan) -> list[ValidationIssue]:
    entries: dict[str, list[str]] = defaultdict(list)
    for i, new_file in enumerate(plan.new_files):
        entries[new_file.path].append(f"new_files[{i}]")
    for i, binding in enumerate(plan.template_bindings):
        entries[binding.output_path].append(f"template_bindings[{i}]")

    issues = []
    for path, sources in entries.items():
        if len(sources) > 1:
            issues.append(
                ValidationIssue(
                    code="DUPLICATE_OUTPUT_PATH",
                    category=ErrorCategory.CONFLICT,
                    message=f"{path} is produced by {len(sources)} entries: {', '.join(sources)}",
                    subjects=[path, *sources],
                )
            )
    return issues


def check_dependency_versions(
    context: ProjectContext, plan: IntegrationPlan
) -> tuple[list[ValidationIssue], list[ValidationIssue]]:
    errors: list[ValidationIssue] = []
    warnings: list[ValidationIssue] = []
    for dependency in plan.dependencies_to_add:
        declared = context.declared_version(dependency.name)
        if declared is None:
            continue
        required = parse_version(dependency.version)
        current = parse_version(declared)
        if current is None or required is None:
            warnings.append(
                ValidationIssue(
                    code="DEPENDENCY_VERSION_UNPARSEABLE",
                    category=ErrorCategory.DEGRADED,
                    message=f"Cannot compare declared {dependency.name}@{declared} with {dependency.version}",
                    subjects=[dependency.name],
                )
            )
        elif current[0] != required[0]:
            errors.append(
                ValidationIssue(
                    code="DEPENDENCY_VERSION_CONFLICT",
                    category=ErrorCategory.CONFLICT,
                    message=(
                        f"{dependency.name} is declared as {declared} but {dependency.version} is required"
                    ),
                    subjects=[dependency.name],
                )
            )
        elif current < required:
            warnings.append(
                ValidationIssue(
                    code="DEPENDENCY_VERSION_OUTDATED",
                    category=ErrorCategory.DEGRADED,
                    message=f"{dependency.name}@{declared} is older than {dependency.version}; consider upgrading",
                    subjects=[dependency.name],
                )
            )
    return errors, warnings


def check_prerequisites(context: ProjectContext, plan: IntegrationPlan) -> list[ValidationIssue]:
    issues = []
    for prerequisite in get_spec(plan.capability).prerequisites:
        existing = context.integration(prerequisite)
        if existing is not None and existing.active:
            continue
        state = "incomplete" if existing is not None else "not installed"
        issues.append(
            ValidationIssue(
                code="MISSING_PREREQUISITE",
                category=ErrorCategory.NOT_FOUND,
                message=(
                    f"{plan.capability.value} requires {prerequisite.value}, which is {state}. "
                    f"Run: apix add {prerequisite.value}"
                ),
                subjects=[prerequisite.value],
            )
        )
    return issues


def check_templates(plan: IntegrationPlan) -> list[ValidationIssue]:
    return [
        ValidationIssue(
            code="UNKNOWN_TEMPLATE",
            category=ErrorCategory.UNSUPPORTED,
            message=f"Template not found: {binding.template_id}",
            subjects=[binding.template_id, binding.output_path],
        )
        for binding in plan.template_bindings
        if not has_template(binding.template_id)
    ]


def check_existing_outputs(context: ProjectContext, plan: IntegrationPlan) -> list[ValidationIssue]:
    root = Path(context.root_path)
    targets = [(f.path, f.overwrite) for f in plan.new_files]
    targets += [(b.output_path, b.overwrite) for b in plan.template_bindings]

    issues = []
    for path, overwrite in targets:
        target = root / path
        if overwrite or not target.is_file():
            continue
        try:
            owner = "apix" if is_generated(target.read_text(encoding="utf-8")) else "another tool or a person"
        except (OSError, UnicodeDecodeError):
            owner = "an unknown source"
        issues.append(
            ValidationIssue(
                code="OUTPUT_PATH_EXISTS",
                category=ErrorCategory.DEGRADED,
                message=f"{path} already exists (written by {owner}) and will be left untouched",
                subjects=[path],
            )
        )
    return issues


def validate(context: ProjectContext, plan: IntegrationPlan) -> ValidationReport:
    errors: list[ValidationIssue] = []
    warnings: list[ValidationIssue] = []

    errors.extend(check_duplicate_paths(plan))
    version_errors, version_warnings = check_dependency_versions(context, plan)
    errors.extend(version_errors)
    warnings.extend(version_warnings)
    errors.extend(check_prerequisites(context, plan))
    errors.extend(check_templates(plan))
    warnings.extend(check_existing_outputs(context, plan))

    report = ValidationReport.from_issues(errors, warnings)
    logger.info(
        f"Plan validation for {plan.capability.value}: "
        f"{len(errors)} errors, {len(warnings)} warnings"
    )
    return report
