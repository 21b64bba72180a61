"""Validation and health report models."""

from __future__ import annotations

from enum import Enum

from pydantic import BaseModel

from apix.errors import ErrorCategory


class ValidationIssue(BaseModel):
    code: str
    category: ErrorCategory
    message: str
    subjects: list[str] = []


class ValidationReport(BaseModel):
    passed: bool
    errors: list[ValidationIssue] = []
    warnings: list[ValidationIssue] = []

    @classmethod
    def from_issues(
        cls, errors: list[ValidationIssue], warnings: list[ValidationIssue]
    ) -> ValidationReport:
        return cls(passed=not errors, errors=errors, warnings=warnings)


class CheckStatus(str, Enum):
    PASS = "pass"
    WARN = "warn"
    FAIL = "fail"


class CheckResult(BaseModel):
    status: CheckStatus
    message: str
    details: list[str] = []
    fix_suggestion: str | None = None


class HealthCheckReport(BaseModel):
    overall: str
    timestamp: str
    checks: dict[str, CheckResult]
    score: int
    critical_issues: int
    warnings: int

    @classmethod
    def from_checks(cls, checks: dict[str, CheckResult], timestamp: str) -> HealthCheckReport:
        """Derive overall status and score from the individual check results."""
        statuses = [c.status for c in checks.values()]
        passes = statuses.count(CheckStatus.PASS)
        warns = statuses.count(CheckStatus.WARN)
        fails = statuses.count(CheckStatus.FAIL)
        return cls(
            overall=overall_status(warns, fails),
            timestamp=timestamp,
            checks=checks,
            score=health_score(passes, warns, fails),
            critical_issues=fails,
            warnings=warns,
        )


class QuickHealthReport(BaseModel):
    healthy: bool
    critical_issues: list[str] = []


class HealthCheckRequest(BaseModel):
    path: str
    skip_type_check: bool = False


def health_score(passes: int, warns: int, fails: int) -> int:
    total = passes + warns + fails
    if total == 0:
        return 100
    # Integer half-up rounding of ((passes + 0.5 * warns) / total) * 100.
    numerator = (2 * passes + warns) * 100
    denominator = 2 * total
    return (2 * numerator + denominator) // (2 * denominator)


def overall_status(warns: int, fails: int) -> str:
    if fails > 0:
        return "critical"
    if warns > 0:
        return "issues"
    return "healthy"
