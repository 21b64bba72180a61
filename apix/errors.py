"""Exception taxonomy for fatal pipeline errors.

Only NotFound, Unsupported and InvalidInput failures are raised. Conflict and
Degraded outcomes are reported as data inside ValidationReport issues.
"""

from __future__ import annotations

from enum import Enum
from typing import Any

from pydantic import BaseModel


class ErrorCategory(str, Enum):
    NOT_FOUND = "NotFound"
    UNSUPPORTED = "Unsupported"
    INVALID_INPUT = "InvalidInput"
    CONFLICT = "Conflict"
    DEGRADED = "Degraded"


class FieldViolation(BaseModel):
    field: str
    message: str


class ApixError(Exception):
    """Base class for errors that abort a command.

    Every instance carries a remediation hint for the caller to show.
    """

    code = "APIX_ERROR"
    category = ErrorCategory.INVALID_INPUT
    status_code = 400

    def __init__(self, message: str, hint: str = ""):
        super().__init__(message)
        self.message = message
        self.hint = hint

    def to_detail(self) -> dict[str, Any]:
        return {
            "code": self.code,
            "category": self.category.value,
            "message": self.message,
            "hint": self.hint,
        }


class NoProjectFound(ApixError):
    code = "NO_PROJECT_FOUND"
    category = ErrorCategory.NOT_FOUND
    status_code = 404

    def __init__(self, directory: str):
        super().__init__(
            f"No package.json found in {directory}",
            hint="Run apix from the root of a Node.js project, or pass --directory.",
        )
        self.directory = directory


class ManifestError(ApixError):
    code = "INVALID_MANIFEST"
    category = ErrorCategory.INVALID_INPUT
    status_code = 422

    def __init__(self, path: str, reason: str):
        super().__init__(
            f"Cannot read {path}: {reason}",
            hint="Check that package.json is readable and contains valid JSON.",
        )
        self.path = path


class UnsupportedPlatform(ApixError):
    code = "UNSUPPORTED_PLATFORM"
    category = ErrorCategory.UNSUPPORTED
    status_code = 400

    def __init__(self, framework: str, suggestions: list[str] | None = None):
        self.suggestions = suggestions or [
            "Create a Next.js app: npx create-next-app@latest my-hedera-app",
            "Create a React app: npm create vite@latest my-hedera-app -- --template react-ts",
        ]
        super().__init__(
            f"{framework} projects are not supported",
            hint="; ".join(self.suggestions),
        )
        self.framework = framework

    def to_detail(self) -> dict[str, Any]:
        detail = super().to_detail()
        detail["suggestions"] = self.suggestions
        return detail


class UnsupportedCapability(ApixError):
    code = "UNSUPPORTED_CAPABILITY"
    category = ErrorCategory.UNSUPPORTED
    status_code = 400

    def __init__(self, tag: str, supported: list[str]):
        super().__init__(
            f"Unknown capability: {tag}",
            hint=f"Supported capabilities: {', '.join(supported)}",
        )
        self.tag = tag


class InvalidOptions(ApixError):
    """Raised with every violated option, never just the first one."""

    code = "INVALID_OPTIONS"
    category = ErrorCategory.INVALID_INPUT
    status_code = 422

    def __init__(self, capability: str, violations: list[FieldViolation]):
        fields = ", ".join(v.field for v in violations)
        super().__init__(
            f"Invalid options for {capability}: {fields}",
            hint="Fix the listed options and run the command again.",
        )
        self.violations = violations

    def to_detail(self) -> dict[str, Any]:
        detail = super().to_detail()
        detail["violations"] = [v.model_dump() for v in self.violations]
        return detail
