"""Project health auditor.

Runs an ordered list of checks against a project and folds them into a
HealthCheckReport. A failing check is data in the report; auditing never
raises for problems found in the project.
"""

from __future__ import annotations

import json
import logging
import re
import subprocess
from collections.abc import Callable
from datetime import datetime, timezone
from pathlib import Path

from apix.config import Settings
from apix.models.context import Capability, Platform, ProjectContext
from apix.models.report import CheckResult, CheckStatus, HealthCheckReport, QuickHealthReport
from apix.services.capabilities import REGISTRY, SDK_MIN_VERSION, SDK_PACKAGE, uses_pages_router
from apix.services.validator import parse_version

logger = logging.getLogger(__name__)

RECOMMENDED_DIRS = ["src", "components", "lib"]
ENV_FILES = [".env.local", ".env", ".env.development"]
CREDENTIAL_PATTERN = re.compile(r"^(HEDERA_\w+|\w*ACCOUNT_ID|\w*PRIVATE_KEY)$")
ENV_KEY_PATTERN = re.compile(r"^\s*(?:export\s+)?([A-Za-z_][A-Za-z0-9_]*)\s*=")

FRAMEWORK_DEPENDENCIES = {
    Platform.NEXTJS: ["next", "react", "react-dom"],
    Platform.REACT: ["react", "react-dom"],
}
TYPED_DEPENDENCIES = ["typescript", "@types/node"]
COMPILE_OUTPUT_LINES = 5


def _result(status: CheckStatus, message: str, details=None, fix: str | None = None) -> CheckResult:
    return CheckResult(status=status, message=message, details=list(details or []), fix_suggestion=fix)


def passed(message: str, details=None) -> CheckResult:
    return _result(CheckStatus.PASS, message, details)


def warned(message: str, details=None, fix: str | None = None) -> CheckResult:
    return _result(CheckStatus.WARN, message, details, fix)


def failed(message: str, details=None, fix: str | None = None) -> CheckResult:
    return _result(CheckStatus.FAIL, message, details, fix)


class HealthAuditor:
    """Audit one project snapshot.

    The context may be partial (see ``analyzer.analyze_partial``); checks
    re-read the files they need so a broken manifest is reported, not raised.
    """

    QUICK_CHECKS = 4

    def __init__(self, context: ProjectContext, settings: Settings | None = None):
        self.context = context
        self.settings = settings or Settings()
        self.root = Path(context.root_path)

    def checks(self) -> list[tuple[str, Callable[[], CheckResult]]]:
        ordered: list[tuple[str, Callable[[], CheckResult]]] = [
            ("project-structure", self.check_project_structure),
            ("package-json", self.check_package_json),
            ("dependencies", self.check_dependencies),
            ("typescript", self.check_typescript),
            ("hedera-sdk", self.check_hedera_sdk),
            ("environment", self.check_environment),
        ]
        for capability in Capability:
            ordered.append((capability.value, lambda c=capability: self.check_capability(c)))
        ordered += [
            ("api-routes", self.check_api_routes),
            ("typescript-compilation", self.check_compilation),
            ("build-system", self.check_build_system),
        ]
        return ordered

    def run(self) -> HealthCheckReport:
        logger.info(f"Running health checks for {self.root}")
        results = {name: self._run_check(name, check) for name, check in self.checks()}
        report = HealthCheckReport.from_checks(results, datetime.now(timezone.utc).isoformat())
        logger.info(f"Health check complete: {report.overall} (score {report.score})")
        return report

    def run_quick(self) -> QuickHealthReport:
        critical = []
        for name, check in self.checks()[: self.QUICK_CHECKS]:
            result = self._run_check(name, check)
            if result.status == CheckStatus.FAIL:
                critical.append(f"{name}: {result.message}")
        return QuickHealthReport(healthy=not critical, critical_issues=critical)

    def _run_check(self, name: str, check: Callable[[], CheckResult]) -> CheckResult:
        try:
            return check()
        except Exception as e:
            logger.error(f"Health check {name} raised: {e}")
            return failed(f"Check could not complete: {e}")

    def _manifest(self) -> dict | None:
        try:
            data = json.loads((self.root / "package.json").read_text(encoding="utf-8"))
        except (OSError, UnicodeDecodeError, json.JSONDecodeError):
            return None
        return data if isinstance(data, dict) else None

    def _installed(self) -> list[Capability]:
        return [i.type for i in self.context.existing_integrations]

    # Individual checks

    def check_project_structure(self) -> CheckResult:
        if not (self.root / "package.json").is_file():
            return failed(
                "No package.json found",
                fix="Ensure you are in the correct project directory and have a valid project structure",
            )
        missing = [d for d in RECOMMENDED_DIRS if not (self.root / d).is_dir()]
        if missing:
            return warned(
                "Some recommended directories are missing",
                [f"Missing directory: {d}" for d in missing],
                fix="Consider creating standard project directories for better organization",
            )
        return passed("Project structure looks good")

    def check_package_json(self) -> CheckResult:
        manifest = self._manifest()
        if manifest is None:
            return failed(
                "package.json is missing or invalid",
                fix="Ensure package.json exists and is valid JSON",
            )
        missing = [f for f in ("name", "version", "scripts", "dependencies") if f not in manifest]
        scripts = manifest.get("scripts") if isinstance(manifest.get("scripts"), dict) else {}
        if self.context.platform == Platform.NEXTJS:
            missing += [f"scripts.{s}" for s in ("dev", "start") if s not in scripts]
        if missing:
            return warned(
                "package.json is missing recommended fields",
                [f"Missing: {f}" for f in missing],
                fix="Update package.json with missing fields",
            )
        return passed("package.json is valid")

    def check_dependencies(self) -> CheckResult:
        names = self.context.dependency_names()
        missing = [d for d in FRAMEWORK_DEPENDENCIES.get(self.context.platform, []) if d not in names]
        if self._installed() and SDK_PACKAGE not in names:
            missing.append(SDK_PACKAGE)
        if missing:
            return failed(
                "Required dependencies are missing",
                [f"Missing: {d}" for d in missing],
                fix=f"Run {self.context.package_manager} install {' '.join(missing)}",
            )
        if self.context.is_typed:
            recommended = [d for d in TYPED_DEPENDENCIES if d not in names]
            if recommended:
                return warned(
                    "Recommended dependencies are missing",
                    [f"Recommended: {d}" for d in recommended],
                    fix="Consider installing recommended dependencies",
                )
        return passed("Dependencies look good")

    def check_typescript(self) -> CheckResult:
        if not self.context.is_typed:
            return passed("JavaScript project, TypeScript not required")
        tsconfig = self.root / "tsconfig.json"
        if not tsconfig.is_file():
            return failed(
                "TypeScript project without tsconfig.json",
                fix="Create a tsconfig.json file or run npx tsc --init",
            )
        try:
            config = json.loads(tsconfig.read_text(encoding="utf-8"))
        except (OSError, UnicodeDecodeError, json.JSONDecodeError) as e:
            return failed(f"tsconfig.json is invalid: {e}", fix="Fix tsconfig.json syntax errors")

        options = config.get("compilerOptions") if isinstance(config, dict) else None
        if not isinstance(options, dict):
            return warned(
                "tsconfig.json has no compilerOptions",
                fix="Update tsconfig.json with recommended settings",
            )
        advice = []
        if not options.get("strict") and not options.get("noImplicitAny"):
            advice.append("Consider enabling strict mode for better type safety")
        if not options.get("esModuleInterop"):
            advice.append("Consider enabling esModuleInterop for better imports")
        if advice:
            return warned(
                "TypeScript configuration could be stricter",
                advice,
                fix="Update tsconfig.json with recommended settings",
            )
        return passed("TypeScript configuration looks good")

    def check_hedera_sdk(self) -> CheckResult:
        declared = self.context.declared_version(SDK_PACKAGE)
        if declared is None:
            return failed("Hedera SDK is not installed", fix=f"Run: npm install {SDK_PACKAGE}")
        version = parse_version(declared)
        if version is None:
            return warned(
                f"Cannot determine Hedera SDK version from '{declared}'",
                fix="Pin @hashgraph/sdk to a semver range in package.json",
            )
        if version < SDK_MIN_VERSION:
            minimum = ".".join(str(n) for n in SDK_MIN_VERSION)
            return warned(
                f"Hedera SDK {declared} is older than {minimum}",
                fix=f"Update to latest version: npm install {SDK_PACKAGE}@latest",
            )
        return passed(f"Hedera SDK {declared} installed")

    def check_environment(self) -> CheckResult:
        env_file = next((name for name in ENV_FILES if (self.root / name).is_file()), None)
        if env_file is None:
            return warned(
                "No environment file found",
                fix="Create .env.local with HEDERA_ACCOUNT_ID and HEDERA_PRIVATE_KEY",
            )
        keys = read_env_keys(self.root / env_file)
        if not any(CREDENTIAL_PATTERN.match(key) for key in keys):
            return warned(
                f"No Hedera credentials in {env_file}",
                [f"Add HEDERA_ACCOUNT_ID and HEDERA_PRIVATE_KEY to {env_file}"],
                fix="Configure Hedera credentials in environment file",
            )
        required = set()
        for capability in self._installed():
            required.update(REGISTRY[capability].env_keys)
        missing = sorted(k for k in required if k not in keys)
        if missing:
            return warned(
                f"Environment keys missing from {env_file}",
                [f"Missing: {k}" for k in missing],
                fix=f"Add {', '.join(missing)} to {env_file}",
            )
        return passed(f"Environment configured in {env_file}")

    def check_capability(self, capability: Capability) -> CheckResult:
        spec = REGISTRY[capability]
        present = [p for p in spec.fingerprint if (self.root / p).is_file()]
        if not present:
            return passed(f"{spec.title} not installed (optional)")
        if len(present) < len(spec.fingerprint):
            missing = [p for p in spec.fingerprint if p not in present]
            return warned(
                f"{spec.title} integration is incomplete",
                [f"Missing: {p}" for p in missing],
                fix=f"Regenerate the integration: apix add {capability.value} --force",
            )
        try:
            text = (self.root / spec.file_path).read_text(encoding="utf-8")
        except (OSError, UnicodeDecodeError) as e:
            return failed(f"Cannot read {spec.file_path}: {e}", fix="Check file permissions and content")
        missing_features = [label for marker, label in spec.content_markers if marker not in text]
        if missing_features:
            return warned(
                f"{spec.title} is missing expected functionality",
                [f"Missing: {label}" for label in missing_features],
                fix=f"Regenerate the integration: apix add {capability.value} --force",
            )
        return passed(f"{spec.title} integration is complete")

    def check_api_routes(self) -> CheckResult:
        if self.context.platform != Platform.NEXTJS:
            return passed("API routes not applicable for this platform")
        pages_router = uses_pages_router(self.context)
        missing = []
        for capability in self._installed():
            for path in REGISTRY[capability].route_paths(Platform.NEXTJS, pages_router):
                if not (self.root / path).is_file():
                    missing.append(path)
        if missing:
            return warned(
                "Some API routes are missing",
                [f"Missing route: {p}" for p in missing],
                fix="Regenerate the affected integrations to create missing routes",
            )
        return passed("API routes are in place")

    def check_compilation(self) -> CheckResult:
        if not self.context.is_typed:
            return passed("JavaScript project, compilation check not required")
        if not self.settings.run_type_check:
            return passed("Type check skipped")
        tsc = self.root / "node_modules" / ".bin" / "tsc"
        if not tsc.exists():
            return warned(
                "TypeScript compiler not installed locally",
                fix=f"Run {self.context.package_manager} install to install typescript",
            )
        try:
            proc = subprocess.run(
                [str(tsc), "--noEmit"],
                cwd=self.root,
                capture_output=True,
                text=True,
                timeout=self.settings.type_check_timeout,
            )
        except subprocess.TimeoutExpired:
            return warned(f"Type check timed out after {self.settings.type_check_timeout}s")
        except OSError as e:
            return warned(f"Could not run the TypeScript compiler: {e}")
        if proc.returncode != 0:
            output = (proc.stdout or proc.stderr).strip().splitlines()
            return failed(
                "TypeScript compilation failed",
                output[:COMPILE_OUTPUT_LINES],
                fix="Fix TypeScript errors before proceeding",
            )
        return passed("TypeScript compiles without errors")

    def check_build_system(self) -> CheckResult:
        scripts = self.context.scripts
        required = {
            Platform.NEXTJS: ["build"],
            Platform.REACT: ["build", "start"],
        }.get(self.context.platform, [])
        missing = [s for s in required if s not in scripts]
        if missing:
            return warned(
                "Build scripts are missing",
                [f"Missing script: {s}" for s in missing],
                fix="Add the missing scripts to package.json",
            )
        return passed("Build system configured")


def read_env_keys(path: Path) -> set[str]:
    """Key names defined in a dotenv file. Values are discarded."""
    keys = set()
    try:
        with open(path, encoding="utf-8") as f:
            for line in f:
                match = ENV_KEY_PATTERN.match(line)
                if match:
                    keys.add(match.group(1))
    except (OSError, UnicodeDecodeError) as e:
        logger.warning(f"Error reading {path}: {e}")
    return keys


def audit(context: ProjectContext, settings: Settings | None = None) -> HealthCheckReport:
    return HealthAuditor(context, settings).run()
