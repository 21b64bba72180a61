"""Project analysis: builds a ProjectContext from what is on disk."""

from __future__ import annotations

import json
import logging
import os
from pathlib import Path

from apix.errors import ManifestError, NoProjectFound, UnsupportedPlatform
from apix.models.context import (
    Capability,
    Dependency,
    DirectoryShape,
    ExistingIntegration,
    IntegrationStatus,
    Language,
    Platform,
    ProjectContext,
)
from apix.services.capabilities import REGISTRY, SDK_PACKAGE

logger = logging.getLogger(__name__)

MANIFEST = "package.json"

BUILD_MARKERS: list[tuple[str, Platform]] = [
    ("next.config.js", Platform.NEXTJS),
    ("next.config.mjs", Platform.NEXTJS),
    ("next.config.ts", Platform.NEXTJS),
]

# Exact dependency names, checked in order. None marks a recognized but
# unsupported framework.
DEPENDENCY_MARKERS: list[tuple[str, Platform | None]] = [
    ("next", Platform.NEXTJS),
    ("react", Platform.REACT),
    ("vue", None),
    ("@angular/core", None),
    ("svelte", None),
    ("express", Platform.NODE),
    ("fastify", Platform.NODE),
    ("koa", Platform.NODE),
    ("commander", Platform.NODE),
    ("yargs", Platform.NODE),
]

UNSUPPORTED_NAMES = {
    "vue": "Vue.js",
    "@angular/core": "Angular",
    "svelte": "Svelte",
}

DIRECTORY_MARKERS: list[tuple[tuple[str, ...], Platform]] = [
    (("pages", "app"), Platform.NEXTJS),
    (("src/components", "components"), Platform.REACT),
]

CONFIG_FILES = ["next.config.js", "tailwind.config.js", "tsconfig.json", ".env.local", ".env"]

AUTH_LIBRARIES = ["next-auth", "@auth0/auth0-react", "firebase", "@supabase/supabase-js", "@clerk/clerk-react"]

STATE_RULES = [
    (("@reduxjs/toolkit", "redux"), "redux"),
    (("zustand",), "zustand"),
    (("mobx",), "mobx"),
    (("recoil",), "recoil"),
]

UI_RULES = [
    (("@mui/material",), "material-ui"),
    (("@chakra-ui/react",), "chakra-ui"),
    (("antd",), "ant-design"),
    (("tailwindcss",), "tailwindcss"),
    (("bootstrap",), "bootstrap"),
    (("styled-components",), "styled-components"),
]


def analyze(directory: str | os.PathLike) -> ProjectContext:
    """Read a project strictly. Missing or unsupported projects raise."""
    return _read_context(Path(directory), strict=True)


def analyze_partial(directory: str | os.PathLike) -> ProjectContext:
    """Read whatever is on disk without raising; used by the health auditor."""
    return _read_context(Path(directory), strict=False)


def read_manifest(root: Path) -> dict:
    manifest_path = root / MANIFEST
    try:
        data = json.loads(manifest_path.read_text(encoding="utf-8"))
    except FileNotFoundError:
        raise NoProjectFound(str(root)) from None
    except (OSError, UnicodeDecodeError) as e:
        raise ManifestError(str(manifest_path), str(e)) from e
    except json.JSONDecodeError as e:
        raise ManifestError(str(manifest_path), f"invalid JSON ({e.msg} at line {e.lineno})") from e
    if not isinstance(data, dict):
        raise ManifestError(str(manifest_path), "top-level value must be an object")
    return data


def _read_context(root: Path, strict: bool) -> ProjectContext:
    root = root.resolve()
    if not root.is_dir():
        if strict:
            raise NoProjectFound(str(root))
        return ProjectContext(root_path=str(root), partial=True)

    try:
        manifest = read_manifest(root)
    except (NoProjectFound, ManifestError) as e:
        if strict:
            raise
        logger.warning(f"Reading {root} without a usable manifest: {e.message}")
        manifest = {}

    dependencies = _dependency_list(manifest.get("dependencies"))
    dev_dependencies = _dependency_list(manifest.get("devDependencies"))
    all_deps = dependencies + dev_dependencies
    shape = _directory_shape(root)

    platform, unsupported = detect_platform(root, manifest, all_deps)
    if unsupported:
        if strict:
            raise UnsupportedPlatform(UNSUPPORTED_NAMES.get(unsupported, unsupported))
        logger.warning(f"Unsupported framework {unsupported}; auditing as unknown platform")

    dep_names = [d.name for d in all_deps]
    scripts = manifest.get("scripts")
    context = ProjectContext(
        root_path=str(root),
        platform=platform,
        language=_detect_language(root, dep_names),
        package_manager=_detect_package_manager(root),
        dependencies=tuple(dependencies),
        dev_dependencies=tuple(dev_dependencies),
        scripts={str(k): str(v) for k, v in scripts.items()} if isinstance(scripts, dict) else {},
        directory_shape=shape,
        existing_integrations=tuple(detect_integrations(root, all_deps)),
        has_existing_auth=any(name in AUTH_LIBRARIES for name in dep_names),
        state_management=_exact_match(STATE_RULES, dep_names),
        ui_library=_exact_match(UI_RULES, dep_names),
        partial=not strict,
    )
    logger.debug(f"Project analysis complete: {context.platform.value}, {len(all_deps)} dependencies")
    return context


def detect_platform(
    root: Path,
    manifest: dict,
    dependencies: list[Dependency],
) -> tuple[Platform, str | None]:
    """First match wins: build markers, dependency names, directory shape, manifest name.

    Returns the platform and, when an unsupported framework was recognized,
    its dependency name.
    """
    for marker, platform in BUILD_MARKERS:
        if (root / marker).exists():
            return platform, None

    names = {d.name for d in dependencies}
    for name, platform in DEPENDENCY_MARKERS:
        if name in names:
            if platform is None:
                return Platform.UNKNOWN, name
            return platform, None

    for paths, platform in DIRECTORY_MARKERS:
        if any((root / p).is_dir() for p in paths):
            return platform, None

    if manifest.get("name"):
        return Platform.NODE, None
    return Platform.UNKNOWN, None


def detect_integrations(root: Path, dependencies: list[Dependency]) -> list[ExistingIntegration]:
    """Classify each capability by its fingerprint files.

    All fingerprint files present -> active. Some present -> inactive with the
    found files listed. None present -> not reported.
    """
    sdk_version = next((d.version for d in dependencies if d.name == SDK_PACKAGE), None)
    found: list[ExistingIntegration] = []
    for capability, spec in REGISTRY.items():
        present = tuple(p for p in spec.fingerprint if (root / p).is_file())
        if not present:
            continue
        found.append(
            ExistingIntegration(
                type=capability,
                active=len(present) == len(spec.fingerprint),
                version=sdk_version,
                files=present,
            )
        )
    return found


def integration_status(context: ProjectContext) -> dict[str, IntegrationStatus]:
    status: dict[str, IntegrationStatus] = {}
    for capability in Capability:
        existing = context.integration(capability)
        if existing is None:
            status[capability.value] = IntegrationStatus(active=False, status="Not configured")
        else:
            status[capability.value] = IntegrationStatus(
                active=existing.active,
                status="Configured" if existing.active else "Partially configured",
                files=list(existing.files),
            )
    return status


def _dependency_list(section) -> list[Dependency]:
    if not isinstance(section, dict):
        return []
    return [Dependency(name=str(name), version=str(version)) for name, version in section.items()]


def _directory_shape(root: Path) -> DirectoryShape:
    def exists(*paths: str) -> bool:
        return any((root / p).is_dir() for p in paths)

    try:
        directories = sorted(
            entry.name for entry in root.iterdir() if entry.is_dir() and not entry.name.startswith(".")
        )
    except OSError as e:
        logger.warning(f"Error listing {root}: {e}")
        directories = []

    return DirectoryShape(
        has_pages=exists("pages", "app", "src/pages", "src/app"),
        has_app_router=exists("app", "src/app"),
        has_components=exists("components", "src/components"),
        has_lib=exists("lib", "src/lib"),
        has_api_routes=exists("pages/api", "app/api", "src/pages/api", "src/app/api"),
        has_hooks=exists("hooks", "src/hooks"),
        has_contexts=exists("contexts", "src/contexts"),
        has_utils=exists("utils", "src/utils"),
        has_styles=exists("styles", "src/styles"),
        directories=tuple(d for d in directories if d != "node_modules"),
        config_files=tuple(f for f in CONFIG_FILES if (root / f).exists()),
    )


def _detect_language(root: Path, dep_names: list[str]) -> Language:
    if "typescript" in dep_names or (root / "tsconfig.json").exists():
        return Language.TYPESCRIPT
    return Language.JAVASCRIPT


def _detect_package_manager(root: Path) -> str:
    if (root / "pnpm-lock.yaml").exists():
        return "pnpm"
    if (root / "yarn.lock").exists():
        return "yarn"
    return "npm"


def _exact_match(rules: list[tuple[tuple[str, ...], str]], names: list[str]) -> str | None:
    # Library detection wants exact package names, not substrings.
    for candidates, label in rules:
        if any(name in candidates for name in names):
            return label
    return None
