"""Tests for project analysis."""

import pytest

from apix.errors import ManifestError, NoProjectFound, UnsupportedPlatform
from apix.models.context import Capability, Language, Platform
from apix.services.analyzer import analyze, analyze_partial, integration_status


def test_nextjs_project_detected_from_build_marker(nextjs_project) -> None:
    context = analyze(nextjs_project)
    assert context.platform == Platform.NEXTJS
    assert context.language == Language.TYPESCRIPT
    assert context.package_manager == "npm"
    assert context.directory_shape.has_pages
    assert "tsconfig.json" in context.directory_shape.config_files
    assert context.existing_integrations == ()
    assert not context.partial


def test_react_project_detected_from_dependencies(make_project) -> None:
    root = make_project(deps={"react": "18.3.0", "zustand": "4.5.0", "tailwindcss": "3.4.0"})
    context = analyze(root)
    assert context.platform == Platform.REACT
    assert context.language == Language.JAVASCRIPT
    assert context.state_management == "zustand"
    assert context.ui_library == "tailwindcss"


def test_server_dependency_means_node_platform(make_project) -> None:
    root = make_project(deps={"express": "4.19.0"}, files={"yarn.lock": ""})
    context = analyze(root)
    assert context.platform == Platform.NODE
    assert context.package_manager == "yarn"


def test_named_manifest_without_markers_is_node(make_project) -> None:
    assert analyze(make_project(deps={"lodash": "4.17.21"})).platform == Platform.NODE


def test_pages_directory_means_nextjs(make_project) -> None:
    context = analyze(make_project(dirs=["pages"]))
    assert context.platform == Platform.NEXTJS
    assert context.directory_shape.has_pages
    assert not context.directory_shape.has_app_router


def test_app_directory_means_nextjs_app_router(make_project) -> None:
    context = analyze(make_project(dirs=["app"]))
    assert context.platform == Platform.NEXTJS
    assert context.directory_shape.has_app_router


def test_components_directory_means_react(make_project) -> None:
    assert analyze(make_project(dirs=["components"])).platform == Platform.REACT


def test_unnamed_manifest_without_markers_is_unknown(make_project) -> None:
    context = analyze(make_project(name=""))
    assert context.platform == Platform.UNKNOWN
    assert not context.partial


def test_build_marker_wins_over_unsupported_dependency(make_project) -> None:
    root = make_project(deps={"vue": "3.4.0"}, files={"next.config.js": "module.exports = {};"})
    assert analyze(root).platform == Platform.NEXTJS


def test_dependency_wins_over_directory_shape(make_project) -> None:
    root = make_project(deps={"react": "18.3.0"}, dirs=["pages"])
    assert analyze(root).platform == Platform.REACT


def test_directory_shape_wins_over_manifest_name(make_project) -> None:
    root = make_project(deps={"lodash": "4.17.21"}, dirs=["src/components"])
    assert analyze(root).platform == Platform.REACT


def test_auth_library_detected(make_project) -> None:
    context = analyze(make_project(deps={"next": "14.2.0", "next-auth": "4.24.0"}))
    assert context.has_existing_auth


def test_missing_manifest_raises_not_found(make_project) -> None:
    root = make_project(manifest=False)
    with pytest.raises(NoProjectFound) as exc_info:
        analyze(root)
    assert exc_info.value.hint


def test_invalid_manifest_raises(make_project) -> None:
    root = make_project(manifest=False, files={"package.json": "{not json"})
    with pytest.raises(ManifestError):
        analyze(root)


def test_unsupported_framework_raises_with_suggestions(make_project) -> None:
    root = make_project(deps={"vue": "3.4.0"})
    with pytest.raises(UnsupportedPlatform) as exc_info:
        analyze(root)
    detail = exc_info.value.to_detail()
    assert detail["category"] == "Unsupported"
    assert detail["suggestions"]


def test_partial_analysis_never_raises(make_project) -> None:
    root = make_project(manifest=False, files={"package.json": "[]"})
    context = analyze_partial(root)
    assert context.partial
    assert context.platform == Platform.UNKNOWN


def test_integration_fingerprint_active_and_partial(make_project) -> None:
    root = make_project(
        deps={"next": "14.2.0", "@hashgraph/sdk": "^2.40.0"},
        files={
            "lib/hedera/hts.ts": "// token service",
            "lib/hedera/hts-operations.ts": "// operations",
            "lib/hedera/wallet.ts": "// wallet only",
        },
    )
    context = analyze(root)
    assert context.is_active(Capability.TOKEN_SERVICE)
    wallet = context.integration(Capability.WALLET_CONNECT)
    assert wallet is not None and not wallet.active
    assert wallet.files == ("lib/hedera/wallet.ts",)
    assert context.integration(Capability.TOKEN_SERVICE).version == "^2.40.0"

    status = integration_status(context)
    assert status["token-service"].status == "Configured"
    assert status["wallet-connect"].status == "Partially configured"
    assert status["audit-log"].status == "Not configured"
