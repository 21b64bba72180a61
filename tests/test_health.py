"""Tests for the project health auditor."""

import json

from apix.config import Settings
from apix.models.report import CheckStatus, HealthCheckReport, health_score
from apix.services.analyzer import analyze_partial
from apix.services.health import HealthAuditor, audit, read_env_keys

ALL_CHECKS = [
    "project-structure",
    "package-json",
    "dependencies",
    "typescript",
    "hedera-sdk",
    "environment",
    "token-service",
    "wallet-connect",
    "smart-contract",
    "audit-log",
    "account-mgmt",
    "api-routes",
    "typescript-compilation",
    "build-system",
]


def test_typed_project_without_tsconfig_is_critical(make_project, settings) -> None:
    root = make_project(
        deps={"next": "14.2.0", "react": "18.3.0", "react-dom": "18.3.0"},
        dev_deps={"typescript": "^5.4.0"},
    )
    report = audit(analyze_partial(root), settings)
    typescript = report.checks["typescript"]
    assert typescript.status == CheckStatus.FAIL
    assert typescript.fix_suggestion
    assert report.overall == "critical"
    assert report.critical_issues >= 1


def test_checks_run_in_fixed_order(nextjs_project, settings) -> None:
    report = audit(analyze_partial(nextjs_project), settings)
    assert list(report.checks) == ALL_CHECKS


def test_score_and_overall_follow_check_counts(nextjs_project, settings) -> None:
    report = audit(analyze_partial(nextjs_project), settings)
    statuses = [c.status for c in report.checks.values()]
    assert statuses.count(CheckStatus.FAIL) == 1
    assert report.checks["hedera-sdk"].status == CheckStatus.FAIL
    assert statuses.count(CheckStatus.WARN) == 1
    assert report.checks["environment"].status == CheckStatus.WARN
    assert report.score == 89
    assert report.overall == "critical"


def test_health_score_rounds_half_up() -> None:
    assert health_score(0, 0, 0) == 100
    assert health_score(3, 1, 0) == 88
    assert health_score(1, 1, 1) == 50
    assert health_score(2, 1, 0) == 83
    assert health_score(0, 0, 4) == 0


def test_overall_derivation() -> None:
    from apix.models.report import CheckResult

    ok = CheckResult(status=CheckStatus.PASS, message="ok")
    warn = CheckResult(status=CheckStatus.WARN, message="warn")
    assert HealthCheckReport.from_checks({"a": ok}, "t").overall == "healthy"
    assert HealthCheckReport.from_checks({"a": ok, "b": warn}, "t").overall == "issues"


def test_quick_mode_runs_first_four_checks(nextjs_project, settings) -> None:
    quick = HealthAuditor(analyze_partial(nextjs_project), settings).run_quick()
    assert quick.healthy
    assert quick.critical_issues == []


def test_quick_mode_reports_missing_manifest(make_project, settings) -> None:
    root = make_project(manifest=False)
    quick = HealthAuditor(analyze_partial(root), settings).run_quick()
    assert not quick.healthy
    assert quick.critical_issues[0].startswith("project-structure:")


def test_environment_credentials_satisfy_check(nextjs_project, settings) -> None:
    (nextjs_project / ".env.local").write_text("HEDERA_ACCOUNT_ID=0.0.1234\nHEDERA_PRIVATE_KEY=secret\n")
    report = audit(analyze_partial(nextjs_project), settings)
    assert report.checks["environment"].status == CheckStatus.PASS


def test_env_file_without_credentials_warns(nextjs_project, settings) -> None:
    (nextjs_project / ".env").write_text("API_URL=http://localhost\n")
    report = audit(analyze_partial(nextjs_project), settings)
    assert report.checks["environment"].status == CheckStatus.WARN
    assert "credentials" in report.checks["environment"].message


def test_read_env_keys_returns_names_only(tmp_path) -> None:
    env = tmp_path / ".env.local"
    env.write_text("# comment\nexport HEDERA_NETWORK=testnet\nHEDERA_PRIVATE_KEY = abc\nnot a pair\n")
    assert read_env_keys(env) == {"HEDERA_NETWORK", "HEDERA_PRIVATE_KEY"}


def test_partial_capability_warns(nextjs_project, settings) -> None:
    hedera = nextjs_project / "lib" / "hedera"
    hedera.mkdir(parents=True)
    (hedera / "hts.ts").write_text("import { TokenCreateTransaction } from '@hashgraph/sdk';\n")
    report = audit(analyze_partial(nextjs_project), settings)
    check = report.checks["token-service"]
    assert check.status == CheckStatus.WARN
    assert "Missing: lib/hedera/hts-operations.ts" in check.details


def test_complete_capability_missing_markers_warns(nextjs_project, settings) -> None:
    hedera = nextjs_project / "lib" / "hedera"
    hedera.mkdir(parents=True)
    (hedera / "consensus.ts").write_text("export const TopicCreateTransaction = null;\n")
    (hedera / "consensus-client.ts").write_text("export {};\n")
    report = audit(analyze_partial(nextjs_project), settings)
    check = report.checks["audit-log"]
    assert check.status == CheckStatus.WARN
    assert check.details == ["Missing: Message submission"]
    assert report.checks["api-routes"].status == CheckStatus.WARN


def test_missing_local_compiler_warns(nextjs_project) -> None:
    report = audit(analyze_partial(nextjs_project), Settings(run_type_check=True))
    assert report.checks["typescript-compilation"].status == CheckStatus.WARN


def test_disabled_type_check_passes(nextjs_project, settings) -> None:
    report = audit(analyze_partial(nextjs_project), settings)
    assert report.checks["typescript-compilation"].status == CheckStatus.PASS


def test_weak_compiler_options_warn(make_project, settings) -> None:
    root = make_project(
        deps={"react": "18.3.0", "react-dom": "18.3.0"},
        dev_deps={"typescript": "^5.4.0", "@types/node": "^20.0.0"},
        files={"tsconfig.json": json.dumps({"compilerOptions": {}})},
    )
    report = audit(analyze_partial(root), settings)
    assert report.checks["typescript"].status == CheckStatus.WARN
    assert len(report.checks["typescript"].details) == 2


def test_old_sdk_version_warns(make_project, settings) -> None:
    root = make_project(deps={"express": "4.19.0", "@hashgraph/sdk": "^2.20.0"})
    report = audit(analyze_partial(root), settings)
    assert report.checks["hedera-sdk"].status == CheckStatus.WARN


def test_react_without_start_script_warns(make_project, settings) -> None:
    root = make_project(deps={"react": "18.3.0", "react-dom": "18.3.0"}, scripts={"build": "vite build"})
    report = audit(analyze_partial(root), settings)
    assert report.checks["build-system"].status == CheckStatus.WARN


def test_pages_router_routes_satisfy_api_route_check(make_project, settings) -> None:
    root = make_project(
        deps={"next": "14.2.0", "react": "18.3.0"},
        files={
            "next.config.js": "module.exports = {};",
            "lib/hedera/consensus.ts": "export {};\n",
            "lib/hedera/consensus-client.ts": "export {};\n",
            "pages/api/audit.ts": "export default function handler() {}\n",
        },
    )
    report = audit(analyze_partial(root), settings)
    assert report.checks["api-routes"].status == CheckStatus.PASS

    (root / "pages" / "api" / "audit.ts").unlink()
    report = audit(analyze_partial(root), settings)
    check = report.checks["api-routes"]
    assert check.status == CheckStatus.WARN
    assert check.details == ["Missing route: pages/api/audit.ts"]
