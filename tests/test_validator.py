"""Tests for pre-generation plan validation."""

from apix.errors import ErrorCategory
from apix.models.context import Capability, Dependency, ExistingIntegration, Platform, ProjectContext
from apix.models.plan import IntegrationPlan, NewFile, TemplateBinding
from apix.services.content import header
from apix.services.planner import compile_plan
from apix.services.validator import parse_version, validate


def _context(root: str = "/tmp/demo", deps: dict[str, str] | None = None, integrations=()) -> ProjectContext:
    return ProjectContext(
        root_path=root,
        platform=Platform.NEXTJS,
        dependencies=tuple(Dependency(name=n, version=v) for n, v in (deps or {}).items()),
        existing_integrations=tuple(integrations),
    )


def test_duplicate_new_files_produce_one_conflict() -> None:
    context = _context()
    plan = IntegrationPlan(
        capability=Capability.TOKEN_SERVICE,
        context=context,
        new_files=[NewFile(path="lib/a.ts", content="a"), NewFile(path="lib/a.ts", content="b")],
    )
    report = validate(context, plan)
    assert not report.passed
    assert len(report.errors) == 1
    error = report.errors[0]
    assert error.code == "DUPLICATE_OUTPUT_PATH"
    assert error.category == ErrorCategory.CONFLICT
    assert "new_files[0]" in error.subjects and "new_files[1]" in error.subjects


def test_duplicate_across_files_and_bindings() -> None:
    context = _context()
    plan = IntegrationPlan(
        capability=Capability.TOKEN_SERVICE,
        context=context,
        new_files=[NewFile(path="lib/hedera/hts-operations.ts", content="x")],
        template_bindings=[
            TemplateBinding(template_id="utils/common/hts-operations", output_path="lib/hedera/hts-operations.ts")
        ],
    )
    report = validate(context, plan)
    assert report.errors[0].subjects[1:] == ["new_files[0]", "template_bindings[0]"]


def test_clean_plan_passes() -> None:
    context = _context()
    report = validate(context, compile_plan("token-service", {}, context))
    assert report.passed
    assert report.errors == []


def test_major_version_mismatch_is_conflict() -> None:
    context = _context(deps={"@hashgraph/sdk": "^1.4.0"})
    report = validate(context, compile_plan("token-service", {}, context))
    assert [e.code for e in report.errors] == ["DEPENDENCY_VERSION_CONFLICT"]


def test_older_minor_version_is_warning() -> None:
    context = _context(deps={"@hashgraph/sdk": "^2.30.0"})
    report = validate(context, compile_plan("token-service", {}, context))
    assert report.passed
    assert [w.code for w in report.warnings] == ["DEPENDENCY_VERSION_OUTDATED"]


def test_unparseable_version_is_warning() -> None:
    context = _context(deps={"@hashgraph/sdk": "latest"})
    report = validate(context, compile_plan("token-service", {}, context))
    assert report.passed
    assert [w.code for w in report.warnings] == ["DEPENDENCY_VERSION_UNPARSEABLE"]


def test_contract_requires_account_management() -> None:
    context = _context()
    report = validate(context, compile_plan("contract", {}, context))
    missing = [e for e in report.errors if e.code == "MISSING_PREREQUISITE"]
    assert len(missing) == 1
    assert missing[0].category == ErrorCategory.NOT_FOUND
    assert "not installed" in missing[0].message


def test_incomplete_prerequisite_is_named() -> None:
    partial = ExistingIntegration(type=Capability.ACCOUNT_MGMT, active=False, files=("lib/hedera/accounts.ts",))
    context = _context(integrations=[partial])
    report = validate(context, compile_plan("contract", {}, context))
    assert "incomplete" in report.errors[0].message


def test_active_prerequisite_passes() -> None:
    active = ExistingIntegration(type=Capability.ACCOUNT_MGMT, active=True)
    context = _context(integrations=[active])
    assert validate(context, compile_plan("contract", {}, context)).passed


def test_unknown_template_is_error() -> None:
    context = _context()
    plan = IntegrationPlan(
        capability=Capability.AUDIT_LOG,
        context=context,
        template_bindings=[TemplateBinding(template_id="nope/missing", output_path="x.ts")],
    )
    assert [e.code for e in validate(context, plan).errors] == ["UNKNOWN_TEMPLATE"]


def test_existing_output_is_warning_not_error(tmp_path) -> None:
    (tmp_path / "lib" / "hedera").mkdir(parents=True)
    (tmp_path / "lib" / "hedera" / "hts.ts").write_text(header("token-service") + "export {};\n")
    context = _context(root=str(tmp_path))
    report = validate(context, compile_plan("token-service", {}, context))
    assert report.passed
    exists = [w for w in report.warnings if w.code == "OUTPUT_PATH_EXISTS"]
    assert exists[0].subjects == ["lib/hedera/hts.ts"]
    assert "apix" in exists[0].message


def test_parse_version() -> None:
    assert parse_version("^2.40.0") == (2, 40)
    assert parse_version("~3") == (3, 0)
    assert parse_version("latest") is None
