"""Tests for the apix command line."""

import json

import pytest

from apix.cli import build_options, build_parser, main


@pytest.fixture(autouse=True)
def quiet_env(monkeypatch):
    monkeypatch.delenv("ANTHROPIC_API_KEY", raising=False)
    monkeypatch.setenv("APIX_TYPE_CHECK", "0")


def test_add_shorthand_options() -> None:
    args = build_parser().parse_args(
        ["add", "wallet", "-p", "blade, hashpack", "--option", "app_name=Shop", "--option", "connection_flow=redirect"]
    )
    assert build_options(args) == {
        "providers": ["blade", "hashpack"],
        "default_provider": "blade",
        "app_name": "Shop",
        "connection_flow": "redirect",
    }


def test_bad_option_pair_is_usage_error() -> None:
    with pytest.raises(SystemExit):
        build_parser().parse_args(["add", "token", "--option", "novalue"])


def test_analyze_json(nextjs_project, capsys) -> None:
    assert main(["analyze", "-d", str(nextjs_project), "--json"]) == 0
    data = json.loads(capsys.readouterr().out)
    assert data["context"]["platform"] == "nextjs"
    assert isinstance(data["recommendations"], list)


def test_add_then_status(nextjs_project, capsys) -> None:
    assert main(["add", "token", "-d", str(nextjs_project), "-n", "Acme", "-s", "ACM"]) == 0
    assert "created  lib/hedera/hts.ts" in capsys.readouterr().out

    assert main(["status", "-d", str(nextjs_project), "--json"]) == 0
    status = json.loads(capsys.readouterr().out)
    assert status["token-service"]["status"] == "Configured"


def test_refused_add_exits_one(nextjs_project, capsys) -> None:
    assert main(["add", "contract", "-d", str(nextjs_project)]) == 1
    assert "MISSING_PREREQUISITE" in capsys.readouterr().out


def test_fatal_error_exits_two(tmp_path, capsys) -> None:
    assert main(["analyze", "-d", str(tmp_path / "nope")]) == 2
    err = capsys.readouterr().err
    assert "No package.json found" in err


def test_invalid_options_exit_two(nextjs_project, capsys) -> None:
    assert main(["add", "token", "-d", str(nextjs_project), "-s", "toolongsymbol"]) == 2
    assert "symbol" in capsys.readouterr().err


def test_string_supply_options_are_cross_checked(nextjs_project, capsys) -> None:
    argv = ["add", "token", "-d", str(nextjs_project), "--option", "initial_supply=20000000", "--option", "max_supply=100"]
    assert main(argv) == 2
    assert "initial_supply" in capsys.readouterr().err


def test_health_exit_codes(nextjs_project, capsys) -> None:
    assert main(["health", "-d", str(nextjs_project), "--quick"]) == 0
    assert main(["health", "-d", str(nextjs_project), "--fix"]) == 1
    out = capsys.readouterr().out
    assert "hedera-sdk" in out
    assert "fix: Run: npm install @hashgraph/sdk" in out


def test_classify_uses_rules_without_key(capsys) -> None:
    assert main(["classify", "loyalty tokens for a bank", "--json"]) == 0
    data = json.loads(capsys.readouterr().out)
    assert data["industry"] == "financial-services"
    assert data["source"] == "rules"
