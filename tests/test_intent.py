"""Tests for requirement classification."""

import asyncio
import json

from apix.models.context import Capability, ExistingIntegration, ProjectContext
from apix.services import intent
from apix.services.intent import classify_requirement, classify_with_rules, parse_claude_answer


class FakeClaude:
    def __init__(self, answer: str | Exception):
        self.answer = answer
        self.prompts = []

    async def analyze(self, prompt: str) -> str:
        self.prompts.append(prompt)
        if isinstance(self.answer, Exception):
            raise self.answer
        return self.answer


def test_rules_pick_industry_and_capabilities() -> None:
    result = classify_with_rules("Payment tokens with a compliance audit trail for our bank")
    assert result.industry == "financial-services"
    assert result.capabilities == [Capability.TOKEN_SERVICE, Capability.AUDIT_LOG]
    assert result.confidence == 0.8
    assert result.source == "rules"


def test_rules_default_without_matches() -> None:
    result = classify_with_rules("Something vague")
    assert result.industry == "technology"
    assert result.capabilities == [Capability.TOKEN_SERVICE, Capability.AUDIT_LOG]
    assert result.confidence == 0.5


def test_no_api_key_falls_back_to_rules(monkeypatch) -> None:
    monkeypatch.setattr(intent, "get_claude_client", lambda settings=None: None)
    result = asyncio.run(classify_requirement("Track patient consent with smart contract automation"))
    assert result.source == "rules"
    assert result.industry == "healthcare"
    assert result.capabilities == [Capability.SMART_CONTRACT]


def test_claude_answer_is_filtered_to_known_capabilities(monkeypatch) -> None:
    answer = json.dumps({"capabilities": ["hts", "teleport", "wallet-connect"], "industry": "retail", "confidence": 0.9})
    fake = FakeClaude(answer)
    monkeypatch.setattr(intent, "get_claude_client", lambda settings=None: fake)
    result = asyncio.run(classify_requirement("Rewards for shoppers"))
    assert result.source == "claude"
    assert result.capabilities == [Capability.TOKEN_SERVICE, Capability.WALLET_CONNECT]
    assert result.industry == "retail"
    assert "Rewards for shoppers" in fake.prompts[0]


def test_claude_error_falls_back_to_rules(monkeypatch) -> None:
    monkeypatch.setattr(intent, "get_claude_client", lambda settings=None: FakeClaude(RuntimeError("boom")))
    result = asyncio.run(classify_requirement("supply chain asset tracking"))
    assert result.source == "rules"
    assert result.industry == "manufacturing"


def test_unusable_claude_answer_falls_back(monkeypatch) -> None:
    monkeypatch.setattr(intent, "get_claude_client", lambda settings=None: FakeClaude("not json"))
    assert asyncio.run(classify_requirement("loyalty points")).source == "rules"
    assert parse_claude_answer(json.dumps({"capabilities": ["teleport"]})) is None


def test_active_capabilities_are_dropped(monkeypatch) -> None:
    monkeypatch.setattr(intent, "get_claude_client", lambda settings=None: None)
    context = ProjectContext(
        root_path="/tmp/demo",
        existing_integrations=(ExistingIntegration(type=Capability.TOKEN_SERVICE, active=True),),
    )
    result = asyncio.run(classify_requirement("token audit", context=context))
    assert result.capabilities == [Capability.AUDIT_LOG]
