"""Natural-language requirement classification.

Claude is asked first when an API key is configured; keyword rules answer
otherwise, and whenever the Claude call fails or returns nothing usable.
"""

from __future__ import annotations

import json
import logging

from apix.config import Settings
from apix.errors import UnsupportedCapability
from apix.models.context import Capability, ProjectContext
from apix.models.intent import IntentResult
from apix.services.capabilities import resolve_capability
from apix.services.claude_client import get_claude_client
from apix.services.rules import all_matches, first_match

logger = logging.getLogger(__name__)

DEFAULT_INDUSTRY = "technology"

INDUSTRY_RULES = [
    (("pharmaceutical", "drug", "fda"), "pharmaceutical"),
    (("financial", "payment", "bank"), "financial-services"),
    (("healthcare", "patient", "hipaa"), "healthcare"),
    (("supply chain", "manufacturing"), "manufacturing"),
]

CAPABILITY_RULES = [
    (("token", "asset", "loyalty", "reward"), Capability.TOKEN_SERVICE),
    (("audit", "trail", "compliance"), Capability.AUDIT_LOG),
    (("contract", "automation"), Capability.SMART_CONTRACT),
    (("wallet", "sign in", "login"), Capability.WALLET_CONNECT),
    (("account", "onboard"), Capability.ACCOUNT_MGMT),
]

DEFAULT_CAPABILITIES = [Capability.TOKEN_SERVICE, Capability.AUDIT_LOG]

PROMPT = """Classify this business requirement for a Hedera integration.

Requirement: "{requirement}"

Available capabilities: {capabilities}

Respond ONLY in JSON format:
{{
  "capabilities": ["capability-name", ...],
  "industry": "one lowercase word or hyphenated phrase",
  "confidence": 0.0
}}"""


def classify_with_rules(requirement: str) -> IntentResult:
    corpus = [requirement.lower()]
    industry = first_match(INDUSTRY_RULES, corpus, default=DEFAULT_INDUSTRY)
    capabilities = all_matches(CAPABILITY_RULES, corpus)
    if not capabilities:
        return IntentResult(
            capabilities=list(DEFAULT_CAPABILITIES), industry=industry, confidence=0.5
        )
    return IntentResult(capabilities=capabilities, industry=industry, confidence=0.8)


def parse_claude_answer(text: str) -> IntentResult | None:
    data = json.loads(text)
    capabilities = []
    for tag in data.get("capabilities", []):
        try:
            capability = resolve_capability(str(tag))
        except UnsupportedCapability:
            logger.debug(f"Ignoring unknown capability from Claude: {tag}")
            continue
        if capability not in capabilities:
            capabilities.append(capability)
    if not capabilities:
        return None
    confidence = min(max(float(data.get("confidence", 0.8)), 0.0), 1.0)
    return IntentResult(
        capabilities=capabilities,
        industry=str(data.get("industry") or DEFAULT_INDUSTRY),
        confidence=confidence,
        source="claude",
    )


async def classify_requirement(
    requirement: str,
    context: ProjectContext | None = None,
    settings: Settings | None = None,
) -> IntentResult:
    """Classify a requirement into capabilities and an industry label.

    With a context, capabilities already active in the project are dropped
    unless that would leave nothing.
    """
    result = None
    claude = get_claude_client(settings)
    if claude:
        prompt = PROMPT.format(
            requirement=requirement,
            capabilities=", ".join(c.value for c in Capability),
        )
        try:
            result = parse_claude_answer(await claude.analyze(prompt))
        except Exception as e:
            logger.error(f"Claude classification failed, using keyword rules: {e}")
    if result is None:
        result = classify_with_rules(requirement)

    if context is not None:
        remaining = [c for c in result.capabilities if not context.is_active(c)]
        if remaining:
            result = result.model_copy(update={"capabilities": remaining})
    logger.debug(f"Classified requirement as {[c.value for c in result.capabilities]} ({result.source})")
    return result
