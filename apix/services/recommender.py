"""Recommendation engine: ranks the capabilities a project could adopt.

``recommend`` is a pure function of the context. Candidates are evaluated in
the fixed order of ``CANDIDATES``; the final list is a stable sort on
priority, so equal priorities keep that order.
"""

from __future__ import annotations

import logging
from collections.abc import Callable
from dataclasses import dataclass

from apix.models.context import Capability, Platform, ProjectContext
from apix.models.recommendation import Priority, Recommendation
from apix.services.capabilities import REGISTRY
from apix.services.rules import Rule, first_match

logger = logging.getLogger(__name__)

INTERACTIVE = "interactive"
SERVER = "server"
CLI = "cli"

CLI_PACKAGES = ("commander", "yargs")

HIGH, MEDIUM, LOW = Priority.HIGH, Priority.MEDIUM, Priority.LOW

# Priority tables map (use case, platform class) -> priority. The "*" use case
# applies to any label; None suppresses the candidate.
PriorityTable = dict[tuple[str, str], Priority | None]


@dataclass(frozen=True)
class Candidate:
    capability: Capability
    use_case_rules: list[Rule]
    default_use_case: str | None
    priorities: PriorityTable
    describe: Callable[[str], str]
    benefits: tuple[str, ...]
    prerequisites: tuple[str, ...]
    estimated_effort: str
    command: str


def platform_class(context: ProjectContext) -> str:
    if context.platform in (Platform.NEXTJS, Platform.REACT, Platform.UNKNOWN):
        return INTERACTIVE
    names = context.dependency_names()
    if any(name in CLI_PACKAGES for name in names):
        return CLI
    if context.directory_shape.has_pages:
        return INTERACTIVE
    return SERVER


CANDIDATES: list[Candidate] = [
    Candidate(
        capability=Capability.TOKEN_SERVICE,
        use_case_rules=[
            (("ecommerce", "shop"), "Loyalty System"),
            (("game", "nft"), "Gaming Tokens"),
            (("dao", "governance"), "Governance Token"),
        ],
        default_use_case="Utility Token",
        priorities={("Loyalty System", "*"): HIGH, ("*", "*"): MEDIUM},
        describe=lambda use_case: f"Add native token functionality for {use_case.lower()}",
        benefits=(
            "Native token creation and management",
            "Low-cost transactions",
            "Built-in compliance features",
            "Enterprise-grade security",
        ),
        prerequisites=("Hedera testnet account", "Basic understanding of token economics"),
        estimated_effort="2-5 minutes",
        command="hts",
    ),
    Candidate(
        capability=Capability.WALLET_CONNECT,
        use_case_rules=[(("ethers", "web3", "metamask"), "EVM Wallet Bridge")],
        default_use_case="Native Wallet",
        priorities={
            ("EVM Wallet Bridge", INTERACTIVE): HIGH,
            ("*", INTERACTIVE): MEDIUM,
            ("*", SERVER): None,
            ("*", CLI): None,
        },
        describe=lambda use_case: f"Connect users with Hedera wallets ({use_case.lower()})",
        benefits=(
            "Seamless user authentication",
            "Transaction signing capabilities",
            "Multi-wallet support",
        ),
        prerequisites=("HTTPS in production", "Web3 wallet users"),
        estimated_effort="1-3 minutes",
        command="wallet",
    ),
    Candidate(
        capability=Capability.SMART_CONTRACT,
        use_case_rules=[
            (("marketplace", "auction"), "Marketplace"),
            (("dao", "governance"), "DAO"),
            (("nft", "collectible"), "NFT Collection"),
            (("defi", "swap"), "DeFi Protocol"),
        ],
        default_use_case=None,
        priorities={("*", CLI): LOW, ("*", "*"): MEDIUM},
        describe=lambda use_case: f"Deploy a {use_case.lower()} smart contract",
        benefits=(
            "Automated business logic",
            "Trustless operations",
            "EVM compatibility option",
        ),
        prerequisites=("Smart contract knowledge", "Account management integration"),
        estimated_effort="5-15 minutes",
        command="contract",
    ),
    Candidate(
        capability=Capability.AUDIT_LOG,
        # Substring match over dependency names. A weak signal with many false
        # negatives; kept as a placeholder until the project exposes a better one.
        use_case_rules=[(("audit", "log", "tracking", "compliance"), "Audit Trail")],
        default_use_case=None,
        priorities={("*", SERVER): MEDIUM, ("*", "*"): LOW},
        describe=lambda use_case: "Add immutable logging and audit trails",
        benefits=(
            "Immutable message ordering",
            "Audit trail capabilities",
            "Regulatory compliance",
        ),
        prerequisites=("Message structuring plan",),
        estimated_effort="3-8 minutes",
        command="consensus",
    ),
    Candidate(
        capability=Capability.ACCOUNT_MGMT,
        use_case_rules=[
            (("next-auth", "auth0", "firebase", "supabase", "clerk"), "Linked User Accounts"),
        ],
        default_use_case="Operator Account",
        priorities={("Linked User Accounts", "*"): MEDIUM, ("*", "*"): LOW},
        describe=lambda use_case: f"Create and manage Hedera accounts ({use_case.lower()})",
        benefits=(
            "Programmatic account creation",
            "Balance queries",
            "Automatic token associations",
        ),
        prerequisites=("Hedera operator account",),
        estimated_effort="1-3 minutes",
        command="account",
    ),
]


def lookup_priority(table: PriorityTable, use_case: str, klass: str) -> Priority | None:
    for key in ((use_case, klass), (use_case, "*"), ("*", klass), ("*", "*")):
        if key in table:
            return table[key]
    return None


def evaluate(candidate: Candidate, context: ProjectContext) -> Recommendation | None:
    existing = context.integration(candidate.capability)
    if existing is not None and existing.active:
        return None

    use_case = first_match(
        candidate.use_case_rules, context.dependency_names(), default=candidate.default_use_case
    )
    if use_case is None:
        return None

    klass = platform_class(context)
    priority = lookup_priority(candidate.priorities, use_case, klass)
    if priority is None:
        return None

    incomplete = existing is not None
    title = REGISTRY[candidate.capability].title
    rationale = f"Detected use case '{use_case}' for a {klass} {context.platform.value} project"
    if incomplete:
        rationale += "; a partial installation was found and will be completed"

    return Recommendation(
        capability=candidate.capability,
        name=f"{title} ({use_case})",
        use_case=use_case,
        description=candidate.describe(use_case),
        priority=priority,
        rationale=rationale,
        benefits=list(candidate.benefits),
        prerequisites=list(candidate.prerequisites),
        estimated_effort=candidate.estimated_effort,
        command=candidate.command,
        incomplete=incomplete,
    )


def recommend(context: ProjectContext) -> list[Recommendation]:
    """Return recommendations ordered by priority, then candidate order."""
    recommendations: list[Recommendation] = []
    for candidate in CANDIDATES:
        try:
            recommendation = evaluate(candidate, context)
        except Exception as e:
            # Recommendation is total: a broken rule drops its candidate only.
            logger.error(f"Recommendation rule for {candidate.capability.value} failed: {e}")
            continue
        if recommendation is not None:
            recommendations.append(recommendation)

    recommendations.sort(key=lambda r: r.priority.rank, reverse=True)
    logger.debug(f"Generated {len(recommendations)} recommendations")
    return recommendations
