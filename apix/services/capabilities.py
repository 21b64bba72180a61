"""Capability registry: capability tag -> plan-building specification.

The table is checked exhaustively when this module is imported, so a
capability without a builder (or a builder pointing at an unregistered
template) fails at startup instead of inside the compiler.
"""

from __future__ import annotations

from collections.abc import Callable
from dataclasses import dataclass, field

from apix.errors import UnsupportedCapability
from apix.models.context import Capability, Platform, ProjectContext
from apix.models.options import (
    AccountConfig,
    AuditLogConfig,
    CapabilityConfig,
    ContractConfig,
    TokenConfig,
    WalletConfig,
)
from apix.services import content
from apix.services.templates import has_template

SDK_PACKAGE = "@hashgraph/sdk"
SDK_VERSION = "^2.40.0"
SDK_MIN_VERSION = (2, 40)

EVM_PACKAGE = "ethers"
EVM_VERSION = "^6.13.0"
EVM_MARKERS = ("ethers", "web3", "hardhat", "viem")

CREDENTIAL_ENV = {
    "HEDERA_NETWORK": "testnet",
    "HEDERA_ACCOUNT_ID": "0.0.0",
    "HEDERA_PRIVATE_KEY": "replace-with-your-private-key",
}


@dataclass(frozen=True)
class TemplateRef:
    template_id: str
    output_path: str
    route: bool = False


@dataclass(frozen=True)
class CapabilitySpec:
    capability: Capability
    title: str
    config_model: type[CapabilityConfig]
    file_path: str
    build_file: Callable[..., str]
    core_template: TemplateRef
    platform_templates: dict[Platform, tuple[TemplateRef, ...]] = field(default_factory=dict)
    content_markers: tuple[tuple[str, str], ...] = ()
    prerequisites: tuple[Capability, ...] = ()
    evm_aware: bool = False
    env_keys: tuple[str, ...] = tuple(CREDENTIAL_ENV)
    next_steps: tuple[str, ...] = ()

    @property
    def fingerprint(self) -> tuple[str, ...]:
        """Paths that exist after every successful install on any platform."""
        return (self.file_path, self.core_template.output_path)

    def templates_for(self, platform: Platform) -> tuple[TemplateRef, ...]:
        return self.platform_templates.get(platform, ())

    def route_paths(self, platform: Platform, pages_router: bool = False) -> list[str]:
        paths = [t.output_path for t in self.templates_for(platform) if t.route]
        return [pages_router_path(p) for p in paths] if pages_router else paths


def uses_pages_router(context: ProjectContext) -> bool:
    """Next.js projects with a pages/ directory and no app/ directory."""
    shape = context.directory_shape
    return context.platform == Platform.NEXTJS and shape.has_pages and not shape.has_app_router


def pages_router_path(output_path: str) -> str:
    """Map an app router handler path to its pages router equivalent.

    app/api/tokens/create/route.ts becomes pages/api/tokens/create.ts.
    """
    if not output_path.startswith("app/api/"):
        return output_path
    route = output_path.removeprefix("app/").removesuffix("/route.ts")
    return f"pages/{route}.ts"


_TOKEN_MANAGER = TemplateRef("components/react/TokenManager", "components/TokenManager.tsx")
_WALLET_UI = (
    TemplateRef("contexts/react/WalletContext", "contexts/WalletContext.tsx"),
    TemplateRef("components/react/WalletConnectionModal", "components/WalletConnectionModal.tsx"),
    TemplateRef("components/react/WalletConnect", "components/WalletConnect.tsx"),
)

REGISTRY: dict[Capability, CapabilitySpec] = {
    Capability.TOKEN_SERVICE: CapabilitySpec(
        capability=Capability.TOKEN_SERVICE,
        title="Hedera Token Service",
        config_model=TokenConfig,
        file_path="lib/hedera/hts.ts",
        build_file=content.token_service_file,
        core_template=TemplateRef("utils/common/hts-operations", "lib/hedera/hts-operations.ts"),
        platform_templates={
            Platform.NEXTJS: (
                TemplateRef("api/nextjs/tokens/create", "app/api/tokens/create/route.ts", route=True),
                TemplateRef("api/nextjs/tokens/info", "app/api/tokens/info/route.ts", route=True),
                TemplateRef("api/nextjs/tokens/mint", "app/api/tokens/mint/route.ts", route=True),
                TemplateRef("api/nextjs/tokens/transfer", "app/api/tokens/transfer/route.ts", route=True),
                _TOKEN_MANAGER,
            ),
            Platform.REACT: (
                TemplateRef("hooks/react/useTokenOperations", "hooks/useTokenOperations.ts"),
                _TOKEN_MANAGER,
            ),
            Platform.NODE: (TemplateRef("scripts/node/create-token", "scripts/create-token.ts"),),
        },
        content_markers=(
            ("@hashgraph/sdk", "Hedera SDK import"),
            ("TokenCreateTransaction", "Token creation functionality"),
            ("TokenMintTransaction", "Token minting functionality"),
            ("TransferTransaction", "Token transfer functionality"),
        ),
        next_steps=(
            "Import HTSManager from lib/hedera/hts.ts",
            "Create your token with createToken() from lib/hedera/hts-operations.ts",
        ),
    ),
    Capability.WALLET_CONNECT: CapabilitySpec(
        capability=Capability.WALLET_CONNECT,
        title="Wallet Integration",
        config_model=WalletConfig,
        file_path="lib/hedera/wallet.ts",
        build_file=content.wallet_connect_file,
        core_template=TemplateRef("utils/common/wallet-service", "lib/hedera/wallet-service.ts"),
        platform_templates={Platform.NEXTJS: _WALLET_UI, Platform.REACT: _WALLET_UI},
        content_markers=(
            ("connectWallet", "Wallet connection"),
            ("disconnectWallet", "Wallet disconnection"),
        ),
        evm_aware=True,
        env_keys=("HEDERA_NETWORK",),
        next_steps=(
            "Wrap your app with WalletContextProvider",
            "Render the WalletConnect component where users sign in",
        ),
    ),
    Capability.SMART_CONTRACT: CapabilitySpec(
        capability=Capability.SMART_CONTRACT,
        title="Smart Contract Integration",
        config_model=ContractConfig,
        file_path="scripts/deploy-contract.ts",
        build_file=content.smart_contract_file,
        core_template=TemplateRef("utils/common/contract-interaction", "lib/hedera/contracts.ts"),
        platform_templates={
            Platform.NEXTJS: (
                TemplateRef("api/nextjs/contracts/deploy", "app/api/contracts/deploy/route.ts", route=True),
            ),
            Platform.REACT: (TemplateRef("hooks/react/useContract", "hooks/useContract.ts"),),
        },
        content_markers=(
            ("@hashgraph/sdk", "Hedera SDK import"),
            ("ContractCreateFlow", "Contract deployment"),
        ),
        prerequisites=(Capability.ACCOUNT_MGMT,),
        evm_aware=True,
        next_steps=(
            "Compile your contract and pass its bytecode to deployContract()",
            "Call deployed functions through lib/hedera/contracts.ts",
        ),
    ),
    Capability.AUDIT_LOG: CapabilitySpec(
        capability=Capability.AUDIT_LOG,
        title="Consensus Service (HCS)",
        config_model=AuditLogConfig,
        file_path="lib/hedera/consensus.ts",
        build_file=content.audit_log_file,
        core_template=TemplateRef("utils/common/consensus-client", "lib/hedera/consensus-client.ts"),
        platform_templates={
            Platform.NEXTJS: (TemplateRef("api/nextjs/audit", "app/api/audit/route.ts", route=True),),
            Platform.REACT: (TemplateRef("hooks/react/useAuditLog", "hooks/useAuditLog.ts"),),
            Platform.NODE: (TemplateRef("server/node/audit-middleware", "lib/hedera/audit-middleware.ts"),),
        },
        content_markers=(
            ("TopicCreateTransaction", "Topic creation"),
            ("TopicMessageSubmitTransaction", "Message submission"),
        ),
        next_steps=(
            "Create the audit topic once with createAuditTopic()",
            "Record events with recordAuditEvent()",
        ),
    ),
    Capability.ACCOUNT_MGMT: CapabilitySpec(
        capability=Capability.ACCOUNT_MGMT,
        title="Account Management",
        config_model=AccountConfig,
        file_path="lib/hedera/accounts.ts",
        build_file=content.account_mgmt_file,
        core_template=TemplateRef("utils/common/account-client", "lib/hedera/account-client.ts"),
        platform_templates={
            Platform.NEXTJS: (
                TemplateRef("api/nextjs/accounts", "app/api/accounts/route.ts", route=True),
                TemplateRef("components/react/AccountManager", "components/AccountManager.tsx"),
            ),
            Platform.REACT: (TemplateRef("components/react/AccountManager", "components/AccountManager.tsx"),),
            Platform.NODE: (TemplateRef("scripts/node/create-account", "scripts/create-account.ts"),),
        },
        content_markers=(
            ("AccountCreateTransaction", "Account creation"),
            ("AccountBalanceQuery", "Balance query"),
        ),
        next_steps=("Create accounts with withAccountManager() from lib/hedera/account-client.ts",),
    ),
}

ALIASES: dict[str, Capability] = {
    "hts": Capability.TOKEN_SERVICE,
    "token": Capability.TOKEN_SERVICE,
    "wallet": Capability.WALLET_CONNECT,
    "contract": Capability.SMART_CONTRACT,
    "consensus": Capability.AUDIT_LOG,
    "hcs": Capability.AUDIT_LOG,
    "audit": Capability.AUDIT_LOG,
    "account": Capability.ACCOUNT_MGMT,
}


def supported_tags() -> list[str]:
    return [c.value for c in Capability] + sorted(ALIASES)


def resolve_capability(tag: str | Capability) -> Capability:
    if isinstance(tag, Capability):
        return tag
    normalized = tag.strip().lower()
    if normalized in ALIASES:
        return ALIASES[normalized]
    try:
        return Capability(normalized)
    except ValueError:
        raise UnsupportedCapability(tag, supported_tags()) from None


def get_spec(capability: str | Capability) -> CapabilitySpec:
    return REGISTRY[resolve_capability(capability)]


def _validate_registry() -> None:
    missing = [c.value for c in Capability if c not in REGISTRY]
    if missing:
        raise RuntimeError(f"Capabilities without a plan builder: {missing}")

    for capability, spec in REGISTRY.items():
        if spec.capability != capability:
            raise RuntimeError(f"Registry entry {capability.value} describes {spec.capability.value}")
        refs = [spec.core_template] + [t for ts in spec.platform_templates.values() for t in ts]
        unknown = [t.template_id for t in refs if not has_template(t.template_id)]
        if unknown:
            raise RuntimeError(f"{capability.value} references unregistered templates: {unknown}")
        for prerequisite in spec.prerequisites:
            if prerequisite not in REGISTRY or prerequisite == capability:
                raise RuntimeError(f"{capability.value} has an invalid prerequisite: {prerequisite}")


_validate_registry()
