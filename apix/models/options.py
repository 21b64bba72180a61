"""Per-capability configuration models.

User options are merged over these defaults and validated here. Field-level
rules live on the models; rules that span several fields are reported by
``cross_field_violations`` so they can be collected alongside field errors.
"""

from __future__ import annotations

import re
from typing import Literal

from pydantic import BaseModel, ConfigDict, Field, field_validator

from apix.errors import FieldViolation

SYMBOL_PATTERN = re.compile(r"[A-Z0-9]*")
IDENTIFIER_PATTERN = re.compile(r"[A-Za-z_][A-Za-z0-9_]*")

WALLET_PROVIDERS = ("hashpack", "blade", "metamask", "walletconnect")

Network = Literal["testnet", "mainnet", "previewnet"]


class CapabilityConfig(BaseModel):
    model_config = ConfigDict(extra="forbid", populate_by_name=True)

    network: Network = "testnet"

    @classmethod
    def cross_field_violations(cls, values: dict) -> list[FieldViolation]:
        return []


class TokenConfig(CapabilityConfig):
    name: str = Field(default="MyToken", min_length=1, max_length=100)
    symbol: str = "MTK"
    decimals: int = Field(default=8, ge=0, le=18)
    initial_supply: int = Field(default=1_000_000, ge=0)
    supply_type: Literal["finite", "infinite"] = "finite"
    max_supply: int = Field(default=10_000_000, ge=1)
    admin_key: bool = True
    supply_key: bool = True

    @field_validator("symbol")
    @classmethod
    def _check_symbol(cls, value: str) -> str:
        problems = []
        if not 1 <= len(value) <= 8:
            problems.append("must be 1-8 characters long")
        if not SYMBOL_PATTERN.fullmatch(value):
            problems.append("may only contain uppercase letters A-Z and digits 0-9")
        if problems:
            raise ValueError("; ".join(problems))
        return value

    @classmethod
    def cross_field_violations(cls, values: dict) -> list[FieldViolation]:
        supply = values.get("initial_supply")
        maximum = values.get("max_supply")
        if (
            values.get("supply_type", "finite") == "finite"
            and isinstance(supply, int)
            and isinstance(maximum, int)
            and supply > maximum
        ):
            return [
                FieldViolation(
                    field="initial_supply",
                    message=f"initial_supply ({supply}) exceeds max_supply ({maximum}) for a finite token",
                )
            ]
        return []


class WalletConfig(CapabilityConfig):
    providers: list[str] = ["hashpack"]
    default_provider: str = "hashpack"
    connection_flow: Literal["modal", "redirect"] = "modal"
    app_name: str = Field(default="My Hedera dApp", min_length=1, max_length=100)

    @field_validator("providers")
    @classmethod
    def _check_providers(cls, value: list[str]) -> list[str]:
        if not value:
            raise ValueError("at least one wallet provider is required")
        unknown = [p for p in value if p not in WALLET_PROVIDERS]
        if unknown:
            raise ValueError(
                f"unknown providers {unknown}; choose from {', '.join(WALLET_PROVIDERS)}"
            )
        return value

    @classmethod
    def cross_field_violations(cls, values: dict) -> list[FieldViolation]:
        providers = values.get("providers")
        default = values.get("default_provider")
        if isinstance(providers, list) and default not in providers:
            return [
                FieldViolation(
                    field="default_provider",
                    message=f"default_provider '{default}' is not one of the selected providers",
                )
            ]
        return []


class ContractConfig(CapabilityConfig):
    name: str = "MyContract"
    contract_type: Literal["simple-token", "marketplace", "dao", "nft-collection", "custom"] = Field(
        default="simple-token", alias="type"
    )
    gas: int = Field(default=300_000, ge=21_000, le=15_000_000)
    deployment_type: Literal["native", "evm"] = "native"

    @field_validator("name")
    @classmethod
    def _check_name(cls, value: str) -> str:
        if not IDENTIFIER_PATTERN.fullmatch(value):
            raise ValueError("must be a valid identifier (letters, digits, underscore)")
        return value


class AuditLogConfig(CapabilityConfig):
    name: str = Field(default="AuditTopic", min_length=1, max_length=100)
    memo: str = Field(default="apix audit trail", max_length=100)
    submit_key: bool = True


class AccountConfig(CapabilityConfig):
    initial_balance: int = Field(default=1000, ge=0)
    max_auto_associations: int = Field(default=10, ge=0, le=5000)
