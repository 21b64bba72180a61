"""Project context models: an immutable snapshot of a target project."""

from __future__ import annotations

from enum import Enum

from pydantic import BaseModel, ConfigDict


class Platform(str, Enum):
    NEXTJS = "nextjs"
    REACT = "react"
    NODE = "node"
    UNKNOWN = "unknown"


class Language(str, Enum):
    TYPESCRIPT = "typescript"
    JAVASCRIPT = "javascript"


class Capability(str, Enum):
    TOKEN_SERVICE = "token-service"
    WALLET_CONNECT = "wallet-connect"
    SMART_CONTRACT = "smart-contract"
    AUDIT_LOG = "audit-log"
    ACCOUNT_MGMT = "account-mgmt"


class Dependency(BaseModel):
    model_config = ConfigDict(frozen=True)

    name: str
    version: str


class DirectoryShape(BaseModel):
    model_config = ConfigDict(frozen=True)

    has_pages: bool = False
    has_app_router: bool = False
    has_components: bool = False
    has_lib: bool = False
    has_api_routes: bool = False
    has_hooks: bool = False
    has_contexts: bool = False
    has_utils: bool = False
    has_styles: bool = False
    directories: tuple[str, ...] = ()
    config_files: tuple[str, ...] = ()


class ExistingIntegration(BaseModel):
    model_config = ConfigDict(frozen=True)

    type: Capability
    active: bool
    version: str | None = None
    files: tuple[str, ...] = ()


class ProjectContext(BaseModel):
    """Snapshot of a project at one instant. Re-read it after any write."""

    model_config = ConfigDict(frozen=True)

    root_path: str
    platform: Platform = Platform.UNKNOWN
    language: Language = Language.JAVASCRIPT
    package_manager: str = "npm"
    dependencies: tuple[Dependency, ...] = ()
    dev_dependencies: tuple[Dependency, ...] = ()
    scripts: dict[str, str] = {}
    directory_shape: DirectoryShape = DirectoryShape()
    existing_integrations: tuple[ExistingIntegration, ...] = ()
    has_existing_auth: bool = False
    state_management: str | None = None
    ui_library: str | None = None
    partial: bool = False

    @property
    def is_typed(self) -> bool:
        return self.language == Language.TYPESCRIPT

    def all_dependencies(self) -> tuple[Dependency, ...]:
        return self.dependencies + self.dev_dependencies

    def dependency_names(self) -> list[str]:
        return [dep.name.lower() for dep in self.all_dependencies()]

    def declared_version(self, name: str) -> str | None:
        for dep in self.all_dependencies():
            if dep.name == name:
                return dep.version
        return None

    def integration(self, capability: Capability) -> ExistingIntegration | None:
        for existing in self.existing_integrations:
            if existing.type == capability:
                return existing
        return None

    def is_active(self, capability: Capability) -> bool:
        existing = self.integration(capability)
        return existing is not None and existing.active


class AnalyzeProjectRequest(BaseModel):
    path: str


class IntegrationStatus(BaseModel):
    active: bool
    status: str
    files: list[str] = []
