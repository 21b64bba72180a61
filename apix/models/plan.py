"""Integration plan models and the generation manifest."""

from __future__ import annotations

from typing import Any, Literal

from pydantic import BaseModel

from apix.models.context import Capability, ProjectContext


class TemplateBinding(BaseModel):
    template_id: str
    output_path: str
    variables: dict[str, Any] = {}
    overwrite: bool = False


class NewFile(BaseModel):
    path: str
    content: str
    overwrite: bool = False


class DependencySpec(BaseModel):
    name: str
    version: str
    dev: bool = False


class ConfigEdit(BaseModel):
    """Declarative patch to an existing configuration file.

    merge-json: add missing entries of ``values`` to the object at ``key``.
    merge-env: append ``KEY=value`` lines for keys not already defined.
    """

    file: str
    kind: Literal["merge-json", "merge-env"]
    key: str | None = None
    values: dict[str, str] = {}


class IntegrationPlan(BaseModel):
    capability: Capability
    context: ProjectContext
    options: dict[str, Any] = {}
    config: dict[str, Any] = {}
    template_bindings: list[TemplateBinding] = []
    new_files: list[NewFile] = []
    dependencies_to_add: list[DependencySpec] = []
    config_edits: list[ConfigEdit] = []
    next_steps: list[str] = []

    def output_paths(self) -> list[str]:
        return [f.path for f in self.new_files] + [b.output_path for b in self.template_bindings]


class CompilePlanRequest(BaseModel):
    path: str
    capability: str
    options: dict[str, Any] = {}
    force: bool = False


class GenerationResult(BaseModel):
    generated_files: list[str] = []
    skipped_files: list[str] = []
    installed_dependencies: list[str] = []
    modified_files: list[str] = []
    next_steps: list[str] = []
