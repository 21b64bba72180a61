"""Models for the add-integration flow."""

from __future__ import annotations

from typing import Any, Literal

from pydantic import BaseModel

from apix.models.context import Capability
from apix.models.plan import GenerationResult, IntegrationPlan
from apix.models.report import QuickHealthReport, ValidationReport


class AddIntegrationRequest(BaseModel):
    path: str
    capability: str
    options: dict[str, Any] = {}
    force: bool = False
    dry_run: bool = False


class AddResult(BaseModel):
    capability: Capability
    status: Literal["skipped", "planned", "refused", "generated"]
    message: str
    plan: IntegrationPlan | None = None
    validation: ValidationReport | None = None
    generation: GenerationResult | None = None
    health: QuickHealthReport | None = None
