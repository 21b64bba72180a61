"""Intent classification models."""

from __future__ import annotations

from typing import Literal

from pydantic import BaseModel

from apix.models.context import Capability


class ClassifyIntentRequest(BaseModel):
    requirement: str


class IntentResult(BaseModel):
    capabilities: list[Capability]
    industry: str
    confidence: float
    source: Literal["rules", "claude"] = "rules"
