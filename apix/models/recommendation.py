"""Recommendation models."""

from __future__ import annotations

from enum import Enum

from pydantic import BaseModel

from apix.models.context import Capability


class Priority(str, Enum):
    HIGH = "high"
    MEDIUM = "medium"
    LOW = "low"

    @property
    def rank(self) -> int:
        return {"high": 3, "medium": 2, "low": 1}[self.value]


class Recommendation(BaseModel):
    capability: Capability
    name: str
    use_case: str
    description: str = ""
    priority: Priority
    rationale: str
    benefits: list[str] = []
    prerequisites: list[str] = []
    estimated_effort: str
    command: str
    incomplete: bool = False
