"""Requirement classification routes."""

from __future__ import annotations

from fastapi import APIRouter, HTTPException

from apix.config import load_settings
from apix.models.intent import ClassifyIntentRequest, IntentResult
from apix.services.intent import classify_requirement

router = APIRouter()


@router.post("/classify-intent", response_model=IntentResult)
async def classify_intent(req: ClassifyIntentRequest) -> IntentResult:
    if not req.requirement.strip():
        raise HTTPException(status_code=422, detail="Requirement text must not be empty")
    return await classify_requirement(req.requirement, settings=load_settings())
