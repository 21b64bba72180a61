"""Recommendation routes."""

from __future__ import annotations

from fastapi import APIRouter, HTTPException

from apix.errors import ApixError
from apix.models.context import AnalyzeProjectRequest
from apix.models.recommendation import Recommendation
from apix.services.analyzer import analyze
from apix.services.recommender import recommend

router = APIRouter()


@router.post("/recommend", response_model=list[Recommendation])
async def recommend_integrations(req: AnalyzeProjectRequest) -> list[Recommendation]:
    try:
        context = analyze(req.path)
    except ApixError as e:
        raise HTTPException(status_code=e.status_code, detail=e.to_detail()) from e
    return recommend(context)
