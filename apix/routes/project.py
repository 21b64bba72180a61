"""Project analysis routes."""

from __future__ import annotations

from fastapi import APIRouter, HTTPException

from apix.errors import ApixError
from apix.models.context import AnalyzeProjectRequest, IntegrationStatus, ProjectContext
from apix.services.analyzer import analyze, integration_status

router = APIRouter()


@router.post("/analyze-project", response_model=ProjectContext)
async def analyze_project(req: AnalyzeProjectRequest) -> ProjectContext:
    """Analyze a project directory and return its context."""
    try:
        return analyze(req.path)
    except ApixError as e:
        raise HTTPException(status_code=e.status_code, detail=e.to_detail()) from e


@router.post("/integration-status", response_model=dict[str, IntegrationStatus])
async def get_integration_status(req: AnalyzeProjectRequest) -> dict[str, IntegrationStatus]:
    """Report which capabilities are configured in a project."""
    try:
        context = analyze(req.path)
    except ApixError as e:
        raise HTTPException(status_code=e.status_code, detail=e.to_detail()) from e
    return integration_status(context)
