"""Integration generation routes."""

from __future__ import annotations

from fastapi import APIRouter, HTTPException

from apix.config import load_settings
from apix.errors import ApixError
from apix.models.integration import AddIntegrationRequest, AddResult
from apix.services.pipeline import add_integration

router = APIRouter()


@router.post("/add-integration", response_model=AddResult)
async def add(req: AddIntegrationRequest) -> AddResult:
    """Run the full add-integration flow against a project."""
    try:
        return add_integration(
            req.path,
            req.capability,
            req.options,
            force=req.force,
            dry_run=req.dry_run,
            settings=load_settings(),
        )
    except ApixError as e:
        raise HTTPException(status_code=e.status_code, detail=e.to_detail()) from e
