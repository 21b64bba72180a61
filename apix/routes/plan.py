"""Plan compilation routes."""

from __future__ import annotations

from fastapi import APIRouter, HTTPException
from pydantic import BaseModel

from apix.config import load_settings
from apix.errors import ApixError
from apix.models.plan import CompilePlanRequest, IntegrationPlan
from apix.models.report import ValidationReport
from apix.services.analyzer import analyze
from apix.services.planner import compile_plan
from apix.services.validator import validate

router = APIRouter()


class CompiledPlan(BaseModel):
    """A compiled plan together with its pre-generation validation."""

    plan: IntegrationPlan
    validation: ValidationReport


@router.post("/compile-plan", response_model=CompiledPlan)
async def compile_integration_plan(req: CompilePlanRequest) -> CompiledPlan:
    """Compile and validate a plan without writing anything."""
    try:
        context = analyze(req.path)
        plan = compile_plan(req.capability, req.options, context, settings=load_settings(), force=req.force)
    except ApixError as e:
        raise HTTPException(status_code=e.status_code, detail=e.to_detail()) from e
    return CompiledPlan(plan=plan, validation=validate(context, plan))
