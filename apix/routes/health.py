"""Project health routes.

Audits read projects leniently, so a missing or broken manifest shows up as
failed checks instead of an HTTP error.
"""

from __future__ import annotations

from fastapi import APIRouter

from apix.config import load_settings
from apix.models.report import HealthCheckReport, HealthCheckRequest, QuickHealthReport
from apix.services.analyzer import analyze_partial
from apix.services.health import HealthAuditor

router = APIRouter()


def _auditor(req: HealthCheckRequest) -> HealthAuditor:
    settings = load_settings()
    if req.skip_type_check:
        settings = settings.model_copy(update={"run_type_check": False})
    return HealthAuditor(analyze_partial(req.path), settings)


@router.post("/health-check", response_model=HealthCheckReport)
async def health_check(req: HealthCheckRequest) -> HealthCheckReport:
    return _auditor(req).run()


@router.post("/quick-health-check", response_model=QuickHealthReport)
async def quick_health_check(req: HealthCheckRequest) -> QuickHealthReport:
    return _auditor(req).run_quick()
