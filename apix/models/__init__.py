"""Pydantic data models for the apix pipeline."""

from apix.models.context import (
    AnalyzeProjectRequest,
    Capability,
    Dependency,
    DirectoryShape,
    ExistingIntegration,
    IntegrationStatus,
    Language,
    Platform,
    ProjectContext,
)
from apix.models.integration import AddIntegrationRequest, AddResult
from apix.models.intent import ClassifyIntentRequest, IntentResult
from apix.models.plan import (
    CompilePlanRequest,
    ConfigEdit,
    DependencySpec,
    GenerationResult,
    IntegrationPlan,
    NewFile,
    TemplateBinding,
)
from apix.models.recommendation import Priority, Recommendation
from apix.models.report import (
    CheckResult,
    CheckStatus,
    HealthCheckReport,
    HealthCheckRequest,
    QuickHealthReport,
    ValidationIssue,
    ValidationReport,
)

__all__ = [
    "AddIntegrationRequest",
    "AddResult",
    "AnalyzeProjectRequest",
    "Capability",
    "CheckResult",
    "CheckStatus",
    "ClassifyIntentRequest",
    "CompilePlanRequest",
    "ConfigEdit",
    "Dependency",
    "DependencySpec",
    "DirectoryShape",
    "ExistingIntegration",
    "GenerationResult",
    "HealthCheckReport",
    "HealthCheckRequest",
    "IntegrationPlan",
    "IntegrationStatus",
    "IntentResult",
    "Language",
    "NewFile",
    "Platform",
    "Priority",
    "ProjectContext",
    "QuickHealthReport",
    "Recommendation",
    "TemplateBinding",
    "ValidationIssue",
    "ValidationReport",
]
