"""Plan compiler: capability + options + context -> IntegrationPlan.

Each step is a pure function and can be used on its own:

1. resolve_config        merge options over defaults and validate them
2. select_templates      core template plus platform-specific templates
3. resolve_dependencies  base SDK plus platform-conditional extras
4. build_new_files       deterministic content for the canonical file
5. declare_config_edits  non-destructive patches to package.json and .env.local
"""

from __future__ import annotations

import logging
from typing import Any

from pydantic import ValidationError

from apix.config import Settings
from apix.errors import FieldViolation, InvalidOptions
from apix.models.context import Capability, Platform, ProjectContext
from apix.models.options import CapabilityConfig
from apix.models.plan import ConfigEdit, DependencySpec, IntegrationPlan, NewFile, TemplateBinding
from apix.services.capabilities import (
    CREDENTIAL_ENV,
    EVM_MARKERS,
    EVM_PACKAGE,
    EVM_VERSION,
    SDK_PACKAGE,
    SDK_VERSION,
    CapabilitySpec,
    get_spec,
    pages_router_path,
    resolve_capability,
    uses_pages_router,
)

logger = logging.getLogger(__name__)

ENV_FILE = ".env.local"


def has_evm_dependencies(context: ProjectContext) -> bool:
    return any(marker in name for name in context.dependency_names() for marker in EVM_MARKERS)


def capability_defaults(spec: CapabilitySpec, context: ProjectContext, settings: Settings) -> dict[str, Any]:
    """Defaults that come from settings or the project rather than the model."""
    defaults: dict[str, Any] = {"network": settings.network}
    if spec.capability == Capability.WALLET_CONNECT:
        providers = [settings.default_wallet_provider]
        if context.ui_library == "tailwindcss" or context.platform == Platform.NEXTJS:
            providers.append("blade")
        if has_evm_dependencies(context):
            providers.append("metamask")
        defaults["providers"] = list(dict.fromkeys(providers))
        defaults["default_provider"] = settings.default_wallet_provider
    elif spec.capability == Capability.SMART_CONTRACT:
        defaults["deployment_type"] = "evm" if has_evm_dependencies(context) else "native"
    return defaults


def _default_to_first_provider(values: dict[str, Any], options: dict[str, Any]) -> None:
    """Caller-chosen providers without a default fall back to the first one listed."""
    providers = options.get("providers")
    if options.get("default_provider") is not None:
        return
    if isinstance(providers, list) and providers and values["default_provider"] not in providers:
        values["default_provider"] = providers[0]


def resolve_config(
    spec: CapabilitySpec,
    options: dict[str, Any],
    context: ProjectContext,
    settings: Settings,
) -> CapabilityConfig:
    """Merge options over defaults and validate, reporting every violation."""
    values = capability_defaults(spec, context, settings)
    values.update({k: v for k, v in options.items() if v is not None})
    if spec.capability == Capability.WALLET_CONNECT:
        _default_to_first_provider(values, options)

    model = spec.config_model
    violations: list[FieldViolation] = []
    config = None
    try:
        config = model.model_validate(values)
    except ValidationError as e:
        for error in e.errors():
            field = ".".join(str(part) for part in error["loc"]) or "options"
            violations.append(FieldViolation(field=field, message=error["msg"]))

    # Cross-field rules see coerced values once field validation has passed.
    checked = config.model_dump() if config is not None else values
    violations.extend(model.cross_field_violations(checked))
    if violations or config is None:
        raise InvalidOptions(spec.capability.value, violations)
    return config


def select_templates(spec: CapabilitySpec, context: ProjectContext, config: CapabilityConfig) -> list[TemplateBinding]:
    variables = config.model_dump(mode="json")
    pages_router = uses_pages_router(context)
    if pages_router:
        variables["router"] = "pages"
    refs = [spec.core_template]
    # Platforms without specific templates (unknown included) get the core template only.
    refs.extend(spec.templates_for(context.platform))
    bindings = []
    for ref in refs:
        output_path = ref.output_path
        if ref.route and pages_router:
            output_path = pages_router_path(output_path)
        bindings.append(
            TemplateBinding(template_id=ref.template_id, output_path=output_path, variables=variables)
        )
    return bindings


def resolve_dependencies(spec: CapabilitySpec, context: ProjectContext) -> list[DependencySpec]:
    dependencies = [DependencySpec(name=SDK_PACKAGE, version=SDK_VERSION)]
    if spec.evm_aware and has_evm_dependencies(context):
        dependencies.append(DependencySpec(name=EVM_PACKAGE, version=EVM_VERSION))
    return dependencies


def build_new_files(spec: CapabilitySpec, config: CapabilityConfig) -> list[NewFile]:
    return [NewFile(path=spec.file_path, content=spec.build_file(config))]


def declare_config_edits(spec: CapabilitySpec, dependencies: list[DependencySpec]) -> list[ConfigEdit]:
    edits: list[ConfigEdit] = []
    runtime = {d.name: d.version for d in dependencies if not d.dev}
    dev = {d.name: d.version for d in dependencies if d.dev}
    if runtime:
        edits.append(ConfigEdit(file="package.json", kind="merge-json", key="dependencies", values=runtime))
    if dev:
        edits.append(ConfigEdit(file="package.json", kind="merge-json", key="devDependencies", values=dev))
    env = {key: CREDENTIAL_ENV[key] for key in spec.env_keys}
    if env:
        edits.append(ConfigEdit(file=ENV_FILE, kind="merge-env", values=env))
    return edits


def compile_plan(
    capability: str | Capability,
    options: dict[str, Any] | None,
    context: ProjectContext,
    settings: Settings | None = None,
    force: bool = False,
) -> IntegrationPlan:
    """Compile an integration plan. Raises UnsupportedCapability or InvalidOptions."""
    settings = settings or Settings()
    options = dict(options or {})
    spec = get_spec(resolve_capability(capability))
    logger.info(f"Creating {spec.capability.value} integration plan")

    config = resolve_config(spec, options, context, settings)
    bindings = select_templates(spec, context, config)
    dependencies = resolve_dependencies(spec, context)
    new_files = build_new_files(spec, config)
    if force:
        for item in new_files:
            item.overwrite = True
        for binding in bindings:
            binding.overwrite = True

    plan = IntegrationPlan(
        capability=spec.capability,
        context=context,
        options=options,
        config=config.model_dump(mode="json"),
        template_bindings=bindings,
        new_files=new_files,
        dependencies_to_add=dependencies,
        config_edits=declare_config_edits(spec, dependencies),
        next_steps=list(spec.next_steps),
    )
    logger.debug(
        f"{spec.capability.value} plan: {len(plan.template_bindings)} templates, "
        f"{len(plan.new_files)} files, {len(plan.dependencies_to_add)} dependencies"
    )
    return plan
