"""Generation service: writes an integration plan into a project."""

from __future__ import annotations

import json
import logging
from pathlib import Path
from typing import Protocol

from apix.models.plan import ConfigEdit, GenerationResult, IntegrationPlan
from apix.services.health import read_env_keys
from apix.services.templates import render_template

logger = logging.getLogger(__name__)

INSTALL_COMMANDS = {
    "npm": "npm install",
    "yarn": "yarn install",
    "pnpm": "pnpm install",
}


class Generator(Protocol):
    def generate(self, plan: IntegrationPlan) -> GenerationResult: ...


class FileSystemGenerator:
    """Apply a plan to the project directory recorded in its context.

    Existing files are only replaced when the plan entry sets ``overwrite``.
    Configuration edits add missing keys and never change existing values.
    """

    def generate(self, plan: IntegrationPlan) -> GenerationResult:
        root = Path(plan.context.root_path)
        result = GenerationResult()

        outputs = [
            (b.output_path, render_template(b.template_id, b.variables), b.overwrite)
            for b in plan.template_bindings
        ]
        outputs += [(f.path, f.content, f.overwrite) for f in plan.new_files]

        for rel_path, content, overwrite in outputs:
            target = root / rel_path
            if target.exists() and not overwrite:
                logger.debug(f"Keeping existing {rel_path}")
                result.skipped_files.append(rel_path)
                continue
            target.parent.mkdir(parents=True, exist_ok=True)
            target.write_text(content, encoding="utf-8")
            result.generated_files.append(rel_path)

        for edit in plan.config_edits:
            if self._apply_edit(root, edit) and edit.file not in result.modified_files:
                result.modified_files.append(edit.file)

        result.installed_dependencies = [f"{d.name}@{d.version}" for d in plan.dependencies_to_add]
        result.next_steps = self._next_steps(plan)

        logger.info(
            f"Generated {len(result.generated_files)} files for {plan.capability.value} "
            f"({len(result.skipped_files)} kept, {len(result.modified_files)} config files updated)"
        )
        return result

    def _apply_edit(self, root: Path, edit: ConfigEdit) -> bool:
        target = root / edit.file
        if edit.kind == "merge-json":
            return merge_json(target, edit.key, edit.values)
        return merge_env(target, edit.values)

    def _next_steps(self, plan: IntegrationPlan) -> list[str]:
        steps = []
        if plan.dependencies_to_add:
            install = INSTALL_COMMANDS.get(plan.context.package_manager, "npm install")
            steps.append(f"Run {install} to install {', '.join(d.name for d in plan.dependencies_to_add)}")
        if any(e.kind == "merge-env" for e in plan.config_edits):
            steps.append("Fill in your Hedera credentials in .env.local")
        steps.extend(plan.next_steps)
        steps.append("Verify the integration with: apix health")
        return steps


def merge_json(path: Path, key: str | None, values: dict[str, str]) -> bool:
    """Add missing entries to the object at ``key``. Returns True when written."""
    data = json.loads(path.read_text(encoding="utf-8")) if path.exists() else {}
    section = data.setdefault(key, {}) if key else data
    if not isinstance(section, dict):
        logger.warning(f"{path.name}: '{key}' is not an object, leaving it unchanged")
        return False

    added = [name for name in values if name not in section]
    if not added:
        return False
    for name in added:
        section[name] = values[name]
    path.write_text(json.dumps(data, indent=2) + "\n", encoding="utf-8")
    logger.debug(f"Added {', '.join(added)} to {path.name}")
    return True


def merge_env(path: Path, values: dict[str, str]) -> bool:
    """Append ``KEY=value`` lines for keys not already defined."""
    existing = read_env_keys(path) if path.exists() else set()
    missing = [key for key in values if key not in existing]
    if not missing:
        return False

    text = path.read_text(encoding="utf-8") if path.exists() else ""
    if text and not text.endswith("\n"):
        text += "\n"
    if not text:
        text = "# Hedera credentials\n"
    text += "".join(f"{key}={values[key]}\n" for key in missing)
    path.write_text(text, encoding="utf-8")
    return True
