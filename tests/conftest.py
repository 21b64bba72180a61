"""Shared fixtures: throwaway JavaScript projects under tmp_path."""

from __future__ import annotations

import json
from pathlib import Path

import pytest

from apix.config import Settings


@pytest.fixture
def make_project(tmp_path: Path):
    """Build a project directory from a manifest description.

    ``files`` maps relative paths to text content; ``dirs`` lists empty
    directories to create. Pass ``manifest=False`` to skip package.json.
    """

    def _make(
        deps: dict[str, str] | None = None,
        dev_deps: dict[str, str] | None = None,
        scripts: dict[str, str] | None = None,
        files: dict[str, str] | None = None,
        dirs: list[str] | None = None,
        name: str = "demo-app",
        manifest: bool = True,
    ) -> Path:
        root = tmp_path / "project"
        root.mkdir(exist_ok=True)
        if manifest:
            data = {
                "name": name,
                "version": "1.0.0",
                "scripts": scripts if scripts is not None else {"dev": "next dev", "build": "next build", "start": "next start"},
                "dependencies": deps or {},
            }
            if dev_deps:
                data["devDependencies"] = dev_deps
            (root / "package.json").write_text(json.dumps(data, indent=2), encoding="utf-8")
        for rel_path, content in (files or {}).items():
            target = root / rel_path
            target.parent.mkdir(parents=True, exist_ok=True)
            target.write_text(content, encoding="utf-8")
        for rel_dir in dirs or []:
            (root / rel_dir).mkdir(parents=True, exist_ok=True)
        return root

    return _make


@pytest.fixture
def nextjs_project(make_project):
    return make_project(
        deps={"next": "14.2.0", "react": "18.3.0", "react-dom": "18.3.0"},
        dev_deps={"typescript": "^5.4.0", "@types/node": "^20.0.0"},
        files={
            "next.config.js": "module.exports = {};\n",
            "tsconfig.json": json.dumps({"compilerOptions": {"strict": True, "esModuleInterop": True}}),
        },
        dirs=["app", "components", "lib", "src"],
    )


@pytest.fixture
def settings() -> Settings:
    return Settings(run_type_check=False)
