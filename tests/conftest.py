"""Shared test configuration for maintenance-workflows tests.

Provides:
- A shared CallLog for stub actions
- An isolated default registry per test
- A small workspace tree under tmp_path
- Settings cache reset so environment overrides never leak between tests
"""

from collections.abc import Iterator
from pathlib import Path

import pytest
from action_helpers import CallLog

from maintenance_workflows.engine.registry import ActionRegistry, create_default_registry
from maintenance_workflows.settings import get_settings


@pytest.fixture(autouse=True)
def reset_settings_cache() -> Iterator[None]:
    """Clear cached settings before and after every test."""
    get_settings.cache_clear()
    yield
    get_settings.cache_clear()


@pytest.fixture
def call_log() -> CallLog:
    return CallLog()


@pytest.fixture
def registry() -> ActionRegistry:
    """Fresh registry with every built-in action type."""
    return create_default_registry()


@pytest.fixture
def workspace(tmp_path: Path) -> Path:
    """
    Workspace tree used by file system tests.

    Layout:
        workspace/
            existing/
                nested.txt
            notes.txt        ("release notes")
            config.json      ({"app": {"name": "demo", "debug": true}})
            config.yaml      (app.name demo, app.ports [80, 443])
    """
    root = tmp_path / "workspace"
    (root / "existing").mkdir(parents=True)
    (root / "existing" / "nested.txt").write_text("nested", encoding="utf-8")
    (root / "notes.txt").write_text("release notes", encoding="utf-8")
    (root / "config.json").write_text(
        '{"app": {"name": "demo", "debug": true}}', encoding="utf-8"
    )
    (root / "config.yaml").write_text(
        "app:\n  name: demo\n  ports:\n    - 80\n    - 443\n", encoding="utf-8"
    )
    return root
