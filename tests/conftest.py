"""Shared pytest fixtures for the hyperdb-helper test suite.

Provides reusable fixtures for:
- Temporary Node.js project directories (with or without ``package.json``)
- A ``NodeRunner`` whose ``load_config`` and ``run`` are mocked
- Mock ``node`` subprocess helpers
"""

from __future__ import annotations

import json
from pathlib import Path
from typing import Any
from unittest.mock import AsyncMock, MagicMock, patch

import pytest

from hyperdb_helper.builder import NodeRunner, ScriptResult


# ---------------------------------------------------------------------------
# Project directories
# ---------------------------------------------------------------------------

def write_package_json(directory: Path, **fields: Any) -> Path:
    """Write a ``package.json`` with *fields* into *directory*."""
    manifest = {"name": "example", "version": "1.0.0", **fields}
    path = directory / "package.json"
    path.write_text(json.dumps(manifest, indent=2), encoding="utf-8")
    return path


@pytest.fixture
def empty_project(tmp_path: Path) -> Path:
    """Project directory without a ``package.json``."""
    project_dir = tmp_path / "empty-project"
    project_dir.mkdir()
    yield project_dir


@pytest.fixture
def node_project(tmp_path: Path) -> Path:
    """ES module project with no dependencies installed yet."""
    project_dir = tmp_path / "node-project"
    project_dir.mkdir()
    write_package_json(project_dir, type="module")
    yield project_dir


@pytest.fixture
def commonjs_project(tmp_path: Path) -> Path:
    """CommonJS project (no ``type`` field) with every required dependency."""
    project_dir = tmp_path / "cjs-project"
    project_dir.mkdir()
    write_package_json(
        project_dir,
        dependencies={
            "hyperschema": "^1.0.0",
            "hyperdb": "^4.0.0",
            "corestore": "^7.0.0",
        },
    )
    yield project_dir


# ---------------------------------------------------------------------------
# Mock node
# ---------------------------------------------------------------------------

@pytest.fixture
def fake_runner() -> NodeRunner:
    """``NodeRunner`` with ``load_config`` and ``run`` replaced by AsyncMocks.

    ``load_config`` returns ``{}``; ``run`` returns a successful build result.
    Tests override ``return_value`` / ``side_effect`` as needed.
    """
    runner = NodeRunner()
    runner.load_config = AsyncMock(return_value={})
    runner.run = AsyncMock(
        return_value=ScriptResult(
            success=True,
            payload={"ok": True},
            duration_seconds=0.4,
            stdout='{"ok": true}\n',
            exit_code=0,
        )
    )
    return runner


def make_node_process(
    stdout: str = '{"ok": true}\n', stderr: str = "", returncode: int = 0
) -> AsyncMock:
    """Build a mock ``asyncio.subprocess.Process``."""
    process = AsyncMock()
    process.communicate = AsyncMock(
        return_value=(stdout.encode("utf-8"), stderr.encode("utf-8"))
    )
    process.returncode = returncode
    process.kill = MagicMock()
    process.wait = AsyncMock(return_value=returncode)
    return process


@pytest.fixture
def mock_node():
    """Patch ``asyncio.create_subprocess_exec`` with a successful ``node``.

    Usage:
        def test_something(mock_node):
            with mock_node as spawn:
                ...
                spawn.assert_called_once()
    """
    process = make_node_process()

    async def mock_create_subprocess(*args: Any, **kwargs: Any) -> AsyncMock:
        return process

    return patch(
        "asyncio.create_subprocess_exec",
        side_effect=mock_create_subprocess,
    )
