"""Node.js process management for the Hyperschema / HyperDB toolchain.

The schema and database builders are npm packages installed in the user's
project, so every interaction with them happens in a short-lived ``node``
process.  Scripts are rendered from the ``scripts/`` templates and passed
with ``--eval``; each prints a single JSON object as its last stdout line.
"""

from __future__ import annotations

import asyncio
import json
import time
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any

from rich.console import Console

from ..errors import HelperError
from ..scaffolder.templates import TemplateRenderer

console = Console()

_SCRIPTS_DIR = Path(__file__).parent / "scripts"


@dataclass
class ScriptResult:
    """Structured result of one ``node`` invocation."""

    success: bool
    payload: dict = field(default_factory=dict)
    errors: list[str] = field(default_factory=list)
    duration_seconds: float = 0.0
    stdout: str = ""
    stderr: str = ""
    exit_code: int = -1


class NodeRunnerError(HelperError):
    """Raised when a Node.js script cannot be run or reports a failure."""

    def __init__(self, message: str, result: ScriptResult | None = None):
        self.result = result
        super().__init__(message)


def _parse_script_output(stdout: str) -> dict:
    """Return the last JSON object printed on its own line, or ``{}``.

    User code running inside the script (schema modules, builders) may print
    freely before the final result line.
    """
    for line in reversed(stdout.strip().splitlines()):
        line = line.strip()
        if not line.startswith("{"):
            continue
        try:
            data = json.loads(line)
        except json.JSONDecodeError:
            continue
        if isinstance(data, dict):
            return data
    return {}


def _extract_errors(stderr: str) -> list[str]:
    """Pull meaningful lines out of Node.js stderr."""
    errors: list[str] = []
    for line in stderr.splitlines():
        line = line.strip()
        if not line or line.startswith("at "):
            continue
        errors.append(line)
    return errors


class NodeRunner:
    """Runs rendered ``.mjs`` scripts with the Node.js binary.

    Args:
        node_binary: Path or name of the ``node`` executable.
        timeout_seconds: Maximum time to wait for a script.
        renderer: Renderer for the script templates.
    """

    def __init__(
        self,
        node_binary: str = "node",
        timeout_seconds: float = 120.0,
        renderer: TemplateRenderer | None = None,
    ):
        self.node_binary = node_binary
        self.timeout_seconds = timeout_seconds
        self.renderer = renderer or TemplateRenderer(_SCRIPTS_DIR)

    def render_script(self, name: str, context: dict[str, Any]) -> str:
        """Render ``scripts/<name>.mjs.j2``; paths in *context* become strings."""
        return self.renderer.render(
            f"{name}.mjs.j2",
            {key: str(value) if isinstance(value, Path) else value for key, value in context.items()},
        )

    async def run(self, script: str, cwd: str | Path) -> ScriptResult:
        """Execute *script* as an ES module with *cwd* as working directory.

        Returns:
            ScriptResult; ``success`` requires exit code 0 and a result line
            with ``"ok": true``.

        Raises:
            NodeRunnerError: If the node binary cannot be started at all.
        """
        cmd = [self.node_binary, "--input-type=module", "--eval", script]

        start_time = time.monotonic()
        try:
            process = await asyncio.create_subprocess_exec(
                *cmd,
                stdout=asyncio.subprocess.PIPE,
                stderr=asyncio.subprocess.PIPE,
                cwd=str(cwd),
            )
        except FileNotFoundError:
            raise NodeRunnerError(
                f"Node.js binary not found: '{self.node_binary}'. "
                "Install Node.js or set HYPERDB_HELPER_NODE."
            )
        except PermissionError:
            raise NodeRunnerError(
                f"Permission denied executing: '{self.node_binary}'."
            )

        try:
            stdout_bytes, stderr_bytes = await asyncio.wait_for(
                process.communicate(),
                timeout=self.timeout_seconds,
            )
        except asyncio.TimeoutError:
            elapsed = time.monotonic() - start_time
            console.print(
                f"[red]node timed out after {elapsed:.1f}s. Killing...[/red]"
            )
            process.kill()
            await process.wait()
            return ScriptResult(
                success=False,
                errors=[f"Process timed out after {self.timeout_seconds}s"],
                duration_seconds=elapsed,
            )

        elapsed = time.monotonic() - start_time
        stdout_text = (stdout_bytes or b"").decode("utf-8", errors="replace")
        stderr_text = (stderr_bytes or b"").decode("utf-8", errors="replace")
        exit_code = process.returncode if process.returncode is not None else -1

        payload = _parse_script_output(stdout_text)
        errors = _extract_errors(stderr_text) if exit_code != 0 else []
        if exit_code == 0 and not payload.get("ok"):
            errors.append("Script finished without reporting a result")

        return ScriptResult(
            success=exit_code == 0 and bool(payload.get("ok")),
            payload=payload,
            errors=errors,
            duration_seconds=elapsed,
            stdout=stdout_text,
            stderr=stderr_text,
            exit_code=exit_code,
        )

    async def load_config(self, config_filepath: Path, cwd: str | Path) -> dict[str, Any]:
        """Import a ``config.js`` and return its default export.

        Raises:
            NodeRunnerError: If the module cannot be imported.
        """
        script = self.render_script("load_config", {"config_filepath": config_filepath})
        result = await self.run(script, cwd)
        if not result.success:
            detail = result.errors[0] if result.errors else f"exit code {result.exit_code}"
            raise NodeRunnerError(f"Could not load {config_filepath}: {detail}", result=result)
        config = result.payload.get("config")
        return config if isinstance(config, dict) else {}

    async def check_available(self) -> bool:
        """Return ``True`` if the node binary can be executed."""
        try:
            process = await asyncio.create_subprocess_exec(
                self.node_binary, "--version",
                stdout=asyncio.subprocess.PIPE,
                stderr=asyncio.subprocess.PIPE,
            )
            stdout_bytes, _ = await asyncio.wait_for(
                process.communicate(), timeout=10.0
            )
        except (FileNotFoundError, PermissionError, asyncio.TimeoutError):
            return False
        version = stdout_bytes.decode("utf-8", errors="replace").strip()
        return process.returncode == 0 and version.startswith("v")
