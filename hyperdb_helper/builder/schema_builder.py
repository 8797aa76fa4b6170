"""Runs the two external code generators against a schema module.

The user's ``schema.js`` exports ``createSchema(hyperschema)`` and
``createDatabase(hyperdb)``.  Building means, in order:

1. ``Hyperschema.from(<generated>/schemas)``, ``createSchema``,
   ``Hyperschema.toDisk``;
2. ``HyperDB.from(<generated>/schemas, <generated>/database)``,
   ``createDatabase``, ``HyperDB.toDisk``.

Both steps run inside one ``node`` process so the second sees what the first
wrote.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from pathlib import Path
from typing import Optional

from ..config import HelperConfig
from ..errors import ConfigError, HelperError
from .node_runner import NodeRunner, ScriptResult


@dataclass
class BuildResult:
    """Outcome of one ``build`` run."""

    success: bool
    hyperschema_directory: Optional[Path] = None
    hyperdb_directory: Optional[Path] = None
    errors: list[str] = field(default_factory=list)
    duration_seconds: float = 0.0
    stdout: str = ""
    stderr: str = ""

    def summary(self) -> str:
        """Return a human-readable summary of the result."""
        status = "[green]SUCCESS[/green]" if self.success else "[red]FAILED[/red]"
        lines = [
            f"Status: {status}",
            f"Duration: {self.duration_seconds:.1f}s",
            f"Schemas: {self.hyperschema_directory}",
            f"Database: {self.hyperdb_directory}",
        ]
        if self.errors:
            lines.append(f"Errors: {len(self.errors)}")
            for err in self.errors[:5]:
                lines.append(f"  - {err[:200]}")
        return "\n".join(lines)


class BuildError(HelperError):
    """Raised when code generation fails."""

    def __init__(self, message: str, result: BuildResult | None = None):
        self.result = result
        super().__init__(message)


class SchemaBuilder:
    """Drives Hyperschema and HyperDB through a :class:`NodeRunner`."""

    def __init__(self, runner: NodeRunner | None = None) -> None:
        self.runner = runner or NodeRunner()

    async def build(self, config: HelperConfig, project_directory: Path) -> BuildResult:
        """Generate schema and database code for *config*.

        Args:
            config: Resolved configuration.
            project_directory: Node.js project whose ``node_modules`` provide
                the builders.

        Raises:
            BuildError: If the node process fails or reports no result.
        """
        if config.schema_filepath is None or config.hyperschema_directory is None or config.hyperdb_directory is None:
            raise ConfigError("Configuration has not been merged; schema paths are missing")

        script = self.runner.render_script(
            "build",
            {
                "schema_filepath": config.schema_filepath,
                "hyperschema_directory": config.hyperschema_directory,
                "hyperdb_directory": config.hyperdb_directory,
                "project_package_json": Path(project_directory) / "package.json",
            },
        )
        script_result = await self.runner.run(script, project_directory)
        result = _to_build_result(config, script_result)

        if not result.success:
            detail = "\n".join(result.errors[:5]) or f"node exited with code {script_result.exit_code}"
            raise BuildError(f"Build failed for {config.schema_filepath}:\n{detail}", result=result)
        return result


def _to_build_result(config: HelperConfig, script_result: ScriptResult) -> BuildResult:
    return BuildResult(
        success=script_result.success,
        hyperschema_directory=config.hyperschema_directory,
        hyperdb_directory=config.hyperdb_directory,
        errors=list(script_result.errors),
        duration_seconds=script_result.duration_seconds,
        stdout=script_result.stdout,
        stderr=script_result.stderr,
    )
