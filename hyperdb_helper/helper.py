"""High-level ``init`` / ``build`` / ``cleanup`` operations.

``HyperdbHelper`` ties the config resolver, the scaffolder, the dependency
checker and the schema builder together; the CLI is a thin layer on top.
"""

from __future__ import annotations

import asyncio
import shutil
import textwrap
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Optional

from .builder import BuildResult, NodeRunner, SchemaBuilder
from .config import HelperConfig, RuntimeConfig, merge_config, validate_config
from .dependencies import REQUIRED_DEPENDENCIES, check_package_dependencies
from .errors import ProjectError
from .scaffolder import ProjectScaffolder
from .utils import path_exists, print_warning


@dataclass
class InitResult:
    """Outcome of ``init``."""

    dependencies_needed: list[str] = field(default_factory=list)
    files_written: list[Path] = field(default_factory=list)


class HyperdbHelper:
    """Initialise and build HyperDB databases from schema files.

    Example::

        helper = HyperdbHelper()
        result = await helper.init("./database", examples=True)
        if result.dependencies_needed:
            print("Please install:", " ".join(result.dependencies_needed))
        await helper.build("./database")
    """

    def __init__(
        self,
        runtime: RuntimeConfig | None = None,
        *,
        cwd: str | Path | None = None,
        runner: NodeRunner | None = None,
    ) -> None:
        self.runtime = runtime or RuntimeConfig.from_env()
        self.cwd = Path(cwd) if cwd else Path.cwd()
        self.runner = runner or NodeRunner(
            node_binary=self.runtime.node_binary,
            timeout_seconds=float(self.runtime.timeout),
        )
        self.builder = SchemaBuilder(self.runner)
        self.required_dependencies: list[str] = list(REQUIRED_DEPENDENCIES)
        self.config: Optional[HelperConfig] = None

    # -- Public API --------------------------------------------------------

    async def init(self, filepath: str | Path | None = None, *, examples: bool = False) -> InitResult:
        """Create a new database schema directory.

        Args:
            filepath: Database config directory (default ``./database``).
            examples: Write the example schema, functions and ``index.js``.

        Raises:
            ConfigError: If the merged configuration is incomplete.
            ProjectError: If the project has no ``package.json``.
            ScaffoldError: If the target directory or ``index.js`` exists.
        """
        self.config = await self.merge_config(filepath, examples=examples)
        validate_config(self.config)

        if not await path_exists(self.cwd / "package.json"):
            raise ProjectError(textwrap.dedent("""\
                package.json not found in project directory

                Please first create a package.json file in your project directory
                and choose either "module" or "commonjs" as the "type" field.

                You can create a package.json file by running:

                  npm init"""))

        files_written = await ProjectScaffolder(self.config).create_default_files()
        return InitResult(
            dependencies_needed=self.check_package_dependencies(),
            files_written=files_written,
        )

    async def build(self, filepath: str | Path | None = None) -> BuildResult:
        """Generate schema and database code from the schema directory.

        Raises:
            ProjectError: If the schema directory or schema file is missing.
            BuildError: If the builders fail.
        """
        self.config = await self.merge_config(filepath)
        config = self.config

        if not await path_exists(config.database_config_directory):
            raise ProjectError(textwrap.dedent(f"""\
                Database directory not found at {config.database_config_directory}
                Run 'hyperdb-helper init' to create a new schema directory"""))

        if not await path_exists(config.schema_filepath):
            raise ProjectError(f"Schema file not found at {config.schema_filepath}")

        return await self.builder.build(config, self.cwd)

    async def cleanup(self, filepath: str | Path | None = None) -> Optional[Path]:
        """Remove the generated code directory.

        Failures are reported as a warning rather than raised.

        Returns:
            The removed directory, or ``None`` if nothing was removed.
        """
        self.config = await self.merge_config(filepath)
        target = self.config.generated_code_directory
        if target is None or not await path_exists(target):
            return None
        try:
            await asyncio.to_thread(shutil.rmtree, target)
        except OSError as exc:
            print_warning(f"Cleanup failed: {exc}")
            return None
        return target

    # -- Helpers -----------------------------------------------------------

    async def merge_config(
        self, filepath: str | Path | None = None, *, examples: bool = False
    ) -> HelperConfig:
        """Resolve the configuration, loading ``config.js`` through Node.js."""
        return await merge_config(
            filepath, examples=examples, cwd=self.cwd, loader=self._load_user_config
        )

    def check_package_dependencies(self) -> list[str]:
        """Return required npm packages missing from the project manifest."""
        package = self.config.package if self.config else None
        return check_package_dependencies(package, self.required_dependencies)

    async def _load_user_config(self, config_filepath: Path) -> dict[str, Any]:
        return await self.runner.load_config(config_filepath, cwd=self.cwd)
