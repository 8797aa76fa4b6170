"""Database schema directory scaffolding.

Takes a resolved ``HelperConfig`` and writes the starter files of a new
database schema directory:

- ``config.js``, ``functions.js`` and ``schema.js`` in the database config
  directory, plus a ``package.json`` marking it as an ES module directory;
- the (empty) generated code directory with a CommonJS ``package.json``,
  since the builders emit CommonJS;
- with ``examples`` enabled, a runnable ``index.js`` next to the database
  config directory.

Nothing that already exists is overwritten.
"""

from __future__ import annotations

import asyncio
import os
from pathlib import Path
from typing import Any

from ..config import HelperConfig
from ..errors import ConfigError, ScaffoldError
from ..utils import path_exists, save_json
from .templates import TemplateRenderer


# ---------------------------------------------------------------------------
# Example schema content
# ---------------------------------------------------------------------------

EXAMPLE_NAMESPACE = "example"

_POST_FIELDS: list[tuple[str, str]] = [
    ("id", "string"),
    ("type", "string"),
    ("author", "string"),
    ("created", "uint"),
    ("title", "string"),
    ("content", "string"),
]

_AUTHOR_FIELDS: list[tuple[str, str]] = [
    ("id", "string"),
    ("username", "string"),
]

_INDEXES: list[dict[str, Any]] = [
    {"name": "by_title", "collection": "post", "key": "title", "unique": True},
    {"name": "by_type", "collection": "post", "key": "type", "unique": False},
    {"name": "by_author", "collection": "post", "key": "author", "unique": False},
    {"name": "by_username", "collection": "author", "key": "username", "unique": True},
]


# ---------------------------------------------------------------------------
# Scaffolder
# ---------------------------------------------------------------------------


class ProjectScaffolder:
    """Writes the default files of a database schema directory."""

    def __init__(
        self, config: HelperConfig, renderer: TemplateRenderer | None = None
    ) -> None:
        self.config = config
        self.renderer = renderer or TemplateRenderer()

    # -- Public API --------------------------------------------------------

    async def create_default_files(self) -> list[Path]:
        """Create the database config directory and its starter files.

        Returns:
            Every file written, in creation order.

        Raises:
            ScaffoldError: If the database config directory already exists,
                or ``examples`` is enabled and ``index.js`` already exists
                in the project directory.  Both checks run before anything is
                written.
        """
        config = self.config
        database_dir = _required(config.database_config_directory, "databaseConfigDirectory")

        if await path_exists(database_dir):
            raise ScaffoldError(f"Schema directory already exists at {database_dir}")

        index_filepath = config.example_index_filepath
        if config.examples and await path_exists(index_filepath):
            raise ScaffoldError(f"index.js file already exists at {index_filepath}")

        await asyncio.to_thread(database_dir.mkdir, parents=True)

        written = [
            await self.create_config_file(),
            await self.create_functions_file(),
            await self.create_schema_file(),
        ]

        generated_dir = _required(config.generated_code_directory, "generatedCodeDirectory")
        await asyncio.to_thread(generated_dir.mkdir, parents=True, exist_ok=True)

        written.append(await self.create_database_config_package_json())
        written.append(await self.create_generated_package_json())

        if config.examples:
            written.append(await self.create_example_index_file(index_filepath))

        return written

    # -- Individual files --------------------------------------------------

    async def create_config_file(self) -> Path:
        return await self.renderer.render_to_file(
            "basic/config.js.j2",
            _required(self.config.config_filepath, "configFilepath"),
            self._build_context(),
        )

    async def create_functions_file(self) -> Path:
        return await self.renderer.render_to_file(
            f"{self._flavour}/functions.js.j2",
            _required(self.config.functions_filepath, "functionsFilepath"),
            self._build_context(),
        )

    async def create_schema_file(self) -> Path:
        return await self.renderer.render_to_file(
            f"{self._flavour}/schema.js.j2",
            _required(self.config.schema_filepath, "schemaFilepath"),
            self._build_context(),
        )

    async def create_database_config_package_json(self) -> Path:
        """Mark the database config directory as ES modules."""
        return await save_json(
            {"type": "module"},
            _required(self.config.database_config_json_filepath, "databaseConfigJsonFilepath"),
        )

    async def create_generated_package_json(self) -> Path:
        """Point the generated code directory at the database entry point."""
        generated_dir = _required(self.config.generated_code_directory, "generatedCodeDirectory")
        hyperdb_dir = _required(self.config.hyperdb_directory, "hyperdbDirectory")
        main = _relative_posix(hyperdb_dir / "index.js", generated_dir)
        return await save_json(
            {"type": "commonjs", "main": f"./{main}" if not main.startswith(".") else main},
            _required(self.config.generated_package_json_filepath, "generatedPackageJsonFilepath"),
        )

    async def create_example_index_file(self, index_filepath: Path) -> Path:
        """Write a runnable example that inserts and queries a few records."""
        hyperdb_dir = _required(self.config.hyperdb_directory, "hyperdbDirectory")
        context = {
            **self._build_context(),
            "definitions_path": _relative_posix(
                hyperdb_dir / "index.js", self.config.project_directory
            ),
        }
        return await self.renderer.render_to_file(
            "examples/index.js.j2", index_filepath, context
        )

    # -- Context building --------------------------------------------------

    @property
    def _flavour(self) -> str:
        return "examples" if self.config.examples else "basic"

    def _build_context(self) -> dict[str, Any]:
        """Build the Jinja2 template context from the config."""
        return {
            "schema_namespace": EXAMPLE_NAMESPACE,
            "module_type": self.config.module_type or "commonjs",
            "post_fields": _POST_FIELDS,
            "author_fields": _AUTHOR_FIELDS,
            "indexes": _INDEXES,
        }


# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------

def _required(value: Path | None, name: str) -> Path:
    if value is None:
        raise ConfigError(f"{name} is not set")
    return value


def _relative_posix(path: Path, start: Path) -> str:
    """``os.path.relpath`` with forward slashes, as Node.js specifiers expect."""
    return Path(os.path.relpath(path, start)).as_posix()
