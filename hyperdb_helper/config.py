"""hyperdb-helper configuration.

The configuration is resolved in three layers, each overriding the previous
one:

1. ``DEFAULT_CONFIG``: the built-in defaults below.
2. The user's ``config.js`` living in the database config directory (its
   default export, keyed in camelCase like every other Node.js config file).
3. Derived values: every path is made absolute relative to the database
   config directory, and the generated sub-directories and package manifests
   are computed from those paths.

All settings use Pydantic v2 models so a half-merged configuration is caught
at construction time instead of deep inside the scaffolder or the builder.
"""

from __future__ import annotations

import json
import os
from collections.abc import Awaitable, Callable
from pathlib import Path
from typing import Any, Literal, Optional

from pydantic import BaseModel, ConfigDict, Field, ValidationError
from pydantic.alias_generators import to_camel

from .errors import ConfigError, HelperError
from .utils import print_warning


DEFAULT_DATABASE_DIRECTORY = "./database"

DEFAULT_CONFIG: dict[str, Any] = {
    "databaseConfigDirectory": DEFAULT_DATABASE_DIRECTORY,
    "generatedCodeDirectory": "./generated",
    "functionsFilepath": "./functions.js",
    "schemaFilepath": "./schema.js",
    "configFilepath": "./config.js",
    "projectPackageJsonFilepath": "./package.json",
}

# Fields that must be populated before anything touches the filesystem.
REQUIRED_FIELDS: tuple[str, ...] = (
    # Core directories
    "database_config_directory",
    "generated_code_directory",
    # Schema sources
    "functions_filepath",
    "schema_filepath",
    "config_filepath",
    # Package manifests
    "project_package_json_filepath",
    "database_config_json_filepath",
    "generated_package_json_filepath",
    # Generated code
    "hyperschema_directory",
    "hyperdb_directory",
    "module_type",
)

ConfigLoader = Callable[[Path], Awaitable[dict[str, Any]]]


class HelperConfig(BaseModel):
    """Fully resolved configuration for one database schema directory.

    Field names are snake_case in Python and camelCase on the JavaScript side
    (``schemaFilepath``, ``generatedCodeDirectory``...); both spellings are
    accepted when constructing the model.  Unknown keys coming from a user
    ``config.js`` are ignored.
    """

    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        extra="ignore",
    )

    database_config_directory: Optional[Path] = None
    generated_code_directory: Optional[Path] = None
    functions_filepath: Optional[Path] = None
    schema_filepath: Optional[Path] = None
    config_filepath: Optional[Path] = None
    project_package_json_filepath: Optional[Path] = None

    # Derived by ``merge_config``
    database_config_json_filepath: Optional[Path] = None
    generated_package_json_filepath: Optional[Path] = None
    hyperschema_directory: Optional[Path] = None
    hyperdb_directory: Optional[Path] = None

    module_type: Optional[Literal["module", "commonjs"]] = None
    examples: bool = False
    package: Optional[dict[str, Any]] = None

    @property
    def project_directory(self) -> Path:
        """Directory holding the database config directory (the Node.js project)."""
        if self.database_config_directory is None:
            raise ConfigError("databaseConfigDirectory is not set")
        return self.database_config_directory.parent

    @property
    def example_index_filepath(self) -> Path:
        """Where ``init --examples`` writes the runnable ``index.js``."""
        return self.project_directory / "index.js"

    def missing_fields(self) -> list[str]:
        """Return the camelCase names of every required field that is empty."""
        return [
            to_camel(name) for name in REQUIRED_FIELDS if not getattr(self, name)
        ]

    def summary(self) -> dict[str, str]:
        """Return a ``{label: value}`` mapping for display tables."""
        return {
            "Database config": str(self.database_config_directory),
            "Schema": str(self.schema_filepath),
            "Functions": str(self.functions_filepath),
            "Generated code": str(self.generated_code_directory),
            "Module type": str(self.module_type),
        }


class RuntimeConfig(BaseModel):
    """How the Node.js toolchain is invoked."""

    node_binary: str = Field(default="node")
    timeout: int = Field(default=120, ge=10, description="Per-script timeout in seconds")

    @classmethod
    def from_env(cls) -> "RuntimeConfig":
        """Build a ``RuntimeConfig`` from environment variables.

        Recognised variables (all optional):
            HYPERDB_HELPER_NODE, HYPERDB_HELPER_TIMEOUT.
        """
        kwargs: dict[str, Any] = {}
        if os.environ.get("HYPERDB_HELPER_NODE"):
            kwargs["node_binary"] = os.environ["HYPERDB_HELPER_NODE"]
        if os.environ.get("HYPERDB_HELPER_TIMEOUT"):
            kwargs["timeout"] = int(os.environ["HYPERDB_HELPER_TIMEOUT"])
        return cls(**kwargs)


# ---------------------------------------------------------------------------
# Path resolution
# ---------------------------------------------------------------------------


def resolve_database_config_directory(
    filepath: str | Path | None, cwd: str | Path
) -> Path:
    """Turn the CLI directory argument into an absolute path.

    Relative paths (including the ``./database`` default) are joined to *cwd*.
    """
    target = Path(filepath or DEFAULT_DATABASE_DIRECTORY)
    if target.is_absolute():
        return target
    return Path(cwd) / target


def resolve_filepath(values: dict[str, Any], key: str, default: str) -> Path:
    """Resolve ``values[key]`` against the database config directory.

    Empty values fall back to *default*; absolute values are kept as they are.

    Raises:
        ConfigError: If the value is not a path string.
    """
    value = values.get(key) or default
    if not isinstance(value, (str, Path)):
        raise ConfigError(f"{key} must be a path string, got {value!r}")
    target = Path(value)
    if target.is_absolute():
        return target
    return Path(values["databaseConfigDirectory"]) / target


def load_package_json(directory: str | Path) -> dict[str, Any] | None:
    """Parse ``<directory>/package.json``, or return ``None`` if it is absent.

    Raises:
        ConfigError: If the manifest exists but is not a JSON object.
    """
    path = Path(directory) / "package.json"
    if not path.is_file():
        return None
    try:
        data = json.loads(path.read_text(encoding="utf-8"))
    except json.JSONDecodeError as exc:
        raise ConfigError(f"Could not parse {path}: {exc}") from exc
    if not isinstance(data, dict):
        raise ConfigError(f"{path} must contain a JSON object")
    return data


# ---------------------------------------------------------------------------
# Merging
# ---------------------------------------------------------------------------


async def merge_config(
    filepath: str | Path | None = None,
    *,
    examples: bool = False,
    cwd: str | Path | None = None,
    loader: ConfigLoader | None = None,
) -> HelperConfig:
    """Merge defaults, the user's ``config.js`` and derived paths.

    Args:
        filepath: Database config directory given on the command line.
            Defaults to ``./database``.
        examples: Whether ``init`` should write the example files.
        cwd: Project directory. Defaults to the process working directory.
        loader: Coroutine returning the default export of a ``config.js``
            file. When omitted, or when loading fails for any reason, the
            user layer is empty.

    Returns:
        A ``HelperConfig`` whose paths are all absolute.
    """
    base = Path(cwd) if cwd else Path.cwd()
    database_config_directory = resolve_database_config_directory(filepath, base)

    user_config: dict[str, Any] = {}
    if loader is not None:
        user_config = await _load_user_config(
            loader, database_config_directory / "config.js"
        )

    values: dict[str, Any] = {
        **DEFAULT_CONFIG,
        **user_config,
        "databaseConfigDirectory": database_config_directory,
    }
    values["examples"] = examples

    values["functionsFilepath"] = resolve_filepath(values, "functionsFilepath", "./functions.js")
    values["schemaFilepath"] = resolve_filepath(values, "schemaFilepath", "./schema.js")
    values["configFilepath"] = resolve_filepath(values, "configFilepath", "./config.js")
    values["projectPackageJsonFilepath"] = resolve_filepath(
        values, "projectPackageJsonFilepath", "./package.json"
    )
    values["databaseConfigJsonFilepath"] = database_config_directory / "package.json"

    generated = resolve_filepath(values, "generatedCodeDirectory", "./generated")
    values["generatedCodeDirectory"] = generated
    values["generatedPackageJsonFilepath"] = generated / "package.json"
    values["hyperschemaDirectory"] = generated / "schemas"
    values["hyperdbDirectory"] = generated / "database"

    package = load_package_json(base)
    values["package"] = package
    values["moduleType"] = (package or {}).get("type") or "commonjs"

    try:
        return HelperConfig.model_validate(values)
    except ValidationError as exc:
        raise ConfigError(f"Invalid configuration:\n{exc}") from exc


def validate_config(config: HelperConfig) -> None:
    """Raise ``ConfigError`` listing every required field that is empty."""
    missing = config.missing_fields()
    if missing:
        listing = "\n".join(f"  - {name}" for name in missing)
        raise ConfigError(f"Missing required config fields:\n{listing}")


async def _load_user_config(loader: ConfigLoader, path: Path) -> dict[str, Any]:
    """Run *loader* on *path*; a missing or broken config yields ``{}``."""
    if not path.is_file():
        return {}
    try:
        loaded = await loader(path)
    except (HelperError, OSError) as exc:
        print_warning(f"Ignoring {path}: {exc}")
        return {}
    return dict(loaded or {})
