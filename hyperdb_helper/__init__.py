"""hyperdb-helper -- scaffold and build HyperDB databases from schema files.

Key classes:
    HyperdbHelper    - ``init`` / ``build`` / ``cleanup`` operations
    HelperConfig     - Resolved configuration for one schema directory
    ProjectScaffolder - Writes the starter files of a schema directory
    SchemaBuilder    - Runs the Hyperschema and HyperDB builders
"""

from .builder import BuildError, BuildResult, NodeRunner, NodeRunnerError, SchemaBuilder
from .config import HelperConfig, RuntimeConfig, merge_config, validate_config
from .errors import ConfigError, HelperError, ProjectError, ScaffoldError
from .helper import HyperdbHelper, InitResult
from .scaffolder import ProjectScaffolder, TemplateRenderer

__version__ = "0.1.0"

__all__ = [
    "HyperdbHelper",
    "InitResult",
    "HelperConfig",
    "RuntimeConfig",
    "merge_config",
    "validate_config",
    "ProjectScaffolder",
    "TemplateRenderer",
    "NodeRunner",
    "NodeRunnerError",
    "SchemaBuilder",
    "BuildResult",
    "BuildError",
    "HelperError",
    "ConfigError",
    "ProjectError",
    "ScaffoldError",
]
