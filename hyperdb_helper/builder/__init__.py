"""hyperdb-helper builder module.

Runs the project's own Hyperschema and HyperDB builders under Node.js.

Key classes:
    NodeRunner     - Renders and executes ``.mjs`` scripts with ``node``
    SchemaBuilder  - Schema builder, then database builder, in one process
"""

from .node_runner import NodeRunner, NodeRunnerError, ScriptResult
from .schema_builder import BuildError, BuildResult, SchemaBuilder

__all__ = [
    "NodeRunner",
    "NodeRunnerError",
    "ScriptResult",
    "SchemaBuilder",
    "BuildResult",
    "BuildError",
]
