"""hyperdb-helper scaffolder -- writes a new database schema directory.

Quick usage::

    from hyperdb_helper.config import merge_config
    from hyperdb_helper.scaffolder import ProjectScaffolder

    config = await merge_config("./database", examples=True)
    written = await ProjectScaffolder(config).create_default_files()
"""

from hyperdb_helper.scaffolder.generator import ProjectScaffolder
from hyperdb_helper.scaffolder.templates import TemplateRenderer

__all__ = [
    "ProjectScaffolder",
    "TemplateRenderer",
]
