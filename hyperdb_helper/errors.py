"""Exception hierarchy shared by every hyperdb-helper module.

The CLI catches :class:`HelperError` and turns it into a red error line and a
non-zero exit code; anything else is a bug and propagates with a traceback.
"""

from __future__ import annotations


class HelperError(Exception):
    """Base class for expected, user-facing failures."""


class ConfigError(HelperError):
    """Raised when the merged configuration is incomplete or invalid."""


class ProjectError(HelperError):
    """Raised when the surrounding Node.js project is not in a usable state."""


class ScaffoldError(HelperError):
    """Raised when scaffolding would overwrite an existing file or directory."""
