"""Check a project's ``package.json`` for the npm packages the build needs."""

from __future__ import annotations

from typing import Any, Optional

# Builders used by ``build`` plus the storage the generated code runs on.
REQUIRED_DEPENDENCIES: tuple[str, ...] = ("hyperschema", "hyperdb", "corestore")


def check_package_dependencies(
    package: Optional[dict[str, Any]],
    required: tuple[str, ...] | list[str] = REQUIRED_DEPENDENCIES,
) -> list[str]:
    """Return the required packages missing from *package*'s ``dependencies``.

    Without a manifest every required package is reported.  Order follows
    *required*.
    """
    if not package:
        return list(required)

    dependencies = package.get("dependencies") or {}
    return [name for name in required if not dependencies.get(name)]


def install_command(packages: list[str]) -> str:
    """Return the npm command that installs *packages*."""
    return "npm install " + " ".join(packages)
