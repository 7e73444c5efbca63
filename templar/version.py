from __future__ import annotations

from importlib import metadata


def tool_version() -> str:
    """Installed package version, or 0.0.0 when running from a source tree."""
    for dist in ("templar-parse", "templar"):
        try:
            return metadata.version(dist)
        except metadata.PackageNotFoundError:
            continue
    return "0.0.0"


__all__ = ["tool_version"]
