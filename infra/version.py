from __future__ import annotations

import os
from importlib import metadata

DIST_NAME = "criticality-lite"
_FALLBACK_VERSION = "0.0.0+local"


def get_app_version() -> str:
    """Version stamped into support events: CPL_APP_VERSION, installed metadata, then a local marker."""
    env_override = (os.getenv("CPL_APP_VERSION") or "").strip()
    if env_override:
        return env_override
    try:
        return metadata.version(DIST_NAME)
    except metadata.PackageNotFoundError:
        return _FALLBACK_VERSION


__all__ = ["DIST_NAME", "get_app_version"]
