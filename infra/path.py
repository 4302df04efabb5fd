# infra/path.py
from __future__ import annotations
import os
import sys
from pathlib import Path

APP_NAME = "CriticalityLite"
COMPANY_NAME = "TECHASH"


def user_data_dir() -> Path:
    """
    Returns a per-user data directory, e.g.:

    Windows:
        C:\\Users\\<User>\\AppData\\Roaming\\TECHASH\\CriticalityLite

    macOS:
        ~/Library/Application Support/TECHASH/CriticalityLite

    Linux:
        ~/.local/share/TECHASH/CriticalityLite

    CPL_DATA_DIR overrides the location (used by tests and portable installs).
    """
    override = (os.getenv("CPL_DATA_DIR") or "").strip()
    try:
        if override:
            path = Path(override)
        else:
            if sys.platform.startswith("win"):
                base = Path(os.getenv("APPDATA", Path.home() / "AppData" / "Roaming"))
            elif sys.platform == "darwin":
                base = Path.home() / "Library" / "Application Support"
            else:
                base = Path(os.getenv("XDG_DATA_HOME", Path.home() / ".local" / "share"))
            path = base / COMPANY_NAME / APP_NAME
        path.mkdir(parents=True, exist_ok=True)
        return path
    except OSError:
        # Last-resort fallback: use home directory
        fallback = Path.home() / f".{APP_NAME}"
        fallback.mkdir(parents=True, exist_ok=True)
        return fallback


def logs_dir() -> Path:
    return user_data_dir() / "logs"


def default_settings_path() -> Path:
    """INI file backing the persisted analysis configuration."""
    return user_data_dir() / "analysis_settings.ini"
