# infra/path.py
from __future__ import annotations
import os
import sys
from pathlib import Path

APP_NAME = "StarBeverageFlow"
COMPANY_NAME = "StarBeverage"


def user_data_dir() -> Path:
    """
    Per-user data directory for logs and support events, e.g.:

    Windows:
        C:\\Users\\<User>\\AppData\\Roaming\\StarBeverage\\StarBeverageFlow

    macOS:
        ~/Library/Application Support/StarBeverage/StarBeverageFlow

    Linux:
        ~/.local/share/StarBeverage/StarBeverageFlow

    `SBF_DATA_DIR` overrides the location.
    """
    override = (os.getenv("SBF_DATA_DIR") or "").strip()
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
        fallback = Path.home() / f".{APP_NAME}"
        fallback.mkdir(parents=True, exist_ok=True)
        return fallback
