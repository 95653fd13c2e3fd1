from __future__ import annotations

import os
from importlib import metadata
from pathlib import Path

DISTRIBUTION_NAME = "star-beverage-flow"
_DEFAULT_APP_VERSION = "1.0.0"
_VERSION_FILE = Path(__file__).with_name("app_version.txt")


def _version_from_file(path: Path) -> str | None:
    try:
        raw = path.read_text(encoding="utf-8").strip()
    except OSError:
        return None
    return raw or None


def _version_from_metadata() -> str | None:
    try:
        return metadata.version(DISTRIBUTION_NAME)
    except metadata.PackageNotFoundError:
        return None


def get_app_version() -> str:
    """SBF_APP_VERSION, then the bundled version file, then the installed distribution."""
    for candidate in (
        (os.getenv("SBF_APP_VERSION") or "").strip(),
        _version_from_file(_VERSION_FILE),
        _version_from_metadata(),
    ):
        if candidate:
            return candidate
    return _DEFAULT_APP_VERSION


__all__ = ["DISTRIBUTION_NAME", "get_app_version"]
