from __future__ import annotations

import os
import sys
from pathlib import Path

from PySide6.QtCore import QStandardPaths


APP_NAME = "Daydream"
CONFIG_FILE_NAME = "config.json"


def get_base_dir() -> Path:
    """
    Return the read-only project directory holding the bundled ``config/``.

    ``DAYDREAM_BASE_DIR`` overrides it; otherwise it is the repository root.
    """
    env_base = os.environ.get("DAYDREAM_BASE_DIR", "").strip()
    if env_base:
        return Path(env_base)

    return Path(__file__).resolve().parents[2]


def get_user_data_dir() -> Path:
    location = QStandardPaths.writableLocation(QStandardPaths.StandardLocation.AppDataLocation)
    if location:
        target = Path(location)
    elif sys.platform == "win32":
        target = Path(os.environ.get("LOCALAPPDATA", Path.home() / "AppData" / "Local")) / APP_NAME
    else:
        target = Path.home() / ".local" / "share" / APP_NAME

    # Qt returns an app-agnostic location when application metadata is unset.
    if target.name.lower() != APP_NAME.lower():
        target = target / APP_NAME

    target.mkdir(parents=True, exist_ok=True)
    return target


def get_log_dir() -> Path:
    target = get_user_data_dir() / "logs"
    target.mkdir(parents=True, exist_ok=True)
    return target


def get_bundled_config_path() -> Path:
    return get_base_dir() / "config" / CONFIG_FILE_NAME


def resolve_config_path() -> Path:
    """
    Resolve the writable scene config path.

    The user copy wins; on first run it is seeded from the bundled
    ``config/config.json`` when that exists.
    """
    user_cfg = get_user_data_dir() / CONFIG_FILE_NAME
    if user_cfg.exists():
        return user_cfg

    bundled = get_bundled_config_path()
    if bundled.exists():
        try:
            user_cfg.write_text(bundled.read_text(encoding="utf-8"), encoding="utf-8")
        except OSError:
            pass

    return user_cfg
