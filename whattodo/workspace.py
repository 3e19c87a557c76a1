"""Data root, settings, timezone, and logging setup."""

from __future__ import annotations

import logging
import os
from datetime import datetime
from pathlib import Path
from zoneinfo import ZoneInfo, ZoneInfoNotFoundError

from whattodo.fileio import read_yaml, write_yaml_atomic
from whattodo.models import Settings

logger = logging.getLogger(__name__)

LOG_FORMAT = "%(asctime)s %(levelname)s %(name)s: %(message)s"


def data_root() -> Path:
    """Directory holding settings.yaml and the persisted document."""
    return Path(
        os.environ.get("WHATTODO_ROOT", str(Path.home() / ".whattodo"))
    ).expanduser().resolve()


def settings_path(root: Path | None = None) -> Path:
    if root is None:
        root = data_root()
    return root / "settings.yaml"


def load_settings(root: Path | None = None) -> Settings:
    return Settings.from_dict(read_yaml(settings_path(root)))


def save_settings(settings: Settings, root: Path | None = None) -> None:
    write_yaml_atomic(
        settings_path(root),
        {
            "timezone": settings.timezone,
            "undo_timeout_seconds": settings.undo_timeout_seconds,
            "storage_key": settings.storage_key,
            "log_level": settings.log_level,
        },
    )


def get_user_timezone(root: Path | None = None) -> ZoneInfo:
    """User's timezone from settings.yaml, defaulting to UTC."""
    name = load_settings(root).timezone
    try:
        return ZoneInfo(name)
    except (ZoneInfoNotFoundError, ValueError):
        logger.warning("Unknown timezone %r in settings, using UTC", name)
        return ZoneInfo("UTC")


def now_local(root: Path | None = None) -> datetime:
    """Current naive local time, comparable with stored due values."""
    return datetime.now(get_user_timezone(root)).replace(tzinfo=None)


def today_str(root: Path | None = None) -> str:
    """Today's date key (YYYY-MM-DD) in the user's timezone."""
    return now_local(root).date().isoformat()


def setup_logging(settings: Settings) -> None:
    level = getattr(logging, settings.log_level, logging.INFO)
    logging.basicConfig(level=level, format=LOG_FORMAT)
