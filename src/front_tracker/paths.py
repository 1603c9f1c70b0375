"""Locate the front tracker database."""

from __future__ import annotations

import os
from pathlib import Path

from platformdirs import user_data_path

APP_NAME = "FrontTracker"
DB_ENV_VAR = "FRONT_TRACKER_DB"
DB_FILENAME = "fronting.sqlite3"


def get_db_path() -> Path:
    """Database location: ``$FRONT_TRACKER_DB`` if set, else the user data dir."""
    override = os.environ.get(DB_ENV_VAR)
    if override:
        return Path(override).expanduser()
    data_dir = user_data_path(appname=APP_NAME, appauthor=False, ensure_exists=True)
    return data_dir / DB_FILENAME
