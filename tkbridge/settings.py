"""Settings that are read from ``settings.json`` in the user's config directory."""
from __future__ import annotations

import dataclasses
import json
import logging
from pathlib import Path
from typing import List

import dacite

from tkbridge import dirs

_log = logging.getLogger(__name__)


# Before Python 3.10, dacite needs List[str] instead of list[str] even with
# "from __future__ import annotations", because it evaluates the annotations.
@dataclasses.dataclass
class Settings:
    image_id_prefix: str = "tkbridge_image"
    action_id_prefix: str = "tkbridge_event"
    # load_image() lets Tk read these by itself, everything else is decoded with Pillow
    native_image_suffixes: List[str] = dataclasses.field(default_factory=lambda: [".gif"])
    max_log_age_days: int = 7


_settings: Settings | None = None


# Must be a function, so that it updates when tests change the dirs object
def get_json_path() -> Path:
    return Path(dirs.user_config_dir) / "settings.json"


def _load_from_file() -> Settings:
    try:
        with get_json_path().open("r", encoding="utf-8") as file:
            options = json.load(file)
    except FileNotFoundError:
        return Settings()
    return dacite.from_dict(Settings, options, config=dacite.Config(strict=True))


def get() -> Settings:
    """Return the settings, loading them from ``settings.json`` on the first call.

    If the file is broken, the error is logged and default settings are used.
    """
    global _settings
    if _settings is None:
        try:
            _settings = _load_from_file()
        except (OSError, ValueError, dacite.DaciteError):
            _log.exception(f"reading {get_json_path()} failed, using default settings")
            _settings = Settings()
    return _settings


def reset() -> None:
    """Forget loaded settings, so that the next :func:`get` reads the file again."""
    global _settings
    _settings = None


def save() -> None:
    # First create string of JSON, so that writing is less likely to leave the file corrupt.
    big_string = json.dumps(dataclasses.asdict(get()), indent=4) + "\n"
    get_json_path().parent.mkdir(parents=True, exist_ok=True)
    get_json_path().write_text(big_string, encoding="utf-8")
