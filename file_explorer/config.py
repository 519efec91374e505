import json
import logging
import os
from dataclasses import asdict, dataclass, field, fields
from pathlib import Path
from typing import List, Optional

logger = logging.getLogger(__name__)

CONFIG_DIR = Path.home() / ".config" / "file_explorer"
DEFAULT_CONFIG_FILE = CONFIG_DIR / "config.json"
DEFAULT_LOG_FILE = CONFIG_DIR / "file_explorer.log"
PATH_HISTORY = CONFIG_DIR / "path_history"
DEFAULT_LOG_LEVEL = os.environ.get("LOG_LEVEL", "INFO").upper()
MAX_RECENT_FILES = 10

_FIELD_TYPES = {
    "theme": str,
    "recent_files": list,
    "max_recent_files": int,
    "log_level": str,
    "log_file": str,
    "start_directory": (str, type(None)),
}


def _valid_value(name: str, value) -> bool:
    if isinstance(value, bool) or not isinstance(value, _FIELD_TYPES[name]):
        return False
    if name == "recent_files":
        return all(isinstance(item, str) for item in value)
    if name == "max_recent_files":
        return value > 0
    return True


def config_path() -> Path:
    override = os.environ.get("FILE_EXPLORER_CONFIG")
    return Path(override).expanduser() if override else DEFAULT_CONFIG_FILE


@dataclass
class AppConfig:
    theme: str = "default"
    recent_files: List[str] = field(default_factory=list)
    max_recent_files: int = MAX_RECENT_FILES
    log_level: str = DEFAULT_LOG_LEVEL
    log_file: str = str(DEFAULT_LOG_FILE)
    start_directory: Optional[str] = None

    def save(self, path: Optional[Path] = None) -> None:
        path = Path(path) if path else config_path()
        path.parent.mkdir(parents=True, exist_ok=True)
        with open(path, "w") as f:
            json.dump(asdict(self), f, indent=2)
        logger.debug(f"Saved configuration to {path}")

    @classmethod
    def load(cls, path: Optional[Path] = None) -> "AppConfig":
        path = Path(path) if path else config_path()
        if not path.exists():
            return cls()
        try:
            with open(path, "r") as f:
                data = json.load(f)
        except (OSError, ValueError) as e:
            logger.warning(f"Failed to load config {path}: {e}")
            return cls()
        if not isinstance(data, dict):
            logger.warning(f"Ignoring malformed config {path}")
            return cls()
        known = {f.name for f in fields(cls)}
        values = {}
        for key, value in data.items():
            if key not in known:
                continue
            if not _valid_value(key, value):
                logger.warning(f"Ignoring invalid value for '{key}' in {path}: {value!r}")
                continue
            values[key] = value
        return cls(**values)
