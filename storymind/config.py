"""Storymind configuration management."""

import json
import logging
from pathlib import Path
from typing import Callable, Optional

from pydantic import BaseModel, ConfigDict, Field

from .xdg import get_xdg_config_path, get_xdg_data_path

logger = logging.getLogger(__name__)

DEFAULT_STORAGE_KEY = "storymind-memory-store"
CONFIG_FILENAME = "config.json"


class Config(BaseModel):
    """Storymind configuration.

    Thresholds and increments are heuristics carried over from the memory
    model; they are exposed here so callers can tune them without touching
    the engine.
    """

    model_config = ConfigDict(
        extra="allow",
        str_strip_whitespace=True,
    )

    storage_dir: Optional[Path] = None
    storage_key: str = DEFAULT_STORAGE_KEY
    max_sessions: int = Field(default=50, ge=1)
    reinforcement_increment: float = Field(default=0.1, gt=0.0, le=1.0)
    episode_similarity_threshold: float = Field(default=0.6, ge=0.0, le=1.0)
    association_threshold: float = Field(default=0.3, ge=0.0, le=1.0)
    recognition_threshold: float = Field(default=0.4, ge=0.0, le=1.0)
    connection_threshold: float = Field(default=0.3, ge=0.0, le=1.0)
    recent_activity_hours: int = Field(default=24, ge=0)
    flash_capacity: int = Field(default=5, ge=1)
    perception_sentences: int = Field(default=3, ge=0)
    random_seed: Optional[int] = None

    def resolved_storage_dir(self) -> Path:
        """Directory holding the persisted memory store."""
        return self.storage_dir or get_xdg_data_path("store")


def get_config_path() -> Path:
    """Default location of ``config.json`` under the XDG config directory."""
    return get_xdg_config_path(CONFIG_FILENAME)


def load_config(path: Optional[Path] = None) -> Config:
    """Read configuration, falling back to defaults.

    A missing file yields the defaults silently; an unreadable, malformed or
    invalid file yields the defaults with a warning.

    Args:
        path: config.json to read (None = XDG default)
    """
    path = path or get_config_path()
    if not path.exists():
        return Config()

    try:
        return Config.model_validate(json.loads(path.read_text(encoding="utf-8")))
    except json.JSONDecodeError as e:
        logger.warning("Failed to parse config at %s: %s", path, e)
    except (OSError, ValueError) as e:
        logger.warning("Failed to load config from %s: %s", path, e)
    return Config()


def save_config(config: Config, path: Optional[Path] = None) -> None:
    """Write configuration as indented JSON, leaving unset optional fields out.

    Raises:
        OSError: If the file cannot be written
    """
    path = path or get_config_path()
    path.parent.mkdir(parents=True, exist_ok=True)
    payload = config.model_dump(mode="json", exclude_none=True)
    path.write_text(json.dumps(payload, indent=2) + "\n", encoding="utf-8")


def update_config(path: Optional[Path], updater: Callable[[Config], None]) -> Config:
    """Apply ``updater`` to the stored configuration and persist the result.

    Raises:
        ValidationError: If the updated values are invalid (nothing is written)
    """
    current = load_config(path)
    updater(current)
    updated = Config.model_validate(current.model_dump())
    save_config(updated, path)
    return updated
