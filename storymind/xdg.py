"""XDG base directory lookup for Storymind's config file and memory store."""

import os
from pathlib import Path

APP_DIR = "storymind"


def _base_dir(env_var: str, fallback: Path) -> Path:
    value = os.environ.get(env_var)
    return Path(value) if value else fallback


def get_xdg_config_path(filename: str) -> Path:
    """Location of a Storymind config file.

    An existing file under ``$XDG_CONFIG_HOME/storymind`` wins, then one under
    ``~/.config/storymind``. When neither exists, the XDG location is
    returned so new files land there.

    Args:
        filename: Config file name (e.g., "config.json")
    """
    preferred = _base_dir("XDG_CONFIG_HOME", Path.home() / ".config") / APP_DIR / filename
    legacy = Path.home() / ".config" / APP_DIR / filename
    if not preferred.exists() and legacy.exists():
        return legacy
    return preferred


def get_xdg_data_path(subdir: str = "") -> Path:
    """Storymind data directory (``$XDG_DATA_HOME/storymind`` or ``~/.local/share/storymind``).

    Args:
        subdir: Optional subdirectory, e.g. "store"
    """
    data_path = _base_dir("XDG_DATA_HOME", Path.home() / ".local" / "share") / APP_DIR
    return data_path / subdir if subdir else data_path
