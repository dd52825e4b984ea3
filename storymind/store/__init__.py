"""Persistent cross-session memory: storage backends, patterns and knowledge."""

from typing import Optional

from storymind.config import Config, load_config

from .backend import FileStorage, KeyValueStorage, MemoryStorage
from .knowledge import ConsolidatedKnowledgeAggregator, reinforce
from .patterns import (
    CrossSessionPatternStore,
    extract_context,
    generate_session_id,
    generate_story_title,
)


def open_store(config: Optional[Config] = None) -> CrossSessionPatternStore:
    """Open the file-backed store described by configuration.

    Args:
        config: Configuration to use. If None, loads the user config file

    Returns:
        Loaded CrossSessionPatternStore
    """
    if config is None:
        config = load_config()
    return CrossSessionPatternStore(FileStorage(config.resolved_storage_dir()), config)


__all__ = [
    "ConsolidatedKnowledgeAggregator",
    "CrossSessionPatternStore",
    "FileStorage",
    "KeyValueStorage",
    "MemoryStorage",
    "extract_context",
    "generate_session_id",
    "generate_story_title",
    "open_store",
    "reinforce",
]
