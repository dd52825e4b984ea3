"""Per-pass memory processing: layered compartments, virtual-time events and lookups."""

from .layers import LayeredMemoryStore
from .processor import MemoryProcessor
from .query import COMPARTMENTS, query_memory
from .scheduler import DEFAULT_WINDOWS, EventScheduler, PhaseWindows, TimeWindow, episode_similarity

__all__ = [
    "COMPARTMENTS",
    "DEFAULT_WINDOWS",
    "EventScheduler",
    "LayeredMemoryStore",
    "MemoryProcessor",
    "PhaseWindows",
    "TimeWindow",
    "episode_similarity",
    "query_memory",
]
