"""Pydantic models for memory passes, sessions and cross-story knowledge.

Persisted records serialize with camelCase keys (``allSessions``,
``crossStoryPatterns``...) so an exported blob reads the same as the files
written by earlier versions of the store. Python code uses the snake_case
attribute names.
"""

import logging
from datetime import datetime, timezone
from typing import Any, ClassVar, Dict, List, Literal, Optional

from pydantic import BaseModel, ConfigDict, Field, ValidationError, field_validator
from pydantic.alias_generators import to_camel

logger = logging.getLogger(__name__)

# Stand-in for timestamps missing from imported or legacy records
EPOCH = datetime(1970, 1, 1, tzinfo=timezone.utc)

MemoryAction = Literal["store", "retrieve", "process", "associate", "consolidate", "cross_reference"]

PatternType = Literal[
    "recurring_entity",
    "behavioral_sequence",
    "semantic_cluster",
    "temporal_pattern",
    "emotional_theme",
]


def _parse_datetime(v):
    """Parse ISO format strings to datetime objects."""
    if isinstance(v, str):
        return datetime.fromisoformat(v.replace("Z", "+00:00"))
    return v


class CamelModel(BaseModel):
    """Base for persisted records: camelCase on the wire, tolerant of extra keys."""

    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        extra="allow",  # Allow extra fields for backward/forward compatibility
    )

    @field_validator("*", mode="before")
    @classmethod
    def none_to_default(cls, v, info):
        """Treat explicit nulls as missing so the field default applies."""
        if v is None and info.field_name in cls.model_fields:
            field = cls.model_fields[info.field_name]
            if not field.is_required():
                return field.get_default(call_default_factory=True)
        return v


# ============================================================================
# Per-pass records
# ============================================================================


class CrossStoryConnectionRef(CamelModel):
    """Link from a single event to a previously seen pattern."""

    model_config = ConfigDict(frozen=True)

    pattern: str
    previous_occurrences: int = 0
    strength: float = Field(default=0.0, ge=0.0, le=1.0)


class MemoryEvent(CamelModel):
    """One scheduled processing step, replayable in timestamp order."""

    model_config = ConfigDict(frozen=True)

    id: int = Field(ge=0)
    timestamp: int = Field(ge=0, description="Virtual milliseconds from pass start")
    memory_type: str
    action: MemoryAction
    content: str
    details: str = ""
    cross_story_connection: Optional[CrossStoryConnectionRef] = None


class EpisodicRecord(CamelModel):
    event: str
    context: str
    timestamp: datetime = Field(default=EPOCH, description="Wall-clock time the episode was encoded")

    @field_validator("timestamp", mode="before")
    @classmethod
    def parse_datetime(cls, v):
        return _parse_datetime(v)


class Association(CamelModel):
    concept1: str
    concept2: str
    strength: float = Field(ge=0.0, le=1.0)


class CrossStoryLink(CamelModel):
    current_item: str
    linked_pattern: str
    connection_type: str
    strength: float = Field(ge=0.0, le=1.0)


class MemoryState(CamelModel):
    """Snapshot of the eight memory compartments plus cross-story links."""

    short_term: List[str] = Field(default_factory=list)
    working_memory: List[str] = Field(default_factory=list)
    long_term: Dict[str, List[str]] = Field(default_factory=dict)
    episodic: List[EpisodicRecord] = Field(default_factory=list)
    semantic: Dict[str, List[str]] = Field(default_factory=dict)
    associative: List[Association] = Field(default_factory=list)
    procedural: List[str] = Field(default_factory=list)
    flash: List[str] = Field(default_factory=list)
    cross_story_links: List[CrossStoryLink] = Field(default_factory=list)

    def semantic_concepts(self) -> List[str]:
        """All semantic concepts in filing order."""
        return [concept for concepts in self.semantic.values() for concept in concepts]


# ============================================================================
# Persisted records
# ============================================================================


class PatternOccurrence(CamelModel):
    session_id: str
    context: str = ""
    strength: float = Field(default=0.0, ge=0.0, le=1.0)


class CrossStoryPattern(CamelModel):
    """A feature observed across passes, tracked with a reinforced strength.

    Only one pattern exists per ``(type, pattern)`` pair.
    """

    type: PatternType
    pattern: str
    occurrences: List[PatternOccurrence] = Field(default_factory=list)
    strength: float = Field(default=0.0, ge=0.0, le=1.0)
    first_seen: datetime = EPOCH
    last_seen: datetime = EPOCH

    @field_validator("first_seen", "last_seen", mode="before")
    @classmethod
    def parse_datetime(cls, v):
        return _parse_datetime(v)

    @property
    def key(self) -> tuple:
        return (self.type, self.pattern)


class StoredSession(CamelModel):
    id: str
    timestamp: datetime = EPOCH
    story_title: str = ""
    story_text: str = ""
    memory_state: MemoryState = Field(default_factory=MemoryState)
    patterns: List[CrossStoryPattern] = Field(default_factory=list)

    @field_validator("timestamp", mode="before")
    @classmethod
    def parse_datetime(cls, v):
        return _parse_datetime(v)


class KnowledgeEntry(CamelModel):
    """Running counter for one canonical key.

    Only the subclasses below are stored; each names the list field that
    collects its tags in ``tags_field``.
    """

    tags_field: ClassVar[str]

    count: int = Field(default=0, ge=0)
    strength: float = Field(default=0.0, ge=0.0, le=1.0)

    def tags(self) -> List[str]:
        return getattr(self, self.tags_field)


class EntityKnowledge(KnowledgeEntry):
    tags_field: ClassVar[str] = "contexts"

    contexts: List[str] = Field(default_factory=list)


class BehaviorKnowledge(KnowledgeEntry):
    tags_field: ClassVar[str] = "variations"

    variations: List[str] = Field(default_factory=list)


class LocationKnowledge(KnowledgeEntry):
    tags_field: ClassVar[str] = "descriptions"

    descriptions: List[str] = Field(default_factory=list)


class ConceptKnowledge(KnowledgeEntry):
    tags_field: ClassVar[str] = "associations"

    associations: List[str] = Field(default_factory=list)


class ConsolidatedKnowledge(CamelModel):
    entities: Dict[str, EntityKnowledge] = Field(default_factory=dict)
    behaviors: Dict[str, BehaviorKnowledge] = Field(default_factory=dict)
    locations: Dict[str, LocationKnowledge] = Field(default_factory=dict)
    concepts: Dict[str, ConceptKnowledge] = Field(default_factory=dict)


class UserProfile(CamelModel):
    preferred_scenarios: List[str] = Field(default_factory=list)
    learning_patterns: List[str] = Field(default_factory=list)
    memory_style: str = "comprehensive"


class PersistentState(CamelModel):
    """Everything the cross-session store persists; also the export/import unit."""

    all_sessions: List[StoredSession] = Field(default_factory=list)
    cross_story_patterns: List[CrossStoryPattern] = Field(default_factory=list)
    consolidated_knowledge: ConsolidatedKnowledge = Field(default_factory=ConsolidatedKnowledge)
    user_profile: UserProfile = Field(default_factory=UserProfile)

    @field_validator("all_sessions", "cross_story_patterns", mode="before")
    @classmethod
    def drop_unreadable_records(cls, v, info):
        """Skip individual records that cannot be repaired (e.g. no id or pattern) instead of failing the blob."""
        if not isinstance(v, list):
            return v
        record_cls = StoredSession if info.field_name == "all_sessions" else CrossStoryPattern
        kept = []
        for index, record in enumerate(v):
            try:
                record_cls.model_validate(record)
            except ValidationError as e:
                logger.warning("Dropping unreadable %s record %d: %s", info.field_name, index, e.errors()[0]["msg"])
                continue
            kept.append(record)
        return kept

    def to_blob(self) -> Dict[str, Any]:
        return self.model_dump(mode="json", by_alias=True)


# ============================================================================
# Query results
# ============================================================================


class CrossStoryConnection(CamelModel):
    pattern: str
    type: PatternType
    strength: float
    connections: int
    recent_activity: bool


class PatternStrength(CamelModel):
    pattern: str
    strength: float


class GrowthPoint(CamelModel):
    date: str
    sessions: int


class MemoryStatistics(CamelModel):
    total_sessions: int = 0
    total_patterns: int = 0
    strongest_connections: List[PatternStrength] = Field(default_factory=list)
    memory_growth: List[GrowthPoint] = Field(default_factory=list)


class ProcessingResult(CamelModel):
    """Everything a caller gets back from one pass."""

    events: List[MemoryEvent] = Field(default_factory=list)
    final_state: MemoryState = Field(default_factory=MemoryState)
    session_id: str
    cross_story_connections: List[CrossStoryConnection] = Field(default_factory=list)


Compartment = Literal[
    "short_term",
    "working",
    "semantic",
    "episodic",
    "associative",
    "procedural",
    "flash",
    "integration",
]


class QueryResult(CamelModel):
    """Answer to a lookup against one compartment of a finished pass."""

    compartment: Compartment
    query: str = ""
    items: List[str] = Field(default_factory=list)
    success: bool = False
    explanation: str = ""

    def as_event(self, event_id: int = 0) -> MemoryEvent:
        """The lookup as a replayable ``retrieve`` event."""
        return MemoryEvent(
            id=event_id,
            timestamp=0,
            memory_type=COMPARTMENT_LABELS[self.compartment],
            action="retrieve",
            content=f"Query: {self.query}" if self.query else "Query: (all)",
            details=self.explanation,
        )


COMPARTMENT_LABELS: Dict[str, str] = {
    "short_term": "Short-Term Memory",
    "working": "Working Memory",
    "semantic": "Semantic Memory",
    "episodic": "Episodic Memory",
    "associative": "Associative Memory",
    "procedural": "Procedural Memory",
    "flash": "Flash Memory",
    "integration": "Memory Integration",
}
