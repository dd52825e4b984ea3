"""Persistent cross-session store of stories, patterns and consolidated knowledge."""

import json
import logging
import re
import uuid
from collections import Counter
from datetime import datetime, timedelta, timezone
from typing import Any, Callable, List, Mapping, Optional, Sequence, Union

from pydantic import ValidationError

from storymind.config import Config
from storymind.exceptions import ImportPayloadError, StorageError
from storymind.extraction import split_sentences
from storymind.extraction.rules import (
    DEFAULT_KNOWLEDGE_RULES,
    DEFAULT_PATTERN_RULES,
    KnowledgeRules,
    PatternRules,
)
from storymind.models import (
    CrossStoryConnection,
    CrossStoryPattern,
    GrowthPoint,
    MemoryState,
    MemoryStatistics,
    PatternOccurrence,
    PatternStrength,
    PatternType,
    PersistentState,
    StoredSession,
)

from .backend import KeyValueStorage
from .knowledge import ConsolidatedKnowledgeAggregator, reinforce

logger = logging.getLogger(__name__)

STRONGEST_CONNECTIONS_LIMIT = 5
CONTEXT_MAX_CHARS = 100
TITLE_MAX_WORDS = 6

_NAME_PATTERN = re.compile(r"\b[A-Z][a-z]+ [A-Z][a-z]+\b")


def generate_session_id(timestamp: Optional[datetime] = None) -> str:
    """Generate unique session ID.

    Format: session_YYYYMMDDTHHMMSS_{hex}
    Example: session_20251024T103000_1f2e3d4c
    """
    if timestamp is None:
        timestamp = datetime.now(timezone.utc)
    return f"session_{timestamp:%Y%m%dT%H%M%S}_{uuid.uuid4().hex[:8]}"


def generate_story_title(text: str, locations: Sequence[str] = DEFAULT_PATTERN_RULES.title_locations) -> str:
    """Build a short title from the first sentence of a story.

    Prefers "First Last at location", then "First Last's Experience", then
    "location Visit", and falls back to the first few words of the sentence.
    """
    first_sentence = re.split(r"[.!?]", text or "")[0]

    name_match = _NAME_PATTERN.search(first_sentence)
    location_match = None
    if locations:
        alternatives = "|".join(re.escape(location) for location in locations)
        location_match = re.search(rf"\b({alternatives})\b", first_sentence, re.IGNORECASE)

    if name_match and location_match:
        return f"{name_match.group(0)} at {location_match.group(0)}"
    if name_match:
        return f"{name_match.group(0)}'s Experience"
    if location_match:
        return f"{location_match.group(0)} Visit"
    return " ".join(first_sentence.split()[:TITLE_MAX_WORDS]) + "..."


def extract_context(text: str, term: str) -> str:
    """First sentence mentioning ``term``, truncated for display."""
    lowered_term = term.lower()
    for sentence in split_sentences(text):
        if lowered_term in sentence.lower():
            return sentence[:CONTEXT_MAX_CHARS] + "..."
    return ""


def _utc_now() -> datetime:
    return datetime.now(timezone.utc)


def _parse_blob(raw: Any) -> PersistentState:
    """Validate a JSON blob into state, filling every missing field with its default.

    Partial records are repaired with defaults (missing timestamps become the
    epoch); sessions or patterns that cannot be repaired are dropped one by one.

    Raises:
        ImportPayloadError: If the payload is not a JSON object or fails validation
    """
    try:
        data = json.loads(raw)
    except (json.JSONDecodeError, TypeError) as e:
        raise ImportPayloadError(f"Invalid JSON: {e}") from e
    if not isinstance(data, dict):
        raise ImportPayloadError(f"Expected a JSON object, got {type(data).__name__}")
    try:
        return PersistentState.model_validate(data)
    except ValidationError as e:
        raise ImportPayloadError(f"Invalid memory data: {e}") from e


class CrossSessionPatternStore:
    """Accumulates sessions and reinforces cross-story patterns across passes.

    The store is constructed explicitly and injected wherever it is needed.
    State is loaded from the key-value storage on construction (empty on
    missing or corrupt data) and written back after every mutating call.
    Readers get deep copies; the only way to change state is through the
    methods below.

    Storage failures never escape: a failed read starts from an empty state
    and a failed write is logged and dropped, leaving the in-memory state
    correct for the rest of the process.
    """

    def __init__(
        self,
        storage: KeyValueStorage,
        config: Optional[Config] = None,
        pattern_rules: PatternRules = DEFAULT_PATTERN_RULES,
        knowledge_rules: KnowledgeRules = DEFAULT_KNOWLEDGE_RULES,
        clock: Optional[Callable[[], datetime]] = None,
    ):
        self._storage = storage
        self.config = config or Config()
        self.storage_key = self.config.storage_key
        self.rules = pattern_rules
        self.aggregator = ConsolidatedKnowledgeAggregator(knowledge_rules, self.config.reinforcement_increment)
        self.clock = clock or _utc_now
        self._state = self._load()

    def __enter__(self) -> "CrossSessionPatternStore":
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        self.close()

    def close(self) -> None:
        """Flush state to storage; call once when the store is no longer needed."""
        self._save()

    # Ingestion

    def add_session(self, story_text: str, memory_state: Union[MemoryState, Mapping[str, Any]]) -> str:
        """Persist one finished pass and fold it into patterns and knowledge.

        Args:
            story_text: Verbatim input text of the pass
            memory_state: Final memory state of the pass (copied, never referenced)

        Returns:
            ID of the stored session
        """
        if isinstance(memory_state, MemoryState):
            snapshot = memory_state.model_copy(deep=True)
        else:
            snapshot = MemoryState.model_validate(memory_state)

        now = self.clock()
        session = StoredSession(
            id=generate_session_id(now),
            timestamp=now,
            story_title=generate_story_title(story_text, self.rules.title_locations),
            story_text=story_text or "",
            memory_state=snapshot,
        )
        self._state.all_sessions.append(session)

        self._merge_patterns(self.extract_patterns(session, now), now)
        self.aggregator.update(self._state.consolidated_knowledge, session)

        overflow = len(self._state.all_sessions) - self.config.max_sessions
        if overflow > 0:
            del self._state.all_sessions[:overflow]
            logger.debug("Evicted %d oldest sessions", overflow)

        self._save()
        logger.debug("Stored session %s (%s)", session.id, session.story_title)
        return session.id

    def extract_patterns(self, session: StoredSession, now: Optional[datetime] = None) -> List[CrossStoryPattern]:
        """Candidate patterns for one session, each with a single occurrence."""
        now = now or self.clock()
        text = session.story_text
        lowered = text.lower()
        candidates = []

        for entity in self.rules.recurring_entities:
            if entity in lowered:
                candidates.append(
                    self._candidate(
                        "recurring_entity",
                        entity,
                        session.id,
                        extract_context(text, entity),
                        self.rules.entity_strength,
                        now,
                    )
                )

        for rule in self.rules.behaviors:
            matched = sum(1 for keyword in rule.keywords if keyword in lowered)
            if matched >= self.rules.behavior_min_matches:
                candidates.append(
                    self._candidate(
                        "behavioral_sequence",
                        rule.behavior,
                        session.id,
                        f"Behavioral pattern: {rule.behavior}",
                        self.rules.behavior_strength,
                        now,
                    )
                )

        for category, concepts in session.memory_state.semantic.items():
            if concepts:
                candidates.append(
                    self._candidate(
                        "semantic_cluster",
                        category,
                        session.id,
                        f"Semantic domain: {category}",
                        self.rules.cluster_strength,
                        now,
                    )
                )

        return candidates

    @staticmethod
    def _candidate(
        pattern_type: PatternType, pattern: str, session_id: str, context: str, strength: float, now: datetime
    ) -> CrossStoryPattern:
        return CrossStoryPattern(
            type=pattern_type,
            pattern=pattern,
            occurrences=[PatternOccurrence(session_id=session_id, context=context, strength=strength)],
            strength=strength,
            first_seen=now,
            last_seen=now,
        )

    def _merge_patterns(self, candidates: List[CrossStoryPattern], now: datetime) -> None:
        by_key = {pattern.key: pattern for pattern in self._state.cross_story_patterns}
        for candidate in candidates:
            existing = by_key.get(candidate.key)
            if existing is None:
                self._state.cross_story_patterns.append(candidate)
                by_key[candidate.key] = candidate
                continue
            existing.occurrences.extend(candidate.occurrences)
            existing.strength = reinforce(existing.strength, self.config.reinforcement_increment)
            existing.last_seen = now

    # Queries

    def get_existing_knowledge(self) -> PersistentState:
        """Deep copy of everything persisted so far."""
        return self._state.model_copy(deep=True)

    def get_cross_story_connections(self, session_id: Optional[str] = None) -> List[CrossStoryConnection]:
        """Active patterns, strongest first.

        Args:
            session_id: Only include patterns with an occurrence in this session (None = all)

        Returns:
            Patterns above the connection threshold, sorted by strength descending
        """
        now = self.clock()
        recent_window = timedelta(hours=self.config.recent_activity_hours)
        connections = []
        for pattern in self._state.cross_story_patterns:
            if pattern.strength <= self.config.connection_threshold:
                continue
            if session_id is not None and not any(o.session_id == session_id for o in pattern.occurrences):
                continue
            connections.append(
                CrossStoryConnection(
                    pattern=pattern.pattern,
                    type=pattern.type,
                    strength=pattern.strength,
                    connections=len(pattern.occurrences),
                    recent_activity=(now - pattern.last_seen) < recent_window,
                )
            )
        connections.sort(key=lambda c: c.strength, reverse=True)
        return connections

    def get_session_history(self) -> List[StoredSession]:
        """Stored sessions, most recent first."""
        return [session.model_copy(deep=True) for session in reversed(self._state.all_sessions)]

    def get_memory_statistics(self) -> MemoryStatistics:
        strongest = sorted(self._state.cross_story_patterns, key=lambda p: p.strength, reverse=True)
        growth = Counter(session.timestamp.date().isoformat() for session in self._state.all_sessions)
        return MemoryStatistics(
            total_sessions=len(self._state.all_sessions),
            total_patterns=len(self._state.cross_story_patterns),
            strongest_connections=[
                PatternStrength(pattern=p.pattern, strength=p.strength)
                for p in strongest[:STRONGEST_CONNECTIONS_LIMIT]
            ],
            memory_growth=[GrowthPoint(date=date, sessions=count) for date, count in sorted(growth.items())],
        )

    # Import / export / reset

    def export_memory_data(self) -> str:
        """Serialize the whole persisted state as indented JSON."""
        return json.dumps(self._state.to_blob(), indent=2, ensure_ascii=False)

    def import_memory_data(self, payload: str) -> bool:
        """Replace the persisted state with an exported blob.

        Missing fields are filled with empty defaults and unreadable session or
        pattern records are skipped. A payload that is not valid JSON, not an
        object, or fails validation at the top level is rejected and the
        current state is left untouched.

        Returns:
            True if the import succeeded
        """
        try:
            state = _parse_blob(payload)
        except ImportPayloadError as e:
            logger.error("Failed to import memory data: %s", e)
            return False

        self._state = state
        self._save()
        logger.info(
            "Imported %d sessions and %d patterns", len(state.all_sessions), len(state.cross_story_patterns)
        )
        return True

    def clear_all_memory(self) -> None:
        self._state = PersistentState()
        self._save()
        logger.info("Cleared all persistent memory")

    # Persistence

    def _load(self) -> PersistentState:
        try:
            raw = self._storage.get_item(self.storage_key)
        except StorageError as e:
            logger.warning("Failed to load persistent memory: %s", e)
            return PersistentState()

        if raw is None:
            return PersistentState()

        try:
            return _parse_blob(raw)
        except ImportPayloadError as e:
            logger.warning("Failed to load persistent memory from '%s': %s", self.storage_key, e)
            return PersistentState()

    def _save(self) -> None:
        try:
            self._storage.set_item(self.storage_key, self.export_memory_data())
        except StorageError as e:
            logger.error("Failed to save persistent memory: %s", e)
