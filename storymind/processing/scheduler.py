"""Virtual-time scheduling of one memory processing pass.

A pass walks through fixed phases (perception, working memory, semantic,
episodic, associative, procedural, consolidation). Each phase owns a
disjoint window of virtual milliseconds; the events it emits get slots in
that window so an external timeline player can replay them in order.
Nothing here sleeps or runs concurrently: timestamps are labels only.
"""

import logging
from dataclasses import dataclass
from datetime import datetime, timezone
from typing import Callable, List, Optional, Tuple

from storymind.config import Config
from storymind.extraction import AssociationScorer, ExtractionResult, FeatureExtractor, split_sentences
from storymind.models import (
    CrossStoryConnectionRef,
    CrossStoryPattern,
    MemoryAction,
    MemoryEvent,
    MemoryState,
    PersistentState,
)

from .layers import LayeredMemoryStore

logger = logging.getLogger(__name__)

# Strength reported on an event that matched earlier episodes
EPISODE_MATCH_STRENGTH = 0.7
# Per-match strength of an episodic_pattern link
EPISODE_LINK_STEP = 0.2


@dataclass(frozen=True)
class TimeWindow:
    """Half-open range ``[start, end)`` of virtual milliseconds."""

    start: int
    end: int
    step: int

    def slots(self, count: int) -> List[int]:
        """Timestamps for ``count`` events, compressed to stay inside the window."""
        if count <= 0:
            return []
        step = float(self.step)
        if self.start + (count - 1) * step >= self.end:
            step = (self.end - self.start) / count
        return [self.start + int(i * step) for i in range(count)]


@dataclass(frozen=True)
class PhaseWindows:
    recall: TimeWindow = TimeWindow(50, 100, 10)
    perception: TimeWindow = TimeWindow(100, 500, 150)
    working: TimeWindow = TimeWindow(800, 1600, 200)
    semantic: TimeWindow = TimeWindow(2000, 3500, 300)
    episodic: TimeWindow = TimeWindow(4000, 5600, 400)
    associative: TimeWindow = TimeWindow(6000, 8000, 200)
    procedural: TimeWindow = TimeWindow(8000, 9000, 300)
    consolidation: TimeWindow = TimeWindow(10000, 12000, 200)


DEFAULT_WINDOWS = PhaseWindows()


@dataclass(frozen=True)
class _Step:
    memory_type: str
    action: MemoryAction
    content: str
    details: str
    connection: Optional[CrossStoryConnectionRef] = None


def episode_similarity(first: str, second: str) -> float:
    """Shared-token ratio: tokens of ``first`` found in ``second`` over the longer token count."""
    words1 = first.lower().split()
    words2 = second.lower().split()
    if not words1 or not words2:
        return 0.0
    common = [word for word in words1 if word in words2]
    return len(common) / max(len(words1), len(words2))


def _pattern_ref(pattern: CrossStoryPattern) -> CrossStoryConnectionRef:
    return CrossStoryConnectionRef(
        pattern=pattern.pattern,
        previous_occurrences=len(pattern.occurrences),
        strength=pattern.strength,
    )


def _utc_now() -> datetime:
    return datetime.now(timezone.utc)


class EventScheduler:
    """Runs the phases of a pass, filling a LayeredMemoryStore and emitting MemoryEvents."""

    def __init__(
        self,
        extractor: Optional[FeatureExtractor] = None,
        scorer: Optional[AssociationScorer] = None,
        config: Optional[Config] = None,
        windows: PhaseWindows = DEFAULT_WINDOWS,
        clock: Optional[Callable[[], datetime]] = None,
    ):
        self.config = config or Config()
        self.extractor = extractor or FeatureExtractor()
        self.scorer = scorer or AssociationScorer(
            self.extractor.rules.relationships, threshold=self.config.association_threshold
        )
        self.windows = windows
        self.clock = clock or _utc_now

    def run(
        self, text: str, existing_knowledge: Optional[PersistentState] = None
    ) -> Tuple[List[MemoryEvent], MemoryState]:
        """Process one text against what earlier passes left behind.

        Args:
            text: Raw story text
            existing_knowledge: Snapshot from the cross-session store (None = no history)

        Returns:
            Tuple of (ordered events, final memory state)
        """
        knowledge = existing_knowledge or PersistentState()
        memory = LayeredMemoryStore(flash_capacity=self.config.flash_capacity)
        extraction = self.extractor.extract(text)
        events: List[MemoryEvent] = []

        self._schedule(events, self.windows.recall, self._recall(knowledge))
        self._schedule(events, self.windows.perception, self._perceive(text, memory, knowledge))
        self._schedule(events, self.windows.working, self._attend(extraction, memory, knowledge))
        self._schedule(events, self.windows.semantic, self._file_concepts(extraction, memory, knowledge))
        self._schedule(events, self.windows.episodic, self._encode_episodes(extraction, memory, knowledge))
        self._schedule(events, self.windows.associative, self._associate(memory, knowledge))
        self._schedule(events, self.windows.procedural, self._learn_procedures(extraction, memory, knowledge))
        self._schedule(events, self.windows.consolidation, self._consolidate(memory))

        logger.debug(
            "Scheduled %d events (%d working items, %d associations, %d cross-story links)",
            len(events),
            len(memory.working_memory),
            len(memory.associative),
            len(memory.cross_story_links),
        )
        return events, memory.snapshot()

    def _schedule(self, events: List[MemoryEvent], window: TimeWindow, steps: List[_Step]) -> None:
        for timestamp, step in zip(window.slots(len(steps)), steps):
            events.append(
                MemoryEvent(
                    id=len(events),
                    timestamp=timestamp,
                    memory_type=step.memory_type,
                    action=step.action,
                    content=step.content,
                    details=step.details,
                    cross_story_connection=step.connection,
                )
            )

    # Phases

    def _recall(self, knowledge: PersistentState) -> List[_Step]:
        session_count = len(knowledge.all_sessions)
        if not session_count:
            return []
        return [
            _Step(
                "Cross-Story Memory",
                "cross_reference",
                f"Accessing {session_count} previous memory sessions",
                "Loading patterns, entities, and knowledge from past experiences",
            )
        ]

    def _perceive(self, text: str, memory: LayeredMemoryStore, knowledge: PersistentState) -> List[_Step]:
        steps = []
        for sentence in split_sentences(text)[: self.config.perception_sentences]:
            memory.perceive(sentence)
            lowered = sentence.lower()
            recognized = [
                p
                for p in knowledge.cross_story_patterns
                if p.pattern and p.pattern.lower() in lowered and p.strength > self.config.recognition_threshold
            ]
            if recognized:
                details = f"Raw input captured. Recognized {len(recognized)} familiar patterns."
            else:
                details = "Raw sensory input captured in short-term buffer"
            steps.append(
                _Step(
                    "Short-Term Memory",
                    "store",
                    f'Initial perception: "{sentence[:40]}..."',
                    details,
                    _pattern_ref(recognized[0]) if recognized else None,
                )
            )
        return steps

    def _attend(
        self, extraction: ExtractionResult, memory: LayeredMemoryStore, knowledge: PersistentState
    ) -> List[_Step]:
        steps = []
        known_entities = knowledge.consolidated_knowledge.entities
        for entity in extraction.entities:
            memory.attend(entity)
            history = known_entities.get(entity)
            connection = None
            details = "Active manipulation and analysis of perceived information"
            if history:
                details = f"Active manipulation and analysis. Previously seen {history.count} times."
                connection = CrossStoryConnectionRef(
                    pattern=entity, previous_occurrences=history.count, strength=history.strength
                )
                memory.link(
                    entity, f"{entity} ({history.count} previous occurrences)", "entity_recognition", history.strength
                )
            steps.append(_Step("Working Memory", "process", f"Processing entity: {entity}", details, connection))

        for action in extraction.actions:
            memory.attend(action)
            steps.append(
                _Step(
                    "Working Memory",
                    "process",
                    f"Processing action: {action}",
                    "Analyzing behavioral patterns and sequences",
                )
            )
        return steps

    def _file_concepts(
        self, extraction: ExtractionResult, memory: LayeredMemoryStore, knowledge: PersistentState
    ) -> List[_Step]:
        steps = []
        known_concepts = knowledge.consolidated_knowledge.concepts
        for concept in extraction.concepts:
            category = self.extractor.categorize(concept)
            memory.file_concept(category, concept)
            history = known_concepts.get(concept)
            connection = None
            details = "Integrating factual information into knowledge base"
            if history:
                details = f"Building on existing knowledge base. Concept reinforced {history.count} times."
                connection = CrossStoryConnectionRef(
                    pattern=concept, previous_occurrences=history.count, strength=history.strength
                )
                memory.link(concept, f"{concept} knowledge network", "semantic_reinforcement", history.strength)
            steps.append(
                _Step("Semantic Memory", "store", f"Storing knowledge: {concept} → {category}", details, connection)
            )
        return steps

    def _encode_episodes(
        self, extraction: ExtractionResult, memory: LayeredMemoryStore, knowledge: PersistentState
    ) -> List[_Step]:
        steps = []
        past_events = [
            record.event for session in knowledge.all_sessions for record in session.memory_state.episodic
        ]
        for episode in extraction.episodes:
            memory.record_episode(episode.event, episode.context, self.clock())
            matches = sum(
                1
                for past in past_events
                if episode_similarity(episode.event, past) > self.config.episode_similarity_threshold
            )
            connection = None
            details = f"Context: {episode.context}"
            if matches:
                details = f"Context: {episode.context}. Similar to {matches} previous experiences."
                connection = CrossStoryConnectionRef(
                    pattern=f"{episode.event} (pattern)", previous_occurrences=matches, strength=EPISODE_MATCH_STRENGTH
                )
                memory.link(
                    episode.event,
                    f"Similar experiences ({matches})",
                    "episodic_pattern",
                    min(1.0, matches * EPISODE_LINK_STEP),
                )
            steps.append(_Step("Episodic Memory", "store", f"Encoding episode: {episode.event}", details, connection))
        return steps

    def _associate(self, memory: LayeredMemoryStore, knowledge: PersistentState) -> List[_Step]:
        steps = []
        concepts = memory.semantic_concepts()
        for item in list(memory.working_memory):
            for concept in concepts:
                strength = self.scorer.score(item, concept)
                if not self.scorer.retains(strength):
                    continue
                memory.associate(item, concept, strength)
                steps.append(
                    _Step(
                        "Associative Memory",
                        "associate",
                        f"Linking: {item} ↔ {concept}",
                        f"Association strength: {strength:.2f}",
                    )
                )

        for item in list(memory.working_memory):
            lowered = item.lower()
            related = [
                p
                for p in knowledge.cross_story_patterns
                if p.pattern and (lowered in p.pattern.lower() or p.pattern.lower() in lowered)
            ]
            if not related:
                continue
            memory.link(item, related[0].pattern, "pattern_association", related[0].strength)
            steps.append(
                _Step(
                    "Cross-Story Association",
                    "cross_reference",
                    f"Cross-linking: {item} with historical patterns",
                    f"Found {len(related)} connections to previous stories",
                    _pattern_ref(related[0]),
                )
            )
        return steps

    def _learn_procedures(
        self, extraction: ExtractionResult, memory: LayeredMemoryStore, knowledge: PersistentState
    ) -> List[_Step]:
        steps = []
        known_behaviors = knowledge.consolidated_knowledge.behaviors
        for procedure in extraction.procedures:
            memory.learn_procedure(procedure)
            history = known_behaviors.get(procedure)
            connection = None
            details = "Encoding behavioral sequence for future execution"
            if history:
                details = f"Reinforcing behavioral sequence. Previously practiced {history.count} times."
                connection = CrossStoryConnectionRef(
                    pattern=procedure, previous_occurrences=history.count, strength=history.strength
                )
            steps.append(
                _Step("Procedural Memory", "store", f"Learning procedure: {procedure}", details, connection)
            )
        return steps

    def _consolidate(self, memory: LayeredMemoryStore) -> List[_Step]:
        steps = []
        for item in memory.working_memory:
            memory.consolidate(item)
            steps.append(
                _Step(
                    "Long-Term Memory",
                    "consolidate",
                    f"Consolidating: {item}",
                    "Transfer from working to long-term storage + cross-story integration",
                )
            )

        memory.decay()
        steps.append(
            _Step(
                "Short-Term Memory",
                "process",
                "Memory decay process",
                "Short-term memories naturally fade, but cross-story patterns persist",
            )
        )
        steps.append(
            _Step(
                "Cross-Story Consolidation",
                "consolidate",
                "Integrating with persistent memory store",
                "Creating lasting connections between this story and previous experiences",
            )
        )
        return steps
