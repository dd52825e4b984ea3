"""Layered memory for a single processing pass.

Holds the eight compartments while a pass runs:
- short-term buffer of perceived sentences
- working memory (entities and actions under analysis)
- long-term, episodic, semantic, associative and procedural stores
- flash memory of the most recently consolidated items

It is discarded once the pass hands its snapshot to the cross-session store.
"""

from dataclasses import dataclass, field
from datetime import datetime
from typing import Dict, List

from storymind.models import Association, CrossStoryLink, EpisodicRecord, MemoryState

GENERAL_CATEGORY = "general"


@dataclass
class LayeredMemoryStore:
    flash_capacity: int = 5
    short_term: List[str] = field(default_factory=list)
    working_memory: List[str] = field(default_factory=list)
    long_term: Dict[str, List[str]] = field(default_factory=dict)
    episodic: List[EpisodicRecord] = field(default_factory=list)
    semantic: Dict[str, List[str]] = field(default_factory=dict)
    associative: List[Association] = field(default_factory=list)
    procedural: List[str] = field(default_factory=list)
    flash: List[str] = field(default_factory=list)
    cross_story_links: List[CrossStoryLink] = field(default_factory=list)

    def perceive(self, sentence: str) -> None:
        self.short_term.append(sentence)

    def attend(self, item: str) -> None:
        """Add an entity or action to working memory."""
        self.working_memory.append(item)

    def file_concept(self, category: str, concept: str) -> None:
        self.semantic.setdefault(category, []).append(concept)

    def record_episode(self, event: str, context: str, timestamp: datetime) -> None:
        self.episodic.append(EpisodicRecord(event=event, context=context, timestamp=timestamp))

    def associate(self, concept1: str, concept2: str, strength: float) -> None:
        self.associative.append(Association(concept1=concept1, concept2=concept2, strength=strength))

    def learn_procedure(self, procedure: str) -> None:
        self.procedural.append(procedure)

    def link(self, current_item: str, linked_pattern: str, connection_type: str, strength: float) -> None:
        """Record a connection between this pass and earlier passes."""
        self.cross_story_links.append(
            CrossStoryLink(
                current_item=current_item,
                linked_pattern=linked_pattern,
                connection_type=connection_type,
                strength=min(1.0, max(0.0, strength)),
            )
        )

    def consolidate(self, item: str, category: str = GENERAL_CATEGORY) -> None:
        """Move an item into long-term storage and the front of flash memory.

        Flash keeps only the newest ``flash_capacity`` items, newest first.
        """
        self.long_term.setdefault(category, []).append(item)
        self.flash.insert(0, item)
        del self.flash[self.flash_capacity :]

    def decay(self) -> None:
        """Short-term memories fade at the end of a pass."""
        self.short_term.clear()

    def semantic_concepts(self) -> List[str]:
        return [concept for concepts in self.semantic.values() for concept in concepts]

    def snapshot(self) -> MemoryState:
        """Deep copy of the current compartments."""
        state = MemoryState(
            short_term=self.short_term,
            working_memory=self.working_memory,
            long_term=self.long_term,
            episodic=self.episodic,
            semantic=self.semantic,
            associative=self.associative,
            procedural=self.procedural,
            flash=self.flash,
            cross_story_links=self.cross_story_links,
        )
        return state.model_copy(deep=True)
