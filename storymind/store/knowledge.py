"""Running counters of entities, behaviors, locations and concepts across sessions."""

import logging
from typing import Dict, Iterator, Optional, Tuple, Type, TypeVar

from storymind.extraction.rules import DEFAULT_KNOWLEDGE_RULES, KnowledgeRule, KnowledgeRules
from storymind.models import (
    BehaviorKnowledge,
    ConceptKnowledge,
    ConsolidatedKnowledge,
    EntityKnowledge,
    KnowledgeEntry,
    LocationKnowledge,
    StoredSession,
)

logger = logging.getLogger(__name__)

EntryT = TypeVar("EntryT", bound=KnowledgeEntry)

# Rounding applied to reinforced strengths so repeated increments land on clean values
STRENGTH_PRECISION = 6


def reinforce(strength: float, increment: float) -> float:
    """Add one reinforcement increment, capped at 1.0. Never decreases."""
    return max(strength, min(1.0, round(strength + increment, STRENGTH_PRECISION)))


class ConsolidatedKnowledgeAggregator:
    """Folds each stored session into the consolidated knowledge counters.

    Every hit increments ``count``, appends one tag and reinforces
    ``strength``. Behavior and concept keys are the procedure and concept
    names recorded in the session's memory state, which is what later passes
    look up.
    """

    def __init__(self, rules: KnowledgeRules = DEFAULT_KNOWLEDGE_RULES, increment: float = 0.1):
        self.rules = rules
        self.increment = increment

    def update(self, knowledge: ConsolidatedKnowledge, session: StoredSession) -> None:
        text = (session.story_text or "").lower()

        for name, tag in self._matches(self.rules.entities, text):
            self._reinforce(knowledge.entities, EntityKnowledge, name, tag)

        for name, tag in self._matches(self.rules.locations, text):
            self._reinforce(knowledge.locations, LocationKnowledge, name, tag)

        behavior_rules = {rule.name: rule for rule in self.rules.behaviors}
        for procedure in session.memory_state.procedural:
            tag = self._tag_for(behavior_rules.get(procedure), text)
            self._reinforce(knowledge.behaviors, BehaviorKnowledge, procedure, tag)

        for category, concepts in session.memory_state.semantic.items():
            for concept in concepts:
                self._reinforce(knowledge.concepts, ConceptKnowledge, concept, category)

        logger.debug(
            "Knowledge now tracks %d entities, %d behaviors, %d locations, %d concepts",
            len(knowledge.entities),
            len(knowledge.behaviors),
            len(knowledge.locations),
            len(knowledge.concepts),
        )

    def _matches(self, rules: Tuple[KnowledgeRule, ...], text: str) -> Iterator[Tuple[str, str]]:
        for rule in rules:
            if rule.name in text:
                yield rule.name, self._tag_for(rule, text)

    def _tag_for(self, rule: Optional[KnowledgeRule], text: str) -> str:
        if rule is not None:
            for tag in rule.tags:
                if tag in text:
                    return tag
        return self.rules.default_tag

    def _reinforce(self, bucket: Dict[str, EntryT], entry_cls: Type[EntryT], key: str, tag: str) -> None:
        entry = bucket.get(key)
        if entry is None:
            entry = entry_cls()
            bucket[key] = entry
        entry.count += 1
        entry.tags().append(tag)
        entry.strength = reinforce(entry.strength, self.increment)
