"""Rule-based feature extraction from story text."""

import re
from dataclasses import dataclass, field
from typing import List, Optional

from .rules import DEFAULT_EXTRACTION_RULES, ExtractionRules

_SENTENCE_BOUNDARY = re.compile(r"[.!?]+")


@dataclass(frozen=True)
class Episode:
    event: str
    context: str


@dataclass
class ExtractionResult:
    """Features found in one text, each list in vocabulary order."""

    entities: List[str] = field(default_factory=list)
    actions: List[str] = field(default_factory=list)
    concepts: List[str] = field(default_factory=list)
    episodes: List[Episode] = field(default_factory=list)
    procedures: List[str] = field(default_factory=list)

    def is_empty(self) -> bool:
        return not (self.entities or self.actions or self.concepts or self.episodes or self.procedures)


def _normalize(text: Optional[str]) -> str:
    if not text:
        return ""
    if not isinstance(text, str):
        text = str(text)
    return text.lower()


def split_sentences(text: Optional[str]) -> List[str]:
    """Split text on runs of sentence punctuation, dropping blank pieces.

    Args:
        text: Raw text (None is treated as empty)

    Returns:
        Stripped, non-empty sentences in order
    """
    if not text:
        return []
    return [s.strip() for s in _SENTENCE_BOUNDARY.split(str(text)) if s.strip()]


class FeatureExtractor:
    """Maps raw text to entities, actions, concepts, episodes and procedures.

    Matching is case-insensitive substring containment against the rule
    tables, so the same text always produces the same, ordered output. Any
    input is accepted; text without matches yields empty lists.
    """

    def __init__(self, rules: ExtractionRules = DEFAULT_EXTRACTION_RULES):
        self.rules = rules

    def extract(self, text: Optional[str]) -> ExtractionResult:
        lowered = _normalize(text)
        return ExtractionResult(
            entities=self._entities(lowered),
            actions=self._actions(lowered),
            concepts=self._concepts(lowered),
            episodes=self._episodes(lowered),
            procedures=self._procedures(lowered),
        )

    def extract_entities(self, text: Optional[str]) -> List[str]:
        return self._entities(_normalize(text))

    def extract_actions(self, text: Optional[str]) -> List[str]:
        return self._actions(_normalize(text))

    def extract_concepts(self, text: Optional[str]) -> List[str]:
        return self._concepts(_normalize(text))

    def extract_episodes(self, text: Optional[str]) -> List[Episode]:
        return self._episodes(_normalize(text))

    def extract_procedures(self, text: Optional[str]) -> List[str]:
        return self._procedures(_normalize(text))

    def categorize(self, concept: str) -> str:
        """Semantic category for a concept; first matching rule wins."""
        for rule in self.rules.categories:
            if any(keyword in concept for keyword in rule.keywords):
                return rule.category
        return self.rules.default_category

    def _entities(self, lowered: str) -> List[str]:
        return [term for term in self.rules.entity_vocabulary if term in lowered]

    def _actions(self, lowered: str) -> List[str]:
        return [word for word in self.rules.actions if word in lowered]

    def _concepts(self, lowered: str) -> List[str]:
        return [rule.concept for rule in self.rules.concepts if any(t in lowered for t in rule.triggers)]

    def _episodes(self, lowered: str) -> List[Episode]:
        return [
            Episode(event=template.event, context=template.context)
            for template in self.rules.episodes
            if any(t in lowered for t in template.triggers)
        ]

    def _procedures(self, lowered: str) -> List[str]:
        return [rule.procedure for rule in self.rules.procedures if all(t in lowered for t in rule.triggers)]
