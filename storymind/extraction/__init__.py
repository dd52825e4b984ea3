"""Rule-based feature extraction and association scoring."""

from .association import AssociationScorer
from .extractor import Episode, ExtractionResult, FeatureExtractor, split_sentences
from .rules import (
    DEFAULT_EXTRACTION_RULES,
    DEFAULT_KNOWLEDGE_RULES,
    DEFAULT_PATTERN_RULES,
    BehaviorRule,
    CategoryRule,
    ConceptRule,
    EpisodeTemplate,
    ExtractionRules,
    KnowledgeRule,
    KnowledgeRules,
    PatternRules,
    ProcedureRule,
)

__all__ = [
    "AssociationScorer",
    "BehaviorRule",
    "CategoryRule",
    "ConceptRule",
    "DEFAULT_EXTRACTION_RULES",
    "DEFAULT_KNOWLEDGE_RULES",
    "DEFAULT_PATTERN_RULES",
    "Episode",
    "EpisodeTemplate",
    "ExtractionResult",
    "ExtractionRules",
    "FeatureExtractor",
    "KnowledgeRule",
    "KnowledgeRules",
    "PatternRules",
    "ProcedureRule",
    "split_sentences",
]
