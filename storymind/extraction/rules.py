"""Declarative vocabularies driving extraction, pattern matching and knowledge counters.

Every table is a frozen dataclass so a caller (or a test) can pass a smaller
or different vocabulary without touching the logic that reads it. The
``DEFAULT_*`` instances hold the stock story vocabulary.
"""

from dataclasses import dataclass
from typing import Tuple


@dataclass(frozen=True)
class ConceptRule:
    """Concept that fires when any trigger appears in the text."""

    concept: str
    triggers: Tuple[str, ...]


@dataclass(frozen=True)
class CategoryRule:
    """Semantic category assigned when any keyword appears in the concept."""

    category: str
    keywords: Tuple[str, ...]


@dataclass(frozen=True)
class EpisodeTemplate:
    event: str
    context: str
    triggers: Tuple[str, ...]


@dataclass(frozen=True)
class ProcedureRule:
    """Procedure recognized only when both trigger terms co-occur."""

    procedure: str
    triggers: Tuple[str, str]


@dataclass(frozen=True)
class BehaviorRule:
    behavior: str
    keywords: Tuple[str, ...]


@dataclass(frozen=True)
class KnowledgeRule:
    """Canonical knowledge key with its tag vocabulary (first tag in the text wins)."""

    name: str
    tags: Tuple[str, ...] = ()


@dataclass(frozen=True)
class ExtractionRules:
    names: Tuple[str, ...] = ()
    places: Tuple[str, ...] = ()
    objects: Tuple[str, ...] = ()
    actions: Tuple[str, ...] = ()
    concepts: Tuple[ConceptRule, ...] = ()
    categories: Tuple[CategoryRule, ...] = ()
    default_category: str = "general"
    episodes: Tuple[EpisodeTemplate, ...] = ()
    procedures: Tuple[ProcedureRule, ...] = ()
    relationships: Tuple[Tuple[str, str], ...] = ()

    @property
    def entity_vocabulary(self) -> Tuple[str, ...]:
        return self.names + self.places + self.objects


@dataclass(frozen=True)
class PatternRules:
    recurring_entities: Tuple[str, ...] = ()
    behaviors: Tuple[BehaviorRule, ...] = ()
    behavior_min_matches: int = 2
    title_locations: Tuple[str, ...] = ()
    entity_strength: float = 0.8
    behavior_strength: float = 0.7
    cluster_strength: float = 0.6


@dataclass(frozen=True)
class KnowledgeRules:
    entities: Tuple[KnowledgeRule, ...] = ()
    behaviors: Tuple[KnowledgeRule, ...] = ()
    locations: Tuple[KnowledgeRule, ...] = ()
    default_tag: str = "general"


DEFAULT_EXTRACTION_RULES = ExtractionRules(
    names=("sarah", "marcus", "mother", "chen", "martinez", "rodriguez", "patel", "kim"),
    places=("coffee shop", "maple street", "corner table", "library", "gym", "kitchen", "bookstore", "subway"),
    objects=("laptop", "latte", "cortado", "report", "flowers", "backpack", "recipe", "metrocard"),
    actions=(
        "walked",
        "entered",
        "remembered",
        "noticed",
        "sat",
        "opened",
        "typing",
        "work",
        "climbed",
        "measured",
        "calculated",
        "tapped",
    ),
    concepts=(
        ConceptRule("coffee culture", ("coffee", "latte", "cortado")),
        ConceptRule("morning routine", ("morning", "routine")),
        ConceptRule("work habits", ("work", "report", "laptop")),
        ConceptRule("academic learning", ("study", "exam", "library")),
        ConceptRule("fitness routine", ("gym", "exercise", "fitness")),
        ConceptRule("culinary skills", ("recipe", "cooking", "kitchen")),
        ConceptRule("family relationships", ("family", "grandmother", "mother")),
    ),
    categories=(
        CategoryRule("habits", ("coffee", "routine")),
        CategoryRule("professional", ("work", "professional")),
        CategoryRule("education", ("academic", "learning")),
        CategoryRule("health", ("fitness", "exercise")),
        CategoryRule("personal", ("family", "relationships")),
        CategoryRule("skills", ("culinary", "cooking")),
    ),
    episodes=(
        EpisodeTemplate("Coffee shop experience", "Professional routine with personal connections", ("coffee",)),
        EpisodeTemplate("Academic study session", "Learning environment with anxiety management", ("study", "library")),
        EpisodeTemplate("Culinary creation", "Family tradition and cultural heritage", ("cooking", "recipe")),
        EpisodeTemplate("Fitness training", "Physical development and professional application", ("gym", "exercise")),
    ),
    procedures=(
        ProcedureRule("coffee shop routine", ("coffee", "routine")),
        ProcedureRule("study organization system", ("study", "organize")),
        ProcedureRule("cooking methodology", ("recipe", "steps")),
        ProcedureRule("exercise sequence", ("gym", "routine")),
        ProcedureRule("transit navigation", ("subway", "commute")),
    ),
    relationships=(
        ("coffee", "morning routine"),
        ("work", "professional"),
        ("study", "academic learning"),
        ("gym", "fitness routine"),
        ("cooking", "culinary skills"),
        ("family", "personal"),
    ),
)

DEFAULT_PATTERN_RULES = PatternRules(
    recurring_entities=("coffee", "sarah", "maria", "alex", "emma", "julia", "david"),
    behaviors=(
        BehaviorRule("morning routine", ("morning", "routine", "coffee", "arrived", "usual")),
        BehaviorRule("work session", ("laptop", "work", "report", "typing", "computer")),
        BehaviorRule("study routine", ("study", "notes", "exam", "library", "review")),
        BehaviorRule("exercise routine", ("gym", "workout", "exercise", "training", "fitness")),
        BehaviorRule("cooking process", ("recipe", "cook", "ingredients", "kitchen", "prepare")),
    ),
    title_locations=("coffee shop", "library", "gym", "kitchen", "bookstore", "train", "subway"),
)

DEFAULT_KNOWLEDGE_RULES = KnowledgeRules(
    entities=(
        KnowledgeRule("coffee", ("morning", "cafe", "routine", "drink")),
        KnowledgeRule("work", ("laptop", "report", "office", "professional")),
        KnowledgeRule("study", ("library", "exam", "notes", "learning")),
        KnowledgeRule("exercise", ("gym", "training", "fitness", "workout")),
        KnowledgeRule("sarah", ("coffee", "work", "family")),
        KnowledgeRule("marcus", ("coffee", "work", "family")),
        KnowledgeRule("mother", ("birthday", "family", "phone")),
    ),
    behaviors=(
        KnowledgeRule("coffee shop routine", ("morning", "weekday", "weekend")),
        KnowledgeRule("study organization system", ("notes", "flashcards", "schedule")),
        KnowledgeRule("cooking methodology", ("measured", "ingredients", "family")),
        KnowledgeRule("exercise sequence", ("warmup", "training", "stretch")),
        KnowledgeRule("transit navigation", ("metrocard", "station", "transfer")),
    ),
    locations=(
        KnowledgeRule("coffee shop", ("corner table", "sunlight", "crowded", "quiet")),
        KnowledgeRule("library", ("quiet", "crowded", "stacks")),
        KnowledgeRule("gym", ("crowded", "empty", "weights")),
        KnowledgeRule("kitchen", ("warm", "stove", "family")),
        KnowledgeRule("bookstore", ("shelves", "quiet", "cafe")),
        KnowledgeRule("subway", ("crowded", "platform", "delayed")),
    ),
)
