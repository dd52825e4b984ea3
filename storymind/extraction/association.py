"""Association strength between working-memory items and semantic concepts."""

import random
from typing import Optional, Sequence, Tuple

SHARED_TOKEN_STRENGTH = 0.8
RELATIONSHIP_STRENGTH = 0.6
# Upper bound (exclusive) of the filler strength for unrelated pairs
WEAK_STRENGTH_CEILING = 0.4


class AssociationScorer:
    """Scores concept pairs with a small rule table and a weak random fallback.

    Policy, in priority order:
    1. Shared whitespace-delimited token -> 0.8
    2. Known relationship pair (either order, substring match) -> 0.6
    3. Otherwise a pseudo-random value in [0, 0.4)

    The random source is injectable so tests can pin the fallback.
    """

    def __init__(
        self,
        relationships: Sequence[Tuple[str, str]] = (),
        rng: Optional[random.Random] = None,
        threshold: float = 0.3,
    ):
        self.relationships = tuple(relationships)
        self.rng = rng if rng is not None else random.Random()
        self.threshold = threshold

    def score(self, concept_a: str, concept_b: str) -> float:
        tokens_b = set(concept_b.split())
        if any(token in tokens_b for token in concept_a.split()):
            return SHARED_TOKEN_STRENGTH

        for a, b in self.relationships:
            if (a in concept_a and b in concept_b) or (b in concept_a and a in concept_b):
                return RELATIONSHIP_STRENGTH

        return self.rng.random() * WEAK_STRENGTH_CEILING

    def retains(self, strength: float) -> bool:
        """Whether a scored pair is kept as an associative memory."""
        return strength > self.threshold
