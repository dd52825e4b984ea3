"""Tests for association scoring."""

import random

import pytest

from storymind.extraction import DEFAULT_EXTRACTION_RULES, AssociationScorer

from .conftest import FixedRandom


@pytest.fixture
def scorer():
    return AssociationScorer(DEFAULT_EXTRACTION_RULES.relationships, rng=FixedRandom(0.5))


class TestScore:
    def test_shared_token(self, scorer):
        assert scorer.score("coffee shop", "coffee culture") == 0.8

    def test_relationship_pair(self, scorer):
        assert scorer.score("coffee shop", "morning routine") == 0.6

    def test_relationship_pair_reversed(self, scorer):
        assert scorer.score("morning routine", "coffee shop") == 0.6

    def test_shared_token_beats_relationship(self, scorer):
        assert scorer.score("work", "work habits") == 0.8

    def test_unrelated_pair_uses_random_fallback(self, scorer):
        assert scorer.score("flowers", "academic learning") == pytest.approx(0.2)

    def test_fallback_stays_below_ceiling(self):
        scorer = AssociationScorer((), rng=random.Random(1234))
        scores = [scorer.score("latte", "fitness routine") for _ in range(200)]

        assert all(0.0 <= s < 0.4 for s in scores)

    def test_seeded_scorers_agree(self):
        first = AssociationScorer((), rng=random.Random(42))
        second = AssociationScorer((), rng=random.Random(42))

        assert [first.score("a", "b") for _ in range(5)] == [second.score("a", "b") for _ in range(5)]


class TestRetains:
    def test_threshold_is_exclusive(self):
        scorer = AssociationScorer(threshold=0.3)

        assert scorer.retains(0.31)
        assert not scorer.retains(0.3)
        assert not scorer.retains(0.1)
