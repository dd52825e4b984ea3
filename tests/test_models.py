"""Tests for memory data models."""

from datetime import datetime, timezone

import pytest
from pydantic import ValidationError

from storymind.models import (
    BehaviorKnowledge,
    ConceptKnowledge,
    CrossStoryPattern,
    EntityKnowledge,
    LocationKnowledge,
    MemoryEvent,
    MemoryState,
    PersistentState,
    StoredSession,
)


class TestCamelCase:
    def test_dump_uses_camel_case(self):
        state = MemoryState(working_memory=["sarah"], cross_story_links=[])
        data = state.model_dump(by_alias=True)

        assert data["workingMemory"] == ["sarah"]
        assert "crossStoryLinks" in data
        assert "shortTerm" in data

    def test_accepts_both_key_styles(self):
        assert MemoryState.model_validate({"workingMemory": ["a"]}).working_memory == ["a"]
        assert MemoryState.model_validate({"working_memory": ["b"]}).working_memory == ["b"]

    def test_unknown_keys_are_kept(self):
        state = PersistentState.model_validate({"allSessions": [], "futureField": 1})

        assert state.to_blob()["futureField"] == 1


class TestDefaults:
    def test_none_means_default(self):
        state = PersistentState.model_validate(
            {"allSessions": None, "crossStoryPatterns": None, "consolidatedKnowledge": None, "userProfile": None}
        )

        assert state == PersistentState()

    def test_required_fields_still_required(self):
        with pytest.raises(ValidationError):
            StoredSession.model_validate({"storyText": "no id"})


class TestDatetimes:
    def test_iso_strings_with_z_suffix(self):
        pattern = CrossStoryPattern.model_validate(
            {
                "type": "recurring_entity",
                "pattern": "coffee",
                "firstSeen": "2025-10-24T10:30:00Z",
                "lastSeen": "2025-10-24T11:00:00.000Z",
            }
        )

        assert pattern.first_seen == datetime(2025, 10, 24, 10, 30, tzinfo=timezone.utc)
        assert pattern.last_seen.hour == 11

    def test_pattern_key(self):
        now = datetime.now(timezone.utc)
        pattern = CrossStoryPattern(type="semantic_cluster", pattern="habits", first_seen=now, last_seen=now)

        assert pattern.key == ("semantic_cluster", "habits")

    def test_unknown_pattern_type_rejected(self):
        now = datetime.now(timezone.utc)
        with pytest.raises(ValidationError):
            CrossStoryPattern(type="mood", pattern="happy", first_seen=now, last_seen=now)


class TestMemoryEvent:
    def test_events_are_frozen(self):
        event = MemoryEvent(id=0, timestamp=100, memory_type="Working Memory", action="process", content="x")

        with pytest.raises(ValidationError):
            event.content = "changed"

    def test_action_vocabulary(self):
        with pytest.raises(ValidationError):
            MemoryEvent(id=0, timestamp=0, memory_type="Working Memory", action="dance", content="x")

    def test_semantic_concepts_in_filing_order(self):
        state = MemoryState(semantic={"habits": ["coffee culture", "morning routine"], "personal": ["family"]})

        assert state.semantic_concepts() == ["coffee culture", "morning routine", "family"]


class TestKnowledgeEntries:
    @pytest.mark.parametrize(
        "entry",
        [
            EntityKnowledge(contexts=["morning"]),
            BehaviorKnowledge(variations=["morning"]),
            LocationKnowledge(descriptions=["morning"]),
            ConceptKnowledge(associations=["morning"]),
        ],
    )
    def test_tags_are_the_entry_list(self, entry):
        entry.tags().append("evening")

        assert entry.tags() == ["morning", "evening"]
        assert getattr(entry, entry.tags_field) == ["morning", "evening"]

    def test_tags_field_is_not_serialized(self):
        assert EntityKnowledge().model_dump(by_alias=True) == {"count": 0, "strength": 0.0, "contexts": []}
