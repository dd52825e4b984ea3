"""End-to-end processing of one story against the cross-session store."""

import logging
import random
from datetime import datetime
from typing import Callable, Optional

from storymind.config import Config
from storymind.extraction import AssociationScorer, FeatureExtractor
from storymind.extraction.rules import DEFAULT_EXTRACTION_RULES, ExtractionRules
from storymind.models import ProcessingResult
from storymind.store import CrossSessionPatternStore

from .scheduler import DEFAULT_WINDOWS, EventScheduler, PhaseWindows

logger = logging.getLogger(__name__)


class MemoryProcessor:
    """Runs a full pass: schedule events, persist the session, report active connections.

    The store is injected so several processors (or tests) can share, or
    isolate, persisted knowledge. The pass commits to the store only once,
    after every phase has completed.
    """

    def __init__(
        self,
        store: CrossSessionPatternStore,
        config: Optional[Config] = None,
        rules: ExtractionRules = DEFAULT_EXTRACTION_RULES,
        rng: Optional[random.Random] = None,
        clock: Optional[Callable[[], datetime]] = None,
        windows: PhaseWindows = DEFAULT_WINDOWS,
    ):
        self.store = store
        self.config = config or store.config
        if rng is None:
            rng = random.Random(self.config.random_seed)
        extractor = FeatureExtractor(rules)
        scorer = AssociationScorer(rules.relationships, rng=rng, threshold=self.config.association_threshold)
        self.scheduler = EventScheduler(extractor, scorer, self.config, windows=windows, clock=clock or store.clock)

    def process(self, text: str) -> ProcessingResult:
        existing_knowledge = self.store.get_existing_knowledge()
        events, final_state = self.scheduler.run(text, existing_knowledge)
        session_id = self.store.add_session(text, final_state)
        connections = self.store.get_cross_story_connections()
        logger.debug("Processed session %s: %d events, %d connections", session_id, len(events), len(connections))
        return ProcessingResult(
            events=events,
            final_state=final_state,
            session_id=session_id,
            cross_story_connections=connections,
        )
