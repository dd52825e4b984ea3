"""Lookups against the compartments of a finished pass.

Each lookup reads a ``MemoryState`` (never mutates it) and answers with the
matching items plus a short explanation of what the compartment holds.
Terms match case-insensitively as substrings; an empty term returns the
whole compartment.
"""

import logging
from typing import Callable, Dict, List, get_args

from storymind.models import Compartment, MemoryState, QueryResult

logger = logging.getLogger(__name__)

# Classic 7±2 span; more items than this overloads the buffer
SHORT_TERM_SPAN = 7
SHORT_TERM_SPAN_MARGIN = 2
CAPACITY_KEYWORDS = ("capacity", "hold")

COMPARTMENTS = get_args(Compartment)


def _matching(items: List[str], term: str) -> List[str]:
    return [item for item in items if term in item.lower()]


def _short_term(state: MemoryState, term: str) -> QueryResult:
    items = state.short_term
    if any(keyword in term for keyword in CAPACITY_KEYWORDS):
        limit = SHORT_TERM_SPAN + SHORT_TERM_SPAN_MARGIN
        within = len(items) <= limit
        span = f"{SHORT_TERM_SPAN}±{SHORT_TERM_SPAN_MARGIN}"
        return QueryResult(
            compartment="short_term",
            items=[f"Current: {len(items)} items | Theoretical limit: {span} items"],
            success=within,
            explanation=(
                f"Short-term memory holds {SHORT_TERM_SPAN}±{SHORT_TERM_SPAN_MARGIN} items; current load is "
                f"{len(items)}. "
                + ("Within normal capacity." if within else "Overloaded: items will be dropped or moved on.")
            ),
        )

    matched = _matching(items, term)
    return QueryResult(
        compartment="short_term",
        items=matched,
        success=True,
        explanation=(
            f"Short-term memory holds {len(items)} recent inputs. Perceived sentences fade once the pass "
            "consolidates, so a finished pass usually has none left."
        ),
    )


def _working(state: MemoryState, term: str) -> QueryResult:
    matched = _matching(state.working_memory, term)
    return QueryResult(
        compartment="working",
        items=matched,
        success=bool(matched),
        explanation=f"Working memory processed {len(state.working_memory)} entities and actions.",
    )


def _semantic(state: MemoryState, term: str) -> QueryResult:
    matched = [
        f"{concept} ({category})"
        for category, concepts in state.semantic.items()
        for concept in concepts
        if term in concept.lower() or term in category.lower()
    ]
    return QueryResult(
        compartment="semantic",
        items=matched,
        success=bool(matched),
        explanation=(
            f"Found {len(matched)} of {len(state.semantic_concepts())} concepts across "
            f"{len(state.semantic)} categories."
        ),
    )


def _episodic(state: MemoryState, term: str) -> QueryResult:
    matched = [
        f"{record.event} ({record.context})"
        for record in state.episodic
        if term in record.event.lower() or term in record.context.lower()
    ]
    return QueryResult(
        compartment="episodic",
        items=matched,
        success=bool(matched),
        explanation="Episodic memory reconstructs experiences together with their context.",
    )


def _associative(state: MemoryState, term: str) -> QueryResult:
    matched = [
        f"{a.concept1} ↔ {a.concept2} ({a.strength:.2f})"
        for a in state.associative
        if term in a.concept1.lower() or term in a.concept2.lower()
    ]
    return QueryResult(
        compartment="associative",
        items=matched,
        success=bool(matched),
        explanation=(
            f"Found {len(matched)} of {len(state.associative)} associations. "
            "Strength is how likely one concept triggers recall of the other."
        ),
    )


def _procedural(state: MemoryState, term: str) -> QueryResult:
    matched = _matching(state.procedural, term)
    return QueryResult(
        compartment="procedural",
        items=matched,
        success=bool(matched),
        explanation="Procedural memory encodes behavioral sequences that run without conscious effort.",
    )


def _flash(state: MemoryState, term: str) -> QueryResult:
    matched = _matching(state.flash, term)
    return QueryResult(
        compartment="flash",
        items=matched,
        success=bool(matched),
        explanation=f"Flash memory caches the {len(state.flash)} most recently consolidated items, newest first.",
    )


def _integration(state: MemoryState, term: str) -> QueryResult:
    interactions = []

    events = [record.event.lower() for record in state.episodic]
    overlap = [c for c in state.semantic_concepts() if any(c.lower() in event for event in events)]
    if overlap:
        interactions.append(f"Semantic-Episodic overlap: {len(overlap)} shared concepts")

    in_flash = [item for item in state.working_memory if item in state.flash]
    if in_flash:
        interactions.append(f"Working-Flash interaction: {len(in_flash)} items in both systems")

    return QueryResult(
        compartment="integration",
        items=interactions,
        success=bool(interactions),
        explanation=f"Found {len(interactions)} active interactions between memory systems.",
    )


_HANDLERS: Dict[str, Callable[[MemoryState, str], QueryResult]] = {
    "short_term": _short_term,
    "working": _working,
    "semantic": _semantic,
    "episodic": _episodic,
    "associative": _associative,
    "procedural": _procedural,
    "flash": _flash,
    "integration": _integration,
}


def query_memory(state: MemoryState, compartment: str, term: str = "") -> QueryResult:
    """Look up ``term`` in one compartment of a pass's final state.

    Args:
        state: Final memory state of a pass (or a stored session's state)
        compartment: One of ``COMPARTMENTS``
        term: Substring to match, case-insensitive (empty = everything)

    Returns:
        QueryResult with the matched items and an explanation

    Raises:
        ValueError: If the compartment is unknown
    """
    handler = _HANDLERS.get(compartment)
    if handler is None:
        raise ValueError(f"Unknown compartment '{compartment}'. Choose from: {', '.join(COMPARTMENTS)}")

    query = (term or "").strip()
    result = handler(state, query.lower())
    result.query = query
    logger.debug("Query %s/%r matched %d items", compartment, query, len(result.items))
    return result
