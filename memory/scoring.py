"""Scoring helpers for semantic search."""

from __future__ import annotations

import math
from collections.abc import Iterable, Sequence
from datetime import datetime

# Blend weights; they sum to 1.
SEMANTIC_WEIGHT = 0.40
OVERLAP_WEIGHT = 0.25
RECENCY_WEIGHT = 0.15
IMPORTANCE_WEIGHT = 0.10
INTENT_WEIGHT = 0.10

NEUTRAL_AFFINITY = 0.5
INTENT_AFFINITY: dict[str, dict[str, float]] = {
    "explanation": {"session": 0.8, "note": 0.9, "insight": 0.9},
    "information": {"task": 0.9, "goal": 0.9, "habit": 0.8},
    "temporal": {"session": 0.9, "timeblock": 0.9},
    "recommendation": {"insight": 0.9, "goal": 0.7},
    "analysis": {"session": 0.8, "task": 0.8, "goal": 0.8},
}


def cosine_similarity(a: Sequence[float], b: Sequence[float]) -> float:
    dot = sum(x * y for x, y in zip(a, b))
    norm_a = math.sqrt(sum(x * x for x in a))
    norm_b = math.sqrt(sum(y * y for y in b))
    if norm_a == 0 or norm_b == 0:
        return 0.0
    return dot / (norm_a * norm_b)


def term_overlap(item_terms: Iterable[str], query_terms: Sequence[str]) -> float:
    """Share of query terms that match (by containment) any item term."""
    if not query_terms:
        return 0.0
    terms = [t.lower() for t in item_terms]
    matched = 0
    for raw in query_terms:
        q = raw.lower()
        if any(q in term or term in q for term in terms):
            matched += 1
    return matched / len(query_terms)


def recency_score(timestamp: datetime, now: datetime, window_days: float = 30.0) -> float:
    """Linear decay from 1 (now) to 0 (``window_days`` old)."""
    age_days = max(0.0, (now - timestamp).total_seconds() / 86400.0)
    return max(0.0, 1.0 - age_days / window_days)


def intent_affinity(intent: str, record_type: str) -> float:
    return INTENT_AFFINITY.get(intent, {}).get(record_type, NEUTRAL_AFFINITY)


def relevance(semantic: float, overlap: float, recency: float, importance: float, affinity: float) -> float:
    return (
        SEMANTIC_WEIGHT * semantic
        + OVERLAP_WEIGHT * overlap
        + RECENCY_WEIGHT * recency
        + IMPORTANCE_WEIGHT * importance
        + INTENT_WEIGHT * affinity
    )
