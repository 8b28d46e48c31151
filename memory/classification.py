"""Ordered keyword rules for query intent and question topic."""

from __future__ import annotations

from collections.abc import Sequence

from memory.embedding import tokenize

INTENT_RULES: list[tuple[frozenset[str], str]] = [
    (frozenset({"how", "why"}), "explanation"),
    (frozenset({"what", "which"}), "information"),
    (frozenset({"when", "time"}), "temporal"),
    (frozenset({"should", "recommend"}), "recommendation"),
    (frozenset({"trend", "trends", "pattern", "patterns"}), "analysis"),
    (frozenset({"compare", "difference"}), "comparison"),
]

TOPIC_RULES: list[tuple[frozenset[str], str]] = [
    (frozenset({"productive", "productivity", "efficiency", "efficient"}), "productivity"),
    (frozenset({"goal", "goals", "objective", "objectives"}), "goals"),
    (frozenset({"time", "schedule"}), "time_management"),
    (frozenset({"habit", "habits", "routine", "routines"}), "habits"),
    (frozenset({"pattern", "patterns", "trend", "trends"}), "patterns"),
    (frozenset({"energy", "tired"}), "energy"),
    (frozenset({"focus", "concentration"}), "focus"),
    (frozenset({"challenge", "challenges", "problem", "problems"}), "challenges"),
]


def classify(text: str, rules: Sequence[tuple[frozenset[str], str]], default: str = "general") -> str:
    """Label of the first rule sharing a word with the text."""
    words = set(tokenize(text))
    for triggers, label in rules:
        if words & triggers:
            return label
    return default


def classify_intent(query: str) -> str:
    return classify(query, INTENT_RULES)


def classify_topic(question: str) -> str:
    return classify(question, TOPIC_RULES)
