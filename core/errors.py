"""Error taxonomy for the planning, risk and retrieval engines."""

from __future__ import annotations


class PlanwiseError(Exception):
    """Base class for engine errors."""


class DecompositionError(PlanwiseError):
    """Goal decomposition failed; no partial plan is produced."""


class RiskAssessmentError(PlanwiseError):
    """Risk assessment failed internally; callers receive a fallback."""


class IndexingError(PlanwiseError):
    """A record could not be indexed."""


class SearchError(PlanwiseError):
    """Semantic search or question answering failed internally."""


class SummaryError(PlanwiseError):
    """Period summary generation failed internally."""
