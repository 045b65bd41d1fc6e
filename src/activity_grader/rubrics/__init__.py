"""
Rubrics module.

The fixed four-dimension activity rubric and its derived totals.
"""

from .models import (
    DIMENSIONS,
    DIMENSION_KEYS,
    MAX_POINTS,
    MAX_TOTAL,
    SCORE_BANDS,
    Dimension,
    InvalidScoreError,
    ReviewStatus,
    RubricReview,
    ScoreBand,
    Totals,
    compute_totals,
    validate_points,
)

__all__ = [
    "DIMENSIONS",
    "DIMENSION_KEYS",
    "MAX_POINTS",
    "MAX_TOTAL",
    "SCORE_BANDS",
    "Dimension",
    "InvalidScoreError",
    "ReviewStatus",
    "RubricReview",
    "ScoreBand",
    "Totals",
    "compute_totals",
    "validate_points",
]
