"""
Grading module.

AI scoring, the single-submission editing workflow and bulk grading.
"""

from .bulk import BulkFailure, BulkGrader, BulkProgress, BulkResult
from .scorer import (
    AnthropicScorer,
    MalformedScoreError,
    Scorer,
    ScorerError,
    ScoreSuggestion,
    build_prompt,
    extract_json_from_response,
    validate_score_response,
)
from .workflow import GradingWorkflow, MissingRowIdError

__all__ = [
    "AnthropicScorer",
    "BulkFailure",
    "BulkGrader",
    "BulkProgress",
    "BulkResult",
    "GradingWorkflow",
    "MalformedScoreError",
    "MissingRowIdError",
    "Scorer",
    "ScorerError",
    "ScoreSuggestion",
    "build_prompt",
    "extract_json_from_response",
    "validate_score_response",
]
