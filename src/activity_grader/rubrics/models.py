"""Rubric data models.

The rubric is fixed: four dimensions scored 0-5 each, for a total out of
20. Totals and percentage are derived from the dimensions on every read,
so they can never drift from the scores they summarize.
"""

import math
from dataclasses import dataclass, replace
from enum import Enum
from typing import Any, Mapping

MIN_POINTS = 0
MAX_POINTS = 5


class InvalidScoreError(ValueError):
    """Raised when a rubric dimension value is not an integer in range."""


class ReviewStatus(str, Enum):
    PENDING = "Pending"
    GRADED = "Graded"


@dataclass(frozen=True)
class Dimension:
    """A single scored rubric dimension."""

    key: str
    wire_key: str
    label: str


DIMENSIONS: tuple[Dimension, ...] = (
    Dimension("content_accuracy", "contentAccuracy", "เนื้อหา/ความถูกต้อง"),
    Dimension("participation", "participation", "การมีส่วนร่วม"),
    Dimension("presentation", "presentation", "เทคนิคการนำเสนอ"),
    Dimension("discipline", "discipline", "ความมีวินัย"),
)
DIMENSION_KEYS = tuple(d.key for d in DIMENSIONS)
MAX_TOTAL = MAX_POINTS * len(DIMENSIONS)


@dataclass(frozen=True)
class Totals:
    total_score: int
    percentage: int


@dataclass(frozen=True)
class ScoreBand:
    """A score range used for the statistics distribution."""

    label: str
    low: int
    high: int

    def contains(self, total: int) -> bool:
        return self.low <= total <= self.high


SCORE_BANDS: tuple[ScoreBand, ...] = (
    ScoreBand("ยอดเยี่ยม (18-20)", 18, 20),
    ScoreBand("ดีมาก (14-17)", 14, 17),
    ScoreBand("ผ่านเกณฑ์ (10-13)", 10, 13),
    ScoreBand("ควรปรับปรุง (0-9)", 0, 9),
)


def validate_points(key: str, value: Any) -> int:
    """Return value if it is an int in [0, 5], else raise InvalidScoreError."""
    # bool is an int subclass but never a valid score
    if isinstance(value, bool) or not isinstance(value, int):
        raise InvalidScoreError(f"'{key}' must be an integer, got {value!r}")
    if not MIN_POINTS <= value <= MAX_POINTS:
        raise InvalidScoreError(
            f"'{key}' must be between {MIN_POINTS} and {MAX_POINTS}, got {value}"
        )
    return value


def _round_half_up(value: float) -> int:
    return int(math.floor(value + 0.5))


def compute_totals(dimensions: Mapping[str, int]) -> Totals:
    """Compute total score and percentage from the four dimension scores.

    Args:
        dimensions: Mapping of dimension key to points

    Returns:
        Totals with the sum (0-20) and the rounded percentage (0-100)

    Raises:
        InvalidScoreError: If a dimension is missing or out of range
    """
    total = 0
    for key in DIMENSION_KEYS:
        if key not in dimensions:
            raise InvalidScoreError(f"Missing rubric dimension '{key}'")
        total += validate_points(key, dimensions[key])

    return Totals(total_score=total, percentage=_round_half_up(total / MAX_TOTAL * 100))


@dataclass(frozen=True)
class RubricReview:
    """The rubric result attached to a submission."""

    content_accuracy: int = 0
    participation: int = 0
    presentation: int = 0
    discipline: int = 0
    comment: str = ""
    status: ReviewStatus = ReviewStatus.PENDING
    graded_at: str | None = None

    def __post_init__(self):
        for key in DIMENSION_KEYS:
            validate_points(key, getattr(self, key))
        if not isinstance(self.status, ReviewStatus):
            object.__setattr__(self, "status", ReviewStatus(self.status))

    @property
    def dimensions(self) -> dict[str, int]:
        return {key: getattr(self, key) for key in DIMENSION_KEYS}

    @property
    def totals(self) -> Totals:
        return compute_totals(self.dimensions)

    @property
    def total_score(self) -> int:
        return self.totals.total_score

    @property
    def percentage(self) -> int:
        return self.totals.percentage

    @property
    def is_graded(self) -> bool:
        return self.status is ReviewStatus.GRADED

    def with_scores(self, **scores: int) -> "RubricReview":
        """Return a copy with some dimensions replaced."""
        unknown = set(scores) - set(DIMENSION_KEYS)
        if unknown:
            raise InvalidScoreError(f"Unknown rubric dimensions: {sorted(unknown)}")
        return replace(self, **scores)

    def with_comment(self, comment: str) -> "RubricReview":
        return replace(self, comment=comment)

    def mark_graded(self) -> "RubricReview":
        return replace(self, status=ReviewStatus.GRADED)

    @classmethod
    def zeroed(cls) -> "RubricReview":
        """An empty Pending rubric used to seed a new editing session."""
        return cls()

    @classmethod
    def from_api_response(cls, data: dict[str, Any]) -> "RubricReview":
        """Create a RubricReview from backend data.

        Stored totalScore/percentage are ignored; they are recomputed.
        """
        scores = {}
        for dim in DIMENSIONS:
            raw = data.get(dim.wire_key, 0)
            # Spreadsheet backends hand back floats like 4.0
            if isinstance(raw, float) and raw.is_integer():
                raw = int(raw)
            elif isinstance(raw, str) and raw.strip().isdigit():
                raw = int(raw)
            scores[dim.key] = raw if raw not in (None, "") else 0

        status = data.get("status") or ReviewStatus.PENDING.value
        try:
            status = ReviewStatus(status)
        except ValueError:
            status = ReviewStatus.PENDING

        return cls(
            **scores,
            comment=str(data.get("comment") or ""),
            status=status,
            graded_at=data.get("gradedAt") or None,
        )

    def to_payload(self) -> dict[str, Any]:
        """Serialize the review in the backend's camelCase shape."""
        totals = self.totals
        payload: dict[str, Any] = {dim.wire_key: getattr(self, dim.key) for dim in DIMENSIONS}
        payload.update(
            totalScore=totals.total_score,
            percentage=totals.percentage,
            comment=self.comment,
            status=self.status.value,
        )
        return payload
