"""Summary statistics for the dashboard view."""

from dataclasses import dataclass
from typing import Any, Sequence

from .filtering import ALL, FilterCriteria, filter_submissions
from .portal.models import Room, Submission
from .rubrics.models import SCORE_BANDS


@dataclass(frozen=True)
class RoomAverage:
    room: Room
    average: float


@dataclass(frozen=True)
class BandCount:
    label: str
    count: int


@dataclass(frozen=True)
class DashboardStats:
    total: int
    graded_count: int
    average_score: float
    room_averages: tuple[RoomAverage, ...]
    distribution: tuple[BandCount, ...]

    @property
    def pending_count(self) -> int:
        return self.total - self.graded_count


def _average(values: Sequence[int]) -> float:
    return sum(values) / len(values) if values else 0.0


def compute_stats(submissions: Sequence[Submission], activity_type: Any = ALL) -> DashboardStats:
    """
    Aggregate graded results, optionally for one activity.

    Only Graded reviews count toward averages and the distribution.
    """
    selected = filter_submissions(submissions, FilterCriteria(activity_type=activity_type))
    graded_scores = [(s, s.review.total_score) for s in selected if s.is_graded]
    scores = [score for _, score in graded_scores]

    room_averages = tuple(
        RoomAverage(room, _average([score for s, score in graded_scores if s.room == room]))
        for room in Room
    )
    distribution = tuple(
        BandCount(band.label, sum(1 for score in scores if band.contains(score)))
        for band in SCORE_BANDS
    )

    return DashboardStats(
        total=len(selected),
        graded_count=len(scores),
        average_score=round(_average(scores), 1),
        room_averages=room_averages,
        distribution=distribution,
    )
