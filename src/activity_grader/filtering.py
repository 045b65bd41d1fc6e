"""Selection and ordering of submissions.

Everything here is a pure function of its inputs: nothing mutates the
submissions passed in, and the same inputs always give the same order.
"""

from collections import Counter
from dataclasses import dataclass
from enum import Enum
from typing import Any, Iterable, Sequence

from .portal.models import Submission, enum_value

ALL = "All"

UNGRADED_HIGH_SENTINEL = -1
UNGRADED_LOW_SENTINEL = 100


class SortKey(str, Enum):
    LATEST = "latest"
    OLDEST = "oldest"
    SCORE_HIGH = "score-high"
    SCORE_LOW = "score-low"


class StatusFilter(str, Enum):
    ALL = "All"
    PENDING = "Pending"
    GRADED = "Graded"


@dataclass(frozen=True)
class FilterCriteria:
    """Conjunctive submission filters; "All" disables a predicate."""

    text: str = ""
    grade: Any = ALL
    room: Any = ALL
    activity_type: Any = ALL
    status: StatusFilter | str = StatusFilter.ALL

    def matches(self, submission: Submission) -> bool:
        return (
            _matches_text(submission, self.text)
            and _matches_choice(submission.grade, self.grade)
            and _matches_choice(submission.room, self.room)
            and _matches_choice(submission.activity_type, self.activity_type)
            and _matches_status(submission, self.status)
        )


def _matches_text(submission: Submission, text: str) -> bool:
    if not text:
        return True
    return text.lower() in submission.name.lower() or text in submission.student_number


def _matches_choice(value: Any, wanted: Any) -> bool:
    wanted = enum_value(wanted)
    return wanted == ALL or enum_value(value) == wanted


def _matches_status(submission: Submission, status: Any) -> bool:
    status = StatusFilter(enum_value(status))
    if status is StatusFilter.ALL:
        return True
    if status is StatusFilter.GRADED:
        return submission.is_graded
    return submission.is_pending


def _row_id(submission: Submission) -> int:
    return submission.row_id or 0


def _score_or(submission: Submission, default: int) -> int:
    review = submission.review
    # Pending reviews still carry scores, same as the stored sheet row
    return review.total_score if review is not None else default


def sort_submissions(submissions: Iterable[Submission], sort_key: SortKey | str) -> list[Submission]:
    """Order submissions by sort key. Python's sort is stable, so ties
    keep their incoming order."""
    sort_key = SortKey(sort_key)
    items = list(submissions)

    if sort_key is SortKey.LATEST:
        return sorted(items, key=_row_id, reverse=True)
    if sort_key is SortKey.OLDEST:
        return sorted(items, key=_row_id)
    if sort_key is SortKey.SCORE_HIGH:
        # reverse=True would flip ties, so negate instead
        return sorted(items, key=lambda s: -_score_or(s, UNGRADED_HIGH_SENTINEL))
    return sorted(items, key=lambda s: _score_or(s, UNGRADED_LOW_SENTINEL))


def filter_submissions(submissions: Iterable[Submission], criteria: FilterCriteria) -> list[Submission]:
    return [s for s in submissions if criteria.matches(s)]


def select_and_order(
    submissions: Iterable[Submission],
    criteria: FilterCriteria | None = None,
    sort_key: SortKey | str | None = None,
) -> list[Submission]:
    """Filter then order submissions.

    Args:
        submissions: Input submissions (left untouched)
        criteria: Filters to apply; None keeps everything
        sort_key: Ordering; None keeps the incoming order

    Returns:
        New list of the matching submissions
    """
    selected = filter_submissions(submissions, criteria or FilterCriteria())
    if sort_key is None:
        return selected
    return sort_submissions(selected, sort_key)


def pending_only(submissions: Iterable[Submission]) -> list[Submission]:
    return [s for s in submissions if s.is_pending]


def pending_counts_by_activity(submissions: Sequence[Submission]) -> dict[str, int]:
    """Pending submissions per activity value."""
    counts = Counter(enum_value(s.activity_type) for s in submissions if s.is_pending)
    return dict(counts)
