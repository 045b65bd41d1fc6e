"""Student-side result lookup."""

from typing import Any, Iterable

from .polling import PollingTask
from .portal.models import Submission, enum_value
from .store import SubmissionStore


def find_result(
    submissions: Iterable[Submission],
    name: str,
    grade: Any,
    room: Any,
    activity_type: Any,
) -> Submission | None:
    """First submission in the class whose name contains ``name``."""
    query = name.strip().lower()
    for submission in submissions:
        if (
            query in submission.name.lower()
            and enum_value(submission.grade) == enum_value(grade)
            and enum_value(submission.room) == enum_value(room)
            and enum_value(submission.activity_type) == enum_value(activity_type)
        ):
            return submission
    return None


def watch_for_review(
    store: SubmissionStore,
    submission: Submission,
    interval: float = 20.0,
) -> PollingTask:
    """
    Poll the store until the given submission has a review.

    Returns:
        An unstarted PollingTask; start it or use it as a context manager
    """

    def reviewed() -> bool:
        current = store.get(submission.row_id)
        return current is not None and current.review is not None

    return PollingTask(
        action=store.refresh,
        interval=interval,
        until=reviewed,
        name=f"result-poll-{submission.row_id}",
    )
