"""Sequential AI grading of every pending submission in view."""

from dataclasses import dataclass, field
from typing import Callable, Iterable

from ..portal.api import PortalAPIError
from ..portal.models import Submission
from ..rubrics.models import ReviewStatus, RubricReview
from ..state import AI_BULK_MARKER
from ..store import SubmissionStore
from ..utils.logging import get_logger
from .scorer import Scorer, ScorerError

logger = get_logger(__name__)


@dataclass(frozen=True)
class BulkProgress:
    current: int
    total: int
    name: str


@dataclass(frozen=True)
class BulkFailure:
    row_id: int | None
    name: str
    error: str


@dataclass
class BulkResult:
    """Per-item outcome of one bulk run."""

    total: int = 0
    graded: list[int] = field(default_factory=list)
    failed: list[BulkFailure] = field(default_factory=list)
    skipped: list[int] = field(default_factory=list)

    @property
    def succeeded(self) -> int:
        return len(self.graded)


ProgressObserver = Callable[[BulkProgress], None]
CompletionObserver = Callable[[BulkResult], None]


class BulkGrader:
    """Grades a fixed snapshot of pending submissions one at a time.

    Only one scorer request and one backend request are ever in flight.
    A failing item is recorded and the run moves on; nothing is retried.
    """

    def __init__(
        self,
        api,
        scorer: Scorer,
        store: SubmissionStore | None = None,
        verify_before_write: bool = True,
    ):
        """
        Args:
            api: Backend client with ``save_grade``
            scorer: AI scorer
            store: Store refreshed after the run and consulted for
                concurrent grading before each write
            verify_before_write: Refresh the store before each write so a
                grade saved elsewhere during the run is detected
        """
        self.api = api
        self.scorer = scorer
        self.store = store
        self.verify_before_write = verify_before_write

    def run(
        self,
        submissions: Iterable[Submission],
        on_progress: ProgressObserver | None = None,
        on_complete: CompletionObserver | None = None,
    ) -> BulkResult:
        """
        Grade every pending submission from ``submissions``.

        Args:
            submissions: The currently filtered submissions, in display order
            on_progress: Called before each item with its 1-based position
            on_complete: Called once after the final store refresh

        Returns:
            BulkResult listing graded, failed and skipped rows
        """
        # Snapshot once; later changes to the caller's data do not affect the run
        pending = tuple(s for s in submissions if s.is_pending)
        result = BulkResult(total=len(pending))

        if not pending:
            logger.info("No pending submissions to grade")
            return result

        logger.info(f"Bulk grading {len(pending)} submissions")

        for index, submission in enumerate(pending, 1):
            if on_progress is not None:
                on_progress(BulkProgress(current=index, total=len(pending), name=submission.name))
            logger.info(f"[{index}/{len(pending)}] Grading: {submission.name}")
            self._grade_one(submission, result)

        self._refresh()
        logger.info(
            f"Bulk grading complete: {result.succeeded}/{result.total} graded, "
            f"{len(result.failed)} failed, {len(result.skipped)} skipped"
        )
        if on_complete is not None:
            on_complete(result)
        return result

    def _grade_one(self, submission: Submission, result: BulkResult) -> None:
        if submission.row_id is None:
            result.failed.append(BulkFailure(None, submission.name, "submission has no row id"))
            logger.error(f"Cannot grade {submission.name}: no row id")
            return

        try:
            suggestion = self.scorer.score(submission)
        except ScorerError as e:
            logger.error(f"AI grading failed for {submission.name}: {e}")
            result.failed.append(BulkFailure(submission.row_id, submission.name, str(e)))
            return

        if self._graded_elsewhere(submission):
            logger.warning(f"Skipping {submission.name}: graded by someone else during this run")
            result.skipped.append(submission.row_id)
            return

        review = RubricReview(
            **suggestion.scores,
            comment=f"{AI_BULK_MARKER}{suggestion.comment}",
            status=ReviewStatus.GRADED,
        )
        try:
            self.api.save_grade(submission.row_id, review, submission.activity_type)
        except PortalAPIError as e:
            logger.error(f"Saving grade failed for {submission.name}: {e}")
            result.failed.append(BulkFailure(submission.row_id, submission.name, str(e)))
            return

        result.graded.append(submission.row_id)

    def _graded_elsewhere(self, snapshot: Submission) -> bool:
        """True if the store's copy has moved on since the snapshot."""
        if self.store is None:
            return False

        if self.verify_before_write:
            try:
                self.store.refresh()
            except PortalAPIError as e:
                logger.warning(f"Could not re-check {snapshot.name} before writing: {e}")

        current = self.store.get(snapshot.row_id)
        if current is None:
            return False
        return current.is_graded or current.revision != snapshot.revision

    def _refresh(self) -> None:
        if self.store is None:
            return
        try:
            self.store.refresh()
        except PortalAPIError as e:
            logger.warning(f"Refresh after bulk grading failed: {e}")
