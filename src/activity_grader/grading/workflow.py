"""Single-submission grading workflow."""

from ..portal.api import PortalAPIError
from ..portal.models import Submission
from ..state import (
    AppState,
    NotEditingError,
    apply_suggestion,
    cancel_editing,
    finish_save,
    record_error,
    require_teacher,
    start_editing,
    update_comment,
    update_dimension,
)
from ..store import SubmissionStore
from ..utils.logging import get_logger
from .scorer import Scorer, ScoreSuggestion, ScorerError

logger = get_logger(__name__)


class MissingRowIdError(ValueError):
    """The submission being graded has no backend row to write to yet."""


class GradingWorkflow:
    """Drives one editing session against the scorer and the backend.

    The workflow holds the current ``AppState`` and replaces it through
    the reducers in ``activity_grader.state``; callers read ``state``
    after each step.
    """

    def __init__(self, api, scorer: Scorer, store: SubmissionStore, state: AppState | None = None):
        self.api = api
        self.scorer = scorer
        self.store = store
        self.state = state or AppState()

    def open(self, submission: Submission) -> AppState:
        require_teacher(self.state)
        self.state = start_editing(self.state, submission)
        return self.state

    def set_score(self, key: str, value: int) -> AppState:
        self.state = update_dimension(self.state, key, value)
        return self.state

    def set_comment(self, comment: str) -> AppState:
        self.state = update_comment(self.state, comment)
        return self.state

    def auto_grade_once(self) -> ScoreSuggestion:
        """Fill the working rubric with an AI suggestion.

        Raises:
            NotEditingError: If no session is open
            ScorerError: If the scorer fails; the working rubric is untouched
        """
        session = self.state.editing
        if session is None:
            raise NotEditingError("Open a submission before asking the AI")

        try:
            suggestion = self.scorer.score(session.submission)
        except ScorerError as e:
            logger.warning(f"AI suggestion failed for {session.submission.name}: {e}")
            self.state = record_error(self.state, f"AI scoring failed: {e}")
            raise

        self.state = apply_suggestion(self.state, session.row_id, suggestion.scores, suggestion.comment)
        return suggestion

    def save(self) -> AppState:
        """Persist the working rubric as Graded and close the session.

        Raises:
            NotEditingError: If no session is open
            MissingRowIdError: If the submission has no row id; the session
                stays open
            PortalAPIError: If the backend rejects the grade; the session
                stays open
        """
        session = self.state.editing
        if session is None:
            raise NotEditingError("Nothing to save")
        if session.row_id is None:
            raise MissingRowIdError(f"Submission of {session.submission.name} has no row id yet")

        review = session.rubric.mark_graded()
        try:
            self.api.save_grade(session.row_id, review, session.submission.activity_type)
        except PortalAPIError as e:
            self.state = record_error(self.state, f"Saving failed: {e}")
            raise

        logger.info(f"Saved {review.total_score}/20 for {session.submission.name}")
        self.state = finish_save(self.state)
        try:
            self.store.refresh()
        except PortalAPIError as e:
            logger.warning(f"Grade saved but refresh failed: {e}")
        return self.state

    def cancel(self) -> AppState:
        self.state = cancel_editing(self.state)
        return self.state
