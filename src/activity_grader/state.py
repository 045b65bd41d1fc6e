"""Application state and the pure reducers that move it forward.

``AppState`` is immutable. Every transition is a plain function taking the
current state and returning a new one; the workflows in ``grading`` own
the side effects (scorer and backend calls) and feed results back through
these reducers.
"""

from dataclasses import dataclass, replace
from enum import Enum

from .filtering import FilterCriteria, SortKey
from .portal.models import Submission
from .rubrics.models import DIMENSION_KEYS, InvalidScoreError, RubricReview, validate_points

AI_SUGGESTION_MARKER = "🤖 [AI วิเคราะห์]: "
AI_BULK_MARKER = "🤖 [AI Auto-Grade]: "


class View(str, Enum):
    STUDENT = "STUDENT"
    RESULT = "RESULT"
    GALLERY = "GALLERY"
    TEACHER_LOGIN = "TEACHER_LOGIN"
    TEACHER = "TEACHER"
    DASHBOARD = "DASHBOARD"


class NotEditingError(RuntimeError):
    """Raised when an editing-only action runs without an editing session."""


class NotAuthorizedError(PermissionError):
    """Raised when a teacher-only action runs before login."""


@dataclass(frozen=True)
class EditingSession:
    """Working rubric for the one submission being graded."""

    submission: Submission
    rubric: RubricReview

    @property
    def row_id(self) -> int | None:
        return self.submission.row_id


@dataclass(frozen=True)
class AppState:
    view: View = View.STUDENT
    is_teacher: bool = False
    teacher_name: str = ""
    editing: EditingSession | None = None
    criteria: FilterCriteria = FilterCriteria()
    sort_key: SortKey = SortKey.LATEST
    error_message: str | None = None

    @property
    def is_editing(self) -> bool:
        return self.editing is not None


# -----------------------------------------------------------------------------
# Navigation and login
# -----------------------------------------------------------------------------


def navigate(state: AppState, view: View) -> AppState:
    """Switch views; the teacher view is only reachable after login."""
    view = View(view)
    if view is View.TEACHER and not state.is_teacher:
        view = View.TEACHER_LOGIN
    return replace(state, view=view)


def login_succeeded(state: AppState, teacher_name: str) -> AppState:
    return replace(state, is_teacher=True, teacher_name=teacher_name, view=View.TEACHER, error_message=None)


def login_failed(state: AppState, message: str) -> AppState:
    return replace(state, is_teacher=False, error_message=message)


def logout(state: AppState) -> AppState:
    return replace(state, is_teacher=False, teacher_name="", editing=None, view=View.STUDENT)


def require_teacher(state: AppState) -> None:
    if not state.is_teacher:
        raise NotAuthorizedError("Teacher login required")


# -----------------------------------------------------------------------------
# Filters
# -----------------------------------------------------------------------------


def set_criteria(state: AppState, **changes) -> AppState:
    return replace(state, criteria=replace(state.criteria, **changes))


def set_sort_key(state: AppState, sort_key: SortKey | str) -> AppState:
    return replace(state, sort_key=SortKey(sort_key))


# -----------------------------------------------------------------------------
# Editing session
# -----------------------------------------------------------------------------


def start_editing(state: AppState, submission: Submission) -> AppState:
    """Open an editing session seeded from the existing review or zeros.

    Opening a new session replaces any previous one.
    """
    rubric = submission.review or RubricReview.zeroed()
    return replace(state, editing=EditingSession(submission=submission, rubric=rubric), error_message=None)


def _editing(state: AppState) -> EditingSession:
    if state.editing is None:
        raise NotEditingError("No submission is being graded")
    return state.editing


def update_dimension(state: AppState, key: str, value: int) -> AppState:
    """Set one rubric dimension; totals follow automatically.

    Raises:
        InvalidScoreError: For unknown keys or values outside 0-5
    """
    session = _editing(state)
    if key not in DIMENSION_KEYS:
        raise InvalidScoreError(f"Unknown rubric dimension '{key}'")
    validate_points(key, value)
    rubric = session.rubric.with_scores(**{key: value})
    return replace(state, editing=replace(session, rubric=rubric))


def update_comment(state: AppState, comment: str) -> AppState:
    session = _editing(state)
    return replace(state, editing=replace(session, rubric=session.rubric.with_comment(comment)))


def apply_suggestion(state: AppState, row_id: int | None, scores: dict[str, int], comment: str) -> AppState:
    """Overwrite the working rubric with an AI suggestion.

    A suggestion for a session that has since been cancelled or moved to
    another submission is dropped.
    """
    session = state.editing
    if session is None or session.row_id != row_id:
        return state
    rubric = session.rubric.with_scores(**scores).with_comment(f"{AI_SUGGESTION_MARKER}{comment}")
    return replace(state, editing=replace(session, rubric=rubric), error_message=None)


def record_error(state: AppState, message: str) -> AppState:
    return replace(state, error_message=message)


def cancel_editing(state: AppState) -> AppState:
    return replace(state, editing=None, error_message=None)


def finish_save(state: AppState) -> AppState:
    """Close the session after the backend accepted the grade."""
    return replace(state, editing=None, error_message=None)
