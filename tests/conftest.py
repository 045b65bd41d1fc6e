"""
Shared test fixtures: submission factory plus in-memory fakes for the
portal backend and the AI scorer. No network calls.
"""

from dataclasses import replace

import pytest

from activity_grader.grading.scorer import MalformedScoreError, ScorerError, ScoreSuggestion
from activity_grader.portal.api import LoginResult, PortalAPIError, PortalAuthError
from activity_grader.portal.models import ActivityType, Grade, Room, Submission
from activity_grader.rubrics.models import ReviewStatus, RubricReview
from activity_grader.store import SubmissionStore


def make_submission(
    row_id=1,
    name="Somchai",
    student_number="1",
    grade=Grade.PRATHOM_5,
    room=Room.ROOM_1,
    activity_type=ActivityType.SPORTS_DAY,
    score=None,
    status=ReviewStatus.GRADED,
    comment="",
    revision=None,
):
    """Build a submission; ``score`` is a 4-tuple of dimension points."""
    review = None
    if score is not None:
        a, b, c, d = score
        review = RubricReview(
            content_accuracy=a, participation=b, presentation=c, discipline=d,
            comment=comment, status=status,
        )
    return Submission(
        row_id=row_id,
        name=name,
        student_number=student_number,
        grade=grade,
        room=room,
        activity_type=activity_type,
        file_url=f"https://drive.example.com/{row_id}",
        review=review,
        revision=revision,
    )


class FakePortalAPI:
    """Backend double that keeps rows in memory and records every call."""

    def __init__(self, submissions=()):
        self.rows = {s.row_id: s for s in submissions}
        self.order = [s.row_id for s in submissions]
        self.saved = []
        self.list_calls = 0
        self.fail_save_for = set()
        self.fail_list = False
        self.before_save = None

    def list_submissions(self):
        self.list_calls += 1
        if self.fail_list:
            raise PortalAPIError("backend down", "list")
        return [self.rows[row_id] for row_id in self.order]

    def save_grade(self, row_id, review, activity_type):
        if self.before_save is not None:
            self.before_save(row_id)
        if row_id in self.fail_save_for:
            raise PortalAPIError(f"cannot save row {row_id}", "grade")
        self.saved.append((row_id, review, activity_type))
        current = self.rows[row_id]
        self.rows[row_id] = replace(current, review=review, revision=(current.revision or 0) + 1)
        return True

    def login(self, username, pin):
        if pin != "1234":
            raise PortalAuthError("PIN ไม่ถูกต้อง", "login")
        return LoginResult(teacher_name=f"Kru {username}")

    def grade_elsewhere(self, row_id, points=(1, 1, 1, 1)):
        """Simulate another teacher saving a grade."""
        current = self.rows[row_id]
        a, b, c, d = points
        review = RubricReview(a, b, c, d, comment="by hand", status=ReviewStatus.GRADED)
        self.rows[row_id] = replace(current, review=review, revision=(current.revision or 0) + 1)


class FakeScorer:
    """Scorer double: fixed suggestion, or an exception for listed names."""

    def __init__(self, scores=None, comment="ดีมาก", failures=None):
        self.scores = scores or {
            "content_accuracy": 4, "participation": 5, "presentation": 3, "discipline": 4,
        }
        self.comment = comment
        self.failures = failures or {}
        self.calls = []

    def score(self, submission):
        self.calls.append(submission.name)
        error = self.failures.get(submission.name)
        if error is not None:
            raise error
        return ScoreSuggestion(scores=dict(self.scores), comment=self.comment)


@pytest.fixture
def submission_factory():
    return make_submission


@pytest.fixture
def pending_trio():
    return [
        make_submission(row_id=1, name="Anan", student_number="1"),
        make_submission(row_id=2, name="Busaba", student_number="2"),
        make_submission(row_id=3, name="Chai", student_number="3"),
    ]


@pytest.fixture
def fake_api(pending_trio):
    return FakePortalAPI(pending_trio)


@pytest.fixture
def store(fake_api):
    store = SubmissionStore(fake_api)
    store.refresh()
    return store


@pytest.fixture
def fake_scorer():
    return FakeScorer()


__all__ = ["FakePortalAPI", "FakeScorer", "make_submission", "ScorerError", "MalformedScoreError"]
