"""
Test: rubric totals and review model.
"""
import itertools

import pytest

from activity_grader.rubrics import (
    InvalidScoreError,
    ReviewStatus,
    RubricReview,
    SCORE_BANDS,
    compute_totals,
)


def _dims(a, b, c, d):
    return {"content_accuracy": a, "participation": b, "presentation": c, "discipline": d}


class TestComputeTotals:
    def test_full_marks(self):
        totals = compute_totals(_dims(5, 5, 5, 5))
        assert (totals.total_score, totals.percentage) == (20, 100)

    def test_mixed(self):
        totals = compute_totals(_dims(3, 2, 1, 0))
        assert (totals.total_score, totals.percentage) == (6, 30)

    def test_every_combination(self):
        for a, b, c, d in itertools.product(range(6), repeat=4):
            totals = compute_totals(_dims(a, b, c, d))
            total = a + b + c + d
            assert totals.total_score == total
            assert totals.percentage == total * 5

    @pytest.mark.parametrize("bad", [6, -1, 2.5, "3", True, None])
    def test_rejects_out_of_range_or_non_int(self, bad):
        with pytest.raises(InvalidScoreError):
            compute_totals(_dims(bad, 0, 0, 0))

    def test_rejects_missing_dimension(self):
        with pytest.raises(InvalidScoreError):
            compute_totals({"content_accuracy": 1, "participation": 1, "presentation": 1})


class TestRubricReview:
    def test_totals_follow_scores(self):
        review = RubricReview(1, 2, 3, 4)
        assert review.total_score == 10
        assert review.percentage == 50
        changed = review.with_scores(discipline=0)
        assert changed.total_score == 6
        assert review.total_score == 10

    def test_comment_change_keeps_totals(self):
        review = RubricReview(5, 4, 3, 2)
        assert review.with_comment("great").totals == review.totals

    def test_totals_cannot_be_set(self):
        review = RubricReview()
        with pytest.raises(AttributeError):
            review.total_score = 20

    def test_constructor_validates(self):
        with pytest.raises(InvalidScoreError):
            RubricReview(content_accuracy=9)

    def test_unknown_dimension(self):
        with pytest.raises(InvalidScoreError):
            RubricReview().with_scores(creativity=3)

    def test_zeroed_is_pending(self):
        review = RubricReview.zeroed()
        assert review.status is ReviewStatus.PENDING
        assert review.total_score == 0
        assert not review.is_graded

    def test_mark_graded(self):
        assert RubricReview(1, 1, 1, 1).mark_graded().status is ReviewStatus.GRADED

    def test_from_api_response_recomputes_totals(self):
        review = RubricReview.from_api_response({
            "contentAccuracy": 4.0, "participation": "5", "presentation": 3, "discipline": 2,
            "totalScore": 99, "percentage": 1, "comment": "ok", "status": "Graded",
            "gradedAt": "2026-01-10T08:00:00Z",
        })
        assert review.total_score == 14
        assert review.percentage == 70
        assert review.is_graded
        assert review.graded_at == "2026-01-10T08:00:00Z"

    def test_from_api_response_unknown_status_is_pending(self):
        review = RubricReview.from_api_response({"status": "Draft"})
        assert review.status is ReviewStatus.PENDING

    def test_to_payload(self):
        payload = RubricReview(1, 2, 3, 4, comment="c", status=ReviewStatus.GRADED).to_payload()
        assert payload == {
            "contentAccuracy": 1, "participation": 2, "presentation": 3, "discipline": 4,
            "totalScore": 10, "percentage": 50, "comment": "c", "status": "Graded",
        }


def test_score_bands_cover_every_total_once():
    for total in range(21):
        assert sum(1 for band in SCORE_BANDS if band.contains(total)) == 1
