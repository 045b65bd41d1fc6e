"""
Test: filter/sort engine.
"""
import itertools

from conftest import make_submission

from activity_grader.filtering import (
    FilterCriteria,
    SortKey,
    StatusFilter,
    pending_counts_by_activity,
    pending_only,
    select_and_order,
    sort_submissions,
)
from activity_grader.portal.models import ActivityType, Grade, Room
from activity_grader.rubrics.models import ReviewStatus


def _sample():
    return [
        make_submission(row_id=1, name="Anan Srisuk", student_number="12", score=(5, 5, 5, 5)),
        make_submission(row_id=2, name="Busaba", student_number="7", room=Room.ROOM_2),
        make_submission(row_id=3, name="Chai", student_number="3", grade=Grade.PRATHOM_6,
                        activity_type=ActivityType.CHILDREN_DAY, score=(1, 1, 1, 1)),
        make_submission(row_id=4, name="Dao", student_number="21", score=(2, 2, 2, 2),
                        status=ReviewStatus.PENDING),
    ]


class TestFilters:
    def test_empty_input(self):
        assert select_and_order([], FilterCriteria(text="x", grade=Grade.PRATHOM_5), SortKey.LATEST) == []

    def test_no_criteria_keeps_everything_in_order(self):
        subs = _sample()
        assert select_and_order(subs) == subs

    def test_text_matches_name_case_insensitive(self):
        result = select_and_order(_sample(), FilterCriteria(text="anan"))
        assert [s.row_id for s in result] == [1]

    def test_text_matches_student_number_substring(self):
        result = select_and_order(_sample(), FilterCriteria(text="2"))
        assert [s.row_id for s in result] == [1, 4]

    def test_grade_accepts_enum_or_string(self):
        by_enum = select_and_order(_sample(), FilterCriteria(grade=Grade.PRATHOM_6))
        by_str = select_and_order(_sample(), FilterCriteria(grade="Prathom 6"))
        assert [s.row_id for s in by_enum] == [s.row_id for s in by_str] == [3]

    def test_status_uses_review_status(self):
        graded = select_and_order(_sample(), FilterCriteria(status=StatusFilter.GRADED))
        pending = select_and_order(_sample(), FilterCriteria(status="Pending"))
        assert [s.row_id for s in graded] == [1, 3]
        assert [s.row_id for s in pending] == [2, 4]

    def test_conjunction_equals_intersection(self):
        subs = _sample()
        choices = {
            "grade": ["All", Grade.PRATHOM_5, Grade.PRATHOM_6],
            "room": ["All", Room.ROOM_1, Room.ROOM_2],
            "activity_type": ["All", ActivityType.SPORTS_DAY, ActivityType.CHILDREN_DAY],
            "status": ["All", "Pending", "Graded"],
        }
        for grade, room, activity, status in itertools.product(*choices.values()):
            criteria = FilterCriteria(grade=grade, room=room, activity_type=activity, status=status)
            expected = [
                s for s in subs
                if (grade == "All" or s.grade == grade)
                and (room == "All" or s.room == room)
                and (activity == "All" or s.activity_type == activity)
                and (status == "All" or (status == "Graded") == s.is_graded)
            ]
            assert select_and_order(subs, criteria) == expected

    def test_input_not_mutated(self):
        subs = _sample()
        before = list(subs)
        select_and_order(subs, FilterCriteria(text="a"), SortKey.SCORE_HIGH)
        assert subs == before


class TestSorting:
    def test_latest_and_oldest(self):
        subs = [make_submission(row_id=2), make_submission(row_id=None), make_submission(row_id=5)]
        assert [s.row_id for s in sort_submissions(subs, SortKey.LATEST)] == [5, 2, None]
        assert [s.row_id for s in sort_submissions(subs, "oldest")] == [None, 2, 5]

    def test_score_high_is_stable(self):
        subs = [
            make_submission(row_id=1, name="first15", score=(5, 5, 5, 0)),
            make_submission(row_id=2, name="ungraded"),
            make_submission(row_id=3, name="second15", score=(5, 5, 0, 5)),
            make_submission(row_id=4, name="twenty", score=(5, 5, 5, 5)),
        ]
        result = sort_submissions(subs, SortKey.SCORE_HIGH)
        assert [s.name for s in result] == ["twenty", "first15", "second15", "ungraded"]

    def test_score_low_puts_ungraded_last(self):
        subs = [
            make_submission(row_id=1, name="ungraded"),
            make_submission(row_id=2, name="ten", score=(5, 5, 0, 0)),
            make_submission(row_id=3, name="zero", score=(0, 0, 0, 0)),
        ]
        assert [s.name for s in sort_submissions(subs, SortKey.SCORE_LOW)] == ["zero", "ten", "ungraded"]

    def test_repeatable(self):
        subs = _sample()
        first = select_and_order(subs, FilterCriteria(), SortKey.SCORE_HIGH)
        second = select_and_order(subs, FilterCriteria(), SortKey.SCORE_HIGH)
        assert first == second


def test_pending_helpers():
    subs = _sample()
    assert [s.row_id for s in pending_only(subs)] == [2, 4]
    assert pending_counts_by_activity(subs) == {"Sports Day": 2}
