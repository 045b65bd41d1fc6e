"""Portal data models."""

import re
from dataclasses import dataclass, replace
from enum import Enum
from typing import Any

from ..rubrics.models import InvalidScoreError, RubricReview
from ..utils.logging import get_logger

logger = get_logger(__name__)


class Grade(str, Enum):
    PRATHOM_5 = "Prathom 5"
    PRATHOM_6 = "Prathom 6"

    @property
    def label(self) -> str:
        return GRADE_LABELS[self]


class Room(str, Enum):
    ROOM_1 = "Room 1"
    ROOM_2 = "Room 2"
    ROOM_3 = "Room 3"
    ROOM_4 = "Room 4"

    @property
    def label(self) -> str:
        return self.value.replace("Room ", "ห้อง ")


class ActivityType(str, Enum):
    SPORTS_DAY = "Sports Day"
    CHILDREN_DAY = "Children Day"

    @property
    def label(self) -> str:
        return ACTIVITY_LABELS[self]


GRADE_LABELS = {
    Grade.PRATHOM_5: "ประถมศึกษาปีที่ 5",
    Grade.PRATHOM_6: "ประถมศึกษาปีที่ 6",
}

ACTIVITY_LABELS = {
    ActivityType.SPORTS_DAY: "กิจกรรมกีฬาสี",
    ActivityType.CHILDREN_DAY: "กิจกรรมวันเด็ก",
}

_LEADING_INT = re.compile(r"^\s*([+-]?\d+)")


def parse_student_number(value: str | int | None) -> int:
    """Parse a student number the lenient way spreadsheets produce them.

    Leading digits win ("12a" -> 12); anything unparseable sorts as 0.
    """
    if isinstance(value, int):
        return value
    match = _LEADING_INT.match(value or "")
    return int(match.group(1)) if match else 0


def _label(value: Any) -> str:
    return getattr(value, "label", str(value))


@dataclass(frozen=True)
class Submission:
    """One student's activity entry: video reference plus metadata."""

    name: str
    student_number: str
    grade: Grade | str
    room: Room | str
    activity_type: ActivityType | str
    row_id: int | None = None
    file_url: str = ""
    timestamp: str | None = None
    review: RubricReview | None = None
    revision: int | None = None

    @property
    def is_graded(self) -> bool:
        return self.review is not None and self.review.is_graded

    @property
    def is_pending(self) -> bool:
        return not self.is_graded

    @property
    def student_number_value(self) -> int:
        return parse_student_number(self.student_number)

    @property
    def grade_label(self) -> str:
        return _label(self.grade)

    @property
    def room_label(self) -> str:
        return _label(self.room)

    @property
    def activity_label(self) -> str:
        return _label(self.activity_type)

    def with_review(self, review: RubricReview | None) -> "Submission":
        return replace(self, review=review)

    @classmethod
    def from_api_response(cls, data: dict[str, Any]) -> "Submission":
        """Create a Submission from backend response data.

        Unknown grade/room/activity values are kept as plain strings so a
        new class added on the sheet does not break the listing.
        """
        review = None
        raw_review = data.get("review")
        if isinstance(raw_review, dict):
            try:
                review = RubricReview.from_api_response(raw_review)
            except InvalidScoreError as e:
                logger.warning(f"Ignoring invalid review on row {data.get('rowId')}: {e}")

        row_id = data.get("rowId")
        revision = data.get("revision")

        return cls(
            row_id=int(row_id) if row_id not in (None, "") else None,
            name=str(data.get("name", "")),
            student_number=str(data.get("studentNumber", "")),
            grade=_coerce(Grade, data.get("grade", "")),
            room=_coerce(Room, data.get("room", "")),
            activity_type=_coerce(ActivityType, data.get("activityType", "")),
            file_url=data.get("fileUrl") or "",
            timestamp=data.get("timestamp"),
            review=review,
            revision=int(revision) if revision not in (None, "") else None,
        )


def _coerce(enum_cls: type[Enum], value: Any) -> Any:
    try:
        return enum_cls(value)
    except ValueError:
        return str(value)


def enum_value(value: Any) -> str:
    """Plain string value of an enum member or an uncoerced string."""
    return value.value if isinstance(value, Enum) else str(value)
