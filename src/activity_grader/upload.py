"""Preparation and validation of student uploads."""

import mimetypes
from pathlib import Path
from typing import Any

from .portal.api import UploadRequest
from .portal.models import ActivityType, Grade, Room, enum_value
from .utils.logging import get_logger

logger = get_logger(__name__)

DEFAULT_MIME_TYPE = "application/octet-stream"


class SubmissionValidationError(ValueError):
    """Raised before any network call when upload fields are missing."""

    def __init__(self, message: str, missing: list[str] | None = None):
        super().__init__(message)
        self.missing = missing or []


def prepare_upload(
    name: str,
    student_number: str,
    video_path: Path | None,
    grade: Any = Grade.PRATHOM_5,
    room: Any = Room.ROOM_1,
    activity_type: Any = ActivityType.SPORTS_DAY,
) -> UploadRequest:
    """
    Validate the form fields and read the video.

    Raises:
        SubmissionValidationError: If name, student number or video is missing
    """
    missing = []
    if not (name or "").strip():
        missing.append("name")
    if not (student_number or "").strip():
        missing.append("student_number")
    if video_path is None or not Path(video_path).is_file():
        missing.append("video")
    if missing:
        raise SubmissionValidationError(f"Missing required fields: {', '.join(missing)}", missing)

    video_path = Path(video_path)
    mime_type = mimetypes.guess_type(video_path.name)[0] or DEFAULT_MIME_TYPE
    logger.debug(f"Prepared upload {video_path.name} ({mime_type})")

    return UploadRequest(
        name=name.strip(),
        student_number=student_number.strip(),
        grade=enum_value(grade),
        room=enum_value(room),
        activity_type=enum_value(activity_type),
        file_data=video_path.read_bytes(),
        file_name=video_path.name,
        mime_type=mime_type,
    )
