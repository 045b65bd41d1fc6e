"""Spreadsheet export of all grades."""

import csv
import io
from datetime import date
from pathlib import Path
from typing import Iterable

from ..portal.models import Submission, enum_value
from ..rubrics.models import DIMENSIONS
from ..utils.files import ensure_dir
from ..utils.logging import get_logger

logger = get_logger(__name__)

# Spreadsheet tools need the BOM to read Thai text as UTF-8
BOM = "\ufeff"

HEADERS = [
    "เลขที่",
    "ชื่อ",
    "ชั้น",
    "ห้อง",
    "กิจกรรม",
    *(d.label for d in DIMENSIONS),
    "รวม(20)",
    "ร้อยละ",
    "ความเห็น",
]


def export_order(submissions: Iterable[Submission]) -> list[Submission]:
    """Grade, then room, then numeric student number."""
    return sorted(
        submissions,
        key=lambda s: (enum_value(s.grade), enum_value(s.room), s.student_number_value),
    )


def _row(submission: Submission) -> list:
    review = submission.review
    if review is None:
        scores = [0] * len(DIMENSIONS)
        total, percentage, comment = 0, 0, ""
    else:
        scores = [getattr(review, d.key) for d in DIMENSIONS]
        total, percentage, comment = review.total_score, review.percentage, review.comment

    return [
        submission.student_number,
        submission.name,
        submission.grade_label,
        submission.room_label,
        submission.activity_label,
        *scores,
        total,
        percentage,
        comment,
    ]


def export_csv(submissions: Iterable[Submission]) -> str:
    """
    Render every submission as CSV text.

    Text fields are always quoted with embedded quotes doubled; numbers
    are written bare.

    Returns:
        CSV text starting with a byte-order mark
    """
    buffer = io.StringIO()
    writer = csv.writer(buffer, quoting=csv.QUOTE_NONNUMERIC, lineterminator="\n")
    writer.writerow(HEADERS)
    for submission in export_order(submissions):
        writer.writerow(_row(submission))
    return BOM + buffer.getvalue()


def export_filename(on: date | None = None) -> str:
    return f"grades_{(on or date.today()).isoformat()}.csv"


def write_csv(submissions: Iterable[Submission], output_dir: Path, on: date | None = None) -> Path:
    """Write the CSV export into ``output_dir`` under a dated filename."""
    submissions = list(submissions)
    output_path = ensure_dir(output_dir) / export_filename(on)
    # BOM is already in the text; plain utf-8 avoids writing it twice
    output_path.write_text(export_csv(submissions), encoding="utf-8", newline="")
    logger.info(f"Exported {len(submissions)} rows to {output_path}")
    return output_path
