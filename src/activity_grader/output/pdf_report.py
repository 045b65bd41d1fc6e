"""
Printable class report.

Builds the per-class score summary (one grade, one room, one activity)
and draws it as a PDF with reportlab: title block, score table and the
teacher's signature block.

Usage from code:
    report = build_class_report(submissions, Grade.PRATHOM_5, Room.ROOM_1,
                                ActivityType.SPORTS_DAY, teacher_name="...")
    render_class_report_pdf(report, Path("report.pdf"))
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import date
from pathlib import Path
from typing import Any, Iterable
from xml.sax.saxutils import escape

from reportlab.lib import colors
from reportlab.lib.enums import TA_CENTER, TA_RIGHT
from reportlab.lib.pagesizes import A4
from reportlab.lib.styles import ParagraphStyle, getSampleStyleSheet
from reportlab.lib.units import inch
from reportlab.pdfbase import pdfmetrics
from reportlab.pdfbase.ttfonts import TTFont
from reportlab.platypus import Paragraph, SimpleDocTemplate, Spacer, Table, TableStyle

from ..portal.models import Submission, enum_value
from ..utils.files import ensure_dir, safe_filename
from ..utils.logging import get_logger

logger = get_logger(__name__)

REPORT_TITLE = "รายงานสรุปคะแนนวิชาสุขศึกษาและพลศึกษา"
EMPTY_CELL = "-"

THAI_MONTHS = (
    "มกราคม", "กุมภาพันธ์", "มีนาคม", "เมษายน", "พฤษภาคม", "มิถุนายน",
    "กรกฎาคม", "สิงหาคม", "กันยายน", "ตุลาคม", "พฤศจิกายน", "ธันวาคม",
)

CUSTOM_FONT_NAME = "ReportFont"


class NoMatchingRecordsError(LookupError):
    """Raised when a report is requested for a class with no submissions."""


def thai_long_date(on: date) -> str:
    """Long Thai date in the Buddhist era, e.g. "18 ตุลาคม 2569"."""
    return f"{on.day} {THAI_MONTHS[on.month - 1]} {on.year + 543}"


@dataclass(frozen=True)
class ReportRow:
    student_number: str
    name: str
    total_score: str
    percentage: str
    comment: str


@dataclass(frozen=True)
class ClassReport:
    """Everything printed on one class report."""

    title: str
    activity_label: str
    grade_label: str
    room_label: str
    teacher_name: str
    generated_on: date
    rows: tuple[ReportRow, ...]

    @property
    def class_line(self) -> str:
        return f"ชั้น {self.grade_label} | {self.room_label}"


def _report_row(submission: Submission) -> ReportRow:
    review = submission.review
    if review is None:
        return ReportRow(submission.student_number, submission.name, EMPTY_CELL, EMPTY_CELL, EMPTY_CELL)
    return ReportRow(
        student_number=submission.student_number,
        name=submission.name,
        total_score=str(review.total_score),
        percentage=f"{review.percentage}%",
        comment=review.comment or EMPTY_CELL,
    )


def build_class_report(
    submissions: Iterable[Submission],
    grade: Any,
    room: Any,
    activity_type: Any,
    teacher_name: str,
    on: date | None = None,
) -> ClassReport:
    """
    Select one class and activity and lay out its report rows.

    Raises:
        NoMatchingRecordsError: If nothing matches the grade/room/activity
    """
    wanted = (enum_value(grade), enum_value(room), enum_value(activity_type))
    selected = [
        s for s in submissions
        if (enum_value(s.grade), enum_value(s.room), enum_value(s.activity_type)) == wanted
    ]
    if not selected:
        raise NoMatchingRecordsError(
            f"No submissions for {wanted[0]} / {wanted[1]} / {wanted[2]}"
        )

    selected.sort(key=lambda s: s.student_number_value)
    first = selected[0]

    return ClassReport(
        title=REPORT_TITLE,
        activity_label=first.activity_label,
        grade_label=first.grade_label,
        room_label=first.room_label,
        teacher_name=teacher_name,
        generated_on=on or date.today(),
        rows=tuple(_report_row(s) for s in selected),
    )


def report_filename(grade: Any, room: Any, activity_type: Any, on: date | None = None) -> str:
    stem = safe_filename(f"report {enum_value(grade)} {enum_value(room)} {enum_value(activity_type)}")
    return f"{stem}_{(on or date.today()).isoformat()}.pdf"


def _font_name(font_path: Path | None) -> str:
    """Register a TTF for Thai glyphs; the built-in fonts have none."""
    if font_path is None:
        return "Helvetica"
    if CUSTOM_FONT_NAME not in pdfmetrics.getRegisteredFontNames():
        pdfmetrics.registerFont(TTFont(CUSTOM_FONT_NAME, str(font_path)))
    return CUSTOM_FONT_NAME


def _get_styles(font: str) -> dict[str, ParagraphStyle]:
    styles = getSampleStyleSheet()
    return {
        "Title": ParagraphStyle(
            "ReportTitle", parent=styles["Heading1"], fontName=font,
            fontSize=20, alignment=TA_CENTER, spaceAfter=10,
        ),
        "Subtitle": ParagraphStyle(
            "ReportSubtitle", parent=styles["Heading2"], fontName=font,
            fontSize=15, alignment=TA_CENTER, spaceAfter=4,
            textColor=colors.HexColor("#333333"),
        ),
        "Centered": ParagraphStyle(
            "ReportCentered", parent=styles["Normal"], fontName=font,
            fontSize=12, alignment=TA_CENTER, spaceAfter=4,
        ),
        "Muted": ParagraphStyle(
            "ReportMuted", parent=styles["Normal"], fontName=font,
            fontSize=10, alignment=TA_CENTER, textColor=colors.HexColor("#666666"),
        ),
        "Cell": ParagraphStyle(
            "ReportCell", parent=styles["Normal"], fontName=font, fontSize=10, leading=14,
        ),
        "Signature": ParagraphStyle(
            "ReportSignature", parent=styles["Normal"], fontName=font,
            fontSize=11, alignment=TA_RIGHT, leading=18,
        ),
    }


def _build_header(report: ClassReport, styles: dict[str, ParagraphStyle]) -> list:
    return [
        Paragraph(escape(report.title), styles["Title"]),
        Paragraph(escape(report.activity_label), styles["Subtitle"]),
        Paragraph(escape(report.class_line), styles["Centered"]),
        Paragraph(escape(f"คุณครูผู้สอน: {report.teacher_name}"), styles["Muted"]),
        Spacer(1, 0.25 * inch),
    ]


def _build_table(report: ClassReport, styles: dict[str, ParagraphStyle]) -> list:
    cell = styles["Cell"]
    table_data = [[
        Paragraph("<b>เลขที่</b>", cell),
        Paragraph("<b>ชื่อ-นามสกุล</b>", cell),
        Paragraph("<b>คะแนน (20)</b>", cell),
        Paragraph("<b>ร้อยละ</b>", cell),
        Paragraph("<b>คำติชมจากคุณครู</b>", cell),
    ]]
    for row in report.rows:
        table_data.append([
            Paragraph(escape(row.student_number), cell),
            Paragraph(escape(row.name), cell),
            Paragraph(f"<b>{escape(row.total_score)}</b>", cell),
            Paragraph(escape(row.percentage), cell),
            Paragraph(escape(row.comment), cell),
        ])

    table = Table(
        table_data,
        colWidths=[0.7 * inch, 1.8 * inch, 0.9 * inch, 0.7 * inch, 3.0 * inch],
        repeatRows=1,
    )
    table.setStyle(TableStyle([
        ("BACKGROUND", (0, 0), (-1, 0), colors.HexColor("#f3f4f6")),
        ("GRID", (0, 0), (-1, -1), 0.75, colors.black),
        ("ALIGN", (0, 0), (0, -1), "CENTER"),
        ("ALIGN", (2, 0), (3, -1), "CENTER"),
        ("VALIGN", (0, 0), (-1, -1), "TOP"),
        ("LEFTPADDING", (0, 0), (-1, -1), 6),
        ("RIGHTPADDING", (0, 0), (-1, -1), 6),
        ("TOPPADDING", (0, 0), (-1, -1), 5),
        ("BOTTOMPADDING", (0, 0), (-1, -1), 5),
    ]))
    return [table]


def _build_signature(report: ClassReport, styles: dict[str, ParagraphStyle]) -> list:
    return [
        Spacer(1, 0.6 * inch),
        Paragraph("ลงชื่อ..........................................................", styles["Signature"]),
        Paragraph(f"<b>({escape(report.teacher_name)})</b>", styles["Signature"]),
        Paragraph(escape(f"วันที่ออกรายงาน: {thai_long_date(report.generated_on)}"), styles["Signature"]),
    ]


def render_class_report_pdf(
    report: ClassReport,
    output_path: Path,
    font_path: Path | None = None,
) -> Path:
    """
    Draw a class report to a PDF file.

    Args:
        report: Report built by ``build_class_report``
        output_path: Destination PDF path
        font_path: Optional TTF with Thai glyphs (e.g. Sarabun)

    Returns:
        Path to the generated PDF
    """
    ensure_dir(output_path.parent)
    styles = _get_styles(_font_name(font_path))

    elements = []
    elements.extend(_build_header(report, styles))
    elements.extend(_build_table(report, styles))
    elements.extend(_build_signature(report, styles))

    doc = SimpleDocTemplate(
        str(output_path),
        pagesize=A4,
        rightMargin=0.6 * inch,
        leftMargin=0.6 * inch,
        topMargin=0.6 * inch,
        bottomMargin=0.6 * inch,
        title=report.title,
        author=report.teacher_name,
    )
    doc.build(elements)

    logger.info(f"Class report generated: {output_path} ({len(report.rows)} students)")
    return output_path
