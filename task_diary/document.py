"""
Document Assembler
==================
Builds the page model a renderer consumes:

  1. one cover page with the intern's details,
  2. one content page per content record (compiled Markdown included),
  3. a trailing summary page of holidays and leaves, when there are any.

The model is rebuilt from scratch on every call and holds no state of its
own.  Missing user details and unparseable dates fall back to blank rules.
"""

import datetime
import logging
from dataclasses import dataclass, field
from typing import Any, Mapping, Optional

from .classifier import classify, summary_rows
from .markdown_compiler import DEFAULT_FONT, compile_markdown

logger = logging.getLogger(__name__)

COVER_TITLE = "Internship Program Diary"
COVER_FOOTER = "Faculty of Science & Technology"
SUMMARY_TITLE = "Holidays & Leaves"
SUMMARY_COLUMNS = ("Date", "Holidays", "Leaves")
SIGN_OFF_LABELS = ("Checked by:", "Date:", "Verified by:", "Date:")

BLANK_TEXT = "_________________"
BLANK_DATE = "_________"

DATE_INPUT_FORMATS = ("%Y-%m-%d", "%d/%m/%Y", "%Y-%m-%dT%H:%M:%S", "%Y-%m-%d %H:%M:%S")


@dataclass(frozen=True)
class LayoutPositions:
    """Vertical offsets (points) of the content page regions."""
    header_top: int = 20
    content_margin_top: int = 40
    footer_bottom: int = 40


LAYOUTS = {
    "default": LayoutPositions(header_top=20, content_margin_top=40, footer_bottom=40),
    "compact": LayoutPositions(header_top=10, content_margin_top=30, footer_bottom=30),
}


def get_layout(name: Optional[str]) -> LayoutPositions:
    if name in LAYOUTS:
        return LAYOUTS[name]
    if name:
        logger.warning(f"Unknown layout '{name}', using default")
    return LAYOUTS["default"]


@dataclass(frozen=True)
class UserDetails:
    name: Optional[str] = None
    id_no: Optional[str] = None
    ip_station: Optional[str] = None
    duration_from: Any = None
    duration_to: Any = None
    faculty_mentor: Optional[str] = None
    company_mentor: Optional[str] = None

    @classmethod
    def from_mapping(cls, data: Optional[Mapping[str, Any]]) -> "UserDetails":
        """Accept the persisted form-state mapping (camelCase keys).

        snake_case keys are accepted too, so a hand-written YAML file works.
        """
        if not data:
            return cls()

        def pick(*keys):
            for key in keys:
                value = data.get(key)
                if value not in (None, ""):
                    return value
            return None

        duration = data.get("duration") or {}
        if not isinstance(duration, Mapping):
            duration = {}
        return cls(
            name=pick("name"),
            id_no=pick("idNo", "id_no"),
            ip_station=pick("ipStation", "ip_station"),
            duration_from=duration.get("from") or pick("duration_from"),
            duration_to=duration.get("to") or pick("duration_to"),
            faculty_mentor=pick("facultyMentor", "faculty_mentor"),
            company_mentor=pick("companyMentor", "company_mentor"),
        )

    def to_mapping(self) -> dict:
        def text(value):
            if isinstance(value, (datetime.date, datetime.datetime)):
                return value.isoformat()
            return value or ""

        return {
            "name": text(self.name),
            "idNo": text(self.id_no),
            "ipStation": text(self.ip_station),
            "duration": {"from": text(self.duration_from), "to": text(self.duration_to)},
            "facultyMentor": text(self.faculty_mentor),
            "companyMentor": text(self.company_mentor),
        }


def format_date(value: Any) -> str:
    """Format a date as ``DD/MM/YYYY``; anything unusable gives a blank rule."""
    if value is None or value == "":
        return BLANK_DATE
    if isinstance(value, datetime.datetime):
        value = value.date()
    if not isinstance(value, datetime.date):
        parsed = None
        for fmt in DATE_INPUT_FORMATS:
            try:
                parsed = datetime.datetime.strptime(str(value).strip(), fmt).date()
                break
            except ValueError:
                continue
        if parsed is None:
            logger.debug(f"Unparseable date {value!r}, using placeholder")
            return BLANK_DATE
        value = parsed
    return value.strftime("%d/%m/%Y")


def _text_or_blank(value: Any) -> str:
    if value is None:
        return BLANK_TEXT
    value = str(value).strip()
    return value or BLANK_TEXT


@dataclass(frozen=True)
class CoverPage:
    page_number: int
    details: tuple  # ((label, value), ...)
    title: str = COVER_TITLE
    footer: str = COVER_FOOTER
    kind: str = "cover"


@dataclass(frozen=True)
class ContentPage:
    page_number: int
    record: Any
    blocks: tuple
    layout: LayoutPositions
    font: str
    header: tuple  # ("Day: ...", "Date: ...")
    sign_off: tuple = SIGN_OFF_LABELS
    kind: str = "content"


@dataclass(frozen=True)
class SummaryPage:
    page_number: int
    rows: tuple  # ((date, holiday, leave), ...)
    columns: tuple = SUMMARY_COLUMNS
    title: str = SUMMARY_TITLE
    kind: str = "summary"

    @property
    def holiday_rows(self) -> tuple:
        return tuple(r for r in self.rows if r[1])

    @property
    def leave_rows(self) -> tuple:
        return tuple(r for r in self.rows if r[2])


@dataclass(frozen=True)
class DocumentModel:
    pages: tuple = field(default_factory=tuple)
    filename: str = "internship_diary.pdf"

    @property
    def total_pages(self) -> int:
        return len(self.pages)

    @property
    def content_pages(self) -> tuple:
        return tuple(p for p in self.pages if p.kind == "content")

    @property
    def summary(self) -> Optional[SummaryPage]:
        for page in self.pages:
            if page.kind == "summary":
                return page
        return None


def build_cover_page(user_details: Optional[UserDetails]) -> CoverPage:
    d = user_details or UserDetails()
    duration = f"{format_date(d.duration_from)} to {format_date(d.duration_to)}"
    details = (
        ("Name", _text_or_blank(d.name)),
        ("ID No.", _text_or_blank(d.id_no)),
        ("IP Station", _text_or_blank(d.ip_station)),
        ("Duration", duration),
        ("Faculty Mentor", _text_or_blank(d.faculty_mentor)),
        ("Company Mentor", _text_or_blank(d.company_mentor)),
    )
    return CoverPage(page_number=1, details=details)


def document_filename(user_details: Optional[UserDetails]) -> str:
    id_no = str(user_details.id_no or "").strip() if user_details else ""
    if not id_no:
        return "internship_diary.pdf"
    safe = "".join(c if c.isalnum() or c in "-_" else "_" for c in id_no)
    return f"{safe}_internship_diary.pdf"


def assemble_document(
    records,
    user_details: Optional[UserDetails] = None,
    layout: Optional[LayoutPositions] = None,
    font: str = DEFAULT_FONT,
    dedupe_by_date: bool = True,
) -> DocumentModel:
    """Build the ``DocumentModel`` for *records*.

    Args:
        records: The full, original ``TaskRecord`` sequence.
        user_details: Cover page details; missing fields become blanks.
        layout: Content page offsets (``LAYOUTS["default"]`` when omitted).
        font: Font family for body text.
        dedupe_by_date: Passed through to :func:`classify`.

    Returns:
        DocumentModel with cover, content and optional summary pages.
    """
    records = list(records)
    layout = layout or LAYOUTS["default"]
    classification = classify(records, dedupe_by_date=dedupe_by_date)

    pages = [build_cover_page(user_details)]
    for record in classification.content:
        pages.append(ContentPage(
            page_number=len(pages) + 1,
            record=record,
            blocks=compile_markdown(record.task, font),
            layout=layout,
            font=font,
            header=(f"Day: {record.day or ''}", f"Date: {record.date or ''}"),
        ))

    if classification.has_summary:
        pages.append(SummaryPage(
            page_number=len(pages) + 1,
            rows=tuple(summary_rows(records)),
        ))

    return DocumentModel(pages=tuple(pages), filename=document_filename(user_details))
