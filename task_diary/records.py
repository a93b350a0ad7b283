"""
Record Normalizer
=================
Turns raw spreadsheet rows (column name -> cell value) into canonical
``TaskRecord`` objects.

A row never fails to normalize: missing or malformed cells degrade to
``None`` (day/date) or ``""`` (task) so one bad row cannot abort a batch.
"""

import datetime
import logging
import re
from dataclasses import dataclass, replace
from typing import Any, Iterable, Mapping, Optional

logger = logging.getLogger(__name__)

# "Monday, January 6, 2025" -> ("Monday", "January 6, 2025")
DAY_DATE_REGEX = re.compile(r'^(\w+),\s+(.+)$')

DEFAULT_DATE_COLUMNS = ("Date",)
DEFAULT_TASK_COLUMNS = ("Task",)


@dataclass(frozen=True)
class TaskRecord:
    """One daily-task entry.

    ``record_id`` is the record's index in the original, unfiltered
    sequence.  It survives edits and is how filtered views map back.
    """
    day: Optional[str]
    date: Optional[str]
    task: str = ""
    record_id: int = 0

    def with_task(self, task: str) -> "TaskRecord":
        return replace(self, task=task if task is not None else "")

    def to_dict(self) -> dict:
        return {
            "Day": self.day,
            "Date": self.date,
            "Task": self.task,
            "record_id": self.record_id,
        }

    @classmethod
    def from_dict(cls, data: Mapping[str, Any], record_id: int = 0) -> "TaskRecord":
        """Rebuild a record from its persisted ``to_dict`` form at position *record_id*."""
        task = data.get("Task")
        return cls(
            day=data.get("Day"),
            date=data.get("Date"),
            task=task if isinstance(task, str) else _cell_to_text(task) or "",
            record_id=record_id,
        )


def format_day(day: datetime.date) -> str:
    """``2025-01-06`` -> ``"Monday, January 6, 2025"``."""
    return day.strftime("%A, %B ") + f"{day.day}, {day.year}"


def _is_blank(value: Any) -> bool:
    if value is None:
        return True
    if value != value:  # NaN and NaT
        return True
    if isinstance(value, str) and not value.strip():
        return True
    return False


def _cell_to_text(value: Any) -> Optional[str]:
    """Render a cell value as text, or None when the cell is empty."""
    if _is_blank(value):
        return None
    if isinstance(value, datetime.date):
        return format_day(value)
    if isinstance(value, float) and value.is_integer():
        return str(int(value))
    return str(value)


def find_column(row: Mapping[str, Any], candidates: Iterable[str]) -> Optional[str]:
    """Return the key of *row* matching one of *candidates*.

    Header names are compared case-insensitively after trimming, so
    ``" date "`` matches ``"Date"``.
    """
    wanted = [c.strip().lower() for c in candidates]
    keys = {}
    for key in row.keys():
        if isinstance(key, str):
            keys.setdefault(key.strip().lower(), key)
    for name in wanted:
        if name in keys:
            return keys[name]
    return None


def split_day_and_date(raw: Optional[str]):
    """Split ``"<Weekday>, <date>"`` into ``(day, date)``.

    Unmatched text is kept verbatim as the date with no day.
    """
    if raw is None:
        return None, None
    m = DAY_DATE_REGEX.match(raw)
    if m:
        return m.group(1), m.group(2)
    return None, raw


def normalize_row(
    row: Mapping[str, Any],
    record_id: int = 0,
    date_columns: Iterable[str] = DEFAULT_DATE_COLUMNS,
    task_columns: Iterable[str] = DEFAULT_TASK_COLUMNS,
) -> TaskRecord:
    """Normalize one raw row into a ``TaskRecord``."""
    if not isinstance(row, Mapping):
        logger.debug(f"Row {record_id} is not a mapping, keeping it as an empty record")
        return TaskRecord(day=None, date=None, task="", record_id=record_id)

    date_key = find_column(row, date_columns)
    task_key = find_column(row, task_columns)

    raw_date = _cell_to_text(row.get(date_key)) if date_key is not None else None
    day, date = split_day_and_date(raw_date)

    task = ""
    if task_key is not None:
        task = (_cell_to_text(row.get(task_key)) or "").strip()

    return TaskRecord(day=day, date=date, task=task, record_id=record_id)


def normalize_rows(
    rows: Iterable[Mapping[str, Any]],
    date_columns: Iterable[str] = DEFAULT_DATE_COLUMNS,
    task_columns: Iterable[str] = DEFAULT_TASK_COLUMNS,
) -> list:
    """Normalize every row, numbering records by their original position."""
    date_columns = tuple(date_columns)
    task_columns = tuple(task_columns)
    records = [
        normalize_row(row, i, date_columns, task_columns)
        for i, row in enumerate(rows)
    ]
    missing_task = sum(1 for r in records if not r.task)
    if missing_task:
        logger.info(f"{missing_task} of {len(records)} rows have no task text")
    return records


def resolve_original_index(records, view, display_index: int) -> int:
    """Map *display_index* in a filtered *view* back to an index in *records*.

    Returns -1 when the display index is out of range or the record is no
    longer part of the original sequence.
    """
    if display_index < 0 or display_index >= len(view):
        return -1
    target = view[display_index]
    for i, record in enumerate(records):
        if record.record_id == target.record_id:
            return i
    return -1
