"""
Category Classifier
===================
Partitions a ``TaskRecord`` sequence into three derived lists:

  * **content** – ordinary task entries, one document page each.
  * **holidays** – entries whose task reads ``holiday``.
  * **leaves** – entries whose task reads ``on leave`` or ``leave day``.

Comparison uses a trimmed, lower-cased copy of the task text; records are
never mutated.  Any date that carries a holiday or leave entry is removed
from the content stream as well, so a day with both a ``HOLIDAY`` row and
a regular task row produces no content page.
"""

import logging
from dataclasses import dataclass, field
from typing import Optional

logger = logging.getLogger(__name__)

HOLIDAY_LABEL = "holiday"
LEAVE_LABELS = ("on leave", "leave day")
MAX_HOLIDAY_TEXT_LENGTH = 30


@dataclass(frozen=True)
class Classification:
    """Stable partition of a record sequence (input order preserved)."""
    content: tuple = field(default_factory=tuple)
    holidays: tuple = field(default_factory=tuple)
    leaves: tuple = field(default_factory=tuple)
    excluded: tuple = field(default_factory=tuple)  # dropped by the date rule

    @property
    def has_summary(self) -> bool:
        return bool(self.holidays or self.leaves)


def normalize_task(task: Optional[str]) -> str:
    return (task or "").strip().lower()


def _date_key(date: Optional[str]) -> str:
    return (date or "").strip()


def is_leave(record) -> bool:
    return normalize_task(record.task) in LEAVE_LABELS


def is_holiday(record) -> bool:
    task = normalize_task(record.task)
    return (
        task == HOLIDAY_LABEL
        and len(record.task or "") <= MAX_HOLIDAY_TEXT_LENGTH
        and task not in LEAVE_LABELS
    )


def classify(records, dedupe_by_date: bool = True) -> Classification:
    """Classify *records* into content, holiday and leave lists.

    Args:
        records: Sequence of ``TaskRecord``.
        dedupe_by_date: Drop content records sharing a date with a holiday
            or leave entry.  Records without a date never contribute to,
            or are dropped by, this rule.

    Returns:
        Classification whose four lists are disjoint and cover *records*.
    """
    records = list(records)
    holidays = [r for r in records if is_holiday(r)]
    leaves = [r for r in records if is_leave(r)]

    excluded_dates = set()
    if dedupe_by_date:
        for r in holidays + leaves:
            key = _date_key(r.date)
            if key:
                excluded_dates.add(key)

    labelled = {id(r) for r in holidays} | {id(r) for r in leaves}
    content = []
    excluded = []
    for r in records:
        if id(r) in labelled:
            continue
        if (
            normalize_task(r.task) != HOLIDAY_LABEL
            and _date_key(r.date) not in excluded_dates
        ):
            content.append(r)
        else:
            excluded.append(r)

    if excluded:
        logger.debug(f"{len(excluded)} records dropped from content by date or label")

    return Classification(
        content=tuple(content),
        holidays=tuple(holidays),
        leaves=tuple(leaves),
        excluded=tuple(excluded),
    )


def summary_rows(records):
    """Rows for the summary table: ``(date, holiday_text, leave_text)``.

    Every original record matching the holiday or leave predicate is listed
    in input order, its text in the matching column and the other blank.
    """
    rows = []
    for r in records:
        holiday = is_holiday(r)
        leave = is_leave(r)
        if holiday or leave:
            rows.append((r.date or "", r.task if holiday else "", r.task if leave else ""))
    return rows
