"""
Task Template Generator
=======================
Writes a blank daily-task workbook (``Date`` | ``Task``) covering an
internship's duration.  Dates are written as text in the
``"Monday, January 6, 2025"`` shape so the normalizer can split the day
from the date after the intern fills in their tasks.
"""

import datetime
import logging
import os
from typing import Generator

import openpyxl
from openpyxl.styles import Alignment, Font, PatternFill

from .records import format_day

logger = logging.getLogger(__name__)

# Styling constants
HEADER_FILL = PatternFill(start_color="4472C4", end_color="4472C4", fill_type="solid")
HEADER_FONT = Font(bold=True, color="FFFFFF", size=11)
WEEKEND_FILL = PatternFill(start_color="F2F2F2", end_color="F2F2F2", fill_type="solid")
TASK_ALIGNMENT = Alignment(vertical="top", wrap_text=True)
INSTRUCTION_FONT = Font(color="FF0000", size=10, italic=True)

DATE_COLUMN_WIDTH = 28
TASK_COLUMN_WIDTH = 80

INSTRUCTIONS = (
    "Write one entry per day in the Task column of the Tasks sheet.",
    "Markdown is supported: **bold**, *italic*, lists, `code`.",
    "Write HOLIDAY, On Leave or Leave Day for days off.",
)


def iter_days(
    start: datetime.date, end: datetime.date, skip_weekends: bool = False
) -> Generator[datetime.date, None, None]:
    """Yield every date from *start* to *end* inclusive."""
    current = start
    while current <= end:
        if not (skip_weekends and current.weekday() >= 5):
            yield current
        current += datetime.timedelta(days=1)


def generate_task_template(
    start: datetime.date,
    end: datetime.date,
    output_path: str,
    skip_weekends: bool = False,
) -> str:
    """
    Generate the daily-task workbook.

    Args:
        start: First day of the internship.
        end: Last day of the internship (inclusive).
        output_path: Where to write the .xlsx file.
        skip_weekends: Leave Saturdays and Sundays out.

    Returns:
        Path to the generated workbook.
    """
    if end < start:
        raise ValueError(f"End date {end} is before start date {start}")

    parent = os.path.dirname(output_path)
    if parent:
        os.makedirs(parent, exist_ok=True)

    wb = openpyxl.Workbook()
    ws = wb.active
    ws.title = "Tasks"

    for col, header in enumerate(("Date", "Task"), start=1):
        cell = ws.cell(row=1, column=col, value=header)
        cell.fill = HEADER_FILL
        cell.font = HEADER_FONT

    row = 2
    for day in iter_days(start, end, skip_weekends):
        date_cell = ws.cell(row=row, column=1, value=format_day(day))
        task_cell = ws.cell(row=row, column=2)
        task_cell.alignment = TASK_ALIGNMENT
        if day.weekday() >= 5:
            date_cell.fill = WEEKEND_FILL
            task_cell.fill = WEEKEND_FILL
        row += 1

    ws.column_dimensions["A"].width = DATE_COLUMN_WIDTH
    ws.column_dimensions["B"].width = TASK_COLUMN_WIDTH
    ws.freeze_panes = "A2"

    # kept off the first sheet, which is the only one read back
    notes = wb.create_sheet("Instructions")
    for i, line in enumerate(INSTRUCTIONS, start=1):
        notes.cell(row=i, column=1, value=line).font = INSTRUCTION_FONT
    notes.column_dimensions["A"].width = TASK_COLUMN_WIDTH

    wb.save(output_path)
    logger.info(f"Generated task template with {row - 2} days: {output_path}")
    return output_path
