"""
Create sample daily-task sheets for testing the diary pipeline.

The rows cover:
- ordinary Markdown tasks,
- a HOLIDAY entry sharing its date with a regular task,
- On Leave / Leave Day entries,
- a row with no task and a row with no date.
"""

import csv
import datetime

from openpyxl import Workbook
from openpyxl.styles import Font

SAMPLE_ROWS = [
    ("Monday, January 6, 2025", "Set up the **development** environment"),
    ("Tuesday, January 7, 2025", "HOLIDAY"),
    ("Tuesday, January 7, 2025", "Read onboarding docs"),
    ("Wednesday, January 8, 2025", "1. Wrote tests\n2. Fixed *flaky* build"),
    ("Thursday, January 9, 2025", "On Leave"),
    ("Friday, January 10, 2025", "  Reviewed `pandas` pipeline  "),
    ("Monday, January 13, 2025", "Leave Day"),
    ("Tuesday, January 14, 2025", None),
    (None, "Team retrospective"),
]


def create_sample_csv(output_path, rows=SAMPLE_ROWS):
    """Write *rows* as a Date,Task CSV file."""
    with open(output_path, "w", newline="", encoding="utf-8") as f:
        writer = csv.writer(f)
        writer.writerow(["Date", "Task"])
        for date, task in rows:
            writer.writerow(["" if date is None else date, "" if task is None else task])
    return output_path


def create_sample_workbook(output_path, rows=SAMPLE_ROWS):
    """Write *rows* to the first sheet of an .xlsx workbook."""
    wb = Workbook()
    ws = wb.active
    ws.title = "Tasks"
    ws["A1"] = "Date"
    ws["B1"] = "Task"
    ws["A1"].font = Font(bold=True)
    ws["B1"].font = Font(bold=True)
    for r, (date, task) in enumerate(rows, start=2):
        ws.cell(row=r, column=1, value=date)
        ws.cell(row=r, column=2, value=task)

    # A second sheet that must be ignored
    other = wb.create_sheet("Notes")
    other["A1"] = "Date"
    other["B1"] = "Task"
    other["A2"] = "Monday, January 20, 2025"
    other["B2"] = "Should not be read"

    wb.save(output_path)
    wb.close()
    return output_path


def create_dated_workbook(output_path):
    """Workbook whose Date column holds real date cells, not text."""
    wb = Workbook()
    ws = wb.active
    ws["A1"] = "Date"
    ws["B1"] = "Task"
    ws["A2"] = datetime.datetime(2025, 1, 6)
    ws["B2"] = "Kickoff meeting"
    ws["A3"] = datetime.datetime(2025, 1, 7)
    ws["B3"] = 42
    wb.save(output_path)
    wb.close()
    return output_path


if __name__ == "__main__":
    create_sample_csv("sample_tasks.csv")
    create_sample_workbook("sample_tasks.xlsx")
    print("Created sample_tasks.csv and sample_tasks.xlsx")
