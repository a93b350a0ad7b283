"""Task Diary.

Turns daily task sheets (CSV / XLS / XLSX uploads or a published Google
Sheets CSV link) into the page model of an internship diary:

  * **Cover** – the intern's details, blanks where missing.
  * **Content** – one page per daily task, its Markdown compiled into a
    styled layout tree.
  * **Summary** – a Date | Holidays | Leaves table, when there are any.

:mod:`task_diary.controller` owns the record sequence and recomputes the
document after every upload or edit.
"""

from .classifier import classify
from .controller import DiaryController
from .document import UserDetails, assemble_document
from .ingest import IngestError
from .markdown_compiler import compile_markdown
from .records import TaskRecord, normalize_row, normalize_rows

__all__ = [
    "classify",
    "DiaryController",
    "UserDetails",
    "assemble_document",
    "IngestError",
    "compile_markdown",
    "TaskRecord",
    "normalize_row",
    "normalize_rows",
]
