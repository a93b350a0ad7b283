"""
Tabular ingestion: uploaded CSV / XLS / XLSX files and published
Google Sheets CSV links.

Every failure is raised as ``IngestError`` with a message fit to show the
user.  Nothing here normalizes records; it only produces row mappings.
"""

import io
import logging
import os
from typing import Optional

import pandas as pd
import requests

logger = logging.getLogger(__name__)

SUPPORTED_EXTENSIONS = ("csv", "xls", "xlsx")
DEFAULT_HOST_MARKER = "docs.google.com/spreadsheets"
DEFAULT_CSV_MARKER = "output=csv"
DEFAULT_TIMEOUT = 15

# Only truly empty cells are missing; tokens like "N/A" or "null" stay task text
EMPTY_CELL_VALUES = [""]


class IngestError(Exception):
    """Raised when a file or link cannot be turned into rows."""
    pass


def file_extension(filename: str) -> str:
    return os.path.splitext(filename or "")[1].lstrip(".").lower()


def _frame_to_rows(df: pd.DataFrame) -> list:
    """Convert a DataFrame to row dicts with ``None`` for empty cells."""
    df = df.dropna(how="all")
    df = df.astype(object).where(pd.notna(df), None)
    return df.to_dict(orient="records")


def read_csv_text(text: str) -> list:
    """Parse CSV *text* (header row first) into row mappings."""
    if text.startswith("\ufeff"):
        text = text[1:]
    if not text.strip():
        raise IngestError("The file is empty.")
    try:
        df = pd.read_csv(io.StringIO(text), dtype=object, skip_blank_lines=True,
                         keep_default_na=False, na_values=EMPTY_CELL_VALUES)
    except (pd.errors.ParserError, pd.errors.EmptyDataError, ValueError) as e:
        raise IngestError(f"Could not read CSV data: {e}") from e
    return _frame_to_rows(df)


def read_tabular_bytes(data: bytes, filename: str) -> list:
    """Parse the first sheet of a CSV, XLS or XLSX file given as bytes.

    Args:
        data: Raw file contents.
        filename: Original file name; only its extension is used.

    Returns:
        List of dicts, one per data row, keyed by header.
    """
    ext = file_extension(filename)
    if ext not in SUPPORTED_EXTENSIONS:
        raise IngestError(
            f"Unsupported file type '.{ext}'. Please upload a .csv, .xls or .xlsx file."
            if ext else "Unsupported file type. Please upload a .csv, .xls or .xlsx file."
        )

    if ext == "csv":
        try:
            text = data.decode("utf-8")
        except UnicodeDecodeError as e:
            raise IngestError("The CSV file is not valid UTF-8 text.") from e
        rows = read_csv_text(text)
    else:
        engine = "openpyxl" if ext == "xlsx" else "xlrd"
        try:
            df = pd.read_excel(io.BytesIO(data), sheet_name=0, dtype=object, engine=engine,
                               keep_default_na=False, na_values=EMPTY_CELL_VALUES)
        except ImportError as e:
            raise IngestError(f"Reading .{ext} files needs the '{engine}' package.") from e
        except Exception as e:
            raise IngestError(f"Could not read the spreadsheet '{filename}': {e}") from e
        rows = _frame_to_rows(df)

    logger.info(f"Read {len(rows)} rows from '{filename}'")
    return rows


def read_tabular_file(path: str) -> list:
    """Read a CSV / XLS / XLSX file from disk."""
    try:
        with open(path, "rb") as f:
            data = f.read()
    except OSError as e:
        raise IngestError(f"Could not open '{path}': {e.strerror or e}") from e
    return read_tabular_bytes(data, os.path.basename(path))


# ------------------------------------------------------------------
# Remote sheet links
# ------------------------------------------------------------------

def validate_sheet_link(
    url: Optional[str],
    host_marker: str = DEFAULT_HOST_MARKER,
    csv_marker: str = DEFAULT_CSV_MARKER,
) -> str:
    """Return the trimmed *url* or raise ``IngestError``.

    The link must point at a spreadsheet host and request CSV output;
    nothing is fetched when it does not.
    """
    url = (url or "").strip()
    if not url or host_marker not in url or csv_marker not in url:
        logger.warning(f"Rejected sheet link: {url!r}")
        raise IngestError(
            "Please provide a published Google Sheets CSV link "
            "(File > Share > Publish to web, format: CSV)."
        )
    return url


def _looks_like_html(text: str) -> bool:
    head = text.lstrip()[:200].lower()
    return head.startswith("<!doctype html") or head.startswith("<html")


def fetch_sheet_rows(
    url: str,
    host_marker: str = DEFAULT_HOST_MARKER,
    csv_marker: str = DEFAULT_CSV_MARKER,
    timeout: float = DEFAULT_TIMEOUT,
) -> list:
    """Fetch a published sheet's CSV export and parse it into rows."""
    url = validate_sheet_link(url, host_marker, csv_marker)
    logger.info(f"Fetching sheet: {url}")
    try:
        response = requests.get(url, timeout=timeout)
        response.raise_for_status()
    except requests.Timeout as e:
        raise IngestError("The spreadsheet link took too long to respond.") from e
    except requests.HTTPError as e:
        status = e.response.status_code if e.response is not None else "?"
        raise IngestError(f"The spreadsheet link returned HTTP {status}.") from e
    except requests.RequestException as e:
        raise IngestError(f"Could not fetch the spreadsheet: {e}") from e

    content_type = response.headers.get("Content-Type", "")
    text = response.content.decode("utf-8", errors="replace")
    if "html" in content_type.lower() or _looks_like_html(text):
        raise IngestError(
            "The link did not return CSV data. Make sure the sheet is "
            "published to the web as CSV."
        )

    rows = read_csv_text(text)
    logger.info(f"Fetched {len(rows)} rows from sheet link")
    return rows
