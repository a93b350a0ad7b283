"""
Diary controller: the single owner of the record sequence.

All mutations go through here and are serialized: an upload or fetch
replaces the records wholesale, an edit replaces one record's task.
Classification and the document model are recomputed from scratch on
every read.

Each load gets a generation number.  A fetch whose generation is no longer
current when it completes is discarded (last writer wins), and so is its
error.
"""

import logging
from typing import Optional

from .classifier import Classification, classify
from .config import DEFAULTS
from .document import LAYOUTS, DocumentModel, UserDetails, assemble_document, get_layout
from .ingest import IngestError, fetch_sheet_rows, read_tabular_bytes, read_tabular_file
from .markdown_compiler import FONT_VARIANTS
from .records import TaskRecord, normalize_rows, resolve_original_index
from .store import (
    KeyValueStore,
    MemoryStore,
    RECORDS_KEY,
    SHEET_LINK_KEY,
    USER_DETAILS_KEY,
)

logger = logging.getLogger(__name__)


class DiaryController:
    def __init__(self, store: Optional[KeyValueStore] = None, config: Optional[dict] = None):
        self.store = store if store is not None else MemoryStore()
        self.config = dict(DEFAULTS)
        self.config.update(config or {})
        self.font = self.config["font"]
        self.layout_name = self.config["layout"]
        self.error: Optional[str] = None
        self._generation = 0

        self.records = self._restore_records()
        self.user_details = UserDetails.from_mapping(self.store.get(USER_DETAILS_KEY))
        self.sheet_link = self.store.get(SHEET_LINK_KEY) or ""

    def _restore_records(self) -> list:
        saved = self.store.get(RECORDS_KEY)
        if not isinstance(saved, list):
            return []
        records = []
        for i, item in enumerate(saved):
            if isinstance(item, dict):
                # ids are re-derived so they always match positions
                records.append(TaskRecord.from_dict(item, record_id=i))
        logger.info(f"Restored {len(records)} records from store")
        return records

    # ------------------------------------------------------------------
    # Derived views
    # ------------------------------------------------------------------

    @property
    def classification(self) -> Classification:
        return classify(self.records, dedupe_by_date=self.config["dedupe_by_date"])

    def document(self) -> DocumentModel:
        return assemble_document(
            self.records,
            user_details=self.user_details,
            layout=get_layout(self.layout_name),
            font=self.font,
            dedupe_by_date=self.config["dedupe_by_date"],
        )

    # ------------------------------------------------------------------
    # Loading
    # ------------------------------------------------------------------

    def _begin(self) -> int:
        self._generation += 1
        return self._generation

    def _is_current(self, token: int) -> bool:
        return token == self._generation

    def _commit(self, token: int, rows, source: str) -> bool:
        if not self._is_current(token):
            logger.info(f"Discarding stale result from {source}")
            return False
        self.records = normalize_rows(
            rows,
            date_columns=self.config["date_columns"],
            task_columns=self.config["task_columns"],
        )
        self.error = None
        self._save_records()
        logger.info(f"Loaded {len(self.records)} records from {source}")
        return True

    def _fail(self, token: int, error: IngestError, source: str) -> bool:
        if not self._is_current(token):
            logger.info(f"Ignoring stale failure from {source}: {error}")
            return False
        self.error = str(error)
        logger.error(f"Ingestion from {source} failed: {error}")
        return False

    def load_rows(self, rows, source: str = "rows") -> bool:
        """Replace the records with already-parsed row mappings."""
        return self._commit(self._begin(), list(rows), source)

    def upload_bytes(self, data: bytes, filename: str) -> bool:
        token = self._begin()
        try:
            rows = read_tabular_bytes(data, filename)
        except IngestError as e:
            return self._fail(token, e, filename)
        return self._commit(token, rows, filename)

    def upload_file(self, path: str) -> bool:
        token = self._begin()
        try:
            rows = read_tabular_file(path)
        except IngestError as e:
            return self._fail(token, e, path)
        return self._commit(token, rows, path)

    def fetch_link(self, url: str) -> bool:
        """Fetch a published sheet link; the link is remembered once valid."""
        token = self._begin()
        try:
            rows = fetch_sheet_rows(
                url,
                host_marker=self.config["sheet_link_host_marker"],
                csv_marker=self.config["sheet_link_csv_marker"],
                timeout=self.config["request_timeout"],
            )
        except IngestError as e:
            return self._fail(token, e, "sheet link")
        if not self._is_current(token):
            logger.info("Discarding stale result from sheet link")
            return False
        self.sheet_link = url.strip()
        self.store.set(SHEET_LINK_KEY, self.sheet_link)
        return self._commit(token, rows, "sheet link")

    # ------------------------------------------------------------------
    # Settings and edits
    # ------------------------------------------------------------------

    def set_user_details(self, details) -> None:
        if not isinstance(details, UserDetails):
            details = UserDetails.from_mapping(details)
        self.user_details = details
        self.store.set(USER_DETAILS_KEY, details.to_mapping())

    def set_font(self, font: str) -> None:
        if font not in FONT_VARIANTS:
            logger.warning(f"Unknown font '{font}', keeping {self.font}")
            return
        self.font = font

    def set_layout(self, name: str) -> None:
        if name not in LAYOUTS:
            logger.warning(f"Unknown layout '{name}', keeping {self.layout_name}")
            return
        self.layout_name = name

    def edit_record(self, record_id: int, task: str) -> bool:
        """Replace the task text of the record with *record_id*."""
        for i, record in enumerate(self.records):
            if record.record_id == record_id:
                self.records[i] = record.with_task(task)
                self._save_records()
                logger.info(f"Edited record {record_id}")
                return True
        logger.warning(f"No record with id {record_id}")
        return False

    def edit_content_page(self, display_index: int, task: str) -> bool:
        """Edit the record shown on content page *display_index* (0-based).

        The display index refers to the filtered content view; the edit is
        applied to the matching record of the original sequence.
        """
        content = self.classification.content
        original_index = resolve_original_index(self.records, content, display_index)
        if original_index == -1:
            logger.warning(f"No content page at index {display_index}")
            return False
        return self.edit_record(self.records[original_index].record_id, task)

    def _save_records(self) -> None:
        self.store.set(RECORDS_KEY, [r.to_dict() for r in self.records])
