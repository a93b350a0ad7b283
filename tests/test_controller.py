"""
Tests for the diary controller: loading, edits, persistence and stale fetches.
"""

import json
import os
import sys

import pytest

sys.path.insert(0, os.path.join(os.path.dirname(__file__), ".."))
sys.path.insert(0, os.path.dirname(__file__))

from create_sample_tasks import create_sample_csv, create_sample_workbook
from task_diary import ingest
from task_diary.controller import DiaryController
from task_diary.store import (
    JsonFileStore,
    KeyValueStore,
    MemoryStore,
    RECORDS_KEY,
    SHEET_LINK_KEY,
    USER_DETAILS_KEY,
)

SHEET_URL = "https://docs.google.com/spreadsheets/d/e/abc/pub?output=csv"

EDIT_ROWS = [
    {"Date": "Monday, Jan 6", "Task": "HOLIDAY"},
    {"Date": "Monday, Jan 6", "Task": "Skipped by date"},
    {"Date": "Tuesday, Jan 7", "Task": "Day one"},
    {"Date": "Wednesday, Jan 8", "Task": "On Leave"},
    {"Date": "Thursday, Jan 9", "Task": "Day two"},
    {"Date": "Friday, Jan 10", "Task": "Day three"},
    {"Date": "Monday, Jan 13", "Task": "Day four"},
]


class FakeResponse:
    def __init__(self, body):
        self.content = body.encode("utf-8")
        self.status_code = 200
        self.headers = {"Content-Type": "text/csv"}

    def raise_for_status(self):
        pass


@pytest.fixture
def controller():
    c = DiaryController(store=MemoryStore())
    c.load_rows(EDIT_ROWS)
    return c


# ---------------------------------------------------------------------------
# Loading
# ---------------------------------------------------------------------------

class TestLoading:

    def test_upload_file(self, tmp_path):
        c = DiaryController()
        assert c.upload_file(create_sample_csv(str(tmp_path / "tasks.csv")))
        assert len(c.records) == 9
        assert c.error is None
        assert c.document().total_pages == 7

    def test_upload_bytes(self, tmp_path):
        path = create_sample_workbook(str(tmp_path / "tasks.xlsx"))
        with open(path, "rb") as f:
            data = f.read()
        c = DiaryController()
        assert c.upload_bytes(data, "tasks.xlsx")
        assert [r.record_id for r in c.records] == list(range(9))

    def test_failed_upload_keeps_records(self, controller):
        before = list(controller.records)
        assert not controller.upload_bytes(b"%PDF-1.4", "diary.pdf")
        assert controller.records == before
        assert "Unsupported file type" in controller.error

    def test_success_clears_error(self, controller):
        controller.upload_bytes(b"", "tasks.csv")
        assert controller.error
        assert controller.upload_bytes(b"Date,Task\n\"Monday, Jan 6\",x\n", "tasks.csv")
        assert controller.error is None
        assert len(controller.records) == 1

    def test_configured_columns(self):
        c = DiaryController(config={"date_columns": ["Day"], "task_columns": ["Work Done"]})
        c.load_rows([{"Day": "Monday, Jan 6", "Work Done": "x"}])
        assert c.records[0].date == "Jan 6"
        assert c.records[0].task == "x"


class TestFetchLink:

    def test_fetch_stores_link(self, monkeypatch):
        monkeypatch.setattr(ingest.requests, "get",
                            lambda url, timeout=None: FakeResponse("Date,Task\n\"Monday, Jan 6\",x\n"))
        store = MemoryStore()
        c = DiaryController(store=store)
        assert c.fetch_link("  " + SHEET_URL)
        assert c.sheet_link == SHEET_URL
        assert store.get(SHEET_LINK_KEY) == SHEET_URL
        assert len(c.records) == 1

    def test_invalid_link_sets_error(self, controller):
        before = list(controller.records)
        assert not controller.fetch_link("https://example.com/sheet")
        assert "Publish to web" in controller.error
        assert controller.records == before
        assert controller.sheet_link == ""

    def test_stale_fetch_is_discarded(self, monkeypatch):
        c = DiaryController()

        def slow_get(url, timeout=None):
            # A newer upload lands while the request is in flight
            c.load_rows([{"Date": "Friday, Jan 10", "Task": "Newer upload"}], "upload")
            return FakeResponse("Date,Task\n\"Monday, Jan 6\",Older fetch\n")

        monkeypatch.setattr(ingest.requests, "get", slow_get)
        assert not c.fetch_link(SHEET_URL)
        assert [r.task for r in c.records] == ["Newer upload"]
        assert c.sheet_link == ""

    def test_stale_failure_is_ignored(self, monkeypatch):
        c = DiaryController()

        def failing_get(url, timeout=None):
            c.load_rows([{"Task": "Newer upload"}], "upload")
            raise ingest.requests.ConnectionError("refused")

        monkeypatch.setattr(ingest.requests, "get", failing_get)
        assert not c.fetch_link(SHEET_URL)
        assert c.error is None
        assert [r.task for r in c.records] == ["Newer upload"]


# ---------------------------------------------------------------------------
# Edits
# ---------------------------------------------------------------------------

class TestEdits:

    def test_display_index_maps_to_original(self, controller):
        # content view: Day one, Day two, Day three, Day four
        assert controller.document().total_pages == 6
        assert controller.edit_content_page(2, "Rewritten")
        assert controller.records[5].task == "Rewritten"
        assert controller.records[5].record_id == 5
        others = [r.task for i, r in enumerate(controller.records) if i != 5]
        assert "Rewritten" not in others

    def test_edit_to_holiday_reclassifies(self, controller):
        assert controller.edit_content_page(2, "HOLIDAY")
        doc = controller.document()
        assert doc.total_pages == 5
        assert [p.record.task for p in doc.content_pages] == ["Day one", "Day two", "Day four"]
        assert ("Jan 10", "HOLIDAY", "") in doc.summary.rows

    def test_out_of_range_edit(self, controller):
        before = list(controller.records)
        assert not controller.edit_content_page(10, "x")
        assert not controller.edit_content_page(-1, "x")
        assert controller.records == before

    def test_edit_record_by_id(self, controller):
        assert controller.edit_record(1, "Still skipped")
        assert controller.records[1].task == "Still skipped"
        assert not controller.edit_record(99, "x")

    def test_edit_persists(self):
        store = MemoryStore()
        c = DiaryController(store=store)
        c.load_rows(EDIT_ROWS)
        c.edit_content_page(0, "Edited")
        assert store.get(RECORDS_KEY)[2]["Task"] == "Edited"


# ---------------------------------------------------------------------------
# Settings and persistence
# ---------------------------------------------------------------------------

class TestSettings:

    def test_font_and_layout(self, controller):
        controller.set_font("Courier")
        controller.set_layout("compact")
        page = controller.document().content_pages[0]
        assert page.font == "Courier"
        assert page.layout.header_top == 10

    def test_unknown_font_and_layout_are_ignored(self, controller):
        controller.set_font("Papyrus")
        controller.set_layout("poster")
        assert controller.font == "Helvetica"
        assert controller.layout_name == "default"

    def test_user_details(self, controller):
        controller.set_user_details({"name": "Asha", "idNo": "2021A7PS0001"})
        doc = controller.document()
        assert doc.filename == "2021A7PS0001_internship_diary.pdf"
        assert dict(doc.pages[0].details)["Name"] == "Asha"
        assert controller.store.get(USER_DETAILS_KEY)["idNo"] == "2021A7PS0001"

    def test_dedupe_can_be_disabled(self):
        c = DiaryController(config={"dedupe_by_date": False})
        c.load_rows(EDIT_ROWS)
        assert len(c.classification.content) == 5


class TestStoreInterface:

    def test_interface_cannot_be_instantiated(self):
        with pytest.raises(TypeError):
            KeyValueStore()

    def test_subclass_must_implement_set(self):
        class ReadOnly(KeyValueStore):
            def get(self, key, default=None):
                return default

        with pytest.raises(TypeError):
            ReadOnly()

    def test_memory_store_defaults(self):
        store = MemoryStore({"a": 1})
        assert store.get("a") == 1
        assert store.get("missing", "fallback") == "fallback"


class TestJsonPersistence:

    def test_state_survives_restart(self, tmp_path):
        path = str(tmp_path / "state" / "diary.json")
        first = DiaryController(store=JsonFileStore(path))
        first.load_rows(EDIT_ROWS)
        first.set_user_details({"name": "Asha"})
        first.edit_content_page(0, "Edited")

        second = DiaryController(store=JsonFileStore(path))
        assert [r.task for r in second.records] == [r.task for r in first.records]
        assert [r.record_id for r in second.records] == list(range(len(EDIT_ROWS)))
        assert second.user_details.name == "Asha"
        assert second.document().total_pages == 6

    def test_state_file_is_json(self, tmp_path):
        path = str(tmp_path / "diary.json")
        DiaryController(store=JsonFileStore(path)).load_rows(EDIT_ROWS[:1])
        with open(path, encoding="utf-8") as f:
            data = json.load(f)
        assert data[RECORDS_KEY][0]["Task"] == "HOLIDAY"

    def test_corrupt_state_file(self, tmp_path):
        path = tmp_path / "diary.json"
        path.write_text("{not json", encoding="utf-8")
        c = DiaryController(store=JsonFileStore(str(path)))
        assert c.records == []
        c.load_rows(EDIT_ROWS[:1])
        assert json.loads(path.read_text(encoding="utf-8"))[RECORDS_KEY]

    def test_non_list_records_are_ignored(self):
        c = DiaryController(store=MemoryStore({RECORDS_KEY: "garbage"}))
        assert c.records == []
