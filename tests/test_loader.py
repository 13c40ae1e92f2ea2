"""
Unit tests for raw row acquisition.

Tests cover:
- CSV parsing with text-only cells and skipped lines
- Published CSV download through an injected session
- Google Sheets reads with the client stubbed out
- The local JSON fallback
- Source ordering and fallback in fetch_raw_records
"""
import json

import pytest
import requests

from student_dashboard.config import Settings
from student_dashboard.data import loader
from student_dashboard.data.loader import (
    DataSourceError,
    fetch_google_sheet,
    fetch_published_csv,
    fetch_raw_records,
    parse_csv_text,
    read_fallback_file,
)

CSV_TEXT = (
    "Nome,CPF,Curso,Disciplinas,Data Início\n"
    " Ana Souza ,012.345.678-90,Engenharia,3/12,15/01/2024\n"
    ",,,,\n"
    "Bruno Lima,987.654.321-00,Direito,12/12,2023-02-01,extra\n"
    "Carla Dias,111.222.333-44,Engenharia,0/12\n"
)


class FakeResponse:
    def __init__(self, text="", status_code=200, encoding="utf-8"):
        self.text = text
        self.status_code = status_code
        self.encoding = encoding

    def raise_for_status(self):
        if self.status_code >= 400:
            raise requests.HTTPError(f"{self.status_code} error")


class FakeSession:
    def __init__(self, response=None, error=None):
        self.response = response
        self.error = error
        self.calls = []

    def get(self, url, **kwargs):
        self.calls.append((url, kwargs))
        if self.error is not None:
            raise self.error
        return self.response


def _settings(**overrides):
    values = dict(
        published_csv_url=None,
        fallback_data_path="missing.json",
        spreadsheet_id=None,
        sheet_name=None,
        credentials=None,
        refresh_interval_seconds=900,
        log_level="INFO",
    )
    values.update(overrides)
    return Settings(**values)


@pytest.fixture
def fallback_file(tmp_path):
    path = tmp_path / "data.json"
    path.write_text(
        json.dumps([{"Nome": "Ana Souza", "Cobranças": "5/12"}], ensure_ascii=False),
        encoding="utf-8",
    )
    return str(path)


class TestParseCsvText:
    """Tests for parse_csv_text."""

    def test_rows_are_text_and_stripped(self):
        rows, _ = parse_csv_text(CSV_TEXT)
        assert rows[0]["Nome"] == "Ana Souza"
        assert rows[0]["CPF"] == "012.345.678-90"
        assert rows[0]["Disciplinas"] == "3/12"

    def test_short_rows_are_padded(self):
        rows, _ = parse_csv_text(CSV_TEXT)
        assert rows[-1]["Nome"] == "Carla Dias"
        assert rows[-1]["Data Início"] == ""

    def test_blank_and_overlong_lines_are_skipped(self):
        rows, diagnostics = parse_csv_text(CSV_TEXT)
        assert [row["Nome"] for row in rows] == ["Ana Souza", "Carla Dias"]
        assert diagnostics["csv_rows"] == 2
        assert diagnostics["skipped_lines"] == 2

    def test_header_only(self):
        rows, diagnostics = parse_csv_text("Nome,CPF\n")
        assert rows == []
        assert diagnostics["csv_rows"] == 0


class TestFetchPublishedCsv:
    """Tests for fetch_published_csv."""

    def test_success(self):
        session = FakeSession(FakeResponse(CSV_TEXT))
        rows, _ = fetch_published_csv("https://example.com/export.csv", session=session)
        assert len(rows) == 2
        url, kwargs = session.calls[0]
        assert url == "https://example.com/export.csv"
        assert "t" in kwargs["params"]
        assert kwargs["headers"]["Cache-Control"] == "no-cache"
        assert kwargs["timeout"] == loader.REQUEST_TIMEOUT_SECONDS

    def test_http_error(self):
        session = FakeSession(FakeResponse(status_code=404))
        with pytest.raises(DataSourceError):
            fetch_published_csv("https://example.com/export.csv", session=session)

    def test_network_error(self):
        session = FakeSession(error=requests.ConnectionError("offline"))
        with pytest.raises(DataSourceError):
            fetch_published_csv("https://example.com/export.csv", session=session)

    def test_empty_body(self):
        session = FakeSession(FakeResponse(""))
        with pytest.raises(DataSourceError):
            fetch_published_csv("https://example.com/export.csv", session=session)


class TestFetchGoogleSheet:
    """Tests for fetch_google_sheet."""

    def test_missing_credentials_file(self, tmp_path):
        with pytest.raises(DataSourceError):
            fetch_google_sheet("sheet-id", None, str(tmp_path / "absent.json"))

    def test_reads_rows_as_text(self, tmp_path, monkeypatch):
        credentials_file = tmp_path / "creds.json"
        credentials_file.write_text("{}", encoding="utf-8")
        seen = {}

        class FakeWorksheet:
            def get_all_records(self, **kwargs):
                seen.update(kwargs)
                return [{"Nome": "Ana Souza", "Disciplinas": "3/12"}]

        class FakeSpreadsheet:
            sheet1 = FakeWorksheet()

            def worksheet(self, name):
                seen["sheet_name"] = name
                return FakeWorksheet()

        class FakeClient:
            def open_by_key(self, key):
                seen["key"] = key
                return FakeSpreadsheet()

        monkeypatch.setattr(loader.Credentials, "from_service_account_file", lambda *args, **kwargs: object())
        monkeypatch.setattr(loader.gspread, "authorize", lambda credentials: FakeClient())

        rows, diagnostics = fetch_google_sheet("sheet-id", "Alunos", str(credentials_file))
        assert rows == [{"Nome": "Ana Souza", "Disciplinas": "3/12"}]
        assert seen["key"] == "sheet-id"
        assert seen["sheet_name"] == "Alunos"
        assert seen["numericise_ignore"] == ["all"]
        assert diagnostics["sheet_rows"] == 1


class TestReadFallbackFile:
    """Tests for read_fallback_file."""

    def test_reads_list_of_objects(self, fallback_file):
        rows, diagnostics = read_fallback_file(fallback_file)
        assert rows == [{"Nome": "Ana Souza", "Cobranças": "5/12"}]
        assert diagnostics["fallback_rows"] == 1

    def test_missing_file(self, tmp_path):
        with pytest.raises(DataSourceError):
            read_fallback_file(str(tmp_path / "nope.json"))

    def test_invalid_json(self, tmp_path):
        path = tmp_path / "bad.json"
        path.write_text("{not json", encoding="utf-8")
        with pytest.raises(DataSourceError):
            read_fallback_file(str(path))

    def test_wrong_shape(self, tmp_path):
        path = tmp_path / "shape.json"
        path.write_text(json.dumps({"Nome": "Ana"}), encoding="utf-8")
        with pytest.raises(DataSourceError):
            read_fallback_file(str(path))


class TestFetchRawRecords:
    """Tests for source ordering and fallback."""

    def test_uses_fallback_when_nothing_else_configured(self, fallback_file):
        result = fetch_raw_records(_settings(fallback_data_path=fallback_file))
        assert result.source == "local_fallback"
        assert len(result.records) == 1
        assert result.diagnostics["row_count"] == 1

    def test_falls_back_after_csv_failure(self, fallback_file, monkeypatch):
        def failing_csv(url, session=None):
            raise DataSourceError("offline")

        monkeypatch.setattr(loader, "fetch_published_csv", failing_csv)
        result = fetch_raw_records(_settings(
            published_csv_url="https://example.com/export.csv",
            fallback_data_path=fallback_file,
        ))
        assert result.source == "local_fallback"
        assert result.diagnostics["failed_sources"] == {"published_csv": "offline"}

    def test_published_csv_wins_over_fallback(self, fallback_file, monkeypatch):
        monkeypatch.setattr(
            loader,
            "fetch_published_csv",
            lambda url, session=None: ([{"Nome": "Bruno Lima"}, {"Nome": "Carla Dias"}], {}),
        )
        result = fetch_raw_records(_settings(
            published_csv_url="https://example.com/export.csv",
            fallback_data_path=fallback_file,
        ))
        assert result.source == "published_csv"
        assert len(result.records) == 2

    def test_sheets_tried_first(self, fallback_file, monkeypatch):
        order = []

        def sheet(*args):
            order.append("google_sheets")
            return [], {}

        def csv(url, session=None):
            order.append("published_csv")
            return [{"Nome": "Ana"}], {}

        monkeypatch.setattr(loader, "fetch_google_sheet", sheet)
        monkeypatch.setattr(loader, "fetch_published_csv", csv)
        result = fetch_raw_records(_settings(
            spreadsheet_id="sheet-id",
            credentials="creds.json",
            published_csv_url="https://example.com/export.csv",
            fallback_data_path=fallback_file,
        ))
        assert order == ["google_sheets", "published_csv"]
        assert result.source == "published_csv"
        assert result.diagnostics["failed_sources"] == {"google_sheets": "empty"}

    def test_every_source_failing_yields_no_rows(self, tmp_path):
        result = fetch_raw_records(_settings(fallback_data_path=str(tmp_path / "none.json")))
        assert result.source == "none"
        assert result.records == []
        assert "local_fallback" in result.diagnostics["failed_sources"]
