from __future__ import annotations

from pathlib import Path

from config.settings import Destination
from etl.errors import WriteError
from etl.load import FileSink
from etl.run_etl import SyncOrchestrator


class FailingSink(FileSink):
    """Fails on the first artifact whose name starts with ``fail_prefix``."""

    def __init__(self, output_dir, fail_prefix: str):
        super().__init__(output_dir)
        self.fail_prefix = fail_prefix

    def write(self, name: str, content: str) -> Path:
        if name.startswith(self.fail_prefix):
            raise WriteError(str(self.output_dir / name), "disk full")
        return super().write(name, content)


def _written(settings) -> list[str]:
    out = Path(settings.OUTPUT_DIR)
    return sorted(p.name for p in out.iterdir()) if out.exists() else []


def test_remote_error_aborts_without_artifacts(make_settings, make_fetcher, api_error):
    settings = make_settings()
    orchestrator = SyncOrchestrator(settings, fetcher=make_fetcher(error=api_error(403)))
    assert orchestrator.run() is False
    assert _written(settings) == []


def test_empty_sheet_aborts(make_settings, make_fetcher):
    settings = make_settings()
    assert SyncOrchestrator(settings, fetcher=make_fetcher([])).run() is False
    assert _written(settings) == []


def test_duplicate_headers_abort(make_settings, make_fetcher):
    settings = make_settings()
    rows = [["Company", "Company"], ["a", "b"]]
    assert SyncOrchestrator(settings, fetcher=make_fetcher(rows)).run() is False
    assert _written(settings) == []


def test_duplicate_headers_allowed_by_setting(make_settings, make_fetcher):
    settings = make_settings(ALLOW_DUPLICATE_HEADERS=True)
    rows = [["Company", "Company"], ["a", "b"]]
    assert SyncOrchestrator(settings, fetcher=make_fetcher(rows)).run() is True
    assert (Path(settings.OUTPUT_DIR) / "stores.csv").read_text(encoding="utf-8") == "Company\nb"


def test_missing_country_column_aborts_before_writing(make_settings, make_fetcher):
    settings = make_settings(SHOPS=(Destination(key="dk", countries=("DK",)),))
    rows = [["Company", "City"], ["Acme", "Aarhus"]]
    assert SyncOrchestrator(settings, fetcher=make_fetcher(rows)).run() is False
    assert _written(settings) == []


def test_write_failure_keeps_earlier_artifacts(make_settings, make_fetcher, store_rows):
    settings = make_settings(SHOPS=(Destination(key="dk", countries=("DK",)),))
    sink = FailingSink(settings.OUTPUT_DIR, fail_prefix="stores-all")
    orchestrator = SyncOrchestrator(settings, fetcher=make_fetcher(store_rows), sink=sink)

    assert orchestrator.run() is False
    assert _written(settings) == ["stores-dk.csv", "stores-dk.json", "stores-dk.min.json"]
    assert len(orchestrator.metrics["artifacts"]) == 3


def test_check_connection_delegates_to_fetcher(make_settings, make_fetcher, api_error):
    settings = make_settings()
    assert SyncOrchestrator(settings, fetcher=make_fetcher([["Company"]])).check_connection() is True
    assert SyncOrchestrator(settings, fetcher=make_fetcher(error=api_error(403))).check_connection() is False
