"""Tests for the JSON catalog store and the three sink writers."""
import json
from datetime import datetime

import pytest

from canalcheck.core.models import AnnotatedChannel, Channel, Verdict
from canalcheck.core.reports import build_reports
from canalcheck.core.sinks import write_all, write_catalog, write_down_log, write_playlist
from canalcheck.settings import Settings
from canalcheck.storage import CatalogError, CatalogStore

NOW = datetime(2026, 10, 18, 9, 30, 0)


class TestCatalogStore:

    def test_load_keeps_order_and_extra_fields(self, catalog_file):
        path = catalog_file([
            {"id": 1, "title": "A", "url": "http://a", "icon": "a.png", "country": "ES"},
            {"id": "b", "title": "B", "url": None},
        ])
        channels = CatalogStore(path).load()
        assert [c.id for c in channels] == [1, "b"]
        assert channels[0].record["country"] == "ES"
        assert channels[1].url is None

    def test_empty_array(self, catalog_file):
        assert CatalogStore(catalog_file([])).load() == []

    def test_missing_file_is_fatal(self, tmp_path):
        with pytest.raises(CatalogError, match="not found"):
            CatalogStore(tmp_path / "nope.json").load()

    @pytest.mark.parametrize("content", ["{not json", '{"id": 1}', "[1, 2]", ""])
    def test_malformed_content_is_fatal(self, tmp_path, content):
        path = tmp_path / "canales.json"
        path.write_text(content, encoding="utf-8")
        with pytest.raises(CatalogError):
            CatalogStore(path).load()

    def test_save_uses_two_space_indent_and_keeps_unicode(self, tmp_path):
        path = tmp_path / "out" / "canales.json"
        ch = Channel.from_record({"id": 1, "title": "Telemadrid Añil", "url": "http://a"})
        CatalogStore(path).save([AnnotatedChannel(ch, Verdict.ok())])
        text = path.read_text(encoding="utf-8")
        assert text == json.dumps(
            [{"id": 1, "title": "Telemadrid Añil", "url": "http://a", "active": True}],
            indent=2, ensure_ascii=False,
        )
        assert '\n  {\n    "id": 1,' in text


def reports_for(*pairs):
    annotated = [
        AnnotatedChannel(Channel.from_record({"id": i, "title": f"T{i}", "url": f"http://h/{i}"}), Verdict(ok, None if ok else "HTTP 500"))
        for i, ok in pairs
    ]
    return build_reports(annotated, now=NOW)


class TestSinks:

    def test_catalog_written(self, tmp_path):
        path = tmp_path / "canales.json"
        result = write_catalog(reports_for((1, True), (2, False)), path)
        assert result.written and not result.failed
        assert [r["active"] for r in json.loads(path.read_text(encoding="utf-8"))] == [True, False]

    def test_playlist_written(self, tmp_path):
        path = tmp_path / "activos.m3u"
        write_playlist(reports_for((1, True), (2, False), (3, True)), path)
        lines = path.read_text(encoding="utf-8").splitlines()
        assert lines[0] == "#EXTM3U"
        assert lines[1:] == [
            '#EXTINF:-1 tvg-logo="",T1', "http://h/1",
            '#EXTINF:-1 tvg-logo="",T3', "http://h/3",
        ]

    def test_no_active_channels_leaves_playlist_untouched(self, tmp_path):
        path = tmp_path / "activos.m3u"
        path.write_text("previous", encoding="utf-8")
        result = write_playlist(reports_for((1, False)), path)
        assert result.skipped
        assert path.read_text(encoding="utf-8") == "previous"

    def test_no_down_channels_leaves_log_untouched(self, tmp_path):
        path = tmp_path / "caidos.log"
        path.write_text("previous run\n", encoding="utf-8")
        result = write_down_log(reports_for((1, True)), path)
        assert result.skipped
        assert path.read_text(encoding="utf-8") == "previous run\n"

    def test_down_log_appends_by_default(self, tmp_path):
        path = tmp_path / "caidos.log"
        write_down_log(reports_for((1, False)), path)
        write_down_log(reports_for((2, False)), path)
        text = path.read_text(encoding="utf-8")
        assert text.count("Down channels - generated at") == 2
        assert "ID 1: T1" in text and "ID 2: T2" in text
        assert "Reason: HTTP 500" in text

    def test_down_log_overwrite_mode(self, tmp_path):
        path = tmp_path / "caidos.log"
        write_down_log(reports_for((1, False)), path, mode="overwrite")
        write_down_log(reports_for((2, False)), path, mode="overwrite")
        text = path.read_text(encoding="utf-8")
        assert "ID 1: T1" not in text and "ID 2: T2" in text

    def test_one_failing_sink_does_not_stop_the_others(self, tmp_path):
        blocked = tmp_path / "blocked"
        blocked.mkdir()
        settings = Settings(
            catalog_path=blocked,  # un dossier: l'écriture échoue
            down_log_path=tmp_path / "caidos.log",
            playlist_path=tmp_path / "activos.m3u",
        )
        results = write_all(reports_for((1, True), (2, False)), settings)
        by_name = {r.name: r for r in results}
        assert by_name["catalog"].failed
        assert by_name["down_log"].written
        assert by_name["playlist"].written
        assert (tmp_path / "activos.m3u").exists()

    def test_unencodable_catalog_does_not_stop_the_others(self, tmp_path):
        # Un "\ud800" isolé est du JSON valide mais ne s'encode pas en UTF-8.
        annotated = [
            AnnotatedChannel(Channel.from_record({"id": 1, "title": "bad \ud800", "url": "http://h/1"}), Verdict.ko("HTTP 500")),
            AnnotatedChannel(Channel.from_record({"id": 2, "title": "T2", "url": "http://h/2"}), Verdict.ok()),
        ]
        settings = Settings(
            catalog_path=tmp_path / "canales.json",
            down_log_path=tmp_path / "caidos.log",
            playlist_path=tmp_path / "activos.m3u",
        )
        results = write_all(build_reports(annotated, now=NOW), settings)
        by_name = {r.name: r for r in results}
        assert by_name["catalog"].failed
        assert "UnicodeEncodeError" in by_name["catalog"].error
        assert by_name["down_log"].failed
        assert by_name["playlist"].written
        assert (tmp_path / "activos.m3u").read_text(encoding="utf-8").splitlines()[-1] == "http://h/2"
