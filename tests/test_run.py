"""End-to-end tests of the command line entry point (network replaced by a stub)."""

import json

import pytest
import requests

import run
from config import FetchConfig


class _FakeResponse:
    def __init__(self, text, status=200):
        self.text = text
        self.status_code = status

    def raise_for_status(self):
        if self.status_code >= 400:
            raise requests.HTTPError(f"{self.status_code} error")


@pytest.fixture
def fake_get(monkeypatch, sample_html):
    calls = []

    def _get(url, headers=None, timeout=None):
        calls.append(url)
        return _FakeResponse(sample_html)

    monkeypatch.setattr(run.requests, "get", _get)
    return calls


def test_fetch_caches_document(tmp_path, fake_get, sample_html):
    cfg = FetchConfig(url="https://example.invalid/api.html", cache_path=str(tmp_path / "c" / "api.html"))
    assert run.fetch_document(cfg) == sample_html
    assert run.fetch_document(cfg) == sample_html
    assert fake_get == ["https://example.invalid/api.html"]

    run.fetch_document(cfg, refresh=True)
    assert len(fake_get) == 2


def test_offline_without_cache_fails(tmp_path):
    cfg = FetchConfig(cache_path=str(tmp_path / "missing.html"))
    with pytest.raises(FileNotFoundError):
        run.fetch_document(cfg, offline=True)


def test_http_errors_propagate(tmp_path, monkeypatch):
    monkeypatch.setattr(run.requests, "get", lambda url, headers=None, timeout=None: _FakeResponse("", 404))
    with pytest.raises(requests.HTTPError):
        run.fetch_document(FetchConfig(cache_path=str(tmp_path / "x.html")))


def test_main_writes_declarations(tmp_path, fake_get):
    out = tmp_path / "externs"
    code = run.main(["--cache", str(tmp_path / "api.html"), "--out", str(out)])
    assert code == 0

    written = sorted(p.relative_to(out).as_posix() for p in out.rglob("*.json"))
    assert written == [
        "sublime/Region.json", "sublime/Sublime.json", "sublime/View.json", "sublime/Window.json",
    ]
    window = json.loads((out / "sublime" / "Window.json").read_text(encoding="utf-8"))
    assert [f["name"] for f in window["fields"]] == ["id", "views", "run_command", "find_output_panel"]


def test_main_dump_sections(tmp_path, fake_get, capsys):
    out = tmp_path / "externs"
    assert run.main(["--cache", str(tmp_path / "api.html"), "--out", str(out), "--dump-sections"]) == 0
    assert "## sublime.View Class" in capsys.readouterr().out
    assert not out.exists()


def test_main_turns_parse_errors_into_exit(tmp_path):
    cache = tmp_path / "api.html"
    cache.write_text(
        "<h2>pkg.Thing Class</h2><table><tr><th>Methods</th><th>Return Value</th><th>Description</th></tr>"
        "<tr><td>not a signature</td><td>int</td><td></td></tr></table>",
        encoding="utf-8",
    )
    with pytest.raises(SystemExit) as exc:
        run.main(["--cache", str(cache), "--out", str(tmp_path / "out"), "--offline"])
    assert "ParseError" in str(exc.value)
