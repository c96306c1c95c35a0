"""Tests for the command line interface."""

from types import SimpleNamespace

import pytest
from typer.testing import CliRunner

from conftest import FakeBackend, page_body
from page_translate_ai.cli import app
from page_translate_ai.database import Database
from page_translate_ai.llm import LLMProvider, LLMResponse
from page_translate_ai.store import PageRecord, PageStatus, PageStore
from page_translate_ai.translation.translator import PageTranslator

runner = CliRunner()


class EchoProvider(LLMProvider):
    """Answers each page prompt with its source text in upper case."""

    @property
    def name(self):
        return "echo"

    @property
    def model(self):
        return "echo-1"

    async def complete(self, messages, *, temperature=0.3, max_tokens=4096, **kwargs):
        body = page_body(messages[-1]["content"])
        return LLMResponse(content=body.upper(), input_tokens=100, output_tokens=20, model="echo-1")


@pytest.fixture
def workspace(tmp_path, monkeypatch):
    monkeypatch.delenv("OPENROUTER_API_KEY", raising=False)
    monkeypatch.chdir(tmp_path)

    config = tmp_path / "test-config.yaml"
    config.write_text(
        f"""
paths:
  cache_dir: "{tmp_path / 'cache'}"
  output_dir: "{tmp_path / 'out'}"
  database_path: "{tmp_path / 'events.duckdb'}"
processing:
  request_delay: 0
export:
  pdf: false
""",
        encoding="utf-8",
    )
    doc = tmp_path / "book.txt"
    doc.write_text("alpha\fbeta", encoding="utf-8")

    return SimpleNamespace(
        root=tmp_path,
        config=str(config),
        doc=str(doc),
        cache_dir=tmp_path / "cache",
        output_dir=tmp_path / "out",
    )


@pytest.fixture
def fake_backend(monkeypatch):
    backend = FakeBackend()
    monkeypatch.setattr(
        PageTranslator,
        "from_settings",
        classmethod(lambda cls, settings, log_callback=None: backend),
    )
    return backend


def _seed(workspace, records):
    PageStore(workspace.cache_dir, records).save("book.txt")


# ---------------------------------------------------------------------------
# init
# ---------------------------------------------------------------------------


@pytest.mark.unit
def test_init_writes_config(tmp_path):
    path = tmp_path / "config.yaml"
    result = runner.invoke(app, ["init", "--output", str(path)])

    assert result.exit_code == 0
    assert "translation:" in path.read_text(encoding="utf-8")


@pytest.mark.unit
def test_init_refuses_to_overwrite_without_confirmation(tmp_path):
    path = tmp_path / "config.yaml"
    path.write_text("keep me", encoding="utf-8")

    result = runner.invoke(app, ["init", "--output", str(path)], input="n\n")

    assert result.exit_code != 0
    assert path.read_text(encoding="utf-8") == "keep me"


# ---------------------------------------------------------------------------
# translate / regenerate / reset
# ---------------------------------------------------------------------------


@pytest.mark.unit
def test_translate_runs_pipeline_and_caches(workspace, fake_backend):
    result = runner.invoke(app, ["translate", workspace.doc, "--config", workspace.config])

    assert result.exit_code == 0, result.output
    assert fake_backend.bodies == ["alpha", "beta"]
    store = PageStore.load(workspace.cache_dir, "book.txt")
    assert [r.text for r in store.ordered()] == ["RU(alpha)", "RU(beta)"]
    assert "Summary" in result.output


@pytest.mark.unit
def test_translate_summary_reports_token_usage(workspace, monkeypatch):
    monkeypatch.setattr(
        PageTranslator,
        "from_settings",
        classmethod(lambda cls, settings, log_callback=None: cls(EchoProvider())),
    )

    result = runner.invoke(app, ["translate", workspace.doc, "--config", workspace.config])

    assert result.exit_code == 0, result.output
    assert "Tokens" in result.output
    assert "240" in result.output
    store = PageStore.load(workspace.cache_dir, "book.txt")
    assert [r.text for r in store.ordered()] == ["ALPHA", "BETA"]

    with Database(workspace.root / "events.duckdb") as db:
        usage = db.get_logs(stage="llm")
    assert usage[0]["message"] == "Used 240 tokens in 2 requests"
    assert usage[0]["context"]["models"] == {"echo-1": 2}


@pytest.mark.unit
def test_translate_complete_document_is_noop(workspace, fake_backend):
    _seed(
        workspace,
        [PageRecord(0, "a", PageStatus.SUCCESS), PageRecord(1, "b", PageStatus.SUCCESS)],
    )

    result = runner.invoke(app, ["translate", workspace.doc, "--config", workspace.config])

    assert result.exit_code == 0
    assert "All pages already translated" in result.output
    assert fake_backend.calls == 0


@pytest.mark.unit
def test_translate_without_api_key_fails(workspace):
    result = runner.invoke(app, ["translate", workspace.doc, "--config", workspace.config])

    assert result.exit_code == 1
    assert "API key" in result.output


@pytest.mark.unit
def test_translate_missing_document_fails(workspace, fake_backend):
    result = runner.invoke(app, ["translate", "missing.pdf", "--config", workspace.config])

    assert result.exit_code == 1
    assert "Document not found" in result.output


@pytest.mark.unit
def test_regenerate_single_page(workspace, fake_backend):
    _seed(
        workspace,
        [PageRecord(0, "a", PageStatus.SUCCESS), PageRecord(1, "x", PageStatus.ERROR)],
    )

    result = runner.invoke(
        app, ["regenerate", workspace.doc, "--page", "2", "--config", workspace.config]
    )

    assert result.exit_code == 0, result.output
    assert fake_backend.bodies == ["beta"]
    assert PageStore.load(workspace.cache_dir, "book.txt").get(1) == PageRecord(
        1, "RU(beta)", PageStatus.SUCCESS
    )


@pytest.mark.unit
def test_regenerate_out_of_range_page(workspace, fake_backend):
    result = runner.invoke(
        app, ["regenerate", workspace.doc, "--page", "5", "--config", workspace.config]
    )

    assert result.exit_code == 1
    assert "out of range" in result.output
    assert fake_backend.calls == 0


@pytest.mark.unit
def test_reset_translates_from_scratch(workspace, fake_backend):
    _seed(
        workspace,
        [PageRecord(0, "old", PageStatus.SUCCESS), PageRecord(1, "old", PageStatus.SUCCESS)],
    )

    result = runner.invoke(
        app, ["reset", workspace.doc, "--yes", "--config", workspace.config]
    )

    assert result.exit_code == 0, result.output
    assert fake_backend.bodies == ["alpha", "beta"]
    store = PageStore.load(workspace.cache_dir, "book.txt")
    assert [r.text for r in store.ordered()] == ["RU(alpha)", "RU(beta)"]


# ---------------------------------------------------------------------------
# status / export / logs
# ---------------------------------------------------------------------------


@pytest.mark.unit
def test_status_shows_progress(workspace):
    _seed(workspace, [PageRecord(0, "готово", PageStatus.SUCCESS)])

    result = runner.invoke(app, ["status", workspace.doc, "--config", workspace.config])

    assert result.exit_code == 0
    assert "success" in result.output
    assert "50%" in result.output


@pytest.mark.unit
def test_status_without_cache(workspace):
    result = runner.invoke(app, ["status", workspace.doc, "--config", workspace.config])

    assert result.exit_code == 0
    assert "No cached translation" in result.output


@pytest.mark.unit
def test_export_markdown(workspace):
    _seed(
        workspace,
        [PageRecord(0, "Первая", PageStatus.SUCCESS), PageRecord(1, "x", PageStatus.ERROR)],
    )

    result = runner.invoke(
        app, ["export", workspace.doc, "--format", "markdown", "--config", workspace.config]
    )

    assert result.exit_code == 0, result.output
    content = (workspace.output_dir / "book_ru.md").read_text(encoding="utf-8")
    assert "Первая" in content

    logs = runner.invoke(app, ["logs", "--stage", "export", "--config", workspace.config])
    assert "Exported 1 pages" in logs.output


@pytest.mark.unit
def test_export_invalid_format(workspace):
    result = runner.invoke(
        app, ["export", workspace.doc, "--format", "docx", "--config", workspace.config]
    )
    assert result.exit_code == 1
    assert "Invalid format" in result.output


@pytest.mark.unit
def test_export_without_cache_fails(workspace):
    result = runner.invoke(app, ["export", workspace.doc, "--config", workspace.config])
    assert result.exit_code == 1


@pytest.mark.unit
def test_logs_empty(workspace):
    result = runner.invoke(app, ["logs", "--config", workspace.config])

    assert result.exit_code == 0
    assert "No log entries found" in result.output


@pytest.mark.unit
def test_export_default_formats_come_from_config(workspace):
    _seed(workspace, [PageRecord(0, "Первая", PageStatus.SUCCESS)])

    result = runner.invoke(app, ["export", workspace.doc, "--config", workspace.config])

    assert result.exit_code == 0, result.output
    assert (workspace.output_dir / "book_ru.md").exists()
    assert not (workspace.output_dir / "book_ru.pdf").exists()
