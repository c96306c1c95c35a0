"""Tests for document sources."""

import fitz
import pytest

import page_translate_ai.sources.pymupdf as pymupdf_module
from page_translate_ai.sources import PyMuPDFSource, TextFileSource, open_source


def _make_pdf(path, pages):
    doc = fitz.open()
    for text in pages:
        page = doc.new_page()
        if text:
            page.insert_text((72, 72), text)
    doc.save(str(path))
    doc.close()
    return path


# ---------------------------------------------------------------------------
# Text files
# ---------------------------------------------------------------------------


@pytest.mark.unit
def test_text_file_pages_split_on_form_feed(tmp_path):
    path = tmp_path / "book.txt"
    path.write_text("First page\fSecond page\f", encoding="utf-8")

    source = TextFileSource(path)

    assert source.name == "book.txt"
    assert source.page_count() == 2
    assert source.page_text(0) == "First page"
    assert source.page_text(1) == "Second page"


@pytest.mark.unit
def test_text_file_blank_and_out_of_range_pages(tmp_path):
    path = tmp_path / "book.md"
    path.write_text("one\f   \n\fthree", encoding="utf-8")

    source = TextFileSource(path)

    assert source.page_count() == 3
    assert source.page_text(1) is None
    assert source.page_text(-1) is None
    assert source.page_text(3) is None


@pytest.mark.unit
def test_text_file_without_separator_is_single_page(tmp_path):
    path = tmp_path / "note.txt"
    path.write_text("just one page", encoding="utf-8")
    assert TextFileSource(path).page_count() == 1


@pytest.mark.unit
def test_text_file_latin1_fallback(tmp_path):
    path = tmp_path / "old.txt"
    path.write_bytes(b"caf\xe9")
    assert TextFileSource(path).page_text(0) == "café"


# ---------------------------------------------------------------------------
# PDFs
# ---------------------------------------------------------------------------


@pytest.mark.unit
def test_pdf_page_text(tmp_path):
    path = _make_pdf(tmp_path / "book.pdf", ["Hello from page one", None, "Page three"])

    source = PyMuPDFSource(path)
    try:
        assert source.name == "book.pdf"
        assert source.page_count() == 3
        assert "Hello from page one" in source.page_text(0)
        assert source.page_text(1) is None
        assert "Page three" in source.page_text(2)
        assert source.page_text(3) is None
        assert source.page_text(-1) is None
    finally:
        source.close()


@pytest.mark.unit
def test_pdf_markdown_extraction_uses_pymupdf4llm(tmp_path, monkeypatch):
    path = _make_pdf(tmp_path / "book.pdf", ["Title"])
    calls = []

    def fake_to_markdown(doc, pages, page_chunks):
        calls.append((pages, page_chunks))
        return [{"text": "# Title\n", "metadata": {}}]

    monkeypatch.setattr(pymupdf_module.pymupdf4llm, "to_markdown", fake_to_markdown)

    source = PyMuPDFSource(path, markdown=True)
    try:
        assert source.page_text(0) == "# Title\n"
    finally:
        source.close()
    assert calls == [([0], True)]


# ---------------------------------------------------------------------------
# open_source
# ---------------------------------------------------------------------------


@pytest.mark.unit
def test_open_source_picks_implementation(tmp_path):
    text_path = tmp_path / "book.txt"
    text_path.write_text("x", encoding="utf-8")
    pdf_path = _make_pdf(tmp_path / "book.pdf", ["x"])

    assert isinstance(open_source(text_path), TextFileSource)
    pdf_source = open_source(pdf_path)
    assert isinstance(pdf_source, PyMuPDFSource)
    pdf_source.close()


@pytest.mark.unit
def test_open_source_missing_file(tmp_path):
    with pytest.raises(FileNotFoundError):
        open_source(tmp_path / "missing.pdf")


@pytest.mark.unit
def test_open_source_unsupported_type(tmp_path):
    path = tmp_path / "book.docx"
    path.write_bytes(b"PK")
    with pytest.raises(ValueError, match="Unsupported"):
        open_source(path)
