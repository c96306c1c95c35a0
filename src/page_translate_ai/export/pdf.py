"""
PDF exporter for translated documents.

Uses markdown-pdf; each translated page starts a new PDF page and lines
beginning with ``#`` become headings.
"""

from __future__ import annotations

import re
from collections.abc import Iterable
from pathlib import Path

from markdown_pdf import MarkdownPdf, Section

from page_translate_ai.export.base import ExportResult, exportable_pages
from page_translate_ai.store import PageRecord, sanitize_filename

RTL_LANGUAGES = {"ar", "he", "fa", "ur"}

_HEADING = re.compile(r"^\s*#+\s*(.+?)\s*$")
_BULLET = re.compile(r"^(\s*)[•●○▪▫◦]\s*")

PAGE_CSS = """
body {
    font-family: 'Georgia', 'Times New Roman', serif;
    font-size: 11pt;
    line-height: 1.5;
    color: #222;
}

h1 {
    font-size: 17pt;
    margin-top: 6px;
    margin-bottom: 10px;
}

p {
    margin-top: 0;
    margin-bottom: 8px;
    text-align: justify;
}
"""

RTL_CSS = """
body {
    direction: rtl;
    text-align: right;
}
"""


def prepare_page_markdown(text: str) -> str:
    """
    Normalize translated page text for PDF rendering.

    Any line starting with ``#`` becomes a level-one heading and Unicode
    bullets become markdown list items.
    """
    lines = []
    for line in text.splitlines():
        heading = _HEADING.match(line)
        if heading:
            lines.append(f"# {heading.group(1).replace('#', '').strip()}")
            continue
        lines.append(_BULLET.sub(r"\1- ", line))
    return "\n".join(lines)


class PDFExporter:
    """Exports translated pages to a single PDF file."""

    def __init__(self, output_dir: Path | str, language: str = "ru") -> None:
        """
        Initialize the PDF exporter.

        Args:
            output_dir: Base output directory.
            language: Target language code, used for file name and direction.
        """
        self.output_dir = Path(output_dir)
        self.language = language

    def _css(self) -> str:
        css = PAGE_CSS
        if self.language in RTL_LANGUAGES:
            css += RTL_CSS
        return css

    def export_document(
        self,
        document_name: str,
        records: Iterable[PageRecord],
        clean: bool = False,
    ) -> ExportResult:
        """
        Export a document's translated pages to PDF.

        Args:
            document_name: Name of the source document.
            records: Page records; only successful ones are exported.
            clean: Omit document metadata.

        Returns:
            ExportResult with export status.
        """
        pages = exportable_pages(records)
        if not pages:
            return ExportResult(
                document_name=document_name,
                output_path=self.output_dir,
                pages_exported=0,
                success=False,
                error="No translated pages to export",
            )

        safe_name = sanitize_filename(Path(document_name).stem)
        output_file = self.output_dir / f"{safe_name}_{self.language}.pdf"
        css = self._css()

        try:
            self.output_dir.mkdir(parents=True, exist_ok=True)
            pdf = MarkdownPdf(toc_level=0)
            for page in pages:
                pdf.add_section(Section(prepare_page_markdown(page.text), toc=False), user_css=css)

            if not clean:
                pdf.meta["title"] = Path(document_name).stem
                pdf.meta["author"] = "page-translate-ai"
            pdf.save(str(output_file))

        except Exception as e:
            return ExportResult(
                document_name=document_name,
                output_path=self.output_dir,
                pages_exported=0,
                success=False,
                error=str(e),
            )

        return ExportResult(
            document_name=document_name,
            output_path=output_file,
            pages_exported=len(pages),
            success=True,
        )
