"""
Markdown exporter for translated documents.

Writes either one combined file per document or one file per page.
"""

from __future__ import annotations

from collections.abc import Iterable
from pathlib import Path

from page_translate_ai.export.base import ExportResult, exportable_pages
from page_translate_ai.store import PageRecord, sanitize_filename


class MarkdownExporter:
    """
    Exports translated pages to markdown files.

    Supports two layouts:
    - Combined: single ``<name>_<lang>.md`` with all pages
    - Separate: ``<name>/page_NNN_<lang>.md`` per page
    """

    def __init__(self, output_dir: Path | str, language: str = "ru") -> None:
        """
        Initialize the markdown exporter.

        Args:
            output_dir: Base output directory for exported files.
            language: Target language code, used in file names.
        """
        self.output_dir = Path(output_dir)
        self.language = language

    def export_document(
        self,
        document_name: str,
        records: Iterable[PageRecord],
        combined: bool = True,
        clean: bool = False,
    ) -> ExportResult:
        """
        Export a document's translated pages.

        Args:
            document_name: Name of the source document.
            records: Page records; only successful ones are exported.
            combined: Single file if True, one file per page otherwise.
            clean: Omit the title block, page headers and separators.

        Returns:
            ExportResult with export status and details.
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

        try:
            self.output_dir.mkdir(parents=True, exist_ok=True)
            if combined:
                output_path = self._export_combined(document_name, safe_name, pages, clean)
            else:
                output_path = self._export_separate(safe_name, pages)
        except OSError as e:
            return ExportResult(
                document_name=document_name,
                output_path=self.output_dir,
                pages_exported=0,
                success=False,
                error=str(e),
            )

        return ExportResult(
            document_name=document_name,
            output_path=output_path,
            pages_exported=len(pages),
            success=True,
        )

    def _export_combined(
        self,
        document_name: str,
        safe_name: str,
        pages: list[PageRecord],
        clean: bool,
    ) -> Path:
        output_file = self.output_dir / f"{safe_name}_{self.language}.md"

        parts: list[str] = []
        if not clean:
            parts.extend(
                [
                    f"# {document_name}",
                    "",
                    f"**Language:** {self.language.upper()}",
                    f"**Pages:** {len(pages)}",
                    "",
                    "---",
                    "",
                ]
            )

        for page in pages:
            if not clean:
                parts.append(f"## Page {page.index + 1}")
                parts.append("")
            parts.append(page.text)
            if not clean:
                parts.append("")
                parts.append("---")
            parts.append("")

        output_file.write_text("\n".join(parts), encoding="utf-8")
        return output_file

    def _export_separate(self, safe_name: str, pages: list[PageRecord]) -> Path:
        doc_output_dir = self.output_dir / safe_name
        doc_output_dir.mkdir(parents=True, exist_ok=True)

        for page in pages:
            page_file = doc_output_dir / f"page_{page.index + 1:03d}_{self.language}.md"
            page_file.write_text(page.text, encoding="utf-8")

        return doc_output_dir
