"""
CLI for page-translate-ai.

Provides commands for page-by-page translation, single-page regeneration,
cache inspection, export and log viewing.
"""

from __future__ import annotations

import asyncio
from collections.abc import Callable
from pathlib import Path

import typer
from rich.console import Console
from rich.panel import Panel
from rich.progress import (
    BarColumn,
    Progress,
    SpinnerColumn,
    TaskProgressColumn,
    TextColumn,
    TimeElapsedColumn,
)
from rich.table import Table

from page_translate_ai.config import Settings, create_default_config, load_config
from page_translate_ai.database import Database
from page_translate_ai.sources import DocumentSource, open_source
from page_translate_ai.stats import compute_stats
from page_translate_ai.store import PageStatus, PageStore
from page_translate_ai.translation import (
    PageTranslator,
    PipelineConfig,
    PipelineSnapshot,
    TranslationPipeline,
)

app = typer.Typer(
    name="page-translate",
    help="Page-by-page document translation with a resumable local cache.",
    add_completion=False,
)

console = Console()

STATUS_STYLES = {
    PageStatus.SUCCESS: "green",
    PageStatus.ERROR: "red",
    PageStatus.PENDING: "yellow",
}

LEVEL_STYLES = {
    "DEBUG": "dim",
    "INFO": "green",
    "WARNING": "yellow",
    "ERROR": "red",
}

EXPORT_FORMATS = ("markdown", "pdf", "all")


def _display_config(settings: Settings, config_path: Path | None) -> None:
    """Display the configuration being used."""
    cfg = settings.translation
    config_source = str(config_path) if config_path else "default (config.yaml or built-in)"

    config_table = Table(show_header=False, box=None, padding=(0, 2))
    config_table.add_column("Key", style="cyan")
    config_table.add_column("Value", style="green")

    config_table.add_row("Config file", config_source)
    config_table.add_row("Provider", f"{cfg.provider.value} ({cfg.model})")
    if cfg.fallback_provider:
        config_table.add_row(
            "Fallback",
            f"{cfg.fallback_provider.value} ({cfg.fallback_model or cfg.model})",
            style="yellow",
        )
    config_table.add_row("Languages", f"{cfg.source_language} -> {cfg.target_language}")
    config_table.add_row("Domain", cfg.domain)
    config_table.add_row("Request delay", f"{settings.processing.request_delay:g}s")
    config_table.add_row("Cache", str(settings.paths.cache_dir))

    console.print(
        Panel(config_table, title="[bold blue]page-translate-ai[/bold blue]", border_style="blue")
    )


def get_settings(config_path: Path | None = None) -> Settings:
    """Load settings from config file or defaults."""
    if config_path and config_path.exists():
        return load_config(config_path)
    return load_config()


def get_database(settings: Settings) -> Database:
    """Get database instance."""
    return Database(settings.paths.database_path, min_level=settings.logging.level)


def _open_document(file: Path, settings: Settings) -> DocumentSource:
    try:
        return open_source(file, markdown=settings.processing.markdown_extraction)
    except (FileNotFoundError, ValueError) as e:
        console.print(f"[red]{e}[/red]")
        raise typer.Exit(1) from None


def _build_pipeline(settings: Settings, db: Database) -> TranslationPipeline:
    def log_provider_event(level: str, message: str, context: dict) -> None:
        db.log(level, "llm", message, context=context)

    try:
        translator = PageTranslator.from_settings(settings, log_callback=log_provider_event)
    except ValueError as e:
        console.print(f"[red]{e}[/red]")
        console.print("Set OPENROUTER_API_KEY or configure the provider in config.yaml")
        raise typer.Exit(1) from None

    return TranslationPipeline(
        translator,
        settings.paths.cache_dir,
        PipelineConfig.from_settings(settings),
        db=db,
    )


def _describe(snapshot: PipelineSnapshot) -> str:
    description = f"[cyan]{snapshot.document_name}"
    if snapshot.error_count:
        description += f" [red]({snapshot.error_count} failed)"
    return description


async def _run_with_progress(
    pipeline: TranslationPipeline,
    command: Callable[[], object],
    total: int,
) -> None:
    """Run a pipeline command and follow it with a progress bar until idle."""
    with Progress(
        SpinnerColumn(),
        TextColumn("[bold blue]{task.description}"),
        BarColumn(complete_style="green", finished_style="green"),
        TaskProgressColumn(),
        TimeElapsedColumn(),
        console=console,
        transient=False,
    ) as progress:
        task_id = progress.add_task("[cyan]Loading...", total=total)

        def on_change(snapshot: PipelineSnapshot) -> None:
            progress.update(
                task_id,
                completed=snapshot.stats.success_count,
                description=_describe(snapshot),
            )

        unsubscribe = pipeline.subscribe(on_change)
        try:
            command()
            await pipeline.wait()
        except asyncio.CancelledError:
            pipeline.cancel()
            raise
        finally:
            unsubscribe()


def _print_summary(pipeline: TranslationPipeline) -> None:
    snapshot = pipeline.snapshot()
    stats = snapshot.stats

    summary = Table(show_header=False, box=None, padding=(0, 1))
    summary.add_column("", style="bold")
    summary.add_column("")
    summary.add_row("Document", f"[cyan]{snapshot.document_name}[/cyan]")
    summary.add_row("Pages", str(stats.page_count))
    summary.add_row("Translated", f"[green]{stats.success_count}[/green]")
    if stats.error_count:
        summary.add_row("Failed", f"[red]{stats.error_count}[/red]")
    summary.add_row("Progress", f"{stats.percent}%")

    backend = pipeline.backend
    if isinstance(backend, PageTranslator) and backend.usage.requests:
        usage = backend.usage
        summary.add_row("Requests", str(usage.requests))
        summary.add_row(
            "Tokens",
            f"{usage.total_tokens:,} ({usage.input_tokens:,} in / {usage.output_tokens:,} out)",
        )
        if usage.fallback_requests:
            summary.add_row("Fallback", f"[yellow]{usage.fallback_requests}[/yellow]")
        if pipeline.db is not None:
            pipeline.db.log(
                "INFO",
                "llm",
                f"Used {usage.total_tokens} tokens in {usage.requests} requests",
                document=snapshot.document_name,
                context={
                    "input_tokens": usage.input_tokens,
                    "output_tokens": usage.output_tokens,
                    "fallback_requests": usage.fallback_requests,
                    "models": usage.models,
                },
            )

    border = "green" if stats.success_count == stats.page_count else "yellow"
    console.print(Panel(summary, title="[bold]Summary[/bold]", border_style=border))

    if stats.error_count:
        console.print(
            "[dim]Retry failed pages with 'page-translate regenerate FILE --page N' "
            "or run translate again.[/dim]"
        )


def _run_async(coro_factory: Callable[[], object]) -> None:
    try:
        asyncio.run(coro_factory())
    except KeyboardInterrupt:
        console.print(
            "\n[yellow]Interrupted. Completed pages are cached; run again to resume.[/yellow]"
        )
        raise typer.Exit(130) from None


@app.command()
def translate(
    file: Path = typer.Argument(..., help="PDF or text document to translate"),
    config: Path | None = typer.Option(None, "--config", "-c", help="Config file"),
    name: str | None = typer.Option(
        None, "--name", "-n", help="Cache name (default: the file name)"
    ),
) -> None:
    """Translate a document, resuming from its cache."""
    settings = get_settings(config)
    _display_config(settings, config)

    db = get_database(settings)
    source = _open_document(file, settings)
    pipeline = _build_pipeline(settings, db)

    async def run() -> None:
        pipeline.load(source, document_name=name, auto_start=False)
        if not pipeline.needs_translation():
            console.print("[green]All pages already translated[/green]")
            return
        await _run_with_progress(pipeline, pipeline.start, source.page_count())

    try:
        _run_async(run)
        _print_summary(pipeline)
    finally:
        source.close()
        db.close()


@app.command()
def regenerate(
    file: Path = typer.Argument(..., help="Document the page belongs to"),
    page: int = typer.Option(..., "--page", "-p", help="Page number (1-based)"),
    config: Path | None = typer.Option(None, "--config", "-c", help="Config file"),
    name: str | None = typer.Option(None, "--name", "-n", help="Cache name"),
) -> None:
    """Re-translate a single page."""
    settings = get_settings(config)
    db = get_database(settings)
    source = _open_document(file, settings)

    try:
        page_count = source.page_count()
        if not 1 <= page <= page_count:
            console.print(f"[red]Page {page} out of range (1-{page_count})[/red]")
            raise typer.Exit(1)

        pipeline = _build_pipeline(settings, db)

        async def run() -> None:
            pipeline.load(source, document_name=name, auto_start=False)
            task = pipeline.regenerate_one(page - 1)
            if task is None:
                console.print(f"[yellow]Page {page} has no text to translate[/yellow]")
                return
            with console.status(f"[cyan]Translating page {page}..."):
                record = await task

            if record is None:
                return
            style = STATUS_STYLES[record.status]
            console.print(
                Panel(
                    record.text,
                    title=f"Page {page} [{style}]{record.status.value}[/{style}]",
                    border_style=style,
                )
            )

        _run_async(run)
    finally:
        source.close()
        db.close()


@app.command()
def reset(
    file: Path = typer.Argument(..., help="Document to translate from scratch"),
    config: Path | None = typer.Option(None, "--config", "-c", help="Config file"),
    name: str | None = typer.Option(None, "--name", "-n", help="Cache name"),
    yes: bool = typer.Option(False, "--yes", "-y", help="Skip confirmation"),
) -> None:
    """Delete the cached translation and translate again from page 1."""
    if not yes:
        typer.confirm(f"Discard all cached translations for {file.name}?", abort=True)

    settings = get_settings(config)
    db = get_database(settings)
    source = _open_document(file, settings)
    pipeline = _build_pipeline(settings, db)

    async def run() -> None:
        pipeline.load(source, document_name=name, auto_start=False)
        await _run_with_progress(pipeline, pipeline.reset, source.page_count())

    try:
        _run_async(run)
        _print_summary(pipeline)
    finally:
        source.close()
        db.close()


@app.command()
def status(
    file: Path = typer.Argument(..., help="Document to inspect"),
    config: Path | None = typer.Option(None, "--config", "-c", help="Config file"),
    name: str | None = typer.Option(None, "--name", "-n", help="Cache name"),
) -> None:
    """Show cached page status for a document."""
    settings = get_settings(config)
    source = _open_document(file, settings)
    try:
        page_count = source.page_count()
        document_name = name or source.name
    finally:
        source.close()

    store = PageStore.load(settings.paths.cache_dir, document_name)
    if store is None:
        console.print(f"[yellow]No cached translation for {document_name}[/yellow]")
        return
    store.drop_beyond(page_count)
    records = store.ordered()

    table = Table(title=f"Pages: {document_name}")
    table.add_column("Page", justify="right")
    table.add_column("Status")
    table.add_column("Preview")

    for record in records:
        style = STATUS_STYLES[record.status]
        preview = " ".join(record.text.split())[:60]
        table.add_row(
            str(record.index + 1),
            f"[{style}]{record.status.value}[/{style}]",
            preview,
        )

    console.print(table)

    stats = compute_stats(records, page_count)
    console.print(
        f"\nProgress: [bold]{stats.percent}%[/bold] "
        f"({stats.success_count}/{stats.page_count} pages)"
    )
    if stats.error_count:
        console.print(f"[red]Failed pages: {stats.error_count}[/red]")


@app.command()
def export(
    file: Path = typer.Argument(..., help="Document whose translation to export"),
    config: Path | None = typer.Option(None, "--config", "-c", help="Config file"),
    name: str | None = typer.Option(None, "--name", "-n", help="Cache name"),
    export_format: str | None = typer.Option(
        None,
        "--format",
        "-f",
        help="Export format: markdown, pdf or all (default: from config)",
    ),
    output: Path | None = typer.Option(None, "--output", "-o", help="Output directory"),
) -> None:
    """Export translated pages to Markdown and/or PDF."""
    from page_translate_ai.export import MarkdownExporter, PDFExporter

    if export_format is not None and export_format.lower() not in EXPORT_FORMATS:
        console.print(f"[red]Invalid format: {export_format}[/red]")
        console.print(f"Valid options: {', '.join(EXPORT_FORMATS)}")
        raise typer.Exit(1)

    settings = get_settings(config)
    if export_format is None:
        want_markdown = settings.export.markdown
        want_pdf = settings.export.pdf
    else:
        export_format = export_format.lower()
        want_markdown = export_format in ("markdown", "all")
        want_pdf = export_format in ("pdf", "all")
    document_name = name or file.name
    output_dir = output or settings.paths.output_dir
    language = settings.translation.target_language

    store = PageStore.load(settings.paths.cache_dir, document_name)
    if store is None:
        console.print(f"[red]No cached translation for {document_name}[/red]")
        raise typer.Exit(1)
    records = store.ordered()

    results = []
    if want_markdown:
        results.append(
            MarkdownExporter(output_dir, language).export_document(
                document_name,
                records,
                combined=settings.export.markdown_combined,
                clean=settings.export.clean,
            )
        )
    if want_pdf:
        results.append(
            PDFExporter(output_dir, language).export_document(
                document_name, records, clean=settings.export.clean
            )
        )

    db = get_database(settings)
    failed = False
    for result in results:
        if result.success:
            console.print(
                f"[green]Exported {result.pages_exported} pages to {result.output_path}[/green]"
            )
            db.log(
                "INFO",
                "export",
                f"Exported {result.pages_exported} pages",
                document=document_name,
                context={"path": str(result.output_path)},
            )
        else:
            failed = True
            console.print(f"[red]Export failed: {result.error}[/red]")
            db.log("ERROR", "export", f"Export failed: {result.error}", document=document_name)
    db.close()

    if failed:
        raise typer.Exit(1)


@app.command()
def logs(
    document: str | None = typer.Option(None, "--doc", "-d", help="Filter by document name"),
    level: str | None = typer.Option(None, "--level", "-l", help="Filter by level"),
    stage: str | None = typer.Option(None, "--stage", "-s", help="Filter by stage"),
    limit: int = typer.Option(50, "--limit", "-n", help="Max entries to show"),
    config: Path | None = typer.Option(None, "--config", "-c", help="Config file"),
) -> None:
    """View processing logs."""
    settings = get_settings(config)
    db = get_database(settings)

    entries = db.get_logs(document=document, level=level, stage=stage, limit=limit)
    db.close()

    if not entries:
        console.print("[yellow]No log entries found[/yellow]")
        return

    table = Table(title="Processing Logs")
    table.add_column("Time", style="dim")
    table.add_column("Level")
    table.add_column("Stage", style="cyan")
    table.add_column("Message")
    table.add_column("Document")

    for entry in entries:
        lvl = entry["level"]
        level_style = LEVEL_STYLES.get(lvl, "white")
        table.add_row(
            str(entry["created_at"])[:19],
            f"[{level_style}]{lvl}[/{level_style}]",
            entry["stage"] or "",
            (entry["message"] or "")[:60],
            entry["document"] or "",
        )

    console.print(table)


@app.command()
def init(
    output_path: Path = typer.Option(
        Path("config.yaml"),
        "--output",
        "-o",
        help="Output path for config file",
    ),
) -> None:
    """Generate a default configuration file."""
    if output_path.exists():
        overwrite = typer.confirm(f"{output_path} already exists. Overwrite?")
        if not overwrite:
            raise typer.Abort()

    create_default_config(output_path)
    console.print(f"[green]Created config file: {output_path}[/green]")
    console.print("\nSet OPENROUTER_API_KEY (or edit the file), then run:")
    console.print("  page-translate translate book.pdf")


def main() -> None:
    """Entry point for CLI."""
    app()


if __name__ == "__main__":
    main()
