"""
HeatSync command-line interface.

Usage:
    heatsync extract path/to/heat-sheet.pdf --swimmer "Jane Doe"
    heatsync extract-url https://example.org/heats.pdf --swimmer "Jane Doe"
    heatsync result aB3dE5fG
    heatsync migrate
"""

import json
from pathlib import Path
from typing import NoReturn

import typer
from pydantic import ValidationError

from heatsync.config.exceptions import ConfigurationError
from heatsync.config.settings import Settings
from heatsync.database.connection import close_pool, init_pool
from heatsync.database.exceptions import CacheUnavailableError
from heatsync.database.migrations import run_migrations
from heatsync.database.repositories.extraction_result_repository import (
    ExtractionResultRepository,
)
from heatsync.database.repositories.result_link_repository import ResultLinkRepository
from heatsync.extraction.exceptions import ExtractionError
from heatsync.logging.logger import Log
from heatsync.pdf.downloader import PdfDownloader
from heatsync.pdf.exceptions import PdfDownloadError, PdfProcessingError
from heatsync.processor.exceptions import (
    InvalidResultCodeError,
    ProcessorError,
    ResultNotFoundError,
)
from heatsync.processor.processor import Processor, build_processor
from heatsync.processor.result_reader import ResultReader

app = typer.Typer(
    name="heatsync",
    help="Extract a swimmer's events from a heat sheet PDF.",
    add_completion=False,
)


def _emit(payload: dict[str, object]) -> None:
    typer.echo(json.dumps(payload, indent=2))


def _fail(error: str, details: str) -> NoReturn:
    Log.error(f"{error}: {details}")
    _emit({"success": False, "error": error, "details": details})
    raise typer.Exit(1)


def _load_settings() -> Settings:
    try:
        settings = Settings()
    except ValidationError as exc:
        _emit({"success": False, "error": "Invalid configuration", "details": str(exc)})
        raise typer.Exit(2) from exc
    Log.configure(settings.log_level)
    return settings


def _build_processor(settings: Settings) -> Processor:
    try:
        return build_processor(settings)
    except ConfigurationError as exc:
        _emit({"success": False, "error": "Configuration error", "details": str(exc)})
        raise typer.Exit(2) from exc


def _run_extraction(
    settings: Settings,
    processor: Processor,
    pdf_bytes: bytes,
    swimmer: str,
    *,
    source_url: str | None,
    filename: str | None,
) -> None:
    init_pool(settings)
    try:
        outcome = processor.extract(
            pdf_bytes,
            swimmer,
            source_url=source_url,
            filename=filename,
        )
    except ValueError as exc:
        _fail("Invalid request", str(exc))
    except CacheUnavailableError as exc:
        _fail("Cache unavailable", str(exc))
    except (ExtractionError, PdfProcessingError, ProcessorError) as exc:
        _fail("Extraction failed", str(exc))
    else:
        _emit({"success": True, "data": outcome.to_payload()})
    finally:
        close_pool()


@app.command()
def extract(
    pdf_path: Path = typer.Argument(..., help="Path to the heat sheet PDF"),
    swimmer: str = typer.Option(
        ..., "--swimmer", "-s", help="Swimmer name, 'First Last' or 'Last, First'"
    ),
    source_url: str | None = typer.Option(
        None, "--source-url", help="Where the PDF was downloaded from"
    ),
) -> None:
    """Extract one swimmer's events from a heat sheet."""
    settings = _load_settings()
    if not pdf_path.is_file():
        _fail("No PDF file provided", f"File not found: {pdf_path}")

    processor = _build_processor(settings)
    _run_extraction(
        settings,
        processor,
        pdf_path.read_bytes(),
        swimmer,
        source_url=source_url,
        filename=pdf_path.name,
    )


@app.command("extract-url")
def extract_url(
    url: str = typer.Argument(..., help="http(s) URL of the heat sheet PDF"),
    swimmer: str = typer.Option(
        ..., "--swimmer", "-s", help="Swimmer name, 'First Last' or 'Last, First'"
    ),
) -> None:
    """Download a heat sheet and extract one swimmer's events from it."""
    settings = _load_settings()
    processor = _build_processor(settings)
    try:
        pdf = PdfDownloader(timeout_seconds=settings.download_timeout_seconds).download(url)
    except PdfDownloadError as exc:
        _fail(exc.error, exc.details)

    _run_extraction(
        settings,
        processor,
        pdf.content,
        swimmer,
        source_url=pdf.url,
        filename=pdf.filename,
    )


@app.command()
def result(code: str = typer.Argument(..., help="Short result code")) -> None:
    """Show a stored result by its short code."""
    settings = _load_settings()
    init_pool(settings)
    try:
        reader = ResultReader(ResultLinkRepository(), ExtractionResultRepository())
        shared = reader.get(code)
    except InvalidResultCodeError as exc:
        _fail("Invalid result code", str(exc))
    except ResultNotFoundError as exc:
        _fail("Result not found", str(exc))
    except CacheUnavailableError as exc:
        _fail("Cache unavailable", str(exc))
    else:
        _emit({"success": True, "data": shared.to_payload()})
    finally:
        close_pool()


@app.command()
def migrate() -> None:
    """Apply pending database migrations."""
    settings = _load_settings()
    init_pool(settings)
    try:
        applied = run_migrations()
    except CacheUnavailableError as exc:
        _fail("Cache unavailable", str(exc))
    else:
        _emit({"success": True, "data": {"applied": applied}})
    finally:
        close_pool()


if __name__ == "__main__":
    app()
