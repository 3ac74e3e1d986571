"""
eanlabel CLI

Commands:
- text: Generate labels from pasted text (one barcode number per line)
- csv: Generate labels from a column of a CSV file
- encode: Print the 95-module bar pattern for one barcode number
"""

from __future__ import annotations

import json
import logging
from datetime import datetime, timezone
from pathlib import Path
from typing import Any

import httpx
import typer

from eanlabel.errors import AllFailed, EanLabelError, EmptyInput, FontLoadFailure, PackagingUnavailable
from eanlabel.pipeline.coordinator import DEFAULT_WORKERS, BatchCoordinator
from eanlabel.pipeline.inputs import DEFAULT_COLUMN, ParsedInput, decode_text, load_source, parse_csv, parse_text
from eanlabel.pipeline.output import ArchivePackager, DirectoryDelivery, ZipArchiveBuilder
from eanlabel.pipeline.worker import LabelComposer, LabelFailure, LabelResult
from eanlabel.render import MatplotlibGlyphProvider, ReportLabRenderer, load_layout
from eanlabel.symbology import encode_normalized, normalize

app = typer.Typer(add_completion=False, help="EAN-13 / JAN barcode label generator")

EXIT_FAILED = 1
EXIT_FATAL = 2

DEFAULT_OUTPUT_DIR = Path(".")


class JsonFormatter(logging.Formatter):
    """Simple JSON formatter for structured logs."""
    def format(self, record: logging.LogRecord) -> str:
        payload: dict[str, Any] = {
            "ts": datetime.now(timezone.utc).isoformat(),
            "level": record.levelname,
            "msg": record.getMessage(),
            "logger": record.name,
        }
        # Include any custom attributes passed via `extra=`.
        reserved = {
            "name","msg","args","levelname","levelno","pathname","filename","module",
            "exc_info","exc_text","stack_info","lineno","funcName","created","msecs",
            "relativeCreated","thread","threadName","processName","process","taskName",
            "message","asctime",
        }
        for k, v in record.__dict__.items():
            if k in reserved or k.startswith("_"):
                continue
            try:
                json.dumps(v)
                payload[k] = v
            except TypeError:
                payload[k] = repr(v)
        if record.exc_info:
            payload["exc_info"] = self.formatException(record.exc_info)
        return json.dumps(payload, ensure_ascii=False)


def setup_logging(level: str) -> logging.Logger:
    logger = logging.getLogger("eanlabel")
    logger.setLevel(getattr(logging, level.upper(), logging.INFO))
    handler = logging.StreamHandler()
    handler.setFormatter(JsonFormatter())
    logger.handlers[:] = [handler]
    logger.propagate = False
    return logger


LOGGER = logging.getLogger("eanlabel")


def status(message: str) -> None:
    """Report the current phase on stderr."""
    typer.echo(message, err=True)


def _fatal(message: str) -> typer.Exit:
    status(f"❌ Fatal error: {message}")
    return typer.Exit(code=EXIT_FATAL)


def _report_failure(outcome: LabelResult) -> None:
    if isinstance(outcome, LabelFailure):
        status(f"  - {outcome.identifier}: {outcome.message}")


def generate_archive(
    parsed: ParsedInput,
    *,
    source: str,
    out: str | None,
    output_dir: Path,
    font: Path | None,
    layout_file: Path | None,
    workers: int,
    verify: bool,
) -> None:
    """Compose labels for the parsed candidates and write the archive."""
    try:
        candidates = parsed.require_candidates(source)
    except EmptyInput as e:
        status(f"❌ {e}")
        raise typer.Exit(code=EXIT_FAILED)

    status(f"Generating {len(candidates)} barcode(s)...")

    try:
        layout = load_layout(layout_file)
    except (OSError, ValueError) as e:
        raise _fatal(f"Invalid layout file {layout_file}: {e}")
    try:
        glyphs = MatplotlibGlyphProvider.load(font)
    except FontLoadFailure as e:
        raise _fatal(str(e))

    composer = LabelComposer(
        renderer=ReportLabRenderer(),
        glyphs=glyphs,
        layout=layout,
        verify_check_digit=verify,
    )
    coordinator = BatchCoordinator(compose=composer.compose, max_workers=workers)
    coordinator.add_outcome_hook(_report_failure)
    batch = coordinator.run(candidates)

    if batch.succeeded:
        status(f"Building archive ({batch.succeeded} label(s))...")
    packager = ArchivePackager(ZipArchiveBuilder(), DirectoryDelivery(output_dir.expanduser()))
    try:
        result = packager.package(batch, out)
    except AllFailed as e:
        LOGGER.error("submission_failed", extra={"source": source, "failed": e.failed})
        status(f"❌ All {e.failed} barcode(s) failed to generate. See the log for details.")
        raise typer.Exit(code=EXIT_FAILED)
    except PackagingUnavailable as e:
        raise _fatal(str(e))

    LOGGER.info(
        "submission_finished",
        extra={"source": source, "entries": result.entries, "failed": result.failed, "path": str(result.path)},
    )
    summary = f"✅ Done: {result.filename} ({result.entries} label(s))"
    if result.failed:
        summary += f" ({result.failed} failed)"
    status(summary)
    typer.echo(str(result.path))


def _read_source(source: str) -> bytes:
    try:
        return load_source(source)
    except (OSError, httpx.HTTPError) as e:
        raise _fatal(f"Could not read {source}: {e}")


# Options shared by the generating commands.
OutOption = typer.Option(None, "--out", "-o", help="Archive filename (default: barcodes.zip)")
OutputDirOption = typer.Option(DEFAULT_OUTPUT_DIR, "--output-dir", "-d", help="Directory for the archive")
FontOption = typer.Option(None, "--font", help="TrueType/OpenType font for the digits (default: DejaVu Sans)")
LayoutOption = typer.Option(None, "--layout", help="JSON file overriding label layout constants")
WorkersOption = typer.Option(DEFAULT_WORKERS, "--workers", min=1, help="Labels composed concurrently")
VerifyOption = typer.Option(
    True, "--verify/--no-verify", help="Reject 13-digit numbers whose check digit is wrong"
)
LogLevelOption = typer.Option("INFO", "--log-level", help="Logging verbosity (DEBUG, INFO, WARNING, ERROR)")


@app.command("text")
def text_cmd(
    source: str | None = typer.Argument(
        None, help="File path or URL with one barcode number per line; '-' reads stdin"
    ),
    text: str | None = typer.Option(None, "--text", "-t", help="Barcode numbers, newline separated"),
    out: str | None = OutOption,
    output_dir: Path = OutputDirOption,
    font: Path | None = FontOption,
    layout: Path | None = LayoutOption,
    workers: int = WorkersOption,
    verify: bool = VerifyOption,
    log_level: str = LogLevelOption,
) -> None:
    """
    Generate one label per 12- or 13-digit line and bundle them into a ZIP archive.

    Example:
        eanlabel text --text "4006381333931" --out spring
        eanlabel text numbers.txt -d output/
    """
    global LOGGER
    LOGGER = setup_logging(log_level)

    if text is not None:
        raw = text
        origin = "--text"
    elif source is None or source == "-":
        raw = typer.get_text_stream("stdin").read()
        origin = "standard input"
    else:
        raw = decode_text(_read_source(source))
        origin = source

    if not raw.strip():
        status("❌ Enter barcode numbers (12 or 13 digits), one per line.")
        raise typer.Exit(code=EXIT_FAILED)

    generate_archive(
        parse_text(raw),
        source=origin,
        out=out,
        output_dir=output_dir,
        font=font,
        layout_file=layout,
        workers=workers,
        verify=verify,
    )


@app.command("csv")
def csv_cmd(
    source: str = typer.Argument(..., help="CSV file path or URL"),
    column: int = typer.Option(DEFAULT_COLUMN, "--column", "-c", min=1, help="1-based column holding barcode numbers"),
    out: str | None = OutOption,
    output_dir: Path = OutputDirOption,
    font: Path | None = FontOption,
    layout: Path | None = LayoutOption,
    workers: int = WorkersOption,
    verify: bool = VerifyOption,
    log_level: str = LogLevelOption,
) -> None:
    """
    Generate labels from one column of a CSV file (the second by default).

    Rows without a valid 12- or 13-digit value are logged and skipped.

    Example:
        eanlabel csv products.csv --out products.zip
    """
    global LOGGER
    LOGGER = setup_logging(log_level)

    status(f"Reading {source}...")
    parsed = parse_csv(_read_source(source), column=column)

    generate_archive(
        parsed,
        source=f"column {column} of {source}",
        out=out,
        output_dir=output_dir,
        font=font,
        layout_file=layout,
        workers=workers,
        verify=verify,
    )


@app.command("encode")
def encode_cmd(
    code: str = typer.Argument(..., help="12- or 13-digit barcode number"),
    verify: bool = VerifyOption,
) -> None:
    """Print the normalized 13-digit code and its 95-module bar pattern."""
    try:
        normalized = normalize(code, verify_check_digit=verify)
        symbol = encode_normalized(normalized)
    except EanLabelError as e:
        status(f"❌ {e}")
        raise typer.Exit(code=EXIT_FAILED)

    typer.echo(normalized)
    typer.echo(symbol)


def main() -> None:
    app()


if __name__ == "__main__":
    main()
