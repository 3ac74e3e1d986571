"""
Input adapters.

Normalize pasted text and tabular files into lists of candidate
identifiers (12 or 13 ASCII digits). Row-level problems are recorded and
logged, never raised; the caller decides what an empty result means.
"""

from __future__ import annotations

import csv
from dataclasses import dataclass, field
import io
import logging
from pathlib import Path
from typing import Iterable, Sequence

import httpx

from eanlabel.errors import EmptyInput
from eanlabel.symbology import is_candidate

LOGGER = logging.getLogger(__name__)

DEFAULT_COLUMN = 2


@dataclass(frozen=True)
class SkippedRow:
    """
    An input row that did not yield a candidate.

    Attributes:
        row: 1-based row (or line) number
        message: Human-readable reason
    """

    row: int
    message: str


@dataclass(frozen=True)
class UnreadableRow:
    """A row the CSV reader rejected, e.g. for an oversized field."""

    message: str


@dataclass
class ParsedInput:
    """Candidates in input order plus the rows that were dropped."""

    candidates: list[str] = field(default_factory=list)
    skipped: list[SkippedRow] = field(default_factory=list)

    def require_candidates(self, source: str = "input") -> list[str]:
        """Return the candidates, or raise EmptyInput if there are none."""
        if not self.candidates:
            raise EmptyInput(f"No valid 12- or 13-digit barcode numbers found in {source}")
        return self.candidates


def fetch_bytes(url: str, *, timeout: float = 10.0) -> bytes:
    """
    Fetch raw bytes from URL.

    Raises:
        httpx.HTTPError: If request fails
    """
    with httpx.Client(timeout=timeout, follow_redirects=True) as client:
        resp = client.get(url)
        resp.raise_for_status()
        return resp.content


def load_source(path_or_url: str) -> bytes:
    """
    Load raw input from file path or URL.

    Automatically detects whether input is a URL (starts with http:// or
    https://) or a filesystem path.

    Raises:
        FileNotFoundError: If file path doesn't exist
        httpx.HTTPError: If URL fetch fails
    """
    if path_or_url.startswith("http://") or path_or_url.startswith("https://"):
        return fetch_bytes(path_or_url)

    return Path(path_or_url).expanduser().read_bytes()


def decode_text(data: bytes | str) -> str:
    if isinstance(data, str):
        return data
    # utf-8-sig drops the BOM spreadsheet exports tend to add.
    return data.decode("utf-8-sig", errors="replace")


def parse_text(text: str) -> ParsedInput:
    """
    Extract candidates from free text, one identifier per line.

    Lines are trimmed; blank lines are ignored silently, other lines that
    are not 12 or 13 digits are skipped and recorded.

    Example:
        >>> parse_text("4006381333931\\n12345").candidates
        ['4006381333931']
    """
    parsed = ParsedInput()
    for line_no, line in enumerate(text.splitlines(), start=1):
        value = line.strip()
        if not value:
            continue
        if is_candidate(value):
            parsed.candidates.append(value)
        else:
            parsed.skipped.append(SkippedRow(line_no, f"Invalid format: '{value}'"))
            LOGGER.debug("line_skipped", extra={"row": line_no, "value": value})

    LOGGER.info(
        "text_parsed",
        extra={"candidates": len(parsed.candidates), "skipped": len(parsed.skipped)},
    )
    return parsed


def read_rows(text: str) -> Iterable[list[str] | UnreadableRow]:
    """
    Split CSV text into rows of string cells, dropping blank rows.

    A row the reader rejects is yielded as an UnreadableRow and reading
    resumes on the following line.
    """
    reader = csv.reader(io.StringIO(text))
    while True:
        try:
            row = next(reader)
        except StopIteration:
            return
        except csv.Error as e:
            yield UnreadableRow(str(e))
            continue
        if not row or all(not cell.strip() for cell in row):
            continue
        yield row


def extract_column(
    rows: Iterable[Sequence[str] | UnreadableRow], column: int = DEFAULT_COLUMN
) -> ParsedInput:
    """
    Take one column (1-based) from each row and keep the candidates.

    Rows that are unreadable, too short, have an empty cell, or hold a
    malformed value are recorded and logged; parsing always continues.
    """
    if column < 1:
        raise ValueError(f"Column must be 1 or greater, got {column}")

    parsed = ParsedInput()
    index = column - 1
    for row_no, row in enumerate(rows, start=1):
        if isinstance(row, UnreadableRow):
            issue = SkippedRow(row_no, f"Unreadable row: {row.message}")
        elif len(row) <= index:
            issue = SkippedRow(row_no, f"Insufficient columns ({len(row)})")
        else:
            value = str(row[index]).strip()
            if not value:
                issue = SkippedRow(row_no, f"Empty value in column {column}")
            elif is_candidate(value):
                parsed.candidates.append(value)
                continue
            else:
                issue = SkippedRow(row_no, f"Invalid format in column {column}: '{value}'")

        parsed.skipped.append(issue)
        LOGGER.warning("row_skipped", extra={"row": issue.row, "reason": issue.message})

    LOGGER.info(
        "table_parsed",
        extra={"candidates": len(parsed.candidates), "skipped": len(parsed.skipped)},
    )
    return parsed


def parse_csv(data: bytes | str, *, column: int = DEFAULT_COLUMN) -> ParsedInput:
    """
    Extract candidates from CSV content.

    Parameters:
        data: Raw file bytes (UTF-8, optional BOM) or decoded text
        column: 1-based column holding the identifiers

    Example:
        >>> parse_csv(b"name,jan\\nTea,4006381333931\\n").candidates
        ['4006381333931']
    """
    return extract_column(read_rows(decode_text(data)), column)
