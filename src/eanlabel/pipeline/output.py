"""
Archive packaging and delivery.

Bundles the labels of a settled batch into one ZIP archive and hands it
to a delivery target. Packaging happens once per batch, after every
composition has settled.
"""

from __future__ import annotations

from dataclasses import dataclass
from io import BytesIO
import logging
from pathlib import Path
from typing import Protocol, Sequence
import zipfile

from eanlabel.errors import AllFailed, EmptyInput, PackagingUnavailable

from .coordinator import BatchResult

LOGGER = logging.getLogger(__name__)

DEFAULT_ARCHIVE_NAME = "barcodes.zip"
DEFAULT_COMPRESSION_LEVEL = 6


def archive_filename(name: str | None) -> str:
    """
    Resolve the archive filename from an optional user-supplied name.

    Parameters:
        name: Requested name; blank or None selects the default. Only its
            final path component is kept.

    Returns:
        Filename ending in ".zip"

    Example:
        >>> archive_filename(None)
        'barcodes.zip'
        >>> archive_filename(" spring-labels ")
        'spring-labels.zip'
        >>> archive_filename("Labels.ZIP")
        'Labels.ZIP'
        >>> archive_filename("../spring")
        'spring.zip'
    """
    if name is None:
        return DEFAULT_ARCHIVE_NAME
    name = Path(name.strip().replace("\\", "/")).name
    if not name or name == "..":
        return DEFAULT_ARCHIVE_NAME
    if not name.lower().endswith(".zip"):
        name += ".zip"
    return name


class ArchiveBuilder(Protocol):
    """Minimal interface for a container format."""

    def build(self, entries: Sequence[tuple[str, bytes]]) -> bytes:
        ...


class Delivery(Protocol):
    """Minimal interface for handing a finished archive to the user."""

    def deliver(self, data: bytes, filename: str) -> Path:
        ...


@dataclass
class ZipArchiveBuilder:
    """DEFLATE-compressed ZIP archive; `compression_level` runs 0-9."""

    compression_level: int = DEFAULT_COMPRESSION_LEVEL

    def build(self, entries: Sequence[tuple[str, bytes]]) -> bytes:
        buf = BytesIO()
        with zipfile.ZipFile(
            buf, "w", compression=zipfile.ZIP_DEFLATED, compresslevel=self.compression_level
        ) as zf:
            for name, data in entries:
                zf.writestr(name, data)
        return buf.getvalue()


@dataclass
class DirectoryDelivery:
    """Writes archives into a local directory, creating it if needed."""

    output_dir: Path

    def deliver(self, data: bytes, filename: str) -> Path:
        output_dir = Path(self.output_dir).expanduser()
        output_dir.mkdir(parents=True, exist_ok=True)
        path = output_dir / filename
        path.write_bytes(data)
        return path


@dataclass(frozen=True)
class PackageResult:
    """
    Result of packaging one batch.

    Attributes:
        path: Where the archive was delivered
        filename: Archive filename
        entries: Number of label documents in the archive
        failed: Number of identifiers that produced no document
    """

    path: Path
    filename: str
    entries: int
    failed: int


@dataclass
class ArchivePackager:
    """
    Packages a batch's labels and delivers the archive.

    Example:
        >>> packager = ArchivePackager(ZipArchiveBuilder(), DirectoryDelivery(Path("out")))
        >>> packager.package(batch, "spring").filename
        'spring.zip'
    """

    builder: ArchiveBuilder
    delivery: Delivery

    def package(self, batch: BatchResult, name: str | None = None) -> PackageResult:
        """
        Build and deliver the archive for a settled batch.

        Raises:
            EmptyInput: If the batch has no outcomes at all
            AllFailed: If no label succeeded; nothing is built or delivered
            PackagingUnavailable: If building or delivering the archive fails
        """
        if not batch.outcomes:
            raise EmptyInput("Batch contains no identifiers")

        artifacts = batch.artifacts
        if not artifacts:
            raise AllFailed(batch.failed)

        entries: list[tuple[str, bytes]] = []
        seen: set[str] = set()
        for artifact in artifacts:
            if artifact.filename in seen:
                LOGGER.warning("duplicate_entry_skipped", extra={"entry": artifact.filename})
                continue
            seen.add(artifact.filename)
            entries.append((artifact.filename, artifact.data))

        filename = archive_filename(name)
        try:
            data = self.builder.build(entries)
        except Exception as e:
            raise PackagingUnavailable(f"Could not build archive: {e}") from e

        try:
            path = self.delivery.deliver(data, filename)
        except OSError as e:
            raise PackagingUnavailable(f"Could not deliver {filename}: {e}") from e

        LOGGER.info(
            "archive_written",
            extra={"path": str(path), "entries": len(entries), "failed": batch.failed, "bytes": len(data)},
        )
        return PackageResult(path=path, filename=filename, entries=len(entries), failed=batch.failed)
