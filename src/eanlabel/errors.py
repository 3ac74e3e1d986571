"""
Error kinds raised by the label pipeline.

Per-identifier errors (encoding, composing, glyph handling) are converted
into failure records by the composer and never abort a batch. The remaining
kinds are fatal to a submission and surface at the CLI.
"""

from __future__ import annotations


class EanLabelError(Exception):
    """Base class for all eanlabel errors."""


class InvalidFormat(EanLabelError):
    """Identifier is not 12 or 13 decimal digits."""

    def __init__(self, message: str, *, identifier: str | None = None) -> None:
        super().__init__(message)
        self.identifier = identifier


class CheckDigitMismatch(InvalidFormat):
    """A supplied 13th digit disagrees with the computed check digit."""

    def __init__(self, identifier: str, expected: int) -> None:
        super().__init__(
            f"Check digit mismatch for '{identifier}': expected {expected}, got {identifier[-1]}",
            identifier=identifier,
        )
        self.expected = expected


class InvalidDigit(EanLabelError):
    """A table or pattern index fell outside its domain."""


class RenderingUnavailable(EanLabelError):
    """A page renderer or glyph provider could not be used."""


class FontLoadFailure(EanLabelError):
    """The font resource could not be loaded."""


class GlyphProcessingFailure(EanLabelError):
    """Converting one character's outline into drawing instructions failed."""

    def __init__(self, char: str, message: str) -> None:
        super().__init__(f"Error processing character '{char}': {message}")
        self.char = char


class PackagingUnavailable(EanLabelError):
    """The archive builder or delivery target could not be used."""


class EmptyInput(EanLabelError):
    """No candidate identifiers survived input filtering."""


class AllFailed(EanLabelError):
    """Every composition in a batch failed."""

    def __init__(self, failed: int) -> None:
        super().__init__(f"All {failed} label(s) failed to generate")
        self.failed = failed
