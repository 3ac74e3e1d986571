"""
Single label composing worker.

Core function for turning one identifier into one label document. Designed
to be called concurrently from the batch coordinator: a composer holds only
read-only collaborators, and every failure is reported as a LabelFailure
instead of being raised.
"""

from __future__ import annotations

from dataclasses import dataclass, field
import logging
import time

from eanlabel.errors import EanLabelError, GlyphProcessingFailure
from eanlabel.render import (
    BLACK,
    WHITE,
    GlyphProvider,
    LabelLayout,
    Page,
    PageRenderer,
    PathSegment,
)
from eanlabel.symbology import GUARD_MASK, encode_normalized, normalize

LOGGER = logging.getLogger(__name__)

ARTIFACT_SUFFIX = ".ai"


@dataclass(frozen=True)
class LabelArtifact:
    """
    A successfully composed label.

    Attributes:
        identifier: Identifier as submitted
        code: Normalized 13-digit code drawn on the label
        filename: Archive entry name ("<code>.ai")
        data: Rendered document bytes
        elapsed_seconds: Time spent composing
    """

    identifier: str
    code: str
    filename: str
    data: bytes
    elapsed_seconds: float = 0.0

    @property
    def success(self) -> bool:
        return True


@dataclass(frozen=True)
class LabelFailure:
    """
    A label that could not be composed.

    Attributes:
        identifier: Identifier as submitted
        message: Human-readable reason
        error_type: Name of the underlying error class
        elapsed_seconds: Time spent before the failure
    """

    identifier: str
    message: str
    error_type: str = "Exception"
    elapsed_seconds: float = 0.0

    @property
    def success(self) -> bool:
        return False


LabelResult = LabelArtifact | LabelFailure


def artifact_name(code: str) -> str:
    return f"{code}{ARTIFACT_SUFFIX}"


def _place(seg: PathSegment, x: float, baseline: float) -> PathSegment:
    # Glyph space is y-up from the baseline; page space is y-down from the top.
    coords = tuple(
        x + v if i % 2 == 0 else baseline - v for i, v in enumerate(seg.coords)
    )
    return PathSegment(seg.op, coords)


@dataclass
class LabelComposer:
    """
    Composes EAN-13 label documents.

    Draws, in order: a white background over the whole page, one bar per
    ink module of the symbol, the extended guard bars below the bar field,
    and the 13 human-readable digits in three groups.

    Example:
        >>> composer = LabelComposer(
        ...     renderer=ReportLabRenderer(),
        ...     glyphs=MatplotlibGlyphProvider.load(),
        ... )
        >>> result = composer.compose("400638133393")
        >>> result.filename
        '4006381333931.ai'
    """

    renderer: PageRenderer
    glyphs: GlyphProvider
    layout: LabelLayout = field(default_factory=LabelLayout)
    verify_check_digit: bool = True

    def compose(self, identifier: str) -> LabelResult:
        """Compose one label; never raises for per-identifier problems."""
        start_time = time.perf_counter()
        try:
            code = normalize(identifier, verify_check_digit=self.verify_check_digit)
            symbol = encode_normalized(code)

            layout = self.layout
            page = self.renderer.new_page(layout.width, layout.height, title=code)
            page.fill_rect(0, 0, layout.width, layout.height, WHITE)
            self._draw_modules(page, symbol, layout.bar_y, layout.bar_height)
            self._draw_modules(page, GUARD_MASK, layout.guard_y, layout.guard_height)
            self._draw_digits(page, code)
            data = page.to_bytes()
        except Exception as e:
            elapsed = time.perf_counter() - start_time
            LOGGER.warning(
                "label_failed",
                extra={"identifier": identifier, "error": str(e), "error_type": type(e).__name__},
            )
            return LabelFailure(
                identifier=identifier,
                message=str(e),
                error_type=type(e).__name__,
                elapsed_seconds=elapsed,
            )

        elapsed = time.perf_counter() - start_time
        LOGGER.debug(
            "label_composed",
            extra={"identifier": identifier, "code": code, "bytes": len(data), "elapsed_s": round(elapsed, 4)},
        )
        return LabelArtifact(
            identifier=identifier,
            code=code,
            filename=artifact_name(code),
            data=data,
            elapsed_seconds=elapsed,
        )

    def _draw_modules(self, page: Page, modules: str, y: float, height: float) -> None:
        x = self.layout.bar_x
        for module in modules:
            if module == "1":
                page.fill_rect(x, y, self.layout.bar_width, height, BLACK)
            x += self.layout.bar_width

    def _draw_digits(self, page: Page, code: str) -> None:
        size = self.layout.glyph_size
        baseline = self.layout.baseline_y
        for group in self.layout.digit_groups:
            x = group.x
            for char in code[group.start:group.stop]:
                x += self._draw_glyph(page, char, x, baseline, size)

    def _draw_glyph(self, page: Page, char: str, x: float, baseline: float, size: float) -> float:
        """Draw one glyph with its origin at (x, baseline); return the pen advance."""
        try:
            glyph = self.glyphs.glyph_path(char, size)
            if not glyph.segments:
                LOGGER.warning("glyph_empty", extra={"char": char})
                return 0.0

            page.fill_path([_place(seg, x, baseline) for seg in glyph.segments], BLACK)

            advance = self.glyphs.advance_width(char, size)
            if advance is None:
                if glyph.bbox is not None:
                    advance = glyph.bbox[2] - glyph.bbox[0]
                else:
                    advance = self.layout.bar_width * 4
        except EanLabelError:
            raise
        except Exception as e:
            raise GlyphProcessingFailure(char, str(e)) from e

        return advance + self.layout.letter_spacing
