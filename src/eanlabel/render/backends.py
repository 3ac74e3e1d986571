from __future__ import annotations

import logging
import math
import threading
from dataclasses import dataclass, field
from io import BytesIO
from pathlib import Path
from typing import Protocol, Sequence

from matplotlib.font_manager import FontProperties, findfont, get_font
from matplotlib.path import Path as MplPath
from matplotlib.textpath import TextPath
from reportlab.lib.units import mm
from reportlab.pdfgen import canvas

from eanlabel.errors import FontLoadFailure, GlyphProcessingFailure, RenderingUnavailable

# Bundled with matplotlib, so always available.
DEFAULT_FONT_FAMILY = "DejaVu Sans"

BLACK = (0.0, 0.0, 0.0)
WHITE = (1.0, 1.0, 1.0)

Color = tuple[float, float, float]

LOGGER = logging.getLogger(__name__)


@dataclass(frozen=True)
class PathSegment:
    """
    One outline drawing instruction.

    `op` is one of "M" (move), "L" (line), "Q" (quadratic curve),
    "C" (cubic curve) or "Z" (close). `coords` holds the control and end
    points as a flat x, y sequence: 2 values for M/L, 4 for Q, 6 for C,
    none for Z.
    """

    op: str
    coords: tuple[float, ...] = ()


@dataclass(frozen=True)
class GlyphPath:
    """A glyph outline in font-local coordinates (y up, origin on the baseline)."""

    segments: tuple[PathSegment, ...]
    bbox: tuple[float, float, float, float] | None = None


class Page(Protocol):
    """A single fixed-size page; coordinates in mm from the top-left corner."""

    def fill_rect(self, x: float, y: float, width: float, height: float, color: Color = BLACK) -> None:
        ...

    def fill_path(self, segments: Sequence[PathSegment], color: Color = BLACK) -> None:
        ...

    def to_bytes(self) -> bytes:
        ...


class PageRenderer(Protocol):
    """Minimal interface for a vector page backend."""

    name: str

    def new_page(self, width: float, height: float, *, title: str | None = None) -> Page:
        ...


class GlyphProvider(Protocol):
    """Minimal interface for a glyph outline source."""

    name: str

    def glyph_path(self, char: str, size: float) -> GlyphPath:
        ...

    def advance_width(self, char: str, size: float) -> float | None:
        ...


class ReportLabPage:
    """A reportlab canvas flipped so that drawing happens in mm, y down."""

    def __init__(self, width: float, height: float, *, title: str | None = None, invariant: bool = True) -> None:
        self._buffer = BytesIO()
        self._canvas = canvas.Canvas(
            self._buffer, pagesize=(width * mm, height * mm), invariant=int(invariant)
        )
        self._canvas.setCreator("eanlabel")
        if title:
            self._canvas.setTitle(title)
        self._canvas.translate(0, height * mm)
        self._canvas.scale(mm, -mm)

    def fill_rect(self, x: float, y: float, width: float, height: float, color: Color = BLACK) -> None:
        self._canvas.setFillColorRGB(*color)
        self._canvas.rect(x, y, width, height, stroke=0, fill=1)

    def fill_path(self, segments: Sequence[PathSegment], color: Color = BLACK) -> None:
        path = self._canvas.beginPath()
        current = (0.0, 0.0)
        start = current
        for seg in segments:
            c = seg.coords
            if seg.op == "M":
                path.moveTo(*c)
                current = start = (c[0], c[1])
            elif seg.op == "L":
                path.lineTo(*c)
                current = (c[0], c[1])
            elif seg.op == "Q":
                # PDF has no quadratic operator; raise it to a cubic.
                (x0, y0), (qx, qy), (x, y) = current, c[0:2], c[2:4]
                path.curveTo(
                    x0 + 2 / 3 * (qx - x0), y0 + 2 / 3 * (qy - y0),
                    x + 2 / 3 * (qx - x), y + 2 / 3 * (qy - y),
                    x, y,
                )
                current = (x, y)
            elif seg.op == "C":
                path.curveTo(*c)
                current = (c[4], c[5])
            elif seg.op == "Z":
                path.close()
                current = start
            else:
                raise ValueError(f"Unknown path operator: {seg.op!r}")
        self._canvas.setFillColorRGB(*color)
        self._canvas.drawPath(path, stroke=0, fill=1)

    def to_bytes(self) -> bytes:
        self._canvas.showPage()
        self._canvas.save()
        return self._buffer.getvalue()


@dataclass
class ReportLabRenderer:
    """PDF page renderer backed by reportlab.

    `invariant` suppresses the creation timestamp and document ID so that
    identical labels produce identical bytes.
    """

    name: str = "reportlab"
    invariant: bool = True

    def new_page(self, width: float, height: float, *, title: str | None = None) -> Page:
        try:
            return ReportLabPage(width, height, title=title, invariant=self.invariant)
        except Exception as e:
            raise RenderingUnavailable(f"reportlab could not create a page: {e}") from e


_MPL_OPS = {
    MplPath.MOVETO: "M",
    MplPath.LINETO: "L",
    MplPath.CURVE3: "Q",
    MplPath.CURVE4: "C",
}


@dataclass
class MatplotlibGlyphProvider:
    """Glyph outlines and advance widths read through matplotlib's FreeType wrapper.

    matplotlib caches one FT2Font per file and mutates it on every size
    change, so all access to it is serialized.
    """

    font_path: Path
    name: str = "matplotlib"
    _prop: FontProperties | None = field(default=None, init=False, repr=False)
    _lock: threading.Lock = field(default_factory=threading.Lock, init=False, repr=False)

    def __post_init__(self) -> None:
        self._prop = FontProperties(fname=str(self.font_path))

    @classmethod
    def load(cls, font_path: Path | None = None) -> MatplotlibGlyphProvider:
        """Load a font file, or the bundled default face when `font_path` is None.

        Raises:
            FontLoadFailure: If the file is missing or FreeType cannot open it
        """
        try:
            if font_path is None:
                resolved = Path(findfont(FontProperties(family=DEFAULT_FONT_FAMILY), fallback_to_default=False))
            else:
                resolved = Path(font_path).expanduser()
            if not resolved.is_file():
                raise FileNotFoundError(f"No such font file: {resolved}")
            get_font(str(resolved))
        except Exception as e:
            raise FontLoadFailure(f"Font loading failed: {e}") from e

        LOGGER.debug("font_loaded", extra={"font_path": str(resolved)})
        return cls(font_path=resolved)

    def glyph_path(self, char: str, size: float) -> GlyphPath:
        try:
            with self._lock:
                text_path = TextPath((0, 0), char, size=size, prop=self._prop)
            segments: list[PathSegment] = []
            for verts, code in text_path.iter_segments(curves=True, simplify=False):
                if code == MplPath.CLOSEPOLY:
                    segments.append(PathSegment("Z"))
                elif code in _MPL_OPS:
                    segments.append(PathSegment(_MPL_OPS[code], tuple(float(v) for v in verts)))
        except Exception as e:
            raise GlyphProcessingFailure(char, str(e)) from e

        bbox = None
        if len(text_path.vertices):
            ext = text_path.get_extents()
            bbox = (float(ext.x0), float(ext.y0), float(ext.x1), float(ext.y1))
        return GlyphPath(segments=tuple(segments), bbox=bbox)

    def advance_width(self, char: str, size: float) -> float | None:
        try:
            with self._lock:
                font = get_font(str(self.font_path))
                font.set_size(size, 72)
                glyph = font.load_char(ord(char))
                advance = glyph.linearHoriAdvance / 65536
        except Exception as e:
            raise GlyphProcessingFailure(char, str(e)) from e
        if not math.isfinite(advance):
            return None
        return advance
