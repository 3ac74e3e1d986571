"""Shared fakes for the rendering collaborators."""

from __future__ import annotations

import pytest

from eanlabel.errors import FontLoadFailure
from eanlabel.render import BLACK, GlyphPath, PathSegment


class FakePage:
    """Records drawing calls instead of rendering."""

    def __init__(self, width: float, height: float, title: str | None = None):
        self.width = width
        self.height = height
        self.title = title
        self.rects: list[tuple[float, float, float, float, tuple]] = []
        self.paths: list[list[PathSegment]] = []

    def fill_rect(self, x, y, width, height, color=BLACK):
        self.rects.append((x, y, width, height, color))

    def fill_path(self, segments, color=BLACK):
        self.paths.append(list(segments))

    def to_bytes(self) -> bytes:
        return f"%FAKE {self.title}".encode()

    def black_rects_at(self, y: float) -> list[tuple]:
        return [r for r in self.rects if r[4] == BLACK and r[1] == pytest.approx(y)]

    @property
    def background(self) -> tuple:
        return self.rects[0]


class FakeRenderer:
    name = "fake"

    def __init__(self):
        self.pages: list[FakePage] = []

    def new_page(self, width, height, *, title=None):
        page = FakePage(width, height, title)
        self.pages.append(page)
        return page


# A 1 x 2 box with its lower-left corner on the origin.
BOX = (
    PathSegment("M", (0.0, 0.0)),
    PathSegment("L", (1.0, 0.0)),
    PathSegment("L", (1.0, 2.0)),
    PathSegment("L", (0.0, 2.0)),
    PathSegment("Z"),
)


class FakeGlyphs:
    """Every glyph is BOX; behaviour per character is configurable."""

    name = "fake"

    def __init__(
        self,
        advance: float | None = 1.0,
        bbox: tuple[float, float, float, float] | None = (0.0, 0.0, 0.8, 2.0),
        empty: str = "",
        font_missing_for: str = "",
    ):
        self.advance = advance
        self.bbox = bbox
        self.empty = empty
        self.font_missing_for = font_missing_for
        self.requested: list[tuple[str, float]] = []

    def glyph_path(self, char, size):
        self.requested.append((char, size))
        if char in self.font_missing_for:
            raise FontLoadFailure(f"Font loading failed for '{char}'")
        if char in self.empty:
            return GlyphPath(segments=(), bbox=None)
        return GlyphPath(segments=BOX, bbox=self.bbox)

    def advance_width(self, char, size):
        return self.advance


@pytest.fixture
def fake_renderer() -> FakeRenderer:
    return FakeRenderer()


@pytest.fixture
def fake_glyphs() -> FakeGlyphs:
    return FakeGlyphs()


@pytest.fixture
def make_glyphs():
    return FakeGlyphs
