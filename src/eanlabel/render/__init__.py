"""
Label page rendering: layout constants and drawing collaborators.

Basic usage:
    >>> from eanlabel.render import LabelLayout, ReportLabRenderer, MatplotlibGlyphProvider
    >>>
    >>> layout = LabelLayout()
    >>> glyphs = MatplotlibGlyphProvider.load()
    >>> page = ReportLabRenderer().new_page(layout.width, layout.height)
"""

from .layout import DigitGroup, LabelLayout, load_layout
from .backends import (
    BLACK,
    WHITE,
    GlyphPath,
    GlyphProvider,
    MatplotlibGlyphProvider,
    Page,
    PageRenderer,
    PathSegment,
    ReportLabRenderer,
)

__all__ = [
    # Layout
    "DigitGroup",
    "LabelLayout",
    "load_layout",
    # Collaborators
    "BLACK",
    "WHITE",
    "GlyphPath",
    "GlyphProvider",
    "MatplotlibGlyphProvider",
    "Page",
    "PageRenderer",
    "PathSegment",
    "ReportLabRenderer",
]
