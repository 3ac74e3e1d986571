"""
Label layout constants.

All distances are millimetres, measured from the top-left corner of the
page with y growing downward. The defaults reproduce a 29.832 x 18.552 mm
JAN label with 0.264 mm modules.
"""

from __future__ import annotations

from pathlib import Path
import json

from pydantic import BaseModel, ConfigDict, Field, model_validator

from eanlabel.symbology import SYMBOL_MODULES


class DigitGroup(BaseModel):
    """A run of human-readable digits drawn from a fixed x position."""

    model_config = ConfigDict(frozen=True, extra="forbid")

    start: int = Field(ge=0, le=13)
    stop: int = Field(ge=0, le=13)
    x: float = Field(ge=0)

    @model_validator(mode="after")
    def _ordered(self) -> DigitGroup:
        if self.start > self.stop:
            raise ValueError(f"Digit group start {self.start} is after stop {self.stop}")
        return self


_EPSILON = 1e-9

DEFAULT_DIGIT_GROUPS = (
    DigitGroup(start=0, stop=1, x=0.052),
    DigitGroup(start=1, stop=7, x=4.082),
    DigitGroup(start=7, stop=13, x=16.34),
)


class LabelLayout(BaseModel):
    """
    Page geometry for one label.

    Instances are immutable and safe to share between threads.

    Example:
        >>> layout = LabelLayout()
        >>> round(layout.bar_field_end, 3)
        27.98
        >>> LabelLayout(bar_width=0.27).bar_width
        0.27
    """

    model_config = ConfigDict(frozen=True, extra="forbid")

    width: float = Field(default=29.832, gt=0)
    height: float = Field(default=18.552, gt=0)

    bar_x: float = Field(default=2.9, ge=0)
    bar_width: float = Field(default=0.264, gt=0)
    bar_y: float = Field(default=0.264, ge=0)
    bar_height: float = Field(default=15.296, gt=0)

    guard_y: float = Field(default=15.56, ge=0)
    guard_height: float = Field(default=2.992, gt=0)

    font_size_pt: float = Field(default=8.75, gt=0)
    font_scale: float = Field(default=0.35, gt=0)
    letter_spacing: float = Field(default=0.15, ge=0)
    baseline_offset: float = Field(default=0.523, ge=0)
    digit_groups: tuple[DigitGroup, ...] = DEFAULT_DIGIT_GROUPS

    @model_validator(mode="after")
    def _bar_field_fits(self) -> LabelLayout:
        if self.bar_field_end > self.width + _EPSILON:
            raise ValueError(
                f"Bar field ends at {self.bar_field_end:.3f} mm, beyond page width {self.width} mm"
            )
        if self.guard_y + self.guard_height > self.height + _EPSILON:
            raise ValueError("Guard bars extend below the page")
        return self

    @property
    def glyph_size(self) -> float:
        """Size passed to the glyph provider, in layout units."""
        return self.font_size_pt * self.font_scale

    @property
    def baseline_y(self) -> float:
        return self.height - self.baseline_offset

    @property
    def bar_field_end(self) -> float:
        """Right edge of the last module."""
        return self.bar_x + SYMBOL_MODULES * self.bar_width


def load_layout(path: Path | None) -> LabelLayout:
    """
    Load a layout, applying overrides from a JSON file.

    Parameters:
        path: JSON object with any subset of LabelLayout fields, or None

    Returns:
        LabelLayout with defaults for every field the file omits

    Raises:
        FileNotFoundError: If the file doesn't exist
        json.JSONDecodeError: If the file is not valid JSON
        pydantic.ValidationError: If a field is unknown or out of range
    """
    if path is None:
        return LabelLayout()
    data = json.loads(Path(path).expanduser().read_text(encoding="utf-8"))
    return LabelLayout.model_validate(data)
