"""Decode raster images into luminance grids using Pillow."""

from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path
from typing import List, Sequence, Tuple

from PIL import Image, UnidentifiedImageError

from roller_errors import ImageDecodeFailure, IOFailure

WIDE_MODES = ("I", "I;16", "I;16B", "I;16L", "I;16N")


@dataclass(frozen=True)
class LuminanceGrid:
    width: int
    height: int
    values: Tuple[float, ...]

    def __post_init__(self) -> None:
        if len(self.values) != self.width * self.height:
            raise ValueError(
                f"Luminance grid expects {self.width * self.height} values, got {len(self.values)}."
            )

    def at(self, x: int, y: int) -> float:
        return self.values[y * self.width + x]

    @classmethod
    def from_rows(cls, rows: Sequence[Sequence[float]]) -> "LuminanceGrid":
        if not rows or not rows[0]:
            raise ValueError("Luminance grid needs at least one pixel.")
        width = len(rows[0])
        values: List[float] = []
        for row in rows:
            if len(row) != width:
                raise ValueError("Luminance rows must all have the same width.")
            values.extend(float(v) for v in row)
        return cls(width=width, height=len(rows), values=tuple(values))


def luminance_from_image(img: Image.Image) -> LuminanceGrid:
    # 16-bit sources keep their precision; everything else goes through 8-bit L.
    if img.mode in WIDE_MODES:
        gray = img.convert("I")
        full_scale = 65535.0
    else:
        gray = img.convert("L")
        full_scale = 255.0
    width, height = gray.size
    values = tuple(min(1.0, max(0.0, v / full_scale)) for v in gray.getdata())
    return LuminanceGrid(width=width, height=height, values=values)


def load_luminance(path: Path) -> LuminanceGrid:
    try:
        with path.open("rb") as f:
            with Image.open(f) as img:
                img.load()
                return luminance_from_image(img)
    except UnidentifiedImageError as exc:
        raise ImageDecodeFailure(f"Failed to decode image '{path}': {exc}") from exc
    except OSError as exc:
        if isinstance(exc, (FileNotFoundError, PermissionError, IsADirectoryError)):
            raise IOFailure(f"Failed to read file '{path}': {exc}") from exc
        raise ImageDecodeFailure(f"Failed to decode image '{path}': {exc}") from exc
