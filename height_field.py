"""
Height fields sampled from image luminance.

A height field covers the whole roller surface: rows run around the
circumference and columns along the axis. Only one image copy (the base
tile) is stored; stacked copies are served by modulo lookup so the pattern
repeats exactly.

Resampling policy:
- the single source image is resampled to the base tile first
- tiling is applied afterwards, so tile seams fall on exact sample boundaries
- nearest sampling copies the enclosing source pixel
- bilinear sampling wraps around the circumference and clamps along the axis
"""

from __future__ import annotations

import math
from dataclasses import dataclass
from typing import Callable, Dict, List, Tuple

from image_source import LuminanceGrid
from roller_errors import InvalidDimension
from roller_params import RollerDimensions, RollerParameters, SamplingMode

Sampler = Callable[[LuminanceGrid, int, int, int, int], float]


@dataclass(frozen=True)
class HeightField:
    base_rows: int
    base_cols: int
    tile: Tuple[float, ...]
    stack_horizontal: int = 1
    stack_vertical: int = 1
    flat: bool = False

    def __post_init__(self) -> None:
        if self.base_rows < 1 or self.base_cols < 1:
            raise InvalidDimension(f"Height field tile is empty ({self.base_rows}x{self.base_cols}).")
        if self.rows < 2 or self.cols < 2:
            raise InvalidDimension(
                f"Height field needs at least 2x2 samples, got {self.rows}x{self.cols}."
            )
        if len(self.tile) != self.base_rows * self.base_cols:
            raise InvalidDimension("Height field tile size does not match its dimensions.")

    @property
    def rows(self) -> int:
        return self.base_rows * self.stack_horizontal

    @property
    def cols(self) -> int:
        return self.base_cols * self.stack_vertical

    def sample(self, i: int, j: int) -> float:
        return self.tile[(i % self.base_rows) * self.base_cols + (j % self.base_cols)]

    def row(self, i: int) -> List[float]:
        return [self.sample(i, j) for j in range(self.cols)]

    def column(self, j: int) -> List[float]:
        return [self.sample(i, j) for i in range(self.rows)]


def _source_coord(index: int, target: int, source: int) -> float:
    # Pixel-centre alignment: output cell centres map onto source cell centres.
    return (index + 0.5) * source / float(target) - 0.5


def sample_nearest(grid: LuminanceGrid, x: int, y: int, target_w: int, target_h: int) -> float:
    sx = min(grid.width - 1, int(math.floor((x + 0.5) * grid.width / float(target_w))))
    sy = min(grid.height - 1, int(math.floor((y + 0.5) * grid.height / float(target_h))))
    return grid.at(sx, sy)


def sample_bilinear(grid: LuminanceGrid, x: int, y: int, target_w: int, target_h: int) -> float:
    fx = _source_coord(x, target_w, grid.width)
    fy = _source_coord(y, target_h, grid.height)

    x0 = int(math.floor(fx))
    tx = fx - x0
    x1 = (x0 + 1) % grid.width
    x0 %= grid.width

    fy = max(0.0, min(float(grid.height - 1), fy))
    y0 = int(math.floor(fy))
    ty = fy - y0
    y1 = min(grid.height - 1, y0 + 1)

    top = grid.at(x0, y0) * (1.0 - tx) + grid.at(x1, y0) * tx
    bottom = grid.at(x0, y1) * (1.0 - tx) + grid.at(x1, y1) * tx
    return top * (1.0 - ty) + bottom * ty


SAMPLERS: Dict[SamplingMode, Sampler] = {
    SamplingMode.NEAREST: sample_nearest,
    SamplingMode.BILINEAR: sample_bilinear,
}


def resample_grid(grid: LuminanceGrid, target_w: int, target_h: int, mode: SamplingMode) -> LuminanceGrid:
    if target_w < 1 or target_h < 1:
        raise InvalidDimension(f"Cannot resample image to {target_w}x{target_h}.")
    if target_w == grid.width and target_h == grid.height:
        return grid
    sampler = SAMPLERS[mode]
    values = [
        sampler(grid, x, y, target_w, target_h)
        for y in range(target_h)
        for x in range(target_w)
    ]
    return LuminanceGrid(width=target_w, height=target_h, values=tuple(values))


def stretch_levels(values: List[float], inverted: bool) -> Tuple[List[float], bool]:
    """Min-max stretch to [0, 1]. A solid colour collapses to zero relief."""
    lo = min(values)
    hi = max(values)
    if hi - lo <= 1e-12:
        return [0.0] * len(values), True
    scale = 1.0 / (hi - lo)
    if inverted:
        return [(hi - v) * scale for v in values], False
    return [(v - lo) * scale for v in values], False


def build_height_field(
    grid: LuminanceGrid,
    params: RollerParameters,
    dims: RollerDimensions,
) -> HeightField:
    if dims.grid_step <= 0.0:
        raise InvalidDimension(f"Grid step must be > 0 (got {dims.grid_step}).")

    tile_img = resample_grid(grid, dims.base_rows, dims.base_cols, params.sampling_mode)
    levels, flat = stretch_levels(list(tile_img.values), params.inverted)

    # Image x runs around the circumference; image rows run down the axis,
    # so the bottom image row lands on column 0 (z = 0).
    tile: List[float] = []
    for i in range(dims.base_rows):
        for j in range(dims.base_cols):
            y = dims.base_cols - 1 - j
            tile.append(levels[y * dims.base_rows + i])

    return HeightField(
        base_rows=dims.base_rows,
        base_cols=dims.base_cols,
        tile=tuple(tile),
        stack_horizontal=dims.stack_horizontal,
        stack_vertical=dims.stack_vertical,
        flat=flat,
    )
