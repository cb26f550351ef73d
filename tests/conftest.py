from __future__ import annotations

from pathlib import Path
from typing import Callable, List

import pytest
from PIL import Image

from height_field import HeightField
from image_source import LuminanceGrid
from roller_params import RollerDimensions


def gradient_rows(width: int, height: int) -> List[List[float]]:
    return [[(x + y) / float(width + height - 2) for x in range(width)] for y in range(height)]


@pytest.fixture
def gradient_grid() -> LuminanceGrid:
    return LuminanceGrid.from_rows(gradient_rows(4, 4))


@pytest.fixture
def flat_grid() -> LuminanceGrid:
    return LuminanceGrid.from_rows([[0.5, 0.5], [0.5, 0.5]])


@pytest.fixture
def write_png(tmp_path: Path) -> Callable[..., Path]:
    def _write(name: str = "pattern.png", width: int = 4, height: int = 4) -> Path:
        img = Image.new("L", (width, height))
        img.putdata([int(round(255 * v)) for row in gradient_rows(width, height) for v in row])
        path = tmp_path / name
        img.save(path)
        return path

    return _write


def make_field(rows: int, cols: int, value: float = 0.0, **kwargs) -> HeightField:
    return HeightField(base_rows=rows, base_cols=cols, tile=tuple([value] * (rows * cols)), **kwargs)


def make_dims(rows: int, cols: int, diameter: float = 10.0, length: float = 10.0, depth: float = 0.5) -> RollerDimensions:
    return RollerDimensions(
        diameter=diameter,
        length=length,
        grid_step=1.0,
        relief_depth=depth,
        base_rows=rows,
        base_cols=cols,
    )
