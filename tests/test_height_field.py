from __future__ import annotations

import pytest

from height_field import HeightField, build_height_field, resample_grid, stretch_levels
from image_source import LuminanceGrid
from roller_errors import InvalidDimension
from roller_params import RollerDimensions, RollerParameters, SamplingMode, resolve_dimensions


def test_nearest_copies_enclosing_pixel():
    grid = LuminanceGrid.from_rows([[0.0, 1.0]])
    out = resample_grid(grid, 4, 1, SamplingMode.NEAREST)
    assert list(out.values) == [0.0, 0.0, 1.0, 1.0]


def test_bilinear_wraps_around_circumference():
    grid = LuminanceGrid.from_rows([[0.0, 1.0]])
    out = resample_grid(grid, 4, 1, SamplingMode.BILINEAR)
    assert list(out.values) == pytest.approx([0.25, 0.25, 0.75, 0.75])


def test_bilinear_clamps_along_axis():
    grid = LuminanceGrid.from_rows([[0.0], [1.0]])
    out = resample_grid(grid, 1, 4, SamplingMode.BILINEAR)
    assert list(out.values) == pytest.approx([0.0, 0.25, 0.75, 1.0])


def test_same_size_resample_is_identity():
    grid = LuminanceGrid.from_rows([[0.1, 0.7], [0.3, 0.9]])
    for mode in SamplingMode:
        assert resample_grid(grid, 2, 2, mode) is grid


def test_stretch_levels():
    levels, flat = stretch_levels([0.2, 0.4, 0.6], inverted=False)
    assert levels == pytest.approx([0.0, 0.5, 1.0])
    assert not flat
    inverted, _ = stretch_levels([0.2, 0.4, 0.6], inverted=True)
    assert inverted == pytest.approx([1.0, 0.5, 0.0])


def test_solid_colour_has_no_relief():
    levels, flat = stretch_levels([0.5] * 4, inverted=False)
    assert flat
    assert levels == [0.0] * 4


def test_bottom_image_row_lands_at_column_zero():
    grid = LuminanceGrid.from_rows([[0.0, 0.0, 0.0], [1.0, 1.0, 1.0]])
    params = RollerParameters(diameter=10.0)
    field = build_height_field(grid, params, resolve_dimensions(params, grid.width, grid.height))
    assert (field.rows, field.cols) == (3, 2)
    assert field.column(0) == [1.0, 1.0, 1.0]
    assert field.column(1) == [0.0, 0.0, 0.0]


def test_image_x_runs_around_circumference():
    grid = LuminanceGrid.from_rows([[0.0, 0.5, 1.0], [0.0, 0.5, 1.0]])
    params = RollerParameters(diameter=10.0)
    field = build_height_field(grid, params, resolve_dimensions(params, grid.width, grid.height))
    assert field.row(0) == [0.0, 0.0]
    assert field.row(1) == [0.5, 0.5]
    assert field.row(2) == [1.0, 1.0]


def test_horizontal_stacking_repeats_exactly(gradient_grid):
    params = RollerParameters(diameter=10.0, grid_step=0.7, stack_horizontal=6)
    dims = resolve_dimensions(params, gradient_grid.width, gradient_grid.height)
    field = build_height_field(gradient_grid, params, dims)
    assert field.rows == 6 * dims.base_rows
    for i in range(dims.base_rows):
        for k in range(6):
            assert field.row(i + dims.base_rows * k) == field.row(i)


def test_vertical_stacking_repeats_exactly(gradient_grid):
    params = RollerParameters(length=20.0, stack_vertical=3)
    dims = resolve_dimensions(params, gradient_grid.width, gradient_grid.height)
    field = build_height_field(gradient_grid, params, dims)
    assert field.cols == 12
    for j in range(4):
        assert field.column(j) == field.column(j + 4) == field.column(j + 8)


@pytest.mark.parametrize("pixelated", [True, False])
def test_tiles_are_resampled_before_stacking(pixelated):
    grid = LuminanceGrid.from_rows([[0.0, 1.0], [0.0, 1.0]])
    params = RollerParameters(diameter=10.0, stack_horizontal=2, pixelated=pixelated)
    dims = RollerDimensions(
        diameter=10.0,
        length=10.0,
        grid_step=1.0,
        relief_depth=0.2,
        base_rows=5,
        base_cols=3,
        stack_horizontal=2,
    )
    field = build_height_field(grid, params, dims)

    single = resample_grid(grid, 5, 3, params.sampling_mode)
    lo, hi = min(single.values), max(single.values)
    expected_first_row = [(single.at(0, 3 - 1 - j) - lo) / (hi - lo) for j in range(3)]

    assert field.rows == 10
    assert field.row(0) == pytest.approx(expected_first_row)
    # Every tile starts on an exact sample boundary.
    for i in range(5):
        assert field.row(i) == field.row(i + 5)


def test_degenerate_field_rejected():
    with pytest.raises(InvalidDimension):
        HeightField(base_rows=1, base_cols=2, tile=(0.0, 0.0))
    with pytest.raises(InvalidDimension):
        HeightField(base_rows=3, base_cols=1, tile=(0.0, 0.0, 0.0))
    with pytest.raises(InvalidDimension):
        HeightField(base_rows=2, base_cols=2, tile=(0.0,))


def test_stacking_lifts_single_pixel_axis():
    field = HeightField(base_rows=3, base_cols=1, tile=(0.0, 0.5, 1.0), stack_vertical=2)
    assert field.cols == 2
    assert field.row(2) == [1.0, 1.0]


def test_non_positive_grid_step_rejected(gradient_grid):
    dims = RollerDimensions(diameter=10.0, length=10.0, grid_step=0.0, relief_depth=0.2, base_rows=4, base_cols=4)
    with pytest.raises(InvalidDimension):
        build_height_field(gradient_grid, RollerParameters(diameter=10.0), dims)
