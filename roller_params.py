"""Roller configuration and the physical dimensions derived from it."""

from __future__ import annotations

import enum
import math
from dataclasses import dataclass
from typing import Optional

from roller_errors import ConflictingParameters, InvalidDimension, InvalidPinSize

DEFAULT_DEPTH_RATIO = 0.02
MAX_STACK = 1000


def _positive(value: float) -> bool:
    return math.isfinite(value) and value > 0.0


class SamplingMode(enum.Enum):
    NEAREST = "nearest"
    BILINEAR = "bilinear"


@dataclass(frozen=True)
class RollerParameters:
    diameter: Optional[float] = None
    length: Optional[float] = None
    grid_step: Optional[float] = None
    stack_horizontal: int = 1
    stack_vertical: int = 1
    pixelated: bool = False
    inverted: bool = False
    embossment_depth: Optional[float] = None
    pin_diameter: Optional[float] = None
    pin_length: Optional[float] = None
    channel_diameter: Optional[float] = None

    def __post_init__(self) -> None:
        if (self.diameter is None) == (self.length is None):
            raise ConflictingParameters("Exactly one of diameter or length must be given.")
        if self.diameter is not None and not _positive(self.diameter):
            raise InvalidDimension(f"Roller diameter must be a finite value > 0 (got {self.diameter}).")
        if self.length is not None and not _positive(self.length):
            raise InvalidDimension(f"Roller length must be a finite value > 0 (got {self.length}).")
        if self.grid_step is not None and not _positive(self.grid_step):
            raise InvalidDimension(f"Grid step must be a finite value > 0 (got {self.grid_step}).")
        for name in ("stack_horizontal", "stack_vertical"):
            value = getattr(self, name)
            if not 1 <= value <= MAX_STACK:
                raise InvalidDimension(f"{name.replace('_', '-')} must be within [1, {MAX_STACK}] (got {value}).")
        if self.embossment_depth is not None and not (math.isfinite(self.embossment_depth) and self.embossment_depth >= 0.0):
            raise InvalidDimension(f"Embossment depth must be a finite value >= 0 (got {self.embossment_depth}).")
        if self.channel_diameter is not None and not _positive(self.channel_diameter):
            raise InvalidDimension(f"Channel diameter must be a finite value > 0 (got {self.channel_diameter}).")

        if (self.pin_diameter is None) != (self.pin_length is None):
            raise InvalidPinSize("Pins need both a pin diameter and a pin length.")
        if self.pin_diameter is not None and not _positive(self.pin_diameter):
            raise InvalidPinSize(f"Pin diameter must be a finite value > 0 (got {self.pin_diameter}).")
        if self.pin_length is not None and not _positive(self.pin_length):
            raise InvalidPinSize(f"Pin length must be a finite value > 0 (got {self.pin_length}).")

    @property
    def has_pins(self) -> bool:
        return self.pin_diameter is not None

    @property
    def has_channel(self) -> bool:
        return self.channel_diameter is not None

    @property
    def sampling_mode(self) -> SamplingMode:
        return SamplingMode.NEAREST if self.pixelated else SamplingMode.BILINEAR


@dataclass(frozen=True)
class RollerDimensions:
    diameter: float
    length: float
    grid_step: float
    relief_depth: float
    base_rows: int
    base_cols: int
    stack_horizontal: int = 1
    stack_vertical: int = 1

    @property
    def radius(self) -> float:
        return self.diameter * 0.5

    @property
    def circumference(self) -> float:
        return math.pi * self.diameter

    @property
    def rows(self) -> int:
        return self.base_rows * self.stack_horizontal

    @property
    def cols(self) -> int:
        return self.base_cols * self.stack_vertical

    @property
    def core_diameter(self) -> float:
        """Largest diameter a coaxial pin or channel may reach."""
        return self.diameter - 2.0 * self.relief_depth


def resolve_dimensions(params: RollerParameters, image_width: int, image_height: int) -> RollerDimensions:
    """Derive the missing roller dimension and the sample grid from the image size.

    The authoritative dimension (diameter or length) fixes the physical size
    of one source pixel. The other dimension follows from the stacked image
    aspect ratio, and ``grid_step`` rescales the pixel grid to the requested
    sample spacing.
    """
    if image_width < 1 or image_height < 1:
        raise InvalidDimension(f"Image has no pixels ({image_width}x{image_height}).")

    surface_w = image_width * params.stack_horizontal
    surface_h = image_height * params.stack_vertical
    aspect = surface_w / float(surface_h)

    if params.diameter is not None:
        diameter = params.diameter
        pixel_size = math.pi * diameter / surface_w
        length = math.pi * diameter / aspect
    else:
        length = float(params.length)
        pixel_size = length / surface_h
        diameter = length * aspect / math.pi

    if diameter <= 0.0 or length <= 0.0:
        raise InvalidDimension("All roller dimensions should be greater than zero.")

    if params.grid_step is not None:
        grid_step = params.grid_step
        scale = pixel_size / grid_step
        base_rows = int(round(scale * image_width))
        base_cols = int(round(scale * image_height))
    else:
        grid_step = pixel_size
        base_rows = image_width
        base_cols = image_height

    if base_rows < 1 or base_cols < 1:
        raise InvalidDimension(
            f"Grid step {grid_step:.4f} mm is too coarse: image tile would collapse to {base_rows}x{base_cols} samples."
        )

    relief_depth = params.embossment_depth
    if relief_depth is None:
        relief_depth = DEFAULT_DEPTH_RATIO * diameter

    return RollerDimensions(
        diameter=diameter,
        length=length,
        grid_step=grid_step,
        relief_depth=relief_depth,
        base_rows=base_rows,
        base_cols=base_cols,
        stack_horizontal=params.stack_horizontal,
        stack_vertical=params.stack_vertical,
    )
