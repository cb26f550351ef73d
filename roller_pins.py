"""Coaxial mounting pins on both roller ends."""

from __future__ import annotations

from typing import List, Optional

from mesh_primitives import (
    MeshPiece,
    Point3,
    bridge_rings,
    circle_points_for,
    fan_from_center,
    ring_inradius,
    ring_points,
    stitch_annulus,
)
from roller_errors import InvalidPinSize
from roller_params import RollerDimensions, RollerParameters


class PinBuilder:
    """Builds one pin per end: a wall plus a tip cap.

    The pin foot ring is handed to the roller end cap as its inner ring, so
    pin and cap share that ring exactly. With a channel the pins are hollow
    and the tip cap becomes an annulus around the channel ring.
    """

    def __init__(self, params: RollerParameters, dims: RollerDimensions) -> None:
        if params.pin_diameter is None or params.pin_length is None:
            raise InvalidPinSize("Pins need both a pin diameter and a pin length.")
        if params.pin_length <= 0.0:
            raise InvalidPinSize(f"Pin length must be > 0 (got {params.pin_length}).")
        if params.pin_diameter >= dims.core_diameter:
            raise InvalidPinSize(
                f"Pin diameter ({params.pin_diameter:g}) is too big (should be < {dims.core_diameter:g})."
            )
        if params.channel_diameter is not None and params.pin_diameter <= params.channel_diameter:
            raise InvalidPinSize(
                f"Pin diameter ({params.pin_diameter:g}) must exceed the channel diameter "
                f"({params.channel_diameter:g}) to leave a pin wall."
            )
        self.diameter = params.pin_diameter
        self.length = params.pin_length
        self.count = circle_points_for(self.diameter, dims.grid_step)

        # The cap annulus needs the pin ring inside the shell end polygon.
        shell_limit = ring_inradius(dims.radius, dims.rows)
        if self.radius >= shell_limit:
            raise InvalidPinSize(
                f"Pin diameter ({self.diameter:g}) does not fit inside the {dims.rows}-sided roller end "
                f"(should be < {2.0 * shell_limit:g}); use a smaller grid step or a smaller pin."
            )
        if params.channel_diameter is not None:
            hole_limit = ring_inradius(self.radius, self.count)
            if params.channel_diameter * 0.5 >= hole_limit:
                raise InvalidPinSize(
                    f"Channel diameter ({params.channel_diameter:g}) does not fit inside the {self.count}-sided pin "
                    f"(should be < {2.0 * hole_limit:g})."
                )

    @property
    def radius(self) -> float:
        return self.diameter * 0.5

    def ring(self, z: float) -> List[Point3]:
        return ring_points(self.count, self.radius, z)

    def build_pin(self, foot_z: float, top: bool, hole_ring: Optional[List[Point3]] = None) -> MeshPiece:
        tip_z = self.tip_z(foot_z, top)
        foot = self.ring(foot_z)
        tip = self.ring(tip_z)
        triangles = []
        if top:
            triangles.extend(bridge_rings(foot, tip, outward=True))
        else:
            triangles.extend(bridge_rings(tip, foot, outward=True))
        if hole_ring is None:
            triangles.extend(fan_from_center((0.0, 0.0, tip_z), tip, up=top))
        else:
            triangles.extend(stitch_annulus(tip, hole_ring, up=top))
        return MeshPiece("pin_top" if top else "pin_bottom", tuple(triangles))

    def tip_z(self, foot_z: float, top: bool) -> float:
        return foot_z + self.length if top else foot_z - self.length
