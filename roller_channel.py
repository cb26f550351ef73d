"""Coaxial through-hole (axle channel) along the roller."""

from __future__ import annotations

from typing import List

from mesh_primitives import MeshPiece, Point3, bridge_rings, circle_points_for, ring_inradius, ring_points
from roller_errors import ChannelTooLarge, InvalidDimension
from roller_params import RollerDimensions, RollerParameters


class ChannelCarver:
    """Carves the channel without boolean operations.

    The end caps (or hollow pin tips) become annuli around the channel ring,
    and a single inward-facing wall joins the two end rings.
    """

    def __init__(self, params: RollerParameters, dims: RollerDimensions) -> None:
        if params.channel_diameter is None or params.channel_diameter <= 0.0:
            raise InvalidDimension(f"Channel diameter must be > 0 (got {params.channel_diameter}).")
        if params.channel_diameter >= dims.core_diameter:
            raise ChannelTooLarge(
                f"Channel diameter ({params.channel_diameter:g}) is too big (should be < {dims.core_diameter:g})."
            )
        shell_limit = ring_inradius(dims.radius, dims.rows)
        if params.channel_diameter * 0.5 >= shell_limit:
            raise ChannelTooLarge(
                f"Channel diameter ({params.channel_diameter:g}) does not fit inside the {dims.rows}-sided roller end "
                f"(should be < {2.0 * shell_limit:g}); use a smaller grid step or a smaller channel."
            )
        self.diameter = params.channel_diameter
        self.count = circle_points_for(self.diameter, dims.grid_step)

    @property
    def radius(self) -> float:
        return self.diameter * 0.5

    def ring(self, z: float) -> List[Point3]:
        return ring_points(self.count, self.radius, z)

    def build_wall(self, z_bottom: float, z_top: float) -> MeshPiece:
        triangles = bridge_rings(self.ring(z_bottom), self.ring(z_top), outward=False)
        return MeshPiece("channel", tuple(triangles))
