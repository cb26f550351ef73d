"""Wrap a height field around a cylinder and close it with flat end caps."""

from __future__ import annotations

from typing import List, Optional, Sequence

from height_field import HeightField
from mesh_primitives import CircleTable, MeshPiece, Point3, bridge_rings, fan_from_center, stitch_annulus
from roller_errors import InvalidDimension
from roller_params import RollerDimensions


class RollerGeometryBuilder:
    def __init__(self, field: HeightField, dims: RollerDimensions) -> None:
        if field.rows != dims.rows or field.cols != dims.cols:
            raise InvalidDimension(
                f"Height field {field.rows}x{field.cols} does not match roller grid {dims.rows}x{dims.cols}."
            )
        if field.rows < 3:
            raise InvalidDimension(
                f"A closed ring needs at least 3 samples around the circumference (got {field.rows}); "
                "use a smaller grid step."
            )
        self.field = field
        self.dims = dims
        self.table = CircleTable(field.rows)
        last = field.cols - 1
        self.z_values = [dims.length * j / float(last) for j in range(last)] + [dims.length]

    @property
    def z_min(self) -> float:
        return self.z_values[0]

    @property
    def z_max(self) -> float:
        return self.z_values[-1]

    def radius(self, i: int, j: int) -> float:
        return self.dims.radius + self.dims.relief_depth * self.field.sample(i, j)

    def shell_ring(self, j: int) -> List[Point3]:
        z = self.z_values[j]
        return [self.table.point(i, self.radius(i, j), z) for i in range(self.field.rows)]

    def build_shell(self) -> MeshPiece:
        triangles = []
        lower = self.shell_ring(0)
        for j in range(1, self.field.cols):
            upper = self.shell_ring(j)
            triangles.extend(bridge_rings(lower, upper, outward=True))
            lower = upper
        return MeshPiece("shell", tuple(triangles))

    def build_cap(self, top: bool, inner_ring: Optional[Sequence[Point3]] = None) -> MeshPiece:
        j = self.field.cols - 1 if top else 0
        outer = self.shell_ring(j)
        if inner_ring is None:
            center = (0.0, 0.0, self.z_values[j])
            triangles = tuple(fan_from_center(center, outer, up=top))
        else:
            triangles = tuple(stitch_annulus(outer, inner_ring, up=top))
        return MeshPiece("cap_top" if top else "cap_bottom", triangles)

    def build(
        self,
        bottom_inner: Optional[Sequence[Point3]] = None,
        top_inner: Optional[Sequence[Point3]] = None,
    ) -> List[MeshPiece]:
        return [
            self.build_shell(),
            self.build_cap(top=False, inner_ring=bottom_inner),
            self.build_cap(top=True, inner_ring=top_inner),
        ]

    def max_shell_radius(self) -> float:
        return max(self.radius(i, j) for i in range(self.field.rows) for j in range(self.field.cols))
