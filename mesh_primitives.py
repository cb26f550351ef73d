"""
Triangle primitives and ring stitching shared by every roller part.

Parts are generated independently and never welded afterwards, so any two
parts that meet along a ring must produce bit-identical points. All rings
are therefore built through ``CircleTable`` and ``ring_points``: the same
ring size, index, radius and z always give the same coordinates.
"""

from __future__ import annotations

import math
from dataclasses import dataclass
from typing import Iterator, List, NamedTuple, Sequence, Tuple

from roller_errors import InconsistentWinding

Point3 = Tuple[float, float, float]


class Triangle(NamedTuple):
    normal: Point3
    a: Point3
    b: Point3
    c: Point3


@dataclass(frozen=True)
class MeshPiece:
    name: str
    triangles: Tuple[Triangle, ...]

    def __len__(self) -> int:
        return len(self.triangles)


def vsub(a: Point3, b: Point3) -> Point3:
    return (a[0] - b[0], a[1] - b[1], a[2] - b[2])


def vcross(a: Point3, b: Point3) -> Point3:
    return (
        a[1] * b[2] - a[2] * b[1],
        a[2] * b[0] - a[0] * b[2],
        a[0] * b[1] - a[1] * b[0],
    )


def vdot(a: Point3, b: Point3) -> float:
    return a[0] * b[0] + a[1] * b[1] + a[2] * b[2]


def vnorm(a: Point3) -> float:
    return math.sqrt(a[0] * a[0] + a[1] * a[1] + a[2] * a[2])


def vunorm(a: Point3) -> Point3:
    n = vnorm(a)
    if n <= 1e-12:
        return (0.0, 0.0, 1.0)
    return (a[0] / n, a[1] / n, a[2] / n)


def make_triangle(a: Point3, b: Point3, c: Point3) -> Triangle:
    """Right-hand rule: the normal faces the side from which a, b, c run counter-clockwise."""
    return Triangle(vunorm(vcross(vsub(b, a), vsub(c, a))), a, b, c)


def translate_triangle(tri: Triangle, dz: float) -> Triangle:
    a, b, c = tri.a, tri.b, tri.c
    return Triangle(
        tri.normal,
        (a[0], a[1], a[2] + dz),
        (b[0], b[1], b[2] + dz),
        (c[0], c[1], c[2] + dz),
    )


class CircleTable:
    """cos/sin of ``2*pi*k/count`` for one ring size."""

    def __init__(self, count: int) -> None:
        if count < 3:
            raise ValueError(f"A closed ring needs at least 3 points (got {count}).")
        self.count = count
        step = 2.0 * math.pi / count
        self.cos_sin = [(math.cos(k * step), math.sin(k * step)) for k in range(count)]

    def point(self, k: int, radius: float, z: float) -> Point3:
        cos_t, sin_t = self.cos_sin[k % self.count]
        return (radius * cos_t, radius * sin_t, z)


def ring_points(count: int, radius: float, z: float) -> List[Point3]:
    table = CircleTable(count)
    return [table.point(k, radius, z) for k in range(count)]


def circle_points_for(diameter: float, grid_step: float, minimum: int = 12) -> int:
    return max(minimum, int(round(math.pi * diameter / grid_step)))


def ring_inradius(radius: float, count: int) -> float:
    """Distance from the axis to the nearest edge of a regular ring polygon."""
    return radius * math.cos(math.pi / count)


def bridge_rings(lower: Sequence[Point3], upper: Sequence[Point3], outward: bool = True) -> Iterator[Triangle]:
    """Stitch two equal-size rings stacked along z into a band of quads.

    With ``outward`` the normals face away from the axis, otherwise toward it.
    Each quad is split along the lower[k] -> upper[k+1] diagonal.
    """
    if len(lower) != len(upper):
        raise ValueError("Cannot bridge rings with different point counts.")
    n = len(lower)
    for k in range(n):
        kn = (k + 1) % n
        a0 = lower[k]
        a1 = lower[kn]
        b0 = upper[k]
        b1 = upper[kn]
        if outward:
            yield make_triangle(a0, a1, b1)
            yield make_triangle(a0, b1, b0)
        else:
            yield make_triangle(a0, b1, a1)
            yield make_triangle(a0, b0, b1)


def fan_from_center(center: Point3, ring: Sequence[Point3], up: bool) -> Iterator[Triangle]:
    n = len(ring)
    for k in range(n):
        kn = (k + 1) % n
        if up:
            yield make_triangle(center, ring[k], ring[kn])
        else:
            yield make_triangle(center, ring[kn], ring[k])


def stitch_annulus(outer: Sequence[Point3], inner: Sequence[Point3], up: bool) -> Iterator[Triangle]:
    """Fill the flat band between two coplanar rings of any sizes.

    Both rings start at angle 0 and run counter-clockwise with uniform
    angular spacing. The walk always advances the ring whose next point has
    the smaller angle; angles are compared as exact fractions ``k/n`` so the
    result is independent of floating rounding. Emits ``len(outer) +
    len(inner)`` triangles.

    The inner ring must lie strictly inside the outer polygon; a triangle
    facing the wrong way raises ``InconsistentWinding``.
    """
    n = len(outer)
    m = len(inner)
    a = 0
    b = 0
    while a < n or b < m:
        if b == m or (a < n and (a + 1) * m <= (b + 1) * n):
            o0 = outer[a]
            o1 = outer[(a + 1) % n]
            i0 = inner[b % m]
            if up:
                tri = make_triangle(o0, o1, i0)
            else:
                tri = make_triangle(o1, o0, i0)
            a += 1
        else:
            i0 = inner[b]
            i1 = inner[(b + 1) % m]
            o0 = outer[a % n]
            if up:
                tri = make_triangle(i1, i0, o0)
            else:
                tri = make_triangle(i0, i1, o0)
            b += 1
        if (tri.normal[2] > 0.0) != up:
            raise InconsistentWinding(
                "Annulus folds over: the inner ring crosses the outer ring polygon "
                "(use a smaller grid step or a smaller inner diameter)."
            )
        yield tri
