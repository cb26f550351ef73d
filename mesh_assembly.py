"""Union generated roller parts into one closed, consistently wound mesh."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Dict, Iterator, List, Sequence, Tuple

from mesh_primitives import MeshPiece, Point3, Triangle, translate_triangle, vcross, vdot
from roller_errors import InconsistentWinding, NonManifoldMesh

Edge = Tuple[Point3, Point3]


@dataclass(frozen=True)
class Mesh:
    pieces: Tuple[MeshPiece, ...]

    def __len__(self) -> int:
        return sum(len(p) for p in self.pieces)

    @property
    def triangles(self) -> Iterator[Triangle]:
        for piece in self.pieces:
            yield from piece.triangles

    def piece(self, name: str) -> MeshPiece:
        for p in self.pieces:
            if p.name == name:
                return p
        raise KeyError(name)


def _fmt(p: Point3) -> str:
    return f"({p[0]:.4f}, {p[1]:.4f}, {p[2]:.4f})"


def check_closed_manifold(triangles: Sequence[Triangle]) -> None:
    """Raise unless every edge is used by exactly two triangles in opposite directions."""
    uses: Dict[Edge, List[Edge]] = {}
    for tri in triangles:
        for p, q in ((tri.a, tri.b), (tri.b, tri.c), (tri.c, tri.a)):
            if p == q:
                raise NonManifoldMesh(f"Degenerate triangle with repeated vertex {_fmt(p)}.")
            key = (p, q) if p < q else (q, p)
            uses.setdefault(key, []).append((p, q))

    for key, directed in uses.items():
        if len(directed) != 2:
            raise NonManifoldMesh(
                f"Edge {_fmt(key[0])}-{_fmt(key[1])} is shared by {len(directed)} triangles (expected 2)."
            )
        if directed[0] == directed[1]:
            raise InconsistentWinding(
                f"Triangles sharing edge {_fmt(key[0])}-{_fmt(key[1])} run it in the same direction."
            )


def assemble(pieces: Sequence[MeshPiece], rest_on_zero: bool = True) -> Mesh:
    """Concatenate parts in generation order and validate closure.

    With ``rest_on_zero`` the whole mesh is shifted along z so its lowest
    point sits on the build plate. Every vertex gets the same shift, so
    coincident points stay coincident.
    """
    ordered = tuple(p for p in pieces if len(p) > 0)
    if not ordered:
        raise NonManifoldMesh("Nothing to assemble: no triangles were generated.")

    if rest_on_zero:
        min_z = min(min(t.a[2], t.b[2], t.c[2]) for p in ordered for t in p.triangles)
        if min_z != 0.0:
            ordered = tuple(
                MeshPiece(p.name, tuple(translate_triangle(t, -min_z) for t in p.triangles)) for p in ordered
            )

    mesh = Mesh(ordered)
    check_closed_manifold(list(mesh.triangles))
    return mesh


def signed_volume(mesh: Mesh) -> float:
    total = 0.0
    for tri in mesh.triangles:
        total += vdot(tri.a, vcross(tri.b, tri.c))
    return total / 6.0


def bounding_box(mesh: Mesh) -> Tuple[Point3, Point3]:
    xs: List[float] = []
    ys: List[float] = []
    zs: List[float] = []
    for tri in mesh.triangles:
        for p in (tri.a, tri.b, tri.c):
            xs.append(p[0])
            ys.append(p[1])
            zs.append(p[2])
    return (min(xs), min(ys), min(zs)), (max(xs), max(ys), max(zs))
