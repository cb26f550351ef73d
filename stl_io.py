"""Binary STL encoding and decoding, plus a plain OBJ text export."""

from __future__ import annotations

import math
import struct
from typing import Dict, List

from mesh_assembly import Mesh
from mesh_primitives import Point3, Triangle

HEADER_SIZE = 80
DEFAULT_HEADER = b"pattern roller"
RECORD = struct.Struct("<12fH")
COUNT = struct.Struct("<I")
MAX_TRIANGLES = 0xFFFFFFFF


def stl_byte_size(triangle_count: int) -> int:
    return HEADER_SIZE + COUNT.size + RECORD.size * triangle_count


def format_byte_size(byte_count: int) -> str:
    magnitude = 0 if byte_count < 1 else int(math.log2(byte_count)) // 10
    if magnitude == 0:
        return f"{byte_count} B"
    unit, base = {1: ("KiB", 2 ** 10), 2: ("MiB", 2 ** 20)}.get(magnitude, ("GiB", 2 ** 30))
    return f"{byte_count / float(base):.2f} {unit}"


def encode_binary_stl(mesh: Mesh, header: bytes = DEFAULT_HEADER) -> bytes:
    count = len(mesh)
    if count > MAX_TRIANGLES:
        raise ValueError("Overflow in STL face counter: resulting model is too big.")
    out = bytearray(header[:HEADER_SIZE].ljust(HEADER_SIZE, b"\0"))
    out += COUNT.pack(count)
    for n, a, b, c in mesh.triangles:
        out += RECORD.pack(
            n[0], n[1], n[2],
            a[0], a[1], a[2],
            b[0], b[1], b[2],
            c[0], c[1], c[2],
            0,
        )
    return bytes(out)


def decode_binary_stl(data: bytes) -> List[Triangle]:
    """Parse binary STL bytes. Coordinates come back at float32 precision."""
    if len(data) < HEADER_SIZE + COUNT.size:
        raise ValueError("Binary STL is shorter than its 84-byte preamble.")
    (count,) = COUNT.unpack_from(data, HEADER_SIZE)
    expected = stl_byte_size(count)
    if len(data) != expected:
        raise ValueError(f"Binary STL size mismatch: header says {count} triangles ({expected} bytes), got {len(data)}.")

    triangles: List[Triangle] = []
    offset = HEADER_SIZE + COUNT.size
    for _ in range(count):
        vals = RECORD.unpack_from(data, offset)
        offset += RECORD.size
        triangles.append(
            Triangle(
                (vals[0], vals[1], vals[2]),
                (vals[3], vals[4], vals[5]),
                (vals[6], vals[7], vals[8]),
                (vals[9], vals[10], vals[11]),
            )
        )
    return triangles


def encode_obj(mesh: Mesh) -> str:
    """OBJ text with shared vertices welded and one group per roller part."""
    index: Dict[Point3, int] = {}
    vertex_lines: List[str] = []
    face_lines: List[str] = []

    def vid(p: Point3) -> int:
        k = index.get(p)
        if k is None:
            k = len(index) + 1
            index[p] = k
            vertex_lines.append(f"v {p[0]:.6f} {p[1]:.6f} {p[2]:.6f}\n")
        return k

    for piece in mesh.pieces:
        face_lines.append(f"g {piece.name}\n")
        for tri in piece.triangles:
            face_lines.append(f"f {vid(tri.a)} {vid(tri.b)} {vid(tri.c)}\n")

    return "# Pattern roller mesh\n" + "".join(vertex_lines) + "".join(face_lines)
