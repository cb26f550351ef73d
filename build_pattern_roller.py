#!/usr/bin/env python3
"""
Build a 3D-printable pattern roller from a raster image.

The image luminance is embossed onto the outer surface of a cylinder:
- one image copy is resampled to the grid step and stacked around / along the roller
- bright pixels stand proud of the base radius by up to the embossment depth
- flat end caps close the body; optional pins or an axle channel are added
- all parts are stitched along shared rings and checked for closure

Exactly one of --diameter / --length is required; the other dimension follows
from the stacked image aspect ratio.

Output:
- binary STL triangle mesh (default <image>.stl)
- OBJ triangle mesh (optional)
- Optional CadQuery export of the smooth roller body if CadQuery is installed.
"""

from __future__ import annotations

import argparse
import sys
from pathlib import Path
from typing import List, Optional, Sequence, Tuple

from height_field import build_height_field
from image_source import LuminanceGrid, load_luminance
from mesh_assembly import Mesh, assemble, bounding_box, signed_volume
from mesh_primitives import MeshPiece, Point3
from roller_channel import ChannelCarver
from roller_errors import InvalidDimension, IOFailure
from roller_geometry import RollerGeometryBuilder
from roller_params import RollerDimensions, RollerParameters, resolve_dimensions
from roller_pins import PinBuilder
from stl_io import MAX_TRIANGLES, encode_binary_stl, encode_obj, format_byte_size, stl_byte_size

try:
    import cadquery as cq  # type: ignore
except Exception:
    cq = None


def expected_triangle_count(
    dims: RollerDimensions,
    pin_points: Optional[int] = None,
    channel_points: Optional[int] = None,
) -> int:
    rows = dims.rows
    total = 2 * rows * (dims.cols - 1)

    inner = pin_points if pin_points is not None else channel_points
    total += 2 * (rows + (inner or 0))

    if pin_points is not None:
        # Two walls plus two tips; tips wrap the channel ring when hollow.
        total += 2 * (2 * pin_points)
        total += 2 * (pin_points + (channel_points or 0))
    if channel_points is not None:
        total += 2 * channel_points
    return total


def build_roller_mesh(grid: LuminanceGrid, params: RollerParameters) -> Tuple[Mesh, dict]:
    dims = resolve_dimensions(params, grid.width, grid.height)
    pins = PinBuilder(params, dims) if params.has_pins else None
    channel = ChannelCarver(params, dims) if params.has_channel else None

    pin_points = pins.count if pins else None
    channel_points = channel.count if channel else None
    expected = expected_triangle_count(dims, pin_points=pin_points, channel_points=channel_points)
    if expected > MAX_TRIANGLES:
        raise InvalidDimension(
            f"Model would need {expected} triangles ({dims.rows}x{dims.cols} grid), more than a binary STL "
            f"can hold ({MAX_TRIANGLES}); use a larger grid step."
        )

    field = build_height_field(grid, params, dims)
    builder = RollerGeometryBuilder(field, dims)
    z_bottom = builder.z_min
    z_top = builder.z_max

    bottom_inner: Optional[List[Point3]] = None
    top_inner: Optional[List[Point3]] = None
    if pins is not None:
        bottom_inner = pins.ring(z_bottom)
        top_inner = pins.ring(z_top)
    elif channel is not None:
        bottom_inner = channel.ring(z_bottom)
        top_inner = channel.ring(z_top)

    pieces: List[MeshPiece] = builder.build(bottom_inner=bottom_inner, top_inner=top_inner)

    hole_bottom = z_bottom
    hole_top = z_top
    if pins is not None:
        hole_bottom = pins.tip_z(z_bottom, top=False)
        hole_top = pins.tip_z(z_top, top=True)
        pieces.append(
            pins.build_pin(z_bottom, top=False, hole_ring=channel.ring(hole_bottom) if channel else None)
        )
        pieces.append(
            pins.build_pin(z_top, top=True, hole_ring=channel.ring(hole_top) if channel else None)
        )
    if channel is not None:
        pieces.append(channel.build_wall(hole_bottom, hole_top))

    mesh = assemble(pieces)

    stats = {
        "dims": dims,
        "field": field,
        "rows": field.rows,
        "cols": field.cols,
        "flat": field.flat,
        "max_radius": builder.max_shell_radius(),
        "pin_points": pin_points,
        "channel_points": channel_points,
        "expected_triangles": expected,
        "triangles": len(mesh),
    }
    return mesh, stats


def export_cadquery_base_roller(path: Path, dims: RollerDimensions, params: RollerParameters) -> bool:
    if cq is None:
        return False

    radius = dims.radius
    length = dims.length
    inner_r = params.channel_diameter * 0.5 if params.channel_diameter else 0.0
    pin_r = params.pin_diameter * 0.5 if params.pin_diameter else None
    pin_l = params.pin_length or 0.0

    # Half cross-section in the XZ plane (local x=radius, local y=z), revolved about z.
    # Shifted by the pin length so the body rests on z=0 like the mesh.
    if pin_r is not None:
        profile = [
            (inner_r, 0.0),
            (pin_r, 0.0),
            (pin_r, pin_l),
            (radius, pin_l),
            (radius, pin_l + length),
            (pin_r, pin_l + length),
            (pin_r, 2.0 * pin_l + length),
            (inner_r, 2.0 * pin_l + length),
        ]
    else:
        profile = [(inner_r, 0.0), (radius, 0.0), (radius, length), (inner_r, length)]

    wp = cq.Workplane("XZ")
    wp = wp.moveTo(profile[0][0], profile[0][1])
    for r, z in profile[1:]:
        wp = wp.lineTo(r, z)
    wp = wp.close()

    solid = wp.revolve(360.0, (0.0, 0.0), (0.0, 1.0))
    path.parent.mkdir(parents=True, exist_ok=True)
    cq.exporters.export(solid, str(path))
    return True


def write_output(path: Path, data: bytes) -> None:
    try:
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_bytes(data)
    except OSError as exc:
        raise IOFailure(f"Failed to open file '{path}' for writing: {exc}") from exc


def main(argv: Optional[Sequence[str]] = None) -> int:
    parser = argparse.ArgumentParser(
        description=(
            "Generate a binary STL of a cylindrical pattern roller with the input image embossed on its surface. "
            "Either length or diameter of the roller should be given; the other follows from the image aspect "
            "ratio and stacking. Roller ends can carry a pair of pins and/or a through channel."
        )
    )
    parser.add_argument("image", type=Path, help="Input image used as the pattern.")
    parser.add_argument("-d", "--diameter", type=float, default=None, help="Roller body diameter in mm (length is derived).")
    parser.add_argument("-l", "--length", type=float, default=None, help="Roller body length in mm (diameter is derived).")
    parser.add_argument(
        "-g",
        "--grid-step",
        type=float,
        default=None,
        help="Distance between surface vertices in mm (image is resampled). Default: one vertex per pixel.",
    )
    parser.add_argument(
        "-e",
        "--embossment-depth",
        type=float,
        default=None,
        help="Maximum relief height in mm (default: 2%% of the diameter).",
    )
    parser.add_argument("--stack-horizontal", "--sh", type=int, default=1, help="Image copies around the roller.")
    parser.add_argument("--stack-vertical", "--sv", type=int, default=1, help="Image copies along the roller.")
    parser.add_argument("-p", "--pixelated", action="store_true", help="Nearest-neighbour resampling instead of bilinear.")
    parser.add_argument("-i", "--inverted", action="store_true", help="Invert image luminance (dark pixels stand proud).")
    parser.add_argument("--pin-diameter", "--pd", type=float, default=None, help="Pin diameter in mm (pins at both ends).")
    parser.add_argument("--pin-length", "--pl", type=float, default=None, help="Pin length in mm (pins at both ends).")
    parser.add_argument("--channel-diameter", "--cd", type=float, default=None, help="Coaxial through-hole diameter in mm.")
    parser.add_argument("-o", "--output", type=Path, default=None, help="Output STL path (default: <image>.stl).")
    parser.add_argument("--output-obj", type=Path, default=None, help="Optional: also write an OBJ mesh.")
    parser.add_argument(
        "--output-base-cadquery",
        type=Path,
        default=None,
        help="Optional: export the smooth roller body using CadQuery revolve (STL/STEP supported by extension).",
    )

    args = parser.parse_args(argv)

    params = RollerParameters(
        diameter=args.diameter,
        length=args.length,
        grid_step=args.grid_step,
        stack_horizontal=args.stack_horizontal,
        stack_vertical=args.stack_vertical,
        pixelated=args.pixelated,
        inverted=args.inverted,
        embossment_depth=args.embossment_depth,
        pin_diameter=args.pin_diameter,
        pin_length=args.pin_length,
        channel_diameter=args.channel_diameter,
    )
    output_stl = args.output if args.output is not None else Path(f"{args.image}.stl")

    grid = load_luminance(args.image)
    mesh, stats = build_roller_mesh(grid, params)
    dims: RollerDimensions = stats["dims"]

    if stats["flat"]:
        print("Warning: image is a solid color; the roller surface will be smooth.", file=sys.stderr)

    data = encode_binary_stl(mesh)
    obj_data = encode_obj(mesh).encode("utf-8") if args.output_obj is not None else None

    write_output(output_stl, data)
    if obj_data is not None:
        try:
            write_output(args.output_obj, obj_data)
        except IOFailure:
            output_stl.unlink()
            raise

    cadquery_exported = False
    if args.output_base_cadquery is not None:
        cadquery_exported = export_cadquery_base_roller(args.output_base_cadquery, dims, params)

    lo, hi = bounding_box(mesh)
    print(
        f"length: {dims.length:.2f} diameter: {dims.diameter:.2f} "
        f"filesize: {format_byte_size(stl_byte_size(len(mesh)))}"
    )
    print(f"Image: {grid.width}x{grid.height} px, stacked {params.stack_horizontal}x{params.stack_vertical}")
    print(f"Height grid: {stats['rows']} around x {stats['cols']} along (step {dims.grid_step:.4f} mm)")
    print(f"Embossment depth: {dims.relief_depth:.4f} mm")
    print(f"Extent: x [{lo[0]:.3f}, {hi[0]:.3f}] y [{lo[1]:.3f}, {hi[1]:.3f}] z [{lo[2]:.3f}, {hi[2]:.3f}]")
    print(f"Volume: {signed_volume(mesh):.2f} mm^3")
    print(f"Mesh triangles: {stats['triangles']}")
    print(f"Wrote STL: {output_stl}")
    if args.output_obj is not None:
        print(f"Wrote OBJ: {args.output_obj}")

    if args.output_base_cadquery is not None:
        if cadquery_exported:
            print(f"Wrote CadQuery base roller: {args.output_base_cadquery}")
        else:
            print("CadQuery not available; skipped --output-base-cadquery export.")

    return 0


def run(argv: Optional[Sequence[str]] = None) -> int:
    try:
        return main(argv)
    except Exception as exc:  # noqa: BLE001
        print(f"Error: {exc}", file=sys.stderr)
        return 1


if __name__ == "__main__":
    raise SystemExit(run())
