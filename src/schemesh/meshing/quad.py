"""
Quad primitive and the per-direction vertex/UV tables.

Vertices are emitted counter-clockwise when the face is viewed from outside
the voxel. UVs are projected from the vertex positions onto the face plane
in voxel units, so a merged 3x2 rectangle carries UVs spanning 0..3 by 0..2
and a tiled texture repeats once per voxel.
"""

from dataclasses import dataclass
from typing import Dict, Sequence, Tuple

from schemesh.catalog.shapes import Face

Vec3 = Tuple[float, float, float]
Vec2 = Tuple[float, float]

# Corner selectors per face: 0 picks the box minimum, 1 the maximum,
# one (x, y, z) triple per vertex in counter-clockwise order
CORNERS: Dict[Face, Tuple[Tuple[int, int, int], ...]] = {
    Face.DOWN: ((0, 0, 0), (1, 0, 0), (1, 0, 1), (0, 0, 1)),
    Face.UP: ((0, 1, 1), (1, 1, 1), (1, 1, 0), (0, 1, 0)),
    Face.NORTH: ((1, 0, 0), (0, 0, 0), (0, 1, 0), (1, 1, 0)),
    Face.SOUTH: ((0, 0, 1), (1, 0, 1), (1, 1, 1), (0, 1, 1)),
    Face.WEST: ((0, 0, 0), (0, 0, 1), (0, 1, 1), (0, 1, 0)),
    Face.EAST: ((1, 0, 1), (1, 0, 0), (1, 1, 0), (1, 1, 1)),
}

# (u axis, v axis, u mirrored). North and east faces run their U axis
# against the world axis so textures read left-to-right from outside.
UV_AXES: Dict[Face, Tuple[int, int, bool]] = {
    Face.DOWN: (0, 2, False),
    Face.UP: (0, 2, False),
    Face.NORTH: (0, 1, True),
    Face.SOUTH: (0, 1, False),
    Face.WEST: (2, 1, False),
    Face.EAST: (2, 1, True),
}


@dataclass(frozen=True)
class Quad:
    """Four world-space vertices with matching UVs and one material."""

    vertices: Tuple[Vec3, Vec3, Vec3, Vec3]
    uvs: Tuple[Vec2, Vec2, Vec2, Vec2]
    material: str
    face: Face

    def normal(self) -> Vec3:
        return self.face.normal

    def area(self) -> float:
        (ax, ay, az), (bx, by, bz), (cx, cy, cz) = self.vertices[:3]
        edge1 = (bx - ax, by - ay, bz - az)
        edge2 = (cx - bx, cy - by, cz - bz)
        return abs(sum(edge1)) * abs(sum(edge2))


def face_quad(face: Face, mins: Sequence[float], maxs: Sequence[float], material: str) -> Quad:
    """
    Build the quad for one face of an axis-aligned box.

    Args:
        face: Direction the quad faces
        mins: Box minimum corner in world space
        maxs: Box maximum corner in world space
        material: Material identifier

    Returns:
        Quad lying on the box's `face` plane
    """
    bounds = (tuple(float(v) for v in mins), tuple(float(v) for v in maxs))
    vertices = tuple(
        (bounds[cx][0], bounds[cy][1], bounds[cz][2]) for cx, cy, cz in CORNERS[face]
    )

    u_axis, v_axis, mirrored = UV_AXES[face]
    u_min, u_max = bounds[0][u_axis], bounds[1][u_axis]
    v_min = bounds[0][v_axis]
    uvs = tuple(
        ((u_max - p[u_axis]) if mirrored else (p[u_axis] - u_min), p[v_axis] - v_min)
        for p in vertices
    )
    return Quad(vertices=vertices, uvs=uvs, material=material, face=face)
