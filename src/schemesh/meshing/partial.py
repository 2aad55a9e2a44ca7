"""
Quad generation for non-cube voxels (slabs, stairs, fences, ...).

Each box of the voxel's shape is meshed on its own, without merging. A box
face is emitted when it sits inside the voxel, or when it lies on the voxel
boundary and the neighbour on that side does not cover it.
"""

import logging
from typing import List, Optional, Tuple

from schemesh.catalog.shapes import ALL_FACES, Shape
from schemesh.grid import VoxelGrid
from schemesh.meshing.quad import Quad, face_quad
from schemesh.meshing.resolver import BlockShapeResolver

logger = logging.getLogger(__name__)


class PartialBlockGenerator:
    def __init__(self, resolver: Optional[BlockShapeResolver] = None):
        self.resolver = resolver or BlockShapeResolver()

    def neighbor_occludes(self, grid: VoxelGrid, position: Tuple[int, int, int], face) -> bool:
        """True if the voxel beyond `face` of `position` hides that face."""
        dx, dy, dz = face.offset
        x, y, z = position
        neighbor = grid.get(x + dx, y + dy, z + dz)
        if neighbor is None or self.resolver.is_empty(neighbor):
            return False
        return self.resolver.occludes(neighbor, face.opposite)

    def quads_for(
        self,
        position: Tuple[int, int, int],
        shape: Shape,
        grid: VoxelGrid,
        material: Optional[str] = None,
    ) -> List[Quad]:
        """
        Emit the visible box faces of one voxel.

        Args:
            position: Voxel (x, y, z)
            shape: The voxel's shape; FULL is meshed as a unit cube
            grid: Grid used for neighbour occlusion queries
            material: Material for every quad (defaults to the voxel's)

        Returns:
            Quads in box order, then face order
        """
        if shape.is_empty:
            return []
        if material is None:
            block = grid.get(*position)
            if block is None:
                return []
            material = self.resolver.material_of(block)

        epsilon = self.resolver.epsilon
        x, y, z = position
        quads = []
        for aabb in shape.mesh_boxes():
            mins = (x + aabb.min_x, y + aabb.min_y, z + aabb.min_z)
            maxs = (x + aabb.max_x, y + aabb.max_y, z + aabb.max_z)
            for face in ALL_FACES:
                if aabb.reaches(face, epsilon) and self.neighbor_occludes(grid, position, face):
                    continue
                quads.append(face_quad(face, mins, maxs, material))
        return quads
