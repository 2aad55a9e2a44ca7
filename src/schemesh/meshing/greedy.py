"""
Occlusion-aware greedy mesher.

For each of the six face directions, every slice of the grid along that
direction's axis gets a 2D mask holding the material id of each exposed
full-cube face (or -1). Masks are merged into maximal same-material
rectangles scanning row-major, growing width first and then height, and
each rectangle becomes one quad. Non-cube voxels are left to
PartialBlockGenerator.

Grids can be meshed in Y bands to bound peak memory. Bands are meshed
independently but neighbour occlusion always sees the whole grid.
"""

import logging
from collections import Counter
from dataclasses import dataclass, field
from pathlib import Path
from typing import Dict, Iterator, List, Optional, Tuple

import numpy as np
from tqdm import tqdm

from schemesh.catalog.shapes import ALL_FACES, Face
from schemesh.config import load_section
from schemesh.grid import VoxelGrid
from schemesh.meshing.partial import PartialBlockGenerator
from schemesh.meshing.quad import Quad, face_quad
from schemesh.meshing.resolver import BlockShapeResolver

logger = logging.getLogger(__name__)

# Grid axis (0=x, 1=y, 2=z) -> axis of the (y, z, x) index array
NUMPY_AXIS = {0: 2, 1: 0, 2: 1}

Rect = Tuple[int, int, int, int, int]


@dataclass
class MeshStats:
    """Quad counts from the last meshing run."""

    full_quads: int = 0
    partial_quads: int = 0
    per_face: Counter = field(default_factory=Counter)

    @property
    def total(self) -> int:
        return self.full_quads + self.partial_quads

    def record(self, quads: List[Quad], partial: bool = False) -> None:
        if partial:
            self.partial_quads += len(quads)
        else:
            self.full_quads += len(quads)
        self.per_face.update(q.face.name for q in quads)


def merge_mask(mask: np.ndarray) -> List[Rect]:
    """
    Greedily decompose a 2D material mask into rectangles.

    Cells are visited row-major. From each unclaimed cell the rectangle first
    grows along columns while the material matches, then grows along rows
    while the whole row segment matches and is unclaimed.

    Args:
        mask: 2D int array of material ids, -1 for no face

    Returns:
        (row, col, height, width, material) tuples in emission order
    """
    rows, cols = mask.shape
    cells = mask.tolist()
    claimed = (mask < 0).tolist()
    rects = []

    for i in range(rows):
        row = cells[i]
        for j in range(cols):
            if claimed[i][j]:
                continue
            material = row[j]

            width = 1
            while j + width < cols and not claimed[i][j + width] and row[j + width] == material:
                width += 1

            height = 1
            while i + height < rows and all(
                not claimed[i + height][k] and cells[i + height][k] == material
                for k in range(j, j + width)
            ):
                height += 1

            for di in range(height):
                claimed_row = claimed[i + di]
                for k in range(j, j + width):
                    claimed_row[k] = True
            rects.append((i, j, height, width, material))

    return rects


def _shift_from_neighbor(values: np.ndarray, axis: int, sign: int) -> np.ndarray:
    """out[p] = values[p + sign along axis], False where that falls outside."""
    out = np.zeros_like(values)
    src = [slice(None)] * values.ndim
    dst = [slice(None)] * values.ndim
    if sign > 0:
        src[axis], dst[axis] = slice(1, None), slice(None, -1)
    else:
        src[axis], dst[axis] = slice(None, -1), slice(1, None)
    out[tuple(dst)] = values[tuple(src)]
    return out


class GreedyMesher:
    """
    Compiles a VoxelGrid into quads.

    Settings come from the "meshing" section of config.yaml:
    chunk_height, show_progress and epsilon.
    """

    def __init__(
        self,
        resolver: Optional[BlockShapeResolver] = None,
        config_path: Optional[Path] = None,
    ):
        config = load_section("meshing", config_path)
        self.chunk_height = int(config.get("chunk_height") or 0)
        self.show_progress = bool(config.get("show_progress", False))
        self.resolver = resolver or BlockShapeResolver(epsilon=float(config["epsilon"]))
        self.partial = PartialBlockGenerator(self.resolver)
        self.stats = MeshStats()

    def _palette_tables(self, grid: VoxelGrid):
        """Per-palette-entry lookup arrays for full/material/occlusion."""
        resolver = self.resolver
        materials: List[str] = []
        material_ids: Dict[str, int] = {}
        full = np.zeros(len(grid.palette), dtype=bool)
        material = np.full(len(grid.palette), -1, dtype=np.int32)
        occludes = {face: np.zeros(len(grid.palette), dtype=bool) for face in ALL_FACES}

        for i, block in enumerate(grid.palette):
            if resolver.is_empty(block):
                continue
            name = resolver.material_of(block)
            if name not in material_ids:
                material_ids[name] = len(materials)
                materials.append(name)
            material[i] = material_ids[name]
            full[i] = resolver.is_full(block)
            for face in ALL_FACES:
                occludes[face][i] = resolver.occludes(block, face)

        return materials, full, material, occludes

    def _bands(self, grid: VoxelGrid, chunk_height: int) -> List[Tuple[int, int]]:
        if chunk_height <= 0 or chunk_height >= grid.height:
            return [(0, grid.height)]
        return [
            (y, min(y + chunk_height, grid.height))
            for y in range(0, grid.height, chunk_height)
        ]

    def _face_mask(self, grid: VoxelGrid, tables, face: Face, y0: int, y1: int) -> np.ndarray:
        """
        Exposed-face material ids for one direction within a Y band.

        Returns an int array indexed [x, y - y0, z].
        """
        _, full, material, occludes = tables
        lo, hi = max(0, y0 - 1), min(grid.height, y1 + 1)
        block = grid.indices[lo:hi]

        # The neighbour's side touching this voxel is the opposite face
        neighbor_occ = _shift_from_neighbor(
            occludes[face.opposite][block], NUMPY_AXIS[face.axis], face.sign
        )
        visible = full[block] & ~neighbor_occ
        mask = np.where(visible, material[block], -1)[y0 - lo : y1 - lo]
        return mask.transpose(2, 0, 1)

    def _band_full_quads(self, grid: VoxelGrid, tables, y0: int, y1: int) -> List[Quad]:
        materials = tables[0]
        quads = []
        for face in ALL_FACES:
            mask = self._face_mask(grid, tables, face, y0, y1)
            axis = face.axis
            d1, d2 = [a for a in range(3) if a != axis]
            plane_offset = 1 if face.sign > 0 else 0

            for s in range(mask.shape[axis]):
                layer = np.take(mask, s, axis=axis)
                if not (layer >= 0).any():
                    continue
                for i, j, h, w, mat in merge_mask(layer):
                    mins = [0.0, 0.0, 0.0]
                    maxs = [0.0, 0.0, 0.0]
                    mins[axis] = maxs[axis] = s + plane_offset
                    mins[d1], maxs[d1] = i, i + h
                    mins[d2], maxs[d2] = j, j + w
                    mins[1] += y0
                    maxs[1] += y0
                    quads.append(face_quad(face, mins, maxs, materials[mat]))
        return quads

    def _band_partial_quads(self, grid: VoxelGrid, tables, y0: int, y1: int) -> List[Quad]:
        _, full, material, _ = tables
        band = grid.indices[y0:y1]
        partial = (material[band] >= 0) & ~full[band]
        quads = []
        # argwhere walks (y, z, x) in row-major order
        for y, z, x in np.argwhere(partial).tolist():
            block = grid.palette[band[y, z, x]]
            shape = self.resolver.shape_of(block)
            quads.extend(
                self.partial.quads_for(
                    (x, y + y0, z), shape, grid, self.resolver.material_of(block)
                )
            )
        return quads

    def iter_mesh(
        self, grid: VoxelGrid, chunk_height: Optional[int] = None
    ) -> Iterator[List[Quad]]:
        """
        Mesh a grid band by band.

        Args:
            grid: Grid to mesh
            chunk_height: Band size in Y (0 = whole grid); defaults to config

        Yields:
            Quads for each band: greedy full-cube quads, then partial quads
        """
        if chunk_height is None:
            chunk_height = self.chunk_height
        self.stats = MeshStats()
        tables = self._palette_tables(grid)

        bands = self._bands(grid, chunk_height)
        for y0, y1 in tqdm(bands, desc="Meshing", unit="band", disable=not self.show_progress):
            full_quads = self._band_full_quads(grid, tables, y0, y1)
            partial_quads = self._band_partial_quads(grid, tables, y0, y1)
            self.stats.record(full_quads)
            self.stats.record(partial_quads, partial=True)
            logger.debug(
                f"Band y={y0}..{y1}: {len(full_quads)} full, {len(partial_quads)} partial quads"
            )
            yield full_quads + partial_quads

    def mesh(self, grid: VoxelGrid) -> List[Quad]:
        """Greedy quads for full cubes followed by partial-block quads."""
        quads = []
        for band in self.iter_mesh(grid):
            quads.extend(band)
        logger.info(
            f"Meshed {grid.dimensions_str()} grid: {self.stats.total} quads "
            f"({self.stats.full_quads} greedy, {self.stats.partial_quads} partial)"
        )
        return quads

    def mesh_full(self, grid: VoxelGrid) -> List[Quad]:
        """Greedy pass only, over the whole grid in one band."""
        tables = self._palette_tables(grid)
        return self._band_full_quads(grid, tables, 0, grid.height)

    def mesh_partial(self, grid: VoxelGrid) -> List[Quad]:
        """Partial-block pass only, in (y, z, x) voxel order."""
        tables = self._palette_tables(grid)
        return self._band_partial_quads(grid, tables, 0, grid.height)
