"""
Mesh generation: greedy quads for full cubes, per-box quads for the rest.
"""

from .greedy import GreedyMesher, MeshStats, merge_mask
from .partial import PartialBlockGenerator
from .quad import Quad, face_quad
from .resolver import BlockShapeResolver

__all__ = [
    "BlockShapeResolver",
    "GreedyMesher",
    "MeshStats",
    "PartialBlockGenerator",
    "Quad",
    "face_quad",
    "merge_mask",
]
