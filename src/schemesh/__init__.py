"""
schemesh: decode Minecraft schematics into voxel grids and greedy meshes.
"""

from .errors import FormatError, GridTooLargeError, SchematicError, UnknownFormatError
from .formats import SchematicLoader, load_bytes, load_file
from .grid import BlockEntity, BlockRef, DecodeStats, Entity, Metadata, SchematicFormat, VoxelGrid
from .meshing import BlockShapeResolver, GreedyMesher, PartialBlockGenerator, Quad

__version__ = "0.1.0"

__all__ = [
    "BlockEntity",
    "BlockRef",
    "BlockShapeResolver",
    "DecodeStats",
    "Entity",
    "FormatError",
    "GreedyMesher",
    "GridTooLargeError",
    "Metadata",
    "PartialBlockGenerator",
    "Quad",
    "SchematicError",
    "SchematicFormat",
    "SchematicLoader",
    "UnknownFormatError",
    "VoxelGrid",
    "load_bytes",
    "load_file",
]
