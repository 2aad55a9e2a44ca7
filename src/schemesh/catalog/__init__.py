"""
Block catalog: legacy numeric IDs to modern block states, and block states
to static shapes.
"""

from .legacy import legacy_block, legacy_data_to_state, legacy_id_to_name
from .shapes import AABB, ALL_FACES, FULL, NONE, Face, Shape, ShapeKind, shape_for

__all__ = [
    "AABB",
    "ALL_FACES",
    "FULL",
    "NONE",
    "Face",
    "Shape",
    "ShapeKind",
    "legacy_block",
    "legacy_data_to_state",
    "legacy_id_to_name",
    "shape_for",
]
