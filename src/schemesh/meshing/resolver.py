"""
Block shape resolver used by the meshers.

Wraps the static shape table with per-BlockRef memoisation and answers the
questions the meshers ask: is the block empty, is it a full cube, does it
hide a neighbour's face, and which material does it render with.
"""

import logging
from typing import Dict, Tuple

from schemesh.catalog.shapes import DEFAULT_EPSILON, NONE, Face, Shape, shape_for
from schemesh.grid import BlockRef

logger = logging.getLogger(__name__)


class BlockShapeResolver:
    """
    Memoised (name, state) -> Shape lookup.

    Unknown names resolve to a full cube. Any object exposing shape_of,
    occludes, is_full, is_empty and material_of can stand in for this class
    (for example one backed by a block model database).
    """

    def __init__(self, epsilon: float = DEFAULT_EPSILON, strip_namespace: bool = True):
        self.epsilon = epsilon
        self.strip_namespace = strip_namespace
        self._shapes: Dict[BlockRef, Shape] = {}
        self._occlusion: Dict[Tuple[BlockRef, Face], bool] = {}

    def shape_of(self, block: BlockRef) -> Shape:
        shape = self._shapes.get(block)
        if shape is None:
            shape = NONE if block.is_air else shape_for(block.name, block.properties)
            self._shapes[block] = shape
        return shape

    def occludes(self, block: BlockRef, face: Face) -> bool:
        """Whether `block` fully covers its own `face` side."""
        key = (block, face)
        result = self._occlusion.get(key)
        if result is None:
            result = self.shape_of(block).occludes(face, self.epsilon)
            self._occlusion[key] = result
        return result

    def is_full(self, block: BlockRef) -> bool:
        return self.shape_of(block).is_full

    def is_empty(self, block: BlockRef) -> bool:
        return block.is_air

    def material_of(self, block: BlockRef) -> str:
        """Material identifier: the block name, state ignored."""
        return block.display_name if self.strip_namespace else block.name

    def cache_size(self) -> int:
        return len(self._shapes)
