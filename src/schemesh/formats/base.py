"""
Common decoder interface.

Each decoder inspects an already-parsed NBT root and either returns a
VoxelGrid or raises FormatError to signal "not this format", so the loader
can move on to the next decoder.
"""

import logging
from typing import Any, Dict, List, Optional, Tuple

from nbt import nbt

from schemesh.errors import FormatError, GridTooLargeError
from schemesh.formats.container import (
    get_int,
    get_list,
    get_pos,
    get_str,
    maybe_decompress,
    parse_nbt,
    payload,
)
from schemesh.grid import BlockEntity, Entity, VoxelGrid

logger = logging.getLogger(__name__)


class SchematicDecoder:
    """Base class for the per-format decoders."""

    name = "base"

    def __init__(self, max_volume: Optional[int] = None):
        self.max_volume = max_volume

    def matches(self, root: nbt.TAG_Compound) -> bool:
        """Cheap structural sniff; decode() still validates fully."""
        return True

    def decode(self, root: nbt.TAG_Compound) -> VoxelGrid:
        raise NotImplementedError

    def decode_bytes(self, data: bytes) -> VoxelGrid:
        """Decode raw (optionally gzip-compressed) container bytes."""
        return self.decode(parse_nbt(maybe_decompress(data)))

    def check_volume(self, width: int, height: int, length: int) -> int:
        if width < 0 or height < 0 or length < 0:
            raise FormatError(f"{self.name}: negative dimensions {width}x{height}x{length}")
        volume = width * height * length
        if self.max_volume is not None and volume > self.max_volume:
            raise GridTooLargeError(volume, self.max_volume)
        return volume

    def require_int(self, compound: Any, *keys: str) -> int:
        value = get_int(compound, *keys)
        if value is None:
            raise FormatError(f"{self.name}: missing integer field {keys[0]}")
        return value

    def require(self, tag: Any, what: str):
        if tag is None:
            raise FormatError(f"{self.name}: missing {what}")
        return tag


def read_block_entity(
    tag: Any,
    offset: Tuple[int, int, int] = (0, 0, 0),
) -> Optional[BlockEntity]:
    """
    Build a BlockEntity from a tile entity compound.

    The id comes from "Id" or "id" ("unknown" if neither); the position from
    an int "Pos" array or separate x/y/z ints (missing components read as 0).
    """
    if not isinstance(tag, nbt.TAG_Compound):
        return None

    entity_id = get_str(tag, "Id", "id") or "unknown"
    pos = get_pos(tag, "Pos")
    if pos is not None:
        x, y, z = (int(v) for v in pos)
    else:
        x, y, z = (get_int(tag, axis) or 0 for axis in ("x", "y", "z"))

    data = payload(tag, exclude=("Id", "id", "Pos", "x", "y", "z"))
    return BlockEntity(
        id=entity_id,
        pos=(x + offset[0], y + offset[1], z + offset[2]),
        data=data,
    )


def read_entity(
    tag: Any,
    offset: Tuple[float, float, float] = (0.0, 0.0, 0.0),
) -> Optional[Entity]:
    """Build an Entity; entities without an id or a 3-element Pos are skipped."""
    if not isinstance(tag, nbt.TAG_Compound):
        return None

    entity_id = get_str(tag, "Id", "id")
    pos = get_pos(tag, "Pos")
    if entity_id is None or pos is None:
        return None

    return Entity(
        id=entity_id,
        pos=(pos[0] + offset[0], pos[1] + offset[1], pos[2] + offset[2]),
        data=payload(tag, exclude=("Id", "id", "Pos")),
    )


def read_block_entities(tags: List[Any], offset=(0, 0, 0)) -> List[BlockEntity]:
    entities = (read_block_entity(tag, offset) for tag in tags)
    return [e for e in entities if e is not None]


def read_entities(tags: List[Any], offset=(0.0, 0.0, 0.0)) -> List[Entity]:
    entities = (read_entity(tag, offset) for tag in tags)
    return [e for e in entities if e is not None]


def extras(compound: Any, keys: Tuple[str, ...]) -> Dict[str, Any]:
    """Plain values for whichever of `keys` are present."""
    if not isinstance(compound, nbt.TAG_Compound):
        return {}
    values = payload(compound)
    return {key: values[key] for key in keys if key in values}


def entity_list(compound: Any, *keys: str) -> List[Any]:
    for key in keys:
        tags = get_list(compound, key)
        if tags:
            return tags
    return []
