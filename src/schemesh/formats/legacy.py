"""
MCEdit / Schematica legacy ".schematic" decoder.

Blocks are stored as parallel byte arrays: "Blocks" (low 8 bits of the ID),
"Data" (damage nibble) and optionally "AddBlocks" (packed nibbles providing
ID bits 8-11). Schematica files may also carry a "SchematicaMapping"
compound of name -> numeric ID that overrides the built-in catalog.
"""

import logging
from typing import Dict

import numpy as np
from nbt import nbt

from schemesh.catalog.legacy import legacy_block
from schemesh.formats.base import (
    SchematicDecoder,
    entity_list,
    extras,
    read_block_entities,
    read_entities,
)
from schemesh.formats.container import get_array, get_compound
from schemesh.grid import BlockRef, GridBuilder, Metadata, SchematicFormat, VoxelGrid

logger = logging.getLogger(__name__)

METADATA_KEYS = (
    "Materials",
    "WEOriginX", "WEOriginY", "WEOriginZ",
    "WEOffsetX", "WEOffsetY", "WEOffsetZ",
)  # fmt: skip


def expand_add_blocks(add_blocks: bytes, count: int) -> np.ndarray:
    """
    Expand packed AddBlocks nibbles to one high-ID value per cell.

    Cell i reads byte i // 2; even cells take the low nibble, odd cells the
    high nibble. Cells past the end of the array get 0.
    """
    packed = np.frombuffer(bytes(add_blocks), dtype=np.uint8)
    nibbles = np.zeros(count, dtype=np.int32)
    available = min(count, packed.size * 2)
    if available:
        source = packed[np.arange(available) // 2].astype(np.int32)
        odd = (np.arange(available) & 1).astype(bool)
        nibbles[:available] = np.where(odd, source >> 4, source & 0x0F)
    return nibbles


def _read_mapping(compound) -> Dict[int, BlockRef]:
    """Invert a SchematicaMapping compound to numeric ID -> block."""
    mapping: Dict[int, BlockRef] = {}
    if compound is None:
        return mapping
    for tag in compound.tags:
        if isinstance(tag, (nbt.TAG_Short, nbt.TAG_Int, nbt.TAG_Byte)):
            mapping[int(tag.value)] = BlockRef(tag.name)
    return mapping


class LegacyDecoder(SchematicDecoder):
    """Decoder for pre-1.13 numeric-ID schematics."""

    name = "legacy"

    def matches(self, root: nbt.TAG_Compound) -> bool:
        return "Blocks" in root and "Width" in root

    def decode(self, root: nbt.TAG_Compound) -> VoxelGrid:
        # Dimensions are unsigned 16-bit values stored in signed shorts
        width = self.require_int(root, "Width") & 0xFFFF
        height = self.require_int(root, "Height") & 0xFFFF
        length = self.require_int(root, "Length") & 0xFFFF

        blocks = self.require(get_array(root, "Blocks", types=(nbt.TAG_Byte_Array,)), "Blocks")
        data = get_array(root, "Data", types=(nbt.TAG_Byte_Array,)) or b""
        volume = self.check_volume(width, height, length)

        builder = GridBuilder(width, height, length)

        raw_ids = np.frombuffer(bytes(blocks), dtype=np.uint8)[:volume].astype(np.int32)
        raw_data = np.frombuffer(bytes(data), dtype=np.uint8)[:volume].astype(np.int32)
        if raw_ids.size < volume:
            builder.stats.cells_padded += volume - raw_ids.size
            logger.debug(f"Blocks array short by {volume - raw_ids.size} cells")

        ids = np.zeros(volume, dtype=np.int32)
        ids[: raw_ids.size] = raw_ids
        damage = np.zeros(volume, dtype=np.int32)
        damage[: raw_data.size] = raw_data & 0x0F

        add_blocks = get_array(root, "AddBlocks", types=(nbt.TAG_Byte_Array,))
        if add_blocks is not None:
            ids |= expand_add_blocks(add_blocks, volume) << 8

        mapping = _read_mapping(get_compound(root, "SchematicaMapping"))

        if volume:
            keys, inverse = np.unique(ids * 16 + damage, return_inverse=True)
            lut = np.empty(keys.size, dtype=np.int32)
            for i, key in enumerate(keys.tolist()):
                block_id, damage_value = divmod(key, 16)
                block = mapping.get(block_id) or legacy_block(block_id, damage_value)
                lut[i] = builder.palette_index(block)
            builder.flat[:] = lut[inverse.ravel()]

        metadata = Metadata(extra=extras(root, METADATA_KEYS))

        grid = builder.build(
            block_entities=read_block_entities(entity_list(root, "TileEntities")),
            entities=read_entities(entity_list(root, "Entities")),
            metadata=metadata,
            format=SchematicFormat.LEGACY,
        )
        grid.stats.log_summary(self.name)
        return grid


def decode_legacy(data: bytes) -> VoxelGrid:
    """Decode legacy schematic bytes (gzip or raw)."""
    return LegacyDecoder().decode_bytes(data)
