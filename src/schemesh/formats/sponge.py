"""
Sponge schematic (.schem) decoder, versions 2 and 3.

Version 2 keeps "Palette" and "BlockData" at the root; version 3 nests
"Palette", "Data" and "BlockEntities" inside a "Blocks" compound. Some
writers wrap the whole v3 tree in an outer "Schematic" compound.

Cells are varint-encoded palette indices in (y, z, x) order.
"""

import logging
from typing import List, Optional, Tuple

import numpy as np
from nbt import nbt

from schemesh.errors import FormatError
from schemesh.formats.base import (
    SchematicDecoder,
    entity_list,
    read_block_entities,
    read_entities,
)
from schemesh.formats.container import (
    get_array,
    get_compound,
    get_int,
    get_list,
    get_str,
    payload,
    to_python,
)
from schemesh.grid import BlockRef, DecodeStats, GridBuilder, Metadata, SchematicFormat, VoxelGrid

logger = logging.getLogger(__name__)

# A varint whose shift reaches this many bits does not fit in 32 bits
VARINT_SHIFT_LIMIT = 32


def read_varint(data: bytes, offset: int) -> Tuple[Optional[int], int, bool]:
    """
    Read one unsigned LEB128 varint.

    Args:
        data: Encoded byte stream
        offset: Position of the first byte

    Returns:
        (value, next_offset, overflowed). value is None when the stream ended
        mid-value or the value exceeds 32 bits (overflowed is True then).
    """
    result = 0
    shift = 0
    while True:
        if offset >= len(data):
            return None, offset, False
        byte = data[offset]
        offset += 1
        result |= (byte & 0x7F) << shift
        if not byte & 0x80:
            return result, offset, False
        shift += 7
        if shift >= VARINT_SHIFT_LIMIT:
            return None, offset, True


def decode_varints(data: bytes, count: int, stats: Optional[DecodeStats] = None) -> np.ndarray:
    """
    Decode exactly `count` varints, degrading bad cells to -1.

    A malformed (over-long) varint costs only its own cell. Once the stream
    runs out, every remaining cell is padded.
    """
    stats = stats if stats is not None else DecodeStats()
    data = bytes(data)
    raw = np.frombuffer(data, dtype=np.uint8)

    # Fast path: every value fits in a single byte
    if raw.size >= count and not (raw[:count] & 0x80).any():
        return raw[:count].astype(np.int64)

    values = np.full(count, -1, dtype=np.int64)
    offset = 0
    for i in range(count):
        if offset >= len(data):
            stats.cells_padded += count - i
            logger.debug(f"Block data exhausted after {i} of {count} cells")
            break
        value, offset, overflowed = read_varint(data, offset)
        if value is None:
            if overflowed:
                stats.bad_varints += 1
            else:
                stats.cells_padded += 1
            continue
        values[i] = value
    return values


def _parse_palette(palette: nbt.TAG_Compound) -> List[BlockRef]:
    """
    Invert a Sponge palette (state string -> id) into an id-indexed list.

    Ids beyond the palette size are ignored; gaps read as air.
    """
    size = len(palette.tags)
    entries = [BlockRef.air()] * size
    for tag in palette.tags:
        if not isinstance(tag, (nbt.TAG_Int, nbt.TAG_Short, nbt.TAG_Byte)):
            continue
        idx = int(tag.value)
        if 0 <= idx < size:
            entries[idx] = BlockRef.parse(tag.name)
    return entries


def _read_metadata(root: nbt.TAG_Compound) -> Metadata:
    metadata = Metadata()
    compound = get_compound(root, "Metadata")
    if compound is not None:
        metadata.name = get_str(compound, "Name", "name")
        metadata.author = get_str(compound, "Author", "author")
        metadata.date = get_int(compound, "Date", "date")
        metadata.required_mods = [
            tag.value
            for tag in get_list(compound, "RequiredMods")
            if isinstance(tag, nbt.TAG_String)
        ]
        metadata.extra.update(
            payload(
                compound,
                exclude=("Name", "name", "Author", "author", "Date", "date", "RequiredMods"),
            )
        )

    for key in ("Offset", "DataVersion"):
        if key in root:
            metadata.extra[key] = to_python(root[key])
    return metadata


class SpongeDecoder(SchematicDecoder):
    """
    Decoder for Sponge v2/v3 schematics.

    With wrapped=True the tree must sit under a root "Schematic" compound;
    otherwise the root itself must carry "Version".
    """

    def __init__(self, max_volume: Optional[int] = None, wrapped: bool = False):
        super().__init__(max_volume)
        self.wrapped = wrapped
        self.name = "sponge_v3_wrapped" if wrapped else "sponge"

    def matches(self, root: nbt.TAG_Compound) -> bool:
        if self.wrapped:
            return get_compound(root, "Schematic") is not None
        return "Version" in root and "Regions" not in root

    def _schematic_root(self, root: nbt.TAG_Compound) -> nbt.TAG_Compound:
        inner = get_compound(root, "Schematic")
        if self.wrapped:
            return self.require(inner, "Schematic compound")
        if get_int(root, "Version") is None:
            raise FormatError(f"{self.name}: missing integer field Version")
        return inner if inner is not None and get_int(inner, "Version") is not None else root

    def decode(self, root: nbt.TAG_Compound) -> VoxelGrid:
        schem = self._schematic_root(root)
        version = self.require_int(schem, "Version")

        width = (get_int(schem, "Width") or 0) & 0xFFFF
        height = (get_int(schem, "Height") or 0) & 0xFFFF
        length = (get_int(schem, "Length") or 0) & 0xFFFF
        volume = self.check_volume(width, height, length)

        blocks = get_compound(schem, "Blocks") if version >= 3 else None
        if blocks is not None:
            palette_tag = get_compound(blocks, "Palette")
            data = get_array(blocks, "Data", types=(nbt.TAG_Byte_Array,))
            entity_tags = entity_list(blocks, "BlockEntities")
        else:
            palette_tag = get_compound(schem, "Palette")
            data = get_array(schem, "BlockData", types=(nbt.TAG_Byte_Array,))
            entity_tags = entity_list(schem, "BlockEntities", "TileEntities")

        builder = GridBuilder(width, height, length)
        palette = _parse_palette(palette_tag) if palette_tag is not None else []

        if volume:
            values = decode_varints(data if data is not None else b"", volume, builder.stats)
            lut = np.array([builder.palette_index(block) for block in palette] + [0], dtype=np.int32)
            bad = values >= len(palette)
            builder.stats.bad_palette_indices += int(bad.sum())
            # Degraded cells (-1) and unknown palette ids both land on air
            values = np.where((values < 0) | bad, len(palette), values)
            builder.flat[:] = lut[values]

        grid = builder.build(
            block_entities=read_block_entities(entity_tags),
            entities=read_entities(entity_list(schem, "Entities")),
            metadata=_read_metadata(schem),
            format=SchematicFormat.SPONGE_V3 if version >= 3 else SchematicFormat.SPONGE_V2,
        )
        grid.stats.log_summary(self.name)
        return grid


def decode_sponge(data: bytes) -> VoxelGrid:
    """Decode Sponge schematic bytes, accepting the wrapped v3 layout too."""
    try:
        return SpongeDecoder(wrapped=True).decode_bytes(data)
    except FormatError:
        return SpongeDecoder().decode_bytes(data)
