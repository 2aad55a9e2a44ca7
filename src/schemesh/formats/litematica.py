"""
Litematica (.litematic) decoder.

A litematic holds one or more named regions, each with its own palette and
a bit-packed long array of palette indices in (y, z, x) order. Region sizes
may be negative on any axis, in which case the region extends from
position + size + 1 up to position.

All regions are merged into a single grid. When a region reaches below the
origin on some axis, the whole schematic is shifted so the grid starts at 0.
Regions are applied in file order, so a later region overwrites an earlier
one where they overlap.
"""

import logging
from dataclasses import dataclass
from typing import List, Tuple

import numpy as np
from nbt import nbt

from schemesh.errors import FormatError
from schemesh.formats.base import (
    SchematicDecoder,
    entity_list,
    extras,
    read_block_entities,
    read_entities,
)
from schemesh.formats.container import (
    get_array,
    get_compound,
    get_int,
    get_list,
    get_str,
    get_xyz,
    to_python,
)
from schemesh.grid import BlockRef, GridBuilder, Metadata, SchematicFormat, VoxelGrid

logger = logging.getLogger(__name__)

METADATA_KEYS = ("Description", "TimeModified", "RegionCount", "TotalBlocks", "TotalVolume")


def bits_per_entry(palette_size: int) -> int:
    """Bits needed per packed index: max(1, ceil(log2(palette_size)))."""
    return max(1, (palette_size - 1).bit_length())


def unpack_indices(words: List[int], bits: int, count: int) -> Tuple[np.ndarray, np.ndarray]:
    """
    Unpack `count` bits-wide values from a little-endian bit stream of longs.

    Entry i starts at bit i * bits; an entry may straddle two adjacent words,
    taking its low bits from the first and its high bits from the second.

    Args:
        words: Signed 64-bit values as stored in the long array
        bits: Width of each entry (1-32)
        count: Number of entries to read

    Returns:
        (values, present). present is False for entries whose first word is
        missing from the array; a missing second word reads as zero.
    """
    packed = np.array(words, dtype=np.int64).view(np.uint64)
    padded = np.concatenate([packed, np.zeros(2, dtype=np.uint64)])

    offsets = np.arange(count, dtype=np.uint64) * np.uint64(bits)
    word_index = (offsets >> np.uint64(6)).astype(np.int64)
    bit_index = offsets & np.uint64(63)
    present = word_index < packed.size
    word_index = np.minimum(word_index, packed.size)

    low = padded[word_index] >> bit_index
    high_shift = (np.uint64(64) - bit_index) & np.uint64(63)
    high = padded[word_index + 1] << high_shift
    high = np.where(bit_index == 0, np.uint64(0), high)

    mask = np.uint64((1 << bits) - 1)
    values = ((low | high) & mask).astype(np.int64)
    return values, present


@dataclass
class Region:
    """One named Litematica region with its normalised bounds."""

    name: str
    tag: nbt.TAG_Compound
    position: Tuple[int, int, int]
    size: Tuple[int, int, int]

    @property
    def extent(self) -> Tuple[int, int, int]:
        return tuple(abs(s) for s in self.size)

    @property
    def min_corner(self) -> Tuple[int, int, int]:
        """Lowest corner; negative-size axes extend backwards from position."""
        return tuple(p + s + 1 if s < 0 else p for p, s in zip(self.position, self.size))

    @property
    def volume(self) -> int:
        x, y, z = self.extent
        return x * y * z


def _read_palette(region: nbt.TAG_Compound) -> List[BlockRef]:
    palette = []
    for entry in get_list(region, "BlockStatePalette"):
        name = get_str(entry, "Name") or "minecraft:air"
        props = get_compound(entry, "Properties")
        state = {}
        if props is not None:
            state = {tag.name: str(tag.value) for tag in props.tags}
        palette.append(BlockRef.of(name, state))
    return palette


class LitematicaDecoder(SchematicDecoder):
    """Decoder for multi-region Litematica schematics."""

    name = "litematica"

    def matches(self, root: nbt.TAG_Compound) -> bool:
        return get_compound(root, "Regions") is not None

    def _regions(self, regions: nbt.TAG_Compound) -> List[Region]:
        result = []
        for tag in regions.tags:
            if not isinstance(tag, nbt.TAG_Compound):
                continue
            position = get_xyz(tag, "Position")
            size = get_xyz(tag, "Size")
            if position is None or size is None:
                raise FormatError(f"{self.name}: region {tag.name!r} missing Position/Size")
            result.append(Region(tag.name, tag, position, size))
        return result

    def decode(self, root: nbt.TAG_Compound) -> VoxelGrid:
        self.require_int(root, "Version")
        meta = self.require(get_compound(root, "Metadata"), "Metadata compound")
        regions = self._regions(self.require(get_compound(root, "Regions"), "Regions compound"))

        # Shift only axes that reach below zero
        shift = [0, 0, 0]
        for region in regions:
            shift = [min(s, c) for s, c in zip(shift, region.min_corner)]

        enclosing = get_xyz(meta, "EnclosingSize")
        if enclosing is not None:
            width, height, length = (abs(v) for v in enclosing)
        else:
            dims = [0, 0, 0]
            for region in regions:
                far = (c - s + e for c, s, e in zip(region.min_corner, shift, region.extent))
                dims = [max(d, f) for d, f in zip(dims, far)]
            width, height, length = dims

        self.check_volume(width, height, length)
        builder = GridBuilder(width, height, length)
        block_entities = []
        entities = []

        for region in regions:
            origin = tuple(c - s for c, s in zip(region.min_corner, shift))
            self._place_region(builder, region, origin)
            block_entities.extend(
                read_block_entities(entity_list(region.tag, "TileEntities"), offset=origin)
            )
            entities.extend(
                read_entities(
                    entity_list(region.tag, "Entities"),
                    offset=tuple(float(o) for o in origin),
                )
            )

        metadata = Metadata(
            name=get_str(meta, "Name"),
            author=get_str(meta, "Author"),
            date=get_int(meta, "TimeCreated"),
            extra=extras(meta, METADATA_KEYS),
        )
        metadata.extra["Regions"] = [region.name for region in regions]
        for key in ("Version", "MinecraftDataVersion", "SubVersion"):
            if key in root:
                metadata.extra[key] = to_python(root[key])

        grid = builder.build(
            block_entities=block_entities,
            entities=entities,
            metadata=metadata,
            format=SchematicFormat.LITEMATICA,
        )
        grid.stats.log_summary(self.name)
        return grid

    def _place_region(self, builder: GridBuilder, region: Region, origin: Tuple[int, int, int]):
        palette = _read_palette(region.tag)
        words = get_array(region.tag, "BlockStates", types=(nbt.TAG_Long_Array,))
        count = region.volume
        if count == 0 or not palette:
            return
        self.check_volume(*region.extent)

        values, present = unpack_indices(words or [], bits_per_entry(len(palette)), count)
        stats = builder.stats
        stats.cells_padded += int((~present).sum())

        valid = present & (values < len(palette))
        stats.bad_palette_indices += int((present & ~valid).sum())

        rw, _, rl = region.extent
        i = np.arange(count, dtype=np.int64)
        gx = origin[0] + i % rw
        gy = origin[1] + i // (rw * rl)
        gz = origin[2] + (i // rw) % rl

        inside = (
            (gx >= 0) & (gx < builder.width)
            & (gy >= 0) & (gy < builder.height)
            & (gz >= 0) & (gz < builder.length)
        )  # fmt: skip
        stats.out_of_bounds += int((valid & ~inside).sum())
        keep = valid & inside

        lut = np.array([builder.palette_index(block) for block in palette], dtype=np.int32)
        target = (gy[keep] * builder.length + gz[keep]) * builder.width + gx[keep]
        builder.flat[target] = lut[values[keep]]

        # Unusable indices inside the grid become air
        bad = present & ~valid & inside
        builder.flat[(gy[bad] * builder.length + gz[bad]) * builder.width + gx[bad]] = 0

        logger.debug(
            f"Region {region.name!r}: {region.extent} at {origin}, "
            f"{len(palette)} palette entries"
        )


def decode_litematica(data: bytes) -> VoxelGrid:
    """Decode Litematica bytes (gzip or raw)."""
    return LitematicaDecoder().decode_bytes(data)
