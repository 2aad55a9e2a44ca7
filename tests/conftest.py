# Automatically add src/ to sys.path for pytest discovery of src/schemesh
import gzip
import io
import sys
from pathlib import Path
from typing import Dict, Iterable, List, Optional, Sequence, Tuple

import pytest
from nbt import nbt

SRC = Path(__file__).parent.parent / "src"
if str(SRC) not in sys.path:
    sys.path.insert(0, str(SRC))


# Synthetic NBT builders shared by the decoder tests


def string(value: str) -> nbt.TAG_String:
    return nbt.TAG_String(value=value)


def short(value: int) -> nbt.TAG_Short:
    return nbt.TAG_Short(value=value)


def int_tag(value: int) -> nbt.TAG_Int:
    return nbt.TAG_Int(value=value)


def long_tag(value: int) -> nbt.TAG_Long:
    return nbt.TAG_Long(value=value)


def byte_array(values: Iterable[int]) -> nbt.TAG_Byte_Array:
    tag = nbt.TAG_Byte_Array()
    tag.value = bytearray(values)
    return tag


def int_array(values: Iterable[int]) -> nbt.TAG_Int_Array:
    tag = nbt.TAG_Int_Array()
    tag.value = list(values)
    return tag


def long_array(words: Iterable[int]) -> nbt.TAG_Long_Array:
    """Long array from unsigned 64-bit words (stored signed, as on disk)."""
    tag = nbt.TAG_Long_Array()
    tag.value = [w - (1 << 64) if w >= (1 << 63) else w for w in words]
    return tag


def compound(items: Optional[Dict[str, nbt.TAG]] = None) -> nbt.TAG_Compound:
    tag = nbt.TAG_Compound()
    for key, value in (items or {}).items():
        tag[key] = value
    return tag


def compound_list(items: Iterable[nbt.TAG_Compound]) -> nbt.TAG_List:
    tag = nbt.TAG_List(type=nbt.TAG_Compound)
    tag.tags.extend(items)
    return tag


def double_list(values: Iterable[float]) -> nbt.TAG_List:
    tag = nbt.TAG_List(type=nbt.TAG_Double)
    tag.tags.extend(nbt.TAG_Double(value=float(v)) for v in values)
    return tag


def string_list(values: Iterable[str]) -> nbt.TAG_List:
    tag = nbt.TAG_List(type=nbt.TAG_String)
    tag.tags.extend(string(v) for v in values)
    return tag


def xyz(x: int, y: int, z: int) -> nbt.TAG_Compound:
    return compound({"x": int_tag(x), "y": int_tag(y), "z": int_tag(z)})


def to_bytes(root: nbt.TAG_Compound, compress: bool = False, name: str = "Schematic") -> bytes:
    """Serialize a root compound as an NBT file, optionally gzipped."""
    nbt_file = nbt.NBTFile()
    nbt_file.name = name
    nbt_file.tags.extend(root.tags)
    buffer = io.BytesIO()
    nbt_file.write_file(buffer=buffer)
    data = buffer.getvalue()
    return gzip.compress(data) if compress else data


def encode_varint(value: int) -> bytes:
    out = bytearray()
    while True:
        byte = value & 0x7F
        value >>= 7
        if value:
            out.append(byte | 0x80)
        else:
            out.append(byte)
            return bytes(out)


def pack_indices(indices: Sequence[int], bits: int) -> List[int]:
    """Pack values low-bit-first across unsigned 64-bit words."""
    total_bits = len(indices) * bits
    words = [0] * ((total_bits + 63) // 64)
    for i, value in enumerate(indices):
        start = i * bits
        word, offset = divmod(start, 64)
        words[word] |= (value << offset) & ((1 << 64) - 1)
        if offset + bits > 64:
            words[word + 1] |= value >> (64 - offset)
    return words


def build_legacy(
    width: int,
    height: int,
    length: int,
    ids: Sequence[int],
    data: Optional[Sequence[int]] = None,
    add_blocks: Optional[Sequence[int]] = None,
    mapping: Optional[Dict[str, int]] = None,
    tile_entities: Iterable[nbt.TAG_Compound] = (),
    entities: Iterable[nbt.TAG_Compound] = (),
) -> nbt.TAG_Compound:
    root = compound(
        {
            "Width": short(width),
            "Height": short(height),
            "Length": short(length),
            "Materials": string("Alpha"),
            "Blocks": byte_array(i & 0xFF for i in ids),
            "Data": byte_array(data if data is not None else [0] * len(ids)),
            "TileEntities": compound_list(tile_entities),
            "Entities": compound_list(entities),
        }
    )
    if add_blocks is not None:
        root["AddBlocks"] = byte_array(add_blocks)
    if mapping is not None:
        root["SchematicaMapping"] = compound({k: short(v) for k, v in mapping.items()})
    return root


def sponge_palette(states: Sequence[str]) -> nbt.TAG_Compound:
    return compound({state: int_tag(i) for i, state in enumerate(states)})


def build_sponge_v2(
    width: int,
    height: int,
    length: int,
    palette: Sequence[str],
    cells: Optional[Sequence[int]] = None,
    block_data: Optional[bytes] = None,
    block_entities: Iterable[nbt.TAG_Compound] = (),
) -> nbt.TAG_Compound:
    if block_data is None:
        block_data = b"".join(encode_varint(c) for c in cells)
    return compound(
        {
            "Version": int_tag(2),
            "DataVersion": int_tag(2586),
            "Width": short(width),
            "Height": short(height),
            "Length": short(length),
            "Offset": int_array([0, 0, 0]),
            "PaletteMax": int_tag(len(palette)),
            "Palette": sponge_palette(palette),
            "BlockData": byte_array(block_data),
            "BlockEntities": compound_list(block_entities),
            "Metadata": compound(
                {
                    "Name": string("Test Build"),
                    "Author": string("tester"),
                    "Date": long_tag(1700000000000),
                    "RequiredMods": string_list(["worldedit"]),
                    "WEOffsetX": int_tag(-1),
                }
            ),
        }
    )


def build_sponge_v3(
    width: int,
    height: int,
    length: int,
    palette: Sequence[str],
    cells: Sequence[int],
    block_entities: Iterable[nbt.TAG_Compound] = (),
    entities: Iterable[nbt.TAG_Compound] = (),
    wrapped: bool = False,
) -> nbt.TAG_Compound:
    block_data = b"".join(encode_varint(c) for c in cells)
    schem = compound(
        {
            "Version": int_tag(3),
            "DataVersion": int_tag(3700),
            "Width": short(width),
            "Height": short(height),
            "Length": short(length),
            "Blocks": compound(
                {
                    "Palette": sponge_palette(palette),
                    "Data": byte_array(block_data),
                    "BlockEntities": compound_list(block_entities),
                }
            ),
            "Entities": compound_list(entities),
        }
    )
    if wrapped:
        return compound({"Schematic": schem})
    return schem


def litematica_palette(states: Sequence[Tuple[str, Dict[str, str]]]) -> nbt.TAG_List:
    entries = []
    for name, props in states:
        entry = compound({"Name": string(name)})
        if props:
            entry["Properties"] = compound({k: string(v) for k, v in props.items()})
        entries.append(entry)
    return compound_list(entries)


def litematica_region(
    position: Tuple[int, int, int],
    size: Tuple[int, int, int],
    palette: Sequence[Tuple[str, Dict[str, str]]],
    indices: Sequence[int],
    tile_entities: Iterable[nbt.TAG_Compound] = (),
    entities: Iterable[nbt.TAG_Compound] = (),
) -> nbt.TAG_Compound:
    bits = max(1, (len(palette) - 1).bit_length())
    return compound(
        {
            "Position": xyz(*position),
            "Size": xyz(*size),
            "BlockStatePalette": litematica_palette(palette),
            "BlockStates": long_array(pack_indices(indices, bits)),
            "TileEntities": compound_list(tile_entities),
            "Entities": compound_list(entities),
        }
    )


def build_litematica(
    regions: Dict[str, nbt.TAG_Compound],
    enclosing: Optional[Tuple[int, int, int]] = None,
) -> nbt.TAG_Compound:
    metadata = compound(
        {
            "Name": string("Test Litematic"),
            "Author": string("tester"),
            "Description": string("synthetic"),
            "TimeCreated": long_tag(1700000000000),
            "RegionCount": int_tag(len(regions)),
        }
    )
    if enclosing is not None:
        metadata["EnclosingSize"] = xyz(*enclosing)

    regions_tag = nbt.TAG_Compound()
    for name, region in regions.items():
        regions_tag[name] = region

    return compound(
        {
            "Version": int_tag(6),
            "MinecraftDataVersion": int_tag(3700),
            "Metadata": metadata,
            "Regions": regions_tag,
        }
    )


# Eight distinct materials for the 2x2x2 round-trip tests, listed in
# row-major ((y * length + z) * width + x) order
EIGHT_MATERIALS = [
    "minecraft:stone",
    "minecraft:granite",
    "minecraft:dirt",
    "minecraft:cobblestone",
    "minecraft:oak_planks",
    "minecraft:sand",
    "minecraft:gravel",
    "minecraft:white_wool",
]


def cube_coords(size: int = 2) -> List[Tuple[int, int, int]]:
    """(x, y, z) for every cell of a size^3 grid in row-major order."""
    return [(x, y, z) for y in range(size) for z in range(size) for x in range(size)]


def make_grid(width: int, height: int, length: int, cells: Dict[Tuple[int, int, int], str]):
    """VoxelGrid with the given "name[state]" strings at (x, y, z), air elsewhere."""
    from schemesh.grid import BlockRef, VoxelGrid

    blocks = []
    for y in range(height):
        for z in range(length):
            for x in range(width):
                state = cells.get((x, y, z))
                blocks.append(BlockRef.parse(state) if state else BlockRef.air())
    return VoxelGrid.from_blocks(width, height, length, blocks)


def solid_grid(width: int, height: int, length: int, name: str = "minecraft:stone"):
    cells = {(x, y, z): name for x in range(width) for y in range(height) for z in range(length)}
    return make_grid(width, height, length, cells)


@pytest.fixture
def eight_materials() -> List[str]:
    return list(EIGHT_MATERIALS)
