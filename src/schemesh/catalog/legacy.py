"""
Legacy (pre-1.13) numeric block ID catalog.

Maps (block ID, damage value) pairs from MCEdit .schematic files onto modern
namespaced names and block state properties. Unknown IDs map to
"minecraft:unknown_block_<id>" so no cell is silently lost.
"""

from functools import lru_cache
from typing import Dict, Tuple

from schemesh.grid import BlockRef

COLORS = (
    "white", "orange", "magenta", "light_blue",
    "yellow", "lime", "pink", "gray",
    "light_gray", "cyan", "purple", "blue",
    "brown", "green", "red", "black",
)  # fmt: skip

WOODS = ("oak", "spruce", "birch", "jungle", "acacia", "dark_oak")

# IDs whose name does not depend on the damage value
SIMPLE_IDS: Dict[int, str] = {
    0: "air",
    2: "grass_block",
    4: "cobblestone",
    7: "bedrock",
    8: "water",
    9: "water",
    10: "lava",
    11: "lava",
    13: "gravel",
    14: "gold_ore",
    15: "iron_ore",
    16: "coal_ore",
    20: "glass",
    21: "lapis_ore",
    22: "lapis_block",
    23: "dispenser",
    24: "sandstone",
    25: "note_block",
    29: "sticky_piston",
    33: "piston",
    41: "gold_block",
    42: "iron_block",
    45: "bricks",
    46: "tnt",
    47: "bookshelf",
    48: "mossy_cobblestone",
    49: "obsidian",
    50: "torch",
    52: "spawner",
    53: "oak_stairs",
    54: "chest",
    55: "redstone_wire",
    56: "diamond_ore",
    57: "diamond_block",
    58: "crafting_table",
    61: "furnace",
    62: "furnace",
    63: "oak_sign",
    64: "oak_door",
    65: "ladder",
    66: "rail",
    67: "cobblestone_stairs",
    69: "lever",
    70: "stone_pressure_plate",
    72: "oak_pressure_plate",
    73: "redstone_ore",
    74: "redstone_ore",
    75: "redstone_torch",
    76: "redstone_torch",
    77: "stone_button",
    79: "ice",
    80: "snow_block",
    81: "cactus",
    82: "clay",
    84: "jukebox",
    85: "oak_fence",
    86: "pumpkin",
    87: "netherrack",
    88: "soul_sand",
    89: "glowstone",
    90: "nether_portal",
    91: "jack_o_lantern",
    93: "repeater",
    94: "repeater",
    108: "brick_stairs",
    109: "stone_brick_stairs",
    110: "mycelium",
    112: "nether_bricks",
    114: "nether_brick_stairs",
    121: "end_stone",
    123: "redstone_lamp",
    124: "redstone_lamp",
    128: "sandstone_stairs",
    129: "emerald_ore",
    130: "ender_chest",
    131: "tripwire_hook",
    133: "emerald_block",
    134: "spruce_stairs",
    135: "birch_stairs",
    136: "jungle_stairs",
    137: "command_block",
    138: "beacon",
    139: "cobblestone_wall",
    143: "oak_button",
    145: "anvil",
    146: "trapped_chest",
    147: "light_weighted_pressure_plate",
    148: "heavy_weighted_pressure_plate",
    149: "comparator",
    150: "comparator",
    151: "daylight_detector",
    152: "redstone_block",
    153: "nether_quartz_ore",
    154: "hopper",
    155: "quartz_block",
    156: "quartz_stairs",
    157: "activator_rail",
    158: "dropper",
    160: "white_stained_glass_pane",
    163: "acacia_stairs",
    164: "dark_oak_stairs",
    165: "slime_block",
    166: "barrier",
    169: "sea_lantern",
    170: "hay_block",
    172: "terracotta",
    173: "coal_block",
    174: "packed_ice",
    178: "daylight_detector",
    179: "red_sandstone",
    180: "red_sandstone_stairs",
    183: "spruce_fence_gate",
    184: "birch_fence_gate",
    185: "jungle_fence_gate",
    186: "dark_oak_fence_gate",
    187: "acacia_fence_gate",
    188: "spruce_fence",
    189: "birch_fence",
    190: "jungle_fence",
    191: "dark_oak_fence",
    192: "acacia_fence",
    198: "end_rod",
    199: "chorus_plant",
    200: "chorus_flower",
    201: "purpur_block",
    202: "purpur_pillar",
    203: "purpur_stairs",
    206: "end_stone_bricks",
    210: "repeating_command_block",
    211: "chain_command_block",
    213: "magma_block",
    214: "nether_wart_block",
    215: "red_nether_bricks",
    216: "bone_block",
    218: "observer",
}

# IDs whose name is picked by the damage value; out-of-range data falls back
# to the first entry
DATA_VARIANTS: Dict[int, Tuple[str, ...]] = {
    1: (
        "stone", "granite", "polished_granite", "diorite",
        "polished_diorite", "andesite", "polished_andesite",
    ),
    3: ("dirt", "coarse_dirt", "podzol"),
    5: tuple(f"{wood}_planks" for wood in WOODS),
    12: ("sand", "red_sand"),
    35: tuple(f"{color}_wool" for color in COLORS),
    95: tuple(f"{color}_stained_glass" for color in COLORS),
    98: ("stone_bricks", "mossy_stone_bricks", "cracked_stone_bricks", "chiseled_stone_bricks"),
    159: tuple(f"{color}_terracotta" for color in COLORS),
    251: tuple(f"{color}_concrete" for color in COLORS),
    252: tuple(f"{color}_concrete_powder" for color in COLORS),
}  # fmt: skip

# Logs and leaves keep the variant in the low two bits
MASKED_VARIANTS: Dict[int, Tuple[str, ...]] = {
    17: ("oak_log", "spruce_log", "birch_log", "jungle_log"),
    18: ("oak_leaves", "spruce_leaves", "birch_leaves", "jungle_leaves"),
    162: ("acacia_log", "dark_oak_log"),
}

STAIR_IDS = frozenset({53, 67, 108, 109, 114, 128, 134, 135, 136, 156, 163, 164, 180, 203})

_STAIR_FACING = ("east", "west", "south", "north")
_SIX_FACING = ("down", "up", "north", "south", "west", "east")
_DIODE_FACING = ("south", "west", "north", "east")
_TORCH_FACING = {1: "east", 2: "west", 3: "south", 4: "north"}
_RAIL_SHAPES = (
    "north_south", "east_west",
    "ascending_east", "ascending_west", "ascending_north", "ascending_south",
    "south_east", "south_west", "north_west", "north_east",
)  # fmt: skip


def _bool(flag: int) -> str:
    return "true" if flag else "false"


def legacy_id_to_name(block_id: int, data: int) -> str:
    """
    Map a legacy numeric ID and damage value to a namespaced block name.

    Args:
        block_id: Block ID (0-4095; IDs above 255 come from AddBlocks)
        data: Damage value nibble

    Returns:
        Namespaced block name, e.g. "minecraft:granite"
    """
    if block_id in SIMPLE_IDS:
        name = SIMPLE_IDS[block_id]
    elif block_id in DATA_VARIANTS:
        variants = DATA_VARIANTS[block_id]
        name = variants[data] if data < len(variants) else variants[0]
    elif block_id in MASKED_VARIANTS:
        variants = MASKED_VARIANTS[block_id]
        name = variants[(data & 0x3) % len(variants)]
    elif block_id in (43, 44):
        name = "stone_slab"
    elif block_id in (125, 126):
        name = f"{WOODS[data & 0x7]}_slab" if (data & 0x7) < len(WOODS) else "oak_slab"
    elif 219 <= block_id <= 234:
        name = f"{COLORS[block_id - 219]}_shulker_box"
    elif 235 <= block_id <= 250:
        name = f"{COLORS[block_id - 235]}_glazed_terracotta"
    else:
        name = f"unknown_block_{block_id}"
    return f"minecraft:{name}"


def legacy_data_to_state(block_id: int, data: int) -> Dict[str, str]:
    """
    Decode the damage value of a legacy block into modern state properties.

    Only block families whose geometry or orientation depends on the damage
    value are decoded; everything else yields an empty state.
    """
    props: Dict[str, str] = {}

    if block_id in (17, 162):
        props["axis"] = {0: "y", 1: "x", 2: "z"}.get((data >> 2) & 0x3, "y")
    elif block_id in STAIR_IDS:
        props["facing"] = _STAIR_FACING[data & 0x3]
        props["half"] = "top" if data & 0x4 else "bottom"
    elif block_id in (43, 126):
        props["type"] = "double"
    elif block_id in (44, 125):
        props["type"] = "top" if data & 0x8 else "bottom"
    elif block_id in (50, 75, 76):
        if data in _TORCH_FACING:
            props["facing"] = _TORCH_FACING[data]
    elif block_id == 69:
        face = data & 0x7
        props["face"] = "ceiling" if face in (0, 7) else "floor" if face in (5, 6) else "wall"
        props["powered"] = _bool(data & 0x8)
    elif block_id in (77, 143):
        face = data & 0x7
        props["face"] = "ceiling" if face == 0 else "floor" if face == 5 else "wall"
        props["powered"] = _bool(data & 0x8)
    elif block_id in (93, 94):
        props["facing"] = _DIODE_FACING[data & 0x3]
        props["delay"] = str(((data >> 2) & 0x3) + 1)
        props["powered"] = _bool(block_id == 94)
    elif block_id in (149, 150):
        props["facing"] = _DIODE_FACING[data & 0x3]
        props["mode"] = "subtract" if data & 0x4 else "compare"
        props["powered"] = _bool(data & 0x8)
    elif block_id in (29, 33):
        facing = data & 0x7
        props["facing"] = _SIX_FACING[facing] if facing < 6 else "up"
        props["extended"] = _bool(data & 0x8)
    elif block_id in (23, 158, 218):
        facing = data & 0x7
        props["facing"] = _SIX_FACING[facing] if facing < 6 else "north"
        if block_id != 218:
            props["triggered"] = _bool(data & 0x8)
    elif block_id == 154:
        facing = data & 0x7
        props["facing"] = _SIX_FACING[facing] if facing in (0, 2, 3, 4, 5) else "down"
        props["enabled"] = _bool(not data & 0x8)
    elif block_id == 55:
        props["power"] = str(data & 0xF)
    elif block_id == 66:
        props["shape"] = _RAIL_SHAPES[data] if data < len(_RAIL_SHAPES) else "north_south"

    return props


@lru_cache(maxsize=8192)
def legacy_block(block_id: int, data: int) -> BlockRef:
    """Resolve a (block ID, damage) pair to a BlockRef."""
    return BlockRef.of(
        legacy_id_to_name(block_id, data), legacy_data_to_state(block_id, data)
    )
