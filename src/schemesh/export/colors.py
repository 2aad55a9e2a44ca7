"""
Approximate flat colours per block, used for MTL diffuse colours when no
textures are available.
"""

from typing import Callable, Dict, List, Tuple

RGB = Tuple[float, float, float]

DEFAULT_COLOR: RGB = (0.5, 0.5, 0.5)

_DYE_ORDER = (
    "white", "orange", "magenta", "light_blue", "yellow", "lime", "pink", "gray",
    "light_gray", "cyan", "purple", "blue", "brown", "green", "red", "black",
)  # fmt: skip

_DYED: Dict[str, Tuple[RGB, ...]] = {
    "wool": (
        (0.95, 0.95, 0.95), (0.85, 0.5, 0.15), (0.65, 0.3, 0.6), (0.5, 0.7, 0.85),
        (0.9, 0.85, 0.25), (0.5, 0.75, 0.2), (0.85, 0.55, 0.65), (0.35, 0.35, 0.35),
        (0.6, 0.6, 0.6), (0.2, 0.55, 0.6), (0.5, 0.25, 0.65), (0.25, 0.3, 0.7),
        (0.45, 0.3, 0.2), (0.35, 0.5, 0.2), (0.7, 0.2, 0.2), (0.12, 0.12, 0.15),
    ),
    "concrete": (
        (0.95, 0.95, 0.95), (0.85, 0.45, 0.1), (0.6, 0.25, 0.55), (0.4, 0.6, 0.8),
        (0.9, 0.8, 0.15), (0.45, 0.7, 0.15), (0.8, 0.5, 0.6), (0.3, 0.3, 0.32),
        (0.55, 0.55, 0.55), (0.15, 0.5, 0.55), (0.45, 0.2, 0.6), (0.25, 0.3, 0.65),
        (0.4, 0.28, 0.18), (0.3, 0.45, 0.2), (0.6, 0.15, 0.15), (0.08, 0.08, 0.1),
    ),
    "stained_glass": (
        (0.95, 0.95, 0.95), (0.9, 0.5, 0.15), (0.7, 0.3, 0.65), (0.5, 0.7, 0.9),
        (0.9, 0.85, 0.2), (0.5, 0.8, 0.2), (0.85, 0.55, 0.65), (0.4, 0.4, 0.4),
        (0.6, 0.6, 0.6), (0.2, 0.6, 0.65), (0.5, 0.25, 0.7), (0.2, 0.3, 0.8),
        (0.45, 0.3, 0.2), (0.3, 0.5, 0.2), (0.8, 0.2, 0.2), (0.15, 0.15, 0.18),
    ),
    "terracotta": (
        (0.82, 0.72, 0.68), (0.65, 0.38, 0.22), (0.58, 0.38, 0.45), (0.48, 0.52, 0.6),
        (0.7, 0.55, 0.25), (0.45, 0.5, 0.28), (0.65, 0.45, 0.45), (0.32, 0.28, 0.28),
        (0.52, 0.45, 0.42), (0.35, 0.45, 0.45), (0.45, 0.32, 0.42), (0.3, 0.32, 0.52),
        (0.35, 0.25, 0.2), (0.35, 0.42, 0.3), (0.55, 0.25, 0.2), (0.18, 0.12, 0.12),
    ),
}  # fmt: skip

# Several names share one colour; each group is listed once
_GROUPS: List[Tuple[Tuple[str, ...], RGB]] = [
    (("stone",), (0.5, 0.5, 0.5)),
    (("cobblestone", "mossy_cobblestone"), (0.45, 0.45, 0.45)),
    (("granite", "polished_granite"), (0.6, 0.4, 0.35)),
    (("diorite", "polished_diorite"), (0.75, 0.75, 0.75)),
    (("andesite", "polished_andesite"), (0.55, 0.55, 0.55)),
    (("deepslate", "cobbled_deepslate"), (0.3, 0.3, 0.35)),
    (("polished_deepslate",), (0.28, 0.28, 0.32)),
    (("deepslate_bricks", "cracked_deepslate_bricks"), (0.25, 0.25, 0.3)),
    (("deepslate_tiles", "cracked_deepslate_tiles"), (0.22, 0.22, 0.27)),
    (("chiseled_deepslate",), (0.27, 0.27, 0.32)),
    (("tuff",), (0.45, 0.47, 0.43)),
    (("polished_tuff", "tuff_bricks"), (0.48, 0.5, 0.46)),
    (("calcite",), (0.9, 0.9, 0.88)),
    (("dripstone_block",), (0.55, 0.45, 0.4)),
    (("blackstone", "gilded_blackstone"), (0.15, 0.13, 0.15)),
    (("polished_blackstone",), (0.12, 0.1, 0.12)),
    (("polished_blackstone_bricks", "cracked_polished_blackstone_bricks"), (0.13, 0.11, 0.13)),
    (("chiseled_polished_blackstone",), (0.14, 0.12, 0.14)),
    (("basalt", "polished_basalt"), (0.3, 0.3, 0.32)),
    (("smooth_basalt",), (0.25, 0.25, 0.27)),
    (("dirt", "coarse_dirt", "rooted_dirt"), (0.55, 0.4, 0.3)),
    (("grass_block",), (0.4, 0.6, 0.3)),
    (("podzol",), (0.45, 0.35, 0.25)),
    (("mycelium",), (0.5, 0.45, 0.5)),
    (("mud",), (0.35, 0.3, 0.35)),
    (("packed_mud",), (0.5, 0.4, 0.35)),
    (("mud_bricks",), (0.55, 0.45, 0.4)),
    (("sand",), (0.85, 0.8, 0.6)),
    (("red_sand",), (0.75, 0.45, 0.25)),
    (("gravel",), (0.55, 0.52, 0.5)),
    (("clay",), (0.6, 0.62, 0.68)),
    (("sandstone", "cut_sandstone", "smooth_sandstone", "chiseled_sandstone"), (0.85, 0.78, 0.55)),
    (("red_sandstone", "cut_red_sandstone", "smooth_red_sandstone"), (0.7, 0.4, 0.2)),
    (("bricks", "brick_stairs", "brick_slab"), (0.6, 0.35, 0.3)),
    (
        ("stone_bricks", "mossy_stone_bricks", "cracked_stone_bricks", "chiseled_stone_bricks"),
        (0.48, 0.48, 0.48),
    ),
    (("nether_bricks", "cracked_nether_bricks", "chiseled_nether_bricks"), (0.25, 0.15, 0.2)),
    (("red_nether_bricks",), (0.35, 0.12, 0.12)),
    (("end_stone_bricks",), (0.85, 0.85, 0.7)),
    (("prismarine_bricks",), (0.4, 0.6, 0.55)),
    (("iron_block",), (0.75, 0.75, 0.75)),
    (("gold_block",), (0.9, 0.75, 0.2)),
    (("diamond_block",), (0.4, 0.8, 0.8)),
    (("emerald_block",), (0.3, 0.7, 0.35)),
    (("lapis_block",), (0.2, 0.3, 0.7)),
    (("redstone_block",), (0.7, 0.15, 0.1)),
    (("coal_block",), (0.15, 0.15, 0.15)),
    (("copper_block", "cut_copper"), (0.7, 0.45, 0.35)),
    (("netherite_block",), (0.25, 0.22, 0.25)),
    (("glass",), (0.85, 0.9, 0.95)),
    (("terracotta",), (0.6, 0.45, 0.38)),
    (("netherrack",), (0.5, 0.25, 0.25)),
    (("soul_sand",), (0.35, 0.28, 0.22)),
    (("soul_soil",), (0.32, 0.25, 0.2)),
    (("glowstone",), (0.85, 0.7, 0.4)),
    (("magma_block",), (0.55, 0.25, 0.1)),
    (("nether_wart_block",), (0.5, 0.15, 0.15)),
    (("warped_wart_block",), (0.1, 0.5, 0.5)),
    (("shroomlight",), (0.9, 0.6, 0.4)),
    (("end_stone",), (0.85, 0.85, 0.7)),
    (("purpur_block", "purpur_pillar"), (0.6, 0.45, 0.6)),
    (
        ("quartz_block", "smooth_quartz", "quartz_bricks", "chiseled_quartz_block", "quartz_pillar"),
        (0.9, 0.88, 0.85),
    ),
    (("prismarine",), (0.4, 0.55, 0.5)),
    (("dark_prismarine",), (0.25, 0.4, 0.38)),
    (("sea_lantern",), (0.7, 0.85, 0.85)),
    (("obsidian", "crying_obsidian"), (0.15, 0.1, 0.2)),
    (("bedrock",), (0.3, 0.3, 0.3)),
    (("ice", "packed_ice", "blue_ice"), (0.6, 0.75, 0.9)),
    (("snow_block", "powder_snow"), (0.95, 0.97, 1.0)),
    (("hay_block",), (0.75, 0.65, 0.25)),
    (("bone_block",), (0.85, 0.82, 0.75)),
    (("slime_block",), (0.45, 0.7, 0.4)),
    (("honey_block",), (0.85, 0.6, 0.2)),
    (("bookshelf", "chiseled_bookshelf"), (0.55, 0.45, 0.3)),
    (("tnt",), (0.7, 0.3, 0.25)),
    (("sponge", "wet_sponge"), (0.75, 0.75, 0.35)),
    (("melon",), (0.5, 0.65, 0.3)),
    (("pumpkin", "carved_pumpkin", "jack_o_lantern"), (0.8, 0.5, 0.15)),
    (("redstone_lamp",), (0.55, 0.35, 0.2)),
    (("redstone_wire", "redstone_torch"), (0.6, 0.15, 0.1)),
    (("observer", "dropper", "dispenser"), (0.45, 0.45, 0.45)),
    (("hopper",), (0.4, 0.4, 0.45)),
    (("water",), (0.2, 0.4, 0.8)),
    (("lava",), (0.9, 0.45, 0.1)),
]

BLOCK_COLORS: Dict[str, RGB] = {name: rgb for names, rgb in _GROUPS for name in names}
for _family, _colors in _DYED.items():
    BLOCK_COLORS.update({f"{dye}_{_family}": rgb for dye, rgb in zip(_DYE_ORDER, _colors)})

# Checked in order after an exact-name miss
_FALLBACKS: List[Tuple[Callable[[str], bool], RGB]] = [
    (lambda n: "oak" in n and "log" in n, (0.45, 0.35, 0.2)),
    (lambda n: "oak" in n and "plank" in n, (0.6, 0.5, 0.3)),
    (lambda n: "spruce" in n, (0.35, 0.25, 0.15)),
    (lambda n: "birch" in n, (0.8, 0.75, 0.6)),
    (lambda n: "jungle" in n, (0.55, 0.4, 0.25)),
    (lambda n: "acacia" in n, (0.7, 0.4, 0.25)),
    (lambda n: "dark_oak" in n, (0.25, 0.18, 0.1)),
    (lambda n: "mangrove" in n, (0.45, 0.2, 0.15)),
    (lambda n: "cherry" in n, (0.75, 0.55, 0.55)),
    (lambda n: "bamboo" in n, (0.7, 0.65, 0.4)),
    (lambda n: "crimson" in n, (0.5, 0.2, 0.25)),
    (lambda n: "warped" in n, (0.2, 0.45, 0.45)),
    (lambda n: "log" in n or "wood" in n, (0.45, 0.35, 0.2)),
    (lambda n: "plank" in n, (0.6, 0.5, 0.3)),
    (lambda n: "leaves" in n, (0.25, 0.5, 0.2)),
    (lambda n: "ore" in n, (0.5, 0.5, 0.5)),
    (lambda n: "piston" in n, (0.55, 0.45, 0.35)),
]

TRANSLUCENT_MARKERS = ("glass", "water", "ice")


def block_color(name: str) -> RGB:
    """
    Approximate RGB colour (0.0-1.0) for a block name.

    Exact names win; otherwise the first matching family rule applies, and
    anything unrecognised is mid grey.
    """
    if name.startswith("minecraft:"):
        name = name[len("minecraft:") :]
    color = BLOCK_COLORS.get(name)
    if color is not None:
        return color
    for predicate, rgb in _FALLBACKS:
        if predicate(name):
            return rgb
    return DEFAULT_COLOR


def is_translucent(name: str) -> bool:
    return any(marker in name for marker in TRANSLUCENT_MARKERS)
