"""
Static block shapes for partial (non-cube) blocks.

A Shape is one of FULL, a single AABB, several AABBs, or NONE. Shapes are a
pure function of (name, state); the lookup is an ordered rule list where the
first matching predicate wins, so specific rules must stay ahead of the broad
substring rules that follow them.
"""

from dataclasses import dataclass
from enum import Enum
from typing import Callable, List, Mapping, NamedTuple, Tuple

DEFAULT_EPSILON = 0.001


class Face(Enum):
    """Cube face directions as (axis, sign); axis 0=x, 1=y, 2=z."""

    WEST = (0, -1)
    EAST = (0, 1)
    DOWN = (1, -1)
    UP = (1, 1)
    NORTH = (2, -1)
    SOUTH = (2, 1)

    @property
    def axis(self) -> int:
        return self.value[0]

    @property
    def sign(self) -> int:
        return self.value[1]

    @property
    def offset(self) -> Tuple[int, int, int]:
        delta = [0, 0, 0]
        delta[self.axis] = self.sign
        return (delta[0], delta[1], delta[2])

    @property
    def opposite(self) -> "Face":
        return Face((self.axis, -self.sign))

    @property
    def normal(self) -> Tuple[float, float, float]:
        dx, dy, dz = self.offset
        return (float(dx), float(dy), float(dz))


ALL_FACES: Tuple[Face, ...] = tuple(Face)


class AABB(NamedTuple):
    """Axis-aligned box in local voxel space [0, 1]^3."""

    min_x: float
    min_y: float
    min_z: float
    max_x: float
    max_y: float
    max_z: float

    @property
    def mins(self) -> Tuple[float, float, float]:
        return (self.min_x, self.min_y, self.min_z)

    @property
    def maxs(self) -> Tuple[float, float, float]:
        return (self.max_x, self.max_y, self.max_z)

    def reaches(self, face: Face, epsilon: float = DEFAULT_EPSILON) -> bool:
        """True if the box touches the unit-cube boundary on this face."""
        if face.sign < 0:
            return self.mins[face.axis] <= epsilon
        return self.maxs[face.axis] >= 1.0 - epsilon

    def covers_face(self, face: Face, epsilon: float = DEFAULT_EPSILON) -> bool:
        """True if the box reaches the face and spans it completely."""
        if not self.reaches(face, epsilon):
            return False
        mins, maxs = self.mins, self.maxs
        for axis in range(3):
            if axis == face.axis:
                continue
            if mins[axis] > epsilon or maxs[axis] < 1.0 - epsilon:
                return False
        return True


def box(min_x, min_y, min_z, max_x, max_y, max_z) -> AABB:
    return AABB(
        float(min_x), float(min_y), float(min_z), float(max_x), float(max_y), float(max_z)
    )


UNIT_CUBE = box(0, 0, 0, 1, 1, 1)


class ShapeKind(Enum):
    FULL = "full"
    ONE_BOX = "one_box"
    MANY_BOXES = "many_boxes"
    NONE = "none"


@dataclass(frozen=True)
class Shape:
    kind: ShapeKind
    boxes: Tuple[AABB, ...] = ()

    @classmethod
    def one(cls, aabb: AABB) -> "Shape":
        return cls(ShapeKind.ONE_BOX, (aabb,))

    @classmethod
    def many(cls, *boxes: AABB) -> "Shape":
        return cls(ShapeKind.MANY_BOXES, tuple(boxes))

    @property
    def is_full(self) -> bool:
        return self.kind is ShapeKind.FULL

    @property
    def is_empty(self) -> bool:
        return self.kind is ShapeKind.NONE

    def mesh_boxes(self) -> Tuple[AABB, ...]:
        if self.kind is ShapeKind.FULL:
            return (UNIT_CUBE,)
        return self.boxes

    def occludes(self, face: Face, epsilon: float = DEFAULT_EPSILON) -> bool:
        """
        Whether this shape hides the neighbour's face that touches `face`.

        Multi-box shapes occlude if any single box covers the face; boxes are
        never unioned.
        """
        if self.kind is ShapeKind.FULL:
            return True
        if self.kind is ShapeKind.NONE:
            return False
        return any(b.covers_face(face, epsilon) for b in self.boxes)


FULL = Shape(ShapeKind.FULL)
NONE = Shape(ShapeKind.NONE)

SLAB_BOTTOM = box(0, 0, 0, 1, 0.5, 1)
SLAB_TOP = box(0, 0.5, 0, 1, 1, 1)
CARPET = box(0, 0, 0, 1, 0.0625, 1)
PRESSURE_PLATE = box(0.0625, 0, 0.0625, 0.9375, 0.0625, 0.9375)
FENCE_POST = box(0.375, 0, 0.375, 0.625, 1, 0.625)
PANE_NS = box(0.4375, 0, 0, 0.5625, 1, 1)
PANE_EW = box(0, 0, 0.4375, 1, 1, 0.5625)
PANE_POST = box(0.4375, 0, 0.4375, 0.5625, 1, 0.5625)
THIN_NORTH = box(0, 0, 0, 1, 1, 0.1875)
THIN_SOUTH = box(0, 0, 0.8125, 1, 1, 1)
THIN_WEST = box(0, 0, 0, 0.1875, 1, 1)
THIN_EAST = box(0.8125, 0, 0, 1, 1, 1)
TRAPDOOR_BOTTOM = box(0, 0, 0, 1, 0.1875, 1)
TRAPDOOR_TOP = box(0, 0.8125, 0, 1, 1, 1)
BED = box(0, 0, 0, 1, 0.5625, 1)
CHEST = box(0.0625, 0, 0.0625, 0.9375, 0.875, 0.9375)
ENCHANTING_TABLE = box(0, 0, 0, 1, 0.75, 1)
END_PORTAL_FRAME = box(0, 0, 0, 1, 0.8125, 1)
HOPPER = (
    box(0, 0.625, 0, 1, 1, 1),
    box(0.25, 0.25, 0.25, 0.75, 0.625, 0.75),
    box(0.375, 0, 0.375, 0.625, 0.25, 0.625),
)
LECTERN = (
    box(0, 0, 0, 1, 0.125, 1),
    box(0.25, 0.125, 0.25, 0.75, 0.875, 0.75),
    box(0, 0.875, 0, 1, 1, 1),
)
CAULDRON = box(0, 0, 0, 1, 1, 1)
ANVIL = box(0.125, 0, 0, 0.875, 1, 1)
BELL = box(0.25, 0.25, 0.25, 0.75, 1, 0.75)
BREWING_STAND = box(0, 0, 0, 1, 0.875, 1)
FLOWER_POT = box(0.3125, 0, 0.3125, 0.6875, 0.375, 0.6875)
LANTERN_HANGING = box(0.3125, 0.0625, 0.3125, 0.6875, 0.5, 0.6875)
LANTERN_STANDING = box(0.3125, 0, 0.3125, 0.6875, 0.4375, 0.6875)
CANDLE = box(0.4375, 0, 0.4375, 0.5625, 0.375, 0.5625)
TORCH_STANDING = box(0.4375, 0, 0.4375, 0.5625, 0.625, 0.5625)
RAIL_FLAT = box(0, 0, 0, 1, 0.125, 1)
DIODE = box(0, 0, 0, 1, 0.125, 1)
CHAIN = box(0.40625, 0, 0.40625, 0.59375, 1, 0.59375)
ROD = box(0.375, 0, 0.375, 0.625, 1, 0.625)
WALL_POST = box(0.25, 0, 0.25, 0.75, 1, 0.75)
HEAD = box(0.25, 0, 0.25, 0.75, 0.5, 0.75)

WALL_TORCH = {
    "north": box(0.4375, 0.1875, 0.5625, 0.5625, 0.8125, 1),
    "south": box(0.4375, 0.1875, 0, 0.5625, 0.8125, 0.4375),
    "west": box(0.5625, 0.1875, 0.4375, 1, 0.8125, 0.5625),
    "east": box(0, 0.1875, 0.4375, 0.4375, 0.8125, 0.5625),
}

BUTTON_FLOOR = box(0.3125, 0, 0.375, 0.6875, 0.125, 0.625)
BUTTON_CEILING = box(0.3125, 0.875, 0.375, 0.6875, 1, 0.625)
BUTTON_WALL = {
    "north": box(0.3125, 0.375, 0.875, 0.6875, 0.625, 1),
    "south": box(0.3125, 0.375, 0, 0.6875, 0.625, 0.125),
    "west": box(0.875, 0.375, 0.3125, 1, 0.625, 0.6875),
    "east": box(0, 0.375, 0.3125, 0.125, 0.625, 0.6875),
}

LEVER_FLOOR = box(0.3125, 0, 0.25, 0.6875, 0.625, 0.75)
LEVER_CEILING = box(0.3125, 0.375, 0.25, 0.6875, 1, 0.75)
LEVER_WALL = {
    "north": box(0.3125, 0.25, 0.625, 0.6875, 0.75, 1),
    "south": box(0.3125, 0.25, 0, 0.6875, 0.75, 0.375),
    "west": box(0.625, 0.25, 0.3125, 1, 0.75, 0.6875),
    "east": box(0, 0.25, 0.3125, 0.375, 0.75, 0.6875),
}

# Upper step of a stair, keyed by (facing, bottom half?)
STAIR_STEP = {
    ("north", True): box(0, 0.5, 0, 1, 1, 0.5),
    ("north", False): box(0, 0, 0, 1, 0.5, 0.5),
    ("south", True): box(0, 0.5, 0.5, 1, 1, 1),
    ("south", False): box(0, 0, 0.5, 1, 0.5, 1),
    ("west", True): box(0, 0.5, 0, 0.5, 1, 1),
    ("west", False): box(0, 0, 0, 0.5, 0.5, 1),
    ("east", True): box(0.5, 0.5, 0, 1, 1, 1),
    ("east", False): box(0.5, 0, 0, 1, 0.5, 1),
}

THIN_BY_FACING = {
    "north": THIN_NORTH,
    "south": THIN_SOUTH,
    "west": THIN_WEST,
    "east": THIN_EAST,
}

DOOR_OPEN_FACING = {
    ("north", "left"): "west",
    ("north", "right"): "east",
    ("south", "left"): "east",
    ("south", "right"): "west",
    ("west", "left"): "south",
    ("west", "right"): "north",
    ("east", "left"): "north",
    ("east", "right"): "south",
}

# Open trapdoors hug the wall opposite their facing
TRAPDOOR_OPEN = {
    "north": THIN_SOUTH,
    "south": THIN_NORTH,
    "west": THIN_EAST,
    "east": THIN_WEST,
}

PLANT_MARKERS = (
    "flower", "tulip", "orchid", "allium", "bluet", "dandelion", "poppy",
    "rose", "lily", "sapling", "fern", "crop", "wheat", "carrot", "potato",
    "beetroot", "melon_stem", "pumpkin_stem", "vine", "kelp", "seagrass",
    "bush", "sugar_cane",
)  # fmt: skip

State = Mapping[str, str]
Predicate = Callable[[str], bool]
Constructor = Callable[[State], Shape]


def strip_namespace(name: str) -> str:
    return name[len("minecraft:") :] if name.startswith("minecraft:") else name


def _has(*markers: str, excluding: Tuple[str, ...] = ()) -> Predicate:
    def predicate(name: str) -> bool:
        return any(m in name for m in markers) and not any(e in name for e in excluding)

    return predicate


def _is(*names: str) -> Predicate:
    wanted = frozenset(names)
    return lambda name: name in wanted


def _is_plant(name: str) -> bool:
    if any(marker in name for marker in PLANT_MARKERS):
        return True
    if "grass" in name and "block" not in name:
        return True
    for marker in ("coral", "bamboo", "mushroom"):
        if marker in name and "block" not in name and "mushroom_stem" not in name:
            return True
    return False


def _const(shape: Shape) -> Constructor:
    return lambda state: shape


def _slab(state: State) -> Shape:
    slab_type = state.get("type", "bottom")
    if slab_type == "double":
        return FULL
    return Shape.one(SLAB_TOP if slab_type == "top" else SLAB_BOTTOM)


def _stairs(state: State) -> Shape:
    facing = state.get("facing", "north")
    bottom = state.get("half", "bottom") == "bottom"
    base = SLAB_BOTTOM if bottom else SLAB_TOP
    # inner/outer corner shapes are approximated by the straight step
    step = STAIR_STEP.get((facing, bottom), STAIR_STEP[("north", True)])
    return Shape.many(base, step)


def _door(state: State) -> Shape:
    facing = state.get("facing", "north")
    if state.get("open", "false") == "true":
        facing = DOOR_OPEN_FACING.get((facing, state.get("hinge", "left")), facing)
    return Shape.one(THIN_BY_FACING.get(facing, THIN_NORTH))


def _trapdoor(state: State) -> Shape:
    if state.get("open", "false") == "true":
        return Shape.one(TRAPDOOR_OPEN.get(state.get("facing", "north"), THIN_NORTH))
    return Shape.one(TRAPDOOR_TOP if state.get("half", "bottom") == "top" else TRAPDOOR_BOTTOM)


def _fence_gate(state: State) -> Shape:
    if state.get("open", "false") == "true":
        return NONE
    facing = state.get("facing", "north")
    return Shape.one(PANE_EW if facing in ("north", "south") else PANE_NS)


def _snow(state: State) -> Shape:
    try:
        layers = int(state.get("layers", "1"))
    except ValueError:
        layers = 1
    layers = min(max(layers, 1), 8)
    if layers == 8:
        return Shape.one(UNIT_CUBE)
    return Shape.one(box(0, 0, 0, 1, layers / 8.0, 1))


def _button(state: State) -> Shape:
    face = state.get("face", "wall")
    if face == "floor":
        return Shape.one(BUTTON_FLOOR)
    if face == "ceiling":
        return Shape.one(BUTTON_CEILING)
    return Shape.one(BUTTON_WALL.get(state.get("facing", "north"), BUTTON_WALL["north"]))


def _lever(state: State) -> Shape:
    face = state.get("face", "wall")
    if face == "floor":
        return Shape.one(LEVER_FLOOR)
    if face == "ceiling":
        return Shape.one(LEVER_CEILING)
    return Shape.one(LEVER_WALL.get(state.get("facing", "north"), LEVER_WALL["north"]))


def _torch(state: State) -> Shape:
    return Shape.one(TORCH_STANDING)


def _wall_torch(state: State) -> Shape:
    return Shape.one(WALL_TORCH.get(state.get("facing", "north"), TORCH_STANDING))


def _lantern(state: State) -> Shape:
    hanging = state.get("hanging", "false") == "true"
    return Shape.one(LANTERN_HANGING if hanging else LANTERN_STANDING)


def _ladder(state: State) -> Shape:
    return Shape.one(THIN_BY_FACING.get(state.get("facing", "north"), THIN_NORTH))


SHAPE_RULES: List[Tuple[Predicate, Constructor]] = [
    (_is("air", "cave_air", "void_air"), _const(NONE)),
    (_has("slab"), _slab),
    (_has("stairs"), _stairs),
    (_has("door", excluding=("trapdoor",)), _door),
    (_has("trapdoor"), _trapdoor),
    (_has("fence_gate"), _fence_gate),
    (_has("fence"), _const(Shape.one(FENCE_POST))),
    # wall_torch, wall_sign, wall_banner and wall heads have their own rules below
    (_has("wall", excluding=("sign", "torch", "banner", "head", "skull", "fan")), _const(Shape.one(WALL_POST))),  # noqa: E501
    (lambda name: "pane" in name or name == "iron_bars", _const(Shape.one(PANE_POST))),
    (_has("carpet"), _const(Shape.one(CARPET))),
    (_is("snow"), _snow),
    (_has("pressure_plate"), _const(Shape.one(PRESSURE_PLATE))),
    (_has("button"), _button),
    (_is("lever"), _lever),
    (_has("wall_torch"), _wall_torch),
    (_has("torch"), _torch),
    (_has("lantern", excluding=("sea_lantern", "jack_o_lantern")), _lantern),
    (_has("candle"), _const(Shape.one(CANDLE))),
    (_is("ladder"), _ladder),
    (_has("rail"), _const(Shape.one(RAIL_FLAT))),
    (_has("repeater", "comparator"), _const(Shape.one(DIODE))),
    (_has("bed", excluding=("bedrock",)), _const(Shape.one(BED))),
    (_has("chest"), _const(Shape.one(CHEST))),
    (_is("enchanting_table"), _const(Shape.one(ENCHANTING_TABLE))),
    (_is("end_portal_frame"), _const(Shape.one(END_PORTAL_FRAME))),
    (_is("hopper"), _const(Shape.many(*HOPPER))),
    (_is("lectern"), _const(Shape.many(*LECTERN))),
    (_is("brewing_stand"), _const(Shape.one(BREWING_STAND))),
    (_has("cauldron"), _const(Shape.one(CAULDRON))),
    (_has("anvil"), _const(Shape.one(ANVIL))),
    (_is("bell"), _const(Shape.one(BELL))),
    (lambda name: "potted" in name or name == "flower_pot", _const(Shape.one(FLOWER_POT))),
    (_is("chain"), _const(Shape.one(CHAIN))),
    (_is("end_rod", "lightning_rod"), _const(Shape.one(ROD))),
    (_has("sign", "banner"), _const(NONE)),
    (_has("head", "skull"), _const(Shape.one(HEAD))),
    (_is_plant, _const(NONE)),
    (_is("redstone_wire"), _const(NONE)),
    (_has("tripwire", excluding=("hook",)), _const(NONE)),
]


def shape_for(name: str, state: State) -> Shape:
    """
    Classify a block into its static shape.

    Args:
        name: Block name, with or without the "minecraft:" namespace
        state: Block state properties

    Returns:
        The first matching rule's shape, or FULL when nothing matches
    """
    short = strip_namespace(name)
    for predicate, constructor in SHAPE_RULES:
        if predicate(short):
            return constructor(state)
    return FULL
