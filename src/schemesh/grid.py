"""
Unified voxel grid representation shared by every schematic format.

Decoders produce a VoxelGrid; the mesher and serializers only ever read it.
Cells are stored as a palette of BlockRef values plus a dense numpy index
array laid out row-major as ((y * length + z) * width + x).
"""

import json
import logging
import sys
from collections import Counter
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Dict, Iterable, Iterator, List, Mapping, Optional, Sequence, Tuple, Union

import numpy as np

logger = logging.getLogger(__name__)

AIR_NAMES = frozenset(
    {
        "minecraft:air",
        "minecraft:cave_air",
        "minecraft:void_air",
        "air",
        "cave_air",
        "void_air",
    }
)

StateLike = Union[Mapping[str, str], Iterable[Tuple[str, str]], None]


def _normalize_state(state: StateLike) -> Tuple[Tuple[str, str], ...]:
    if not state:
        return ()
    items = state.items() if isinstance(state, Mapping) else state
    unique = {str(k): str(v) for k, v in items}
    return tuple(sorted(unique.items()))


@dataclass(frozen=True)
class BlockRef:
    """
    Immutable block identity: a namespaced name plus its state properties.

    State is kept as a tuple of (key, value) pairs sorted by key, so two refs
    with the same properties compare and hash equal regardless of the order
    the file listed them in.
    """

    name: str
    state: Tuple[Tuple[str, str], ...] = ()

    def __post_init__(self):
        object.__setattr__(self, "name", sys.intern(str(self.name)))
        object.__setattr__(self, "state", _normalize_state(self.state))

    @classmethod
    def of(cls, name: str, properties: StateLike = None) -> "BlockRef":
        return cls(name, _normalize_state(properties))

    @classmethod
    def air(cls) -> "BlockRef":
        return _AIR

    @classmethod
    def parse(cls, text: str) -> "BlockRef":
        """
        Parse a block state string such as "minecraft:chest[facing=north]".

        Properties without an "=" are dropped; a missing closing bracket is
        tolerated.
        """
        text = text.strip()
        bracket = text.find("[")
        if bracket < 0:
            return cls(text)

        name = text[:bracket]
        body = text[bracket + 1 :]
        if body.endswith("]"):
            body = body[:-1]

        properties = {}
        for prop in body.split(","):
            key, sep, value = prop.partition("=")
            if sep:
                properties[key.strip()] = value.strip()
        return cls.of(name, properties)

    @property
    def is_air(self) -> bool:
        return self.name in AIR_NAMES

    @property
    def display_name(self) -> str:
        """Name without the "minecraft:" namespace."""
        if self.name.startswith("minecraft:"):
            return self.name[len("minecraft:") :]
        return self.name

    @property
    def full_name(self) -> str:
        if not self.state:
            return self.name
        props = ",".join(f"{k}={v}" for k, v in self.state)
        return f"{self.name}[{props}]"

    @property
    def properties(self) -> Dict[str, str]:
        return dict(self.state)

    def get(self, key: str, default: Optional[str] = None) -> Optional[str]:
        for k, v in self.state:
            if k == key:
                return v
        return default

    def __str__(self) -> str:
        return self.full_name


_AIR = BlockRef("minecraft:air")


class SchematicFormat(Enum):
    """Container format a grid was decoded from."""

    LEGACY = "legacy"
    SPONGE_V2 = "sponge_v2"
    SPONGE_V3 = "sponge_v3"
    LITEMATICA = "litematica"


@dataclass
class DecodeStats:
    """Counts of cells that were degraded to air while decoding."""

    cells_padded: int = 0
    bad_varints: int = 0
    bad_palette_indices: int = 0
    out_of_bounds: int = 0

    @property
    def degraded(self) -> int:
        return (
            self.cells_padded
            + self.bad_varints
            + self.bad_palette_indices
            + self.out_of_bounds
        )

    def log_summary(self, source: str) -> None:
        if self.degraded == 0:
            return
        logger.warning(
            f"{source}: {self.degraded} cells degraded to air "
            f"(padded={self.cells_padded}, bad_varints={self.bad_varints}, "
            f"bad_palette={self.bad_palette_indices}, out_of_bounds={self.out_of_bounds})"  # noqa: E501
        )


@dataclass(frozen=True)
class SignText:
    front: Tuple[str, ...] = ()
    back: Tuple[str, ...] = ()

    @property
    def is_empty(self) -> bool:
        return all(not s for s in self.front) and all(not s for s in self.back)

    @property
    def front_text(self) -> str:
        return "\n".join(self.front)

    @property
    def back_text(self) -> str:
        return "\n".join(self.back)


def _json_text_to_plain(raw: Any) -> str:
    """Reduce a JSON text component (or an already-plain string) to text."""
    if isinstance(raw, dict):
        parts = [str(raw.get("text", ""))]
        parts.extend(_json_text_to_plain(extra) for extra in raw.get("extra", []))
        return "".join(parts)
    if isinstance(raw, list):
        return "".join(_json_text_to_plain(part) for part in raw)
    if not isinstance(raw, str):
        return str(raw)

    text = raw.strip()
    if not text:
        return ""
    try:
        parsed = json.loads(text)
    except ValueError:
        return text
    if isinstance(parsed, str):
        return parsed
    if isinstance(parsed, (dict, list)):
        return _json_text_to_plain(parsed)
    return text


@dataclass(frozen=True)
class BlockEntity:
    """Block entity (tile entity) with integer position and opaque payload."""

    id: str
    pos: Tuple[int, int, int]
    data: Dict[str, Any] = field(default_factory=dict, compare=False)

    @property
    def is_sign(self) -> bool:
        return "sign" in self.id.lower()

    def sign_text(self) -> Optional[SignText]:
        """
        Extract sign text, supporting both the 1.20+ front_text/back_text
        compounds and the older Text1..Text4 strings.

        Returns:
            SignText, or None if this is not a sign or it carries no text
        """
        if not self.is_sign:
            return None

        front: List[str] = []
        back: List[str] = []

        for key, target in (("front_text", front), ("back_text", back)):
            compound = self.data.get(key)
            if isinstance(compound, dict):
                for message in compound.get("messages", []):
                    target.append(_json_text_to_plain(message))

        if not front:
            for i in range(1, 5):
                raw = self.data.get(f"Text{i}")
                if raw is None:
                    continue
                text = _json_text_to_plain(raw)
                if text:
                    front.append(text)

        if not front and not back:
            return None
        return SignText(front=tuple(front), back=tuple(back))


@dataclass(frozen=True)
class Entity:
    """Free entity with float position and opaque payload."""

    id: str
    pos: Tuple[float, float, float]
    data: Dict[str, Any] = field(default_factory=dict, compare=False)


@dataclass
class Metadata:
    name: Optional[str] = None
    author: Optional[str] = None
    date: Optional[int] = None
    required_mods: List[str] = field(default_factory=list)
    extra: Dict[str, Any] = field(default_factory=dict)


class VoxelGrid:
    """
    Dense, immutable voxel grid.

    Reads outside [0, width) x [0, height) x [0, length) return None ("absent")
    rather than raising.
    """

    def __init__(
        self,
        width: int,
        height: int,
        length: int,
        palette: Sequence[BlockRef],
        indices: np.ndarray,
        block_entities: Optional[Sequence[BlockEntity]] = None,
        entities: Optional[Sequence[Entity]] = None,
        metadata: Optional[Metadata] = None,
        format: Optional[SchematicFormat] = None,
        stats: Optional[DecodeStats] = None,
    ):
        if width < 0 or height < 0 or length < 0:
            raise ValueError(f"Negative grid dimensions {width}x{height}x{length}")

        volume = width * height * length
        indices = np.asarray(indices)
        if indices.size != volume:
            raise ValueError(
                f"Cell count {indices.size} does not match volume {volume} "
                f"({width}x{height}x{length})"
            )

        palette = tuple(palette) or (BlockRef.air(),)
        if volume and (indices.min() < 0 or indices.max() >= len(palette)):
            raise ValueError("Cell index outside palette range")

        self.width = int(width)
        self.height = int(height)
        self.length = int(length)
        self.palette: Tuple[BlockRef, ...] = palette
        self.indices = indices.astype(np.int32, copy=False).reshape(
            (self.height, self.length, self.width)
        )
        self.indices.flags.writeable = False
        self.block_entities: Tuple[BlockEntity, ...] = tuple(block_entities or ())
        self.entities: Tuple[Entity, ...] = tuple(entities or ())
        self.metadata = metadata or Metadata()
        self.format = format
        self.stats = stats or DecodeStats()

    @classmethod
    def from_blocks(
        cls, width: int, height: int, length: int, blocks: Sequence[BlockRef], **kwargs
    ) -> "VoxelGrid":
        """Build a grid from a flat, row-major list of BlockRef values."""
        volume = width * height * length
        if len(blocks) != volume:
            raise ValueError(f"Expected {volume} blocks, got {len(blocks)}")

        builder = GridBuilder(width, height, length)
        flat = builder.flat
        for i, block in enumerate(blocks):
            flat[i] = builder.palette_index(block)
        return builder.build(**kwargs)

    @property
    def volume(self) -> int:
        return self.width * self.height * self.length

    @property
    def shape(self) -> Tuple[int, int, int]:
        return (self.width, self.height, self.length)

    def dimensions_str(self) -> str:
        return f"{self.width}x{self.height}x{self.length}"

    def in_bounds(self, x: int, y: int, z: int) -> bool:
        return 0 <= x < self.width and 0 <= y < self.height and 0 <= z < self.length

    def index_of(self, x: int, y: int, z: int) -> int:
        return (y * self.length + z) * self.width + x

    def get(self, x: int, y: int, z: int) -> Optional[BlockRef]:
        if not self.in_bounds(x, y, z):
            return None
        return self.palette[self.indices[y, z, x]]

    def __len__(self) -> int:
        return self.volume

    def cells(self) -> List[BlockRef]:
        """Flat row-major list of every cell."""
        palette = self.palette
        return [palette[i] for i in self.indices.ravel()]

    def iter_blocks(self) -> Iterator[Tuple[int, int, int, BlockRef]]:
        """Yield (x, y, z, block) in y-major, then z, then x order."""
        palette = self.palette
        for y in range(self.height):
            for z in range(self.length):
                row = self.indices[y, z]
                for x in range(self.width):
                    yield x, y, z, palette[row[x]]

    def block_counts(self) -> Dict[str, int]:
        """Count cells per block name (state ignored)."""
        counts: Counter = Counter()
        ids, freq = np.unique(self.indices, return_counts=True)
        for idx, n in zip(ids, freq):
            counts[self.palette[idx].name] += int(n)
        return dict(counts)

    def unique_blocks(self) -> List[BlockRef]:
        """Distinct BlockRefs present in the grid, in first-appearance order."""
        if self.volume == 0:
            return []
        flat = self.indices.ravel()
        _, first = np.unique(flat, return_index=True)
        return [self.palette[flat[i]] for i in sorted(first)]

    def solid_blocks(self) -> int:
        """Number of non-air cells."""
        air = [i for i, block in enumerate(self.palette) if block.is_air]
        if not air:
            return self.volume
        return int(self.volume - np.isin(self.indices, air).sum())

    def signs(self) -> List[Tuple[BlockEntity, SignText]]:
        result = []
        for entity in self.block_entities:
            text = entity.sign_text()
            if text is not None:
                result.append((entity, text))
        return result

    def __repr__(self) -> str:
        fmt = self.format.value if self.format else "unknown"
        return f"VoxelGrid({self.dimensions_str()}, format={fmt}, palette={len(self.palette)})"


class GridBuilder:
    """
    Mutable accumulator used by decoders.

    Palette slot 0 is always air, so a freshly allocated (zeroed) index array
    is an all-air grid and any cell a decoder cannot fill stays air.
    """

    def __init__(self, width: int, height: int, length: int):
        self.width = width
        self.height = height
        self.length = length
        self.palette: List[BlockRef] = [BlockRef.air()]
        self._lookup: Dict[BlockRef, int] = {BlockRef.air(): 0}
        self.flat = np.zeros(width * height * length, dtype=np.int32)
        self.stats = DecodeStats()

    @property
    def volume(self) -> int:
        return self.flat.size

    def palette_index(self, block: BlockRef) -> int:
        idx = self._lookup.get(block)
        if idx is None:
            idx = len(self.palette)
            self.palette.append(block)
            self._lookup[block] = idx
        return idx

    def build(self, **kwargs) -> VoxelGrid:
        kwargs.setdefault("stats", self.stats)
        return VoxelGrid(
            self.width, self.height, self.length, self.palette, self.flat, **kwargs
        )
