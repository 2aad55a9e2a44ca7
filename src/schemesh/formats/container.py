"""
NBT container helpers shared by every schematic decoder.

Wraps the `nbt` library: gzip sniffing, tree parsing with a single error type,
typed accessors that return None instead of raising on a schema mismatch,
and conversion of opaque payloads to plain Python values.
"""

import gzip
import io
import logging
import struct
import zlib
from typing import Any, Dict, List, Optional, Tuple

from nbt import nbt

from schemesh.errors import FormatError

logger = logging.getLogger(__name__)

GZIP_MAGIC = b"\x1f\x8b"

INT_TAGS = (nbt.TAG_Byte, nbt.TAG_Short, nbt.TAG_Int, nbt.TAG_Long)
ARRAY_TAGS = (nbt.TAG_Byte_Array, nbt.TAG_Int_Array, nbt.TAG_Long_Array)

UINT64_MASK = (1 << 64) - 1


def maybe_decompress(data: bytes) -> bytes:
    """
    Gunzip the data if it starts with the gzip magic bytes.

    Non-gzip input is returned unchanged.

    Raises:
        FormatError: If the data claims to be gzip but cannot be decompressed
    """
    if not data.startswith(GZIP_MAGIC):
        return data
    try:
        return gzip.decompress(data)
    except (OSError, EOFError, zlib.error) as e:
        raise FormatError(f"Corrupt gzip stream: {e}")


def parse_nbt(data: bytes) -> nbt.NBTFile:
    """
    Parse an uncompressed NBT tree.

    Raises:
        FormatError: If the bytes are not a well-formed NBT compound
    """
    try:
        return nbt.NBTFile(buffer=io.BytesIO(data))
    except (
        nbt.MalformedFileError,
        struct.error,
        ValueError,
        UnicodeDecodeError,
        KeyError,
        IndexError,
    ) as e:
        raise FormatError(f"Malformed NBT: {e}")


def to_python(tag: nbt.TAG) -> Any:
    """Recursively convert an NBT tag into plain Python values."""
    if isinstance(tag, nbt.TAG_Compound):
        return {child.name: to_python(child) for child in tag.tags}
    if isinstance(tag, nbt.TAG_List):
        return [to_python(child) for child in tag.tags]
    if isinstance(tag, ARRAY_TAGS):
        return list(tag.value)
    return tag.value


def payload(compound: nbt.TAG_Compound, exclude: Tuple[str, ...] = ()) -> Dict[str, Any]:
    """Plain-Python copy of a compound without the listed keys."""
    return {
        child.name: to_python(child)
        for child in compound.tags
        if child.name not in exclude
    }


def get_tag(compound: Any, *keys: str, types: Tuple[type, ...] = (nbt.TAG,)):
    """First present child among `keys` that is an instance of `types`."""
    if not isinstance(compound, nbt.TAG_Compound):
        return None
    for key in keys:
        if key in compound:
            tag = compound[key]
            if isinstance(tag, types):
                return tag
    return None


def get_int(compound: Any, *keys: str) -> Optional[int]:
    tag = get_tag(compound, *keys, types=INT_TAGS)
    return None if tag is None else int(tag.value)


def get_str(compound: Any, *keys: str) -> Optional[str]:
    tag = get_tag(compound, *keys, types=(nbt.TAG_String,))
    return None if tag is None else tag.value


def get_compound(compound: Any, *keys: str) -> Optional[nbt.TAG_Compound]:
    return get_tag(compound, *keys, types=(nbt.TAG_Compound,))


def get_list(compound: Any, *keys: str) -> List[nbt.TAG]:
    """Children of a list tag, or an empty list when absent."""
    tag = get_tag(compound, *keys, types=(nbt.TAG_List,))
    return [] if tag is None else list(tag.tags)


def get_array(compound: Any, *keys: str, types: Tuple[type, ...] = ARRAY_TAGS):
    """Value of an array tag (bytearray or list of ints), or None."""
    tag = get_tag(compound, *keys, types=types)
    return None if tag is None else tag.value


def get_xyz(compound: Any, key: str) -> Optional[Tuple[int, int, int]]:
    """Read an {x, y, z} int compound such as a Litematica Position/Size."""
    inner = get_compound(compound, key)
    if inner is None:
        return None
    x, y, z = get_int(inner, "x"), get_int(inner, "y"), get_int(inner, "z")
    if x is None or y is None or z is None:
        return None
    return (x, y, z)


def get_pos(compound: Any, key: str = "Pos") -> Optional[Tuple[float, float, float]]:
    """Read a 3-element numeric list/array position."""
    tag = get_tag(compound, key, types=(nbt.TAG_List,) + ARRAY_TAGS)
    if tag is None:
        return None
    values = to_python(tag)
    if len(values) < 3:
        return None
    try:
        return (float(values[0]), float(values[1]), float(values[2]))
    except (TypeError, ValueError):
        return None
