"""
Schematic container decoders and the format-sniffing loader.
"""

from .base import SchematicDecoder
from .legacy import LegacyDecoder, decode_legacy
from .litematica import LitematicaDecoder, decode_litematica
from .loader import SchematicLoader, build_decoder, load_bytes, load_file
from .sponge import SpongeDecoder, decode_sponge

__all__ = [
    "LegacyDecoder",
    "LitematicaDecoder",
    "SchematicDecoder",
    "SchematicLoader",
    "SpongeDecoder",
    "build_decoder",
    "decode_legacy",
    "decode_litematica",
    "decode_sponge",
    "load_bytes",
    "load_file",
]
