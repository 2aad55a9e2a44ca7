"""
Format-sniffing schematic loader.

Reads the whole container, gunzips it if needed, parses the NBT tree once
and hands it to each decoder in the configured order. The first decoder that
accepts the structure wins; a decoder rejecting the structure with
FormatError simply passes control to the next one.
"""

import logging
from pathlib import Path
from typing import Dict, List, Optional, Type, Union

from schemesh.config import load_section
from schemesh.errors import FormatError, UnknownFormatError
from schemesh.formats.base import SchematicDecoder
from schemesh.formats.container import maybe_decompress, parse_nbt
from schemesh.formats.legacy import LegacyDecoder
from schemesh.formats.litematica import LitematicaDecoder
from schemesh.formats.sponge import SpongeDecoder
from schemesh.grid import VoxelGrid

logger = logging.getLogger(__name__)

DECODERS: Dict[str, Type[SchematicDecoder]] = {
    "litematica": LitematicaDecoder,
    "sponge_v3_wrapped": SpongeDecoder,
    "sponge": SpongeDecoder,
    "legacy": LegacyDecoder,
}


def build_decoder(name: str, max_volume: Optional[int] = None) -> SchematicDecoder:
    """Instantiate a decoder by its configured name."""
    if name not in DECODERS:
        raise ValueError(f"Unknown decoder {name!r}; expected one of {sorted(DECODERS)}")
    if name == "sponge_v3_wrapped":
        return SpongeDecoder(max_volume=max_volume, wrapped=True)
    return DECODERS[name](max_volume=max_volume)


class SchematicLoader:
    """
    Loads schematics of any supported format into a VoxelGrid.

    Decoder order and the volume limit come from the "loading" section of
    config.yaml.
    """

    def __init__(self, config_path: Optional[Path] = None):
        config = load_section("loading", config_path)
        self.max_volume: Optional[int] = config.get("max_volume")
        self.decoders: List[SchematicDecoder] = [
            build_decoder(name, self.max_volume) for name in config["decoder_order"]
        ]
        logger.debug(f"Decoder order: {[d.name for d in self.decoders]}")

    def load_bytes(self, data: bytes, source: str = "<bytes>") -> VoxelGrid:
        """
        Decode schematic bytes in any supported format.

        Args:
            data: Raw file contents, gzip-compressed or not
            source: Label used in log messages

        Returns:
            The decoded VoxelGrid

        Raises:
            UnknownFormatError: If no decoder accepts the container
            GridTooLargeError: If the declared volume exceeds max_volume
        """
        try:
            root = parse_nbt(maybe_decompress(data))
        except FormatError as e:
            logger.debug(f"{source}: not an NBT container ({e})")
            raise UnknownFormatError([d.name for d in self.decoders]) from e

        tried = []
        for decoder in self.decoders:
            tried.append(decoder.name)
            if not decoder.matches(root):
                logger.debug(f"{source}: {decoder.name} does not match")
                continue
            try:
                grid = decoder.decode(root)
            except FormatError as e:
                logger.debug(f"{source}: {decoder.name} rejected container: {e}")
                continue

            logger.info(
                f"Loaded {source} as {grid.format.value}: {grid.dimensions_str()}, "
                f"{len(grid.palette)} palette entries, {len(grid.block_entities)} block entities"
            )
            return grid

        raise UnknownFormatError(tried)

    def load_file(self, path: Union[str, Path]) -> VoxelGrid:
        """Read a schematic file and decode it. I/O errors propagate unchanged."""
        path = Path(path)
        with open(path, "rb") as f:
            data = f.read()
        return self.load_bytes(data, source=path.name)


def load_bytes(data: bytes, config_path: Optional[Path] = None) -> VoxelGrid:
    return SchematicLoader(config_path).load_bytes(data)


def load_file(path: Union[str, Path], config_path: Optional[Path] = None) -> VoxelGrid:
    return SchematicLoader(config_path).load_file(path)
