"""
Tests for the MCEdit/Schematica legacy .schematic decoder.
"""

import numpy as np
import pytest
from conftest import (
    EIGHT_MATERIALS,
    build_legacy,
    build_sponge_v2,
    compound,
    cube_coords,
    double_list,
    int_tag,
    string,
    to_bytes,
)

from schemesh.errors import FormatError, GridTooLargeError
from schemesh.formats.legacy import LegacyDecoder, decode_legacy, expand_add_blocks
from schemesh.grid import SchematicFormat

# (id, damage) for EIGHT_MATERIALS in order
EIGHT_LEGACY = [(1, 0), (1, 1), (3, 0), (4, 0), (5, 0), (12, 0), (13, 0), (35, 0)]


class TestLegacyDecoder:
    """Test suite for LegacyDecoder."""

    def setup_method(self):
        """Set up the decoder under test."""
        self.decoder = LegacyDecoder()

    def test_round_trip_eight_materials(self):
        """Test that a 2x2x2 grid of 8 materials decodes to the same cells."""
        root = build_legacy(
            2, 2, 2, [i for i, _ in EIGHT_LEGACY], [d for _, d in EIGHT_LEGACY]
        )
        grid = decode_legacy(to_bytes(root, compress=True))

        assert grid.format is SchematicFormat.LEGACY
        assert grid.shape == (2, 2, 2)
        for (x, y, z), expected in zip(cube_coords(2), EIGHT_MATERIALS):
            assert grid.get(x, y, z).name == expected
        assert grid.stats.degraded == 0

    def test_uncompressed_input(self):
        """Test that raw (non-gzip) NBT decodes too."""
        root = build_legacy(1, 1, 1, [1])
        grid = self.decoder.decode_bytes(to_bytes(root))
        assert grid.get(0, 0, 0).name == "minecraft:stone"

    def test_damage_state_decoded(self):
        """Test that the damage nibble becomes block state."""
        root = build_legacy(1, 1, 1, [53], [0b0110])
        block = self.decoder.decode_bytes(to_bytes(root)).get(0, 0, 0)
        assert block.name == "minecraft:oak_stairs"
        assert block.get("half") == "top"

    def test_add_blocks_extend_ids(self):
        """Test that AddBlocks nibbles supply ID bits 8-11."""
        root = build_legacy(2, 1, 1, [0x01, 0x02], add_blocks=[0x21])
        grid = self.decoder.decode_bytes(to_bytes(root))
        assert grid.get(0, 0, 0).name == "minecraft:unknown_block_257"
        assert grid.get(1, 0, 0).name == "minecraft:unknown_block_514"

    def test_expand_add_blocks_nibble_order(self):
        """Test even cells use the low nibble and odd cells the high nibble."""
        nibbles = expand_add_blocks(bytes([0x21, 0x43]), 5)
        assert nibbles.tolist() == [1, 2, 3, 4, 0]

    def test_schematica_mapping_overrides_catalog(self):
        """Test that SchematicaMapping takes precedence over the built-in table."""
        root = build_legacy(2, 1, 1, [1, 4], mapping={"minecraft:diamond_block": 1})
        grid = self.decoder.decode_bytes(to_bytes(root))
        assert grid.get(0, 0, 0).name == "minecraft:diamond_block"
        assert grid.get(1, 0, 0).name == "minecraft:cobblestone"

    def test_short_blocks_array_pads_with_air(self):
        """Test that a truncated Blocks array leaves the tail as air."""
        root = build_legacy(2, 1, 2, [1, 1, 1])
        grid = self.decoder.decode_bytes(to_bytes(root))
        assert grid.get(1, 0, 1).is_air
        assert grid.get(0, 0, 1).name == "minecraft:stone"
        assert grid.stats.cells_padded == 1

    def test_missing_data_reads_as_zero(self):
        """Test that a schematic without a Data array decodes with damage 0."""
        root = build_legacy(1, 1, 1, [35], [14])
        root.tags = [tag for tag in root.tags if tag.name != "Data"]
        grid = self.decoder.decode_bytes(to_bytes(root))
        assert grid.get(0, 0, 0).name == "minecraft:white_wool"

    def test_tile_entities_and_entities(self):
        """Test that tile entities keep their position and entities need a Pos."""
        chest = compound(
            {"id": string("Chest"), "x": int_tag(1), "y": int_tag(0), "z": int_tag(0)}
        )
        sign = compound(
            {
                "id": string("Sign"),
                "x": int_tag(0),
                "y": int_tag(0),
                "z": int_tag(0),
                "Text1": string('{"text":"Welcome"}'),
            }
        )
        pig = compound({"id": string("Pig"), "Pos": double_list([0.5, 1.0, 0.5])})
        ghost = compound({"id": string("Ghost")})

        root = build_legacy(
            2, 1, 1, [54, 63], tile_entities=[chest, sign], entities=[pig, ghost]
        )
        grid = self.decoder.decode_bytes(to_bytes(root))

        assert [e.id for e in grid.block_entities] == ["Chest", "Sign"]
        assert grid.block_entities[0].pos == (1, 0, 0)
        assert grid.signs()[0][1].front_text == "Welcome"
        assert len(grid.entities) == 1
        assert grid.entities[0].pos == (0.5, 1.0, 0.5)

    def test_metadata_extra(self):
        """Test that Materials lands in metadata extra."""
        grid = self.decoder.decode_bytes(to_bytes(build_legacy(1, 1, 1, [1])))
        assert grid.metadata.extra["Materials"] == "Alpha"

    def test_rejects_sponge_schematic(self):
        """Test that a Sponge tree is reported as a format mismatch."""
        root = build_sponge_v2(1, 1, 1, ["minecraft:stone"], [0])
        assert not self.decoder.matches(root)
        with pytest.raises(FormatError):
            self.decoder.decode(root)

    def test_volume_limit(self):
        """Test that a declared volume over the limit is refused."""
        root = build_legacy(2, 2, 2, [1] * 8)
        with pytest.raises(GridTooLargeError):
            LegacyDecoder(max_volume=4).decode(root)

    def test_large_grid_vectorised(self):
        """Test a larger grid decodes every cell."""
        ids = np.tile([1, 4, 0, 5], 16 * 16 * 4).tolist()
        root = build_legacy(16, 16, 16, ids)
        grid = self.decoder.decode_bytes(to_bytes(root))
        assert grid.block_counts()["minecraft:cobblestone"] == 1024
        assert grid.get(3, 15, 15).name == "minecraft:oak_planks"
