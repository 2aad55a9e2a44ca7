"""
Tests for the Sponge v2/v3 .schem decoder and its varint reader.
"""

import pytest
from conftest import (
    EIGHT_MATERIALS,
    build_legacy,
    build_sponge_v2,
    build_sponge_v3,
    compound,
    compound_list,
    cube_coords,
    double_list,
    encode_varint,
    int_array,
    int_tag,
    string,
    to_bytes,
)

from schemesh.errors import FormatError
from schemesh.formats.sponge import SpongeDecoder, decode_sponge, decode_varints, read_varint
from schemesh.grid import DecodeStats, SchematicFormat


class TestVarints:
    """Test suite for the bounds-checked varint reader."""

    def test_single_and_multi_byte(self):
        """Test one-byte and multi-byte values."""
        assert read_varint(b"\x05", 0) == (5, 1, False)
        assert read_varint(b"\xac\x02", 0) == (300, 2, False)
        assert read_varint(b"\xff\xff\xff\xff\x0f", 0) == (0xFFFFFFFF, 5, False)

    def test_overlong_value_is_flagged(self):
        """Test that a varint needing more than 32 bits is malformed."""
        value, offset, overflowed = read_varint(b"\xff\xff\xff\xff\xff\x01", 0)
        assert value is None
        assert overflowed
        assert offset == 5

    def test_stream_end_mid_value(self):
        """Test that running out of bytes mid-value is not an overflow."""
        assert read_varint(b"\x80\x80", 0) == (None, 2, False)

    def test_decode_stops_at_count(self):
        """Test that decoding never reads past the requested count."""
        data = b"".join(encode_varint(v) for v in [1, 2, 300, 4, 5])
        values = decode_varints(data, 3)
        assert values.tolist() == [1, 2, 300]

    def test_decode_pads_truncated_stream(self):
        """Test that a short stream pads remaining cells."""
        stats = DecodeStats()
        values = decode_varints(encode_varint(200), 4, stats)
        assert values.tolist() == [200, -1, -1, -1]
        assert stats.cells_padded == 3


class TestSpongeDecoder:
    """Test suite for SpongeDecoder."""

    def setup_method(self):
        """Set up direct and wrapped decoders."""
        self.decoder = SpongeDecoder()
        self.wrapped = SpongeDecoder(wrapped=True)

    def _assert_eight(self, grid):
        for (x, y, z), expected in zip(cube_coords(2), EIGHT_MATERIALS):
            assert grid.get(x, y, z).name == expected

    def test_round_trip_v2(self):
        """Test a v2 2x2x2 grid of 8 materials."""
        root = build_sponge_v2(2, 2, 2, EIGHT_MATERIALS, list(range(8)))
        grid = self.decoder.decode_bytes(to_bytes(root, compress=True))
        assert grid.format is SchematicFormat.SPONGE_V2
        self._assert_eight(grid)

    def test_round_trip_v3(self):
        """Test a v3 2x2x2 grid of 8 materials with the nested Blocks compound."""
        root = build_sponge_v3(2, 2, 2, EIGHT_MATERIALS, list(range(8)))
        grid = self.decoder.decode_bytes(to_bytes(root, compress=True))
        assert grid.format is SchematicFormat.SPONGE_V3
        self._assert_eight(grid)

    def test_round_trip_v3_wrapped(self):
        """Test a v3 grid wrapped in an outer Schematic compound."""
        root = build_sponge_v3(2, 2, 2, EIGHT_MATERIALS, list(range(8)), wrapped=True)
        assert self.wrapped.matches(root)
        assert not self.decoder.matches(root)
        grid = self.wrapped.decode_bytes(to_bytes(root))
        self._assert_eight(grid)
        assert decode_sponge(to_bytes(root)).format is SchematicFormat.SPONGE_V3

    def test_wrapped_decoder_rejects_unwrapped(self):
        """Test that the wrapped decoder reports a plain tree as a mismatch."""
        root = build_sponge_v3(1, 1, 1, ["minecraft:stone"], [0])
        with pytest.raises(FormatError):
            self.wrapped.decode(root)

    def test_palette_state_parsed(self):
        """Test that palette keys are parsed into name and state."""
        root = build_sponge_v2(1, 1, 1, ["minecraft:oak_stairs[half=top,facing=east]"], [0])
        block = self.decoder.decode_bytes(to_bytes(root)).get(0, 0, 0)
        assert block.name == "minecraft:oak_stairs"
        assert block.properties == {"facing": "east", "half": "top"}

    def test_large_palette_multi_byte_varints(self):
        """Test palette ids above 127 that need two varint bytes."""
        palette = ["minecraft:air"] + [f"minecraft:block_{i}" for i in range(1, 200)]
        root = build_sponge_v2(3, 1, 1, palette, [150, 3, 199])
        grid = self.decoder.decode_bytes(to_bytes(root))
        assert grid.get(0, 0, 0).name == "minecraft:block_150"
        assert grid.get(1, 0, 0).name == "minecraft:block_3"
        assert grid.get(2, 0, 0).name == "minecraft:block_199"

    def test_unterminated_varint_at_stream_end(self):
        """Test that a dangling continuation bit ends decoding with air, not a crash."""
        root = build_sponge_v2(
            2, 1, 2, ["minecraft:air", "minecraft:stone"], block_data=b"\x01\x01\x80\x80"
        )
        grid = self.decoder.decode_bytes(to_bytes(root))
        assert grid.get(0, 0, 0).name == "minecraft:stone"
        assert grid.get(1, 0, 0).name == "minecraft:stone"
        assert grid.get(0, 0, 1).is_air
        assert grid.get(1, 0, 1).is_air
        assert len(grid.cells()) == 4
        assert grid.stats.cells_padded == 2

    def test_overlong_varint_costs_one_cell(self):
        """Test that a malformed varint degrades only its own cell."""
        root = build_sponge_v2(
            3,
            1,
            1,
            ["minecraft:air", "minecraft:stone"],
            block_data=b"\xff\xff\xff\xff\xff\x01\x01",
        )
        grid = self.decoder.decode_bytes(to_bytes(root))
        assert grid.get(0, 0, 0).is_air
        assert grid.get(1, 0, 0).name == "minecraft:stone"
        assert grid.get(2, 0, 0).name == "minecraft:stone"
        assert grid.stats.bad_varints == 1

    def test_palette_index_out_of_range(self):
        """Test that indices beyond the palette become air and are counted."""
        root = build_sponge_v2(3, 1, 1, ["minecraft:air", "minecraft:stone"], [1, 5, 1])
        grid = self.decoder.decode_bytes(to_bytes(root))
        assert grid.get(1, 0, 0).is_air
        assert grid.stats.bad_palette_indices == 1

    def test_block_entities_v3(self):
        """Test v3 block entities with an int Pos array inside Blocks."""
        chest = compound(
            {
                "Id": string("minecraft:chest"),
                "Pos": int_array([1, 0, 1]),
                "Data": compound({"CustomName": string("Loot")}),
            }
        )
        zombie = compound({"Id": string("minecraft:zombie"), "Pos": double_list([1.5, 0, 1.5])})
        root = build_sponge_v3(
            2,
            1,
            2,
            ["minecraft:air", "minecraft:chest"],
            [0, 0, 0, 1],
            block_entities=[chest],
            entities=[zombie],
        )
        grid = self.decoder.decode_bytes(to_bytes(root))

        entity = grid.block_entities[0]
        assert entity.id == "minecraft:chest"
        assert entity.pos == (1, 0, 1)
        assert entity.data["Data"]["CustomName"] == "Loot"
        assert grid.entities[0].id == "minecraft:zombie"
        assert grid.entities[0].pos == (1.5, 0.0, 1.5)

    def test_v2_tile_entities_fallback(self):
        """Test that v2 files may use TileEntities and x/y/z positions."""
        root = build_sponge_v2(1, 1, 1, ["minecraft:chest"], [0])
        root.tags = [tag for tag in root.tags if tag.name != "BlockEntities"]
        chest = compound(
            {"id": string("minecraft:chest"), "x": int_tag(0), "y": int_tag(0), "z": int_tag(0)}
        )
        root["TileEntities"] = compound_list([chest])
        grid = self.decoder.decode_bytes(to_bytes(root))
        assert grid.block_entities[0].pos == (0, 0, 0)

    def test_metadata(self):
        """Test Name/Author/Date/RequiredMods and the extra bag."""
        root = build_sponge_v2(1, 1, 1, ["minecraft:stone"], [0])
        metadata = self.decoder.decode_bytes(to_bytes(root)).metadata
        assert metadata.name == "Test Build"
        assert metadata.author == "tester"
        assert metadata.date == 1700000000000
        assert metadata.required_mods == ["worldedit"]
        assert metadata.extra["WEOffsetX"] == -1
        assert metadata.extra["Offset"] == [0, 0, 0]
        assert metadata.extra["DataVersion"] == 2586

    def test_rejects_legacy_schematic(self):
        """Test that a legacy tree (no Version) is a format mismatch."""
        root = build_legacy(1, 1, 1, [1])
        assert not self.decoder.matches(root)
        with pytest.raises(FormatError):
            self.decoder.decode(root)

    def test_missing_block_data_is_all_air(self):
        """Test that a schematic with no block data decodes as padded air."""
        root = build_sponge_v2(2, 1, 1, ["minecraft:stone"], [0, 0])
        root.tags = [tag for tag in root.tags if tag.name != "BlockData"]
        grid = self.decoder.decode_bytes(to_bytes(root))
        assert all(block.is_air for block in grid.cells())
        assert grid.stats.cells_padded == 2
