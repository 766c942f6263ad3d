"""Unit tests for ROM variant detection."""

import zlib

import pytest

from tama.core import fingerprint
from tama.core.fingerprint import (
    DEFAULT_VARIANT,
    KNOWN_CHECKSUMS,
    RomVariant,
    classify,
    detect_label,
    fingerprint_crc,
    label_to_variant,
    variant_to_label,
)
from tama.core.program import Program

WINDOW_START = 0x178  # First word of the detection window
WINDOW_END = 0x200  # One past the last word (0x178 + 0x110 / 2)


@pytest.fixture
def rom():
    """Program large enough to contain the detection window."""
    return Program([(i * 29) & 0xFFF for i in range(0x400)])


class TestFingerprintCrc:
    """Tests for fingerprint_crc()."""

    def test_matches_zlib_over_window(self, rom):
        window = rom.words[WINDOW_START:WINDOW_END].tobytes()
        assert fingerprint_crc(rom) == zlib.crc32(window)

    def test_deterministic(self, rom):
        assert fingerprint_crc(rom) == fingerprint_crc(rom.copy())

    @pytest.mark.parametrize("index", [WINDOW_START, 0x1C0, WINDOW_END - 1])
    def test_change_inside_window_changes_crc(self, rom, index):
        before = fingerprint_crc(rom)
        rom[index] = rom[index] ^ 0x001
        assert fingerprint_crc(rom) != before

    @pytest.mark.parametrize("index", [0, WINDOW_START - 1, WINDOW_END, 0x3FF])
    def test_change_outside_window_keeps_crc(self, rom, index):
        before = fingerprint_crc(rom)
        rom[index] = rom[index] ^ 0xFFF
        assert fingerprint_crc(rom) == before

    def test_short_program(self):
        """A program ending before the window checksums whatever it has."""
        assert fingerprint_crc(Program([1, 2, 3])) == zlib.crc32(b"")


class TestClassify:
    """Tests for classify()."""

    def test_unknown_rom_falls_back(self, rom):
        assert classify(rom) == DEFAULT_VARIANT == RomVariant.P1

    def test_known_checksum(self, rom, monkeypatch):
        monkeypatch.setitem(fingerprint.KNOWN_CHECKSUMS, fingerprint_crc(rom), RomVariant.ANGEL)
        assert classify(rom) == RomVariant.ANGEL
        assert detect_label(rom) == "angel"

    def test_known_checksums_table(self):
        assert KNOWN_CHECKSUMS == {
            0xC7875F27: RomVariant.P1,
            0xBB79B1B2: RomVariant.P2,
            0x3CA006E6: RomVariant.ANGEL,
        }


class TestLabels:
    """Tests for variant_to_label() and label_to_variant()."""

    @pytest.mark.parametrize(
        "variant,label",
        [(RomVariant.P1, "p1"), (RomVariant.P2, "p2"), (RomVariant.ANGEL, "angel")],
    )
    def test_mapping(self, variant, label):
        assert variant_to_label(variant) == label
        assert label_to_variant(label) == variant

    @pytest.mark.parametrize("label", ["P1", "p3", "", "angel "])
    def test_unknown_label(self, label):
        assert label_to_variant(label) is None
