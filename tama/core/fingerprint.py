"""
Tamagotchi - ROM Fingerprint

Detects which ROM revision is loaded by computing a CRC-32 over a fixed
window of the program and matching it against known checksums.
"""

from enum import Enum

from .program import Program
from .rom_utils import CRC_DETECTION_LENGTH, CRC_DETECTION_OFFSET, crc32


class RomVariant(Enum):
    """Known first-generation ROM revisions."""

    P1 = "p1"
    P2 = "p2"
    ANGEL = "angel"


# Checksums of the detection window for each known ROM dump
KNOWN_CHECKSUMS: dict[int, RomVariant] = {
    0xC7875F27: RomVariant.P1,
    0xBB79B1B2: RomVariant.P2,
    0x3CA006E6: RomVariant.ANGEL,
}

# Returned when no checksum matches
DEFAULT_VARIANT = RomVariant.P1


def fingerprint_crc(program: Program) -> int:
    """
    Compute the CRC-32 of the detection window.

    The window is read from the in-memory 16-bit word containers, so the
    checksum values only hold for the native layout the known dumps were
    measured with.

    Args:
        program: Loaded ROM program

    Returns:
        32-bit CRC value
    """
    window = program.native_bytes(CRC_DETECTION_OFFSET, CRC_DETECTION_LENGTH)
    return crc32(window)


def classify(program: Program) -> RomVariant:
    """
    Detect the ROM variant of a program.

    Never fails: unknown ROMs are reported as DEFAULT_VARIANT.
    """
    return KNOWN_CHECKSUMS.get(fingerprint_crc(program), DEFAULT_VARIANT)


def variant_to_label(variant: RomVariant) -> str:
    """Get the lowercase label of a variant (e.g. "p1")."""
    return variant.value


def label_to_variant(label: str) -> RomVariant | None:
    """
    Look up a variant by its exact label.

    Args:
        label: Lowercase variant label such as "p2" or "angel"

    Returns:
        Matching variant, or None if the label is unknown
    """
    for variant in RomVariant:
        if variant.value == label:
            return variant
    return None


def detect_label(program: Program) -> str:
    """Detect the ROM variant of a program and return its label."""
    return variant_to_label(classify(program))
