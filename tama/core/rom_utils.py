"""
Tamagotchi P1 ROM constants and word utilities.

This module provides:
- ROM layout constants (word mask, opcode classes)
- Sprite geometry constants (band height, border colour, capacity)
- Fingerprint window location
- Snapshot file constants (magic, version, slot template)
- Opcode class and CRC-32 helpers

Used by Program, the sprite map builder, the sprite sheet codec and the
state serializer.
"""

import zlib

# ROM layout constants
WORD_MASK = 0xFFF  # Upper 4 bits of the 16-bit container are always zero
BYTES_PER_WORD = 2
DEFAULT_ROM_PATH = "rom.bin"

# ============================================================================
# Opcode Classes (top nibble of a word)
# ============================================================================
OPCODE_LBPX = 0x9  # Load bitmap column: one 8-bit vertical pixel column
OPCODE_RETD = 0x1  # Return with data: terminates an LBPX run

# ============================================================================
# Sprite Geometry
# ============================================================================
SPRITE_HEIGHT = 8  # One bit per row in the low byte of each column word
SPRITE_BAND_HEIGHT = SPRITE_HEIGHT + 2  # Plus top and bottom border rows
SPRITE_BORDER = 1
MAX_SPRITES = 256

BORDER_COLOR = (0xFF, 0x00, 0x00, 0xFF)  # Opaque red

# ============================================================================
# Fingerprint Window
# ============================================================================
# This part of the program differs between P1 and P2 (at least) while not
# containing customizable data such as sprites.
CRC_DETECTION_OFFSET = 0x2F0  # Bytes, i.e. word 0x178
CRC_DETECTION_LENGTH = 0x110  # Bytes

# ============================================================================
# Snapshot Files
# ============================================================================
STATE_FILE_MAGIC = b"TLST"
STATE_FILE_VERSION = 1
STATE_TEMPLATE = "save{slot}.bin"

INT_SLOT_NUM = 6
MEMORY_SIZE = 4096  # 4-bit cells, RAM and I/O


def opcode_class(word: int) -> int:
    """
    Get the opcode class (top nibble) of a 12-bit word.

    Args:
        word: 12-bit ROM word

    Returns:
        Value in range 0x0-0xF
    """
    return (word >> 8) & 0xF


def crc32(data: bytes) -> int:
    """
    Compute the standard reflected CRC-32 of data.

    Polynomial 0xEDB88320, initial value 0xFFFFFFFF, final complement.
    This is the same checksum zlib and PNG use.

    Example:
        >>> hex(crc32(b"123456789"))
        '0xcbf43926'
    """
    return zlib.crc32(data) & 0xFFFFFFFF
