"""
Tamagotchi - Sprite Sheet Codec

Converts the sprites of a ROM to and from a single PNG sprite sheet.

Each sprite gets a 10 pixel tall band: a red border row, the 8 sprite
rows, and another red border row, with a red border column on both sides.
Inside the border only the alpha channel carries data: an opaque pixel is a
set bit, a transparent one a cleared bit. Colours are ignored when reading
a sheet back, so any editor that keeps alpha intact can be used.
"""

import numpy as np

try:
    from PIL import Image
except ImportError:
    raise ImportError("Pillow library required. Install with: pip install Pillow")

from ..core.errors import SpriteFormatError, SpriteImageError
from ..core.program import Program
from ..core.rom_utils import (
    BORDER_COLOR,
    SPRITE_BAND_HEIGHT,
    SPRITE_BORDER,
    SPRITE_HEIGHT,
)
from ..core.sprite_map import SpriteMap

# Bit value of each sprite row, as a column vector
_ROW_BITS = (1 << np.arange(SPRITE_HEIGHT, dtype=np.uint16))[:, None]
_ROW_SHIFTS = np.arange(SPRITE_HEIGHT, dtype=np.uint16)[:, None]

# Bits 8-11 of a column word are the opcode and must survive injection
_OPCODE_BITS = np.uint16(0xF00)


def render_sprite_sheet(program: Program, sprite_map: SpriteMap) -> Image.Image:
    """
    Render all sprites of a program to an RGBA image.

    Args:
        program: Loaded ROM program
        sprite_map: Sprite map built from the same program

    Returns:
        PIL Image of size sprite_map.sheet_size

    Raises:
        SpriteFormatError: If the map contains no sprites
    """
    if len(sprite_map) == 0:
        raise SpriteFormatError("No sprites found in ROM")

    width, height = sprite_map.sheet_size
    pixels = np.zeros((height, width, 4), dtype=np.uint8)

    for i, sprite in enumerate(sprite_map):
        band = pixels[i * SPRITE_BAND_HEIGHT : (i + 1) * SPRITE_BAND_HEIGHT]
        right = sprite.width + SPRITE_BORDER

        # Bounds
        band[:, 0] = BORDER_COLOR
        band[:, right] = BORDER_COLOR
        band[0, : right + 1] = BORDER_COLOR
        band[SPRITE_BAND_HEIGHT - 1, : right + 1] = BORDER_COLOR

        # Sprite: row k is bit k of each column word, RGB stays black
        columns = program.words[sprite.offset : sprite.end]
        bits = (columns[None, :] >> _ROW_SHIFTS) & 1
        interior = band[SPRITE_BORDER : SPRITE_BORDER + SPRITE_HEIGHT, SPRITE_BORDER:right]
        interior[:, :, 3] = (bits * 0xFF).astype(np.uint8)

    return Image.fromarray(pixels)


def apply_sprite_sheet(program: Program, sprite_map: SpriteMap, image: Image.Image):
    """
    Write the sprites of a sheet image back into a program.

    The image is fully validated against the sprite map before the first
    word is modified.

    Args:
        program: ROM program to modify in place
        sprite_map: Sprite map built from the same program
        image: Sprite sheet, as produced by render_sprite_sheet()

    Raises:
        SpriteFormatError: If the image has no alpha channel, or its size
            does not match the sprite map
    """
    if "A" not in image.getbands() and "transparency" not in image.info:
        raise SpriteFormatError(f"Sprite sheet has no alpha channel (mode {image.mode})")

    expected_width = sprite_map.sheet_size[0]
    if image.width != expected_width:
        raise SpriteFormatError(
            f"Invalid image width ({image.width} != {expected_width})"
        )

    sprite_count = image.height // SPRITE_BAND_HEIGHT
    if sprite_count != len(sprite_map):
        raise SpriteFormatError(
            f"Invalid number of sprites ({sprite_count} != {len(sprite_map)})"
        )

    # Use alpha channel only
    alpha = np.asarray(image.convert("RGBA"))[:, :, 3]

    for i, sprite in enumerate(sprite_map):
        top = i * SPRITE_BAND_HEIGHT + SPRITE_BORDER
        bits = alpha[top : top + SPRITE_HEIGHT, SPRITE_BORDER : sprite.width + SPRITE_BORDER] != 0
        values = (bits.astype(np.uint16) * _ROW_BITS).sum(axis=0, dtype=np.uint16)

        columns = program.words[sprite.offset : sprite.end]
        program.words[sprite.offset : sprite.end] = (columns & _OPCODE_BITS) | values


def extract_sprites(program: Program, sprite_map: SpriteMap, path: str):
    """
    Save all sprites of a program to a PNG sprite sheet.

    Args:
        program: Loaded ROM program
        sprite_map: Sprite map built from the same program
        path: Output PNG file

    Raises:
        SpriteFormatError: If the map contains no sprites
        SpriteImageError: If the file cannot be written
    """
    image = render_sprite_sheet(program, sprite_map)

    print(
        f"Writing {len(sprite_map)} sprites to file {path} "
        f"({image.width}x{image.height} px)..."
    )
    try:
        image.save(path, format="PNG")
    except OSError as e:
        raise SpriteImageError(f"Cannot write sprite sheet \"{path}\": {e}") from e


def inject_sprites(program: Program, sprite_map: SpriteMap, path: str):
    """
    Replace the sprites of a program with those of a PNG sprite sheet.

    The program is left unmodified if the file cannot be read or does
    not match the sprite map.

    Args:
        program: ROM program to modify in place
        sprite_map: Sprite map built from the same program
        path: Sprite sheet file

    Raises:
        SpriteImageError: If the file cannot be opened or decoded
        SpriteFormatError: If the sheet does not match the sprite map
    """
    try:
        with Image.open(path) as f:
            f.load()
            image = f.copy()
    except OSError as e:
        raise SpriteImageError(f"Cannot read sprite sheet \"{path}\": {e}") from e

    print(
        f"Reading {image.height // SPRITE_BAND_HEIGHT} sprites from file {path} "
        f"({image.width}x{image.height} px)..."
    )
    apply_sprite_sheet(program, sprite_map, image)
