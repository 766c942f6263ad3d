"""
Tamagotchi - Sprite Map Builder

Sprites are not stored as a separate data block in the ROM: each one is a
routine made of LBPX instructions (one 8-pixel column each) terminated by a
RETD instruction, whose data byte is the sprite's last column. This module
scans the program for such runs and describes where each sprite lives.
"""

from dataclasses import dataclass, field
from typing import Iterator

from .errors import SpriteCapacityError
from .program import Program
from .rom_utils import (
    MAX_SPRITES,
    OPCODE_LBPX,
    OPCODE_RETD,
    SPRITE_BAND_HEIGHT,
    SPRITE_BORDER,
    SPRITE_HEIGHT,
    opcode_class,
)


@dataclass(frozen=True)
class SpriteDescriptor:
    """Location of one sprite in the program."""

    offset: int  # Word index of the first column
    width: int  # Number of columns, RETD column included
    height: int = SPRITE_HEIGHT

    @property
    def end(self) -> int:
        """Word index just past the last column."""
        return self.offset + self.width


@dataclass
class SpriteMap:
    """Ordered list of sprites found in a program."""

    sprites: list[SpriteDescriptor] = field(default_factory=list)
    max_width: int = 0

    def __len__(self) -> int:
        return len(self.sprites)

    def __iter__(self) -> Iterator[SpriteDescriptor]:
        return iter(self.sprites)

    def __getitem__(self, index: int) -> SpriteDescriptor:
        return self.sprites[index]

    @property
    def sheet_size(self) -> tuple[int, int]:
        """(width, height) in pixels of the sprite sheet for this map."""
        return (
            self.max_width + 2 * SPRITE_BORDER,
            len(self.sprites) * SPRITE_BAND_HEIGHT,
        )

    def columns(self, program: Program, index: int) -> list[int]:
        """Get the column words of one sprite."""
        sprite = self.sprites[index]
        return program[sprite.offset : sprite.end]


def build_sprite_map(program: Program, max_sprites: int = MAX_SPRITES) -> SpriteMap:
    """
    Scan a program for sprites.

    Consecutive LBPX words form a run; a RETD word right after a run closes
    it and is counted as the run's last column. Any other word drops the run.

    Args:
        program: Loaded ROM program
        max_sprites: Maximum number of sprites accepted

    Returns:
        SpriteMap ordered by ascending offset

    Raises:
        SpriteCapacityError: If the program holds more than max_sprites sprites
    """
    sprite_map = SpriteMap()
    width = 0

    for i, word in enumerate(program):
        opcode = opcode_class(word)

        if opcode == OPCODE_LBPX:
            width += 1
            continue

        if opcode == OPCODE_RETD and width != 0:
            if len(sprite_map.sprites) >= max_sprites:
                raise SpriteCapacityError(
                    f"Too many sprites: more than {max_sprites} "
                    f"(next one at word 0x{i - width:03X})"
                )

            sprite = SpriteDescriptor(offset=i - width, width=width + 1)
            sprite_map.sprites.append(sprite)
            sprite_map.max_width = max(sprite_map.max_width, sprite.width)

        width = 0

    return sprite_map
