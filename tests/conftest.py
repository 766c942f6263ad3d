"""Shared pytest fixtures for ROM, sprite and state tests."""

import pytest

from tama.core.program import Program
from tama.core.sprite_map import build_sprite_map
from tama.core.state import EmulatorState, InterruptSlot

# Hand-crafted program with three sprites surrounded by other code:
#   words 2-4:   sprite 0, LBPX LBPX RETD (width 3)
#   word 5:      RETD without a preceding LBPX run (not a sprite)
#   words 6-7:   sprite 1, LBPX RETD (width 2)
#   words 9-10:  LBPX run broken by a non-RETD word at 11 (not a sprite)
#   words 12-15: sprite 2, LBPX x3 RETD (width 4)
SPRITE_PROGRAM_WORDS = [
    0x0AB, 0xFFF,
    0x9FF, 0x981, 0x1C3,
    0x123,
    0x955, 0x1AA,
    0x5A5,
    0x901, 0x902, 0x2FF,
    0x910, 0x920, 0x940, 0x180,
    0xE00,
]


@pytest.fixture
def sprite_program():
    """Program with three sprites of widths 3, 2 and 4."""
    return Program(SPRITE_PROGRAM_WORDS)


@pytest.fixture
def sprite_map(sprite_program):
    """Sprite map of the hand-crafted sprite program."""
    return build_sprite_map(sprite_program)


@pytest.fixture
def patterned_program():
    """
    Larger program with many sprites and varied pixel data.

    Every sprite is followed by a non-sprite word whose value must never
    change through an extract/inject round trip.
    """
    words = []
    for i in range(40):
        width = 1 + i % 7
        for col in range(width):
            words.append(0x900 | ((i * 37 + col * 11) & 0xFF))
        words.append(0x100 | ((i * 53) & 0xFF))
        words.append(0x3C0 | (i & 0x3F))
    return Program(words)


@pytest.fixture
def populated_state():
    """Emulator state with every field set to a non-default value."""
    state = EmulatorState(
        pc=0x1ABC,
        x=0xDEF,
        y=0x123,
        a=0x9,
        b=0x6,
        np=0x15,
        sp=0xC7,
        flags=0xA,
        tick_counter=0x12345678,
        clk_timer_timestamp=0x0BADF00D,
        prog_timer_timestamp=0xCAFEBABE,
        prog_timer_enabled=1,
        prog_timer_data=0x42,
        prog_timer_rld=0x99,
        call_depth=3,
    )
    state.interrupts = [
        InterruptSlot(factor_flag_reg=i & 0xF, mask_reg=(15 - i) & 0xF, triggered=i % 2)
        for i in range(6)
    ]
    state.memory = [(i * 7) & 0xF for i in range(4096)]
    return state
