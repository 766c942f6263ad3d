"""
Core ROM functionality.

This package contains ROM loading and saving, ROM variant detection,
sprite map scanning, and emulation state snapshots for first-generation
Tamagotchi ROMs.
"""

from .errors import (
    BadMagicError,
    RomFileError,
    SpriteCapacityError,
    SpriteFormatError,
    SpriteImageError,
    StateFileError,
    TamaError,
    UnsupportedVersionError,
)
from .fingerprint import (
    RomVariant,
    classify,
    detect_label,
    label_to_variant,
    variant_to_label,
)
from .program import Program
from .sprite_map import SpriteDescriptor, SpriteMap, build_sprite_map
from .state import (
    EmulatorState,
    InterruptSlot,
    SnapshotSlots,
    StateProvider,
    load_state,
    save_state,
)

__all__ = [
    "TamaError",
    "RomFileError",
    "SpriteCapacityError",
    "SpriteFormatError",
    "SpriteImageError",
    "StateFileError",
    "BadMagicError",
    "UnsupportedVersionError",
    "RomVariant",
    "classify",
    "detect_label",
    "label_to_variant",
    "variant_to_label",
    "Program",
    "SpriteDescriptor",
    "SpriteMap",
    "build_sprite_map",
    "EmulatorState",
    "InterruptSlot",
    "SnapshotSlots",
    "StateProvider",
    "load_state",
    "save_state",
]
