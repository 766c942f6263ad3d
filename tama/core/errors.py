"""
TamaTool error hierarchy.

All exceptions inherit from TamaError so that tools can catch every
ROM, sprite sheet and snapshot failure with a single except clause:

    try:
        program = Program.load("rom.bin")
    except TamaError as e:
        print(f"Error: {e}")

Hierarchy:

    TamaError
    ├── RomFileError - ROM file cannot be opened, read or written
    ├── SpriteCapacityError - too many sprites in a ROM
    ├── SpriteImageError - sprite sheet file cannot be read or written
    ├── SpriteFormatError - sprite sheet does not match the ROM's sprite map
    └── StateFileError - snapshot file cannot be read or written
        ├── BadMagicError - not a snapshot file
        └── UnsupportedVersionError - snapshot written by another format version
"""


class TamaError(Exception):
    """Base exception for all TamaTool errors."""

    pass


class RomFileError(TamaError):
    """Raised when a ROM file cannot be loaded or saved."""

    pass


class SpriteCapacityError(TamaError):
    """Raised when a ROM contains more sprites than the sprite map can hold."""

    pass


class SpriteImageError(TamaError):
    """Raised when a sprite sheet image cannot be read or written."""

    pass


class SpriteFormatError(TamaError):
    """Raised when a sprite sheet does not match the ROM's sprite map."""

    pass


class StateFileError(TamaError):
    """Raised when a snapshot file cannot be read or written."""

    pass


class BadMagicError(StateFileError):
    """Raised when a snapshot file does not start with the expected magic."""

    def __init__(self, path: str, magic: bytes):
        self.path = path
        self.magic = magic
        super().__init__(f"Wrong state file magic {magic!r} in \"{path}\"")


class UnsupportedVersionError(StateFileError):
    """Raised when a snapshot file has a version this module cannot read."""

    def __init__(self, path: str, version: int, expected: int):
        self.path = path
        self.version = version
        self.expected = expected
        super().__init__(
            f"Unsupported version {version} (expected {expected}) "
            f"in state file \"{path}\""
        )
