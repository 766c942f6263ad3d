"""
Tamagotchi - Emulation State Snapshots

Saves and restores the complete runtime state of the emulated CPU
(registers, timers, interrupt latches, RAM/IO memory) to a small
versioned binary file.

File layout (all multi-byte values little-endian):

    "TLST"                magic (4 bytes)
    version               1 byte
    registers and timers  REGISTER_FIELDS order, each 1, 2 or 4 bytes
    interrupt slots       INT_SLOT_NUM x {factor_flag_reg, mask_reg, triggered}
    memory                MEMORY_SIZE bytes, one 4-bit cell per byte

Every value is masked to its declared width on write and on read.
"""

from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Callable, MutableSequence, Sequence

from .errors import BadMagicError, StateFileError, UnsupportedVersionError
from .rom_utils import (
    INT_SLOT_NUM,
    MEMORY_SIZE,
    STATE_FILE_MAGIC,
    STATE_FILE_VERSION,
    STATE_TEMPLATE,
)

# (attribute, size in bytes, mask) in file order
REGISTER_FIELDS: list[tuple[str, int, int]] = [
    ("pc", 2, 0x1FFF),
    ("x", 2, 0xFFF),
    ("y", 2, 0xFFF),
    ("a", 1, 0xF),
    ("b", 1, 0xF),
    ("np", 1, 0x1F),
    ("sp", 1, 0xFF),
    ("flags", 1, 0xF),
    ("tick_counter", 4, 0xFFFFFFFF),
    ("clk_timer_timestamp", 4, 0xFFFFFFFF),
    ("prog_timer_timestamp", 4, 0xFFFFFFFF),
    ("prog_timer_enabled", 1, 0x1),
    ("prog_timer_data", 1, 0xFF),
    ("prog_timer_rld", 1, 0xFF),
    ("call_depth", 4, 0xFFFFFFFF),
]

INTERRUPT_FIELDS: list[tuple[str, int, int]] = [
    ("factor_flag_reg", 1, 0xF),
    ("mask_reg", 1, 0xF),
    ("triggered", 1, 0x1),
]

MEMORY_CELL_MASK = 0xF

HEADER_SIZE = len(STATE_FILE_MAGIC) + 1
REGISTERS_SIZE = sum(size for _, size, _ in REGISTER_FIELDS)
INTERRUPT_SLOT_SIZE = sum(size for _, size, _ in INTERRUPT_FIELDS)
STATE_FILE_SIZE = (
    HEADER_SIZE + REGISTERS_SIZE + INT_SLOT_NUM * INTERRUPT_SLOT_SIZE + MEMORY_SIZE
)


@dataclass
class InterruptSlot:
    """Latches of one interrupt source."""

    factor_flag_reg: int = 0
    mask_reg: int = 0
    triggered: int = 0


class StateProvider(ABC):
    """
    Emulation state that can be snapshotted.

    Implementations expose every register, timer and memory cell as a
    plain attribute. The serializer never looks further than this
    interface, so any CPU core can be saved as long as it provides it.
    """

    pc: int
    x: int
    y: int
    a: int
    b: int
    np: int
    sp: int
    flags: int
    tick_counter: int
    clk_timer_timestamp: int
    prog_timer_timestamp: int
    prog_timer_enabled: int
    prog_timer_data: int
    prog_timer_rld: int
    call_depth: int
    interrupts: Sequence[InterruptSlot]
    memory: MutableSequence[int]

    @abstractmethod
    def refresh_hw(self) -> None:
        """
        Refresh any hardware view derived from the state.

        Called once after a snapshot has been loaded, e.g. to redraw the
        LCD from display memory.
        """
        pass


@dataclass
class EmulatorState(StateProvider):
    """In-memory emulation state with default power-on values."""

    pc: int = 0
    x: int = 0
    y: int = 0
    a: int = 0
    b: int = 0
    np: int = 0
    sp: int = 0
    flags: int = 0
    tick_counter: int = 0
    clk_timer_timestamp: int = 0
    prog_timer_timestamp: int = 0
    prog_timer_enabled: int = 0
    prog_timer_data: int = 0
    prog_timer_rld: int = 0
    call_depth: int = 0
    interrupts: list[InterruptSlot] = field(
        default_factory=lambda: [InterruptSlot() for _ in range(INT_SLOT_NUM)]
    )
    memory: list[int] = field(default_factory=lambda: [0] * MEMORY_SIZE)
    on_refresh: Callable[[], None] | None = field(
        default=None, repr=False, compare=False
    )

    def refresh_hw(self) -> None:
        if self.on_refresh is not None:
            self.on_refresh()


def _check_layout(state: StateProvider):
    """Raise ValueError if the state does not match the fixed file layout."""
    if len(state.interrupts) != INT_SLOT_NUM:
        raise ValueError(
            f"Expected {INT_SLOT_NUM} interrupt slots, got {len(state.interrupts)}"
        )
    if len(state.memory) != MEMORY_SIZE:
        raise ValueError(
            f"Expected {MEMORY_SIZE} memory cells, got {len(state.memory)}"
        )


def encode_state(state: StateProvider) -> bytes:
    """
    Serialize a state into snapshot file bytes.

    Raises:
        ValueError: If the state has the wrong number of interrupt slots
            or memory cells
    """
    _check_layout(state)

    out = bytearray(STATE_FILE_MAGIC)
    out.append(STATE_FILE_VERSION & 0xFF)

    for name, size, mask in REGISTER_FIELDS:
        out += (int(getattr(state, name)) & mask).to_bytes(size, "little")

    for slot in state.interrupts:
        for name, size, mask in INTERRUPT_FIELDS:
            out += (int(getattr(slot, name)) & mask).to_bytes(size, "little")

    out += bytes(int(cell) & MEMORY_CELL_MASK for cell in state.memory)
    return bytes(out)


def decode_state(data: bytes, path: str = "<bytes>") -> dict[str, Any]:
    """
    Parse snapshot file bytes without touching any state.

    Args:
        data: Snapshot file content
        path: File name used in error messages

    Returns:
        Dictionary with one entry per REGISTER_FIELDS attribute, plus
        "interrupts" (list of dicts) and "memory" (list of ints)

    Raises:
        BadMagicError: If the magic does not match
        UnsupportedVersionError: If the version is not STATE_FILE_VERSION
        StateFileError: If the file is truncated
    """
    magic = bytes(data[: len(STATE_FILE_MAGIC)])
    if magic != STATE_FILE_MAGIC:
        raise BadMagicError(path, magic)

    if len(data) < HEADER_SIZE:
        raise StateFileError(f"Missing version in state file \"{path}\"")

    version = data[len(STATE_FILE_MAGIC)]
    if version != STATE_FILE_VERSION:
        # TODO: migrate older versions once a second format version exists
        raise UnsupportedVersionError(path, version, STATE_FILE_VERSION)

    if len(data) < STATE_FILE_SIZE:
        raise StateFileError(
            f"Failed to read from state file \"{path}\": "
            f"{len(data)} of {STATE_FILE_SIZE} bytes"
        )

    pos = HEADER_SIZE
    values: dict[str, Any] = {}

    for name, size, mask in REGISTER_FIELDS:
        values[name] = int.from_bytes(data[pos : pos + size], "little") & mask
        pos += size

    interrupts = []
    for _ in range(INT_SLOT_NUM):
        slot = {}
        for name, size, mask in INTERRUPT_FIELDS:
            slot[name] = int.from_bytes(data[pos : pos + size], "little") & mask
            pos += size
        interrupts.append(slot)
    values["interrupts"] = interrupts

    values["memory"] = [cell & MEMORY_CELL_MASK for cell in data[pos : pos + MEMORY_SIZE]]
    return values


def save_state(path: str, state: StateProvider):
    """
    Write a snapshot of the state to a file.

    Args:
        path: Output snapshot file (created or overwritten)
        state: State to save

    Raises:
        StateFileError: If the file cannot be created or is only partially written
    """
    data = encode_state(state)
    try:
        with open(path, "wb") as f:
            written = f.write(data)
    except OSError as e:
        raise StateFileError(f"Cannot create state file \"{path}\": {e}") from e

    if written != len(data):
        raise StateFileError(
            f"Failed to write to state file \"{path}\": "
            f"{written} of {len(data)} bytes"
        )


def load_state(path: str, state: StateProvider):
    """
    Restore a state from a snapshot file.

    The whole file is validated and decoded before the first attribute is
    assigned, so the state is left untouched on any error. On success
    state.refresh_hw() is called.

    Args:
        path: Snapshot file
        state: State to restore into

    Raises:
        BadMagicError: If the file is not a snapshot
        UnsupportedVersionError: If the snapshot version is not supported
        StateFileError: If the file cannot be read or is truncated
    """
    try:
        with open(path, "rb") as f:
            data = f.read()
    except OSError as e:
        raise StateFileError(f"Cannot open state file \"{path}\": {e}") from e

    values = decode_state(data, str(path))
    _check_layout(state)

    for name, _, _ in REGISTER_FIELDS:
        setattr(state, name, values[name])

    for slot, slot_values in zip(state.interrupts, values["interrupts"]):
        for name, _, _ in INTERRUPT_FIELDS:
            setattr(slot, name, slot_values[name])

    state.memory[:] = values["memory"]

    state.refresh_hw()


class SnapshotSlots:
    """
    Sequentially numbered snapshot files.

    Slots are named from a template such as "save{slot}.bin"; the template
    may also use {rom} to keep snapshots of different ROMs apart.
    """

    def __init__(
        self,
        template: str = STATE_TEMPLATE,
        directory: str | Path = ".",
        rom_name: str = "",
    ):
        self.template = template
        self.directory = Path(directory)
        self.rom_name = rom_name

    def path_for(self, slot: int) -> Path:
        """Get the file path of a slot number."""
        return self.directory / self.template.format(slot=slot, rom=self.rom_name)

    def next_slot(self) -> int:
        """Get the first slot number with no existing file."""
        slot = 0
        while self.path_for(slot).exists():
            slot += 1
        return slot

    def next_name(self) -> Path:
        """Get the path to use for a new snapshot."""
        return self.path_for(self.next_slot())

    def last_name(self) -> Path | None:
        """Get the path of the most recent snapshot, or None if there is none."""
        slot = self.next_slot()
        if slot == 0:
            return None
        return self.path_for(slot - 1)
