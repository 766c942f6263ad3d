"""
Tamagotchi P1 - Program (ROM word store)

Loads and saves the raw ROM as an ordered sequence of 12-bit words.
Each word is stored in the ROM file as two bytes: the low nibble of the
first byte holds bits 8-11, the second byte holds bits 0-7.
"""

from typing import Iterable, Iterator

import numpy as np

from .errors import RomFileError
from .rom_utils import BYTES_PER_WORD, WORD_MASK


class Program:
    """
    A ROM image as a fixed-length array of 12-bit words.

    Words live in a numpy uint16 array (``words``) so that the raw 16-bit
    containers can be fingerprinted and whole sprite regions can be
    updated at once. Every write through this class is masked to 12 bits.
    """

    def __init__(self, words: Iterable[int] = ()):
        """
        Create a program from word values.

        Args:
            words: Word values; anything above 12 bits is masked off
        """
        values = np.asarray(list(words), dtype=np.int64) & WORD_MASK
        self.words = np.ascontiguousarray(values, dtype=np.uint16)

    @classmethod
    def from_bytes(cls, data: bytes) -> "Program":
        """
        Decode a program from ROM file bytes.

        A trailing odd byte is ignored, matching size = file length / 2.

        Args:
            data: Raw ROM file content

        Returns:
            Decoded Program
        """
        count = len(data) // BYTES_PER_WORD
        raw = np.frombuffer(bytes(data[: count * BYTES_PER_WORD]), dtype=np.uint8)
        pairs = raw.reshape(-1, BYTES_PER_WORD).astype(np.uint16)

        program = cls()
        program.words = np.ascontiguousarray(
            pairs[:, 1] | ((pairs[:, 0] & 0xF) << 8), dtype=np.uint16
        )
        return program

    @classmethod
    def load(cls, path: str) -> "Program":
        """
        Load a program from a ROM file.

        Args:
            path: Path to ROM file

        Returns:
            Loaded Program

        Raises:
            RomFileError: If the file cannot be opened or read
        """
        try:
            with open(path, "rb") as f:
                data = f.read()
        except OSError as e:
            raise RomFileError(f"Cannot open ROM \"{path}\": {e}") from e

        return cls.from_bytes(data)

    def to_bytes(self) -> bytes:
        """Encode the program into ROM file bytes."""
        out = np.empty((len(self.words), BYTES_PER_WORD), dtype=np.uint8)
        out[:, 0] = ((self.words >> 8) & 0xF).astype(np.uint8)
        out[:, 1] = (self.words & 0xFF).astype(np.uint8)
        return out.tobytes()

    def save(self, path: str):
        """
        Write the program to a ROM file.

        Args:
            path: Output ROM file path (created or overwritten)

        Raises:
            RomFileError: If the file cannot be opened or is only partially written
        """
        data = self.to_bytes()
        try:
            with open(path, "wb") as f:
                written = f.write(data)
        except OSError as e:
            raise RomFileError(f"Cannot write ROM \"{path}\": {e}") from e

        if written != len(data):
            raise RomFileError(
                f"Short write to ROM \"{path}\": {written} of {len(data)} bytes"
            )
        print(f"Wrote ROM to: {path}")

    def native_bytes(self, offset: int, length: int) -> bytes:
        """
        Read the in-memory representation of the words.

        Each word occupies its 2-byte container in host byte order,
        unused high nibble included. Reads past the end are truncated.

        Args:
            offset: Byte offset (twice the word index)
            length: Number of bytes

        Returns:
            Requested bytes
        """
        return self.words.view(np.uint8)[offset : offset + length].tobytes()

    def __len__(self) -> int:
        return len(self.words)

    def __getitem__(self, index):
        if isinstance(index, slice):
            return [int(w) for w in self.words[index]]
        return int(self.words[index])

    def __setitem__(self, index, value):
        if isinstance(index, slice):
            values = np.asarray(list(value), dtype=np.int64) & WORD_MASK
            self.words[index] = values.astype(np.uint16)
        else:
            self.words[index] = int(value) & WORD_MASK

    def __iter__(self) -> Iterator[int]:
        return (int(w) for w in self.words)

    def __eq__(self, other) -> bool:
        if not isinstance(other, Program):
            return NotImplemented
        return bool(np.array_equal(self.words, other.words))

    __hash__ = None

    def copy(self) -> "Program":
        """Return an independent copy of this program."""
        program = Program()
        program.words = self.words.copy()
        return program

    def __repr__(self) -> str:
        return f"Program({len(self.words)} words)"
