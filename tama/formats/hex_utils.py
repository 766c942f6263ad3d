"""
Tamagotchi - Hex String Utilities

Formatting and parsing of 12-bit words as hex text, and generation of a
C header embedding a whole program (for builds of the emulator that carry
the ROM inside the binary).
"""

import sys
from typing import List, TextIO

from ..core.program import Program

WORDS_PER_LINE = 16
HEADER_ARRAY = "static const u12_t g_program[] = {"


def format_word(word: int) -> str:
    """
    Format a word as a C hex literal.

    Example:
        >>> format_word(0x9AB)
        '0x9AB'
    """
    return f"0x{word:03X}"


def format_word_row(row: List[int]) -> str:
    """
    Format words as space-separated C array items.

    Example:
        >>> format_word_row([0x900, 0x1FF])
        '0x900, 0x1FF,'
    """
    return " ".join(f"{format_word(word)}," for word in row)


def parse_word_row(row_str: str) -> List[int]:
    """
    Parse a line of C array items back into words.

    Example:
        >>> parse_word_row("0x900, 0x1FF,")
        [2304, 511]
    """
    return [int(item, 16) for item in row_str.replace(",", " ").split()]


def write_program_header(program: Program, out: TextIO | None = None):
    """
    Write a program as a C array literal, 16 words per line.

    Args:
        program: Program to dump
        out: Text stream to write to (default: stdout)
    """
    if out is None:
        out = sys.stdout

    out.write(HEADER_ARRAY)

    words = list(program)
    for start in range(0, len(words), WORDS_PER_LINE):
        out.write("\n\t" + format_word_row(words[start : start + WORDS_PER_LINE]))

    out.write("\n};\n")


def parse_program_header(text: str) -> Program:
    """
    Parse a C header written by write_program_header().

    Args:
        text: Header text

    Returns:
        Program with the listed words

    Raises:
        ValueError: If the text does not contain the program array
    """
    start = text.find(HEADER_ARRAY)
    end = text.find("};", start)
    if start < 0 or end < 0:
        raise ValueError("No program array found in header")

    body = text[start + len(HEADER_ARRAY) : end]
    words = []
    for line in body.splitlines():
        words.extend(parse_word_row(line))
    return Program(words)
