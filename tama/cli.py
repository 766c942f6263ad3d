#!/usr/bin/env python3
"""
TamaTool - ROM Tool

Command line front-end for first-generation Tamagotchi ROM images:
extract sprites to a PNG sprite sheet, inject an edited sheet back into
the ROM, dump the ROM as a C header, detect the ROM variant, and inspect
emulator state snapshots.
"""

import argparse
import sys
from pathlib import Path

from tama.core.errors import TamaError
from tama.core.fingerprint import classify, fingerprint_crc, variant_to_label
from tama.core.program import Program
from tama.core.rom_utils import DEFAULT_ROM_PATH
from tama.core.sprite_map import build_sprite_map
from tama.core.state import EmulatorState, load_state
from tama.formats.hex_utils import write_program_header
from tama.rendering.sprite_sheet import extract_sprites, inject_sprites

ROM_NOT_FOUND_MSG = (
    f"You need to place a Tamagotchi P1 ROM called \"{DEFAULT_ROM_PATH}\" "
    "in the current folder, or pass one with --rom"
)


def list_sprites(program: Program) -> None:
    """Print the sprite map of a program."""
    sprite_map = build_sprite_map(program)

    print(f"{len(sprite_map)} sprites (max width {sprite_map.max_width}):")
    for i, sprite in enumerate(sprite_map):
        print(f"  {i:3d}: offset 0x{sprite.offset:03X}, width {sprite.width:2d}")


def detect(program: Program) -> None:
    """Print the detected ROM variant."""
    variant = classify(program)
    print(f"{variant_to_label(variant)} (CRC 0x{fingerprint_crc(program):08X})")


def modify(program: Program, sprites_path: str, output_path: str) -> None:
    """Inject a sprite sheet into a program and save it."""
    sprite_map = build_sprite_map(program)
    inject_sprites(program, sprite_map, sprites_path)
    program.save(output_path)


def state_info(path: str) -> None:
    """Print the registers and timers stored in a snapshot file."""
    state = EmulatorState()
    load_state(path, state)

    print(f"State file: {path}")
    print(
        f"  PC=0x{state.pc:04X} NP=0x{state.np:02X} SP=0x{state.sp:02X} "
        f"X=0x{state.x:03X} Y=0x{state.y:03X} A=0x{state.a:X} B=0x{state.b:X} "
        f"F=0x{state.flags:X}"
    )
    print(
        f"  ticks={state.tick_counter} clk_ts={state.clk_timer_timestamp} "
        f"prog_ts={state.prog_timer_timestamp} call_depth={state.call_depth}"
    )
    print(
        f"  prog timer: enabled={state.prog_timer_enabled} "
        f"data=0x{state.prog_timer_data:02X} reload=0x{state.prog_timer_rld:02X}"
    )
    for i, slot in enumerate(state.interrupts):
        print(
            f"  int {i}: factor=0x{slot.factor_flag_reg:X} "
            f"mask=0x{slot.mask_reg:X} triggered={slot.triggered}"
        )


def main(argv: list[str] | None = None) -> int:
    parser = argparse.ArgumentParser(
        description="Explore and modify first-generation Tamagotchi ROMs",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  # Extract all sprites to a PNG sprite sheet
  tamatool -r rom.bin -E sprites.png

  # Inject an edited sprite sheet and write a new ROM
  tamatool -r rom.bin -M sprites.png -o rom_modified.bin

  # Generate a C header from the ROM
  tamatool -r rom.bin -H > rom.h

  # Show the registers of a save state
  tamatool --state-info save0.bin
""",
    )

    parser.add_argument(
        "-r",
        "--rom",
        default=DEFAULT_ROM_PATH,
        help=f"The ROM file to use (default: {DEFAULT_ROM_PATH})",
    )
    action = parser.add_mutually_exclusive_group()
    action.add_argument(
        "-E",
        "--extract",
        metavar="PNG",
        help="Extract the sprites of the ROM to a PNG file",
    )
    action.add_argument(
        "-M",
        "--modify",
        metavar="PNG",
        help="Replace the sprites of the ROM with those of a PNG file",
    )
    action.add_argument(
        "-H",
        "--header",
        action="store_true",
        help="Generate a header file from the ROM (written to stdout)",
    )
    action.add_argument(
        "--detect", action="store_true", help="Print the detected ROM variant"
    )
    action.add_argument(
        "--list-sprites", action="store_true", help="Print the sprite map of the ROM"
    )
    action.add_argument(
        "--state-info",
        metavar="PATH",
        help="Print the registers stored in a state file (no ROM needed)",
    )
    parser.add_argument(
        "-o",
        "--output",
        help="Output ROM file for --modify (default: overwrite the ROM)",
        default=None,
    )

    args = parser.parse_args(argv)

    try:
        if args.state_info:
            state_info(args.state_info)
            return 0

        if not (
            args.extract or args.modify or args.header or args.detect or args.list_sprites
        ):
            parser.error("no action given")

        rom_path = Path(args.rom)
        if not rom_path.exists():
            print(f"Error: ROM file not found: {rom_path}")
            print(ROM_NOT_FOUND_MSG)
            return 1

        program = Program.load(str(rom_path))

        if args.header:
            write_program_header(program)
        elif args.extract:
            extract_sprites(program, build_sprite_map(program), args.extract)
        elif args.modify:
            modify(program, args.modify, args.output or str(rom_path))
        elif args.detect:
            detect(program)
        elif args.list_sprites:
            list_sprites(program)

    except TamaError as e:
        print(f"Error: {e}")
        return 1

    return 0


if __name__ == "__main__":
    sys.exit(main())
