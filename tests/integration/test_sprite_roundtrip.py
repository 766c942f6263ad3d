"""
Integration tests for sprite sheet extraction and injection.

Extracts the sprites of a program to a PNG file, injects the file into
another program, and checks which words changed.
"""

import pytest
from PIL import Image

from tama.core.errors import SpriteFormatError, SpriteImageError
from tama.core.sprite_map import build_sprite_map
from tama.rendering.sprite_sheet import extract_sprites, inject_sprites


def _clear_sprite_data(program, sprite_map):
    """Zero the pixel bits of every sprite column, keeping opcodes."""
    for sprite in sprite_map:
        for i in range(sprite.offset, sprite.end):
            program[i] = program[i] & 0xF00


def test_extract_writes_png(tmp_path, sprite_program, sprite_map, capsys):
    path = tmp_path / "sprites.png"

    extract_sprites(sprite_program, sprite_map, str(path))

    with Image.open(path) as image:
        assert image.format == "PNG"
        assert image.mode == "RGBA"
        assert image.size == (6, 30)
    assert "Writing 3 sprites to file" in capsys.readouterr().out


def test_extract_then_inject_restores_sprites(tmp_path, patterned_program):
    """Injecting an extracted sheet into a cleared copy restores the original."""
    sprite_map = build_sprite_map(patterned_program)
    path = tmp_path / "sprites.png"
    extract_sprites(patterned_program, sprite_map, str(path))

    target = patterned_program.copy()
    _clear_sprite_data(target, sprite_map)
    assert target != patterned_program

    inject_sprites(target, sprite_map, str(path))

    assert target == patterned_program


def test_inject_only_touches_sprite_words(tmp_path, patterned_program):
    """Words outside the sprite map keep their value, whatever the sheet holds."""
    sprite_map = build_sprite_map(patterned_program)
    path = tmp_path / "blank.png"
    Image.new("RGBA", sprite_map.sheet_size).save(path)

    sprite_words = set()
    for sprite in sprite_map:
        sprite_words.update(range(sprite.offset, sprite.end))

    target = patterned_program.copy()
    inject_sprites(target, sprite_map, str(path))

    for i in range(len(target)):
        if i in sprite_words:
            assert target[i] == patterned_program[i] & 0xF00
        else:
            assert target[i] == patterned_program[i]


def test_edited_sheet(tmp_path, sprite_program, sprite_map):
    """Pixels painted in an image editor end up in the ROM."""
    path = tmp_path / "sprites.png"
    extract_sprites(sprite_program, sprite_map, str(path))

    with Image.open(path) as image:
        edited = image.copy()
    edited.putpixel((2, 22), (255, 255, 0, 255))  # Sprite 2, column 1, row 1
    edited.save(path)

    inject_sprites(sprite_program, sprite_map, str(path))

    assert sprite_program[13] == 0x922


def test_inject_missing_file(tmp_path, sprite_program, sprite_map):
    original = sprite_program.copy()
    with pytest.raises(SpriteImageError, match="Cannot read sprite sheet"):
        inject_sprites(sprite_program, sprite_map, str(tmp_path / "missing.png"))
    assert sprite_program == original


def test_inject_non_image_file(tmp_path, sprite_program, sprite_map):
    path = tmp_path / "sprites.png"
    path.write_bytes(b"not a png")
    with pytest.raises(SpriteImageError):
        inject_sprites(sprite_program, sprite_map, str(path))


def test_inject_wrong_sheet(tmp_path, sprite_program, sprite_map):
    path = tmp_path / "sprites.png"
    Image.new("RGBA", (6, 20)).save(path)
    original = sprite_program.copy()

    with pytest.raises(SpriteFormatError, match="number of sprites"):
        inject_sprites(sprite_program, sprite_map, str(path))
    assert sprite_program == original


def test_extract_into_missing_directory(tmp_path, sprite_program, sprite_map):
    with pytest.raises(SpriteImageError, match="Cannot write sprite sheet"):
        extract_sprites(sprite_program, sprite_map, str(tmp_path / "nowhere" / "s.png"))
