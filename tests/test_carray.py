"""Tests for the C array listing renderer."""

from __future__ import annotations

import carray
from image import Image


def test_listing_single_short_line() -> None:
    text = carray.dumps(Image(b"\x02\x33\x7a"))

    assert text.splitlines() == [
        "// Generated by hex2c",
        "const uint8_t hex2c[3] = {",
        "    0x02, 0x33, 0x7a," + " " * 34 + "// 000",
        "};",
    ]


def test_listing_comments_align() -> None:
    text = carray.encode_listing(Image(bytes(range(20))), wrap=8, padding=2)
    lines = text.splitlines()[2:-1]

    assert len(lines) == 3
    assert lines[0] == "  " + "".join(f"0x{b:02x}, " for b in range(8)) + " " + "// 000"
    assert lines[1].endswith("// 008")
    assert lines[2].endswith("// 010")
    assert len({line.index("//") for line in lines}) == 1


def test_listing_padding_one() -> None:
    lines = carray.dumps(Image(b"\x01\x02"), wrap=2, padding=1).splitlines()

    assert lines[2] == " 0x01, 0x02,  // 000"


def test_listing_base_entry_and_name() -> None:
    text = carray.dumps(Image(b"\x00", base=0x0100, entry=0x0104), name="boot")

    assert text.splitlines()[:4] == [
        "// Generated by hex2c",
        "// base address 0x0100",
        "// entry point 0x0104",
        "const uint8_t boot[1] = {",
    ]


def test_listing_entry_equal_to_base_is_shown() -> None:
    text = carray.dumps(Image(b"\x00", base=0x0100, entry=0x0100))

    assert "// entry point 0x0100" in text


def test_listing_empty_image() -> None:
    assert carray.dumps(Image()) == "// Generated by hex2c\nconst uint8_t hex2c[0] = {\n};\n"
