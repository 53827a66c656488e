"""
LS-8 Emulator — Program loader tests (.ls8 listings).
"""

import sys
import os
sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

import pytest

from ls8_emulator.emu import LS8Emulator, StopReason
from ls8_emulator.loader import LoaderError, load_file, load_into, parse_line, parse_program
from ls8_emulator.periph.console import Console

EXAMPLES_DIR = os.path.join(os.path.dirname(__file__), "..", "examples")


class TestParse:

    def test_parse_line(self):
        assert parse_line("00000100 # LDI R0,8") == 0x04
        assert parse_line("11111111") == 0xFF
        assert parse_line("   00000001   ") == 1

    def test_blank_and_comment_lines(self):
        assert parse_line("") is None
        assert parse_line("   ") is None
        assert parse_line("# just a comment") is None

    @pytest.mark.parametrize("text", ["0000000012", "LDI", "0x04", "100000000", "1", "0000100"])
    def test_bad_line(self, text):
        with pytest.raises(ValueError):
            parse_line(text)

    def test_parse_program(self):
        lines = [
            "# print 8",
            "",
            "00000100 # LDI R0,8",
            "00000000",
            "00001000",
            "00000110 # PRN R0",
            "00000000",
            "00011011 # HLT",
        ]
        assert parse_program(lines) == bytes([0x04, 0x00, 0x08, 0x06, 0x00, 0x1B])

    def test_error_names_line(self):
        with pytest.raises(LoaderError) as exc:
            parse_program(["00000001", "# ok", "oops"], source="bad.ls8")
        assert exc.value.line_no == 3
        assert str(exc.value).startswith("bad.ls8:3: ")


class TestLoadFile:

    def test_load_file(self, tmp_path):
        path = tmp_path / "hlt.ls8"
        path.write_text("00011011 # HLT\n", encoding="utf-8")
        assert load_file(path) == bytes([0x1B])

    def test_missing_file(self, tmp_path):
        with pytest.raises(LoaderError):
            load_file(tmp_path / "nope.ls8")

    def test_binary_file(self, tmp_path):
        path = tmp_path / "blob.ls8"
        path.write_bytes(b"\xff\xfe00011011\n")
        with pytest.raises(LoaderError) as exc:
            load_file(path)
        assert exc.value.source == str(path)
        assert "not a text listing" in str(exc.value)

    def test_load_into(self):
        emu = LS8Emulator(console=Console(echo=False))
        count = load_into(emu, bytes([0x04, 0x00, 0x2A]), base_addr=0x10)
        assert count == 3
        assert emu.ram.read(0x10) == 0x04
        assert emu.ram.read(0x12) == 0x2A

    def test_load_into_too_big(self):
        emu = LS8Emulator(console=Console(echo=False))
        with pytest.raises(LoaderError):
            load_into(emu, bytes(10), base_addr=250)


class TestExamplePrograms:

    def _run(self, name):
        emu = LS8Emulator(console=Console(echo=False))
        load_into(emu, load_file(os.path.join(EXAMPLES_DIR, name)))
        return emu, emu.run()

    def test_mult(self):
        emu, reason = self._run("mult.ls8")
        assert reason is StopReason.HALT
        assert emu.console.output == "72\n"
        assert emu.regs.PC == 11

    def test_print8(self):
        emu, reason = self._run("print8.ls8")
        assert reason is StopReason.HALT
        assert emu.console.lines == ["8"]

    def test_store(self):
        emu, reason = self._run("store.ls8")
        assert reason is StopReason.HALT
        assert emu.console.lines == ["144"]
        assert emu.ram.read(0x80) == 144
