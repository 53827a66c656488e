"""
LS-8 Emulator — Program Loader

Reads .ls8 program listings. One byte per line, written as exactly 8 binary digits;
anything after '#' is a comment and blank lines are skipped:

    00000100 # LDI R0,8
    00000000
    00001000

The loader only parses and places bytes. It does not check that the
bytes form valid instructions: that is the CPU's job at run time.
"""

import logging
from pathlib import Path
from typing import Iterable, Optional, Union

from .errors import LS8Error

log = logging.getLogger(__name__)


class LoaderError(LS8Error):
    """Malformed program listing."""

    def __init__(self, message: str, source: Optional[str] = None,
                 line_no: Optional[int] = None):
        self.source = source
        self.line_no = line_no
        location = ""
        if source is not None:
            location = f"{source}:{line_no}: " if line_no else f"{source}: "
        elif line_no:
            location = f"line {line_no}: "
        super().__init__(f"{location}{message}")


def parse_line(text: str) -> Optional[int]:
    """Parse one listing line. Returns the byte, or None for blank/comment."""
    code = text.split('#', 1)[0].strip()
    if not code:
        return None
    if len(code) != 8 or any(c not in '01' for c in code):
        raise ValueError(f"not an 8-bit binary number: {code!r}")
    return int(code, 2)


def parse_program(lines: Iterable[str], source: Optional[str] = None) -> bytes:
    """Parse listing lines into program bytes."""
    program = bytearray()
    for line_no, text in enumerate(lines, start=1):
        try:
            value = parse_line(text)
        except ValueError as e:
            raise LoaderError(str(e), source, line_no) from None
        if value is not None:
            program.append(value)
    return bytes(program)


def load_file(path: Union[str, Path]) -> bytes:
    """Read and parse a .ls8 listing file."""
    path = Path(path)
    try:
        text = path.read_text(encoding='utf-8')
    except OSError as e:
        raise LoaderError(f"cannot read program: {e.strerror}", str(path)) from e
    except UnicodeDecodeError as e:
        raise LoaderError(f"not a text listing: {e.reason} at byte {e.start}", str(path)) from e
    program = parse_program(text.splitlines(), str(path))
    log.info("Parsed %d bytes from %s", len(program), path)
    return program


def load_into(emu, program: Union[bytes, Iterable[int]], base_addr: int = 0):
    """Poke program bytes into an emulator's RAM starting at base_addr."""
    program = bytes(program)
    if base_addr + len(program) > emu.ram.size:
        raise LoaderError(
            f"program of {len(program)} bytes does not fit in "
            f"{emu.ram.size}-byte RAM at {base_addr:#04x}"
        )
    emu.load_program(program, base_addr)
    return len(program)
