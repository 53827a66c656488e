"""
LS-8 Emulator
=============
A minimal 8-bit CPU emulator: eight 8-bit registers, a flat 256-byte RAM
and a five-instruction set, run by a fetch-decode-execute tick.

Layout mirrors the hardware:
    cpu/       register file, ALU, opcode table
    mem/       flat RAM
    periph/    console output and the interval clock
    emu.py     tick loop and instruction handlers
    loader.py  .ls8 listing parser
"""

__version__ = "0.2.0"

from .errors import LS8Error
from .emu import LS8Emulator, StopReason
from .loader import LoaderError, load_file, parse_program
