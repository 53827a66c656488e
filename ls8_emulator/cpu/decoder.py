"""
LS-8 Emulator — Opcode Table / Decoder

Maps opcode bytes to (mnemonic, operand_count). Operand bytes follow the
opcode at consecutive addresses, so an instruction is 1 + operand_count
bytes wide. The emulator builds its dispatch table from OPCODES; this
module also provides a small disassembler for program listings.

Operand kinds (used only for disassembly):
  REG   register selector R0-R7
  IMM   8-bit immediate
"""

from typing import List, Optional, Tuple

from ..errors import LS8Error

# ──────────────────────────────────────────────
# Opcodes
# ──────────────────────────────────────────────

HLT = 0b00011011  # Halt CPU
LDI = 0b00000100  # Load register immediate
MUL = 0b00000101  # Multiply register register
PRN = 0b00000110  # Print register
ST  = 0b10000100  # Store register value at address in register

REG = 'REG'
IMM = 'IMM'

# Format: opcode -> (mnemonic, operand kinds)
OPCODES = {
    HLT: ('HLT', ()),
    LDI: ('LDI', (REG, IMM)),
    MUL: ('MUL', (REG, REG)),
    PRN: ('PRN', (REG,)),
    ST:  ('ST',  (REG, REG)),
}


class IllegalOpcode(LS8Error):
    """Byte at PC is not a known opcode."""

    def __init__(self, opcode: int, address: Optional[int] = None):
        self.opcode = opcode
        self.address = address
        where = f" at {address:#04x}" if address is not None else ""
        super().__init__(f"Illegal opcode {opcode:#04x}{where}")


def mnemonic(opcode: int) -> str:
    """Return the mnemonic for `opcode`, or raise IllegalOpcode."""
    try:
        return OPCODES[opcode][0]
    except KeyError:
        raise IllegalOpcode(opcode) from None


def operand_count(opcode: int) -> int:
    try:
        return len(OPCODES[opcode][1])
    except KeyError:
        raise IllegalOpcode(opcode) from None


def instruction_width(opcode: int) -> int:
    """Total bytes taken by the instruction: opcode + operands."""
    return 1 + operand_count(opcode)


def decode_opcode(memory, pc: int) -> Tuple[str, int]:
    """Decode the instruction at `pc`.

    Returns (mnemonic, width). Raises IllegalOpcode if the byte is not
    in the table.
    """
    opcode = memory.read(pc)
    if opcode not in OPCODES:
        raise IllegalOpcode(opcode, pc)
    mnem, kinds = OPCODES[opcode]
    return mnem, 1 + len(kinds)


# ──────────────────────────────────────────────
# Disassembler
# ──────────────────────────────────────────────

def _format_operand(kind: str, value: int) -> str:
    if kind == REG:
        return f"R{value}"
    return str(value)


def disassemble(memory, start: int = 0, end: Optional[int] = None) -> List[str]:
    """Disassemble memory[start:end] into listing lines.

    Unknown bytes are emitted as `DB 0x..` and decoding continues with
    the next byte. An instruction that would run past `end` is still
    decoded in full.
    """
    if end is None:
        end = memory.size
    lines = []
    addr = start
    while addr < end:
        try:
            mnem, width = decode_opcode(memory, addr)
        except IllegalOpcode as e:
            lines.append(f"{addr:02X}: DB {e.opcode:#04x}")
            addr += 1
            continue
        kinds = OPCODES[memory.read(addr)][1]
        operands = ','.join(
            _format_operand(kind, memory.read(addr + 1 + i))
            for i, kind in enumerate(kinds)
        )
        text = f"{mnem} {operands}" if operands else mnem
        lines.append(f"{addr:02X}: {text}")
        addr += width
    return lines
