"""
LS-8 Emulator — CPU Register File

Register model for the LS-8:
  R0-R7 — 8-bit general-purpose registers (values wrap mod 256)
  R5    — also IM, the interrupt mask
  R6    — also IS, the interrupt status
  PC    — program counter (full address, never wrapped to 8 bits)
  IR    — instruction register (last fetched opcode)

IM and IS are not a separate namespace: LDI R6,n is exactly the same as
raising the interrupt lines set in n.
"""

from ..errors import LS8Error

NUM_REGS = 8

# Interrupt registers live in the general-purpose array
IM = 5
IS = 6


class InvalidRegister(LS8Error, IndexError):
    """Register selector outside R0-R7 (only reachable from bad program data)."""

    def __init__(self, index: int):
        self.index = index
        super().__init__(f"Invalid register R{index}")


class Registers:
    """LS-8 register file."""

    __slots__ = ('R', 'PC', 'IR')

    def __init__(self):
        self.R: list = [0] * NUM_REGS  # R0-R7
        self.PC: int = 0               # Program counter
        self.IR: int = 0               # Instruction register

    @staticmethod
    def check(index: int) -> int:
        """Validate a register selector, return it unchanged."""
        if not 0 <= index < NUM_REGS:
            raise InvalidRegister(index)
        return index

    def get(self, index: int) -> int:
        return self.R[self.check(index)]

    def set(self, index: int, value: int):
        """Store value mod 256 into R[index]."""
        self.R[self.check(index)] = value & 0xFF

    # --- Interrupt register aliases ---

    @property
    def im(self) -> int:
        return self.R[IM]

    @im.setter
    def im(self, value: int):
        self.R[IM] = value & 0xFF

    @property
    def is_(self) -> int:
        return self.R[IS]

    @is_.setter
    def is_(self, value: int):
        self.R[IS] = value & 0xFF

    # --- Display ---

    def display(self) -> str:
        """Format register state for debugging."""
        regs = ' '.join(f'R{i}={v:02X}' for i, v in enumerate(self.R))
        return f"PC={self.PC:02X} IR={self.IR:02X} {regs}"

    def reset(self):
        """Reset to power-on state."""
        self.R = [0] * NUM_REGS
        self.PC = 0
        self.IR = 0
