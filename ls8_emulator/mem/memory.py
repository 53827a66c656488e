"""
LS-8 Emulator — Flat RAM

The LS-8 has a single flat byte-addressable RAM (256 bytes by default).
Programs are loaded at address 0. There are no regions, no ROM write
protection and no memory-mapped I/O: PRN is the only output path.

Addresses wrap modulo the RAM size; values are masked to 8 bits.
"""

from typing import Iterable


class Memory:
    """Flat byte-addressable RAM."""

    DEFAULT_SIZE = 256

    def __init__(self, size: int = DEFAULT_SIZE):
        if size <= 0:
            raise ValueError(f"Memory size must be positive, got {size}")
        self.size = size
        self._mem = bytearray(size)

    def __len__(self) -> int:
        return self.size

    # --- Core read/write ---

    def read(self, addr: int) -> int:
        """Read 8-bit value from address."""
        return self._mem[addr % self.size]

    def write(self, addr: int, value: int):
        """Write 8-bit value to address."""
        self._mem[addr % self.size] = value & 0xFF

    # --- Bulk load ---

    def load_binary(self, data: Iterable[int], base_addr: int = 0):
        """Copy a byte sequence into memory starting at base_addr."""
        for i, byte in enumerate(data):
            self.write(base_addr + i, byte)

    # --- Snapshots ---

    def snapshot(self) -> bytes:
        return bytes(self._mem)

    # --- Hex dump ---

    def hexdump(self, start: int = 0, length: int = 256) -> str:
        """Produce a hex dump of memory for debugging."""
        lines = []
        for offset in range(0, length, 16):
            addr = start + offset
            row = [self.read(addr + i) for i in range(16)]
            hex_bytes = ' '.join(f'{b:02X}' for b in row)
            ascii_bytes = ''.join(chr(b) if 0x20 <= b < 0x7F else '.' for b in row)
            lines.append(f'{addr:02X}  {hex_bytes}  {ascii_bytes}')
        return '\n'.join(lines)
