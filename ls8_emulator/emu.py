"""
LS-8 Emulator — Main Emulator Class

Integrates:
  - CPU registers (cpu/regs.py)
  - Flat RAM (mem/memory.py)
  - Opcode table (cpu/decoder.py)
  - ALU operations (cpu/alu.py)
  - Console output and the clock driver (periph/)

Tick sequence:
  1. Interrupt check — IS & IM, one event per set bit, then IS cleared
  2. Fetch opcode at PC into IR
  3. Decode through the dispatch table
  4. Unknown opcode → report, halt, nothing else happens
  5. Execute handler — it reads operands at PC+1, PC+2 and advances PC

Termination reasons:
  - HALT:     HLT instruction
  - ILLEGAL:  opcode with no handler
  - ERROR:    malformed operand (register selector outside R0-R7)
  - TIMEOUT:  run() tick limit reached
"""

import logging
from enum import Enum
from types import MappingProxyType
from typing import Callable, Iterable, List, Optional

from .cpu import alu
from .cpu import decoder
from .cpu.decoder import IllegalOpcode
from .cpu.regs import Registers, InvalidRegister, NUM_REGS
from .errors import LS8Error
from .mem.memory import Memory
from .periph.clock import Clock
from .periph.console import Console

log = logging.getLogger(__name__)


class StopReason(Enum):
    HALT = 'HALT'
    ILLEGAL = 'ILLEGAL'
    ERROR = 'ERROR'
    TIMEOUT = 'TIMEOUT'


class LS8Emulator:
    """LS-8 8-bit CPU emulator.

    Usage:
        emu = LS8Emulator()
        emu.load_program(bytes([0x04, 0x00, 0x08, 0x06, 0x00, 0x1B]))
        result = emu.run()
        print(emu.console.output)  # "8\\n"

    Or driven by the interval clock:
        emu.start()
        emu.wait(timeout=5.0)
    """

    DEFAULT_MAX_TICKS = 1_000_000
    MEMORY_SIZE = Memory.DEFAULT_SIZE

    def __init__(self, ram: Optional[Memory] = None,
                 console: Optional[Console] = None,
                 interval: float = Clock.DEFAULT_INTERVAL,
                 on_interrupt: Optional[Callable[[int], None]] = None):
        # Core components
        self.regs = Registers()
        self.ram = ram if ram is not None else Memory(self.MEMORY_SIZE)
        self.console = console if console is not None else Console()
        self.clock = Clock(self._tick, interval)

        # Run state: None while running
        self.stop_reason: Optional[StopReason] = None
        self.fault: Optional[LS8Error] = None

        # Interrupt lines observed, in firing order
        self.interrupts: List[int] = []
        self.on_interrupt = on_interrupt

        # Trace output
        self._trace = False
        self._trace_output: List[str] = []

        # Instruction dispatch table, read-only after construction
        self._dispatch = self._build_dispatch()

    # ══════════════════════════════════════════════
    # Loading
    # ══════════════════════════════════════════════

    def poke(self, address: int, value: int):
        """Store value in memory address, used for program loading."""
        self.ram.write(address, value)

    def load_program(self, data: Iterable[int], base_addr: int = 0):
        """Write a program's bytes into RAM starting at base_addr."""
        data = bytes(data)
        if base_addr + len(data) > self.ram.size:
            raise LS8Error(
                f"Program of {len(data)} bytes does not fit in "
                f"{self.ram.size}-byte RAM at {base_addr:#04x}"
            )
        self.ram.load_binary(data, base_addr)
        log.debug("Loaded %d bytes at %#04x", len(data), base_addr)

    # ══════════════════════════════════════════════
    # Execution control
    # ══════════════════════════════════════════════

    @property
    def halted(self) -> bool:
        return self.stop_reason is not None

    def start(self):
        """Start the clock. No-op if it is already running or the CPU halted."""
        if self.halted:
            log.debug("start() ignored, CPU already halted (%s)", self.stop_reason.value)
            return
        self.clock.start()

    def stop(self):
        """Stop the clock. The CPU keeps its state and can be restarted."""
        self.clock.stop()

    def wait(self, timeout: Optional[float] = None) -> bool:
        """Block until the clock thread exits. Returns True if the CPU halted.

        Re-raises an exception that escaped a clock-driven tick.
        """
        self.clock.join(timeout)
        if self.clock.error is not None:
            raise self.clock.error
        return self.halted

    def tick(self) -> Optional[StopReason]:
        """Execute one tick. Returns StopReason if stopped, else None."""
        return self.clock.step()

    def run(self, max_ticks: Optional[int] = None) -> StopReason:
        """Tick in a tight loop until the CPU stops or max_ticks is reached."""
        if max_ticks is None:
            max_ticks = self.DEFAULT_MAX_TICKS

        for _ in range(max_ticks):
            reason = self.tick()
            if reason is not None:
                return reason

        log.warning("Tick limit reached (%d) at PC=%#04x", max_ticks, self.regs.PC)
        return StopReason.TIMEOUT

    def _tick(self) -> Optional[StopReason]:
        if self.halted:
            return self.stop_reason

        self._check_interrupts()

        # Fetch + decode
        pc = self.regs.PC
        self.regs.IR = self.ram.read(pc)
        handler = self.decode(self.regs.IR)

        if handler is None:
            self.fault = IllegalOpcode(self.regs.IR, pc)
            log.error("Invalid instruction at address %d: %d", pc, self.regs.IR)
            return self._halt(StopReason.ILLEGAL)

        if self._trace:
            self._trace_output.append(self._trace_line(pc))

        # Execute
        try:
            handler()
        except _HaltException:
            return self._halt(StopReason.HALT)
        except InvalidRegister as e:
            self.fault = e
            log.error("%s in %s at address %d",
                      e, decoder.mnemonic(self.regs.IR), pc)
            return self._halt(StopReason.ERROR)

        return None

    def _halt(self, reason: StopReason) -> StopReason:
        self.stop_reason = reason
        self.clock.stop()
        log.info("CPU stopped: %s at PC=%#04x", reason.value, self.regs.PC)
        return reason

    # ══════════════════════════════════════════════
    # Interrupts
    # ══════════════════════════════════════════════

    def raise_interrupt(self, line: int):
        """Set interrupt line 0-7 pending in IS."""
        if not 0 <= line < 8:
            raise ValueError(f"Interrupt line must be 0-7, got {line}")
        self.regs.is_ |= 1 << line

    def _check_interrupts(self):
        """Report every pending, unmasked line, then clear IS.

        All pending lines are consumed in one batch, masked or not.
        There is no vector table: firing an interrupt only records it.
        """
        status = self.regs.is_
        if not status:
            return

        masked = status & self.regs.im
        for line in range(8):
            if masked & (1 << line):
                log.info("Interrupt %d fired at PC=%#04x", line, self.regs.PC)
                self.interrupts.append(line)
                if self.on_interrupt is not None:
                    self.on_interrupt(line)

        self.regs.is_ = 0

    # ══════════════════════════════════════════════
    # Dispatch
    # ══════════════════════════════════════════════

    def _build_dispatch(self) -> MappingProxyType:
        """Build opcode → bound handler table."""
        return MappingProxyType({
            decoder.HLT: self._op_hlt,
            decoder.LDI: self._op_ldi,
            decoder.MUL: self._op_mul,
            decoder.PRN: self._op_prn,
            decoder.ST:  self._op_st,
        })

    def decode(self, opcode: int) -> Optional[Callable[[], None]]:
        """Return the handler for opcode, or None if it is not supported."""
        return self._dispatch.get(opcode)

    def _operand(self, offset: int) -> int:
        """Read the operand byte at PC+offset (PC at handler entry)."""
        return self.ram.read(self.regs.PC + offset)

    # ══════════════════════════════════════════════
    # Instruction handlers
    # ══════════════════════════════════════════════
    # Each handler reads its operands before mutating anything and
    # advances PC by its own width.

    def _op_hlt(self):
        # PC stays on the HLT instruction
        raise _HaltException("HLT")

    def _op_ldi(self):
        """LDI reg, imm"""
        reg = self._operand(1)
        value = self._operand(2)
        self.regs.set(reg, value)
        self.regs.PC += 3

    def _op_mul(self):
        """MUL regA, regB — regA = regA * regB (mod 256)"""
        reg_a = self._operand(1)
        reg_b = self._operand(2)
        result = alu.alu('MUL', self.regs.get(reg_a), self.regs.get(reg_b))
        self.regs.set(reg_a, result)
        self.regs.PC += 3

    def _op_prn(self):
        """PRN reg"""
        reg = self._operand(1)
        self.console.emit(self.regs.get(reg))
        self.regs.PC += 2

    def _op_st(self):
        """ST regA, regB — RAM[regA] = regB"""
        reg_a = self._operand(1)
        reg_b = self._operand(2)
        self.ram.write(self.regs.get(reg_a), self.regs.get(reg_b))
        self.regs.PC += 3

    # ══════════════════════════════════════════════
    # Trace / Debug
    # ══════════════════════════════════════════════

    def enable_trace(self, enable: bool = True):
        """Enable per-instruction trace recording."""
        self._trace = enable

    def get_trace(self) -> str:
        header = "PC | IN P1 P2 |" + ''.join(f" R{i}" for i in range(NUM_REGS))
        return '\n'.join([header] + self._trace_output)

    def clear_trace(self):
        self._trace_output.clear()

    def _trace_line(self, pc: int) -> str:
        line = "%02X | %02X %02X %02X |" % (
            pc, self.ram.read(pc), self.ram.read(pc + 1), self.ram.read(pc + 2))
        return line + ''.join(" %02X" % v for v in self.regs.R)

    def reset(self):
        """Reset CPU state. RAM contents are left alone."""
        self.clock.stop()
        self.regs.reset()
        self.console.reset()
        self.stop_reason = None
        self.fault = None
        self.interrupts.clear()
        self._trace_output.clear()


# Internal exception for flow control
class _HaltException(Exception):
    pass
