"""
LS-8 Emulator — Clock driver tests.

These start real threads with a short interval; every wait has a timeout
so a broken clock fails the test instead of hanging the run.
"""

import sys
import os
sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

import logging
import threading
import time

import pytest

from ls8_emulator.emu import LS8Emulator, StopReason
from ls8_emulator.errors import LS8Error
from ls8_emulator.periph.clock import Clock, ReentrantTick
from ls8_emulator.periph.console import Console

MULT_PROGRAM = bytes([
    0x04, 0x00, 0x08, 0x04, 0x01, 0x09, 0x05, 0x00, 0x01, 0x06, 0x00, 0x1B,
])


class TestClock:

    def test_step_calls_callback(self):
        calls = []
        clock = Clock(lambda: calls.append(1) or len(calls))
        assert clock.step() == 1
        assert clock.step() == 2
        assert clock.ticks == 2
        assert not clock.running

    def test_start_stop(self):
        hit = threading.Event()
        clock = Clock(hit.set, interval=0.001)
        clock.start()
        assert hit.wait(2.0)
        assert clock.running
        clock.stop()
        assert not clock.running
        ticks = clock.ticks
        time.sleep(0.02)
        assert clock.ticks == ticks

    def test_start_and_stop_idempotent(self):
        clock = Clock(lambda: None, interval=0.001)
        clock.stop()
        clock.start()
        first = clock._thread
        clock.start()
        assert clock._thread is first
        clock.stop()
        clock.stop()
        assert not clock.running

    def test_stop_from_inside_callback(self):
        holder = {}

        def cb():
            holder['clock'].stop()

        clock = Clock(cb, interval=0.001)
        holder['clock'] = clock
        clock.start()
        assert clock.join(2.0)
        assert clock.ticks == 1

    def test_ticks_do_not_overlap(self):
        active = []
        overlaps = []

        def cb():
            active.append(1)
            if len(active) > 1:
                overlaps.append(1)
            time.sleep(0.001)
            active.pop()

        clock = Clock(cb, interval=0.0005)
        clock.start()
        workers = [threading.Thread(target=lambda: [clock.step() for _ in range(20)])
                   for _ in range(3)]
        for w in workers:
            w.start()
        for w in workers:
            w.join(5.0)
        clock.stop()
        assert overlaps == []

    def test_callback_error_stops_clock(self):
        def cb():
            raise RuntimeError("boom")

        clock = Clock(cb, interval=0.001)
        clock.start()
        assert clock.join(2.0)
        assert isinstance(clock.error, RuntimeError)
        assert not clock.running

    def test_negative_interval(self):
        with pytest.raises(ValueError):
            Clock(lambda: None, interval=-1)

    def test_nested_step_refused(self):
        nested = [True]

        def cb():
            if nested[0]:
                nested[0] = False
                return clock.step()
            return 3

        clock = Clock(cb)
        with pytest.raises(ReentrantTick):
            clock.step()
        # lock released by the failed tick
        assert clock.step() == 3
        assert clock.ticks == 2

    def test_stop_before_start_is_silent(self, caplog):
        clock = Clock(lambda: None)
        with caplog.at_level(logging.DEBUG, logger="ls8_emulator.periph.clock"):
            clock.stop()
        assert "Clock stopped" not in caplog.text
        assert not clock.running


class TestClockDrivenEmulator:

    def test_runs_to_halt(self):
        emu = LS8Emulator(console=Console(echo=False), interval=0.001)
        emu.load_program(MULT_PROGRAM)
        emu.start()
        assert emu.wait(timeout=5.0)
        assert emu.stop_reason is StopReason.HALT
        assert emu.console.lines == ["72"]
        assert emu.regs.PC == 11
        assert not emu.clock.running

    def test_invalid_opcode_stops_clock(self):
        emu = LS8Emulator(console=Console(echo=False), interval=0.001)
        emu.load_program(bytes([0xFF]))
        emu.start()
        assert emu.wait(timeout=5.0)
        assert emu.stop_reason is StopReason.ILLEGAL
        assert emu.regs.PC == 0

    def test_stop_keeps_state(self):
        # A long run of LDIs, stopped well before it reaches the end
        emu = LS8Emulator(console=Console(echo=False), interval=0.05)
        emu.load_program(bytes([0x04, 0x00, 0x01] * 50))
        emu.start()
        time.sleep(0.12)
        emu.stop()
        pc = emu.regs.PC
        assert not emu.halted
        assert pc % 3 == 0
        time.sleep(0.1)
        assert emu.regs.PC == pc

    def test_interrupt_callback_error_surfaces_in_wait(self):
        def on_irq(line):
            raise RuntimeError(f"irq {line}")

        emu = LS8Emulator(console=Console(echo=False), interval=0.001,
                          on_interrupt=on_irq)
        emu.load_program(MULT_PROGRAM)
        emu.regs.im = 0xFF
        emu.raise_interrupt(4)
        emu.start()
        with pytest.raises(RuntimeError, match="irq 4"):
            emu.wait(timeout=5.0)

    def test_tick_from_interrupt_callback_refused(self):
        """IM=1, line 0 pending; the interrupt handler tries to tick again"""
        holder = {}

        def on_irq(line):
            holder['emu'].tick()

        emu = LS8Emulator(console=Console(echo=False), on_interrupt=on_irq)
        holder['emu'] = emu
        emu.load_program(MULT_PROGRAM)
        emu.regs.im = 0x01
        emu.raise_interrupt(0)

        result = {}

        def worker():
            try:
                emu.tick()
            except LS8Error as e:
                result['error'] = e

        t = threading.Thread(target=worker, daemon=True)
        t.start()
        t.join(2.0)
        assert not t.is_alive()
        assert isinstance(result.get('error'), ReentrantTick)
        # IS was not cleared by the aborted tick; the next one runs normally
        emu.on_interrupt = None
        assert emu.run() is StopReason.HALT
        assert emu.console.lines == ["72"]
