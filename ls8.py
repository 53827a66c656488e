#!/usr/bin/env python3
"""
ls8 — LS-8 emulator CLI

Usage:
    python ls8.py <program.ls8> [--max-ticks N] [--clock] [--interval S]
                               [--trace] [--dump] [--disasm] [-v]
                               [--log-dir DIR]

By default the program runs in a tight loop until HLT. With --clock it is
driven by the interval clock instead, one tick every --interval seconds.

Examples:
    python ls8.py examples/mult.ls8
    python ls8.py examples/mult.ls8 --trace
    python ls8.py examples/print8.ls8 --clock --interval 0.01
    python ls8.py examples/mult.ls8 --disasm
    python ls8.py examples/store.ls8 --dump

Exit status: 0 on HLT, 1 on an invalid instruction, a bad operand or the
tick limit, 2 if the program cannot be loaded.
"""

import argparse
import logging
import sys

from ls8_emulator import __version__
from ls8_emulator.cpu.decoder import disassemble
from ls8_emulator.emu import LS8Emulator, StopReason
from ls8_emulator.loader import LoaderError, load_file, load_into
from ls8_emulator.log_setup import setup_logging
from ls8_emulator.periph.clock import Clock


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="ls8",
        description="LS-8 8-bit CPU emulator",
    )
    parser.add_argument("program", help="Program listing (.ls8)")
    parser.add_argument("--max-ticks", type=int, default=LS8Emulator.DEFAULT_MAX_TICKS,
                        help="Stop after this many ticks (default: %(default)s)")
    parser.add_argument("--clock", action="store_true",
                        help="Drive the CPU with the interval clock instead of a tight loop")
    parser.add_argument("--interval", type=float, default=Clock.DEFAULT_INTERVAL,
                        help="Seconds between clock ticks (default: %(default)s)")
    parser.add_argument("--timeout", type=float, default=None,
                        help="With --clock, give up after this many seconds")
    parser.add_argument("--trace", action="store_true",
                        help="Print an instruction trace to stderr after the run")
    parser.add_argument("--dump", action="store_true",
                        help="Print a hex dump of RAM to stderr after the run")
    parser.add_argument("--disasm", action="store_true",
                        help="Disassemble the program and exit")
    parser.add_argument("--verbose", "-v", action="count", default=0,
                        help="Increase log verbosity (-v info, -vv debug)")
    parser.add_argument("--log-dir", default=None,
                        help="Also write a full DEBUG log file into this directory")
    parser.add_argument("--version", action="version",
                        version=f"ls8 {__version__}")
    return parser


def main(argv=None) -> int:
    args = build_parser().parse_args(argv)

    if args.verbose >= 2:
        console_level = logging.DEBUG
    elif args.verbose == 1:
        console_level = logging.INFO
    else:
        console_level = logging.WARNING
    log = setup_logging(console_level=console_level, log_dir=args.log_dir)

    emu = LS8Emulator(interval=args.interval)
    try:
        program = load_file(args.program)
        load_into(emu, program)
    except LoaderError as e:
        print(f"Load error: {e}", file=sys.stderr)
        return 2

    if args.disasm:
        for line in disassemble(emu.ram, 0, len(program)):
            print(line)
        return 0

    emu.enable_trace(args.trace)

    if args.clock:
        emu.start()
        if emu.wait(args.timeout):
            reason = emu.stop_reason
        else:
            emu.stop()
            log.warning("Clock timeout after %s s at PC=%#04x", args.timeout, emu.regs.PC)
            reason = StopReason.TIMEOUT
    else:
        reason = emu.run(args.max_ticks)

    if args.trace:
        print(emu.get_trace(), file=sys.stderr)
    if args.dump:
        print(emu.ram.hexdump(0, emu.ram.size), file=sys.stderr)

    if reason is StopReason.HALT:
        return 0
    if emu.fault is not None:
        print(f"Error: {emu.fault}", file=sys.stderr)
    else:
        print(f"Error: stopped with {reason.value} at PC={emu.regs.PC:#04x}", file=sys.stderr)
    return 1


if __name__ == "__main__":
    sys.exit(main())
