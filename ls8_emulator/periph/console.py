"""
LS-8 Emulator — Console Output

PRN writes the decimal value of a register followed by a newline. The
console forwards each line to a text stream (stdout by default) and keeps
a copy for programmatic inspection, the same way a test harness would
read back a serial TX buffer.
"""

import sys
from typing import List, Optional, TextIO


class Console:
    """Line-oriented text sink for PRN."""

    def __init__(self, stream: Optional[TextIO] = None, echo: bool = True):
        self._stream = stream
        self.echo = echo
        self.lines: List[str] = []

    @property
    def stream(self) -> TextIO:
        # Resolved lazily so pytest's capsys swap of sys.stdout is honoured
        return self._stream if self._stream is not None else sys.stdout

    def emit(self, value: int):
        """Write one numeric value as a decimal line."""
        line = str(value)
        self.lines.append(line)
        if self.echo:
            self.stream.write(line + "\n")
            self.stream.flush()

    @property
    def output(self) -> str:
        """Everything emitted so far, newline-terminated."""
        return ''.join(line + "\n" for line in self.lines)

    def reset(self):
        self.lines.clear()
