"""Raw terminal key reader feeding the coin page's event queue."""

from __future__ import annotations

import asyncio
import logging
import os
import signal
import sys
import termios
import tty
from typing import Any, List, Optional, TextIO

LOGGER = logging.getLogger(__name__)

ESCAPE_SEQUENCES = {
    "\x1b[A": "<Up>",
    "\x1b[B": "<Down>",
    "\x1b[C": "<Right>",
    "\x1b[D": "<Left>",
    "\x1b[H": "<Home>",
    "\x1b[F": "<End>",
    "\x1bOH": "<Home>",
    "\x1bOF": "<End>",
    "\x1b[1~": "<Home>",
    "\x1b[4~": "<End>",
    "\x1b[5~": "<PageUp>",
    "\x1b[6~": "<PageDown>",
    "\x1bOP": "<F1>",
    "\x1bOQ": "<F2>",
    "\x1b[11~": "<F1>",
    "\x1b[12~": "<F2>",
}

# Quits the page like Ctrl-C.
EOF_KEY = "<C-c>"

CONTROL_KEYS = {
    "\x02": "<C-b>",
    "\x03": "<C-c>",
    "\x04": "<C-d>",
    "\x06": "<C-f>",
    "\x15": "<C-u>",
    "\r": "<Enter>",
    "\n": "<Enter>",
}


def decode_keys(data: str) -> List[str]:
    """Split one read from the terminal into key ids."""

    keys: List[str] = []
    index = 0
    while index < len(data):
        char = data[index]
        if char == "\x1b":
            for length in (5, 4, 3):
                sequence = data[index:index + length]
                if sequence in ESCAPE_SEQUENCES:
                    keys.append(ESCAPE_SEQUENCES[sequence])
                    index += length
                    break
            else:
                keys.append("<Escape>")
                index += 1
            continue
        keys.append(CONTROL_KEYS.get(char, char))
        index += 1
    return keys


class TerminalKeySource:
    """Put the terminal in cbreak mode and push decoded keys onto a queue.

    Resize notifications arrive as ``<Resize>`` via ``SIGWINCH``.
    """

    def __init__(self, queue: "asyncio.Queue[str]", stream: Optional[TextIO] = None) -> None:
        self.queue = queue
        self.stream = stream or sys.stdin
        self._fd = self.stream.fileno()
        self._saved: Optional[Any] = None
        self._loop: Optional[asyncio.AbstractEventLoop] = None

    def __enter__(self) -> "TerminalKeySource":
        self._loop = asyncio.get_running_loop()
        self._saved = termios.tcgetattr(self._fd)
        tty.setcbreak(self._fd)
        self._loop.add_reader(self._fd, self._on_readable)
        try:
            self._loop.add_signal_handler(signal.SIGWINCH, self.queue.put_nowait, "<Resize>")
        except (NotImplementedError, AttributeError):
            LOGGER.debug("SIGWINCH not available; resize events disabled")
        return self

    def __exit__(self, *exc_info: Any) -> None:
        if self._loop is not None:
            self._loop.remove_reader(self._fd)
            if hasattr(signal, "SIGWINCH"):
                self._loop.remove_signal_handler(signal.SIGWINCH)
        if self._saved is not None:
            termios.tcsetattr(self._fd, termios.TCSADRAIN, self._saved)
        self._loop = None

    def _on_readable(self) -> None:
        raw = os.read(self._fd, 64)
        if not raw:
            # stdin hung up; a closed fd stays readable forever
            LOGGER.info("Terminal input closed", extra={"event": "stdin_eof"})
            if self._loop is not None:
                self._loop.remove_reader(self._fd)
            self.queue.put_nowait(EOF_KEY)
            return
        data = raw.decode("utf-8", errors="ignore")
        for key in decode_keys(data):
            self.queue.put_nowait(key)


__all__ = ["TerminalKeySource", "decode_keys"]
