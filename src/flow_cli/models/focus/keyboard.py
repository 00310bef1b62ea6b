"""Non-blocking keyboard input normalized to key names.

Keys come back as the names the controller understands: ``"enter"``,
``"esc"``, ``"backspace"``, ``"tab"``, ``"up"``/``"down"``/``"left"``/
``"right"``, ``"ctrl+c"``, ``"ctrl+u"``, or the literal character
(case preserved, so text prompts receive what was typed).
"""

import os
import select
import sys
import termios
import tty
from typing import Optional

_CONTROL_KEYS = {
    "\r": "enter",
    "\n": "enter",
    "\t": "tab",
    "\x7f": "backspace",
    "\x08": "backspace",
    "\x03": "ctrl+c",
    "\x15": "ctrl+u",
}

_ARROWS = {"A": "up", "B": "down", "C": "right", "D": "left"}


def _utf8_continuation_bytes(lead: int) -> int:
    if lead >= 0xF0:
        return 3
    if lead >= 0xE0:
        return 2
    return 1


def normalize_key(raw: str) -> Optional[str]:
    """Map raw terminal input (one key, possibly an escape sequence) to a name."""
    if not raw:
        return None
    if raw in _CONTROL_KEYS:
        return _CONTROL_KEYS[raw]
    if raw.startswith("\x1b"):
        if len(raw) == 1:
            return "esc"
        if raw[1] in "[O" and len(raw) >= 3 and raw[2] in _ARROWS:
            return _ARROWS[raw[2]]
        return None
    if len(raw) == 1 and raw.isprintable():
        return raw
    return None


class KeyboardHandler:
    """Non-blocking keyboard input handler (POSIX terminals)."""

    def __init__(self, stream=None):
        self.stream = stream or sys.stdin
        self.fd = self.stream.fileno()
        self.old_settings = None
        self._setup()

    def _setup(self):
        """Put the terminal in cbreak mode so keys arrive unbuffered."""
        try:
            self.old_settings = termios.tcgetattr(self.fd)
            tty.setcbreak(self.fd)
        except (termios.error, OSError):
            # Not a TTY (piped input, CI)
            self.old_settings = None

    def _ready(self) -> bool:
        return bool(select.select([self.fd], [], [], 0)[0])

    def _read_raw(self) -> bytes:
        """Read one key's bytes straight from the descriptor.

        The text stream's buffer would swallow the rest of an escape sequence
        after the first character, leaving select() with nothing to report.
        """
        raw = os.read(self.fd, 1)
        if raw == b"\x1b":
            # Arrow keys arrive as ESC [ X; a lone ESC has nothing behind it.
            while len(raw) < 3 and self._ready():
                raw += os.read(self.fd, 1)
        elif raw and raw[0] >= 0xC0:
            raw += os.read(self.fd, _utf8_continuation_bytes(raw[0]))
        return raw

    def get_key(self) -> Optional[str]:
        """Return the next key name, or None if no key is waiting."""
        try:
            if not self._ready():
                return None
            return normalize_key(self._read_raw().decode("utf-8", errors="replace"))
        except (OSError, ValueError):
            return None

    def stop(self):
        """Restore terminal settings."""
        if self.old_settings:
            try:
                termios.tcsetattr(self.fd, termios.TCSADRAIN, self.old_settings)
            except (termios.error, OSError):
                pass
