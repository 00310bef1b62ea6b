"""Single-line text buffer fed by normalized key names."""

from __future__ import annotations

from dataclasses import dataclass

from rich.text import Text


@dataclass
class TextInput:
    """Minimal line editor used by the setup prompts and completion overlays."""

    placeholder: str = ""
    char_limit: int = 200
    value: str = ""

    def handle_key(self, key: str) -> bool:
        """Apply ``key`` to the buffer. Returns True if the key was consumed."""
        if key == "backspace":
            self.value = self.value[:-1]
            return True
        if key == "ctrl+u":
            self.value = ""
            return True
        if key == "space":
            key = " "
        if len(key) == 1 and key.isprintable():
            if len(self.value) < self.char_limit:
                self.value += key
            return True
        return False

    def set_value(self, value: str) -> None:
        self.value = value[: self.char_limit]

    def reset(self) -> None:
        self.value = ""

    def render(self) -> Text:
        """Render the buffer with a block cursor, or the dimmed placeholder."""
        if not self.value:
            text = Text("> ", style="cyan")
            text.append(self.placeholder or " ", style="dim")
            return text
        text = Text("> ", style="cyan")
        text.append(self.value)
        text.append("█", style="cyan")
        return text
