"""Tests for the single-line TextInput buffer."""

from __future__ import annotations

from flow_cli.models.focus.text_input import TextInput


class TestTextInput:
    def test_typing_and_backspace(self):
        buf = TextInput()
        for key in ("h", "i", "space", "!"):
            assert buf.handle_key(key)
        assert buf.value == "hi !"
        buf.handle_key("backspace")
        assert buf.value == "hi "

    def test_ctrl_u_clears(self):
        buf = TextInput(value="draft")
        buf.handle_key("ctrl+u")
        assert buf.value == ""

    def test_named_keys_not_consumed(self):
        buf = TextInput()
        assert not buf.handle_key("up")
        assert not buf.handle_key("enter")
        assert buf.value == ""

    def test_char_limit(self):
        buf = TextInput(char_limit=3)
        for key in "abcd":
            buf.handle_key(key)
        assert buf.value == "abc"
        buf.set_value("123456")
        assert buf.value == "123"

    def test_render_placeholder_and_value(self):
        buf = TextInput(placeholder="What distracted you?")
        assert buf.render().plain == "> What distracted you?"
        buf.set_value("slack")
        assert buf.render().plain == "> slack█"
