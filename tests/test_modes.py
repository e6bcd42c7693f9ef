"""Tests for transformation modes and prompt construction."""

import pytest

from polishai.config import MAX_TEXT_LENGTH
from polishai.modes import MODE_PROMPTS, Mode, build_prompt, truncate_text


class TestModeTable:
    def test_nine_modes(self):
        assert [m.value for m in Mode] == [
            "rewrite",
            "simplify",
            "grammar",
            "formalize",
            "casual",
            "shorten",
            "expand",
            "translate",
            "custom",
        ]

    def test_every_mode_has_a_prompt(self):
        assert set(MODE_PROMPTS) == set(Mode)

    def test_prompts_are_distinct(self):
        assert len(set(MODE_PROMPTS.values())) == len(Mode)

    def test_prompts_ask_for_bare_output(self):
        for prompt in MODE_PROMPTS.values():
            assert prompt.endswith("nothing else.")

    def test_lookup_by_value(self):
        assert Mode("grammar") is Mode.GRAMMAR

    def test_unknown_mode_rejected(self):
        with pytest.raises(ValueError):
            Mode("pirate")


class TestBuildPrompt:
    @pytest.mark.parametrize("mode", [m for m in Mode if m is not Mode.CUSTOM])
    def test_text_sent_verbatim(self, mode):
        system, user = build_prompt("i has went to store", mode, "ignored")
        assert system == MODE_PROMPTS[mode]
        assert user == "i has went to store"

    def test_custom_mode_folds_in_instructions(self):
        system, user = build_prompt("hello there", Mode.CUSTOM, "Make it rhyme")
        assert system == MODE_PROMPTS[Mode.CUSTOM]
        assert user == "Instructions: Make it rhyme\n\nText to transform:\nhello there"

    def test_custom_mode_without_instructions(self):
        _, user = build_prompt("hello there", Mode.CUSTOM, None)
        assert user == "hello there"

    def test_custom_mode_blank_instructions(self):
        _, user = build_prompt("hello there", Mode.CUSTOM, "")
        assert user == "hello there"


class TestTruncateText:
    def test_short_text_unchanged(self):
        assert truncate_text("abc") == "abc"

    def test_long_text_cut_to_limit(self):
        assert len(truncate_text("x" * (MAX_TEXT_LENGTH + 10))) == MAX_TEXT_LENGTH

    def test_exact_limit_unchanged(self):
        text = "y" * MAX_TEXT_LENGTH
        assert truncate_text(text) == text

    def test_custom_limit(self):
        assert truncate_text("abcdef", 3) == "abc"
