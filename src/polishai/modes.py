"""Transformation modes and the fixed instruction template for each."""

from __future__ import annotations

from enum import Enum

from polishai.config import MAX_TEXT_LENGTH


class Mode(str, Enum):
    REWRITE = "rewrite"
    SIMPLIFY = "simplify"
    GRAMMAR = "grammar"
    FORMALIZE = "formalize"
    CASUAL = "casual"
    SHORTEN = "shorten"
    EXPAND = "expand"
    TRANSLATE = "translate"
    CUSTOM = "custom"


MODE_PROMPTS: dict[Mode, str] = {
    Mode.REWRITE: (
        "You are a text rewriting assistant. Rewrite the given text to express the same "
        "meaning using different words and sentence structures. Keep the tone similar but "
        "make it fresh and engaging. Output only the rewritten text, nothing else."
    ),
    Mode.SIMPLIFY: (
        "You are a simplification assistant. Rewrite the given text to make it easier to "
        "understand. Use simpler words, shorter sentences, and clearer structure. Maintain "
        "the original meaning but make it accessible to a wider audience. Output only the "
        "simplified text, nothing else."
    ),
    Mode.GRAMMAR: (
        "You are a grammar correction assistant. Fix any grammar, spelling, punctuation, or "
        "syntax errors in the given text. Make minimal changes - only correct actual errors "
        "while preserving the original style and voice. Output only the corrected text, "
        "nothing else."
    ),
    Mode.FORMALIZE: (
        "You are a professional writing assistant. Rewrite the given text in a formal, "
        "professional tone suitable for business communication. Use sophisticated vocabulary "
        "and proper structure. Output only the formalized text, nothing else."
    ),
    Mode.CASUAL: (
        "You are a friendly writing assistant. Rewrite the given text in a casual, "
        "conversational tone. Make it sound natural and approachable, like talking to a "
        "friend. Output only the casualized text, nothing else."
    ),
    Mode.SHORTEN: (
        "You are a concision expert. Condense the given text to be more concise while "
        "preserving the essential meaning and key points. Remove redundancy and unnecessary "
        "words. Output only the shortened text, nothing else."
    ),
    Mode.EXPAND: (
        "You are an elaboration assistant. Expand the given text with more detail, examples, "
        "or explanation while maintaining the original message and tone. Make it more "
        "comprehensive. Output only the expanded text, nothing else."
    ),
    Mode.TRANSLATE: (
        "You are a translation assistant. Translate the given text to English. If it's "
        "already in English, translate it to a cleaner, more natural English. Maintain the "
        "original meaning and tone. Output only the translated text, nothing else."
    ),
    Mode.CUSTOM: (
        "You are a versatile text transformation assistant. Follow the user's specific "
        "instructions to transform the text as requested. Output only the transformed text, "
        "nothing else."
    ),
}


def truncate_text(text: str, max_length: int = MAX_TEXT_LENGTH) -> str:
    return text[:max_length]


def build_prompt(text: str, mode: Mode, custom_prompt: str | None = None) -> tuple[str, str]:
    """Return ``(system_prompt, user_message)`` for an already-truncated text.

    Custom instructions are only folded into the user message in custom mode;
    every other mode sends the text verbatim.
    """
    system_prompt = MODE_PROMPTS[mode]
    if mode is Mode.CUSTOM and custom_prompt:
        return system_prompt, f"Instructions: {custom_prompt}\n\nText to transform:\n{text}"
    return system_prompt, text
