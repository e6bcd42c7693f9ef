"""Text polishing through the Anthropic Messages API."""

from __future__ import annotations

import logging
from dataclasses import dataclass

import anthropic

from polishai.config import DEFAULT_MODEL, MAX_OUTPUT_TOKENS, MAX_TEXT_LENGTH
from polishai.modes import Mode, build_prompt, truncate_text

logger = logging.getLogger("polishai.polish")


class PolishError(Exception):
    """The model call failed or returned no usable text."""


class RateLimitedError(PolishError):
    """The model API answered 429."""


@dataclass
class PolishResult:
    polished: str
    mode: Mode
    input_length: int
    output_length: int


class Polisher:
    def __init__(
        self,
        client: anthropic.Anthropic,
        *,
        model: str = DEFAULT_MODEL,
        max_tokens: int = MAX_OUTPUT_TOKENS,
        max_text_length: int = MAX_TEXT_LENGTH,
    ):
        self._client = client
        self.model = model
        self.max_tokens = max_tokens
        self.max_text_length = max_text_length

    def polish(self, text: str, mode: Mode, custom_prompt: str | None = None) -> PolishResult:
        """Transform ``text`` with the instruction template for ``mode``.

        Input beyond ``max_text_length`` characters is dropped before the
        request is built, so ``input_length`` reports what the model saw.
        """
        trimmed = truncate_text(text, self.max_text_length)
        system_prompt, user_message = build_prompt(trimmed, mode, custom_prompt)

        try:
            message = self._client.messages.create(
                model=self.model,
                max_tokens=self.max_tokens,
                system=system_prompt,
                messages=[{"role": "user", "content": user_message}],
            )
        except anthropic.RateLimitError as exc:
            raise RateLimitedError(str(exc)) from exc
        except anthropic.APIError as exc:
            raise PolishError(str(exc)) from exc

        polished = _first_text(message)
        logger.info(
            "Polished %d chars with mode=%s -> %d chars", len(trimmed), mode.value, len(polished)
        )
        return PolishResult(
            polished=polished,
            mode=mode,
            input_length=len(trimmed),
            output_length=len(polished),
        )


def _first_text(message) -> str:
    content = getattr(message, "content", None) or []
    text = getattr(content[0], "text", None) if content else None
    if text is None:
        raise PolishError("Model response contained no text block")
    return text
