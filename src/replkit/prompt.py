"""Prompt text shown before each line is read."""

from __future__ import annotations

from dataclasses import dataclass

from prompt_toolkit.formatted_text import FormattedText

from .constants import PROMPT_STYLE


@dataclass(slots=True)
class PromptState:
    """Current prompt and its display style.

    The after-command hook may replace the text once per processed line;
    replaced prompts are shown unstyled.
    """

    text: str
    style: str = ""

    @classmethod
    def for_name(cls, name: str) -> PromptState:
        """Derive the default ``<name>> `` prompt in bold green."""
        return cls(text=f"{name}> ", style=PROMPT_STYLE)

    def update(self, text: str) -> None:
        self.text = text
        self.style = ""

    def formatted(self) -> FormattedText:
        return FormattedText([(self.style, self.text)])
