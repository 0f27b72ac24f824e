"""
Interactive question helpers.

Prompters only ask and parse; they never loop. The variable resolver decides
whether an answer is acceptable and asks again when it is not.
"""
from abc import ABC, abstractmethod
from typing import Callable, Optional, Sequence

from .console import print_option, print_question, question
from .errors import PromptAborted


class Prompter(ABC):
    @abstractmethod
    def ask_yes_no(self, prompt: str) -> Optional[bool]:
        """Return True for Y, False for N, None for anything else."""

    @abstractmethod
    def ask_text(self, prompt: str) -> Optional[str]:
        """Return the raw reply line."""

    @abstractmethod
    def ask_choice(self, prompt: str, options: Sequence[str]) -> Optional[int]:
        """Show numbered options and return the typed index, or None if it is not a number."""


class ConsolePrompter(Prompter):
    """Prompter reading replies from the terminal (or any input-like callable)."""

    def __init__(self, input_func: Optional[Callable[[str], str]] = None) -> None:
        self._input = input_func

    def _read(self, prompt: str) -> str:
        read = self._input or input
        try:
            return read(question(prompt) + " ")
        except EOFError:
            raise PromptAborted("Input ended before all questions were answered") from None

    def ask_yes_no(self, prompt: str) -> Optional[bool]:
        answer = self._read(f"{prompt} [Y/N]").strip().upper()
        if answer == "Y":
            return True
        if answer == "N":
            return False
        return None

    def ask_text(self, prompt: str) -> Optional[str]:
        return self._read(prompt)

    def ask_choice(self, prompt: str, options: Sequence[str]) -> Optional[int]:
        print_question(prompt)
        for index, option in enumerate(options):
            print_option(f"\t{index} — {option}")
        answer = self._read(f"\tSelect from 0..{len(options) - 1}").strip()
        if not (answer.isascii() and answer.isdigit()):
            return None
        return int(answer)
