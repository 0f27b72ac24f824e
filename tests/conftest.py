"""Shared fixtures for the tmpl test suite.

Provides a scripted prompter (a real ConsolePrompter fed from a list of
canned replies) and a ``make_template`` factory that writes a template tree
under ``tmp_path``.
"""

from __future__ import annotations

from collections.abc import Callable
from pathlib import Path

import pytest

from tmpl_lib.environment import RunContext
from tmpl_lib.prompter import ConsolePrompter


class ScriptedInput:
    """Input callable returning canned replies and recording every prompt."""

    def __init__(self, replies: list[str]) -> None:
        self.replies = list(replies)
        self.prompts: list[str] = []

    def __call__(self, prompt: str) -> str:
        self.prompts.append(prompt)
        if not self.replies:
            raise EOFError
        return self.replies.pop(0)


@pytest.fixture(autouse=True)
def _no_color(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("NO_COLOR", "1")
    monkeypatch.delenv("TMPL_HOME", raising=False)


@pytest.fixture()
def scripted() -> Callable[..., tuple[ConsolePrompter, ScriptedInput]]:
    def _make(*replies: str) -> tuple[ConsolePrompter, ScriptedInput]:
        feed = ScriptedInput(list(replies))
        return ConsolePrompter(input_func=feed), feed

    return _make


@pytest.fixture()
def context() -> RunContext:
    return RunContext()


@pytest.fixture()
def make_template(tmp_path: Path) -> Callable[[dict[str, str]], Path]:
    """Write ``{relative path: content}`` under tmp_path/templates/demo."""

    def _make(files: dict[str, str], name: str = "demo") -> Path:
        root = tmp_path / "templates" / name
        root.mkdir(parents=True, exist_ok=True)
        for rel, content in files.items():
            path = root / rel
            path.parent.mkdir(parents=True, exist_ok=True)
            path.write_bytes(content.encode("utf-8"))
        return root

    return _make


@pytest.fixture()
def out_dir(tmp_path: Path) -> Path:
    out = tmp_path / "out"
    out.mkdir()
    return out
