"""
Error taxonomy for template processing.

Every error carries enough context to be reported as
"<subject>: <reason>" by the tree walker and the CLI.
"""
import errno
from typing import Optional


class TemplateError(Exception):
    """Base class for every failure raised while handling templates."""


class FileSystemError(TemplateError):
    def __init__(self, subject: str, reason: str, action: Optional[str] = None) -> None:
        self.subject = subject
        self.reason = reason
        self.action = action
        if action:
            super().__init__(f"Failed to {action} {subject}: {reason}")
        else:
            super().__init__(f"{subject}: {reason}")

    @classmethod
    def from_os_error(cls, exc: BaseException, subject: str, action: Optional[str] = None) -> "FileSystemError":
        return cls(subject, describe_os_error(exc), action)


class InvalidDeclaration(TemplateError):
    """A declaration with an unrecognised type or a clashing choice type."""


class EvaluationError(TemplateError):
    """A malformed expression, or an operation on values of the wrong type."""


class UnboundVariableReference(EvaluationError):
    def __init__(self, name: str) -> None:
        self.name = name
        super().__init__(f"Unresolved reference '{name}'")


class NullOutputPath(TemplateError):
    """The eval-script produced no output path."""


class PromptAborted(TemplateError):
    """Input ended while a question was still waiting for an answer."""


class ConfigError(TemplateError):
    pass


def describe_os_error(exc: BaseException) -> str:
    """Map an OS-level exception onto the short reasons shown to users."""
    if isinstance(exc, UnicodeDecodeError):
        return "not valid UTF-8 text"
    if isinstance(exc, PermissionError):
        return "access denied"
    if isinstance(exc, FileExistsError):
        return "file already exists"
    if isinstance(exc, FileNotFoundError):
        return "no such file"
    if isinstance(exc, NotADirectoryError):
        return "not a directory"
    if isinstance(exc, IsADirectoryError):
        return "is a directory"
    if isinstance(exc, OSError) and exc.errno == errno.ENOTEMPTY:
        return "directory not empty"
    return "I/O exception"
