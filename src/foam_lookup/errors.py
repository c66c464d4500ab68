"""Error hierarchy for foam_lookup.

Every error carries the process exit ``code`` the CLI returns for it.
"""

from __future__ import annotations

__all__ = [
    "FoamLookupError",
    "MissingKeyArgument",
    "UsageError",
    "DictionaryFileNotFound",
    "KeyNotFound",
    "SubdictNotFound",
    "DictionaryReadError",
    "ParseError",
]


class FoamLookupError(Exception):
    """Base error for all foam_lookup errors."""

    code: int = 1

    def __init__(self, message: str) -> None:
        super().__init__(message)
        self.message = message

    def __str__(self) -> str:
        return self.message


class MissingKeyArgument(FoamLookupError):
    """Raised when no ``-key`` option was given."""

    code = 1

    def __init__(self) -> None:
        super().__init__("Option -key is required.")


class UsageError(FoamLookupError):
    """Raised when the command line cannot be parsed."""

    code = 1


class DictionaryFileNotFound(FoamLookupError):
    """Raised when the ``-dict`` path does not exist."""

    code = 2

    def __init__(self, path: str) -> None:
        super().__init__(f"File: {path} is not found.")
        self.path = path


class KeyNotFound(FoamLookupError):
    """Raised when the terminal key is absent from the resolved dictionary."""

    code = 1 << 2

    def __init__(self, key: str, context: str = "", dotted: bool = False) -> None:
        if dotted:
            message = f"Key {key} was not found in {context} dictionary."
        elif context:
            message = f"Key {key} was not found in {context}."
        else:
            message = f"Key {key} was not found."
        super().__init__(message)
        self.key = key
        self.context = context


class SubdictNotFound(FoamLookupError):
    """Raised when an intermediate path segment is not a sub-dictionary."""

    code = 1 << 3

    def __init__(self, name: str) -> None:
        super().__init__(f"{name} sub-dictionary was not found.")
        self.name = name


class DictionaryReadError(FoamLookupError):
    """Raised when dictionary input cannot be read."""

    code = 1 << 4

    def __init__(self, message: str, source: str = "", line: int | None = None) -> None:
        location = source or "<stdin>"
        if line is not None:
            location = f"{location}:{line}"
        super().__init__(f"{location}: {message}")
        self.reason = message
        self.source = source
        self.line = line


class ParseError(DictionaryReadError):
    """Raised on malformed dictionary syntax."""
