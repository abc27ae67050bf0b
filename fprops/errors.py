"""Exceptions raised by fprops."""

from __future__ import annotations


class PropsParseError(ValueError):
    """Malformed escape sequence in properties text.

    ``line`` is the 1-based line the offending record starts on, or None
    when the error comes from decoding a standalone string.
    """

    def __init__(self, message: str, line: int | None = None) -> None:
        self.message = message
        self.line = line
        if line is not None:
            message = f"line {line}: {message}"
        super().__init__(message)


class KeyNotFoundError(KeyError):
    """Comment lookup or update on a key the document does not contain."""

    def __init__(self, key: str) -> None:
        self.key = key
        super().__init__(key)

    def __str__(self) -> str:
        return f"Key not found: {self.key!r}"
