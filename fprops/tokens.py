"""
Token model - the formatting-preserving fragments a properties document is made of.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum

from fprops.syntax import LINE_TERMINATORS


class TokenType(Enum):
    KEY = "key"
    SEPARATOR = "separator"
    VALUE = "value"
    WHITESPACE = "whitespace"
    COMMENT = "comment"


@dataclass(frozen=True)
class PropsToken:
    """A single fragment of properties text.

    ``raw`` is the exact source text and is what gets written back.
    ``text`` is the decoded form; it only differs from ``raw`` for keys
    and values.
    """
    type: TokenType
    raw: str
    text: str | None = None

    def __post_init__(self) -> None:
        if self.text is None:
            object.__setattr__(self, "text", self.raw)

    @property
    def is_eol(self) -> bool:
        """True if this token ends a physical line."""
        return self.type is TokenType.WHITESPACE and self.raw[-1:] in LINE_TERMINATORS

    @classmethod
    def key(cls, raw: str, text: str) -> PropsToken:
        return cls(TokenType.KEY, raw, text)

    @classmethod
    def separator(cls, raw: str) -> PropsToken:
        return cls(TokenType.SEPARATOR, raw)

    @classmethod
    def value(cls, raw: str, text: str) -> PropsToken:
        return cls(TokenType.VALUE, raw, text)

    @classmethod
    def whitespace(cls, raw: str) -> PropsToken:
        return cls(TokenType.WHITESPACE, raw)

    @classmethod
    def comment(cls, raw: str) -> PropsToken:
        return cls(TokenType.COMMENT, raw)
