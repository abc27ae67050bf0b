"""
Properties Reader - Tokenizer and loader for .properties text.

Every character of the input ends up in exactly one token, so joining the
raw text of all tokens gives back the input unchanged:

    "  # note\\r\\n"       -> WHITESPACE("  ") COMMENT("# note") WHITESPACE("\\r\\n")
    "key = a\\\\\\n  b\\n"  -> KEY("key") SEPARATOR(" = ") VALUE("a\\\\\\n  b" -> "ab")
                             WHITESPACE("\\n")
    "\\n"                 -> WHITESPACE("\\n")

Safety features:
  - File size limit on read (prevents OOM from huge files)
  - Escape errors abort the load and report the line; nothing half-parsed
    is ever returned
"""

from __future__ import annotations

import logging
import os
from pathlib import Path
from typing import IO

from fprops.document import PropsDocument
from fprops.errors import PropsParseError
from fprops.syntax import (
    COMMENT_CHARS,
    DEFAULT_ENCODING,
    LINE_TERMINATORS,
    MAX_FILE_SIZE,
    SEPARATOR_CHARS,
    WHITESPACE_CHARS,
    eol_end,
    skip_whitespace,
    unescape,
)
from fprops.tokens import PropsToken

logger = logging.getLogger(__name__)

_KEY_STOP_CHARS = SEPARATOR_CHARS | WHITESPACE_CHARS
_VALUE_STOP_CHARS: frozenset[str] = frozenset()


class _Tokenizer:
    """Single pass over properties text, one physical line at a time."""

    def __init__(self, text: str) -> None:
        self.text = text
        self.pos = 0
        self.line = 1
        self.tokens: list[PropsToken] = []

    def run(self) -> list[PropsToken]:
        while self.pos < len(self.text):
            self._read_line()
        return self.tokens

    def _read_line(self) -> None:
        text = self.text
        start = self.pos
        pos = skip_whitespace(text, start)

        # Blank line (or trailing blanks at end of input)
        if pos >= len(text) or text[pos] in LINE_TERMINATORS:
            end = eol_end(text, pos) if pos < len(text) else pos
            self.tokens.append(PropsToken.whitespace(text[start:end]))
            self.pos = end
            if pos < len(text):
                self.line += 1
            return

        if pos > start:
            self.tokens.append(PropsToken.whitespace(text[start:pos]))
        self.pos = pos

        if text[pos] in COMMENT_CHARS:
            self._read_comment()
        else:
            self._read_record()
        self._read_terminator()

    def _read_comment(self) -> None:
        text = self.text
        end = self.pos
        while end < len(text) and text[end] not in LINE_TERMINATORS:
            end += 1
        self.tokens.append(PropsToken.comment(text[self.pos:end]))
        self.pos = end

    def _read_record(self) -> None:
        text = self.text
        first_line = self.line

        # Key
        start = self.pos
        end = self._scan(start, _KEY_STOP_CHARS)
        raw_key = text[start:end]
        self.tokens.append(PropsToken.key(raw_key, self._decode(raw_key, first_line)))

        # Separator: blanks, at most one '=' or ':', blanks
        pos = skip_whitespace(text, end)
        if pos < len(text) and text[pos] in SEPARATOR_CHARS:
            pos = skip_whitespace(text, pos + 1)
        self.tokens.append(PropsToken.separator(text[end:pos]))

        # Value: rest of the logical line
        end = self._scan(pos, _VALUE_STOP_CHARS)
        raw_value = text[pos:end]
        self.tokens.append(PropsToken.value(raw_value, self._decode(raw_value, first_line)))
        self.pos = end

    def _read_terminator(self) -> None:
        if self.pos < len(self.text):
            end = eol_end(self.text, self.pos)
            self.tokens.append(PropsToken.whitespace(self.text[self.pos:end]))
            self.pos = end
            self.line += 1

    def _scan(self, pos: int, stop: frozenset[str]) -> int:
        """Advance over a key or value, stepping over escapes and continuations.

        Stops at the end of the line or at the first unescaped ``stop`` char.
        """
        text = self.text
        n = len(text)
        while pos < n:
            ch = text[pos]
            if ch == "\\":
                if pos + 1 < n and text[pos + 1] in LINE_TERMINATORS:
                    # Continuation: terminator and next line's indent are part of this token
                    pos = skip_whitespace(text, eol_end(text, pos + 1))
                    self.line += 1
                else:
                    pos = min(pos + 2, n)
                continue
            if ch in LINE_TERMINATORS or ch in stop:
                break
            pos += 1
        return pos

    @staticmethod
    def _decode(raw: str, line: int) -> str:
        try:
            return unescape(raw)
        except PropsParseError as e:
            raise PropsParseError(e.message, line=line) from e


class PropsReader:
    """
    Properties reader.

    Usage:
        # From a file
        doc = PropsReader.read("app.properties")

        # From an open text stream (open files with newline="" to keep \\r\\n)
        with open("app.properties", encoding="utf-8", newline="") as f:
            doc = PropsReader.load(f)

        # From a string
        doc = PropsReader.parse("name=Alice\\n")
    """

    @staticmethod
    def tokenize(source: IO[str] | str) -> list[PropsToken]:
        """Split properties text (a string or a text stream) into tokens."""
        text = source if isinstance(source, str) else source.read()
        tokens = _Tokenizer(text).run()
        logger.debug("Tokenized %d chars into %d tokens", len(text), len(tokens))
        return tokens

    @classmethod
    def parse(cls, text: str) -> PropsDocument:
        """Parse a string into a PropsDocument."""
        return PropsDocument(cls.tokenize(text))

    @classmethod
    def load(cls, stream: IO[str]) -> PropsDocument:
        """Read a text stream to the end and parse it into a PropsDocument."""
        return PropsDocument(cls.tokenize(stream))

    @classmethod
    def read(
        cls,
        path: str | Path,
        encoding: str = DEFAULT_ENCODING,
        max_size: int = MAX_FILE_SIZE,
    ) -> PropsDocument:
        """Fully parse a .properties file into a PropsDocument."""
        path = Path(path)
        file_size = path.stat().st_size
        if file_size > max_size:
            raise ValueError(
                f"File size {file_size} exceeds maximum {max_size} bytes. "
                f"Pass max_size= to override."
            )
        # newline="" keeps \r\n and lone \r exactly as they are on disk
        with open(path, encoding=encoding, newline="") as f:
            tokens = cls.tokenize(f)
        doc = PropsDocument(tokens)
        logger.debug("Read %s: %d keys, %d tokens", path, len(doc), len(tokens))
        return doc


def load_properties(
    source: str | os.PathLike | IO[str],
    encoding: str = DEFAULT_ENCODING,
) -> PropsDocument:
    """Load a document from a path or an open text stream.

    A str is taken as a file path, unlike PropsDocument.load() which only
    accepts streams; use PropsReader.parse() for text.
    """
    if hasattr(source, "read"):
        return PropsReader.load(source)
    return PropsReader.read(source, encoding=encoding)
