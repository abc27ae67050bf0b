"""
Properties Document - In-memory, format-preserving representation of a .properties file.
"""

from __future__ import annotations

from collections.abc import Iterable, Iterator, Mapping, MutableMapping
from typing import IO, TYPE_CHECKING, Sequence

from fprops.comments import find_comment_block, line_end, line_start, normalize_comments
from fprops.errors import KeyNotFoundError
from fprops.syntax import (
    DEFAULT_COMMENT_PREFIX,
    DEFAULT_SEPARATOR,
    NEWLINE,
    comment_prefix,
    escape,
    unescape,
)
from fprops.tokens import PropsToken, TokenType

if TYPE_CHECKING:
    from pathlib import Path


def _build_index(tokens: Iterable[PropsToken]) -> dict[str, str]:
    """Derive the key -> value mapping from a token sequence.

    Later records win for repeated keys; a key keeps the position of its
    first occurrence.
    """
    values: dict[str, str] = {}
    key = None
    for token in tokens:
        if token.type is TokenType.KEY:
            key = token.text
        elif token.type is TokenType.VALUE:
            values[key] = token.text
    return values


def _check_str(what: str, obj: object) -> None:
    if not isinstance(obj, str):
        raise TypeError(f"{what} must be str, not {type(obj).__name__}")


class PropsDocument(MutableMapping):
    """
    In-memory representation of a .properties file.

    The token list is the source of truth: storing a document writes every
    token's raw text, so anything that was not changed comes out exactly as
    it went in. The key -> value mapping is derived from the tokens and kept
    in step with every mutation.

    Usage:
        with open("app.properties", encoding="utf-8", newline="") as f:
            doc = PropsDocument()
            doc.load(f)
        doc["name"] = "Bob"
        doc.set_comment("name", ["Display name"])
        doc.write("app.properties")
    """

    def __init__(self, tokens: Iterable[PropsToken] = ()) -> None:
        self._tokens: list[PropsToken] = list(tokens)
        self._values: dict[str, str] = _build_index(self._tokens)

    @classmethod
    def from_text(cls, text: str) -> PropsDocument:
        """Parse properties text into a new document."""
        from fprops.reader import PropsReader
        return PropsReader.parse(text)

    # =========================================================================
    # Load / store
    # =========================================================================

    def load(self, stream: IO[str]) -> None:
        """Replace this document's content with the text read from ``stream``.

        ``stream`` must be an open text stream; use from_text() for a string.
        The document is only touched once the whole input parsed successfully;
        on error the previous content is left as it was.
        """
        from fprops.reader import PropsReader
        if isinstance(stream, str):
            raise TypeError("load() takes a text stream, not a str; use from_text() for text")
        tokens = PropsReader.tokenize(stream)
        values = _build_index(tokens)
        self._tokens = tokens
        self._values = values

    def store(self, stream: IO[str]) -> int:
        """Write this document to a text stream. Returns characters written."""
        from fprops.writer import PropsWriter
        return PropsWriter.store(self, stream)

    def write(self, path: str | Path) -> int:
        """Write this document to a file atomically. Returns bytes written."""
        from fprops.writer import PropsWriter
        return PropsWriter.write(self, path)

    def to_text(self) -> str:
        """Serialize this document to a string."""
        from fprops.writer import PropsWriter
        return PropsWriter.serialize(self)

    @property
    def tokens(self) -> tuple[PropsToken, ...]:
        return tuple(self._tokens)

    # =========================================================================
    # Lookups
    # =========================================================================

    def get(self, key: str, default: str | None = None) -> str | None:
        return self._values.get(key, default)

    def get_raw(self, raw_key: str) -> str | None:
        """Works like get() but takes a raw key and returns the raw value."""
        idx = self._index_of(unescape(raw_key))
        if idx < 0:
            return None
        return self._tokens[idx + 2].raw

    def raw_keys(self) -> list[str]:
        """Raw spelling of every key in the source, in order, without repeats.

        Different spellings that decode to the same key are all listed, so
        this can be longer than the document itself.
        """
        return list(dict.fromkeys(
            t.raw for t in self._tokens if t.type is TokenType.KEY
        ))

    def raw_values(self) -> list[str]:
        """Raw value of every record, in order."""
        return [
            self._tokens[i + 2].raw
            for i, t in enumerate(self._tokens)
            if t.type is TokenType.KEY
        ]

    # =========================================================================
    # Mutation
    # =========================================================================

    def put(self, key: str, value: str) -> str | None:
        """Set ``key`` to ``value``. Returns the previous value or None.

        An existing record keeps its key, separator and comments; only its
        value is rewritten. A new key is appended at the end of the document.
        """
        _check_str("key", key)
        _check_str("value", value)
        raw_value = escape(value)
        if key in self._values:
            self._replace_value(key, raw_value, value)
        else:
            self._append_record(escape(key, for_key=True), key, raw_value, value)
        previous = self._values.get(key)
        self._values[key] = value
        return previous

    def put_raw(self, raw_key: str, raw_value: str) -> str | None:
        """Works like put() but takes keys and values in raw form.

        Nothing is escaped, so any escape spelling can be written.
        """
        _check_str("raw_key", raw_key)
        _check_str("raw_value", raw_value)
        key = unescape(raw_key)
        value = unescape(raw_value)
        if key in self._values:
            self._replace_value(key, raw_value, value)
        else:
            self._append_record(raw_key, key, raw_value, value)
        previous = self._values.get(key)
        self._values[key] = value
        return previous

    def remove(self, key: str) -> str | None:
        """Remove ``key`` from the document. Returns the removed value or None.

        Every record for the key is cut out of the text together with its
        comment block and the line terminator of the record's line.
        """
        if key not in self._values:
            return None
        idx = self._index_of(key)
        while idx >= 0:
            self._excise_record(idx)
            idx = self._index_of(key)
        return self._values.pop(key)

    def _index_of(self, key: str) -> int:
        """Index of the KEY token of the last record for ``key``, or -1."""
        for idx in range(len(self._tokens) - 1, -1, -1):
            token = self._tokens[idx]
            if token.type is TokenType.KEY and token.text == key:
                return idx
        return -1

    def _require_index(self, key: str) -> int:
        idx = self._index_of(key)
        if idx < 0:
            raise KeyNotFoundError(key)
        return idx

    def _replace_value(self, key: str, raw_value: str, value: str) -> None:
        idx = self._index_of(key)
        self._tokens[idx + 2] = PropsToken.value(raw_value, value)

    def _append_record(self, raw_key: str, key: str, raw_value: str, value: str) -> None:
        if self._tokens and self._tokens[-1].type is not TokenType.WHITESPACE:
            self._tokens.append(PropsToken.whitespace(NEWLINE))
        self._tokens.extend((
            PropsToken.key(raw_key, key),
            PropsToken.separator(DEFAULT_SEPARATOR),
            PropsToken.value(raw_value, value),
        ))

    def _excise_record(self, idx: int) -> None:
        tokens = self._tokens
        block = find_comment_block(tokens, idx)
        start = line_start(tokens, block[0] if block else idx)
        end = line_end(tokens, idx)
        if not tokens[end - 1].is_eol and start > 0:
            # Last line has no terminator: take the one before it instead
            start -= 1
        del tokens[start:end]

    # =========================================================================
    # Comments
    # =========================================================================

    def get_comment(self, key: str) -> list[str]:
        """Return the comment lines directly above ``key``, markers included.

        Raises KeyNotFoundError if the key does not exist.
        """
        idx = self._require_index(key)
        return [self._tokens[i].raw for i in find_comment_block(self._tokens, idx)]

    def set_comment(self, key: str, comments: Sequence[str] | str) -> list[str]:
        """Replace the comment block above ``key``. Returns the previous lines.

        Lines without a '#' or '!' marker get one: the marker of the line
        before them, else the one used by the existing block, else "# ".
        Existing comment lines are overwritten in place so their indentation
        and line endings survive. Raises KeyNotFoundError if the key does
        not exist.
        """
        if isinstance(comments, str):
            comments = [comments]
        idx = self._require_index(key)
        tokens = self._tokens
        indices = find_comment_block(tokens, idx)
        previous = [tokens[i].raw for i in indices]

        prefix = comment_prefix(previous[0]) if previous else DEFAULT_COMMENT_PREFIX
        lines = normalize_comments(comments, prefix)

        kept = min(len(indices), len(lines))
        for n in range(kept):
            tokens[indices[n]] = PropsToken.comment(lines[n])

        if len(lines) < len(indices):
            # Last first so the remaining indices stay valid
            for i in reversed(indices[kept:]):
                del tokens[line_start(tokens, i):line_end(tokens, i)]
        elif len(lines) > len(indices):
            if indices:
                at = line_end(tokens, indices[-1])
            else:
                at = line_start(tokens, idx)
            extra: list[PropsToken] = []
            for line in lines[kept:]:
                extra.append(PropsToken.comment(line))
                extra.append(PropsToken.whitespace(NEWLINE))
            tokens[at:at] = extra

        return previous

    # =========================================================================
    # Mapping protocol
    # =========================================================================

    def __getitem__(self, key: str) -> str:
        return self._values[key]

    def __setitem__(self, key: str, value: str) -> None:
        self.put(key, value)

    def __delitem__(self, key: str) -> None:
        if key not in self._values:
            raise KeyError(key)
        self.remove(key)

    def __iter__(self) -> Iterator[str]:
        return iter(self._values)

    def __len__(self) -> int:
        return len(self._values)

    def __contains__(self, key: object) -> bool:
        return key in self._values

    def as_dict(self, defaults: Mapping[str, str] | None = None) -> dict[str, str]:
        """Return a detached dict copy, optionally layered over ``defaults``."""
        result = dict(defaults) if defaults else {}
        result.update(self._values)
        return result

    def __repr__(self) -> str:
        return f"PropsDocument(keys={list(self._values)}, tokens={len(self._tokens)})"
