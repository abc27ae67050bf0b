"""
Comment blocks - locating and normalizing the comment lines attached to a key.

A comment block is the run of comment lines right above a record. Blank lines
between the block and the record are skipped; a blank line between two
comment lines ends the block.

    # not part of the block
                                 <- blank line breaks the block
    # first line of the block
      # indentation does not break it
    key=value
"""

from __future__ import annotations

import re
from typing import Sequence

from fprops.syntax import comment_prefix
from fprops.tokens import PropsToken, TokenType

_LINE_BREAK = re.compile(r"\r\n|\r|\n")


def find_comment_block(tokens: Sequence[PropsToken], key_index: int) -> list[int]:
    """Return the indices of the comment tokens belonging to the key at ``key_index``.

    Indices are returned in source order (earliest first).
    """
    result: list[int] = []
    idx = key_index - 1
    while idx >= 0 and tokens[idx].type is TokenType.WHITESPACE:
        idx -= 1

    while idx >= 0 and tokens[idx].type is TokenType.COMMENT:
        result.append(idx)
        # Walk back to the end of the previous line; anything in between
        # (indentation) belongs to this comment's line
        idx -= 1
        while idx >= 0 and not tokens[idx].is_eol:
            idx -= 1
        idx -= 1

    result.reverse()
    return result


def line_start(tokens: Sequence[PropsToken], idx: int) -> int:
    """Return the index of the first token on the line holding ``tokens[idx]``."""
    while idx > 0 and not tokens[idx - 1].is_eol:
        idx -= 1
    return idx


def line_end(tokens: Sequence[PropsToken], idx: int) -> int:
    """Return the index just past the line terminator of the line holding ``tokens[idx]``.

    Returns len(tokens) when the line is the last one and has no terminator.
    """
    n = len(tokens)
    while idx < n and not tokens[idx].is_eol:
        idx += 1
    return min(idx + 1, n)


def _split_lines(text: str) -> list[str]:
    # Only \r, \n and \r\n end a line; \f, \x85, \u2028 and friends do not
    parts = _LINE_BREAK.split(text)
    if len(parts) > 1 and not parts[-1]:
        parts.pop()
    return parts


def normalize_comments(comments: Sequence[str], preferred_prefix: str) -> list[str]:
    """Make sure every line starts with a comment marker.

    A line that already carries a prefix makes it the preferred one for the
    unprefixed lines that follow it. Embedded line breaks split a comment
    into several lines.
    """
    lines = [part for comment in comments for part in _split_lines(comment)]
    result = []
    for line in lines:
        prefix = comment_prefix(line)
        if prefix:
            preferred_prefix = prefix
        else:
            line = preferred_prefix + line
        result.append(line)
    return result
