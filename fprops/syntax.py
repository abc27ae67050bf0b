"""
Properties Format Syntax
========================

Layout:
    # comment                    <- Comment line ('#' or '!' as first non-blank)
    ! comment                    <- Alternative comment marker
                                 <- Blank lines are kept as-is
    key=value                    <- Record: key, separator, value
    key = value                  <- Separator absorbs surrounding whitespace
    key:value                    <- ':' works like '='
    key value                    <- Plain whitespace is a separator too
    key                          <- No separator, empty value
    long=first \\                 <- Odd trailing backslash continues the value
         second                  <- Leading whitespace of the next line is dropped

Escapes (keys and values):
    \\n \\r \\t \\f                  <- Control characters
    \\uXXXX                       <- UTF-16 code unit, exactly 4 hex digits
    \\<char>                      <- Any other character, taken literally
                                    (\\= \\: \\# \\! \\\\ and "\\ " in keys)

Writing rules:
    - Text that came from the source is never re-encoded: its raw form is kept
    - Only keys/values set through the API are encoded
    - Code points above U+00FF are written as lowercase \\uXXXX
    - Spaces are only escaped in keys
"""

from __future__ import annotations

import string

from fprops.errors import PropsParseError

# Character classes
WHITESPACE_CHARS = frozenset(" \t\f")
LINE_TERMINATORS = frozenset("\r\n")
COMMENT_CHARS = frozenset("#!")
SEPARATOR_CHARS = frozenset("=:")
HEX_DIGITS = frozenset(string.hexdigits)

# Comment prefixes, longest first so "# " wins over "#"
COMMENT_PREFIXES = ("# ", "#", "! ", "!")

# Defaults for content created through the API
DEFAULT_SEPARATOR = "="
DEFAULT_COMMENT_PREFIX = "# "
NEWLINE = "\n"

# I/O
DEFAULT_ENCODING = "utf-8"
MAX_FILE_SIZE = 100 * 1024 * 1024  # 100MB max file size for reader

# Highest code point written literally by escape()
MAX_LITERAL_CODE_POINT = 0xFF

_ESCAPES = {
    "\\": "\\\\",
    "\n": "\\n",
    "\r": "\\r",
    "\t": "\\t",
    "\f": "\\f",
}

_UNESCAPES = {
    "n": "\n",
    "r": "\r",
    "t": "\t",
    "f": "\f",
}


def eol_end(text: str, pos: int) -> int:
    """Return the index just past the line terminator starting at ``pos``.

    ``\\r\\n`` counts as a single terminator.
    """
    if text[pos] == "\r" and pos + 1 < len(text) and text[pos + 1] == "\n":
        return pos + 2
    return pos + 1


def skip_whitespace(text: str, pos: int) -> int:
    """Return the index of the first non-blank character at or after ``pos``."""
    n = len(text)
    while pos < n and text[pos] in WHITESPACE_CHARS:
        pos += 1
    return pos


def _unicode_escape(cp: int) -> str:
    if cp > 0xFFFF:
        cp -= 0x10000
        high = 0xD800 + (cp >> 10)
        low = 0xDC00 + (cp & 0x3FF)
        return f"\\u{high:04x}\\u{low:04x}"
    return f"\\u{cp:04x}"


def escape(value: str, for_key: bool = False) -> str:
    """Encode a decoded key or value into its raw form.

    unescape() is the exact inverse for every string this produces.
    """
    out = []
    for ch in value:
        if ch in _ESCAPES:
            out.append(_ESCAPES[ch])
        elif ch == " " and for_key:
            out.append("\\ ")
        elif ord(ch) > MAX_LITERAL_CODE_POINT:
            out.append(_unicode_escape(ord(ch)))
        else:
            out.append(ch)
    return "".join(out)


def unescape(raw: str) -> str:
    """Decode the raw form of a key or value.

    Raises PropsParseError on an incomplete or non-hex \\uXXXX escape.
    """
    if "\\" not in raw:
        return raw

    out = []
    n = len(raw)
    i = 0
    saw_unicode = False
    while i < n:
        ch = raw[i]
        if ch != "\\":
            out.append(ch)
            i += 1
            continue

        i += 1
        if i >= n:
            # Lone trailing backslash: continuation into end of input
            break

        ch = raw[i]
        if ch in LINE_TERMINATORS:
            i = skip_whitespace(raw, eol_end(raw, i))
        elif ch == "u":
            digits = raw[i + 1:i + 5]
            if len(digits) < 4 or not all(d in HEX_DIGITS for d in digits):
                raise PropsParseError(f"Malformed \\uXXXX escape: {raw[i - 1:i + 5]!r}")
            out.append(chr(int(digits, 16)))
            saw_unicode = True
            i += 5
        else:
            out.append(_UNESCAPES.get(ch, ch))
            i += 1

    text = "".join(out)
    if saw_unicode:
        # Recombine surrogate pairs written as two \\u escapes
        text = text.encode("utf-16-le", "surrogatepass").decode("utf-16-le", "surrogatepass")
    return text


def comment_prefix(line: str) -> str:
    """Return the comment prefix a line starts with, or "" if it has none."""
    for prefix in COMMENT_PREFIXES:
        if line.startswith(prefix):
            return prefix
    return ""
