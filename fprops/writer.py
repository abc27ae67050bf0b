"""
Properties Writer - Serializes PropsDocument back to .properties text.

Serialization is the raw text of every token in order. Nothing is
re-encoded or reformatted, which is what makes an unmodified document come
out identical to its input.
"""

from __future__ import annotations

import logging
import os
import tempfile
from pathlib import Path
from typing import IO, TYPE_CHECKING

from fprops.syntax import DEFAULT_ENCODING

if TYPE_CHECKING:
    from fprops.document import PropsDocument

logger = logging.getLogger(__name__)


class PropsWriter:

    @staticmethod
    def serialize(doc: PropsDocument) -> str:
        """Serialize a PropsDocument to a string. Pure - does not mutate the document."""
        return "".join(token.raw for token in doc.tokens)

    @staticmethod
    def store(doc: PropsDocument, stream: IO[str]) -> int:
        """Write a PropsDocument to a text stream. Returns characters written."""
        text = PropsWriter.serialize(doc)
        stream.write(text)
        logger.debug("Stored %d keys (%d chars)", len(doc), len(text))
        return len(text)

    @staticmethod
    def write(
        doc: PropsDocument,
        path: str | Path,
        encoding: str = DEFAULT_ENCODING,
        mode: int = 0o644,
    ) -> int:
        """Write a PropsDocument to a file atomically. Returns bytes written.

        Uses write-to-temp-then-rename so the target is never left half
        written. Line endings are written exactly as held by the document.
        """
        data = PropsWriter.serialize(doc).encode(encoding)
        dir_name = os.path.dirname(os.path.abspath(path)) or "."
        fd, tmp_path = tempfile.mkstemp(dir=dir_name, suffix=".properties.tmp")
        try:
            with os.fdopen(fd, "wb") as f:
                f.write(data)
                f.flush()
                os.fsync(f.fileno())
            os.chmod(tmp_path, mode)
            os.replace(tmp_path, path)
        except Exception:
            # Clean up temp file on failure
            try:
                os.unlink(tmp_path)
            except OSError:
                pass
            raise
        logger.debug("Wrote %s (%d bytes)", path, len(data))
        return len(data)
