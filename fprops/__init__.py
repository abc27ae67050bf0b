"""
fprops - format-preserving .properties documents.

Load a properties file, change what you need, store it back: everything you
did not touch comes out byte-for-byte as it went in.
"""

__version__ = "0.1.0"

from fprops.errors import KeyNotFoundError, PropsParseError
from fprops.tokens import PropsToken, TokenType
from fprops.document import PropsDocument
from fprops.reader import PropsReader, load_properties
from fprops.writer import PropsWriter
