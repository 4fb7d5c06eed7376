"""Error types raised while parsing SCAD source.

Every error carries the `Position` where parsing stopped. Nothing is recovered:
the first error aborts the document.

    ParseError
    ├── LexicalError           - no token class matches at a position
    ├── ScadSyntaxError        - the tokens match no grammar production
    └── NumberConversionError  - a numeric token does not convert to a float
"""

from __future__ import annotations

from dataclasses import dataclass, field


@dataclass(frozen=True)
class Position:
    """A position in a source buffer.

    `offset` counts characters (code points) from the start of the buffer,
    not bytes; `byte_offset` gives the UTF-8 byte offset of the same place.
    Stores a reference to the buffer itself. Line and column are calculated
    lazily when accessed, and the column also counts characters.
    """
    origin: str
    offset: int  # 0-indexed character offset
    source: str = field(default="", repr=False, compare=False)

    def _calculate_line_col(self) -> tuple[int, int]:
        """Return (line, column), both 1-indexed."""
        if not self.source or self.offset < 0 or self.offset > len(self.source):
            return (1, 1)
        text_before = self.source[:self.offset]
        line_number = text_before.count('\n') + 1
        last_newline = text_before.rfind('\n')
        return (line_number, self.offset - last_newline)

    @property
    def line(self) -> int:
        return self._calculate_line_col()[0]

    @property
    def column(self) -> int:
        return self._calculate_line_col()[1]

    @property
    def byte_offset(self) -> int:
        """The offset in the UTF-8 encoding of the source."""
        if not self.source:
            return self.offset
        return len(self.source[:self.offset].encode('utf-8'))

    def __str__(self) -> str:
        return f"{self.origin}:{self.line}:{self.column}"


class ParseError(Exception):
    """Base class for every error raised by the parser.

    Attributes:
        message: Short description of the failure.
        position: Where in the source the failure occurred.
        expected: Descriptions of the tokens or rules that would have been
            accepted at `position`. Empty when not applicable.
    """

    def __init__(self, message: str, position: Position, expected: list[str] | None = None):
        self.message = message
        self.position = position
        self.expected = list(expected) if expected else []
        super().__init__(f"{position}: {message}")

    @property
    def offset(self) -> int:
        return self.position.offset

    @property
    def line(self) -> int:
        return self.position.line

    @property
    def column(self) -> int:
        return self.position.column


class LexicalError(ParseError):
    """Raised when the input at some offset matches no token class."""


class ScadSyntaxError(ParseError):
    """Raised when the token stream matches no grammar production."""


class NumberConversionError(ParseError):
    """Raised when a numeric token cannot be converted to a float.

    The number pattern only admits convertible text, so this signals text that
    reached the converter without going through the lexer.
    """
