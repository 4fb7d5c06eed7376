"""
SCAD Lexer
==========

Splits SCAD source text into classified tokens. Comments and whitespace are
skipped and never emitted.

Token classes, by priority
--------------------------
1. Comments: ``/* ... */`` (not nesting, the first ``*/`` closes) and ``// ...``
2. Numbers: ``12``, ``1.5``, ``7.``, ``.5``, ``2e3``, ``1E-3``
3. Whitespace (any Unicode whitespace)
4. Identifiers: ``[$_a-zA-Z0-9]+\\w*``; leading digits are allowed
5. Strings: ``"..."`` with backslash escapes kept verbatim
6. ``use<path>`` and ``include<path>`` as single tokens
7. Symbols and keywords

Classes 2 and 4-7 compete by longest match. Ties go to the higher priority
class, so ``2e3`` is a number while ``2e3x`` is an identifier. A keyword
spelling always beats an identifier of the same text.

The grammar in :mod:`scad_parser.grammar` is scannerless; it builds its
terminal rules from the patterns defined here (see ``IDENTIFIER_TOKEN`` and
``NUMBER_TOKEN``, which encode the longest-match rule for a PEG parser).

Example
-------
>>> from scad_parser.lexer import tokenize
>>> [t.text for t in tokenize('cube(2e3); // big')]
['cube', '(', '2e3', ')', ';']
"""

from __future__ import annotations

import re
from dataclasses import dataclass
from enum import Enum, auto
from typing import Iterator

from .errors import LexicalError, Position


# =============================================================================
# Token Patterns
# =============================================================================

# Characters matched by ``\s`` in a str pattern. Spelled out so the PEG parser
# can use the same set for its whitespace skipping.
WHITESPACE = (
    " \t\n\r\f\v\x1c\x1d\x1e\x1f\x85\xa0\u1680"
    "\u2000\u2001\u2002\u2003\u2004\u2005\u2006\u2007\u2008\u2009\u200a"
    "\u2028\u2029\u202f\u205f\u3000"
)

COMMENT_LINE = r'//[^\n]*'
COMMENT_BLOCK = r'(?s:/\*.*?\*/)'

NUMBER = r'(?:[0-9]+\.[0-9]*|\.[0-9]+|[0-9]+)(?:[eE][+-]?[0-9]+)?'
IDENTIFIER = r'[$_a-zA-Z0-9]+\w*'
STRING = r'"(?s:[^"\\]|\\.)*"'
USE = r'use\s*<[^>]*>'
INCLUDE = r'include\s*<[^>]*>'

KEYWORDS = (
    'module', 'function', 'if', 'else', 'for', 'let', 'echo', 'assert',
    'true', 'false', 'undef',
)

# Longest first so that prefixes never shadow a longer symbol.
SYMBOLS = (
    '==', '!=', '<=', '>=', '&&', '||',
    ';', '{', '}', '(', ')', '[', ']', ',', '=', '<', '>',
    '+', '-', '*', '/', '%', '!', '#', '?', ':', '.',
)

# Text that would continue an identifier.
_IDENT_CONTINUES = r'(?![$\w])'

# Identifier as seen by the PEG parser: not a keyword, and not text the lexer
# would read as an equally long or longer number.
IDENTIFIER_TOKEN = (
    r'(?!(?:' + '|'.join(KEYWORDS) + r')' + _IDENT_CONTINUES + r')'
    r'(?![0-9]+(?:\.|[eE][+-][0-9]|(?:[eE][0-9]+)?' + _IDENT_CONTINUES + r'))'
    + IDENTIFIER
)

# Number as seen by the PEG parser: fails where a longer identifier would win.
NUMBER_TOKEN = (
    r'(?:[0-9]+\.[0-9]*|\.[0-9]+)(?:[eE][+-]?[0-9]+)?'
    r'|[0-9]+[eE][+-][0-9]+'
    r'|[0-9]+(?:[eE][0-9]+)?' + _IDENT_CONTINUES
)


def keyword_token(word: str) -> str:
    """Return a pattern matching `word` only when it is not an identifier prefix."""
    return re.escape(word) + _IDENT_CONTINUES


# =============================================================================
# Tokens
# =============================================================================

class TokenKind(Enum):
    NUMBER = auto()
    IDENTIFIER = auto()
    STRING = auto()
    USE = auto()
    INCLUDE = auto()
    KEYWORD = auto()
    SYMBOL = auto()


@dataclass(frozen=True)
class Token:
    """A classified slice of the source: ``source[start:end] == text``."""
    kind: TokenKind
    text: str
    start: int
    end: int

    def __repr__(self) -> str:
        return f"Token({self.kind.name}, {self.text!r}, {self.start})"


_IGNORED = re.compile(
    '(?:[' + re.escape(WHITESPACE) + ']+|' + COMMENT_LINE + '|' + COMMENT_BLOCK + ')+'
)

# Priority order; used to break ties between equally long matches.
_TOKEN_PATTERNS = (
    (TokenKind.NUMBER, re.compile(NUMBER)),
    (TokenKind.IDENTIFIER, re.compile(IDENTIFIER)),
    (TokenKind.STRING, re.compile(STRING)),
    (TokenKind.USE, re.compile(USE)),
    (TokenKind.INCLUDE, re.compile(INCLUDE)),
)


# =============================================================================
# Lexer
# =============================================================================

class Lexer:
    """
    Lazily tokenizes SCAD source text.

    Iterating a lexer yields tokens from the current position onward. The
    position can be saved with `position` and restored with `seek()`, which
    makes the stream restartable:

        lexer = Lexer(source)
        mark = lexer.position
        first = lexer.next_token()
        lexer.seek(mark)
        assert lexer.next_token() == first

    Raises:
        LexicalError: when no token class matches at the current position.
    """

    def __init__(self, source: str, origin: str = "<string>"):
        self.source = source
        self.origin = origin
        self._pos = 0

    @property
    def position(self) -> int:
        return self._pos

    def seek(self, offset: int) -> None:
        if not 0 <= offset <= len(self.source):
            raise ValueError(f"offset {offset} outside source of length {len(self.source)}")
        self._pos = offset

    def __iter__(self) -> Iterator[Token]:
        while (token := self.next_token()) is not None:
            yield token

    def next_token(self) -> Token | None:
        """Return the next token, or None at end of input."""
        skipped = _IGNORED.match(self.source, self._pos)
        if skipped:
            self._pos = skipped.end()
        if self._pos >= len(self.source):
            return None

        start = self._pos
        best_kind, best_end = None, start
        for kind, pattern in _TOKEN_PATTERNS:
            m = pattern.match(self.source, start)
            if m and m.end() > best_end:
                best_kind, best_end = kind, m.end()
        for symbol in SYMBOLS:
            if self.source.startswith(symbol, start):
                if start + len(symbol) > best_end:
                    best_kind, best_end = TokenKind.SYMBOL, start + len(symbol)
                break

        if best_kind is None:
            raise LexicalError(
                f"unexpected character {self.source[start]!r}",
                Position(self.origin, start, self.source),
            )

        text = self.source[start:best_end]
        if best_kind is TokenKind.IDENTIFIER and text in KEYWORDS:
            best_kind = TokenKind.KEYWORD
        self._pos = best_end
        return Token(best_kind, text, start, best_end)


def tokenize(source: str, origin: str = "<string>") -> list[Token]:
    """Tokenize the whole of `source`."""
    return list(Lexer(source, origin))
