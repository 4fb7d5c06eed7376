#######################################################################
# Arpeggio PEG Parser for SCAD
#######################################################################

from arpeggio import ParserPython
from .grammar import document, comment
from .lexer import WHITESPACE, Lexer, Token, TokenKind, tokenize
from .errors import (
    LexicalError, NumberConversionError, ParseError, Position, ScadSyntaxError
)


# --- The parser ---

def getSCADParser(debug=False):
    """Create a SCAD parser instance.

    Comments and whitespace are skipped between tokens. Packrat memoization
    is enabled; a parser instance holds state and must not be shared between
    threads.

    Args:
        debug: If True, enable Arpeggio debug output (default: False)

    Returns:
        ParserPython instance configured for SCAD parsing
    """
    return ParserPython(
        document, comment, ws=WHITESPACE, reduce_tree=False,
        memoization=True, debug=debug
    )


# vim: set ts=4 sw=4 expandtab:
