import logging

from arpeggio import NoMatch

from scad_parser import getSCADParser
from ..errors import LexicalError, ParseError, Position, ScadSyntaxError
from ..lexer import Lexer

# Import all AST nodes from nodes
from .nodes import (
    ASTNode,
    Opcode,
    ModifierKind,
    ParameterValue,
    ParameterDefinition,
    Let,
    Ternary,
    Or,
    And,
    Op,
    Negative,
    Not,
    Echo,
    Assert,
    Undef,
    Boolean,
    Number,
    Text,
    Variable,
    FieldAccess,
    ArrayAccess,
    Vector,
    Range,
    Function,
    ListComprehension,
    Expr,
    ModuleDefinition,
    FunctionDefinition,
    ModuleCall,
    For,
    If,
    Modifier,
    VariableDeclaration,
    StatementList,
    Use,
    Include,
    NoOp,
    Statement,
)

# Import ASTBuilderVisitor and the number conversion it uses
from .builder import ASTBuilderVisitor, parse_number


logger = logging.getLogger(__name__)


# --- AST convenience functions ---

def _expected(rules) -> list[str]:
    names = (getattr(rule, "to_match", None) or rule.rule_name or rule.name for rule in rules)
    return list(dict.fromkeys(names))


def _expected_message(expected) -> str:
    if not expected:
        return "Not expected input"
    return "Expected " + " or ".join(f"'{name}'" for name in expected)


def _raise_lexical_error(code, origin, offset):
    """Lex `code` up to `offset`, letting any LexicalError on the way propagate."""
    for token in Lexer(code, origin):
        if token.end > offset:
            return


def _nesting_error(code, origin):
    logger.debug("parse of %s failed: nesting too deep", origin)
    return ScadSyntaxError("nesting too deep", Position(origin, 0, code))


def parse_ast(parser, code, origin="<string>") -> list[Statement]:
    """Parse code and return the top-level statements.

    This is the main public API for converting SCAD code to an AST.

    Args:
        parser: An Arpeggio parser instance (from getSCADParser())
        code: The SCAD source text to parse
        origin: Label for the source, used in node and error positions

    Returns:
        The top-level statements, in source order

    Raises:
        LexicalError: if the text contains a character no token starts with.
        ScadSyntaxError: if the tokens do not form a valid document, or the
            expressions nest deeper than the interpreter stack allows.
        NumberConversionError: if a numeric literal cannot be converted.
    """
    logger.debug("parsing %s (%d characters)", origin, len(code))
    try:
        parse_tree = parser.parse(code)
    except NoMatch as e:
        e.eval_attrs()
        logger.debug("parse of %s failed at offset %d: %s", origin, e.position, e.message)
        # A character the lexer rejects is reported as such, not as a syntax error.
        _raise_lexical_error(code, origin, e.position)
        expected = _expected(e.rules)
        raise ScadSyntaxError(
            _expected_message(expected),
            Position(origin, e.position, code),
            expected=expected,
        ) from e
    except RecursionError as e:
        raise _nesting_error(code, origin) from e
    try:
        statements = ASTBuilderVisitor(parser, origin).build(parse_tree)
    except RecursionError as e:
        raise _nesting_error(code, origin) from e
    logger.debug("parsed %s: %d top-level statements", origin, len(statements))
    return statements


def getASTfromString(code, origin="<string>") -> list[Statement]:
    """Parse SCAD code from a string and return the top-level statements.

    A new parser is created for every call, so calls share no state.

    Args:
        code: The SCAD source text to parse
        origin: Label for the source, used in node and error positions

    Returns:
        The top-level statements, in source order
    """
    parser = getSCADParser()
    return parse_ast(parser, code, origin)


parse = getASTfromString


__all__ = [
    "parse_ast",
    "getASTfromString",
    "parse",
    "parse_number",
    "ASTBuilderVisitor",
    "ParseError",
    "LexicalError",
    "ScadSyntaxError",
    "Position",
    "ASTNode",
    "Opcode",
    "ModifierKind",
    "ParameterValue",
    "ParameterDefinition",
    "Expr",
    "Let",
    "Ternary",
    "Or",
    "And",
    "Op",
    "Negative",
    "Not",
    "Echo",
    "Assert",
    "Undef",
    "Boolean",
    "Number",
    "Text",
    "Variable",
    "FieldAccess",
    "ArrayAccess",
    "Vector",
    "Range",
    "Function",
    "ListComprehension",
    "Statement",
    "ModuleDefinition",
    "FunctionDefinition",
    "ModuleCall",
    "For",
    "If",
    "Modifier",
    "VariableDeclaration",
    "StatementList",
    "Use",
    "Include",
    "NoOp",
]
