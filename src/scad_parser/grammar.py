#######################################################################
# Arpeggio PEG Grammar for SCAD
#######################################################################

from arpeggio import (
    Optional, ZeroOrMore, OneOrMore, EOF, Not,
    RegExMatch as _
)

from .lexer import (
    COMMENT_BLOCK, COMMENT_LINE, IDENTIFIER_TOKEN, INCLUDE, NUMBER_TOKEN,
    STRING, USE, keyword_token
)


# --- SCAD document root ---

def document():
    return (ZeroOrMore(toplevel_statement), EOF)


def toplevel_statement():
    return [use_statement, include_statement, statement]


# --- Lexical and basic rules ---

def comment_line():
    return _(COMMENT_LINE, str_repr='comment')


def comment_multi():
    return _(COMMENT_BLOCK, str_repr='comment')


def comment():
    return [comment_line, comment_multi]


# --- Tokens ---

def identifier():
    return _(IDENTIFIER_TOKEN, str_repr='identifier')


def TOK_NUMBER():
    return _(NUMBER_TOKEN, str_repr='number')


def TOK_STRING():
    return _(STRING, str_repr='string')


def TOK_COMMA():
    return ','


def TOK_COLON():
    return ':'


def TOK_SEMICOLON():
    return ';'


def TOK_QUESTION():
    return '?'


def TOK_PERIOD():
    # A period followed by a digit starts a number.
    return _(r'\.(?![0-9])', str_repr='.')


def TOK_ASSIGN():
    return ('=', Not('='))


def TOK_PAREN():
    return '('


def TOK_ENDPAREN():
    return ')'


def TOK_BRACE():
    return '{'


def TOK_ENDBRACE():
    return '}'


def TOK_BRACKET():
    return '['


def TOK_ENDBRACKET():
    return ']'


# --- Operators ---
# Captured as regular expressions so the operator text reaches the builder.

def OP_LOGICAL():
    return _(r'\|\||&&', str_repr='logical operator')


def OP_COMPARISON():
    return _(r'<=|>=|==|!=|<|>', str_repr='comparison operator')


def OP_ADDITIVE():
    return _(r'[-+]', str_repr='additive operator')


def OP_MULTIPLICATIVE():
    return _(r'[*/%]', str_repr='multiplicative operator')


def OP_UNARY():
    return _(r'[-+]|!(?!=)', str_repr='unary operator')


# --- Modifiers ---

def modifier():
    return _(r'[*!#%]', str_repr='modifier')


# --- Keywords ---

def KWD_MODULE():
    return _(keyword_token('module'), str_repr='module')


def KWD_FUNCTION():
    return _(keyword_token('function'), str_repr='function')


def KWD_IF():
    return _(keyword_token('if'), str_repr='if')


def KWD_ELSE():
    return _(keyword_token('else'), str_repr='else')


def KWD_FOR():
    return _(keyword_token('for'), str_repr='for')


def KWD_LET():
    return _(keyword_token('let'), str_repr='let')


def KWD_ECHO():
    return _(keyword_token('echo'), str_repr='echo')


def KWD_ASSERT():
    return _(keyword_token('assert'), str_repr='assert')


def KWD_TRUE():
    return _(keyword_token('true'), str_repr='true')


def KWD_FALSE():
    return _(keyword_token('false'), str_repr='false')


def KWD_UNDEF():
    return _(keyword_token('undef'), str_repr='undef')


# --- Top level ---

def use_statement():
    return _(USE, str_repr='use<...>')


def include_statement():
    return _(INCLUDE, str_repr='include<...>')


# --- Statements ---
#
# Every statement belongs to one of two families. An open statement ends in
# an `if` without an `else`; a closed statement never does. Only a closed
# statement may stand between `if (...)` and `else`, so an `else` always
# binds to the nearest `if`.

def statement():
    return [closed_statement, open_statement]


def closed_statement():
    return [
            empty_statement,
            statement_block,
            module_definition,
            function_definition,
            variable_declaration,
            closed_if_else,
            closed_modifier,
            closed_for,
            closed_module_call
        ]


def open_statement():
    return [
            open_if_else,
            open_if,
            open_modifier,
            open_for,
            open_module_call
        ]


def empty_statement():
    return TOK_SEMICOLON


def statement_block():
    return (TOK_BRACE, ZeroOrMore(statement), TOK_ENDBRACE)


def module_definition():
    return (KWD_MODULE, identifier, TOK_PAREN, parameters, TOK_ENDPAREN, statement)


def function_definition():
    return (KWD_FUNCTION, identifier, TOK_PAREN, parameters, TOK_ENDPAREN, TOK_ASSIGN, expr, TOK_SEMICOLON)


def variable_declaration():
    return (identifier, TOK_ASSIGN, expr, TOK_SEMICOLON)


def closed_if_else():
    return (KWD_IF, TOK_PAREN, expr, TOK_ENDPAREN, closed_statement, KWD_ELSE, closed_statement)


def open_if_else():
    return (KWD_IF, TOK_PAREN, expr, TOK_ENDPAREN, closed_statement, KWD_ELSE, open_statement)


def open_if():
    return (KWD_IF, TOK_PAREN, expr, TOK_ENDPAREN, statement)


def closed_modifier():
    return (modifier, closed_statement)


def open_modifier():
    return (modifier, open_statement)


def closed_for():
    return (KWD_FOR, TOK_PAREN, arguments, TOK_ENDPAREN, closed_statement)


def open_for():
    return (KWD_FOR, TOK_PAREN, arguments, TOK_ENDPAREN, open_statement)


def module_call_name():
    return [identifier, KWD_ECHO, KWD_LET, KWD_ASSERT]


def closed_module_call():
    return (module_call_name, TOK_PAREN, arguments, TOK_ENDPAREN, closed_statement)


def open_module_call():
    return (module_call_name, TOK_PAREN, arguments, TOK_ENDPAREN, open_statement)


# --- Parameters used to define functions and modules ---

def parameters():
    return Optional(OneOrMore(parameter, sep=TOK_COMMA), Optional(TOK_COMMA))


def parameter():
    return (identifier, Optional(TOK_ASSIGN, expr))


# --- Arguments used when calling functions and modules ---

def arguments():
    return Optional(OneOrMore(argument, sep=TOK_COMMA), Optional(TOK_COMMA))


def argument():
    return [
            named_argument,
            positional_argument
        ]


def named_argument():
    return (identifier, TOK_ASSIGN, expr)


def positional_argument():
    return (expr,)


# --- Expressions ---

def expr():
    return [let_expr, prec_ternary]


def let_expr():
    return (OneOrMore(let_clause), prec_ternary)


def let_clause():
    return (KWD_LET, TOK_PAREN, arguments, TOK_ENDPAREN)


def prec_ternary():
    return [
            echo_expr,
            assert_expr,
            ternary_expr,
            prec_logical
        ]


def echo_expr():
    return (KWD_ECHO, TOK_PAREN, arguments, TOK_ENDPAREN, expr)


def assert_expr():
    return (KWD_ASSERT, TOK_PAREN, arguments, TOK_ENDPAREN, expr)


def ternary_expr():
    return (prec_logical, TOK_QUESTION, expr, TOK_COLON, expr)


def prec_logical():
    return OneOrMore(prec_comparison, sep=OP_LOGICAL)


def prec_comparison():
    return OneOrMore(prec_addition, sep=OP_COMPARISON)


def prec_addition():
    return OneOrMore(prec_multiplication, sep=OP_ADDITIVE)


def prec_multiplication():
    return OneOrMore(prec_unary, sep=OP_MULTIPLICATIVE)


def prec_unary():
    return [
        (OP_UNARY, prec_unary),
        prec_postfix
    ]


def prec_postfix():
    return (primary, ZeroOrMore([member_suffix, index_suffix]))


def member_suffix():
    return (TOK_PERIOD, identifier)


def index_suffix():
    return (TOK_BRACKET, expr, TOK_ENDBRACKET)


def primary():
    return [
            paren_expr,
            KWD_UNDEF,
            KWD_TRUE,
            KWD_FALSE,
            string_literal,
            number_literal,
            function_call,
            list_comprehension,
            range_expr,
            vector_expr,
            variable
        ]


def paren_expr():
    return (TOK_PAREN, expr, TOK_ENDPAREN)


def string_literal():
    return (TOK_STRING,)


def number_literal():
    return (TOK_NUMBER,)


def function_call():
    return (identifier, TOK_PAREN, arguments, TOK_ENDPAREN)


def variable():
    return (identifier,)  # Tuple to prevent eliding the identifier


# --- Vectors, ranges and list comprehension ---

def list_comprehension():
    return (
        TOK_BRACKET,
        ZeroOrMore(let_clause),
        KWD_FOR,
        TOK_PAREN,
        arguments,
        TOK_ENDPAREN,
        expr,
        TOK_ENDBRACKET
    )


def range_expr():
    return (TOK_BRACKET, expr, TOK_COLON, expr, Optional(TOK_COLON, expr), TOK_ENDBRACKET)


def vector_expr():
    return (TOK_BRACKET, Optional(OneOrMore(expr, sep=TOK_COMMA), Optional(TOK_COMMA)), TOK_ENDBRACKET)


# vim: set ts=4 sw=4 expandtab:
