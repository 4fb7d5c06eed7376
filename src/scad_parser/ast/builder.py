"""Conversion of Arpeggio parse trees into SCAD AST nodes."""

from __future__ import annotations

import math
import re
import struct
from dataclasses import replace

from arpeggio import PTNodeVisitor, visit_parse_tree

from ..errors import NumberConversionError, Position
from ..lexer import NUMBER
from .nodes import (
    And, ArrayAccess, Assert, Boolean, Echo, FieldAccess, For, Function,
    FunctionDefinition, If, Include, Let, ListComprehension, Modifier,
    ModifierKind, ModuleCall, ModuleDefinition, Negative, NoOp, Not, Number,
    Op, Opcode, Or, ParameterDefinition, ParameterValue, Range, StatementList,
    Ternary, Text, Undef, Use, Variable, VariableDeclaration, Vector,
)


_NUMBER_RE = re.compile(NUMBER)


def parse_number(text: str, position: Position | None = None) -> float:
    """Convert numeric literal text to a single precision value.

    A trailing `.` is accepted (`7.` is 7). Magnitudes beyond the single
    precision range become infinities.

    Raises:
        NumberConversionError: if `text` is not a numeric literal.
    """
    if position is None:
        position = Position("<number>", 0, text)
    if not _NUMBER_RE.fullmatch(text):
        raise NumberConversionError(f"invalid numeric literal {text!r}", position)
    try:
        value = float(text[:-1] if text.endswith(".") else text)
    except ValueError as e:
        raise NumberConversionError(f"invalid numeric literal {text!r}", position) from e
    try:
        return struct.unpack("f", struct.pack("f", value))[0]
    except OverflowError:
        return math.copysign(math.inf, value)


def _first(results, default=None):
    return results[0] if results else default


class ASTBuilderVisitor(PTNodeVisitor):
    """
    Visits the parse tree generated by the PEG grammar in grammar.py and builds
    the AST defined in nodes.py.
    """

    def __init__(self, parser, origin="<string>"):
        """Initialize the visitor.

        Args:
            parser: The Arpeggio parser that produced the tree; its input is
                kept by every node position.
            origin: Label for the source, used in positions.
        """
        super().__init__()
        self.parser = parser
        self.origin = origin

    def build(self, parse_tree):
        """Return the list of top-level statements for `parse_tree`."""
        return visit_parse_tree(parse_tree, self)

    def _get_node_position(self, node):
        return Position(self.origin, node.position, self.parser.input)

    # --- Document ---

    def visit_document(self, node, children):
        return list(children.toplevel_statement)

    def visit_toplevel_statement(self, node, children):
        return children[0]

    def visit_use_statement(self, node, children):
        text = node.value
        return Use(text[text.index("<") + 1:-1], position=self._get_node_position(node))

    def visit_include_statement(self, node, children):
        text = node.value
        return Include(text[text.index("<") + 1:-1], position=self._get_node_position(node))

    # --- Statements ---

    def visit_statement(self, node, children):
        return children[0]

    def visit_closed_statement(self, node, children):
        return children[0]

    def visit_open_statement(self, node, children):
        return children[0]

    def visit_empty_statement(self, node, children):
        return NoOp(position=self._get_node_position(node))

    def visit_statement_block(self, node, children):
        return StatementList(list(children.statement), position=self._get_node_position(node))

    def visit_module_definition(self, node, children):
        return ModuleDefinition(
            name=children.identifier[0],
            params=_first(children.parameters, []),
            body=children.statement[0],
            position=self._get_node_position(node),
        )

    def visit_function_definition(self, node, children):
        return FunctionDefinition(
            name=children.identifier[0],
            params=_first(children.parameters, []),
            body=children.expr[0],
            position=self._get_node_position(node),
        )

    def visit_variable_declaration(self, node, children):
        return VariableDeclaration(
            name=children.identifier[0],
            value=children.expr[0],
            position=self._get_node_position(node),
        )

    def visit_closed_if_else(self, node, children):
        if_true, if_false = children.closed_statement
        return If(children.expr[0], if_true, if_false, position=self._get_node_position(node))

    def visit_open_if_else(self, node, children):
        return If(
            children.expr[0],
            children.closed_statement[0],
            children.open_statement[0],
            position=self._get_node_position(node),
        )

    def visit_open_if(self, node, children):
        return If(children.expr[0], children.statement[0], None, position=self._get_node_position(node))

    def visit_modifier(self, node, children):
        return ModifierKind(node.value)

    def _apply_modifier(self, node, children, target):
        kind = children.modifier[0]
        # Module calls and for loops carry their own modifier slot.
        if isinstance(target, (ModuleCall, For)) and target.modifier is None:
            return replace(target, modifier=kind, position=self._get_node_position(node))
        return Modifier(kind, target, position=self._get_node_position(node))

    def visit_closed_modifier(self, node, children):
        return self._apply_modifier(node, children, children.closed_statement[0])

    def visit_open_modifier(self, node, children):
        return self._apply_modifier(node, children, children.open_statement[0])

    def _for(self, node, children, body):
        return For(_first(children.arguments, []), body, position=self._get_node_position(node))

    def visit_closed_for(self, node, children):
        return self._for(node, children, children.closed_statement[0])

    def visit_open_for(self, node, children):
        return self._for(node, children, children.open_statement[0])

    def visit_module_call_name(self, node, children):
        return node.flat_str()

    def _module_call(self, node, children, child):
        return ModuleCall(
            function=children.module_call_name[0],
            params=_first(children.arguments, []),
            child=child,
            position=self._get_node_position(node),
        )

    def visit_closed_module_call(self, node, children):
        return self._module_call(node, children, children.closed_statement[0])

    def visit_open_module_call(self, node, children):
        return self._module_call(node, children, children.open_statement[0])

    # --- Parameters and arguments ---

    def visit_parameters(self, node, children):
        return list(children.parameter)

    def visit_parameter(self, node, children):
        return ParameterDefinition(
            children.identifier[0],
            _first(children.expr),
            position=self._get_node_position(node),
        )

    def visit_arguments(self, node, children):
        return list(children.argument)

    def visit_argument(self, node, children):
        return children[0]

    def visit_named_argument(self, node, children):
        return ParameterValue(children.identifier[0], children.expr[0], position=self._get_node_position(node))

    def visit_positional_argument(self, node, children):
        return ParameterValue(None, children.expr[0], position=self._get_node_position(node))

    # --- Expressions ---

    def visit_expr(self, node, children):
        return children[0]

    def visit_let_expr(self, node, children):
        bindings = [binding for group in children.let_clause for binding in group]
        return Let(bindings, children.prec_ternary[0], position=self._get_node_position(node))

    def visit_let_clause(self, node, children):
        return _first(children.arguments, [])

    def visit_prec_ternary(self, node, children):
        return children[0]

    def visit_echo_expr(self, node, children):
        return Echo(_first(children.arguments, []), children.expr[0], position=self._get_node_position(node))

    def visit_assert_expr(self, node, children):
        return Assert(_first(children.arguments, []), children.expr[0], position=self._get_node_position(node))

    def visit_ternary_expr(self, node, children):
        if_true, if_false = children.expr
        return Ternary(children.prec_logical[0], if_true, if_false, position=self._get_node_position(node))

    def _fold_binary(self, node, children):
        # children alternate operand, operator text, operand, ...
        position = self._get_node_position(node)
        result = children[0]
        for i in range(1, len(children), 2):
            op, right = children[i], children[i + 1]
            if op == "||":
                result = Or(result, right, position=position)
            elif op == "&&":
                result = And(result, right, position=position)
            else:
                result = Op(result, Opcode(op), right, position=position)
        return result

    visit_prec_logical = _fold_binary
    visit_prec_comparison = _fold_binary
    visit_prec_addition = _fold_binary
    visit_prec_multiplication = _fold_binary

    def visit_prec_unary(self, node, children):
        if len(children) == 1:
            return children[0]
        op, operand = children
        if op == "-":
            return Negative(operand, position=self._get_node_position(node))
        if op == "!":
            return Not(operand, position=self._get_node_position(node))
        return operand

    def visit_prec_postfix(self, node, children):
        position = self._get_node_position(node)
        result = children[0]
        for kind, value in children[1:]:
            if kind == "member":
                result = FieldAccess(result, value, position=position)
            else:
                result = ArrayAccess(result, value, position=position)
        return result

    def visit_member_suffix(self, node, children):
        return ("member", children.identifier[0])

    def visit_index_suffix(self, node, children):
        return ("index", children.expr[0])

    # --- Primaries ---

    def visit_primary(self, node, children):
        return children[0]

    def visit_paren_expr(self, node, children):
        return children.expr[0]

    def visit_KWD_UNDEF(self, node, children):
        return Undef(position=self._get_node_position(node))

    def visit_KWD_TRUE(self, node, children):
        return Boolean(True, position=self._get_node_position(node))

    def visit_KWD_FALSE(self, node, children):
        return Boolean(False, position=self._get_node_position(node))

    def visit_string_literal(self, node, children):
        return Text(children[0][1:-1], position=self._get_node_position(node))

    def visit_number_literal(self, node, children):
        position = self._get_node_position(node)
        return Number(parse_number(children[0], position), position=position)

    def visit_function_call(self, node, children):
        return Function(
            children.identifier[0],
            _first(children.arguments, []),
            position=self._get_node_position(node),
        )

    def visit_variable(self, node, children):
        return Variable(children[0], position=self._get_node_position(node))

    def visit_list_comprehension(self, node, children):
        return ListComprehension(
            lets=list(children.let_clause),
            variables=_first(children.arguments, []),
            body=children.expr[0],
            position=self._get_node_position(node),
        )

    def visit_range_expr(self, node, children):
        exprs = children.expr
        if len(exprs) == 2:
            start, increment, end = exprs[0], None, exprs[1]
        else:
            start, increment, end = exprs
        return Range(start, increment, end, position=self._get_node_position(node))

    def visit_vector_expr(self, node, children):
        return Vector(list(children.expr), position=self._get_node_position(node))
