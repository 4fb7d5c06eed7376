"""Tests for statement AST generation, including dangling-else resolution."""

import pytest
from scad_parser.ast import (
    parse_ast,
    ModifierKind, Opcode, ParameterValue, ParameterDefinition,
    Boolean, Number, Op, Text, Variable, Vector, Range,
    ModuleDefinition, FunctionDefinition, ModuleCall, For, If, Modifier,
    VariableDeclaration, StatementList, Use, Include, NoOp,
)


def call(name, *args, child=None, modifier=None):
    """Build a module call with positional arguments."""
    params = [ParameterValue(None, arg) for arg in args]
    return ModuleCall(name, params, NoOp() if child is None else child, modifier)


class TestModuleCalls:
    """Test module call statements and their child shapes."""

    def test_simple_call(self, parser):
        assert parse_ast(parser, "cube([1,2,3]);") == [
            call("cube", Vector([Number(1), Number(2), Number(3)]))
        ]

    def test_named_arguments(self, parser):
        assert parse_ast(parser, "cube(size=2, center=true);") == [
            ModuleCall("cube", [
                ParameterValue("size", Number(2)),
                ParameterValue("center", Boolean(True)),
            ], NoOp())
        ]

    def test_single_child(self, parser):
        assert parse_ast(parser, "translate([1,0,0]) cube(1);") == [
            call("translate", Vector([Number(1), Number(0), Number(0)]), child=call("cube", Number(1)))
        ]

    def test_block_child_matches_single_child(self, parser):
        single = parse_ast(parser, "translate([1,0,0]) cube(1);")[0]
        block = parse_ast(parser, "translate([1,0,0]) { cube(1); }")[0]
        assert isinstance(block.child, StatementList)
        assert block.child.items == [single.child]
        assert (block.function, block.params) == (single.function, single.params)

    def test_block_with_several_children(self, parser):
        result = parse_ast(parser, "union() { cube(1); sphere(2); }")
        assert result == [call("union", child=StatementList([
            call("cube", Number(1)),
            call("sphere", Number(2)),
        ]))]

    def test_empty_block_child(self, parser):
        assert parse_ast(parser, "group() {}") == [call("group", child=StatementList([]))]

    def test_nested_calls(self, parser):
        result = parse_ast(parser, "rotate(45) translate([1,0,0]) cube(1);")
        assert result[0].child.child == call("cube", Number(1))

    @pytest.mark.parametrize("name", ["echo", "let", "assert"])
    def test_keyword_module_names(self, parser, name):
        result = parse_ast(parser, f"{name}(a=1) cube(a);")
        assert result == [ModuleCall(name, [ParameterValue("a", Number(1))], call("cube", Variable("a")))]

    def test_identifier_with_leading_digit(self, parser):
        assert parse_ast(parser, "2d_shape();") == [call("2d_shape")]


class TestForLoops:
    """Test for loop statements."""

    def test_for(self, parser):
        result = parse_ast(parser, "for (i = [0:3]) cube(i);")
        assert result == [For(
            [ParameterValue("i", Range(Number(0), None, Number(3)))],
            call("cube", Variable("i")),
        )]

    def test_for_with_several_variables(self, parser):
        result = parse_ast(parser, "for (x = xs, y = [1, 2],) { cube(x); }")
        assert [v.name for v in result[0].variables] == ["x", "y"]
        assert isinstance(result[0].body, StatementList)

    def test_for_with_empty_body(self, parser):
        assert parse_ast(parser, "for (i = xs);") == [For([ParameterValue("i", Variable("xs"))], NoOp())]


class TestIfElse:
    """Test if statements and dangling-else resolution."""

    def test_if(self, parser):
        assert parse_ast(parser, "if (a) x();") == [If(Variable("a"), call("x"), None)]

    def test_if_else(self, parser):
        assert parse_ast(parser, "if (a) x(); else y();") == [If(Variable("a"), call("x"), call("y"))]

    def test_dangling_else_binds_inner(self, parser):
        assert parse_ast(parser, "if (a) if (b) x(); else y();") == [
            If(Variable("a"), If(Variable("b"), call("x"), call("y")), None)
        ]

    def test_both_elses(self, parser):
        assert parse_ast(parser, "if (a) if (b) x(); else y(); else z();") == [
            If(Variable("a"), If(Variable("b"), call("x"), call("y")), call("z"))
        ]

    def test_else_if_chain(self, parser):
        assert parse_ast(parser, "if (a) x(); else if (b) y(); else z();") == [
            If(Variable("a"), call("x"), If(Variable("b"), call("y"), call("z")))
        ]

    def test_open_else_branch(self, parser):
        assert parse_ast(parser, "if (a) x(); else if (b) y();") == [
            If(Variable("a"), call("x"), If(Variable("b"), call("y"), None))
        ]

    def test_else_binds_through_module_call(self, parser):
        assert parse_ast(parser, "if (a) translate() if (b) x(); else y();") == [
            If(Variable("a"), call("translate", child=If(Variable("b"), call("x"), call("y"))), None)
        ]

    def test_else_binds_through_for(self, parser):
        result = parse_ast(parser, "if (a) for (i = xs) if (b) x(); else y();")
        assert result == [If(
            Variable("a"),
            For([ParameterValue("i", Variable("xs"))], If(Variable("b"), call("x"), call("y"))),
            None,
        )]

    def test_else_binds_through_modifier(self, parser):
        assert parse_ast(parser, "if (a) #if (b) x(); else y();") == [
            If(Variable("a"), Modifier(ModifierKind.HIGHLIGHT, If(Variable("b"), call("x"), call("y"))), None)
        ]

    def test_closed_module_call_before_else(self, parser):
        assert parse_ast(parser, "if (a) translate() x(); else y();") == [
            If(Variable("a"), call("translate", child=call("x")), call("y"))
        ]

    def test_block_closes_inner_if(self, parser):
        assert parse_ast(parser, "if (a) { if (b) x(); } else y();") == [
            If(Variable("a"), StatementList([If(Variable("b"), call("x"), None)]), call("y"))
        ]

    def test_if_followed_by_statement(self, parser):
        assert parse_ast(parser, "if (a) x(); y();") == [If(Variable("a"), call("x"), None), call("y")]

    def test_condition_expression(self, parser):
        result = parse_ast(parser, "if (n > 1) x();")
        assert result[0].condition == Op(Variable("n"), Opcode.GT, Number(1))

    def test_definition_consumes_open_body(self, parser):
        assert parse_ast(parser, "if (c) module m() if (a) x(); else y();") == [
            If(Variable("c"), ModuleDefinition("m", [], If(Variable("a"), call("x"), call("y"))), None)
        ]


class TestModifiers:
    """Test statement modifiers."""

    @pytest.mark.parametrize("prefix, kind", [
        ("*", ModifierKind.DISABLE),
        ("!", ModifierKind.SHOW_ONLY),
        ("#", ModifierKind.HIGHLIGHT),
        ("%", ModifierKind.TRANSPARENT),
    ])
    def test_modifier_on_module_call(self, parser, prefix, kind):
        assert parse_ast(parser, f"{prefix}cube(1);") == [call("cube", Number(1), modifier=kind)]

    def test_modifier_on_for(self, parser):
        result = parse_ast(parser, "%for (i = xs) cube(i);")
        assert result[0].modifier is ModifierKind.TRANSPARENT

    def test_modifier_on_block(self, parser):
        assert parse_ast(parser, "!{ cube(1); }") == [
            Modifier(ModifierKind.SHOW_ONLY, StatementList([call("cube", Number(1))]))
        ]

    def test_stacked_modifiers(self, parser):
        assert parse_ast(parser, "*#cube(1);") == [
            Modifier(ModifierKind.DISABLE, call("cube", Number(1), modifier=ModifierKind.HIGHLIGHT))
        ]

    def test_modifier_on_child(self, parser):
        result = parse_ast(parser, "translate([0,0,1]) #cube(1);")
        assert result[0].modifier is None
        assert result[0].child.modifier is ModifierKind.HIGHLIGHT

    def test_modifier_on_open_statement(self, parser):
        assert parse_ast(parser, "!if (a) x();") == [
            Modifier(ModifierKind.SHOW_ONLY, If(Variable("a"), call("x"), None))
        ]


class TestDefinitions:
    """Test module, function and variable definitions."""

    def test_module_definition(self, parser):
        result = parse_ast(parser, """
            module foo() {
                cube([1,2,3]);
            }
            """)
        assert result == [ModuleDefinition("foo", [], StatementList([
            call("cube", Vector([Number(1), Number(2), Number(3)])),
        ]))]

    def test_module_definition_parameters(self, parser):
        result = parse_ast(parser, "module box(size, center=false,) cube(size, center);")
        assert result[0].params == [
            ParameterDefinition("size"),
            ParameterDefinition("center", Boolean(False)),
        ]

    def test_module_definition_single_statement_body(self, parser):
        result = parse_ast(parser, "module dot() sphere(1);")
        assert result[0].body == call("sphere", Number(1))

    def test_function_definition(self, parser):
        assert parse_ast(parser, "function area(r, pi=3) = pi * r * r;") == [
            FunctionDefinition(
                "area",
                [ParameterDefinition("r"), ParameterDefinition("pi", Number(3))],
                Op(Op(Variable("pi"), Opcode.MUL, Variable("r")), Opcode.MUL, Variable("r")),
            )
        ]

    def test_variable_declaration(self, parser):
        assert parse_ast(parser, 'name = "part";') == [VariableDeclaration("name", Text("part"))]

    def test_special_variable(self, parser):
        assert parse_ast(parser, "$fn = 32;") == [VariableDeclaration("$fn", Number(32))]


class TestTopLevel:
    """Test documents, use and include."""

    def test_empty_document(self, parser):
        assert parse_ast(parser, "") == []

    def test_comments_only(self, parser):
        assert parse_ast(parser, """
            // First comment

            /* Second comment */

            /* No /* nested comments */

            /* Multi-line
             * Comment */

            /*
            // Easy-to-toggle comment
            // */
            """) == []

    def test_comments_are_ignored(self, parser):
        assert parse_ast(parser, "/* a */ cube(1); // trailing\n") == parse_ast(parser, "cube(1);")

    def test_empty_statements(self, parser):
        assert parse_ast(parser, ";;") == [NoOp(), NoOp()]

    def test_use_and_include(self, parser):
        assert parse_ast(parser, "use <MCAD/gears.scad>\ninclude<lib.scad>\ncube(1);") == [
            Use("MCAD/gears.scad"),
            Include("lib.scad"),
            call("cube", Number(1)),
        ]

    def test_statement_order_is_kept(self, parser):
        result = parse_ast(parser, "a = 1; cube(a); b = 2;")
        assert [type(s) for s in result] == [VariableDeclaration, ModuleCall, VariableDeclaration]
