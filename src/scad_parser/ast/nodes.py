from __future__ import annotations
import math
from dataclasses import dataclass, field
from enum import Enum
from typing import Union

from ..errors import Position


# --- Enumerations. ---

class Opcode(Enum):
    """Binary operators that share the generic `Op` node.

    The value of each member is the operator as written in source.
    Logical `||` and `&&` have dedicated nodes (`Or`, `And`).
    """
    ADD = "+"
    SUB = "-"
    MUL = "*"
    DIV = "/"
    REM = "%"
    GT = ">"
    GTE = ">="
    EQUAL = "=="
    NOT_EQUAL = "!="
    LTE = "<="
    LT = "<"


class ModifierKind(Enum):
    """Statement modifiers. The value is the prefix character."""
    DISABLE = "*"
    SHOW_ONLY = "!"
    HIGHLIGHT = "#"
    TRANSPARENT = "%"


# --- AST nodes classes. ---

@dataclass(frozen=True)
class ASTNode(object):
    """Base class for all AST nodes.

    All nodes are immutable. Every node records where it starts in the source,
    but the position does not take part in equality: two parses of the same
    text compare equal, and so do a parsed tree and one built by hand.

    Attributes:
        position: The source position of this node, or None for nodes built
            outside the parser.
    """
    position: Position | None = field(default=None, compare=False, repr=False, kw_only=True)


# --- Call-site and declaration-site parameters. ---

@dataclass(frozen=True)
class ParameterValue(ASTNode):
    """An argument at a call site, positional or named.

    Examples:
        cube(10)            // ParameterValue(None, Number(10))
        cube(size=10)       // ParameterValue("size", Number(10))
        for (i = [0:3]) ... // ParameterValue("i", Range(...))

    Attributes:
        name: The parameter name for a named argument, or None.
        value: The argument expression.
    """
    name: str | None
    value: Expr

    def __str__(self):
        return f"{self.name}={self.value}" if self.name is not None else str(self.value)


@dataclass(frozen=True)
class ParameterDefinition(ASTNode):
    """A parameter in a module or function definition.

    Examples:
        function f(x) = x;        // ParameterDefinition("x", None)
        module m(size=1) cube();  // ParameterDefinition("size", Number(1))

    Attributes:
        name: The parameter name.
        default_value: The default expression, or None when there is none.
    """
    name: str
    default_value: Expr | None = None

    def __str__(self):
        if self.default_value is None:
            return self.name
        return f"{self.name}={self.default_value}"


def _join(items) -> str:
    return ", ".join(str(item) for item in items)


# --- Expressions. ---

@dataclass(frozen=True)
class Let(ASTNode):
    """A let expression.

    The bindings are visible only in `body`. Consecutive `let(...)` groups are
    folded into one binding list, so `let(a=1) let(b=2) a+b` gives a single
    `Let` with two bindings.

    Attributes:
        bindings: The local bindings, in source order.
        body: The expression evaluated with the bindings in scope.
    """
    bindings: list[ParameterValue]
    body: Expr

    def __str__(self):
        return f"(let({_join(self.bindings)}) {self.body})"


@dataclass(frozen=True)
class Ternary(ASTNode):
    """A conditional expression: `condition ? if_true : if_false`."""
    condition: Expr
    if_true: Expr
    if_false: Expr

    def __str__(self):
        return f"({self.condition} ? {self.if_true} : {self.if_false})"


@dataclass(frozen=True)
class Or(ASTNode):
    """Short-circuit logical or: `left || right`."""
    left: Expr
    right: Expr

    def __str__(self):
        return f"({self.left} || {self.right})"


@dataclass(frozen=True)
class And(ASTNode):
    """Short-circuit logical and: `left && right`."""
    left: Expr
    right: Expr

    def __str__(self):
        return f"({self.left} && {self.right})"


@dataclass(frozen=True)
class Op(ASTNode):
    """An arithmetic or comparison operation.

    Comparisons do not chain: `a < b < c` is `Op(Op(a, LT, b), LT, c)`.

    Attributes:
        left: The left operand.
        opcode: The operator.
        right: The right operand.
    """
    left: Expr
    opcode: Opcode
    right: Expr

    def __str__(self):
        return f"({self.left} {self.opcode.value} {self.right})"


@dataclass(frozen=True)
class Negative(ASTNode):
    """Arithmetic negation: `-inner`."""
    inner: Expr

    def __str__(self):
        return f"(-{self.inner})"


@dataclass(frozen=True)
class Not(ASTNode):
    """Logical negation: `!inner`."""
    inner: Expr

    def __str__(self):
        return f"(!{self.inner})"


@dataclass(frozen=True)
class Echo(ASTNode):
    """An echo expression.

    Prints its arguments when evaluated and yields the value of `body`.

    Example:
        x = echo("computing", n) n * 2;
    """
    args: list[ParameterValue]
    body: Expr

    def __str__(self):
        return f"(echo({_join(self.args)}) {self.body})"


@dataclass(frozen=True)
class Assert(ASTNode):
    """An assert expression.

    Checks its arguments when evaluated and yields the value of `body`.

    Example:
        function f(x) = assert(x > 0, "x must be positive") sqrt(x);
    """
    args: list[ParameterValue]
    body: Expr

    def __str__(self):
        return f"(assert({_join(self.args)}) {self.body})"


@dataclass(frozen=True)
class Undef(ASTNode):
    """The `undef` literal."""

    def __str__(self):
        return "undef"


@dataclass(frozen=True)
class Boolean(ASTNode):
    """A `true` or `false` literal."""
    value: bool

    def __str__(self):
        return "true" if self.value else "false"


@dataclass(frozen=True)
class Number(ASTNode):
    """A numeric literal.

    The value is rounded to single precision when parsed, so `Number(0.1)`
    built by hand does not equal the parsed `0.1`; compare against
    `scad_parser.ast.builder.parse_number("0.1")` instead.

    Attributes:
        value: The numeric value.
    """
    value: float

    def __str__(self):
        # Out-of-range literals parse to infinity, so render one back.
        if math.isinf(self.value):
            return "1e39" if self.value > 0 else "-1e39"
        return repr(self.value)


@dataclass(frozen=True)
class Text(ASTNode):
    """A string literal.

    Holds the source text between the quotes. Escape sequences are kept as
    written: the literal `"a\\"b"` gives `Text('a\\\\"b')`.

    Attributes:
        value: The raw string contents, without the surrounding quotes.
    """
    value: str

    def __str__(self):
        return f'"{self.value}"'


@dataclass(frozen=True)
class Variable(ASTNode):
    """A reference to a variable by name."""
    name: str

    def __str__(self):
        return self.name


@dataclass(frozen=True)
class FieldAccess(ASTNode):
    """Member access: `parent.field`, e.g. `v.x`."""
    parent: Expr
    field: str

    def __str__(self):
        return f"{self.parent}.{self.field}"


@dataclass(frozen=True)
class ArrayAccess(ASTNode):
    """Indexing: `array[index]`."""
    array: Expr
    index: Expr

    def __str__(self):
        return f"{self.array}[{self.index}]"


@dataclass(frozen=True)
class Vector(ASTNode):
    """A vector literal: `[1, 2, 3]`."""
    items: list[Expr]

    def __str__(self):
        return f"[{_join(self.items)}]"


@dataclass(frozen=True)
class Range(ASTNode):
    """A range literal.

    Examples:
        [0:10]      // Range(start=0, increment=None, end=10)
        [0:2:10]    // Range(start=0, increment=2, end=10)

    Attributes:
        start: The first value.
        increment: The step between values, or None when omitted.
        end: The last value.
    """
    start: Expr
    increment: Expr | None
    end: Expr

    def __str__(self):
        if self.increment is None:
            return f"[{self.start}:{self.end}]"
        return f"[{self.start}:{self.increment}:{self.end}]"


@dataclass(frozen=True)
class Function(ASTNode):
    """A function call expression: `name(args)`."""
    name: str
    args: list[ParameterValue]

    def __str__(self):
        return f"{self.name}({_join(self.args)})"


@dataclass(frozen=True)
class ListComprehension(ASTNode):
    """A list comprehension.

    Each `let(...)` group before the `for` is kept as its own binding list,
    since every group can see the names bound by the groups before it.

    Example:
        [let(n=5) for (i=[1:n]) i*i]

    Attributes:
        lets: The binding groups, in source order.
        variables: The loop variables and what they iterate over.
        body: The expression evaluated for each iteration.
    """
    lets: list[list[ParameterValue]]
    variables: list[ParameterValue]
    body: Expr

    def __str__(self):
        lets = "".join(f"let({_join(group)}) " for group in self.lets)
        return f"[{lets}for ({_join(self.variables)}) {self.body}]"


Expr = Union[
    Let, Ternary, Or, And, Op, Negative, Not, Echo, Assert,
    Undef, Boolean, Number, Text, Variable, FieldAccess, ArrayAccess,
    Vector, Range, Function, ListComprehension,
]


# --- Statements. ---

@dataclass(frozen=True)
class ModuleDefinition(ASTNode):
    """A module definition.

    Example:
        module box(size=1) { cube(size); }

    Attributes:
        name: The module name.
        params: The declared parameters.
        body: The statement the module expands to.
    """
    name: str
    params: list[ParameterDefinition]
    body: Statement

    def __str__(self):
        return f"module {self.name}({_join(self.params)}) {self.body}"


@dataclass(frozen=True)
class FunctionDefinition(ASTNode):
    """A function definition.

    Example:
        function area(r) = PI * r * r;

    Attributes:
        name: The function name.
        params: The declared parameters.
        body: The expression the function evaluates to.
    """
    name: str
    params: list[ParameterDefinition]
    body: Expr

    def __str__(self):
        return f"function {self.name}({_join(self.params)}) = {self.body};"


@dataclass(frozen=True)
class ModuleCall(ASTNode):
    """A module instantiation.

    The child is what follows the argument list: a single statement, a
    `StatementList` for a `{ ... }` block, or `NoOp` for a bare `;`.

    Examples:
        cube(10);                       // child is NoOp()
        translate([1, 0, 0]) cube(1);   // child is a ModuleCall
        union() { cube(1); sphere(1); } // child is a StatementList

    Attributes:
        function: The name of the module being called.
        params: The call arguments.
        child: The child statement.
        modifier: The modifier applied to this call, if any.
    """
    function: str
    params: list[ParameterValue]
    child: Statement
    modifier: ModifierKind | None = None

    def __str__(self):
        prefix = self.modifier.value if self.modifier else ""
        return f"{prefix}{self.function}({_join(self.params)}) {self.child}"


@dataclass(frozen=True)
class For(ASTNode):
    """A for loop statement.

    Example:
        for (i = [0:3], j = [0:3]) translate([i, j, 0]) cube(1);

    Attributes:
        variables: The loop variables, using the call argument grammar.
        body: The statement repeated for each iteration.
        modifier: The modifier applied to the loop, if any.
    """
    variables: list[ParameterValue]
    body: Statement
    modifier: ModifierKind | None = None

    def __str__(self):
        prefix = self.modifier.value if self.modifier else ""
        return f"{prefix}for ({_join(self.variables)}) {self.body}"


@dataclass(frozen=True)
class If(ASTNode):
    """An if statement, with or without an else branch.

    An `else` always belongs to the nearest `if`:
    `if (a) if (b) x(); else y();` gives `If(a, If(b, x, y), None)`.

    Attributes:
        condition: The tested expression.
        if_true: The statement run when the condition holds.
        if_false: The else branch, or None.
    """
    condition: Expr
    if_true: Statement
    if_false: Statement | None = None

    def __str__(self):
        if self.if_false is None:
            return f"if ({self.condition}) {self.if_true}"
        return f"if ({self.condition}) {self.if_true} else {self.if_false}"


@dataclass(frozen=True)
class Modifier(ASTNode):
    """A modifier applied to a statement that has no modifier field of its own.

    Modifiers on a module call or a for loop are stored on that node instead;
    see `ModuleCall.modifier` and `For.modifier`.
    """
    kind: ModifierKind
    target: Statement

    def __str__(self):
        return f"{self.kind.value}{self.target}"


@dataclass(frozen=True)
class VariableDeclaration(ASTNode):
    """An assignment statement: `name = value;`."""
    name: str
    value: Expr

    def __str__(self):
        return f"{self.name} = {self.value};"


@dataclass(frozen=True)
class StatementList(ASTNode):
    """A `{ ... }` block. Order of `items` is source order."""
    items: list[Statement]

    def __str__(self):
        return "{" + "".join(f" {item}" for item in self.items) + " }"


@dataclass(frozen=True)
class Use(ASTNode):
    """A `use<path>` statement. The path is not interpreted."""
    path: str

    def __str__(self):
        return f"use <{self.path}>"


@dataclass(frozen=True)
class Include(ASTNode):
    """An `include<path>` statement. The path is not interpreted."""
    path: str

    def __str__(self):
        return f"include <{self.path}>"


@dataclass(frozen=True)
class NoOp(ASTNode):
    """The empty statement `;`."""

    def __str__(self):
        return ";"


Statement = Union[
    ModuleDefinition, FunctionDefinition, ModuleCall, For, If, Modifier,
    VariableDeclaration, StatementList, Use, Include, NoOp,
]
