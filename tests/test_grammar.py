"""Tests for grammar acceptance, independent of AST building."""

import pytest
from conftest import parse_success, parse_failure


class TestAccepted:
    """Test source the grammar accepts."""

    @pytest.mark.parametrize("code", [
        "",
        ";",
        "cube(10);",
        "cube(size=[1,2,3], center=true);",
        "translate([0,0,1]) rotate(45) cube(1);",
        "union() { cube(1); sphere(2); }",
        "for (i = [0:2:10], j = [1,2,3]) translate([i,j,0]) cube(1);",
        "if (a > 1) cube(1); else if (a < 0) sphere(1); else cylinder(1);",
        "module box(size=1,) { cube(size); }",
        "function f(x, y=2) = x < y ? x : y;",
        "x = let(a=1, b=2) a + b;",
        "x = [for (i = [0:5]) let(s = i*i) s];",
        "x = [let(n=3) for (i=[0:n]) [i, i*2]];",
        "x = v.x + m[1][2] - f(a)[0];",
        "x = !a && -b || +c;",
        "x = echo(\"x\", x) assert(x > 0) x;",
        "echo(\"hello\");",
        "let (a = 1) cube(a);",
        "assert(true);",
        "use <MCAD/involute_gears.scad>",
        "include <BOSL2/std.scad>",
        "$fn = 64;",
        "x = 1.5e-3 + .5 + 7. + 2E3;",
        "x = \"multi\nline \\\" string\";",
        "*cube(1); !sphere(1); #cylinder(1); %cube(2);",
        "x = 1; /* block */ y = 2; // line",
    ])
    def test_accepts(self, parser, code):
        parse_success(parser, code)


class TestRejected:
    """Test source the grammar rejects."""

    @pytest.mark.parametrize("code", [
        "if (true)",
        "cube(1)",
        "x = 1",
        "x = 2 ^ 3;",
        "x = a | b;",
        "x = function(x) x;",
        "for (i = 0; i < 3; i = i + 1) cube(i);",
        "x = [each v];",
        "x = [for (i = v) if (i) i];",
        "x = 'single';",
        "cube(1) else sphere(1);",
        "/* outer /* inner */ still comment */",
    ])
    def test_rejects(self, parser, code):
        parse_failure(parser, code)
