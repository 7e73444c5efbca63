"""
Tests for AST nodes: canonical rendering, the resolved-phase guard and
debug/serialization helpers.
"""

import pytest

from templar.template import (
    Base, Block, Comment, Condition, Eval, Extends, Foreach, Fun, Include, Literal, Raw, Super,
    Template, Var, VariablePath, dump_nodes, dump_template, format_ast_tree, parse_template,
    render_source, walk,
)
from templar.template.expr import var


class TestExpressions:

    def test_variable_path_rendering(self):
        assert str(VariablePath.of("a", "b", 0, "c")) == "a.b[0].c"

    def test_function_rendering(self):
        assert str(Fun("f", (var("a"), Fun("g")))) == "f(a, g())"

    def test_path_must_start_with_identifier(self):
        with pytest.raises(ValueError):
            VariablePath.of(0, "a")


class TestRendering:

    def test_leaves(self):
        assert str(Literal("x")) == "x"
        assert str(Eval(var("a.b"))) == "{{ a.b }}"
        assert str(Raw("{{ x }}")) == "{% raw %}{{ x }}{% endraw %}"
        assert str(Super()) == "{{ super() }}"
        assert str(Comment(" c ")) == "{# c #}"
        assert str(Include("p.tmpl")) == '{% include "p.tmpl" %}'
        assert str(Extends("p.tmpl")) == '{% extends "p.tmpl" %}'

    def test_path_with_double_quote_uses_single_quotes(self):
        assert str(Include('a"b')) == "{% include 'a\"b' %}"
        assert str(Extends('a"b')) == "{% extends 'a\"b' %}"
        assert parse_template(str(Include('a"b'))) == (Include('a"b'),)

    def test_condition(self):
        node = Condition(var("a"), (Literal("X"),), (Literal("Y"),))
        assert str(node) == "{% if a %}X{% else %}Y{% endif %}"
        assert str(Condition(var("a"), (Literal("X"),))) == "{% if a %}X{% endif %}"

    def test_empty_else_is_rendered(self):
        assert str(Condition(var("a"), (), ())) == "{% if a %}{% else %}{% endif %}"

    def test_foreach(self):
        node = Foreach("x", Fun("items"), (Eval(var("x")),), (Literal("none"),))
        assert str(node) == "{% for x in items() %}{{ x }}{% else %}none{% endfor %}"

    def test_block(self):
        assert str(Block(True, "b", False, (Literal("B"),))) == "{% block b %}B{% endblock %}"

    def test_scoped_block(self):
        assert str(Block(False, "b", True, ())) == "{% block b scoped %}{% endblock %}"

    def test_base_renders_its_body(self):
        assert str(Base((Literal("a"), Eval(var("b"))))) == "a{{ b }}"

    def test_render_source(self):
        nodes = (Literal("Hi "), Eval(Var(VariablePath.of("user", "name"))), Literal("!"))
        assert render_source(nodes) == "Hi {{ user.name }}!"


class TestTemplate:

    def test_defaults_to_empty_child(self):
        t = Template((Literal("a"),))
        assert t.child == ()

    @pytest.mark.parametrize("node", [Include("x"), Extends("x")])
    def test_rejects_file_references(self, node):
        with pytest.raises(TypeError):
            Template(base=(node,))

    def test_rejects_nested_file_references(self):
        with pytest.raises(TypeError):
            Template(base=(), child=(Block(False, "b", False, (Include("x"),)),))

    def test_accepts_base_wrapper(self):
        t = Template(base=(Base((Literal("p"),)),))
        assert t.base[0].body == (Literal("p"),)


class TestInspection:

    def test_walk_is_preorder(self):
        nodes = (
            Condition(var("c"), (Literal("a"),), (Block(True, "b", False, (Super(),)),)),
            Literal("z"),
        )
        kinds = [type(n).__name__ for n in walk(nodes)]
        assert kinds == ["Condition", "Literal", "Block", "Super", "Literal"]

    def test_format_ast_tree(self):
        nodes = (Foreach("x", var("xs"), (Eval(var("x")),)), Block(False, "b", False, ()))
        lines = format_ast_tree(nodes).splitlines()
        assert lines == [
            "Foreach(x in xs)",
            "  body:",
            "    Eval(x)",
            "Block(b, child)",
            "  body:",
        ]

    def test_format_ast_tree_truncates_long_text(self):
        tree = format_ast_tree((Literal("x" * 80),))
        assert tree == "Literal(" + repr("x" * 50 + "...") + ")"

    def test_dump_nodes(self):
        nodes = (Condition(Fun("f", (var("a"),)), (Literal("X"),)),)
        assert dump_nodes(nodes) == [{
            "type": "Condition",
            "cond": {"type": "Fun", "name": "f", "args": [{"type": "Var", "path": ["a"]}]},
            "then": [{"type": "Literal", "text": "X"}],
            "else_body": None,
        }]

    def test_dump_template(self):
        t = Template(base=(Block(True, "b", False, ()),), child=(Literal("c"),))
        assert dump_template(t) == {
            "base": [{"type": "Block", "name": "b", "defined_in_base": True, "scoped": False, "body": []}],
            "child": [{"type": "Literal", "text": "c"}],
        }
