"""
Template parsing front end.

Parses template text into an unresolved AST, resolves include/extends
references across files and flattens inheritance into a Template.
"""

from __future__ import annotations

from .expr import Expression, Fun, Var, VariablePath
from .loader import TemplateLoader, normalize_include_text, normalize_root_text
from .nodes import (
    Base, Block, Comment, Condition, Eval, Extends, Foreach, Include, Literal, Raw, Super,
    ResolvedAST, ResolvedNode, Template, TemplateNode, UnresolvedAST, UnresolvedNode,
    dump_nodes, dump_template, format_ast_tree, render_source, walk,
)
from .parser import ParserState, TemplateParser, parse_template
from .resolver import TemplateResolver, parse_file, parse_string, to_template

__all__ = [
    # Main entry points
    "parse_file",
    "parse_string",
    "parse_template",
    "to_template",

    # Components
    "TemplateParser",
    "ParserState",
    "TemplateResolver",
    "TemplateLoader",
    "normalize_root_text",
    "normalize_include_text",

    # Model
    "Expression", "Var", "Fun", "VariablePath",
    "TemplateNode", "Literal", "Eval", "Condition", "Foreach", "Include", "Raw",
    "Extends", "Base", "Block", "Super", "Comment",
    "UnresolvedNode", "ResolvedNode", "UnresolvedAST", "ResolvedAST", "Template",

    # Inspection
    "walk", "render_source", "format_ast_tree", "dump_nodes", "dump_template",
]
