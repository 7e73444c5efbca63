"""templar: parsing front end for Jinja-style text templates."""

from __future__ import annotations

from .errors import (
    ConfigError,
    TemplarUserError,
    TemplateCycleError,
    TemplateReferenceError,
    TemplateSyntaxError,
)
from .template import Template, TemplateLoader, TemplateResolver, parse_file, parse_string, parse_template

__all__ = [
    "parse_file",
    "parse_string",
    "parse_template",
    "Template",
    "TemplateLoader",
    "TemplateResolver",
    "TemplarUserError",
    "TemplateSyntaxError",
    "TemplateReferenceError",
    "TemplateCycleError",
    "ConfigError",
]
