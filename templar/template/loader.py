"""
Template file loading.

Resolves template paths against a root directory, reads them with the
configured encoding and applies the trailing-newline normalization that
depends on how the file is used (root/extends target vs include target).
"""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Union

from ..errors import TemplateReferenceError

logger = logging.getLogger(__name__)


def normalize_root_text(text: str) -> str:
    """
    Trailing-text rule for root templates and extends targets.

    Drops the final newline after a closing "%}" or after a blank line,
    otherwise makes sure the text ends with exactly the newline it had
    (adding one when missing).
    """
    if text.endswith("%}\n") or text.endswith("\n\n"):
        return text[:-1]
    if not text.endswith("\n"):
        return text + "\n"
    return text


def normalize_include_text(text: str) -> str:
    """Trailing-text rule for include targets: drop one trailing newline, if any."""
    if text.endswith("\n"):
        return text[:-1]
    return text


class TemplateLoader:
    """
    Reads template files relative to a root directory.

    Paths inside templates are interpreted relative to the loader root (not
    to the including file); absolute paths are used as is.
    """

    def __init__(self, root: Union[str, Path, None] = None, encoding: str = "utf-8"):
        self.root = Path(root) if root is not None else Path.cwd()
        self.encoding = encoding

    def resolve_path(self, name: str) -> Path:
        p = Path(name)
        if p.is_absolute():
            return p
        return self.root / p

    def key(self, name: str) -> str:
        """Canonical identity of a template file (used for cycle detection)."""
        return str(self.resolve_path(name).resolve())

    def read(self, name: str, kind: str = "template") -> str:
        """
        Reads raw template text.

        Args:
            name: Template path as written in the template or on the command line
            kind: "template", "include" or "extends" (for error messages)

        Raises:
            TemplateReferenceError: if the file cannot be read or decoded
        """
        path = self.resolve_path(name)
        logger.debug("Loading %s '%s' from %s", kind, name, path)
        try:
            return path.read_text(encoding=self.encoding)
        except (OSError, UnicodeDecodeError) as e:
            raise TemplateReferenceError(name, kind, str(e)) from e

    def load_root(self, name: str, kind: str = "template") -> str:
        return normalize_root_text(self.read(name, kind))

    def load_include(self, name: str) -> str:
        return normalize_include_text(self.read(name, "include"))


__all__ = [
    "TemplateLoader",
    "normalize_root_text",
    "normalize_include_text",
]
