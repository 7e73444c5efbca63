"""
Shared test infrastructure for templar.

Modules:
- file_utils: creating template and config files
"""

from .file_utils import write

__all__ = ["write"]
