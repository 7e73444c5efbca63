from __future__ import annotations

from pathlib import Path

import pytest

from templar.template import TemplateLoader, TemplateResolver


@pytest.fixture
def tpl_dir(tmp_path: Path) -> Path:
    """Directory that plays the role of the template root."""
    return tmp_path


@pytest.fixture
def loader(tpl_dir: Path) -> TemplateLoader:
    return TemplateLoader(tpl_dir)


@pytest.fixture
def resolver(loader: TemplateLoader) -> TemplateResolver:
    return TemplateResolver(loader)
