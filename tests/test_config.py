from pathlib import Path

import pytest
from pydantic import ValidationError

from templar.config import CONFIG_FILE, DEFAULT_CONFIG, TemplarConfig, find_config, load_config
from templar.errors import ConfigError
from tests.infrastructure import write


def test_defaults():
    cfg = load_config(None)
    assert cfg is DEFAULT_CONFIG
    assert cfg.root == Path(".")
    assert cfg.encoding == "utf-8"
    assert cfg.detect_cycles is True


def test_full_config(tmp_path):
    p = write(tmp_path / CONFIG_FILE, "root: tpl\nencoding: latin-1\ndetect_cycles: false\n")
    cfg = load_config(p)
    assert cfg.root == (tmp_path / "tpl").resolve()
    assert cfg.encoding == "latin-1"
    assert cfg.detect_cycles is False


def test_empty_file_gives_defaults(tmp_path):
    p = write(tmp_path / CONFIG_FILE, "")
    cfg = load_config(p)
    assert cfg.root == tmp_path.resolve()
    assert cfg.detect_cycles is True


def test_absolute_root_is_kept(tmp_path):
    target = tmp_path / "abs"
    p = write(tmp_path / "cfg" / CONFIG_FILE, f"root: '{target}'\n")
    assert load_config(p).root == target


def test_find_config(tmp_path):
    assert find_config(tmp_path) is None
    p = write(tmp_path / CONFIG_FILE, "encoding: utf-8\n")
    assert find_config(tmp_path) == p


def test_missing_file(tmp_path):
    with pytest.raises(ConfigError, match="not found"):
        load_config(tmp_path / "nope.yaml")


@pytest.mark.parametrize("text", [
    "unknown_key: 1\n",
    "detect_cycles: [1, 2]\n",
    "- just\n- a list\n",
    "root: [unclosed\n",
])
def test_invalid_config(tmp_path, text):
    p = write(tmp_path / CONFIG_FILE, text)
    with pytest.raises(ConfigError):
        load_config(p)


def test_config_is_frozen():
    with pytest.raises(ValidationError):
        TemplarConfig().encoding = "ascii"
