import json

import pytest

from templar.cli import main
from tests.infrastructure import write


@pytest.fixture
def project(tmp_path, monkeypatch):
    """Template root with a small inheritance chain; cwd is the root."""
    write(tmp_path / "layout.tmpl", "{% block body %}default{% endblock %}\n")
    write(tmp_path / "page.tmpl", '{% extends "layout.tmpl" %}{% block body %}{{ title }}{% endblock %}\n')
    write(tmp_path / "trim.tmpl", "{%- if a -%} X {%- endif -%}\n")
    write(tmp_path / "bad.tmpl", "{% if %}\n")
    monkeypatch.chdir(tmp_path)
    return tmp_path


def test_parse_source(project, capsys):
    assert main(["parse", "trim.tmpl"]) == 0
    assert capsys.readouterr().out == "{% if a %}X{% endif %}"


def test_parse_json(project, capsys):
    assert main(["parse", "trim.tmpl", "--json"]) == 0
    data = json.loads(capsys.readouterr().out)
    assert data == [{
        "type": "Condition",
        "cond": {"type": "Var", "path": ["a"]},
        "then": [{"type": "Literal", "text": "X"}],
        "else_body": None,
    }]


def test_parse_keeps_references(project, capsys):
    assert main(["parse", "page.tmpl", "--tree"]) == 0
    out = capsys.readouterr().out
    assert "Extends('layout.tmpl')" in out
    assert "Block(body, child)" in out


def test_resolve_source(project, capsys):
    assert main(["resolve", "page.tmpl"]) == 0
    assert capsys.readouterr().out == (
        "{% block body %}default{% endblock %}"
        "\n--- child ---\n"
        "{% block body %}{{ title }}{% endblock %}"
    )


def test_resolve_json(project, capsys):
    assert main(["resolve", "page.tmpl", "--json"]) == 0
    data = json.loads(capsys.readouterr().out)
    assert [n["defined_in_base"] for n in data["base"]] == [True]
    assert [n["defined_in_base"] for n in data["child"]] == [False]


def test_resolve_tree(project, capsys):
    assert main(["resolve", "layout.tmpl", "--tree"]) == 0
    out = capsys.readouterr().out
    assert out.startswith("base:\n  Block(body, base)")
    assert "child:\n" in out


def test_check(project, capsys):
    assert main(["check", "page.tmpl", "bad.tmpl"]) == 1
    lines = capsys.readouterr().out.splitlines()
    assert lines[0] == "ok page.tmpl"
    assert lines[1].startswith("FAIL bad.tmpl: bad.tmpl:1:")


def test_check_all_ok(project, capsys):
    assert main(["check", "page.tmpl", "layout.tmpl"]) == 0


def test_user_error_exit_code(project, capsys):
    assert main(["resolve", "missing.tmpl"]) == 2
    assert "Cannot read template 'missing.tmpl'" in capsys.readouterr().err


def test_root_option(project, tmp_path_factory, monkeypatch, capsys):
    monkeypatch.chdir(tmp_path_factory.mktemp("elsewhere"))
    assert main(["--root", str(project), "parse", "trim.tmpl"]) == 0
    assert capsys.readouterr().out == "{% if a %}X{% endif %}"


def test_config_file_in_cwd(tmp_path, monkeypatch, capsys):
    write(tmp_path / "templates" / "t.tmpl", "hi\n")
    write(tmp_path / "templar.yaml", "root: templates\n")
    monkeypatch.chdir(tmp_path)
    assert main(["resolve", "t.tmpl"]) == 0
    assert capsys.readouterr().out == "hi\n"


def test_explicit_config(tmp_path, monkeypatch, capsys):
    write(tmp_path / "conf" / "custom.yaml", "root: ..\n")
    write(tmp_path / "loop.tmpl", '{% include "loop.tmpl" %}')
    monkeypatch.chdir(tmp_path / "conf")
    assert main(["--config", "custom.yaml", "check", "loop.tmpl"]) == 1
    assert "Circular template reference" in capsys.readouterr().out


def test_invalid_config_exit_code(tmp_path, monkeypatch, capsys):
    write(tmp_path / "templar.yaml", "bogus: 1\n")
    monkeypatch.chdir(tmp_path)
    assert main(["parse", "x"]) == 2
    assert "Invalid config" in capsys.readouterr().err


def test_version(capsys):
    with pytest.raises(SystemExit) as exc:
        main(["--version"])
    assert exc.value.code == 0
    assert capsys.readouterr().out.startswith("templar ")


def test_deep_nesting_is_reported_not_raised(project, capsys):
    write(project / "deep.tmpl", "{% block a %}" * 400)
    assert main(["check", "deep.tmpl"]) == 1
    assert "nesting too deep" in capsys.readouterr().out
