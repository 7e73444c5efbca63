from __future__ import annotations

import argparse
import json
import logging
import os
import sys
from pathlib import Path
from typing import Any, List, Optional

from .config import TemplarConfig, find_config, load_config
from .errors import TemplarUserError
from .template import (
    TemplateLoader, TemplateResolver, Template,
    dump_nodes, dump_template, format_ast_tree, parse_template, render_source,
)
from .version import tool_version

_LOG = logging.getLogger("templar")


def _setup_logging(debug: bool) -> None:
    if getattr(_setup_logging, "_inited", False):
        return
    _setup_logging._inited = True  # type: ignore[attr-defined]
    level = logging.DEBUG if debug or os.environ.get("TEMPLAR_DEBUG") else logging.WARNING
    _LOG.setLevel(level)
    if not _LOG.handlers:
        h = logging.StreamHandler()
        h.setFormatter(logging.Formatter("[%(levelname)s] %(message)s"))
        _LOG.addHandler(h)


def _build_parser() -> argparse.ArgumentParser:
    p = argparse.ArgumentParser(
        prog="templar",
        description="Parse and resolve Jinja-style templates",
        add_help=True,
    )
    p.add_argument("-v", "--version", action="version", version=f"%(prog)s {tool_version()}")
    p.add_argument("--config", metavar="PATH", help="config file (default: ./templar.yaml if present)")
    p.add_argument("--root", metavar="DIR", help="directory for include/extends paths")
    p.add_argument("--encoding", help="encoding of template files")
    p.add_argument("--no-cycle-check", action="store_true", help="do not detect circular references")
    p.add_argument("--debug", action="store_true", help="debug logging to stderr")
    sub = p.add_subparsers(dest="cmd", required=True)

    # Output format shared by parse/resolve
    def add_output(sp: argparse.ArgumentParser) -> None:
        sp.add_argument("file", help="template path, relative to the root directory")
        fmt = sp.add_mutually_exclusive_group()
        fmt.add_argument("--json", dest="fmt", action="store_const", const="json", help="JSON node dump")
        fmt.add_argument("--tree", dest="fmt", action="store_const", const="tree", help="indented debug tree")
        sp.set_defaults(fmt="source")

    sp_parse = sub.add_parser("parse", help="parse one file without resolving references")
    add_output(sp_parse)

    sp_resolve = sub.add_parser("resolve", help="resolve include/extends and flatten inheritance")
    add_output(sp_resolve)

    sp_check = sub.add_parser("check", help="resolve each file and report errors")
    sp_check.add_argument("files", nargs="+", help="template paths")

    return p


def _config(ns: argparse.Namespace) -> TemplarConfig:
    path = Path(ns.config) if ns.config else find_config(Path.cwd())
    cfg = load_config(path)

    overrides: dict[str, Any] = {}
    if ns.root:
        overrides["root"] = Path(ns.root)
    if ns.encoding:
        overrides["encoding"] = ns.encoding
    if ns.no_cycle_check:
        overrides["detect_cycles"] = False
    return cfg.model_copy(update=overrides) if overrides else cfg


def _write_json(data: Any) -> None:
    sys.stdout.write(json.dumps(data, ensure_ascii=False, indent=2) + "\n")


def _print_template(template: Template, fmt: str) -> None:
    if fmt == "json":
        _write_json(dump_template(template))
    elif fmt == "tree":
        sys.stdout.write("base:\n" + format_ast_tree(template.base, 1) + "\n")
        sys.stdout.write("child:\n" + format_ast_tree(template.child, 1) + "\n")
    else:
        sys.stdout.write(render_source(template.base))
        if template.child:
            sys.stdout.write("\n--- child ---\n")
            sys.stdout.write(render_source(template.child))


def main(argv: Optional[List[str]] = None) -> int:
    ns = _build_parser().parse_args(argv)
    _setup_logging(ns.debug)

    try:
        cfg = _config(ns)
        loader = TemplateLoader(cfg.root, cfg.encoding)
        resolver = TemplateResolver(loader, detect_cycles=cfg.detect_cycles)

        if ns.cmd == "parse":
            ast = parse_template(loader.load_root(ns.file), path=ns.file)
            if ns.fmt == "json":
                _write_json(dump_nodes(ast))
            elif ns.fmt == "tree":
                sys.stdout.write(format_ast_tree(ast) + "\n")
            else:
                sys.stdout.write(render_source(ast))
            return 0

        if ns.cmd == "resolve":
            _print_template(resolver.load(ns.file), ns.fmt)
            return 0

        if ns.cmd == "check":
            failed = 0
            for name in ns.files:
                try:
                    resolver.load(name)
                except TemplarUserError as e:
                    failed += 1
                    sys.stdout.write(f"FAIL {name}: {e}\n")
                else:
                    sys.stdout.write(f"ok {name}\n")
            return 1 if failed else 0

    except TemplarUserError as e:
        sys.stderr.write(str(e).rstrip() + "\n")
        return 2

    return 2


if __name__ == "__main__":
    raise SystemExit(main())
