"""
Scene-graph command runner - single entry point.

Usage:
    python main.py tools                          # list every tool
    python main.py schema createCube              # JSON schema of a tool's params
    python main.py run script.jsonl               # replay a command script
    python main.py run script.jsonl --show        # ...and print each scene's hierarchy
    python main.py run script.jsonl --strict --json

A script is JSON lines, one command per line:

    {"tool": "createScene", "params": {"sceneId": "s1"}}
    {"tool": "createCube", "params": {"sceneId": "s1", "objectId": "c1"}}

Blank lines and lines starting with '#' are skipped. The exit code is 1 if
any command (or line) failed.
"""

from __future__ import annotations

import argparse
import json
import logging
import sys
from pathlib import Path

from rich.console import Console
from rich.logging import RichHandler

from scene_graph import CommandCatalog, Config, SceneRegistry, hierarchy_tree

log = logging.getLogger(__name__)


def _setup_logging(level: str) -> None:
    """Route all logging through rich on stderr, so stdout stays parseable."""
    logging.basicConfig(
        level=level,
        format="%(message)s",
        datefmt="[%X]",
        handlers=[RichHandler(console=Console(stderr=True), show_path=False)],
        force=True,
    )


def _load_config(args) -> Config:
    if args.config:
        config = Config.from_dict(json.loads(Path(args.config).read_text()))
    else:
        config = Config()
    # Flags win over the file
    if args.strict:
        config.policy = Config.for_strict().policy
    if args.permissive:
        config.policy = Config.for_permissive().policy
    if args.log_level:
        config.logging.level = args.log_level
    return config


def _read_script(path: Path):
    """Yield (tool, params, error) for each command line."""
    for lineno, raw in enumerate(path.read_text().splitlines(), start=1):
        line = raw.strip()
        if not line or line.startswith("#"):
            continue
        try:
            entry = json.loads(line)
        except json.JSONDecodeError as e:
            yield None, None, f"line {lineno}: invalid JSON ({e.msg})"
            continue
        if not isinstance(entry, dict) or not isinstance(entry.get("tool"), str):
            yield None, None, f'line {lineno}: expected {{"tool": ..., "params": {{...}}}}'
            continue
        yield entry["tool"], entry.get("params") or {}, None


def _cmd_tools(console: Console) -> int:
    for name, description in CommandCatalog.tools():
        console.print(f"[bold]{name}[/bold]  {description}", highlight=False)
    return 0


def _cmd_schema(console: Console, tool: str) -> int:
    try:
        schema = CommandCatalog.json_schema(tool)
    except KeyError:
        console.print(f"Error: Unknown tool: {tool}", markup=False, highlight=False)
        return 1
    print(json.dumps(schema, indent=2))
    return 0


def _cmd_run(console: Console, args, config: Config) -> int:
    path = Path(args.script)
    if not path.is_file():
        console.print(f"Error: script not found: {path}", markup=False, highlight=False)
        return 1

    registry = SceneRegistry()
    catalog = CommandCatalog(registry, config)
    failures = 0
    for tool, params, error in _read_script(path):
        if error is not None:
            failures += 1
            log.warning(error)
            payload, text = {"success": False, "error": error}, f"Error: {error}"
        else:
            result = catalog.execute(tool, params)
            if not result.success:
                failures += 1
            payload, text = result.payload, result.text
        if args.json:
            print(json.dumps(payload, sort_keys=True))
        else:
            console.print(text, markup=False, highlight=False)

    if args.show:
        for scene_id in registry.list_scenes():
            with registry.lock(scene_id) as scene:
                console.print(hierarchy_tree(scene))

    if failures:
        log.warning("%d command(s) failed", failures)
        return 1
    return 0


def _build_parser() -> argparse.ArgumentParser:
    """Build the CLI argument parser with subcommands."""
    parser = argparse.ArgumentParser(
        prog="main.py",
        description="Scene graph - replay agent commands against an in-memory store",
    )
    sub = parser.add_subparsers(dest="command")

    # tools
    sub.add_parser("tools", help="List every tool in the catalog")

    # schema
    p_schema = sub.add_parser("schema", help="Print the JSON schema of a tool's parameters")
    p_schema.add_argument("tool", type=str, help="Tool name, e.g. createCube")

    # run
    p_run = sub.add_parser("run", help="Execute a JSON-lines command script")
    p_run.add_argument("script", type=str, help="Path to the script")
    p_run.add_argument("--config", type=str, default=None, help="JSON config file")
    policy = p_run.add_mutually_exclusive_group()
    policy.add_argument("--strict", action="store_true", help="Duplicate object ids are errors")
    policy.add_argument("--permissive", action="store_true", help="Allow parent cycles")
    p_run.add_argument("--show", action="store_true", help="Print each scene's hierarchy at the end")
    p_run.add_argument("--json", action="store_true", help="Print payloads instead of messages")
    p_run.add_argument(
        "--log-level",
        type=str,
        default=None,
        choices=["DEBUG", "INFO", "WARNING", "ERROR"],
        help="Log level (default: from config, INFO)",
    )

    return parser


def main(argv: list[str] | None = None) -> int:
    parser = _build_parser()
    args = parser.parse_args(argv)
    console = Console(soft_wrap=True)

    if args.command is None:
        parser.print_help()
        return 0

    if args.command == "tools":
        return _cmd_tools(console)

    if args.command == "schema":
        return _cmd_schema(console, args.tool)

    try:
        config = _load_config(args)
    except (OSError, ValueError, TypeError) as e:
        console.print(f"Error: bad config: {e}", markup=False, highlight=False)
        return 1
    _setup_logging(config.logging.level)
    return _cmd_run(console, args, config)


if __name__ == "__main__":
    sys.exit(main())
