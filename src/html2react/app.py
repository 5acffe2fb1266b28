# src/html2react/app.py
from __future__ import annotations

import argparse
import json
import logging
import sys
from pathlib import Path
from typing import List, Optional

from converter.css.registry import get_available_strategies
from html2react.controllers.convert_controller import ConvertController
from html2react.core.managers.config_manager import config_manager
from html2react.core.services.output_writer_service import OutputWriter
from html2react.core.utils.configure_logging import configure_logger
from html2react.core.utils.path_utils import PathUtils
from html2react.model import ConversionOptions

logger = logging.getLogger(__name__)

CONFIG_USAGE = """
Usage:
  config list                Show the current configuration as JSON.
  config get <key>           Show one value (e.g., splitter.max_component_depth).
  config set <key> <value>   Check how a value is cast (not persisted; use 'convert --set KEY=VALUE').
  config reset               Reload the configuration from settings.json.
""".strip()


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(prog="html2react", description="Convert HTML mockups into React components.")
    parser.add_argument("--log-level", default=None, help="Overrides debug.level from settings.json.")
    subs = parser.add_subparsers(dest="command")

    p_convert = subs.add_parser("convert", help="Convert an HTML file into components.")
    p_convert.add_argument("input", help="Path to the HTML file ('-' reads stdin).")
    p_convert.add_argument("-o", "--output", default=None,
                           help="Output directory (default: output.directory from settings.json).")
    p_convert.add_argument("--format", choices=["jsx", "tsx"], default=None, help="Generated source flavour.")
    p_convert.add_argument("--css", choices=get_available_strategies() + ["none"], default=None,
                           help="CSS strategy for inline styles.")
    p_convert.add_argument("--no-split", action="store_true", help="Emit a single component.")
    p_convert.add_argument("--name", default=None, help="Component name when not splitting.")
    p_convert.add_argument("--select", action="append", default=None, metavar="SELECTOR",
                           help="Extra selector that always becomes a component (repeatable).")
    p_convert.add_argument("--set", action="append", default=[], metavar="KEY=VALUE",
                           help="Override a settings.json value for this run (e.g. css.optimize=false).")
    p_convert.add_argument("--no-progress", action="store_true", help="Hide the progress bar.")

    p_config = subs.add_parser("config", help="Inspect or change configuration.")
    p_config.add_argument("args", nargs="*", help="list | get <key> | set <key> <value> | reset")
    return parser


def _read_input(source: str) -> str:
    if source == "-":
        return sys.stdin.read()
    return Path(source).read_text(encoding="utf-8")


def handle_convert(pargs: argparse.Namespace) -> int:
    for override in pargs.set:
        key_path, sep, value = override.partition("=")
        if not sep or not config_manager.set_nested(key_path.strip(), value.strip()):
            print(f"❌ Error: Invalid override '{override}' (expected KEY=VALUE).")
            return 1

    try:
        html = _read_input(pargs.input)
    except OSError as e:
        print(f"❌ Error: Could not read '{pargs.input}': {e}")
        return 1

    options = ConversionOptions(
        component_name=pargs.name,
        output_format=pargs.format,
        css_strategy=pargs.css,
        split_components=False if pargs.no_split else None,
        custom_component_selectors=pargs.select,
        show_progress=not pargs.no_progress,
    )
    result = ConvertController().convert(html, options)

    for warning in result.warnings:
        print(f"⚠️  {warning}")
    if not result.success:
        print(f"❌ Conversion failed: {result.error}")
        return 1

    try:
        out_dir = PathUtils.resolve_output_dir(pargs.output or config_manager.get_nested("output.directory"))
        written = OutputWriter(out_dir).write(result.files)
    except OSError as e:
        logger.error("Writing output failed: %s", e, exc_info=True)
        print(f"❌ Error: Could not write output: {e}")
        return 1

    print(f"✅ {result.stats.total_components} components, {len(written)} files written to {out_dir} "
          f"({result.stats.processing_time:.0f} ms).")
    return 0


def handle_config(args: List[str]) -> int:
    """Handles 'config' for viewing and modifying the configuration of this run."""
    if not args:
        print(CONFIG_USAGE)
        return 1

    command = args[0]

    if command == "list":
        print(json.dumps(config_manager.get_all(), indent=2))
        return 0

    if command == "get":
        if len(args) != 2:
            print("Usage: config get <key>")
            return 1
        value = config_manager.get_nested(args[1])
        if value is None:
            print(f"❌ Error: Unknown config key '{args[1]}'.")
            return 1
        print(json.dumps(value, indent=2) if isinstance(value, (dict, list)) else value)
        return 0

    if command == "set":
        if len(args) < 3:
            print("Usage: config set <key> <value>")
            return 1
        key_path = args[1]
        value = " ".join(args[2:])
        if value.startswith('"') and value.endswith('"'):
            value = value[1:-1]

        if config_manager.set_nested(key_path, value):
            new_value = config_manager.get_nested(key_path)
            print(f"✅ Config updated: {key_path} = {new_value} (type: {type(new_value).__name__})")
            return 0
        print(f"❌ Error: Failed to set config value for key '{key_path}'.")
        return 1

    if command == "reset":
        config_manager.reset()
        print("✅ Configuration has been reset to the values from settings.json.")
        return 0

    print(f"Unknown command: 'config {command}'.")
    return 1


def main(argv: Optional[List[str]] = None) -> int:
    parser = build_parser()
    try:
        pargs = parser.parse_args(argv)
    except SystemExit as e:
        return int(e.code or 0)

    configure_logger(pargs.log_level or config_manager.get_nested("debug.level", "WARNING"))

    if pargs.command == "convert":
        return handle_convert(pargs)
    if pargs.command == "config":
        return handle_config(pargs.args)

    parser.print_help()
    return 0


if __name__ == "__main__":
    sys.exit(main())
