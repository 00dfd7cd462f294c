#!/usr/bin/env python3
"""
vueprune CLI entrypoint

Scans a Vue project for component files, static assets and code modules
that are unreachable from the application entry points, plus empty
directories. Nothing is deleted unless --delete is given and every
category is confirmed interactively.
"""
from __future__ import annotations

import argparse
import logging
import sys
from pathlib import Path
from typing import List, Optional

from . import __version__

_HANDLER_NAME = "vueprune-cli"


def configure_logging(verbose: bool) -> None:
    logger = logging.getLogger("vueprune")
    for handler in list(logger.handlers):
        if handler.get_name() == _HANDLER_NAME:
            logger.removeHandler(handler)
    handler = logging.StreamHandler(sys.stderr)
    handler.set_name(_HANDLER_NAME)
    handler.setFormatter(logging.Formatter("%(levelname)s | %(message)s"))
    logger.addHandler(handler)
    logger.setLevel(logging.DEBUG if verbose else logging.WARNING)


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="vueprune",
        description=(
            "Find unused .vue components, static assets, code files and empty "
            "directories in a Vue project."
        ),
        epilog=(
            "examples:\n"
            "  vueprune .                      scan the current directory\n"
            "  vueprune /path/to/project       scan a project\n"
            "  vueprune . --verbose            detailed output\n"
            "  vueprune . --output             save unused components to a file\n"
            "  vueprune . --delete             confirm per category, then delete"
        ),
        formatter_class=argparse.RawDescriptionHelpFormatter,
    )
    parser.add_argument("path", nargs="?", help="Project directory to scan")
    parser.add_argument("--verbose", action="store_true", help="Show detailed output")
    parser.add_argument(
        "--output",
        action="store_true",
        help="Write unused components to a file at the project root",
    )
    parser.add_argument(
        "--delete",
        action="store_true",
        help="After the report, ask per category whether to delete (terminal only)",
    )
    parser.add_argument("--json", metavar="FILE", default=None, help="Write the full report as JSON")
    parser.add_argument(
        "--graph",
        metavar="BASE",
        default=None,
        help="Render the reference graph with Graphviz to BASE.<format> (and BASE.dot)",
    )
    parser.add_argument("--graph-format", default="svg", help="Graphviz output format (default: svg)")
    parser.add_argument("--config", default=None, help="Path to vueprune.yaml / pyproject.toml")
    parser.add_argument(
        "--no-alias-discovery",
        action="store_true",
        help="Do not read aliases from vite/vue/webpack/tsconfig/jsconfig files",
    )
    parser.add_argument("--init", action="store_true", help="Write an example vueprune.yaml into the project")
    parser.add_argument("--force", action="store_true", help="Overwrite an existing vueprune.yaml with --init")
    parser.add_argument("-v", "--version", action="version", version=f"%(prog)s {__version__}")
    return parser


def main(argv: Optional[List[str]] = None) -> int:
    parser = build_parser()
    # exit codes are 0 and 1 only; unknown options are reported and ignored
    args, unknown = parser.parse_known_args(argv)
    if unknown:
        print(f"⚠ Ignoring unknown option(s): {' '.join(unknown)}", file=sys.stderr)

    if not args.path:
        print("❌ No project path given. Usage: vueprune <projectPath> [options]", file=sys.stderr)
        return 1

    configure_logging(args.verbose)
    try:
        return _run(args)
    except Exception as e:  # noqa: BLE001 - process boundary
        logging.getLogger("vueprune").debug("Unhandled error", exc_info=True)
        print(f"❌ Run failed: {e}", file=sys.stderr)
        return 1


def _run(args: argparse.Namespace) -> int:
    from .api import analyze_project, save_json_report, write_unused_list
    from .config_loader import save_example_config

    root = Path(args.path).resolve()
    if args.init:
        target = save_example_config(root, force=args.force)
        print(f"✓ Configuration written: {target}")
        return 0

    print("🚀 Looking for unused files...\n")
    result = analyze_project(
        root,
        config_path=Path(args.config) if args.config else None,
        discover_aliases=not args.no_alias_discovery,
    )
    report = result.report
    print_report(report)

    if args.output:
        written = write_unused_list(root, report.unused_components, result.config.output_file)
        if written:
            print(f"\n💾 Results saved to: {written}")

    if args.json:
        out = save_json_report(report, Path(args.json))
        print(f"💾 JSON report saved to: {out}")

    if args.graph:
        from .graphviz_render import render_reference_graph

        dot_path, rendered = render_reference_graph(
            result.graph, result.project, result.reachable, report.entries, args.graph, args.graph_format
        )
        if rendered:
            print(f"🗺️ Reference graph: {rendered}")
        else:
            print(f"⚠ Graphviz 'dot' not found; graph source written to {dot_path}")

    if args.delete and not report.is_clean():
        if sys.stdin.isatty() and sys.stdout.isatty():
            from .deletion import confirm_and_delete

            confirm_and_delete(root, report)
        else:
            print("⚠ --delete needs an interactive terminal; nothing deleted.")
    return 0


def print_report(report) -> None:
    s = report.stats
    print("📋 Report:")
    print("═" * 40)
    if report.entry_fallback:
        print("⚠ No entry file detected; arbitrary files were used as entries:")
        print(f"   {', '.join(report.entries) or '(none)'}")
        print("   Results below may be meaningless.")
    print(f"📊 Components: {s.get('components_total', 0)}")
    print(f"🔗 Used components: {s.get('components_used', 0)}")
    print(f"🚫 Unused components: {len(report.unused_components)}")
    print(f"\n📦 Static assets: {s.get('assets_total', 0)}")
    print(f"🖼️ Referenced assets: {s.get('assets_referenced', 0)}")
    print(f"🗑️ Unused assets: {len(report.unused_assets)}")
    print(f"\n🧩 Code files (excluding components): {s.get('code_total', 0)}")
    print(f"🧭 Reachable code files: {s.get('code_reachable', 0)}")
    print(f"🗑️ Unused code files: {len(report.unused_code)}")
    print("═" * 40)

    _print_list("unused component files", report.unused_components)
    _print_list("unused static assets", report.unused_assets)
    _print_list("unused code files", report.unused_code)
    _print_list("empty directories", report.empty_dirs)


def _print_list(title: str, items: List[str]) -> None:
    if not items:
        print(f"\n🎉 No {title} found.")
        return
    print(f"\n📝 {title[0].upper()}{title[1:]}:")
    for index, item in enumerate(items, start=1):
        print(f"{index}. {item}")


if __name__ == "__main__":
    sys.exit(main())
