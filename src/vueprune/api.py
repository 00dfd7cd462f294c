"""
One analysis run: collect -> aliases -> graph -> entries -> reachability
-> unused sets.

Every run builds its own resolver context and text cache; nothing is
shared between runs.
"""
from __future__ import annotations

import json
import logging
from dataclasses import dataclass
from pathlib import Path
from typing import Dict, List, Optional, Union

from .alias_table import AliasTable, build_alias_table
from .config_loader import PruneConfig, load_config
from .dependency_graph import (
    DependencyGraph,
    EntryDetector,
    build_graph,
    reachable_components,
    reachable_from,
)
from .extractors import ReferenceExtractor
from .file_collector import FileCollector
from .node_types import ProjectFiles, UnusedReport
from .resolver import build_resolver
from .unused import referenced_assets, unused_code, unused_components

logger = logging.getLogger(__name__)


class TextCache:
    """Reads project files once per run; unreadable files yield None."""

    def __init__(self, root: Path):
        self.root = root
        self._cache: Dict[str, Optional[str]] = {}

    def __call__(self, rel: str) -> Optional[str]:
        if rel not in self._cache:
            try:
                self._cache[rel] = (self.root / rel).read_text(encoding="utf-8", errors="replace")
            except OSError as e:
                logger.warning("Cannot read %s: %s", rel, e)
                self._cache[rel] = None
        return self._cache[rel]


@dataclass
class AnalysisResult:
    root: Path
    config: PruneConfig
    project: ProjectFiles
    aliases: AliasTable
    graph: DependencyGraph
    reachable: List[str]
    report: UnusedReport


def analyze_project(
    root: Union[str, Path],
    config: Optional[PruneConfig] = None,
    config_path: Optional[Path] = None,
    discover_aliases: bool = True,
) -> AnalysisResult:
    """Run the full analysis on ``root``.

    Args:
        root: project directory
        config: effective configuration; loaded from the project when None
        config_path: explicit configuration file (ignored when ``config`` given)
        discover_aliases: scan vite/vue/webpack/ts/js configs for aliases

    Raises:
        FileNotFoundError: ``root`` is not a directory
        ConfigError: the project configuration is invalid
    """
    root = Path(root).resolve()
    if not root.is_dir():
        raise FileNotFoundError(f"Path does not exist or is not a directory: {root}")
    if config is None:
        config = load_config(root, config_path)

    aliases = build_alias_table(root, config.aliases, discover=discover_aliases)
    collector = FileCollector(root, config)
    project = collector.collect()

    read_text = TextCache(root)
    resolver = build_resolver(root, aliases, config.resolve_extensions, config.index_files)
    extractor = ReferenceExtractor(resolver, collector, config.known_extensions)
    built = build_graph(project, extractor, resolver, read_text)
    graph = built.graph

    selection = EntryDetector(
        root,
        config.entry_candidates,
        read_text,
        [config.component_extension] + config.code_extensions,
    ).detect(project, graph)
    logger.debug("Entry files: %s", ", ".join(selection.entries))

    reachable = reachable_from(graph, selection.entries)
    reachable_set = set(reachable)
    used = reachable_components(reachable, project.components) | built.declared_components

    assets_used = referenced_assets(project, reachable, extractor, read_text)
    report = UnusedReport(
        unused_components=unused_components(project, used),
        unused_assets=sorted(a for a in project.assets if a not in assets_used),
        unused_code=unused_code(project, reachable_set, used, config.component_extension),
        empty_dirs=list(project.empty_dirs),
        declared_components=sorted(built.declared_components),
        entries=list(selection.entries),
        entry_fallback=selection.fallback,
    )
    report.stats = {
        "components_total": len(project.components),
        "components_used": len(used),
        "components_unused": len(report.unused_components),
        "assets_total": len(project.assets),
        "assets_referenced": len(assets_used),
        "assets_unused": len(report.unused_assets),
        "code_total": len(project.code),
        "code_reachable": sum(1 for rel in reachable if rel in project.code),
        "code_unused": len(report.unused_code),
        "empty_dirs": len(report.empty_dirs),
        "graph_nodes": len(graph),
        "graph_edges": len(graph.edges),
    }
    return AnalysisResult(
        root=root,
        config=config,
        project=project,
        aliases=aliases,
        graph=graph,
        reachable=reachable,
        report=report,
    )


def save_json_report(report: UnusedReport, output: Path) -> Path:
    output.parent.mkdir(parents=True, exist_ok=True)
    output.write_text(json.dumps(report.to_dict(), ensure_ascii=False, indent=2), encoding="utf-8")
    return output


def write_unused_list(root: Path, items: List[str], file_name: str) -> Optional[Path]:
    """Write one path per line at the project root; nothing is written for an empty list."""
    if not items:
        return None
    path = root / file_name
    path.write_text("\n".join(items), encoding="utf-8")
    return path
