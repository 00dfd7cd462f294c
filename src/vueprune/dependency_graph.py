"""
Reference graph over root-relative file paths, entry detection and
breadth-first reachability.
"""
from __future__ import annotations

import logging
import re
from collections import deque
from dataclasses import dataclass, field
from pathlib import Path
from typing import Callable, Dict, Iterable, List, Optional, Set, Tuple

from .config_loader import DEFAULT_CODE_EXTENSIONS
from .extractors import ReferenceExtractor
from .file_collector import is_declaration_file
from .node_types import ProjectFiles
from .resolver import SpecifierResolver

logger = logging.getLogger(__name__)

BOOTSTRAP_MARKER = re.compile(r"\bcreateApp\s*\(|\bnew\s+Vue\s*\(")
FALLBACK_ENTRY_COUNT = 3

TextReader = Callable[[str], Optional[str]]


class DependencyGraph:
    """Directed graph; node and edge insertion order is preserved."""

    def __init__(self) -> None:
        self._adj: Dict[str, Dict[str, None]] = {}

    def add_node(self, node: str) -> None:
        self._adj.setdefault(node, {})

    def add_edge(self, src: str, dst: str) -> None:
        self.add_node(src)
        self._adj[src].setdefault(dst, None)

    def successors(self, node: str) -> List[str]:
        return list(self._adj.get(node, ()))

    @property
    def nodes(self) -> List[str]:
        return list(self._adj)

    @property
    def edges(self) -> List[Tuple[str, str]]:
        return [(src, dst) for src, dsts in self._adj.items() for dst in dsts]

    def __contains__(self, node: object) -> bool:
        return node in self._adj

    def __len__(self) -> int:
        return len(self._adj)


@dataclass
class GraphBuildResult:
    graph: DependencyGraph
    # components referenced from declaration files, used regardless of reachability
    declared_components: Set[str] = field(default_factory=set)


def build_graph(
    project: ProjectFiles,
    extractor: ReferenceExtractor,
    resolver: SpecifierResolver,
    read_text: TextReader,
) -> GraphBuildResult:
    """Scan every collected file and add one edge per resolved reference."""
    result = GraphBuildResult(graph=DependencyGraph())
    graph = result.graph
    for rel in project.scannable:
        graph.add_node(rel)
        text = read_text(rel)
        if text is None:
            continue
        refs = extractor.extract(text, rel)
        declaration = is_declaration_file(rel)
        for spec in refs.specifiers:
            target = resolver.resolve(spec, rel)
            if target is None:
                continue
            graph.add_edge(rel, target)
            logger.debug("Reference: %s <- %s", target, rel)
            if declaration and target in project.components:
                result.declared_components.add(target)
        for target in refs.expanded:
            graph.add_edge(rel, target)
            logger.debug("Loader reference: %s <- %s", target, rel)
    return result


@dataclass
class EntrySelection:
    entries: List[str]
    fallback: bool = False


class EntryDetector:
    """Conventional bootstrap files, then a createApp() scan, then a fallback."""

    def __init__(
        self,
        root: Path,
        candidates: Iterable[str],
        read_text: TextReader,
        scan_extensions: Iterable[str] = (".vue", *DEFAULT_CODE_EXTENSIONS),
    ):
        self.root = root
        self.candidates = list(candidates)
        self.read_text = read_text
        self.scan_extensions = tuple(scan_extensions)

    def detect(self, project: ProjectFiles, graph: DependencyGraph) -> EntrySelection:
        found = [rel for rel in self.candidates if (self.root / rel).is_file()]
        if found:
            return EntrySelection(found)

        # every script/component file, including ones excluded from the candidate sets
        scan = [
            rel
            for rel in project.scannable
            if rel.endswith(self.scan_extensions) and not is_declaration_file(rel)
        ]
        for rel in scan:
            text = self.read_text(rel)
            if text and BOOTSTRAP_MARKER.search(text):
                found.append(rel)
        if found:
            return EntrySelection(found)

        fallback = graph.nodes[:FALLBACK_ENTRY_COUNT]
        logger.warning(
            "No entry file found (no main/App/router file, no createApp() call); "
            "falling back to arbitrary entries %s - unused results may be meaningless",
            fallback,
        )
        return EntrySelection(fallback, fallback=True)


def reachable_from(graph: DependencyGraph, entries: Iterable[str]) -> List[str]:
    """Breadth-first closure over graph edges, in visit order."""
    visited: Dict[str, None] = {}
    queue = deque(entries)
    while queue:
        current = queue.popleft()
        if current in visited:
            continue
        visited[current] = None
        for nxt in graph.successors(current):
            if nxt not in visited:
                queue.append(nxt)
    return list(visited)


def reachable_components(reachable: Iterable[str], components: Set[str]) -> Set[str]:
    return {rel for rel in reachable if rel in components}
