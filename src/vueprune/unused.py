"""
Unused-set computation from reachability plus the per-category exception
rules (declared global components, wrapper pairing, collector exclusions).
"""
from __future__ import annotations

import logging
import posixpath
from typing import Callable, Iterable, List, Optional, Set

from .extractors import ReferenceExtractor
from .node_types import ProjectFiles

logger = logging.getLogger(__name__)


def unused_components(project: ProjectFiles, used: Set[str]) -> List[str]:
    return sorted(c for c in project.components if c not in used)


def referenced_assets(
    project: ProjectFiles,
    reachable: Iterable[str],
    extractor: ReferenceExtractor,
    read_text: Callable[[str], Optional[str]],
) -> Set[str]:
    """Assets reachable through the graph or referenced from reachable content."""
    reachable = list(reachable)
    referenced = {rel for rel in reachable if rel in project.assets}
    for rel in reachable:
        if rel in project.assets:
            continue
        text = read_text(rel)
        if not text:
            continue
        for target in extractor.asset_references(text, rel):
            if target in project.assets and target not in referenced:
                referenced.add(target)
                logger.debug("Asset reference: %s <- %s", target, rel)
    return referenced


def pairs_with_used_component(code_file: str, used: Set[str], component_ext: str) -> bool:
    """``dir/Foo.ts`` beside a used ``dir/Foo.vue`` (incl. index.ts + index.vue)."""
    directory, name = posixpath.split(code_file)
    base = name.rsplit(".", 1)[0]
    sibling = posixpath.join(directory, base + component_ext)
    if sibling in used:
        return True
    return base == "index" and posixpath.join(directory, "index" + component_ext) in used


def unused_code(
    project: ProjectFiles, reachable: Set[str], used_components: Set[str], component_ext: str
) -> List[str]:
    unused: List[str] = []
    for code_file in sorted(project.code):
        if code_file in reachable:
            continue
        if pairs_with_used_component(code_file, used_components, component_ext):
            logger.debug("Wrapper pairing keeps %s", code_file)
            continue
        unused.append(code_file)
    return unused
