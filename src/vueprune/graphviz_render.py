from __future__ import annotations

from pathlib import Path
from typing import Iterable, Optional, Set, Tuple

from graphviz import Digraph
from graphviz.backend import ExecutableNotFound

from .dependency_graph import DependencyGraph
from .node_types import FileCategory, ProjectFiles


def _color_for(name: str, project: ProjectFiles, reachable: Set[str], entries: Set[str]) -> str:
    if name in entries:
        return "#2196F3"  # blue
    if name in reachable:
        return "#4CAF50"  # green
    if project.category_of(name) is None:
        return "#BDBDBD"  # grey: scanned but never a candidate
    return "#F44336"  # red


def _shape_for(name: str, project: ProjectFiles) -> str:
    category = project.category_of(name)
    if category is FileCategory.COMPONENT:
        return "box"
    if category is FileCategory.ASSET:
        return "note"
    return "ellipse"


def render_reference_graph(
    graph: DependencyGraph,
    project: ProjectFiles,
    reachable: Iterable[str],
    entries: Iterable[str],
    output_base: str,
    fmt: str = "svg",
) -> Tuple[str, Optional[str]]:
    """Render the reference graph; entries blue, reachable green, unreachable red.

    Returns (dot_path, rendered_path). ``rendered_path`` is None when the
    Graphviz ``dot`` executable is not installed; the .dot source is
    written either way.
    """
    reachable_set = set(reachable)
    entry_set = set(entries)
    dot = Digraph(
        "vueprune",
        graph_attr={"rankdir": "LR", "splines": "spline"},
        node_attr={"style": "rounded,filled", "fontname": "Helvetica", "fontsize": "10"},
        edge_attr={"arrowhead": "vee"},
    )

    names = list(graph.nodes)
    for dst in (d for _, d in graph.edges):
        if dst not in graph:
            names.append(dst)
    for name in dict.fromkeys(names):
        dot.node(
            name,
            label=Path(name).name,
            tooltip=name,
            shape=_shape_for(name, project),
            fillcolor=_color_for(name, project, reachable_set, entry_set),
        )
    for src, dst in graph.edges:
        dot.edge(src, dst)

    dot_path = Path(output_base).with_suffix(".dot")
    dot_path.parent.mkdir(parents=True, exist_ok=True)
    dot_path.write_text(dot.source, encoding="utf-8")
    try:
        rendered = dot.render(filename=str(output_base), format=fmt, cleanup=True)
    except ExecutableNotFound:
        return str(dot_path), None
    return str(dot_path), rendered
