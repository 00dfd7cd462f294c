from __future__ import annotations

from pathlib import Path

import graphviz
from graphviz.backend import ExecutableNotFound

from vueprune.api import analyze_project
from vueprune.graphviz_render import render_reference_graph


def _w(p: Path, rel: str, content: str = "") -> None:
    f = p / rel
    f.parent.mkdir(parents=True, exist_ok=True)
    f.write_text(content, encoding="utf-8")


def _no_dot(self, *args, **kwargs):
    raise ExecutableNotFound(["dot"])


def test_dot_source_written_without_graphviz_binary(tmp_path: Path, monkeypatch) -> None:
    root = tmp_path / "app"
    _w(root, "src/main.ts", "import App from './App.vue'\n")
    _w(root, "src/App.vue", "<script>import Btn from './Btn.vue'</script>")
    _w(root, "src/Btn.vue")
    _w(root, "src/Orphan.vue")
    result = analyze_project(root)

    monkeypatch.setattr(graphviz.Digraph, "render", _no_dot)
    dot_path, rendered = render_reference_graph(
        result.graph,
        result.project,
        result.reachable,
        result.report.entries,
        str(tmp_path / "out" / "graph"),
    )
    assert rendered is None
    source = Path(dot_path).read_text(encoding="utf-8")
    assert dot_path.endswith("graph.dot")
    assert '"src/main.ts" -> "src/App.vue"' in source
    assert '"src/App.vue" -> "src/Btn.vue"' in source
    # entry blue, unreachable candidate red
    assert "#2196F3" in source
    assert "#F44336" in source
