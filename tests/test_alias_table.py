from __future__ import annotations

import logging
from pathlib import Path

import pytest

from vueprune.alias_table import (
    AliasTable,
    normalize_replacement,
    parse_array_literal,
    parse_chain_set,
    parse_compiler_paths,
    parse_object_literal,
)
from vueprune.config_loader import DEFAULT_ALIASES
from vueprune.errors import ConfigParseError


def _w(p: Path, rel: str, content: str = "") -> None:
    f = p / rel
    f.parent.mkdir(parents=True, exist_ok=True)
    f.write_text(content, encoding="utf-8")


def test_normalize_replacement():
    assert normalize_replacement("src") == "/src"
    assert normalize_replacement("./src/views") == "/src/views"
    assert normalize_replacement("/src") == "/src"


def test_chain_set_strategy():
    text = """
module.exports = {
  chainWebpack: (config) => {
    config.resolve.alias
      .set('@', resolve('src'))
      .set('views', resolve('src/views'))
  },
}
"""
    assert parse_chain_set(text) == {"@": "/src", "views": "/src/views"}


def test_object_literal_strategy():
    text = """
export default defineConfig({
  resolve: {
    alias: {
      '@': path.resolve(__dirname, './src'),
      comps: 'src/components',
      '#': fileURLToPath(new URL('./lib', import.meta.url)),
    },
  },
})
"""
    assert parse_object_literal(text) == {"@": "/src", "comps": "/src/components", "#": "/lib"}


def test_array_literal_strategy():
    text = """
resolve: {
  alias: [
    { find: '_', replacement: resolve('src') },
    { find: '~api', replacement: 'src/api' },
  ],
}
"""
    assert parse_array_literal(text) == {"_": "/src", "~api": "/src/api"}


def test_strategies_return_none_when_shape_absent():
    assert parse_chain_set("export default {}") is None
    assert parse_object_literal("export default {}") is None
    assert parse_array_literal("export default {}") is None


def test_compiler_paths_strip_wildcards_and_take_first(tmp_path: Path) -> None:
    text = '{"compilerOptions": {"baseUrl": ".", "paths": {"@/*": ["src/*", "other/*"], "#utils": ["src/utils"]}}}'
    found = parse_compiler_paths(text, tmp_path, tmp_path)
    assert found == {"@": "/src", "#utils": "/src/utils"}


def test_compiler_paths_respect_base_url(tmp_path: Path) -> None:
    text = '{"compilerOptions": {"baseUrl": "./src", "paths": {"~/*": ["./*"]}}}'
    assert parse_compiler_paths(text, tmp_path, tmp_path) == {"~": "/src"}


def test_compiler_paths_malformed_json_raises(tmp_path: Path) -> None:
    with pytest.raises(ConfigParseError):
        parse_compiler_paths("{ not json", tmp_path, tmp_path)


def test_discovered_alias_overrides_default_when_valid(tmp_path: Path) -> None:
    _w(tmp_path, "app/main.js")
    _w(tmp_path, "vite.config.js", "export default { resolve: { alias: { '@': resolve('app') } } }")
    table = AliasTable(tmp_path.resolve(), DEFAULT_ALIASES)
    table.discover()
    assert table.as_dict()["@"] == "/app"
    assert table.match("@/main").replacements == ["/app", "/src", "/"]


def test_invalid_alias_is_rejected_and_default_kept(tmp_path: Path, caplog) -> None:
    _w(tmp_path, "src/main.js")
    _w(tmp_path, "vite.config.ts", "alias: { '@': resolve('does-not-exist'), '^': resolve('../../etc') }")
    table = AliasTable(tmp_path.resolve(), DEFAULT_ALIASES)
    with caplog.at_level(logging.WARNING, logger="vueprune"):
        table.discover()
    assert table.as_dict()["@"] == "/src"
    assert "^" not in table.as_dict()
    assert "does-not-exist" in caplog.text


def test_malformed_json_source_is_skipped_others_apply(tmp_path: Path) -> None:
    _w(tmp_path, "lib/a.js")
    _w(tmp_path, "vue.config.js", "config.resolve.alias.set('lib', resolve('lib'))")
    _w(tmp_path, "tsconfig.json", "{ // comment\n \"compilerOptions\": ")
    table = AliasTable(tmp_path.resolve(), DEFAULT_ALIASES)
    table.discover()
    assert table.as_dict()["lib"] == "/lib"


def test_later_sources_overwrite_earlier(tmp_path: Path) -> None:
    _w(tmp_path, "src/x.js")
    _w(tmp_path, "app/x.js")
    _w(tmp_path, "vite.config.js", "alias: { '@': resolve('src') }")
    _w(tmp_path, "tsconfig.json", '{"compilerOptions": {"paths": {"@/*": ["app/*"]}}}')
    table = AliasTable(tmp_path.resolve(), DEFAULT_ALIASES)
    table.discover()
    assert table.as_dict()["@"] == "/app"
