from __future__ import annotations

import pytest

from vueprune.errors import PatternError
from vueprune.extractors import (
    ASSET_EXTRACTORS,
    SPECIFIER_EXTRACTORS,
    extract_css_import_urls,
    extract_css_urls,
    extract_dynamic_imports,
    extract_export_from,
    extract_lazy_loaders,
    extract_require_arrays,
    extract_requires,
    extract_side_effect_imports,
    extract_srcset_attributes,
    extract_static_imports,
    extract_workers,
    find_context_loaders,
    find_glob_loaders,
    glob_base,
    glob_to_regex,
    is_external_url,
    parse_regex_literal,
    run_extractors,
)


def test_static_imports_single_and_multiline():
    text = """
import Foo from './Foo.vue'
import {
  a,
  b,
} from "@/utils/helpers"
import type { T } from '../types/t'
"""
    assert extract_static_imports(text) == ["./Foo.vue", "@/utils/helpers", "../types/t"]


def test_static_imports_do_not_span_string_literals():
    text = "const s = 'import'; const t = \"x\"\nimport A from './A'\n"
    assert extract_static_imports(text) == ["./A"]


def test_export_from_forms():
    text = "export * from './a'\nexport { b as c } from './b'\nexport const x = 1\n"
    assert extract_export_from(text) == ["./a", "./b"]


def test_side_effect_imports_include_css_at_import():
    text = "import './styles/global.css'\n@import '../theme/vars.scss';\n"
    assert extract_side_effect_imports(text) == ["./styles/global.css", "../theme/vars.scss"]


def test_css_import_url_forms():
    text = "@import url('./b.css');\n@import url(./c.css) screen;\n@IMPORT url(\"../d.css\");\n"
    assert extract_css_import_urls(text) == ["./b.css", "./c.css", "../d.css"]
    assert extract_side_effect_imports(text) == []


def test_require_calls():
    assert extract_requires("const x = require( './x' ); require(\"y\")") == ["./x", "y"]


def test_dynamic_import_with_comments():
    text = """
const A = () => import(/* webpackChunkName: "a" */ './views/A.vue')
const B = () => import(
  // line comment
  './views/B.vue'
)
const C = () => import('./views/C')
"""
    assert extract_dynamic_imports(text) == ["./views/A.vue", "./views/B.vue", "./views/C"]


def test_lazy_loader_wrapper():
    text = "const Modal = defineAsyncComponent(() => import('./Modal.vue'))"
    assert extract_lazy_loaders(text) == ["./Modal.vue"]


def test_require_array_form():
    text = "require(['./a', \"./b\"], function (a, b) {})"
    assert extract_require_arrays(text) == ["./a", "./b"]


def test_worker_constructors():
    text = """
const w1 = new Worker('./worker.js')
const w2 = new Worker(new URL('./heavy.worker.ts', import.meta.url), { type: 'module' })
const w3 = new SharedWorker('./shared.js')
"""
    assert extract_workers(text) == ["./worker.js", "./shared.js", "./heavy.worker.ts"]


def test_run_extractors_unions_without_duplicates():
    text = "import A from './A'\nimport('./A')\nrequire('./B')\n"
    assert run_extractors(text, SPECIFIER_EXTRACTORS) == ["./A", "./B"]


def test_css_urls_strip_quotes_and_module_marker():
    text = ".a{background:url('../assets/a.png')} .b{background:url(~@/assets/b.png)} .c{background: url( \"c.svg\" )}"
    assert extract_css_urls(text) == ["../assets/a.png", "@/assets/b.png", "c.svg"]


def test_srcset_takes_url_part_of_each_candidate():
    text = '<img srcset="./a.png 1x, ./a@2x.png 2x">'
    assert extract_srcset_attributes(text) == ["./a.png", "./a@2x.png"]


def test_asset_extractors_cover_templates_and_new_url():
    text = """
<template><img src="@/assets/logo.png"></template>
<script>const u = new URL('./bg.jpg', import.meta.url)</script>
"""
    specs = run_extractors(text, ASSET_EXTRACTORS)
    assert "@/assets/logo.png" in specs
    assert "./bg.jpg" in specs


@pytest.mark.parametrize(
    "spec,external",
    [
        ("https://cdn.example.com/x.png", True),
        ("//cdn.example.com/x.png", True),
        ("data:image/png;base64,AAA", True),
        ("#icon", True),
        ("./x.png", False),
        ("@/assets/x.png", False),
        ("/img/x.png", False),
    ],
)
def test_external_urls(spec, external):
    assert is_external_url(spec) is external


def test_context_loader_arguments():
    text = """
const a = require.context('./components', true, /\\.vue$/)
const b = require.context("./icons")
const c = require.context('./modules', false, /\\.(js|ts)$/i)
"""
    calls = find_context_loaders(text)
    assert [(c.directory, c.recursive, c.filter_expr) for c in calls] == [
        ("./components", True, "/\\.vue$/"),
        ("./icons", False, ""),
        ("./modules", False, "/\\.(js|ts)$/i"),
    ]


def test_glob_loader_string_and_array_forms():
    text = """
const pages = import.meta.glob('./pages/**/*.vue')
const eager = import.meta.globEager("./icons/*.svg")
const mods = import.meta.glob(['./mods/*.ts', '!./mods/*.spec.ts'], { eager: true })
"""
    calls = find_glob_loaders(text)
    assert calls[0].patterns == ("./pages/**/*.vue",)
    assert calls[1].patterns == ("./icons/*.svg",)
    assert calls[2].patterns == ("./mods/*.ts",)
    assert calls[2].negated == ("./mods/*.spec.ts",)


def test_parse_regex_literal_forms():
    rx = parse_regex_literal("/\\.vue$/")
    assert rx is not None and rx.search("./a/B.vue")
    rx_i = parse_regex_literal("/\\.VUE$/i")
    assert rx_i is not None and rx_i.search("./b.vue")
    rx_new = parse_regex_literal("new RegExp('\\\\.js$')")
    assert rx_new is not None and rx_new.search("./c.js")
    assert parse_regex_literal("someVariable") is None


def test_parse_regex_literal_malformed_raises():
    with pytest.raises(PatternError):
        parse_regex_literal("/(unclosed/")


def test_glob_to_regex_star_and_double_star():
    single = glob_to_regex("/p/comps/*")
    assert single.match("/p/comps/a.vue")
    assert not single.match("/p/comps/sub/a.vue")

    deep = glob_to_regex("/p/pages/**/*.vue")
    assert deep.match("/p/pages/a.vue")
    assert deep.match("/p/pages/x/y/b.vue")
    assert not deep.match("/p/pages/x/b.ts")

    braces = glob_to_regex("/p/*.{png,svg}")
    assert braces.match("/p/a.png") and braces.match("/p/b.svg")
    assert not braces.match("/p/c.jpg")


def test_glob_to_regex_unbalanced_brace():
    with pytest.raises(PatternError):
        glob_to_regex("/p/*.{png,svg")


def test_glob_base_and_recursion():
    assert glob_base("/p/comps/*") == ("/p/comps", False)
    assert glob_base("/p/pages/**/*.vue") == ("/p/pages", True)
    assert glob_base("/p/mods/*/index.ts") == ("/p/mods", True)
