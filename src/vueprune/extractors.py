"""
Reference extraction by textual scanning.

Each extractor is a plain function ``text -> list of raw specifiers`` and
can be exercised on literal text without touching the filesystem. The
``ReferenceExtractor`` runs them all, unions their results and expands
bulk loaders (``require.context`` / ``import.meta.glob``) against the
project tree.

This is deliberately syntax-insensitive: specifiers computed at runtime
outside the recognised loader forms are not seen.
"""
from __future__ import annotations

import logging
import os
import re
from dataclasses import dataclass, field
from pathlib import Path
from typing import Callable, Iterable, List, Optional, Pattern, Tuple

from .errors import PatternError
from .file_collector import FileCollector
from .resolver import SpecifierResolver, strip_query

logger = logging.getLogger(__name__)

_STR = r"""['"]([^'"\n]+)['"]"""
_COMMENTS = r"(?:(?:/\*[\s\S]*?\*/\s*)|(?://[^\n]*\n\s*))*"

_IMPORT_FROM_RE = re.compile(r"""\bimport\s+(?:type\s+)?[^'";]*?\sfrom\s*""" + _STR)
_EXPORT_FROM_RE = re.compile(r"""\bexport\s+(?:type\s+)?[^'";]*?\sfrom\s*""" + _STR)
_SIDE_EFFECT_RE = re.compile(r"\bimport\s*" + _STR)
_CSS_IMPORT_URL_RE = re.compile(r"""@import\s+url\(\s*['"]?([^'")\s]+)['"]?\s*\)""", re.IGNORECASE)
_REQUIRE_RE = re.compile(r"\brequire\(\s*" + _STR + r"\s*\)")
_DYNAMIC_IMPORT_RE = re.compile(r"\bimport\(\s*" + _COMMENTS + _STR + r"\s*\)")
_LAZY_LOADER_RE = re.compile(
    r"\bdefineAsyncComponent\s*\(\s*(?:async\s*)?\(\s*\)\s*=>\s*import\(\s*" + _COMMENTS + _STR
)
_REQUIRE_ARRAY_RE = re.compile(r"\brequire\(\s*\[([\s\S]*?)\]")
_STRING_RE = re.compile(_STR)
_WORKER_RE = re.compile(r"\bnew\s+(?:Shared)?Worker\(\s*" + _STR)
_WORKER_URL_RE = re.compile(
    r"\bnew\s+(?:Shared)?Worker\(\s*new\s+URL\(\s*" + _STR + r"\s*,\s*import\.meta\.url\s*\)"
)

_CONTEXT_RE = re.compile(
    r"\brequire\.context\(\s*([^,)]+?)\s*"
    r"(?:,\s*([^,)]+?)\s*)?"
    r"(?:,\s*(/(?:\\.|[^/\n])+/[gimsuy]*|new\s+RegExp\([^)]*\)|[^,)]+?)\s*)?"
    r"(?:,\s*[^)]*)?\)"
)
_GLOB_RE = re.compile(r"""\bimport\.meta\.glob(?:Eager)?\(\s*(['"][^'"\n]+['"]|\[[^\]]*\])""")

_CSS_URL_RE = re.compile(r"\burl\(\s*([^)]+?)\s*\)", re.IGNORECASE)
_NEW_URL_RE = re.compile(r"\bnew\s+URL\(\s*" + _STR + r"\s*,\s*import\.meta\.url\s*\)")
_SRC_ATTR_RE = re.compile(r"""\bsrc\s*=\s*['"]([^'"\n]+)['"]""")
_SRCSET_ATTR_RE = re.compile(r"""\bsrcset\s*=\s*['"]([^'"\n]+)['"]""")

_REGEX_LITERAL_RE = re.compile(r"^/(.*)/([gimsuy]*)$", re.DOTALL)
_NEW_REGEXP_RE = re.compile(r"""^new\s+RegExp\(\s*['"]([^'"\n]+)['"]\s*(?:,\s*['"]([^'"\n]*)['"])?\s*\)$""")
_EXTERNAL_URL_RE = re.compile(r"^(?:[a-z][a-z0-9+.-]*:|//|#)", re.IGNORECASE)

Extractor = Callable[[str], List[str]]


# ---- specifier extractors ----

def extract_static_imports(text: str) -> List[str]:
    return [m.group(1) for m in _IMPORT_FROM_RE.finditer(text)]


def extract_export_from(text: str) -> List[str]:
    return [m.group(1) for m in _EXPORT_FROM_RE.finditer(text)]


def extract_side_effect_imports(text: str) -> List[str]:
    """``import 'x'`` and stylesheet ``@import 'x'``."""
    return [m.group(1) for m in _SIDE_EFFECT_RE.finditer(text)]


def extract_css_import_urls(text: str) -> List[str]:
    """Stylesheet ``@import url('x')``."""
    return [m.group(1) for m in _CSS_IMPORT_URL_RE.finditer(text)]


def extract_requires(text: str) -> List[str]:
    return [m.group(1) for m in _REQUIRE_RE.finditer(text)]


def extract_dynamic_imports(text: str) -> List[str]:
    """``import('x')``, also with leading block or line comments (magic comments)."""
    return [m.group(1) for m in _DYNAMIC_IMPORT_RE.finditer(text)]


def extract_lazy_loaders(text: str) -> List[str]:
    """``defineAsyncComponent(() => import('x'))``."""
    return [m.group(1) for m in _LAZY_LOADER_RE.finditer(text)]


def extract_require_arrays(text: str) -> List[str]:
    """AMD style ``require(['a', 'b'], cb)``."""
    found: List[str] = []
    for m in _REQUIRE_ARRAY_RE.finditer(text):
        found.extend(s.group(1) for s in _STRING_RE.finditer(m.group(1)))
    return found


def extract_workers(text: str) -> List[str]:
    """``new Worker('x')`` and ``new Worker(new URL('x', import.meta.url))``."""
    found = [m.group(1) for m in _WORKER_RE.finditer(text)]
    found.extend(m.group(1) for m in _WORKER_URL_RE.finditer(text))
    return found


SPECIFIER_EXTRACTORS: List[Extractor] = [
    extract_static_imports,
    extract_side_effect_imports,
    extract_export_from,
    extract_css_import_urls,
    extract_requires,
    extract_dynamic_imports,
    extract_lazy_loaders,
    extract_require_arrays,
    extract_workers,
]


# ---- asset extractors ----

def extract_css_urls(text: str) -> List[str]:
    found: List[str] = []
    for m in _CSS_URL_RE.finditer(text):
        raw = m.group(1).strip().strip("'\"")
        # webpack module marker: url(~@/assets/x.png)
        if raw.startswith("~") and not raw.startswith("~/"):
            raw = raw[1:]
        found.append(raw)
    return found


def extract_new_urls(text: str) -> List[str]:
    return [m.group(1) for m in _NEW_URL_RE.finditer(text)]


def extract_src_attributes(text: str) -> List[str]:
    return [m.group(1) for m in _SRC_ATTR_RE.finditer(text)]


def extract_srcset_attributes(text: str) -> List[str]:
    found: List[str] = []
    for m in _SRCSET_ATTR_RE.finditer(text):
        for item in m.group(1).split(","):
            parts = item.split()
            if parts:
                found.append(parts[0])
    return found


ASSET_EXTRACTORS: List[Extractor] = [
    extract_css_urls,
    extract_new_urls,
    extract_requires,
    extract_static_imports,
    extract_side_effect_imports,
    extract_src_attributes,
    extract_srcset_attributes,
]


def run_extractors(text: str, extractors: Iterable[Extractor]) -> List[str]:
    """Union of all extractor results, first-seen order."""
    seen: dict = {}
    for extractor in extractors:
        for spec in extractor(text):
            seen.setdefault(spec, None)
    return list(seen)


def is_external_url(spec: str) -> bool:
    """http(s)/data/other schemes, protocol-relative and fragment-only values."""
    return bool(_EXTERNAL_URL_RE.match(spec))


# ---- loaders ----

@dataclass(frozen=True)
class ContextLoaderCall:
    directory: str
    recursive: bool = False
    filter_expr: str = ""


@dataclass(frozen=True)
class GlobLoaderCall:
    patterns: Tuple[str, ...] = ()
    negated: Tuple[str, ...] = ()


def _unquote(expr: str) -> str:
    expr = expr.strip()
    if len(expr) >= 2 and expr[0] in "'\"`" and expr[-1] == expr[0]:
        return expr[1:-1]
    return expr


def find_context_loaders(text: str) -> List[ContextLoaderCall]:
    calls: List[ContextLoaderCall] = []
    for m in _CONTEXT_RE.finditer(text):
        directory = _unquote(m.group(1) or "")
        if not directory:
            continue
        recursive = (m.group(2) or "").strip().lower() == "true"
        calls.append(ContextLoaderCall(directory, recursive, (m.group(3) or "").strip()))
    return calls


def find_glob_loaders(text: str) -> List[GlobLoaderCall]:
    calls: List[GlobLoaderCall] = []
    for m in _GLOB_RE.finditer(text):
        arg = m.group(1)
        items = [s.group(1) for s in _STRING_RE.finditer(arg)] if arg.startswith("[") else [_unquote(arg)]
        positive = tuple(i for i in items if not i.startswith("!"))
        negative = tuple(i[1:] for i in items if i.startswith("!"))
        if positive:
            calls.append(GlobLoaderCall(positive, negative))
    return calls


def parse_regex_literal(expr: str) -> Optional[Pattern[str]]:
    """``/\\.vue$/i`` or ``new RegExp('\\.vue$', 'i')`` -> compiled pattern.

    Returns None when ``expr`` is not a literal (e.g. a variable).

    Raises:
        PatternError: the literal does not compile
    """
    lit = expr.strip()
    m = _REGEX_LITERAL_RE.match(lit)
    if m:
        source, flags = m.group(1), m.group(2)
    else:
        m = _NEW_REGEXP_RE.match(lit)
        if not m:
            return None
        # string form: '\\.vue$' in source text means \.vue$
        source, flags = m.group(1).replace("\\\\", "\\"), m.group(2) or ""
    re_flags = 0
    if "i" in flags:
        re_flags |= re.IGNORECASE
    if "m" in flags:
        re_flags |= re.MULTILINE
    if "s" in flags:
        re_flags |= re.DOTALL
    try:
        return re.compile(source, re_flags)
    except re.error as e:
        raise PatternError(f"invalid regex {expr!r}: {e}") from e


def glob_to_regex(pattern: str) -> Pattern[str]:
    """Translate a glob to an anchored regex.

    ``*`` matches within one path segment, ``**`` across segments, ``?`` one
    non-separator character, ``{a,b}`` alternation.

    Raises:
        PatternError: unbalanced braces
    """
    out: List[str] = []
    i, n, depth = 0, len(pattern), 0
    while i < n:
        ch = pattern[i]
        if ch == "*":
            if pattern.startswith("**/", i):
                out.append("(?:.*/)?")
                i += 3
                continue
            if pattern.startswith("**", i):
                out.append(".*")
                i += 2
                continue
            out.append("[^/]*")
        elif ch == "?":
            out.append("[^/]")
        elif ch == "{":
            depth += 1
            out.append("(?:")
        elif ch == "}":
            if depth == 0:
                raise PatternError(f"unbalanced '}}' in glob {pattern!r}")
            depth -= 1
            out.append(")")
        elif ch == "," and depth:
            out.append("|")
        else:
            out.append(re.escape(ch))
        i += 1
    if depth:
        raise PatternError(f"unbalanced '{{' in glob {pattern!r}")
    try:
        return re.compile("^" + "".join(out) + "$")
    except re.error as e:
        raise PatternError(f"invalid glob {pattern!r}: {e}") from e


def glob_base(pattern: str) -> Tuple[str, bool]:
    """Static directory prefix of a glob and whether listing must recurse."""
    idx = min((i for i in (pattern.find(c) for c in "*?{[") if i != -1), default=-1)
    if idx == -1:
        return os.path.dirname(pattern), False
    head = pattern[:idx]
    base = head.rstrip("/") if head.endswith("/") else os.path.dirname(head)
    return base, "/" in pattern[idx:] or "**" in pattern


# ---- driver ----

@dataclass
class ExtractedRefs:
    specifiers: List[str] = field(default_factory=list)
    # root-relative files produced by loader expansion
    expanded: List[str] = field(default_factory=list)


class ReferenceExtractor:
    def __init__(self, resolver: SpecifierResolver, collector: FileCollector, known_extensions: List[str]):
        self.resolver = resolver
        self.collector = collector
        self.root = resolver.root
        self.known_extensions = set(known_extensions)

    def extract(self, text: str, importer: str) -> ExtractedRefs:
        refs = ExtractedRefs(specifiers=run_extractors(text, SPECIFIER_EXTRACTORS))
        expanded: dict = {}
        for call in find_context_loaders(text):
            for rel in self.expand_context(call, importer):
                expanded.setdefault(rel, None)
        for call in find_glob_loaders(text):
            for rel in self.expand_glob(call, importer):
                expanded.setdefault(rel, None)
        refs.expanded = list(expanded)
        return refs

    def asset_references(self, text: str, importer: str) -> List[str]:
        """Resolved root-relative targets of asset-referencing forms."""
        found: dict = {}
        for spec in run_extractors(text, ASSET_EXTRACTORS):
            cleaned = strip_query(spec).strip()
            if not cleaned or is_external_url(cleaned):
                continue
            rel = self.resolver.resolve(cleaned, importer)
            if rel is not None:
                found.setdefault(rel, None)
        return list(found)

    # ---- loader expansion ----
    def expand_context(self, call: ContextLoaderCall, importer: str) -> List[str]:
        directory = self.resolver.to_directory(call.directory, importer)
        if directory is None:
            logger.debug("require.context base not found: %s (%s)", call.directory, importer)
            return []
        predicate: Optional[Pattern[str]] = None
        if call.filter_expr:
            try:
                predicate = parse_regex_literal(call.filter_expr)
            except PatternError as e:
                logger.warning("Skipping require.context in %s: %s", importer, e)
                return []
        results: List[str] = []
        for path in self.collector.walk_files(directory, recursive=call.recursive):
            key = "./" + path.relative_to(directory).as_posix()
            if predicate is not None and not predicate.search(key):
                continue
            results.append(self.collector.rel(path))
        return results

    def expand_glob(self, call: GlobLoaderCall, importer: str) -> List[str]:
        try:
            negatives = [glob_to_regex(p) for p in self._absolute_patterns(call.negated, importer)]
            results: dict = {}
            for pattern in call.patterns:
                for rel in self._expand_one(pattern, importer, negatives):
                    results.setdefault(rel, None)
        except PatternError as e:
            logger.warning("Skipping import.meta.glob in %s: %s", importer, e)
            return []
        return list(results)

    def _expand_one(self, pattern: str, importer: str, negatives: List[Pattern[str]]) -> List[str]:
        last = pattern.rsplit("/", 1)[-1]
        known_only = "." not in last
        for abs_pattern in self._absolute_patterns([pattern], importer):
            base, recursive = glob_base(abs_pattern)
            base_dir = Path(base)
            if not base_dir.is_dir():
                continue
            regex = glob_to_regex(abs_pattern)
            matched: List[str] = []
            for path in self.collector.walk_files(base_dir, recursive=recursive):
                posix = path.as_posix()
                if not regex.match(posix) or any(neg.match(posix) for neg in negatives):
                    continue
                if known_only and path.suffix.lower() not in self.known_extensions:
                    continue
                matched.append(self.collector.rel(path))
            return matched
        return []

    def _absolute_patterns(self, patterns: Iterable[str], importer: str) -> List[str]:
        out: List[str] = []
        for pattern in patterns:
            candidates = self.resolver.absolute_candidates(pattern, importer)
            if not candidates:
                candidates = [Path(os.path.normpath(self.root / pattern))]
            out.extend(c.as_posix() for c in candidates)
        return out
