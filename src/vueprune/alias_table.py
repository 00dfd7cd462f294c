"""
Alias table: built-in defaults merged with aliases discovered from build
tool configuration.

Every configuration source is run through a small set of independent
parser strategies; each strategy returns ``{prefix: replacement}`` or None.
Discovered replacements are accepted only when they exist inside the
project root, so a bad guess never shadows a working default.
"""
from __future__ import annotations

import json
import logging
import os
import re
from pathlib import Path
from typing import Callable, Dict, Iterable, List, Optional

from .errors import ConfigParseError
from .node_types import AliasEntry

logger = logging.getLogger(__name__)

AliasMap = Dict[str, str]

# Later sources overwrite earlier ones for the same key.
ALIAS_SOURCES: List[str] = [
    "vite.config.ts",
    "vite.config.js",
    "vite.config.mjs",
    "vite.config.cjs",
    "vue.config.js",
    "webpack.config.js",
    "webpack.config.ts",
    "jsconfig.json",
    "tsconfig.json",
]

FALLBACK_REPLACEMENTS = ("/src", "/")

_Q = r"""['"]([^'"\n]+)['"]"""
# resolve('src'), path.resolve(__dirname, 'src'), fileURLToPath(new URL('./src', import.meta.url)), 'src'
_VALUE = (
    r"(?:(?:path\.)?resolve\(\s*(?:__dirname\s*,\s*)?" + _Q + r"\s*\)"
    r"|fileURLToPath\(\s*new\s+URL\(\s*" + _Q + r"\s*,\s*import\.meta\.url\s*\)\s*\)"
    r"|" + _Q + r")"
)

_SET_RE = re.compile(r"\.set\(\s*" + _Q + r"\s*,\s*(?:path\.)?resolve\(\s*(?:__dirname\s*,\s*)?" + _Q + r"\s*\)\s*\)")
_OBJ_RE = re.compile(r"alias\s*:\s*\{([\s\S]*?)\}")
_PAIR_RE = re.compile(r"""(?:['"]([^'"\n]+)['"]|([A-Za-z_$][\w$]*))\s*:\s*""" + _VALUE)
_ARR_RE = re.compile(r"alias\s*:\s*\[([\s\S]*?)\]")
_ITEM_RE = re.compile(
    r"\{[\s\S]*?find\s*:\s*" + _Q + r"[\s\S]*?replacement\s*:\s*" + _VALUE + r"[\s\S]*?\}"
)


def normalize_replacement(value: str) -> str:
    """Leading-slash, root-relative form: 'src' / './src' / '/src' -> '/src'."""
    if not value:
        return value
    if value.startswith("/"):
        return value
    value = value[2:] if value.startswith("./") else value
    return "/" + value.lstrip("/")


def _first(*groups: Optional[str]) -> Optional[str]:
    for g in groups:
        if g:
            return g
    return None


# ---- parser strategies (text configs) ----

def parse_chain_set(text: str) -> Optional[AliasMap]:
    """``config.resolve.alias.set('@', resolve('src'))`` (vue-cli chain API)."""
    found: AliasMap = {}
    for m in _SET_RE.finditer(text):
        found[m.group(1)] = normalize_replacement(m.group(2))
    return found or None


def parse_object_literal(text: str) -> Optional[AliasMap]:
    """``alias: { '@': resolve('src'), comps: 'src/components' }``."""
    found: AliasMap = {}
    for block in _OBJ_RE.finditer(text):
        for m in _PAIR_RE.finditer(block.group(1)):
            key = _first(m.group(1), m.group(2))
            target = _first(m.group(3), m.group(4), m.group(5))
            if key and target:
                found[key] = normalize_replacement(target)
    return found or None


def parse_array_literal(text: str) -> Optional[AliasMap]:
    """``alias: [{ find: '@', replacement: resolve('src') }]`` (Vite array form)."""
    found: AliasMap = {}
    for block in _ARR_RE.finditer(text):
        for m in _ITEM_RE.finditer(block.group(1)):
            target = _first(m.group(2), m.group(3), m.group(4))
            if target:
                found[m.group(1)] = normalize_replacement(target)
    return found or None


TEXT_STRATEGIES: List[Callable[[str], Optional[AliasMap]]] = [
    parse_chain_set,
    parse_object_literal,
    parse_array_literal,
]


# ---- parser strategy (JSON configs) ----

def parse_compiler_paths(text: str, config_dir: Path, root: Path) -> Optional[AliasMap]:
    """``compilerOptions.paths`` + ``baseUrl`` from tsconfig/jsconfig.

    Trailing ``/*`` markers are stripped from keys and targets; the first
    listed target wins.

    Raises:
        ConfigParseError: the text is not valid JSON
    """
    try:
        data = json.loads(text)
    except ValueError as e:
        raise ConfigParseError(str(e)) from e
    if not isinstance(data, dict):
        return None
    options = data.get("compilerOptions") or {}
    paths = options.get("paths") if isinstance(options, dict) else None
    if not isinstance(paths, dict) or not paths:
        return None
    base_abs = (config_dir / (options.get("baseUrl") or ".")).resolve()

    found: AliasMap = {}
    for raw_key, targets in paths.items():
        key = raw_key.rstrip("*").rstrip("/")
        if not key:
            continue
        items = targets if isinstance(targets, list) else [targets]
        if not items or not isinstance(items[0], str):
            continue
        first = items[0].rstrip("*").rstrip("/")
        abs_target = Path(os.path.normpath(base_abs / first))
        rel = os.path.relpath(abs_target, root.resolve()).replace("\\", "/")
        found[key] = "/" + ("" if rel == "." else rel.lstrip("/"))
    return found or None


class AliasTable:
    """Prefix -> ordered replacement candidates, longest prefix matched first."""

    def __init__(self, root: Path, defaults: Optional[AliasMap] = None):
        self.root = root
        self._primary: AliasMap = {}
        for key, value in (defaults or {}).items():
            self._primary[key] = normalize_replacement(value)
        self._entries: Optional[List[AliasEntry]] = None

    # ---- building ----
    def merge(self, discovered: AliasMap, source: str = "") -> None:
        """Accept each discovered replacement only if it exists inside the root."""
        for key, value in discovered.items():
            normalized = normalize_replacement(value)
            if not self.is_valid_replacement(normalized):
                logger.warning(
                    "Skipping alias '%s' -> '%s' from %s (outside project or missing)",
                    key, normalized, source or "config",
                )
                continue
            existed = self._primary.get(key)
            if existed and existed != normalized:
                logger.debug("Alias override '%s': %s -> %s (%s)", key, existed, normalized, source)
            else:
                logger.debug("Alias found '%s' -> '%s' (%s)", key, normalized, source)
            self._primary[key] = normalized
        self._entries = None

    def is_valid_replacement(self, normalized: str) -> bool:
        candidate = (self.root / normalized.lstrip("/")).resolve()
        try:
            candidate.relative_to(self.root.resolve())
        except ValueError:
            return False
        return candidate.exists()

    def discover(self, sources: Iterable[str] = ALIAS_SOURCES) -> None:
        """Scan known configuration files in priority order."""
        for name in sources:
            path = self.root / name
            if not path.is_file():
                continue
            try:
                text = path.read_text(encoding="utf-8")
            except OSError as e:
                logger.warning("Cannot read alias source %s: %s", name, e)
                continue
            if name.endswith(".json"):
                try:
                    found = parse_compiler_paths(text, path.parent, self.root)
                except ConfigParseError as e:
                    logger.warning("Skipping malformed alias source %s: %s", name, e)
                    continue
                if found:
                    self.merge(found, name)
                continue
            for strategy in TEXT_STRATEGIES:
                found = strategy(text)
                if found:
                    self.merge(found, name)

    # ---- lookup ----
    @property
    def entries(self) -> List[AliasEntry]:
        if self._entries is None:
            built: List[AliasEntry] = []
            for prefix, primary in self._primary.items():
                reps = [primary]
                for fb in FALLBACK_REPLACEMENTS:
                    if fb not in reps:
                        reps.append(fb)
                built.append(AliasEntry(prefix=prefix, replacements=reps))
            built.sort(key=lambda e: len(e.prefix), reverse=True)
            self._entries = built
        return self._entries

    def match(self, specifier: str) -> Optional[AliasEntry]:
        for entry in self.entries:
            if entry.matches(specifier):
                return entry
        return None

    def as_dict(self) -> AliasMap:
        return dict(self._primary)


def build_alias_table(root: Path, defaults: AliasMap, discover: bool = True) -> AliasTable:
    table = AliasTable(root, defaults)
    if discover:
        table.discover()
    return table
