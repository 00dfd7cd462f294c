"""
Specifier resolution: raw reference string + importing file -> concrete
root-relative file path, or None.

A ``ResolutionContext`` owns the probe cache and lives exactly as long as
one analysis run; build a new one for every run.
"""
from __future__ import annotations

import logging
import os
import re
from dataclasses import dataclass, field
from pathlib import Path
from typing import Dict, List, Optional

from .alias_table import AliasTable

logger = logging.getLogger(__name__)

PUBLIC_DIR = "public"
_SUFFIX_RE = re.compile(r"[?#].*$")


def strip_query(specifier: str) -> str:
    return _SUFFIX_RE.sub("", specifier)


def is_relative(specifier: str) -> bool:
    return specifier.startswith("./") or specifier.startswith("../") or specifier in (".", "..")


@dataclass
class ResolutionContext:
    """Per-run resolver state."""

    root: Path
    aliases: AliasTable
    extensions: List[str]
    index_files: List[str]
    # absolute probe input -> resolved absolute file (None = known miss)
    probe_cache: Dict[str, Optional[Path]] = field(default_factory=dict)


class SpecifierResolver:
    def __init__(self, context: ResolutionContext):
        self.ctx = context
        self.root = context.root

    # ---- public API ----
    def resolve(self, specifier: str, importer: str) -> Optional[str]:
        """Resolve ``specifier`` written in root-relative file ``importer``.

        Bare package names, out-of-root targets and misses return None.
        """
        cleaned = strip_query(specifier.strip())
        if not cleaned or self.is_external(cleaned):
            return None

        entry = self.ctx.aliases.match(cleaned)
        candidate = cleaned
        if entry is not None:
            remainder = entry.remainder(cleaned)
            for rep in entry.replacements:
                hit = self.probe(self.root / rep.lstrip("/") / remainder)
                if hit is not None:
                    return self._rel(hit)
            # no replacement hit: fall through as a root-relative path
            candidate = remainder

        if candidate.startswith("/"):
            trimmed = candidate.lstrip("/")
            for base in (self.root, self.root / PUBLIC_DIR):
                hit = self.probe(base / trimmed)
                if hit is not None:
                    return self._rel(hit)
            return None

        if is_relative(cleaned):
            importer_dir = (self.root / importer).parent
            hit = self.probe(importer_dir / cleaned)
        else:
            hit = self.probe(self.root / candidate)
        return self._rel(hit) if hit is not None else None

    def is_external(self, specifier: str) -> bool:
        return not (
            is_relative(specifier)
            or specifier.startswith("/")
            or self.ctx.aliases.match(specifier) is not None
        )

    def to_directory(self, specifier: str, importer: str) -> Optional[Path]:
        """Map a directory-like specifier (loader base) to an absolute directory.

        Unlike ``resolve`` no extension/index probing happens: loaders name
        directories, which may hold no index file at all.
        """
        cleaned = strip_query(specifier.strip()).rstrip("/") or "/"
        for candidate in self.absolute_candidates(cleaned, importer):
            if candidate.is_dir() and self._inside(candidate):
                return candidate
        return None

    def absolute_candidates(self, specifier: str, importer: str) -> List[Path]:
        """Absolute paths a specifier may denote, in resolution order (no probing)."""
        if is_relative(specifier):
            return [_norm((self.root / importer).parent / specifier)]
        entry = self.ctx.aliases.match(specifier)
        if entry is not None:
            remainder = entry.remainder(specifier)
            return [_norm(self.root / rep.lstrip("/") / remainder) for rep in entry.replacements]
        if specifier.startswith("/"):
            trimmed = specifier.lstrip("/")
            return [_norm(self.root / trimmed), _norm(self.root / PUBLIC_DIR / trimmed)]
        return []

    # ---- probing ----
    def probe(self, path: Path) -> Optional[Path]:
        """Literal path, then ``path + ext`` per extension, then ``path/index.*``."""
        path = _norm(path)
        key = str(path)
        if key in self.ctx.probe_cache:
            return self.ctx.probe_cache[key]

        result: Optional[Path] = None
        if self._inside(path):
            for candidate in self._probe_order(path):
                if _is_file(candidate):
                    result = candidate
                    break
        self.ctx.probe_cache[key] = result
        return result

    def _probe_order(self, path: Path) -> List[Path]:
        order = [path]
        order.extend(Path(str(path) + ext) for ext in self.ctx.extensions)
        if _is_dir(path):
            order.extend(path / name for name in self.ctx.index_files)
        return order

    def _inside(self, path: Path) -> bool:
        try:
            path.relative_to(self.root)
        except ValueError:
            return False
        return True

    def _rel(self, path: Path) -> str:
        return path.relative_to(self.root).as_posix()


def _norm(path: Path) -> Path:
    return Path(os.path.normpath(path))


def _is_file(path: Path) -> bool:
    try:
        return path.is_file()
    except OSError as e:
        logger.warning("Cannot stat %s: %s", path, e)
        return False


def _is_dir(path: Path) -> bool:
    try:
        return path.is_dir()
    except OSError as e:
        logger.warning("Cannot stat %s: %s", path, e)
        return False


def build_resolver(root: Path, aliases: AliasTable, extensions: List[str], index_files: List[str]) -> SpecifierResolver:
    return SpecifierResolver(
        ResolutionContext(root=root, aliases=aliases, extensions=list(extensions), index_files=list(index_files))
    )
