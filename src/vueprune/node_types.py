"""
Core data types shared by the collector, resolver, graph and report.
"""
from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Dict, List, Set, Tuple


class FileCategory(Enum):
    """Candidate category of a project file."""

    COMPONENT = "component"
    ASSET = "asset"
    CODE = "code"


@dataclass(frozen=True)
class FileRecord:
    path: str  # root-relative, posix separators
    category: FileCategory


@dataclass
class AliasEntry:
    """One alias prefix and its ordered replacement candidates.

    ``replacements[0]`` is the discovered (or default) replacement; the
    generic ``/src`` and project-root fallbacks follow it, without duplicates.
    """

    prefix: str
    replacements: List[str] = field(default_factory=list)

    @property
    def primary(self) -> str:
        return self.replacements[0] if self.replacements else "/"

    def matches(self, specifier: str) -> bool:
        return specifier == self.prefix or specifier.startswith(self.prefix + "/")

    def remainder(self, specifier: str) -> str:
        return specifier[len(self.prefix):].lstrip("/")


@dataclass
class ProjectFiles:
    """Output of the file collector: candidate sets plus the scan list."""

    records: List[FileRecord] = field(default_factory=list)
    components: Set[str] = field(default_factory=set)
    assets: Set[str] = field(default_factory=set)
    code: Set[str] = field(default_factory=set)
    # every non-ignored file whose content is scanned for references
    scannable: List[str] = field(default_factory=list)
    empty_dirs: List[str] = field(default_factory=list)

    def category_of(self, rel_path: str) -> FileCategory | None:
        if rel_path in self.components:
            return FileCategory.COMPONENT
        if rel_path in self.assets:
            return FileCategory.ASSET
        if rel_path in self.code:
            return FileCategory.CODE
        return None


@dataclass
class UnusedReport:
    unused_components: List[str] = field(default_factory=list)
    unused_assets: List[str] = field(default_factory=list)
    unused_code: List[str] = field(default_factory=list)
    empty_dirs: List[str] = field(default_factory=list)
    declared_components: List[str] = field(default_factory=list)
    entries: List[str] = field(default_factory=list)
    entry_fallback: bool = False
    stats: Dict[str, int] = field(default_factory=dict)

    def sections(self) -> List[Tuple[str, List[str]]]:
        """Category label and list, in the order results are reported."""
        return [
            ("components", self.unused_components),
            ("assets", self.unused_assets),
            ("code", self.unused_code),
            ("dirs", self.empty_dirs),
        ]

    def is_clean(self) -> bool:
        return not any(items for _, items in self.sections())

    def to_dict(self) -> Dict[str, Any]:
        return {
            "version": "1.0",
            "summary": dict(self.stats),
            "entries": list(self.entries),
            "entry_fallback": self.entry_fallback,
            "declared_components": list(self.declared_components),
            "unused_components": list(self.unused_components),
            "unused_assets": list(self.unused_assets),
            "unused_code": list(self.unused_code),
            "empty_dirs": list(self.empty_dirs),
        }
