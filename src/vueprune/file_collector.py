"""
File collection: enumerate the project once and partition it into
component / asset / code candidate sets, the list of files scanned for
references, and empty directories.

No reference is resolved here.
"""
from __future__ import annotations

import logging
import os
from pathlib import Path
from typing import Iterable, List, Optional

from .config_loader import PruneConfig
from .node_types import FileCategory, FileRecord, ProjectFiles

logger = logging.getLogger(__name__)

DECLARATION_SUFFIX = ".d.ts"


def is_mock_path(rel_path: str) -> bool:
    """Mock naming convention: any segment or the file name contains 'mock'."""
    return "mock" in rel_path.lower()


def is_declaration_file(rel_path: str) -> bool:
    return rel_path.endswith(DECLARATION_SUFFIX)


def _ext(name: str) -> str:
    return os.path.splitext(name)[1].lower()


def _log_walk_error(err: OSError) -> None:
    logger.warning("Cannot list directory %s: %s", err.filename, err.strerror or err)


class FileCollector:
    """Walks a project root while skipping ignored directory names."""

    def __init__(self, root: Path, config: PruneConfig):
        self.root = root
        self.config = config
        self.ignore_dirs = set(config.ignore_dirs)

    def rel(self, path: Path | str) -> str:
        return Path(path).relative_to(self.root).as_posix()

    def walk_files(self, base: Optional[Path] = None, recursive: bool = True) -> List[Path]:
        """All regular files under ``base`` (default: root), ignored dirs pruned.

        Listing errors are logged and the affected subtree yields nothing.
        """
        base = base or self.root
        collected: List[Path] = []
        for dirpath, dirnames, filenames in os.walk(base, onerror=_log_walk_error):
            dirnames[:] = sorted(d for d in dirnames if d not in self.ignore_dirs)
            for fn in sorted(filenames):
                collected.append(Path(dirpath) / fn)
            if not recursive:
                break
        return collected

    def collect(self) -> ProjectFiles:
        project = ProjectFiles()
        code_ignores = self.config.compiled_code_ignores()
        comp_ext = self.config.component_extension
        asset_exts = set(self.config.asset_extensions)
        code_exts = set(self.config.code_extensions)
        scan_exts = set(self.config.source_extensions) | set(self.config.style_extensions)
        scan_exts.add(".html")

        for dirpath, dirnames, filenames in os.walk(self.root, onerror=_log_walk_error):
            dirnames[:] = sorted(d for d in dirnames if d not in self.ignore_dirs)
            here = Path(dirpath)
            if here != self.root and not dirnames and not _visible(filenames, self.ignore_dirs):
                project.empty_dirs.append(self.rel(here))

            for fn in sorted(filenames):
                rel = self.rel(here / fn)
                ext = _ext(fn)
                if ext in scan_exts:
                    project.scannable.append(rel)
                if is_mock_path(rel):
                    continue
                category = self._categorize(rel, ext, comp_ext, asset_exts, code_exts)
                if category is None:
                    continue
                if category is FileCategory.CODE and any(p.search(rel) for p in code_ignores):
                    continue
                project.records.append(FileRecord(path=rel, category=category))

        for record in project.records:
            if record.category is FileCategory.COMPONENT:
                project.components.add(record.path)
            elif record.category is FileCategory.ASSET:
                project.assets.add(record.path)
            else:
                project.code.add(record.path)

        logger.debug(
            "Collected %d components, %d assets, %d code files, %d scannable, %d empty dirs",
            len(project.components),
            len(project.assets),
            len(project.code),
            len(project.scannable),
            len(project.empty_dirs),
        )
        return project

    @staticmethod
    def _categorize(
        rel: str, ext: str, comp_ext: str, asset_exts: set, code_exts: set
    ) -> Optional[FileCategory]:
        if rel.endswith(comp_ext):
            return FileCategory.COMPONENT
        if ext in asset_exts:
            return FileCategory.ASSET
        if ext in code_exts and not is_declaration_file(rel):
            return FileCategory.CODE
        return None


def _visible(names: Iterable[str], ignore_dirs: set) -> bool:
    return any(n not in ignore_dirs for n in names)
