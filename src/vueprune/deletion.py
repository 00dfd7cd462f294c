"""
Interactive, guarded deletion of the reported paths.

One [y/N] prompt per non-empty category. Files are removed only when they
are regular files strictly inside the project root; directories only
when they are still empty at deletion time.
"""
from __future__ import annotations

import logging
from pathlib import Path
from typing import Callable, List

from .node_types import UnusedReport

logger = logging.getLogger(__name__)

Ask = Callable[[str], str]

_PROMPTS = {
    "components": "Delete unused component files ({n})? [y/N] ",
    "assets": "Delete unused static assets ({n})? [y/N] ",
    "code": "Delete unused code files ({n})? [y/N] ",
    "dirs": "Delete empty directories ({n})? [y/N] ",
}


def is_affirmative(answer: str) -> bool:
    return (answer or "").strip().lower() in ("y", "yes")


def is_strictly_inside(root: Path, candidate: Path) -> bool:
    root = root.resolve()
    candidate = candidate.resolve()
    return candidate != root and root in candidate.parents


def delete_files_safely(root: Path, rel_paths: List[str]) -> int:
    deleted = 0
    for rel in rel_paths:
        path = root / rel
        try:
            if not is_strictly_inside(root, path) or path.is_symlink() or not path.is_file():
                logger.warning("Skipping %s (not a regular file inside the project)", rel)
                continue
            path.unlink()
        except OSError as e:
            logger.warning("Delete failed: %s -> %s", rel, e)
            continue
        deleted += 1
        print(f"🗑️ Deleted: {rel}")
    print(f"✓ Deleted {deleted} file(s)")
    return deleted


def delete_dirs_safely(root: Path, rel_paths: List[str]) -> int:
    deleted = 0
    for rel in rel_paths:
        path = root / rel
        try:
            if not is_strictly_inside(root, path) or path.is_symlink() or not path.is_dir():
                continue
            if any(path.iterdir()):
                logger.warning("Skipping %s (no longer empty)", rel)
                continue
            path.rmdir()
        except OSError as e:
            logger.warning("Delete failed: %s -> %s", rel, e)
            continue
        deleted += 1
        print(f"📁 Deleted empty directory: {rel}")
    print(f"✓ Deleted {deleted} empty dir(s)")
    return deleted


def confirm_and_delete(root: Path, report: UnusedReport, ask: Ask = input) -> dict:
    """Prompt per category and delete on an affirmative answer.

    Returns the number of deleted paths per category label.
    """
    counts = {label: 0 for label, _ in report.sections()}
    if report.is_clean():
        return counts
    print("🛡️ Deletion cannot be undone; commit or back up your work first.")
    for label, items in report.sections():
        if not items:
            continue
        if not is_affirmative(ask(_PROMPTS[label].format(n=len(items)))):
            continue
        if label == "dirs":
            counts[label] = delete_dirs_safely(root, items)
        else:
            counts[label] = delete_files_safely(root, items)
    return counts
