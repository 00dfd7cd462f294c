from __future__ import annotations

import os
from pathlib import Path

import pytest

from vueprune.deletion import (
    confirm_and_delete,
    delete_dirs_safely,
    delete_files_safely,
    is_affirmative,
    is_strictly_inside,
)
from vueprune.node_types import UnusedReport


def _w(p: Path, rel: str, content: str = "") -> None:
    f = p / rel
    f.parent.mkdir(parents=True, exist_ok=True)
    f.write_text(content, encoding="utf-8")


class _Answers:
    def __init__(self, *answers: str):
        self.answers = list(answers)
        self.prompts = []

    def __call__(self, prompt: str) -> str:
        self.prompts.append(prompt)
        return self.answers.pop(0)


@pytest.mark.parametrize("answer,expected", [("y", True), ("YES", True), (" y ", True), ("", False), ("n", False), ("yep", False)])
def test_is_affirmative(answer: str, expected: bool) -> None:
    assert is_affirmative(answer) is expected


def test_is_strictly_inside(tmp_path: Path) -> None:
    assert is_strictly_inside(tmp_path, tmp_path / "a" / "b")
    assert not is_strictly_inside(tmp_path, tmp_path)
    assert not is_strictly_inside(tmp_path, tmp_path / ".." / "x")


def test_per_category_confirmation(tmp_path: Path) -> None:
    _w(tmp_path, "src/Unused.vue")
    _w(tmp_path, "src/assets/old.png")
    _w(tmp_path, "src/dead.ts")
    (tmp_path / "src" / "empty").mkdir()
    report = UnusedReport(
        unused_components=["src/Unused.vue"],
        unused_assets=["src/assets/old.png"],
        unused_code=["src/dead.ts"],
        empty_dirs=["src/empty"],
    )
    ask = _Answers("y", "n", "yes", "y")

    counts = confirm_and_delete(tmp_path, report, ask=ask)
    assert counts == {"components": 1, "assets": 0, "code": 1, "dirs": 1}
    assert len(ask.prompts) == 4
    assert "(1)" in ask.prompts[0]
    assert not (tmp_path / "src" / "Unused.vue").exists()
    assert (tmp_path / "src" / "assets" / "old.png").exists()
    assert not (tmp_path / "src" / "dead.ts").exists()
    assert not (tmp_path / "src" / "empty").exists()


def test_empty_categories_are_not_prompted(tmp_path: Path) -> None:
    _w(tmp_path, "src/dead.ts")
    report = UnusedReport(unused_code=["src/dead.ts"])
    ask = _Answers("n")
    assert confirm_and_delete(tmp_path, report, ask=ask)["code"] == 0
    assert len(ask.prompts) == 1
    assert "code" in ask.prompts[0]


def test_clean_report_never_prompts(tmp_path: Path) -> None:
    ask = _Answers()
    assert confirm_and_delete(tmp_path, UnusedReport(), ask=ask) == {
        "components": 0,
        "assets": 0,
        "code": 0,
        "dirs": 0,
    }
    assert ask.prompts == []


def test_files_outside_root_are_skipped(tmp_path: Path) -> None:
    root = tmp_path / "project"
    _w(root, "src/a.vue")
    _w(tmp_path, "outside.vue")
    assert delete_files_safely(root, ["../outside.vue", "src/missing.vue", "src/a.vue"]) == 1
    assert (tmp_path / "outside.vue").exists()
    assert not (root / "src" / "a.vue").exists()


@pytest.mark.skipif(not hasattr(os, "symlink"), reason="symlinks unsupported")
def test_symlinks_are_not_followed(tmp_path: Path) -> None:
    root = tmp_path / "project"
    _w(tmp_path, "target.vue")
    (root / "src").mkdir(parents=True)
    link = root / "src" / "link.vue"
    try:
        link.symlink_to(tmp_path / "target.vue")
    except OSError:
        pytest.skip("cannot create symlinks here")
    assert delete_files_safely(root, ["src/link.vue"]) == 0
    assert (tmp_path / "target.vue").exists()


def test_non_empty_directory_is_kept(tmp_path: Path) -> None:
    _w(tmp_path, "src/was-empty/new.ts")
    (tmp_path / "src" / "still-empty").mkdir()
    assert delete_dirs_safely(tmp_path, ["src/was-empty", "src/still-empty"]) == 1
    assert (tmp_path / "src" / "was-empty").is_dir()
    assert not (tmp_path / "src" / "still-empty").exists()
