"""Tests for :mod:`pathmonitor.watch.patterns` and path helpers."""
from pathlib import Path

import pytest

from pathmonitor.utils.file_utils import is_descendant, iter_subdirectories, normalize_path
from pathmonitor.watch import PatternFilter


@pytest.mark.parametrize("path", [
    "/data/.report.txt.swp",
    "/data/report.txt~",
    "/data/.DS_Store",
    "/data/THUMBS.DB",
    "/repo/.git/objects/ab/cdef",
])
def test_default_patterns_ignore(path):
    assert PatternFilter().should_ignore(Path(path))


@pytest.mark.parametrize("path", ["/data/report.txt", "/data/gitlog.txt", "/data/level1"])
def test_default_patterns_keep(path):
    assert not PatternFilter().should_ignore(Path(path))


def test_deleted_paths_filter_like_existing_ones(tmp_path):
    assert PatternFilter().should_ignore(tmp_path / "gone" / ".#draft")


def test_empty_pattern_list_ignores_nothing():
    assert not PatternFilter([]).should_ignore(Path("/data/.DS_Store"))


def test_patterns_can_change():
    pattern_filter = PatternFilter([])
    path = Path("/data/out.log")

    assert not pattern_filter.should_ignore(path)
    pattern_filter.add_pattern("*.LOG")
    assert pattern_filter.should_ignore(path)
    pattern_filter.remove_pattern("*.log")
    assert not pattern_filter.should_ignore(path)


def test_normalize_path_collapses_relative_parts(tmp_path, monkeypatch):
    monkeypatch.chdir(tmp_path)

    assert normalize_path("a/./b/../c") == tmp_path / "a" / "c"


def test_is_descendant_respects_segments():
    assert is_descendant(Path("/a/b/c"), Path("/a"))
    assert not is_descendant(Path("/ab/c"), Path("/a"))
    assert not is_descendant(Path("/a"), Path("/a"))


def test_iter_subdirectories(tree):
    assert set(iter_subdirectories(tree.root)) == {tree.level1, tree.level2}


def test_iter_subdirectories_of_file_or_missing_path(tree, tmp_path):
    assert list(iter_subdirectories(tree.file)) == []
    assert list(iter_subdirectories(tmp_path / "missing")) == []
