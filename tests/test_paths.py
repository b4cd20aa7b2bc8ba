"""Tests para la normalización de paths y las escrituras idempotentes."""

from __future__ import annotations

import pathlib

import pytest

from docguard.paths import (
    content_hash,
    file_name,
    is_excluded,
    normalize,
    suffix,
    to_posix,
    walk_files,
    write_if_changed,
)


@pytest.mark.parametrize(
    "raw, expected",
    [
        ("Services\\AudioService.cs", "Services/AudioService.cs"),
        ("./Services/AudioService.cs", "Services/AudioService.cs"),
        ("././Views/Main.xaml", "Views/Main.xaml"),
        ("Models/Track.cs", "Models/Track.cs"),
    ],
)
def test_to_posix(raw: str, expected: str):
    assert to_posix(raw) == expected


def test_normalize_absolute(tmp_path: pathlib.Path):
    root = tmp_path / "project"
    root.mkdir()

    assert normalize(root / "Services" / "A.cs", root) == "Services/A.cs"
    assert normalize("Services\\A.cs", root) == "Services/A.cs"
    outside = (tmp_path / "other" / "B.cs").as_posix()
    assert normalize(outside, root) == outside


def test_name_helpers():
    assert file_name("Services\\AudioService.cs") == "AudioService.cs"
    assert suffix("Views/Main.XAML") == ".xaml"
    assert suffix("Makefile") == ""


def test_is_excluded():
    excluded = ["bin", "obj", ".git"]

    assert is_excluded("Services/bin/Debug/A.cs", excluded)
    assert is_excluded("OBJ/A.cs", excluded)
    assert not is_excluded("Services/A.cs", excluded)
    assert not is_excluded("bin", excluded)


def test_walk_files(tmp_path: pathlib.Path):
    for rel in ["b/B.cs", "a/A.cs", "a/notes.md", "bin/X.cs", "a/img.png"]:
        path = tmp_path / rel
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_text("x", encoding="utf-8")

    found = [p.relative_to(tmp_path).as_posix() for p in walk_files(tmp_path, [".CS", ".md"], ["bin"])]

    assert found == ["a/A.cs", "a/notes.md", "b/B.cs"]
    assert list(walk_files(tmp_path / "missing", [".cs"], [])) == []


def test_write_if_changed(tmp_path: pathlib.Path):
    path = tmp_path / "nested" / "file.md"

    assert write_if_changed(path, "hola\n")
    assert not write_if_changed(path, "hola\n")
    assert write_if_changed(path, "chau\n")
    assert path.read_text(encoding="utf-8") == "chau\n"


def test_content_hash():
    assert content_hash("a") == content_hash("a")
    assert len(content_hash("")) == 64
