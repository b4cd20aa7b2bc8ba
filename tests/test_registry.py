"""Tests para el registro de documentación sobre el filesystem."""

from __future__ import annotations

import pathlib

import pytest

from docguard.config import Settings
from docguard.models import DocIndexType
from docguard.registry import FileSystemRegistry, module_of


@pytest.fixture
def registry(settings: Settings) -> FileSystemRegistry:
    return FileSystemRegistry(settings)


def test_all_index_files(registry: FileSystemRegistry, project: pathlib.Path, write_file):
    write_file(project, "Services/bin/README.md", "# build\n")

    assert registry.all_index_files() == [
        "DevTools/README.md",
        "Documentation/Development/Guides/README.md",
        "Documentation/Development/README.md",
        "Documentation/Modules/README.md",
        "Documentation/README.md",
        "Services/README.md",
    ]


@pytest.mark.parametrize(
    "path, index_type, category, module",
    [
        ("Documentation/README.md", DocIndexType.ROOT, None, None),
        ("Documentation/Development/README.md", DocIndexType.NAVIGATION, "Development", None),
        ("Documentation/Development/Guides/README.md", DocIndexType.CATEGORY, "Development", None),
        ("Services/README.md", DocIndexType.TECHNICAL, None, "Services"),
        ("services\\README.md", DocIndexType.TECHNICAL, None, "Services"),
        ("Other/README.md", DocIndexType.UNCLASSIFIED, None, None),
        ("Services/Sub/README.md", DocIndexType.UNCLASSIFIED, None, None),
        ("Documentation/Guide.md", DocIndexType.UNCLASSIFIED, None, None),
    ],
)
def test_classify(registry: FileSystemRegistry, path, index_type, category, module):
    node = registry.classify(path)

    assert node.index_type == index_type
    assert node.category == category
    assert node.module == module


def test_documentation_files(registry: FileSystemRegistry):
    files = registry.documentation_files()

    assert "Documentation/Development/Guides/Setup.md" in files
    assert "Services/README.md" in files
    assert "DevTools/README.md" in files
    assert files.count("Documentation/README.md") == 1


def test_summary_lookup(registry: FileSystemRegistry):
    assert registry.summary_candidates("Views") == [
        "Documentation/Modules/ViewsModuleUpdateSummary.md",
        "Documentation/ViewsModuleUpdateSummary.md",
        "Documentation/ViewsModuleSummary.md",
        "Views/README.md",
        "Documentation/ViewsSummary.md",
    ]
    assert registry.find_module_summary("Services") == "Documentation/Modules/ServicesModuleUpdateSummary.md"
    assert registry.find_module_summary("DevTools") == "DevTools/README.md"
    assert registry.find_module_summary("Views") is None


def test_locate_existing_summary_does_not_render(registry: FileSystemRegistry):
    class Renderer:
        def render_module_summary(self, module, changes):
            raise AssertionError("no debería renderizar")

    assert (
        registry.locate_or_create_summary("Services", Renderer(), [])
        == "Documentation/Modules/ServicesModuleUpdateSummary.md"
    )


def test_failed_render_returns_none(registry: FileSystemRegistry, project: pathlib.Path):
    class Renderer:
        def render_module_summary(self, module, changes):
            raise RuntimeError("template roto")

    assert registry.locate_or_create_summary("Views", Renderer(), []) is None
    assert not (project / "Documentation/Modules/ViewsModuleUpdateSummary.md").exists()


@pytest.mark.parametrize(
    "path, expected",
    [("Converters/BoolConverter.cs", "Converters"), ("clients\\Api.cs", "Clients"), ("x.cs", None)],
)
def test_module_of(settings: Settings, path, expected):
    assert module_of(path, settings.module_names) == expected
