"""Tests para el análisis de impacto de cambios sobre la documentación."""

from __future__ import annotations

import pathlib

import pytest

from docguard.analysis.impact import ImpactAnalyzer
from docguard.config import Settings
from docguard.models import ChangeKind


@pytest.fixture
def analyzer(settings: Settings) -> ImpactAnalyzer:
    return ImpactAnalyzer(settings)


@pytest.mark.parametrize(
    "path, expected",
    [
        ("Services/AudioService.cs", "Services"),
        ("./services\\AudioService.cs", "Services"),
        ("/DevTools/CodeGenerator.cs", "DevTools"),
        ("VIEWMODELS/MainViewModel.cs", "ViewModels"),
        ("Documentation/Services/notes.md", None),
        ("Unknown/thing.cs", None),
        ("", None),
        ("   ", None),
        (None, None),
        (42, None),
        (["Services"], None),
    ],
)
def test_extract_module_name(analyzer: ImpactAnalyzer, path, expected):
    assert analyzer.extract_module_name(path) == expected


def test_change_kind_from_disk(analyzer: ImpactAnalyzer):
    changed = analyzer.to_changed(["Services/AudioService.cs", "Services/NewThing.cs"])

    assert [c.kind for c in changed] == [ChangeKind.MODIFIED, ChangeKind.ADDED]
    assert all(c.module == "Services" for c in changed)


def test_detect_module_changes_new_file(analyzer: ImpactAnalyzer):
    assert analyzer.detect_module_changes(["Services/NewThing.cs"]) == {
        "Services": ["Added C# class: NewThing.cs"]
    }


def test_detect_module_changes_labels(analyzer: ImpactAnalyzer):
    changes = analyzer.detect_module_changes(
        [
            "Services/AudioService.cs",
            "Views/MainView.xaml",
            "DevTools/deploy.ps1",
            "DevTools/tool.py",
            "Utils/data.bin",
            "Documentation/Core/CHANGELOG.md",
        ]
    )

    assert changes == {
        "Services": ["Modified C# class: AudioService.cs"],
        "Views": ["Added XAML view: MainView.xaml"],
        "DevTools": ["Added PowerShell script: deploy.ps1", "Added Python module: tool.py"],
        "Utils": ["Added file: data.bin"],
    }


def test_recommendation_with_existing_summary(analyzer: ImpactAnalyzer):
    recs = analyzer.analyze_module_activity(analyzer.detect_module_changes(["Services/NewThing.cs"]))

    assert len(recs) == 1
    rec = recs[0]
    assert rec.summary_exists
    assert rec.priority >= 2
    assert rec.recommended_action == "Document 1 new files in module"
    assert rec.summary_path == "Documentation/Modules/ServicesModuleUpdateSummary.md"


def test_recommendation_without_summary(analyzer: ImpactAnalyzer):
    recs = analyzer.analyze_module_activity(analyzer.detect_module_changes(["Models/Track.cs"]))

    assert not recs[0].summary_exists
    assert recs[0].recommended_action == "Create new ModelsModuleUpdateSummary.md file"


def test_recommendation_actions(analyzer: ImpactAnalyzer):
    mixed = {"Services": ["Added C# class: A.cs", "Modified C# class: B.cs"]}
    modified = {"Services": ["Modified C# class: B.cs"]}
    other = {"Services": ["Renamed C# class: B.cs"]}

    assert (
        analyzer.analyze_module_activity(mixed)[0].recommended_action
        == "Update summary with 1 new files and 1 modifications"
    )
    assert (
        analyzer.analyze_module_activity(modified)[0].recommended_action
        == "Update summary with 1 file modifications"
    )
    assert (
        analyzer.analyze_module_activity(other)[0].recommended_action
        == "Review and update module summary as needed"
    )


def test_priority_rules(analyzer: ImpactAnalyzer):
    recs = analyzer.analyze_module_activity(
        {
            "Models": ["Modified C# class: Track.cs"],
            "Utils": [f"Modified C# class: Util{i}.cs" for i in range(3)],
            "Services": [f"Added C# class: Service{i}.cs" for i in range(6)],
        }
    )

    assert [(r.module, r.priority) for r in recs] == [("Services", 5), ("Utils", 2), ("Models", 1)]


def test_affected_documentation_for_source_change(analyzer: ImpactAnalyzer):
    affected = analyzer.get_affected_documentation_files(["Services/AudioService.cs"])

    assert affected == sorted(affected)
    assert "Documentation/Modules/ServicesModuleUpdateSummary.md" in affected
    assert "Services/README.md" in affected
    assert "Documentation/Core/CHANGELOG.md" in affected
    assert "Documentation/Development/README.md" not in affected


def test_affected_documentation_without_source_change(analyzer: ImpactAnalyzer):
    affected = analyzer.get_affected_documentation_files(["Documentation/Development/Guides/Setup.md"])

    assert "Documentation/Core/CHANGELOG.md" not in affected
    assert "Documentation/Development/Guides/README.md" in affected


def test_affected_documentation_records_unreadable(
    analyzer: ImpactAnalyzer, project: pathlib.Path
):
    (project / "Documentation" / "Broken.md").write_bytes(b"\xff\xfe broken")
    errors: list[str] = []

    affected = analyzer.get_affected_documentation_files(["Services/AudioService.cs"], errors)

    assert "Services/README.md" in affected
    assert len(errors) == 1
    assert errors[0].startswith("read:Documentation/Broken.md")


def test_affected_documentation_empty_input(analyzer: ImpactAnalyzer):
    assert analyzer.get_affected_documentation_files([]) == []


def test_analyze_single_call(analyzer: ImpactAnalyzer, project: pathlib.Path):
    report = analyzer.analyze([str(project / "Services" / "NewThing.cs")])

    assert [c.path for c in report.changed] == ["Services/NewThing.cs"]
    assert report.module_changes == {"Services": ["Added C# class: NewThing.cs"]}
    assert report.recommendations[0].module == "Services"
    assert "Services/README.md" in report.affected_docs
    assert report.errors == []


def test_module_summary_helpers(analyzer: ImpactAnalyzer):
    assert analyzer.module_summary_path("Views") == "Documentation/Modules/ViewsModuleUpdateSummary.md"
    assert analyzer.module_summary_exists("Services")
    assert analyzer.module_summary_exists("DevTools")
    assert not analyzer.module_summary_exists("Views")


def test_update_cross_references(analyzer: ImpactAnalyzer, project: pathlib.Path):
    updated = analyzer.update_cross_references({"AudioService.cs": "PlaybackService.cs"})

    assert updated == ["Documentation/Modules/ServicesModuleUpdateSummary.md"]
    summary = project / "Documentation" / "Modules" / "ServicesModuleUpdateSummary.md"
    assert "PlaybackService.cs" in summary.read_text(encoding="utf-8")
    assert analyzer.update_cross_references({"AudioService.cs": "PlaybackService.cs"}) == []


def test_extract_module_name_from_absolute_path(analyzer: ImpactAnalyzer, project: pathlib.Path):
    assert analyzer.extract_module_name(str(project / "Services" / "X.cs")) == "Services"
    assert analyzer.extract_module_name(str(project / "Documentation" / "Guide.md")) is None
