"""Análisis de impacto: qué documentación queda afectada por un conjunto de cambios."""

from __future__ import annotations

import pathlib
from collections.abc import Iterable

import structlog

from docguard.analysis.consistency import validate_project
from docguard.config import Settings
from docguard.models import (
    ChangedFile,
    ChangeKind,
    ConsistencyReport,
    ImpactReport,
    ModuleUpdateRecommendation,
)
from docguard.paths import file_name, normalize, resolve, suffix
from docguard.registry import DocumentationRegistry, FileSystemRegistry, module_of
from docguard.rules.engine import RuleEngine

logger = structlog.get_logger(__name__)

KIND_LABELS = {
    ".cs": "C# class",
    ".xaml": "XAML view",
    ".md": "documentation",
    ".ps1": "PowerShell script",
    ".py": "Python module",
}

CORE_KEYWORDS = ("Service", "Manager", "Helper", "Client")

MAX_PRIORITY = 5


class ImpactAnalyzer:
    def __init__(
        self,
        settings: Settings,
        registry: DocumentationRegistry | None = None,
        rule_engine: RuleEngine | None = None,
    ) -> None:
        self.settings = settings
        self.root = pathlib.Path(settings.project_root)
        self.registry = registry or FileSystemRegistry(settings)
        self.rule_engine = rule_engine or RuleEngine(settings, self.registry)

    # ---------- Módulos ----------

    def extract_module_name(self, path: object) -> str | None:
        """Módulo del path. Acepta paths absolutos dentro del proyecto o relativos al root."""
        if isinstance(path, str) and path.strip():
            path = normalize(path.strip(), self.root)
        return module_of(path, self.settings.module_names)

    def module_summary_path(self, module: str) -> str:
        return self.registry.module_summary_path(module)

    def module_summary_exists(self, module: str) -> bool:
        return self.registry.find_module_summary(module) is not None

    def to_changed(self, paths: Iterable[str | ChangedFile]) -> list[ChangedFile]:
        """Normaliza paths y determina si el archivo es nuevo (no existe aún en disco)."""
        changed: list[ChangedFile] = []
        for path in paths:
            if isinstance(path, ChangedFile):
                changed.append(path)
                continue
            rel_path = normalize(path, self.root)
            kind = ChangeKind.MODIFIED if resolve(rel_path, self.root).exists() else ChangeKind.ADDED
            changed.append(ChangedFile(rel_path, self.extract_module_name(rel_path), kind))
        return changed

    # ---------- Documentación afectada ----------

    def get_affected_documentation_files(
        self,
        changed: Iterable[str | ChangedFile],
        errors: list[str] | None = None,
    ) -> list[str]:
        changed = self.to_changed(changed)
        if not changed:
            return []
        affected: set[str] = set()

        needles = {c.path for c in changed} | {file_name(c.path) for c in changed}
        for doc in self.registry.documentation_files():
            try:
                text = resolve(doc, self.root).read_text(encoding="utf-8")
            except (OSError, UnicodeDecodeError) as exc:
                logger.warning("doc_read_error", path=doc, error=str(exc))
                if errors is not None:
                    errors.append(f"read:{doc}: {exc}")
                continue
            if any(needle in text for needle in needles):
                affected.add(doc)

        for module in dict.fromkeys(c.module for c in changed if c.module):
            for candidate in self.registry.summary_candidates(module):
                if resolve(candidate, self.root).is_file():
                    affected.add(candidate)

        affected.update(self.rule_engine.affected_index_files(c.path for c in changed))

        source_exts = {e.lower() for e in self.settings.source_extensions}
        if any(suffix(c.path) in source_exts for c in changed):
            affected.add(self.settings.changelog_path)

        return sorted(affected)

    # ---------- Cambios por módulo ----------

    def describe_change(self, change: ChangedFile) -> str:
        label = KIND_LABELS.get(suffix(change.path), "file")
        return f"{change.kind.value} {label}: {file_name(change.path)}"

    def detect_module_changes(self, changed: Iterable[str | ChangedFile]) -> dict[str, list[str]]:
        module_changes: dict[str, list[str]] = {}
        for change in self.to_changed(changed):
            if change.module is None:
                continue
            module_changes.setdefault(change.module, []).append(self.describe_change(change))
        return module_changes

    def analyze_module_activity(
        self, module_changes: dict[str, list[str]]
    ) -> list[ModuleUpdateRecommendation]:
        recommendations = [
            ModuleUpdateRecommendation(
                module=module,
                summary_path=self.module_summary_path(module),
                change_count=len(changes),
                changes=list(changes),
                priority=_priority(changes),
                summary_exists=self.module_summary_exists(module),
                recommended_action=self._recommended_action(module, changes),
            )
            for module, changes in module_changes.items()
        ]
        recommendations.sort(key=lambda r: r.priority, reverse=True)
        return recommendations

    def _recommended_action(self, module: str, changes: list[str]) -> str:
        if not self.module_summary_exists(module):
            return f"Create new {file_name(self.module_summary_path(module))} file"

        added = sum(1 for c in changes if c.startswith(ChangeKind.ADDED.value))
        modified = sum(1 for c in changes if c.startswith(ChangeKind.MODIFIED.value))
        if added and modified:
            return f"Update summary with {added} new files and {modified} modifications"
        if added:
            return f"Document {added} new files in module"
        if modified:
            return f"Update summary with {modified} file modifications"
        return "Review and update module summary as needed"

    # ---------- Consistencia ----------

    def validate_project_consistency(self, root: str | pathlib.Path | None = None) -> ConsistencyReport:
        return validate_project(self.settings, self.registry, root)

    def update_cross_references(self, mapping: dict[str, str]) -> list[str]:
        """Reemplaza referencias a paths movidos (viejo -> nuevo) en toda la documentación."""
        if not mapping:
            return []
        try:
            return self.registry.replace_in_documents(mapping)
        except Exception as exc:
            logger.warning("cross_reference_error", error=str(exc))
            return []

    # ---------- Todo junto ----------

    def analyze(self, changed: Iterable[str | ChangedFile]) -> ImpactReport:
        report = ImpactReport()
        try:
            report.changed = self.to_changed(changed)
            report.affected_docs = self.get_affected_documentation_files(
                report.changed, report.errors
            )
            report.module_changes = self.detect_module_changes(report.changed)
            report.recommendations = self.analyze_module_activity(report.module_changes)
        except Exception as exc:
            logger.warning("impact_analysis_error", error=str(exc))
            report.errors.append(f"analysis: {exc}")

        logger.info(
            "impact_analyzed",
            changed=len(report.changed),
            affected=len(report.affected_docs),
            modules=list(report.module_changes),
        )
        return report


def _priority(changes: list[str]) -> int:
    """1 base; +2 con 5 o más cambios, +1 con 3-4; +1 si hay nuevos; +1 si toca código core."""
    priority = 1
    if len(changes) >= 5:
        priority += 2
    elif len(changes) >= 3:
        priority += 1
    if any(c.startswith(ChangeKind.ADDED.value) for c in changes):
        priority += 1
    if any(keyword in c for c in changes for keyword in CORE_KEYWORDS):
        priority += 1
    return min(priority, MAX_PRIORITY)
