"""Orquestador: recibe notificaciones de cambios, las agrupa con debounce y las analiza."""

from __future__ import annotations

import datetime
import pathlib
import threading
from collections.abc import Callable, Iterable

import structlog

from docguard.analysis.impact import ImpactAnalyzer
from docguard.config import Settings
from docguard.debounce import Debouncer
from docguard.models import BatchReport, ModuleScanReport, OrchestratorStatus
from docguard.paths import is_excluded, normalize, resolve, suffix, walk_files
from docguard.registry import DocumentationRegistry, FileSystemRegistry, TemplateRenderer
from docguard.rules.engine import RuleEngine

logger = structlog.get_logger(__name__)


class Orchestrator:
    def __init__(
        self,
        settings: Settings,
        registry: DocumentationRegistry | None = None,
        renderer: TemplateRenderer | None = None,
        on_batch: Callable[[BatchReport], None] | None = None,
    ) -> None:
        self.settings = settings
        self.root = pathlib.Path(settings.project_root)
        self.registry = registry or FileSystemRegistry(settings)
        self.rule_engine = RuleEngine(settings, self.registry)
        self.analyzer = ImpactAnalyzer(settings, self.registry, self.rule_engine)
        self.renderer = renderer
        self.on_batch = on_batch
        self.last_report: BatchReport | None = None
        self._pending: set[str] = set()
        self._pending_lock = threading.Lock()
        self._debouncer = Debouncer(settings.debounce_seconds, self._flush)

    # ---------- Filtro ----------

    def is_relevant(self, rel_path: str) -> bool:
        """Descarta directorios excluidos, extensiones no monitoreadas y los propios resúmenes."""
        if not rel_path or is_excluded(rel_path, self.settings.excluded_dirs):
            return False
        if suffix(rel_path) not in {e.lower() for e in self.settings.monitored_extensions}:
            return False
        return not rel_path.endswith("ModuleUpdateSummary.md")

    # ---------- Procesamiento ----------

    def process_changes(self, paths: Iterable[str]) -> BatchReport:
        report = BatchReport(processed_at=datetime.datetime.now())
        try:
            report.files = [normalize(p, self.root) for p in paths]
            report.relevant_files = [p for p in dict.fromkeys(report.files) if self.is_relevant(p)]
            if not report.relevant_files:
                report.message = "No relevant files were changed"
                return report

            impact = self.analyzer.analyze(report.relevant_files)
            report.affected_docs = impact.affected_docs
            report.module_changes = impact.module_changes
            report.recommendations = impact.recommendations
            report.errors.extend(impact.errors)

            for rel_path in report.relevant_files:
                updates = self.rule_engine.get_prioritized_updates(rel_path)
                if updates:
                    report.index_updates[rel_path] = updates

            report.message = (
                f"Analyzed {len(report.relevant_files)} files: "
                f"{len(report.affected_docs)} affected documents, "
                f"{len(report.recommendations)} module recommendations"
            )
        except Exception as exc:
            logger.warning("process_changes_error", error=str(exc))
            report.errors.append(f"Error processing file changes: {exc}")
            report.message = "Error occurred during change processing"

        logger.info(
            "changes_processed",
            files=len(report.files),
            relevant=len(report.relevant_files),
            affected=len(report.affected_docs),
        )
        return report

    # ---------- Debounce ----------

    def queue_change(self, path: str) -> None:
        rel_path = normalize(path, self.root)
        with self._pending_lock:
            self._pending.add(rel_path)
        self._debouncer.trigger()

    def clear_pending(self) -> None:
        self._debouncer.cancel()
        with self._pending_lock:
            self._pending.clear()

    def _flush(self) -> None:
        with self._pending_lock:
            batch = sorted(self._pending)
            self._pending.clear()
        if not batch:
            return

        report = self.process_changes(batch)
        self.last_report = report
        if self.on_batch is not None:
            try:
                self.on_batch(report)
            except Exception as exc:
                logger.error("on_batch_error", error=str(exc))

    def status(self) -> OrchestratorStatus:
        with self._pending_lock:
            pending = len(self._pending)
        return OrchestratorStatus(
            tracked_modules=list(self.settings.module_descriptions),
            pending_changes=pending,
            debounce_active=self._debouncer.active,
            last_processed_at=self.last_report.processed_at if self.last_report else None,
        )

    def close(self) -> None:
        self.clear_pending()

    def __enter__(self) -> Orchestrator:
        return self

    def __exit__(self, *exc_info: object) -> None:
        self.close()

    # ---------- Mantenimiento de resúmenes ----------

    def _module_outdated(self, module: str, summary: pathlib.Path) -> bool:
        summary_mtime = summary.stat().st_mtime
        for file_path in walk_files(
            self.root / module, self.settings.monitored_extensions, self.settings.excluded_dirs
        ):
            if file_path.stat().st_mtime > summary_mtime:
                return True
        return False

    def scan_modules(self) -> ModuleScanReport:
        """Revisa que cada módulo existente tenga un resumen al día con sus archivos."""
        report = ModuleScanReport(scanned_at=datetime.datetime.now())
        try:
            for module in self.settings.module_descriptions:
                report.scanned_modules.append(module)
                if not (self.root / module).is_dir():
                    continue
                summary = self.registry.find_module_summary(module)
                if summary is None:
                    report.missing.append(module)
                    report.recommendations.append(f"Create {module}ModuleUpdateSummary.md")
                    continue
                if self._module_outdated(module, resolve(summary, self.root)):
                    report.outdated.append(module)
                    report.recommendations.append(f"Update {module} module documentation")
        except Exception as exc:
            logger.warning("module_scan_error", error=str(exc))
            report.error = str(exc)
        return report

    def create_missing_summaries(self) -> list[str]:
        """Crea con el renderer los resúmenes de módulos existentes que no tienen uno."""
        if self.renderer is None:
            return []
        created: list[str] = []
        for module, description in self.settings.module_descriptions.items():
            if not (self.root / module).is_dir() or self.analyzer.module_summary_exists(module):
                continue
            path = self.registry.locate_or_create_summary(
                module, self.renderer, [f"Initial module documentation for {description}"]
            )
            if path is not None:
                created.append(path)
        return created
