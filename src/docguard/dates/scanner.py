"""Escaneo de fechas en archivos del proyecto y corrección de las problemáticas."""

from __future__ import annotations

import datetime
import pathlib
import re

import structlog

from docguard.config import Settings
from docguard.dates.guard import DateGuard
from docguard.models import DateAction, DateFinding, DateScanReport, DateValidationResult
from docguard.paths import walk_files, write_if_changed

logger = structlog.get_logger(__name__)

DATE_RE = re.compile(r"\b(\d{4})-(\d{2})-(\d{2})\b")

SCAN_ERROR = "SCAN_ERROR"


class DateScanner:
    def __init__(self, settings: Settings, guard: DateGuard | None = None) -> None:
        self.settings = settings
        self.root = pathlib.Path(settings.project_root)
        self.guard = guard or DateGuard(settings)

    def _file(self, path: str | pathlib.Path) -> pathlib.Path:
        p = pathlib.Path(path)
        return p if p.is_absolute() else self.root / p

    def scan_file(self, path: str | pathlib.Path) -> list[DateFinding]:
        """Todas las fechas del archivo con su validación. Archivo inexistente -> lista vacía."""
        file_path = self._file(path)
        label = str(path)
        if not file_path.is_file():
            return []

        try:
            content = file_path.read_text(encoding="utf-8")
        except (OSError, UnicodeDecodeError) as exc:
            logger.warning("date_scan_error", path=label, error=str(exc))
            return [
                DateFinding(
                    path=label,
                    line=0,
                    value=SCAN_ERROR,
                    result=DateValidationResult(
                        is_valid=False,
                        error=f"Error scanning file: {exc}",
                        action=DateAction.MANUAL_REVIEW,
                    ),
                )
            ]

        findings: list[DateFinding] = []
        for match in DATE_RE.finditer(content):
            value = match.group(0)
            findings.append(
                DateFinding(
                    path=label,
                    line=content.count("\n", 0, match.start()) + 1,
                    value=value,
                    result=self.guard.validate(value, label),
                )
            )
        return findings

    def scan_project(self, root: str | pathlib.Path | None = None) -> DateScanReport:
        scan_root = pathlib.Path(root) if root is not None else self.root
        report = DateScanReport(
            project_root=str(scan_root),
            scanned_at=datetime.datetime.now(),
        )

        for file_path in walk_files(
            scan_root, self.settings.scan_extensions, self.settings.excluded_dirs
        ):
            rel_path = file_path.relative_to(scan_root).as_posix()
            report.files_scanned += 1
            for finding in self.scan_file(file_path):
                finding.path = rel_path
                if finding.value == SCAN_ERROR:
                    report.errors.append(f"scan:{rel_path}: {finding.result.error}")
                report.findings.append(finding)

        logger.info(
            "date_scan_done",
            root=str(scan_root),
            files=report.files_scanned,
            problems=report.total_problems,
        )
        return report

    def correct_file(self, path: str | pathlib.Path) -> int:
        """Reemplaza las fechas inválidas por la fecha actual. Retorna cuántas se reemplazaron."""
        file_path = self._file(path)
        try:
            content = file_path.read_text(encoding="utf-8")
        except (OSError, UnicodeDecodeError) as exc:
            logger.warning("date_correct_error", path=str(path), error=str(exc))
            return 0

        current = self.guard.get_validated_current_date()
        replaced = 0

        def _replace(match: re.Match) -> str:
            nonlocal replaced
            if self.guard.validate(match.group(0)).is_valid:
                return match.group(0)
            replaced += 1
            return current

        new_content = DATE_RE.sub(_replace, content)
        if replaced:
            try:
                write_if_changed(file_path, new_content)
            except OSError as exc:
                logger.warning("date_correct_error", path=str(path), error=str(exc))
                return 0
            logger.info("dates_corrected", path=str(path), count=replaced)
        return replaced
