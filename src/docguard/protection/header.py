"""Protección de secciones críticas (LIMITATIONS, TESTING, ...) frente a ediciones automáticas.

Flujo: ``backup(path)`` antes de editar, ``validate_and_restore(path)``
después. Las secciones que estaban en el backup y ya no aparecen se vuelven
a insertar con su texto original; las que siguen presentes no se tocan.
"""

from __future__ import annotations

import contextlib
import datetime
import pathlib
import threading
from collections.abc import Callable, Iterator
from dataclasses import dataclass

import structlog

from docguard.config import Settings
from docguard.models import HeaderBackup, HeaderProtectionResult
from docguard.paths import content_hash, walk_files, write_if_changed
from docguard.protection.markers import CommentBlockParser, specs_from_mapping

logger = structlog.get_logger(__name__)


@dataclass
class ProtectionGuard:
    """Lo que entrega ``HeaderProtector.protect``; ``result`` se completa al salir."""

    path: str
    backed_up: bool
    result: HeaderProtectionResult | None = None


class HeaderProtector:
    def __init__(
        self,
        settings: Settings,
        clock: Callable[[], datetime.datetime] = datetime.datetime.now,
    ) -> None:
        self.settings = settings
        self.root = pathlib.Path(settings.project_root)
        self.parser = CommentBlockParser(specs_from_mapping(settings.critical_sections))
        self._clock = clock
        self._backups: dict[str, HeaderBackup] = {}
        self._lock = threading.Lock()

    def _file(self, path: str | pathlib.Path) -> pathlib.Path:
        p = pathlib.Path(str(path).replace("\\", "/"))
        if not p.is_absolute():
            p = self.root / p
        return p.resolve()

    # ---------- Backups ----------

    def backup(self, path: str | pathlib.Path) -> bool:
        """Guarda las secciones críticas actuales. False si el archivo no existe o no se puede leer."""
        try:
            file_path = self._file(path)
            if not file_path.is_file():
                return False
            content = file_path.read_text(encoding="utf-8")
        except (OSError, UnicodeDecodeError) as exc:
            logger.warning("backup_error", path=str(path), error=str(exc))
            return False

        sections = self.parser.extract(content)
        backup = HeaderBackup(
            path=str(file_path),
            captured_at=self._clock(),
            content_hash=content_hash(content),
            sections=sections,
        )
        with self._lock:
            self._backups[str(file_path)] = backup
        logger.info("backup_created", path=str(file_path), sections=list(sections))
        return True

    def has_backup(self, path: str | pathlib.Path) -> bool:
        with self._lock:
            return str(self._file(path)) in self._backups

    @property
    def backup_count(self) -> int:
        with self._lock:
            return len(self._backups)

    def clear(self, path: str | pathlib.Path | None = None) -> None:
        with self._lock:
            if path is None:
                self._backups.clear()
            else:
                self._backups.pop(str(self._file(path)), None)

    # ---------- Validación ----------

    def validate_and_restore(self, path: str | pathlib.Path) -> HeaderProtectionResult:
        """Compara contra el backup y reinserta las secciones borradas."""
        result = HeaderProtectionResult(path=str(path), checked_at=self._clock())

        try:
            file_path = self._file(path)
            result.path = str(file_path)
            if not str(path).strip() or not file_path.is_file():
                result.is_valid = False
                result.error = "File not found or path is empty"
                return result

            with self._lock:
                backup = self._backups.get(str(file_path))
            if backup is None:
                result.is_valid = False
                result.error = "No backup available for validation"
                return result

            content = file_path.read_text(encoding="utf-8")
            result.content_changed = content_hash(content) != backup.content_hash
            present = self.parser.present(content)
            result.deleted = [name for name in backup.sections if name not in present]
            if not result.deleted:
                return result

            result.is_valid = False
            insert_at = self.parser.insertion_point(content)
            if insert_at is None:
                result.error = "No insertion point found for restoring sections"
                logger.warning("restore_skipped", path=result.path, deleted=result.deleted)
                return result

            block = "".join(
                span if span.endswith("\n") else span + "\n"
                for name, span in backup.sections.items()
                if name in result.deleted
            )
            write_if_changed(file_path, content[:insert_at] + block + content[insert_at:])
            result.restored = list(result.deleted)
            result.was_restored = True
            logger.warning("sections_restored", path=result.path, sections=result.restored)
        except Exception as exc:
            logger.warning("validation_error", path=str(path), error=str(exc))
            result.is_valid = False
            result.error = f"Validation error: {exc}"

        return result

    def quick_validate(self, path: str | pathlib.Path) -> bool:
        """True si el archivo tiene al menos un marcador de cada sección crítica."""
        try:
            file_path = self._file(path)
            if not file_path.is_file():
                return False
            content = file_path.read_text(encoding="utf-8")
        except (OSError, UnicodeDecodeError):
            return False
        return len(self.parser.present(content)) == len(self.parser.specs)

    def scan_project(self, root: str | pathlib.Path | None = None) -> list[str]:
        """Archivos fuente (relativos al root escaneado) a los que les falta alguna sección."""
        scan_root = pathlib.Path(root) if root is not None else self.root
        missing: list[str] = []
        for file_path in walk_files(
            scan_root, self.settings.protected_extensions, self.settings.excluded_dirs
        ):
            if not self.quick_validate(file_path):
                missing.append(file_path.relative_to(scan_root).as_posix())
        logger.info("header_scan_done", root=str(scan_root), missing=len(missing))
        return missing

    @contextlib.contextmanager
    def protect(self, path: str | pathlib.Path) -> Iterator[ProtectionGuard]:
        """Backup al entrar, validación y restauración al salir (también si el bloque falla)::

            with protector.protect("Services/AudioService.cs") as guard:
                editor.rewrite(...)
            guard.result.restored
        """
        guard = ProtectionGuard(path=str(path), backed_up=self.backup(path))
        try:
            yield guard
        finally:
            if guard.backed_up:
                guard.result = self.validate_and_restore(path)
