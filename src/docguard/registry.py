"""Registro de archivos índice (README.md) y documentación del proyecto.

Es el colaborador que enumera índices, los clasifica por su posición en el
árbol, localiza (o crea, con un renderer externo) los resúmenes de módulo y
aplica sustituciones de texto aprobadas. Nunca genera prosa por sí mismo.
"""

from __future__ import annotations

import pathlib
from collections.abc import Iterable
from typing import Protocol

import structlog

from docguard.config import Settings
from docguard.models import DocIndexNode, DocIndexType
from docguard.paths import is_excluded, resolve, to_posix, write_if_changed

logger = structlog.get_logger(__name__)

INDEX_FILE_NAME = "README.md"


def module_of(path: object, module_names: Iterable[str]) -> str | None:
    """Módulo al que pertenece un path según su primer segmento.

    Función pura y total: cualquier entrada que no sea un string no vacío, o
    cuyo primer segmento no sea un módulo conocido, retorna None.
    """
    if not isinstance(path, str) or not path.strip():
        return None
    normalized = to_posix(path.strip()).lstrip("/")
    first = normalized.split("/", 1)[0]
    if not first:
        return None
    lookup = {name.lower(): name for name in module_names}
    return lookup.get(first.lower())


class TemplateRenderer(Protocol):
    """Servicio externo que genera el cuerpo de un documento nuevo."""

    def render_module_summary(self, module: str, changes: list[str]) -> str: ...


class DocumentationRegistry(Protocol):
    def all_index_files(self) -> list[str]: ...

    def classify(self, path: str) -> DocIndexNode: ...

    def documentation_files(self) -> list[str]: ...

    def module_summary_path(self, module: str) -> str: ...

    def summary_candidates(self, module: str) -> list[str]: ...

    def find_module_summary(self, module: str) -> str | None: ...

    def locate_or_create_summary(
        self, module: str, renderer: TemplateRenderer, changes: list[str]
    ) -> str | None: ...

    def replace_in_documents(self, mapping: dict[str, str]) -> list[str]: ...


class FileSystemRegistry:
    """Implementación del registro sobre el filesystem del proyecto."""

    def __init__(self, settings: Settings) -> None:
        self.settings = settings
        self.root = pathlib.Path(settings.project_root)
        self.docs_root = to_posix(settings.docs_root).strip("/")

    # ---------- Enumeración ----------

    def all_index_files(self) -> list[str]:
        """Todos los README.md del proyecto, relativos al root y ordenados."""
        if not self.root.is_dir():
            return []
        results: list[str] = []
        for p in self.root.rglob(INDEX_FILE_NAME):
            rel = p.relative_to(self.root).as_posix()
            if p.is_file() and not is_excluded(rel, self.settings.excluded_dirs):
                results.append(rel)
        return sorted(results)

    def documentation_files(self) -> list[str]:
        """Markdown del árbol de docs más los .md de primer nivel de cada módulo."""
        files: list[str] = []
        docs_dir = resolve(self.docs_root, self.root)
        if docs_dir.is_dir():
            for p in sorted(docs_dir.rglob("*.md")):
                rel = p.relative_to(self.root).as_posix()
                if p.is_file() and not is_excluded(rel, self.settings.excluded_dirs):
                    files.append(rel)

        if self.root.is_dir():
            skip = {self.docs_root.split("/", 1)[0].lower()}
            skip.update(d.lower() for d in self.settings.excluded_dirs)
            for d in sorted(self.root.iterdir()):
                if not d.is_dir() or d.name.startswith(".") or d.name.lower() in skip:
                    continue
                files.extend(
                    p.relative_to(self.root).as_posix() for p in sorted(d.glob("*.md")) if p.is_file()
                )
        return files

    # ---------- Clasificación ----------

    def classify(self, path: str) -> DocIndexNode:
        """Determina el tipo de un índice por su posición en el árbol."""
        normalized = to_posix(path).lstrip("/")
        parts = normalized.split("/")
        docs_parts = self.docs_root.split("/")
        n = len(docs_parts)

        if parts[-1].lower() != INDEX_FILE_NAME.lower():
            return DocIndexNode(path=normalized, index_type=DocIndexType.UNCLASSIFIED)

        under_docs = [p.lower() for p in parts[:n]] == [p.lower() for p in docs_parts]
        if under_docs:
            depth = len(parts) - n
            if depth == 1:
                return DocIndexNode(path=normalized, index_type=DocIndexType.ROOT)
            category = parts[n]
            if depth == 2:
                return DocIndexNode(
                    path=normalized, index_type=DocIndexType.NAVIGATION, category=category
                )
            return DocIndexNode(path=normalized, index_type=DocIndexType.CATEGORY, category=category)

        if len(parts) == 2:
            module = module_of(normalized, self.settings.module_names)
            if module is not None:
                return DocIndexNode(path=normalized, index_type=DocIndexType.TECHNICAL, module=module)

        return DocIndexNode(path=normalized, index_type=DocIndexType.UNCLASSIFIED)

    # ---------- Resúmenes de módulo ----------

    def module_summary_path(self, module: str) -> str:
        return self.settings.module_summary_pattern.format(module=module)

    def summary_candidates(self, module: str) -> list[str]:
        """Ubicaciones aceptadas para la documentación de un módulo, en orden de preferencia."""
        docs = self.docs_root
        return [
            self.module_summary_path(module),
            f"{docs}/{module}ModuleUpdateSummary.md",
            f"{docs}/{module}ModuleSummary.md",
            f"{module}/{INDEX_FILE_NAME}",
            f"{docs}/{module}Summary.md",
        ]

    def find_module_summary(self, module: str) -> str | None:
        for candidate in self.summary_candidates(module):
            if resolve(candidate, self.root).is_file():
                return candidate
        return None

    def locate_or_create_summary(
        self,
        module: str,
        renderer: TemplateRenderer,
        changes: list[str],
    ) -> str | None:
        """Devuelve el resumen existente o lo crea con el cuerpo que entrega el renderer."""
        existing = self.find_module_summary(module)
        if existing is not None:
            return existing

        rel_path = self.module_summary_path(module)
        try:
            body = renderer.render_module_summary(module, changes)
            write_if_changed(resolve(rel_path, self.root), body)
        except Exception as exc:
            logger.warning("summary_create_error", module=module, path=rel_path, error=str(exc))
            return None

        logger.info("summary_created", module=module, path=rel_path)
        return rel_path

    # ---------- Sustitución de texto ----------

    def replace_in_documents(self, mapping: dict[str, str]) -> list[str]:
        """Aplica reemplazos literales en docs e índices. Retorna los paths modificados."""
        targets = dict.fromkeys(self.documentation_files() + self.all_index_files())
        updated: list[str] = []

        for rel_path in targets:
            file_path = resolve(rel_path, self.root)
            try:
                content = file_path.read_text(encoding="utf-8")
                new_content = content
                for old, new in mapping.items():
                    new_content = new_content.replace(old, new)
                if new_content != content and write_if_changed(file_path, new_content):
                    updated.append(rel_path)
            except (OSError, UnicodeDecodeError) as exc:
                logger.warning("replace_error", path=rel_path, error=str(exc))
                continue

        if updated:
            logger.info("documents_rewritten", count=len(updated))
        return updated
