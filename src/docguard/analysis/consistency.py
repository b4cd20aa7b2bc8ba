"""Validación de consistencia del proyecto: headers, módulos, índices, changelog y dependencias.

Cada chequeo es independiente y tolerante a fallas: un archivo ilegible se
registra en ``errors`` y el resto del proyecto se sigue validando.
"""

from __future__ import annotations

import pathlib
import re

import structlog

from docguard.analysis.dependencies import detect_cycles
from docguard.config import Settings
from docguard.documents import ParsedDoc, is_external_link, parse_text
from docguard.models import ConsistencyReport, DocIndexType
from docguard.paths import resolve, walk_files
from docguard.protection.markers import file_version, has_valid_header
from docguard.registry import DocumentationRegistry, FileSystemRegistry

logger = structlog.get_logger(__name__)

REQUIRED_SECTIONS: dict[DocIndexType, str] = {
    DocIndexType.ROOT: "Documentation Structure",
    DocIndexType.NAVIGATION: "Purpose",
    DocIndexType.TECHNICAL: "Module Overview",
}

_CHANGELOG_VERSION_RE = re.compile(r"^##\s+\[([^\]]+)\]\s+-\s+\d{4}-\d{2}-\d{2}", re.MULTILINE)


def check_source_headers(settings: Settings, root: pathlib.Path, report: ConsistencyReport) -> None:
    for file_path in walk_files(root, settings.header_extensions, settings.excluded_dirs):
        rel_path = file_path.relative_to(root).as_posix()
        try:
            text = file_path.read_text(encoding="utf-8")
        except (OSError, UnicodeDecodeError) as exc:
            report.errors.append(f"header:{rel_path}: {exc}")
            continue
        if not has_valid_header(text, settings.header_fields):
            report.issues.append(f"File missing proper header: {rel_path}")
        if file_version(text) is None:
            report.issues.append(f"File missing version information: {rel_path}")


def check_module_structure(settings: Settings, root: pathlib.Path, report: ConsistencyReport) -> None:
    for module in settings.expected_modules:
        if not (root / module).is_dir():
            report.issues.append(f"Missing expected module directory: {module}")


def _broken_links(doc: ParsedDoc, root: pathlib.Path) -> list[str]:
    base = resolve(doc.path, root).parent
    broken: list[str] = []
    for target in doc.links:
        if is_external_link(target):
            continue
        local = target.split("#", 1)[0].split("?", 1)[0].strip()
        if local.startswith("<") and local.endswith(">"):
            local = local[1:-1]
        if local and not (base / local).exists():
            broken.append(target)
    return broken


def check_index_hierarchy(
    settings: Settings,
    registry: DocumentationRegistry,
    root: pathlib.Path,
    report: ConsistencyReport,
) -> None:
    for expected in settings.expected_index_files:
        if not resolve(expected, root).is_file():
            report.issues.append(f"Missing expected index file: {expected}")

    for index_path in registry.all_index_files():
        try:
            doc = parse_text(resolve(index_path, root).read_text(encoding="utf-8"), index_path)
        except Exception as exc:
            logger.warning("index_parse_error", path=index_path, error=str(exc))
            report.errors.append(f"index:{index_path}: {exc}")
            continue

        node = registry.classify(index_path)
        required = REQUIRED_SECTIONS.get(node.index_type)
        if required and not any(h.lower() == required.lower() for h in doc.headings):
            report.issues.append(f"{index_path}: Missing {required} section")
        if not doc.has_last_updated:
            report.issues.append(f"{index_path}: Missing Last Updated field")


def check_cross_references(
    registry: DocumentationRegistry,
    root: pathlib.Path,
    report: ConsistencyReport,
) -> None:
    targets = dict.fromkeys(registry.documentation_files() + registry.all_index_files())
    for rel_path in targets:
        try:
            doc = parse_text(resolve(rel_path, root).read_text(encoding="utf-8"), rel_path)
        except Exception as exc:
            logger.warning("links_parse_error", path=rel_path, error=str(exc))
            report.errors.append(f"links:{rel_path}: {exc}")
            continue
        for target in _broken_links(doc, root):
            report.issues.append(f"Broken link in {rel_path}: {target}")


def _version_key(raw: str) -> tuple[int, ...] | None:
    parts = raw.strip().lstrip("vV").split(".")
    if not all(p.isdigit() for p in parts):
        return None
    return tuple(int(p) for p in parts)


def check_changelog(settings: Settings, root: pathlib.Path, report: ConsistencyReport) -> None:
    """Las versiones del changelog principal deben estar en orden descendente."""
    changelog = resolve(settings.changelog_path, root)
    if not changelog.is_file():
        report.issues.append(f"Main changelog file not found: {settings.changelog_path}")
        return
    try:
        text = changelog.read_text(encoding="utf-8")
    except (OSError, UnicodeDecodeError) as exc:
        report.errors.append(f"changelog:{settings.changelog_path}: {exc}")
        return

    versions: list[tuple[str, tuple[int, ...]]] = []
    for raw in _CHANGELOG_VERSION_RE.findall(text):
        key = _version_key(raw)
        if key is not None:
            versions.append((raw, key))
    for (prev_raw, prev), (next_raw, nxt) in zip(versions, versions[1:]):
        if prev < nxt:
            report.issues.append(
                f"Changelog versions not in descending order: {prev_raw} < {next_raw}"
            )


def check_dependencies(settings: Settings, root: pathlib.Path, report: ConsistencyReport) -> None:
    for cycle in detect_cycles(root, settings.excluded_dirs, report.errors):
        report.issues.append(f"Circular dependency detected: {cycle}")


def validate_project(
    settings: Settings,
    registry: DocumentationRegistry | None = None,
    root: str | pathlib.Path | None = None,
) -> ConsistencyReport:
    """Corre todos los chequeos. El proyecto es consistente si ninguno reporta problemas."""
    project_root = pathlib.Path(root) if root is not None else pathlib.Path(settings.project_root)
    if registry is None or root is not None:
        registry = FileSystemRegistry(settings.model_copy(update={"project_root": project_root}))

    report = ConsistencyReport()
    checks = {
        "source_headers": lambda: check_source_headers(settings, project_root, report),
        "module_structure": lambda: check_module_structure(settings, project_root, report),
        "index_hierarchy": lambda: check_index_hierarchy(settings, registry, project_root, report),
        "cross_references": lambda: check_cross_references(registry, project_root, report),
        "changelog": lambda: check_changelog(settings, project_root, report),
        "dependencies": lambda: check_dependencies(settings, project_root, report),
    }
    for name, check in checks.items():
        try:
            check()
        except Exception as exc:
            logger.warning("consistency_check_error", check=name, error=str(exc))
            report.errors.append(f"{name}: {exc}")

    logger.info(
        "consistency_validated",
        root=str(project_root),
        consistent=report.is_consistent,
        issues=len(report.issues),
        errors=len(report.errors),
    )
    return report
