"""Parser de bloques de comentarios estructurados en headers de archivos fuente.

Un header típico (C# con ``//``, Python o PowerShell con ``#``)::

    // ====================================================================
    // FILE: AudioService.cs
    // PROJECT: OstPlayer
    // VERSION: 2.0.0
    // UPDATED: 2025-08-09
    //
    // LIMITATIONS:
    // - Single track playback
    //
    // TESTING:
    // - Unit tests for audio state management
    //
    // CHANGELOG:
    // 2025-08-09 v2.0.0 - Production-ready audio service
    // ====================================================================

Las secciones y sus marcadores son datos (``SectionSpec``); este módulo no
hace I/O.
"""

from __future__ import annotations

import re
from collections.abc import Iterable
from dataclasses import dataclass

_COMMENT = r"^[ \t]*(?://|#)[ \t]*"

HEADER_LINE_RE = re.compile(_COMMENT + r"[A-Z][A-Z0-9 _-]*:[ \t]*$", re.MULTILINE)
CHANGELOG_RE = re.compile(_COMMENT + r"CHANGELOG:", re.MULTILINE)
SEPARATOR_RE = re.compile(_COMMENT + r"={10,}", re.MULTILINE)
IMPORT_RE = re.compile(
    r"^[ \t]*(?:using[ \t]+(?:static[ \t]+)?[\w.]+[ \t]*;|import[ \t]+\S|from[ \t]+\S+[ \t]+import[ \t])",
    re.MULTILINE,
)
TYPE_DECL_RE = re.compile(
    r"^[ \t]*(?:namespace[ \t]+\S"
    r"|(?:(?:public|internal|private|protected|static|sealed|abstract|partial)[ \t]+)*class[ \t]+\w"
    r"|(?:async[ \t]+)?def[ \t]+\w)",
    re.MULTILINE,
)
VERSION_RE = re.compile(_COMMENT + r"VERSION:[ \t]*(\S.*?)[ \t]*$", re.MULTILINE)
UPDATED_RE = re.compile(_COMMENT + r"UPDATED:[ \t]*(\S.*?)[ \t]*$", re.MULTILINE)

_TERMINATORS = (HEADER_LINE_RE, CHANGELOG_RE, SEPARATOR_RE, IMPORT_RE, TYPE_DECL_RE)


@dataclass(frozen=True)
class SectionSpec:
    """Sección crítica: nombre lógico y marcadores aceptados, en orden de preferencia."""

    name: str
    markers: tuple[str, ...]


def specs_from_mapping(mapping: dict[str, list[str]]) -> list[SectionSpec]:
    return [SectionSpec(name, tuple(markers)) for name, markers in mapping.items()]


class CommentBlockParser:
    def __init__(self, specs: Iterable[SectionSpec]) -> None:
        self.specs = list(specs)

    def find_marker(self, text: str, spec: SectionSpec) -> int | None:
        """Offset del inicio de línea del primer marcador encontrado, o None."""
        for marker in spec.markers:
            idx = text.find(marker)
            if idx >= 0:
                return text.rfind("\n", 0, idx) + 1
        return None

    def section_end(self, text: str, start: int) -> int:
        """Fin de una sección: el terminador más cercano después de su línea inicial."""
        line_end = text.find("\n", start)
        if line_end < 0:
            return len(text)
        search_from = line_end + 1
        ends = [
            m.start()
            for m in (regex.search(text, search_from) for regex in _TERMINATORS)
            if m is not None
        ]
        return min(ends, default=len(text))

    def extract(self, text: str) -> dict[str, str]:
        """Secciones presentes, en el orden de configuración, con su texto exacto."""
        sections: dict[str, str] = {}
        for spec in self.specs:
            start = self.find_marker(text, spec)
            if start is None:
                continue
            sections[spec.name] = text[start : self.section_end(text, start)]
        return sections

    def present(self, text: str) -> set[str]:
        return {spec.name for spec in self.specs if self.find_marker(text, spec) is not None}

    def insertion_point(self, text: str) -> int | None:
        """Antes del CHANGELOG; si no hay, antes del separador que cierra el header."""
        changelog = CHANGELOG_RE.search(text)
        if changelog:
            return changelog.start()
        opening = SEPARATOR_RE.search(text)
        if opening is None:
            return None
        closing = SEPARATOR_RE.search(text, opening.end())
        return closing.start() if closing else None


def has_valid_header(text: str, fields: Iterable[str]) -> bool:
    """True si el texto declara todos los campos de header (FILE:, PROJECT:, ...)."""
    for name in fields:
        if not re.search(_COMMENT + re.escape(name), text, re.MULTILINE):
            return False
    return True


def file_version(text: str) -> str | None:
    match = VERSION_RE.search(text)
    return match.group(1) if match else None


def updated_date(text: str) -> str | None:
    match = UPDATED_RE.search(text)
    return match.group(1) if match else None
