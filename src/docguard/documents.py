"""Parseo de archivos Markdown con frontmatter YAML."""

from __future__ import annotations

import re
from dataclasses import dataclass, field

import frontmatter

_LINK_RE = re.compile(r"\[([^\]]+)\]\(([^)]+)\)")
_HEADING_RE = re.compile(r"^(#{1,6})\s+(.+?)\s*$", re.MULTILINE)
_LAST_UPDATED_RE = re.compile(r"\*\*Last Updated\*\*\s*:", re.IGNORECASE)


@dataclass
class ParsedDoc:
    """Resultado de parsear un archivo markdown."""

    path: str
    frontmatter: dict
    body: str
    headings: list[str] = field(default_factory=list)
    links: list[str] = field(default_factory=list)

    @property
    def has_last_updated(self) -> bool:
        """True si el doc declara su fecha de actualización (inline o en frontmatter)."""
        if self.frontmatter.get("last_updated"):
            return True
        return bool(_LAST_UPDATED_RE.search(self.body))


def _clean_heading(raw: str) -> str:
    """Quita énfasis markdown y emojis de un heading: '🎯 **Purpose**' -> 'Purpose'."""
    text = raw.replace("*", "").replace("_", " ")
    return re.sub(r"^[^\w]+", "", text).strip()


def parse_text(raw: str, rel_path: str) -> ParsedDoc:
    """Parsea el contenido de un .md ya leído."""
    post = frontmatter.loads(raw)
    fm: dict = dict(post.metadata)
    body: str = post.content

    return ParsedDoc(
        path=rel_path,
        frontmatter=fm,
        body=body,
        headings=[_clean_heading(m.group(2)) for m in _HEADING_RE.finditer(body)],
        links=[m.group(2).strip() for m in _LINK_RE.finditer(body)],
    )


def is_external_link(target: str) -> bool:
    return target.startswith(("http://", "https://", "mailto:", "#"))
