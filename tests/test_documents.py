"""Tests para el parser de markdown + frontmatter."""

from __future__ import annotations

import textwrap

from docguard.documents import is_external_link, parse_text


def test_parse_with_frontmatter():
    """Verifica parseo correcto de un .md con frontmatter YAML."""
    doc = parse_text(textwrap.dedent("""\
        ---
        last_updated: 2025-08-09
        owner: team-docs
        ---

        # Guía de módulos

        ## 🎯 **Purpose**

        Ver [Services](../Services/README.md) y [web](https://example.com).
    """), "Documentation/Development/guide.md")

    assert doc.path == "Documentation/Development/guide.md"
    assert doc.frontmatter["owner"] == "team-docs"
    assert doc.headings == ["Guía de módulos", "Purpose"]
    assert doc.links == ["../Services/README.md", "https://example.com"]
    assert doc.has_last_updated


def test_parse_without_frontmatter():
    """Sin frontmatter la fecha se toma del marcador inline."""
    doc = parse_text("# Onboarding\n\nBienvenido.\n\n**Last Updated**: 2025-08-09\n", "a.md")

    assert doc.frontmatter == {}
    assert "Bienvenido" in doc.body
    assert doc.headings == ["Onboarding"]
    assert doc.has_last_updated


def test_without_last_updated():
    doc = parse_text("Sin encabezados.\n", "Documentation/setup.md")

    assert doc.headings == []
    assert doc.links == []
    assert not doc.has_last_updated


def test_external_links():
    assert is_external_link("https://example.com")
    assert is_external_link("mailto:docs@example.com")
    assert is_external_link("#purpose")
    assert not is_external_link("Guides/README.md")
