"""Fixtures compartidas para tests."""

from __future__ import annotations

import datetime
import pathlib
import textwrap

import pytest

from docguard.config import Settings

AUDIO_SERVICE = textwrap.dedent("""\
    // ====================================================================
    // FILE: AudioService.cs
    // PROJECT: OstPlayer
    // VERSION: 2.0.0
    // UPDATED: 2025-08-09
    //
    // LIMITATIONS:
    // - Single track playback only
    // - No gapless transitions
    //
    // FUTURE REFACTORING:
    // TODO: Add audio effects and filters
    // CONSIDER: Plugin architecture for audio engines
    //
    // TESTING:
    // - Unit tests for audio state management
    //
    // COMPATIBILITY:
    // - .NET Framework 4.6.2
    //
    // CHANGELOG:
    // 2025-08-09 v2.0.0 - Production-ready audio service
    // ====================================================================

    using System;
    using OstPlayer.Utils;

    namespace OstPlayer.Services
    {
        public class AudioService
        {
        }
    }
""")

TESTING_BLOCK = textwrap.dedent("""\
    // TESTING:
    // - Unit tests for audio state management
    //
""")

FIXED_TODAY = datetime.date(2026, 3, 15)


def _write(root: pathlib.Path, rel_path: str, content: str) -> pathlib.Path:
    path = root / rel_path
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(content, encoding="utf-8")
    return path


@pytest.fixture
def project(tmp_path: pathlib.Path) -> pathlib.Path:
    """Crea un proyecto de ejemplo con módulos, índices y documentación consistentes."""
    root = tmp_path / "project"

    _write(root, "Documentation/README.md", textwrap.dedent("""\
        # Documentation

        ## 📁 **Documentation Structure**

        - [Modules](Modules/README.md)
        - [Development](Development/README.md)
        - [Changelog](Core/CHANGELOG.md)

        **Last Updated**: 2025-08-09
    """))
    _write(root, "Documentation/Modules/README.md", textwrap.dedent("""\
        # Modules

        ## 🎯 **Purpose**

        Resúmenes de actualización por módulo.

        - [Services](ServicesModuleUpdateSummary.md)

        **Last Updated**: 2025-08-09
    """))
    _write(root, "Documentation/Modules/ServicesModuleUpdateSummary.md", textwrap.dedent("""\
        # Services - Module Update Summary

        - AudioService.cs: production-ready audio service
    """))
    _write(root, "Documentation/Development/README.md", textwrap.dedent("""\
        # Development

        ## 🎯 **Purpose**

        Guías de desarrollo. Ver [Guides](Guides/README.md).

        **Last Updated**: 2025-08-09
    """))
    _write(root, "Documentation/Development/Guides/README.md", textwrap.dedent("""\
        # Guides

        - [Setup](Setup.md)

        **Last Updated**: 2025-08-09
    """))
    _write(root, "Documentation/Development/Guides/Setup.md", "# Setup\n\nInstalar dependencias.\n")
    _write(root, "Documentation/Core/CHANGELOG.md", textwrap.dedent("""\
        # Changelog

        ## [2.0.0] - 2025-08-09

        - Production-ready audio service

        ## [1.0.0] - 2025-08-08

        - Initial implementation
    """))
    _write(root, "Services/README.md", textwrap.dedent("""\
        # Services

        ## 📋 Module Overview

        Servicios de negocio.

        **Last Updated**: 2025-08-09
    """))
    _write(root, "Services/AudioService.cs", AUDIO_SERVICE)
    _write(root, "DevTools/README.md", textwrap.dedent("""\
        # DevTools

        ## 📋 Module Overview

        Utilidades de desarrollo.

        **Last Updated**: 2025-08-09
    """))
    for module in ("ViewModels", "Models", "Utils", "Views"):
        _write(root, f"{module}/.keep", "")
    return root


@pytest.fixture
def settings(project: pathlib.Path) -> Settings:
    return Settings(project_root=project)


@pytest.fixture
def write_file():
    return _write
