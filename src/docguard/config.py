"""Configuración centralizada de docguard con pydantic-settings."""

from __future__ import annotations

import json
import pathlib

from pydantic import Field
from pydantic_settings import BaseSettings

from docguard.paths import write_if_changed


def _default_critical_sections() -> dict[str, list[str]]:
    return {
        "LIMITATIONS": ["// LIMITATIONS:", "//   LIMITATIONS:", "# LIMITATIONS:"],
        "FUTURE_REFACTORING": [
            "// FUTURE REFACTORING:",
            "//   FUTURE REFACTORING:",
            "# FUTURE REFACTORING:",
        ],
        "TESTING": ["// TESTING:", "//   TESTING:", "# TESTING:"],
        "COMPATIBILITY": ["// COMPATIBILITY:", "//   COMPATIBILITY:", "# COMPATIBILITY:"],
    }


class Settings(BaseSettings):
    """Todas las variables se leen desde env vars con prefijo DOCGUARD_."""

    # --- Proyecto ---
    project_root: pathlib.Path = pathlib.Path(".")
    docs_root: str = "Documentation"
    changelog_path: str = "Documentation/Core/CHANGELOG.md"
    module_summary_pattern: str = "Documentation/Modules/{module}ModuleUpdateSummary.md"
    excluded_dirs: list[str] = Field(
        default_factory=lambda: [
            ".git", ".vs", "bin", "obj", "packages", "node_modules", ".venv", "__pycache__",
        ]
    )

    # --- Módulos ---
    module_names: list[str] = Field(
        default_factory=lambda: [
            "DevTools", "Clients", "Services", "Utils", "Models", "ViewModels", "Views", "Converters",
        ]
    )
    expected_modules: list[str] = Field(
        default_factory=lambda: ["ViewModels", "Models", "Utils", "Services", "Views", "DevTools"]
    )
    module_descriptions: dict[str, str] = Field(
        default_factory=lambda: {
            "Clients": "External API integration",
            "Services": "Business logic and orchestration services",
            "Utils": "Runtime utilities and helpers",
            "Models": "Data models and entity definitions",
            "ViewModels": "MVVM ViewModels and UI logic",
            "Views": "XAML views and UI components",
            "Converters": "Value converters and UI utilities",
            "DevTools": "Development and automation utilities",
        }
    )
    tooling_module: str = "DevTools"

    # --- Documentación ---
    doc_categories: list[str] = Field(
        default_factory=lambda: ["Development", "Analysis", "Refactoring", "AI-Assistant"]
    )
    expected_index_files: list[str] = Field(
        default_factory=lambda: [
            "Documentation/README.md",
            "Documentation/Modules/README.md",
            "Documentation/Development/README.md",
            "DevTools/README.md",
        ]
    )

    # --- Extensiones ---
    source_extensions: list[str] = Field(default_factory=lambda: [".cs", ".xaml"])
    tooling_extensions: list[str] = Field(default_factory=lambda: [".cs", ".ps1", ".py"])
    config_extensions: list[str] = Field(
        default_factory=lambda: [".config", ".json", ".xml", ".csproj", ".toml", ".yaml", ".yml"]
    )
    scan_extensions: list[str] = Field(default_factory=lambda: [".cs", ".md", ".ps1", ".py"])
    monitored_extensions: list[str] = Field(
        default_factory=lambda: [".cs", ".xaml", ".md", ".ps1", ".py", ".json", ".config"]
    )

    # --- Fechas ---
    blacklisted_dates: list[str] = Field(
        default_factory=lambda: ["2025-08-07", "2024-12-31", "2024-01-01"]
    )
    max_future_days: int = Field(default=1, ge=0)
    max_past_days: int = Field(default=7, ge=0)

    # --- Cache / debounce ---
    rule_cache_ttl_seconds: float = Field(default=600.0, gt=0)
    debounce_seconds: float = Field(default=2.0, ge=0)

    # --- Headers ---
    critical_sections: dict[str, list[str]] = Field(default_factory=_default_critical_sections)
    protected_extensions: list[str] = Field(default_factory=lambda: [".cs", ".ps1", ".py"])
    header_extensions: list[str] = Field(default_factory=lambda: [".cs"])
    header_fields: list[str] = Field(
        default_factory=lambda: ["FILE:", "PROJECT:", "VERSION:", "UPDATED:"]
    )

    model_config = {"env_prefix": "DOCGUARD_", "env_file": ".env", "extra": "ignore"}


def get_settings() -> Settings:
    """Settings leídos desde el entorno."""
    return Settings()


def load_settings(path: pathlib.Path) -> Settings:
    """Carga settings desde un JSON; los valores del archivo pisan los del entorno."""
    data = json.loads(path.read_text(encoding="utf-8"))
    if not isinstance(data, dict):
        raise ValueError(f"El archivo de configuración {path} no contiene un objeto JSON")
    return Settings(**data)


def save_settings(settings: Settings, path: pathlib.Path) -> bool:
    """Persiste los settings como JSON. Retorna True si el archivo cambió."""
    return write_if_changed(path, settings.model_dump_json(indent=2) + "\n")
