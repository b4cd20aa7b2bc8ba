"""Patrones compilados sobre paths normalizados ('/'), construidos desde Settings."""

from __future__ import annotations

import re
from dataclasses import dataclass

from docguard.config import Settings
from docguard.paths import file_name, to_posix


def _alternation(items: list[str]) -> str:
    return "|".join(re.escape(i) for i in items)


def _extensions(exts: list[str]) -> str:
    return _alternation([e.lower().lstrip(".") for e in exts])


@dataclass(frozen=True)
class RulePatterns:
    module_file: re.Pattern
    module_summary: re.Pattern
    navigation_readme: re.Pattern
    category_document: re.Pattern
    tooling_file: re.Pattern
    configuration_file: re.Pattern
    docs_root: str
    tooling_module: str

    def is_structural(self, path: str) -> bool:
        """Cambio que altera la organización: resúmenes de módulo, índices o tooling."""
        normalized = to_posix(path)
        if "ModuleUpdateSummary.md" in normalized:
            return True
        if file_name(normalized).lower() == "readme.md":
            return True
        first = normalized.lstrip("/").split("/", 1)[0]
        return first.lower() == self.tooling_module.lower()


def build_patterns(settings: Settings) -> RulePatterns:
    docs = re.escape(to_posix(settings.docs_root).strip("/"))
    summary = re.escape(to_posix(settings.module_summary_pattern)).replace(
        re.escape("{module}"), r"[^/]+"
    )
    tooling = re.escape(settings.tooling_module)

    return RulePatterns(
        module_file=re.compile(
            rf"^({_alternation(settings.module_names)})/.*\.({_extensions(settings.source_extensions)})$",
            re.IGNORECASE,
        ),
        module_summary=re.compile(rf"^{summary}$", re.IGNORECASE),
        navigation_readme=re.compile(rf"^{docs}/.+/README\.md$", re.IGNORECASE),
        category_document=re.compile(
            rf"^{docs}/({_alternation(settings.doc_categories)})/.*\.md$", re.IGNORECASE
        ),
        tooling_file=re.compile(
            rf"^{tooling}/.*\.({_extensions(settings.tooling_extensions)})$", re.IGNORECASE
        ),
        configuration_file=re.compile(
            rf"\.({_extensions(settings.config_extensions)})$", re.IGNORECASE
        ),
        docs_root=to_posix(settings.docs_root).strip("/"),
        tooling_module=settings.tooling_module,
    )
