"""Motor de reglas que decide qué archivos índice (README.md) deben actualizarse.

Las reglas están en tablas por tipo de índice y se evalúan en orden de
prioridad: la primera que aplica gana. Los resultados se cachean por par
exacto (índice, archivo cambiado) y el cache se vacía completo cada
``rule_cache_ttl_seconds``.
"""

from __future__ import annotations

import pathlib
import threading
import time
from collections.abc import Callable, Iterable
from dataclasses import dataclass, replace

import structlog

from docguard.config import Settings
from docguard.models import DocIndexNode, DocIndexType, RuleEvaluationResult
from docguard.paths import file_name, normalize, resolve
from docguard.registry import DocumentationRegistry, FileSystemRegistry, module_of
from docguard.rules.patterns import RulePatterns, build_patterns

logger = structlog.get_logger(__name__)


@dataclass
class RuleContext:
    """Todo lo que una regla necesita saber de un par (índice, cambio)."""

    index: DocIndexNode
    changed: str
    module: str | None
    is_new: bool
    structural: bool
    patterns: RulePatterns

    @property
    def file_name(self) -> str:
        return file_name(self.changed)

    @property
    def stem(self) -> str:
        return pathlib.PurePosixPath(self.changed).stem

    def category_prefix(self) -> str | None:
        if not self.index.category:
            return None
        return f"{self.patterns.docs_root}/{self.index.category}/".lower()

    def in_category(self) -> bool:
        prefix = self.category_prefix()
        return prefix is not None and self.changed.lower().startswith(prefix)

    def in_subcategory(self) -> bool:
        prefix = self.category_prefix()
        if prefix is None or not self.changed.lower().startswith(prefix):
            return False
        return "/" in self.changed[len(prefix):]

    def related_to_category(self) -> bool:
        category = (self.index.category or "").lower()
        if category == "modules":
            return "ModuleUpdateSummary.md" in self.changed
        if category == "development":
            return "Development/" in self.changed or self.module is not None
        if category == "ai-assistant":
            tooling = self.patterns.tooling_module.lower()
            return self.changed.lower().startswith(f"{tooling}/") or "AI-Assistant/" in self.changed
        return False

    def values(self) -> dict[str, str]:
        return {
            "category": self.index.category or "",
            "module": self.index.module or "",
            "file": self.file_name,
            "stem": self.stem,
        }


@dataclass(frozen=True)
class UpdateRule:
    index_type: DocIndexType
    name: str
    priority: int
    predicate: Callable[[RuleContext], bool]
    reason: str
    actions: tuple[str, ...] = ()

    def apply(self, ctx: RuleContext) -> RuleEvaluationResult:
        values = ctx.values()
        return RuleEvaluationResult(
            should_update=True,
            reason=self.reason.format(**values),
            priority=self.priority,
            suggested_actions=[a.format(**values) for a in self.actions],
        )


RULES: dict[DocIndexType, list[UpdateRule]] = {
    DocIndexType.ROOT: [
        UpdateRule(
            DocIndexType.ROOT,
            "navigation_index_changed",
            10,
            lambda c: bool(c.patterns.navigation_readme.match(c.changed)),
            "Major documentation structure change detected",
            ("Update documentation structure overview", "Refresh navigation links"),
        ),
        UpdateRule(
            DocIndexType.ROOT,
            "module_summary_added",
            7,
            lambda c: bool(c.patterns.module_summary.match(c.changed)),
            "New module summary added",
            ("Update module navigation section",),
        ),
        UpdateRule(
            DocIndexType.ROOT,
            "category_document_created",
            5,
            lambda c: c.is_new and bool(c.patterns.category_document.match(c.changed)),
            "New documentation category detected",
            ("Consider adding category to main navigation",),
        ),
    ],
    DocIndexType.NAVIGATION: [
        UpdateRule(
            DocIndexType.NAVIGATION,
            "same_category_content",
            9,
            lambda c: c.in_category() and c.changed.lower() != c.index.path.lower(),
            "New content added to {category} category",
            ("Add {file} to {category} navigation",),
        ),
        UpdateRule(
            DocIndexType.NAVIGATION,
            "module_summary_link",
            8,
            lambda c: (c.index.category or "").lower() == "modules"
            and bool(c.patterns.module_summary.match(c.changed)),
            "Module summary updated",
            ("Update module summary links",),
        ),
        UpdateRule(
            DocIndexType.NAVIGATION,
            "related_structural_change",
            4,
            lambda c: c.structural and c.related_to_category(),
            "Related structural change detected",
            ("Review navigation structure",),
        ),
    ],
    DocIndexType.TECHNICAL: [
        UpdateRule(
            DocIndexType.TECHNICAL,
            "module_source_file",
            10,
            lambda c: c.module is not None
            and c.module == c.index.module
            and bool(c.patterns.module_file.match(c.changed)),
            "New file added to {module} module",
            ("Add {file} to module file list",),
        ),
        UpdateRule(
            DocIndexType.TECHNICAL,
            "tooling_utility",
            8,
            lambda c: (c.index.module or "").lower() == c.patterns.tooling_module.lower()
            and bool(c.patterns.tooling_file.match(c.changed)),
            "{module} utility updated",
            ("Update {module} capabilities section",),
        ),
        UpdateRule(
            DocIndexType.TECHNICAL,
            "module_configuration",
            3,
            lambda c: bool(c.index.module)
            and c.index.module in c.changed
            and bool(c.patterns.configuration_file.search(c.changed)),
            "Module configuration changed",
            ("Review module configuration notes",),
        ),
    ],
    DocIndexType.CATEGORY: [
        UpdateRule(
            DocIndexType.CATEGORY,
            "new_category_document",
            9,
            lambda c: c.is_new and c.in_category(),
            "New document added to {category} category",
            ("Add {stem} to document list",),
        ),
        UpdateRule(
            DocIndexType.CATEGORY,
            "subcategory_change",
            6,
            lambda c: c.in_subcategory(),
            "Subcategory content changed",
            ("Review subcategory organization",),
        ),
    ],
    DocIndexType.UNCLASSIFIED: [
        UpdateRule(
            DocIndexType.UNCLASSIFIED,
            "structural_change",
            2,
            lambda c: c.structural,
            "Structural change detected - manual review recommended",
            ("Manual review of README content",),
        ),
    ],
}

NO_UPDATE_REASONS: dict[DocIndexType, str] = {
    DocIndexType.ROOT: "No root README update required",
    DocIndexType.NAVIGATION: "No navigation README update required",
    DocIndexType.TECHNICAL: "No technical README update required",
    DocIndexType.CATEGORY: "No category README update required",
    DocIndexType.UNCLASSIFIED: "No clear update trigger detected",
}


class RuleEngine:
    def __init__(
        self,
        settings: Settings,
        registry: DocumentationRegistry | None = None,
        clock: Callable[[], float] = time.monotonic,
    ) -> None:
        self.settings = settings
        self.root = pathlib.Path(settings.project_root)
        self.registry = registry or FileSystemRegistry(settings)
        self.patterns = build_patterns(settings)
        self._clock = clock
        self._cache: dict[tuple[str, str], RuleEvaluationResult] = {}
        self._cache_lock = threading.Lock()
        self._last_cleared = clock()

    # ---------- Cache ----------

    @property
    def cache_size(self) -> int:
        with self._cache_lock:
            return len(self._cache)

    def clear_cache(self) -> None:
        with self._cache_lock:
            self._cache.clear()
            self._last_cleared = self._clock()

    def _expire_locked(self) -> None:
        now = self._clock()
        if now - self._last_cleared >= self.settings.rule_cache_ttl_seconds:
            if self._cache:
                logger.debug("rule_cache_cleared", entries=len(self._cache))
            self._cache.clear()
            self._last_cleared = now

    # ---------- Evaluación ----------

    def evaluate(self, index_path: str, changed_file: str) -> RuleEvaluationResult:
        """Decide si ``index_path`` debe actualizarse por ``changed_file``. Nunca lanza."""
        try:
            key = (normalize(index_path, self.root), normalize(changed_file, self.root))
        except Exception as exc:
            logger.warning("rule_evaluation_error", index=str(index_path), error=str(exc))
            return RuleEvaluationResult(reason=f"Error evaluating rules: {exc}")

        with self._cache_lock:
            self._expire_locked()
            cached = self._cache.get(key)
        if cached is not None:
            return _copy_result(cached)

        try:
            result = self._evaluate(*key)
        except Exception as exc:
            logger.warning("rule_evaluation_error", index=key[0], changed=key[1], error=str(exc))
            return RuleEvaluationResult(reason=f"Error evaluating rules: {exc}")

        with self._cache_lock:
            self._cache[key] = _copy_result(result)
        return result

    def _evaluate(self, index_path: str, changed: str) -> RuleEvaluationResult:
        node = self.registry.classify(index_path)
        ctx = RuleContext(
            index=node,
            changed=changed,
            module=module_of(changed, self.settings.module_names),
            is_new=not resolve(changed, self.root).exists(),
            structural=self.patterns.is_structural(changed),
            patterns=self.patterns,
        )

        rule_name = None
        for rule in RULES[node.index_type]:
            if rule.predicate(ctx):
                result = rule.apply(ctx)
                rule_name = rule.name
                break
        else:
            result = RuleEvaluationResult(reason=NO_UPDATE_REASONS[node.index_type])

        result.metadata = {
            "index_type": node.index_type.value,
            "rule": rule_name,
            "structural": ctx.structural,
            "is_new": ctx.is_new,
        }
        return result

    def evaluate_multiple(
        self, changed_file: str, index_files: Iterable[str]
    ) -> dict[str, RuleEvaluationResult]:
        return {index: self.evaluate(index, changed_file) for index in index_files}

    def get_prioritized_updates(self, changed_file: str) -> list[str]:
        """Índices que deben actualizarse, de mayor a menor prioridad."""
        try:
            index_files = self.registry.all_index_files()
        except Exception as exc:
            logger.warning("index_enumeration_error", error=str(exc))
            return []

        results = self.evaluate_multiple(changed_file, index_files)
        approved = [(path, r) for path, r in results.items() if r.should_update]
        approved.sort(key=lambda item: item[1].priority, reverse=True)
        return [path for path, _ in approved]

    def affected_index_files(self, changed_files: Iterable[str]) -> list[str]:
        seen: dict[str, None] = {}
        for changed in changed_files:
            for index in self.get_prioritized_updates(changed):
                seen.setdefault(index, None)
        return list(seen)

    def describe_rules(self) -> dict[str, list[str]]:
        return {t.value: [r.name for r in rules] for t, rules in RULES.items()}


def _copy_result(result: RuleEvaluationResult) -> RuleEvaluationResult:
    return replace(
        result,
        suggested_actions=list(result.suggested_actions),
        metadata=dict(result.metadata),
    )
