"""DTOs (Data Transfer Objects) para las entidades de docguard."""

from __future__ import annotations

import datetime
import enum
from dataclasses import dataclass, field


class ChangeKind(str, enum.Enum):
    """Tipo de cambio inferido por existencia en disco (sin historial de VCS)."""

    ADDED = "Added"
    MODIFIED = "Modified"


class DocIndexType(str, enum.Enum):
    """Clasificación estructural de un archivo índice (README.md)."""

    ROOT = "Root"
    NAVIGATION = "Navigation"
    TECHNICAL = "Technical"
    CATEGORY = "Category"
    UNCLASSIFIED = "Unclassified"


class DateAction(str, enum.Enum):
    USE_AS_IS = "UseAsIs"
    USE_SYSTEM_DATE = "UseSystemDate"
    CONFIRM_WITH_USER = "ConfirmWithUser"
    MANUAL_REVIEW = "ManualReview"


class DateFlag(enum.Flag):
    NONE = 0
    BLACKLISTED_DATE = enum.auto()
    INVALID_FORMAT = enum.auto()
    TOO_FAR_IN_FUTURE = enum.auto()
    TOO_FAR_IN_PAST = enum.auto()


class OperationType(str, enum.Enum):
    """Tipos de operación que un editor automático realiza con fechas."""

    ROUTINE_UPDATE = "RoutineUpdate"
    VERSION_RELEASE = "VersionRelease"
    DOCUMENTATION_UPDATE = "DocumentationUpdate"
    HISTORICAL_CORRECTION = "HistoricalCorrection"
    NEW_FILE_CREATION = "NewFileCreation"


@dataclass(frozen=True)
class ChangedFile:
    """Archivo modificado, normalizado relativo al root del proyecto."""

    path: str
    module: str | None
    kind: ChangeKind


@dataclass(frozen=True)
class DocIndexNode:
    """Un archivo índice de documentación con su tipo estructural."""

    path: str
    index_type: DocIndexType
    category: str | None = None
    module: str | None = None


@dataclass
class RuleEvaluationResult:
    """Decisión de actualización de un índice frente a un archivo cambiado."""

    should_update: bool = False
    reason: str = ""
    priority: int = 0
    suggested_actions: list[str] = field(default_factory=list)
    metadata: dict = field(default_factory=dict)


@dataclass
class ModuleUpdateRecommendation:
    module: str
    summary_path: str
    change_count: int
    changes: list[str]
    priority: int
    summary_exists: bool
    recommended_action: str


@dataclass
class HeaderBackup:
    """Snapshot de las secciones críticas de un archivo."""

    path: str
    captured_at: datetime.datetime
    content_hash: str
    sections: dict[str, str]


@dataclass
class HeaderProtectionResult:
    """Resultado de validar (y eventualmente restaurar) un header."""

    path: str
    checked_at: datetime.datetime
    is_valid: bool = True
    was_restored: bool = False
    content_changed: bool = False
    deleted: list[str] = field(default_factory=list)
    restored: list[str] = field(default_factory=list)
    error: str | None = None


@dataclass
class DateValidationResult:
    is_valid: bool
    error: str | None = None
    suggested_date: str | None = None
    action: DateAction = DateAction.USE_AS_IS
    flags: DateFlag = DateFlag.NONE
    context: str = ""


@dataclass
class DateFinding:
    """Una fecha encontrada en un archivo junto con su validación."""

    path: str
    line: int
    value: str
    result: DateValidationResult


@dataclass
class DateScanReport:
    """Reporte de un escaneo de fechas sobre el proyecto."""

    project_root: str
    scanned_at: datetime.datetime
    files_scanned: int = 0
    findings: list[DateFinding] = field(default_factory=list)
    errors: list[str] = field(default_factory=list)

    @property
    def problems(self) -> list[DateFinding]:
        return [f for f in self.findings if not f.result.is_valid]

    @property
    def total_problems(self) -> int:
        return len(self.problems)

    @property
    def files_with_problems(self) -> int:
        return len({f.path for f in self.problems})

    @property
    def blacklisted_found(self) -> int:
        return sum(1 for f in self.problems if DateFlag.BLACKLISTED_DATE in f.result.flags)


@dataclass
class ConsistencyReport:
    """Resultado de la validación de consistencia del proyecto."""

    issues: list[str] = field(default_factory=list)
    errors: list[str] = field(default_factory=list)

    @property
    def is_consistent(self) -> bool:
        return not self.issues and not self.errors


@dataclass
class ImpactReport:
    """Resultado de analizar un conjunto de archivos cambiados."""

    changed: list[ChangedFile] = field(default_factory=list)
    affected_docs: list[str] = field(default_factory=list)
    module_changes: dict[str, list[str]] = field(default_factory=dict)
    recommendations: list[ModuleUpdateRecommendation] = field(default_factory=list)
    errors: list[str] = field(default_factory=list)


@dataclass
class BatchReport:
    """Resultado de procesar un batch de cambios en el orquestador."""

    processed_at: datetime.datetime
    files: list[str] = field(default_factory=list)
    relevant_files: list[str] = field(default_factory=list)
    affected_docs: list[str] = field(default_factory=list)
    module_changes: dict[str, list[str]] = field(default_factory=dict)
    recommendations: list[ModuleUpdateRecommendation] = field(default_factory=list)
    index_updates: dict[str, list[str]] = field(default_factory=dict)
    errors: list[str] = field(default_factory=list)
    message: str = ""


@dataclass
class ModuleScanReport:
    """Estado de la documentación de cada módulo rastreado."""

    scanned_at: datetime.datetime
    scanned_modules: list[str] = field(default_factory=list)
    missing: list[str] = field(default_factory=list)
    outdated: list[str] = field(default_factory=list)
    recommendations: list[str] = field(default_factory=list)
    error: str | None = None

    @property
    def is_healthy(self) -> bool:
        return self.error is None and not self.missing and not self.outdated


@dataclass
class OrchestratorStatus:
    tracked_modules: list[str]
    pending_changes: int
    debounce_active: bool
    last_processed_at: datetime.datetime | None
