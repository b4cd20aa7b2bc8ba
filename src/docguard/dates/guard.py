"""Validación de fechas propuestas por editores automáticos."""

from __future__ import annotations

import datetime
import re
from collections.abc import Callable

import structlog

from docguard.config import Settings
from docguard.models import DateAction, DateFlag, DateValidationResult, OperationType

logger = structlog.get_logger(__name__)

_STRICT_DATE_RE = re.compile(r"^\d{4}-\d{2}-\d{2}$")

_AI_HINTS: dict[OperationType, tuple[DateAction, str]] = {
    OperationType.ROUTINE_UPDATE: (
        DateAction.USE_SYSTEM_DATE,
        " For routine updates, always use current system date.",
    ),
    OperationType.VERSION_RELEASE: (
        DateAction.CONFIRM_WITH_USER,
        " For version releases, confirm date with user.",
    ),
}


class DateGuard:
    def __init__(
        self,
        settings: Settings,
        clock: Callable[[], datetime.date] = datetime.date.today,
    ) -> None:
        self.settings = settings
        self.blacklist = frozenset(settings.blacklisted_dates)
        self._clock = clock

    def today(self) -> datetime.date:
        return self._clock()

    def validate(self, value: str | None, context: str = "") -> DateValidationResult:
        """Valida una fecha YYYY-MM-DD. La primera falla determina el resultado."""
        current = self.today().isoformat()

        if value is None or not str(value).strip():
            return DateValidationResult(
                is_valid=False,
                error="Date string is null or empty",
                suggested_date=current,
                action=DateAction.USE_SYSTEM_DATE,
                context=context,
            )

        value = str(value).strip()
        if value in self.blacklist:
            return DateValidationResult(
                is_valid=False,
                error=(
                    f"Date '{value}' is blacklisted - commonly found in documentation "
                    "but incorrect for new updates"
                ),
                suggested_date=current,
                action=DateAction.USE_SYSTEM_DATE,
                flags=DateFlag.BLACKLISTED_DATE,
                context=context,
            )

        parsed = _parse_strict(value)
        if parsed is None:
            return DateValidationResult(
                is_valid=False,
                error=f"Invalid date format: '{value}'. Expected YYYY-MM-DD format",
                suggested_date=current,
                action=DateAction.USE_SYSTEM_DATE,
                flags=DateFlag.INVALID_FORMAT,
                context=context,
            )

        delta = (parsed - self.today()).days
        if delta > self.settings.max_future_days:
            return DateValidationResult(
                is_valid=False,
                error=f"Date '{value}' is too far in the future ({delta} days from now)",
                suggested_date=current,
                action=DateAction.USE_SYSTEM_DATE,
                flags=DateFlag.TOO_FAR_IN_FUTURE,
                context=context,
            )
        if -delta > self.settings.max_past_days:
            return DateValidationResult(
                is_valid=False,
                error=f"Date '{value}' is too far in the past ({-delta} days ago) for new content",
                suggested_date=current,
                action=DateAction.CONFIRM_WITH_USER,
                flags=DateFlag.TOO_FAR_IN_PAST,
                context=context,
            )

        return DateValidationResult(
            is_valid=True, suggested_date=value, action=DateAction.USE_AS_IS, context=context
        )

    def validate_for_ai(self, value: str | None, operation: OperationType) -> DateValidationResult:
        """Como ``validate``, ajustando la acción recomendada según el tipo de operación."""
        result = self.validate(value, operation.value)
        hint = _AI_HINTS.get(operation)
        if not result.is_valid and hint is not None:
            result.action, suffix = hint
            result.error = (result.error or "") + suffix
        return result

    def validate_many(self, dates: dict[str, str]) -> list[DateValidationResult]:
        """Solo las fechas inválidas, con su contexto (la clave del dict)."""
        problems: list[DateValidationResult] = []
        for context, value in dates.items():
            result = self.validate(value, context)
            if not result.is_valid:
                problems.append(result)
        return problems

    def get_validated_current_date(self) -> str:
        try:
            current = self.today().isoformat()
            if self.validate(current, "System Date").is_valid:
                return current
        except Exception as exc:
            logger.warning("current_date_validation_error", error=str(exc))
        now = datetime.datetime.now()
        return f"{now.year:04d}-{now.month:02d}-{now.day:02d}"


def _parse_strict(value: str) -> datetime.date | None:
    if not _STRICT_DATE_RE.match(value):
        return None
    try:
        return datetime.datetime.strptime(value, "%Y-%m-%d").date()
    except ValueError:
        return None
