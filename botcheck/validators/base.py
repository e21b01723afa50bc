"""Base rule set — the stage interface every entity-type rule set implements.

Each rule set is a standalone, independently testable unit. The pipeline
composes one rule set with the stage order; new entity types are added
without modifying the pipeline.
"""

import math
from abc import ABC, abstractmethod
from enum import Enum
from typing import Any, Mapping, Optional, Type

from botcheck.config import Settings, get_settings
from botcheck.models.entities import Rarity
from botcheck.validators.models import IssueCode, Severity, ValidationIssue
from botcheck.validators.tables import RuleTables, default_rule_tables


class BaseRuleSet(ABC):
    """Abstract base for per-entity-type validation stages.

    Contract:
        - every stage is deterministic: same input → same output
        - every stage receives the plain-dict snapshot and never mutates it
        - every stage returns a list of ValidationIssue (empty = no issues)
        - no network calls, no disk access, no randomness
    """

    def __init__(self, settings: Optional[Settings] = None, tables: Optional[RuleTables] = None):
        self.settings = settings or get_settings()
        self.tables = tables or default_rule_tables()

    @property
    @abstractmethod
    def name(self) -> str:
        """Entity type name for logging."""
        ...

    @abstractmethod
    def validate_basic_structure(self, entity: Any) -> list[ValidationIssue]:
        """Check the entity is a well-formed record.

        A CRITICAL issue here stops the pipeline for this entity.
        """
        ...

    @abstractmethod
    def validate_required_fields(self, entity: Mapping) -> list[ValidationIssue]:
        ...

    @abstractmethod
    def validate_business_rules(self, entity: Mapping) -> list[ValidationIssue]:
        ...

    def validate_performance(self, entity: Mapping) -> list[ValidationIssue]:
        return []

    def validate_compatibility(self, entity: Mapping) -> list[ValidationIssue]:
        return []

    def validate_final(self, entity: Mapping) -> list[ValidationIssue]:
        return []

    # ── Helper Methods ──

    def _issue(
        self,
        severity: Severity,
        code: IssueCode,
        message: str,
        field: Optional[str] = None,
        suggestion: Optional[str] = None,
        metadata: Optional[dict] = None,
    ) -> ValidationIssue:
        """Convenience method to create a ValidationIssue."""
        return ValidationIssue(
            severity=severity,
            code=code,
            message=message,
            field=field,
            suggestion=suggestion,
            metadata=metadata,
        )

    def _check_record(self, entity: Any, label: str) -> list[ValidationIssue]:
        """Entity must be a mapping with an identity."""
        if not isinstance(entity, Mapping):
            return [self._issue(
                Severity.CRITICAL,
                IssueCode.INVALID_STRUCTURE,
                f"{label} must be a valid object, got {type(entity).__name__}",
                field=label.lower(),
            )]

        if not entity.get("id"):
            return [self._issue(
                Severity.CRITICAL,
                IssueCode.MISSING_IDENTITY,
                f"{label} ID is required",
                field="id",
                suggestion="Assign a unique id before validating",
            )]

        return []

    def _check_string_field(
        self,
        value: Any,
        field: str,
        min_length: int = 1,
        max_length: Optional[int] = None,
    ) -> list[ValidationIssue]:
        if not value or not isinstance(value, str):
            return [self._issue(
                Severity.ERROR,
                IssueCode.INVALID_STRING_FIELD,
                f"{field} must be a non-empty string",
                field=field,
            )]

        issues = []
        if len(value) < min_length:
            issues.append(self._issue(
                Severity.ERROR,
                IssueCode.STRING_TOO_SHORT,
                f"{field} must be at least {min_length} characters",
                field=field,
            ))
        if max_length is not None and len(value) > max_length:
            issues.append(self._issue(
                Severity.WARNING,
                IssueCode.STRING_TOO_LONG,
                f"{field} is very long ({len(value)} characters)",
                field=field,
                suggestion=f"Consider keeping it under {max_length} characters",
            ))
        return issues

    def _check_numeric_field(
        self,
        value: Any,
        field: str,
        minimum: Optional[float] = None,
        maximum: Optional[float] = None,
    ) -> list[ValidationIssue]:
        if isinstance(value, bool) or not isinstance(value, (int, float)) or not math.isfinite(value):
            return [self._issue(
                Severity.ERROR,
                IssueCode.INVALID_NUMERIC_FIELD,
                f"{field} must be a valid number",
                field=field,
            )]

        issues = []
        if minimum is not None and value < minimum:
            issues.append(self._issue(
                Severity.ERROR,
                IssueCode.NUMBER_TOO_SMALL,
                f"{field} must be at least {minimum}",
                field=field,
            ))
        if maximum is not None and value > maximum:
            issues.append(self._issue(
                Severity.WARNING,
                IssueCode.NUMBER_TOO_LARGE,
                f"{field} is very large ({value})",
                field=field,
                suggestion=f"Consider keeping it under {maximum}",
            ))
        return issues

    def _check_rarity(self, value: Any, field: str = "rarity") -> list[ValidationIssue]:
        if value is None:
            return [self._issue(
                Severity.ERROR,
                IssueCode.MISSING_RARITY,
                f"{field} is required",
                field=field,
                suggestion="Set a valid rarity value",
            )]
        if not self._is_member(value, Rarity):
            return [self._issue(
                Severity.ERROR,
                IssueCode.INVALID_RARITY,
                f"Invalid {field}: {value}",
                field=field,
                suggestion=f"Use one of: {', '.join(r.value for r in Rarity)}",
            )]
        return []

    def _check_member(
        self,
        value: Any,
        enum_cls: Type[Enum],
        field: str,
        code: IssueCode,
        label: str,
    ) -> list[ValidationIssue]:
        if not self._is_member(value, enum_cls):
            return [self._issue(
                Severity.ERROR,
                code,
                f"Invalid {label}: {value}",
                field=field,
                suggestion=f"Use one of: {', '.join(m.value for m in enum_cls)}",
            )]
        return []

    def _check_upgrade_level(self, modifier: Mapping, field: str) -> list[ValidationIssue]:
        level = modifier.get("upgrade_level", 0)
        if isinstance(level, bool) or not isinstance(level, int) or level < 0:
            return [self._issue(
                Severity.ERROR,
                IssueCode.INVALID_UPGRADE_LEVEL,
                f"{field} must be a non-negative integer, got {level!r}",
                field=field,
            )]

        rarity = modifier.get("rarity")
        max_level = self.tables.max_upgrade_levels.get(rarity) if isinstance(rarity, str) else None
        if max_level is not None and level > max_level:
            return [self._issue(
                Severity.WARNING,
                IssueCode.UPGRADE_LEVEL_EXCEEDS_MAX,
                f"{field} is {level} but {rarity} modifiers top out at {max_level}",
                field=field,
                suggestion="Lower the upgrade level or raise the modifier's rarity",
                metadata={"upgrade_level": level, "max_upgrade_level": max_level},
            )]
        return []

    @staticmethod
    def _is_member(value: Any, enum_cls: Type[Enum]) -> bool:
        try:
            enum_cls(value)
        except (ValueError, TypeError):
            return False
        return True

    # ── Safe accessors ──

    def _get_frame(self, entity: Mapping) -> Optional[Mapping]:
        frame = entity.get("frame")
        return frame if isinstance(frame, Mapping) else None

    def _get_components(self, entity: Mapping) -> list[Mapping]:
        components = entity.get("components")
        if not isinstance(components, list):
            return []
        return [c for c in components if isinstance(c, Mapping)]

    def _get_modifiers(self, entity: Mapping) -> list[Mapping]:
        modifiers = entity.get("modifiers")
        if not isinstance(modifiers, list):
            return []
        return [m for m in modifiers if isinstance(m, Mapping)]
