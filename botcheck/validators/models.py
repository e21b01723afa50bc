"""Validation models — severity levels, issue codes, results, context, and batch reports.

All validation is deterministic: same input → same output, no randomness, no I/O.
"""

from enum import Enum
from typing import Any, Callable, Optional
from pydantic import BaseModel, Field, field_validator


class Severity(str, Enum):
    """Validation issue severity levels, least severe first."""

    INFO = "info"          # Advisory, no effect on validity
    WARNING = "warning"    # Sub-optimal but permitted
    ERROR = "error"        # Entity is invalid, block further processing
    CRITICAL = "critical"  # Entity is structurally unusable


class IssueCode(str, Enum):
    """Stable codes for every built-in rule.

    Naming convention: SUBJECT_SPECIFIC_ISSUE
    """

    # Structure
    INVALID_STRUCTURE = "INVALID_STRUCTURE"
    MISSING_IDENTITY = "MISSING_IDENTITY"

    # Generic field checks
    INVALID_STRING_FIELD = "INVALID_STRING_FIELD"
    STRING_TOO_SHORT = "STRING_TOO_SHORT"
    STRING_TOO_LONG = "STRING_TOO_LONG"
    INVALID_NUMERIC_FIELD = "INVALID_NUMERIC_FIELD"
    NUMBER_TOO_SMALL = "NUMBER_TOO_SMALL"
    NUMBER_TOO_LARGE = "NUMBER_TOO_LARGE"
    INVALID_ARRAY_FIELD = "INVALID_ARRAY_FIELD"
    MISSING_RARITY = "MISSING_RARITY"
    INVALID_RARITY = "INVALID_RARITY"

    # Required unit fields
    MISSING_ARCHETYPE = "MISSING_ARCHETYPE"
    INVALID_ARCHETYPE = "INVALID_ARCHETYPE"
    MISSING_FRAME = "MISSING_FRAME"
    INVALID_FRAME_CATEGORY = "INVALID_FRAME_CATEGORY"
    INVALID_SLOT_COUNT = "INVALID_SLOT_COUNT"
    MISSING_COMPONENTS = "MISSING_COMPONENTS"
    NO_COMPONENTS = "NO_COMPONENTS"
    INVALID_COMPONENT = "INVALID_COMPONENT"
    INVALID_COMPONENT_CATEGORY = "INVALID_COMPONENT_CATEGORY"
    INVALID_MODIFIER = "INVALID_MODIFIER"
    INVALID_EFFECT_FAMILY = "INVALID_EFFECT_FAMILY"
    INVALID_UPGRADE_LEVEL = "INVALID_UPGRADE_LEVEL"
    UPGRADE_LEVEL_EXCEEDS_MAX = "UPGRADE_LEVEL_EXCEEDS_MAX"
    MISSING_STATE = "MISSING_STATE"

    # Archetype rules
    WORKER_NO_SPECIALIZATION = "WORKER_NO_SPECIALIZATION"
    UNEXPECTED_COMBAT_ROLE = "UNEXPECTED_COMBAT_ROLE"
    MISSING_COMBAT_ROLE = "MISSING_COMBAT_ROLE"
    RARITY_BELOW_FLOOR = "RARITY_BELOW_FLOOR"
    ROGUE_NO_COMBAT = "ROGUE_NO_COMBAT"
    GOVBOT_NO_TYPE = "GOVBOT_NO_TYPE"

    # Cross-field rules
    MISSING_OWNER = "MISSING_OWNER"
    OWNER_ON_AUTONOMOUS_UNIT = "OWNER_ON_AUTONOMOUS_UNIT"
    MISSING_IDENTITY_CORE = "MISSING_IDENTITY_CORE"
    UNEXPECTED_IDENTITY_CORE = "UNEXPECTED_IDENTITY_CORE"

    # Slot allocation
    SLOT_CAPACITY_EXCEEDED = "SLOT_CAPACITY_EXCEEDED"
    MISSING_ESSENTIAL_COMPONENT = "MISSING_ESSENTIAL_COMPONENT"

    # Performance
    TOO_MANY_COMPONENTS = "TOO_MANY_COMPONENTS"
    MANY_MODIFIERS = "MANY_MODIFIERS"
    VERY_HIGH_RATING = "VERY_HIGH_RATING"

    # Compatibility
    RARITY_MISMATCH = "RARITY_MISMATCH"
    UNEXPECTED_BOND_TRACKING = "UNEXPECTED_BOND_TRACKING"
    MODIFIER_CONFLICT = "MODIFIER_CONFLICT"
    MODIFIER_FRAME_INCOMPATIBLE = "MODIFIER_FRAME_INCOMPATIBLE"

    # Final
    DUPLICATE_PART_ID = "DUPLICATE_PART_ID"

    # Ready-made custom rules
    DUPLICATE_ID = "DUPLICATE_ID"
    NAME_TOO_LONG = "NAME_TOO_LONG"
    BANNED_WORD = "BANNED_WORD"

    # Pipeline
    VALIDATION_EXCEPTION = "VALIDATION_EXCEPTION"


class ValidationIssue(BaseModel):
    """A single validation finding."""

    severity: Severity
    code: str
    message: str
    field: Optional[str] = None       # Which snapshot field triggered this
    suggestion: Optional[str] = None  # How to fix it
    metadata: Optional[dict[str, Any]] = None

    model_config = {"frozen": True, "use_enum_values": True}

    @field_validator("code", mode="before")
    @classmethod
    def _code_value(cls, value):
        return value.value if isinstance(value, Enum) else value


class IssueSummary(BaseModel):
    """Issue counts per severity."""

    errors: int = 0
    warnings: int = 0
    infos: int = 0
    criticals: int = 0

    model_config = {"frozen": True}


class ValidationResult(BaseModel):
    """Outcome of validating one entity."""

    is_valid: bool = Field(description="True if no errors and no criticals")
    issues: list[ValidationIssue] = Field(default_factory=list)
    score: int = Field(ge=0, le=100, description="Quality score 0-100")
    summary: IssueSummary = Field(default_factory=IssueSummary)

    model_config = {"frozen": True}

    def codes(self) -> list[str]:
        return [issue.code for issue in self.issues]

    def by_severity(self, severity: Severity) -> list[ValidationIssue]:
        return [issue for issue in self.issues if issue.severity == severity]


class ValidationRule(BaseModel):
    """Externally supplied rule run after the built-in stages.

    ``apply(entity, context)`` receives the plain-dict snapshot and returns issues.
    """

    name: str
    apply: Callable[..., list[ValidationIssue]]

    model_config = {"frozen": True}


class ValidationContext(BaseModel):
    """Per-call validation options."""

    strict: bool = False  # Informational, reserved for stricter rule sets
    check_performance: bool = True
    check_compatibility: bool = True
    custom_rules: list[ValidationRule] = Field(default_factory=list)

    model_config = {"frozen": True}

    @field_validator("custom_rules", mode="before")
    @classmethod
    def _coerce_rule_pairs(cls, value):
        """Accept ``(name, apply)`` pairs alongside ValidationRule instances."""
        if value is None:
            return []
        return [
            ValidationRule(name=rule[0], apply=rule[1]) if isinstance(rule, tuple) else rule
            for rule in value
        ]


class IssueFrequency(BaseModel):
    code: str
    count: int


class BatchStatistics(BaseModel):
    total_entities: int
    valid_entities: int
    invalid_entities: int
    average_score: float
    common_issues: list[IssueFrequency] = Field(default_factory=list)


class BatchReport(BaseModel):
    """Aggregate outcome of a batch validation run."""

    overall: ValidationResult
    individual: list[ValidationResult]
    statistics: BatchStatistics
