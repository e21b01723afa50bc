"""Entity validator — deterministic validation layer for assembled units and modifiers.

Usage:
    from botcheck.validators import ValidationPipeline

    result = ValidationPipeline().validate(unit_snapshot)
    if not result.is_valid:
        # Block persistence, show result.issues
"""

from botcheck.validators.compatibility import CompatibilityEngine, EffectApplication, AdvancedEffects
from botcheck.validators.custom_rules import banned_words_rule, name_length_rule, unique_id_rule
from botcheck.validators.engine import ValidationPipeline, get_pipeline
from botcheck.validators.models import (
    BatchReport,
    IssueCode,
    Severity,
    ValidationContext,
    ValidationIssue,
    ValidationResult,
    ValidationRule,
)
from botcheck.validators.modifier_rules import ModifierRuleSet
from botcheck.validators.scoring import ScoreAggregator
from botcheck.validators.slots import SlotAllocator, SlotReport
from botcheck.validators.tables import RuleTables, default_rule_tables
from botcheck.validators.unit_rules import UnitRuleSet

__all__ = [
    "AdvancedEffects",
    "BatchReport",
    "CompatibilityEngine",
    "EffectApplication",
    "IssueCode",
    "ModifierRuleSet",
    "RuleTables",
    "ScoreAggregator",
    "Severity",
    "SlotAllocator",
    "SlotReport",
    "UnitRuleSet",
    "ValidationContext",
    "ValidationIssue",
    "ValidationPipeline",
    "ValidationResult",
    "ValidationRule",
    "banned_words_rule",
    "default_rule_tables",
    "get_pipeline",
    "name_length_rule",
    "unique_id_rule",
]
