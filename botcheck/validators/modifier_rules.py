"""Modifier Rule Set — stages for standalone modifier (expansion chip) snapshots."""

from typing import Any, Mapping

from botcheck.models.entities import EffectFamily
from botcheck.validators.base import BaseRuleSet
from botcheck.validators.models import IssueCode, Severity, ValidationIssue

# Magnitudes above this are suspicious for a single modifier
MAX_EXPECTED_MAGNITUDE = 1.0


class ModifierRuleSet(BaseRuleSet):
    """Validates a single modifier outside of any unit."""

    @property
    def name(self) -> str:
        return "Modifier"

    def validate_basic_structure(self, entity: Any) -> list[ValidationIssue]:
        return self._check_record(entity, "Modifier")

    def validate_required_fields(self, entity: Mapping) -> list[ValidationIssue]:
        issues = self._check_string_field(entity.get("name"), "name", 1, self.settings.NAME_MAX_LENGTH)

        if not entity.get("effect"):
            issues.append(self._issue(
                Severity.ERROR,
                IssueCode.INVALID_EFFECT_FAMILY,
                "Modifier effect family is required",
                field="effect",
                suggestion=f"Choose from: {', '.join(e.value for e in EffectFamily)}",
            ))
        else:
            issues.extend(self._check_member(
                entity.get("effect"), EffectFamily, "effect", IssueCode.INVALID_EFFECT_FAMILY, "effect family"
            ))

        issues.extend(self._check_rarity(entity.get("rarity")))
        return issues

    def validate_business_rules(self, entity: Mapping) -> list[ValidationIssue]:
        issues = self._check_upgrade_level(entity, "upgrade_level")

        magnitude = entity.get("magnitude")
        if magnitude is not None:
            issues.extend(self._check_numeric_field(
                magnitude, "magnitude", minimum=0.0, maximum=MAX_EXPECTED_MAGNITUDE
            ))
        return issues
