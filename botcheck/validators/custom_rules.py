"""Ready-made custom rules for ``ValidationContext.custom_rules``.

Usage:
    context = ValidationContext(custom_rules=[unique_id_rule(roster), name_length_rule(max_length=24)])
    pipeline.validate_batch(roster, context)
"""

from typing import Any, Iterable, Mapping, Optional

from pydantic import BaseModel

from botcheck.validators.models import IssueCode, Severity, ValidationIssue, ValidationRule


def _entity_id(entity: Any) -> Optional[str]:
    if isinstance(entity, BaseModel):
        return getattr(entity, "id", None)
    if isinstance(entity, Mapping):
        return entity.get("id")
    return None


def unique_id_rule(entities: Iterable[Any]) -> ValidationRule:
    """Flag entities whose id appears more than once in ``entities``."""
    ids = [_entity_id(e) for e in entities]

    def apply(entity: Mapping, context=None) -> list[ValidationIssue]:
        entity_id = entity.get("id")
        if entity_id and ids.count(entity_id) > 1:
            return [ValidationIssue(
                severity=Severity.ERROR,
                code=IssueCode.DUPLICATE_ID,
                message=f"Duplicate ID found: {entity_id}",
                field="id",
                suggestion="Ensure all entity IDs are unique",
            )]
        return []

    return ValidationRule(name="unique-id", apply=apply)


def name_length_rule(max_length: int = 50) -> ValidationRule:
    """Warn about names longer than ``max_length``."""

    def apply(entity: Mapping, context=None) -> list[ValidationIssue]:
        name = entity.get("name")
        if isinstance(name, str) and len(name) > max_length:
            return [ValidationIssue(
                severity=Severity.WARNING,
                code=IssueCode.NAME_TOO_LONG,
                message=f"Name is very long ({len(name)} characters)",
                field="name",
                suggestion=f"Consider keeping names under {max_length} characters",
            )]
        return []

    return ValidationRule(name="name-length", apply=apply)


def banned_words_rule(words: Iterable[str]) -> ValidationRule:
    """Reject names or descriptions containing any of ``words`` (case-insensitive)."""
    banned = [w.lower() for w in words if w]

    def apply(entity: Mapping, context=None) -> list[ValidationIssue]:
        text = f"{entity.get('name') or ''} {entity.get('description') or ''}".lower()
        if any(word in text for word in banned):
            return [ValidationIssue(
                severity=Severity.ERROR,
                code=IssueCode.BANNED_WORD,
                message="Inappropriate content detected",
                field="name",
                suggestion="Remove inappropriate language",
            )]
        return []

    return ValidationRule(name="banned-words", apply=apply)
