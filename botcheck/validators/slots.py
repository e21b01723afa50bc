"""Slot Allocator — checks installed components against a frame's finite capacity.

Only aggregate counts and category coverage are checked; which component
occupies which slot index is the assembly layer's concern.
"""

from collections import Counter
from typing import Any, Mapping, Optional, Sequence

from pydantic import BaseModel, Field

from botcheck.validators.models import IssueCode, Severity, ValidationIssue
from botcheck.validators.reference_data import ESSENTIAL_COMPONENT_CATEGORIES


class SlotReport(BaseModel):
    capacity: int
    used: int
    available: int
    overflow: int
    category_counts: dict[str, int] = Field(default_factory=dict)
    missing_categories: list[str] = Field(default_factory=list)

    @property
    def over_capacity(self) -> bool:
        return self.overflow > 0


class SlotAllocator:
    """Aggregate capacity and essential-category coverage for one frame."""

    def __init__(self, essential_categories: Optional[Sequence[str]] = None):
        self.essential_categories = tuple(essential_categories or ESSENTIAL_COMPONENT_CATEGORIES)

    def allocate(self, capacity: int, components: Sequence[Any]) -> SlotReport:
        """Count components against capacity and tally categories.

        Args:
            capacity: Declared frame slot count
            components: Installed component snapshots

        Returns:
            SlotReport with usage, overflow and missing essential categories
        """
        capacity = max(0, capacity)
        used = len(components)
        counts = Counter(
            c.get("category")
            for c in components
            if isinstance(c, Mapping) and isinstance(c.get("category"), str)
        )

        return SlotReport(
            capacity=capacity,
            used=used,
            available=max(0, capacity - used),
            overflow=max(0, used - capacity),
            category_counts=dict(sorted(counts.items())),
            missing_categories=[cat for cat in self.essential_categories if cat not in counts],
        )

    def check(self, frame: Mapping, components: Sequence[Any]) -> list[ValidationIssue]:
        """Flag capacity overflow (ERROR) and missing essential categories (WARNING)."""
        issues = []

        slots = frame.get("slots")
        if isinstance(slots, int) and not isinstance(slots, bool):
            report = self.allocate(slots, components)
            if report.over_capacity:
                issues.append(ValidationIssue(
                    severity=Severity.ERROR,
                    code=IssueCode.SLOT_CAPACITY_EXCEEDED,
                    message=f"Frame has {report.capacity} slots but unit has {report.used} components",
                    field="frame",
                    suggestion="Use a frame with more slots or remove components",
                    metadata={"capacity": report.capacity, "used": report.used, "overflow": report.overflow},
                ))
            missing = report.missing_categories
        else:
            missing = self.allocate(0, components).missing_categories

        for category in missing:
            issues.append(ValidationIssue(
                severity=Severity.WARNING,
                code=IssueCode.MISSING_ESSENTIAL_COMPONENT,
                message=f"Unit has no {category} component",
                field="components",
                suggestion=f"Consider adding a {category} component",
                metadata={"category": category},
            ))

        return issues
