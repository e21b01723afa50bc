"""Score aggregation — turns a severity-tagged issue list into a bounded score and verdict."""

from typing import Iterable, Optional

from botcheck.validators.models import IssueSummary, Severity, ValidationIssue, ValidationResult

# Score penalty per issue, by severity
PENALTY_WEIGHTS: dict[Severity, int] = {
    Severity.CRITICAL: 40,
    Severity.ERROR: 15,
    Severity.WARNING: 5,
    Severity.INFO: 1,
}

MAX_SCORE = 100
MIN_SCORE = 0


class ScoreAggregator:
    """Computes summary counts, quality score and validity for a list of issues.

    Warnings and infos lower the score but never affect validity.
    """

    def __init__(self, penalty_weights: Optional[dict[Severity, int]] = None):
        self.penalty_weights = dict(penalty_weights or PENALTY_WEIGHTS)

    def summarize(self, issues: Iterable[ValidationIssue]) -> IssueSummary:
        counts = {severity: 0 for severity in Severity}
        for issue in issues:
            counts[Severity(issue.severity)] += 1
        return IssueSummary(
            errors=counts[Severity.ERROR],
            warnings=counts[Severity.WARNING],
            infos=counts[Severity.INFO],
            criticals=counts[Severity.CRITICAL],
        )

    def score(self, summary: IssueSummary) -> int:
        penalty = (
            summary.criticals * self.penalty_weights[Severity.CRITICAL]
            + summary.errors * self.penalty_weights[Severity.ERROR]
            + summary.warnings * self.penalty_weights[Severity.WARNING]
            + summary.infos * self.penalty_weights[Severity.INFO]
        )
        return max(MIN_SCORE, min(MAX_SCORE, MAX_SCORE - penalty))

    @staticmethod
    def is_valid(summary: IssueSummary) -> bool:
        return summary.errors == 0 and summary.criticals == 0

    def aggregate(self, issues: list[ValidationIssue]) -> ValidationResult:
        """Build a complete result from a list of issues, preserving their order."""
        summary = self.summarize(issues)
        return ValidationResult(
            is_valid=self.is_valid(summary),
            issues=list(issues),
            score=self.score(summary),
            summary=summary,
        )
