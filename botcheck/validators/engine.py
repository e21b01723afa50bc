"""Validation Pipeline — runs rule-set stages in order, scores, and aggregates batches.

This is the main entry point for entity validation. It runs the configured
rule set's stages against a snapshot and produces a ValidationResult.

Usage:
    pipeline = ValidationPipeline()
    result = pipeline.validate(unit_snapshot)
    if not result.is_valid:
        # Block persistence and surface result.issues to the player
"""

import copy
import json
import time
from collections import Counter
from concurrent.futures import ThreadPoolExecutor
from functools import lru_cache
from typing import Any, Callable, Iterable, Optional

import structlog
from pydantic import BaseModel

from botcheck.config import Settings, get_settings
from botcheck.validators.base import BaseRuleSet
from botcheck.validators.compatibility import CompatibilityEngine
from botcheck.validators.models import (
    BatchReport,
    BatchStatistics,
    IssueCode,
    IssueFrequency,
    Severity,
    ValidationContext,
    ValidationIssue,
    ValidationResult,
)
from botcheck.validators.modifier_rules import ModifierRuleSet
from botcheck.validators.scoring import ScoreAggregator
from botcheck.validators.slots import SlotAllocator
from botcheck.validators.tables import RuleTables, default_rule_tables
from botcheck.validators.unit_rules import UnitRuleSet

logger = structlog.get_logger()

Stage = tuple[str, Callable[[Any], list]]


class ValidationPipeline:
    """Orchestrates one rule set's stages and produces scored results.

    Design principles:
        - Deterministic: same input → same output
        - Contained: no exception escapes validate()
        - Configurable: tables, engines and settings are injected, never global
        - Observable: logs every validation run with timing
    """

    def __init__(
        self,
        rule_set: Optional[BaseRuleSet] = None,
        tables: Optional[RuleTables] = None,
        compatibility: Optional[CompatibilityEngine] = None,
        slots: Optional[SlotAllocator] = None,
        scorer: Optional[ScoreAggregator] = None,
        settings: Optional[Settings] = None,
    ):
        """Initialize with the unit rule set or a custom one.

        Args:
            rule_set: Stage implementation. If None, a UnitRuleSet wired to the
                other collaborators is built.
            tables: Static lookup tables. If None, the default tables are used.
            compatibility: Modifier synergy/conflict engine.
            slots: Slot-capacity allocator.
            scorer: Issue → score aggregator.
            settings: Engine settings. If None, loaded from the environment.
        """
        self.settings = settings or get_settings()
        self.tables = tables or default_rule_tables()
        self.compatibility = compatibility or CompatibilityEngine(self.tables)
        self.slots = slots or SlotAllocator(self.tables.essential_categories)
        self.scorer = scorer or ScoreAggregator()
        self.rule_set = rule_set or UnitRuleSet(
            settings=self.settings,
            tables=self.tables,
            compatibility=self.compatibility,
            slots=self.slots,
        )

    @classmethod
    def for_modifiers(
        cls,
        settings: Optional[Settings] = None,
        tables: Optional[RuleTables] = None,
    ) -> "ValidationPipeline":
        """Pipeline over standalone modifier snapshots."""
        return cls(rule_set=ModifierRuleSet(settings, tables), tables=tables, settings=settings)

    # ── Single entity ──

    def validate(self, entity: Any, context: Optional[ValidationContext] = None) -> ValidationResult:
        """Run every applicable stage against one entity.

        Args:
            entity: Snapshot as a dict, a JSON string, or a pydantic model
            context: Per-call options. Defaults to all built-in stages, no custom rules.

        Returns:
            ValidationResult with validity, score and all issues in stage order
        """
        context = context or ValidationContext()
        start_time = time.perf_counter()
        issues: list[ValidationIssue] = []
        stage_timings: dict[str, float] = {}

        snapshot = self._snapshot(entity, issues)
        if issues:
            return self._finish(snapshot, issues, start_time, stage_timings)

        stage_name = "basic_structure"
        try:
            issues.extend(self._run_stage(stage_name, self.rule_set.validate_basic_structure, snapshot, stage_timings))
            if any(i.severity == Severity.CRITICAL for i in issues):
                return self._finish(snapshot, issues, start_time, stage_timings)

            for stage_name, stage in self._stages(context):
                issues.extend(self._run_stage(stage_name, stage, snapshot, stage_timings))
        except Exception as e:
            logger.error(
                "validation_stage_failed",
                entity_type=self.rule_set.name,
                stage=stage_name,
                error=str(e),
            )
            issues.append(ValidationIssue(
                severity=Severity.CRITICAL,
                code=IssueCode.VALIDATION_EXCEPTION,
                message=f"Validation failed: {e}",
                metadata={"stage": stage_name},
            ))

        return self._finish(snapshot, issues, start_time, stage_timings)

    def _snapshot(self, entity: Any, issues: list[ValidationIssue]) -> Any:
        """Plain-data copy of the entity; parse failures are recorded as CRITICAL issues."""
        if isinstance(entity, BaseModel):
            return entity.model_dump(mode="json")

        if isinstance(entity, str):
            try:
                return json.loads(entity)
            except json.JSONDecodeError as e:
                issues.append(ValidationIssue(
                    severity=Severity.CRITICAL,
                    code=IssueCode.INVALID_STRUCTURE,
                    message=f"Cannot parse entity JSON: {e}",
                    suggestion="Ensure the snapshot is valid JSON",
                ))
                return None

        try:
            return copy.deepcopy(entity)
        except Exception as e:
            issues.append(ValidationIssue(
                severity=Severity.CRITICAL,
                code=IssueCode.VALIDATION_EXCEPTION,
                message=f"Validation failed: {e}",
                metadata={"stage": "snapshot"},
            ))
            return None

    def _stages(self, context: ValidationContext) -> list[Stage]:
        """Stages after basic structure, in execution order."""
        stages: list[Stage] = [
            ("required_fields", self.rule_set.validate_required_fields),
            ("business_rules", self.rule_set.validate_business_rules),
        ]
        if context.check_performance:
            stages.append(("performance", self.rule_set.validate_performance))
        if context.check_compatibility:
            stages.append(("compatibility", self.rule_set.validate_compatibility))
        for rule in context.custom_rules:
            stages.append((f"custom:{rule.name}", lambda entity, rule=rule: rule.apply(entity, context)))
        stages.append(("final", self.rule_set.validate_final))
        return stages

    @staticmethod
    def _run_stage(
        name: str,
        stage: Callable[[Any], list],
        snapshot: Any,
        timings: dict[str, float],
    ) -> list[ValidationIssue]:
        stage_start = time.perf_counter()
        try:
            found = stage(snapshot)
            return [
                issue if isinstance(issue, ValidationIssue) else ValidationIssue.model_validate(issue)
                for issue in found
            ]
        finally:
            timings[name] = round((time.perf_counter() - stage_start) * 1000, 3)

    def _finish(
        self,
        snapshot: Any,
        issues: list[ValidationIssue],
        start_time: float,
        stage_timings: dict[str, float],
    ) -> ValidationResult:
        result = self.scorer.aggregate(issues)

        entity_id = snapshot.get("id") if isinstance(snapshot, dict) else None
        logger.info(
            "validation_complete",
            entity_type=self.rule_set.name,
            entity_id=entity_id,
            is_valid=result.is_valid,
            score=result.score,
            summary=result.summary.model_dump(),
            issue_count=len(issues),
            duration_ms=round((time.perf_counter() - start_time) * 1000, 2),
            stage_timings=stage_timings,
        )
        return result

    # ── Batches ──

    def validate_batch(
        self,
        entities: Iterable[Any],
        context: Optional[ValidationContext] = None,
    ) -> list[ValidationResult]:
        """Validate each entity independently; results keep input order."""
        entities = list(entities)
        workers = self.settings.BATCH_MAX_WORKERS
        logger.info("batch_validation_started", entity_type=self.rule_set.name, count=len(entities), workers=workers)

        if workers > 1 and len(entities) > 1:
            with ThreadPoolExecutor(max_workers=workers) as pool:
                return list(pool.map(lambda entity: self.validate(entity, context), entities))
        return [self.validate(entity, context) for entity in entities]

    def validate_batch_aggregate(
        self,
        entities: Iterable[Any],
        context: Optional[ValidationContext] = None,
    ) -> BatchReport:
        """Validate a batch and compute validity counts, mean score and common issue codes."""
        individual = self.validate_batch(entities, context)

        valid = sum(1 for result in individual if result.is_valid)
        average_score = sum(result.score for result in individual) / len(individual) if individual else 0.0

        code_counts = Counter(code for result in individual for code in result.codes())
        ranked = sorted(code_counts.items(), key=lambda item: (-item[1], item[0]))
        common_issues = [
            IssueFrequency(code=code, count=count)
            for code, count in ranked[: self.settings.TOP_ISSUE_CODES]
        ]

        overall = self.scorer.aggregate([issue for result in individual for issue in result.issues])

        report = BatchReport(
            overall=overall,
            individual=individual,
            statistics=BatchStatistics(
                total_entities=len(individual),
                valid_entities=valid,
                invalid_entities=len(individual) - valid,
                average_score=average_score,
                common_issues=common_issues,
            ),
        )

        logger.info(
            "batch_validation_complete",
            entity_type=self.rule_set.name,
            total=report.statistics.total_entities,
            valid=report.statistics.valid_entities,
            average_score=round(average_score, 2),
        )
        return report


@lru_cache
def get_pipeline() -> ValidationPipeline:
    """Shared default unit pipeline. Holds no mutable state between calls."""
    return ValidationPipeline()
