"""Unit Rule Set — stages for assembled units (frame + components + modifiers).

Archetype-specific checks are selected through an explicit dispatch table
keyed by archetype; the attributes each archetype requires or forbids come
from its ``ArchetypePolicy`` in the injected rule tables.
"""

from collections import Counter
from typing import Any, Callable, Mapping, Optional

from botcheck.config import Settings
from botcheck.models.entities import Archetype, ComponentCategory, EffectFamily, FrameCategory
from botcheck.validators.base import BaseRuleSet
from botcheck.validators.compatibility import CompatibilityEngine
from botcheck.validators.models import IssueCode, Severity, ValidationIssue
from botcheck.validators.reference_data import COMBAT_RATING_AXES
from botcheck.validators.slots import SlotAllocator
from botcheck.validators.tables import ArchetypePolicy, RuleTables, rarity_tier

ArchetypeHandler = Callable[[Mapping, ArchetypePolicy], list[ValidationIssue]]


class UnitRuleSet(BaseRuleSet):
    """Validates assembled units."""

    def __init__(
        self,
        settings: Optional[Settings] = None,
        tables: Optional[RuleTables] = None,
        compatibility: Optional[CompatibilityEngine] = None,
        slots: Optional[SlotAllocator] = None,
    ):
        super().__init__(settings, tables)
        self.compatibility = compatibility or CompatibilityEngine(self.tables)
        self.slots = slots or SlotAllocator(self.tables.essential_categories)

        self._handlers: dict[str, ArchetypeHandler] = {
            Archetype.WORKER.value: self._validate_worker,
            Archetype.PLAYABLE.value: self._validate_playable,
            Archetype.KING.value: self._validate_king,
            Archetype.ROGUE.value: self._validate_rogue,
            Archetype.GOVBOT.value: self._validate_govbot,
        }
        unhandled = {a.value for a in Archetype} - set(self._handlers)
        if unhandled:
            raise ValueError(f"No business-rule handler for archetypes: {sorted(unhandled)}")

        unconfigured = {a.value for a in Archetype} - set(self.tables.archetype_policies)
        if unconfigured:
            raise ValueError(f"No archetype policy for: {sorted(unconfigured)}")

    @property
    def name(self) -> str:
        return "Unit"

    # ── Stage 1: basic structure ──

    def validate_basic_structure(self, entity: Any) -> list[ValidationIssue]:
        return self._check_record(entity, "Unit")

    # ── Stage 2: required fields ──

    def validate_required_fields(self, entity: Mapping) -> list[ValidationIssue]:
        issues = []

        issues.extend(self._check_string_field(
            entity.get("name"),
            "name",
            self.settings.NAME_MIN_LENGTH,
            self.settings.NAME_MAX_LENGTH,
        ))

        archetype = entity.get("archetype")
        if not archetype:
            issues.append(self._issue(
                Severity.ERROR,
                IssueCode.MISSING_ARCHETYPE,
                "Unit archetype is required",
                field="archetype",
                suggestion=f"Choose from: {', '.join(a.value for a in Archetype)}",
            ))
        else:
            issues.extend(self._check_member(
                archetype, Archetype, "archetype", IssueCode.INVALID_ARCHETYPE, "archetype"
            ))

        issues.extend(self._check_frame_fields(entity.get("frame")))
        issues.extend(self._check_component_fields(entity.get("components")))
        issues.extend(self._check_modifier_fields(entity.get("modifiers")))

        core = entity.get("identity_core")
        if isinstance(core, Mapping):
            issues.extend(self._check_rarity(core.get("rarity"), "identity_core.rarity"))

        if not entity.get("state"):
            issues.append(self._issue(
                Severity.ERROR,
                IssueCode.MISSING_STATE,
                "Unit must have a runtime state",
                field="state",
                suggestion="Initialize the unit's runtime state before validating",
            ))

        return issues

    def _check_frame_fields(self, frame: Any) -> list[ValidationIssue]:
        if not frame:
            return [self._issue(
                Severity.ERROR,
                IssueCode.MISSING_FRAME,
                "Unit must have a frame",
                field="frame",
                suggestion="Attach a frame to hold the unit's components",
            )]
        if not isinstance(frame, Mapping):
            return [self._issue(
                Severity.ERROR,
                IssueCode.MISSING_FRAME,
                "Frame must be an object",
                field="frame",
            )]

        issues = self._check_rarity(frame.get("rarity"), "frame.rarity")
        issues.extend(self._check_member(
            frame.get("category"), FrameCategory, "frame.category",
            IssueCode.INVALID_FRAME_CATEGORY, "frame category",
        ))

        slots = frame.get("slots")
        if isinstance(slots, bool) or not isinstance(slots, int) or slots < 0:
            issues.append(self._issue(
                Severity.ERROR,
                IssueCode.INVALID_SLOT_COUNT,
                f"Frame slot count must be a non-negative integer, got {slots!r}",
                field="frame.slots",
            ))
        return issues

    def _check_component_fields(self, components: Any) -> list[ValidationIssue]:
        if not isinstance(components, list):
            return [self._issue(
                Severity.ERROR,
                IssueCode.MISSING_COMPONENTS,
                "Unit must have a components list",
                field="components",
                suggestion="Provide the installed components, or an empty list",
            )]
        if not components:
            return [self._issue(
                Severity.WARNING,
                IssueCode.NO_COMPONENTS,
                "Unit has no components",
                field="components",
                suggestion="Consider adding essential components (head, torso, arms, legs)",
            )]

        issues = []
        for i, component in enumerate(components):
            path = f"components[{i}]"
            if not isinstance(component, Mapping):
                issues.append(self._issue(
                    Severity.ERROR,
                    IssueCode.INVALID_COMPONENT,
                    f"Component #{i + 1} must be an object",
                    field=path,
                ))
                continue
            issues.extend(self._check_member(
                component.get("category"), ComponentCategory, f"{path}.category",
                IssueCode.INVALID_COMPONENT_CATEGORY, "component category",
            ))
            issues.extend(self._check_rarity(component.get("rarity"), f"{path}.rarity"))
        return issues

    def _check_modifier_fields(self, modifiers: Any) -> list[ValidationIssue]:
        if modifiers is None:
            return []
        if not isinstance(modifiers, list):
            return [self._issue(
                Severity.ERROR,
                IssueCode.INVALID_ARRAY_FIELD,
                "modifiers must be an array",
                field="modifiers",
            )]

        issues = []
        for i, modifier in enumerate(modifiers):
            path = f"modifiers[{i}]"
            if not isinstance(modifier, Mapping):
                issues.append(self._issue(
                    Severity.ERROR,
                    IssueCode.INVALID_MODIFIER,
                    f"Modifier #{i + 1} must be an object",
                    field=path,
                ))
                continue
            issues.extend(self._check_member(
                modifier.get("effect"), EffectFamily, f"{path}.effect",
                IssueCode.INVALID_EFFECT_FAMILY, "effect family",
            ))
            issues.extend(self._check_rarity(modifier.get("rarity"), f"{path}.rarity"))
            issues.extend(self._check_upgrade_level(modifier, f"{path}.upgrade_level"))
        return issues

    # ── Stage 3: business rules ──

    def validate_business_rules(self, entity: Mapping) -> list[ValidationIssue]:
        issues = []

        archetype = entity.get("archetype")
        policy = self.tables.policy_for(archetype) if isinstance(archetype, str) else None
        handler = self._handlers.get(archetype) if isinstance(archetype, str) else None
        if policy is not None and handler is not None:
            issues.extend(handler(entity, policy))
            issues.extend(self._check_ownership(entity, policy))
            issues.extend(self._check_identity_core(entity, policy))

        frame = self._get_frame(entity)
        components = entity.get("components")
        if frame is not None and isinstance(components, list):
            issues.extend(self.slots.check(frame, components))

        return issues

    def _validate_worker(self, unit: Mapping, policy: ArchetypePolicy) -> list[ValidationIssue]:
        issues = []
        if not unit.get("utility_specialization"):
            issues.append(self._issue(
                Severity.INFO,
                IssueCode.WORKER_NO_SPECIALIZATION,
                "Worker unit has no utility specialization",
                field="utility_specialization",
                suggestion="Consider adding a utility specialization for better functionality",
            ))
        issues.extend(self._check_combat_role(unit, policy))
        return issues

    def _validate_playable(self, unit: Mapping, policy: ArchetypePolicy) -> list[ValidationIssue]:
        return self._check_combat_role(unit, policy)

    def _validate_king(self, unit: Mapping, policy: ArchetypePolicy) -> list[ValidationIssue]:
        return self._check_rarity_floor(unit, policy)

    def _validate_rogue(self, unit: Mapping, policy: ArchetypePolicy) -> list[ValidationIssue]:
        if not unit.get("combat_role") and not unit.get("components"):
            return [self._issue(
                Severity.WARNING,
                IssueCode.ROGUE_NO_COMBAT,
                "Rogue unit has no combat capabilities",
                field="combat_role",
                suggestion="Add a combat role or combat components for rogue functionality",
            )]
        return []

    def _validate_govbot(self, unit: Mapping, policy: ArchetypePolicy) -> list[ValidationIssue]:
        if not unit.get("government_type"):
            return [self._issue(
                Severity.WARNING,
                IssueCode.GOVBOT_NO_TYPE,
                "Government unit has no government type",
                field="government_type",
                suggestion="Add a government type for proper functionality",
            )]
        return []

    def _check_combat_role(self, unit: Mapping, policy: ArchetypePolicy) -> list[ValidationIssue]:
        archetype = unit.get("archetype")
        role = unit.get("combat_role")
        if policy.combat_role == "required" and not role:
            return [self._issue(
                Severity.ERROR,
                IssueCode.MISSING_COMBAT_ROLE,
                f"{archetype} units must have a combat role",
                field="combat_role",
                suggestion="Assign a combat role for battle mechanics",
            )]
        if policy.combat_role == "discouraged" and role:
            return [self._issue(
                Severity.WARNING,
                IssueCode.UNEXPECTED_COMBAT_ROLE,
                f"{archetype} unit has combat role '{role}'",
                field="combat_role",
                suggestion=f"{archetype} units typically don't need combat roles",
            )]
        return []

    def _check_rarity_floor(self, unit: Mapping, policy: ArchetypePolicy) -> list[ValidationIssue]:
        floor = rarity_tier(policy.rarity_floor) if policy.rarity_floor else None
        if floor is None:
            return []

        issues = []
        archetype = unit.get("archetype")
        for field in ("frame", "identity_core"):
            part = unit.get(field)
            if not isinstance(part, Mapping):
                continue
            tier = rarity_tier(part.get("rarity"))
            if tier is not None and tier < floor:
                issues.append(self._issue(
                    Severity.WARNING,
                    IssueCode.RARITY_BELOW_FLOOR,
                    f"{archetype} unit has a {part.get('rarity')} {field.replace('_', ' ')}",
                    field=field,
                    suggestion=f"Use {policy.rarity_floor} rarity or better for {archetype} units",
                    metadata={"rarity": part.get("rarity"), "floor": policy.rarity_floor},
                ))
        return issues

    def _check_ownership(self, unit: Mapping, policy: ArchetypePolicy) -> list[ValidationIssue]:
        archetype = unit.get("archetype")
        owner = unit.get("owner_id")
        severity = Severity.ERROR if policy.ownership_strict else Severity.WARNING

        if policy.ownership == "required" and not owner:
            return [self._issue(
                severity,
                IssueCode.MISSING_OWNER,
                f"{archetype} units must have an owner assigned",
                field="owner_id",
                suggestion="Assign an owner id",
            )]
        if policy.ownership == "forbidden" and owner:
            return [self._issue(
                severity,
                IssueCode.OWNER_ON_AUTONOMOUS_UNIT,
                f"{archetype} units are autonomous and shouldn't have owners",
                field="owner_id",
                suggestion="Remove the owner assignment or change the archetype",
            )]
        return []

    def _check_identity_core(self, unit: Mapping, policy: ArchetypePolicy) -> list[ValidationIssue]:
        archetype = unit.get("archetype")
        has_core = bool(unit.get("identity_core"))
        if policy.identity_core == "expected" and not has_core:
            return [self._issue(
                Severity.WARNING,
                IssueCode.MISSING_IDENTITY_CORE,
                f"{archetype} units should have an identity core",
                field="identity_core",
                suggestion="Add an identity core for personality traits",
            )]
        if policy.identity_core == "discouraged" and has_core:
            return [self._issue(
                Severity.WARNING,
                IssueCode.UNEXPECTED_IDENTITY_CORE,
                f"{archetype} unit carries an identity core",
                field="identity_core",
                suggestion=f"{archetype} units typically don't need identity cores",
            )]
        return []

    # ── Stage 4: performance ──

    def validate_performance(self, entity: Mapping) -> list[ValidationIssue]:
        issues = []

        frame = self._get_frame(entity)
        components = entity.get("components")
        slots = frame.get("slots") if frame is not None else None
        if isinstance(slots, int) and isinstance(components, list) and len(components) > slots:
            issues.append(self._issue(
                Severity.WARNING,
                IssueCode.TOO_MANY_COMPONENTS,
                f"Unit has {len(components)} components but frame only has {slots} slots",
                field="components",
                suggestion="Reduce components or use a frame with more slots",
                metadata={"component_count": len(components), "frame_slots": slots},
            ))

        modifiers = entity.get("modifiers")
        if isinstance(modifiers, list) and len(modifiers) > self.settings.MAX_MODIFIERS:
            issues.append(self._issue(
                Severity.WARNING,
                IssueCode.MANY_MODIFIERS,
                f"Unit has {len(modifiers)} modifiers",
                field="modifiers",
                suggestion="Consider reducing modifiers for better performance",
            ))

        rating = self.composite_rating(entity)
        if rating is not None and rating > self.settings.HIGH_RATING_THRESHOLD:
            issues.append(self._issue(
                Severity.INFO,
                IssueCode.VERY_HIGH_RATING,
                f"Unit has very high rating: {rating:.1f}",
                field="overall_rating",
                suggestion="Ensure rating is balanced for gameplay",
            ))

        return issues

    def composite_rating(self, entity: Mapping) -> Optional[float]:
        """Declared ``overall_rating``, else the mean component combat rating on a 0-100 scale.

        Each component axis is ``min(10, stat × rarity multiplier / 10)``.
        """
        declared = entity.get("overall_rating")
        if isinstance(declared, (int, float)) and not isinstance(declared, bool):
            return float(declared)

        components = self._get_components(entity)
        if not components:
            return None

        ratings = []
        for component in components:
            stats = component.get("stats")
            stats = stats if isinstance(stats, Mapping) else {}
            rarity = component.get("rarity")
            multiplier = self.tables.rarity_multipliers.get(rarity, 1.0) if isinstance(rarity, str) else 1.0
            axes = []
            for axis in COMBAT_RATING_AXES:
                value = stats.get(axis, 0)
                if isinstance(value, bool) or not isinstance(value, (int, float)):
                    value = 0
                axes.append(min(10.0, value * multiplier / 10))
            ratings.append(sum(axes) / len(axes))

        return sum(ratings) / len(ratings) * 10

    # ── Stage 5: compatibility ──

    def validate_compatibility(self, entity: Mapping) -> list[ValidationIssue]:
        issues = []

        frame = self._get_frame(entity)
        core = entity.get("identity_core")
        if frame is not None and isinstance(core, Mapping):
            core_tier = rarity_tier(core.get("rarity"))
            frame_tier = rarity_tier(frame.get("rarity"))
            if (
                core_tier is not None
                and frame_tier is not None
                and core_tier - frame_tier >= self.settings.RARITY_MISMATCH_GAP
            ):
                issues.append(self._issue(
                    Severity.INFO,
                    IssueCode.RARITY_MISMATCH,
                    f"{core.get('rarity')} identity core with {frame.get('rarity')} frame",
                    field="identity_core",
                    suggestion="Consider upgrading the frame to match identity core quality",
                ))

        archetype = entity.get("archetype")
        policy = self.tables.policy_for(archetype) if isinstance(archetype, str) else None
        state = entity.get("state")
        if policy is not None and not policy.tracks_bond and isinstance(state, Mapping):
            if state.get("bond_level") is not None:
                issues.append(self._issue(
                    Severity.WARNING,
                    IssueCode.UNEXPECTED_BOND_TRACKING,
                    f"{archetype} unit state tracks a bond level",
                    field="state.bond_level",
                    suggestion=f"Use a runtime state without bond tracking for {archetype} units",
                ))

        modifiers = self._get_modifiers(entity)
        for i, j in self.compatibility.find_conflicts(modifiers):
            a, b = modifiers[i], modifiers[j]
            issues.append(self._issue(
                Severity.ERROR,
                IssueCode.MODIFIER_CONFLICT,
                f"Modifier '{a.get('id')}' ({a.get('effect')}) conflicts with "
                f"'{b.get('id')}' ({b.get('effect')})",
                field="modifiers",
                suggestion="Unequip one of the conflicting modifiers or lower its upgrade level",
                metadata={"pair": [i, j]},
            ))

        category = frame.get("category") if frame is not None else None
        if self._is_member(category, FrameCategory):
            for i, modifier in enumerate(modifiers):
                if not self.compatibility.is_frame_compatible(modifier, category):
                    issues.append(self._issue(
                        Severity.WARNING,
                        IssueCode.MODIFIER_FRAME_INCOMPATIBLE,
                        f"{modifier.get('effect')} modifier is not designed for {category} frames",
                        field=f"modifiers[{i}]",
                        suggestion="Move the modifier to a unit with a compatible frame",
                    ))

        return issues

    # ── Stage 7: final ──

    def validate_final(self, entity: Mapping) -> list[ValidationIssue]:
        ids = Counter(
            part.get("id")
            for part in self._get_components(entity) + self._get_modifiers(entity)
            if isinstance(part.get("id"), str) and part.get("id")
        )
        return [
            self._issue(
                Severity.ERROR,
                IssueCode.DUPLICATE_PART_ID,
                f"Part id '{part_id}' is used {count} times",
                field="components",
                suggestion="Ensure every installed component and modifier has a unique id",
            )
            for part_id, count in sorted(ids.items())
            if count > 1
        ]
