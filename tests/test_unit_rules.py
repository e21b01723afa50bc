"""
Tests for the unit rule set, stage by stage.
"""

import pytest

from botcheck.validators import IssueCode, RuleTables, Severity, UnitRuleSet, default_rule_tables


def codes(issues) -> list[str]:
    return [issue.code for issue in issues]


class TestConstruction:
    """Tests for rule set wiring."""

    def test_rejects_tables_missing_a_policy(self, settings):
        policies = dict(default_rule_tables().archetype_policies)
        del policies["govbot"]

        with pytest.raises(ValueError, match="govbot"):
            UnitRuleSet(settings=settings, tables=RuleTables(archetype_policies=policies))

    def test_name(self, rules):
        assert rules.name == "Unit"


class TestBasicStructure:
    """Tests for the record shape check."""

    @pytest.mark.parametrize("entity", [None, 42, "unit", ["a", "b"]])
    def test_non_mapping_is_critical(self, rules, entity):
        issues = rules.validate_basic_structure(entity)

        assert codes(issues) == [IssueCode.INVALID_STRUCTURE.value]
        assert issues[0].severity == Severity.CRITICAL

    def test_missing_id_is_critical(self, rules, unit_factory):
        issues = rules.validate_basic_structure(unit_factory(id=""))

        assert codes(issues) == [IssueCode.MISSING_IDENTITY.value]
        assert issues[0].severity == Severity.CRITICAL

    def test_valid_record(self, rules, unit_factory):
        assert rules.validate_basic_structure(unit_factory()) == []


class TestRequiredFields:
    """Tests for required attribute presence and types."""

    def test_valid_unit(self, rules, unit_factory):
        assert rules.validate_required_fields(unit_factory()) == []

    def test_empty_name(self, rules, unit_factory):
        issues = rules.validate_required_fields(unit_factory(name=""))

        assert len(issues) == 1
        assert issues[0].severity == Severity.ERROR
        assert issues[0].field == "name"

    def test_short_name(self, rules, unit_factory):
        issues = rules.validate_required_fields(unit_factory(name="AB"))

        assert codes(issues) == [IssueCode.STRING_TOO_SHORT.value]
        assert issues[0].severity == Severity.ERROR

    def test_long_name_warns(self, rules, unit_factory):
        issues = rules.validate_required_fields(unit_factory(name="X" * 51))

        assert codes(issues) == [IssueCode.STRING_TOO_LONG.value]
        assert issues[0].severity == Severity.WARNING

    def test_missing_archetype(self, rules, unit_factory):
        issues = rules.validate_required_fields(unit_factory(archetype=None))

        assert codes(issues) == [IssueCode.MISSING_ARCHETYPE.value]

    def test_unknown_archetype(self, rules, unit_factory):
        issues = rules.validate_required_fields(unit_factory(archetype="pirate"))

        assert codes(issues) == [IssueCode.INVALID_ARCHETYPE.value]

    def test_missing_frame(self, rules, unit_factory):
        issues = rules.validate_required_fields(unit_factory(frame=None))

        assert codes(issues) == [IssueCode.MISSING_FRAME.value]
        assert issues[0].severity == Severity.ERROR

    def test_bad_frame_fields(self, rules, unit_factory):
        frame = {"id": "f1", "rarity": "mythic", "category": "submarine", "slots": -1}

        issues = rules.validate_required_fields(unit_factory(frame=frame))

        assert codes(issues) == [
            IssueCode.INVALID_RARITY.value,
            IssueCode.INVALID_FRAME_CATEGORY.value,
            IssueCode.INVALID_SLOT_COUNT.value,
        ]
        assert issues[0].field == "frame.rarity"

    def test_components_not_a_list(self, rules, unit_factory):
        issues = rules.validate_required_fields(unit_factory(components=None))

        assert codes(issues) == [IssueCode.MISSING_COMPONENTS.value]
        assert issues[0].severity == Severity.ERROR

    def test_empty_components_warn(self, rules, unit_factory):
        issues = rules.validate_required_fields(unit_factory(components=[]))

        assert codes(issues) == [IssueCode.NO_COMPONENTS.value]
        assert issues[0].severity == Severity.WARNING

    def test_malformed_component_entries(self, rules, unit_factory):
        components = ["not-a-dict", {"id": "c1", "category": "tail", "rarity": None}]

        issues = rules.validate_required_fields(unit_factory(components=components))

        assert codes(issues) == [
            IssueCode.INVALID_COMPONENT.value,
            IssueCode.INVALID_COMPONENT_CATEGORY.value,
            IssueCode.MISSING_RARITY.value,
        ]
        assert issues[0].field == "components[0]"
        assert issues[2].field == "components[1].rarity"

    def test_modifiers_may_be_absent(self, rules, unit_factory):
        assert rules.validate_required_fields(unit_factory(modifiers=None)) == []

    def test_modifiers_must_be_a_list(self, rules, unit_factory):
        issues = rules.validate_required_fields(unit_factory(modifiers="attack_buff"))

        assert codes(issues) == [IssueCode.INVALID_ARRAY_FIELD.value]

    def test_modifier_upgrade_beyond_rarity_cap(self, rules, unit_factory):
        modifiers = [{"id": "m1", "effect": "attack_buff", "rarity": "common", "upgrade_level": 6}]

        issues = rules.validate_required_fields(unit_factory(modifiers=modifiers))

        assert codes(issues) == [IssueCode.UPGRADE_LEVEL_EXCEEDS_MAX.value]
        assert issues[0].severity == Severity.WARNING
        assert issues[0].metadata == {"upgrade_level": 6, "max_upgrade_level": 5}

    def test_modifier_bad_fields(self, rules, unit_factory):
        modifiers = [7, {"id": "m1", "effect": "teleport", "rarity": "rare", "upgrade_level": -2}]

        issues = rules.validate_required_fields(unit_factory(modifiers=modifiers))

        assert codes(issues) == [
            IssueCode.INVALID_MODIFIER.value,
            IssueCode.INVALID_EFFECT_FAMILY.value,
            IssueCode.INVALID_UPGRADE_LEVEL.value,
        ]

    def test_identity_core_rarity_checked(self, rules, unit_factory):
        issues = rules.validate_required_fields(unit_factory(identity_core={"id": "c", "rarity": "shiny"}))

        assert codes(issues) == [IssueCode.INVALID_RARITY.value]
        assert issues[0].field == "identity_core.rarity"

    def test_missing_state(self, rules, unit_factory):
        issues = rules.validate_required_fields(unit_factory(state=None))

        assert codes(issues) == [IssueCode.MISSING_STATE.value]


class TestBusinessRules:
    """Tests for archetype and cross-field rules."""

    def test_valid_unit(self, rules, unit_factory):
        assert rules.validate_business_rules(unit_factory()) == []

    def test_playable_without_combat_role(self, rules, unit_factory):
        issues = rules.validate_business_rules(unit_factory(combat_role=None))

        assert codes(issues) == [IssueCode.MISSING_COMBAT_ROLE.value]
        assert issues[0].severity == Severity.ERROR

    def test_playable_without_owner(self, rules, unit_factory):
        issues = rules.validate_business_rules(unit_factory(owner_id=None))

        assert codes(issues) == [IssueCode.MISSING_OWNER.value]
        assert issues[0].severity == Severity.ERROR

    def test_worker_without_specialization(self, rules, unit_factory):
        issues = rules.validate_business_rules(unit_factory(archetype="worker", combat_role=None, identity_core=None))

        assert codes(issues) == [IssueCode.WORKER_NO_SPECIALIZATION.value]
        assert issues[0].severity == Severity.INFO

    def test_worker_with_combat_role(self, rules, unit_factory):
        unit = unit_factory(
            archetype="worker", utility_specialization="mining", combat_role="tank", identity_core=None
        )

        issues = rules.validate_business_rules(unit)

        assert codes(issues) == [IssueCode.UNEXPECTED_COMBAT_ROLE.value]
        assert issues[0].severity == Severity.WARNING

    def test_worker_without_identity_core(self, rules, unit_factory):
        """Workers are built without an identity core; that is the normal case."""
        unit = unit_factory(
            archetype="worker", owner_id=None, utility_specialization="repair", combat_role=None, identity_core=None
        )

        assert rules.validate_business_rules(unit) == []

    def test_worker_with_identity_core(self, rules, unit_factory):
        unit = unit_factory(archetype="worker", owner_id=None, utility_specialization="repair", combat_role=None)

        issues = rules.validate_business_rules(unit)

        assert codes(issues) == [IssueCode.UNEXPECTED_IDENTITY_CORE.value]
        assert issues[0].severity == Severity.WARNING
        assert issues[0].field == "identity_core"

    def test_playable_without_identity_core(self, rules, unit_factory):
        issues = rules.validate_business_rules(unit_factory(identity_core=None))

        assert codes(issues) == [IssueCode.MISSING_IDENTITY_CORE.value]
        assert issues[0].severity == Severity.WARNING

    def test_king_with_common_parts(self, rules, unit_factory):
        unit = unit_factory(archetype="king")
        unit["frame"]["rarity"] = "common"
        unit["identity_core"]["rarity"] = "common"

        issues = rules.validate_business_rules(unit)

        assert codes(issues) == [IssueCode.RARITY_BELOW_FLOOR.value, IssueCode.RARITY_BELOW_FLOOR.value]
        assert [i.field for i in issues] == ["frame", "identity_core"]
        assert all(i.severity == Severity.WARNING for i in issues)

    def test_king_at_floor_is_fine(self, rules, unit_factory):
        unit = unit_factory(archetype="king")
        unit["frame"]["rarity"] = "uncommon"

        assert rules.validate_business_rules(unit) == []

    def test_rogue_with_owner_is_warning(self, rules, unit_factory):
        issues = rules.validate_business_rules(unit_factory(archetype="rogue"))

        assert codes(issues) == [IssueCode.OWNER_ON_AUTONOMOUS_UNIT.value]
        assert issues[0].severity == Severity.WARNING

    def test_rogue_without_combat(self, rules, unit_factory):
        unit = unit_factory(archetype="rogue", owner_id=None, combat_role=None, components=[])

        issues = rules.validate_business_rules(unit)

        assert IssueCode.ROGUE_NO_COMBAT.value in codes(issues)

    def test_rogue_needs_no_identity_core(self, rules, unit_factory):
        unit = unit_factory(archetype="rogue", owner_id=None, identity_core=None)

        assert rules.validate_business_rules(unit) == []

    def test_govbot_with_owner_is_warning(self, rules, unit_factory):
        unit = unit_factory(archetype="govbot", government_type="security")

        issues = rules.validate_business_rules(unit)

        assert codes(issues) == [IssueCode.OWNER_ON_AUTONOMOUS_UNIT.value]
        assert issues[0].severity == Severity.WARNING

    def test_govbot_without_type(self, rules, unit_factory):
        issues = rules.validate_business_rules(unit_factory(archetype="govbot", owner_id=None))

        assert codes(issues) == [IssueCode.GOVBOT_NO_TYPE.value]

    def test_unknown_archetype_skips_archetype_rules(self, rules, unit_factory):
        assert rules.validate_business_rules(unit_factory(archetype="pirate", owner_id=None)) == []

    def test_capacity_overflow(self, rules, unit_factory, make_component):
        unit = unit_factory()
        unit["frame"]["slots"] = 4
        unit["components"] = [make_component("head"), make_component("torso")] + [
            make_component("arm", i) for i in range(4)
        ]

        issues = rules.validate_business_rules(unit)

        assert codes(issues) == [IssueCode.SLOT_CAPACITY_EXCEEDED.value]

    def test_missing_essential_components(self, rules, unit_factory, make_component):
        issues = rules.validate_business_rules(unit_factory(components=[make_component("arm")]))

        assert codes(issues) == [
            IssueCode.MISSING_ESSENTIAL_COMPONENT.value,
            IssueCode.MISSING_ESSENTIAL_COMPONENT.value,
        ]


class TestPerformance:
    """Tests for performance heuristics."""

    def test_valid_unit(self, rules, unit_factory):
        assert rules.validate_performance(unit_factory()) == []

    def test_too_many_components(self, rules, unit_factory):
        unit = unit_factory()
        unit["frame"]["slots"] = 1

        issues = rules.validate_performance(unit)

        assert codes(issues) == [IssueCode.TOO_MANY_COMPONENTS.value]
        assert issues[0].severity == Severity.WARNING
        assert issues[0].metadata == {"component_count": 4, "frame_slots": 1}

    def test_many_modifiers(self, rules, unit_factory):
        modifiers = [
            {"id": f"m{i}", "effect": "resistance", "rarity": "common", "upgrade_level": 0}
            for i in range(11)
        ]

        issues = rules.validate_performance(unit_factory(modifiers=modifiers))

        assert codes(issues) == [IssueCode.MANY_MODIFIERS.value]

    def test_declared_high_rating(self, rules, unit_factory):
        issues = rules.validate_performance(unit_factory(overall_rating=97.5))

        assert codes(issues) == [IssueCode.VERY_HIGH_RATING.value]
        assert issues[0].severity == Severity.INFO

    def test_computed_high_rating(self, rules, unit_factory):
        maxed = {"attack": 100, "defense": 100, "speed": 100, "perception": 100}
        components = [
            {"id": "head-1", "category": "head", "rarity": "prototype", "stats": maxed},
            {"id": "torso-1", "category": "torso", "rarity": "prototype", "stats": maxed},
        ]

        issues = rules.validate_performance(unit_factory(components=components))

        assert codes(issues) == [IssueCode.VERY_HIGH_RATING.value]

    def test_composite_rating_scaled_by_rarity(self, rules):
        unit = {"components": [
            {"category": "arm", "rarity": "legendary", "stats": {"attack": 20, "defense": 20, "speed": 20, "perception": 20}},
        ]}

        assert rules.composite_rating(unit) == pytest.approx(40.0)

    def test_composite_rating_without_components(self, rules):
        assert rules.composite_rating({"components": []}) is None


class TestCompatibility:
    """Tests for cross-part compatibility rules."""

    def test_valid_unit(self, rules, unit_factory):
        assert rules.validate_compatibility(unit_factory()) == []

    def test_rarity_mismatch(self, rules, unit_factory):
        unit = unit_factory()
        unit["frame"]["rarity"] = "common"
        unit["identity_core"]["rarity"] = "legendary"

        issues = rules.validate_compatibility(unit)

        assert codes(issues) == [IssueCode.RARITY_MISMATCH.value]
        assert issues[0].severity == Severity.INFO

    def test_small_rarity_gap_is_fine(self, rules, unit_factory):
        unit = unit_factory()
        unit["frame"]["rarity"] = "common"
        unit["identity_core"]["rarity"] = "epic"

        assert rules.validate_compatibility(unit) == []

    def test_worker_tracking_bond(self, rules, unit_factory):
        issues = rules.validate_compatibility(unit_factory(archetype="worker"))

        assert codes(issues) == [IssueCode.UNEXPECTED_BOND_TRACKING.value]
        assert issues[0].field == "state.bond_level"

    def test_worker_without_bond_is_fine(self, rules, unit_factory):
        unit = unit_factory(archetype="worker")
        unit["state"]["bond_level"] = None

        assert rules.validate_compatibility(unit) == []

    def test_conflicting_modifiers(self, rules, unit_factory):
        modifiers = [
            {"id": "m1", "effect": "speed_buff", "rarity": "rare", "upgrade_level": 2},
            {"id": "m2", "effect": "defense_buff", "rarity": "rare", "upgrade_level": 7},
        ]

        issues = rules.validate_compatibility(unit_factory(modifiers=modifiers))

        assert codes(issues) == [IssueCode.MODIFIER_CONFLICT.value]
        assert issues[0].severity == Severity.ERROR
        assert issues[0].metadata == {"pair": [0, 1]}

    def test_modifier_on_incompatible_frame(self, rules, unit_factory):
        unit = unit_factory()
        unit["frame"]["category"] = "flying"

        issues = rules.validate_compatibility(unit)

        assert codes(issues) == [IssueCode.MODIFIER_FRAME_INCOMPATIBLE.value]
        assert issues[0].field == "modifiers[0]"

    def test_invalid_frame_category_not_double_reported(self, rules, unit_factory):
        unit = unit_factory()
        unit["frame"]["category"] = "submarine"

        assert rules.validate_compatibility(unit) == []


class TestFinal:
    """Tests for whole-unit consistency."""

    def test_unique_part_ids(self, rules, unit_factory):
        assert rules.validate_final(unit_factory()) == []

    def test_duplicate_part_ids(self, rules, unit_factory):
        unit = unit_factory()
        unit["components"][1]["id"] = "head-1"
        unit["modifiers"][0]["id"] = "arm-1"

        issues = rules.validate_final(unit)

        assert codes(issues) == [IssueCode.DUPLICATE_PART_ID.value, IssueCode.DUPLICATE_PART_ID.value]
        assert "arm-1" in issues[0].message
        assert "head-1" in issues[1].message
