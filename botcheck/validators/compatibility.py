"""Compatibility Engine — synergy, conflict and effect calculations for equipped modifiers.

Every lookup is driven by the declarative ``ModifierProfile`` tables. Lookups
never raise: malformed modifiers and undeclared pairs yield no synergy and no
conflict.

Usage:
    engine = CompatibilityEngine()
    engine.synergy_bonus(attack_chip, speed_chip)   # → 0.15
    engine.conflicts(speed_chip, heavy_defense_chip)
"""

import math
from enum import Enum
from typing import Any, Mapping, Optional, Sequence

from pydantic import BaseModel, Field

from botcheck.validators.reference_data import HIGH_MAGNITUDE_THRESHOLD
from botcheck.validators.tables import ModifierProfile, RuleTables, default_rule_tables

DEFAULT_EFFECT_DURATION = 60


class SpecialModeState(BaseModel):
    """A family's special mode as it stands for one modifier."""

    name: str
    enabled: bool
    trigger: str
    magnitude_factor: float
    duration: int
    cooldown: int
    energy_factor: float


class AdvancedEffects(BaseModel):
    effect: str
    magnitude: float
    secondary: dict[str, float] = Field(default_factory=dict)
    special_mode: Optional[SpecialModeState] = None


class EffectApplication(BaseModel):
    """Result of applying a modifier's effect under given runtime conditions."""

    success: bool = True
    applied_magnitude: float
    duration: int
    energy_cost: float
    side_effects: list[str] = Field(default_factory=list)


def _as_mapping(modifier: Any) -> Optional[Mapping]:
    if isinstance(modifier, BaseModel):
        return modifier.model_dump(mode="json")
    if isinstance(modifier, Mapping):
        return modifier
    return None


def _text(value: Any) -> Optional[str]:
    if isinstance(value, Enum):
        value = value.value
    return value if isinstance(value, str) else None


def _level(fields: Mapping) -> int:
    level = fields.get("upgrade_level", 0)
    if isinstance(level, bool) or not isinstance(level, int) or level < 0:
        return 0
    return level


class CompatibilityEngine:
    """Pairwise synergy/conflict calculator and effect model for modifiers."""

    def __init__(self, tables: Optional[RuleTables] = None):
        self.tables = tables or default_rule_tables()

    # ── Lookups ──

    def _profile(self, fields: Mapping) -> ModifierProfile:
        effect = _text(fields.get("effect"))
        return self.tables.profile_for(effect) if effect else ModifierProfile()

    def max_upgrade_level(self, rarity: Any) -> int:
        levels = self.tables.max_upgrade_levels
        return levels.get(_text(rarity) or "", levels.get("common", 0))

    def effect_magnitude(self, modifier: Any) -> float:
        """Declared finite magnitude, or the rarity base plus the per-level upgrade bonus."""
        fields = _as_mapping(modifier) or {}
        magnitude = fields.get("magnitude")
        if (
            isinstance(magnitude, (int, float))
            and not isinstance(magnitude, bool)
            and math.isfinite(magnitude)
        ):
            return float(magnitude)

        bases = self.tables.base_magnitudes
        base = bases.get(_text(fields.get("rarity")) or "", bases.get("common", 0.0))
        return base + _level(fields) * self.tables.upgrade_step

    def energy_cost(self, modifier: Any) -> int:
        fields = _as_mapping(modifier) or {}
        magnitude = self.effect_magnitude(fields)
        return math.ceil(1 + magnitude * 10 * (1 + _level(fields) * 0.1))

    # ── Synergy ──

    def synergy_bonus(self, modifier: Any, other: Any) -> float:
        """Bonus ``modifier`` declares for pairing with ``other``'s effect family.

        Directional: only ``modifier``'s own table is consulted.
        """
        a, b = _as_mapping(modifier), _as_mapping(other)
        if a is None or b is None:
            return 0.0
        partner = _text(b.get("effect"))
        if partner is None:
            return 0.0
        return float(self._profile(a).synergies.get(partner, 0.0))

    def loadout_synergy(self, modifiers: Sequence[Any]) -> float:
        """Sum of directional bonuses over every ordered pair in a loadout."""
        total = 0.0
        for i, modifier in enumerate(modifiers):
            for j, other in enumerate(modifiers):
                if i != j:
                    total += self.synergy_bonus(modifier, other)
        return total

    # ── Conflict ──

    def _declares_conflict(self, a: Mapping, b: Mapping) -> bool:
        partner = _text(b.get("effect"))
        if partner is None:
            return False
        for rule in self._profile(a).conflicts:
            if rule.effect != partner:
                continue
            level = _level(a) if rule.subject == "self" else _level(b)
            if level >= rule.min_upgrade_level:
                return True
        return False

    def conflicts(self, modifier: Any, other: Any) -> bool:
        """True if either modifier's rules declare a conflict with the other."""
        a, b = _as_mapping(modifier), _as_mapping(other)
        if a is None or b is None:
            return False
        return self._declares_conflict(a, b) or self._declares_conflict(b, a)

    def find_conflicts(self, modifiers: Sequence[Any]) -> list[tuple[int, int]]:
        """Index pairs (i < j) of conflicting modifiers."""
        return [
            (i, j)
            for i in range(len(modifiers))
            for j in range(i + 1, len(modifiers))
            if self.conflicts(modifiers[i], modifiers[j])
        ]

    def is_frame_compatible(self, modifier: Any, frame_category: Any) -> bool:
        fields = _as_mapping(modifier)
        category = _text(frame_category)
        if fields is None or category is None:
            return True
        return category in self._profile(fields).compatible_frames

    # ── Effects ──

    def advanced_effects(self, modifier: Any) -> AdvancedEffects:
        """Secondary bonuses and special-mode state derived from magnitude and level."""
        fields = _as_mapping(modifier) or {}
        profile = self._profile(fields)
        magnitude = self.effect_magnitude(fields)

        special = None
        if profile.special_mode is not None:
            mode = profile.special_mode
            special = SpecialModeState(
                name=mode.name,
                enabled=_level(fields) >= mode.unlock_level,
                trigger=mode.trigger,
                magnitude_factor=mode.magnitude_factor,
                duration=mode.duration,
                cooldown=mode.cooldown,
                energy_factor=mode.energy_factor,
            )

        return AdvancedEffects(
            effect=_text(fields.get("effect")) or "",
            magnitude=magnitude,
            secondary={stat: magnitude * ratio for stat, ratio in profile.secondary_effects.items()},
            special_mode=special,
        )

    def apply_effect(
        self,
        modifier: Any,
        conditions: Optional[Mapping[str, Any]] = None,
        duration: int = DEFAULT_EFFECT_DURATION,
    ) -> EffectApplication:
        """Apply a modifier's effect, activating its special mode when triggered.

        Args:
            modifier: Modifier snapshot (dict or model)
            conditions: Runtime condition flags, e.g. {"low_health": True}
            duration: Effect duration in seconds outside the special mode

        Returns:
            EffectApplication with the applied magnitude, duration and energy cost
        """
        conditions = conditions or {}
        magnitude = self.effect_magnitude(modifier)
        energy = float(self.energy_cost(modifier))
        effects = self.advanced_effects(modifier)
        mode = effects.special_mode

        side_effects = []
        if mode is not None and mode.enabled and conditions.get(mode.trigger):
            magnitude *= mode.magnitude_factor
            duration = mode.duration
            energy *= mode.energy_factor
            side_effects.append(f"{mode.name}_active")
        if effects.magnitude > HIGH_MAGNITUDE_THRESHOLD:
            side_effects.append("increased_energy_consumption")

        return EffectApplication(
            applied_magnitude=magnitude,
            duration=duration,
            energy_cost=energy,
            side_effects=side_effects,
        )
