"""Rule tables — typed, read-only configuration injected into pipelines.

``default_rule_tables()`` builds the standard tables from ``reference_data``;
tests and alternative game modes construct their own ``RuleTables`` instead of
patching module globals.
"""

from functools import lru_cache
from typing import Literal, Optional
from pydantic import BaseModel, Field

from botcheck.models.entities import Rarity
from botcheck.validators import reference_data


class ConflictRule(BaseModel):
    """Pairing with ``effect`` is a hard conflict once the subject's level reaches the threshold."""

    effect: str
    min_upgrade_level: int = Field(default=0, ge=0)
    subject: Literal["other", "self"] = "other"

    model_config = {"frozen": True}


class SpecialMode(BaseModel):
    name: str
    unlock_level: int = Field(ge=0)
    trigger: str  # Condition flag that activates the mode
    magnitude_factor: float
    duration: int
    cooldown: int
    energy_factor: float

    model_config = {"frozen": True}


class ModifierProfile(BaseModel):
    """Declarative behaviour of one modifier effect family."""

    synergies: dict[str, float] = Field(default_factory=dict)
    conflicts: list[ConflictRule] = Field(default_factory=list)
    compatible_frames: tuple[str, ...] = reference_data.ALL_FRAME_CATEGORIES
    secondary_effects: dict[str, float] = Field(default_factory=dict)
    special_mode: Optional[SpecialMode] = None

    model_config = {"frozen": True}


class ArchetypePolicy(BaseModel):
    """Required and forbidden attributes of one archetype."""

    ownership: Literal["required", "forbidden", "optional"] = "optional"
    ownership_strict: bool = False
    identity_core: Literal["expected", "discouraged", "optional"] = "optional"
    tracks_bond: bool = True
    rarity_floor: Optional[Rarity] = None
    combat_role: Literal["required", "discouraged", "optional"] = "optional"

    model_config = {"frozen": True, "use_enum_values": True}


class RuleTables(BaseModel):
    """Every static lookup table the engine consults."""

    archetype_policies: dict[str, ArchetypePolicy]
    modifier_profiles: dict[str, ModifierProfile] = Field(default_factory=dict)
    essential_categories: tuple[str, ...] = reference_data.ESSENTIAL_COMPONENT_CATEGORIES
    rarity_multipliers: dict[str, float] = Field(
        default_factory=lambda: dict(reference_data.RARITY_MULTIPLIERS)
    )
    base_magnitudes: dict[str, float] = Field(
        default_factory=lambda: dict(reference_data.MODIFIER_BASE_MAGNITUDE)
    )
    max_upgrade_levels: dict[str, int] = Field(
        default_factory=lambda: dict(reference_data.MODIFIER_MAX_UPGRADE_LEVEL)
    )
    upgrade_step: float = reference_data.MODIFIER_UPGRADE_STEP

    model_config = {"frozen": True}

    def policy_for(self, archetype: str) -> Optional[ArchetypePolicy]:
        return self.archetype_policies.get(archetype)

    def profile_for(self, effect: str) -> ModifierProfile:
        return self.modifier_profiles.get(effect) or ModifierProfile()


def rarity_tier(value) -> Optional[int]:
    """Position of a rarity in the ordered enumeration, or None if unknown."""
    try:
        return Rarity(value).tier
    except (ValueError, TypeError):
        return None


@lru_cache
def default_rule_tables() -> RuleTables:
    return RuleTables(
        archetype_policies={
            name: ArchetypePolicy(**policy)
            for name, policy in reference_data.ARCHETYPE_POLICIES.items()
        },
        modifier_profiles={
            effect: ModifierProfile(**profile)
            for effect, profile in reference_data.MODIFIER_PROFILES.items()
        },
    )
