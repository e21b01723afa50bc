"""Typed entity snapshots and their closed enumerations."""

from botcheck.models.entities import (
    Archetype,
    CombatRole,
    Component,
    ComponentCategory,
    EffectFamily,
    Frame,
    FrameCategory,
    GovernmentType,
    IdentityCore,
    Modifier,
    Rarity,
    RuntimeState,
    Stats,
    UnitSnapshot,
    UtilitySpecialization,
)

__all__ = [
    "Archetype",
    "CombatRole",
    "Component",
    "ComponentCategory",
    "EffectFamily",
    "Frame",
    "FrameCategory",
    "GovernmentType",
    "IdentityCore",
    "Modifier",
    "Rarity",
    "RuntimeState",
    "Stats",
    "UnitSnapshot",
    "UtilitySpecialization",
]
