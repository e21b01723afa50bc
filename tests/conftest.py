"""
Pytest fixtures for botcheck tests.
"""

import pytest
from typing import Callable

from botcheck.config import Settings
from botcheck.log import configure_logging
from botcheck.models import (
    Component,
    ComponentCategory,
    EffectFamily,
    Frame,
    FrameCategory,
    IdentityCore,
    Modifier,
    Rarity,
    RuntimeState,
    Stats,
    UnitSnapshot,
)
from botcheck.validators import ValidationPipeline, UnitRuleSet


@pytest.fixture(scope="session", autouse=True)
def quiet_logging():
    configure_logging(Settings(_env_file=None, LOG_LEVEL="critical"))


@pytest.fixture
def settings() -> Settings:
    return Settings(_env_file=None)


@pytest.fixture
def pipeline(settings: Settings) -> ValidationPipeline:
    return ValidationPipeline(settings=settings)


@pytest.fixture
def rules(settings: Settings) -> UnitRuleSet:
    return UnitRuleSet(settings=settings)


@pytest.fixture
def playable_unit() -> UnitSnapshot:
    """A fully valid player-controlled unit: no issues at all."""
    return UnitSnapshot(
        id="unit-001",
        name="Vanguard",
        archetype="playable",
        owner_id="user-42",
        combat_role="assault",
        frame=Frame(id="frame-1", name="Balanced Frame", rarity=Rarity.RARE, category=FrameCategory.BALANCED, slots=6),
        components=[
            Component(id="head-1", category=ComponentCategory.HEAD, rarity=Rarity.RARE,
                      stats=Stats(attack=10, defense=20, speed=10, perception=40)),
            Component(id="torso-1", category=ComponentCategory.TORSO, rarity=Rarity.RARE,
                      stats=Stats(attack=5, defense=50, speed=5, perception=5)),
            Component(id="arm-1", category=ComponentCategory.ARM, rarity=Rarity.COMMON,
                      stats=Stats(attack=40, defense=10, speed=10, perception=5)),
            Component(id="leg-1", category=ComponentCategory.LEG, rarity=Rarity.COMMON,
                      stats=Stats(attack=5, defense=15, speed=45, perception=5)),
        ],
        modifiers=[
            Modifier(id="chip-atk", effect=EffectFamily.ATTACK_BUFF, rarity=Rarity.RARE, upgrade_level=2),
            Modifier(id="chip-spd", effect=EffectFamily.SPEED_BUFF, rarity=Rarity.RARE, upgrade_level=1),
        ],
        identity_core=IdentityCore(id="core-1", rarity=Rarity.RARE, personality=["brave"]),
        state=RuntimeState(id="state-1", bond_level=20),
    )


@pytest.fixture
def unit_factory(playable_unit: UnitSnapshot) -> Callable[..., dict]:
    """Build a plain-dict unit snapshot from the valid playable unit plus overrides."""

    def build(**overrides) -> dict:
        snapshot = playable_unit.model_dump(mode="json")
        snapshot.update(overrides)
        return snapshot

    return build


def component(category: str, index: int = 0, rarity: str = "common") -> dict:
    return {"id": f"{category}-{index}", "category": category, "rarity": rarity, "stats": {}}


@pytest.fixture
def make_component() -> Callable[..., dict]:
    return component
