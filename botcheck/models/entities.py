"""Entity snapshot models — the assembled unit and the artifacts it is built from.

Snapshots are immutable value objects. The validation pipeline works on their
plain-dict form (``model_dump(mode="json")``), so callers may equally hand it
records loaded from storage without going through these models.
"""

from enum import Enum
from typing import Optional
from pydantic import BaseModel, Field


class Rarity(str, Enum):
    """Ordered rarity tiers, lowest first."""

    COMMON = "common"
    UNCOMMON = "uncommon"
    RARE = "rare"
    EPIC = "epic"
    LEGENDARY = "legendary"
    ULTRA_RARE = "ultra-rare"
    PROTOTYPE = "prototype"

    @property
    def tier(self) -> int:
        return list(Rarity).index(self)


class Archetype(str, Enum):
    """Closed set of assembled-unit categories driving business rules."""

    WORKER = "worker"
    PLAYABLE = "playable"
    KING = "king"
    ROGUE = "rogue"
    GOVBOT = "govbot"


class FrameCategory(str, Enum):
    LIGHT = "light"
    BALANCED = "balanced"
    HEAVY = "heavy"
    FLYING = "flying"
    MODULAR = "modular"


class ComponentCategory(str, Enum):
    ARM = "arm"
    LEG = "leg"
    TORSO = "torso"
    HEAD = "head"
    ACCESSORY = "accessory"


class EffectFamily(str, Enum):
    """Effect granted by an equipped modifier."""

    ATTACK_BUFF = "attack_buff"
    DEFENSE_BUFF = "defense_buff"
    SPEED_BUFF = "speed_buff"
    AI_UPGRADE = "ai_upgrade"
    ENERGY_EFFICIENCY = "energy_efficiency"
    SPECIAL_ABILITY = "special_ability"
    STAT_BOOST = "stat_boost"
    RESISTANCE = "resistance"


class CombatRole(str, Enum):
    ASSAULT = "assault"
    TANK = "tank"
    SNIPER = "sniper"
    SCOUT = "scout"


class UtilitySpecialization(str, Enum):
    CONSTRUCTION = "construction"
    MINING = "mining"
    REPAIR = "repair"
    TRANSPORT = "transport"


class GovernmentType(str, Enum):
    ADMIN = "admin"
    SECURITY = "security"
    MAINTENANCE = "maintenance"


class Snapshot(BaseModel):
    """Base for all immutable snapshots."""

    model_config = {"frozen": True, "use_enum_values": True}


class Stats(Snapshot):
    attack: float = 0.0
    defense: float = 0.0
    speed: float = 0.0
    perception: float = 0.0
    energy_consumption: float = 0.0


class Frame(Snapshot):
    """Structural chassis — declares how many components it can hold."""

    id: str
    name: str = ""
    rarity: Rarity = Rarity.COMMON
    category: FrameCategory = FrameCategory.BALANCED
    slots: int = Field(default=4, ge=0)


class Component(Snapshot):
    id: str
    name: str = ""
    category: ComponentCategory
    rarity: Rarity = Rarity.COMMON
    stats: Stats = Field(default_factory=Stats)


class Modifier(Snapshot):
    """An equippable artifact granting a gameplay effect (expansion chip)."""

    id: str
    name: str = ""
    effect: EffectFamily
    rarity: Rarity = Rarity.COMMON
    upgrade_level: int = Field(default=0, ge=0)
    magnitude: Optional[float] = None  # None → derived from rarity and upgrade level


class IdentityCore(Snapshot):
    """Identity-defining component (soul chip) carrying personality traits."""

    id: str
    name: str = ""
    rarity: Rarity = Rarity.COMMON
    personality: list[str] = Field(default_factory=list)


class RuntimeState(Snapshot):
    id: str
    energy_level: int = 100
    health_level: int = 100
    level: int = 1
    experience: int = 0
    bond_level: Optional[int] = None  # Social-bond tracking, non-worker units only


class UnitSnapshot(Snapshot):
    """A fully assembled unit, as handed to the validation pipeline."""

    id: str
    name: str
    archetype: Archetype
    owner_id: Optional[str] = None
    frame: Optional[Frame] = None
    components: list[Component] = Field(default_factory=list)
    modifiers: list[Modifier] = Field(default_factory=list)
    identity_core: Optional[IdentityCore] = None
    state: Optional[RuntimeState] = None
    combat_role: Optional[CombatRole] = None
    utility_specialization: Optional[UtilitySpecialization] = None
    government_type: Optional[GovernmentType] = None
    overall_rating: Optional[float] = None
