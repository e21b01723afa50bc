"""Reference data — rarity scaling, archetype policies, modifier declarations.

This is the encoded game-design knowledge that makes validation deterministic.
Keys are the plain string values used in entity snapshots. Nothing here is
mutated at runtime; pipelines receive it through ``RuleTables``.
"""

# ──────────────────────────────────────────────────────────────────────
# RARITY SCALING
# ──────────────────────────────────────────────────────────────────────

# Stat multiplier applied to component stats
RARITY_MULTIPLIERS: dict[str, float] = {
    "common": 1.0,
    "uncommon": 1.2,
    "rare": 1.4,
    "epic": 1.7,
    "legendary": 2.0,
    "ultra-rare": 2.5,
    "prototype": 3.0,
}

# Modifier effect magnitude before upgrades
MODIFIER_BASE_MAGNITUDE: dict[str, float] = {
    "common": 0.05,
    "uncommon": 0.08,
    "rare": 0.12,
    "epic": 0.18,
    "legendary": 0.25,
    "ultra-rare": 0.35,
    "prototype": 0.50,
}

MODIFIER_UPGRADE_STEP = 0.02  # Additional magnitude per upgrade level

MODIFIER_MAX_UPGRADE_LEVEL: dict[str, int] = {
    "common": 5,
    "uncommon": 7,
    "rare": 10,
    "epic": 12,
    "legendary": 15,
    "ultra-rare": 18,
    "prototype": 20,
}

# Above this magnitude a modifier draws noticeably more energy
HIGH_MAGNITUDE_THRESHOLD = 0.3


# ──────────────────────────────────────────────────────────────────────
# ASSEMBLY
# ──────────────────────────────────────────────────────────────────────

ESSENTIAL_COMPONENT_CATEGORIES: tuple[str, ...] = ("head", "torso")

# Stats averaged into a component's combat rating
COMBAT_RATING_AXES: tuple[str, ...] = ("attack", "defense", "speed", "perception")


# ──────────────────────────────────────────────────────────────────────
# ARCHETYPE POLICIES
# ──────────────────────────────────────────────────────────────────────
#
# ownership:          required | forbidden | optional
# ownership_strict:   mismatch is an ERROR (True) or a WARNING (False)
# identity_core:      expected | discouraged | optional
# tracks_bond:        runtime state may carry a bond level
# rarity_floor:       minimum rarity for frame and identity core
# combat_role:        required | discouraged | optional

ARCHETYPE_POLICIES: dict[str, dict] = {
    "worker": {
        "ownership": "optional",
        "ownership_strict": False,
        "identity_core": "discouraged",
        "tracks_bond": False,
        "rarity_floor": None,
        "combat_role": "discouraged",
    },
    "playable": {
        "ownership": "required",
        "ownership_strict": True,
        "identity_core": "expected",
        "tracks_bond": True,
        "rarity_floor": None,
        "combat_role": "required",
    },
    "king": {
        "ownership": "required",
        "ownership_strict": True,
        "identity_core": "expected",
        "tracks_bond": True,
        "rarity_floor": "uncommon",
        "combat_role": "optional",
    },
    "rogue": {
        "ownership": "forbidden",
        "ownership_strict": False,
        "identity_core": "optional",
        "tracks_bond": True,
        "rarity_floor": None,
        "combat_role": "optional",
    },
    "govbot": {
        "ownership": "forbidden",
        "ownership_strict": False,
        "identity_core": "optional",
        "tracks_bond": True,
        "rarity_floor": None,
        "combat_role": "optional",
    },
}


# ──────────────────────────────────────────────────────────────────────
# MODIFIER DECLARATIONS (per effect family)
# ──────────────────────────────────────────────────────────────────────
#
# synergies:          bonus fraction when paired with another effect family.
#                     Directional; the partner's table may say otherwise.
# conflicts:          effect family + upgrade-level threshold. "subject" says
#                     whose level is compared: the other modifier (default)
#                     or the declaring modifier itself.
# compatible_frames:  frame categories the modifier is designed for
# secondary_effects:  fraction of magnitude feeding each secondary stat
# special_mode:       unlockable mode triggered by a runtime condition flag

ALL_FRAME_CATEGORIES: tuple[str, ...] = ("light", "balanced", "heavy", "flying", "modular")

MODIFIER_PROFILES: dict[str, dict] = {
    "attack_buff": {
        "synergies": {
            "speed_buff": 0.15,
            "ai_upgrade": 0.10,
            "stat_boost": 0.08,
        },
        "conflicts": [
            # High-level attack buffs consume too much energy
            {"effect": "energy_efficiency", "min_upgrade_level": 8, "subject": "self"},
        ],
        "compatible_frames": ("light", "balanced", "heavy", "modular"),
        "secondary_effects": {
            "critical_hit_chance": 0.3,
            "weapon_proficiency": 0.5,
            "damage_penetration": 0.2,
            "charge_attack_bonus": 1.5,
        },
        "special_mode": {
            "name": "berserker_mode",
            "unlock_level": 5,
            "trigger": "low_health",
            "magnitude_factor": 2.0,
            "duration": 15,
            "cooldown": 60,
            "energy_factor": 1.5,
        },
    },
    "speed_buff": {
        "synergies": {
            "attack_buff": 0.15,
            "ai_upgrade": 0.12,
            "energy_efficiency": 0.10,
        },
        "conflicts": [
            # Heavy defense impedes speed
            {"effect": "defense_buff", "min_upgrade_level": 7},
        ],
        "compatible_frames": ("light", "balanced", "flying", "modular"),
        "secondary_effects": {
            "acceleration_bonus": 1.5,
            "evasion_chance": 0.4,
            "reaction_time": 0.8,
            "stamina_efficiency": 0.6,
            "dash_ability": 0.3,
        },
        "special_mode": {
            "name": "time_dilation",
            "unlock_level": 8,
            "trigger": "precision_mode",
            "magnitude_factor": 2.0,
            "duration": 5,
            "cooldown": 45,
            "energy_factor": 2.0,
        },
    },
}
