"""Content rules engine.

This module provides:
- Verification of authored content into a handle-indexed Config
- Evalput trees for probabilistic rewards
- RecipeMakes for craft outputs
- Advancement ladders and the bonuses they add up to

Usage:
    from random import Random

    from steadcore.services.rules import (
        evaluate,
        find_possession_handle,
        possession_archetype,
        yaml_and_verify,
    )

    config = yaml_and_verify("../config")
    egg = possession_archetype(config, find_possession_handle(config, "Egg"))
    output = evaluate(egg.gotchi().hatch_table, Random())
    output.items  # handles of what hatched
"""

# Advancements
from .advancement import (
    Advancement,
    AdvancementSum,
    HacksteadAdvancement,
    HacksteadAdvancementSet,
    HacksteadAdvancementSum,
    LevelInfo,
    Neighbor,
    PlantAdvancement,
    PlantAdvancementSet,
    PlantAdvancementSum,
    PlantYield,
)

# Bonus aggregation
from .bonuses import (
    AdjacencyQuery,
    effect_advancements,
    land_unlock_eligible,
    neighbor_advancements,
    neighborless_advancements_sum,
    plant_advancements_max_sum,
    plant_advancements_sum,
    plant_sums,
    profile_advancements_sum,
)

# Content model
from .content import (
    Archetype,
    ArchetypeHandle,
    Config,
    ItemApplicationEffect,
    PlantArchetype,
    ProfileArchetype,
)
from .entities import Item, Plant, PlantEffect, Profile

# Errors
from .errors import (
    ConfigError,
    UnknownArchetypeHandle,
    UnknownArchetypeName,
    UnknownEffect,
    VerifError,
)

# Evalput
from .evalput import EvalputNode, Output, evaluate, parse_evalput, parse_repeats

# Handles
from .handles import (
    check_handles,
    find_plant_handle,
    find_possession_handle,
    item_application_effect,
    land_unlockers,
    plant_archetype,
    plant_archetype_to_handle,
    possession_archetype,
    possession_archetype_to_handle,
    recipes,
    seeds,
    welcome_gifts,
)

# Loading
from .parse import load_raw_config, yaml_and_verify
from .recipe import Recipe, RecipeMakesNode, parse_recipe_makes
from .registry import ConfigRegistry, get_config, init_config
from .snapshot import (
    read_binary_snapshot,
    read_json_snapshot,
    write_binary_snapshot,
    write_json_snapshot,
)
from .verification import RawConfig, verify

__all__ = [
    # Advancements
    "Advancement",
    "AdvancementSum",
    "HacksteadAdvancement",
    "HacksteadAdvancementSet",
    "HacksteadAdvancementSum",
    "LevelInfo",
    "Neighbor",
    "PlantAdvancement",
    "PlantAdvancementSet",
    "PlantAdvancementSum",
    "PlantYield",
    # Bonus aggregation
    "AdjacencyQuery",
    "effect_advancements",
    "land_unlock_eligible",
    "neighbor_advancements",
    "neighborless_advancements_sum",
    "plant_advancements_max_sum",
    "plant_advancements_sum",
    "plant_sums",
    "profile_advancements_sum",
    # Content model
    "Archetype",
    "ArchetypeHandle",
    "Config",
    "ItemApplicationEffect",
    "PlantArchetype",
    "ProfileArchetype",
    "Item",
    "Plant",
    "PlantEffect",
    "Profile",
    # Errors
    "ConfigError",
    "UnknownArchetypeHandle",
    "UnknownArchetypeName",
    "UnknownEffect",
    "VerifError",
    # Evalput
    "EvalputNode",
    "Output",
    "evaluate",
    "parse_evalput",
    "parse_repeats",
    # Handles
    "check_handles",
    "find_plant_handle",
    "find_possession_handle",
    "item_application_effect",
    "land_unlockers",
    "plant_archetype",
    "plant_archetype_to_handle",
    "possession_archetype",
    "possession_archetype_to_handle",
    "recipes",
    "seeds",
    "welcome_gifts",
    # Loading
    "ConfigRegistry",
    "RawConfig",
    "get_config",
    "init_config",
    "load_raw_config",
    "read_binary_snapshot",
    "read_json_snapshot",
    "verify",
    "write_binary_snapshot",
    "write_json_snapshot",
    "yaml_and_verify",
    # Recipes
    "Recipe",
    "RecipeMakesNode",
    "parse_recipe_makes",
]
