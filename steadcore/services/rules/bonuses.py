"""Bonus aggregation for plants and profiles.

A plant's bonuses come from three places:
- its own unlocked ladder rungs, minus the Neighbor ones
- the consumable effects currently applied to it
- the Neighbor rungs (and Neighbor effects) of the plants next to it

Which plants are next to which is not known here. Callers pass the
neighbors in, typically from whatever tracks the farm's layout.
"""

import logging
from collections.abc import Callable, Iterable
from uuid import UUID

from .advancement import (
    HacksteadAdvancementSum,
    Neighbor,
    PlantAdvancement,
    PlantAdvancementSum,
)
from .content import Config
from .entities import Plant, Profile
from .handles import item_application_effect

logger = logging.getLogger(__name__)

# Given a plant, the plants adjacent to it
AdjacencyQuery = Callable[[Plant], Iterable[Plant]]


def effect_advancements(plant: Plant, config: Config) -> list[PlantAdvancement]:
    """Advancements granted by consumables applied to the plant."""
    found = []
    for effect in plant.effects:
        application = item_application_effect(
            config, effect.item_archetype_handle, effect.effect_archetype_handle
        )
        if application.for_plants.allows(plant.archetype_handle):
            found.append(application.advancement)
        else:
            logger.debug(
                "Effect not allowed on plant: item=%d, effect=%d, plant=%d",
                effect.item_archetype_handle,
                effect.effect_archetype_handle,
                plant.archetype_handle,
            )
    return found


def neighbor_advancements(neighbors: Iterable[Plant], config: Config) -> list[PlantAdvancement]:
    """The Neighbor rungs the given plants pass on to the plant beside them."""
    found = []
    for neighbor in neighbors:
        ladder = neighbor.archetype(config).advancements
        candidates = ladder.unlocked(neighbor.xp) + effect_advancements(neighbor, config)
        found.extend(a for a in candidates if isinstance(a.kind, Neighbor))
    return found


def _own_extras(plant: Plant, config: Config) -> list[PlantAdvancement]:
    # A Neighbor effect applied to this plant is meant for the plants around it
    return [a for a in effect_advancements(plant, config) if PlantAdvancementSum.filter_base(a)]


def plant_advancements_sum(
    plant: Plant, config: Config, neighbors: Iterable[Plant] = ()
) -> PlantAdvancementSum:
    extra = _own_extras(plant, config) + neighbor_advancements(neighbors, config)
    return plant.archetype(config).advancements.sum(plant.xp, extra)


def plant_advancements_max_sum(
    plant: Plant, config: Config, neighbors: Iterable[Plant] = ()
) -> PlantAdvancementSum:
    """What the plant's sum would be with its whole ladder unlocked."""
    extra = _own_extras(plant, config) + neighbor_advancements(neighbors, config)
    return plant.archetype(config).advancements.max(extra)


def neighborless_advancements_sum(plant: Plant, config: Config) -> PlantAdvancementSum:
    """Everything the plant has unlocked, its Neighbor rungs included, ignoring its neighbors."""
    return plant.archetype(config).advancements.raw_sum(
        plant.xp, effect_advancements(plant, config)
    )


def plant_sums(
    plants: Iterable[Plant], config: Config, adjacency: AdjacencyQuery
) -> dict[UUID, PlantAdvancementSum]:
    """Sum every plant on a farm, keyed by tile."""
    return {
        plant.tile_id: plant_advancements_sum(plant, config, adjacency(plant)) for plant in plants
    }


def profile_advancements_sum(profile: Profile, config: Config) -> HacksteadAdvancementSum:
    return config.profile_archetype.advancements.sum(profile.xp)


def land_unlock_eligible(profile: Profile, land_count: int, config: Config) -> bool:
    """Whether the profile may unlock another piece of land."""
    allowed = profile_advancements_sum(profile, config).land + profile.extra_land_plot_count
    return land_count < allowed
