"""Handle resolution against a verified Config.

A handle is a position in one of the config's archetype lists. Handles are
only meaningful against the config they were resolved from; nothing here
caches across configs.
"""

import logging
from collections.abc import Iterator
from typing import Any

from .advancement import CraftBonus, Neighbor, PlantAdvancement, PlantBonus, YieldBonus
from .content import (
    Archetype,
    ArchetypeHandle,
    Config,
    GotchiArchetype,
    ItemApplicationEffect,
    KeepsakeArchetype,
    PlantArchetype,
    SeedArchetype,
)
from .errors import UnknownArchetypeHandle, UnknownArchetypeName, UnknownEffect
from .recipe import Recipe

logger = logging.getLogger(__name__)


# =============================================================================
# Name -> handle
# =============================================================================


def find_plant_handle(config: Config, name: str) -> ArchetypeHandle:
    for handle, archetype in enumerate(config.plant_archetypes):
        if archetype.name == name:
            return handle
    raise UnknownArchetypeName(name)


def find_possession_handle(config: Config, name: str) -> ArchetypeHandle:
    for handle, archetype in enumerate(config.possession_archetypes):
        if archetype.name == name:
            return handle
    raise UnknownArchetypeName(name)


# =============================================================================
# Handle -> archetype
# =============================================================================


def plant_archetype(config: Config, handle: ArchetypeHandle) -> PlantArchetype:
    if not 0 <= handle < len(config.plant_archetypes):
        raise UnknownArchetypeHandle(handle)
    return config.plant_archetypes[handle]


def possession_archetype(config: Config, handle: ArchetypeHandle) -> Archetype:
    if not 0 <= handle < len(config.possession_archetypes):
        raise UnknownArchetypeHandle(handle)
    return config.possession_archetypes[handle]


# =============================================================================
# Archetype -> handle
# =============================================================================


def plant_archetype_to_handle(config: Config, archetype: PlantArchetype) -> ArchetypeHandle:
    for handle, candidate in enumerate(config.plant_archetypes):
        if candidate == archetype:
            return handle
    raise UnknownArchetypeName(archetype.name)


def possession_archetype_to_handle(config: Config, archetype: Archetype) -> ArchetypeHandle:
    for handle, candidate in enumerate(config.possession_archetypes):
        if candidate == archetype:
            return handle
    raise UnknownArchetypeName(archetype.name)


def item_application_effect(
    config: Config, item: ArchetypeHandle, effect_index: int
) -> ItemApplicationEffect:
    """Look up one of the plant effects a keepsake item can apply.

    Raises:
        UnknownArchetypeHandle: If the item handle is out of range.
        UnknownEffect: If the item has no plant effect at effect_index.
    """
    keepsake = possession_archetype(config, item).keepsake()
    if keepsake is None or not 0 <= effect_index < len(keepsake.plant_effects):
        raise UnknownEffect(item, effect_index)
    return keepsake.plant_effects[effect_index]


# =============================================================================
# Queries
# =============================================================================


def welcome_gifts(config: Config) -> list[Archetype]:
    return [a for a in config.possession_archetypes if a.welcome_gift]


def seeds(config: Config) -> list[tuple[ArchetypeHandle, Archetype]]:
    return [(h, a) for h, a in enumerate(config.possession_archetypes) if a.seed() is not None]


def land_unlockers(config: Config) -> list[tuple[ArchetypeHandle, Archetype]]:
    return [
        (h, a)
        for h, a in enumerate(config.possession_archetypes)
        if a.keepsake() is not None and a.keepsake().unlocks_land is not None
    ]


def recipes(config: Config) -> list[tuple[ArchetypeHandle, Recipe]]:
    """Every recipe any plant can learn, with the plant that learns it."""
    found = []
    for handle, plant in enumerate(config.plant_archetypes):
        for advancement in plant.advancements.all():
            kind = _unwrap(advancement.kind)
            if isinstance(kind, CraftBonus):
                found.extend((handle, recipe) for recipe in kind.recipes)
    return found


# =============================================================================
# Integrity
# =============================================================================


def _unwrap(kind: PlantBonus) -> PlantBonus:
    while isinstance(kind, Neighbor):
        kind = kind.inner
    return kind


def _advancement_item_handles(advancement: PlantAdvancement) -> Iterator[Any]:
    kind = _unwrap(advancement.kind)
    if isinstance(kind, YieldBonus):
        yield from (y.dropped_item for y in kind.yields)
    elif isinstance(kind, CraftBonus):
        for recipe in kind.recipes:
            yield from recipe.iter_items()


def check_handles(config: Config) -> None:
    """Raise if any handle stored in the config points outside it.

    Verification guarantees this for freshly built configs; snapshots read
    from disk are checked again on load.
    """
    items = len(config.possession_archetypes)
    plants = len(config.plant_archetypes)

    def check_item(handle: Any) -> None:
        if not isinstance(handle, int) or not 0 <= handle < items:
            raise UnknownArchetypeHandle(handle)

    def check_plant(handle: Any) -> None:
        if not isinstance(handle, int) or not 0 <= handle < plants:
            raise UnknownArchetypeHandle(handle)

    for archetype in config.possession_archetypes:
        kind = archetype.kind
        if isinstance(kind, SeedArchetype):
            check_plant(kind.grows_into)
        elif isinstance(kind, GotchiArchetype) and kind.hatch_table is not None:
            for handle in kind.hatch_table.iter_items():
                check_item(handle)
        elif isinstance(kind, KeepsakeArchetype):
            for effect in kind.plant_effects:
                for handle in getattr(effect.for_plants, "plants", []):
                    check_plant(handle)
                for handle in _advancement_item_handles(effect.advancement):
                    check_item(handle)

    for plant in config.plant_archetypes:
        for advancement in plant.advancements.all():
            for handle in _advancement_item_handles(advancement):
                check_item(handle)

    logger.debug("Config handles checked: items=%d, plants=%d", items, plants)
