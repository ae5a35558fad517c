from typing import Annotated, Literal, Union

from pydantic import BaseModel, ConfigDict, Field

from .advancement import (
    HacksteadAdvancementSet,
    PlantAdvancement,
    PlantAdvancementSet,
)
from .evalput import Evalput

# Index into Config.plant_archetypes or Config.possession_archetypes
ArchetypeHandle = int


# Which plants an item application effect may be used on
class PlantFilterBase(BaseModel):
    model_config = ConfigDict(frozen=True)

    filter: str

    def allows(self, plant: ArchetypeHandle) -> bool:
        raise NotImplementedError


class AllPlants(PlantFilterBase):
    filter: Literal["all"] = "all"

    def allows(self, plant: ArchetypeHandle) -> bool:
        return True


class OnlyPlants(PlantFilterBase):
    filter: Literal["only"] = "only"
    plants: list[ArchetypeHandle]

    def allows(self, plant: ArchetypeHandle) -> bool:
        return plant in self.plants


class NotPlants(PlantFilterBase):
    filter: Literal["not"] = "not"
    plants: list[ArchetypeHandle]

    def allows(self, plant: ArchetypeHandle) -> bool:
        return plant not in self.plants


PlantFilter = Annotated[Union[AllPlants, OnlyPlants, NotPlants], Field(discriminator="filter")]


class ItemApplicationEffect(BaseModel):
    """A consumable's effect on the plant it is rubbed onto."""

    model_config = ConfigDict(frozen=True)

    description: str
    duration: float | None = Field(None, description="Ticks the effect lasts, None for forever")
    for_plants: PlantFilter = Field(default_factory=AllPlants)
    advancement: PlantAdvancement


class LandUnlock(BaseModel):
    model_config = ConfigDict(frozen=True)

    requires_xp: bool = False


# Archetype kinds
class GotchiArchetype(BaseModel):
    model_config = ConfigDict(frozen=True)

    variant: Literal["gotchi"] = "gotchi"
    base_happiness: int = 0
    hatch_table: Evalput | None = None


class SeedArchetype(BaseModel):
    model_config = ConfigDict(frozen=True)

    variant: Literal["seed"] = "seed"
    grows_into: ArchetypeHandle


class KeepsakeArchetype(BaseModel):
    model_config = ConfigDict(frozen=True)

    variant: Literal["keepsake"] = "keepsake"
    unlocks_land: LandUnlock | None = None
    plant_effects: list[ItemApplicationEffect] = Field(default_factory=list)


ArchetypeKind = Annotated[
    Union[GotchiArchetype, SeedArchetype, KeepsakeArchetype],
    Field(discriminator="variant"),
]


class Archetype(BaseModel):
    """Template for an item a player can own."""

    model_config = ConfigDict(frozen=True)

    name: str
    description: str = ""
    welcome_gift: bool = False
    kind: ArchetypeKind

    def gotchi(self) -> GotchiArchetype | None:
        return self.kind if isinstance(self.kind, GotchiArchetype) else None

    def seed(self) -> SeedArchetype | None:
        return self.kind if isinstance(self.kind, SeedArchetype) else None

    def keepsake(self) -> KeepsakeArchetype | None:
        return self.kind if isinstance(self.kind, KeepsakeArchetype) else None


class PlantArchetype(BaseModel):
    model_config = ConfigDict(frozen=True)

    name: str
    base_yield_duration: float | None = None
    advancements: PlantAdvancementSet


class ProfileArchetype(BaseModel):
    model_config = ConfigDict(frozen=True)

    advancements: HacksteadAdvancementSet


class Config(BaseModel):
    """All verified game content, addressed by handle."""

    model_config = ConfigDict(frozen=True)

    special_users: list[str] = Field(default_factory=list)
    profile_archetype: ProfileArchetype
    plant_archetypes: list[PlantArchetype] = Field(default_factory=list)
    possession_archetypes: list[Archetype] = Field(default_factory=list)
