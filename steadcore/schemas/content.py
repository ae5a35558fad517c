"""Pydantic schemas for content lookups."""

from pydantic import BaseModel, Field

from steadcore.services.rules import LevelInfo, PlantAdvancement, PlantAdvancementSum


class ArchetypeSummary(BaseModel):
    """A possession archetype, as listed."""

    handle: int = Field(..., ge=0, description="Index into the possession archetypes")
    name: str
    kind: str = Field(..., description="gotchi, seed or keepsake")


class ItemListResponse(BaseModel):
    items: list[ArchetypeSummary]


class HatchResponse(BaseModel):
    """What one hatch of a gotchi produced."""

    handle: int
    xp: int
    items: list[ArchetypeSummary] = Field(..., description="Hatched items, in draw order")


class PlantProgressResponse(BaseModel):
    """Where a plant with the given XP stands on its skill ladder."""

    handle: int
    name: str
    xp: int
    current: PlantAdvancement
    next: PlantAdvancement | None = Field(None, description="None once every skill is unlocked")
    level: LevelInfo
    sum: PlantAdvancementSum = Field(..., description="Bonuses of the unlocked skills")
