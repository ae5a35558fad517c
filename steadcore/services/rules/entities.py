from uuid import UUID, uuid4

from pydantic import BaseModel, Field

from .advancement import HacksteadAdvancement, PlantAdvancement
from .content import Archetype, ArchetypeHandle, Config, PlantArchetype
from .handles import plant_archetype, possession_archetype
from .registry import get_config


def _config(config: Config | None) -> Config:
    return config if config is not None else get_config()


# A consumable rubbed onto a plant
class PlantEffect(BaseModel):
    item_archetype_handle: ArchetypeHandle
    effect_archetype_handle: int = Field(
        ..., description="Index into the item's plant effects"
    )
    until_finish: float | None = Field(None, description="Ticks left, None for forever")


class Plant(BaseModel):
    tile_id: UUID = Field(default_factory=uuid4)
    archetype_handle: ArchetypeHandle
    xp: int = 0
    nickname: str = ""
    effects: list[PlantEffect] = Field(default_factory=list)
    queued_xp_bonus: int = 0

    def archetype(self, config: Config | None = None) -> PlantArchetype:
        return plant_archetype(_config(config), self.archetype_handle)

    def increase_xp(self, amount: int, config: Config | None = None) -> PlantAdvancement | None:
        """Add XP plus any queued bonus, returning the rung reached if any."""
        ladder = self.archetype(config).advancements
        self.xp, reached = ladder.increase_xp(self.xp, amount + self.queued_xp_bonus)
        self.queued_xp_bonus = 0
        return reached


class Item(BaseModel):
    item_id: UUID = Field(default_factory=uuid4)
    owner_id: UUID | None = None
    archetype_handle: ArchetypeHandle
    nickname: str | None = None

    def archetype(self, config: Config | None = None) -> Archetype:
        return possession_archetype(_config(config), self.archetype_handle)

    def name(self, config: Config | None = None) -> str:
        return self.nickname or self.archetype(config).name


class Profile(BaseModel):
    user_id: UUID = Field(default_factory=uuid4)
    xp: int = 0
    extra_land_plot_count: int = 0

    def increase_xp(self, amount: int, config: Config | None = None) -> HacksteadAdvancement | None:
        ladder = _config(config).profile_archetype.advancements
        self.xp, reached = ladder.increase_xp(self.xp, amount)
        return reached
