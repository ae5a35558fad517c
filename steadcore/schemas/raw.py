"""Content as authored, before verification.

Records keep names instead of handles, and the variant-tagged parts
(item kinds, advancement kinds, evalputs, recipe outputs) stay as raw YAML
nodes until the verifier reads them.
"""

from dataclasses import dataclass
from typing import Any, Generic, TypeVar

from pydantic import BaseModel, ConfigDict, Field

T = TypeVar("T")


@dataclass
class FromFile(Generic[T]):
    """A record and the file it was read from."""

    file: str
    value: T


class RawModel(BaseModel):
    model_config = ConfigDict(extra="forbid")


class RawAdvancement(RawModel):
    title: str
    description: str = ""
    achiever_title: str = ""
    art: str = ""
    xp: int = 0
    kind: Any


class RawYield(RawModel):
    dropped_item: str
    chance: float = 1.0
    amount: float | tuple[float, float] = 1.0
    xp: int = 0


class RawRecipe(RawModel):
    title: str
    explanation: str = ""
    makes: Any
    needs: list[tuple[int, str]] = Field(default_factory=list)
    time: float
    destroys_plant: bool = False
    xp: int = 0


class RawEffect(RawModel):
    description: str
    duration: float | None = None
    for_plants: Any = "All"
    kind: Any


class RawGotchi(RawModel):
    base_happiness: int = 0
    hatch_table: Any = None


class RawSeed(RawModel):
    grows_into: str


class RawLandUnlock(RawModel):
    requires_xp: bool = False


class RawKeepsake(RawModel):
    unlocks_land: RawLandUnlock | None = None
    plant_effects: list[RawEffect] = Field(default_factory=list)


class RawArchetype(RawModel):
    name: str
    description: str = ""
    welcome_gift: bool = False
    kind: Any


class RawPlant(RawModel):
    name: str
    base_yield_duration: float | None = None
    skills: list[RawAdvancement] = Field(
        default_factory=list, description="Read from the plant's sibling skills file"
    )


class RawProfile(RawModel):
    special_users: list[str] = Field(default_factory=list)
    advancements: list[RawAdvancement] = Field(default_factory=list)
