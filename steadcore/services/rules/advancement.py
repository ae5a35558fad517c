"""Advancement ladders and the bonuses they add up to.

A ladder is a base rung followed by further rungs, each with an XP cost.
A rung unlocks once an entity's XP reaches the cumulative cost of every
rung up to and including it. The base rung is always unlocked.

The bonuses of the unlocked rungs are folded into an AdvancementSum.
Plants have one extra wrinkle: a Neighbor rung describes a bonus the plant
gives to the plants next to it, so it is left out of the plant's own sum
but applied, unwrapped, to whichever plant receives it.
"""

import logging
from collections.abc import Iterable, Sequence
from itertools import accumulate
from typing import Annotated, Any, ClassVar, Literal, Union

from pydantic import BaseModel, ConfigDict, Field

from .evalput import All, Amount, Between, Chance, EvalputNode, Exactly, Item, Just, Xp
from .recipe import Recipe

logger = logging.getLogger(__name__)


# =============================================================================
# Rung kinds
# =============================================================================


class LandGrant(BaseModel):
    """Extra land plots granted by a profile advancement."""

    model_config = ConfigDict(frozen=True)

    grant: Literal["land"] = "land"
    pieces: int


class PlantYield(BaseModel):
    """Something a plant drops when its yield timer finishes."""

    model_config = ConfigDict(frozen=True)

    dropped_item: Any
    chance: float = 1.0
    amount: tuple[float, float] = (1.0, 1.0)
    xp: int = 0

    def scaled(self, multiplier: float) -> "PlantYield":
        lo, hi = self.amount
        return self.model_copy(
            update={
                "chance": min(self.chance * multiplier, 1.0),
                "amount": (lo * multiplier, hi * multiplier),
            }
        )

    def evalput(self) -> EvalputNode:
        """Express this yield as an Evalput tree."""
        lo, hi = self.amount
        repeats = Just(expected=lo) if lo == hi else Between(lo=lo, hi=hi)
        body: EvalputNode = Amount(repeats=repeats, body=Item(item=self.dropped_item))
        if self.xp:
            body = All(children=[body, Xp(repeats=Exactly(count=self.xp))])
        if self.chance < 1.0:
            body = Chance(chance=self.chance, body=body)
        return body


class PlantBonus(BaseModel):
    """Base class for all plant advancement kinds."""

    model_config = ConfigDict(frozen=True)

    bonus: str


class Neighbor(PlantBonus):
    """A bonus granted to adjacent plants rather than to this one."""

    bonus: Literal["neighbor"] = "neighbor"
    inner: "PlantAdvancementKind"


class XpBonus(PlantBonus):
    bonus: Literal["xp"] = "xp"
    amount: float


class ExtraTimeTicks(PlantBonus):
    bonus: Literal["extra_time_ticks"] = "extra_time_ticks"
    ticks: int


class ExtraTimeTicksMultiplier(PlantBonus):
    """Scales every ExtraTimeTicks bonus, whichever rung it came from."""

    bonus: Literal["extra_time_ticks_multiplier"] = "extra_time_ticks_multiplier"
    multiplier: float


class YieldSpeedMultiplier(PlantBonus):
    bonus: Literal["yield_speed_multiplier"] = "yield_speed_multiplier"
    multiplier: float


class YieldSizeMultiplier(PlantBonus):
    bonus: Literal["yield_size_multiplier"] = "yield_size_multiplier"
    multiplier: float


class YieldBonus(PlantBonus):
    bonus: Literal["yield"] = "yield"
    yields: list[PlantYield]


class CraftBonus(PlantBonus):
    bonus: Literal["craft"] = "craft"
    recipes: list[Recipe]


class CraftSpeedMultiplier(PlantBonus):
    bonus: Literal["craft_speed_multiplier"] = "craft_speed_multiplier"
    multiplier: float


class CraftReturnChance(PlantBonus):
    bonus: Literal["craft_return_chance"] = "craft_return_chance"
    chance: float


class DoubleCraftYield(PlantBonus):
    bonus: Literal["double_craft_yield"] = "double_craft_yield"
    chance: float


PlantAdvancementKind = Annotated[
    Union[
        Neighbor,
        XpBonus,
        ExtraTimeTicks,
        ExtraTimeTicksMultiplier,
        YieldSpeedMultiplier,
        YieldSizeMultiplier,
        YieldBonus,
        CraftBonus,
        CraftSpeedMultiplier,
        CraftReturnChance,
        DoubleCraftYield,
    ],
    Field(discriminator="bonus"),
]

Neighbor.model_rebuild()


# =============================================================================
# Rungs
# =============================================================================


class Advancement(BaseModel):
    """One rung of a ladder."""

    model_config = ConfigDict(frozen=True)

    title: str
    description: str = ""
    achiever_title: str = ""
    art: str = ""
    xp: int = Field(0, description="Cost of this rung, on top of every earlier rung")


class HacksteadAdvancement(Advancement):
    kind: LandGrant


class PlantAdvancement(Advancement):
    kind: PlantAdvancementKind


# =============================================================================
# Sums
# =============================================================================


class AdvancementSum(BaseModel):
    """The combined effect of a set of rungs."""

    @classmethod
    def new(cls, unlocked: Sequence[Advancement]) -> "AdvancementSum":
        raise NotImplementedError

    @staticmethod
    def filter_base(advancement: Advancement) -> bool:
        """Whether a rung of an entity's own ladder counts toward its own sum."""
        return True


class HacksteadAdvancementSum(AdvancementSum):
    land: int = 0

    @classmethod
    def new(cls, unlocked: Sequence[HacksteadAdvancement]) -> "HacksteadAdvancementSum":
        return cls(land=sum(advancement.kind.pieces for advancement in unlocked))


class PlantAdvancementSum(AdvancementSum):
    xp: float = 0.0
    extra_ticks: int = 0
    extra_ticks_multiplier: float = 1.0
    yield_speed_multiplier: float = 1.0
    yield_size_multiplier: float = 1.0
    yields: list[PlantYield] = Field(default_factory=list)
    recipes: list[Recipe] = Field(default_factory=list)
    craft_speed_multiplier: float = 1.0
    craft_return_chance: float = 0.0
    double_craft_yield_chance: float = 0.0

    @classmethod
    def new(cls, unlocked: Sequence[PlantAdvancement]) -> "PlantAdvancementSum":
        total = cls()
        for advancement in unlocked:
            total._fold(advancement.kind)

        total.craft_return_chance = min(total.craft_return_chance, 1.0)
        total.double_craft_yield_chance = min(total.double_craft_yield_chance, 1.0)
        # Scaled once, after every multiplier has been folded in
        total.yields = [y.scaled(total.yield_size_multiplier) for y in total.yields]
        return total

    @staticmethod
    def filter_base(advancement: Advancement) -> bool:
        return not isinstance(advancement.kind, Neighbor)

    def _fold(self, kind: PlantBonus) -> None:
        if isinstance(kind, Neighbor):
            self._fold(kind.inner)
        elif isinstance(kind, XpBonus):
            self.xp += kind.amount
        elif isinstance(kind, ExtraTimeTicks):
            self.extra_ticks += kind.ticks
        elif isinstance(kind, ExtraTimeTicksMultiplier):
            self.extra_ticks_multiplier *= kind.multiplier
        elif isinstance(kind, YieldSpeedMultiplier):
            self.yield_speed_multiplier *= kind.multiplier
        elif isinstance(kind, YieldSizeMultiplier):
            self.yield_size_multiplier *= kind.multiplier
        elif isinstance(kind, YieldBonus):
            self.yields.extend(kind.yields)
        elif isinstance(kind, CraftBonus):
            self.recipes.extend(kind.recipes)
        elif isinstance(kind, CraftSpeedMultiplier):
            self.craft_speed_multiplier *= kind.multiplier
        elif isinstance(kind, CraftReturnChance):
            self.craft_return_chance += kind.chance
        elif isinstance(kind, DoubleCraftYield):
            self.double_craft_yield_chance += kind.chance
        else:
            raise ValueError(f"Unknown plant advancement kind: {kind.bonus}")

    @property
    def total_extra_ticks(self) -> int:
        return round(self.extra_ticks * self.extra_ticks_multiplier)

    def yield_evalput(self) -> EvalputNode:
        """Everything this plant drops per finished yield, as one tree."""
        return All(children=[y.evalput() for y in self.yields])


# =============================================================================
# Ladders
# =============================================================================


class LevelInfo(BaseModel):
    """Progress toward the next rung, for progress bars."""

    last_unlocked_index: int
    xp_so_far: int = Field(..., description="XP earned since the current rung unlocked")
    xp_to_go: int = Field(..., description="XP still needed for the next rung, 0 at the top")
    total_level_xp: int = Field(..., description="Cost of the next rung, 0 at the top")


class AdvancementLadder:
    """Ladder behaviour shared by the concrete advancement sets.

    Subclasses are pydantic models providing `base`, `rest` and `sum_type`.
    """

    sum_type: ClassVar[type[AdvancementSum]]

    def all(self) -> list:
        return [self.base, *self.rest]

    def thresholds(self) -> list[int]:
        """Cumulative XP at which each rung unlocks."""
        return list(accumulate(advancement.xp for advancement in self.all()))

    def current_position(self, xp: int) -> int:
        position = 0
        for index, threshold in enumerate(self.thresholds()):
            if threshold > xp:
                break
            position = index
        return position

    def get(self, index: int):
        rungs = self.all()
        if 0 <= index < len(rungs):
            return rungs[index]
        return None

    def unlocked(self, xp: int) -> list:
        return self.all()[: self.current_position(xp) + 1]

    def current(self, xp: int):
        return self.all()[self.current_position(xp)]

    def next(self, xp: int):
        return self.get(self.current_position(xp) + 1)

    def increase_xp(self, xp: int, amount: int) -> tuple[int, Any]:
        """Add XP, reporting the rung reached if this crossed a threshold.

        Args:
            xp: XP before the increase.
            amount: XP to add.

        Returns:
            The new XP total, and the newly reached rung or None when the
            increase stayed within the current rung.
        """
        if amount < 0:
            raise ValueError(f"XP can only increase, got {amount}")
        before = self.current_position(xp)
        new_xp = xp + amount
        after = self.current_position(new_xp)
        if after == before:
            return new_xp, None
        logger.debug("Advancement crossed: from=%d, to=%d, xp=%d", before, after, new_xp)
        return new_xp, self.all()[after]

    def level_info(self, xp: int) -> LevelInfo:
        thresholds = self.thresholds()
        position = self.current_position(xp)
        reached = thresholds[position]
        if position + 1 < len(thresholds):
            next_threshold = thresholds[position + 1]
            return LevelInfo(
                last_unlocked_index=position,
                xp_so_far=max(xp - reached, 0),
                xp_to_go=next_threshold - xp,
                total_level_xp=next_threshold - reached,
            )
        return LevelInfo(
            last_unlocked_index=position,
            xp_so_far=max(xp - reached, 0),
            xp_to_go=0,
            total_level_xp=0,
        )

    def sum(self, xp: int, extra: Iterable[Advancement] = ()) -> AdvancementSum:
        """Fold this entity's own unlocked rungs plus any extra rungs."""
        own = [a for a in self.unlocked(xp) if self.sum_type.filter_base(a)]
        return self.sum_type.new(own + list(extra))

    def raw_sum(self, xp: int, extra: Iterable[Advancement] = ()) -> AdvancementSum:
        """Like sum, without excluding any of this entity's own rungs."""
        return self.sum_type.new(self.unlocked(xp) + list(extra))

    def max(self, extra: Iterable[Advancement] = ()) -> AdvancementSum:
        """The sum this entity would have with every rung unlocked."""
        own = [a for a in self.all() if self.sum_type.filter_base(a)]
        return self.sum_type.new(own + list(extra))


class HacksteadAdvancementSet(AdvancementLadder, BaseModel):
    model_config = ConfigDict(frozen=True)

    sum_type: ClassVar[type[AdvancementSum]] = HacksteadAdvancementSum

    base: HacksteadAdvancement
    rest: list[HacksteadAdvancement] = Field(default_factory=list)


class PlantAdvancementSet(AdvancementLadder, BaseModel):
    model_config = ConfigDict(frozen=True)

    sum_type: ClassVar[type[AdvancementSum]] = PlantAdvancementSum

    base: PlantAdvancement
    rest: list[PlantAdvancement] = Field(default_factory=list)
