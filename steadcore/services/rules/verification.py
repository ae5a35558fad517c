"""Verification pass: authored content -> Config.

Every name reference is resolved to a handle and every probabilistic
construct is checked for sense. The first problem found aborts the pass
with a VerifError; each construct the error passes through on its way out
adds one line of context, so the final report reads from the exact failing
leaf up to the file it came from.
"""

import logging
import math
from collections import Counter
from collections.abc import Callable
from typing import Any, TypeVar

from pydantic import BaseModel, ValidationError

from steadcore.schemas.raw import (
    FromFile,
    RawAdvancement,
    RawArchetype,
    RawEffect,
    RawGotchi,
    RawKeepsake,
    RawPlant,
    RawProfile,
    RawRecipe,
    RawSeed,
    RawYield,
)

from .advancement import (
    Advancement,
    CraftBonus,
    CraftReturnChance,
    CraftSpeedMultiplier,
    DoubleCraftYield,
    ExtraTimeTicks,
    ExtraTimeTicksMultiplier,
    HacksteadAdvancement,
    HacksteadAdvancementSet,
    LandGrant,
    Neighbor,
    PlantAdvancement,
    PlantAdvancementSet,
    PlantBonus,
    PlantYield,
    XpBonus,
    YieldBonus,
    YieldSizeMultiplier,
    YieldSpeedMultiplier,
)
from .authoring import integer, name, number, sequence, tagged
from .content import (
    AllPlants,
    Archetype,
    ArchetypeHandle,
    Config,
    GotchiArchetype,
    ItemApplicationEffect,
    KeepsakeArchetype,
    LandUnlock,
    NotPlants,
    OnlyPlants,
    PlantArchetype,
    ProfileArchetype,
    SeedArchetype,
)
from .errors import UnknownItem, UnknownPlant, VerifError, noting
from .evalput import (
    All,
    Amount,
    Between,
    Chance,
    EvalputNode,
    Exactly,
    Item,
    Just,
    OneOf,
    Repeats,
    Xp,
    parse_evalput,
)
from .fuzzy import NgramCorpus
from .recipe import (
    MakesAllOf,
    MakesJust,
    MakesOneOf,
    Recipe,
    RecipeMakesNode,
    parse_recipe_makes,
)
from .weights import weights_sum_to_one

logger = logging.getLogger(__name__)

# Minimum n-gram similarity for a name to be offered as a suggestion
ITEM_SUGGESTION_THRESHOLD = 0.35
PLANT_SUGGESTION_THRESHOLD = 0.2
MAX_SUGGESTIONS = 5

M = TypeVar("M", bound=BaseModel)


class RawConfig:
    """Everything read from the content folder, ready to be verified.

    Handles are assigned by position: the n-th item read becomes possession
    archetype n, the n-th plant becomes plant archetype n.
    """

    def __init__(
        self,
        items: list[FromFile[RawArchetype]],
        plants: list[FromFile[RawPlant]],
        profile: FromFile[RawProfile],
        item_threshold: float = ITEM_SUGGESTION_THRESHOLD,
        plant_threshold: float = PLANT_SUGGESTION_THRESHOLD,
        max_suggestions: int = MAX_SUGGESTIONS,
    ):
        self.items = items
        self.plants = plants
        self.profile = profile
        self.item_threshold = item_threshold
        self.plant_threshold = plant_threshold
        self.max_suggestions = max_suggestions

        self._item_handles: dict[str, ArchetypeHandle] = {}
        for handle, item in enumerate(items):
            self._item_handles.setdefault(item.value.name, handle)
        self._plant_handles: dict[str, ArchetypeHandle] = {}
        for handle, plant in enumerate(plants):
            self._plant_handles.setdefault(plant.value.name, handle)

        # Built once, searched only when a name fails to resolve
        self.item_corpus = NgramCorpus(self._item_handles)
        self.plant_corpus = NgramCorpus(self._plant_handles)

    def item_conf(self, item_name: str) -> ArchetypeHandle:
        """Resolve an item name, suggesting close names when it doesn't exist."""
        handle = self._item_handles.get(item_name)
        if handle is None:
            suggestions = self.item_corpus.suggestions(
                item_name, self.item_threshold, self.max_suggestions
            )
            raise VerifError(UnknownItem(item_name, suggestions))
        return handle

    def plant_conf(self, plant_name: str) -> ArchetypeHandle:
        """Resolve a plant name, suggesting close names when it doesn't exist."""
        handle = self._plant_handles.get(plant_name)
        if handle is None:
            suggestions = self.plant_corpus.suggestions(
                plant_name, self.plant_threshold, self.max_suggestions
            )
            raise VerifError(UnknownPlant(plant_name, suggestions))
        return handle

    def verify(self) -> Config:
        return verify(self)


# =============================================================================
# Shared checks
# =============================================================================


def validate_raw(model: type[M], node: Any, what: str) -> M:
    """Validate an author node against a raw model, as a VerifError."""
    if node is None:
        node = {}
    try:
        return model.model_validate(node)
    except ValidationError as e:
        problems = "; ".join(
            f"{'.'.join(str(p) for p in err['loc']) or what}: {err['msg']}" for err in e.errors()
        )
        raise VerifError.custom(f"I couldn't read {what}: {problems}") from e


def _check_weights(weights: list[float], what: str) -> None:
    if len(weights) < 2:
        raise VerifError.custom(
            f"a {what} needs at least two branches to choose between, found {len(weights)}"
        )
    for weight in weights:
        if weight <= 0:
            raise VerifError.custom(f"{what} weights must be positive, found {weight}")
    if not weights_sum_to_one(weights):
        raise VerifError.custom(
            f"{what} weights must add up to 1.0, but they add up to {math.fsum(weights)}"
        )


def _check_probability(chance: float, what: str) -> None:
    if not 0.0 < chance < 1.0:
        raise VerifError.custom(
            f"{what} must be strictly between 0 and 1, found {chance}; "
            "use the body directly for certain outcomes and Nothing for impossible ones"
        )


def _check_repeats(repeats: Repeats, in_amount: bool) -> None:
    if isinstance(repeats, Exactly):
        if repeats.count < 0:
            raise VerifError.custom(f"cannot repeat a negative number of times ({repeats.count})")
        if in_amount and repeats.count == 1:
            raise VerifError.custom("an Amount that repeats exactly once does nothing, remove it")
        if in_amount and repeats.count == 0:
            raise VerifError.custom("an Amount that repeats zero times never happens, use Nothing")
    elif isinstance(repeats, Just):
        if repeats.expected < 0:
            raise VerifError.custom(f"cannot repeat a negative number of times ({repeats.expected})")
        if in_amount and repeats.expected == 1.0:
            raise VerifError.custom("an Amount that repeats exactly once does nothing, remove it")
        if in_amount and repeats.expected == 0:
            raise VerifError.custom("an Amount that repeats zero times never happens, use Nothing")
    elif isinstance(repeats, Between):
        if repeats.lo < 0 or repeats.hi < 0:
            raise VerifError.custom(
                f"cannot repeat a negative number of times ({repeats.lo} to {repeats.hi})"
            )
        if repeats.lo == repeats.hi:
            raise VerifError.custom(
                f"a Between with identical bounds ({repeats.lo}) is just {repeats.lo}, write that"
            )
        if repeats.lo > repeats.hi:
            raise VerifError.custom(
                f"a Between's lower bound ({repeats.lo}) is above its upper bound ({repeats.hi})"
            )


# =============================================================================
# Evalputs and recipes
# =============================================================================


def verify_evalput(tree: EvalputNode, raw: RawConfig) -> EvalputNode:
    """Check a raw evalput for sense and resolve its item names."""
    with noting(f"in an evalput's {tree.label} node"):
        if isinstance(tree, All):
            if not tree.children:
                raise VerifError.custom("an All node needs at least one child, use Nothing")
            return All(children=[verify_evalput(child, raw) for child in tree.children])
        if isinstance(tree, OneOf):
            _check_weights([weight for weight, _ in tree.branches], "OneOf")
            return OneOf(
                branches=[(weight, verify_evalput(body, raw)) for weight, body in tree.branches]
            )
        if isinstance(tree, Amount):
            _check_repeats(tree.repeats, in_amount=True)
            return Amount(repeats=tree.repeats, body=verify_evalput(tree.body, raw))
        if isinstance(tree, Chance):
            _check_probability(tree.chance, "a Chance")
            return Chance(chance=tree.chance, body=verify_evalput(tree.body, raw))
        if isinstance(tree, Xp):
            _check_repeats(tree.repeats, in_amount=False)
            return tree
        if isinstance(tree, Item):
            return Item(item=raw.item_conf(tree.item))
        return tree


def _check_recipe_makes(makes: RecipeMakesNode) -> None:
    if isinstance(makes, MakesJust):
        if makes.count < 1:
            raise VerifError.custom(f"a recipe must make at least one item, found {makes.count}")
    elif isinstance(makes, MakesOneOf):
        _check_weights([weight for weight, _ in makes.branches], "OneOf")
        for _, branch in makes.branches:
            _check_recipe_makes(branch)
    elif isinstance(makes, MakesAllOf):
        if not makes.outputs:
            raise VerifError.custom("an AllOf needs at least one output, use Nothing")
        for count, _ in makes.outputs:
            if count < 1:
                raise VerifError.custom(f"an AllOf output must make at least one item, found {count}")


def verify_recipe(node: Any, raw: RawConfig) -> Recipe:
    recipe = validate_raw(RawRecipe, node, "a recipe")
    with noting(f'in a recipe named "{recipe.title}"'):
        with noting("in what the recipe needs"):
            needs = []
            for count, item in recipe.needs:
                if count < 1:
                    raise VerifError.custom(f"a recipe must need at least one {item}, found {count}")
                needs.append((count, raw.item_conf(item)))
        with noting("in what the recipe makes"):
            makes = parse_recipe_makes(recipe.makes)
            _check_recipe_makes(makes)
            makes = makes.ok_or_item(raw.item_conf)
        if recipe.time <= 0:
            raise VerifError.custom(f"a recipe must take some time, found {recipe.time}")
        if recipe.xp < 0:
            raise VerifError.custom(f"a recipe cannot take xp away, found {recipe.xp}")
        return Recipe(
            title=recipe.title,
            explanation=recipe.explanation,
            makes=makes,
            needs=needs,
            time=recipe.time,
            destroys_plant=recipe.destroys_plant,
            xp=recipe.xp,
        )


def verify_yield(node: Any, raw: RawConfig) -> PlantYield:
    plant_yield = validate_raw(RawYield, node, "a yield")
    with noting(f"in a yield of {plant_yield.dropped_item}"):
        if not 0.0 < plant_yield.chance <= 1.0:
            raise VerifError.custom(
                f"a yield's chance must be above 0 and at most 1, found {plant_yield.chance}"
            )
        if isinstance(plant_yield.amount, tuple):
            lo, hi = plant_yield.amount
        else:
            lo = hi = plant_yield.amount
        if lo < 0 or lo > hi:
            raise VerifError.custom(f"a yield's amount must satisfy 0 <= lo <= hi, found {lo}, {hi}")
        if plant_yield.xp < 0:
            raise VerifError.custom(f"a yield cannot take xp away, found {plant_yield.xp}")
        return PlantYield(
            dropped_item=raw.item_conf(plant_yield.dropped_item),
            chance=plant_yield.chance,
            amount=(lo, hi),
            xp=plant_yield.xp,
        )


# =============================================================================
# Advancements
# =============================================================================


def _positive(value: Any, what: str) -> float:
    n = number(value, what)
    if n <= 0:
        raise VerifError.custom(f"{what} must be positive, found {n}")
    return n


def _chance(value: Any, what: str) -> float:
    n = number(value, what)
    if not 0.0 <= n <= 1.0:
        raise VerifError.custom(f"{what} must be between 0 and 1, found {n}")
    return n


def verify_plant_kind(node: Any, raw: RawConfig) -> PlantBonus:
    tag, body = tagged(node, "a plant advancement kind")
    if tag == "Neighbor":
        with noting("in a Neighbor bonus"):
            return Neighbor(inner=verify_plant_kind(body, raw))
    if tag == "Xp":
        return XpBonus(amount=number(body, "an Xp bonus"))
    if tag == "ExtraTimeTicks":
        return ExtraTimeTicks(ticks=integer(body, "ExtraTimeTicks"))
    if tag == "ExtraTimeTicksMultiplier":
        return ExtraTimeTicksMultiplier(multiplier=_positive(body, "an ExtraTimeTicksMultiplier"))
    if tag == "YieldSpeedMultiplier":
        return YieldSpeedMultiplier(multiplier=_positive(body, "a YieldSpeedMultiplier"))
    if tag == "YieldSizeMultiplier":
        return YieldSizeMultiplier(multiplier=_positive(body, "a YieldSizeMultiplier"))
    if tag == "CraftSpeedMultiplier":
        return CraftSpeedMultiplier(multiplier=_positive(body, "a CraftSpeedMultiplier"))
    if tag == "CraftReturnChance":
        return CraftReturnChance(chance=_chance(body, "a CraftReturnChance"))
    if tag == "DoubleCraftYield":
        return DoubleCraftYield(chance=_chance(body, "a DoubleCraftYield chance"))
    if tag == "Yield":
        return YieldBonus(yields=[verify_yield(y, raw) for y in sequence(body, "Yield")])
    if tag == "Craft":
        return CraftBonus(recipes=[verify_recipe(r, raw) for r in sequence(body, "Craft")])
    raise VerifError.custom(f"unknown plant advancement kind {tag!r}")


def verify_land_grant(node: Any, raw: RawConfig) -> LandGrant:
    tag, body = tagged(node, "a profile advancement kind")
    if tag != "Land":
        raise VerifError.custom(f"unknown profile advancement kind {tag!r}, expected Land")
    if isinstance(body, dict):
        body = body.get("pieces")
    pieces = integer(body, "Land pieces")
    if pieces < 1:
        raise VerifError.custom(f"a Land advancement must grant at least one piece, found {pieces}")
    return LandGrant(pieces=pieces)


def verify_ladder(
    advancements: list[RawAdvancement],
    raw: RawConfig,
    verify_kind: Callable[[Any, RawConfig], Any],
    advancement_type: type[Advancement],
) -> list[Advancement]:
    if not advancements:
        raise VerifError.custom("an advancement ladder needs at least a base advancement")
    verified = []
    for position, advancement in enumerate(advancements):
        with noting(f'in an advancement titled "{advancement.title}"'):
            if advancement.xp < 0 or (position > 0 and advancement.xp == 0):
                raise VerifError.custom(
                    "every advancement after the first must cost more than 0 xp, "
                    f"found {advancement.xp}"
                )
            verified.append(
                advancement_type(
                    title=advancement.title,
                    description=advancement.description,
                    achiever_title=advancement.achiever_title,
                    art=advancement.art,
                    xp=advancement.xp,
                    kind=verify_kind(advancement.kind, raw),
                )
            )
    return verified


# =============================================================================
# Archetypes
# =============================================================================


def _shorten(text: str, length: int = 20) -> str:
    return text if len(text) <= length else f"{text[:length]}..."


def verify_plant_filter(node: Any, raw: RawConfig):
    tag, body = tagged(node, "a plant filter")
    with noting(f"in a {tag.lower()} filter"):
        if tag == "All":
            return AllPlants()
        if tag == "Only":
            return OnlyPlants(plants=[raw.plant_conf(name(p, "Only")) for p in sequence(body, "Only")])
        if tag == "Not":
            return NotPlants(plants=[raw.plant_conf(name(p, "Not")) for p in sequence(body, "Not")])
        raise VerifError.custom(f"unknown plant filter {tag!r}, expected All, Only or Not")


def verify_effect(effect: RawEffect, item_name: str, raw: RawConfig) -> ItemApplicationEffect:
    with noting(f'in an effect described "{_shorten(effect.description)}"'):
        if effect.duration is not None and effect.duration <= 0:
            raise VerifError.custom(f"an effect must last some time, found {effect.duration}")
        return ItemApplicationEffect(
            description=effect.description,
            duration=effect.duration,
            for_plants=verify_plant_filter(effect.for_plants, raw),
            advancement=PlantAdvancement(
                title=item_name,
                description=effect.description,
                xp=0,
                kind=verify_plant_kind(effect.kind, raw),
            ),
        )


def verify_archetype(item: RawArchetype, raw: RawConfig) -> Archetype:
    tag, body = tagged(item.kind, "an item kind")
    if tag == "Gotchi":
        gotchi = validate_raw(RawGotchi, body, "a gotchi")
        hatch_table = None
        if gotchi.hatch_table is not None:
            with noting("in the hatch table"):
                hatch_table = verify_evalput(parse_evalput(gotchi.hatch_table), raw)
        kind = GotchiArchetype(base_happiness=gotchi.base_happiness, hatch_table=hatch_table)
    elif tag == "Seed":
        seed = validate_raw(RawSeed, body, "a seed")
        with noting("in what the seed grows into"):
            kind = SeedArchetype(grows_into=raw.plant_conf(seed.grows_into))
    elif tag == "Keepsake":
        keepsake = validate_raw(RawKeepsake, body, "a keepsake")
        kind = KeepsakeArchetype(
            unlocks_land=(
                LandUnlock(requires_xp=keepsake.unlocks_land.requires_xp)
                if keepsake.unlocks_land is not None
                else None
            ),
            plant_effects=[verify_effect(e, item.name, raw) for e in keepsake.plant_effects],
        )
    else:
        raise VerifError.custom(f"unknown item kind {tag!r}, expected Gotchi, Seed or Keepsake")

    return Archetype(
        name=item.name,
        description=item.description,
        welcome_gift=item.welcome_gift,
        kind=kind,
    )


def verify_plant(plant: RawPlant, raw: RawConfig) -> PlantArchetype:
    if plant.base_yield_duration is not None and plant.base_yield_duration <= 0:
        raise VerifError.custom(
            f"a plant's base yield duration must be positive, found {plant.base_yield_duration}"
        )
    with noting("in the plant's skills"):
        ladder = verify_ladder(plant.skills, raw, verify_plant_kind, PlantAdvancement)
    return PlantArchetype(
        name=plant.name,
        base_yield_duration=plant.base_yield_duration,
        advancements=PlantAdvancementSet(base=ladder[0], rest=ladder[1:]),
    )


def _check_unique(records: list[FromFile], what: str) -> None:
    counts = Counter(record.value.name for record in records)
    for record in records:
        if counts[record.value.name] > 1:
            with noting(f"from a file {record.file}"):
                raise VerifError.custom(f"more than one {what} is named {record.value.name}")


def verify(raw: RawConfig) -> Config:
    """Turn raw content into a Config, failing on the first problem."""
    _check_unique(raw.items, "item")
    _check_unique(raw.plants, "plant")

    plant_archetypes = []
    for plant in raw.plants:
        with noting(f"from a file {plant.file}"), noting(f"in a plant named {plant.value.name}"):
            plant_archetypes.append(verify_plant(plant.value, raw))
        logger.debug("Verified plant: name=%s", plant.value.name)

    possession_archetypes = []
    for item in raw.items:
        with noting(f"from a file {item.file}"), noting(f"in the item named {item.value.name}"):
            possession_archetypes.append(verify_archetype(item.value, raw))
        logger.debug("Verified item: name=%s", item.value.name)

    with noting(f"from a file {raw.profile.file}"), noting("in the profile advancements"):
        ladder = verify_ladder(
            raw.profile.value.advancements, raw, verify_land_grant, HacksteadAdvancement
        )

    config = Config(
        special_users=raw.profile.value.special_users,
        profile_archetype=ProfileArchetype(
            advancements=HacksteadAdvancementSet(base=ladder[0], rest=ladder[1:])
        ),
        plant_archetypes=plant_archetypes,
        possession_archetypes=possession_archetypes,
    )
    logger.info(
        "Config verified: items=%d, plants=%d, profile_advancements=%d",
        len(possession_archetypes),
        len(plant_archetypes),
        len(ladder),
    )
    return config
