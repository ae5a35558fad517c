"""Recipes and what they make.

RecipeMakes describes a craft's output. It is deliberately simpler than
Evalput: counts are fixed and there is no xp, so every possible output of
a recipe can be listed up front for display.
"""

from collections.abc import Callable, Iterator
from random import Random
from typing import Annotated, Any, Literal, Union

from pydantic import BaseModel, ConfigDict, Field

from .authoring import integer, name, number, pair, sequence, tagged
from .errors import VerifError, noting
from .weights import weighted_choice


class RecipeMakesNode(BaseModel):
    """Base class for all RecipeMakes variants."""

    model_config = ConfigDict(frozen=True)

    makes: str

    def any(self, rng: Random) -> Any | None:
        """Pick a single item this recipe could produce."""
        raise NotImplementedError

    def all(self) -> list[tuple[Any, int]]:
        """Every (item, count) this recipe could produce, without drawing."""
        raise NotImplementedError

    def output(self, rng: Random) -> list[Any]:
        """Commit to one outcome and expand it into individual items."""
        raise NotImplementedError

    def map_item(self, fn: Callable[[Any], Any]) -> "RecipeMakesNode":
        raise NotImplementedError

    def ok_or_item(self, fn: Callable[[Any], Any]) -> "RecipeMakesNode":
        """Like map_item; the first exception raised by `fn` propagates."""
        return self.map_item(fn)

    def iter_items(self) -> Iterator[Any]:
        return (item for item, _ in self.all())


class MakesJust(RecipeMakesNode):
    makes: Literal["just"] = "just"
    count: int = 1
    item: Any

    def any(self, rng: Random) -> Any | None:
        return self.item

    def all(self) -> list[tuple[Any, int]]:
        return [(self.item, self.count)]

    def output(self, rng: Random) -> list[Any]:
        return [self.item] * self.count

    def map_item(self, fn: Callable[[Any], Any]) -> "MakesJust":
        return MakesJust(count=self.count, item=fn(self.item))


class MakesNothing(RecipeMakesNode):
    makes: Literal["nothing"] = "nothing"

    def any(self, rng: Random) -> Any | None:
        return None

    def all(self) -> list[tuple[Any, int]]:
        return []

    def output(self, rng: Random) -> list[Any]:
        return []

    def map_item(self, fn: Callable[[Any], Any]) -> "MakesNothing":
        return self


class MakesOneOf(RecipeMakesNode):
    makes: Literal["one_of"] = "one_of"
    branches: list[tuple[float, "RecipeMakes"]]

    def any(self, rng: Random) -> Any | None:
        return weighted_choice(self.branches, rng).any(rng)

    def all(self) -> list[tuple[Any, int]]:
        return [output for _, branch in self.branches for output in branch.all()]

    def output(self, rng: Random) -> list[Any]:
        return weighted_choice(self.branches, rng).output(rng)

    def map_item(self, fn: Callable[[Any], Any]) -> "MakesOneOf":
        return MakesOneOf(
            branches=[(weight, branch.map_item(fn)) for weight, branch in self.branches]
        )


class MakesAllOf(RecipeMakesNode):
    makes: Literal["all_of"] = "all_of"
    outputs: list[tuple[int, Any]]

    def any(self, rng: Random) -> Any | None:
        if not self.outputs:
            return None
        index = min(int(rng.random() * len(self.outputs)), len(self.outputs) - 1)
        return self.outputs[index][1]

    def all(self) -> list[tuple[Any, int]]:
        return [(item, count) for count, item in self.outputs]

    def output(self, rng: Random) -> list[Any]:
        return [item for count, item in self.outputs for _ in range(count)]

    def map_item(self, fn: Callable[[Any], Any]) -> "MakesAllOf":
        return MakesAllOf(outputs=[(count, fn(item)) for count, item in self.outputs])


RecipeMakes = Annotated[
    Union[MakesJust, MakesNothing, MakesOneOf, MakesAllOf],
    Field(discriminator="makes"),
]

MakesOneOf.model_rebuild()


class Recipe(BaseModel):
    """Something a plant can craft once it has unlocked the right skill."""

    model_config = ConfigDict(frozen=True)

    title: str
    explanation: str = ""
    makes: RecipeMakes
    needs: list[tuple[int, Any]] = Field(
        default_factory=list, description="(count, item) pairs consumed by the craft"
    )
    time: float = Field(..., description="Craft duration in ticks")
    destroys_plant: bool = False
    xp: int = 0

    def map_item(self, fn: Callable[[Any], Any]) -> "Recipe":
        return self.model_copy(
            update={
                "makes": self.makes.map_item(fn),
                "needs": [(count, fn(item)) for count, item in self.needs],
            }
        )

    def iter_items(self) -> Iterator[Any]:
        yield from (item for _, item in self.needs)
        yield from self.makes.iter_items()


def parse_recipe_makes(node: Any) -> RecipeMakesNode:
    """Read the author form of what a recipe makes.

    `Nothing`, `{Just: name}` or `{Just: [n, name]}`,
    `{OneOf: [[weight, makes], ...]}` and `{AllOf: [[n, name], ...]}`.
    """
    tag, body = tagged(node, "what a recipe makes")
    if tag == "Nothing":
        return MakesNothing()
    if tag == "Just":
        if isinstance(body, list):
            count, item = pair(body, "Just")
            return MakesJust(count=integer(count, "a Just count"), item=name(item, "Just"))
        return MakesJust(item=name(body, "Just"))
    if tag == "OneOf":
        with noting("in a recipe's OneOf output"):
            branches = []
            for branch in sequence(body, "OneOf"):
                weight, makes = pair(branch, "a weighted OneOf branch")
                branches.append((number(weight, "a OneOf weight"), parse_recipe_makes(makes)))
            return MakesOneOf(branches=branches)
    if tag == "AllOf":
        with noting("in a recipe's AllOf output"):
            outputs = []
            for output in sequence(body, "AllOf"):
                count, item = pair(output, "an AllOf output")
                outputs.append((integer(count, "an AllOf count"), name(item, "AllOf")))
            return MakesAllOf(outputs=outputs)
    raise VerifError.custom(
        f"unknown recipe output {tag!r}, expected one of Just, Nothing, OneOf, AllOf"
    )
