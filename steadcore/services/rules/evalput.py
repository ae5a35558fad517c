"""Evalput - probabilistic reward trees.

An Evalput is authored once (as YAML) and evaluated many times at play
time, e.g. to hatch a gotchi or to decide what a plant drops. Leaves name
items: raw trees hold item names, verified trees hold archetype handles.
`map_item` / `ok_or_item` convert between the two.

Usage:
    from random import Random

    tree = parse_evalput({"OneOf": [[0.3, {"Item": "Bread"}], [0.7, "Nothing"]]})
    output = evaluate(tree, Random(42))
    output.items  # ["Bread"] or []
"""

import logging
import math
from collections.abc import Callable, Iterator
from random import Random
from typing import Annotated, Any, ClassVar, Literal, Union

from pydantic import BaseModel, ConfigDict, Field

from .authoring import integer, name, number, pair, sequence, tagged
from .errors import VerifError, noting
from .weights import weighted_choice

logger = logging.getLogger(__name__)


# =============================================================================
# Repeats
# =============================================================================


def _round_stochastically(x: float, rng: Random) -> int:
    """Round x down, then up by one with probability equal to its fraction."""
    whole = math.floor(x)
    fraction = x - whole
    if fraction and rng.random() < fraction:
        whole += 1
    return int(whole)


class Repeats(BaseModel):
    """How many times something happens."""

    model_config = ConfigDict(frozen=True)

    mode: str

    def eval(self, rng: Random) -> int:
        raise NotImplementedError


class Exactly(Repeats):
    """A fixed count; never consumes randomness."""

    mode: Literal["exactly"] = "exactly"
    count: int

    def eval(self, rng: Random) -> int:
        return self.count


class Just(Repeats):
    """A real-valued expectation: floor(x) plus one more with P(fraction)."""

    mode: Literal["just"] = "just"
    expected: float

    def eval(self, rng: Random) -> int:
        return _round_stochastically(self.expected, rng)


class Between(Repeats):
    """x drawn uniformly from [lo, hi), then rounded like Just."""

    mode: Literal["between"] = "between"
    lo: float
    hi: float

    def eval(self, rng: Random) -> int:
        x = self.lo + (self.hi - self.lo) * rng.random()
        return _round_stochastically(x, rng)


AnyRepeats = Annotated[Union[Exactly, Just, Between], Field(discriminator="mode")]


# =============================================================================
# Evaluation output
# =============================================================================


class Output(BaseModel):
    """Everything one evaluation produced."""

    xp: int = 0
    items: list[Any] = Field(default_factory=list)


# =============================================================================
# Tree nodes
# =============================================================================


class EvalputNode(BaseModel):
    """Base class for all Evalput nodes."""

    model_config = ConfigDict(frozen=True)

    node: str

    # Shown in verification context lines
    label: ClassVar[str] = ""

    def eval(self, output: Output, rng: Random) -> None:
        raise NotImplementedError

    def map_item(self, fn: Callable[[Any], Any]) -> "EvalputNode":
        raise NotImplementedError

    def ok_or_item(self, fn: Callable[[Any], Any]) -> "EvalputNode":
        """Like map_item, for lookups that can fail.

        The first exception raised by `fn` propagates; no partial tree is
        ever returned.
        """
        return self.map_item(fn)

    def iter_items(self) -> Iterator[Any]:
        """Yield every item leaf, depth first."""
        raise NotImplementedError


class All(EvalputNode):
    node: Literal["all"] = "all"
    label: ClassVar[str] = "All"
    children: list["Evalput"] = Field(default_factory=list)

    def eval(self, output: Output, rng: Random) -> None:
        for child in self.children:
            child.eval(output, rng)

    def map_item(self, fn: Callable[[Any], Any]) -> "All":
        return All(children=[child.map_item(fn) for child in self.children])

    def iter_items(self) -> Iterator[Any]:
        for child in self.children:
            yield from child.iter_items()


class OneOf(EvalputNode):
    node: Literal["one_of"] = "one_of"
    label: ClassVar[str] = "OneOf"
    branches: list[tuple[float, "Evalput"]]

    def eval(self, output: Output, rng: Random) -> None:
        weighted_choice(self.branches, rng).eval(output, rng)

    def map_item(self, fn: Callable[[Any], Any]) -> "OneOf":
        return OneOf(branches=[(weight, body.map_item(fn)) for weight, body in self.branches])

    def iter_items(self) -> Iterator[Any]:
        for _, body in self.branches:
            yield from body.iter_items()


class Amount(EvalputNode):
    node: Literal["amount"] = "amount"
    label: ClassVar[str] = "Amount"
    repeats: AnyRepeats
    body: "Evalput"

    def eval(self, output: Output, rng: Random) -> None:
        # Each repetition re-rolls any randomness nested in the body
        for _ in range(self.repeats.eval(rng)):
            self.body.eval(output, rng)

    def map_item(self, fn: Callable[[Any], Any]) -> "Amount":
        return Amount(repeats=self.repeats, body=self.body.map_item(fn))

    def iter_items(self) -> Iterator[Any]:
        yield from self.body.iter_items()


class Chance(EvalputNode):
    node: Literal["chance"] = "chance"
    label: ClassVar[str] = "Chance"
    chance: float
    body: "Evalput"

    def eval(self, output: Output, rng: Random) -> None:
        if rng.random() < self.chance:
            self.body.eval(output, rng)

    def map_item(self, fn: Callable[[Any], Any]) -> "Chance":
        return Chance(chance=self.chance, body=self.body.map_item(fn))

    def iter_items(self) -> Iterator[Any]:
        yield from self.body.iter_items()


class Xp(EvalputNode):
    node: Literal["xp"] = "xp"
    label: ClassVar[str] = "Xp"
    repeats: AnyRepeats

    def eval(self, output: Output, rng: Random) -> None:
        output.xp += self.repeats.eval(rng)

    def map_item(self, fn: Callable[[Any], Any]) -> "Xp":
        return self

    def iter_items(self) -> Iterator[Any]:
        return iter(())


class Item(EvalputNode):
    node: Literal["item"] = "item"
    label: ClassVar[str] = "Item"
    item: Any

    def eval(self, output: Output, rng: Random) -> None:
        output.items.append(self.item)

    def map_item(self, fn: Callable[[Any], Any]) -> "Item":
        return Item(item=fn(self.item))

    def iter_items(self) -> Iterator[Any]:
        yield self.item


class Nothing(EvalputNode):
    node: Literal["nothing"] = "nothing"
    label: ClassVar[str] = "Nothing"

    def eval(self, output: Output, rng: Random) -> None:
        pass

    def map_item(self, fn: Callable[[Any], Any]) -> "Nothing":
        return self

    def iter_items(self) -> Iterator[Any]:
        return iter(())


Evalput = Annotated[
    Union[All, OneOf, Amount, Chance, Xp, Item, Nothing],
    Field(discriminator="node"),
]

for _model in (All, OneOf, Amount, Chance):
    _model.model_rebuild()


def evaluate(tree: EvalputNode, rng: Random) -> Output:
    """Evaluate a tree once, returning a fresh Output.

    Evaluation never fails; every probability was checked when the tree
    was verified.
    """
    output = Output()
    tree.eval(output, rng)
    logger.debug("Evaluated evalput: xp=%d, items=%d", output.xp, len(output.items))
    return output


# =============================================================================
# Author format
# =============================================================================


def parse_repeats(node: Any) -> Repeats:
    """Read a repeat count.

    A whole number is Exactly, a real number is Just and a two-element list
    is Between. `{Exactly: n}`, `{Just: x}` and `{Between: [lo, hi]}` spell
    the variant out.
    """
    if isinstance(node, bool):
        raise VerifError.custom(f"expected a repeat count, found {node!r}")
    if isinstance(node, int):
        return Exactly(count=node)
    if isinstance(node, float):
        return Just(expected=node)
    if isinstance(node, list):
        lo, hi = pair(node, "a Between repeat")
        return Between(lo=number(lo, "the lower bound"), hi=number(hi, "the upper bound"))

    tag, body = tagged(node, "a repeat count")
    if tag == "Exactly":
        return Exactly(count=integer(body, "an Exactly repeat"))
    if tag == "Just":
        return Just(expected=number(body, "a Just repeat"))
    if tag == "Between":
        lo, hi = pair(body, "a Between repeat")
        return Between(lo=number(lo, "the lower bound"), hi=number(hi, "the upper bound"))
    raise VerifError.custom(f"unknown repeat kind {tag!r}, expected Exactly, Just or Between")


def parse_evalput(node: Any) -> EvalputNode:
    """Read an author-format evalput into a raw tree of item names."""
    tag, body = tagged(node, "an evalput")
    if tag not in _EVALPUT_TAGS:
        raise VerifError.custom(
            f"unknown evalput node {tag!r}, expected one of {', '.join(_EVALPUT_TAGS)}"
        )

    with noting(f"in an evalput's {tag} node"):
        if tag == "All":
            return All(children=[parse_evalput(child) for child in sequence(body, "All")])
        if tag == "OneOf":
            branches = []
            for branch in sequence(body, "OneOf"):
                weight, child = pair(branch, "a weighted OneOf branch")
                branches.append((number(weight, "a OneOf weight"), parse_evalput(child)))
            return OneOf(branches=branches)
        if tag == "Amount":
            repeats, child = pair(body, "Amount")
            return Amount(repeats=parse_repeats(repeats), body=parse_evalput(child))
        if tag == "Chance":
            chance, child = pair(body, "Chance")
            return Chance(chance=number(chance, "a Chance probability"), body=parse_evalput(child))
        if tag == "Xp":
            return Xp(repeats=parse_repeats(body))
        if tag == "Item":
            return Item(item=name(body, "an Item"))
        return Nothing()


_EVALPUT_TAGS = ("All", "OneOf", "Amount", "Chance", "Xp", "Item", "Nothing")
