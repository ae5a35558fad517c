"""Tests for what recipes make."""

import pytest

from steadcore.services.rules.errors import VerifError
from steadcore.services.rules.recipe import (
    MakesAllOf,
    MakesJust,
    MakesNothing,
    MakesOneOf,
    Recipe,
    parse_recipe_makes,
)

from .conftest import ScriptedRandom


class TestRecipeMakes:
    def test_just_repeats_its_item(self):
        makes = MakesJust(count=3, item="Bread")
        assert makes.any(ScriptedRandom([])) == "Bread"
        assert makes.all() == [("Bread", 3)]
        assert makes.output(ScriptedRandom([])) == ["Bread", "Bread", "Bread"]

    def test_nothing_makes_nothing(self):
        makes = MakesNothing()
        assert makes.any(ScriptedRandom([])) is None
        assert makes.all() == []
        assert makes.output(ScriptedRandom([])) == []

    def test_one_of_lists_every_branch_but_outputs_one(self):
        makes = MakesOneOf(
            branches=[
                (0.25, MakesJust(count=2, item="Bread")),
                (0.75, MakesJust(item="Crumb")),
            ]
        )
        assert makes.all() == [("Bread", 2), ("Crumb", 1)]
        assert makes.output(ScriptedRandom([0.1])) == ["Bread", "Bread"]
        assert makes.output(ScriptedRandom([0.9])) == ["Crumb"]
        assert makes.any(ScriptedRandom([0.5])) == "Crumb"

    def test_all_of_outputs_everything(self):
        makes = MakesAllOf(outputs=[(2, "Bread"), (1, "Jam")])
        assert makes.all() == [("Bread", 2), ("Jam", 1)]
        assert makes.output(ScriptedRandom([])) == ["Bread", "Bread", "Jam"]

    def test_all_of_any_picks_uniformly(self):
        makes = MakesAllOf(outputs=[(2, "Bread"), (1, "Jam")])
        assert makes.any(ScriptedRandom([0.2])) == "Bread"
        assert makes.any(ScriptedRandom([0.7])) == "Jam"


class TestRecipe:
    def test_map_item_reaches_needs_and_makes(self):
        recipe = Recipe(
            title="Bread Loaf",
            makes=MakesJust(count=2, item="Bread"),
            needs=[(1, "Bread Seed")],
            time=10,
        )
        handles = {"Bread": 2, "Bread Seed": 0}
        mapped = recipe.map_item(handles.__getitem__)
        assert mapped.needs == [(1, 0)]
        assert mapped.makes == MakesJust(count=2, item=2)
        assert mapped.title == "Bread Loaf"
        assert list(mapped.iter_items()) == [0, 2]

    def test_map_item_failure_propagates(self):
        recipe = Recipe(title="Loaf", makes=MakesJust(item="Bread"), needs=[(1, "Mystery")], time=1)
        with pytest.raises(KeyError):
            recipe.map_item({"Bread": 2}.__getitem__)


class TestParseRecipeMakes:
    def test_forms(self):
        assert parse_recipe_makes("Nothing") == MakesNothing()
        assert parse_recipe_makes({"Just": "Bread"}) == MakesJust(item="Bread")
        assert parse_recipe_makes({"Just": [2, "Bread"]}) == MakesJust(count=2, item="Bread")
        assert parse_recipe_makes({"AllOf": [[2, "Bread"], [1, "Jam"]]}) == MakesAllOf(
            outputs=[(2, "Bread"), (1, "Jam")]
        )

    def test_nested_one_of(self):
        makes = parse_recipe_makes({"OneOf": [[0.5, {"Just": "Bread"}], [0.5, "Nothing"]]})
        assert isinstance(makes, MakesOneOf)
        assert [weight for weight, _ in makes.branches] == [0.5, 0.5]
        assert makes.branches[1][1] == MakesNothing()

    def test_unknown_output(self):
        with pytest.raises(VerifError, match="unknown recipe output"):
            parse_recipe_makes({"Some": "Bread"})

    def test_bad_all_of_count_is_noted(self):
        with pytest.raises(VerifError) as exc_info:
            parse_recipe_makes({"AllOf": [[1.5, "Bread"]]})
        assert exc_info.value.context == ["in a recipe's AllOf output"]
