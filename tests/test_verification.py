"""Tests for the verification pass.

Critical scenarios tested:
- Misspelled names come back with close suggestions
- Errors carry their context trail, innermost construct first
- Pointless or impossible probabilistic constructs are rejected
"""

import pytest

from steadcore.services.rules import Config, VerifError, verify
from steadcore.services.rules.advancement import ExtraTimeTicksMultiplier
from steadcore.services.rules.content import OnlyPlants
from steadcore.services.rules.errors import UnknownItem, UnknownPlant
from steadcore.services.rules.verification import RawConfig

from .conftest import gotchi, keepsake, make_raw_config, plant_skill


def bread_plant(*skills: dict) -> dict:
    if not skills:
        skills = (plant_skill("Sprouting", 0, {"Xp": 1}),)
    return {"name": "Bread Plant", "skills": list(skills)}


def verify_hatch_table(hatch_table) -> Config:
    raw = make_raw_config(
        items=[keepsake("Bread"), keepsake("Warp Powder"), gotchi("Egg", hatch_table)],
    )
    return verify(raw)


def verification_error(raw: RawConfig) -> VerifError:
    with pytest.raises(VerifError) as exc_info:
        verify(raw)
    return exc_info.value


class TestValidContent:
    def test_sample_content_verifies(self, config):
        assert [a.name for a in config.possession_archetypes] == [
            "Bread Seed",
            "Cyberlite Seed",
            "Bread",
            "Warp Powder",
            "Land Deed",
            "Adorpheus",
        ]
        assert [p.name for p in config.plant_archetypes] == ["Bread Plant", "Cyberlite"]
        assert config.special_users == ["U01"]

    def test_names_resolved_to_handles(self, config):
        assert config.possession_archetypes[0].seed().grows_into == 0
        assert config.possession_archetypes[1].seed().grows_into == 1
        hatch_table = config.possession_archetypes[5].gotchi().hatch_table
        assert list(hatch_table.iter_items()) == [2, 3]

    def test_effect_filter_and_advancement(self, config):
        (effect,) = config.possession_archetypes[3].keepsake().plant_effects
        assert effect.for_plants == OnlyPlants(plants=[0])
        assert effect.advancement.title == "Warp Powder"
        assert effect.duration == 30

    def test_recipe_resolved(self, config):
        baker = config.plant_archetypes[0].advancements.get(3)
        (recipe,) = baker.kind.recipes
        assert recipe.needs == [(1, 0)]
        assert recipe.makes.all() == [(2, 2)]

    def test_profile_ladder(self, config):
        ladder = config.profile_archetype.advancements
        assert [a.kind.pieces for a in ladder.all()] == [3, 1]

    def test_empty_content_still_needs_a_profile_ladder(self):
        raw = make_raw_config(profile={"advancements": []})
        error = verification_error(raw)
        assert "at least a base advancement" in error.kind.describe()
        assert error.context == ["in the profile advancements", "from a file hackstead.yml"]


class TestUnknownNames:
    def test_item_typo_suggests_the_real_name(self):
        with pytest.raises(VerifError) as exc_info:
            verify_hatch_table({"All": [{"Item": "Warp Powdr"}]})
        error = exc_info.value
        assert isinstance(error.kind, UnknownItem)
        assert error.kind.name == "Warp Powdr"
        assert error.kind.suggestions[0] == "Warp Powder"

    def test_item_context_trail(self):
        """The trail runs from the failing leaf up to the file."""
        with pytest.raises(VerifError) as exc_info:
            verify_hatch_table({"All": [{"Item": "Warp Powdr"}]})
        assert exc_info.value.context == [
            "in an evalput's Item node",
            "in an evalput's All node",
            "in the hatch table",
            "in the item named Egg",
            "from a file items/test.yml",
        ]

    def test_report(self):
        with pytest.raises(VerifError) as exc_info:
            verify_hatch_table({"Item": "Warp Powdr"})
        report = exc_info.value.report()
        lines = report.splitlines()
        assert lines[0] == "I ran into trouble verifying your config"
        assert lines[1] == "> in an evalput's Item node"
        assert lines[-1] == (
            "as referenced item Warp Powdr, but no item with this name could be found. "
            "Perhaps you meant Warp Powder?"
        )
        assert str(exc_info.value) == report

    def test_transposed_letters_suggest_the_real_name(self):
        with pytest.raises(VerifError) as exc_info:
            verify_hatch_table({"Item": "Braed"})
        assert exc_info.value.kind.suggestions == ["Bread"]

    def test_one_letter_off_in_a_short_name(self):
        raw = make_raw_config(items=[keepsake("Bag"), gotchi("Hatchling", {"Item": "Bgg"})])
        assert verification_error(raw).kind.suggestions == ["Bag"]

    def test_no_suggestions_when_nothing_is_close(self):
        with pytest.raises(VerifError) as exc_info:
            verify_hatch_table({"Item": "Zzyzx"})
        assert exc_info.value.kind.suggestions == []
        assert "Perhaps" not in exc_info.value.kind.describe()

    def test_threshold_is_configurable(self):
        raw = make_raw_config(items=[keepsake("Warp Powder"), gotchi("Egg", {"Item": "Warp Powdr"})])
        raw = RawConfig(raw.items, raw.plants, raw.profile, item_threshold=0.9)
        assert verification_error(raw).kind.suggestions == []

    def test_plant_typo(self):
        """A misspelled plant name should suggest the real plant."""
        raw = make_raw_config(
            items=[{"name": "Bread Seed", "kind": {"Seed": {"grows_into": "Bred Plant"}}}],
            plants=[bread_plant()],
        )
        error = verification_error(raw)
        assert isinstance(error.kind, UnknownPlant)
        assert error.kind.suggestions == ["Bread Plant"]
        assert error.context == [
            "in what the seed grows into",
            "in the item named Bread Seed",
            "from a file items/test.yml",
        ]

    def test_unknown_item_in_plant_filter(self):
        raw = make_raw_config(
            items=[
                {
                    "name": "Warp Powder",
                    "kind": {
                        "Keepsake": {
                            "plant_effects": [
                                {
                                    "description": "Speeds up yields for a while",
                                    "for_plants": {"Not": ["Bred Plant"]},
                                    "kind": {"YieldSpeedMultiplier": 2.0},
                                }
                            ]
                        }
                    },
                }
            ],
            plants=[bread_plant()],
        )
        error = verification_error(raw)
        assert isinstance(error.kind, UnknownPlant)
        assert error.context[:2] == [
            "in a not filter",
            'in an effect described "Speeds up yields for..."',
        ]


class TestEvalputChecks:
    """Test scenarios for pointless or impossible reward trees."""

    @pytest.mark.parametrize(
        "hatch_table,message",
        [
            ({"OneOf": [[1.0, {"Item": "Bread"}]]}, "at least two branches"),
            ({"OneOf": [[0.5, {"Item": "Bread"}], [0.6, "Nothing"]]}, "add up to 1.0"),
            ({"OneOf": [[-0.5, {"Item": "Bread"}], [1.5, "Nothing"]]}, "must be positive"),
            ({"Chance": [1.0, {"Item": "Bread"}]}, "strictly between 0 and 1"),
            ({"Chance": [0, {"Item": "Bread"}]}, "strictly between 0 and 1"),
            ({"Amount": [1, {"Item": "Bread"}]}, "exactly once"),
            ({"Amount": [1.0, {"Item": "Bread"}]}, "exactly once"),
            ({"Amount": [0, {"Item": "Bread"}]}, "zero times"),
            ({"Amount": [0.0, {"Item": "Bread"}]}, "zero times"),
            ({"Amount": [[2, 2], {"Item": "Bread"}]}, "identical bounds"),
            ({"Amount": [[3, 1], {"Item": "Bread"}]}, "lower bound"),
            ({"Amount": [-2, {"Item": "Bread"}]}, "negative"),
            ({"Xp": [1, 1]}, "identical bounds"),
            ({"All": []}, "at least one child"),
        ],
    )
    def test_rejected(self, hatch_table, message):
        with pytest.raises(VerifError) as exc_info:
            verify_hatch_table(hatch_table)
        assert message in exc_info.value.kind.describe()

    def test_weights_within_tolerance_accepted(self):
        config = verify_hatch_table(
            {"OneOf": [[0.1, {"Item": "Bread"}], [0.2, "Nothing"], [0.7, {"Xp": 1}]]}
        )
        assert config.possession_archetypes[2].gotchi().hatch_table.branches[0][0] == 0.1

    def test_xp_may_be_exactly_one(self):
        verify_hatch_table({"All": [{"Xp": 1}, {"Amount": [2, {"Item": "Bread"}]}]})

    def test_gotchi_without_hatch_table(self):
        config = verify(make_raw_config(items=[gotchi("Egg", None)]))
        assert config.possession_archetypes[0].gotchi().hatch_table is None

    def test_misspelled_gotchi_field(self):
        raw = make_raw_config(items=[{"name": "Egg", "kind": {"Gotchi": {"hatch_tabel": "Nothing"}}}])
        assert "I couldn't read a gotchi" in verification_error(raw).kind.describe()


class TestLadderChecks:
    """Test scenarios for skill and profile ladders."""

    def test_zero_cost_rung_after_base(self):
        raw = make_raw_config(
            plants=[
                bread_plant(
                    plant_skill("Sprouting", 0, {"Xp": 1}),
                    plant_skill("Grainy", 0, {"Xp": 1}),
                )
            ]
        )
        error = verification_error(raw)
        assert "must cost more than 0 xp" in error.kind.describe()
        assert error.context == [
            'in an advancement titled "Grainy"',
            "in the plant's skills",
            "in a plant named Bread Plant",
            "from a file plants/plant_0.yml",
        ]

    def test_plant_needs_a_base_rung(self):
        raw = make_raw_config(plants=[{"name": "Bread Plant", "skills": []}])
        assert "at least a base advancement" in verification_error(raw).kind.describe()

    def test_extra_ticks_multiplier_kind(self):
        raw = make_raw_config(
            plants=[bread_plant(plant_skill("Sprouting", 0, {"ExtraTimeTicksMultiplier": 1.5}))]
        )
        base = verify(raw).plant_archetypes[0].advancements.base
        assert base.kind == ExtraTimeTicksMultiplier(multiplier=1.5)

    def test_extra_ticks_multiplier_must_be_positive(self):
        raw = make_raw_config(
            plants=[bread_plant(plant_skill("Sprouting", 0, {"ExtraTimeTicksMultiplier": 0}))]
        )
        assert "must be positive" in verification_error(raw).kind.describe()

    def test_unknown_plant_kind(self):
        raw = make_raw_config(plants=[bread_plant(plant_skill("Sprouting", 0, {"Sing": 1}))])
        assert "unknown plant advancement kind" in verification_error(raw).kind.describe()

    def test_neighbor_yield_context(self):
        raw = make_raw_config(
            items=[keepsake("Bread")],
            plants=[
                bread_plant(
                    plant_skill("Sprouting", 0, {"Neighbor": {"Yield": [{"dropped_item": "Bred"}]}})
                )
            ],
        )
        error = verification_error(raw)
        assert error.kind.suggestions == ["Bread"]
        assert error.context[:3] == [
            "in a yield of Bred",
            "in a Neighbor bonus",
            'in an advancement titled "Sprouting"',
        ]

    @pytest.mark.parametrize(
        "plant_yield,message",
        [
            ({"dropped_item": "Bread", "chance": 0}, "chance"),
            ({"dropped_item": "Bread", "chance": 1.5}, "chance"),
            ({"dropped_item": "Bread", "amount": [3, 1]}, "lo <= hi"),
        ],
    )
    def test_bad_yield(self, plant_yield, message):
        raw = make_raw_config(
            items=[keepsake("Bread")],
            plants=[bread_plant(plant_skill("Sprouting", 0, {"Yield": [plant_yield]}))],
        )
        assert message in verification_error(raw).kind.describe()

    @pytest.mark.parametrize(
        "kind", [{"CraftReturnChance": 1.5}, {"YieldSpeedMultiplier": 0}, {"ExtraTimeTicks": 1.5}]
    )
    def test_bad_bonus_values(self, kind):
        raw = make_raw_config(plants=[bread_plant(plant_skill("Sprouting", 0, kind))])
        verification_error(raw)

    def test_land_grant_must_grant_land(self):
        raw = make_raw_config(profile={"advancements": [{"title": "Newcomer", "kind": {"Land": 0}}]})
        assert "at least one piece" in verification_error(raw).kind.describe()


class TestRecipeChecks:
    def baker(self, recipe: dict) -> RawConfig:
        return make_raw_config(
            items=[keepsake("Bread"), keepsake("Bread Seed")],
            plants=[
                bread_plant(
                    plant_skill("Sprouting", 0, {"Xp": 1}),
                    plant_skill("Baker", 10, {"Craft": [recipe]}),
                )
            ],
        )

    def test_unknown_need(self):
        error = verification_error(
            self.baker({"title": "Loaf", "makes": {"Just": "Bread"}, "needs": [[1, "Flour"]], "time": 5})
        )
        assert isinstance(error.kind, UnknownItem)
        assert error.context[:3] == [
            "in what the recipe needs",
            'in a recipe named "Loaf"',
            'in an advancement titled "Baker"',
        ]

    def test_unknown_output(self):
        error = verification_error(
            self.baker({"title": "Loaf", "makes": {"AllOf": [[1, "Bread"], [2, "Jam"]]}, "time": 5})
        )
        assert error.kind.name == "Jam"
        assert error.context[:2] == ["in what the recipe makes", 'in a recipe named "Loaf"']

    def test_one_of_output_weights(self):
        error = verification_error(
            self.baker(
                {
                    "title": "Loaf",
                    "makes": {"OneOf": [[0.5, {"Just": "Bread"}], [0.2, "Nothing"]]},
                    "time": 5,
                }
            )
        )
        assert "add up to 1.0" in error.kind.describe()

    def test_recipe_takes_time(self):
        error = verification_error(self.baker({"title": "Loaf", "makes": "Nothing", "time": 0}))
        assert "must take some time" in error.kind.describe()
        assert error.context[0] == 'in a recipe named "Loaf"'

    def test_valid_recipe(self):
        config = verify(
            self.baker(
                {"title": "Loaf", "makes": {"Just": [2, "Bread"]}, "needs": [[1, "Bread Seed"]], "time": 5}
            )
        )
        (recipe,) = config.plant_archetypes[0].advancements.get(1).kind.recipes
        assert recipe.needs == [(1, 1)]
        assert recipe.makes.output(None) == [0, 0]


class TestDuplicates:
    def test_duplicate_item_names(self):
        raw = make_raw_config(items=[keepsake("Bread"), keepsake("Bread")])
        error = verification_error(raw)
        assert "more than one item is named Bread" in error.kind.describe()
        assert error.context == ["from a file items/test.yml"]

    def test_duplicate_plant_names(self):
        raw = make_raw_config(plants=[bread_plant(), bread_plant()])
        assert "more than one plant" in verification_error(raw).kind.describe()

    def test_unknown_item_kind(self):
        raw = make_raw_config(items=[{"name": "Widget", "kind": {"Gadget": None}}])
        assert "unknown item kind" in verification_error(raw).kind.describe()
