"""Shared fixtures for content rules tests."""

from pathlib import Path
from random import Random

import pytest

from steadcore.schemas.raw import FromFile, RawArchetype, RawPlant, RawProfile
from steadcore.services.rules import (
    Config,
    PlantAdvancement,
    PlantAdvancementSet,
    RawConfig,
    yaml_and_verify,
)

# A small but complete content folder
CONTENT_FILES = {
    "items/basics.yml": """\
- &seed_base
  name: Bread Seed
  description: grows bread
  welcome_gift: true
  kind:
    Seed:
      grows_into: Bread Plant
- <<: *seed_base
  name: Cyberlite Seed
  welcome_gift: false
  kind:
    Seed:
      grows_into: Cyberlite
- name: Bread
  kind:
    Keepsake:
- name: Warp Powder
  description: makes plants grow faster
  kind:
    Keepsake:
      plant_effects:
        - description: Speeds up yields
          duration: 30
          for_plants:
            Only: [Bread Plant]
          kind:
            YieldSpeedMultiplier: 2.0
- name: Land Deed
  kind:
    Keepsake:
      unlocks_land:
        requires_xp: true
- name: Adorpheus
  kind:
    Gotchi:
      base_happiness: 1
      hatch_table:
        All:
          - Item: Bread
          - OneOf:
              - [0.3, {Item: Warp Powder}]
              - [0.7, Nothing]
          - Xp: 5
""",
    "plants/bread_plant.yml": """\
name: Bread Plant
base_yield_duration: 100
""",
    "plants/bread_plant_skills.yml": """\
- title: Sprouting
  xp: 0
  kind:
    Yield:
      - dropped_item: Bread
        amount: [1, 3]
- title: Grainy
  xp: 100
  kind:
    YieldSizeMultiplier: 2.0
- title: Good Neighbor
  xp: 250
  kind:
    Neighbor:
      YieldSpeedMultiplier: 1.5
- title: Baker
  xp: 500
  kind:
    Craft:
      - title: Bread Loaf
        makes: {Just: [2, Bread]}
        needs: [[1, Bread Seed]]
        time: 10
""",
    "plants/cyberlite.yml": """\
name: Cyberlite
""",
    "plants/cyberlite_skills.yml": """\
- title: Humming
  kind:
    Xp: 2
""",
    "hackstead.yml": """\
special_users: [U01]
advancements:
  - title: Newcomer
    kind: {Land: 3}
  - title: Settler
    xp: 50
    kind: {Land: {pieces: 1}}
""",
}


class ScriptedRandom(Random):
    """A Random whose draws are given up front; running out is a test failure."""

    def __init__(self, draws: list[float]):
        super().__init__(0)
        self.draws = list(draws)

    def random(self) -> float:
        if not self.draws:
            raise AssertionError("unexpected random draw")
        return self.draws.pop(0)


def write_content(root: Path, files: dict[str, str]) -> Path:
    """Write a content folder under root."""
    for relative, text in files.items():
        path = root / relative
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_text(text, encoding="utf-8")
    return root


@pytest.fixture
def content_dir(tmp_path: Path) -> Path:
    """The sample content folder, on disk."""
    return write_content(tmp_path / "config", CONTENT_FILES)


@pytest.fixture
def config(content_dir: Path) -> Config:
    """The sample content, verified."""
    return yaml_and_verify(content_dir)


def make_raw_config(
    items: list[dict] | None = None,
    plants: list[dict] | None = None,
    profile: dict | None = None,
) -> RawConfig:
    """Build a RawConfig from in-memory records.

    Plants are plant records with their skills inlined under "skills".
    """
    if profile is None:
        profile = {"advancements": [{"title": "Newcomer", "kind": {"Land": 1}}]}
    return RawConfig(
        items=[
            FromFile("items/test.yml", RawArchetype.model_validate(item)) for item in items or []
        ],
        plants=[
            FromFile(f"plants/plant_{i}.yml", RawPlant.model_validate(plant))
            for i, plant in enumerate(plants or [])
        ],
        profile=FromFile("hackstead.yml", RawProfile.model_validate(profile)),
    )


def plant_skill(title: str, xp: int, kind: dict) -> dict:
    """Helper to write a plant skill record."""
    return {"title": title, "xp": xp, "kind": kind}


def keepsake(name: str) -> dict:
    """Helper to write a keepsake item with no effects."""
    return {"name": name, "kind": {"Keepsake": None}}


def gotchi(name: str, hatch_table) -> dict:
    """Helper to write a gotchi item with a hatch table."""
    return {"name": name, "kind": {"Gotchi": {"hatch_table": hatch_table}}}


def create_ladder(*rungs: tuple[int, object]) -> PlantAdvancementSet:
    """Helper to build a plant ladder from (cost, kind) pairs."""
    advancements = [
        PlantAdvancement(title=f"Rung {i}", xp=cost, kind=kind) for i, (cost, kind) in enumerate(rungs)
    ]
    return PlantAdvancementSet(base=advancements[0], rest=advancements[1:])
