"""Read authored content from a content folder.

Layout:
    items/**/*.yml            lists of item records
    plants/<plant>.yml        one plant record
    plants/<plant>_skills.yml that plant's advancement ladder
    hackstead.yml             profile advancements and special users

YAML anchors, aliases and `<<:` merge keys are resolved while loading, so
shared fragments can be reused freely within a file.
"""

import logging
from pathlib import Path
from typing import Any

import yaml

from steadcore.config import Settings
from steadcore.schemas.raw import FromFile, RawAdvancement, RawArchetype, RawPlant, RawProfile

from .authoring import sequence
from .content import Config
from .errors import VerifError, noting
from .verification import RawConfig, validate_raw, verify

logger = logging.getLogger(__name__)

YAML_SUFFIXES = (".yml", ".yaml")
SKILLS_SUFFIX = "_skills"
PROFILE_FILE = "hackstead.yml"

# Lines of YAML shown on either side of a parse error
EXCERPT_RADIUS = 10


def _excerpt(text: str, line: int, radius: int = EXCERPT_RADIUS) -> str:
    lines = text.splitlines()
    start = max(line - radius, 0)
    end = min(line + radius + 1, len(lines))
    width = len(str(end))
    return "\n".join(
        f"{'>' if n == line else ' '} {n + 1:>{width}} | {lines[n]}" for n in range(start, end)
    )


def load_yaml(path: Path) -> Any:
    try:
        text = path.read_text(encoding="utf-8")
    except (OSError, UnicodeDecodeError) as e:
        raise VerifError.custom(f"I couldn't read this file: {e}").note(f"from a file {path}") from e
    try:
        return yaml.safe_load(text)
    except yaml.YAMLError as e:
        message = f"I couldn't parse this YAML: {e}"
        mark = getattr(e, "problem_mark", None)
        if mark is not None:
            message += "\n" + _excerpt(text, mark.line)
        raise VerifError.custom(message).note(f"from a file {path}") from e


def _record_label(record: Any, key: str) -> str:
    if isinstance(record, dict) and isinstance(record.get(key), str):
        return record[key]
    return "without a name"


def _yaml_files(directory: Path) -> list[Path]:
    return sorted(p for p in directory.rglob("*") if p.is_file() and p.suffix in YAML_SUFFIXES)


def read_items(root: str | Path) -> list[FromFile[RawArchetype]]:
    items = []
    for path in _yaml_files(Path(root) / "items"):
        records = load_yaml(path) or []
        with noting(f"from a file {path}"):
            for record in sequence(records, "a list of items"):
                with noting(f"in the item named {_record_label(record, 'name')}"):
                    items.append(FromFile(str(path), validate_raw(RawArchetype, record, "an item")))
        logger.info("Loaded items: file=%s, count=%d", path, len(records))
    return items


def read_plant(path: Path, skills_path: Path) -> RawPlant:
    node = load_yaml(path)
    with noting(f"from a file {path}"):
        if not isinstance(node, dict):
            raise VerifError.custom(f"expected a plant record, found {node!r}")
        with noting(f"in a plant named {_record_label(node, 'name')}"):
            if "skills" in node or "advancements" in node:
                raise VerifError.custom(
                    f"plant skills must be defined in external file {skills_path.name}"
                )

            skills_node = load_yaml(skills_path) or []
            with noting(f"from a file {skills_path}"):
                skills = [
                    validate_raw(RawAdvancement, skill, "a skill")
                    for skill in sequence(skills_node, "a list of skills")
                ]
            return validate_raw(RawPlant, {**node, "skills": skills}, "a plant")


def read_plants(root: str | Path) -> list[FromFile[RawPlant]]:
    plants = []
    for path in _yaml_files(Path(root) / "plants"):
        if path.stem.endswith(SKILLS_SUFFIX):
            continue
        skills_path = path.with_name(f"{path.stem}{SKILLS_SUFFIX}{path.suffix}")
        if not skills_path.exists():
            logger.debug("Skipping plant file without a skills file: file=%s", path)
            continue
        plants.append(FromFile(str(path), read_plant(path, skills_path)))
        logger.info("Loaded plant: file=%s", path)
    return plants


def read_profile(root: str | Path) -> FromFile[RawProfile]:
    path = Path(root) / PROFILE_FILE
    if not path.exists():
        raise VerifError.custom(f"no {PROFILE_FILE} found in {root}")
    with noting(f"from a file {path}"):
        profile = validate_raw(RawProfile, load_yaml(path), "the profile")
    logger.info("Loaded profile: file=%s, advancements=%d", path, len(profile.advancements))
    return FromFile(str(path), profile)


def load_raw_config(root: str | Path, settings: Settings | None = None) -> RawConfig:
    """Read every content file under root, without verifying anything."""
    logger.info("Reading content: path=%s", root)
    thresholds = {}
    if settings is not None:
        thresholds = dict(
            item_threshold=settings.FUZZY_ITEM_THRESHOLD,
            plant_threshold=settings.FUZZY_PLANT_THRESHOLD,
            max_suggestions=settings.FUZZY_MAX_SUGGESTIONS,
        )
    return RawConfig(
        items=read_items(root),
        plants=read_plants(root),
        profile=read_profile(root),
        **thresholds,
    )


def yaml_and_verify(root: str | Path, settings: Settings | None = None) -> Config:
    return verify(load_raw_config(root, settings))
