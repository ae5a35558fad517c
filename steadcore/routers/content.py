"""REST endpoints for looking up verified game content."""

import logging
from random import Random

from fastapi import APIRouter, HTTPException, Query, status

from steadcore.dependencies.content import CurrentConfig
from steadcore.schemas.content import (
    ArchetypeSummary,
    HatchResponse,
    ItemListResponse,
    PlantProgressResponse,
)
from steadcore.services.rules import (
    Archetype,
    ConfigError,
    PlantArchetype,
    evaluate,
    plant_archetype,
    possession_archetype,
)

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/content", tags=["content"])


def _summary(handle: int, archetype: Archetype) -> ArchetypeSummary:
    return ArchetypeSummary(handle=handle, name=archetype.name, kind=archetype.kind.variant)


@router.get("/items", response_model=ItemListResponse)
def list_items(config: CurrentConfig):
    return ItemListResponse(
        items=[_summary(h, a) for h, a in enumerate(config.possession_archetypes)]
    )


@router.get("/items/{handle}", response_model=Archetype)
def get_item(handle: int, config: CurrentConfig):
    """Look up a possession archetype by handle.

    Raises:
        HTTPException 404: If no archetype has this handle.
    """
    try:
        return possession_archetype(config, handle)
    except ConfigError as e:
        logger.warning("GET /content/items/%d - %s", handle, e)
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=str(e))


@router.get("/items/{handle}/hatch", response_model=HatchResponse)
def preview_hatch(
    handle: int,
    config: CurrentConfig,
    seed: int | None = Query(None, description="Seed for a reproducible draw"),
):
    """Evaluate a gotchi's hatch table once.

    Args:
        handle: Possession archetype handle of the gotchi.
        seed: Optional RNG seed; the same seed always hatches the same things.

    Returns:
        HatchResponse with the XP and items produced.

    Raises:
        HTTPException 404: If no archetype has this handle.
        HTTPException 400: If the archetype is not a gotchi with a hatch table.
    """
    try:
        archetype = possession_archetype(config, handle)
    except ConfigError as e:
        logger.warning("GET /content/items/%d/hatch - %s", handle, e)
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=str(e))

    gotchi = archetype.gotchi()
    if gotchi is None or gotchi.hatch_table is None:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail=f"{archetype.name} has nothing to hatch",
        )

    output = evaluate(gotchi.hatch_table, Random(seed))
    logger.info(
        "GET /content/items/%d/hatch - seed: %s, xp: %d, items: %d",
        handle,
        seed,
        output.xp,
        len(output.items),
    )
    return HatchResponse(
        handle=handle,
        xp=output.xp,
        items=[_summary(h, possession_archetype(config, h)) for h in output.items],
    )


@router.get("/plants/{handle}", response_model=PlantArchetype)
def get_plant(handle: int, config: CurrentConfig):
    try:
        return plant_archetype(config, handle)
    except ConfigError as e:
        logger.warning("GET /content/plants/%d - %s", handle, e)
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=str(e))


@router.get("/plants/{handle}/progress", response_model=PlantProgressResponse)
def plant_progress(
    handle: int,
    config: CurrentConfig,
    xp: int = Query(0, ge=0, description="The plant's XP"),
):
    """Show which skill a plant with `xp` has reached and what it adds up to."""
    try:
        plant = plant_archetype(config, handle)
    except ConfigError as e:
        logger.warning("GET /content/plants/%d/progress - %s", handle, e)
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=str(e))

    ladder = plant.advancements
    return PlantProgressResponse(
        handle=handle,
        name=plant.name,
        xp=xp,
        current=ladder.current(xp),
        next=ladder.next(xp),
        level=ladder.level_info(xp),
        sum=ladder.sum(xp),
    )
