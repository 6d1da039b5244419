"""Entity catalog endpoints."""

from fastapi import APIRouter, HTTPException, Request
from pydantic import BaseModel

from catalog.addressing import address_for, exists, to_address
from common.logging import get_logger
from models.entity import LogicalEntity

logger = get_logger(__name__)
router = APIRouter(prefix="/api/entities", tags=["entities"])


class EntityResponse(LogicalEntity):
    """Catalog entry with its canonical address."""

    address: str

    @classmethod
    def from_entity(cls, entity: LogicalEntity) -> "EntityResponse":
        return cls(**entity.model_dump(), address=address_for(entity))


class ResolveResponse(BaseModel):
    name: str
    address: str
    exists: bool


@router.get("", response_model=list[EntityResponse])
async def list_entities(request: Request):
    """
    List queues, topics and subscriptions in the emulator.

    Queues come first, then topics, then subscriptions grouped by parent
    topic. Counts are summed over each entity's main and shadow rows.

    The built-in lookup query reads no MessageCount or GroupId column, so
    counts stay 0 and rows fold by name only. Set ASB_SQL_ENTITY_QUERY to a
    query that also selects those columns to get counts and group folding.
    """
    entity_service = request.app.state.entity_service
    try:
        catalog = await entity_service.list_entities()
        return [EntityResponse.from_entity(entity) for entity in catalog]
    except Exception as e:
        logger.error(f"Listing entities failed: {e}", exc_info=True)
        raise HTTPException(status_code=500, detail=f"Listing entities failed: {str(e)}") from e


@router.get("/resolve", response_model=ResolveResponse)
async def resolve_entity(request: Request, name: str):
    """Translate a name into its canonical address and report whether the entity exists."""
    entity_service = request.app.state.entity_service
    try:
        catalog = await entity_service.list_entities()
    except Exception as e:
        logger.error(f"Resolving {name} failed: {e}", exc_info=True)
        raise HTTPException(status_code=500, detail=f"Resolve failed: {str(e)}") from e

    return ResolveResponse(name=name, address=to_address(name), exists=exists(name, catalog))
