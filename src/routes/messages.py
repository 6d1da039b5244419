"""Message endpoints: peek, receive, dead-letter and send by entity name or address."""

from datetime import UTC, datetime

from fastapi import APIRouter, HTTPException, Request, status

from common.errors import EntityNotFoundError
from common.logging import get_logger
from services.service_bus.schemas import DisplayedMessage, SendMessageRequest

logger = get_logger(__name__)
router = APIRouter(prefix="/api", tags=["messages"])


def _raise_for(operation: str, name: str, error: Exception):
    """Map service errors onto HTTP responses."""
    if isinstance(error, EntityNotFoundError):
        raise HTTPException(status_code=404, detail=str(error)) from error
    if isinstance(error, ValueError):
        raise HTTPException(status_code=400, detail=str(error)) from error

    logger.error(f"{operation} failed for {name}: {error}", exc_info=True)
    raise HTTPException(status_code=500, detail=f"{operation} failed: {str(error)}") from error


@router.get("/entities/{name:path}/messages", response_model=list[DisplayedMessage])
async def peek_messages(request: Request, name: str, max_count: int | None = None):
    """Peek at messages without consuming them. Append /$DeadLetterQueue to peek the dead-letter sub-queue."""
    entity_service = request.app.state.entity_service
    try:
        return await entity_service.peek(name, max_count)
    except Exception as e:
        _raise_for("Peek", name, e)


@router.post("/entities/{name:path}/receive", response_model=list[DisplayedMessage])
async def receive_messages(request: Request, name: str, max_count: int | None = None):
    """Receive and delete messages."""
    entity_service = request.app.state.entity_service
    try:
        return await entity_service.receive(name, max_count)
    except Exception as e:
        _raise_for("Receive", name, e)


@router.post("/entities/{name:path}/dead-letter", response_model=list[DisplayedMessage])
async def dead_letter_messages(
    request: Request,
    name: str,
    max_count: int | None = None,
    reason: str | None = None,
    description: str | None = None,
):
    """Move messages to the entity's dead-letter sub-queue."""
    entity_service = request.app.state.entity_service
    try:
        return await entity_service.dead_letter(name, max_count, reason=reason, description=description)
    except Exception as e:
        _raise_for("Dead-letter", name, e)


@router.post("/messages/{name:path}", status_code=status.HTTP_201_CREATED)
async def send_message(request: Request, name: str, message: SendMessageRequest):
    """
    Send a message to a queue or topic.

    Example request:
        ```json
        {
            "body": "{\\"orderId\\": 42}",
            "content_type": "application/json",
            "application_properties": {"MessageType": "MT_EVENT"},
            "broker_properties": {"Subject": "order.created", "TimeToLive": 300}
        }
        ```
    """
    entity_service = request.app.state.entity_service
    try:
        address, message_id = await entity_service.send(name, message)
    except Exception as e:
        _raise_for("Send", name, e)

    return {
        "success": True,
        "entity": name,
        "address": address.path,
        "messageId": message_id,
        "sentAt": datetime.now(UTC).isoformat(),
    }
