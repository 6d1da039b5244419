import uuid
from datetime import datetime, timedelta
from typing import Any

from azure.servicebus import ServiceBusMessage, ServiceBusReceivedMessage
from pydantic import BaseModel, Field

from common.config import config


def _as_text(value: Any) -> Any:
    if isinstance(value, bytes):
        return value.decode("utf-8", errors="replace")
    return value


def _as_str(value: Any) -> str:
    return "" if value is None else str(value)


class DisplayedMessage(BaseModel):
    """A received or peeked message, flattened for display."""

    sequence_number: int | None = None
    message_id: str | None = None
    correlation_id: str | None = None
    session_id: str | None = None
    subject: str | None = None
    content_type: str | None = None
    enqueued_time: datetime | None = None
    expires_at: datetime | None = None
    delivery_count: int | None = None
    dead_letter_reason: str | None = None
    dead_letter_error_description: str | None = None
    body: str = ""
    application_properties: dict[str, Any] = Field(default_factory=dict)

    @classmethod
    def from_received(cls, message: ServiceBusReceivedMessage) -> "DisplayedMessage":
        properties = message.application_properties or {}
        return cls(
            sequence_number=message.sequence_number,
            message_id=message.message_id,
            correlation_id=message.correlation_id,
            session_id=message.session_id,
            subject=message.subject,
            content_type=message.content_type,
            enqueued_time=message.enqueued_time_utc,
            expires_at=message.expires_at_utc,
            delivery_count=message.delivery_count,
            dead_letter_reason=message.dead_letter_reason,
            dead_letter_error_description=message.dead_letter_error_description,
            body=str(message),
            application_properties={_as_text(k): _as_text(v) for k, v in properties.items()},
        )


class SendMessageRequest(BaseModel):
    """Body of a send request: payload plus application and broker properties."""

    body: str = ""
    content_type: str | None = Field(None, description="Defaults to the configured content type")
    application_properties: dict[str, Any] = Field(default_factory=dict)
    broker_properties: dict[str, Any] = Field(
        default_factory=dict,
        description="Subject, SessionId, PartitionKey, MessageId, CorrelationId, TimeToLive (seconds), ScheduledEnqueueTime (ISO-8601)",
    )

    def to_service_bus_message(self) -> ServiceBusMessage:
        broker = self.broker_properties
        message = ServiceBusMessage(
            self.body,
            content_type=self.content_type or config.default_content_type,
            application_properties=dict(self.application_properties) or None,
        )

        if "Subject" in broker:
            message.subject = _as_str(broker["Subject"])
        if "SessionId" in broker:
            message.session_id = _as_str(broker["SessionId"])
        if "PartitionKey" in broker:
            message.partition_key = _as_str(broker["PartitionKey"])
        message.message_id = _as_str(broker["MessageId"]) if broker.get("MessageId") else str(uuid.uuid4())
        if "CorrelationId" in broker:
            message.correlation_id = _as_str(broker["CorrelationId"])

        # Unparseable values are ignored
        ttl = broker.get("TimeToLive")
        if ttl is not None:
            try:
                message.time_to_live = timedelta(seconds=int(str(ttl)))
            except ValueError:
                pass

        scheduled = broker.get("ScheduledEnqueueTime")
        if scheduled is not None:
            try:
                message.scheduled_enqueue_time_utc = datetime.fromisoformat(str(scheduled))
            except ValueError:
                pass

        return message
