from azure.servicebus import ServiceBusReceiveMode, ServiceBusSubQueue, TransportType
from azure.servicebus.aio import ServiceBusClient as AzureServiceBusClient
from azure.servicebus.aio import ServiceBusReceiver

from catalog.addressing import EntityAddress
from common.config import config
from common.errors import TransportError, handle_service_bus_errors
from common.logging import get_logger
from services.service_bus.schemas import DisplayedMessage, SendMessageRequest

logger = get_logger(__name__)

EMULATOR_CONNECTION_TEMPLATE = (
    "Endpoint=sb://{host};SharedAccessKeyName=RootManageSharedAccessKey;"
    "SharedAccessKey=SAS_KEY_VALUE;UseDevelopmentEmulator=true;"
)


def build_emulator_connection_string(value: str | None) -> str:
    """
    Normalize whatever the host passed in into an AMQP connection string.

    Full connection strings pass through. A bare host (optionally with an
    http/https scheme) gets the emulator's well-known SAS key.
    """
    if not value or not value.strip():
        return ""
    value = value.strip()
    if value.lower().startswith("endpoint="):
        return value

    host = value.replace("http://", "").replace("https://", "").rstrip("/")
    return EMULATOR_CONNECTION_TEMPLATE.format(host=host)


class ServiceBusClient:
    """Address-based send/receive/peek/dead-letter against the Service Bus emulator."""

    def __init__(self, connection_string: str | None = None):
        self.connection_string = build_emulator_connection_string(
            connection_string if connection_string is not None else config.get_service_bus_connection_string()
        )
        self.max_wait_time = config.receive_max_wait_time

        if not self.connection_string:
            logger.warning(f"No Service Bus connection string found for resource: {config.asb_resource_name}")

    @property
    def is_configured(self) -> bool:
        return bool(self.connection_string)

    def _create_service_bus_client(self) -> AzureServiceBusClient:
        if not self.is_configured:
            raise TransportError("Service Bus connection string is not configured")

        client_kwargs = {}
        if config.service_bus_use_websocket:
            client_kwargs["transport_type"] = TransportType.AmqpOverWebsocket
            logger.debug("Using WebSocket transport")

        return AzureServiceBusClient.from_connection_string(self.connection_string, **client_kwargs)

    @staticmethod
    def _get_receiver(
        client: AzureServiceBusClient,
        address: EntityAddress,
        receive_mode: ServiceBusReceiveMode = ServiceBusReceiveMode.PEEK_LOCK,
    ) -> ServiceBusReceiver:
        """Queue or subscription receiver for the address, on its dead-letter sub-queue if requested."""
        receiver_kwargs = {"receive_mode": receive_mode}
        if address.dead_letter:
            receiver_kwargs["sub_queue"] = ServiceBusSubQueue.DEAD_LETTER

        if address.is_subscription:
            return client.get_subscription_receiver(
                topic_name=address.entity_name,
                subscription_name=address.subscription_name,
                **receiver_kwargs,
            )
        return client.get_queue_receiver(queue_name=address.entity_name, **receiver_kwargs)

    # ============================================================================
    # RECEIVE
    # ============================================================================

    async def peek_messages(self, address: EntityAddress, max_count: int) -> list[DisplayedMessage]:
        """Look at messages without locking or removing them."""
        with handle_service_bus_errors("Peek"):
            async with self._create_service_bus_client() as client:
                receiver = self._get_receiver(client, address)
                async with receiver:
                    peeked = await receiver.peek_messages(max_message_count=max_count)

        messages = [DisplayedMessage.from_received(msg) for msg in peeked]
        logger.info(f"Peeked {len(messages)} messages from {address.path}")
        return messages

    async def receive_messages(self, address: EntityAddress, max_count: int) -> list[DisplayedMessage]:
        """Receive and delete messages."""
        with handle_service_bus_errors("Receive"):
            async with self._create_service_bus_client() as client:
                receiver = self._get_receiver(client, address, ServiceBusReceiveMode.RECEIVE_AND_DELETE)
                async with receiver:
                    received = await receiver.receive_messages(
                        max_message_count=max_count, max_wait_time=self.max_wait_time
                    )

        messages = [DisplayedMessage.from_received(msg) for msg in received]
        logger.info(f"Received {len(messages)} messages from {address.path}")
        return messages

    async def dead_letter_messages(
        self,
        address: EntityAddress,
        max_count: int,
        reason: str | None = None,
        description: str | None = None,
    ) -> list[DisplayedMessage]:
        """Move up to max_count messages to the entity's dead-letter sub-queue."""
        if address.dead_letter:
            raise ValueError(f"Messages in {address.path} are already dead-lettered")

        moved: list[DisplayedMessage] = []
        with handle_service_bus_errors("DeadLetter"):
            async with self._create_service_bus_client() as client:
                receiver = self._get_receiver(client, address)
                async with receiver:
                    received = await receiver.receive_messages(
                        max_message_count=max_count, max_wait_time=self.max_wait_time
                    )
                    for msg in received:
                        await receiver.dead_letter_message(msg, reason=reason, error_description=description)
                        moved.append(DisplayedMessage.from_received(msg))

        logger.info(f"Dead-lettered {len(moved)} messages from {address.path}")
        return moved

    # ============================================================================
    # SEND
    # ============================================================================

    async def send_message(self, address: EntityAddress, request: SendMessageRequest, is_topic: bool = False) -> str:
        """Send one message to a queue or topic. Returns its message id."""
        if address.is_subscription:
            raise ValueError(f"Cannot send to subscription {address.path}; send to topic {address.entity_name}")
        if address.dead_letter:
            raise ValueError(f"Cannot send to dead-letter sub-queue {address.path}")

        message = request.to_service_bus_message()
        with handle_service_bus_errors("Send"):
            async with self._create_service_bus_client() as client:
                if is_topic:
                    sender = client.get_topic_sender(topic_name=address.entity_name)
                else:
                    sender = client.get_queue_sender(queue_name=address.entity_name)
                async with sender:
                    await sender.send_messages(message)

        logger.info(f"Sent message {message.message_id} to {address.path}")
        return message.message_id
