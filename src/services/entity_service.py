"""
Application service tying the entity catalog to storage and transport.

Every call reads the lookup table fresh, builds the catalog and checks
the requested name against it before any transport operation runs.
"""

from catalog.addressing import EntityAddress, find_entity, parse_address
from catalog.builder import build_catalog
from common.config import config
from common.errors import EntityNotFoundError
from common.logging import get_logger
from models.entity import EntityKind, LogicalEntity
from services.emulator_sql.client import EmulatorSqlClient
from services.service_bus.client import ServiceBusClient
from services.service_bus.schemas import DisplayedMessage, SendMessageRequest

logger = get_logger(__name__)


class EntityService:
    def __init__(self, store: EmulatorSqlClient | None = None, service_bus: ServiceBusClient | None = None):
        self.store = store or EmulatorSqlClient()
        self.service_bus = service_bus or ServiceBusClient()

    async def list_entities(self) -> list[LogicalEntity]:
        records = await self.store.get_records()
        catalog = build_catalog(records)
        logger.info(f"Catalog: {len(catalog)} entities from {len(records)} rows")
        return catalog

    async def resolve(self, name: str) -> tuple[EntityAddress, LogicalEntity]:
        """Address and catalog entry for a name; raises EntityNotFoundError when unknown."""
        catalog = await self.list_entities()
        entity = find_entity(name, catalog)
        if entity is None:
            logger.warning(f"Entity not found: {name}")
            raise EntityNotFoundError(name)
        return parse_address(name), entity

    async def peek(self, name: str, max_count: int | None = None) -> list[DisplayedMessage]:
        address, _ = await self.resolve(name)
        return await self.service_bus.peek_messages(address, max_count or config.default_max_messages)

    async def receive(self, name: str, max_count: int | None = None) -> list[DisplayedMessage]:
        address, _ = await self.resolve(name)
        return await self.service_bus.receive_messages(address, max_count or config.default_max_messages)

    async def dead_letter(
        self,
        name: str,
        max_count: int | None = None,
        reason: str | None = None,
        description: str | None = None,
    ) -> list[DisplayedMessage]:
        address, _ = await self.resolve(name)
        return await self.service_bus.dead_letter_messages(
            address, max_count or config.default_max_messages, reason=reason, description=description
        )

    async def send(self, name: str, request: SendMessageRequest) -> tuple[EntityAddress, str]:
        """Send to a queue or topic. Returns the address used and the message id."""
        address, entity = await self.resolve(name)
        message_id = await self.service_bus.send_message(address, request, is_topic=entity.kind == EntityKind.TOPIC)
        return address, message_id
