"""Translate entity names into Service Bus addresses and check them against the catalog.

Accepted inputs, all resolving to the same address family:

    "orders"                                  -> "orders"
    "SBEMULATORNS:QUEUE:Orders"               -> "orders"
    "orders|$TRANSFER"                        -> "orders/$DeadLetterQueue"
    "events|Sub1"                             -> "events/subscriptions/sub1"
    "events/subscriptions/sub1/$deadletterqueue"
                                              -> "events/subscriptions/sub1/$DeadLetterQueue"
"""

from collections.abc import Iterable

from pydantic import BaseModel, ConfigDict

from catalog.naming import SEPARATORS, ShadowKind, clean_name, split_shadow_suffix, split_subscription
from models.entity import EntityKind, LogicalEntity

DEAD_LETTER_QUEUE_MARKER = "$DeadLetterQueue"
SUBSCRIPTIONS_SEGMENT = "subscriptions"


class EntityAddress(BaseModel):
    """Structured form of a canonical Service Bus address."""

    entity_name: str
    subscription_name: str | None = None
    dead_letter: bool = False

    model_config = ConfigDict(frozen=True)

    @property
    def is_subscription(self) -> bool:
        return self.subscription_name is not None

    @property
    def path(self) -> str:
        if self.is_subscription:
            path = f"{self.entity_name}/{SUBSCRIPTIONS_SEGMENT}/{self.subscription_name}"
        else:
            path = self.entity_name
        if self.dead_letter:
            return f"{path}/{DEAD_LETTER_QUEUE_MARKER}"
        return path

    def without_dead_letter(self) -> "EntityAddress":
        return self.model_copy(update={"dead_letter": False})


def _split_dead_letter_marker(name: str) -> tuple[str, bool]:
    if not name.lower().endswith(DEAD_LETTER_QUEUE_MARKER.lower()):
        return name, False
    base = name[: -len(DEAD_LETTER_QUEUE_MARKER)]
    if base and base[-1] in SEPARATORS:
        base = base[:-1]
    return base, True


def _split_path(name: str) -> tuple[str, str | None]:
    """Split a name into (entity, subscription) from either 'topic|sub' or 'topic/subscriptions/sub'.

    Topic names may themselves contain '/', so the last '/subscriptions/'
    segment is the split point and the subscription part has no '/'.
    """
    marker = f"/{SUBSCRIPTIONS_SEGMENT}/"
    index = name.lower().rfind(marker)
    if index > 0:
        topic, subscription = name[:index], name[index + len(marker) :]
        if subscription and "/" not in subscription:
            return topic, subscription

    parts = split_subscription(name)
    if parts is not None:
        return parts
    return name, None


def parse_address(name: str | None) -> EntityAddress:
    """Parse a display name, catalog key, raw name or address. Never raises."""
    cleaned, dead_letter = _split_dead_letter_marker(clean_name(name))

    base, shadow = split_shadow_suffix(cleaned)
    if shadow != ShadowKind.NONE and base:
        cleaned = base
        dead_letter = dead_letter or shadow.is_dead_letter

    entity_name, subscription_name = _split_path(cleaned)
    return EntityAddress(
        entity_name=entity_name.lower(),
        subscription_name=subscription_name.lower() if subscription_name is not None else None,
        dead_letter=dead_letter,
    )


def to_address(name: str | None) -> str:
    """Canonical address for a display name or path; best effort, never raises."""
    return parse_address(name).path


def address_for(entity: LogicalEntity) -> str:
    """Canonical address of a catalog entry."""
    return to_address(entity.name)


def find_entity(address: str | None, catalog: Iterable[LogicalEntity]) -> LogicalEntity | None:
    """
    Find the catalog entry an address refers to.

    Matching is case-insensitive and exact. Subscription-shaped addresses
    only match subscriptions; a trailing dead-letter marker is ignored so
    a DLQ address matches its parent entity.
    """
    target = parse_address(address).without_dead_letter()
    if not target.entity_name:
        return None

    for entity in catalog:
        if target.is_subscription != (entity.kind == EntityKind.SUBSCRIPTION):
            continue
        if parse_address(entity.name).without_dead_letter() == target:
            return entity
    return None


def exists(address: str | None, catalog: Iterable[LogicalEntity]) -> bool:
    """True when the address resolves to an entity in the catalog."""
    return find_entity(address, catalog) is not None
