"""Name cleaning and classification for emulator entity names.

The lookup table stores every entity under one flat, namespace-prefixed
name, e.g.:

    SBEMULATORNS:QUEUE:orders
    SBEMULATORNS:QUEUE:orders|$TRANSFER
    SBEMULATORNS:TOPIC:events|sub1|$DEFAULT

Cleaning strips the namespace marker and type tag; suffix detection
separates shadow rows ($TRANSFER = dead-letter, $DEFAULT = active) from
their base entity; classification decides queue/topic/subscription.
"""

from enum import Enum

from pydantic import BaseModel, ConfigDict

from models.entity import EntityKind, EntityTypeByte

NAMESPACE_MARKER = "SBEMULATORNS"
TYPE_TAGS = ("QUEUE", "TOPIC")

# Characters trimmed from the front of a name after each prefix is removed
SEPARATORS = "|/\\:.-_"
# The namespace marker and a type tag only count when one of these follows them
TAG_SEPARATORS = ":|"
PIPE = "|"

TRANSFER_SUFFIX = "$TRANSFER"
DEFAULT_SUFFIX = "$DEFAULT"


class ShadowKind(str, Enum):
    """Which shadow variant a row is, if any."""

    NONE = "none"
    TRANSFER = "transfer"
    DEFAULT = "default"

    @property
    def is_dead_letter(self) -> bool:
        return self == ShadowKind.TRANSFER

    @property
    def rank(self) -> int:
        """Preference when picking the row that represents a group (lower wins)."""
        return _SHADOW_RANK[self]


_SHADOW_RANK = {
    ShadowKind.NONE: 0,
    ShadowKind.DEFAULT: 1,
    ShadowKind.TRANSFER: 2,
}


class ParsedEntityName(BaseModel):
    """Classification of one raw name."""

    kind: EntityKind
    name: str
    display_name: str
    parent_name: str | None = None
    shadow: ShadowKind = ShadowKind.NONE

    model_config = ConfigDict(frozen=True)

    @property
    def fold_key(self) -> tuple[EntityKind, str]:
        return (self.kind, self.name.casefold())


def _starts_with_ignore_case(value: str, prefix: str) -> bool:
    return value[: len(prefix)].upper() == prefix.upper()


def _has_tag_prefix(value: str, prefix: str) -> bool:
    """True when value starts with prefix followed by ':' or '|'."""
    if len(value) <= len(prefix) or not _starts_with_ignore_case(value, prefix):
        return False
    return value[len(prefix)] in TAG_SEPARATORS


def clean_name(raw_name: str | None) -> str:
    """Strip the namespace marker, leading separators and a QUEUE/TOPIC tag.

    The marker and the tag only count when ':' or '|' follows them, so
    entity names such as "sbemulatorns.audit" or "queue-orders" are kept.
    The tag is stripped once; names containing ':' or '|' right after a
    leading "queue"/"topic" are not valid Service Bus names.

    Examples:
        "SBEMULATORNS:QUEUE:orders" -> "orders"
        "SBEMULATORNS:TOPIC:events|sub1" -> "events|sub1"
        "SBEMULATORNS:QUEUE:sbemulatorns.audit" -> "sbemulatorns.audit"
        "orders" -> "orders"
    """
    if not raw_name:
        return ""

    name = raw_name.strip()
    if name.upper() == NAMESPACE_MARKER:
        return ""
    if _has_tag_prefix(name, NAMESPACE_MARKER):
        name = name[len(NAMESPACE_MARKER) :]
    name = name.lstrip(SEPARATORS)

    for tag in TYPE_TAGS:
        if _has_tag_prefix(name, tag):
            name = name[len(tag) + 1 :]
            break

    return name.lstrip(SEPARATORS)


def split_shadow_suffix(name: str) -> tuple[str, ShadowKind]:
    """Split a trailing $TRANSFER / $DEFAULT token (and one separator before it) off a clean name."""
    upper = name.upper()
    for suffix, shadow in ((TRANSFER_SUFFIX, ShadowKind.TRANSFER), (DEFAULT_SUFFIX, ShadowKind.DEFAULT)):
        if upper.endswith(suffix):
            base = name[: -len(suffix)]
            if base and base[-1] in SEPARATORS:
                base = base[:-1]
            return base, shadow
    return name, ShadowKind.NONE


def split_subscription(name: str) -> tuple[str, str] | None:
    """Split 'topic|subscription' on the first pipe; None when the name is not subscription-shaped."""
    topic, sep, subscription = name.partition(PIPE)
    if not sep or not topic or not subscription:
        return None
    return topic, subscription


def classify(base_name: str, type_byte: int | None) -> tuple[EntityKind, str | None]:
    """Decide kind and parent topic for a base name.

    A pipe always means subscription. Otherwise the type byte decides
    between topic and queue; unknown type bytes count as queue.
    """
    parts = split_subscription(base_name)
    if parts is not None:
        return EntityKind.SUBSCRIPTION, parts[0]

    type_tag = EntityTypeByte.from_value(type_byte)
    if type_tag is not None and type_tag.is_topic():
        return EntityKind.TOPIC, None
    return EntityKind.QUEUE, None


def parse_entity_name(raw_name: str | None, type_byte: int | None = None) -> ParsedEntityName | None:
    """Clean, strip shadow suffix and classify a raw name. Returns None for unusable names."""
    cleaned = clean_name(raw_name)
    if not cleaned:
        return None

    base, shadow = split_shadow_suffix(cleaned)
    if not base:
        return None

    if base.endswith(PIPE) and split_subscription(base) is None:
        base = base.rstrip(PIPE)

    kind, parent = classify(base, type_byte)
    if kind == EntityKind.SUBSCRIPTION:
        display_name = base.partition(PIPE)[2]
    else:
        display_name = base

    return ParsedEntityName(
        kind=kind,
        name=base,
        display_name=display_name,
        parent_name=parent,
        shadow=shadow,
    )
