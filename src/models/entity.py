"""Entity models for the Service Bus emulator catalog.

RawEntityRecord mirrors one row of the emulator's EntityLookupTable.
LogicalEntity is the folded, user-facing queue/topic/subscription.
"""

from enum import Enum, IntEnum

from pydantic import BaseModel, ConfigDict, Field, field_validator


class EntityKind(str, Enum):
    """Kinds of logical entities shown in the catalog."""

    QUEUE = "Queue"
    TOPIC = "Topic"
    SUBSCRIPTION = "Subscription"

    @property
    def sort_order(self) -> int:
        return _KIND_ORDER[self]


_KIND_ORDER = {
    EntityKind.QUEUE: 0,
    EntityKind.TOPIC: 1,
    EntityKind.SUBSCRIPTION: 2,
}


class EntityTypeByte(IntEnum):
    """Values of the lookup table's Type column."""

    QUEUE = 0
    TOPIC = 1
    SUBSCRIPTION = 2
    SUBSCRIPTION_DEFAULT = 3

    @classmethod
    def from_value(cls, value: int | None) -> "EntityTypeByte | None":
        try:
            return cls(value)
        except (ValueError, TypeError):
            return None

    def is_topic(self) -> bool:
        return self == EntityTypeByte.TOPIC


class RawEntityRecord(BaseModel):
    """One row from the emulator's entity lookup table."""

    id: int = Field(0, alias="EntityId", description="Storage-assigned id, not stable across rebuilds")
    group_id: str | None = Field(None, alias="GroupId", description="Opaque key shared by all rows of one entity")
    raw_name: str = Field("", alias="EntityName", description="Namespace-prefixed flat entity name")
    type_byte: int = Field(0, alias="EntityType", description="Type tag; see EntityTypeByte")
    message_count: int = Field(0, ge=0, alias="MessageCount", description="Messages held by this row")

    model_config = ConfigDict(populate_by_name=True)

    @field_validator("group_id", mode="before")
    @classmethod
    def _group_id_as_text(cls, value):
        if value is None:
            return None
        text = str(value).strip()
        return text or None

    @field_validator("raw_name", mode="before")
    @classmethod
    def _name_or_empty(cls, value):
        return "" if value is None else value

    @field_validator("id", "type_byte", mode="before")
    @classmethod
    def _int_or_zero(cls, value):
        return 0 if value is None else value

    @field_validator("message_count", mode="before")
    @classmethod
    def _count_or_zero(cls, value):
        if value is None:
            return 0
        return max(0, int(value))

    @classmethod
    def from_row(cls, row: dict) -> "RawEntityRecord":
        """Build a record from a lookup-table row; absent or NULL columns fall back to defaults."""
        return cls.model_validate({key: value for key, value in row.items() if value is not None})


class LogicalEntity(BaseModel):
    """A queue, topic or subscription reconstructed from one or more raw rows."""

    kind: EntityKind
    canonical_id: int = Field(0, description="First non-zero raw id folded into this entity")
    name: str = Field(description="Full key; 'topic|subscription' for subscriptions")
    display_name: str = Field(description="Cleaned name; own segment only for subscriptions")
    parent_name: str | None = Field(None, description="Parent topic, subscriptions only")
    active_count: int = Field(0, ge=0)
    dead_letter_count: int = Field(0, ge=0)
