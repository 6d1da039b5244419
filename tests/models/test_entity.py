"""Tests for raw and logical entity models."""

from models.entity import EntityKind, EntityTypeByte, RawEntityRecord


def test_from_row_maps_lookup_table_columns():
    record = RawEntityRecord.from_row({"EntityId": 12, "EntityName": "SBEMULATORNS:QUEUE:orders", "EntityType": 0})

    assert record.id == 12
    assert record.raw_name == "SBEMULATORNS:QUEUE:orders"
    assert record.type_byte == 0
    assert record.group_id is None
    assert record.message_count == 0


def test_from_row_reads_optional_group_and_count():
    record = RawEntityRecord.from_row(
        {"EntityId": 1, "EntityName": "x", "EntityType": 1, "GroupId": 77, "MessageCount": 4}
    )
    assert record.group_id == "77"
    assert record.message_count == 4


def test_from_row_tolerates_nulls():
    record = RawEntityRecord.from_row({"EntityId": None, "EntityName": None, "EntityType": None, "MessageCount": None})
    assert record.id == 0
    assert record.raw_name == ""
    assert record.message_count == 0


def test_negative_counts_are_clamped():
    assert RawEntityRecord(raw_name="x", message_count=-3).message_count == 0


def test_blank_group_id_is_none():
    assert RawEntityRecord(raw_name="x", group_id="  ").group_id is None


def test_type_byte_from_value():
    assert EntityTypeByte.from_value(1) == EntityTypeByte.TOPIC
    assert EntityTypeByte.from_value(3) == EntityTypeByte.SUBSCRIPTION_DEFAULT
    assert EntityTypeByte.from_value(9) is None
    assert EntityTypeByte.from_value(None) is None


def test_kind_sort_order():
    assert EntityKind.QUEUE.sort_order < EntityKind.TOPIC.sort_order < EntityKind.SUBSCRIPTION.sort_order
