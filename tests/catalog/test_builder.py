"""Tests for folding raw lookup-table rows into the entity catalog."""

import random

from catalog.builder import build_catalog, sort_catalog
from models.entity import EntityKind, EntityTypeByte, LogicalEntity, RawEntityRecord

QUEUE = EntityTypeByte.QUEUE
TOPIC = EntityTypeByte.TOPIC
SUBSCRIPTION = EntityTypeByte.SUBSCRIPTION
SUBSCRIPTION_DEFAULT = EntityTypeByte.SUBSCRIPTION_DEFAULT


def make_record(
    name: str,
    type_byte: int = QUEUE,
    count: int = 0,
    id: int = 0,
    group_id: str | None = None,
) -> RawEntityRecord:
    """Create a raw row for testing."""
    return RawEntityRecord(id=id, group_id=group_id, raw_name=name, type_byte=type_byte, message_count=count)


def only(catalog: list[LogicalEntity]) -> LogicalEntity:
    assert len(catalog) == 1
    return catalog[0]


# --- Scenarios ---


def test_queue_with_transfer_shadow_folds_into_one_entity():
    catalog = build_catalog(
        [
            make_record("SBEMULATORNS:QUEUE:orders", QUEUE, 5),
            make_record("SBEMULATORNS:QUEUE:orders|$TRANSFER", QUEUE, 2),
        ]
    )

    entity = only(catalog)
    assert entity.kind == EntityKind.QUEUE
    assert entity.display_name == "orders"
    assert entity.active_count == 5
    assert entity.dead_letter_count == 2


def test_subscription_with_transfer_shadow_folds_into_one_entity():
    catalog = build_catalog(
        [
            make_record("SBEMULATORNS:TOPIC:events|sub1", SUBSCRIPTION, 3),
            make_record("SBEMULATORNS:TOPIC:events|sub1|$TRANSFER", SUBSCRIPTION, 1),
        ]
    )

    entity = only(catalog)
    assert entity.kind == EntityKind.SUBSCRIPTION
    assert entity.name == "events|sub1"
    assert entity.display_name == "sub1"
    assert entity.parent_name == "events"
    assert entity.active_count == 3
    assert entity.dead_letter_count == 1


def test_default_variant_counts_as_active():
    catalog = build_catalog(
        [
            make_record("SBEMULATORNS:TOPIC:events|sub1", SUBSCRIPTION, 3),
            make_record("SBEMULATORNS:TOPIC:events|sub1|$DEFAULT", SUBSCRIPTION_DEFAULT, 4),
        ]
    )

    entity = only(catalog)
    assert entity.active_count == 7
    assert entity.dead_letter_count == 0


# --- Edge cases ---


def test_transfer_without_main_row_still_creates_entity():
    entity = only(build_catalog([make_record("SBEMULATORNS:QUEUE:orders|$TRANSFER", QUEUE, 9)]))

    assert entity.kind == EntityKind.QUEUE
    assert entity.display_name == "orders"
    assert entity.active_count == 0
    assert entity.dead_letter_count == 9


def test_subscription_name_with_extra_pipes_splits_on_first():
    entity = only(build_catalog([make_record("SBEMULATORNS:TOPIC:events|sub|part", SUBSCRIPTION, 1)]))

    assert entity.parent_name == "events"
    assert entity.display_name == "sub|part"


def test_type_byte_topic_wins_without_topic_tag():
    entity = only(build_catalog([make_record("SBEMULATORNS:events", TOPIC)]))
    assert entity.kind == EntityKind.TOPIC


def test_unknown_type_byte_defaults_to_queue():
    entity = only(build_catalog([make_record("SBEMULATORNS:mystery", 99)]))
    assert entity.kind == EntityKind.QUEUE


def test_empty_and_whitespace_names_are_skipped():
    catalog = build_catalog(
        [
            make_record("", QUEUE, 1),
            make_record("   ", QUEUE, 1),
            make_record("SBEMULATORNS:QUEUE:orders", QUEUE, 1),
        ]
    )
    assert [e.display_name for e in catalog] == ["orders"]


def test_empty_input_gives_empty_catalog():
    assert build_catalog([]) == []


def test_names_fold_case_insensitively_keeping_first_spelling():
    entity = only(
        build_catalog(
            [
                make_record("SBEMULATORNS:QUEUE:Orders", QUEUE, 1),
                make_record("SBEMULATORNS:QUEUE:orders|$TRANSFER", QUEUE, 1),
            ]
        )
    )
    assert entity.display_name == "Orders"


def test_queue_and_topic_with_same_name_stay_separate():
    catalog = build_catalog(
        [
            make_record("SBEMULATORNS:QUEUE:shared", QUEUE),
            make_record("SBEMULATORNS:TOPIC:shared", TOPIC),
        ]
    )
    assert [e.kind for e in catalog] == [EntityKind.QUEUE, EntityKind.TOPIC]


# --- Counts and ids ---


def test_counts_accumulate_across_repeated_rows():
    entity = only(
        build_catalog(
            [
                make_record("SBEMULATORNS:QUEUE:orders", QUEUE, 5),
                make_record("SBEMULATORNS:QUEUE:orders", QUEUE, 6),
                make_record("SBEMULATORNS:QUEUE:orders|$TRANSFER", QUEUE, 1),
                make_record("SBEMULATORNS:QUEUE:orders$transfer", QUEUE, 2),
            ]
        )
    )
    assert entity.active_count == 11
    assert entity.dead_letter_count == 3


def test_canonical_id_is_first_non_zero_id():
    entity = only(
        build_catalog(
            [
                make_record("SBEMULATORNS:QUEUE:orders|$TRANSFER", QUEUE, id=0),
                make_record("SBEMULATORNS:QUEUE:orders", QUEUE, id=17),
                make_record("SBEMULATORNS:QUEUE:orders", QUEUE, id=3),
            ]
        )
    )
    assert entity.canonical_id == 17


def test_fold_completeness_and_no_duplication():
    records = [
        make_record("SBEMULATORNS:QUEUE:a", QUEUE, 1),
        make_record("SBEMULATORNS:QUEUE:a|$TRANSFER", QUEUE, 2),
        make_record("SBEMULATORNS:QUEUE:b", QUEUE, 3),
        make_record("SBEMULATORNS:TOPIC:t", TOPIC, 4),
        make_record("SBEMULATORNS:TOPIC:t|$TRANSFER", TOPIC, 5),
        make_record("SBEMULATORNS:TOPIC:t|s1", SUBSCRIPTION, 6),
        make_record("SBEMULATORNS:TOPIC:t|s1|$DEFAULT", SUBSCRIPTION_DEFAULT, 7),
        make_record("SBEMULATORNS:TOPIC:t|s1|$TRANSFER", SUBSCRIPTION, 8),
        make_record("SBEMULATORNS:TOPIC:t|s2|$TRANSFER", SUBSCRIPTION, 9),
    ]

    catalog = build_catalog(records)

    keys = [(e.kind, e.name.casefold(), e.parent_name) for e in catalog]
    assert len(keys) == len(set(keys)) == 5
    assert sum(e.active_count for e in catalog) == 1 + 3 + 4 + 6 + 7
    assert sum(e.dead_letter_count for e in catalog) == 2 + 5 + 8 + 9

    by_name = {e.name: e for e in catalog}
    assert (by_name["t|s1"].active_count, by_name["t|s1"].dead_letter_count) == (13, 8)
    assert (by_name["t|s2"].active_count, by_name["t|s2"].dead_letter_count) == (0, 9)


# --- Group id folding ---


def test_group_id_folds_mistagged_transfer_into_topic():
    catalog = build_catalog(
        [
            make_record("SBEMULATORNS:TOPIC:events|$TRANSFER", QUEUE, 2, group_id="g1"),
            make_record("SBEMULATORNS:TOPIC:events", TOPIC, 1, group_id="g1"),
        ]
    )

    entity = only(catalog)
    assert entity.kind == EntityKind.TOPIC
    assert entity.active_count == 1
    assert entity.dead_letter_count == 2


def test_without_group_id_mistagged_transfer_stays_separate():
    catalog = build_catalog(
        [
            make_record("SBEMULATORNS:TOPIC:events|$TRANSFER", QUEUE, 2),
            make_record("SBEMULATORNS:TOPIC:events", TOPIC, 1),
        ]
    )
    assert [e.kind for e in catalog] == [EntityKind.QUEUE, EntityKind.TOPIC]


def test_inconsistent_group_falls_back_to_name_folding():
    catalog = build_catalog(
        [
            make_record("SBEMULATORNS:QUEUE:orders", QUEUE, 1, group_id="g1"),
            make_record("SBEMULATORNS:QUEUE:invoices", QUEUE, 2, group_id="g1"),
        ]
    )
    assert [(e.display_name, e.active_count) for e in catalog] == [("invoices", 2), ("orders", 1)]


def test_grouped_and_ungrouped_rows_of_same_entity_fold_together():
    entity = only(
        build_catalog(
            [
                make_record("SBEMULATORNS:QUEUE:orders", QUEUE, 1, group_id="7"),
                make_record("SBEMULATORNS:QUEUE:orders|$TRANSFER", QUEUE, 2),
            ]
        )
    )
    assert (entity.active_count, entity.dead_letter_count) == (1, 2)


# --- Ordering ---


def test_catalog_order_is_queues_topics_subscriptions():
    records = [
        make_record("SBEMULATORNS:TOPIC:beta|Zed", SUBSCRIPTION),
        make_record("SBEMULATORNS:TOPIC:Alpha|b", SUBSCRIPTION),
        make_record("SBEMULATORNS:TOPIC:beta", TOPIC),
        make_record("SBEMULATORNS:QUEUE:zulu", QUEUE),
        make_record("SBEMULATORNS:TOPIC:alpha|A", SUBSCRIPTION),
        make_record("SBEMULATORNS:QUEUE:Bravo", QUEUE),
        make_record("SBEMULATORNS:TOPIC:Alpha", TOPIC),
        make_record("SBEMULATORNS:QUEUE:alpha", QUEUE),
    ]
    expected = [
        (EntityKind.QUEUE, None, "alpha"),
        (EntityKind.QUEUE, None, "Bravo"),
        (EntityKind.QUEUE, None, "zulu"),
        (EntityKind.TOPIC, None, "Alpha"),
        (EntityKind.TOPIC, None, "beta"),
        (EntityKind.SUBSCRIPTION, "alpha", "A"),
        (EntityKind.SUBSCRIPTION, "Alpha", "b"),
        (EntityKind.SUBSCRIPTION, "beta", "Zed"),
    ]

    for seed in range(5):
        shuffled = list(records)
        random.Random(seed).shuffle(shuffled)
        catalog = build_catalog(shuffled)
        assert [(e.kind, e.parent_name, e.display_name) for e in catalog] == expected


def test_sort_catalog_is_stable_for_equal_keys():
    first = LogicalEntity(kind=EntityKind.QUEUE, name="Orders", display_name="Orders")
    second = LogicalEntity(kind=EntityKind.QUEUE, name="orders", display_name="orders")
    assert sort_catalog([first, second]) == [first, second]
