"""Fold raw lookup-table rows into the logical entity catalog.

Every queue, topic and subscription appears once, with the message
counts of its main row(s) summed into active_count and those of its
$TRANSFER shadow row(s) summed into dead_letter_count.
"""

from collections.abc import Iterable

from catalog.naming import ParsedEntityName, parse_entity_name
from common.logging import get_logger
from models.entity import EntityKind, LogicalEntity, RawEntityRecord

logger = get_logger(__name__)

FoldKey = tuple[EntityKind, str]


def _resolve_group_anchors(
    parsed: list[tuple[RawEntityRecord, ParsedEntityName]],
) -> dict[str, ParsedEntityName]:
    """Pick the row that represents each group id: main row first, then $DEFAULT, then $TRANSFER."""
    anchors: dict[str, ParsedEntityName] = {}
    for record, name in parsed:
        if record.group_id is None:
            continue
        current = anchors.get(record.group_id)
        if current is None or name.shadow.rank < current.shadow.rank:
            anchors[record.group_id] = name
    return anchors


def _fold_target(
    record: RawEntityRecord,
    name: ParsedEntityName,
    anchors: dict[str, ParsedEntityName],
) -> ParsedEntityName:
    """The parsed name whose kind and spelling this record folds under."""
    anchor = anchors.get(record.group_id) if record.group_id is not None else None
    if anchor is not None and anchor.name.casefold() == name.name.casefold():
        return anchor
    if anchor is not None:
        logger.debug(f"Group {record.group_id} has inconsistent names '{anchor.name}' and '{name.name}'")
    return name


def sort_catalog(entities: Iterable[LogicalEntity]) -> list[LogicalEntity]:
    """Queues, then topics, then subscriptions by parent topic; each case-insensitively alphabetical."""

    def sort_key(entity: LogicalEntity) -> tuple[int, str, str]:
        if entity.kind == EntityKind.SUBSCRIPTION:
            return (entity.kind.sort_order, (entity.parent_name or "").casefold(), entity.display_name.casefold())
        return (entity.kind.sort_order, entity.display_name.casefold(), "")

    return sorted(entities, key=sort_key)


def build_catalog(records: Iterable[RawEntityRecord]) -> list[LogicalEntity]:
    """
    Build the ordered logical catalog from raw lookup-table rows.

    Rows with empty names are skipped. Rows sharing a group id fold by
    group when their base names agree; otherwise rows fold by
    (kind, base name), compared case-insensitively.

    Args:
        records: Raw rows in storage order

    Returns:
        One LogicalEntity per fold group, sorted with sort_catalog
    """
    parsed: list[tuple[RawEntityRecord, ParsedEntityName]] = []
    for record in records:
        name = parse_entity_name(record.raw_name, record.type_byte)
        if name is None:
            logger.debug(f"Skipping malformed entity row id={record.id} name={record.raw_name!r}")
            continue
        parsed.append((record, name))

    anchors = _resolve_group_anchors(parsed)
    entities: dict[FoldKey, LogicalEntity] = {}

    for record, name in parsed:
        target = _fold_target(record, name, anchors)
        entity = entities.get(target.fold_key)
        if entity is None:
            entity = LogicalEntity(
                kind=target.kind,
                name=target.name,
                display_name=target.display_name,
                parent_name=target.parent_name,
            )
            entities[target.fold_key] = entity

        if not entity.canonical_id and record.id:
            entity.canonical_id = record.id

        if name.shadow.is_dead_letter:
            entity.dead_letter_count += record.message_count
        else:
            entity.active_count += record.message_count

    catalog = sort_catalog(entities.values())
    logger.debug(f"Built catalog of {len(catalog)} entities from {len(parsed)} rows")
    return catalog
