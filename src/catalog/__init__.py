"""Entity catalog building and address resolution."""

from catalog.addressing import EntityAddress, address_for, exists, find_entity, parse_address, to_address
from catalog.builder import build_catalog, sort_catalog

__all__ = [
    "build_catalog",
    "sort_catalog",
    "EntityAddress",
    "parse_address",
    "to_address",
    "address_for",
    "find_entity",
    "exists",
]
