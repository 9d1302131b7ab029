"""
Mapping configurations applied to a SQLAlchemy registry before a context is used.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Any, Dict, Iterable, List, Protocol

from sqlalchemy import Column, Table, inspect
from sqlalchemy.orm import registry as Registry

from ..utils import trace


class MappingConfiguration(Protocol):
    """
    Anything able to register entity/table mappings with a registry.
    """

    def configure(self, registry: Registry) -> None:
        ...


@dataclass
class TableMapping:
    """
    Imperative mapping of a plain class onto a table.

    Classes that are already mapped (declaratively, or by an earlier context)
    are left untouched.
    """

    entity: type
    table_name: str
    columns: List[Column] = field(default_factory=list)
    properties: Dict[str, Any] = field(default_factory=dict)

    def configure(self, registry: Registry) -> None:
        if inspect(self.entity, raiseerr=False) is not None:
            return
        table = Table(self.table_name, registry.metadata, *self.columns)
        registry.map_imperatively(self.entity, table, properties=self.properties)


def apply_mappings(registry: Registry, mappings: Iterable[MappingConfiguration], logger: logging.Logger) -> None:
    logger.debug("\tConfiguring mappings")
    for mapping in mappings:
        trace(logger, "\t\tMapping : %s", type(mapping).__name__)
        mapping.configure(registry)
