"""
Data context: a logging facade over a SQLAlchemy session.
"""

from __future__ import annotations

import logging
from datetime import date, datetime
from decimal import Decimal
from typing import TYPE_CHECKING, Iterable, Iterator, Optional, Type, TypeVar

from sqlalchemy import Engine, inspect, select
from sqlalchemy.orm import Query, Session
from sqlalchemy.orm import registry as Registry

from ..config import ConnectionConfig, create_engine
from ..hooks.events import Event, PostSaveEventArgs, PreSaveEventArgs
from ..utils import get_logger, time_call, trace
from .mapping import MappingConfiguration, apply_mappings
from .parameters import SqlParameter, bind_statement, describe_parameters

if TYPE_CHECKING:
    from ..hooks.manager import EventManager


T = TypeVar("T")

_SCALAR_TYPES = (int, float, str, bool, bytes, Decimal, date, datetime)


def _is_mapped(entity: type) -> bool:
    return inspect(entity, raiseerr=False) is not None


class DataContext:
    """
    Exposes CRUD, commit and raw SQL over a session it owns exclusively.

    Every call is delegated to the session as-is; failures raised by SQLAlchemy
    or the driver propagate unchanged. Use :func:`waypoint.hooks.register_event_manager`
    to attach an event manager.
    """

    def __init__(self, session: Session, *, logger: Optional[logging.Logger] = None) -> None:
        self.session = session
        self.logger = logger or get_logger("persistence.context")
        self.pre_save = Event("pre_save")
        self.post_save = Event("post_save")
        self._event_manager: Optional["EventManager"] = None
        self._engine: Optional[Engine] = None

    @classmethod
    def from_config(
        cls,
        config: ConnectionConfig,
        *,
        mappings: Iterable[MappingConfiguration] = (),
        registry: Optional[Registry] = None,
        logger: Optional[logging.Logger] = None,
    ) -> "DataContext":
        """
        Build an engine from ``config``, apply ``mappings`` and open a session.

        ``mappings`` are applied to ``registry``; pass one to reach the mapped
        tables through ``registry.metadata``. When omitted, a private registry is used.

        The returned context owns both the session and the engine and releases
        them on :meth:`close`.
        """

        logger = logger or get_logger("persistence.context")
        logger.debug("Opening context for %s", config.descriptive_label())
        apply_mappings(registry or Registry(), mappings, logger)
        engine = create_engine(config)
        context = cls(Session(bind=engine), logger=logger)
        context._engine = engine
        return context

    @property
    def event_manager(self) -> Optional["EventManager"]:
        return self._event_manager

    # ------------------------------------------------------------------ #
    # Context management
    # ------------------------------------------------------------------ #
    def __enter__(self) -> "DataContext":
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        self.close()

    def close(self) -> None:
        self.session.close()
        if self._engine is not None:
            self._engine.dispose()
            self._engine = None
        self.logger.debug("Context closed")

    # ------------------------------------------------------------------ #
    # Querying
    # ------------------------------------------------------------------ #
    def as_queryable(self, entity: Type[T]) -> Query[T]:
        """
        Return a lazy, composable query over ``entity``.

        Nothing is sent to the database until the query is iterated, so the
        "Queried" line marks construction rather than execution.
        """

        self.logger.debug("Querying Object %s", entity.__name__)
        result = self.session.query(entity)
        self.logger.debug("Queried Object %s", entity.__name__)
        return result

    # ------------------------------------------------------------------ #
    # Entity operations
    # ------------------------------------------------------------------ #
    def add(self, item: T) -> T:
        self.logger.debug("Adding Object %s", item)
        self.session.add(item)
        trace(self.logger, "Added Object %s", item)
        return item

    def remove(self, item: T) -> T:
        self.logger.debug("Removing Object %s", item)
        self.session.delete(item)
        trace(self.logger, "Removed Object %s", item)
        return item

    def update(self, item: T) -> T:
        """
        Re-attach a detached ``item`` so its pending and later changes are flushed.

        Raises if the session already holds another instance with the same identity.
        """

        self.logger.debug("Updating Object %s", item)
        self.session.add(item)
        trace(self.logger, "Updated Object %s", item)
        return item

    def attach(self, item: T) -> T:
        self.logger.debug("Attaching Object %s", item)
        self.session.add(item)
        trace(self.logger, "Attached Object %s", item)
        return item

    def detach(self, item: T) -> T:
        self.logger.debug("Detaching Object %s", item)
        self.session.expunge(item)
        trace(self.logger, "Detached Object %s", item)
        return item

    def reload(self, item: T) -> T:
        self.logger.debug("Reloading Object %s", item)
        self.session.refresh(item)
        trace(self.logger, "Reloaded Object %s", item)
        return item

    # ------------------------------------------------------------------ #
    # Commit
    # ------------------------------------------------------------------ #
    def commit(self) -> int:
        """
        Fire pre-save handlers, commit the session, then fire post-save handlers.

        Always returns ``0``; the affected row count is not reported.
        """

        trace(self.logger, "\tCommit")
        self.pre_save.fire(self, PreSaveEventArgs())
        self.session.commit()
        self.post_save.fire(self, PostSaveEventArgs())
        self.logger.debug("\tCommitted Changes")
        return 0

    # ------------------------------------------------------------------ #
    # Raw SQL
    # ------------------------------------------------------------------ #
    def execute_sql_query(self, entity: Type[T], sql: str, *params: SqlParameter) -> Iterator[T]:
        """
        Run ``sql`` and map each row onto ``entity``.

        Mapped entities are loaded through the session; scalar types take the
        first column; any other callable receives the row's columns as keyword
        arguments. The result can be iterated once.
        """

        self._log_statement("SQL", sql, params)
        statement, values = bind_statement(sql, params)
        with time_call("context.execute_sql_query", self.logger, sql=sql, params=self._rendered(params)):
            if _is_mapped(entity):
                return iter(self.session.execute(select(entity).from_statement(statement), values).scalars())
            result = self.session.execute(statement, values)
        if entity in _SCALAR_TYPES:
            return (value if value is None else entity(value) for value in result.scalars())
        return (entity(**row._mapping) for row in result)

    def execute_sql_command(self, sql: str, *params: SqlParameter) -> int:
        self._log_statement("SQL", sql, params)
        statement, values = bind_statement(sql, params)
        with time_call("context.execute_sql_command", self.logger, sql=sql, params=self._rendered(params)):
            result = self.session.execute(statement, values)
        return result.rowcount

    def execute_function(self, name: str, *params: SqlParameter) -> int:
        """
        Run a stored function or procedure call and return its first integer result.

        ``name`` is the full call statement, e.g. ``SELECT next_ticket(:queue)``.
        Returns ``0`` when no rows come back.
        """

        self._log_statement("Procedure", name, params)
        statement, values = bind_statement(name, params)
        with time_call("context.execute_function", self.logger, sql=name, params=self._rendered(params)):
            value = self.session.execute(statement, values).scalars().first()
        return 0 if value is None else int(value)

    # ------------------------------------------------------------------ #
    def _log_statement(self, kind: str, sql: str, params: tuple[SqlParameter, ...]) -> None:
        trace(self.logger, "Executing %s %s, with parameters %s", kind, sql, describe_parameters(params))

    @staticmethod
    def _rendered(params: Iterable[SqlParameter]) -> list[str]:
        return [param.describe() for param in params]
