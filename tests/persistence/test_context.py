import logging

import pytest
from sqlalchemy import Integer, String, select
from sqlalchemy.exc import InvalidRequestError
from sqlalchemy.orm import DeclarativeBase, Mapped, Query, mapped_column

from waypoint.config import ConnectionConfig
from waypoint.persistence import DataContext
from waypoint.utils import TRACE


class Base(DeclarativeBase):
    pass


class Gadget(Base):
    __tablename__ = "gadget"

    id: Mapped[int] = mapped_column(Integer, primary_key=True)
    name: Mapped[str] = mapped_column(String(80), nullable=False)
    stock: Mapped[int] = mapped_column(Integer, default=0)

    def __repr__(self) -> str:
        return f"Gadget({self.name})"


class RecordingSession:
    def __init__(self) -> None:
        self.calls = []

    def __getattr__(self, name):
        def record(*args):
            self.calls.append((name, args))
            return "session-result"

        return record


def make_context(tmp_path, name="context.db") -> DataContext:
    context = DataContext.from_config(ConnectionConfig(url=f"sqlite:///{tmp_path / name}"))
    Base.metadata.create_all(context.session.get_bind())
    return context


@pytest.mark.parametrize(
    "operation, session_call",
    [
        ("add", "add"),
        ("remove", "delete"),
        ("update", "add"),
        ("attach", "add"),
        ("detach", "expunge"),
        ("reload", "refresh"),
    ],
)
def test_entity_operations_delegate_once_and_return_item(operation, session_call):
    session = RecordingSession()
    context = DataContext(session)
    item = object()

    returned = getattr(context, operation)(item)

    assert returned is item
    assert session.calls == [(session_call, (item,))]


def test_entity_operations_log_start_and_completion(caplog):
    caplog.set_level(TRACE, logger="waypoint.persistence.context")
    context = DataContext(RecordingSession())

    context.add("widget")

    records = [(r.levelno, r.getMessage()) for r in caplog.records if r.name == "waypoint.persistence.context"]
    assert records == [(logging.DEBUG, "Adding Object widget"), (TRACE, "Added Object widget")]


def test_injected_logger_is_used(caplog):
    logger = logging.getLogger("tests.injected")
    caplog.set_level(logging.DEBUG, logger="tests.injected")
    context = DataContext(RecordingSession(), logger=logger)

    context.remove("widget")

    assert any(r.name == "tests.injected" and r.getMessage() == "Removing Object widget" for r in caplog.records)


def test_session_errors_propagate_unchanged():
    class FailingSession:
        def add(self, item):
            raise LookupError("boom")

    context = DataContext(FailingSession())
    with pytest.raises(LookupError, match="boom"):
        context.add("widget")


def test_add_and_commit_persists_entity(tmp_path):
    context = make_context(tmp_path)
    gadget = context.add(Gadget(name="Sprocket", stock=3))
    assert context.commit() == 0

    names = context.session.execute(select(Gadget.name)).scalars().all()
    assert names == ["Sprocket"]
    assert gadget.id is not None
    context.close()


def test_as_queryable_is_lazy_and_composable(tmp_path, caplog):
    caplog.set_level(logging.DEBUG, logger="waypoint.persistence.context")
    context = make_context(tmp_path)
    context.add(Gadget(name="Cog", stock=1))
    context.add(Gadget(name="Gear", stock=9))
    context.commit()

    query = context.as_queryable(Gadget)
    assert isinstance(query, Query)
    messages = [r.getMessage() for r in caplog.records if r.name == "waypoint.persistence.context"]
    assert "Querying Object Gadget" in messages
    assert "Queried Object Gadget" in messages

    plenty = query.filter(Gadget.stock > 5).order_by(Gadget.name).all()
    assert [g.name for g in plenty] == ["Gear"]
    context.close()


def test_remove_deletes_row_on_commit(tmp_path):
    context = make_context(tmp_path)
    gadget = context.add(Gadget(name="Flange", stock=2))
    context.commit()

    context.remove(gadget)
    context.commit()

    assert context.as_queryable(Gadget).count() == 0
    context.close()


def test_update_reattaches_detached_item(tmp_path):
    context = make_context(tmp_path)
    gadget = context.add(Gadget(name="Valve", stock=2))
    context.commit()
    assert gadget.name == "Valve"

    context.detach(gadget)
    assert gadget not in context.session
    gadget.stock = 40

    assert context.update(gadget) is gadget
    assert gadget in context.session
    gadget.stock = 99
    context.commit()

    stock = context.session.execute(select(Gadget.stock).where(Gadget.name == "Valve")).scalar_one()
    assert stock == 99
    context.close()


def test_update_rejects_item_already_loaded_under_same_identity(tmp_path):
    context = make_context(tmp_path)
    gadget = context.add(Gadget(name="Gear", stock=1))
    context.commit()
    gadget_id = gadget.id

    context.detach(gadget)
    assert context.session.get(Gadget, gadget_id) is not gadget

    with pytest.raises(InvalidRequestError):
        context.update(gadget)
    context.close()


def test_attach_tracks_new_entity(tmp_path):
    context = make_context(tmp_path)
    gadget = Gadget(name="Pulley", stock=1)

    context.attach(gadget)

    assert gadget in context.session.new
    context.close()


def test_reload_refreshes_from_database(tmp_path):
    context = make_context(tmp_path)
    gadget = context.add(Gadget(name="Spring", stock=5))
    context.commit()
    assert gadget.stock == 5

    context.session.execute(Gadget.__table__.update().values(stock=11))
    assert gadget.stock == 5

    context.reload(gadget)
    assert gadget.stock == 11
    context.close()


def test_context_manager_closes_session(tmp_path):
    with make_context(tmp_path) as context:
        context.add(Gadget(name="Lever", stock=1))
    assert not context.session.new
    assert context._engine is None
