import logging

import pytest

from waypoint.hooks import (
    CallbackInterceptor,
    EventManager,
    Interceptor,
    InterceptorResult,
    PostSaveEventArgs,
    PreSaveEventArgs,
    SaveEventArgs,
    register_event_manager,
)
from waypoint.persistence import DataContext


class CommitSession:
    def __init__(self, events):
        self.events = events

    def commit(self):
        self.events.append("commit")


class RecordingInterceptor(Interceptor):
    def __init__(self, events, label, *, priority=0, event=PreSaveEventArgs, halt=False):
        self.events = events
        self.label = label
        self.priority = priority
        self.event = event
        self.halt = halt

    def apply(self, context, args):
        self.events.append(self.label)
        if self.halt:
            return InterceptorResult.stop(f"{self.label} halted")
        return InterceptorResult.succeed()


@pytest.fixture
def events():
    return []


@pytest.fixture
def context(events):
    return DataContext(CommitSession(events))


def test_register_sets_back_reference(context):
    manager = EventManager()

    returned = register_event_manager(context, manager)

    assert returned is manager
    assert manager.context is context
    assert context.event_manager is manager


def test_event_manager_property_is_read_only(context):
    with pytest.raises(AttributeError):
        context.event_manager = EventManager()


def test_interceptors_run_in_priority_order_around_commit(context, events):
    manager = EventManager()
    manager.add_interceptor(RecordingInterceptor(events, "late", priority=20))
    manager.add_interceptor(RecordingInterceptor(events, "early", priority=1))
    manager.add_interceptor(RecordingInterceptor(events, "tie", priority=20))
    manager.add_interceptor(RecordingInterceptor(events, "after", event=PostSaveEventArgs))
    register_event_manager(context, manager)

    context.commit()

    assert events == ["early", "late", "tie", "commit", "after"]


def test_halting_interceptor_stops_later_ones_but_not_commit(context, events, caplog):
    caplog.set_level(logging.INFO, logger="waypoint.hooks.manager")
    manager = EventManager()
    manager.add_interceptor(RecordingInterceptor(events, "guard", priority=1, halt=True))
    manager.add_interceptor(RecordingInterceptor(events, "skipped", priority=2))
    register_event_manager(context, manager)

    context.commit()

    assert events == ["guard", "commit"]
    assert any("guard halted" in r.getMessage() for r in caplog.records)


def test_manager_handlers_follow_plain_subscribers_registered_earlier(context, events):
    context.pre_save.subscribe(lambda sender, args: events.append("plain"))
    manager = EventManager()
    manager.add_interceptor(RecordingInterceptor(events, "intercepted"))
    register_event_manager(context, manager)

    context.commit()

    assert events == ["plain", "intercepted", "commit"]


def test_replacing_manager_detaches_previous(context, events):
    old = EventManager()
    old.add_interceptor(RecordingInterceptor(events, "old"))
    new = EventManager()
    new.add_interceptor(RecordingInterceptor(events, "new"))

    register_event_manager(context, old)
    register_event_manager(context, new)
    context.commit()

    assert events == ["new", "commit"]
    assert old.context is None
    assert context.event_manager is new


def test_moving_manager_clears_previous_context(events):
    first = DataContext(CommitSession(events))
    second = DataContext(CommitSession(events))
    manager = EventManager()
    manager.add_interceptor(RecordingInterceptor(events, "hook"))

    register_event_manager(first, manager)
    register_event_manager(second, manager)
    first.commit()

    assert events == ["commit"]
    assert first.event_manager is None
    assert manager.context is second


def test_registering_same_manager_twice_subscribes_once(context, events):
    manager = EventManager()
    manager.add_interceptor(RecordingInterceptor(events, "once"))
    register_event_manager(context, manager)
    register_event_manager(context, manager)

    context.commit()

    assert events == ["once", "commit"]


def test_callback_interceptor_and_shared_event_type(context, events):
    manager = EventManager()
    manager.add_interceptor(
        CallbackInterceptor(lambda ctx, args: events.append(type(args).__name__), event=SaveEventArgs)
    )
    register_event_manager(context, manager)

    context.commit()

    assert events == ["PreSaveEventArgs", "commit", "PostSaveEventArgs"]


def test_remove_interceptor(context, events):
    manager = EventManager()
    interceptor = manager.add_interceptor(RecordingInterceptor(events, "gone"))
    manager.remove_interceptor(interceptor)
    manager.remove_interceptor(interceptor)
    register_event_manager(context, manager)

    context.commit()

    assert events == ["commit"]
    assert manager.interceptors() == []


def test_interceptors_filter_by_event():
    manager = EventManager()
    pre = manager.add_interceptor(RecordingInterceptor([], "pre"))
    post = manager.add_interceptor(RecordingInterceptor([], "post", event=PostSaveEventArgs))

    assert manager.interceptors(PreSaveEventArgs) == [pre]
    assert manager.interceptors(PostSaveEventArgs) == [post]
