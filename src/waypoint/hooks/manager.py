"""
Event manager running prioritized interceptors at the commit boundary.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import TYPE_CHECKING, Any, Callable, List, Optional, Type

from ..utils import get_logger, trace
from .events import PreSaveEventArgs, SaveEventArgs

if TYPE_CHECKING:
    from ..persistence.context import DataContext


@dataclass(frozen=True)
class InterceptorResult:
    continue_execution: bool = True
    message: Optional[str] = None

    @classmethod
    def succeed(cls) -> "InterceptorResult":
        return cls()

    @classmethod
    def stop(cls, message: str) -> "InterceptorResult":
        return cls(continue_execution=False, message=message)


class Interceptor:
    """
    Unit of work run by an :class:`EventManager` when ``event`` fires.

    Lower ``priority`` runs first.
    """

    event: Type[SaveEventArgs] = PreSaveEventArgs
    priority: int = 0

    def apply(self, context: "DataContext", args: SaveEventArgs) -> InterceptorResult:
        raise NotImplementedError

    def __repr__(self) -> str:
        return f"{self.__class__.__name__}(event={self.event.__name__}, priority={self.priority})"


class CallbackInterceptor(Interceptor):
    """
    Adapts a plain function into an interceptor. A ``None`` return continues.
    """

    def __init__(
        self,
        callback: Callable[["DataContext", SaveEventArgs], Optional[InterceptorResult]],
        *,
        event: Type[SaveEventArgs] = PreSaveEventArgs,
        priority: int = 0,
    ) -> None:
        self.callback = callback
        self.event = event
        self.priority = priority

    def apply(self, context: "DataContext", args: SaveEventArgs) -> InterceptorResult:
        result = self.callback(context, args)
        return result if result is not None else InterceptorResult.succeed()

    def __repr__(self) -> str:
        name = getattr(self.callback, "__name__", repr(self.callback))
        return f"CallbackInterceptor({name}, event={self.event.__name__}, priority={self.priority})"


class EventManager:
    """
    Holds interceptors and dispatches the context's pre/post-save events to them.

    A manager may be shared by reference, but it serves one context at a time;
    see :func:`register_event_manager`.
    """

    def __init__(self, *, logger: Optional[logging.Logger] = None) -> None:
        self.logger = logger or get_logger("hooks.manager")
        self._interceptors: List[Interceptor] = []
        self._context: Optional["DataContext"] = None

    @property
    def context(self) -> Optional["DataContext"]:
        return self._context

    # ------------------------------------------------------------------ #
    # Registration
    # ------------------------------------------------------------------ #
    def add_interceptor(self, interceptor: Interceptor) -> Interceptor:
        self._interceptors.append(interceptor)
        # Stable sort keeps registration order among equal priorities.
        self._interceptors.sort(key=lambda item: item.priority)
        self.logger.debug("Registered interceptor %r", interceptor)
        return interceptor

    def remove_interceptor(self, interceptor: Interceptor) -> None:
        if interceptor in self._interceptors:
            self._interceptors.remove(interceptor)
            self.logger.debug("Removed interceptor %r", interceptor)

    def interceptors(self, event: Optional[Type[SaveEventArgs]] = None) -> List[Interceptor]:
        if event is None:
            return list(self._interceptors)
        return [item for item in self._interceptors if issubclass(event, item.event)]

    # ------------------------------------------------------------------ #
    # Dispatch
    # ------------------------------------------------------------------ #
    def handle(self, sender: Any, args: SaveEventArgs) -> List[InterceptorResult]:
        results: List[InterceptorResult] = []
        for interceptor in self.interceptors(type(args)):
            trace(self.logger, "Applying %r", interceptor)
            result = interceptor.apply(sender, args)
            results.append(result)
            if not result.continue_execution:
                self.logger.info(
                    "Interceptor %r halted %s: %s",
                    interceptor,
                    type(args).__name__,
                    result.message,
                )
                break
        return results

    def bind(self, context: "DataContext") -> None:
        if self._context is context:
            return
        self.unbind()
        context.pre_save.subscribe(self.handle)
        context.post_save.subscribe(self.handle)
        self._context = context

    def unbind(self) -> None:
        if self._context is None:
            return
        self._context.pre_save.unsubscribe(self.handle)
        self._context.post_save.unsubscribe(self.handle)
        self._context = None


def register_event_manager(context: "DataContext", manager: EventManager) -> EventManager:
    """
    Make ``manager`` the event manager of ``context``.

    Any manager previously registered with the context is detached, and the
    new manager is detached from whichever context it served before.
    """

    previous = context.event_manager
    if previous is not None and previous is not manager:
        previous.unbind()
    previous_context = manager.context
    if previous_context is not None and previous_context is not context:
        previous_context._event_manager = None
    manager.bind(context)
    context._event_manager = manager
    context.logger.debug("Registered event manager %s", type(manager).__name__)
    return manager

