import asyncio
import inspect
import logging
from collections import defaultdict
from typing import Any, Callable, DefaultDict, List, Set, Type


Handler = Callable[[object], Any]


class EventBus:
    """Synchronous publish with failure isolation.

    Handlers run in priority order. A handler that returns an awaitable has it
    scheduled on the running loop; ``drain()`` waits for those tasks.
    """

    def __init__(self) -> None:
        self._subscribers: DefaultDict[Type[object], List[tuple[int, int, Handler]]] = defaultdict(list)
        self._next_order = 0
        self._last_publish_errors: List[Exception] = []
        self._pending: Set[asyncio.Task] = set()
        self._logger = logging.getLogger(__name__)

    def subscribe(self, event_type: Type[object], handler: Handler, *, priority: int = 100) -> None:
        self._subscribers[event_type].append((int(priority), self._next_order, handler))
        self._next_order += 1
        self._subscribers[event_type].sort(key=lambda row: (row[0], row[1]))

    def unsubscribe(self, event_type: Type[object], handler: Handler) -> bool:
        rows = self._subscribers.get(event_type, [])
        kept = [row for row in rows if row[2] is not handler]
        self._subscribers[event_type] = kept
        return len(kept) != len(rows)

    def _handler_failed(self, exc: BaseException, event_type: Type[object], handler: Handler, priority: int) -> None:
        if isinstance(exc, Exception):
            self._last_publish_errors.append(exc)
        handler_name = getattr(handler, "__qualname__", getattr(handler, "__name__", repr(handler)))
        self._logger.error(
            "Event handler failed and was isolated",
            exc_info=(type(exc), exc, exc.__traceback__),
            extra={
                "event_type": event_type.__name__,
                "handler": handler_name,
                "priority": priority,
            },
        )

    def _schedule(self, awaitable, event_type: Type[object], handler: Handler, priority: int) -> None:
        try:
            loop = asyncio.get_running_loop()
        except RuntimeError:
            if inspect.iscoroutine(awaitable):
                awaitable.close()
            self._logger.warning(
                "Async event handler skipped outside an event loop",
                extra={"event_type": event_type.__name__},
            )
            return

        task = loop.create_task(awaitable)
        self._pending.add(task)

        def _done(finished: asyncio.Task) -> None:
            self._pending.discard(finished)
            if finished.cancelled():
                return
            exc = finished.exception()
            if exc is not None:
                self._handler_failed(exc, event_type, handler, priority)

        task.add_done_callback(_done)

    def publish(self, event: object) -> None:
        self._last_publish_errors = []
        event_type = type(event)
        for priority, _, handler in list(self._subscribers[event_type]):
            try:
                result = handler(event)
            except Exception as exc:
                self._handler_failed(exc, event_type, handler, priority)
                continue
            if inspect.isawaitable(result):
                self._schedule(result, event_type, handler, priority)

    async def drain(self) -> None:
        while self._pending:
            await asyncio.gather(*list(self._pending), return_exceptions=True)

    def last_publish_errors(self) -> List[Exception]:
        return list(self._last_publish_errors)
