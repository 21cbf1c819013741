"""In-process cross-window messaging with browser postMessage semantics.

Each ``Window`` belongs to one origin. Other contexts hold a ``WindowProxy``
to it and post messages through the proxy; the receiving listeners see the
sender's origin and a proxy back to the sender as ``event.source``.
Delivery is always asynchronous and payloads are deep-copied.
"""

from __future__ import annotations

import asyncio
import copy
import inspect
import logging
from dataclasses import dataclass
from typing import Any, Awaitable, Callable, Optional, Protocol, Union

from nostr_bunker.authorization import normalize_origin

logger = logging.getLogger(__name__)


class MessageSource(Protocol):
    def post_message(self, data: Any, target_origin: str) -> None: ...


@dataclass(frozen=True)
class MessageEvent:
    data: Any
    origin: str
    source: Optional[MessageSource] = None


MessageHandler = Callable[[MessageEvent], Union[None, Awaitable[None]]]


class MessageChannel(Protocol):
    def on_message(self, handler: MessageHandler) -> None: ...


class Window:
    def __init__(self, origin: str, *, name: str | None = None):
        self.origin = normalize_origin(origin)
        self.name = name
        self.closed = False
        self._handlers: list[MessageHandler] = []
        self._tasks: set[asyncio.Task] = set()

    def __repr__(self) -> str:
        return f"Window(origin={self.origin!r}, name={self.name!r}, closed={self.closed})"

    def on_message(self, handler: MessageHandler) -> None:
        self._handlers.append(handler)

    def proxy_for(self, sender: "Window") -> "WindowProxy":
        """Handle to this window as seen from ``sender``."""
        return WindowProxy(target=self, sender=sender)

    def close(self) -> None:
        self.closed = True
        for task in list(self._tasks):
            task.cancel()

    def _deliver(self, event: MessageEvent) -> None:
        if self.closed:
            return
        for handler in list(self._handlers):
            outcome = handler(event)
            if inspect.isawaitable(outcome):
                task = asyncio.ensure_future(outcome)
                self._tasks.add(task)
                task.add_done_callback(self._task_done)

    def _task_done(self, task: asyncio.Task) -> None:
        self._tasks.discard(task)
        if not task.cancelled() and task.exception() is not None:
            logger.error("Message handler failed in %s", self.origin, exc_info=task.exception())


class WindowProxy:
    def __init__(self, target: Window, sender: Window):
        self._target = target
        self._sender = sender

    @property
    def closed(self) -> bool:
        return self._target.closed

    @property
    def origin(self) -> str:
        return self._target.origin

    def post_message(self, data: Any, target_origin: str) -> None:
        if self._target.closed:
            logger.debug("Dropping message to closed window %s", self._target.origin)
            return
        if target_origin != "*" and normalize_origin(target_origin) != self._target.origin:
            logger.debug(
                "Dropping message: target origin %s does not match %s",
                target_origin,
                self._target.origin,
            )
            return

        event = MessageEvent(
            data=copy.deepcopy(data),
            origin=self._sender.origin,
            source=WindowProxy(target=self._sender, sender=self._target),
        )
        asyncio.get_running_loop().call_soon(self._target._deliver, event)


PageInitializer = Callable[[Window], None]


class WindowGroup:
    """A set of windows that can open each other by URL."""

    def __init__(self) -> None:
        self._pages: dict[str, PageInitializer] = {}
        self.windows: list[Window] = []

    def mount(self, url: str, initializer: PageInitializer) -> None:
        """Run ``initializer`` on every window opened at ``url``'s origin."""
        self._pages[normalize_origin(url)] = initializer

    def create_window(self, origin: str, *, name: str | None = None) -> Window:
        window = Window(origin, name=name)
        self.windows.append(window)
        return window

    def opener(self, parent: Window) -> Callable[[str], WindowProxy]:
        def open_window(url: str) -> WindowProxy:
            origin = normalize_origin(url)
            initializer = self._pages.get(origin)
            if initializer is None:
                raise LookupError(f"Nothing is mounted at {origin}")
            window = self.create_window(origin)
            initializer(window)
            return window.proxy_for(parent)

        return open_window
