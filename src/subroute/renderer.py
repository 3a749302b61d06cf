"""Headless rendering of the current location against a route tree.

``MemoryHistory`` stands in for the browser location: navigating replaces the
current path and notifies subscribers. ``Renderer`` populates the tree once
and then resolves whatever the history currently points at.
"""

from __future__ import annotations

import logging
from collections.abc import Callable, Mapping
from functools import reduce
from typing import Any

from subroute.tree import (
    Config,
    Router,
    find_handler,
    matched_route,
    path_params,
    split_path,
)

logger = logging.getLogger(__name__)

type Page = Callable[[Mapping[str, str]], Any]
type NotFound = Callable[[str], Any]
type Middleware = Callable[[Page], Page]


class MemoryHistory:
    """In-memory navigation port holding the current location."""

    __slots__ = ("_listeners", "path")
    path: str
    _listeners: list[Callable[[str], None]]

    def __init__(self, path: str = "/") -> None:
        self.path = path
        self._listeners = []

    def move_to(self, path: str) -> None:
        """Replaces the current location and notifies subscribers."""
        self.path = path
        for listener in list(self._listeners):
            listener(path)

    def subscribe(self, listener: Callable[[str], None]) -> Callable[[], None]:
        """Calls listener on every navigation. Returns an unsubscribe function."""
        self._listeners.append(listener)
        return lambda: self._listeners.remove(listener)

    @property
    def location(self) -> tuple[str, str | None]:
        """(path, fragment) of the current location; fragment is None if absent."""
        path, sep, fragment = self.path.partition("#")
        return path, fragment if sep else None


class Renderer:
    """Resolves the history's current location to a page and calls it.

    Args:
        router: finished route tree.
        config: populate config, applied once on construction.
        not_found: called with the full current path when nothing matches, or
            when the matching route never had a handler populated.
        history: navigation port; defaults to a fresh ``MemoryHistory``.
    """

    __slots__ = ("_middleware", "history", "not_found", "router")

    def __init__(
        self,
        router: Router[Page],
        config: Config,
        *,
        not_found: NotFound,
        history: MemoryHistory | None = None,
    ) -> None:
        if not callable(not_found):
            msg = "not_found must be callable"
            raise ValueError(msg)
        self.router = router
        self.not_found = not_found
        self.history = history if history is not None else MemoryHistory()
        self._middleware: tuple[Middleware, ...] = ()
        router.populate(config)

    def use(self, *middleware: Middleware) -> None:
        """Adds middleware wrapped around every matched page, outermost first."""
        self._middleware += middleware

    def render(self) -> Any:
        """Renders the current location. The fragment takes no part in matching."""
        path, _ = self.history.location
        match = find_handler(self.router, split_path(path))
        if match is None or match.handler is None:
            logger.debug("no page for %r", self.history.path)
            return self.not_found(self.history.path)
        page = reduce(lambda h, m: m(h), reversed(self._middleware), match.handler)
        params_token = path_params.set(match.params)
        route_token = matched_route.set(match.route)
        try:
            return page(match.params)
        finally:
            matched_route.reset(route_token)
            path_params.reset(params_token)
