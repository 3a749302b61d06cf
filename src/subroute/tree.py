"""Composable sub-router tree with ordered, first-match-wins path matching.

Routes are bucketed by segment count per router; attached sub-routers are
tried in registration order once no explicit route at the current level
matches.
"""

from __future__ import annotations

import logging
from collections.abc import Callable, Mapping, Sequence
from contextvars import ContextVar
from dataclasses import dataclass, field
from typing import Any, Self

logger = logging.getLogger(__name__)

PARAM_MARKER = ":"

path_params: ContextVar[dict[str, str]] = ContextVar("path_params")
matched_route: ContextVar[str] = ContextVar("matched_route")

type Config = Mapping[str, Callable[..., Any] | Config]


@dataclass(slots=True, frozen=True)
class Segment:
    """One path token: a literal, or a named parameter (``:name``)."""

    value: str
    is_param: bool = False

    @property
    def name(self) -> str:
        return self.value[len(PARAM_MARKER) :] if self.is_param else self.value

    def accepts(self, segment: str) -> bool:
        return self.is_param or self.value == segment


@dataclass(slots=True)
class RouteEntry[T]:
    segments: tuple[Segment, ...]
    raw_path: str
    handler: T | None = None

    @property
    def param_names(self) -> tuple[str, ...]:
        return tuple(s.name for s in self.segments if s.is_param)


@dataclass(slots=True)
class SubrouterBinding[T]:
    validators: tuple[Segment, ...]
    raw_path: str
    child: Router[T]


@dataclass(slots=True, frozen=True)
class Match[T]:
    """Result of a successful lookup.

    ``handler`` is None when the route was registered but never populated.
    ``route`` is the absolute pattern of the entry that won, e.g.
    ``/blog/post/:slug``.
    """

    handler: T | None
    params: dict[str, str] = field(default_factory=dict)
    route: str = "/"


def split_path(path: str) -> list[str]:
    """Split a path on "/" dropping empty segments, so "/a//b/" -> ["a", "b"]."""
    return [part for part in path.split("/") if part]


def parse_path(path: str) -> tuple[Segment, ...]:
    return tuple(
        Segment(value=part, is_param=part.startswith(PARAM_MARKER))
        for part in split_path(path)
    )


def join_paths(*paths: str) -> str:
    """Concatenate paths with single separators: ("/blog/", "/post") -> "/blog/post"."""
    return "/" + "/".join(part for path in paths for part in split_path(path))


class Router[T]:
    """One level of the route tree.

    Usage::

        root = Router()
        blog = root.fork("/blog")
        blog.route("/post/:slug", show_post)
        root.route("/", home).attach(blog)

        root.match("/blog/post/hello")  # Match(show_post, {"slug": "hello"}, ...)
    """

    __slots__ = ("_anchor", "_attached", "_explicit", "_subrouters")
    _anchor: str
    _attached: bool
    _explicit: dict[int, list[RouteEntry[T]]]
    _subrouters: list[SubrouterBinding[T]]

    def __init__(self, anchor: str = "/") -> None:
        self._anchor = anchor
        self._attached = False
        self._explicit = {}
        self._subrouters = []

    def __repr__(self) -> str:
        return f"Router(anchor={self._anchor!r})"

    @property
    def anchor(self) -> str:
        """Path this router is mounted at relative to its parent."""
        return self._anchor

    @property
    def routes(self) -> list[RouteEntry[T]]:
        """Explicit routes by segment count, then registration order."""
        return [
            entry for _, bucket in sorted(self._explicit.items()) for entry in bucket
        ]

    @property
    def subrouters(self) -> list[SubrouterBinding[T]]:
        return list(self._subrouters)

    def bucket(self, size: int) -> list[RouteEntry[T]]:
        """Explicit routes with ``size`` segments, in registration order."""
        return self._explicit.get(size, [])

    def route(self, path: str, handler: T | None = None) -> Self:
        """Registers path, optionally with a handler. Duplicates are appended, not replaced."""
        segments = parse_path(path)
        self._explicit.setdefault(len(segments), []).append(
            RouteEntry(segments=segments, raw_path=path, handler=handler)
        )
        return self

    def fork(self, path: str) -> Router[T]:
        """Creates an unattached child router anchored at path."""
        return Router(path)

    def attach(self, child: Router[T]) -> Self:
        """Mounts child at its anchor path."""
        if child is self:
            msg = "router cannot be attached to itself"
            raise ValueError(msg)
        if child._attached:
            msg = f"router anchored at {child.anchor!r} is already attached"
            raise ValueError(msg)
        if _reaches(child, self):
            msg = f"attaching router anchored at {child.anchor!r} would create a cycle"
            raise ValueError(msg)
        child._attached = True
        self._subrouters.append(
            SubrouterBinding(
                validators=parse_path(child.anchor),
                raw_path=child.anchor,
                child=child,
            )
        )
        logger.debug("attached router at %r under %r", child.anchor, self._anchor)
        return self

    def match(self, path: str) -> Match[T] | None:
        """Matches a raw path, ignoring any "#fragment"."""
        path, _, _ = path.partition("#")
        return find_handler(self, split_path(path))

    def populate(self, config: Config) -> None:
        populate(self, config)


def _reaches(router: Router[Any], target: Router[Any]) -> bool:
    """whether target is router or attached anywhere below it"""
    return router is target or any(
        _reaches(b.child, target) for b in router._subrouters
    )


def find_handler[T](router: Router[T], segments: Sequence[str]) -> Match[T] | None:
    """Finds the first registered route matching segments.

    Explicit routes with the same segment count are tried first, in
    registration order. Then each sub-router whose anchor matches the leading
    segments is searched with the remainder; a sub-router that matches the
    prefix but not the rest does not stop the search. Parameters bound by the
    anchor win over same-named parameters from inside the sub-router.
    """
    for entry in router.bucket(len(segments)):
        params = _bind(entry.segments, segments)
        if params is not None:
            return Match(entry.handler, params, join_paths(entry.raw_path))

    for binding in router._subrouters:
        n = len(binding.validators)
        if len(segments) < n:
            continue
        outer = _bind(binding.validators, segments[:n])
        if outer is None:
            continue
        inner = find_handler(binding.child, segments[n:])
        if inner is None:
            continue
        return Match(
            inner.handler,
            {**inner.params, **outer},
            join_paths(binding.raw_path, inner.route),
        )

    return None


def _bind(tokens: Sequence[Segment], segments: Sequence[str]) -> dict[str, str] | None:
    """params for segments against equally long tokens, or None on a literal mismatch"""
    params: dict[str, str] = {}
    for token, segment in zip(tokens, segments, strict=True):
        if not token.accepts(segment):
            return None
        if token.is_param:
            params[token.name] = segment
    return params


def populate[T](router: Router[T], config: Config) -> None:
    """Attaches handlers to an already shaped tree.

    Callable values are handlers keyed by the exact path they were registered
    with; mapping values configure the sub-router attached at that key.
    Unknown keys are ignored, and populating again overwrites earlier handlers.
    """
    for key, value in config.items():
        if callable(value):
            entry = next(
                (e for e in router.bucket(len(split_path(key))) if e.raw_path == key),
                None,
            )
            if entry is None:
                logger.debug("populate: no route %r under %r", key, router.anchor)
                continue
            entry.handler = value  # type: ignore[assignment]
        elif isinstance(value, Mapping):
            binding = next((b for b in router._subrouters if b.raw_path == key), None)
            if binding is None:
                logger.debug("populate: no subrouter %r under %r", key, router.anchor)
                continue
            populate(binding.child, value)
        else:
            logger.debug("populate: ignoring non-handler value for %r", key)


def shadowed_routes(router: Router[Any], prefix: str = "/") -> list[str]:
    """Absolute paths of routes that can never match.

    A route is shadowed when an earlier sibling has the same shape: the same
    literals in the same positions and parameters everywhere else. Sub-routers
    sharing an anchor are not reported, since a sub-router that fails to match
    the remainder lets later siblings try.
    """
    shadowed: list[str] = []
    for bucket in router._explicit.values():
        seen: set[tuple[str | None, ...]] = set()
        for entry in bucket:
            shape = tuple(None if s.is_param else s.value for s in entry.segments)
            if shape in seen:
                shadowed.append(join_paths(prefix, entry.raw_path))
            seen.add(shape)
    for binding in router._subrouters:
        shadowed.extend(
            shadowed_routes(binding.child, join_paths(prefix, binding.raw_path))
        )
    return shadowed


def format_routes(router: Router[Any], *, tree: bool = False) -> str:
    """Format registered routes as a human-readable string.

    By default produces a column-aligned flat route list in match order:

        /                     home
        /blog                 blog_index
        /blog/post/:slug      show_post
        /users/:id/settings   -

    ``-`` marks a route whose handler has not been populated yet.

    With `tree=True`, produces a visual tree instead:

        /
        ├── / home
        └── /blog
            ├── / blog_index
            └── /post/:slug show_post
    """
    if tree:
        lines = ["/"]
        _render_tree(router, "", lines)
        return "\n".join(lines)

    routes = _collect_routes(router, "/")
    if not routes:
        return ""
    path_w = max(len(path) for path, _ in routes)
    return "\n".join(f"{path:<{path_w}}   {handler}" for path, handler in routes)


def _collect_routes(router: Router[Any], prefix: str) -> list[tuple[str, str]]:
    """Walk the tree in match order, returning (absolute path, handler name) pairs."""
    routes = [
        (join_paths(prefix, entry.raw_path), _qualname(entry.handler))
        for _, bucket in sorted(router._explicit.items())
        for entry in bucket
    ]
    for binding in router._subrouters:
        routes.extend(
            _collect_routes(binding.child, join_paths(prefix, binding.raw_path))
        )
    return routes


def _render_tree(router: Router[Any], prefix: str, lines: list[str]) -> None:
    """Recursively render a router's routes and sub-routers with tree-drawing prefixes."""
    items: list[tuple[str, Router[Any] | None]] = [
        (f"{join_paths(entry.raw_path)} {_qualname(entry.handler)}", None)
        for _, bucket in sorted(router._explicit.items())
        for entry in bucket
    ]
    items.extend((join_paths(b.raw_path), b.child) for b in router._subrouters)

    for i, (label, child) in enumerate(items):
        is_last = i == len(items) - 1
        connector = "└── " if is_last else "├── "
        lines.append(f"{prefix}{connector}{label}")
        if child is not None:
            extension = "    " if is_last else "│   "
            _render_tree(child, prefix + extension, lines)


def _qualname(obj: object) -> str:
    """Extract __qualname__ from a callable, falling back to repr."""
    if obj is None:
        return "-"
    return str(obj.__qualname__) if hasattr(obj, "__qualname__") else repr(obj)
