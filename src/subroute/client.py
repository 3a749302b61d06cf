"""Link generation mirroring a finished route tree.

``RouterClient`` walks the tree once. Each explicit route becomes a
``RouteLink`` keyed by its normalized path, and each attached sub-router
becomes a nested ``RouterClient`` keyed by its anchor, so deep routes are
addressed by chained lookups:

    client = RouterClient(root, history)
    client["/blog"]["/post/:slug"].get_link({"slug": "hello"})  # "/blog/post/hello"
"""

from __future__ import annotations

from collections.abc import Iterator, Mapping
from dataclasses import dataclass
from typing import Any, Protocol

from subroute.tree import Router, Segment, join_paths, parse_path


class NavigationPort(Protocol):
    def move_to(self, path: str) -> None: ...


@dataclass(slots=True, frozen=True)
class RouteLink:
    """href builder and navigator for one absolute route template."""

    template: str
    port: NavigationPort

    @property
    def segments(self) -> tuple[Segment, ...]:
        return parse_path(self.template)

    @property
    def param_names(self) -> tuple[str, ...]:
        return tuple(s.name for s in self.segments if s.is_param)

    def get_link(
        self, params: Mapping[str, str] | None = None, fragment_id: str = ""
    ) -> str:
        """Substitute params into the template, appending ``#fragment_id`` if given.

        Substitution is per segment, so a ``:id`` parameter never rewrites part
        of ``:identifier``. Raises ValueError if a template parameter is missing.
        Keys the template doesn't use are ignored.
        """
        params = params or {}
        missing = [name for name in self.param_names if name not in params]
        if missing:
            msg = f"missing path params for {self.template!r}: {', '.join(missing)}"
            raise ValueError(msg)
        link = "/" + "/".join(
            params[s.name] if s.is_param else s.value for s in self.segments
        )
        return f"{link}#{fragment_id}" if fragment_id else link

    def use(
        self, params: Mapping[str, str] | None = None, fragment_id: str = ""
    ) -> None:
        """Navigate to the link via the navigation port."""
        self.port.move_to(self.get_link(params, fragment_id))


class RouterClient(Mapping[str, "RouteLink | RouterClient"]):
    __slots__ = ("_entries", "prefix")
    _entries: dict[str, RouteLink | RouterClient]
    prefix: str

    def __init__(
        self, router: Router[Any], port: NavigationPort, prefix: str = "/"
    ) -> None:
        self.prefix = prefix
        self._entries = {}
        for entry in router.routes:
            key = join_paths(entry.raw_path)
            self._entries[key] = RouteLink(join_paths(prefix, key), port)
        # a sub-router replaces an explicit route under the same key
        for binding in router.subrouters:
            key = join_paths(binding.raw_path)
            self._entries[key] = RouterClient(
                binding.child, port, join_paths(prefix, key)
            )

    def __getitem__(self, key: str) -> RouteLink | RouterClient:
        return self._entries[key]

    def __iter__(self) -> Iterator[str]:
        return iter(self._entries)

    def __len__(self) -> int:
        return len(self._entries)

    def __repr__(self) -> str:
        return f"RouterClient(prefix={self.prefix!r}, keys={list(self._entries)!r})"

    def link(self, *keys: str) -> RouteLink:
        """Chained lookup: ``client.link("/blog", "/post/:slug")``."""
        node: RouteLink | RouterClient = self
        for key in keys:
            if not isinstance(node, RouterClient):
                msg = f"{key!r} looked up below route {node.template!r}"
                raise KeyError(msg)
            node = node[key]
        if not isinstance(node, RouteLink):
            msg = f"{'/'.join(keys)!r} is a sub-router, not a route"
            raise KeyError(msg)
        return node

    def links(self) -> dict[str, RouteLink]:
        """Every route at any depth, keyed by absolute template."""
        result: dict[str, RouteLink] = {}
        for node in self._entries.values():
            if isinstance(node, RouterClient):
                for template, link in node.links().items():
                    result.setdefault(template, link)
            else:
                result.setdefault(node.template, node)
        return result
