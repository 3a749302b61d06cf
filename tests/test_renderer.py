from collections.abc import Mapping
from typing import Any

import pytest
from conftest import site_router

from subroute.client import RouterClient
from subroute.renderer import MemoryHistory, Page, Renderer
from subroute.tree import matched_route, path_params

config: dict[str, Any] = {
    "/": lambda p: "home",
    "/about": lambda p: "about",
    "/blog": {
        "/": lambda p: "blog",
        "/post/:slug": lambda p: f"post {p['slug']}",
    },
    "/users/:id": {
        "/settings": {"/:name": lambda p: f"user {p['id']} {p['name']}"},
    },
}


def not_found(path: str) -> str:
    return f"404 {path}"


def make_renderer(path: str = "/") -> Renderer:
    return Renderer(
        site_router(handlers=False),
        config,
        not_found=not_found,
        history=MemoryHistory(path),
    )


@pytest.mark.parametrize(
    "path, expected",
    [
        ("/", "home"),
        ("/about", "about"),
        ("/blog/", "blog"),
        ("/blog/post/hello", "post hello"),
        ("/blog/post/hello#comments", "post hello"),
        ("/users/7/settings/theme", "user 7 theme"),
        ("/nope", "404 /nope"),
        ("/blog/post", "404 /blog/post"),
        ("/users/7", "404 /users/7"),  # matched, but never populated
    ],
)
def test_render(path: str, expected: str) -> None:
    assert make_renderer(path).render() == expected


def test_render_matches_location_path() -> None:
    renderer = make_renderer("/blog/post/x#/about")
    assert renderer.history.location == ("/blog/post/x", "/about")
    assert renderer.render() == "post x"
    renderer.history.move_to("/nope#top")
    assert renderer.render() == "404 /nope#top"


def test_render_follows_navigation() -> None:
    renderer = make_renderer()
    client = RouterClient(renderer.router, renderer.history)
    assert renderer.render() == "home"
    client.link("/blog", "/post/:slug").use({"slug": "a"}, "top")
    assert renderer.history.path == "/blog/post/a#top"
    assert renderer.render() == "post a"


def test_render_sets_context() -> None:
    seen: list[tuple[dict[str, str], str]] = []

    def page(p: Mapping[str, str]) -> str:
        seen.append((path_params.get(), matched_route.get()))
        return "ok"

    renderer = make_renderer("/blog/post/x")
    renderer.router.populate({"/blog": {"/post/:slug": page}})
    assert renderer.render() == "ok"
    assert seen == [({"slug": "x"}, "/blog/post/:slug")]
    assert path_params.get(None) is None
    assert matched_route.get(None) is None


def test_middleware_order() -> None:
    def tag(name: str) -> Any:
        def middleware(page: Page) -> Page:
            return lambda p: f"{name}({page(p)})"

        return middleware

    renderer = make_renderer("/about")
    renderer.use(tag("outer"), tag("inner"))
    assert renderer.render() == "outer(inner(about))"


def test_middleware_skips_not_found() -> None:
    renderer = make_renderer("/nope")
    renderer.use(lambda page: lambda p: "wrapped")
    assert renderer.render() == "404 /nope"


def test_not_found_must_be_callable() -> None:
    with pytest.raises(ValueError, match="not_found must be callable"):
        Renderer(site_router(), {}, not_found="404")  # type: ignore[arg-type]


def test_default_history() -> None:
    renderer = Renderer(site_router(), {}, not_found=not_found)
    assert renderer.history.path == "/"
    assert renderer.render() == "home"


def test_history_subscribe() -> None:
    history = MemoryHistory()
    moves: list[str] = []
    unsubscribe = history.subscribe(moves.append)
    history.move_to("/a")
    unsubscribe()
    history.move_to("/b")
    assert moves == ["/a"]
    assert history.path == "/b"


@pytest.mark.parametrize(
    "path, expected",
    [
        ("/", ("/", None)),
        ("/a#top", ("/a", "top")),
        ("/a#", ("/a", "")),
    ],
)
def test_history_location(path: str, expected: tuple[str, str | None]) -> None:
    assert MemoryHistory(path).location == expected
