# /// script
# requires-python = ">=3.12"
# dependencies = [
#     "subroute @ file:///${PROJECT_ROOT}/../subroute",
# ]
# ///
"""Headless navigation demo.

Builds the route tree up front, populates it with pages, then navigates
through generated links.
"""

import logging
from collections.abc import Mapping

from subroute import MemoryHistory, Renderer, Router, RouterClient, format_routes

type Params = Mapping[str, str]


def main() -> None:
    logging.basicConfig(level=logging.DEBUG)

    root: Router = Router()
    blog = root.fork("/blog")
    blog.route("/").route("/post/:slug")
    users = root.fork("/users/:id")
    users.route("/").route("/posts/:slug")
    root.route("/").attach(blog).attach(users)

    history = MemoryHistory()
    history.subscribe(lambda path: print(f"> navigated to {path}"))
    renderer = Renderer(
        root,
        {
            "/": home,
            "/blog": {"/": blog_index, "/post/:slug": blog_post},
            "/users/:id": {"/": user_profile, "/posts/:slug": user_post},
        },
        not_found=not_found,
        history=history,
    )
    print(format_routes(root, tree=True))

    client = RouterClient(root, history)
    print(renderer.render())
    client.link("/blog", "/post/:slug").use({"slug": "hello-world"}, "comments")
    print(renderer.render())
    client.link("/users/:id", "/posts/:slug").use({"id": "7", "slug": "draft"})
    print(renderer.render())
    history.move_to("/nowhere")
    print(renderer.render())


# pages
def home(p: Params) -> str:
    return "home"


def blog_index(p: Params) -> str:
    return "blog index"


def blog_post(p: Params) -> str:
    return f"blog post {p['slug']}"


def user_profile(p: Params) -> str:
    return f"user {p['id']}"


def user_post(p: Params) -> str:
    return f"user {p['id']} post {p['slug']}"


def not_found(path: str) -> str:
    return f"404 {path}"


if __name__ == "__main__":
    main()
