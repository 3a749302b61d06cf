from collections.abc import Callable

from subroute import Router


class MockNavigationPort:
    """Navigation port that records every path it is asked to move to."""

    def __init__(self) -> None:
        self.moves: list[str] = []

    def move_to(self, path: str) -> None:
        self.moves.append(path)


# handlers
home = lambda p: "home"  # noqa: E731
about = lambda p: "about"  # noqa: E731
blog_index = lambda p: "blog_index"  # noqa: E731
show_post = lambda p: f"post {p['slug']}"  # noqa: E731
user_profile = lambda p: f"user {p['id']}"  # noqa: E731
user_setting = lambda p: f"user {p['id']} setting {p['name']}"  # noqa: E731


def site_router(
    handlers: bool = True,
) -> Router[Callable[[dict[str, str]], str]]:
    """
    /                         home
    /about                    about
    /blog                     blog_index
    /blog/post/:slug          show_post
    /users/:id                user_profile
    /users/:id/settings/:name user_setting
    """
    root: Router[Callable[[dict[str, str]], str]] = Router()
    blog = root.fork("/blog")
    blog.route("/", blog_index if handlers else None)
    blog.route("/post/:slug", show_post if handlers else None)
    users = root.fork("/users/:id")
    users.route("/", user_profile if handlers else None)
    settings = users.fork("/settings")
    settings.route("/:name", user_setting if handlers else None)
    users.attach(settings)
    root.route("/", home if handlers else None)
    root.route("/about", about if handlers else None)
    root.attach(blog).attach(users)
    return root
