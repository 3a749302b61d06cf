from importlib.metadata import version

from .client import NavigationPort, RouteLink, RouterClient
from .renderer import MemoryHistory, Renderer
from .tree import (
    Match,
    Router,
    find_handler,
    format_routes,
    matched_route,
    path_params,
    populate,
    shadowed_routes,
)

__all__ = [
    "Match",
    "MemoryHistory",
    "NavigationPort",
    "Renderer",
    "RouteLink",
    "Router",
    "RouterClient",
    "__version__",
    "find_handler",
    "format_routes",
    "matched_route",
    "path_params",
    "populate",
    "shadowed_routes",
]

__version__ = version("subroute")
