"""OpenTelemetry tracing and metrics middleware for rendered pages.

Creates one span per render, named after the matched route pattern.

Install with: uv add "subroute[otel]"
"""

from __future__ import annotations

import time
from typing import TYPE_CHECKING, Any

if TYPE_CHECKING:
    from collections.abc import Mapping

    from subroute.renderer import Middleware, Page

try:
    from opentelemetry import metrics, trace
    from opentelemetry.trace import SpanKind, TracerProvider
except ImportError as e:
    msg = (
        "OpenTelemetry middleware requires the 'otel' extra. "
        "Install with: uv add 'subroute[otel]'"
    )
    raise ImportError(msg) from e

from subroute.tree import matched_route, path_params

_DURATION_BUCKETS = (
    0.0005,
    0.001,
    0.005,
    0.01,
    0.025,
    0.05,
    0.1,
    0.25,
    0.5,
    1.0,
)


def otel(
    *,
    tracer_provider: TracerProvider | None = None,
    meter_provider: metrics.MeterProvider | None = None,
) -> Middleware:
    """Create OpenTelemetry tracing and metrics middleware.

    Span attributes:
        - ``subroute.route``: matched route pattern, e.g. ``/blog/post/:slug``
        - ``subroute.route.param.<name>``: each path parameter

    Metrics emitted:
        - ``subroute.render.duration`` (histogram, seconds)

    Args:
        tracer_provider: Optional TracerProvider. If None, uses the global provider.
        meter_provider: Optional MeterProvider. If None, uses the global provider.

    Example:
        renderer.use(otel())
    """
    tracer = trace.get_tracer("subroute", tracer_provider=tracer_provider)
    meter = metrics.get_meter("subroute", meter_provider=meter_provider)
    duration_histogram = meter.create_histogram(
        "subroute.render.duration",
        unit="s",
        description="Duration of page renders.",
        explicit_bucket_boundaries_advisory=_DURATION_BUCKETS,
    )

    def middleware(page: Page) -> Page:
        def traced_page(params: Mapping[str, str]) -> Any:
            # set by Renderer before middleware runs
            route = matched_route.get("")
            attributes: dict[str, str] = {}
            if route:
                attributes["subroute.route"] = route
            for key, value in path_params.get({}).items():
                attributes[f"subroute.route.param.{key}"] = value

            start = time.perf_counter()
            with tracer.start_as_current_span(
                f"render {route}" if route else "render",
                kind=SpanKind.INTERNAL,
                attributes=attributes,
                record_exception=True,
                set_status_on_exception=True,
            ):
                try:
                    return page(params)
                finally:
                    duration_histogram.record(
                        time.perf_counter() - start,
                        {"subroute.route": route} if route else {},
                    )

        return traced_page

    return middleware
