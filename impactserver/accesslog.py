"""Middleware that writes one access-log line per request."""

from __future__ import annotations

import logging
import time

from .framework import Context, Handler, HTTPError

logger = logging.getLogger("impactserver.access")


def _human(nanoseconds: int) -> str:
    if nanoseconds < 1_000:
        return f"{nanoseconds}ns"
    for divisor, unit in ((1_000, "µs"), (1_000_000, "ms"), (1_000_000_000, "s")):
        if nanoseconds < divisor * 1_000 or unit == "s":
            value = f"{nanoseconds / divisor:.9f}".rstrip("0").rstrip(".")
            return f"{value}{unit}"
    return f"{nanoseconds}ns"


def access_log(next_handler: Handler) -> Handler:
    """Log request id, status, method, host, URI, latency and error of each request."""

    def handler(ctx: Context):
        start = time.perf_counter_ns()
        status = 200
        error = ""
        try:
            response = next_handler(ctx)
        except HTTPError as err:
            status = err.code
            error = str(err)
            raise
        except Exception as err:
            status = 500
            error = str(err)
            raise
        else:
            if response is not None:
                status = response.status_code
            return response
        finally:
            latency = time.perf_counter_ns() - start
            request = ctx.request
            query = request.query_string.decode("latin-1")
            uri = request.path + (f"?{query}" if query else "")
            logger.info(
                "#%s %s %s %s%s latency=%d [%s] error=%s",
                request.headers.get("X-Request-ID", ""),
                status,
                request.method,
                request.host,
                uri,
                latency,
                _human(latency),
                error,
            )

    return handler