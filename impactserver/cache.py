"""Middleware that sets Cache-Control for browsers and the CDN."""

from __future__ import annotations

from .framework import Context, Handler, Middleware

ONE_YEAR = 31536000


def _cache_control(value: str) -> Middleware:
    def middleware(next_handler: Handler) -> Handler:
        def handler(ctx: Context):
            ctx.headers["Cache-Control"] = value
            return next_handler(ctx)

        return handler

    return middleware


def cache(max_age: int) -> Middleware:
    """Let browsers and the CDN cache for max_age seconds."""
    return _cache_control(f"public, max-age={max_age}")


def cache_cloudflare(cloudflare_max_age: int) -> Middleware:
    """Override any upstream max-age with an s-maxage the CDN respects."""
    return _cache_control(
        f"public, s-maxage={cloudflare_max_age}, max-age={cloudflare_max_age}"
    )


def cache_until_restart(browser_max_age: int) -> Middleware:
    """Cache in the CDN until the next purge, in browsers for browser_max_age seconds."""
    return _cache_control(f"public, s-maxage={ONE_YEAR}, max-age={browser_max_age}")


def cache_until_purge() -> Middleware:
    """Cache everywhere until a purge."""
    return cache_until_restart(ONE_YEAR)


def no_cache() -> Middleware:
    """Do not cache anywhere."""
    return _cache_control("private, max-age=0")