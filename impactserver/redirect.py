"""Middleware that strips file extensions with a redirect."""

from __future__ import annotations

from .framework import Context, Handler, Middleware


def strip_ext(code: int, *args: str) -> Middleware:
    """Redirect any path ending in one of the given extensions to the path without it."""
    extensions = args

    def middleware(next_handler: Handler) -> Handler:
        def handler(ctx: Context):
            path = ctx.path
            for ext in extensions:
                if path.endswith("." + ext):
                    return ctx.redirect(code, ctx.url(path=path[: len(path) - len(ext) - 1]))
            return next_handler(ctx)

        return handler

    return middleware