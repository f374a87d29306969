"""Middleware that normalises index.html paths and enforces HTTPS."""

from __future__ import annotations

import json
import logging

from .framework import Context, Handler, Middleware

logger = logging.getLogger(__name__)


def remove_index_html(code: int) -> Middleware:
    """Redirect paths ending in index.html to their directory; code must be a 3xx."""

    def middleware(next_handler: Handler) -> Handler:
        def handler(ctx: Context):
            segments = [part for part in ctx.path.split("/") if part]
            if segments and segments[-1].lower() == "index.html":
                rest = segments[:-1]
                path = "/" + "/".join(rest) if rest else ""
                return ctx.redirect(code, ctx.url(path=path))
            return next_handler(ctx)

        return handler

    return middleware


def _visitor_scheme(header: str) -> str | None:
    try:
        visitor = json.loads(header)
    except ValueError:
        return None
    if not isinstance(visitor, dict):
        return None
    scheme = visitor.get("scheme", "")
    if scheme is None:
        return ""
    return scheme if isinstance(scheme, str) else None


def enforce_https(code: int) -> Middleware:
    """Redirect visitors who reached the CDN over plain HTTP to HTTPS."""

    def middleware(next_handler: Handler) -> Handler:
        def handler(ctx: Context):
            # X-Forwarded-Proto is rewritten by the inner proxy, so only the
            # CDN's own visitor header says what the client really used.
            visitor = ctx.request.headers.get("Cf-Visitor", "")
            if not visitor:
                return next_handler(ctx)
            scheme = _visitor_scheme(visitor)
            if scheme is None:
                logger.warning("unparseable Cf-Visitor header %r", visitor)
                return next_handler(ctx)
            if scheme != "http":
                return next_handler(ctx)
            if ctx.path == "/releases.json":
                # old clients' update checkers cannot follow the redirect
                return next_handler(ctx)
            ctx.headers["Cache-Control"] = "private, max-age=0"
            return ctx.redirect(code, ctx.url(scheme="https"))

        return handler

    return middleware