"""Handlers for the changelog, the old /Impact/ and /stripe paths, and Apple Pay."""

from __future__ import annotations

import os
from urllib.parse import urlsplit

from werkzeug.wrappers import Response

from .framework import Context
from .proxy import proxy

GITHUB = "https://impactdevelopment.github.io"
CHANGELOG_URL = GITHUB + "/Impact/changelog"


def changelog(ctx: Context) -> Response:
    """Serve the changelog hosted on the GitHub pages site."""
    return proxy(ctx.request, CHANGELOG_URL)


def impact_redirect(ctx: Context) -> Response:
    """Send /Impact/... to the GitHub pages site, except the changelog, which moved here."""
    if ctx.path == "/Impact/changelog":
        return ctx.redirect(301, ctx.url(path="/changelog"))
    github = urlsplit(GITHUB)
    return ctx.redirect(302, ctx.url(scheme=github.scheme, host=github.netloc))


def stripe_redirect(ctx: Context) -> Response:
    """Permanently redirect the old /stripe page to /donate."""
    return ctx.redirect(301, ctx.url(path="/donate"))


def apple_pay_verify(ctx: Context) -> Response:
    """Serve the Apple Pay domain verification text."""
    return ctx.string(200, os.environ.get("APPLE_PAY_VERIFICATION", ""))