"""The websites and the host-routing front server."""

from __future__ import annotations

import argparse
import logging
import mimetypes
import os
from typing import Mapping, Optional
from urllib.parse import urlsplit

from werkzeug.security import safe_join
from werkzeug.wrappers import Request, Response

from .accesslog import access_log
from .cache import cache, cache_until_restart, no_cache
from .changelog import apple_pay_verify, changelog, impact_redirect, stripe_redirect
from .framework import App, Context, Handler, HTTPError
from .index import enforce_https, remove_index_html
from .installer import Installer, InstallerVersion, installer_from_env
from .proxy import proxy
from .redirect import strip_ext
from .releases import ReleaseStore
from .rewrite import regex_rewrite
from .runners import do_repeatedly

logger = logging.getLogger(__name__)

NEW_WEB_ORIGIN = "https://impact-web.herokuapp.com/"
BODY_LIMIT = 1024 * 1024
_SECOND_LEVEL = {"co", "com", "org", "net", "ac", "gov", "edu"}


class WebApp(App):
    """The main website, with the release list and installer it serves."""

    def __init__(self, releases: ReleaseStore, installer: Installer):
        super().__init__()
        self.releases = releases
        self.installer = installer


def _static(root: str) -> Handler:
    root = os.path.abspath(root)

    def handler(ctx: Context) -> Response:
        relative = ctx.path.lstrip("/")
        path = safe_join(root, relative) if relative else root
        if path is None:
            raise HTTPError(404)
        if os.path.isdir(path):
            path = os.path.join(path, "index.html")
        if not os.path.isfile(path):
            raise HTTPError(404)
        with open(path, "rb") as handle:
            data = handle.read()
        mimetype = mimetypes.guess_type(path)[0] or "application/octet-stream"
        return Response(data, status=200, mimetype=mimetype)

    return handler


def web_server(static_dir: str = "static") -> WebApp:
    """The main website: releases, installers, redirects and static pages."""
    app = WebApp(
        ReleaseStore(os.environ.get("GITHUB_ACCESS_TOKEN", "")),
        installer_from_env(),
    )
    app.use(access_log)

    app.add(["HEAD", "GET"], "/changelog", changelog)
    app.any("/Impact/*", impact_redirect)
    app.get("/releases.json", app.releases.handler, cache(86400))
    app.add(["HEAD", "GET"], "/stripe", stripe_redirect)
    app.get("/ImpactInstaller.jar", app.installer.handler(InstallerVersion.JAR), no_cache())
    app.get("/ImpactInstaller.exe", app.installer.handler(InstallerVersion.EXE), no_cache())
    app.any("/.well-known/apple-developer-merchantid-domain-association", apple_pay_verify)

    static = App()
    static.pre(strip_ext(301, "html"))
    # serve extension-less paths from the matching .html file
    static.pre(regex_rewrite({r".*/[^/.]+$": "$0.html"}))
    static.use(cache_until_restart(3600))
    static.any("/*", _static(static_dir))
    app.any("/*", lambda ctx: static.serve(ctx.request))
    return app


def _moved_to(address: str, code: int) -> Handler:
    target = urlsplit(address)

    def handler(ctx: Context) -> Response:
        return ctx.redirect(code, ctx.url(scheme=target.scheme, host=target.netloc))

    return handler


def _proxy_to(address: str) -> Handler:
    target = urlsplit(address)

    def handler(ctx: Context) -> Response:
        return proxy(ctx.request, ctx.url(scheme=target.scheme, host=target.netloc))

    return handler


def new_web_server() -> App:
    """The new website, proxied from its own host."""
    app = App()
    app.use(access_log)
    app.get("/ImpactInstaller.*", _moved_to("https://impactclient.net/", 302), no_cache())
    app.any("/*", _proxy_to(NEW_WEB_ORIGIN))
    return app


def _subdomains(host: str) -> str:
    name = host.rsplit(":", 1)[0] if ":" in host else host
    labels = name.split(".")
    if labels[-1] == "localhost":
        return ".".join(labels[:-1])
    suffix = 1
    if len(labels) >= 3 and len(labels[-1]) == 2 and labels[-2] in _SECOND_LEVEL:
        suffix = 2
    return ".".join(labels[: max(0, len(labels) - suffix - 1)])


def _non_www_redirect(next_handler: Handler) -> Handler:
    def handler(ctx: Context):
        if ctx.host.startswith("www."):
            return ctx.redirect(301, ctx.url(host=ctx.host[4:]))
        return next_handler(ctx)

    return handler


def _remove_trailing_slash(next_handler: Handler) -> Handler:
    def handler(ctx: Context):
        if len(ctx.path) > 1 and ctx.path.endswith("/"):
            ctx.path = ctx.path[:-1]
        return next_handler(ctx)

    return handler


def _body_limit(limit: int):
    def middleware(next_handler: Handler) -> Handler:
        def handler(ctx: Context):
            length = ctx.request.content_length
            if length is not None and length > limit:
                raise HTTPError(413)
            return next_handler(ctx)

        return handler

    return middleware


def _recover(next_handler: Handler) -> Handler:
    def handler(ctx: Context):
        try:
            return next_handler(ctx)
        except HTTPError:
            raise
        except Exception as err:
            logger.exception("handler failed")
            raise HTTPError(500, internal=err) from err

    return handler


def _build_app(hosts: Mapping[str, App]) -> App:
    app = App()
    app.pre(
        _non_www_redirect,
        _remove_trailing_slash,
        remove_index_html(301),
        enforce_https(301),
    )
    app.use(_body_limit(BODY_LIMIT))

    def dispatch(ctx: Context) -> Response:
        server = hosts.get(_subdomains(ctx.host))
        if server is None:
            raise HTTPError(404)
        request = ctx.request
        if ctx.path != request.path:
            environ = dict(request.environ)
            environ["PATH_INFO"] = ctx.path
            environ["SCRIPT_NAME"] = ""
            request = Request(environ)
        return server.serve(request)

    app.any("/*", dispatch)
    app.use(_recover)
    return app


def main(argv: Optional[list[str]] = None) -> int:
    """Run the front server."""
    from werkzeug.serving import run_simple

    try:
        default_port = int(os.environ.get("PORT", ""))
    except ValueError:
        default_port = 3000
    parser = argparse.ArgumentParser(prog="impactserver")
    parser.add_argument("--port", type=int, default=default_port)
    parser.add_argument("--static", default="static")
    args = parser.parse_args(argv)

    logging.basicConfig(level=logging.INFO)
    web = web_server(args.static)
    if not web.releases.token:
        logger.warning("no GitHub access token to bypass rate limiting")
    web.releases.refresh()

    def refresh() -> None:
        try:
            web.releases.refresh()
        except Exception:
            logger.exception("releases error")

    do_repeatedly(15 * 60, refresh)
    web.installer.start()

    app = _build_app({"": web, "new": new_web_server()})
    run_simple("", args.port, app, threaded=True)
    return 0