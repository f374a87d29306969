"""A small request router with echo-style middleware, built on werkzeug."""

from __future__ import annotations

import json
import re
from dataclasses import dataclass, field
from http import HTTPStatus
from typing import Callable, Iterable, Optional

from werkzeug.datastructures import Headers
from werkzeug.wrappers import Request, Response

Handler = Callable[["Context"], Optional[Response]]
Middleware = Callable[[Handler], Handler]


def _phrase(code: int) -> str:
    try:
        return HTTPStatus(code).phrase
    except ValueError:
        return ""


class HTTPError(Exception):
    """An error that turns into an HTTP response with the given status."""

    def __init__(self, code: int, message: str | None = None, internal: BaseException | None = None):
        self.code = code
        self.message = message if message is not None else _phrase(code)
        self.internal = internal
        super().__init__(f"code={code}, message={self.message}")

    def to_response(self) -> Response:
        return Response(
            json.dumps({"message": self.message}),
            status=self.code,
            mimetype="application/json",
        )


class Context:
    """Per-request state: the request, a rewritable path, response headers and a store."""

    def __init__(self, request: Request):
        self.request = request
        self.path = request.path
        self.headers = Headers()
        self.store: dict[str, object] = {}

    @property
    def scheme(self) -> str:
        return self.request.scheme

    @property
    def host(self) -> str:
        return self.request.host

    def url(self, path: str | None = None, scheme: str | None = None, host: str | None = None) -> str:
        """The request URL, with any of its parts replaced."""
        url = f"{scheme or self.scheme}://{host or self.host}{self.path if path is None else path}"
        query = self.request.query_string.decode("latin-1")
        return f"{url}?{query}" if query else url

    def redirect(self, code: int, location: str) -> Response:
        if not 300 <= code <= 308:
            raise ValueError(f"invalid redirect status code {code}")
        return Response(b"", status=code, headers={"Location": location})

    def string(self, code: int, text: str) -> Response:
        return Response(text, status=code, mimetype="text/plain")

    def json(self, code: int, value: object) -> Response:
        return Response(json.dumps(value), status=code, mimetype="application/json")

    def query_param(self, name: str) -> str:
        return self.request.args.get(name, "")

    def cookie(self, name: str) -> str | None:
        return self.request.cookies.get(name)


@dataclass
class _Route:
    methods: Optional[frozenset]
    pattern: str
    regex: re.Pattern
    handler: Handler
    middleware: tuple = field(default_factory=tuple)


def _chain(handler: Handler, middleware: Iterable[Middleware]) -> Handler:
    for mw in reversed(list(middleware)):
        handler = mw(handler)
    return handler


class App:
    """A WSGI application with pre-routing and post-routing middleware."""

    def __init__(self) -> None:
        self._pre: list[Middleware] = []
        self._use: list[Middleware] = []
        self._routes: list[_Route] = []

    def pre(self, *args: Middleware) -> None:
        self._pre.extend(args)

    def use(self, *args: Middleware) -> None:
        self._use.extend(args)

    def add(self, methods, path: str, handler: Handler, *args: Middleware) -> None:
        regex = re.compile(
            "".join(".*" if part == "*" else re.escape(part) for part in re.split(r"(\*)", path))
        )
        allowed = None if methods is None else frozenset(m.upper() for m in methods)
        self._routes.append(_Route(allowed, path, regex, handler, args))

    def any(self, path: str, handler: Handler, *args: Middleware) -> None:
        self.add(None, path, handler, *args)

    def get(self, path: str, handler: Handler, *args: Middleware) -> None:
        self.add(["GET"], path, handler, *args)

    def _find(self, method: str, path: str) -> _Route:
        candidates = [r for r in self._routes if r.regex.fullmatch(path)]
        if not candidates:
            raise HTTPError(404)
        candidates.sort(key=lambda r: ("*" in r.pattern, -len(r.pattern)))
        for route in candidates:
            if route.methods is None or method.upper() in route.methods:
                return route
        raise HTTPError(405)

    def _dispatch(self, ctx: Context) -> Optional[Response]:
        route = self._find(ctx.request.method, ctx.path)
        return _chain(route.handler, route.middleware)(ctx)

    def serve(self, request: Request) -> Response:
        ctx = Context(request)
        handler = _chain(_chain(self._dispatch, self._use), self._pre)
        try:
            response = handler(ctx)
        except HTTPError as err:
            response = err.to_response()
        if response is None:
            response = Response(b"", status=200)
        for key in set(ctx.headers.keys()):
            response.headers[key] = ctx.headers[key]
        return response

    def __call__(self, environ, start_response):
        return self.serve(Request(environ))(environ, start_response)