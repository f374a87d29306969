from urllib.parse import urlsplit

from werkzeug.test import EnvironBuilder
from werkzeug.wrappers import Request

from impactserver.framework import App
from impactserver.redirect import strip_ext


def _request(url):
    parts = urlsplit(url)
    builder = EnvironBuilder(
        path=parts.path or "/",
        base_url=f"{parts.scheme}://{parts.netloc}",
        query_string=parts.query,
    )
    return Request(builder.get_environ())


def _app(middleware):
    app = App()
    app.pre(middleware)
    app.any("/*", lambda c: c.string(200, c.path))
    return app


def test_strips_extension_and_keeps_query():
    response = _app(strip_ext(301, "html")).serve(_request("http://foobar.net/about.html?x=1"))
    assert response.status_code == 301
    assert response.headers["Location"] == "http://foobar.net/about?x=1"


def test_first_matching_extension_used():
    response = _app(strip_ext(302, "htm", "html")).serve(_request("http://foobar.net/a.htm"))
    assert response.status_code == 302
    assert response.headers["Location"] == "http://foobar.net/a"


def test_other_paths_pass_through():
    path = "/style.css"
    response = _app(strip_ext(301, "html")).serve(_request("http://foobar.net" + path))
    assert response.status_code == 200
    assert response.get_data(as_text=True) == path


def test_extension_must_follow_dot():
    path = "/xhtml"
    response = _app(strip_ext(301, "html")).serve(_request("http://foobar.net" + path))
    assert response.status_code == 200
    assert response.get_data(as_text=True) == path