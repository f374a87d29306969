"""Outgoing HTTP requests with a fixed user agent and body helpers."""

from __future__ import annotations

import json
import xml.etree.ElementTree as ET
from dataclasses import dataclass
from http import HTTPStatus
from urllib.parse import parse_qsl, urlencode, urlsplit, urlunsplit

import requests
from requests.structures import CaseInsensitiveDict

from .mediatype import MediaType

USER_AGENT = "ImpactServer"
XML_HEADER = '<?xml version="1.0" encoding="UTF-8"?>'


@dataclass
class HTTPResponse:
    code: int
    headers: CaseInsensitiveDict
    body: bytes

    @property
    def ok(self) -> bool:
        return self.code == 200

    @property
    def status(self) -> str:
        try:
            phrase = HTTPStatus(self.code).phrase
        except ValueError:
            phrase = ""
        return f"{self.code} {phrase}"

    @property
    def content_type(self) -> str:
        return self.get_header("Content-Type")

    @property
    def text(self) -> str:
        return self.body.decode("utf-8", errors="replace")

    def get_header(self, key: str) -> str:
        return self.headers.get(key, "")

    def json(self):
        return json.loads(self.body)

    def xml(self) -> ET.Element:
        return ET.fromstring(self.body)


class HTTPRequest:
    """A request that is built up and then sent with do()."""

    def __init__(self, method: str, url: str, body: bytes | None = None, session: requests.Session | None = None):
        self.method = method.upper()
        self.url = url
        self.body = body
        self.headers: dict[str, str] = {"User-Agent": USER_AGENT}
        self.session = session or requests.Session()

    def set_query(self, key: str, value: str) -> None:
        parts = urlsplit(self.url)
        pairs = [(k, v) for k, v in parse_qsl(parts.query, keep_blank_values=True) if k != key]
        pairs.append((key, value))
        pairs.sort(key=lambda kv: kv[0])
        self.url = urlunsplit(parts._replace(query=urlencode(pairs)))

    def set_header(self, key: str, value: str) -> None:
        self.headers[key] = value

    def accept(self, media_type: MediaType | str) -> None:
        self.set_header("Accept", str(media_type))

    def authorization(self, auth_type: str, auth_key: str) -> None:
        self.set_header("Authorization", f"{auth_type} {auth_key}")

    def _set_body(self, body: bytes, media_type: MediaType) -> None:
        self.body = body
        self.set_header("Content-Type", str(media_type))
        self.set_header("Content-Length", str(len(body)))

    def do(self) -> HTTPResponse:
        resp = self.session.request(self.method, self.url, headers=self.headers, data=self.body)
        return HTTPResponse(resp.status_code, CaseInsensitiveDict(resp.headers), resp.content)


def new_request(method: str, url: str, body: bytes | None = None) -> HTTPRequest:
    return HTTPRequest(method, url, body)


def get_request(address: str) -> HTTPRequest:
    return new_request("GET", address, None)


def json_request(address: str, body) -> HTTPRequest:
    request = new_request("POST", address)
    request._set_body(json.dumps(body, separators=(",", ":")).encode(), MediaType.JSON)
    return request


def _to_xml(root: str, body: dict) -> str:
    element = ET.Element(root)
    for key, value in body.items():
        ET.SubElement(element, key).text = str(value)
    return ET.tostring(element, encoding="unicode")


def xml_request(address: str, root: str, body: dict) -> HTTPRequest:
    return xml_request_with_doctype(address, XML_HEADER, root, body)


def xml_request_with_doctype(address: str, doctype: str, root: str, body: dict) -> HTTPRequest:
    post = _to_xml(root, body)
    if doctype:
        post = f"{doctype}\n{post}"
    request = new_request("POST", address)
    request._set_body(post.encode(), MediaType.XML)
    return request


def form_request(address: str, form: dict[str, str]) -> HTTPRequest:
    post = urlencode(sorted(form.items()))
    request = new_request("POST", address)
    request._set_body(post.encode(), MediaType.FORM)
    return request