"""The client release list, merged from GitHub releases and the file bucket."""

from __future__ import annotations

import logging
import threading
from dataclasses import dataclass, field
from typing import Callable, Iterable, Mapping, Optional

from werkzeug.wrappers import Response

from .framework import Context
from .httpclient import get_request
from .mediatype import MediaType

logger = logging.getLogger(__name__)

GITHUB_RELEASES_URL = "https://api.github.com/repos/ImpactDevelopment/ImpactReleases/releases"
FILES_URL = "https://files.impactclient.net/"
RELEASES_JSON_URL = "http://impactclient.net/releases.json"


@dataclass(frozen=True)
class Asset:
    name: str
    url: str

    def to_dict(self) -> dict:
        return {"name": self.name, "browser_download_url": self.url}

    @classmethod
    def from_dict(cls, data: Mapping) -> "Asset":
        return cls(name=data.get("name") or "", url=data.get("browser_download_url") or "")


@dataclass(frozen=True)
class Release:
    tag_name: str
    draft: bool = False
    prerelease: bool = False
    assets: tuple[Asset, ...] = field(default_factory=tuple)

    def to_dict(self) -> dict:
        return {
            "tag_name": self.tag_name,
            "draft": self.draft,
            "prerelease": self.prerelease,
            "assets": [asset.to_dict() for asset in self.assets],
        }

    @classmethod
    def from_dict(cls, data: Mapping) -> "Release":
        if not isinstance(data, Mapping):
            raise ValueError("release must be a JSON object")
        return cls(
            tag_name=data.get("tag_name") or "",
            draft=bool(data.get("draft")),
            prerelease=bool(data.get("prerelease")),
            assets=tuple(Asset.from_dict(a) for a in data.get("assets") or ()),
        )


def github_releases(token: str = "") -> dict[str, Release]:
    """Fetch releases from GitHub, keyed by tag; raises ValueError on a bad reply."""
    request = get_request(GITHUB_RELEASES_URL)
    request.set_query("per_page", "100")
    request.accept(MediaType.JSON)
    if token:
        # our own rate limit, whoever else shares this address
        request.authorization("Basic", token)
    response = request.do()
    try:
        data = response.json()
    except ValueError as err:
        logger.error("GitHub returned invalid JSON: %s", response.text)
        raise ValueError("GitHub returned invalid JSON") from err
    if not isinstance(data, list):
        logger.error("GitHub returned unexpected JSON: %s", response.text)
        raise ValueError("GitHub returned a non-list reply")
    return {release.tag_name: release for release in map(Release.from_dict, data)}


def s3_releases(objects: Iterable[Mapping]) -> dict[str, Release]:
    """Build releases from bucket listing entries with "Key" and "StorageClass"."""
    keys = {
        obj["Key"]
        for obj in objects
        if obj.get("Key") is not None and obj.get("StorageClass") == "STANDARD"
    }
    releases: dict[str, Release] = {}
    for key in sorted(keys):
        # e.g. artifacts/Impact/dev/dev-856f3ad-1.13.2/Impact-dev-856f3ad-1.13.2.jar
        parts = key.split("/")
        if len(parts) < 2:
            continue
        file_name = parts[-1]
        if not file_name.startswith("Impact-") or not file_name.endswith(".jar"):
            continue
        tag_name = parts[-2]
        full_path = key[:-3]
        internal_name = file_name[:-3]
        if full_path + "json" not in keys:
            continue
        assets = [
            Asset(file_name, FILES_URL + key),
            Asset(internal_name + "json", FILES_URL + full_path + "json"),
        ]
        if full_path + "json.asc" in keys:
            assets.append(Asset(internal_name + "json.asc", FILES_URL + full_path + "json.asc"))
        releases[tag_name] = Release(
            tag_name=tag_name,
            draft="dev" in tag_name,
            prerelease="release" not in tag_name,
            assets=tuple(assets),
        )
    return releases


def all_releases(token: str = "", objects: Optional[Iterable[Mapping]] = None) -> dict[str, Release]:
    """GitHub releases, overlaid with releases found in the bucket listing."""
    releases = github_releases(token)
    if objects is not None:
        releases.update(s3_releases(objects))
    return releases


class ReleaseStore:
    """Holds the current release list and purges the CDN when it changes."""

    def __init__(
        self,
        token: str = "",
        list_objects: Optional[Callable[[], Iterable[Mapping]]] = None,
        purge: Optional[Callable[[list[str]], None]] = None,
    ):
        self.token = token
        self._list_objects = list_objects
        self._purge = purge
        self._releases: Optional[dict[str, Release]] = None
        self._lock = threading.Lock()

    @property
    def releases(self) -> dict[str, Release]:
        with self._lock:
            return dict(self._releases or {})

    def refresh(self) -> bool:
        """Reload the releases; True if they changed. GitHub errors propagate."""
        objects: list[Mapping] = []
        if self._list_objects is not None:
            try:
                objects = list(self._list_objects())
            except Exception:
                # the bucket only holds premium builds; keep serving everyone else
                logger.exception("listing release files failed")
                objects = []
        new = all_releases(self.token, objects)
        with self._lock:
            old = self._releases
            changed = old != new
            self._releases = new
        if changed and old is not None and self._purge is not None:
            self._purge([RELEASES_JSON_URL])
        return changed

    def handler(self, ctx: Context) -> Response:
        return ctx.json(200, [release.to_dict() for release in self.releases.values()])