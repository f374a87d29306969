"""Serving the installer jar and exe, repacked on the fly with per-download entries."""

from __future__ import annotations

import io
import logging
import os
import threading
import time
import uuid
import zipfile
from concurrent.futures import ThreadPoolExecutor
from dataclasses import dataclass
from enum import Enum
from typing import Optional

import requests
from werkzeug.wrappers import Request, Response

from .framework import Context, Handler, HTTPError
from .httpclient import form_request, get_request
from .ip import real_ip_if_unambiguous

logger = logging.getLogger(__name__)

DOWNLOAD_BASE = "https://github.com/ImpactDevelopment/Installer/releases/download/"
ANALYTICS_URL = "https://www.google-analytics.com/collect"
NIGHTLY_PROPERTIES = "# Enable nightly builds\nnoGPG = true\nprereleases = true\n"
_DOS_EPOCH = (1980, 1, 1, 0, 0, 0)


class InstallerVersion(Enum):
    JAR = "jar"
    EXE = "exe"

    @property
    def ext(self) -> str:
        return self.value

    def url(self, release: str) -> str:
        """Where this flavour of the given installer release is published."""
        return f"{DOWNLOAD_BASE}{release}/installer-{release}.{self.value}"


@dataclass(frozen=True)
class _Entry:
    name: str
    data: bytes


def extract_tracky_tracky(cookie_value: Optional[str]) -> str:
    """The client id part of an analytics cookie, or '' if it is malformed."""
    if not cookie_value:
        return ""
    parts = cookie_value.split(".")
    if len(parts) != 4:
        return ""
    return f"{parts[2]}.{parts[3]}"


def extract_or_generate_cid(ctx: Context) -> str:
    """The client id from the analytics cookie, or a fresh time-based UUID."""
    cid = extract_tracky_tracky(ctx.cookie("_ga"))
    return cid or str(uuid.uuid1())


class Installer:
    """Holds the downloaded installer contents and builds personalised copies."""

    def __init__(
        self,
        release: str = "",
        server_url: str = "",
        timeout: float = 5.0,
        report: bool = True,
    ):
        self.release = release
        self.server_url = server_url
        self.timeout = timeout
        self.report = report
        self._entries: list[_Entry] = []
        self._exe_header = b""
        self._ready = threading.Event()

    @property
    def ready(self) -> bool:
        return self._ready.is_set()

    def load(self, jar: bytes, exe: bytes) -> None:
        """Take the jar's entries and the exe's prefix; the exe must end with the jar."""
        header_len = len(exe) - len(jar)
        if header_len < 0 or exe[header_len:] != jar:
            raise ValueError("invalid installer files")
        with zipfile.ZipFile(io.BytesIO(jar)) as archive:
            entries = [_Entry(info.filename, archive.read(info)) for info in archive.infolist()]
        self._entries = entries
        self._exe_header = exe[:header_len]
        self._ready.set()
        logger.info("installer initialized")

    def _fetch(self, version: InstallerVersion) -> bytes:
        url = version.url(self.release)
        logger.info("downloading %s", url)
        response = get_request(url).do()
        if not response.ok:
            raise RuntimeError("Installer download status not OK")
        logger.info("finished downloading %s, length is %d", url, len(response.body))
        return response.body

    def _download_until_success(self, version: InstallerVersion, retry: float = 300.0) -> bytes:
        attempts = 0
        while True:
            try:
                return self._fetch(version)
            except Exception as err:
                attempts += 1
                logger.error(
                    "error downloading %s installer after %d attempts: %s", version.ext, attempts, err
                )
                time.sleep(retry)

    def start(self) -> Optional[threading.Thread]:
        """Download both installers in the background and load them."""
        if not self.release:
            logger.warning("installer version not specified, download will not work")
            return None

        def run() -> None:
            with ThreadPoolExecutor(max_workers=2) as pool:
                jar = pool.submit(self._download_until_success, InstallerVersion.JAR)
                exe = pool.submit(self._download_until_success, InstallerVersion.EXE)
                self.load(jar.result(), exe.result())

        thread = threading.Thread(target=run, daemon=True)
        thread.start()
        return thread

    def build(self, version: InstallerVersion, nightlies: bool, cid: str) -> bytes:
        """The installer file for version, with nightly settings and the client id added."""
        # exe builds get no modification time; jars need a valid one for newer Java
        date_time = _DOS_EPOCH if version is InstallerVersion.EXE else time.localtime()[:6]
        buffer = io.BytesIO()
        with zipfile.ZipFile(buffer, "w") as archive:

            def add(name: str, data: bytes) -> None:
                info = zipfile.ZipInfo(name, date_time=date_time)
                info.compress_type = zipfile.ZIP_DEFLATED
                archive.writestr(info, data)

            for entry in self._entries:
                add(entry.name, entry.data)
            if nightlies:
                add("default_args.properties", NIGHTLY_PROPERTIES.encode())
            add("impact_cid.txt", cid.encode())
        body = buffer.getvalue()
        if version is InstallerVersion.EXE:
            return self._exe_header + body
        return body

    def handler(self, version: InstallerVersion) -> Handler:
        """A request handler that serves this installer flavour."""

        def handle(ctx: Context) -> Response:
            if not self.release:
                raise HTTPError(500, "Installer version not specified")

            referer = ctx.request.referrer or ""
            if (
                referer
                and not referer.startswith(self.server_url)
                and "brady-money-grubbing-completed" not in referer
            ):
                logger.info("blocking referer %s", referer)
                raise HTTPError(401, "no hotlinking >:(")

            if not self._ready.wait(self.timeout):
                ctx.headers["Retry-After"] = "120"
                raise HTTPError(503, "Installer download not ready yet, please try again later")

            nightlies = ctx.query_param("nightlies") in ("1", "true")
            filename = "Impact" + ("Nightly" if nightlies else "")
            filename += f"Installer-{self.release}.{version.ext}"

            cid = extract_or_generate_cid(ctx)
            body = self.build(version, nightlies, cid)
            if self.report:
                threading.Thread(
                    target=_analytics, args=(cid, version, ctx.request), daemon=True
                ).start()
                threading.Thread(
                    target=_count_download, args=(version.url(self.release),), daemon=True
                ).start()
            return Response(
                body,
                status=200,
                headers={
                    "Content-Type": "application/octet-stream",
                    "Content-Disposition": f"attachment; filename={filename}",
                    "Content-Transfer-Encoding": "binary",
                },
            )

        return handle


def _analytics(cid: str, version: InstallerVersion, request: Request) -> None:
    user_agent = request.user_agent.string
    form = {
        "v": "1",
        "t": "event",
        "tid": "UA-143397381-1",
        "cid": cid,
        "ds": "backend",
        "ec": "installer",
        "ea": "download",
        "el": version.ext,
        "ua": user_agent,
    }
    forwarded = real_ip_if_unambiguous(request)
    if forwarded:
        form["uip"] = forwarded
    outgoing = form_request(ANALYTICS_URL, form)
    outgoing.set_header("User-Agent", user_agent)
    try:
        response = outgoing.do()
    except requests.RequestException as err:
        logger.error("analytics error: %s", err)
        return
    if not response.ok:
        logger.error("analytics bad status code %s: %s", response.status, response.text)


def _count_download(url: str) -> None:
    # Ask for the asset so the download is counted, but don't follow to the file itself.
    try:
        response = requests.get(url, allow_redirects=False)
    except requests.RequestException as err:
        logger.error("download count error: %s", err)
        return
    if response.status_code != 302:
        logger.warning("GitHub did not accept the request")


def installer_from_env() -> Installer:
    """An Installer for the release named in INSTALLER_VERSION."""
    return Installer(os.environ.get("INSTALLER_VERSION", ""))