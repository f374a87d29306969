import io
import uuid
import zipfile

import pytest
from werkzeug.test import EnvironBuilder
from werkzeug.wrappers import Request

from impactserver.framework import App, Context, HTTPError
from impactserver.installer import (
    NIGHTLY_PROPERTIES,
    Installer,
    InstallerVersion,
    extract_or_generate_cid,
    extract_tracky_tracky,
)

EXE_PREFIX = b"MZ-stub-header"


def make_jar() -> bytes:
    buffer = io.BytesIO()
    with zipfile.ZipFile(buffer, "w") as archive:
        archive.writestr("META-INF/MANIFEST.MF", b"Manifest-Version: 1.0\n")
        archive.writestr("Main.class", b"\xca\xfe\xba\xbe")
    return buffer.getvalue()


def loaded(release="1.2.3", **kwargs) -> Installer:
    installer = Installer(release, report=False, **kwargs)
    jar = make_jar()
    installer.load(jar, EXE_PREFIX + jar)
    return installer


def request(path="/ImpactInstaller.jar", **kwargs) -> Request:
    return Request(EnvironBuilder(path=path, base_url="http://localhost", **kwargs).get_environ())


def app_for(installer: Installer) -> App:
    app = App()
    app.get("/ImpactInstaller.jar", installer.handler(InstallerVersion.JAR))
    app.get("/ImpactInstaller.exe", installer.handler(InstallerVersion.EXE))
    return app


def test_version_url():
    assert InstallerVersion.JAR.url("v1") == (
        "https://github.com/ImpactDevelopment/Installer/releases/download/v1/installer-v1.jar"
    )
    assert InstallerVersion.EXE.url("v1").endswith("/installer-v1.exe")


def test_extract_tracky_tracky():
    assert extract_tracky_tracky("GA1.2.111.222") == "111.222"
    assert extract_tracky_tracky("a.b") == ""
    assert extract_tracky_tracky(None) == ""


def test_extract_or_generate_cid_from_cookie():
    ctx = Context(request(headers={"Cookie": "_ga=GA1.2.111.222"}))
    assert extract_or_generate_cid(ctx) == "111.222"


def test_extract_or_generate_cid_generates_uuid():
    ctx = Context(request())
    assert uuid.UUID(extract_or_generate_cid(ctx)).version == 1


def test_load_rejects_mismatched_files():
    installer = Installer("1.2.3", report=False)
    with pytest.raises(ValueError):
        installer.load(make_jar(), b"not the jar")
    assert not installer.ready


def test_build_jar_entries():
    body = loaded().build(InstallerVersion.JAR, False, "cid-1")
    with zipfile.ZipFile(io.BytesIO(body)) as archive:
        assert archive.namelist() == ["META-INF/MANIFEST.MF", "Main.class", "impact_cid.txt"]
        assert archive.read("impact_cid.txt") == b"cid-1"
        assert archive.read("Main.class") == b"\xca\xfe\xba\xbe"
        assert all(i.compress_type == zipfile.ZIP_DEFLATED for i in archive.infolist())


def test_build_nightlies_adds_properties():
    body = loaded().build(InstallerVersion.JAR, True, "x")
    with zipfile.ZipFile(io.BytesIO(body)) as archive:
        assert archive.read("default_args.properties") == NIGHTLY_PROPERTIES.encode()


def test_build_exe_has_header():
    body = loaded().build(InstallerVersion.EXE, False, "x")
    assert body.startswith(EXE_PREFIX)
    with zipfile.ZipFile(io.BytesIO(body[len(EXE_PREFIX):])) as archive:
        assert archive.read("impact_cid.txt") == b"x"


def test_handler_without_release():
    response = app_for(Installer("", report=False)).serve(request())
    assert response.status_code == 500


def test_handler_not_ready():
    installer = Installer("1.2.3", timeout=0.01, report=False)
    response = app_for(installer).serve(request())
    assert response.status_code == 503
    assert response.headers["Retry-After"] == "120"


def test_handler_blocks_hotlinking():
    installer = loaded(server_url="https://impactclient.net")
    response = app_for(installer).serve(request(headers={"Referer": "https://other.example.com/"}))
    assert response.status_code == 401


def test_handler_allows_completed_referer():
    installer = loaded(server_url="https://impactclient.net")
    referer = "https://other.example.com/brady-money-grubbing-completed"
    response = app_for(installer).serve(request(headers={"Referer": referer}))
    assert response.status_code == 200


def test_handler_serves_nightly_jar():
    response = app_for(loaded()).serve(
        request(query_string="nightlies=1", headers={"Cookie": "_ga=GA1.2.111.222"})
    )
    assert response.status_code == 200
    assert response.headers["Content-Disposition"] == (
        "attachment; filename=ImpactNightlyInstaller-1.2.3.jar"
    )
    assert response.headers["Content-Type"] == "application/octet-stream"
    with zipfile.ZipFile(io.BytesIO(response.get_data())) as archive:
        assert archive.read("impact_cid.txt") == b"111.222"
        assert "default_args.properties" in archive.namelist()


def test_handler_serves_exe():
    response = app_for(loaded()).serve(request("/ImpactInstaller.exe"))
    assert response.headers["Content-Disposition"].endswith("ImpactInstaller-1.2.3.exe")
    assert response.get_data().startswith(EXE_PREFIX)


def test_handler_raises_http_error_directly():
    handler = Installer("", report=False).handler(InstallerVersion.JAR)
    with pytest.raises(HTTPError) as info:
        handler(Context(request()))
    assert info.value.code == 500