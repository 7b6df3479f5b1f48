import hashlib
import io
import logging
import tarfile
from pathlib import Path
from typing import Dict, List, Tuple

import aiohttp
import pytest
import pytest_asyncio
from aiohttp import web
from aiohttp.test_utils import TestServer

from just_kube_api.assets import catalog
from just_kube_api.config import ProvisionConfig
from just_kube_api.types import AssetDescriptor, AssetKind


class ReleaseServer:
    """Local stand-in for a release host, recording every request path"""

    def __init__(self):
        self.files: Dict[str, bytes] = {}
        self.statuses: Dict[str, int] = {}
        self.requests: List[str] = []
        self.base_url = ""

    def add(self, path: str, body: bytes) -> str:
        self.files["/" + path.lstrip("/")] = body
        return self.url(path)

    def fail(self, path: str, status: int) -> None:
        self.statuses["/" + path.lstrip("/")] = status

    def url(self, path: str = "") -> str:
        return f"{self.base_url}/{path.lstrip('/')}"

    def hits(self, path: str) -> int:
        return self.requests.count("/" + path.lstrip("/"))

    async def handle(self, request: web.Request) -> web.Response:
        self.requests.append(request.path)
        if request.path in self.statuses:
            return web.Response(status=self.statuses[request.path])
        if request.path not in self.files:
            return web.Response(status=404)
        return web.Response(body=self.files[request.path])


@pytest.fixture(autouse=True)
def app_logger_state():
    """Give each test a fresh just_kube_api logger and restore it afterwards"""
    logger = logging.getLogger("just_kube_api")
    saved = (logger.handlers[:], logger.propagate, logger.level)
    logger.handlers = []
    try:
        yield logger
    finally:
        logger.handlers, logger.propagate, logger.level = saved


@pytest_asyncio.fixture
async def release_server():
    releases = ReleaseServer()
    app = web.Application()
    app.router.add_get("/{tail:.*}", releases.handle)

    server = TestServer(app)
    await server.start_server()
    releases.base_url = f"http://{server.host}:{server.port}"
    try:
        yield releases
    finally:
        await server.close()


@pytest_asyncio.fixture
async def session():
    async with aiohttp.ClientSession() as session:
        yield session


@pytest.fixture
def config(tmp_path: Path) -> ProvisionConfig:
    assets_dir = tmp_path / "assets"
    assets_dir.mkdir()
    return ProvisionConfig(assets_dir=assets_dir, os="linux", arch="amd64")


def sha256_hex(data: bytes) -> str:
    return hashlib.sha256(data).hexdigest()


def make_tar_gz(members: List[Tuple[str, bytes]]) -> bytes:
    buf = io.BytesIO()
    with tarfile.open(fileobj=buf, mode="w:gz") as tf:
        for name, content in members:
            info = tarfile.TarInfo(name)
            info.size = len(content)
            info.mode = 0o755
            tf.addfile(info, io.BytesIO(content))
    return buf.getvalue()


def raw_descriptor(releases: ReleaseServer, version: str = "v1.22.2") -> AssetDescriptor:
    return AssetDescriptor(
        name="kube-apiserver",
        version=version,
        os="linux",
        arch="amd64",
        source_url_template=releases.url("{version}/bin/{os}/{arch}/kube-apiserver"),
        manifest_url_template="{url}.sha256",
        kind=AssetKind.RAW_BINARY,
    )


def archive_descriptor(releases: ReleaseServer, version: str = "v3.5.0") -> AssetDescriptor:
    return AssetDescriptor(
        name="etcd",
        version=version,
        os="linux",
        arch="amd64",
        source_url_template=releases.url("{version}/{name}-{version}-{os}-{arch}.tar.gz"),
        manifest_url_template=releases.url("{version}/SHA256SUMS"),
        kind=AssetKind.TAR_GZ_ARCHIVE,
        member_template="{name}-{version}-{os}-{arch}/etcd",
    )


def publish_raw(releases: ReleaseServer, version: str, body: bytes) -> None:
    path = f"{version}/bin/linux/amd64/kube-apiserver"
    releases.add(path, body)
    releases.add(path + ".sha256", (sha256_hex(body) + "\n").encode())


def publish_etcd(releases: ReleaseServer, version: str, binary: bytes) -> bytes:
    base = f"etcd-{version}-linux-amd64"
    archive = make_tar_gz(
        [
            (f"{base}/README.md", b"etcd release\n"),
            (f"{base}/etcd", binary),
            (f"{base}/etcdctl", b"ctl"),
        ]
    )
    releases.add(f"{version}/{base}.tar.gz", archive)
    listing = "\n".join(
        [
            f"{sha256_hex(b'other')}  etcd-{version}-darwin-amd64.zip",
            f"{sha256_hex(archive)}  {base}.tar.gz",
            f"{sha256_hex(b'arm')}  etcd-{version}-linux-arm64.tar.gz",
        ]
    )
    releases.add(f"{version}/SHA256SUMS", (listing + "\n").encode())
    return archive


@pytest.fixture
def local_catalog(release_server, monkeypatch):
    """Point the release catalog at the local release server"""
    monkeypatch.setattr(
        catalog, "KUBE_APISERVER_URL", release_server.url("{version}/bin/{os}/{arch}/kube-apiserver")
    )
    monkeypatch.setattr(
        catalog, "ETCD_URL", release_server.url("{version}/{name}-{version}-{os}-{arch}.tar.gz")
    )
    monkeypatch.setattr(catalog, "ETCD_DIGEST_URL", release_server.url("{version}/SHA256SUMS"))
    return release_server
