"""Provisioning configuration."""

from dataclasses import dataclass, field
from pathlib import Path
from typing import List

import aiohttp
import appdirs

from just_kube_api.assets import catalog
from just_kube_api.platforms import get_platform_info
from just_kube_api.types import AssetDescriptor

APP_NAME = "just-kube-api"
DEFAULT_APISERVER_VERSION = "v1.22.2"
DEFAULT_ETCD_VERSION = "v3.5.0"


def default_assets_dir() -> Path:
    return Path(appdirs.user_data_dir(APP_NAME))


def _default_os() -> str:
    return get_platform_info().os_name


def _default_arch() -> str:
    return get_platform_info().arch


@dataclass(frozen=True)
class ProvisionConfig:
    """Immutable settings for one provisioning run"""

    assets_dir: Path = field(default_factory=default_assets_dir)
    apiserver_version: str = DEFAULT_APISERVER_VERSION
    etcd_version: str = DEFAULT_ETCD_VERSION
    os: str = field(default_factory=_default_os)
    arch: str = field(default_factory=_default_arch)
    connect_timeout: float = 30.0
    read_timeout: float = 60.0

    def descriptors(self) -> List[AssetDescriptor]:
        """Assets in provisioning order."""
        return [
            catalog.kube_apiserver(self.apiserver_version, self.os, self.arch),
            catalog.etcd(self.etcd_version, self.os, self.arch),
        ]

    def client_timeout(self) -> aiohttp.ClientTimeout:
        # No total limit: release binaries run to hundreds of megabytes
        return aiohttp.ClientTimeout(
            total=None,
            sock_connect=self.connect_timeout,
            sock_read=self.read_timeout,
        )
