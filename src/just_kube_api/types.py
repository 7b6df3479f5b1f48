"""Core type definitions"""

from dataclasses import dataclass
from enum import Enum
from pathlib import Path
from typing import Optional

AssetKind = Enum("AssetKind", ["RAW_BINARY", "TAR_GZ_ARCHIVE"])

ARCHIVE_SUFFIX = ".tar.gz"


@dataclass(frozen=True)
class AssetDescriptor:
    """A versioned external binary and where to fetch it from"""

    name: str
    version: str
    os: str
    arch: str
    source_url_template: str
    manifest_url_template: str
    kind: AssetKind
    member_template: Optional[str] = None

    def __post_init__(self):
        if self.kind == AssetKind.TAR_GZ_ARCHIVE and not self.member_template:
            raise ValueError(f"Archive asset {self.name} needs a member path")

    def _format(self, template: str, **extra: str) -> str:
        return template.format(
            name=self.name,
            version=self.version,
            os=self.os,
            arch=self.arch,
            **extra,
        )

    @property
    def versioned_name(self) -> str:
        return f"{self.name}-{self.version}-{self.os}-{self.arch}"

    @property
    def file_name(self) -> str:
        """Name of the downloaded file as it appears in manifests and on disk."""
        if self.kind == AssetKind.TAR_GZ_ARCHIVE:
            return self.versioned_name + ARCHIVE_SUFFIX
        return self.versioned_name

    @property
    def source_url(self) -> str:
        return self._format(self.source_url_template)

    @property
    def manifest_url(self) -> str:
        return self._format(self.manifest_url_template, url=self.source_url)

    @property
    def member_path(self) -> Optional[str]:
        if self.member_template is None:
            return None
        return self._format(self.member_template)

    def cache_path(self, assets_dir: Path) -> Path:
        """Versioned download location, the file whose digest gets checked."""
        return assets_dir / self.file_name

    def binary_path(self, assets_dir: Path) -> Path:
        """Versioned executable the stable link points at."""
        return assets_dir / self.versioned_name

    def link_path(self, assets_dir: Path) -> Path:
        return assets_dir / self.name
