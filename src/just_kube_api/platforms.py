"""Platform detection and mapping."""

import platform
from dataclasses import dataclass

# Release artifacts use Go's GOOS/GOARCH naming
OS_MAPPINGS = {
    "Linux": "linux",
    "Darwin": "darwin",
}

ARCH_MAPPINGS = {
    "x86_64": "amd64",
    "amd64": "amd64",
    "aarch64": "arm64",
    "arm64": "arm64",
    "ppc64le": "ppc64le",
    "s390x": "s390x",
}


@dataclass(frozen=True)
class PlatformInfo:
    """Platform information."""

    os_name: str
    arch: str


def get_platform_info(system: str = None, machine: str = None) -> PlatformInfo:
    """Get current platform information."""
    system = system or platform.system()
    machine = (machine or platform.machine()).lower()

    if system not in OS_MAPPINGS:
        raise RuntimeError(f"Unsupported operating system: {system}")

    if machine not in ARCH_MAPPINGS:
        raise RuntimeError(f"Unsupported architecture: {machine}")

    return PlatformInfo(os_name=OS_MAPPINGS[system], arch=ARCH_MAPPINGS[machine])

