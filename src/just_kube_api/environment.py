"""Hand-off of provisioned binaries to a control plane launcher."""

from pathlib import Path
from typing import Any, Optional, Protocol

import aiohttp

from just_kube_api.assets.provision import provision_assets
from just_kube_api.config import ProvisionConfig
from just_kube_api.logging import get_logger

logger = get_logger("environment")

ASSETS_ENV_VAR = "KUBEBUILDER_ASSETS"


class ControlPlaneLauncher(Protocol):
    """Starts kube-apiserver and etcd found in a binary directory."""

    async def start(self, assets_dir: Path) -> Any:
        """Start the control plane and return its connection credentials."""
        ...

    async def stop(self) -> None: ...


async def start_control_plane(
    config: ProvisionConfig,
    launcher: ControlPlaneLauncher,
    session: Optional[aiohttp.ClientSession] = None,
) -> Any:
    """Provision all binaries, then start the control plane from them.

    A provisioning failure propagates before the launcher is touched.
    """
    await provision_assets(config, session)

    logger.info({"event": "control_plane_starting", "assets_dir": str(config.assets_dir)})
    return await launcher.start(config.assets_dir)


def assets_env(config: ProvisionConfig) -> dict[str, str]:
    """Environment a launcher reads to locate the binaries."""
    return {ASSETS_ENV_VAR: str(config.assets_dir)}
