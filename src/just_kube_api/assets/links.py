"""Stable, version independent links to provisioned binaries."""

import os
from pathlib import Path

from just_kube_api.errors import FilesystemError
from just_kube_api.logging import get_logger

logger = get_logger("assets.links")


def publish_link(source: Path, link: Path) -> Path:
    """Point link at source, replacing whatever sits at link.

    The link text is source relative to the link directory, so the link
    stays valid whether the assets dir was given relative or absolute.
    The new link is created beside the old one and renamed over it, so
    readers never observe a missing link.
    """
    target = os.path.relpath(source, link.parent)
    staging = link.with_name(f".{link.name}.{os.getpid()}.tmp")

    try:
        staging.unlink(missing_ok=True)
        os.symlink(target, staging)
        os.replace(staging, link)
    except OSError as e:
        staging.unlink(missing_ok=True)
        raise FilesystemError(
            f"Failed to link {link} to {source}: {e}", str(link)
        ) from e

    logger.debug({"event": "link_published", "link": str(link), "target": target})

    return link
