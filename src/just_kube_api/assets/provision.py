"""Idempotent provisioning of verified control plane binaries.

Archives are extracted beside their download, to the versioned path
`<name>-<version>-<os>-<arch>`, and the stable `<name>` link points at the
extracted binary. Older versions stay on disk next to the current one.
"""

from pathlib import Path
from typing import Dict, Optional

import aiohttp

from just_kube_api.assets.archive import extract_member
from just_kube_api.assets.digests import DigestVerifier, resolve_digest
from just_kube_api.assets.fetcher import download_to
from just_kube_api.assets.links import publish_link
from just_kube_api.config import ProvisionConfig
from just_kube_api.errors import FilesystemError, IntegrityError
from just_kube_api.logging import get_logger
from just_kube_api.types import AssetDescriptor, AssetKind

logger = get_logger("assets.provision")


async def ensure_asset(
    session: aiohttp.ClientSession,
    config: ProvisionConfig,
    descriptor: AssetDescriptor,
) -> Path:
    """Make sure the asset is on disk, verified, and linked under its stable name.

    Downloads only when the versioned file is missing or does not match the
    digest the manifest currently declares. Returns the stable link path.
    """
    assets_dir = config.assets_dir
    cache_path = descriptor.cache_path(assets_dir)
    expected = await resolve_digest(session, descriptor)

    verifier = DigestVerifier()
    verifier.feed_file(cache_path)

    if verifier.matches(expected):
        logger.info(
            {
                "event": "cache_hit",
                "asset": descriptor.name,
                "version": descriptor.version,
                "path": str(cache_path),
            }
        )
    else:
        url = descriptor.source_url
        logger.info(
            {"event": "download_started", "asset": descriptor.name, "url": url}
        )

        verifier.reset()
        size = await download_to(session, url, cache_path, verifier)

        if not verifier.matches(expected):
            cache_path.unlink(missing_ok=True)
            raise IntegrityError(
                url, str(cache_path), expected.hex(), verifier.hexdigest()
            )

        logger.info(
            {
                "event": "download_complete",
                "asset": descriptor.name,
                "url": url,
                "size": size,
            }
        )

    binary = _install_binary(descriptor, assets_dir)
    return publish_link(binary, descriptor.link_path(assets_dir))


def _install_binary(descriptor: AssetDescriptor, assets_dir: Path) -> Path:
    """Produce the executable for a verified download."""
    cache_path = descriptor.cache_path(assets_dir)

    match descriptor.kind:
        case AssetKind.TAR_GZ_ARCHIVE:
            return extract_member(
                cache_path,
                descriptor.member_path,
                descriptor.binary_path(assets_dir),
            )
        case AssetKind.RAW_BINARY:
            try:
                cache_path.chmod(0o755)
            except OSError as e:
                raise FilesystemError(
                    f"Failed to make {cache_path} executable: {e}", str(cache_path)
                ) from e
            return cache_path
        case _:
            raise ValueError(f"Unknown asset kind: {descriptor.kind}")


def ensure_assets_dir(assets_dir: Path) -> Path:
    try:
        assets_dir.mkdir(mode=0o755, parents=True, exist_ok=True)
    except OSError as e:
        raise FilesystemError(
            f"failed to create assets dir {assets_dir}: {e}", str(assets_dir)
        ) from e
    return assets_dir


async def provision_assets(
    config: ProvisionConfig, session: Optional[aiohttp.ClientSession] = None
) -> Dict[str, Path]:
    """Provision every configured asset in order, stopping at the first failure.

    Returns the stable link path of each asset keyed by asset name.
    """
    ensure_assets_dir(config.assets_dir)

    if session is None:
        async with aiohttp.ClientSession(timeout=config.client_timeout()) as session:
            return await _ensure_all(session, config)

    return await _ensure_all(session, config)


async def _ensure_all(
    session: aiohttp.ClientSession, config: ProvisionConfig
) -> Dict[str, Path]:
    links = {}
    for descriptor in config.descriptors():
        links[descriptor.name] = await ensure_asset(session, config, descriptor)

    logger.info(
        {
            "event": "assets_ready",
            "assets_dir": str(config.assets_dir),
            "assets": sorted(links),
        }
    )
    return links
