"""Expected digest resolution and streaming verification."""

import binascii
import hashlib
from pathlib import Path

import aiohttp

from just_kube_api.assets.fetcher import fetch_text
from just_kube_api.errors import (
    FilesystemError,
    HTTPStatusError,
    ManifestFetchError,
    ManifestFormatError,
    TransportError,
)
from just_kube_api.logging import get_logger
from just_kube_api.types import AssetDescriptor, AssetKind

logger = get_logger("assets.digests")

DIGEST_ALGORITHM = "sha256"
DIGEST_SIZE = hashlib.new(DIGEST_ALGORITHM).digest_size
READ_SIZE = 64 * 1024


class DigestVerifier:
    """Streaming digest that can be reset and compared against an expected value."""

    def __init__(self, algorithm: str = DIGEST_ALGORITHM):
        self.algorithm = algorithm
        self._hash = hashlib.new(algorithm)

    def reset(self) -> None:
        self._hash = hashlib.new(self.algorithm)

    def update(self, chunk: bytes) -> None:
        self._hash.update(chunk)

    def feed_file(self, path: Path) -> None:
        """Feed a local file; a missing file contributes no bytes."""
        try:
            f = open(path, "rb")
        except FileNotFoundError:
            return
        except OSError as e:
            raise FilesystemError(f"Failed to read {path}: {e}", str(path)) from e

        with f:
            try:
                while chunk := f.read(READ_SIZE):
                    self._hash.update(chunk)
            except OSError as e:
                raise FilesystemError(f"Failed to read {path}: {e}", str(path)) from e

    def digest(self) -> bytes:
        return self._hash.digest()

    def hexdigest(self) -> str:
        return self._hash.hexdigest()

    def matches(self, expected: bytes) -> bool:
        return self._hash.digest() == expected


def decode_digest(text: str, source: str) -> bytes:
    """Decode a hex digest token, insisting on the algorithm's length."""
    try:
        digest = bytes.fromhex(text)
    except ValueError as e:
        raise ManifestFormatError(
            f"Undecodable digest {text!r} in {source}",
            details={"source": source, "digest": text},
        ) from e

    if len(digest) != DIGEST_SIZE:
        raise ManifestFormatError(
            f"Digest in {source} is {len(digest)} bytes, expected {DIGEST_SIZE}",
            details={"source": source, "digest": text},
        )

    return digest


def parse_sidecar_digest(body: str, source: str) -> bytes:
    """The whole sidecar body is one hex digest."""
    return decode_digest(body.strip(), source)


def parse_listing_digest(body: str, file_name: str, source: str) -> bytes:
    """Pick the digest of file_name out of a 'digest  filename' listing.

    The filename token must match exactly; a leading '*' (binary mode
    marker) is ignored.
    """
    for line in body.splitlines():
        parts = line.split()
        if len(parts) < 2:
            continue

        if parts[-1].lstrip("*") == file_name:
            return decode_digest(parts[0], source)

    raise ManifestFormatError(
        f"{source} does not contain expected entry for {file_name}",
        details={"source": source, "file_name": file_name},
    )


async def resolve_digest(
    session: aiohttp.ClientSession, descriptor: AssetDescriptor
) -> bytes:
    """Fetch the manifest of an asset and return its expected digest."""
    url = descriptor.manifest_url

    try:
        body = await fetch_text(session, url)
    except (TransportError, HTTPStatusError) as e:
        raise ManifestFetchError(url, str(e)) from e
    except UnicodeDecodeError as e:
        raise ManifestFormatError(
            f"Manifest {url} is not text", details={"source": url}
        ) from e

    match descriptor.kind:
        case AssetKind.RAW_BINARY:
            expected = parse_sidecar_digest(body, url)
        case AssetKind.TAR_GZ_ARCHIVE:
            expected = parse_listing_digest(body, descriptor.file_name, url)
        case _:
            raise ValueError(f"Unknown asset kind: {descriptor.kind}")

    logger.debug(
        {
            "event": "digest_resolved",
            "asset": descriptor.name,
            "version": descriptor.version,
            "manifest": url,
            "digest": expected.hex(),
        }
    )

    return expected
