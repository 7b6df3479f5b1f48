"""Streaming HTTP retrieval of manifests and release artifacts."""

import asyncio
from contextlib import asynccontextmanager
from pathlib import Path
from typing import AsyncIterator, Optional, Protocol

import aiohttp

from just_kube_api.errors import FilesystemError, HTTPStatusError, TransportError
from just_kube_api.logging import get_logger

logger = get_logger("assets.fetcher")

CHUNK_SIZE = 64 * 1024


class Digest(Protocol):
    def update(self, chunk: bytes) -> None: ...


@asynccontextmanager
async def open_stream(
    session: aiohttp.ClientSession, url: str
) -> AsyncIterator[aiohttp.StreamReader]:
    """GET a URL and yield its body stream once the status is known to be ok.

    The response is released when the block exits, on every path.
    """
    try:
        async with session.get(url) as response:
            if not 200 <= response.status < 300:
                logger.debug(
                    {
                        "event": "fetch_bad_status",
                        "url": url,
                        "status": response.status,
                    }
                )
                raise HTTPStatusError(url, response.status, response.reason)

            yield response.content
    except (aiohttp.ClientError, asyncio.TimeoutError) as e:
        raise TransportError(url, str(e) or e.__class__.__name__) from e


async def fetch_text(session: aiohttp.ClientSession, url: str) -> str:
    """Read a whole, small response body as text."""
    async with open_stream(session, url) as stream:
        body = await stream.read()
    return body.decode("utf-8")


async def download_to(
    session: aiohttp.ClientSession,
    url: str,
    dest: Path,
    digest: Optional[Digest] = None,
) -> int:
    """Stream a response body into dest, feeding digest with the same bytes.

    A partially written dest is removed when the transfer fails.
    """
    written = 0
    async with open_stream(session, url) as stream:
        try:
            f = open(dest, "wb")
        except OSError as e:
            raise FilesystemError(f"Failed to open {dest}: {e}", str(dest)) from e

        try:
            with f:
                async for chunk in stream.iter_chunked(CHUNK_SIZE):
                    f.write(chunk)
                    if digest is not None:
                        digest.update(chunk)
                    written += len(chunk)
        except (aiohttp.ClientError, asyncio.TimeoutError):
            dest.unlink(missing_ok=True)
            raise
        except OSError as e:
            dest.unlink(missing_ok=True)
            raise FilesystemError(f"Failed to write {dest}: {e}", str(dest)) from e
        except Exception:
            dest.unlink(missing_ok=True)
            raise

    return written
