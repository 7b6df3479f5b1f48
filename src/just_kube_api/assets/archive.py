"""Single member extraction from gzip-compressed tar archives."""

import tarfile
from pathlib import Path
from typing import BinaryIO

from just_kube_api.errors import ArchiveError, ArchiveMemberNotFoundError
from just_kube_api.logging import get_logger

logger = get_logger("assets.archive")

COPY_SIZE = 64 * 1024


def copy_exact(src: BinaryIO, dst: BinaryIO, size: int) -> None:
    """Copy exactly size bytes; running short is an error."""
    remaining = size
    while remaining > 0:
        chunk = src.read(min(COPY_SIZE, remaining))
        if not chunk:
            raise EOFError(f"unexpected end of member, {remaining} bytes missing")
        dst.write(chunk)
        remaining -= len(chunk)


def extract_member(archive_path: Path, member: str, dest: Path) -> Path:
    """Scan the archive sequentially for member and copy it to dest."""
    logger.debug(
        {
            "event": "extract_member",
            "archive": str(archive_path),
            "member": member,
            "dest": str(dest),
        }
    )

    try:
        with tarfile.open(archive_path, mode="r|gz") as archive:
            for info in archive:
                if info.name != member or not info.isfile():
                    continue

                _copy_member(archive, info, dest)

                logger.info(
                    {
                        "event": "member_extracted",
                        "archive": str(archive_path),
                        "member": member,
                        "size": info.size,
                        "extracted_to": str(dest),
                    }
                )
                return dest
    except (tarfile.TarError, EOFError, OSError) as e:
        raise ArchiveError(
            f"Failed to read {archive_path.name}: {e}",
            details={"archive": str(archive_path), "member": member},
        ) from e

    raise ArchiveMemberNotFoundError(str(archive_path), member)


def _copy_member(archive: tarfile.TarFile, info: tarfile.TarInfo, dest: Path) -> None:
    # Unlink first so a running executable at dest keeps its old inode
    dest.unlink(missing_ok=True)

    try:
        src = archive.extractfile(info)
        with src, open(dest, "wb") as f:
            copy_exact(src, f, info.size)
        dest.chmod(0o755)
    except Exception:
        dest.unlink(missing_ok=True)
        raise
