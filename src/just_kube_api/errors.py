"""Error types raised by the provisioning pipeline."""

import logging
from typing import Any, Dict, Optional

from just_kube_api.logging import log_with_data


def log_error(
    error: Exception,
    context: Optional[Dict[str, Any]] = None,
    logger: Optional[logging.Logger] = None,
) -> None:
    """Log an error with context."""
    logger = logger or logging.getLogger(__name__)

    error_info = {
        "error_type": error.__class__.__name__,
        "error_message": str(error),
    }
    if context:
        error_info["context"] = context
    if isinstance(error, ProvisioningError):
        error_info["details"] = error.details

    log_with_data(logger, logging.ERROR, "Provisioning error occurred", error_info)


class ProvisioningError(Exception):
    """Base error class for asset provisioning."""

    def __init__(self, message: str, details: Optional[Dict[str, Any]] = None):
        super().__init__(message)
        self.details = details or {}


class TransportError(ProvisioningError):
    """Connection-level failure talking to a remote host."""

    def __init__(self, url: str, reason: str):
        super().__init__(
            f"GET '{url}' failed: {reason}",
            details={"url": url, "reason": reason},
        )
        self.url = url


class HTTPStatusError(ProvisioningError):
    """Remote host answered with a non-success status."""

    def __init__(self, url: str, status: int, reason: Optional[str] = None):
        super().__init__(
            f"GET '{url}' status not ok: {status} {reason or ''}".rstrip(),
            details={"url": url, "status": status},
        )
        self.url = url
        self.status = status


class ManifestFetchError(ProvisioningError):
    """Digest manifest could not be retrieved."""

    def __init__(self, url: str, reason: str):
        super().__init__(
            f"Failed to fetch digest manifest '{url}': {reason}",
            details={"url": url},
        )
        self.url = url


class ManifestFormatError(ProvisioningError):
    """Digest manifest lacks the entry or holds an undecodable digest."""

    def __init__(self, message: str, details: Optional[Dict[str, Any]] = None):
        super().__init__(message, details=details)


class IntegrityError(ProvisioningError):
    """Downloaded content does not match its declared digest."""

    def __init__(self, url: str, path: str, expected: str, actual: str):
        super().__init__(
            f"hash mismatch in file loaded from '{url}'",
            details={
                "url": url,
                "path": path,
                "expected": expected,
                "actual": actual,
            },
        )


class ArchiveError(ProvisioningError):
    """Archive could not be read or a member could not be copied."""


class ArchiveMemberNotFoundError(ArchiveError):
    """Archive ended without the requested member."""

    def __init__(self, archive: str, member: str):
        super().__init__(
            f"Member {member} not found in archive {archive}",
            details={"archive": archive, "member": member},
        )


class FilesystemError(ProvisioningError):
    """Local filesystem operation failed."""

    def __init__(self, message: str, path: str):
        super().__init__(message, details={"path": path})
