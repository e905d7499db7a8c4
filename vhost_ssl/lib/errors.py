"""Exceptions raised while declaring or applying vhost resources."""


class VhostSSLError(Exception):
    """Base class for vhost_ssl errors."""


class UnsupportedOSFamilyError(VhostSSLError):
    """Host OS does not belong to a known family."""

    def __init__(self, os_id: str) -> None:
        super().__init__(f"unsupported OS family: {os_id!r}")
        self.os_id = os_id


class DuplicateResourceError(VhostSSLError):
    """A resource with the same ref was already declared."""


class UnknownResourceError(VhostSSLError):
    """An edge points at a resource that was never declared."""


class DependencyCycleError(VhostSSLError):
    """Require/notify edges form a cycle."""


class SourceError(VhostSSLError):
    """A file source could not be fetched."""


class ResourceError(VhostSSLError):
    """A resource failed to converge."""

    def __init__(self, message: str, returncode: int | None = None, stderr: str = "") -> None:
        super().__init__(message)
        self.returncode = returncode
        self.stderr = stderr
