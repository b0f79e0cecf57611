# CCBundle Errors
# Exception hierarchy shared across the package


class BundleError(Exception):
    """Base class for all ccbundle errors."""


class RemoteError(BundleError):
    """Remote repository access failed."""

    def __init__(self, message: str, status_code: int | None = None):
        self.message = message
        self.status_code = status_code
        super().__init__(message)


class RemoteListingError(RemoteError):
    """Directory listing failed or returned a malformed payload."""


class RemoteFetchError(RemoteError):
    """Raw file download failed."""


class SettingsError(BundleError):
    """Settings document could not be read or parsed."""
