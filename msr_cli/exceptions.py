"""
Defines custom exceptions for the application to allow for more specific error handling.
"""


class MsrCliError(Exception):
    """Base exception for all application-specific errors."""


class CatalogError(MsrCliError):
    """Base class for failures talking to the remote catalog."""


class TransportError(CatalogError):
    """Raised when a catalog request fails at the network or HTTP level."""


class MalformedResponseError(CatalogError):
    """Raised when the catalog returns a body that cannot be parsed."""


class ApiError(CatalogError):
    """
    Raised when the catalog answers with a success HTTP status but a non-zero
    application status code in its response envelope.
    """

    def __init__(self, message: str, code: int | None = None):
        super().__init__(message)
        self.code = code


class DownloadError(MsrCliError):
    """Raised when an asset cannot be downloaded to disk."""


class TaggingError(MsrCliError):
    """Raised when metadata cannot be written to an audio file."""


class InvalidDataError(MsrCliError):
    """Raised when a catalog record lacks the fields required to process it."""


class ConfigurationError(MsrCliError):
    """Raised for issues related to configuration loading or validation."""
