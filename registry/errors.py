"""
Error types shared by the stores, the session cache and the HTTP layer.

Every RegistryError carries the HTTP status it maps to. The application
registers a single exception handler (see registry.main) that renders
any of them as {"error": message}, so route code just raises.
"""


class RegistryError(Exception):
    """Base class for failures reported to the caller."""

    status_code = 500

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message


class ValidationError(RegistryError):
    """Input-validation failure (e.g. an empty name)."""

    status_code = 400


class AuthorizationError(RegistryError):
    """Bad credentials, or a missing / unknown / expired bearer token."""

    status_code = 401


class StorageError(RegistryError):
    """The backend was unreachable or rejected the operation."""

    status_code = 500


class ConfigError(Exception):
    """A required configuration value is missing or invalid."""
