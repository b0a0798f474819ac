"""Error taxonomy for the embedding bridge.

ConfigError: a required setting (API key, index name, ...) is missing.
InputError: the caller passed empty or invalid input.
ResponseShapeError: a provider answered with a body we cannot parse.
ProviderCallError: a remote provider could not be reached or returned non-2xx.
EntityNotFoundError: the entity source has no record for the requested id.
StoreError: the status record store could not be read or written.
"""


class EmbeddingBridgeError(Exception):
    """Base class for all errors raised by the bridge."""


class ConfigError(EmbeddingBridgeError, ValueError):
    """Required configuration is missing or invalid. Never retried."""


class InputError(EmbeddingBridgeError, ValueError):
    """Empty or invalid input supplied by the caller."""


class ResponseShapeError(EmbeddingBridgeError):
    """A provider response did not match the expected contract."""


class ProviderCallError(EmbeddingBridgeError):
    """A network call to a remote provider failed.

    Attributes:
        status_code: HTTP status code of the failed response, or None for
                     transport-level failures (timeouts, DNS, refused connections).
    """

    def __init__(self, message: str, status_code: int | None = None):
        super().__init__(message)
        self.status_code = status_code


class EntityNotFoundError(EmbeddingBridgeError):
    """The entity source returned no record for the requested id."""


class StoreError(EmbeddingBridgeError):
    """The status record store failed (connection lost, constraint violated, ...)."""
