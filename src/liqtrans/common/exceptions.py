"""Common exception types for liquid transport property models."""


class TransportError(RuntimeError):
    """Base class for errors raised while evaluating liquid transport properties."""


class ConfigurationError(TransportError):
    """Raised when the transport database holds malformed or unknown entries."""


class UsageError(TransportError):
    """Raised when a mixing rule is called without the arguments it needs."""


class ModelError(TransportError):
    """Raised when a mixing rule is queried in a way that has no physical meaning."""


class ValidationError(TransportError):
    """Raised when the mixture does not satisfy a model's species preconditions."""


class UnsupportedOperation(TransportError):
    """Raised for operations that are deliberately not provided (e.g. bundle copies)."""


class MissingPropertyData(TransportError):
    """Raised when per-species data required by a mixing rule is absent."""
