"""Exceptions for the AV binding clients."""


class BindingError(Exception):
    """Base exception for binding errors."""


class ConfigurationError(BindingError):
    """Device configuration is missing or invalid."""


class TransportError(BindingError):
    """Exchange with the device failed."""


class TransportTimeoutError(TransportError):
    """Device did not answer in time."""


class MalformedResponse(BindingError):
    """Device response could not be parsed."""


class AuthComputationError(BindingError):
    """Authentication digest could not be computed."""


class CommandError(BindingError):
    """Command or command value is not valid for the device."""
