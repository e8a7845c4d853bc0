"""Exceptions raised while rendering forms and reading their signed fields."""


class ProtoformError(Exception):
    """Base class for all protoform errors."""


class InvalidArgumentForHashGenerationError(ProtoformError, ValueError):
    """The trusted-properties token cannot be built from the given field names."""


class InvalidHashError(ProtoformError):
    """A signed string carries a missing, malformed or wrong HMAC."""


class InvalidReferrerError(ProtoformError):
    """Submitted ``__referrer`` data is missing or has been tampered with."""


class FormContextError(ProtoformError, RuntimeError):
    """A field was used before being attached to a form."""
