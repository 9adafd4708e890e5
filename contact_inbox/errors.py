"""Exceptions raised along the submission path."""


class ContactError(Exception):
    """Base class for contact submission failures."""


class ValidationError(ContactError):
    """Raised when a submission is missing required fields or is malformed."""

    def __init__(self, message: str, missing=(), errors=()):
        super().__init__(message)
        self.missing = tuple(missing)
        self.errors = tuple(errors)


class PersistenceError(ContactError):
    """Raised when a submission could not be appended to the inbox file."""


class RelayError(ContactError):
    """Raised when the email relay could not deliver a submission."""
