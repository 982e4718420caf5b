"""Shared domain error messages and error types."""


class DomainError(ValueError):
    """Base class for domain-level errors.

    Subclasses provide semantic categories while preserving ValueError
    compatibility for existing error handling.
    """


class ValidationError(DomainError):
    """Invalid input or failed validation in domain logic."""


class FileTooLargeError(ValidationError):
    """Uploaded file exceeds the size ceiling."""


class UnsupportedFormatError(ValidationError):
    """Uploaded file does not have a supported tabular extension."""


class MappingError(ValidationError):
    """Column mapping is incomplete or names columns the file does not have."""


class ParseError(DomainError):
    """Uploaded file passed validation but could not be turned into a table."""


class UnreadableFileError(ParseError):
    """Payload cannot be decoded as the declared tabular format."""


class EmptyFileError(ParseError):
    """Payload has no header row or no data rows."""


class NotFoundError(DomainError):
    """Requested domain entity does not exist for the owner."""


class ConflictError(DomainError):
    """Domain conflict, such as uniqueness violations."""


class InvalidTransitionError(ConflictError):
    """Import log state change that the lifecycle does not allow."""


class PersistenceError(DomainError):
    """Storage failure while reading or writing import data."""


def file_too_large(size: int, limit: int) -> str:
    """Return message for an oversized upload."""
    return f"File is too large ({size} bytes). Maximum allowed is {limit // (1024 * 1024)} MB"


def unsupported_format(file_name: str, extensions: tuple[str, ...]) -> str:
    """Return message for an upload with an unknown extension."""
    return f"Unsupported file '{file_name}'. Use one of: {', '.join(extensions)}"


def unreadable_file(file_name: str, reason: object) -> str:
    """Return message for a payload that could not be decoded."""
    return f"Could not read '{file_name}': {reason}"


def empty_file(file_name: str) -> str:
    """Return message for a file without a header row and data rows."""
    return f"File '{file_name}' does not contain a header row and at least one data row"


def account_not_found(account_id: int) -> str:
    """Return message for missing account."""
    return f"Account {account_id} not found"


def category_not_found(category_id: int) -> str:
    """Return message for missing category by ID."""
    return f"Category {category_id} not found"


def import_log_not_found(log_id: int) -> str:
    """Return message for missing import log."""
    return f"Import log {log_id} not found"


def import_log_finished(log_id: int, status: str) -> str:
    """Return message when a terminal import log is updated again."""
    return f"Import log {log_id} is already {status} and cannot change"


def missing_mapping(fields: list[str]) -> str:
    """Return message for required columns with no mapping."""
    return f"Column mapping is missing required columns: {', '.join(fields)}"


def unknown_columns(columns: list[str]) -> str:
    """Return message for mapped columns absent from the file."""
    return f"Mapped columns not found in file: {', '.join(columns)}"
