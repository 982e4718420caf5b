"""Upload validation performed before any parsing."""

from typing import Optional

from finport.domain import errors
from finport.domain.entities import FileFormat
from finport.logging_setup import get_logger

logger = get_logger(__name__)

MAX_FILE_SIZE = 5 * 1024 * 1024

SUPPORTED_EXTENSIONS: dict[str, FileFormat] = {
    ".xlsx": FileFormat.XLSX,
    ".xls": FileFormat.XLS,
    ".csv": FileFormat.CSV,
}

KNOWN_CONTENT_TYPES = frozenset(
    {
        "application/vnd.openxmlformats-officedocument.spreadsheetml.sheet",
        "application/vnd.ms-excel",
        "text/csv",
        "application/csv",
        "text/plain",
    }
)


def detect_format(file_name: str) -> Optional[FileFormat]:
    """Return the tabular format implied by the file name's extension."""
    lowered = file_name.strip().lower()
    for extension, file_format in SUPPORTED_EXTENSIONS.items():
        if lowered.endswith(extension):
            return file_format
    return None


def validate_upload(
    file_name: str, size: int, content_type: Optional[str] = None
) -> FileFormat:
    """Check an upload's size and extension.

    The declared content type is advisory: browsers and bank portals send
    unreliable values, so an unknown type is only logged.

    Args:
        file_name: Declared file name
        size: Payload size in bytes
        content_type: Declared MIME type, if any

    Returns:
        Detected file format

    Raises:
        FileTooLargeError: If size exceeds MAX_FILE_SIZE
        UnsupportedFormatError: If the extension is not a tabular one
    """
    if size > MAX_FILE_SIZE:
        raise errors.FileTooLargeError(errors.file_too_large(size, MAX_FILE_SIZE))

    file_format = detect_format(file_name)
    if file_format is None:
        raise errors.UnsupportedFormatError(
            errors.unsupported_format(file_name, tuple(SUPPORTED_EXTENSIONS))
        )

    if content_type and content_type.split(";")[0].strip().lower() not in KNOWN_CONTENT_TYPES:
        logger.debug(
            "Unexpected content type %r for %s; continuing by extension",
            content_type,
            file_name,
        )

    return file_format
