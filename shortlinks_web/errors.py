"""Mapping of service exceptions to HTTP errors."""

from fastapi import HTTPException, status

from shortlinks.exceptions import (
    DuplicateShortcodeError,
    ExpiredError,
    GenerationExhaustedError,
    NotFoundError,
    ShortLinkError,
    StorageError,
)


def http_error(error: ShortLinkError) -> HTTPException:
    """Translate a service exception into an HTTPException."""
    if isinstance(error, DuplicateShortcodeError):
        code = status.HTTP_409_CONFLICT
    elif isinstance(error, NotFoundError):
        code = status.HTTP_404_NOT_FOUND
    elif isinstance(error, ExpiredError):
        code = status.HTTP_410_GONE
    elif isinstance(error, (GenerationExhaustedError, StorageError)):
        code = status.HTTP_503_SERVICE_UNAVAILABLE
    else:
        code = status.HTTP_400_BAD_REQUEST
    return HTTPException(status_code=code, detail=str(error))
