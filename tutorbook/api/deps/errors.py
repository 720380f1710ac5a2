# tutorbook/api/deps/errors.py - Translate service errors into HTTP responses
from fastapi import HTTPException, status

from tutorbook.core.exceptions import RecordAlreadyPaidError, RecordNotFoundError, TutorbookError


def http_error(exc: TutorbookError) -> HTTPException:
    if isinstance(exc, RecordNotFoundError):
        return HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=str(exc))
    if isinstance(exc, RecordAlreadyPaidError):
        return HTTPException(status_code=status.HTTP_409_CONFLICT, detail=str(exc))
    return HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(exc))
