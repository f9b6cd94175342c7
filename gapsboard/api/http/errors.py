from fastapi import HTTPException, status

from gapsboard.core.errors import (
    BoardError, ConflictError, InvalidArgumentError, NotFoundError, StoreUnavailableError
)


def to_http_exception(error: BoardError) -> HTTPException:
    """Преобразование доменной ошибки в HTTP ответ"""
    if isinstance(error, NotFoundError):
        code = status.HTTP_404_NOT_FOUND
    elif isinstance(error, InvalidArgumentError):
        code = status.HTTP_400_BAD_REQUEST
    elif isinstance(error, ConflictError):
        code = status.HTTP_409_CONFLICT
    elif isinstance(error, StoreUnavailableError):
        code = status.HTTP_503_SERVICE_UNAVAILABLE
    else:
        code = status.HTTP_500_INTERNAL_SERVER_ERROR
    return HTTPException(status_code=code, detail=str(error))
