from fastapi import HTTPException, status
from fruteria.errors import (
    InsufficientStock,
    InventoryError,
    NotFound,
    StoreUnavailable,
    ValidationError,
)

STATUS_BY_ERROR = {
    NotFound: status.HTTP_404_NOT_FOUND,
    ValidationError: status.HTTP_422_UNPROCESSABLE_ENTITY,
    InsufficientStock: status.HTTP_409_CONFLICT,
    StoreUnavailable: status.HTTP_503_SERVICE_UNAVAILABLE,
}


def to_http_exception(error: InventoryError) -> HTTPException:
    """Traduce un error del dominio a la respuesta HTTP correspondiente."""
    for error_type, status_code in STATUS_BY_ERROR.items():
        if isinstance(error, error_type):
            return HTTPException(status_code=status_code, detail=error.message)
    return HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=error.message)
