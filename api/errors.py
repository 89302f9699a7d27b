from fastapi import HTTPException

from domain.exceptions import (
    DomainError,
    NotFound,
    Forbidden,
    Conflict,
    InvalidOperation,
    ValidationError,
    AssetUploadFailed,
)

_STATUS = (
    (NotFound, 404),
    (Forbidden, 403),
    (Conflict, 409),
    (InvalidOperation, 400),
    (ValidationError, 400),
    (AssetUploadFailed, 502),
)


def to_http(e: DomainError) -> HTTPException:
    status_code = next((code for cls, code in _STATUS if isinstance(e, cls)), 500)
    return HTTPException(status_code=status_code, detail={"kind": e.kind, "message": str(e)})
