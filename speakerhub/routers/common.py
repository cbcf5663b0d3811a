"""Shared router helpers — result unwrapping and enum coercion."""
from fastapi import HTTPException, status

from speakerhub.errors import ErrorCode, TransitionResult

STATUS_BY_CODE = {
    ErrorCode.NOT_FOUND: status.HTTP_404_NOT_FOUND,
    ErrorCode.FORBIDDEN: status.HTTP_403_FORBIDDEN,
    ErrorCode.PRECONDITION_FAILED: status.HTTP_400_BAD_REQUEST,
    ErrorCode.DUPLICATE: status.HTTP_409_CONFLICT,
    ErrorCode.INVALID_INPUT: status.HTTP_422_UNPROCESSABLE_ENTITY,
    ErrorCode.BACKEND_UNAVAILABLE: status.HTTP_503_SERVICE_UNAVAILABLE,
}


def unwrap(result: TransitionResult):
    """Return the result's data, or raise the HTTPException matching its error code."""
    if result.ok:
        return result.data
    raise HTTPException(
        status_code=STATUS_BY_CODE[result.code],
        detail={"code": result.code.value, "message": result.reason},
    )


def parse_enum(enum_cls, value, field: str):
    """Coerce a request string into ``enum_cls`` or fail with 422."""
    try:
        return enum_cls(value)
    except ValueError:
        allowed = ", ".join(member.value for member in enum_cls)
        raise HTTPException(
            status_code=status.HTTP_422_UNPROCESSABLE_ENTITY,
            detail={"code": ErrorCode.INVALID_INPUT.value, "message": f"Invalid {field}: {value} (expected one of {allowed})"},
        )
