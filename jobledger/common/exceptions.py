from fastapi import HTTPException, status

from jobledger.common.enums import ErrorKind


class LedgerException(HTTPException):
    kind: ErrorKind = ErrorKind.INTEGRITY
    retryable: bool = False

    def __init__(
        self,
        detail: str,
        status_code: int = status.HTTP_500_INTERNAL_SERVER_ERROR,
        headers: dict[str, str] | None = None,
    ):
        super().__init__(status_code=status_code, detail=detail, headers=headers)


class NotFoundError(LedgerException):
    kind = ErrorKind.NOT_FOUND

    def __init__(self, resource: str, resource_id: str | int | None = None):
        detail = f"{resource} not found"
        if resource_id is not None:
            detail = f"{resource} '{resource_id}' not found"
        super().__init__(detail=detail, status_code=status.HTTP_404_NOT_FOUND)


class PermissionDeniedError(LedgerException):
    kind = ErrorKind.FORBIDDEN

    def __init__(self, detail: str = "You do not have permission to perform this action"):
        super().__init__(detail=detail, status_code=status.HTTP_403_FORBIDDEN)


class BadRequestError(LedgerException):
    kind = ErrorKind.INVALID_INPUT

    def __init__(self, detail: str):
        super().__init__(detail=detail, status_code=status.HTTP_400_BAD_REQUEST)


class ConflictError(LedgerException):
    kind = ErrorKind.CONFLICT

    def __init__(self, detail: str):
        super().__init__(detail=detail, status_code=status.HTTP_409_CONFLICT)


class AuthenticationError(LedgerException):
    kind = ErrorKind.UNAUTHENTICATED

    def __init__(self, detail: str = "Unknown caller profile"):
        super().__init__(detail=detail, status_code=status.HTTP_401_UNAUTHORIZED)


class IntegrityViolationError(LedgerException):
    """Stored data breaks an invariant; never a caller mistake."""

    kind = ErrorKind.INTEGRITY

    def __init__(self, detail: str):
        super().__init__(detail=f"Data integrity error: {detail}")


class StoreUnavailableError(LedgerException):
    kind = ErrorKind.UNAVAILABLE
    retryable = True

    def __init__(self, detail: str, retry_after_seconds: int = 1):
        super().__init__(
            detail=detail,
            status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
            headers={"Retry-After": str(retry_after_seconds)},
        )
