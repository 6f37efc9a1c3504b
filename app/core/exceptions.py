from fastapi import HTTPException, status

# 499 is the de-facto "client closed request" code; starlette has no constant for it.
HTTP_499_CLIENT_CLOSED_REQUEST = 499


class BaseAppException(HTTPException):
    def __init__(self, status_code: int, detail: str, headers: dict = None):
        super().__init__(status_code=status_code, detail=detail, headers=headers)

class ValidationError(BaseAppException):
    def __init__(self, detail: str = "Validation error"):
        super().__init__(status_code=status.HTTP_422_UNPROCESSABLE_ENTITY, detail=detail)

class NotFoundError(BaseAppException):
    def __init__(self, detail: str = "Resource not found"):
        super().__init__(status_code=status.HTTP_404_NOT_FOUND, detail=detail)

class AuthorizationError(BaseAppException):
    def __init__(self, detail: str = "Invalid authentication credentials"):
        super().__init__(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail=detail,
            headers={"WWW-Authenticate": "Bearer"},
        )

class StorageError(BaseAppException):
    """A query or transaction failed; the detail never carries driver text."""

    def __init__(self, step: str = None, detail: str = "Storage failure",
                 status_code: int = status.HTTP_500_INTERNAL_SERVER_ERROR):
        self.step = step
        super().__init__(status_code=status_code, detail=detail)

class QueryTimeoutError(StorageError):
    def __init__(self, step: str = None):
        super().__init__(
            step=step,
            detail="Storage timeout",
            status_code=status.HTTP_504_GATEWAY_TIMEOUT,
        )

class CancellationError(BaseAppException):
    def __init__(self, step: str = None):
        self.step = step
        super().__init__(status_code=HTTP_499_CLIENT_CLOSED_REQUEST, detail="Request cancelled")
