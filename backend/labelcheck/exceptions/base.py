from typing import Optional
from fastapi import status


class AppException(Exception):
    status_code = status.HTTP_500_INTERNAL_SERVER_ERROR
    code = "internal_error"
    detail = "An unexpected error occurred."

    def __init__(self, detail: Optional[str] = None):
        if detail is not None:
            self.detail = detail
        super().__init__(self.detail)


class ValidationException(AppException):
    status_code = status.HTTP_400_BAD_REQUEST
    code = "validation_error"
    detail = "Invalid request."
