from fastapi import status
from .base import AppException

class NotAuthenticatedException(AppException):
    status_code = status.HTTP_401_UNAUTHORIZED
    code = "not_authenticated"
    detail = "Could not Validate Credentials. LOGIN Again!"

class ForbiddenException(AppException):
    status_code = status.HTTP_403_FORBIDDEN
    code = "forbidden"
    detail = "Only organization admins can manage rules."
