"""
Rule Store Exceptions
"""

from fastapi import status
from .base import AppException


class RuleSetNotFoundException(AppException):
    status_code = status.HTTP_404_NOT_FOUND
    code = "rule_set_not_found"
    detail = "Rule set not found."


class RuleNotFoundException(AppException):
    status_code = status.HTTP_404_NOT_FOUND
    code = "rule_not_found"
    detail = "Rule not found."
