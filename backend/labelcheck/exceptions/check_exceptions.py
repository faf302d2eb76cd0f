"""
Compliance Check and Pipeline Exceptions

Upstream failures (model, rule-extraction service, object store) are
502s; anything that goes wrong inside the analyze pipeline ends with the
check deleted and one of these surfaced to the caller.
"""

from fastapi import status
from .base import AppException


# === CHECK EXCEPTIONS ===

class CheckNotFoundException(AppException):
    status_code = status.HTTP_404_NOT_FOUND
    code = "check_not_found"
    detail = "Check not found."


class AnalysisFailedException(AppException):
    status_code = status.HTTP_500_INTERNAL_SERVER_ERROR
    code = "analysis_failed"
    detail = "Failed to analyze panels. The check was removed, please start a new check and retry."


# === UPSTREAM EXCEPTIONS ===

class UpstreamException(AppException):
    status_code = status.HTTP_502_BAD_GATEWAY
    code = "upstream_error"
    detail = "An upstream service failed."


class ModelResponseException(UpstreamException):
    """Raised when the vision/LLM call fails or returns unusable content."""
    code = "model_error"
    detail = "The model returned an unusable response."


class RuleExtractionServiceException(UpstreamException):
    """Raised when the external rule-extraction service fails."""
    code = "rule_extraction_error"
    detail = "Failed to fetch rules from external API."


class StorageException(UpstreamException):
    code = "storage_error"
    detail = "Object store operation failed."


# === PERSISTENCE EXCEPTIONS ===

class PersistenceException(AppException):
    status_code = status.HTTP_500_INTERNAL_SERVER_ERROR
    code = "persistence_error"
    detail = "Failed to save data."
