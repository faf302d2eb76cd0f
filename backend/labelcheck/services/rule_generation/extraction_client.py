"""
External Rule-Extraction Service Client

The service reads a state's regulatory text and returns candidate
labeling rules, each already tagged new / updated / unchanged against
the existing rules we send along.

    POST {RULES_EXTRACTION_API_URL}/api/v1/extract-rules
    {state, product_type, existing_rules: [{rule_name, rule_description, rule_text_citation}]}

Extraction runs an upstream model and can take minutes, so the read
timeout is long. Connection resets/refusals and connect or read
timeouts are retried with exponential backoff; HTTP errors and
success:false answers are not.
"""

from typing import Callable, Optional
import logging
import time

import requests
from pydantic import ValidationError

from labelcheck.core.config import settings
from labelcheck.core.retry import call_with_retry
from labelcheck.exceptions.check_exceptions import RuleExtractionServiceException
from labelcheck.schema.generation import RuleExtractionRequest, RuleExtractionResponse

logger = logging.getLogger(__name__)


def is_transient_error(error: BaseException) -> bool:
    # ConnectTimeout is a ConnectionError subclass; ReadTimeout covers header and body stalls;
    # a reset while the body is streaming surfaces as ChunkedEncodingError
    return isinstance(error, (
        requests.exceptions.ConnectionError,
        requests.exceptions.ReadTimeout,
        requests.exceptions.ChunkedEncodingError
    ))


class RuleExtractionClient:
    """
    Usage:
        client = RuleExtractionClient()
        response = client.extract_rules(RuleExtractionRequest(state="montana", product_type="edibles"))
        for rule in response.rules:
            print(rule.status, rule.rule_name)
    """

    ENDPOINT = "/api/v1/extract-rules"

    def __init__(
        self,
        base_url: Optional[str] = None,
        connect_timeout: Optional[float] = None,
        read_timeout: Optional[float] = None,
        max_attempts: Optional[int] = None,
        backoff_seconds: Optional[float] = None,
        session: Optional[requests.Session] = None,
        sleep: Callable[[float], None] = time.sleep
    ):
        self.base_url = (base_url or settings.RULES_EXTRACTION_API_URL).rstrip("/")
        self.timeout = (
            connect_timeout or settings.RULES_EXTRACTION_CONNECT_TIMEOUT_SECONDS,
            read_timeout or settings.RULES_EXTRACTION_READ_TIMEOUT_SECONDS,
        )
        self.max_attempts = max_attempts or settings.RULES_EXTRACTION_MAX_ATTEMPTS
        self.backoff_seconds = backoff_seconds if backoff_seconds is not None else settings.RULES_EXTRACTION_BACKOFF_SECONDS
        self.session = session or requests.Session()
        self.session.headers.update({
            "Content-Type": "application/json",
            "Accept": "application/json",
            # A fresh connection per call, stale pooled sockets were the usual reset cause
            "Connection": "close"
        })
        self._sleep = sleep

    def _post(self, payload: dict) -> requests.Response:
        return self.session.post(f"{self.base_url}{self.ENDPOINT}", json=payload, timeout=self.timeout)

    def extract_rules(self, request: RuleExtractionRequest) -> RuleExtractionResponse:
        """
        Ask the service for the current rules of a state/product type.

        Raises:
            RuleExtractionServiceException: transport failure after all
                attempts, non-2xx status, unparseable body or success:false
        """
        payload = request.model_dump()
        logger.info(
            f"Requesting rule extraction for state={request.state} product_type={request.product_type} "
            f"with {len(request.existing_rules)} existing rules"
        )

        started = time.monotonic()
        try:
            response = call_with_retry(
                lambda: self._post(payload),
                is_retryable=is_transient_error,
                max_attempts=self.max_attempts,
                base_delay=self.backoff_seconds,
                sleep=self._sleep,
                description="rule extraction request"
            )
        except requests.exceptions.RequestException as e:
            logger.error(f"Rule extraction request failed: {e}")
            raise RuleExtractionServiceException()

        logger.info(f"Rule extraction answered {response.status_code} after {time.monotonic() - started:.1f}s")

        if not response.ok:
            logger.error(f"Rule extraction service error {response.status_code}: {response.text[:500]}")
            raise RuleExtractionServiceException()

        try:
            data = RuleExtractionResponse.model_validate(response.json())
        except (ValueError, ValidationError) as e:
            logger.error(f"Unparseable rule extraction response: {e}")
            raise RuleExtractionServiceException("External API returned an unparseable response.")

        if not data.success:
            raise RuleExtractionServiceException(data.error or "External API returned an error.")

        return data
