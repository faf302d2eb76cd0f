"""
Vision/LLM model client

Every call is single-shot: one instruction (plus at most one inline
image or PDF), one JSON answer. No streaming and no multi-turn state,
so each prompt carries all the context it needs.
"""

from typing import Any, Dict, List, Optional
import base64
import json
import logging

from openai import OpenAI, OpenAIError

from labelcheck.core.config import settings
from labelcheck.exceptions.check_exceptions import ModelResponseException
from labelcheck.services.storage.object_store import StoredObject

logger = logging.getLogger(__name__)


def _attachment_part(attachment: StoredObject, file_name: str) -> Dict[str, Any]:
    encoded = base64.b64encode(attachment.data).decode("utf-8")
    data_url = f"data:{attachment.content_type};base64,{encoded}"

    if attachment.content_type == "application/pdf":
        return {"type": "file", "file": {"filename": file_name, "file_data": data_url}}

    return {"type": "image_url", "image_url": {"url": data_url, "detail": "high"}}


def unwrap_list(payload: Any, key: str) -> List[Any]:
    """
    JSON-object mode cannot return a bare array, so list answers are
    requested as {key: [...]}. A bare list is accepted as well.
    """
    if isinstance(payload, list):
        return payload
    if isinstance(payload, dict) and isinstance(payload.get(key), list):
        return payload[key]

    raise ModelResponseException(f"Expected a JSON list under '{key}' in the model response.")


class ModelClient:

    def __init__(
        self,
        api_key: Optional[str] = None,
        model: Optional[str] = None,
        timeout: Optional[float] = None,
        client: Optional[OpenAI] = None
    ):
        self.api_key = api_key if api_key is not None else settings.OPENAI_API_KEY
        self.model = model or settings.OPENAI_VISION_MODEL
        self.timeout = timeout or settings.OPENAI_TIMEOUT_SECONDS
        self._client = client

    @property
    def client(self) -> OpenAI:
        if self._client is None:
            if not self.api_key:
                raise ModelResponseException("OPENAI_API_KEY is not configured.")
            self._client = OpenAI(api_key=self.api_key, timeout=self.timeout)
        return self._client

    def generate_json(
        self,
        prompt: str,
        *,
        temperature: float,
        attachment: Optional[StoredObject] = None,
        attachment_name: str = "panel"
    ) -> Any:
        """
        Send one instruction (optionally with an image/PDF) and parse the
        answer as JSON.

        Raises:
            ModelResponseException: transport error, empty answer or
                content that is not JSON
        """
        content: List[Dict[str, Any]] = [{"type": "text", "text": prompt}]
        if attachment is not None:
            content.append(_attachment_part(attachment, attachment_name))

        try:
            response = self.client.chat.completions.create(
                model=self.model,
                messages=[{"role": "user", "content": content}],
                response_format={"type": "json_object"},
                temperature=temperature,
            )
        except OpenAIError as e:
            logger.error(f"Model call failed: {e}")
            raise ModelResponseException(f"Model API error: {e}")

        text = response.choices[0].message.content if response.choices else None
        if not text:
            raise ModelResponseException("No response from the model.")

        try:
            return json.loads(text)
        except json.JSONDecodeError:
            logger.error(f"Model returned non-JSON content: {text[:200]}")
            raise ModelResponseException("Failed to parse the model response as JSON.")
