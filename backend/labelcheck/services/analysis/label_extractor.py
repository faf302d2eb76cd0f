"""
Label Extraction Engine

One model call per panel. The prompt lists the rules' validation prompts
so the model extracts what those rules need; the answer must parse as
ExtractedLabelData or the panel (and so the check) fails.
"""

from typing import Any, Sequence
import logging

from pydantic import ValidationError

from labelcheck.core.config import settings
from labelcheck.exceptions.check_exceptions import ModelResponseException
from labelcheck.services.storage.object_store import StoredObject
from .model_client import ModelClient
from .types import ExtractedLabelData, ResolvedRule

logger = logging.getLogger(__name__)


EXTRACTION_PROMPT = """You are a cannabis label compliance expert. Analyze this {panel_type} panel image of a {product_type} product label.

Your task is to extract ALL data needed to evaluate the following compliance rules:

RULES TO SUPPORT:
{requirements}

Based on these rules, extract all relevant information from the label. For each piece of data you extract:
- Use a descriptive camelCase key name
- Include the exact text/value found on the label
- For boolean checks (like symbol presence), use true/false
- For lists (like ingredients or warnings), use arrays

ALWAYS include these base fields:
- rawText: all visible text concatenated from the label
- extractionConfidence: {{ "overall": 0.0-1.0, "fields": {{ "fieldName": 0.0-1.0 }} }}
- flaggedForReview: true/false if any data is unclear
- reviewReasons: array of reasons if flagged

Return a JSON object with all extracted data relevant to the rules above. Structure the response to make compliance checking straightforward.

Example structure (adapt based on actual rules):
{{
  "fieldName1": "extracted value or null",
  "fieldName2": ["array", "of", "values"],
  "fieldName3": true,
  "rawText": "all visible text...",
  "extractionConfidence": {{ "overall": 0.85, "fields": {{ "fieldName1": 0.9 }} }},
  "flaggedForReview": false,
  "reviewReasons": []
}}"""


def build_extraction_prompt(panel_type: str, product_type: str, rules: Sequence[ResolvedRule]) -> str:

    requirements = "\n".join(
        f"{i}. {rule.name}: {rule.validation_prompt}" for i, rule in enumerate(rules, start=1)
    )
    return EXTRACTION_PROMPT.format(panel_type=panel_type, product_type=product_type, requirements=requirements)


class LabelExtractor:

    def __init__(self, model_client: ModelClient):
        self.model_client = model_client

    def extract(
        self,
        image: StoredObject,
        panel_type: str,
        product_type: str,
        rules: Sequence[ResolvedRule],
        file_name: str = "panel"
    ) -> ExtractedLabelData:

        prompt = build_extraction_prompt(panel_type, product_type, rules)
        payload: Any = self.model_client.generate_json(
            prompt,
            temperature=settings.EXTRACTION_TEMPERATURE,
            attachment=image,
            attachment_name=file_name
        )

        if not isinstance(payload, dict):
            raise ModelResponseException("Extraction response is not a JSON object.")

        try:
            extracted = ExtractedLabelData.model_validate(payload)
        except ValidationError as e:
            logger.error(f"Extraction for {panel_type} panel does not match the label schema: {e}")
            raise ModelResponseException("Failed to parse extracted label data.")

        if extracted.flagged_for_review:
            logger.info(f"{panel_type} panel flagged for review: {extracted.review_reasons}")

        return extracted
