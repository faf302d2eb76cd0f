"""
Rule Resolver

Decides which rules a check is evaluated against:
- the rule set's active rules, when it has any ("persisted")
- otherwise 8-15 rules synthesized by the model for the rule set's
  state and product type ("generated"). These get fresh ids and are
  never written to the Rule Store.
"""

from typing import Any, List, Optional
import logging

from pydantic import BaseModel, ValidationError, field_validator
from sqlalchemy.orm import Session

from labelcheck.core.config import settings
from labelcheck.crud import crud_rule
from labelcheck.exceptions.check_exceptions import ModelResponseException
from labelcheck.models import ComplianceCheck, RuleCategory, RuleSet, RuleSeverity
from labelcheck.services.rule_generation.categories import normalize_category
from .model_client import ModelClient, unwrap_list
from .types import ResolvedRule, RuleResolution

logger = logging.getLogger(__name__)


SYNTHESIS_PROMPT = """You are an expert in cannabis labeling compliance regulations across US states.

Generate a comprehensive list of labeling compliance rules for a {product_type} cannabis product in {state_context}.

For each rule, provide:
- name: A short, descriptive name for the rule
- description: A detailed description of what the rule requires
- category: One of: {categories}
- severity: "error" for mandatory requirements, "warning" for best practices, "info" for recommendations
- validation_prompt: A detailed prompt that describes exactly what to check on the label to verify compliance

Focus on the most important and commonly required labeling elements for {product_type} products, including but not limited to:
- THC/CBD content display requirements
- Required warning statements and their exact wording
- Universal cannabis symbol requirements
- Child-resistant packaging indicators
- Net weight/quantity format
- Manufacturer/producer information
- Batch/lot number requirements
- Testing information display
- Expiration/packaging dates
- License number display
- Allergen warnings (for edibles)
- Serving size information (for edibles)

Generate between 8-15 rules that are most relevant to {product_type} products in {state_context}.

Return a JSON object with a "rules" array:
{{
  "rules": [
    {{
      "name": "Rule Name",
      "description": "Detailed description",
      "category": "Category Name",
      "severity": "error" | "warning" | "info",
      "validation_prompt": "Check that the label contains..."
    }}
  ]
}}"""


class SynthesizedRule(BaseModel):

    name: str
    description: Optional[str] = None
    category: Optional[str] = None
    severity: RuleSeverity = RuleSeverity.ERROR
    validation_prompt: str

    @field_validator("severity", mode="before")
    @classmethod
    def normalize_severity(cls, v: Any) -> Any:
        # Severity is display-only for generated rules; anything unrecognized reads as an error
        if v is None:
            return RuleSeverity.ERROR
        value = str(v).strip().lower()
        return value if value in {s.value for s in RuleSeverity} else RuleSeverity.ERROR


def state_context(state_name: Optional[str], state_abbreviation: Optional[str]) -> str:
    if not state_name:
        return "general US cannabis regulations"
    if state_abbreviation:
        return f"{state_name} ({state_abbreviation})"
    return state_name


class RuleResolver:

    def __init__(self, model_client: ModelClient):
        self.model_client = model_client

    def resolve(self, db: Session, check: ComplianceCheck) -> RuleResolution:

        persisted = crud_rule.get_active_rules(db, check.rule_set_id)
        if persisted:
            logger.info(f"Check {check.id}: using {len(persisted)} persisted rules")
            return RuleResolution(
                rules=[ResolvedRule.from_model(rule) for rule in persisted],
                provenance="persisted"
            )

        rule_set = check.rule_set
        logger.info(
            f"Check {check.id}: rule set {rule_set.id} has no active rules, generating defaults "
            f"for {rule_set.state_name or 'US'} {rule_set.product_type}"
        )
        generated = self.synthesize(rule_set)
        logger.info(f"Check {check.id}: generated {len(generated)} default rules")

        return RuleResolution(rules=generated, provenance="generated")

    def synthesize(self, rule_set: RuleSet) -> List[ResolvedRule]:

        prompt = SYNTHESIS_PROMPT.format(
            product_type=rule_set.product_type,
            state_context=state_context(rule_set.state_name, rule_set.state_abbreviation),
            categories=", ".join(f'"{c.value}"' for c in RuleCategory)
        )

        payload: Any = self.model_client.generate_json(prompt, temperature=settings.RULE_SYNTHESIS_TEMPERATURE)

        try:
            raw_rules = [SynthesizedRule.model_validate(item) for item in unwrap_list(payload, "rules")]
        except ValidationError as e:
            raise ModelResponseException(f"Failed to parse generated rules: {e.error_count()} invalid fields.")

        if not raw_rules:
            raise ModelResponseException("The model generated no rules.")

        return [
            ResolvedRule.generated(
                name=raw.name,
                description=raw.description,
                category=normalize_category(raw.category, raw.name, raw.description).value,
                severity=raw.severity,
                validation_prompt=raw.validation_prompt
            )
            for raw in raw_rules
        ]
