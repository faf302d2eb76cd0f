"""
Compliance Evaluator

Merges the extracted data of every panel into one record and asks the
model to classify every rule against it in a single call.

Merge rules, applied panel by panel in upload order:
- list + list      → concatenated
- rawText          → joined with a blank line
- anything else    → the later panel wins
"""

from collections import Counter
from typing import Any, Dict, List, Sequence
import json
import logging

from pydantic import ValidationError

from labelcheck.core.config import settings
from labelcheck.exceptions.check_exceptions import ModelResponseException
from .model_client import ModelClient, unwrap_list
from .types import EvaluationResult, RawVerdict, ResolvedRule, RuleVerdict, summarize

logger = logging.getLogger(__name__)


RAW_TEXT_KEY = "rawText"
RAW_TEXT_SEPARATOR = "\n\n"


EVALUATION_PROMPT = """You are a cannabis label compliance validator. Given the extracted label data and compliance rules, evaluate each rule.

EXTRACTED LABEL DATA:
{combined_data}

COMPLIANCE RULES TO CHECK:
{rules}

For each rule, determine:
- status: "pass" if fully compliant, "warning" if partially compliant or unclear, "fail" if non-compliant
- foundValue: what was actually found on the label (or null if not found)
- expectedValue: what the rule requires
- explanation: brief explanation of the finding

Return a JSON object with a "results" array in the SAME ORDER as the rules above:
{{
  "results": [
    {{
      "ruleId": "id of the rule (copy exactly from the rule)",
      "status": "pass" | "warning" | "fail",
      "foundValue": "string or null",
      "expectedValue": "string or null",
      "explanation": "brief explanation"
    }}
  ]
}}"""


def merge_extracted_data(panels: Sequence[Dict[str, Any]]) -> Dict[str, Any]:
    """
    Examples:
        merge_extracted_data([
            {"rawText": "FRONT", "warnings": ["a"], "netWeight": "1g"},
            {"rawText": "BACK", "warnings": ["b"], "netWeight": "3.5g"},
        ])
        → {"rawText": "FRONT\\n\\nBACK", "warnings": ["a", "b"], "netWeight": "3.5g"}
    """
    merged: Dict[str, Any] = {}

    for data in panels:
        for key, value in data.items():
            current = merged.get(key)
            if isinstance(value, list) and isinstance(current, list):
                merged[key] = current + value
            elif key == RAW_TEXT_KEY:
                parts = [part for part in (current, value) if part]
                merged[key] = RAW_TEXT_SEPARATOR.join(str(part) for part in parts)
            else:
                merged[key] = value

    return merged


def build_evaluation_prompt(combined_data: Dict[str, Any], rules: Sequence[ResolvedRule]) -> str:

    rule_lines = "\n".join(
        f"{i}. [{rule.id}] {rule.name}: {rule.validation_prompt}" for i, rule in enumerate(rules, start=1)
    )
    return EVALUATION_PROMPT.format(
        combined_data=json.dumps(combined_data, indent=2, default=str),
        rules=rule_lines
    )


class ComplianceEvaluator:

    def __init__(self, model_client: ModelClient):
        self.model_client = model_client

    def evaluate(self, extracted_panels: Sequence[Dict[str, Any]], rules: Sequence[ResolvedRule]) -> EvaluationResult:

        combined = merge_extracted_data(extracted_panels)
        prompt = build_evaluation_prompt(combined, rules)

        payload = self.model_client.generate_json(prompt, temperature=settings.EVALUATION_TEMPERATURE)

        try:
            raw_verdicts = [RawVerdict.model_validate(item) for item in unwrap_list(payload, "results")]
        except ValidationError as e:
            logger.error(f"Malformed compliance verdicts: {e}")
            raise ModelResponseException("Failed to parse the compliance response.")

        verdicts = self._attach_rules(raw_verdicts, rules)
        summary = summarize([v.status for v in verdicts])

        logger.info(
            f"Evaluated {len(rules)} rules: {summary.pass_count} pass, "
            f"{summary.warning_count} warning, {summary.fail_count} fail"
        )

        return EvaluationResult(results=verdicts, summary=summary)

    def _attach_rules(self, raw_verdicts: List[RawVerdict], rules: Sequence[ResolvedRule]) -> List[RuleVerdict]:
        """
        Pair every verdict with its rule, by id first and by position
        when the model mangled the id.
        """
        by_id = {rule.id: rule for rule in rules}
        verdicts = []

        for index, raw in enumerate(raw_verdicts):
            rule = by_id.get(raw.rule_id) if raw.rule_id else None
            if rule is None:
                if index >= len(rules):
                    raise ModelResponseException(f"Verdict {index + 1} references an unknown rule: {raw.rule_id}")
                rule = rules[index]
                logger.warning(f"Verdict {index + 1} has unknown rule id {raw.rule_id!r}, matched by position to {rule.id}")

            verdicts.append(RuleVerdict(
                rule=rule,
                status=raw.status,
                found_value=raw.found_value,
                expected_value=raw.expected_value,
                explanation=raw.explanation
            ))

        judged = Counter(v.rule.id for v in verdicts)
        repeated = sorted(rule_id for rule_id, count in judged.items() if count > 1)
        missing = [rule.id for rule in rules if rule.id not in judged]
        if repeated:
            logger.warning(f"Rules judged more than once: {', '.join(repeated)}")
        if missing:
            logger.warning(f"{len(missing)} of {len(rules)} rules got no verdict: {', '.join(missing)}")

        return verdicts
