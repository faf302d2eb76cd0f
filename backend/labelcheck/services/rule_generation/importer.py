"""
Rule Generation Importer

Pulls the current rules for a rule set's state and product type from the
external extraction service and applies the service's verdict per rule:

    new        → insert (category inferred from keywords)
    updated    → overwrite the rule with the same source citation,
                 or insert as new when no citation matches
    unchanged  → count only

Each row commits on its own. A failure halfway through leaves the
earlier inserts/updates in place; only the aggregate outcome is reported.
"""

import logging
import re

from sqlalchemy.orm import Session

from labelcheck.crud import crud_rule
from labelcheck.exceptions.base import ValidationException
from labelcheck.models import RuleSet, GenerationStatus
from labelcheck.schema.generation import (
    ExistingRulePayload,
    RuleExtractionRequest,
    GenerateRulesResponse
)
from .categories import infer_category
from .extraction_client import RuleExtractionClient

logger = logging.getLogger(__name__)


def normalize_state(state_name: str) -> str:
    """
    Examples:
        "New Mexico" → "new-mexico"
        "Montana"    → "montana"
    """
    return re.sub(r"\s+", "-", state_name.strip().lower())


class RuleImporter:

    def __init__(self, client: RuleExtractionClient):
        self.client = client

    def import_rules(self, db: Session, rule_set: RuleSet) -> GenerateRulesResponse:

        if not rule_set.state_name or not rule_set.state_name.strip():
            raise ValidationException("Rule set has no state; set one before generating rules.")

        existing_rules = crud_rule.get_rules(db, rule_set.id)
        by_citation = {}
        for rule in existing_rules:
            if rule.source_citation:
                by_citation.setdefault(rule.source_citation, rule)

        request = RuleExtractionRequest(
            state=normalize_state(rule_set.state_name),
            product_type=str(rule_set.product_type),
            existing_rules=[
                ExistingRulePayload(
                    rule_name=rule.name,
                    rule_description=rule.validation_prompt,
                    rule_text_citation=rule.source_citation or ""
                )
                for rule in existing_rules
            ]
        )

        response = self.client.extract_rules(request)

        added = 0
        updated = 0
        skipped = 0

        for candidate in response.rules:
            if candidate.status == GenerationStatus.UNCHANGED:
                skipped += 1
                continue

            category = infer_category(candidate.rule_name, candidate.rule_description)

            if candidate.status == GenerationStatus.UPDATED:
                match = by_citation.get(candidate.rule_text_citation) if candidate.rule_text_citation else None
                if match is not None:
                    crud_rule.apply_imported_update(
                        db,
                        match,
                        name=candidate.rule_name,
                        description=candidate.rule_description,
                        category=category,
                        generation_status=GenerationStatus.UPDATED
                    )
                    updated += 1
                    continue

                logger.info(f"No rule cites '{candidate.rule_text_citation}', inserting '{candidate.rule_name}' as new")

            crud_rule.create_imported_rule(
                db,
                rule_set_id=rule_set.id,
                name=candidate.rule_name,
                description=candidate.rule_description,
                category=category,
                source_citation=candidate.rule_text_citation,
                generation_status=GenerationStatus.NEW
            )
            added += 1

        logger.info(
            f"Imported rules into rule set {rule_set.id}: added={added} updated={updated} "
            f"skipped={skipped} total={response.total_rules_extracted}"
        )

        return GenerateRulesResponse(
            success=True,
            added=added,
            updated=updated,
            skipped=skipped,
            total=response.total_rules_extracted,
            source_url=response.source_url
        )
