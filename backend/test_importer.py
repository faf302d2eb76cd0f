"""
Rule Generation Importer and category inference
"""

import pytest

from conftest import ScriptedExtractionClient
from labelcheck.crud import crud_rule
from labelcheck.exceptions.base import ValidationException
from labelcheck.exceptions.check_exceptions import RuleExtractionServiceException
from labelcheck.models import GenerationStatus, RuleCategory, RuleSeverity
from labelcheck.services.rule_generation import RuleImporter, infer_category, normalize_state


SOURCE_URL = "https://rules.mt.gov/cannabis"

CATALOG = [
    ("Government Warning", "Label must carry the statement 'Keep out of reach of children'.", "mt#305-1"),
    ("THC Percentage Display", "Potency per serving must be shown in milligrams.", "mt#305-2"),
    ("Licensee Name", "The producer licensee name and license number must appear.", "mt#305-3"),
]


def simulated_service(catalog):
    """Tags every catalog rule against the existing rules it receives, like the real service"""
    def answer(request):
        existing = {r.rule_text_citation: r for r in request.existing_rules}
        rules = []
        for name, description, citation in catalog:
            current = existing.get(citation)
            if current is None:
                status = "new"
            elif current.rule_name == name and current.rule_description == description:
                status = "unchanged"
            else:
                status = "updated"
            rules.append({
                "rule_name": name,
                "rule_description": description,
                "rule_text_citation": citation,
                "status": status,
                "change_reason": None,
            })
        return {
            "success": True,
            "state": request.state,
            "product_type": request.product_type,
            "source_url": SOURCE_URL,
            "total_rules_extracted": len(rules),
            "rules": rules,
        }
    return answer


@pytest.mark.parametrize("name, description, expected", [
    ("THC Percentage Display", "Potency must be shown as a percentage", RuleCategory.THC_CONTENT),
    ("Government Warning", "Must be intoxicating warning text", RuleCategory.REQUIRED_WARNINGS),
    ("Font Size", "Text must be legible, at least 6pt", RuleCategory.PLACEMENT_RULES),
    ("Lot Number", "Batch number on the back panel", RuleCategory.BATCH_AND_TESTING),
    ("Packaging Color", "No bright colors appealing to kids", RuleCategory.GENERAL),
])
def test_infer_category(name, description, expected):
    assert infer_category(name, description) == expected


def test_normalize_state():
    assert normalize_state("New  Mexico") == "new-mexico"
    assert normalize_state(" Montana ") == "montana"


def test_import_inserts_new_rules_with_inferred_categories(db, make_rule_set):
    rule_set = make_rule_set(state_name="New Mexico", state_abbreviation="NM")
    service = ScriptedExtractionClient(simulated_service(CATALOG))

    outcome = RuleImporter(service).import_rules(db, rule_set)

    assert (outcome.added, outcome.updated, outcome.skipped, outcome.total) == (3, 0, 0, 3)
    assert outcome.source_url == SOURCE_URL
    assert service.requests[0].state == "new-mexico"
    assert service.requests[0].product_type == "edibles"

    rules = {r.name: r for r in crud_rule.get_rules(db, rule_set.id)}
    thc = rules["THC Percentage Display"]
    assert thc.category == RuleCategory.THC_CONTENT
    assert thc.severity == RuleSeverity.ERROR
    assert thc.validation_prompt == thc.description
    assert thc.source_citation == "mt#305-2"
    assert thc.generation_status == GenerationStatus.NEW
    assert rules["Licensee Name"].category == RuleCategory.MANUFACTURER_INFO


def test_second_import_of_unchanged_rules_writes_nothing(db, make_rule_set):
    rule_set = make_rule_set()
    service = ScriptedExtractionClient(simulated_service(CATALOG), simulated_service(CATALOG))
    importer = RuleImporter(service)

    importer.import_rules(db, rule_set)
    before = {r.id: r.updated_at for r in crud_rule.get_rules(db, rule_set.id)}

    outcome = importer.import_rules(db, rule_set)

    assert (outcome.added, outcome.updated, outcome.skipped) == (0, 0, outcome.total)
    assert outcome.total == len(CATALOG)
    db.expire_all()
    assert {r.id: r.updated_at for r in crud_rule.get_rules(db, rule_set.id)} == before


def test_existing_rules_are_sent_with_their_validation_prompt(db, make_rule_set, make_rule):
    rule_set = make_rule_set()
    make_rule(rule_set, name="Net Weight", validation_prompt="Net weight must be in grams")
    service = ScriptedExtractionClient(simulated_service([]))

    RuleImporter(service).import_rules(db, rule_set)

    sent = service.requests[0].existing_rules
    assert [(r.rule_name, r.rule_description, r.rule_text_citation) for r in sent] == [
        ("Net Weight", "Net weight must be in grams", "")
    ]


def test_updated_rule_is_overwritten_by_citation(db, make_rule_set):
    rule_set = make_rule_set()
    RuleImporter(ScriptedExtractionClient(simulated_service(CATALOG))).import_rules(db, rule_set)
    original = next(r for r in crud_rule.get_rules(db, rule_set.id) if r.source_citation == "mt#305-1")

    revised = [("Government Warning", "Must state 'For use only by adults 21 and older'.", "mt#305-1")] + CATALOG[1:]
    outcome = RuleImporter(ScriptedExtractionClient(simulated_service(revised))).import_rules(db, rule_set)

    assert (outcome.added, outcome.updated, outcome.skipped) == (0, 1, 2)
    db.expire_all()
    rule = crud_rule.get_rule(db, rule_set.id, original.id)
    assert rule.description == "Must state 'For use only by adults 21 and older'."
    assert rule.validation_prompt == rule.description
    assert rule.generation_status == GenerationStatus.UPDATED
    assert len(crud_rule.get_rules(db, rule_set.id)) == 3


def test_updated_rule_without_matching_citation_is_inserted_as_new(db, make_rule_set):
    rule_set = make_rule_set()
    service = ScriptedExtractionClient({
        "success": True,
        "source_url": SOURCE_URL,
        "total_rules_extracted": 1,
        "rules": [{
            "rule_name": "Universal Symbol",
            "rule_description": "The universal symbol must appear on the front.",
            "rule_text_citation": "mt#moved",
            "status": "updated",
        }],
    })

    outcome = RuleImporter(service).import_rules(db, rule_set)

    assert (outcome.added, outcome.updated) == (1, 0)
    [rule] = crud_rule.get_rules(db, rule_set.id)
    assert rule.generation_status == GenerationStatus.NEW
    assert rule.category == RuleCategory.SYMBOLS_AND_ICONS


def test_rule_set_without_state_is_rejected(db, make_rule_set):
    rule_set = make_rule_set(state_name=None, state_abbreviation=None)
    service = ScriptedExtractionClient()

    with pytest.raises(ValidationException):
        RuleImporter(service).import_rules(db, rule_set)

    assert service.requests == []


def test_service_failure_leaves_rules_untouched(db, make_rule_set, make_rule):
    rule_set = make_rule_set()
    make_rule(rule_set)
    service = ScriptedExtractionClient(RuleExtractionServiceException())

    with pytest.raises(RuleExtractionServiceException):
        RuleImporter(service).import_rules(db, rule_set)

    assert len(crud_rule.get_rules(db, rule_set.id)) == 1
