"""
HTTP surface: auth, org scoping, error contract and the upload → analyze flow
"""

from datetime import datetime, timedelta

from conftest import extraction, verdicts
from labelcheck.exceptions.check_exceptions import ModelResponseException
from labelcheck.models import ComplianceCheck

API = "/api/v1"

RULE_SET = {"name": "Montana Flower", "state_name": "Montana", "state_abbreviation": "MT", "product_type": "flower"}
RULE = {"name": "Universal Symbol", "category": "Symbols & Icons", "validation_prompt": "Is the symbol on the front?"}


def create_rule_set(client, headers, **overrides):
    response = client.post(f"{API}/rule-sets", json={**RULE_SET, **overrides}, headers=headers)
    assert response.status_code == 201, response.text
    return response.json()


def create_check(client, headers, rule_set_id):
    response = client.post(f"{API}/checks", json={"rule_set_id": rule_set_id, "product_name": "OG Kush"}, headers=headers)
    assert response.status_code == 201, response.text
    return response.json()


def upload(client, headers, check_id, panel_type="front", name="front.png", data=b"\x89PNG front"):
    response = client.post(
        f"{API}/uploads",
        files={"file": (name, data, "image/png")},
        data={"panel_type": panel_type, "check_id": check_id},
        headers=headers
    )
    assert response.status_code == 201, response.text
    return response.json()


# Auth and error contract

def test_missing_or_bad_token_is_401(client):
    missing = client.get(f"{API}/rule-sets")
    bad = client.get(f"{API}/rule-sets", headers={"Authorization": "Bearer not-a-jwt"})

    for response in (missing, bad):
        assert response.status_code == 401
        assert response.json()["code"] == "not_authenticated"


def test_request_validation_is_400(client, admin, auth_headers):
    response = client.post(f"{API}/rule-sets", json={"name": "No product type"}, headers=auth_headers(admin))

    assert response.status_code == 400
    assert response.json()["code"] == "validation_error"


def test_states_reference_list(client, member, auth_headers):
    response = client.get(f"{API}/states", headers=auth_headers(member))

    assert response.status_code == 200
    states = {s["abbreviation"]: s for s in response.json()}
    assert states["NM"] == {"id": "new-mexico", "name": "New Mexico", "abbreviation": "NM"}


# Rule store

def test_members_read_and_admins_write_rule_sets(client, admin, member, auth_headers):
    forbidden = client.post(f"{API}/rule-sets", json=RULE_SET, headers=auth_headers(member))
    assert forbidden.status_code == 403
    assert forbidden.json()["code"] == "forbidden"

    rule_set = create_rule_set(client, auth_headers(admin))
    assert rule_set["rules_count"] == 0
    assert rule_set["organization_id"] == admin.organization_id

    listed = client.get(f"{API}/rule-sets", headers=auth_headers(member)).json()
    assert [r["id"] for r in listed] == [rule_set["id"]]

    rule = client.post(f"{API}/rule-sets/{rule_set['id']}/rules", json=RULE, headers=auth_headers(member))
    assert rule.status_code == 403


def test_rule_sets_of_other_organizations_are_invisible(client, admin, outsider, auth_headers):
    rule_set = create_rule_set(client, auth_headers(admin))

    response = client.get(f"{API}/rule-sets/{rule_set['id']}", headers=auth_headers(outsider))

    assert response.status_code == 404
    assert response.json()["code"] == "rule_set_not_found"
    assert client.get(f"{API}/rule-sets", headers=auth_headers(outsider)).json() == []


def test_rule_crud(client, admin, auth_headers):
    headers = auth_headers(admin)
    rule_set = create_rule_set(client, headers)
    base = f"{API}/rule-sets/{rule_set['id']}/rules"

    created = client.post(base, json=RULE, headers=headers)
    assert created.status_code == 201
    rule = created.json()
    assert rule["description"] == "Universal Symbol"
    assert rule["severity"] == "error"

    updated = client.put(f"{base}/{rule['id']}", json={"severity": "warning"}, headers=headers).json()
    assert updated["severity"] == "warning"
    assert updated["validation_prompt"] == RULE["validation_prompt"]

    assert client.get(f"{API}/rule-sets/{rule_set['id']}", headers=headers).json()["rules_count"] == 1

    assert client.delete(f"{base}/{rule['id']}", headers=headers).status_code == 204
    assert client.get(base, headers=headers).json() == []
    missing = client.put(f"{base}/{rule['id']}", json={"name": "Gone"}, headers=headers)
    assert missing.status_code == 404
    assert missing.json()["code"] == "rule_not_found"


def test_rule_set_update_and_delete(client, admin, auth_headers):
    headers = auth_headers(admin)
    rule_set = create_rule_set(client, headers)

    updated = client.put(f"{API}/rule-sets/{rule_set['id']}", json={"description": "2024"}, headers=headers).json()
    assert updated["description"] == "2024"
    assert updated["name"] == RULE_SET["name"]

    assert client.delete(f"{API}/rule-sets/{rule_set['id']}", headers=headers).status_code == 204
    assert client.get(f"{API}/rule-sets/{rule_set['id']}", headers=headers).status_code == 404


def test_generate_rules(client, admin, extraction_client, auth_headers):
    headers = auth_headers(admin)
    rule_set = create_rule_set(client, headers, state_name="New York", state_abbreviation="NY")
    extraction_client.responses.append({
        "success": True,
        "state": "new-york",
        "product_type": "flower",
        "source_url": "https://cannabis.ny.gov/regulations",
        "total_rules_extracted": 2,
        "rules": [
            {"rule_name": "THC Potency", "rule_description": "Show THC per package", "rule_text_citation": "ny#1", "status": "new"},
            {"rule_name": "Symbol", "rule_description": "Universal symbol", "rule_text_citation": "ny#2", "status": "unchanged"},
        ],
    })

    response = client.post(f"{API}/rule-sets/{rule_set['id']}/generate", headers=headers)

    assert response.status_code == 200
    assert response.json() == {
        "success": True, "added": 1, "updated": 0, "skipped": 1, "total": 2,
        "source_url": "https://cannabis.ny.gov/regulations",
    }
    assert extraction_client.requests[0].state == "new-york"
    [rule] = client.get(f"{API}/rule-sets/{rule_set['id']}/rules", headers=headers).json()
    assert (rule["category"], rule["generation_status"], rule["source_citation"]) == ("THC Content", "new", "ny#1")


# Checks, uploads, analysis

def test_check_requires_a_rule_set_of_the_callers_organization(client, admin, outsider, auth_headers):
    rule_set = create_rule_set(client, auth_headers(admin))

    response = client.post(f"{API}/checks", json={"rule_set_id": rule_set["id"]}, headers=auth_headers(outsider))

    assert response.status_code == 404


def test_three_upload_paths_register_panels_in_order(client, admin, auth_headers):
    headers = auth_headers(admin)
    check = create_check(client, headers, create_rule_set(client, headers)["id"])

    upload(client, headers, check["id"], "front", "front label.png")

    streamed = client.post(
        f"{API}/uploads/stream",
        content=b"%PDF-1.7 back",
        headers={**headers, "x-file-name": "back.pdf", "x-panel-type": "back", "x-check-id": check["id"]}
    )
    assert streamed.status_code == 201, streamed.text

    signed = client.post(
        f"{API}/uploads/sas-url",
        json={"file_name": "side.webp", "panel_type": "left_side", "check_id": check["id"]},
        headers=headers
    ).json()
    assert signed["content_type"] == "image/webp"
    assert signed["blob_name"].startswith(f"{admin.id}/")
    assert signed["blob_name"].endswith("_side.webp")

    confirmed = client.post(
        f"{API}/uploads/confirm",
        json={"blob_url": signed["blob_url"], "panel_type": "left_side", "check_id": check["id"], "file_name": "side.webp"},
        headers=headers
    )
    assert confirmed.status_code == 201

    detail = client.get(f"{API}/checks/{check['id']}", headers=headers).json()
    assert [p["panel_type"] for p in detail["panels"]] == ["front", "back", "left_side"]
    assert "front_label.png" in detail["panels"][0]["blob_url"]
    assert detail["rule_set"]["name"] == RULE_SET["name"]


def test_stream_upload_requires_metadata_headers(client, admin, auth_headers):
    headers = auth_headers(admin)
    check = create_check(client, headers, create_rule_set(client, headers)["id"])

    response = client.post(
        f"{API}/uploads/stream",
        content=b"bytes",
        headers={**headers, "x-panel-type": "front", "x-check-id": check["id"]}
    )

    assert response.status_code == 400
    assert "x-file-name" in response.json()["detail"]


def test_upload_to_someone_elses_check_is_404(client, admin, member, auth_headers):
    check = create_check(client, auth_headers(admin), create_rule_set(client, auth_headers(admin))["id"])

    response = client.post(
        f"{API}/uploads",
        files={"file": ("front.png", b"x", "image/png")},
        data={"panel_type": "front", "check_id": check["id"]},
        headers=auth_headers(member)
    )

    assert response.status_code == 404
    assert response.json()["code"] == "check_not_found"


def test_analyze_then_read_results(client, admin, model_client, auth_headers):
    headers = auth_headers(admin)
    rule_set = create_rule_set(client, headers)
    rule = client.post(f"{API}/rule-sets/{rule_set['id']}/rules", json=RULE, headers=headers).json()
    check = create_check(client, headers, rule_set["id"])
    upload(client, headers, check["id"])
    model_client.queue(extraction("FRONT", hasSymbol=True), verdicts("fail", rule_ids=[rule["id"]]))

    response = client.post(f"{API}/analyze", json={"check_id": check["id"]}, headers=headers)

    assert response.status_code == 200, response.text
    body = response.json()
    assert body["summary"] == {"overall_status": "fail", "pass_count": 0, "warning_count": 0, "fail_count": 1}
    assert body["is_generated"] is False

    detail = client.get(f"{API}/checks/{check['id']}", headers=headers).json()
    assert detail["overall_status"] == "fail"
    assert detail["completed_at"] is not None
    [result] = detail["results"]
    assert (result["rule_id"], result["rule_name"], result["rule_category"], result["rule_severity"]) == (
        rule["id"], "Universal Symbol", "Symbols & Icons", "error"
    )
    assert detail["panels"][0]["extracted_data"]["hasSymbol"] is True

    listed = client.get(f"{API}/checks", headers=headers).json()
    assert [c["id"] for c in listed] == [check["id"]]


def test_generated_results_expose_the_same_rule_view(client, admin, model_client, auth_headers):
    headers = auth_headers(admin)
    check = create_check(client, headers, create_rule_set(client, headers)["id"])
    upload(client, headers, check["id"])
    model_client.queue(
        {"rules": [{"name": "Child Resistant", "description": "CR packaging statement", "category": "General",
                    "severity": "error", "validation_prompt": "Is child resistant packaging indicated?"}]},
        extraction("FRONT"),
        verdicts("pass")
    )

    assert client.post(f"{API}/analyze", json={"check_id": check["id"]}, headers=headers).json()["is_generated"]

    [result] = client.get(f"{API}/checks/{check['id']}", headers=headers).json()["results"]
    assert result["rule_id"] is None
    assert result["is_generated_rule"] is True
    assert (result["rule_name"], result["rule_description"], result["rule_category"]) == (
        "Child Resistant", "CR packaging statement", "General"
    )


def test_failed_analysis_removes_the_check(client, admin, model_client, auth_headers):
    headers = auth_headers(admin)
    rule_set = create_rule_set(client, headers)
    client.post(f"{API}/rule-sets/{rule_set['id']}/rules", json=RULE, headers=headers)
    check = create_check(client, headers, rule_set["id"])
    upload(client, headers, check["id"])
    model_client.queue(ModelResponseException("Model API error: overloaded"))

    response = client.post(f"{API}/analyze", json={"check_id": check["id"]}, headers=headers)

    assert response.status_code == 502
    assert response.json()["code"] == "model_error"
    assert "retry" in response.json()["detail"]
    assert client.get(f"{API}/checks/{check['id']}", headers=headers).status_code == 404


def test_analyze_without_panels_is_400_and_keeps_the_check(client, admin, auth_headers):
    headers = auth_headers(admin)
    check = create_check(client, headers, create_rule_set(client, headers)["id"])

    response = client.post(f"{API}/analyze", json={"check_id": check["id"]}, headers=headers)

    assert response.status_code == 400
    assert client.get(f"{API}/checks/{check['id']}", headers=headers).status_code == 200


def test_delete_check_is_reentrant(client, admin, auth_headers):
    headers = auth_headers(admin)
    check = create_check(client, headers, create_rule_set(client, headers)["id"])

    assert client.delete(f"{API}/checks/{check['id']}", headers=headers).status_code == 204
    assert client.delete(f"{API}/checks/{check['id']}", headers=headers).status_code == 204
    assert client.get(f"{API}/checks/{check['id']}", headers=headers).status_code == 404


def test_cleanup_reaps_only_stale_incomplete_checks(client, db, admin, auth_headers):
    headers = auth_headers(admin)
    rule_set_id = create_rule_set(client, headers)["id"]
    stale = create_check(client, headers, rule_set_id)
    fresh = create_check(client, headers, rule_set_id)

    db.query(ComplianceCheck).filter(ComplianceCheck.id == stale["id"]).update(
        {"created_at": datetime.now() - timedelta(hours=3)}
    )
    db.commit()

    response = client.post(f"{API}/checks/cleanup", headers=headers)

    assert response.json() == {"deleted": 1}
    assert client.get(f"{API}/checks/{stale['id']}", headers=headers).status_code == 404
    assert client.get(f"{API}/checks/{fresh['id']}", headers=headers).status_code == 200
