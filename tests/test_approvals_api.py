from tests.factories import (
    API,
    approve,
    create_case,
    create_list,
    create_project,
    create_scenario,
)


def _draft_revision(client):
    project = create_project(client)
    return create_case(client, project["id"])["latest_revision"]["id"]


def _submit(client, revision_id):
    return client.post(f"{API}/test-cases/revisions/{revision_id}/submit-for-review")


def _decide(client, revision_id, action, approver_id="bob", **extra):
    payload = {"action": action, "revision_id": revision_id, "approver_id": approver_id}
    payload.update(extra)
    return client.post(f"{API}/approvals", json=payload)


def test_submit_moves_draft_to_in_review(test_client):
    revision_id = _draft_revision(test_client)

    response = _submit(test_client, revision_id)
    assert response.status_code == 200
    data = response.json()["data"]
    assert data["status"] == "IN_REVIEW"
    assert data["object_type"] == "CASE_REVISION"


def test_submit_twice_is_rejected(test_client):
    revision_id = _draft_revision(test_client)
    _submit(test_client, revision_id)

    response = _submit(test_client, revision_id)
    assert response.status_code == 400
    assert response.json()["code"] == "RevisionImmutableError"


def test_submit_unknown_revision(test_client):
    response = _submit(test_client, "does-not-exist")
    assert response.status_code == 404
    assert response.json()["code"] == "RevisionNotFoundError"


def test_approve_sets_approved_by(test_client):
    revision_id = _draft_revision(test_client)
    _submit(test_client, revision_id)

    response = _decide(
        test_client,
        revision_id,
        "approve",
        comment="Looks good",
        evidence_links=[{"url": "https://ci.example.com/build/12", "title": "Build 12"}],
    )
    assert response.status_code == 201
    body = response.json()
    assert body["message"] == "Revision approved"
    assert body["data"]["revision"]["status"] == "APPROVED"
    assert body["data"]["revision"]["approved_by"] == "bob"
    assert body["data"]["approval"]["decision"] == "APPROVED"
    assert body["data"]["approval"]["evidence_links"][0]["title"] == "Build 12"


def test_approve_requires_in_review(test_client):
    revision_id = _draft_revision(test_client)

    response = _decide(test_client, revision_id, "approve")
    assert response.status_code == 400
    assert response.json()["code"] == "NotApprovableError"


def test_reject_requires_comment(test_client):
    revision_id = _draft_revision(test_client)
    _submit(test_client, revision_id)

    response = _decide(test_client, revision_id, "reject", comment="   ")
    assert response.status_code == 400
    assert response.json()["code"] == "ApprovalValidationError"


def test_reject_deprecates_revision(test_client):
    revision_id = _draft_revision(test_client)
    _submit(test_client, revision_id)

    response = _decide(test_client, revision_id, "reject", comment="Step 2 is ambiguous")
    assert response.status_code == 201
    assert response.json()["data"]["revision"]["status"] == "DEPRECATED"
    assert response.json()["data"]["approval"]["decision"] == "REJECTED"

    response = _decide(test_client, revision_id, "reject", approver_id="erin", comment="Again")
    assert response.status_code == 400
    assert response.json()["code"] == "NotRejectableError"


def test_list_approvals_for_revision(test_client):
    revision_id = _draft_revision(test_client)
    approve(test_client, "CASE_REVISION", revision_id)

    response = test_client.get(
        f"{API}/approvals", params={"object_type": "CASE_REVISION", "object_id": revision_id}
    )
    assert response.status_code == 200
    body = response.json()
    assert body["meta"]["count"] == 1
    assert body["data"][0]["approver_id"] == "bob"


def test_invalid_action_is_a_validation_error(test_client):
    revision_id = _draft_revision(test_client)
    response = _decide(test_client, revision_id, "escalate")
    assert response.status_code == 400
    assert response.json()["detail"] == "Validation failed"


def test_scenario_and_list_revisions_share_the_review_flow(test_client):
    project = create_project(test_client)
    case_revision = create_case(test_client, project["id"])["latest_revision"]["id"]
    scenario = create_scenario(test_client, project["id"], [case_revision])
    scenario_list = create_list(test_client, project["id"], [scenario["id"]])

    scenario_result = approve(test_client, "SCENARIO_REVISION", scenario["id"])
    list_result = approve(test_client, "LIST_REVISION", scenario_list["id"])

    assert scenario_result["revision"]["status"] == "APPROVED"
    assert list_result["revision"]["status"] == "APPROVED"
    assert list_result["revision"]["parent_id"] == scenario_list["list_stable_id"]


def test_scenario_requires_existing_case_revisions(test_client):
    project = create_project(test_client)
    response = test_client.post(
        f"{API}/test-scenarios",
        json={
            "project_id": project["id"],
            "title": "Broken",
            "items": [{"case_revision_id": "ghost", "order": 0}],
            "created_by": "alice",
        },
    )
    assert response.status_code == 404
    assert response.json()["code"] == "RevisionNotFoundError"


def test_get_scenario_and_list_revisions(test_client):
    project = create_project(test_client)
    first = create_case(test_client, project["id"], title="A")["latest_revision"]["id"]
    second = create_case(test_client, project["id"], title="B")["latest_revision"]["id"]
    scenario = create_scenario(test_client, project["id"], [first, second], optional=(second,))
    scenario_list = create_list(test_client, project["id"], [scenario["id"]], include_rule="REQUIRED_ONLY")

    fetched = test_client.get(f"{API}/test-scenarios/revisions/{scenario['id']}").json()["data"]
    assert [i["case_revision_id"] for i in fetched["items"]] == [first, second]
    assert fetched["items"][1]["optional_flag"] is True

    fetched = test_client.get(f"{API}/test-scenario-lists/revisions/{scenario_list['id']}").json()["data"]
    assert fetched["items"][0]["include_rule"] == "REQUIRED_ONLY"
    assert fetched["rev"] == 1

    assert test_client.get(f"{API}/test-scenarios/revisions/nope").status_code == 404
    assert test_client.get(f"{API}/test-scenario-lists/revisions/nope").status_code == 404
