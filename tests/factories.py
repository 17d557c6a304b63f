"""Builders that drive the API to set up test data."""
from datetime import datetime, timedelta, timezone

API = "/api/v1"

SUBMIT_PATHS = {
    "CASE_REVISION": "test-cases",
    "SCENARIO_REVISION": "test-scenarios",
    "LIST_REVISION": "test-scenario-lists",
}


def _created(response):
    assert response.status_code == 201, response.text
    return response.json()["data"]


def case_content(**overrides):
    content = {
        "steps": ["Open the cart", "Press checkout"],
        "expected_result": "The order confirmation page is shown",
        "tags": ["checkout"],
        "priority": "HIGH",
    }
    content.update(overrides)
    return content


def create_project(client, name="Webshop"):
    return _created(client.post(f"{API}/projects", json={"name": name}))


def create_case(client, project_id, title="Place an order", created_by="alice", content=None):
    payload = {
        "project_id": project_id,
        "title": title,
        "content": content or case_content(),
        "created_by": created_by,
    }
    return _created(client.post(f"{API}/test-cases", json=payload))


def approve(client, object_type, revision_id, approver_id="bob"):
    submitted = client.post(f"{API}/{SUBMIT_PATHS[object_type]}/revisions/{revision_id}/submit-for-review")
    assert submitted.status_code == 200, submitted.text
    return _created(
        client.post(
            f"{API}/approvals",
            json={
                "action": "approve",
                "object_type": object_type,
                "revision_id": revision_id,
                "approver_id": approver_id,
            },
        )
    )


def create_scenario(client, project_id, case_revision_ids, optional=(), title="Checkout flow"):
    items = [
        {"case_revision_id": revision_id, "order": order, "optional_flag": revision_id in optional}
        for order, revision_id in enumerate(case_revision_ids)
    ]
    payload = {"project_id": project_id, "title": title, "items": items, "created_by": "alice"}
    return _created(client.post(f"{API}/test-scenarios", json=payload))


def create_list(client, project_id, scenario_revision_ids, include_rule="FULL", title="Regression"):
    items = [
        {"scenario_revision_id": revision_id, "order": order, "include_rule": include_rule}
        for order, revision_id in enumerate(scenario_revision_ids)
    ]
    payload = {"project_id": project_id, "title": title, "items": items, "created_by": "alice"}
    return _created(client.post(f"{API}/test-scenario-lists", json=payload))


def create_release(client, project_id, name="2024.1"):
    return _created(client.post(f"{API}/releases", json={"project_id": project_id, "name": name}))


def set_baseline(client, release_id, list_revision_id):
    return _created(
        client.post(
            f"{API}/releases/{release_id}/baselines",
            json={"source_list_revision_id": list_revision_id, "created_by": "carol"},
        )
    )


def create_run(client, release_id, list_revision_id, assignee="dave"):
    group = _created(client.post(f"{API}/test-run-groups", json={"release_id": release_id, "name": "Sprint 12"}))
    return _created(
        client.post(
            f"{API}/test-runs",
            json={
                "run_group_id": group["id"],
                "assignee_user_id": assignee,
                "source_list_revision_id": list_revision_id,
            },
        )
    )


def record(client, run_id, item_id, status="PASS", **extra):
    payload = {"status": status, "executed_by": "dave"}
    payload.update(extra)
    return client.post(f"{API}/test-runs/{run_id}/items/{item_id}/results", json=payload)


def future(days=7):
    return (datetime.now(timezone.utc) + timedelta(days=days)).isoformat()


def build_release(client, case_titles=("Place an order", "Cancel an order"), approve_all=True):
    """Project with approved cases, one scenario, one list and a baselined release"""
    project = create_project(client)
    case_revisions = []
    for title in case_titles:
        case = create_case(client, project["id"], title=title)
        revision_id = case["latest_revision"]["id"]
        if approve_all:
            approve(client, "CASE_REVISION", revision_id)
        case_revisions.append(revision_id)

    scenario = create_scenario(client, project["id"], case_revisions)
    scenario_list = create_list(client, project["id"], [scenario["id"]])
    if approve_all:
        approve(client, "SCENARIO_REVISION", scenario["id"])
        approve(client, "LIST_REVISION", scenario_list["id"])

    release = create_release(client, project["id"])
    set_baseline(client, release["id"], scenario_list["id"])
    return {
        "project": project,
        "case_revisions": case_revisions,
        "scenario": scenario,
        "list": scenario_list,
        "release": release,
    }
