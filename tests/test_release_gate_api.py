from app.config.settings import settings
from tests.factories import (
    API,
    build_release,
    create_project,
    create_release,
    create_run,
    future,
    record,
)


def _evaluate(client, release_id, **payload):
    return client.post(f"{API}/releases/{release_id}/gate-evaluation", json=payload)


def _violation(evaluation, condition_type):
    matches = [v for v in evaluation["violations"] if v["condition_type"] == condition_type]
    return matches[0] if matches else None


def _run_all(client, built, status="PASS", **extra):
    created = create_run(client, built["release"]["id"], built["list"]["id"])
    for item in created["items"]:
        record(client, created["run"]["id"], item["id"], status=status, **extra)
    return created


def test_release_lifecycle_basics(test_client):
    project = create_project(test_client)
    release = create_release(test_client, project["id"], name="1.0")
    assert release["status"] == "PLANNING"

    listed = test_client.get(f"{API}/releases", params={"project_id": project["id"]}).json()
    assert listed["meta"]["count"] == 1

    response = test_client.patch(f"{API}/releases/{release['id']}/status", json={"status": "GATE_CHECK"})
    assert response.status_code == 400
    assert response.json()["code"] == "InvalidReleaseStatusError"

    response = test_client.patch(f"{API}/releases/{release['id']}/status", json={"status": "EXECUTING"})
    assert response.status_code == 200
    assert response.json()["data"]["status"] == "EXECUTING"


def test_release_requires_project(test_client):
    response = test_client.post(f"{API}/releases", json={"project_id": "ghost", "name": "1.0"})
    assert response.status_code == 404
    assert response.json()["code"] == "ProjectNotFoundError"


def test_baseline_moves_release_to_executing(test_client):
    built = build_release(test_client)
    release_id = built["release"]["id"]

    summary = test_client.get(f"{API}/releases/{release_id}").json()["data"]
    assert summary["release"]["status"] == "EXECUTING"
    assert [b["source_list_revision_id"] for b in summary["baselines"]] == [built["list"]["id"]]

    response = test_client.post(
        f"{API}/releases/{release_id}/baselines",
        json={"source_list_revision_id": built["list"]["id"], "created_by": "carol"},
    )
    assert response.status_code == 400
    assert response.json()["code"] == "DuplicateBaselineError"

    baselines = test_client.get(f"{API}/releases/{release_id}/baselines").json()
    assert baselines["meta"]["count"] == 1


def test_baseline_requires_existing_list_revision(test_client):
    project = create_project(test_client)
    release = create_release(test_client, project["id"])
    response = test_client.post(
        f"{API}/releases/{release['id']}/baselines",
        json={"source_list_revision_id": "nope", "created_by": "carol"},
    )
    assert response.status_code == 404
    assert response.json()["code"] == "ListRevisionNotFoundError"


def test_gate_cannot_be_evaluated_while_planning(test_client):
    project = create_project(test_client)
    release = create_release(test_client, project["id"])

    response = _evaluate(test_client, release["id"])
    assert response.status_code == 400
    body = response.json()
    assert body["code"] == "InvalidReleaseStatusError"
    assert body["errors"]["expected_status"] == "EXECUTING or GATE_CHECK"


def test_unexecuted_tests_block_the_gate(test_client):
    built = build_release(test_client)
    create_run(test_client, built["release"]["id"], built["list"]["id"])

    response = _evaluate(test_client, built["release"]["id"])
    assert response.status_code == 200
    evaluation = response.json()["data"]
    assert evaluation["passed"] is False

    violation = _violation(evaluation, "ALL_TESTS_PASS")
    assert violation["severity"] == "CRITICAL"
    assert len(violation["details"]["affected_ids"]) == 2
    assert violation["has_waiver"] is False

    release = test_client.get(f"{API}/releases/{built['release']['id']}").json()["data"]["release"]
    assert release["status"] == "GATE_CHECK"


def test_gate_passes_and_release_is_approved(test_client):
    built = build_release(test_client)
    _run_all(test_client, built)
    release_id = built["release"]["id"]

    evaluation = _evaluate(test_client, release_id).json()["data"]
    assert evaluation["passed"] is True
    assert evaluation["violations"] == []
    assert len(evaluation["conditions"]) == 5

    response = _evaluate(test_client, release_id, action="approve", approver_id="rm", comment="Ship it")
    assert response.status_code == 200
    data = response.json()["data"]
    assert data["release"]["status"] == "APPROVED_FOR_RELEASE"
    assert data["approval"]["object_type"] == "RELEASE"
    assert data["approval"]["decision"] == "APPROVED"
    assert data["evaluation"]["passed"] is True


def test_approve_requires_approver(test_client):
    built = build_release(test_client)
    response = _evaluate(test_client, built["release"]["id"], action="approve")
    assert response.status_code == 400
    assert response.json()["code"] == "ApprovalValidationError"


def test_approve_requires_gate_check(test_client):
    built = build_release(test_client)
    response = _evaluate(test_client, built["release"]["id"], action="approve", approver_id="rm")
    assert response.status_code == 400
    assert response.json()["code"] == "InvalidReleaseStatusError"


def test_blocking_violations_prevent_approval(test_client):
    built = build_release(test_client)
    _run_all(test_client, built, status="FAIL", evidence={"logs": "boom"})
    release_id = built["release"]["id"]
    _evaluate(test_client, release_id)

    response = _evaluate(test_client, release_id, action="approve", approver_id="rm")
    assert response.status_code == 400
    body = response.json()
    assert body["code"] == "GateViolationError"
    assert body["errors"][0]["condition_type"] == "ALL_TESTS_PASS"

    release = test_client.get(f"{API}/releases/{release_id}").json()["data"]["release"]
    assert release["status"] == "GATE_CHECK"


def test_waiver_unblocks_failing_tests(test_client):
    built = build_release(test_client)
    _run_all(test_client, built, status="FAIL", evidence={"logs": "flaky"})
    release_id = built["release"]["id"]

    response = test_client.post(
        f"{API}/releases/{release_id}/waivers",
        json={
            "target_type": "FAIL_RESULT",
            "reason": "Known flaky environment, tracked in OPS-42",
            "expires_at": future(),
            "issuer_id": "rm",
        },
    )
    assert response.status_code == 201
    waiver_id = response.json()["data"]["id"]

    evaluation = _evaluate(test_client, release_id).json()["data"]
    violation = _violation(evaluation, "ALL_TESTS_PASS")
    assert violation["has_waiver"] is True
    assert violation["waiver_id"] == waiver_id
    assert evaluation["passed"] is True


def test_other_waiver_is_the_fallback(test_client):
    built = build_release(test_client, approve_all=False)
    _run_all(test_client, built)
    release_id = built["release"]["id"]

    evaluation = _evaluate(test_client, release_id).json()["data"]
    assert _violation(evaluation, "ALL_APPROVALS_COMPLETE")["severity"] == "CRITICAL"
    assert evaluation["passed"] is False

    test_client.post(
        f"{API}/releases/{release_id}/waivers",
        json={
            "target_type": "OTHER",
            "reason": "Approval board meets after the release window",
            "expires_at": future(),
            "issuer_id": "rm",
        },
    )
    evaluation = _evaluate(test_client, release_id).json()["data"]
    assert _violation(evaluation, "ALL_APPROVALS_COMPLETE")["has_waiver"] is True
    assert evaluation["passed"] is True


def test_critical_bugs_block_the_gate(test_client):
    built = build_release(test_client)
    _run_all(
        test_client,
        built,
        status="FAIL",
        evidence={"links": ["https://ci.example.com/run/9"]},
        bug_links=[{"url": "https://bugs.example.com/1", "title": "Crash on pay", "severity": "CRITICAL"}],
    )

    evaluation = _evaluate(test_client, built["release"]["id"]).json()["data"]
    violation = _violation(evaluation, "NO_CRITICAL_BUGS")
    assert violation is not None
    assert violation["details"]["actual"] == 2


def test_coverage_counts_mapped_requirements(test_client):
    built = build_release(test_client)
    _run_all(test_client, built)
    project_id = built["project"]["id"]
    release_id = built["release"]["id"]

    requirement = test_client.post(
        f"{API}/requirements", json={"project_id": project_id, "title": "Orders can be placed"}
    ).json()["data"]

    evaluation = _evaluate(test_client, release_id).json()["data"]
    violation = _violation(evaluation, "MIN_TEST_COVERAGE")
    assert violation["details"]["actual"] == 0
    assert violation["details"]["affected_ids"] == [requirement["id"]]

    test_client.post(
        f"{API}/requirements/{requirement['id']}/mappings",
        json={"case_revision_id": built["case_revisions"][0], "created_by": "alice"},
    )
    evaluation = _evaluate(test_client, release_id).json()["data"]
    assert _violation(evaluation, "MIN_TEST_COVERAGE") is None


def test_coverage_condition_without_threshold_uses_configured_minimum(test_client, monkeypatch):
    built = build_release(test_client)
    _run_all(test_client, built)
    project_id = built["project"]["id"]
    release_id = built["release"]["id"]

    requirements = [
        test_client.post(f"{API}/requirements", json={"project_id": project_id, "title": title}).json()["data"]
        for title in ("Orders can be placed", "Orders can be refunded")
    ]
    test_client.post(
        f"{API}/requirements/{requirements[0]['id']}/mappings",
        json={"case_revision_id": built["case_revisions"][0], "created_by": "alice"},
    )
    conditions = [{"type": "MIN_TEST_COVERAGE", "name": "Coverage", "required": True}]

    monkeypatch.setattr(settings, "gate_min_coverage", 40.0)
    evaluation = _evaluate(test_client, release_id, conditions=conditions).json()["data"]
    assert _violation(evaluation, "MIN_TEST_COVERAGE") is None

    monkeypatch.setattr(settings, "gate_min_coverage", 60.0)
    evaluation = _evaluate(test_client, release_id, conditions=conditions).json()["data"]
    violation = _violation(evaluation, "MIN_TEST_COVERAGE")
    assert violation["details"]["expected"] == 60.0
    assert violation["details"]["actual"] == 50.0


def test_custom_conditions_replace_the_defaults(test_client):
    built = build_release(test_client)
    create_run(test_client, built["release"]["id"], built["list"]["id"])

    evaluation = _evaluate(
        test_client,
        built["release"]["id"],
        conditions=[{"type": "ALL_TESTS_PASS", "name": "Tests", "required": False}],
    ).json()["data"]

    assert len(evaluation["conditions"]) == 1
    assert evaluation["violations"][0]["severity"] == "WARNING"
    assert evaluation["passed"] is True


def test_pending_reviews_are_reported_as_info(test_client):
    built = build_release(test_client)
    _run_all(test_client, built)
    pending = test_client.post(
        f"{API}/test-cases",
        json={
            "project_id": built["project"]["id"],
            "title": "Return an item",
            "content": {"steps": ["Open orders"], "expected_result": "Return started"},
            "created_by": "alice",
        },
    ).json()["data"]["latest_revision"]["id"]
    test_client.post(f"{API}/test-cases/revisions/{pending}/submit-for-review")

    evaluation = _evaluate(test_client, built["release"]["id"]).json()["data"]
    violation = _violation(evaluation, "NO_UNAPPROVED_CHANGES")
    assert violation["severity"] == "INFO"
    assert violation["details"]["affected_ids"] == [pending]
    assert evaluation["passed"] is True
