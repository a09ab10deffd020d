from __future__ import annotations

import pytest
from fastapi.testclient import TestClient

from hireflow.api.app import create_app
from hireflow.api.deps import get_orchestrator


@pytest.fixture
def client_with(make_orchestrator):
    def _client(provider=None, **kwargs) -> TestClient:
        app = create_app()
        orchestrator = make_orchestrator(provider, **kwargs)
        app.dependency_overrides[get_orchestrator] = lambda: orchestrator
        return TestClient(app)

    return _client


def _create_job(client: TestClient, **overrides) -> int:
    payload = {
        "title": "Data Engineer",
        "description": "Pipelines in Python",
        "rubric": {"technical_skills": {"required_skills": ["Python", "SQL"]}},
    }
    payload.update(overrides)
    resp = client.post("/api/jobs", json=payload)
    assert resp.status_code == 201
    return resp.json()["id"]


def test_health() -> None:
    assert TestClient(create_app()).get("/health").json() == {"status": "ok"}


def test_job_crud(client_with) -> None:
    client = client_with()
    job_id = _create_job(client)

    fetched = client.get(f"/api/jobs/{job_id}").json()
    assert fetched["rubric"]["technical_skills"]["required_skills"] == ["Python", "SQL"]
    assert fetched["rubric"]["technical_skills"]["weight"] == 40

    patched = client.patch(f"/api/jobs/{job_id}", json={"ai_analysis_enabled": False, "title": None})
    assert patched.status_code == 200
    assert patched.json()["ai_analysis_enabled"] is False
    assert patched.json()["title"] == "Data Engineer"

    assert [row["id"] for row in client.get("/api/jobs").json()] == [job_id]
    assert client.delete(f"/api/jobs/{job_id}").status_code == 204
    assert client.get(f"/api/jobs/{job_id}").status_code == 404


def test_upload_scores_candidate(client_with, scripted_provider, make_pdf) -> None:
    client = client_with(scripted_provider())
    job_id = _create_job(client)

    resp = client.post(
        f"/api/jobs/{job_id}/candidates",
        files={"file": ("ada.pdf", make_pdf("Ada Lovelace\nPython"), "application/pdf")},
        data={"notes": "Referral"},
    )

    assert resp.status_code == 201
    body = resp.json()
    assert body["processing_status"] == "completed"
    assert body["match_percentage"] == 83
    assert body["analysis_outcome"] == "scored"

    candidate = client.get(f"/api/candidates/{body['candidate_id']}").json()
    assert candidate["name"] == "Ada Lovelace"
    assert candidate["notes"] == "Referral"
    assert candidate["strengths"] == ["Python", "Analytical engine design"]

    listed = client.get(f"/api/jobs/{job_id}/candidates").json()
    assert [row["id"] for row in listed] == [body["candidate_id"]]


def test_upload_rejects_unsupported_and_legacy_files(client_with) -> None:
    client = client_with()
    job_id = _create_job(client)

    text_resp = client.post(
        f"/api/jobs/{job_id}/candidates",
        files={"file": ("cv.txt", b"plain text", "text/plain")},
    )
    doc_resp = client.post(
        f"/api/jobs/{job_id}/candidates",
        files={"file": ("cv.doc", b"\xd0\xcf\x11\xe0", "application/msword")},
    )

    assert text_resp.status_code == 415
    assert text_resp.json()["detail"]["kind"] == "unsupported_format"
    assert doc_resp.status_code == 415
    assert doc_resp.json()["detail"]["kind"] == "legacy_format"
    assert client.get(f"/api/jobs/{job_id}/candidates").json() == []


def test_upload_rejects_oversize_file(client_with, test_settings, make_pdf) -> None:
    client = client_with(settings=test_settings.model_copy(update={"max_upload_bytes": 512}))
    job_id = _create_job(client)

    resp = client.post(
        f"/api/jobs/{job_id}/candidates",
        files={"file": ("big.pdf", b"%PDF" + b"0" * 1024, "application/pdf")},
    )

    assert resp.status_code == 413
    assert resp.json()["detail"]["kind"] == "too_large"


def test_upload_body_is_read_only_up_to_the_limit(make_orchestrator, test_settings) -> None:
    orchestrator = make_orchestrator(settings=test_settings.model_copy(update={"max_upload_bytes": 512}))
    received: list[int] = []
    process_resume = orchestrator.process_resume

    def recording_process_resume(*, job_id, document, notes=None):
        received.append(document.size)
        return process_resume(job_id=job_id, document=document, notes=notes)

    orchestrator.process_resume = recording_process_resume
    app = create_app()
    app.dependency_overrides[get_orchestrator] = lambda: orchestrator
    client = TestClient(app)
    job_id = _create_job(client)

    resp = client.post(
        f"/api/jobs/{job_id}/candidates",
        files={"file": ("huge.pdf", b"%PDF" + b"0" * 64 * 1024, "application/pdf")},
    )

    assert resp.status_code == 413
    assert received == [513]


def test_upload_to_unknown_job_is_404(client_with, make_pdf) -> None:
    resp = client_with().post(
        "/api/jobs/999/candidates",
        files={"file": ("ada.pdf", make_pdf("Ada"), "application/pdf")},
    )

    assert resp.status_code == 404


def test_reanalyze_endpoints(client_with, scripted_provider, make_pdf) -> None:
    client = client_with(scripted_provider(scoring=TimeoutError("slow model")))
    job_id = _create_job(client)
    upload = client.post(
        f"/api/jobs/{job_id}/candidates",
        files={"file": ("ada.pdf", make_pdf("Ada Lovelace"), "application/pdf")},
    ).json()
    assert upload["processing_status"] == "failed"
    assert upload["match_percentage"] is None

    single = client.post(f"/api/candidates/{upload['candidate_id']}/reanalyze")
    assert single.status_code == 200
    assert single.json()["processing_status"] == "failed"

    batch = client.post(f"/api/jobs/{job_id}/reanalyze")
    assert batch.json() == {"job_id": job_id, "success": 0, "failed": 1}

    assert client.post("/api/candidates/4040/reanalyze").status_code == 404


def test_reanalyze_rejected_without_model(client_with, make_pdf) -> None:
    client = client_with()
    job_id = _create_job(client)
    upload = client.post(
        f"/api/jobs/{job_id}/candidates",
        files={"file": ("ada.pdf", make_pdf("Ada Lovelace"), "application/pdf")},
    ).json()

    resp = client.post(f"/api/candidates/{upload['candidate_id']}/reanalyze")

    assert resp.status_code == 409
    assert client.get("/api/pipeline/capabilities").json()["ai_configured"] is False


def test_review_status_assignment(client_with, make_pdf) -> None:
    client = client_with()
    job_id = _create_job(client)
    candidate_id = client.post(
        f"/api/jobs/{job_id}/candidates",
        files={"file": ("ada.pdf", make_pdf("Ada"), "application/pdf")},
    ).json()["candidate_id"]
    statuses = {row["name"]: row["id"] for row in client.get("/api/statuses").json()}

    resp = client.patch(f"/api/candidates/{candidate_id}/review-status", json={"status_id": statuses["selected"]})

    assert resp.status_code == 200
    assert resp.json()["status_id"] == statuses["selected"]
    assert client.get("/api/statuses/usage").json() == {str(statuses["selected"]): 1}
