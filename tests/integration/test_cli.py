from __future__ import annotations

import json
from pathlib import Path

from typer.testing import CliRunner

from hireflow.cli.app import app

runner = CliRunner()


def test_job_upload_and_listing_commands(tmp_path: Path, make_pdf) -> None:
    created = runner.invoke(app, ["jobs", "create", "--title", "SRE", "--description", "Keep it running"])
    assert created.exit_code == 0, created.output
    job_id = json.loads(created.stdout)["id"]

    resume = tmp_path / "ada.pdf"
    resume.write_bytes(make_pdf("Ada Lovelace\nOn-call hero"))
    uploaded = runner.invoke(app, ["candidates", "upload", "--job-id", str(job_id), "--file", str(resume)])
    assert uploaded.exit_code == 0, uploaded.output
    assert json.loads(uploaded.stdout)["processing_status"] == "completed"

    listed = runner.invoke(app, ["candidates", "list", "--job-id", str(job_id)])
    rows = json.loads(listed.stdout)
    assert [row["processing_status"] for row in rows] == ["completed"]
    assert rows[0]["match_percentage"] is None


def test_rejected_upload_exits_non_zero(tmp_path: Path) -> None:
    job_id = json.loads(
        runner.invoke(app, ["jobs", "create", "--title", "SRE", "--description", "d"]).stdout
    )["id"]
    legacy = tmp_path / "cv.doc"
    legacy.write_bytes(b"\xd0\xcf\x11\xe0")

    result = runner.invoke(app, ["candidates", "upload", "--job-id", str(job_id), "--file", str(legacy)])

    assert result.exit_code == 1
    assert json.loads(result.stdout)["error_kind"] == "legacy_format"


def test_status_commands_enforce_taxonomy_rules() -> None:
    created = runner.invoke(app, ["statuses", "create", "--name", "offer", "--display-name", "Offer"])
    assert created.exit_code == 0, created.output
    status_id = json.loads(created.stdout)["id"]

    listed = json.loads(runner.invoke(app, ["statuses", "list"]).stdout)
    assert [row["name"] for row in listed][-1] == "offer"

    pending_id = next(row["id"] for row in listed if row["name"] == "pending")
    refused = runner.invoke(app, ["statuses", "delete", "--status-id", str(pending_id)])
    assert refused.exit_code == 1

    deleted = runner.invoke(app, ["statuses", "delete", "--status-id", str(status_id)])
    assert json.loads(deleted.stdout) == {"deleted": status_id}


def test_reanalyze_without_model_is_refused() -> None:
    job_id = json.loads(
        runner.invoke(app, ["jobs", "create", "--title", "SRE", "--description", "d"]).stdout
    )["id"]

    result = runner.invoke(app, ["jobs", "reanalyze", "--job-id", str(job_id)])

    assert result.exit_code == 1
