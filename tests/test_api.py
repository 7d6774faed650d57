"""Integration tests for the ClipBatch HTTP API."""

import time

import pytest
from fastapi import status

from clipbatch.services import backend as commands
from tests.fixtures import first_call


def wait_for_history(client, headers, job_id, timeout=5.0):
    """Poll history until ``job_id`` shows up, return its entry."""
    deadline = time.monotonic() + timeout
    while time.monotonic() < deadline:
        response = client.get("/history", headers=headers)
        for batch in response.json()["batches"]:
            if batch["job_id"] == job_id:
                return batch
        time.sleep(0.02)
    raise AssertionError(f"Job {job_id} never reached history")


def start(client, headers, clip_ids, operation="video_analysis", **extra):
    payload = {"clip_ids": clip_ids, "operation": operation, **extra}
    response = client.post("/batches", json=payload, headers=headers)
    assert response.status_code == status.HTTP_200_OK
    return response.json()["job_id"]


# ============================================================================
# Authentication & service info
# ============================================================================


class TestAuthentication:

    def test_missing_api_key_rejected(self, client):
        response = client.get("/stats")
        assert response.status_code == status.HTTP_401_UNAUTHORIZED
        assert "Missing API key" in response.json()["detail"]

    def test_invalid_api_key_rejected(self, client):
        response = client.get("/history", headers={"X-API-Key": "invalid_key_12345"})
        assert response.status_code == status.HTTP_401_UNAUTHORIZED
        assert "Invalid API key" in response.json()["detail"]

    def test_multiple_api_keys_work(self, client):
        for key in ["test_key_123", "test_key_456"]:
            response = client.get("/stats", headers={"X-API-Key": key})
            assert response.status_code == status.HTTP_200_OK

    def test_dev_mode_without_keys(self, client, test_settings):
        test_settings.api_keys = ""
        response = client.get("/stats")
        assert response.status_code == status.HTTP_200_OK


class TestServiceInfo:

    def test_root_endpoint(self, client):
        response = client.get("/")
        assert response.status_code == status.HTTP_200_OK
        data = response.json()
        assert data["name"] == "ClipBatch API"
        assert "version" in data
        assert "docs" in data

    def test_health_endpoint(self, client):
        response = client.get("/health")
        assert response.status_code == status.HTTP_200_OK
        assert response.json()["status"] == "healthy"


# ============================================================================
# Batch lifecycle
# ============================================================================


class TestBatchLifecycle:

    def test_start_poll_history(self, client, headers):
        job_id = start(client, headers, ["clip1", "clip2", "clip3"], max_concurrent=2)
        assert job_id.startswith("batch_")

        batch = wait_for_history(client, headers, job_id)
        assert batch["status"] == "completed"
        assert batch["success_count"] == 3
        assert batch["failure_count"] == 0
        assert batch["summary"]["clip_ids"] == ["clip1", "clip2", "clip3"]

        # Archived jobs are no longer active
        response = client.get(f"/batches/{job_id}", headers=headers)
        assert response.status_code == status.HTTP_404_NOT_FOUND

    def test_start_response_message(self, client, headers):
        response = client.post(
            "/batches",
            json={"clip_ids": ["clip1", "clip2"], "operation": "scene_detection"},
            headers=headers,
        )
        data = response.json()
        assert data["message"] == "Batch operation scene_detection started for 2 clips"
        wait_for_history(client, headers, data["job_id"])

    def test_progress_of_active_job(self, client, headers, fake_backend):
        fake_backend.delay = 0.2
        job_id = start(client, headers, ["clip1", "clip2"])

        response = client.get(f"/batches/{job_id}", headers=headers)
        assert response.status_code == status.HTTP_200_OK
        data = response.json()
        assert data["job_id"] == job_id
        assert data["total"] == 2
        assert data["status"] in ["pending", "running"]
        assert data["priority"] == "medium"

        wait_for_history(client, headers, job_id)

    def test_unknown_job_progress(self, client, headers):
        response = client.get("/batches/batch_0_missing00", headers=headers)
        assert response.status_code == status.HTTP_404_NOT_FOUND

    def test_unknown_operation(self, client, headers):
        job_id = start(client, headers, ["clip1", "clip2"], operation="unknown_operation")

        batch = wait_for_history(client, headers, job_id)
        assert batch["status"] == "completed"
        assert batch["failure_count"] == 2
        assert "Unknown batch operation" in batch["errors"][0]

    def test_item_failures_recorded(self, client, headers, fake_backend):
        fake_backend.fail_for = {"clip2"}
        job_id = start(client, headers, ["clip1", "clip2"])

        batch = wait_for_history(client, headers, job_id)
        assert batch["failure_count"] == 1
        assert batch["errors"] == ["clip2: Processing failed for clip2"]
        failed = [r for r in batch["results"] if not r["success"]]
        assert failed[0]["clip_id"] == "clip2"

    def test_rejects_empty_clip_list(self, client, headers):
        response = client.post("/batches", json={"clip_ids": [], "operation": "video_analysis"}, headers=headers)
        assert response.status_code == status.HTTP_422_UNPROCESSABLE_ENTITY

    def test_rejects_invalid_max_concurrent(self, client, headers):
        payload = {"clip_ids": ["clip1"], "operation": "video_analysis", "max_concurrent": 0}
        response = client.post("/batches", json=payload, headers=headers)
        assert response.status_code == status.HTTP_422_UNPROCESSABLE_ENTITY


class TestCancel:

    def test_cancel_running_batch(self, client, headers, fake_backend):
        fake_backend.delay = 0.1
        job_id = start(client, headers, ["clip1", "clip2", "clip3", "clip4"], max_concurrent=1)

        deadline = time.monotonic() + 2
        while client.get(f"/batches/{job_id}", headers=headers).json()["status"] != "running":
            assert time.monotonic() < deadline
            time.sleep(0.01)

        response = client.post(f"/batches/{job_id}/cancel", headers=headers)
        assert response.status_code == status.HTTP_200_OK
        assert response.json()["success"] is True

        batch = wait_for_history(client, headers, job_id)
        assert batch["status"] == "cancelled"
        assert batch["success_count"] < 4

    def test_cancel_unknown_batch(self, client, headers):
        response = client.post("/batches/batch_0_missing00/cancel", headers=headers)
        assert response.status_code == status.HTTP_200_OK
        data = response.json()
        assert data["success"] is False
        assert "Could not cancel" in data["message"]


# ============================================================================
# Convenience launchers
# ============================================================================


class TestLaunchers:

    def test_analyze_videos(self, client, headers):
        response = client.post(
            "/batches/analyze-videos",
            json={"clip_ids": ["clip1"], "analysis_types": ["quality"]},
            headers=headers,
        )
        assert response.status_code == status.HTTP_200_OK
        batch = wait_for_history(client, headers, response.json()["job_id"])

        assert batch["summary"]["operation"] == "comprehensive_analysis"
        data = batch["results"][0]["data"]
        for key in ("video", "audio", "quality", "clipId", "timestamp"):
            assert key in data

    def test_transcribe_videos_with_subtitles(self, client, headers):
        response = client.post(
            "/batches/transcribe-videos",
            json={"clip_ids": ["clip1"], "generate_subtitles": True, "subtitle_format": "vtt"},
            headers=headers,
        )
        batch = wait_for_history(client, headers, response.json()["job_id"])

        assert batch["summary"]["operation"] == "subtitle_generation"
        assert batch["results"][0]["data"]["format"] == "vtt"

    def test_transcribe_videos_plain(self, client, headers):
        response = client.post("/batches/transcribe-videos", json={"clip_ids": ["clip1"]}, headers=headers)
        batch = wait_for_history(client, headers, response.json()["job_id"])
        assert batch["summary"]["operation"] == "whisper_transcription"

    def test_generate_subtitles(self, client, headers):
        response = client.post(
            "/batches/generate-subtitles",
            json={"clip_ids": ["clip1"], "max_characters_per_line": 5},
            headers=headers,
        )
        batch = wait_for_history(client, headers, response.json()["job_id"])
        assert batch["results"][0]["data"]["subtitles"] == ["hello", "world"]

    def test_detect_languages(self, client, headers):
        response = client.post("/batches/detect-languages", json={"clip_ids": ["clip1"]}, headers=headers)
        batch = wait_for_history(client, headers, response.json()["job_id"])
        assert batch["results"][0]["data"] == {"language": "en", "confidence": 0.9}

    def test_detect_scenes(self, client, headers, fake_backend):
        response = client.post(
            "/batches/detect-scenes",
            json={"clip_ids": ["clip1"], "threshold": 0.6},
            headers=headers,
        )
        wait_for_history(client, headers, response.json()["job_id"])

        params = first_call(fake_backend, commands.DETECT_SCENES)
        assert params["threshold"] == 0.6
        assert params["minSceneLength"] == 1.0


# ============================================================================
# History, reports & statistics
# ============================================================================


class TestHistoryEndpoint:

    def test_empty_history(self, client, headers):
        response = client.get("/history", headers=headers)
        assert response.status_code == status.HTTP_200_OK
        assert response.json() == {"batches": [], "total": 0}

    def test_history_limit(self, client, headers):
        job_ids = []
        for i in range(3):
            job_ids.append(start(client, headers, [f"clip{i}"]))
            wait_for_history(client, headers, job_ids[-1])

        response = client.get("/history?limit=2", headers=headers)
        data = response.json()
        assert data["total"] == 2
        assert [b["job_id"] for b in data["batches"]] == job_ids[-2:]

    @pytest.mark.parametrize("limit", [0, 5000])
    def test_history_limit_validation(self, client, headers, limit):
        response = client.get(f"/history?limit={limit}", headers=headers)
        assert response.status_code == status.HTTP_422_UNPROCESSABLE_ENTITY

    def test_clear_history(self, client, headers):
        job_id = start(client, headers, ["clip1"])
        wait_for_history(client, headers, job_id)

        response = client.delete("/history", headers=headers)
        assert response.status_code == status.HTTP_200_OK
        assert response.json()["cleared"] == 1

        assert client.get("/history", headers=headers).json()["total"] == 0

    def test_report(self, client, headers):
        job_id = start(client, headers, ["clip1", "clip2"])
        wait_for_history(client, headers, job_id)

        response = client.get(f"/history/{job_id}/report?format=csv&include_details=false", headers=headers)
        assert response.status_code == status.HTTP_200_OK
        report = response.json()
        assert report["job_id"] == job_id
        assert report["format"] == "csv"
        assert report["summary"]["total_clips"] == 2
        assert report["summary"]["successful"] == 2
        assert report["results"] is None
        assert report["errors"] == []

    def test_report_unknown_job(self, client, headers):
        response = client.get("/history/batch_0_missing00/report", headers=headers)
        assert response.status_code == status.HTTP_404_NOT_FOUND


class TestStats:

    def test_initial_stats(self, client, headers):
        response = client.get("/stats", headers=headers)
        assert response.status_code == status.HTTP_200_OK
        data = response.json()
        assert data["total_jobs"] == 0
        assert data["success_rate"] == 0

    def test_stats_after_batch(self, client, headers):
        job_id = start(client, headers, ["clip1", "clip2"])
        wait_for_history(client, headers, job_id)

        data = client.get("/stats", headers=headers).json()
        assert data["total_jobs"] == 1
        assert data["completed_jobs"] == 1
        assert data["total_clips_processed"] == 2
        assert data["success_rate"] == 100


class TestAuthLogging:

    def test_rejected_key_logged_masked(self, client, caplog):
        with caplog.at_level("WARNING", logger="clipbatch.auth"):
            client.get("/stats", headers={"X-API-Key": "wrong_key_999"})

        messages = [r.getMessage() for r in caplog.records if r.name == "clipbatch.auth"]
        assert messages == ["Rejected request with unknown API key wron..."]

    def test_missing_key_logged(self, client, caplog):
        with caplog.at_level("WARNING", logger="clipbatch.auth"):
            client.get("/stats")

        assert any(r.name == "clipbatch.auth" and "without API key" in r.getMessage() for r in caplog.records)
