"""
tests/test_api.py

HTTP intake, processing and status endpoints via FastAPI's TestClient.
"""

from __future__ import annotations

import uuid
from collections.abc import Iterator

import pytest
from fastapi.testclient import TestClient

from app.api.dependencies import get_settings
from app.config import ImportSettings
from app.main import create_app
from app.services.import_orchestrator_service import ImportOrchestratorService
from db.models.import_batch import ImportFileType, ImportStatus
from db.session import Database


@pytest.fixture()
def client(database: Database, orchestrator: ImportOrchestratorService) -> Iterator[TestClient]:
    application = create_app(database=database, orchestrator=orchestrator)
    with TestClient(application) as test_client:
        yield test_client


def _stored_payload(orchestrator: ImportOrchestratorService, file_name: str, content: bytes) -> dict:
    upload = orchestrator.store_upload(bucket="imports", file_name=file_name, content=content)
    return {
        "file_name": upload.file_name,
        "storage_path": upload.storage_path,
        "file_size_bytes": upload.file_size_bytes,
    }


def _status(client: TestClient, job_id: str) -> dict:
    response = client.get("/imports/status", params={"job_id": job_id})
    assert response.status_code == 200
    return response.json()["jobs"][0]


def test_health(client: TestClient) -> None:
    response = client.get("/health")

    assert response.status_code == 200
    assert response.json() == {"status": "ok"}


class TestQueueEndpoints:
    def test_excel_import_is_accepted_and_processed(
        self,
        client: TestClient,
        orchestrator: ImportOrchestratorService,
        market_workbook: bytes,
    ) -> None:
        payload = _stored_payload(orchestrator, "Rystad.xlsx", market_workbook)

        response = client.post("/imports/excel", json=payload)

        assert response.status_code == 202
        body = response.json()
        assert body["status"] == ImportStatus.PENDING
        assert body["file_type"] == ImportFileType.EXCEL_RYSTAD

        job = _status(client, body["job_id"])
        assert job["status"] == ImportStatus.COMPLETED
        assert job["records_total"] == 5
        assert job["records_imported"] == 5
        assert job["import_batch_id"] is not None

    def test_auto_routes_market_report_by_name(
        self,
        client: TestClient,
        orchestrator: ImportOrchestratorService,
    ) -> None:
        payload = _stored_payload(orchestrator, "Subsea Market Report Q1.pdf", b"%PDF-1.4")

        response = client.post("/imports/auto", json=payload)

        assert response.status_code == 202
        assert response.json()["file_type"] == ImportFileType.PDF_MARKET_REPORT

    def test_wrong_extension_is_415(self, client: TestClient) -> None:
        response = client.post(
            "/imports/excel",
            json={"file_name": "data.csv", "storage_path": "2025/01/data.csv", "file_size_bytes": 10},
        )

        assert response.status_code == 415

    @pytest.mark.parametrize("kind", ["excel", "auto"])
    def test_legacy_xls_is_415_and_not_queued(self, client: TestClient, kind: str) -> None:
        response = client.post(
            f"/imports/{kind}",
            json={"file_name": "Rystad.xls", "storage_path": "2025/01/Rystad.xls", "file_size_bytes": 10},
        )

        assert response.status_code == 415
        assert client.get("/imports/status").json()["jobs"] == []

    def test_oversized_file_is_413(self, client: TestClient) -> None:
        client.app.dependency_overrides[get_settings] = lambda: ImportSettings(max_excel_bytes=100)
        try:
            response = client.post(
                "/imports/excel",
                json={"file_name": "big.xlsx", "storage_path": "2025/01/big.xlsx", "file_size_bytes": 101},
            )
        finally:
            client.app.dependency_overrides.clear()

        assert response.status_code == 413

    def test_path_traversal_is_400(self, client: TestClient) -> None:
        response = client.post(
            "/imports/pdf",
            json={"file_name": "a.pdf", "storage_path": "../../etc/a.pdf", "file_size_bytes": 10},
        )

        assert response.status_code == 400

    def test_failed_processing_shows_in_status(self, client: TestClient) -> None:
        response = client.post(
            "/imports/pdf",
            json={"file_name": "gone.pdf", "storage_path": "2025/01/gone.pdf", "file_size_bytes": 10},
        )

        job = _status(client, response.json()["job_id"])
        assert job["status"] == ImportStatus.FAILED
        assert job["error_message"].startswith("FileStorageError:")


class TestUploadEndpoint:
    def test_multipart_upload_stores_and_queues(self, client: TestClient) -> None:
        response = client.post(
            "/imports/upload",
            params={"file_type": "pdf"},
            files={"file": ("awards.pdf", b"%PDF-1.4", "application/pdf")},
        )

        assert response.status_code == 202
        body = response.json()
        assert body["file_type"] == ImportFileType.PDF_CONTRACT_AWARDS
        assert _status(client, body["job_id"])["status"] == ImportStatus.COMPLETED

    def test_invalid_file_type_is_400(self, client: TestClient) -> None:
        response = client.post(
            "/imports/upload",
            params={"file_type": "csv"},
            files={"file": ("awards.pdf", b"%PDF-1.4", "application/pdf")},
        )

        assert response.status_code == 400

    def test_empty_upload_is_400(self, client: TestClient) -> None:
        response = client.post(
            "/imports/upload",
            files={"file": ("awards.pdf", b"", "application/pdf")},
        )

        assert response.status_code == 400


class TestProcessAndStatus:
    def test_process_runs_job_synchronously(
        self,
        client: TestClient,
        orchestrator: ImportOrchestratorService,
    ) -> None:
        upload = orchestrator.store_upload(bucket="imports", file_name="awards.pdf", content=b"%PDF-1.4")
        job = orchestrator.create_job(file_type=ImportFileType.PDF_CONTRACT_AWARDS, upload=upload)

        first = client.post("/imports/process", json={"job_id": str(job.id)})
        second = client.post("/imports/process", json={"job_id": str(job.id)})

        assert first.status_code == 200
        assert first.json()["total"] == 1
        assert first.json()["tables"]["contracts"] == {"imported": 1, "skipped": 0, "failed_chunks": 0}
        assert second.json()["already_completed"] is True

    def test_process_without_job_id_is_400(self, client: TestClient) -> None:
        assert client.post("/imports/process", json={}).status_code == 400

    def test_process_unknown_job_is_404(self, client: TestClient) -> None:
        response = client.post("/imports/process", json={"job_id": str(uuid.uuid4())})

        assert response.status_code == 404

    def test_process_failure_is_500_with_message(
        self,
        client: TestClient,
        orchestrator: ImportOrchestratorService,
    ) -> None:
        upload = orchestrator.store_upload(bucket="imports", file_name="broken.xlsx", content=b"garbage")
        job = orchestrator.create_job(file_type=ImportFileType.EXCEL_RYSTAD, upload=upload)

        response = client.post("/imports/process", json={"job_id": str(job.id)})

        assert response.status_code == 500
        assert response.json()["detail"].startswith("WorkbookReadError:")

    def test_unknown_status_job_is_404(self, client: TestClient) -> None:
        response = client.get("/imports/status", params={"job_id": str(uuid.uuid4())})

        assert response.status_code == 404

    def test_status_lists_recent_jobs(
        self,
        client: TestClient,
        orchestrator: ImportOrchestratorService,
    ) -> None:
        for name in ("a.pdf", "b.pdf"):
            upload = orchestrator.store_upload(bucket="imports", file_name=name, content=b"%PDF-1.4")
            orchestrator.create_job(file_type=ImportFileType.PDF_CONTRACT_AWARDS, upload=upload)

        response = client.get("/imports/status")

        assert response.status_code == 200
        assert {job["file_name"] for job in response.json()["jobs"]} == {"a.pdf", "b.pdf"}
