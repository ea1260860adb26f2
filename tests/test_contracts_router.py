from fastapi.testclient import TestClient

from app.main import create_app
from app.services.ingestion.pipeline import ContractImportPipeline

DOCX_TYPE = "application/vnd.openxmlformats-officedocument.wordprocessingml.document"


class DummyStore:
    def __init__(self, files):
        self.files = files
        self.deleted = []

    def download(self, reference):
        return self.files[reference]

    def delete(self, reference):
        self.deleted.append(reference)
        return True


def _client(session_factory, store=None):
    pipeline = ContractImportPipeline(session_factory, object_store=store)
    return TestClient(create_app(pipeline=pipeline))


def test_health(session_factory):
    response = _client(session_factory).get("/api/v1/health")

    assert response.status_code == 200
    assert response.json() == {"status": "ok"}


def test_upload_import(session_factory, contract_docx):
    response = _client(session_factory).post(
        "/api/v1/contracts/import",
        files={"file": ("hop_dong.docx", contract_docx, DOCX_TYPE)},
    )

    body = response.json()
    assert response.status_code == 200
    assert body["success"] is True
    assert body["contract_number"] == "015/2025/HĐDV-BV/HCM/ABC"
    assert body["schedules_created"] == 1


def test_upload_of_unsupported_type_returns_failure_result(session_factory):
    response = _client(session_factory).post(
        "/api/v1/contracts/import",
        files={"file": ("notes.txt", b"hello", "text/plain")},
    )

    assert response.status_code == 200
    assert response.json()["success"] is False
    assert response.json()["error_code"] == "UNSUPPORTED_FILE_TYPE"


def test_import_stored_document(session_factory, contract_docx):
    store = DummyStore({"uploads/2025/hop_dong.docx": contract_docx})

    response = _client(session_factory, store).post(
        "/api/v1/contracts/import/uploads/2025/hop_dong.docx",
        params={"delete_after": "true"},
    )

    assert response.json()["success"] is True
    assert store.deleted == ["uploads/2025/hop_dong.docx"]


def test_stored_import_without_object_store_is_config_error(session_factory):
    response = _client(session_factory).post("/api/v1/contracts/import/uploads/x.docx")

    assert response.json()["error_code"] == "CONFIG_ERROR"
