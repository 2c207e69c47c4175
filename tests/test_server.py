"""HTTP contract tests for the FastAPI app (service swapped via dependency override)."""

import pytest
from fastapi.testclient import TestClient

from api.server import app, get_service


@pytest.fixture
def client(service):
    app.dependency_overrides[get_service] = lambda: service
    yield TestClient(app)
    app.dependency_overrides.clear()


def test_health(client):
    assert client.get("/health").json() == {"status": "ok"}


class TestPdfRoutes:
    def test_upload_pdf(self, client, pdf_bytes):
        resp = client.post(
            "/pdf/upload", files={"file": ("report.pdf", pdf_bytes, "application/pdf")}
        )

        assert resp.status_code == 200
        body = resp.json()
        assert body["originalName"] == "report.pdf"
        assert body["mimeType"] == "application/pdf"
        assert body["size"] == len(pdf_bytes)
        assert body["isIndexed"] is False
        assert body["metadata"]["title"] == "Quarterly Report"
        assert body["filename"].endswith(".pdf")

        listed = client.get("/pdf").json()
        assert [p["id"] for p in listed] == [body["id"]]
        assert client.get(f"/pdf/{body['id']}").json()["id"] == body["id"]

    def test_upload_rejects_other_mime_types(self, client):
        resp = client.post("/pdf/upload", files={"file": ("notes.txt", b"hello", "text/plain")})

        assert resp.status_code == 400
        assert "Only PDF" in resp.json()["detail"]

    def test_upload_rejects_unparsable_pdf(self, client):
        resp = client.post(
            "/pdf/upload", files={"file": ("broken.pdf", b"not a pdf at all", "application/pdf")}
        )

        assert resp.status_code == 400
        assert "Failed to parse PDF" in resp.json()["detail"]

    def test_upload_rejects_oversize(self, client, monkeypatch, pdf_bytes):
        from rag_workflow.config import settings

        monkeypatch.setattr(settings, "max_upload_bytes", 10)
        resp = client.post(
            "/pdf/upload", files={"file": ("big.pdf", pdf_bytes, "application/pdf")}
        )

        assert resp.status_code == 400
        assert "too large" in resp.json()["detail"]

    def test_missing_pdf_is_404(self, client):
        assert client.get("/pdf/nope").status_code == 404
        assert client.delete("/pdf/nope").status_code == 404
        assert client.post("/pdf/nope/index").status_code == 404

    def test_index_build_and_delete(self, client, service, add_pdf):
        pdf = add_pdf(service, "cherry tart " * 50)

        resp = client.post(f"/pdf/{pdf.id}/index")
        assert resp.status_code == 200
        assert resp.json()["pdfId"] == pdf.id
        assert resp.json()["numChunks"] > 0
        assert client.get(f"/pdf/{pdf.id}").json()["isIndexed"] is True

        assert client.delete(f"/pdf/{pdf.id}/index").status_code == 200
        assert client.delete(f"/pdf/{pdf.id}/index").status_code == 200
        assert not service.vector_store.has_index(pdf.id)


class TestWorkflowRoutes:
    def test_crud(self, client, workflow_payload):
        created = client.post("/workflow", json=workflow_payload("pdf-1"))
        assert created.status_code == 201
        wf = created.json()
        assert wf["id"]
        assert wf["isExecuted"] is False
        assert wf["nodes"][1]["data"]["pdfId"] == "pdf-1"
        assert wf["nodes"][0]["data"]["label"] == "Question"

        patched = client.patch(f"/workflow/{wf['id']}", json={"name": "Renamed"})
        assert patched.status_code == 200
        assert patched.json()["name"] == "Renamed"
        assert patched.json()["description"] == wf["description"]
        assert patched.json()["nodes"] == wf["nodes"]

        assert [w["id"] for w in client.get("/workflow").json()] == [wf["id"]]
        assert client.delete(f"/workflow/{wf['id']}").status_code == 200
        assert client.get(f"/workflow/{wf['id']}").status_code == 404
        assert client.delete(f"/workflow/{wf['id']}").status_code == 404
        assert client.patch(f"/workflow/{wf['id']}", json={"name": "x"}).status_code == 404

    def test_unknown_node_type_is_rejected(self, client):
        payload = {"name": "bad", "nodes": [{"id": "x", "type": "teleport", "data": {}}]}
        assert client.post("/workflow", json=payload).status_code == 422

    def test_execute(self, client, service, add_pdf, fake_llm, workflow_payload):
        pdf = add_pdf(service, "banana facts " * 100)
        wf = client.post("/workflow", json=workflow_payload(pdf.id)).json()

        resp = client.post(f"/workflow/{wf['id']}/execute", json={"userQuery": "ignored"})

        assert resp.status_code == 200
        body = resp.json()
        assert body["result"] == "Generated answer"
        assert body["workflow"]["isExecuted"] is True
        assert body["workflow"]["lastExecutionResult"] == "Generated answer"
        assert "User Query: What is X?" in fake_llm.prompts[0]

    def test_execute_without_body(self, client, service, add_pdf, workflow_payload):
        pdf = add_pdf(service, "banana facts " * 100)
        wf = client.post("/workflow", json=workflow_payload(pdf.id)).json()

        assert client.post(f"/workflow/{wf['id']}/execute").status_code == 200

    def test_execute_structural_error_is_400(self, client, workflow_payload):
        wf = client.post("/workflow", json=workflow_payload(None)).json()

        resp = client.post(f"/workflow/{wf['id']}/execute", json={})

        assert resp.status_code == 400
        assert "PDF selected" in resp.json()["detail"]
        assert client.get(f"/workflow/{wf['id']}").json()["isExecuted"] is False

    def test_execute_missing_pdf_is_404(self, client, workflow_payload):
        wf = client.post("/workflow", json=workflow_payload("deleted-pdf")).json()

        resp = client.post(f"/workflow/{wf['id']}/execute", json={})

        assert resp.status_code == 404

    def test_execute_missing_workflow_is_404(self, client):
        assert client.post("/workflow/nope/execute", json={}).status_code == 404
