# src/api/server.py

from functools import lru_cache

from fastapi import Depends, FastAPI, File, HTTPException, UploadFile
from rag_workflow.errors import NotFoundError
from rag_workflow.schemas import (
    CamelModel,
    ExecuteWorkflowRequest,
    ExecuteWorkflowResponse,
    PdfDocument,
    Workflow,
    WorkflowCreate,
    WorkflowUpdate,
)
from rag_workflow.service import WorkflowRAGService

app = FastAPI(title="RAG Workflow API", version="1.0.0")


@lru_cache(maxsize=1)
def get_service() -> WorkflowRAGService:
    return WorkflowRAGService()


class IndexResponse(CamelModel):
    pdf_id: str
    num_chunks: int


def _raise_http(e: Exception):
    if isinstance(e, NotFoundError):
        raise HTTPException(status_code=404, detail=str(e))
    raise HTTPException(status_code=400, detail=str(e))


# Documents

@app.post("/pdf/upload", response_model=PdfDocument)
def upload_pdf(
    file: UploadFile = File(...),
    service: WorkflowRAGService = Depends(get_service),
):
    data = file.file.read()
    try:
        return service.upload_pdf(file.filename or "upload.pdf", file.content_type, data)
    except ValueError as e:
        _raise_http(e)


@app.get("/pdf", response_model=list[PdfDocument])
def list_pdfs(service: WorkflowRAGService = Depends(get_service)):
    return service.list_pdfs()


@app.get("/pdf/{pdf_id}", response_model=PdfDocument)
def get_pdf(pdf_id: str, service: WorkflowRAGService = Depends(get_service)):
    try:
        return service.get_pdf(pdf_id)
    except NotFoundError as e:
        _raise_http(e)


@app.delete("/pdf/{pdf_id}")
def delete_pdf(pdf_id: str, service: WorkflowRAGService = Depends(get_service)):
    try:
        service.delete_pdf(pdf_id)
    except NotFoundError as e:
        _raise_http(e)
    return {"deleted": pdf_id}


@app.post("/pdf/{pdf_id}/index", response_model=IndexResponse)
def build_pdf_index(pdf_id: str, service: WorkflowRAGService = Depends(get_service)):
    """
    (Re)build the similarity index for a PDF. Queries build it lazily,
    so this is only needed to refresh an index or to warm it up.
    """
    try:
        index = service.build_index(pdf_id)
    except NotFoundError as e:
        _raise_http(e)
    except RuntimeError as e:
        raise HTTPException(status_code=502, detail=str(e))
    return IndexResponse(pdf_id=pdf_id, num_chunks=len(index.texts))


@app.delete("/pdf/{pdf_id}/index")
def delete_pdf_index(pdf_id: str, service: WorkflowRAGService = Depends(get_service)):
    service.delete_index(pdf_id)
    return {"deleted": pdf_id}


# Workflows

@app.post("/workflow", response_model=Workflow, status_code=201)
def create_workflow(
    req: WorkflowCreate, service: WorkflowRAGService = Depends(get_service)
):
    return service.create_workflow(req)


@app.get("/workflow", response_model=list[Workflow])
def list_workflows(service: WorkflowRAGService = Depends(get_service)):
    return service.list_workflows()


@app.get("/workflow/{workflow_id}", response_model=Workflow)
def get_workflow(workflow_id: str, service: WorkflowRAGService = Depends(get_service)):
    try:
        return service.get_workflow(workflow_id)
    except NotFoundError as e:
        _raise_http(e)


@app.patch("/workflow/{workflow_id}", response_model=Workflow)
def update_workflow(
    workflow_id: str,
    req: WorkflowUpdate,
    service: WorkflowRAGService = Depends(get_service),
):
    try:
        return service.update_workflow(workflow_id, req)
    except (NotFoundError, ValueError) as e:
        _raise_http(e)


@app.delete("/workflow/{workflow_id}")
def delete_workflow(workflow_id: str, service: WorkflowRAGService = Depends(get_service)):
    try:
        service.delete_workflow(workflow_id)
    except NotFoundError as e:
        _raise_http(e)
    return {"deleted": workflow_id}


@app.post("/workflow/{workflow_id}/execute", response_model=ExecuteWorkflowResponse)
def execute_workflow(
    workflow_id: str,
    req: ExecuteWorkflowRequest | None = None,
    service: WorkflowRAGService = Depends(get_service),
):
    """
    Run the workflow. Model outages do not fail the request: the answer is
    then a fallback explanation returned as a normal result.
    """
    try:
        return service.execute_workflow(workflow_id, req)
    except (NotFoundError, ValueError) as e:
        _raise_http(e)


@app.get("/health")
def health():
    return {"status": "ok"}


if __name__ == "__main__":
    import uvicorn
    uvicorn.run(app, host="0.0.0.0", port=8000)
