# src/rag_workflow/service.py

from __future__ import annotations
from pathlib import Path
from typing import List

from .config import settings
from .engine import WorkflowEngine
from .errors import NotFoundError
from .llm import LLMClient
from .pdf_service import PdfService
from .schemas import (
    ExecuteWorkflowRequest,
    ExecuteWorkflowResponse,
    PdfDocument,
    VectorIndex,
    Workflow,
    WorkflowCreate,
    WorkflowUpdate,
)
from .store import MemoryStore
from .vector_store import VectorStore


class WorkflowRAGService:
    def __init__(
        self,
        llm: LLMClient | None = None,
        store: MemoryStore | None = None,
        index_dir: Path | None = None,
    ):
        self.llm = llm or LLMClient()
        self.store = store or MemoryStore()
        self.pdf_service = PdfService(self.store)
        self.vector_store = VectorStore(
            self.pdf_service, self.llm, index_dir or settings.vector_index_dir
        )
        self.engine = WorkflowEngine(self.pdf_service, self.vector_store, self.llm)

    # Documents

    def upload_pdf(self, original_name: str, mime_type: str | None, data: bytes) -> PdfDocument:
        pdf = self.pdf_service.upload(original_name, mime_type, data)
        print(f"[INFO] Uploaded {original_name} as PDF {pdf.id} ({pdf.metadata.pages} pages)")
        return pdf

    def list_pdfs(self) -> List[PdfDocument]:
        return self.pdf_service.find_all()

    def get_pdf(self, pdf_id: str) -> PdfDocument:
        return self.pdf_service.find_one(pdf_id)

    def delete_pdf(self, pdf_id: str) :
        self.pdf_service.remove(pdf_id)

    def build_index(self, pdf_id: str) -> VectorIndex:
        self.pdf_service.find_one(pdf_id)
        return self.vector_store.build(pdf_id)

    def delete_index(self, pdf_id: str) :
        self.vector_store.delete(pdf_id)

    # Workflows

    def create_workflow(self, data: WorkflowCreate) -> Workflow:
        return self.store.workflows.create(data.model_dump())

    def list_workflows(self) -> List[Workflow]:
        return self.store.workflows.list()

    def get_workflow(self, workflow_id: str) -> Workflow:
        workflow = self.store.workflows.get(workflow_id)
        if workflow is None:
            raise NotFoundError("Workflow", workflow_id)
        return workflow

    def update_workflow(self, workflow_id: str, data: WorkflowUpdate) -> Workflow:
        updated = self.store.workflows.update(
            workflow_id, data.model_dump(exclude_unset=True)
        )
        if updated is None:
            raise NotFoundError("Workflow", workflow_id)
        return updated

    def delete_workflow(self, workflow_id: str) :
        if not self.store.workflows.delete(workflow_id):
            raise NotFoundError("Workflow", workflow_id)

    def execute_workflow(
        self, workflow_id: str, request: ExecuteWorkflowRequest | None = None
    ) -> ExecuteWorkflowResponse:
        """
        Run the workflow and record the answer on it.
        The stored workflow is only touched when the run succeeds.
        """
        request = request or ExecuteWorkflowRequest()
        workflow = self.get_workflow(workflow_id)

        result = self.engine.run(
            workflow,
            user_query=request.user_query,
            additional_context=request.additional_context,
        )

        updated = self.store.workflows.update(
            workflow.id, {"is_executed": True, "last_execution_result": result}
        )
        if updated is None:
            raise NotFoundError("Workflow", workflow.id)
        return ExecuteWorkflowResponse(result=result, workflow=updated)
