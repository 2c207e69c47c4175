# src/main_run_workflow.py

from __future__ import annotations
import argparse
from pathlib import Path

from rag_workflow.schemas import (
    ExecuteWorkflowRequest,
    InputNode,
    InputNodeData,
    OutputNode,
    RagNode,
    RagNodeData,
    WorkflowCreate,
    WorkflowEdge,
)
from rag_workflow.service import WorkflowRAGService


def build_default_workflow(pdf_id: str, question: str | None) -> WorkflowCreate:
    return WorkflowCreate(
        name="CLI workflow",
        description="Input -> RAG -> Output",
        nodes=[
            InputNode(id="input", data=InputNodeData(label="Question", content=question)),
            RagNode(id="rag", data=RagNodeData(label="PDF", pdf_id=pdf_id)),
            OutputNode(id="output"),
        ],
        edges=[
            WorkflowEdge(id="e1", source="input", target="rag"),
            WorkflowEdge(id="e2", source="rag", target="output"),
        ],
    )


def main():
    """
    Answer a question about a local PDF:
    - Upload and parse the PDF
    - Build an Input -> RAG -> Output workflow
    - Execute it and print the answer
    """
    parser = argparse.ArgumentParser(description="Run a RAG workflow over a PDF")
    parser.add_argument("pdf", type=Path, help="path to a PDF file")
    parser.add_argument("question", nargs="?", default=None)
    args = parser.parse_args()

    service = WorkflowRAGService()
    pdf = service.upload_pdf(args.pdf.name, "application/pdf", args.pdf.read_bytes())
    workflow = service.create_workflow(build_default_workflow(pdf.id, args.question))

    response = service.execute_workflow(
        workflow.id, ExecuteWorkflowRequest(user_query=args.question)
    )

    print("Workflow executed")
    print(f"- PDF      : {pdf.original_name} ({pdf.metadata.pages} pages)")
    print(f"- Workflow : {workflow.id}")
    print("- Answer:")
    print(response.result)


if __name__ == "__main__":
    main()
