"""Shared fixtures: an offline model gateway and a service wired to it."""

from io import BytesIO

import pytest
from pypdf import PdfWriter

from rag_workflow.service import WorkflowRAGService


KEYWORDS = ("apple", "banana", "cherry")


def keyword_vector(text: str) -> list[float]:
    """Tiny deterministic embedding: one dimension per keyword count."""
    lowered = text.lower()
    return [float(lowered.count(word)) for word in KEYWORDS]


class FakeLLM:
    """Stands in for LLMClient without any network access."""

    def __init__(self, answer="Generated answer", embed_fn=keyword_vector):
        self.answer = answer
        self.embed_fn = embed_fn
        self.prompts: list[str] = []
        self.embedded: list[str] = []

    def complete(self, prompt: str) -> str:
        self.prompts.append(prompt)
        return self.answer

    def embed(self, text: str) -> list[float]:
        self.embedded.append(text)
        return self.embed_fn(text)

    def embed_texts(self, texts: list[str]) -> list[list[float]]:
        return [self.embed(t) for t in texts]


@pytest.fixture
def fake_llm_cls():
    return FakeLLM


@pytest.fixture
def fake_llm():
    return FakeLLM()


@pytest.fixture
def make_service(tmp_path):
    """Build a service around any gateway, with indices under tmp_path."""

    def _make(llm=None):
        return WorkflowRAGService(llm=llm or FakeLLM(), index_dir=tmp_path / "indices")

    return _make


@pytest.fixture
def service(make_service, fake_llm):
    return make_service(fake_llm)


@pytest.fixture
def add_pdf():
    """Insert an already-parsed PDF record, skipping the upload path."""

    def _add(service, content: str, name: str = "doc.pdf"):
        return service.store.pdfs.create(
            {
                "filename": f"stored-{name}",
                "original_name": name,
                "mime_type": "application/pdf",
                "size": len(content),
                "content": content,
                "metadata": {"pages": 1},
            }
        )

    return _add


@pytest.fixture
def pdf_bytes():
    writer = PdfWriter()
    writer.add_blank_page(width=200, height=200)
    writer.add_metadata(
        {
            "/Title": "Quarterly Report",
            "/Author": "Finance Team",
            "/Subject": "Revenue",
            "/Keywords": "revenue, q3 ,, growth",
        }
    )
    buf = BytesIO()
    writer.write(buf)
    return buf.getvalue()


def rag_workflow_payload(pdf_id: str | None, content: str | None = "What is X?") -> dict:
    """Input -> RAG -> Output graph in the editor's wire format."""
    return {
        "name": "Ask the PDF",
        "description": "input to rag to output",
        "nodes": [
            {"id": "in", "type": "input", "position": {"x": 0, "y": 0},
             "data": {"label": "Question", "content": content}},
            {"id": "rag", "type": "rag", "position": {"x": 200, "y": 0},
             "data": {"label": "PDF", "pdfId": pdf_id}},
            {"id": "out", "type": "output", "position": {"x": 400, "y": 0},
             "data": {"label": "Answer"}},
        ],
        "edges": [
            {"id": "e1", "source": "in", "target": "rag"},
            {"id": "e2", "source": "rag", "target": "out"},
        ],
    }


@pytest.fixture
def workflow_payload():
    return rag_workflow_payload
