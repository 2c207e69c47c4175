from __future__ import annotations
from typing import List
import uuid

from .config import settings
from .errors import NotFoundError, PdfUploadError
from .ingestion import chunk_text, extract_pdf
from .schemas import PdfDocument
from .store import MemoryStore


class PdfService:
    def __init__(self, store: MemoryStore):
        self.store = store

    def upload(
        self,
        original_name: str,
        mime_type: str | None,
        data: bytes | None,
    ) -> PdfDocument:
        if not data:
            raise PdfUploadError("No file uploaded")
        if mime_type != settings.allowed_mime_type:
            raise PdfUploadError("Only PDF files are allowed")
        if len(data) > settings.max_upload_bytes:
            raise PdfUploadError(
                f"File too large: {len(data)} bytes (limit {settings.max_upload_bytes})"
            )

        extraction = extract_pdf(data)
        return self.store.pdfs.create(
            {
                "filename": f"{uuid.uuid4()}.pdf",
                "original_name": original_name,
                "mime_type": mime_type,
                "size": len(data),
                "content": extraction.text,
                "metadata": extraction.metadata,
                "is_indexed": False,
            }
        )

    def find_all(self) -> List[PdfDocument]:
        return self.store.pdfs.list()

    def find_one(self, pdf_id: str) -> PdfDocument:
        pdf = self.store.pdfs.get(pdf_id)
        if pdf is None:
            raise NotFoundError("PDF document", pdf_id)
        return pdf

    def remove(self, pdf_id: str) :
        # The vector index is a separate artifact and is left in place.
        if not self.store.pdfs.delete(pdf_id):
            raise NotFoundError("PDF document", pdf_id)

    def mark_as_indexed(self, pdf_id: str, vector_index_path: str) -> PdfDocument:
        updated = self.store.pdfs.update(
            pdf_id, {"is_indexed": True, "vector_index_path": vector_index_path}
        )
        if updated is None:
            raise NotFoundError("PDF document", pdf_id)
        return updated

    def get_content(self, pdf_id: str) -> str:
        return self.find_one(pdf_id).content

    def get_chunks(
        self,
        pdf_id: str,
        chunk_size: int | None = None,
        overlap: int | None = None,
    ) -> List[str]:
        chunk_size = chunk_size or settings.rag_chunk_size
        overlap = settings.rag_chunk_overlap if overlap is None else overlap
        return chunk_text(self.get_content(pdf_id), chunk_size, overlap)
