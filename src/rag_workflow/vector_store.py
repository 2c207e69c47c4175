from __future__ import annotations
from pathlib import Path
from typing import List
import math
import os
import tempfile

from .config import settings
from .errors import RetrievalError
from .llm import LLMClient, is_fallback_embedding
from .pdf_service import PdfService
from .schemas import VectorIndex


DEBUG_VECTOR = True


def _debug(msg: str) :
    if DEBUG_VECTOR:
        print(f"[VECTOR] {msg}", flush=True)


def cosine_similarity(vec_a: List[float], vec_b: List[float]) -> float:
    if not vec_a or not vec_b or len(vec_a) != len(vec_b):
        return 0.0
    dot = sum(a * b for a, b in zip(vec_a, vec_b))
    norm_a = math.sqrt(sum(a * a for a in vec_a))
    norm_b = math.sqrt(sum(b * b for b in vec_b))
    denom = norm_a * norm_b
    if denom == 0:
        return 0.0
    return dot / denom


class VectorStore:
    """
    Per-document similarity index kept as one JSON file per PDF.
    Search is a linear cosine scan over the stored chunk vectors.
    """

    def __init__(
        self,
        pdf_service: PdfService,
        llm_client: LLMClient,
        index_dir: Path | None = None,
    ):
        self.pdf_service = pdf_service
        self.llm = llm_client
        self.index_dir = Path(index_dir or settings.vector_index_dir)
        self.index_dir.mkdir(parents=True, exist_ok=True)

    def index_path(self, pdf_id: str) -> Path:
        return self.index_dir / f"{pdf_id}.json"

    def has_index(self, pdf_id: str) -> bool:
        return self.index_path(pdf_id).exists()

    # Persistence

    def _save(self, index: VectorIndex) -> Path:
        path = self.index_path(index.id)
        fd, tmp_name = tempfile.mkstemp(dir=self.index_dir, suffix=".tmp")
        try:
            with os.fdopen(fd, "w", encoding="utf-8") as fh:
                fh.write(index.model_dump_json(by_alias=True))
            os.replace(tmp_name, path)
        except BaseException:
            Path(tmp_name).unlink(missing_ok=True)
            raise
        return path

    def build(self, pdf_id: str) -> VectorIndex:
        """
        Chunk the document, embed at most `max_index_chunks` chunks and
        persist the result, replacing any previous index for the PDF.
        """
        try:
            chunks = self.pdf_service.get_chunks(
                pdf_id,
                chunk_size=settings.index_chunk_size,
                overlap=settings.index_chunk_overlap,
            )
            limited = chunks[: settings.max_index_chunks]
            _debug(f"Embedding {len(limited)}/{len(chunks)} chunks for PDF {pdf_id}")
            vectors = self.llm.embed_texts(limited)

            index = VectorIndex(
                id=pdf_id,
                texts=limited,
                vectors=vectors,
                chunk_size=settings.index_chunk_size,
                overlap=settings.index_chunk_overlap,
            )
            path = self._save(index)
            self.pdf_service.mark_as_indexed(pdf_id, str(path))
        except Exception as e:
            print(f"[WARN] Failed to create vector index for {pdf_id}: {e}")
            raise RetrievalError(f"Failed to create index for PDF {pdf_id}") from e

        _debug(f"Index for PDF {pdf_id} written to {path}")
        return index

    def load(self, pdf_id: str) -> VectorIndex:
        """Read the stored index, building it first if it does not exist yet."""
        path = self.index_path(pdf_id)
        if not path.exists():
            return self.build(pdf_id)
        try:
            index = VectorIndex.model_validate_json(path.read_text(encoding="utf-8"))
        except Exception as e:
            raise RetrievalError(f"Failed to load index for PDF {pdf_id}: {e}") from e
        if len(index.texts) != len(index.vectors):
            raise RetrievalError(f"Corrupt index for PDF {pdf_id}: texts and vectors differ in length")
        return index

    def search(self, pdf_id: str, query: str, k: int | None = None) -> List[str]:
        k = settings.retrieval_top_k if k is None else k
        index = self.load(pdf_id)

        query_embedding = self.llm.embed(query)
        if is_fallback_embedding(query_embedding):
            print("[WARN] Using fallback search: query embedding unavailable")
            return index.texts[:k]

        scored = [
            (cosine_similarity(query_embedding, vector), i)
            for i, vector in enumerate(index.vectors)
        ]
        # sorted() is stable, so equal scores keep storage order
        scored = sorted(scored, key=lambda item: item[0], reverse=True)
        return [index.texts[i] for _, i in scored[:k]]

    def delete(self, pdf_id: str) :
        self.index_path(pdf_id).unlink(missing_ok=True)
