from __future__ import annotations
from dataclasses import dataclass
from io import BytesIO
from typing import List

from pypdf import PdfReader

from .config import settings
from .errors import PdfUploadError
from .schemas import PdfMetadata


DEBUG_INGESTION = True


def _debug(msg: str) :
    if DEBUG_INGESTION:
        print(f"[INGEST] {msg}", flush=True)


@dataclass
class PdfExtraction:
    text: str
    pages: int
    metadata: PdfMetadata


def _info_field(info, name: str) -> str:
    if info is None:
        return ""
    value = info.get(f"/{name}")
    return str(value).strip() if value else ""


def extract_pdf(data: bytes) -> PdfExtraction:
    """
    Parse raw PDF bytes into plain text plus document info.
    Pages are joined with newlines; missing info fields become empty strings.
    """
    try:
        reader = PdfReader(BytesIO(data))
        texts = []
        for page_num, page in enumerate(reader.pages, start=1):
            texts.append(page.extract_text() or "")
            if page_num % 10 == 0:
                _debug(f"  Parsed {page_num} pages")
        info = reader.metadata
    except Exception as e:
        raise PdfUploadError(f"Failed to parse PDF: {e}") from e

    raw_keywords = _info_field(info, "Keywords")
    keywords = [k.strip() for k in raw_keywords.split(",") if k.strip()]

    metadata = PdfMetadata(
        pages=len(texts),
        title=_info_field(info, "Title"),
        author=_info_field(info, "Author"),
        subject=_info_field(info, "Subject"),
        keywords=keywords,
    )
    text = "\n".join(texts)
    _debug(f"Extracted {len(text)} characters from {metadata.pages} pages")
    return PdfExtraction(text=text, pages=metadata.pages, metadata=metadata)


def chunk_text(
    text: str,
    chunk_size: int,
    overlap: int,
    max_content_length: int | None = None,
    max_chunks: int | None = None,
) -> List[str]:
    """
    Fixed-size character windows where consecutive chunks share `overlap`
    characters. Text past `max_content_length` is dropped, and at most
    `max_chunks` windows are produced. The chunk cap is also the only
    termination guarantee when overlap >= chunk_size.
    """
    if max_content_length is None:
        max_content_length = settings.max_content_length
    if max_chunks is None:
        max_chunks = settings.max_chunks

    if len(text) > max_content_length:
        _debug(f"Text too large ({len(text)} chars); truncating to {max_content_length}")
        text = text[:max_content_length]

    chunks: List[str] = []
    start = 0
    while start < len(text) and len(chunks) < max_chunks:
        end = min(start + chunk_size, len(text))
        chunks.append(text[start:end])
        if end == len(text):
            break
        start = max(end - overlap, 0)

    return chunks
