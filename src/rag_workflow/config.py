from __future__ import annotations
from pydantic_settings import BaseSettings
from pathlib import Path


class Settings(BaseSettings):
    # Model provider: "openai" or "ollama"
    llm_provider: str = "openai"
    llm_temperature: float = 0.7
    llm_max_tokens: int = 1000

    # OpenAI configuration
    openai_api_key: str | None = None
    openai_chat_model: str = "gpt-4o-mini"
    openai_embedding_model: str = "text-embedding-ada-002"

    # Ollama configuration
    ollama_base_url: str = "http://localhost:11434"
    ollama_chat_model: str = "llama3"
    ollama_embedding_model: str = "nomic-embed-text"

    # Must match the embedding model's output size
    embedding_dimension: int = 1536
    embedding_max_concurrency: int = 4

    # Chunking
    max_content_length: int = 10_000
    max_chunks: int = 20
    rag_chunk_size: int = 300
    rag_chunk_overlap: int = 50

    # Vector index
    vector_index_dir: Path = Path("vector_indices")
    index_chunk_size: int = 200
    index_chunk_overlap: int = 30
    max_index_chunks: int = 10
    retrieval_top_k: int = 3
    fallback_context_chars: int = 2_000

    # Uploads
    max_upload_bytes: int = 10 * 1024 * 1024
    allowed_mime_type: str = "application/pdf"

    # Execution
    default_user_query: str = "Please process this workflow"

    class Config:
        env_file = ".env"


settings = Settings()
