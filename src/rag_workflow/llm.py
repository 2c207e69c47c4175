from __future__ import annotations
from concurrent.futures import ThreadPoolExecutor
from typing import List

from langchain_core.prompts import ChatPromptTemplate
from langchain_ollama import ChatOllama, OllamaEmbeddings
from langchain_openai import ChatOpenAI, OpenAIEmbeddings

from .config import settings


DEBUG_LLM = True


def _debug(msg: str) :
    if DEBUG_LLM:
        print(f"[LLM] {msg}", flush=True)


def mask_secret(secret: str | None) -> str:
    if not secret:
        return "Not set"
    return secret[:10] + "..."


def error_status(error: Exception) -> int | None:
    """HTTP-ish status carried by provider exceptions (openai, ollama, httpx)."""
    for attr in ("status_code", "status"):
        status = getattr(error, attr, None)
        if isinstance(status, int):
            return status
    response = getattr(error, "response", None)
    status = getattr(response, "status_code", None)
    return status if isinstance(status, int) else None


def is_quota_error(error: Exception) -> bool:
    return error_status(error) == 429 or "quota" in str(error).lower()


def is_fallback_embedding(vector: List[float]) -> bool:
    return all(v == 0 for v in vector)


class LLMClient:
    """
    Gateway to the chat and embedding models.

    Both calls absorb provider failures: `complete` always returns text (a
    fallback explanation when the model is unavailable) and `embed` returns
    an all-zero vector, which callers detect with `is_fallback_embedding`.
    Nothing is retried.
    """

    def __init__(
        self,
        provider: str | None = None,
        chat_model: str | None = None,
        embedding_model: str | None = None,
        temperature: float | None = None,
    ):
        self.provider = provider or settings.llm_provider
        self.dimension = settings.embedding_dimension
        temperature = settings.llm_temperature if temperature is None else temperature

        if self.provider == "openai":
            self.api_key = settings.openai_api_key
            self.chat = ChatOpenAI(
                model=chat_model or settings.openai_chat_model,
                temperature=temperature,
                max_tokens=settings.llm_max_tokens,
                api_key=self.api_key,
                max_retries=0,
            )
            self.embeddings = OpenAIEmbeddings(
                model=embedding_model or settings.openai_embedding_model,
                api_key=self.api_key,
                max_retries=0,
            )
        elif self.provider == "ollama":
            self.api_key = None
            self.chat = ChatOllama(
                model=chat_model or settings.ollama_chat_model,
                temperature=temperature,
                num_predict=settings.llm_max_tokens,
                base_url=settings.ollama_base_url,
            )
            self.embeddings = OllamaEmbeddings(
                model=embedding_model or settings.ollama_embedding_model,
                base_url=settings.ollama_base_url,
            )
        else:
            raise ValueError(f"Unsupported provider {self.provider}")

        self.prompt = ChatPromptTemplate.from_messages([("user", "{input}")])

    def masked_api_key(self) :
        return mask_secret(self.api_key)

    # Completion

    def complete(self, prompt: str) -> str:
        _debug(f"Provider: {self.provider}, API key: {self.masked_api_key()}")
        try:
            chain = self.prompt | self.chat
            resp = chain.invoke({"input": prompt})
            content = getattr(resp, "content", resp)
            return content or "No response generated"
        except Exception as e:
            print(f"[WARN] Completion failed (status={error_status(e)}): {e}")
            return self._fallback_completion(e)

    def _fallback_completion(self, error: Exception) -> str:
        status = error_status(error)
        if is_quota_error(error):
            return (
                "Fallback response (model quota exceeded):\n\n"
                "The workflow ran and the relevant document content was collected, "
                "but the language model refused the request because the account "
                "quota is exhausted, so no generated answer is available.\n\n"
                "To restore generated answers:\n"
                "1. Check the usage and billing of your model provider account\n"
                "2. Add credits or raise the quota\n"
                "3. Update the API key in your .env file if you create a new one\n\n"
                f"Current API key: {self.masked_api_key()}"
            )
        if status is not None and 400 <= status < 500:
            return (
                "Fallback response (model request failed):\n\n"
                f"The language model rejected the request with status {status}.\n\n"
                "- The document was processed successfully\n"
                "- Its content was extracted and is available for analysis\n"
                "- The workflow ran, but the answer could not be generated\n\n"
                "Please check the model configuration and try again."
            )
        return (
            "Fallback response:\n\n"
            "The workflow ran, but an unexpected error prevented the language "
            "model from generating an answer.\n\n"
            "Please check the configuration and try again."
        )

    # Embeddings

    def zero_vector(self) -> List[float]:
        return [0.0] * self.dimension

    def embed(self, text: str) -> List[float]:
        try:
            vector = self.embeddings.embed_query(text)
        except Exception as e:
            reason = "quota exceeded" if is_quota_error(e) else "API error"
            print(f"[WARN] Using fallback embedding ({reason}): {e}")
            return self.zero_vector()
        if not vector:
            print("[WARN] Using fallback embedding (empty response)")
            return self.zero_vector()
        return list(vector)

    def embed_texts(self, texts: List[str], max_concurrency: int | None = None) -> List[List[float]]:
        """Embed each text independently; results stay aligned with `texts`."""
        if not texts:
            return []
        workers = max(1, max_concurrency or settings.embedding_max_concurrency)
        with ThreadPoolExecutor(max_workers=min(workers, len(texts))) as pool:
            return list(pool.map(self.embed, texts))
