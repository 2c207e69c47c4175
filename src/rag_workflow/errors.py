from __future__ import annotations


class WorkflowStructureError(ValueError):
    """Raised when a workflow graph cannot be executed as drawn."""


class WorkflowProcessingError(ValueError):
    """Unexpected failure while a RAG node was preparing its context."""


class PdfUploadError(ValueError):
    """Rejected upload: wrong mime type, too large, or unreadable bytes."""


class NotFoundError(LookupError):
    def __init__(self, kind: str, item_id: str):
        super().__init__(f"{kind} with ID {item_id} not found")
        self.kind = kind
        self.item_id = item_id


class RetrievalError(RuntimeError):
    """Vector index could not be built, loaded or searched."""
