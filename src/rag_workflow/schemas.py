from __future__ import annotations
from datetime import datetime, timezone
from enum import Enum
from typing import Annotated, List, Literal, Union

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel


def utc_now() -> datetime:
    return datetime.now(timezone.utc)


class CamelModel(BaseModel):
    """Snake_case in Python, camelCase on the wire."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


class NodeType(str, Enum):
    INPUT = "input"
    RAG = "rag"
    OUTPUT = "output"


class Position(BaseModel):
    x: float = 0.0
    y: float = 0.0


# Node payloads. Each node kind only declares the fields it reads; anything
# else the editor stores (labels, colours, ...) is kept as extra data.

class InputNodeData(CamelModel):
    model_config = ConfigDict(extra="allow")

    label: str = ""
    content: str | None = None


class RagNodeData(CamelModel):
    model_config = ConfigDict(extra="allow")

    label: str = ""
    pdf_id: str | None = None


class OutputNodeData(CamelModel):
    model_config = ConfigDict(extra="allow")

    label: str = ""


class InputNode(BaseModel):
    id: str
    type: Literal["input"] = "input"
    position: Position = Field(default_factory=Position)
    data: InputNodeData = Field(default_factory=InputNodeData)


class RagNode(BaseModel):
    id: str
    type: Literal["rag"] = "rag"
    position: Position = Field(default_factory=Position)
    data: RagNodeData = Field(default_factory=RagNodeData)


class OutputNode(BaseModel):
    id: str
    type: Literal["output"] = "output"
    position: Position = Field(default_factory=Position)
    data: OutputNodeData = Field(default_factory=OutputNodeData)


WorkflowNode = Annotated[
    Union[InputNode, RagNode, OutputNode], Field(discriminator="type")
]


class WorkflowEdge(CamelModel):
    id: str
    source: str      # node id
    target: str      # node id
    source_handle: str | None = None
    target_handle: str | None = None


class WorkflowCreate(CamelModel):
    name: str
    description: str = ""
    nodes: List[WorkflowNode] = Field(default_factory=list)
    edges: List[WorkflowEdge] = Field(default_factory=list)
    is_executed: bool = False
    last_execution_result: str | None = None


class WorkflowUpdate(CamelModel):
    """Partial update: only fields present in the payload are applied."""

    name: str | None = None
    description: str | None = None
    nodes: List[WorkflowNode] | None = None
    edges: List[WorkflowEdge] | None = None
    is_executed: bool | None = None
    last_execution_result: str | None = None


class Workflow(WorkflowCreate):
    id: str
    created_at: datetime
    updated_at: datetime


class PdfMetadata(CamelModel):
    model_config = ConfigDict(extra="allow")

    pages: int = 0
    title: str = ""
    author: str = ""
    subject: str = ""
    keywords: List[str] = Field(default_factory=list)


class PdfDocument(CamelModel):
    id: str
    filename: str
    original_name: str
    mime_type: str
    size: int
    content: str
    metadata: PdfMetadata
    is_indexed: bool = False
    vector_index_path: str | None = None
    created_at: datetime
    updated_at: datetime


class VectorIndex(CamelModel):
    id: str          # pdf id
    texts: List[str] = Field(default_factory=list)
    vectors: List[List[float]] = Field(default_factory=list)
    chunk_size: int
    overlap: int
    created_at: datetime = Field(default_factory=utc_now)


class ExecuteWorkflowRequest(CamelModel):
    user_query: str | None = None
    additional_context: str | None = None


class ExecuteWorkflowResponse(CamelModel):
    result: str
    workflow: Workflow
