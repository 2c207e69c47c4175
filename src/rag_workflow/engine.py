from __future__ import annotations
from collections import deque
from dataclasses import dataclass
from typing import Dict, List

import networkx as nx

from .config import settings
from .errors import NotFoundError, WorkflowProcessingError, WorkflowStructureError
from .llm import LLMClient
from .pdf_service import PdfService
from .schemas import NodeType, RagNode, Workflow
from .vector_store import VectorStore


DEBUG_WORKFLOW = True


def _debug(msg: str) :
    if DEBUG_WORKFLOW:
        print(f"[WORKFLOW] {msg}", flush=True)


@dataclass
class ExecutionContext:
    user_query: str | None = None
    pdf_context: str | None = None
    additional_context: str | None = None


def build_graph(workflow: Workflow) -> nx.DiGraph:
    graph = nx.DiGraph()
    for node in workflow.nodes:
        graph.add_node(node.id, type=node.type)
    for edge in workflow.edges:
        graph.add_edge(edge.source, edge.target, id=edge.id)
    return graph


class WorkflowEngine:
    """
    Runs an Input -> RAG -> Output workflow.

    Nodes are visited in topological order. Input nodes set the user query,
    RAG nodes collect PDF context, and the first Output node sends the
    assembled prompt to the model and ends the run.
    """

    def __init__(
        self,
        pdf_service: PdfService,
        vector_store: VectorStore,
        llm_client: LLMClient,
    ):
        self.pdf_service = pdf_service
        self.vector_store = vector_store
        self.llm = llm_client

    # Validation

    def validate(self, workflow: Workflow) :
        input_ids = [n.id for n in workflow.nodes if n.type == NodeType.INPUT]
        output_ids = [n.id for n in workflow.nodes if n.type == NodeType.OUTPUT]

        if not input_ids:
            raise WorkflowStructureError("Workflow must have at least one input node")
        if not output_ids:
            raise WorkflowStructureError("Workflow must have at least one output node")

        graph = build_graph(workflow)
        for source in input_ids:
            for target in output_ids:
                if nx.has_path(graph, source, target):
                    return
        raise WorkflowStructureError(
            "Workflow must have a valid path from input to output"
        )

    # Scheduling

    def execution_order(self, workflow: Workflow) -> List[str]:
        """
        Kahn's algorithm. Ties are broken by node declaration order, then by
        edge declaration order. Nodes on a cycle never reach in-degree zero
        and are left out of the result.
        """
        successors: Dict[str, List[str]] = {n.id: [] for n in workflow.nodes}
        in_degree: Dict[str, int] = {n.id: 0 for n in workflow.nodes}

        for edge in workflow.edges:
            successors.setdefault(edge.source, []).append(edge.target)
            in_degree[edge.target] = in_degree.get(edge.target, 0) + 1
            in_degree.setdefault(edge.source, 0)

        queue = deque(node_id for node_id, degree in in_degree.items() if degree == 0)
        order: List[str] = []
        while queue:
            node_id = queue.popleft()
            order.append(node_id)
            for target in successors.get(node_id, []):
                in_degree[target] -= 1
                if in_degree[target] == 0:
                    queue.append(target)
        return order

    # Execution

    def run(
        self,
        workflow: Workflow,
        user_query: str | None = None,
        additional_context: str | None = None,
    ) -> str:
        self.validate(workflow)

        nodes = {n.id: n for n in workflow.nodes}
        order = self.execution_order(workflow)
        context = ExecutionContext(additional_context=additional_context)
        _debug(f"Executing workflow {workflow.id} in order: {order}")

        for node_id in order:
            node = nodes.get(node_id)
            if node is None:
                # edge endpoint that is not a declared node
                continue

            if node.type == NodeType.INPUT:
                context.user_query = (
                    node.data.content or user_query or settings.default_user_query
                )
                _debug(f"Input {node.id}: query set")

            elif node.type == NodeType.RAG:
                context.pdf_context = self._rag_context(node, context)
                _debug(f"RAG {node.id}: {len(context.pdf_context)} chars of context")

            elif node.type == NodeType.OUTPUT:
                _debug(f"Output {node.id}: generating answer")
                return self.llm.complete(self.build_prompt(context))

        message = "No output node found in workflow"
        if not nx.is_directed_acyclic_graph(build_graph(workflow)):
            message += " (the graph contains a cycle, so some nodes never became ready)"
        raise WorkflowStructureError(message)

    def _rag_context(self, node: RagNode, context: ExecutionContext) -> str:
        pdf_id = node.data.pdf_id
        if not pdf_id:
            raise WorkflowStructureError(
                "RAG node must have a PDF selected. Please select a PDF document."
            )

        try:
            content = self.pdf_service.get_content(pdf_id)
            chunks = self.pdf_service.get_chunks(pdf_id)
            if not chunks:
                return content[: settings.fallback_context_chars]

            try:
                relevant = self.vector_store.search(pdf_id, context.user_query or "")
            except Exception as e:
                print(f"[WARN] Vector search failed for PDF {pdf_id}, using raw text: {e}")
                return content[: settings.fallback_context_chars]
            return "\n\n".join(relevant)
        except (NotFoundError, WorkflowStructureError):
            raise
        except Exception as e:
            print(f"[WARN] Failed to process PDF {pdf_id}: {e}")
            raise WorkflowProcessingError(f"Failed to process PDF: {e}") from e

    def build_prompt(self, context: ExecutionContext) -> str:
        prompt = (
            "Based on the following context, please provide a comprehensive "
            "answer to the user's query.\n\n"
            f"User Query: {context.user_query or settings.default_user_query}\n\n"
            f"PDF Context: {context.pdf_context or 'No PDF context available'}\n\n"
        )
        if context.additional_context:
            prompt += f"Additional Context: {context.additional_context}\n\n"
        prompt += (
            "Please provide a detailed and helpful response based on the "
            "information provided."
        )
        return prompt
