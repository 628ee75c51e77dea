"""
Step graph for the news-to-image workflow.

The graph is an explicit finite-state machine. Each working node may carry
an unconditional edge and a conditional router; when both exist the router
decides. The declared unconditional edges point backwards
(analyze_news -> fetch_news, create_image_prompt -> analyze_news) while the
routers move forwards, so in practice those backward edges are never taken.
They stay declared so the topology can be inspected and tested as-is.
"""

from enum import Enum
from typing import Awaitable, Callable, Dict, List, Optional, Tuple

import structlog

from .state import WorkflowState
from ...exceptions import WorkflowError

logger = structlog.get_logger(__name__)

StepFn = Callable[[WorkflowState], Awaitable[WorkflowState]]
RouterFn = Callable[[WorkflowState], str]


class WorkflowNode(str, Enum):
    START = "__start__"
    FETCH_NEWS = "fetch_news"
    ANALYZE_NEWS = "analyze_news"
    CREATE_IMAGE_PROMPT = "create_image_prompt"
    GENERATE_IMAGE = "generate_image"
    DONE = "done"
    FAILED = "failed"

    @property
    def is_terminal(self) -> bool:
        return self in (WorkflowNode.DONE, WorkflowNode.FAILED)


CONTINUE = "continue"
END = "end"


def route_on_error(state: WorkflowState) -> str:
    return END if state.failed else CONTINUE


class WorkflowGraph:
    def __init__(self, max_transitions: int = 20):
        self.nodes: Dict[WorkflowNode, StepFn] = {}
        self.edges: Dict[WorkflowNode, WorkflowNode] = {}
        self.conditional_edges: Dict[WorkflowNode, Tuple[RouterFn, Dict[str, WorkflowNode]]] = {}
        self.max_transitions = max_transitions

    def add_node(self, node: WorkflowNode, step: StepFn) -> None:
        if node == WorkflowNode.START or node.is_terminal:
            raise ValueError(f"{node.value} cannot hold a step")
        self.nodes[node] = step

    def add_edge(self, source: WorkflowNode, target: WorkflowNode) -> None:
        self.edges[source] = target

    def add_conditional_edges(self, source: WorkflowNode, router: RouterFn, mapping: Dict[str, WorkflowNode]) -> None:
        self.conditional_edges[source] = (router, dict(mapping))

    def transition(self, node: WorkflowNode, state: WorkflowState) -> WorkflowNode:
        """Next node after `node` has produced `state`. Conditional routing wins over the plain edge."""
        if node.is_terminal:
            raise WorkflowError(f"No transition out of terminal node {node.value}")

        if node in self.conditional_edges:
            router, mapping = self.conditional_edges[node]
            route = router(state)
            if route not in mapping:
                raise WorkflowError(f"Router for {node.value} returned unknown route {route!r}")
            return mapping[route]

        if node in self.edges:
            return self.edges[node]

        raise WorkflowError(f"Node {node.value} has no outgoing edge")

    def backward_edges(self) -> List[Tuple[WorkflowNode, WorkflowNode]]:
        order = list(WorkflowNode)
        return [
            (source, target) for source, target in self.edges.items()
            if not target.is_terminal and order.index(target) < order.index(source)
        ]

    async def execute(self, state: WorkflowState, trace: Optional[List[WorkflowNode]] = None) -> Tuple[WorkflowNode, WorkflowState]:
        """Walk the graph from START until a terminal node; return (terminal node, final state)."""
        node = self.transition(WorkflowNode.START, state)
        transitions = 0

        while not node.is_terminal:
            transitions += 1
            if transitions > self.max_transitions:
                raise WorkflowError(f"Workflow exceeded {self.max_transitions} transitions")

            if trace is not None:
                trace.append(node)

            step = self.nodes.get(node)
            if step is None:
                raise WorkflowError(f"Node {node.value} has no step registered")

            logger.debug("workflow_node_started", node=node.value)
            state = await step(state)
            node = self.transition(node, state)

        return node, state


def build_news_image_graph(steps) -> WorkflowGraph:
    graph = WorkflowGraph()

    graph.add_node(WorkflowNode.FETCH_NEWS, steps.fetch_news)
    graph.add_node(WorkflowNode.ANALYZE_NEWS, steps.analyze_news)
    graph.add_node(WorkflowNode.CREATE_IMAGE_PROMPT, steps.create_image_prompt)
    graph.add_node(WorkflowNode.GENERATE_IMAGE, steps.generate_image)

    graph.add_edge(WorkflowNode.START, WorkflowNode.FETCH_NEWS)
    graph.add_edge(WorkflowNode.ANALYZE_NEWS, WorkflowNode.FETCH_NEWS)
    graph.add_edge(WorkflowNode.CREATE_IMAGE_PROMPT, WorkflowNode.ANALYZE_NEWS)
    graph.add_edge(WorkflowNode.GENERATE_IMAGE, WorkflowNode.DONE)

    graph.add_conditional_edges(
        WorkflowNode.FETCH_NEWS,
        route_on_error,
        {CONTINUE: WorkflowNode.ANALYZE_NEWS, END: WorkflowNode.FAILED}
    )
    graph.add_conditional_edges(
        WorkflowNode.ANALYZE_NEWS,
        route_on_error,
        {CONTINUE: WorkflowNode.CREATE_IMAGE_PROMPT, END: WorkflowNode.FAILED}
    )
    graph.add_conditional_edges(
        WorkflowNode.CREATE_IMAGE_PROMPT,
        route_on_error,
        {CONTINUE: WorkflowNode.GENERATE_IMAGE, END: WorkflowNode.FAILED}
    )

    return graph
