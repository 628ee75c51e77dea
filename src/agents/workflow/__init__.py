from .state import WorkflowResult, WorkflowState
from .graph import WorkflowGraph, WorkflowNode, build_news_image_graph
from .steps import NewsImageSteps, parse_analysis
from .workflow_orchestrator import NewsImageWorkflow

__all__ = [
    "WorkflowResult",
    "WorkflowState",
    "WorkflowGraph",
    "WorkflowNode",
    "build_news_image_graph",
    "NewsImageSteps",
    "parse_analysis",
    "NewsImageWorkflow",
]
