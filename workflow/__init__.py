"""Workflow package — session store, LangGraph chapter pipeline and controller."""

from workflow.state import NovelStore, ChapterWorkflowState
from workflow.conditions import (
    can_generate,
    can_twist,
    route_entry,
    route_after_rewrite,
    route_after_write,
)
from workflow.callbacks import WorkflowCallback, LoggingCallback
from workflow.graph import build_chapter_graph, run_chapter_pipeline
from workflow.controller import WorkflowController

__all__ = [
    "NovelStore",
    "ChapterWorkflowState",
    "can_generate",
    "can_twist",
    "route_entry",
    "route_after_rewrite",
    "route_after_write",
    "WorkflowCallback",
    "LoggingCallback",
    "build_chapter_graph",
    "run_chapter_pipeline",
    "WorkflowController",
]
