"""Agent stages of the tailoring pipeline.

Prompt templates, response coercion and the orchestrator that sequences the
Extractor, Planner and Executor model calls.
"""

from .coercion import coerce_json, coerce_model, strip_fences
from .orchestrator import PipelineOrchestrator, PipelineState, StageEvent, derive_job_search_query
from .prompts import PromptTemplate

__all__ = [
    "PipelineOrchestrator",
    "PipelineState",
    "PromptTemplate",
    "StageEvent",
    "coerce_json",
    "coerce_model",
    "derive_job_search_query",
    "strip_fences",
]
