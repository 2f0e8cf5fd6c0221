"""Three-stage tailoring pipeline: Extractor -> Planner -> Executor.

Each stage builds a prompt, invokes the model once and coerces the answer
into a pydantic model. Stages run strictly in order because each consumes the
previous stage's output. Any stage failure aborts the run; only the job
search at the end is allowed to fail quietly.

One ``PipelineOrchestrator`` serves exactly one request.
"""
import asyncio
import logging
import time
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Callable, Dict, List, Optional, Sequence, Type, TypeVar

from pydantic import BaseModel

from ..errors import ExternalServiceError, ParseError, TailorError, ValidationError
from ..extraction import extract_text_from_pdf, is_pdf_bytes
from ..schemas import (
    Analysis, ProcessResponse, ResumeDocument, StrategicPlan, TailoredResume, TailoredSections
)
from .coercion import coerce_model
from .prompts import build_executor_prompt, build_extractor_prompt, build_planner_prompt

logger = logging.getLogger(__name__)

Model = TypeVar("Model", bound=BaseModel)

DEFAULT_SEARCH_ROLE = "Software Developer"
QUERY_SKILL_COUNT = 5


class PipelineState(str, Enum):
    START = "start"
    EXTRACTOR_RUNNING = "extractor_running"
    PLANNER_RUNNING = "planner_running"
    EXECUTOR_RUNNING = "executor_running"
    ASSEMBLING = "assembling"
    DONE = "done"
    FAILED = "failed"


@dataclass
class StageEvent:
    stage: str
    status: str  # success|failure
    duration_ms: float
    error: Optional[str] = None
    details: Dict[str, Any] = field(default_factory=dict)


StageHook = Callable[[StageEvent], None]


def log_stage_event(event: StageEvent) -> None:
    extra = {"stage": event.stage, "status": event.status, "duration_ms": round(event.duration_ms, 1)}
    if event.status == "success":
        logger.info("stage %s ok in %.1f ms %s", event.stage, event.duration_ms, event.details or "", extra=extra)
    else:
        logger.error("stage %s failed after %.1f ms: %s", event.stage, event.duration_ms, event.error, extra=extra)


def derive_job_search_query(resume: ResumeDocument) -> str:
    """Top-ranked role plus the first few skills, e.g. ``"Backend Engineer Python, Go"``."""
    role = resume.experience[0].role if resume.experience else ""
    skills = ", ".join(resume.skills[:QUERY_SKILL_COUNT])
    return f"{role or DEFAULT_SEARCH_ROLE} {skills}".strip()


def _norm(value: str) -> str:
    return " ".join((value or "").split()).lower()


class PipelineOrchestrator:
    def __init__(
        self,
        ai_service,
        *,
        job_search=None,
        text_extractor: Optional[Callable[[bytes], str]] = None,
        pdf_check: Optional[Callable[[bytes], bool]] = None,
        hooks: Optional[Sequence[StageHook]] = None,
        strict_alignment: bool = False,
    ):
        self.ai_service = ai_service
        self.job_search = job_search
        self.text_extractor = text_extractor or extract_text_from_pdf
        self.pdf_check = pdf_check or is_pdf_bytes
        self.hooks: List[StageHook] = list(hooks) if hooks is not None else [log_stage_event]
        self.strict_alignment = strict_alignment
        self.state = PipelineState.START
        self.history: List[PipelineState] = [PipelineState.START]
        self.events: List[StageEvent] = []

    # ----- state & observability -----

    def _transition(self, state: PipelineState) -> None:
        self.state = state
        self.history.append(state)

    def _emit(self, event: StageEvent) -> None:
        self.events.append(event)
        for hook in self.hooks:
            try:
                hook(event)
            except Exception:
                logger.exception(f"Stage hook {hook!r} raised; ignoring")

    def _fail(self, stage: str, started: float, error: TailorError) -> None:
        if error.stage is None:
            error.stage = stage
        self._emit(StageEvent(stage, "failure", _elapsed_ms(started), error=error.message))
        if self.state is not PipelineState.FAILED:
            self._transition(PipelineState.FAILED)

    # ----- entry point -----

    async def run(
        self,
        job_description: Optional[str],
        resume_text: Optional[str] = None,
        resume_file: Optional[bytes] = None,
        *,
        search_jobs: bool = True,
    ) -> ProcessResponse:
        if self.state is not PipelineState.START:
            raise RuntimeError("PipelineOrchestrator instances run exactly once")
        try:
            return await self._run(job_description, resume_text, resume_file, search_jobs)
        except TailorError:
            if self.state is not PipelineState.FAILED:
                self._transition(PipelineState.FAILED)
            raise

    async def _run(self, job_description, resume_text, resume_file, search_jobs) -> ProcessResponse:
        raw_text = await self._resolve_resume_text(job_description, resume_text, resume_file)

        resume = await self._run_agent(
            PipelineState.EXTRACTOR_RUNNING, "extractor",
            lambda: build_extractor_prompt(raw_text),
            ResumeDocument,
        )
        plan = await self._run_agent(
            PipelineState.PLANNER_RUNNING, "planner",
            lambda: build_planner_prompt(resume, job_description),
            StrategicPlan,
        )
        sections = await self._run_agent(
            PipelineState.EXECUTOR_RUNNING, "executor",
            lambda: build_executor_prompt(resume, plan.rewritePlan),
            TailoredSections,
            verify=lambda s: self._verify_sections(resume, s),
        )

        self._transition(PipelineState.ASSEMBLING)
        tailored = merge_sections(resume, sections)
        query = derive_job_search_query(tailored)
        jobs = await self._search_jobs(query) if search_jobs else []

        self._transition(PipelineState.DONE)
        return ProcessResponse(
            tailoredResume=tailored,
            analysis=Analysis(extractedSkills=plan.extractedSkills, skillGap=plan.skillGap),
            suggestedJobs=jobs,
            jobSearchQuery=query,
        )

    # ----- stages -----

    async def _resolve_resume_text(self, job_description, resume_text, resume_file) -> str:
        if not job_description or not job_description.strip():
            raise ValidationError("Job description is required.")

        if resume_file:
            if not self.pdf_check(resume_file):
                raise ValidationError("Resume file must be a PDF.")
            started = time.perf_counter()
            try:
                text = await asyncio.to_thread(self.text_extractor, resume_file)
            except TailorError as e:
                self._fail("text_extraction", started, e)
                raise
            except Exception as e:
                err = ExternalServiceError(f"Text extraction failed: {e!r}", stage="text_extraction")
                self._fail("text_extraction", started, err)
                raise err from e
            self._emit(StageEvent("text_extraction", "success", _elapsed_ms(started), details={"chars": len(text or "")}))
            if not text or not text.strip():
                raise ValidationError("No text could be extracted from the resume file.")
            return text

        if resume_text and resume_text.strip():
            return resume_text
        raise ValidationError("Resume is required.")

    async def _run_agent(
        self,
        state: PipelineState,
        stage: str,
        build_prompt: Callable[[], str],
        model_cls: Type[Model],
        verify: Optional[Callable[[Model], Dict[str, Any]]] = None,
    ) -> Model:
        self._transition(state)
        started = time.perf_counter()
        try:
            prompt = build_prompt()
            raw = await self.ai_service.generate(prompt)
            value = coerce_model(raw, model_cls)
            details = verify(value) if verify else {}
        except TailorError as e:
            self._fail(stage, started, e)
            raise
        except Exception as e:
            err = ExternalServiceError(f"{stage} stage failed: {e!r}", stage=stage)
            self._fail(stage, started, err)
            raise err from e
        self._emit(StageEvent(stage, "success", _elapsed_ms(started), details=details or {}))
        return value

    def _verify_sections(self, resume: ResumeDocument, sections: TailoredSections) -> Dict[str, Any]:
        expected = len(resume.experience)
        got = len(sections.tailoredExperience)
        if got != expected:
            raise ParseError(f"Executor returned {got} experience entries for {expected} original entries")

        misaligned = [
            i for i, (orig, new) in enumerate(zip(resume.experience, sections.tailoredExperience))
            if _norm(orig.company) != _norm(new.company) or _norm(orig.period) != _norm(new.period)
        ]
        if misaligned:
            if self.strict_alignment:
                raise ParseError(f"Executor changed company/period of experience entries {misaligned}")
            logger.warning(f"Executor changed company/period of experience entries {misaligned}")
        return {"experience_entries": got, "misaligned_entries": misaligned}

    async def _search_jobs(self, query: str) -> List[Dict[str, Any]]:
        if self.job_search is None:
            return []
        started = time.perf_counter()
        try:
            jobs = list(await self.job_search.search(query, 1) or [])
        except Exception as e:
            # Suggested jobs are optional; the tailored resume still goes out
            logger.error(f"Job search failed for query={query!r}: {e}")
            self._emit(StageEvent("job_search", "failure", _elapsed_ms(started), error=str(e)))
            return []
        self._emit(StageEvent("job_search", "success", _elapsed_ms(started), details={"jobs": len(jobs)}))
        return jobs


def merge_sections(resume: ResumeDocument, sections: TailoredSections) -> TailoredResume:
    """Swap in the rewritten summary and experience; keep every other field."""
    return resume.model_copy(
        update={"summary": sections.tailoredSummary, "experience": list(sections.tailoredExperience)},
        deep=True,
    )


def _elapsed_ms(started: float) -> float:
    return (time.perf_counter() - started) * 1000.0
