"""
Tailoring endpoints: the three-stage pipeline, job search pagination and
HTML -> PDF export.
"""
import asyncio
import json
import logging
from typing import Optional

from fastapi import APIRouter, Body, HTTPException, Request
from fastapi.responses import HTMLResponse, Response

from .. import config
from ..agents.orchestrator import PipelineOrchestrator
from ..ai_services import get_ai_service
from ..errors import TailorError, ValidationError
from ..job_search import get_job_search_client
from ..pdf_render import PDF_FILENAME, render_pdf_from_html, render_resume_html
from ..schemas import GeneratePdfRequest, ProcessRequest, ProcessResponse, ResumeDocument

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api", tags=["tailor"])


async def _read_process_input(request: Request):
    """Accept multipart/form-data (with optional resumeFile) or a JSON body."""
    content_type = request.headers.get("content-type", "")
    if content_type.startswith("application/json"):
        try:
            body = ProcessRequest.model_validate(await request.json())
        except (json.JSONDecodeError, ValueError):
            raise HTTPException(400, "Request body must be a JSON object.")
        return body.jobDescription, body.resumeText, None

    form = await request.form()
    job_description = form.get("jobDescription")
    resume_text = form.get("resumeText")
    upload = form.get("resumeFile")
    resume_file: Optional[bytes] = None
    # Browsers send an empty string when no file was picked
    if upload is not None and not isinstance(upload, str):
        resume_file = await upload.read()
    return (
        job_description if isinstance(job_description, str) else None,
        resume_text if isinstance(resume_text, str) else None,
        resume_file,
    )


@router.post("/process", response_model=ProcessResponse)
async def process(request: Request):
    """Extract, plan and rewrite a resume for a job description."""
    job_description, resume_text, resume_file = await _read_process_input(request)

    orchestrator = PipelineOrchestrator(
        get_ai_service(),
        job_search=get_job_search_client(),
        strict_alignment=config.strict_experience_alignment(),
    )
    try:
        return await orchestrator.run(job_description, resume_text=resume_text, resume_file=resume_file)
    except ValidationError as e:
        raise HTTPException(400, e.public_message)
    except TailorError as e:
        logger.error(f"Processing error in stage {e.stage or 'unknown'}: {e.message}")
        raise HTTPException(500, e.public_message)


@router.get("/search-jobs")
async def search_jobs(query: Optional[str] = None, page: Optional[str] = None):
    """Re-run a job search with the query returned by /process, one page at a time."""
    if not query or not page:
        raise HTTPException(400, "Query and page are required.")
    try:
        page_number = int(page)
    except ValueError:
        raise HTTPException(400, "Page must be a positive integer.")
    if page_number < 1:
        raise HTTPException(400, "Page must be a positive integer.")

    client = get_job_search_client()
    return await client.search_or_empty(query, page_number)


@router.post("/generate-pdf")
async def generate_pdf(body: GeneratePdfRequest = Body(...)):
    if not body.htmlContent or not body.htmlContent.strip():
        raise HTTPException(400, "htmlContent is required.")
    try:
        pdf_bytes = await asyncio.to_thread(render_pdf_from_html, body.htmlContent)
    except TailorError as e:
        logger.error(f"PDF generation error: {e.message}")
        raise HTTPException(500, "Failed to generate PDF.")
    return Response(
        content=pdf_bytes,
        media_type="application/pdf",
        headers={"Content-Disposition": f"attachment; filename={PDF_FILENAME}"},
    )


@router.post("/render-resume", response_class=HTMLResponse)
def render_resume(resume: ResumeDocument):
    """Printable HTML for a (tailored) resume; feed it to /generate-pdf."""
    return HTMLResponse(render_resume_html(resume.model_dump()))
