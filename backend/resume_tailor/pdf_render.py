from pathlib import Path
import logging

from jinja2 import Environment, FileSystemLoader, select_autoescape
# WeasyPrint is optional at import time; server should still boot without it
try:
    from weasyprint import HTML, CSS  # type: ignore
except Exception:  # pragma: no cover - environment without weasyprint
    HTML = None  # type: ignore
    CSS = None  # type: ignore

from .errors import ExternalServiceError

logger = logging.getLogger(__name__)

PDF_FILENAME = "Tailored-Resume.pdf"
PAGE_CSS = "@page { size: A4; margin: 20px; }"

TEMPLATES_DIR = Path(__file__).resolve().parent / "templates"
env = Environment(
    loader=FileSystemLoader(str(TEMPLATES_DIR)),
    autoescape=select_autoescape(["html"]),
)


def render_resume_html(resume: dict) -> str:
    """Render a (tailored) resume dict into the printable HTML layout."""
    tpl = env.get_template("resume.html")
    return tpl.render(r=resume)


def render_pdf_from_html(html: str) -> bytes:
    if HTML is None:
        # Defer failure until actually attempting to render a PDF
        raise ExternalServiceError("WeasyPrint is not installed; PDF rendering is unavailable")
    try:
        return HTML(string=html, base_url=".").write_pdf(stylesheets=[CSS(string=PAGE_CSS)])
    except Exception as e:
        raise ExternalServiceError(f"PDF rendering failed: {e!r}") from e
