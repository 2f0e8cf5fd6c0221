"""
Configuration settings for the resume tailor backend.

Everything is read from the environment (optionally seeded from a .env file).
Values are looked up at call time so tests can monkeypatch the environment.
"""
import os
import logging
from typing import List, Optional

from dotenv import load_dotenv

load_dotenv()

DEFAULT_MODEL = "gemini-2.5-flash"
DEFAULT_BASE_URLS = {
    "gemini": "https://generativelanguage.googleapis.com/v1beta/openai",
    "deepseek": "https://api.deepseek.com",
    "openai": "https://api.openai.com/v1",
}
DEFAULT_SEARCH_HOST = "jsearch.p.rapidapi.com"
DEFAULT_SEARCH_URL = "https://jsearch.p.rapidapi.com/search"
# Sensible default for local dev (Vite 5173, CRA/Next.js 3000)
DEFAULT_CORS_ORIGINS = ["http://localhost:5173", "http://localhost:3000"]


def _float_env(name: str, default: float) -> float:
    raw = os.getenv(name)
    if not raw:
        return default
    try:
        return float(raw)
    except ValueError:
        logging.getLogger(__name__).warning("Ignoring non-numeric %s=%r", name, raw)
        return default


def default_model() -> str:
    return os.getenv("DEFAULT_AI_MODEL") or DEFAULT_MODEL


def vendor_for_model(model: str) -> str:
    """Map a model name onto the vendor whose endpoint serves it."""
    name = (model or "").lower()
    if "gemini" in name:
        return "gemini"
    if "deepseek" in name:
        return "deepseek"
    return "openai"


def base_url_for(vendor: str) -> str:
    env_name = f"{vendor.upper()}_BASE_URL"
    return (os.getenv(env_name) or DEFAULT_BASE_URLS[vendor]).rstrip("/")


def api_key_for(vendor: str) -> Optional[str]:
    return os.getenv(f"{vendor.upper()}_API_KEY") or None


def llm_timeout() -> float:
    return _float_env("LLM_TIMEOUT_SECONDS", 60.0)


def llm_temperature() -> float:
    return _float_env("LLM_TEMPERATURE", 0.3)


def search_api_key() -> Optional[str]:
    return os.getenv("SEARCH_API_KEY") or None


def search_api_host() -> str:
    return os.getenv("SEARCH_API_HOST") or DEFAULT_SEARCH_HOST


def search_api_url() -> str:
    return os.getenv("SEARCH_API_URL") or DEFAULT_SEARCH_URL


def cors_origins() -> List[str]:
    origins_env = os.getenv("CORS_ORIGINS")
    origins = [o.strip() for o in (origins_env or "").split(",") if o.strip()]
    return origins or list(DEFAULT_CORS_ORIGINS)


def strict_experience_alignment() -> bool:
    return (os.getenv("STRICT_EXPERIENCE_ALIGNMENT") or "").strip().lower() in {"1", "true", "yes", "on"}


def configure_logging() -> None:
    level = (os.getenv("LOG_LEVEL") or "INFO").upper()
    logging.basicConfig(
        level=getattr(logging, level, logging.INFO),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )
    # pdfminer is chatty about malformed CropBoxes
    logging.getLogger("pdfminer").setLevel(logging.ERROR)
    logging.getLogger("pdfplumber").setLevel(logging.ERROR)
