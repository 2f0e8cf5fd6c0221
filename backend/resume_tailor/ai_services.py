"""
AI Services Module for the resume tailor.
Sends a single prompt to an OpenAI-compatible chat completions endpoint and
returns the raw text answer. No retries: a failed call fails the request.
"""
from typing import Optional
import httpx
import logging

from . import config
from .errors import ExternalServiceError

logger = logging.getLogger(__name__)

SYSTEM_PROMPT = "You are an expert career advisor and resume specialist. Always provide valid JSON responses."


class AIService:
    """Model invoker routed to Gemini, DeepSeek or any OpenAI-compatible base URL."""

    def __init__(
        self,
        api_key: Optional[str] = None,
        model: Optional[str] = None,
        base_url: Optional[str] = None,
        timeout: Optional[float] = None,
    ):
        self.model = model or config.default_model()
        self.vendor = config.vendor_for_model(self.model)
        self.api_key = api_key or config.api_key_for(self.vendor)
        self.base_url = (base_url or config.base_url_for(self.vendor)).rstrip("/")
        self.timeout = timeout if timeout is not None else config.llm_timeout()
        self.temperature = config.llm_temperature()

    @property
    def is_local(self) -> bool:
        return self.base_url.startswith("http://localhost") or \
            self.base_url.startswith("https://localhost") or \
            "127.0.0.1" in self.base_url or \
            "host.docker.internal" in self.base_url

    async def generate(self, prompt: str) -> str:
        """Invoke the model once and return its raw response text."""
        if not self.api_key and not self.is_local:
            raise ExternalServiceError(f"No API key configured for {self.vendor} model {self.model}")

        headers = {"Content-Type": "application/json"}
        if self.api_key:
            headers["Authorization"] = f"Bearer {self.api_key}"

        payload = {
            "model": self.model,
            "messages": [
                {"role": "system", "content": SYSTEM_PROMPT},
                {"role": "user", "content": prompt}
            ],
            "temperature": self.temperature,
        }

        try:
            async with httpx.AsyncClient(timeout=self.timeout) as client:
                response = await client.post(
                    f"{self.base_url}/chat/completions",
                    headers=headers,
                    json=payload
                )
        except httpx.HTTPError as e:
            raise ExternalServiceError(f"Model call to {self.base_url} failed: {e!r}") from e

        if response.status_code != 200:
            raise ExternalServiceError(f"Model call failed: {response.status_code} {response.text[:500]}")

        try:
            result = response.json()
            message = result["choices"][0]["message"]
        except (ValueError, KeyError, IndexError, TypeError) as e:
            raise ExternalServiceError(f"Unexpected model response body: {e!r}") from e

        content = message.get("content") if isinstance(message, dict) else None
        logger.debug("Model %s answered with %d chars", self.model, len(content or ""))
        # Empty content is left for the coercer to reject as a ParseError
        return content or ""


def get_ai_service(user_api_key: Optional[str] = None, model: Optional[str] = None) -> AIService:
    """Get AI service instance with an explicit key or the configured default"""
    return AIService(api_key=user_api_key, model=model)
