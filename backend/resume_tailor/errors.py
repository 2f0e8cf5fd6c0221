"""Error taxonomy shared by the pipeline, its collaborators and the routes."""
from typing import Optional

GENERIC_FAILURE_MESSAGE = "An error occurred during processing."


class TailorError(Exception):
    """Base class for every failure the tailoring service knows about."""

    status_code = 500

    def __init__(self, message: str, *, stage: Optional[str] = None):
        super().__init__(message)
        self.message = message
        self.stage = stage

    @property
    def public_message(self) -> str:
        return GENERIC_FAILURE_MESSAGE


class ValidationError(TailorError):
    """Required input is missing or unusable. Raised before any external call."""

    status_code = 400

    @property
    def public_message(self) -> str:
        return self.message


class ExternalServiceError(TailorError):
    """Model, text-extraction or rendering collaborator failed."""


class ParseError(TailorError):
    """The model answered, but not with the structured shape we asked for."""

    def __init__(self, message: str, *, raw_excerpt: str = "", stage: Optional[str] = None):
        super().__init__(message, stage=stage)
        self.raw_excerpt = raw_excerpt


class JobSearchError(TailorError):
    """Job search collaborator failed. Never surfaced to the caller."""


class PromptTemplateError(TailorError):
    """A prompt template could not be bound to its values."""
