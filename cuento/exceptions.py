"""Exception hierarchy for the story PDF pipeline with stage and phase references."""

from typing import Optional


class CuentoError(Exception):
    """
    Base exception for every pipeline failure.

    Attributes:
        message: Error description
        stage: Pipeline stage that failed (e.g., 'validate', 'render'), set by the orchestrator
        original_error: The underlying exception, if any
    """

    def __init__(
        self,
        message: str,
        stage: Optional[str] = None,
        original_error: Optional[BaseException] = None,
    ):
        self.message = message
        self.stage = stage
        self.original_error = original_error
        super().__init__(self._compose())

    def _compose(self) -> str:
        parts = [f"[{self.stage}] {self.message}" if self.stage else self.message]
        if self.original_error is not None:
            parts.append(f"Original error: {self.original_error}")
        return "\n".join(parts)

    def add_stage(self, stage: str) -> "CuentoError":
        """Tag the error with the pipeline stage it escaped from and refresh its message."""
        if self.stage is None:
            self.stage = stage
            self.args = (self._compose(),)
        return self


class ValidationError(CuentoError, ValueError):
    """Raised when a story record is missing required fields or has no chapters."""


class TemplateLoadError(CuentoError):
    """
    Raised when a template file is missing, unreadable, or fails to compile.

    Attributes:
        template_name: Name of the template that could not be loaded
    """

    def __init__(
        self,
        message: str,
        template_name: Optional[str] = None,
        stage: Optional[str] = None,
        original_error: Optional[BaseException] = None,
    ):
        self.template_name = template_name
        super().__init__(message, stage=stage, original_error=original_error)


class RenderError(CuentoError):
    """
    Raised when template evaluation or browser rendering fails.

    Attributes:
        phase: Failing phase ('template', 'launch', 'page', 'navigation', 'fonts', 'pdf')
    """

    def __init__(
        self,
        message: str,
        phase: Optional[str] = None,
        stage: Optional[str] = None,
        original_error: Optional[BaseException] = None,
    ):
        self.phase = phase
        super().__init__(message, stage=stage, original_error=original_error)


class ArtifactWriteError(CuentoError, OSError):
    """Raised when the output directory cannot be created or an artifact cannot be written."""
