from typing import Optional


class DocGuardError(RuntimeError):
    """
    Base class for every target-scoped failure.
    Carries the target and the pipeline stage so a diagnostic can say where it broke.
    """
    stage: str = "pipeline"

    def __init__(self, message: str, target: Optional[str] = None, stage: Optional[str] = None):
        super().__init__(message)
        self.message = message
        self.target = target
        if stage is not None:
            self.stage = stage

    def __str__(self) -> str:
        return self.message


class MissingInputError(DocGuardError):
    """Policy, source or target could not be read."""
    stage = "read"


class EncodingError(DocGuardError):
    """A blob cannot be represented in the JSON transport format."""
    stage = "encode"


class RenderError(DocGuardError):
    """No template available, or the template failed to render."""
    stage = "render"


class GenerationError(DocGuardError):
    """The generation service failed or returned no content."""
    stage = "generate"


class ResidualFenceError(DocGuardError):
    stage = "sanitize"

    def __init__(self, message: str, line_number: int, target: Optional[str] = None):
        super().__init__(message, target=target)
        self.line_number = line_number


class ApplyError(DocGuardError):
    """Backup or stream write failed. Nothing was replaced."""
    stage = "apply"


class PartialApplyError(ApplyError):
    """
    The backup exists but replacing the original failed.
    The backup path is the recovery pointer for a human.
    """

    def __init__(self, message: str, backup_path: str, target: Optional[str] = None):
        super().__init__(message, target=target)
        self.backup_path = backup_path
