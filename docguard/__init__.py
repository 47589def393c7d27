from .app import DocGuardApp
from .core.sanitizer import FenceSanitizer, sanitize
from .core.apply import ApplyProtocol
from .core.assembler import PromptAssembler
from .core.pipeline import TargetPipeline
from .core.settings import Settings, resolve_settings
from .drivers.factory import get_driver
from .schema import PromptRecord, ApplyResult, TargetOutcome

__all__ = [
    "DocGuardApp", "FenceSanitizer", "sanitize", "ApplyProtocol", "PromptAssembler",
    "TargetPipeline", "Settings", "resolve_settings", "get_driver",
    "PromptRecord", "ApplyResult", "TargetOutcome"
]
