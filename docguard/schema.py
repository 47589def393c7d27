import json
from typing import Literal, Optional
from pydantic import BaseModel, ConfigDict, Field

# --- THE PROMPT RECORD (Transport) ---
# Exactly three fields. The renderer sees nothing else.
class PromptRecord(BaseModel):
    model_config = ConfigDict(frozen=True, extra="forbid")

    source_filename: str = Field(..., description="Path of the source file, or '-' for standard input.")
    policy_content: str = Field(..., description="Full text of the documentation standard.")
    source_code: str = Field(..., description="Full text of the source file.")

    def to_json(self) -> str:
        return json.dumps(self.model_dump(), indent=2)


ApplyState = Literal["UNMODIFIED", "BACKED_UP", "REPLACED", "STREAMED"]


class ApplyResult(BaseModel):
    model_config = ConfigDict(frozen=True)

    target: str
    state: ApplyState
    backup_path: Optional[str] = None
    bytes_written: int = 0


class TargetOutcome(BaseModel):
    """What happened to one target. Reported independently of every other target."""
    model_config = ConfigDict(frozen=True)

    target: str
    ok: bool
    stage: str = Field("apply", description="Last stage reached (the failing stage when ok is False).")
    error: Optional[str] = None
    backup_path: Optional[str] = None
    result: Optional[ApplyResult] = None
