import logging
from typing import Optional

from ..drivers.base import LLMDriver
from ..core.errors import GenerationError

logger = logging.getLogger("docguard.commenter")

SYSTEM_PROMPT = """
You are a DOCUMENTATION WRITER. You add comments to source code.

YOUR CONSTRAINTS:
- Never modify executable code.
- Output the complete file, exactly once.
- No prose before or after the file.
"""


class Commenter:
    """
    One call to the generation service per target. No retries: a failure is
    reported and the target is skipped.
    """
    def __init__(self, driver: LLMDriver, system_prompt: str = SYSTEM_PROMPT):
        self.driver = driver
        self.system_prompt = system_prompt

    def comment(self, prompt: str, target: Optional[str] = None) -> str:
        try:
            candidate = self.driver.generate_raw(prompt, system_prompt=self.system_prompt)
        except Exception as e:
            # Timeouts, auth and quota errors all land here with the provider's own type
            logger.error(f"Generation failed for {target}: {e}")
            raise GenerationError(f"Generation service failed: {e}", target=target) from e

        if not isinstance(candidate, str) or not candidate.strip():
            raise GenerationError("Generation service returned empty content", target=target)
        return candidate
