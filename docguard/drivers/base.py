from abc import ABC, abstractmethod


class LLMDriver(ABC):
    """
    Abstract Base Class for the generation service.
    docguard only ever asks for plain text back; whatever comes back is untrusted.
    """
    last_request_tokens: int = 0

    def _update_token_usage(self, system_prompt: str, user_prompt: str) -> None:
        """
        Updates the token usage counter for the last request.
        Uses a rough approximation of 4 characters per token.
        """
        total_chars = len(system_prompt) + len(user_prompt)
        self.last_request_tokens = total_chars // 4

    @abstractmethod
    def generate_raw(self, prompt: str, system_prompt: str = "") -> str:
        """Returns a simple string response from the LLM."""
        pass
