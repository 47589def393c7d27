import logging
from .base import LLMDriver

logger = logging.getLogger("docguard.driver.anthropic")


class AnthropicDriver(LLMDriver):
    def __init__(self, api_key: str, model_name: str = "claude-3-5-sonnet-20240620", temperature: float = 0.1, max_tokens: int = 8192):
        try:
            import anthropic
        except ImportError:
            raise ImportError("Anthropic driver requires 'anthropic' package. Please install it.")

        self.model_name = model_name
        self.temperature = temperature
        self.max_tokens = max_tokens
        self.client = anthropic.Anthropic(api_key=api_key)
        self.last_request_tokens = 0

    def generate_raw(self, prompt: str, system_prompt: str = "") -> str:
        self._update_token_usage(system_prompt, prompt)
        kwargs = {}
        if system_prompt:
            kwargs["system"] = system_prompt
        response = self.client.messages.create(
            model=self.model_name,
            max_tokens=self.max_tokens,
            temperature=self.temperature,
            messages=[
                {"role": "user", "content": prompt}
            ],
            **kwargs
        )
        # Only text blocks carry the file
        return "".join(block.text for block in response.content if block.type == "text")
