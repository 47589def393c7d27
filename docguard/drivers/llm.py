import logging
from typing import Optional
import openai
from .base import LLMDriver

logger = logging.getLogger("docguard.driver.openai")


class OpenAIDriver(LLMDriver):
    def __init__(self, api_key: str, model_name: str = "gpt-4o", base_url: Optional[str] = None, temperature: float = 0.1, seed: Optional[int] = None):
        self.model_name = model_name
        self.temperature = temperature
        self.seed = seed
        self.client = openai.OpenAI(api_key=api_key, base_url=base_url)
        self.last_request_tokens = 0

    def generate_raw(self, prompt: str, system_prompt: str = "") -> str:
        self._update_token_usage(system_prompt, prompt)
        messages = []
        if system_prompt:
            messages.append({"role": "system", "content": system_prompt})
        messages.append({"role": "user", "content": prompt})

        response = self.client.chat.completions.create(
            model=self.model_name,
            messages=messages,
            temperature=self.temperature,
            seed=self.seed
        )
        return response.choices[0].message.content or ""
