import logging
from .base import LLMDriver

logger = logging.getLogger("docguard.driver.gemini")


class GeminiDriver(LLMDriver):
    def __init__(self, api_key: str, model_name: str = "gemini-1.5-pro-latest", temperature: float = 0.1):
        try:
            import google.generativeai as genai
        except ImportError:
            raise ImportError("Gemini driver requires 'google-generativeai' package.")

        genai.configure(api_key=api_key)
        self._genai = genai
        self.model_name = model_name
        self.temperature = temperature
        self.last_request_tokens = 0

    def generate_raw(self, prompt: str, system_prompt: str = "") -> str:
        self._update_token_usage(system_prompt, prompt)
        model = self._genai.GenerativeModel(
            self.model_name,
            system_instruction=system_prompt or None
        )
        response = model.generate_content(
            prompt,
            generation_config=self._genai.GenerationConfig(temperature=self.temperature)
        )
        return response.text
