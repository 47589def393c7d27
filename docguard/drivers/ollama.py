import logging
from langchain_ollama import ChatOllama
from langchain_core.messages import SystemMessage, HumanMessage

from .base import LLMDriver

logger = logging.getLogger("docguard.driver")


class OllamaDriver(LLMDriver):
    def __init__(self, model_name: str = "qwen2.5-coder:7b", temperature: float = 0.1, num_ctx: int = 32768, base_url: str = None):
        """
        Local Ollama model through LangChain.
        No JSON mode: the reply is the whole commented file as plain text.
        """
        self.model_name = model_name
        self.temperature = temperature
        self.num_ctx = num_ctx
        self.last_request_tokens = 0

        client_kwargs = {}
        if base_url:
            client_kwargs["base_url"] = base_url
        self._client = ChatOllama(
            model=model_name,
            temperature=temperature,
            num_ctx=num_ctx,
            keep_alive="5m",
            **client_kwargs
        )

    def generate_raw(self, prompt: str, system_prompt: str = "") -> str:
        self._update_token_usage(system_prompt, prompt)
        messages = []
        if system_prompt:
            messages.append(SystemMessage(content=system_prompt))
        messages.append(HumanMessage(content=prompt))

        logger.info(f"Ollama request to {self.model_name} (~{self.last_request_tokens} tokens)")
        response = self._client.invoke(messages)
        return response.content
