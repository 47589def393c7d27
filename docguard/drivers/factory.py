from docguard.core.settings import Settings
from .base import LLMDriver

LOCAL_BASE_URL = "http://localhost:1234/v1"


def get_driver(settings: Settings) -> LLMDriver:
    """
    Builds the generation driver described by the resolved settings.
    Credentials are checked here so a bad configuration fails before any target is read.
    """
    provider = settings.provider.lower()
    model = settings.model
    api_key = settings.api_key
    base_url = settings.base_url
    temperature = settings.temperature

    if provider == "ollama":
        from .ollama import OllamaDriver
        return OllamaDriver(model_name=model, temperature=temperature, base_url=base_url)

    if provider in ("openai", "local"):
        if provider == "openai" and not (api_key or base_url):
            raise ValueError("openai provider needs DOCGUARD_API_KEY or --base-url")
        if provider == "local":
            from .local import LocalDriver
            return LocalDriver(base_url=base_url or LOCAL_BASE_URL, model_name=model,
                               api_key=api_key or "local", temperature=temperature)
        from .llm import OpenAIDriver
        return OpenAIDriver(api_key=api_key or "local-no-key", model_name=model,
                            base_url=base_url, temperature=temperature)

    if provider in ("anthropic", "gemini"):
        if not api_key:
            raise ValueError(f"{provider} provider needs DOCGUARD_API_KEY")
        if provider == "anthropic":
            from .anthropic import AnthropicDriver
            return AnthropicDriver(api_key=api_key, model_name=model, temperature=temperature)
        from .gemini import GeminiDriver
        return GeminiDriver(api_key=api_key, model_name=model, temperature=temperature)

    raise ValueError(f"Unknown provider: {provider}")
