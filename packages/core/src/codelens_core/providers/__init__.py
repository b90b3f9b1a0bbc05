from __future__ import annotations

from codelens_core.errors import InvalidInput
from codelens_core.providers.base import BaseProvider

PROVIDERS = ("anthropic", "openai")


def get_provider(config: dict) -> BaseProvider:
    """Instantiate the provider named by ``config["model"]``."""
    name = config["model"]
    model = config.get("model_name")
    if name == "anthropic":
        from codelens_core.providers.anthropic import AnthropicProvider

        return AnthropicProvider(api_key=config["anthropic_api_key"], model=model)
    if name == "openai":
        from codelens_core.providers.openai import OpenAIProvider

        return OpenAIProvider(api_key=config["openai_api_key"], model=model)
    raise InvalidInput(f"Unknown model provider: {name!r}. Choose 'anthropic' or 'openai'.")
