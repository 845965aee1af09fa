# src/llm/client_factory.py — v3
"""Factory: build the provider dispatch table from settings.

The gateway holds one adapter per provider, created here from the
registry of adapter class paths (lazy import, so an SDK is only loaded
when its adapter is built).
"""

from __future__ import annotations

import importlib
import logging

from arlo.config.settings import Settings
from arlo.llm.base_client import BaseProviderAdapter
from arlo.llm.models import Provider

logger = logging.getLogger(__name__)

# Registry of provider → adapter class path (lazy import).
_PROVIDER_REGISTRY: dict[Provider, str] = {
    Provider.OLLAMA: "arlo.llm.adapters.ollama_adapter.OllamaAdapter",
    Provider.OPENAI: "arlo.llm.adapters.openai_adapter.OpenAIAdapter",
    Provider.ANTHROPIC: "arlo.llm.adapters.anthropic_adapter.AnthropicAdapter",
}


class UnsupportedProviderError(ValueError):
    """Raised when a provider is not registered."""


def create_provider_adapter(
    provider: Provider | str,
    settings: Settings,
    **kwargs: object,
) -> BaseProviderAdapter:
    """Instantiate the adapter for one provider.

    Args:
        provider: Provider enum or identifier.
        settings: Application settings (endpoints, keys, timeout).
        **kwargs: Extra adapter arguments (e.g. a pre-built SDK client).

    Raises:
        UnsupportedProviderError: If provider is not registered.
    """
    resolved = Provider.parse(provider)
    if resolved is None or resolved not in _PROVIDER_REGISTRY:
        raise UnsupportedProviderError(
            f"Unsupported LLM provider: {provider!r}. "
            f"Available: {', '.join(sorted(p.value for p in _PROVIDER_REGISTRY))}"
        )

    adapter_cls = _import_class(_PROVIDER_REGISTRY[resolved])
    logger.debug("Creating provider adapter: %s", resolved.value)
    return adapter_cls(settings.provider_settings(resolved), **kwargs)


def create_provider_adapters(settings: Settings) -> dict[Provider, BaseProviderAdapter]:
    """Dispatch table with one adapter per registered provider."""
    return {
        provider: create_provider_adapter(provider, settings)
        for provider in _PROVIDER_REGISTRY
    }


def register_provider(provider: Provider, class_path: str) -> None:
    """Replace the adapter class used for a provider.

    Args:
        provider: Provider enum member.
        class_path: Fully qualified class path implementing BaseProviderAdapter.
    """
    _PROVIDER_REGISTRY[provider] = class_path
    logger.info("Registered provider adapter: %s → %s", provider.value, class_path)


def _import_class(class_path: str) -> type:
    """Dynamically import a class from its fully qualified path."""
    module_path, class_name = class_path.rsplit(".", 1)
    module = importlib.import_module(module_path)
    return getattr(module, class_name)
