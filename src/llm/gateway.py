# src/llm/gateway.py — v1
"""Completion gateway: one generate() call in front of every provider.

Resolves provider and model, consults the response cache, dispatches to
exactly one adapter under the configured timeout and normalizes failures
to AIError. Missing credentials surface unchanged as ConfigError.
"""

from __future__ import annotations

import asyncio
import logging
import time

from arlo.cache.fingerprint import compute_cache_key
from arlo.cache.response_cache import ResponseCache
from arlo.config.settings import Settings
from arlo.core.errors import AIError, ConfigError
from arlo.llm.base_client import BaseProviderAdapter
from arlo.llm.client_factory import create_provider_adapters
from arlo.llm.models import CompletionRequest, Provider

logger = logging.getLogger(__name__)


class CompletionGateway:
    """Provider-agnostic text generation with response caching."""

    def __init__(
        self,
        settings: Settings,
        adapters: dict[Provider, BaseProviderAdapter] | None = None,
        cache: ResponseCache | None = None,
    ) -> None:
        self._settings = settings
        self._adapters = adapters if adapters is not None else create_provider_adapters(settings)
        if settings.default_provider not in self._adapters:
            raise ValueError(
                f"No adapter registered for default provider {settings.default_provider.value!r}"
            )
        self._cache = (
            cache
            if cache is not None
            else ResponseCache(max_size=settings.cache_max_size, ttl_ms=settings.cache_expiry_ms)
        )

    @property
    def cache(self) -> ResponseCache:
        return self._cache

    def resolve_provider(self, provider: Provider | str | None) -> Provider:
        """Known provider with an adapter, else the default provider."""
        resolved = Provider.parse(provider)
        if resolved is None or resolved not in self._adapters:
            if provider:
                logger.debug("Unknown provider %r, using default", provider)
            return self._settings.default_provider
        return resolved

    def resolve_model(self, provider: Provider, model: str | None) -> str:
        return model or self._settings.provider_settings(provider).default_model

    async def generate(
        self,
        prompt: str,
        model: str | None = None,
        provider: Provider | str | None = None,
        temperature: float = 0.2,
        max_tokens: int = 2000,
        use_cache: bool = True,
    ) -> str:
        """Generate text for a prompt.

        Args:
            prompt: Non-empty prompt text.
            model: Model name; None selects the provider default.
            provider: Provider identifier; unknown or None selects the default.
            temperature: Sampling temperature.
            max_tokens: Maximum tokens to generate.
            use_cache: Consult and populate the response cache.

        Returns:
            Generated text.

        Raises:
            ValueError: Empty prompt.
            ConfigError: Provider credentials are missing.
            AIError: Provider call failed, timed out or returned a bad shape.
        """
        if not prompt:
            raise ValueError("prompt must be a non-empty string")

        resolved_provider = self.resolve_provider(provider)
        resolved_model = self.resolve_model(resolved_provider, model)

        cache_key: str | None = None
        if use_cache:
            cache_key = compute_cache_key(
                resolved_provider,
                resolved_model,
                temperature,
                max_tokens,
                prompt,
                self._settings.cache_prompt_prefix_length,
            )
            cached = self._cache_get(cache_key)
            if cached is not None:
                logger.debug("Cache hit for %s:%s", resolved_provider.value, resolved_model)
                return cached

        request = CompletionRequest(
            prompt=prompt,
            model=resolved_model,
            temperature=temperature,
            max_tokens=max_tokens,
        )
        text = await self._dispatch(resolved_provider, request)

        if cache_key is not None:
            self._cache_put(cache_key, text)
        return text

    async def _dispatch(self, provider: Provider, request: CompletionRequest) -> str:
        adapter = self._adapters[provider]
        timeout_s = self._settings.api_timeout_s
        start = time.monotonic()
        try:
            text = await asyncio.wait_for(adapter.generate(request), timeout=timeout_s)
        except ConfigError:
            raise
        except asyncio.TimeoutError as e:
            logger.error(
                "AI generation timed out after %d ms (%s:%s)",
                self._settings.api_timeout,
                provider.value,
                request.model,
            )
            raise AIError(
                f"AI model error: request timed out after {self._settings.api_timeout} ms",
                details={"provider": provider.value, "model": request.model},
            ) from e
        except Exception as e:
            logger.error("AI generation error (%s:%s): %s", provider.value, request.model, e)
            raise AIError(
                f"AI model error: {e}",
                details={"provider": provider.value, "model": request.model},
            ) from e

        logger.debug(
            "Generated %d chars via %s:%s in %d ms",
            len(text),
            provider.value,
            request.model,
            int((time.monotonic() - start) * 1000),
        )
        return text

    def _cache_get(self, key: str) -> str | None:
        try:
            return self._cache.get(key)
        except Exception as e:
            logger.warning("Cache lookup failed, treating as miss: %s", e)
            return None

    def _cache_put(self, key: str, value: str) -> None:
        try:
            self._cache.put(key, value)
        except Exception as e:
            logger.warning("Cache store failed: %s", e)
