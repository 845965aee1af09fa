# src/cache/fingerprint.py — v3
"""Cache key computation for generation requests.

The key covers provider, model, temperature, the max_tokens bucket
(max_tokens // 100) and a fixed-length prompt prefix. Prompts that share
the prefix under identical settings map to the same key, so a longer
prefix trades memory for fewer false hits.
"""

from __future__ import annotations

import hashlib

from arlo.llm.models import Provider

DEFAULT_PREFIX_LENGTH = 100


def compute_cache_key(
    provider: Provider | str,
    model: str,
    temperature: float,
    max_tokens: int,
    prompt: str,
    prefix_length: int = DEFAULT_PREFIX_LENGTH,
) -> str:
    """Deterministic SHA-256 key for a generation request.

    Args:
        provider: Resolved provider.
        model: Resolved model name.
        temperature: Sampling temperature.
        max_tokens: Token limit, bucketed by hundreds.
        prompt: Prompt text; only the first ``prefix_length`` characters count.
        prefix_length: Number of prompt characters included in the key.

    Returns:
        Hex digest.
    """
    provider_id = provider.value if isinstance(provider, Provider) else str(provider)
    parts = [
        provider_id,
        model,
        repr(float(temperature)),
        str(max_tokens // 100),
        prompt[:prefix_length],
    ]
    return hashlib.sha256("|".join(parts).encode("utf-8")).hexdigest()
