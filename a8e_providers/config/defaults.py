"""a8e_providers.config.defaults
============================

Central place for small, stable default values used across the a8e_providers
package. These defaults can be overridden via environment variables or the
YAML configuration file, but provide sensible fallbacks for local development
and tests.

Module Purpose
--------------
- Provide a single import location for conservative default constants (no I/O).
- Keep adapters free of magic literals.

This module intentionally avoids importing from other packages to prevent
circular dependencies. Only plain constants should live here.
"""

from __future__ import annotations

# ---- Configuration store ----
# Environment variable naming the configuration directory.
CONFIG_DIR_ENV = "A8E_CONFIG_DIR"
# Default configuration directory (``~`` expanded at lookup time).
DEFAULT_CONFIG_DIR = "~/.config/a8e"
CONFIG_YAML_NAME = "config.yaml"
SECRETS_YAML_NAME = "secrets.yaml"
# Param naming the provider the factory should build.
PROVIDER_PARAM = "A8E_PROVIDER"
MODEL_PARAM = "A8E_MODEL"


# ---- Retry policy ----
RETRY_DEFAULT_MAX_ATTEMPTS = 4
RETRY_DEFAULT_INITIAL_INTERVAL_SECONDS = 1.0
RETRY_DEFAULT_BACKOFF_MULTIPLIER = 2.0
RETRY_DEFAULT_MAX_INTERVAL_SECONDS = 30.0
# Fractional jitter applied around each computed delay (0.2 -> +/-20%).
RETRY_DEFAULT_JITTER = 0.2
# When set to a truthy value, retries happen without waiting.
RETRY_SKIP_BACKOFF_ENV = "A8E_PROVIDER_SKIP_BACKOFF"
RETRY_MAX_ATTEMPTS_PARAM = "A8E_RETRY_MAX_ATTEMPTS"
RETRY_INITIAL_INTERVAL_PARAM = "A8E_RETRY_INITIAL_INTERVAL"


# ---- Paean AI (reference backend) ----
PAEAN_AI_PROVIDER_NAME = "paean_ai"
PAEAN_AI_DEFAULT_MODEL = "opensota/os-v1"
PAEAN_AI_DEFAULT_FAST_MODEL = "opensota/os-v1-flash"
PAEAN_AI_DEFAULT_HOST = "https://api.paean.ai"
PAEAN_AI_DOC_URL = "https://api.paean.ai"
PAEAN_AI_API_KEY = "PAEAN_AI_API_KEY"  # pragma: allowlist secret - config key name, not a secret
PAEAN_AI_HOST = "PAEAN_AI_HOST"
PAEAN_AI_KNOWN_MODELS = (
    "opensota/os-v1",
    "opensota/os-v1-pro",
    "opensota/os-v1-mini",
    "opensota/os-v1-flash",
    "opensota/claude-sonnet",
    "anthropic/claude-3-5-sonnet",
    "openai/gpt-4o",
    "openai/gpt-4o-mini",
    "google/gemini-pro",
    "deepseek/deepseek-v3.2-exp",
    "moonshotai/kimi-k2",
    "x-ai/grok-4",
)


__all__ = [
    "CONFIG_DIR_ENV",
    "DEFAULT_CONFIG_DIR",
    "CONFIG_YAML_NAME",
    "SECRETS_YAML_NAME",
    "PROVIDER_PARAM",
    "MODEL_PARAM",
    "RETRY_DEFAULT_MAX_ATTEMPTS",
    "RETRY_DEFAULT_INITIAL_INTERVAL_SECONDS",
    "RETRY_DEFAULT_BACKOFF_MULTIPLIER",
    "RETRY_DEFAULT_MAX_INTERVAL_SECONDS",
    "RETRY_DEFAULT_JITTER",
    "RETRY_SKIP_BACKOFF_ENV",
    "RETRY_MAX_ATTEMPTS_PARAM",
    "RETRY_INITIAL_INTERVAL_PARAM",
    "PAEAN_AI_PROVIDER_NAME",
    "PAEAN_AI_DEFAULT_MODEL",
    "PAEAN_AI_DEFAULT_FAST_MODEL",
    "PAEAN_AI_DEFAULT_HOST",
    "PAEAN_AI_DOC_URL",
    "PAEAN_AI_API_KEY",
    "PAEAN_AI_HOST",
    "PAEAN_AI_KNOWN_MODELS",
]
