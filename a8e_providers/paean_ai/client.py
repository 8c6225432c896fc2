"""PaeanAiProvider adapter for the Paean AI gateway.

Paean AI routes requests to many upstream model families behind a single
OpenAI-compatible API, so the adapter inherits everything from
:class:`OpenAICompatProvider` and only declares its metadata, config keys and
fast-model default. Models outside the known list are accepted.
"""

from __future__ import annotations

from ..base.models import ConfigKey, ModelConfig, ProviderMetadata
from ..base.openai_style_parts import ImageFormat, OpenAICompatProvider
from ..config.defaults import (
    PAEAN_AI_API_KEY,
    PAEAN_AI_DEFAULT_FAST_MODEL,
    PAEAN_AI_DEFAULT_HOST,
    PAEAN_AI_DEFAULT_MODEL,
    PAEAN_AI_DOC_URL,
    PAEAN_AI_HOST,
    PAEAN_AI_KNOWN_MODELS,
    PAEAN_AI_PROVIDER_NAME,
)

_METADATA = ProviderMetadata(
    name=PAEAN_AI_PROVIDER_NAME,
    display_name="Paean AI",
    description="AI gateway with multi-provider model routing",
    default_model=PAEAN_AI_DEFAULT_MODEL,
    known_models=PAEAN_AI_KNOWN_MODELS,
    model_doc_link=PAEAN_AI_DOC_URL,
    config_keys=(
        ConfigKey(PAEAN_AI_API_KEY, required=True, secret=True, sensitive=True),
        ConfigKey(PAEAN_AI_HOST, required=False, secret=False, default=PAEAN_AI_DEFAULT_HOST),
    ),
).with_unlisted_models()


class PaeanAiProvider(OpenAICompatProvider):
    """Paean AI provider built on the OpenAI-compatible base class."""

    API_KEY_CONFIG = PAEAN_AI_API_KEY
    HOST_CONFIG = PAEAN_AI_HOST
    DEFAULT_HOST = PAEAN_AI_DEFAULT_HOST
    IMAGE_FORMAT = ImageFormat.OPENAI

    @classmethod
    def metadata(cls) -> ProviderMetadata:
        return _METADATA

    @classmethod
    def prepare_model_config(cls, model_config: ModelConfig) -> ModelConfig:
        return model_config.with_fast(PAEAN_AI_DEFAULT_FAST_MODEL)


__all__ = ["PaeanAiProvider"]
