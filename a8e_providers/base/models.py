"""
Provider-agnostic domain models public surface.

This module re-exports the one-class-per-file implementations under
``a8e_providers.base.models_parts`` so callers have one stable import path.
"""

from .models_parts.content_part import ContentPart, ContentPartType
from .models_parts.message import Message, Role
from .models_parts.model_config import DEFAULT_CONTEXT_LIMIT, ModelConfig
from .models_parts.provider_metadata import ConfigKey, ProviderMetadata
from .models_parts.usage import Usage

__all__ = [
    "ContentPart",
    "ContentPartType",
    "Message",
    "Role",
    "ModelConfig",
    "DEFAULT_CONTEXT_LIMIT",
    "ConfigKey",
    "ProviderMetadata",
    "Usage",
]
