"""Models parts package public surface.

Re-exports individual DTOs so callers can import from
`a8e_providers.base.models_parts` if needed, while `a8e_providers.base.models`
remains the primary stable import path.
"""

from .content_part import ContentPart, ContentPartType
from .message import Message, Role
from .model_config import DEFAULT_CONTEXT_LIMIT, ModelConfig
from .provider_metadata import ConfigKey, ProviderMetadata
from .usage import Usage

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
