"""a8e_providers package

LLM provider abstraction and streaming request client.

Purpose:
    Turn a canonical conversation (system prompt, history, tool specs, model
    descriptor) into a backend request, send it with auth and retry, and
    decode the reply into a lazily produced stream of canonical events.

Public API (re-exported):
    - Version: ``__version__``
    - Exceptions: :class:`ProviderError`, :class:`ErrorCode`
    - Factory: :func:`create`, :class:`ProviderFactory`,
      :class:`ProviderRegistry`
    - Plugins: :func:`load_plugin`
    - Core types: :class:`Provider`, :class:`ModelConfig`, :class:`Message`,
      :class:`ContentPart`, :class:`ToolSpec`, :class:`MessageStream`,
      :class:`ChatStreamEvent`, :class:`EventKind`

Notes:
    - Third-party backends can register under the ``a8e_providers.plugins``
      entry point group and are added to the default registry by
      :func:`load_plugin`.
"""

from __future__ import annotations

from importlib import metadata
from typing import Any, Optional, Sequence

from .base.dto import ToolCall, ToolResult, ToolResultContent, ToolSpec
from .base.errors import ErrorCode, ProviderError
from .base.factory import ProviderFactory, ProviderRegistry, default_registry
from .base.interfaces import Provider
from .base.models import ContentPart, Message, ModelConfig, ProviderMetadata, Usage
from .base.streaming import ChatStreamEvent, EventKind, MessageStream, ProviderResponse
from .config import Config

__version__ = "0.1.0"

PLUGIN_ENTRY_POINT_GROUP = "a8e_providers.plugins"

__all__ = [
    "__version__",
    "ProviderError",
    "ErrorCode",
    "create",
    "load_plugin",
    "ProviderFactory",
    "ProviderRegistry",
    "default_registry",
    "Provider",
    "ProviderMetadata",
    "ModelConfig",
    "Message",
    "ContentPart",
    "Usage",
    "ToolSpec",
    "ToolCall",
    "ToolResult",
    "ToolResultContent",
    "ChatStreamEvent",
    "EventKind",
    "MessageStream",
    "ProviderResponse",
    "Config",
]


async def create(
    provider_name: str,
    model: Optional[str] = None,
    extensions: Sequence[Any] = (),
    *,
    config: Optional[Config] = None,
) -> Provider:
    """Construct a provider by name from the global (or given) configuration.

    Parameters
    ----------
    provider_name:
        Canonical provider name (for example, ``"paean_ai"``).
    model:
        Model id; defaults to the provider's default model.
    extensions:
        Opaque extension descriptors forwarded to the provider.
    config:
        Configuration collaborator; defaults to :meth:`Config.global_config`.

    Raises
    ------
    ProviderError
        ``USAGE`` for unknown providers or invalid settings, ``AUTH`` for
        missing credentials.
    """
    registry = default_registry()
    config = config or Config.global_config()
    model_name = model or registry.metadata(provider_name).default_model
    model_config = ModelConfig.from_config(model_name, config)
    return await registry.create(provider_name, model_config, extensions, config=config)


def load_plugin(entry_point_name: str, registry: Optional[ProviderRegistry] = None):
    """Load and register a provider class published as an entry point.

    Example (pyproject.toml):
        [project.entry-points."a8e_providers.plugins"]
        my_custom = "my_pkg.custom_provider:CustomProvider"

    Returns:
        The loaded provider class.

    Raises:
        LookupError: If no plugin matching ``entry_point_name`` is registered.
    """
    for ep in metadata.entry_points(group=PLUGIN_ENTRY_POINT_GROUP):
        if ep.name == entry_point_name:
            klass = ep.load()
            (registry or default_registry()).register(klass)
            return klass
    raise LookupError(f"No provider plugin named '{entry_point_name}'")
