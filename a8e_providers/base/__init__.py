"""
Providers Base Package

Exports provider-agnostic contracts, DTOs, transport and streaming primitives,
and the provider registry for use by concrete backends and callers.

Layout:
- Interfaces: the ``Provider`` contract
- Models / DTOs: canonical messages, tool specs, model and provider metadata
- HTTP / resilience: async transport, auth strategies, retry policy
- Streaming: events and the pull-based ``MessageStream``
- Factory: name-keyed registry with lazily imported built-ins
"""

from .dto import ToolCall, ToolResult, ToolResultContent, ToolSpec
from .errors import ErrorCode, ProviderError, classify_exception, is_retryable
from .factory import ProviderFactory, ProviderRegistry, default_registry
from .http import ApiClient, ApiKeyHeader, AuthMethod, BearerToken, NoAuth
from .interfaces import ModelListingProvider, Provider, SupportsStreaming
from .models import (
    ConfigKey,
    ContentPart,
    ContentPartType,
    Message,
    ModelConfig,
    ProviderMetadata,
    Role,
    Usage,
)
from .request_log import RequestLog, redact
from .resilience.retry import RetryConfig, retry, with_retry
from .streaming import ChatStreamEvent, EventKind, MessageStream, ProviderResponse, StreamMetrics, ToolCallDelta
from .timeouts import TimeoutConfig, get_timeout_config

__all__ = [
    # Models
    "Role",
    "ContentPartType",
    "ContentPart",
    "Message",
    "ModelConfig",
    "ProviderMetadata",
    "ConfigKey",
    "Usage",
    # DTOs
    "ToolSpec",
    "ToolCall",
    "ToolResult",
    "ToolResultContent",
    # Errors
    "ErrorCode",
    "ProviderError",
    "classify_exception",
    "is_retryable",
    # Interfaces
    "Provider",
    "SupportsStreaming",
    "ModelListingProvider",
    # Transport
    "ApiClient",
    "AuthMethod",
    "BearerToken",
    "ApiKeyHeader",
    "NoAuth",
    "TimeoutConfig",
    "get_timeout_config",
    # Resilience
    "RetryConfig",
    "retry",
    "with_retry",
    # Streaming
    "ChatStreamEvent",
    "EventKind",
    "ToolCallDelta",
    "MessageStream",
    "ProviderResponse",
    "StreamMetrics",
    # Logging
    "RequestLog",
    "redact",
    # Factory
    "ProviderFactory",
    "ProviderRegistry",
    "default_registry",
]
