"""HTTP utilities package for providers.

Exposes the async transport and authentication strategies.
"""

from .auth import ApiKeyHeader, AuthMethod, BearerToken, NoAuth
from .client import SESSION_ID_HEADER, ApiClient, ApiRequestBuilder

__all__ = [
    "ApiClient",
    "ApiRequestBuilder",
    "SESSION_ID_HEADER",
    "AuthMethod",
    "BearerToken",
    "ApiKeyHeader",
    "NoAuth",
]
