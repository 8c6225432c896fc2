"""Errors parts package public surface.

Re-exports individual error taxonomy components for optional direct imports.
Prefer importing from `a8e_providers.base.errors` for the stable surface.
"""

from .error_code import ErrorCode
from .provider_error import ProviderError
from .classification import classify_exception, code_for_status, is_retryable, transport_error

__all__ = ["ErrorCode", "ProviderError", "classify_exception", "code_for_status", "is_retryable", "transport_error"]
