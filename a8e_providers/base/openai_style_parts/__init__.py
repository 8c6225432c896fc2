"""Building blocks for OpenAI-compatible providers.

- ``request_format``: canonical conversation -> chat-completions payload
- ``status``: error-envelope and status classification
- ``stream_decode``: SSE / JSON body -> canonical events
- ``base``: :class:`OpenAICompatProvider` wiring the pieces together

Re-exports provide a stable import surface for convenience.
"""

from .base import CHAT_COMPLETIONS_PATH, MODELS_PATH, OpenAICompatProvider
from .request_format import ImageFormat, create_request, with_session_user
from .status import error_message_from_body, handle_status, parse_retry_after
from .stream_decode import (
    DONE_SENTINEL,
    DecodeContext,
    decode_json_document,
    decode_sse_lines,
    stream_from_response,
)

__all__ = [
    "OpenAICompatProvider",
    "CHAT_COMPLETIONS_PATH",
    "MODELS_PATH",
    "ImageFormat",
    "create_request",
    "with_session_user",
    "handle_status",
    "error_message_from_body",
    "parse_retry_after",
    "DONE_SENTINEL",
    "DecodeContext",
    "decode_sse_lines",
    "decode_json_document",
    "stream_from_response",
]
