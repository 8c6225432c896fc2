"""
Token usage accounting model.

Normalizes backend usage objects into a canonical shape. Coercion is
defensive: invalid or negative values become ``None`` instead of raising, and
the total is derived only when both components are present.
"""
from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Dict, Mapping, Optional


def _coerce_count(value: Any) -> Optional[int]:
    if value is None or isinstance(value, bool):
        return None
    try:
        n = int(value)
    except (TypeError, ValueError):
        return None
    return n if n >= 0 else None


@dataclass(frozen=True)
class Usage:
    """Token usage for one provider call.

    Attributes:
        input_tokens: Prompt-side tokens.
        output_tokens: Completion-side tokens.
        total_tokens: Sum reported by the backend, or derived.
    """

    input_tokens: Optional[int] = None
    output_tokens: Optional[int] = None
    total_tokens: Optional[int] = None

    @classmethod
    def from_openai(cls, raw: Any) -> "Usage":
        """Map an OpenAI-style ``usage`` mapping (``prompt_tokens`` etc.)."""
        if not isinstance(raw, Mapping):
            return cls()
        prompt = _coerce_count(raw.get("prompt_tokens"))
        completion = _coerce_count(raw.get("completion_tokens"))
        total = _coerce_count(raw.get("total_tokens"))
        if total is None and prompt is not None and completion is not None:
            total = prompt + completion
        return cls(input_tokens=prompt, output_tokens=completion, total_tokens=total)

    def is_empty(self) -> bool:
        return self.input_tokens is None and self.output_tokens is None and self.total_tokens is None

    def to_dict(self) -> Dict[str, Optional[int]]:
        """Return the canonical token mapping used in structured logs."""
        return {"prompt": self.input_tokens, "completion": self.output_tokens, "total": self.total_tokens}


__all__ = ["Usage"]
