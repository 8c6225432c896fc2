"""
Model descriptor used for one provider instance.

`ModelConfig` names the selected model and carries the generation settings a
request translator needs (temperature, output token cap) plus an optional
"fast" companion model used for cheap auxiliary calls. Instances are frozen;
the ``with_*`` helpers return modified copies.
"""
from __future__ import annotations

from dataclasses import dataclass, replace
from typing import Any, Dict, Optional

from ...config import ConfigError
from ..errors import ErrorCode, ProviderError

DEFAULT_CONTEXT_LIMIT = 128_000


@dataclass(frozen=True)
class ModelConfig:
    """Selected model and capability settings.

    Attributes:
        model_name: Backend model identifier (non-empty).
        context_limit: Context window size in tokens; ``None`` means the
            package default (:data:`DEFAULT_CONTEXT_LIMIT`).
        temperature: Sampling temperature in ``[0.0, 2.0]`` or ``None``.
        max_tokens: Positive completion token cap or ``None``.
        fast_model: Optional companion model for auxiliary calls.

    Raises:
        ProviderError: ``USAGE`` when any field is out of range.
    """

    model_name: str
    context_limit: Optional[int] = None
    temperature: Optional[float] = None
    max_tokens: Optional[int] = None
    fast_model: Optional[str] = None

    def __post_init__(self) -> None:
        if not self.model_name or not self.model_name.strip():
            raise ProviderError(code=ErrorCode.USAGE, message="model name must be non-empty")
        if self.context_limit is not None and self.context_limit <= 0:
            raise ProviderError(code=ErrorCode.USAGE, message=f"context limit must be positive, got {self.context_limit}")
        if self.temperature is not None and not 0.0 <= self.temperature <= 2.0:
            raise ProviderError(code=ErrorCode.USAGE, message=f"temperature must be within [0.0, 2.0], got {self.temperature}")
        if self.max_tokens is not None and self.max_tokens <= 0:
            raise ProviderError(code=ErrorCode.USAGE, message=f"max tokens must be positive, got {self.max_tokens}")

    @classmethod
    def from_config(cls, model_name: str, config: Any) -> "ModelConfig":
        """Build a config, reading optional overrides from a config collaborator.

        Reads ``A8E_CONTEXT_LIMIT``, ``A8E_TEMPERATURE`` and ``A8E_MAX_TOKENS``
        through ``config.get_param``; missing keys keep the defaults and
        unparsable values raise ``USAGE``.
        """
        def _param(key: str, cast):
            try:
                raw = config.get_param(key)
            except LookupError:
                return None
            except ConfigError as exc:
                raise ProviderError(code=ErrorCode.USAGE, message=str(exc)) from exc
            if raw is None or raw == "":
                return None
            try:
                return cast(raw)
            except (TypeError, ValueError) as exc:
                raise ProviderError(code=ErrorCode.USAGE, message=f"invalid value for {key}: {raw!r}") from exc

        return cls(
            model_name=model_name,
            context_limit=_param("A8E_CONTEXT_LIMIT", int),
            temperature=_param("A8E_TEMPERATURE", float),
            max_tokens=_param("A8E_MAX_TOKENS", int),
        )

    def effective_context_limit(self) -> int:
        return self.context_limit if self.context_limit is not None else DEFAULT_CONTEXT_LIMIT

    def with_fast(self, fast_model: str) -> "ModelConfig":
        """Return a copy with ``fast_model`` set unless one is already configured."""
        if self.fast_model:
            return self
        return replace(self, fast_model=fast_model)

    def use_fast_model(self) -> "ModelConfig":
        """Return a copy targeting the fast model (or ``self`` when none is set)."""
        if not self.fast_model:
            return self
        return replace(self, model_name=self.fast_model)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "model_name": self.model_name,
            "context_limit": self.effective_context_limit(),
            "temperature": self.temperature,
            "max_tokens": self.max_tokens,
            "fast_model": self.fast_model,
        }


__all__ = ["ModelConfig", "DEFAULT_CONTEXT_LIMIT"]
