"""
Static provider description and declared configuration keys.

`ProviderMetadata` describes a backend for registries and setup flows: its
identity, default and known models, documentation link and the configuration
keys it requires. `ConfigKey` declares one such key and knows how to resolve
itself against a configuration collaborator exposing ``get_param`` and
``get_secret``.
"""
from __future__ import annotations

from dataclasses import asdict, dataclass, field, replace
from typing import Any, Dict, Optional, Tuple

from ...config import ConfigError
from ..errors import ErrorCode, ProviderError


@dataclass(frozen=True)
class ConfigKey:
    """A declared configuration requirement.

    Attributes:
        name: Key name (also the environment variable name).
        required: Whether construction must fail when the key is unresolved.
        secret: Resolved through ``get_secret`` instead of ``get_param``.
        default: Value used when the key is unset.
        sensitive: Value must never be logged even though it is not a secret
            credential.
    """

    name: str
    required: bool
    secret: bool
    default: Optional[str] = None
    sensitive: bool = False

    @property
    def redacted(self) -> bool:
        """True when the resolved value must never reach a diagnostic surface."""
        return self.secret or self.sensitive

    def resolve(self, config: Any, *, provider: str = "unknown") -> Optional[str]:
        """Resolve the key value from ``config``.

        Returns:
            The configured value, the declared default, or ``None`` for an
            optional key without a default.

        Raises:
            ProviderError: ``AUTH`` for a missing required secret, ``USAGE``
                for a missing required plain key or an unreadable config file.
        """
        lookup = config.get_secret if self.secret else config.get_param
        try:
            value = lookup(self.name)
        except LookupError:
            value = None
        except ConfigError as exc:
            raise ProviderError(code=ErrorCode.USAGE, message=str(exc), provider=provider) from exc
        if value is None or value == "":
            value = self.default
        if value is None and self.required:
            code = ErrorCode.AUTH if self.secret else ErrorCode.USAGE
            raise ProviderError(
                code=code,
                message=f"missing required configuration key {self.name}",
                provider=provider,
            )
        return None if value is None else str(value)


@dataclass(frozen=True)
class ProviderMetadata:
    """Static description of a backend.

    Attributes:
        name: Canonical provider key (e.g., ``"paean_ai"``).
        display_name: Human-friendly name.
        description: One-line description.
        default_model: Model used when the caller does not choose one.
        known_models: Models the backend is known to serve.
        model_doc_link: Documentation URL.
        config_keys: Declared configuration keys.
        supports_streaming: Whether the backend streams completions.
        allows_unlisted_models: Whether models outside ``known_models`` may be
            requested.
    """

    name: str
    display_name: str
    description: str
    default_model: str
    known_models: Tuple[str, ...] = ()
    model_doc_link: str = ""
    config_keys: Tuple[ConfigKey, ...] = field(default_factory=tuple)
    supports_streaming: bool = True
    allows_unlisted_models: bool = False

    def with_unlisted_models(self) -> "ProviderMetadata":
        return replace(self, allows_unlisted_models=True)

    def config_key(self, name: str) -> Optional[ConfigKey]:
        return next((k for k in self.config_keys if k.name == name), None)

    def redacted_keys(self) -> Tuple[str, ...]:
        return tuple(k.name for k in self.config_keys if k.redacted)

    def to_dict(self) -> Dict[str, Any]:
        """Return a JSON-serializable dictionary of the metadata fields."""
        data = asdict(self)
        data["known_models"] = list(self.known_models)
        data["config_keys"] = [asdict(k) for k in self.config_keys]
        return data


__all__ = [
    "ConfigKey",
    "ProviderMetadata",
]
