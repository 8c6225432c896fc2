"""Provider registry and factory.

Purpose
-------
Map canonical provider names to constructors. Built-in backends are listed in
a ``{"module", "class"}`` table and imported lazily with ``importlib`` so
importing this module never pulls in every backend. Additional constructors
can be registered at runtime (tests, plugins).

``ProviderFactory`` is an explicit value holding the configuration directory
to read from; ``build()`` re-reads ``config.yaml`` there, looks up the
``A8E_PROVIDER`` param and asks the registry for that backend.

Failure modes
-------------
- Unknown provider name: ``ProviderError(USAGE)``.
- Built-in module or class cannot be loaded: ``ProviderError(USAGE)`` naming
  the module.
- Unresolved required configuration: the backend's own ``AUTH``/``USAGE``
  error from ``from_env``; no half-built provider is returned.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from importlib import import_module
from pathlib import Path
from typing import Any, Dict, List, Optional, Sequence, Type

import httpx

from ..config import Config, ConfigError, ConfigKeyMissing, config_dir
from ..config.defaults import MODEL_PARAM, PROVIDER_PARAM
from .errors import ErrorCode, ProviderError
from .interfaces import Provider
from .models import ModelConfig, ProviderMetadata

ProviderClass = Type[Provider]

# Map canonical provider names to import paths and class names
BUILTIN_PROVIDERS: Dict[str, Dict[str, str]] = {
    "paean_ai": {"module": "a8e_providers.paean_ai.client", "class": "PaeanAiProvider"},
}


def _normalize(name: str) -> str:
    return (name or "").lower().strip()


class ProviderRegistry:
    """Name-keyed registry of provider classes."""

    def __init__(self, builtins: Optional[Dict[str, Dict[str, str]]] = None) -> None:
        self._specs: Dict[str, Dict[str, str]] = dict(BUILTIN_PROVIDERS if builtins is None else builtins)
        self._classes: Dict[str, ProviderClass] = {}

    def register(self, provider_cls: ProviderClass, *, name: Optional[str] = None) -> None:
        """Register ``provider_cls`` under ``name`` (default: its metadata name)."""
        key = _normalize(name or provider_cls.metadata().name)
        if not key:
            raise ProviderError(code=ErrorCode.USAGE, message="provider name must be non-empty")
        self._classes[key] = provider_cls

    def names(self) -> List[str]:
        return sorted(set(self._specs) | set(self._classes))

    def __contains__(self, name: object) -> bool:
        return isinstance(name, str) and _normalize(name) in self.names()

    def resolve(self, name: str) -> ProviderClass:
        """Return the class registered for ``name``.

        Raises:
            ProviderError: ``USAGE`` for unknown names or unloadable modules.
        """
        key = _normalize(name)
        if key in self._classes:
            return self._classes[key]
        spec = self._specs.get(key)
        if not spec:
            raise ProviderError(code=ErrorCode.USAGE, message=f"unknown provider '{name}'", provider=key or "unknown")
        module_path, class_name = spec["module"], spec["class"]
        try:
            mod = import_module(module_path)
        except ImportError as exc:  # pragma: no cover - import failure path
            raise ProviderError(
                code=ErrorCode.USAGE,
                message=f"failed to import module '{module_path}' for provider '{name}': {exc}",
                provider=key,
            ) from exc
        try:
            klass: ProviderClass = getattr(mod, class_name)
        except AttributeError as exc:
            raise ProviderError(
                code=ErrorCode.USAGE,
                message=f"adapter class '{class_name}' not found in '{module_path}'",
                provider=key,
            ) from exc
        self._classes[key] = klass
        return klass

    async def create(
        self,
        name: str,
        model_config: ModelConfig,
        extensions: Sequence[Any] = (),
        *,
        config: Any = None,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ) -> Provider:
        """Construct the named provider through its ``from_env``."""
        return await self.resolve(name).from_env(
            model_config, extensions, config=config, transport=transport
        )

    def metadata(self, name: str) -> ProviderMetadata:
        return self.resolve(name).metadata()

    def list_metadata(self) -> List[ProviderMetadata]:
        """Return metadata for every known provider, sorted by name."""
        return sorted((self.resolve(n).metadata() for n in self.names()), key=lambda m: m.name)


_DEFAULT_REGISTRY = ProviderRegistry()


def default_registry() -> ProviderRegistry:
    return _DEFAULT_REGISTRY


@dataclass(frozen=True)
class ProviderFactory:
    """Builds the configured provider from a configuration directory.

    Attributes:
        config_dir: Directory holding ``config.yaml`` / ``secrets.yaml``.
        registry: Registry consulted for the provider class.
        environ: Environment mapping override (tests).
    """

    config_dir: Path = field(default_factory=config_dir)
    registry: ProviderRegistry = field(default_factory=default_registry)
    environ: Optional[Dict[str, str]] = None

    def config(self) -> Config:
        return Config.in_dir(self.config_dir, environ=self.environ)

    def provider_name(self, config: Optional[Config] = None) -> str:
        config = config or self.config()
        try:
            return str(config.get_param(PROVIDER_PARAM))
        except ConfigKeyMissing as exc:
            raise ProviderError(
                code=ErrorCode.USAGE,
                message=f"no provider configured; set {PROVIDER_PARAM}",
            ) from exc
        except ConfigError as exc:
            raise ProviderError(code=ErrorCode.USAGE, message=str(exc)) from exc

    async def build(
        self,
        model_config: Optional[ModelConfig] = None,
        extensions: Sequence[Any] = (),
        *,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ) -> Provider:
        """Read the current configuration and construct the provider.

        When ``model_config`` is ``None`` the model comes from ``A8E_MODEL``,
        falling back to the provider's default model.
        """
        config = self.config()
        name = self.provider_name(config)
        if model_config is None:
            try:
                model_name = str(config.get_param(MODEL_PARAM))
            except ConfigKeyMissing:
                model_name = self.registry.metadata(name).default_model
            model_config = ModelConfig.from_config(model_name, config)
        return await self.registry.create(name, model_config, extensions, config=config, transport=transport)


__all__ = [
    "BUILTIN_PROVIDERS",
    "ProviderRegistry",
    "ProviderFactory",
    "default_registry",
]
