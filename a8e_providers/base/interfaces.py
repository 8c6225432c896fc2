"""
Provider-agnostic interfaces (ABC/Protocols) for the providers layer.

Re-exports the single-class modules under
``a8e_providers.base.interfaces_parts`` to keep imports stable.
"""

from __future__ import annotations

from .interfaces_parts import ModelListingProvider, Provider, SupportsStreaming, Tools

__all__ = [
    "Provider",
    "Tools",
    "SupportsStreaming",
    "ModelListingProvider",
]
