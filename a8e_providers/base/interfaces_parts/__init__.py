"""Interfaces split into single-class modules.

This package provides one contract per file while allowing
``a8e_providers.base.interfaces`` to re-export a stable API.
"""

from .model_listing_provider import ModelListingProvider
from .provider import Provider, Tools
from .supports_streaming import SupportsStreaming

__all__ = [
    "Provider",
    "Tools",
    "SupportsStreaming",
    "ModelListingProvider",
]
