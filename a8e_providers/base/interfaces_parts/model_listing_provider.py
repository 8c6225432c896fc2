"""ModelListingProvider Protocol (single-class module).

Interface for objects that can enumerate the models a backend serves.
"""

from __future__ import annotations

from typing import List, Protocol, runtime_checkable


@runtime_checkable
class ModelListingProvider(Protocol):
    """Interface to obtain the model ids known to a backend."""

    async def fetch_supported_models(self) -> List[str]:
        """Return model ids sorted lexicographically; duplicates are kept."""
        ...
