"""Authentication strategies applied to outgoing provider requests.

Each strategy mutates a header mapping and reports the credential values it
holds so the request log can scrub them from anything it records.
"""
from __future__ import annotations

from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from typing import Dict, Tuple


class AuthMethod(ABC):
    """Base class for request authentication."""

    @abstractmethod
    def apply(self, headers: Dict[str, str]) -> None:
        """Add the credential to ``headers`` in place."""

    def secret_values(self) -> Tuple[str, ...]:
        return ()


@dataclass(frozen=True)
class BearerToken(AuthMethod):
    """``Authorization: Bearer <token>``."""

    token: str = field(repr=False)

    def apply(self, headers: Dict[str, str]) -> None:
        headers["Authorization"] = f"Bearer {self.token}"

    def secret_values(self) -> Tuple[str, ...]:
        return (self.token,) if self.token else ()


@dataclass(frozen=True)
class ApiKeyHeader(AuthMethod):
    """Credential sent in a named header (e.g. ``x-api-key``)."""

    header: str
    value: str = field(repr=False)

    def apply(self, headers: Dict[str, str]) -> None:
        headers[self.header] = self.value

    def secret_values(self) -> Tuple[str, ...]:
        return (self.value,) if self.value else ()


@dataclass(frozen=True)
class NoAuth(AuthMethod):
    def apply(self, headers: Dict[str, str]) -> None:
        return None


__all__ = ["AuthMethod", "BearerToken", "ApiKeyHeader", "NoAuth"]
