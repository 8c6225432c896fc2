"""Paean AI gateway provider."""

from .client import PaeanAiProvider

__all__ = ["PaeanAiProvider"]
