"""Translator abstractions for external services."""

from markflow.providers.base import Translator
from markflow.providers.registry import get_translator

__all__ = ["Translator", "get_translator"]
