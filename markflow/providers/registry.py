"""Translator factory and registry."""

from __future__ import annotations

from collections.abc import Mapping
from typing import Any

from markflow.exceptions import ConfigurationError
from markflow.providers.base import Translator


def get_translator(config: Mapping[str, Any]) -> Translator:
    """Get a translator based on configuration."""
    provider_type = str(config.get("provider", "tartunlp")).strip().lower()

    match provider_type:
        case "tartunlp":
            from markflow.providers.tartunlp import DEFAULT_TARTUNLP_URL, TartuNLPTranslator

            return TartuNLPTranslator(
                api_url=str(config.get("api_url") or DEFAULT_TARTUNLP_URL),
                application=str(config.get("application") or ""),
                domain=config.get("domain") or None,
                timeout=float(config.get("timeout", 25.0)),
                max_retries=int(config.get("max_retries", 3)),
            )
        case "echo" | "identity":
            from markflow.providers.echo import EchoTranslator

            return EchoTranslator()
        case _:
            raise ConfigurationError(f"Unknown translator provider: {provider_type}")
