from __future__ import annotations


class ExtractionError(RuntimeError):
    """An extraction provider failed to return usable output."""


class ProviderNotConfigured(ExtractionError):
    """The requested provider is missing required settings or credentials."""


class CredentialsError(ValueError):
    """Service-account credentials could not be parsed or staged."""


__all__ = ["CredentialsError", "ExtractionError", "ProviderNotConfigured"]
