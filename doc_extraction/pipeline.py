"""Single entry point for running a stored document through an extraction provider."""

from __future__ import annotations

import logging
from typing import Any, Dict, Optional, Protocol

from doc_extraction.errors import ProviderNotConfigured
from doc_extraction.google_docai import GoogleDocumentAIProvider
from doc_extraction.llm_extraction import RemoteLLMProvider
from doc_extraction.results import ExtractionResult
from doc_extraction.retry import RetryPolicy, retry_policy_from_settings

logger = logging.getLogger(__name__)

DEFAULT_MIME_TYPE = "application/pdf"
_EXTENSION_MIME_TYPES = {
    ".pdf": "application/pdf",
    ".png": "image/png",
    ".jpg": "image/jpeg",
    ".jpeg": "image/jpeg",
}


class ExtractionProvider(Protocol):
    name: str

    def extract(self, content: bytes, *, filename: str, mime_type: str, document_type: str) -> ExtractionResult:
        ...


PROVIDERS = {
    GoogleDocumentAIProvider.name: GoogleDocumentAIProvider,
    RemoteLLMProvider.name: RemoteLLMProvider,
}


def guess_mime_type(filename: Optional[str], file_type: Optional[str] = None) -> str:
    lname = (filename or "").lower()
    for ext, mime in _EXTENSION_MIME_TYPES.items():
        if lname.endswith(ext):
            return mime
    return file_type or DEFAULT_MIME_TYPE


def build_provider(
    name: str,
    settings: Dict[str, Any],
    retry_policy: Optional[RetryPolicy] = None,
) -> ExtractionProvider:
    provider_cls = PROVIDERS.get(name)
    if provider_cls is None:
        raise ProviderNotConfigured(f"Unknown extraction provider: {name}")
    return provider_cls.from_settings(settings, retry_policy=retry_policy or retry_policy_from_settings(settings))


def extract_document(
    content: bytes,
    *,
    filename: str,
    document_type: str,
    provider: ExtractionProvider,
    file_type: Optional[str] = None,
) -> ExtractionResult:
    """Run `content` through `provider` and return normalized extracted data."""
    if not content:
        raise ValueError("Document has no content to process.")
    mime_type = guess_mime_type(filename, file_type)
    logger.info("Extracting %s document %s via %s", document_type, filename, provider.name)
    result = provider.extract(content, filename=filename, mime_type=mime_type, document_type=document_type)
    logger.info(
        "Extraction via %s finished: %d field(s), confidence=%.2f",
        result.processing_method,
        len(result.extracted_data),
        result.confidence,
    )
    return result


__all__ = ["ExtractionProvider", "PROVIDERS", "build_provider", "extract_document", "guess_mime_type"]
