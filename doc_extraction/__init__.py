"""Document extraction pipeline: Google Document AI, remote LLM, OCR text fallback."""

from doc_extraction.errors import CredentialsError, ExtractionError, ProviderNotConfigured
from doc_extraction.pipeline import build_provider, extract_document, guess_mime_type
from doc_extraction.results import ExtractionResult
from doc_extraction.retry import RetryPolicy, exponential_backoff

__all__ = [
    "CredentialsError",
    "ExtractionError",
    "ExtractionResult",
    "ProviderNotConfigured",
    "RetryPolicy",
    "build_provider",
    "exponential_backoff",
    "extract_document",
    "guess_mime_type",
]
