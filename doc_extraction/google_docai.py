"""Google Document AI extraction provider."""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Any, Callable, Dict, Optional

from google.api_core import exceptions as gapi_exceptions
from google.cloud import documentai
from google.oauth2 import service_account

from doc_extraction.credentials import DEFAULT_CREDENTIALS_DIR, stage_google_credentials
from doc_extraction.errors import ExtractionError, ProviderNotConfigured
from doc_extraction.field_mapping import first_entity_confidence, map_entities
from doc_extraction.ocr_fallback import extract_w2_fields_from_text
from doc_extraction.results import ExtractionResult
from doc_extraction.retry import RetryPolicy

logger = logging.getLogger(__name__)

PROCESSING_METHOD = "google_document_ai"

RETRYABLE_ERRORS = (
    gapi_exceptions.ServiceUnavailable,
    gapi_exceptions.DeadlineExceeded,
    gapi_exceptions.InternalServerError,
    gapi_exceptions.TooManyRequests,
)

ClientFactory = Callable[[], Any]


def document_from_response(document: Dict[str, Any], document_type: str) -> ExtractionResult:
    """Build an ExtractionResult from a Document AI document dict (``Document.to_dict``)."""
    ocr_text = document.get("text") or ""
    entities = [e for e in document.get("entities") or [] if isinstance(e, dict)]
    logger.info("Document AI returned %d characters of text and %d entities", len(ocr_text), len(entities))

    extracted = map_entities(entities)
    if not extracted and ocr_text:
        logger.info("No entities returned; falling back to OCR text patterns")
        extracted = extract_w2_fields_from_text(ocr_text)

    return ExtractionResult(
        document_type=document_type,
        ocr_text=ocr_text,
        extracted_data=extracted,
        confidence=first_entity_confidence(entities),
        processing_method=PROCESSING_METHOD,
    )


class GoogleDocumentAIProvider:
    name = "google"

    def __init__(
        self,
        *,
        project_id: str,
        processor_id: str,
        location: str = "us",
        credentials_path: Optional[Path] = None,
        timeout: float = 30.0,
        retry_policy: Optional[RetryPolicy] = None,
        client_factory: Optional[ClientFactory] = None,
    ) -> None:
        self.project_id = project_id
        self.processor_id = processor_id
        self.location = location
        self.credentials_path = credentials_path
        self.timeout = timeout
        self.retry_policy = (retry_policy or RetryPolicy()).with_retry_on(*RETRYABLE_ERRORS)
        self._client_factory = client_factory or self._default_client

    @classmethod
    def from_settings(cls, settings: Dict[str, Any], **kwargs: Any) -> "GoogleDocumentAIProvider":
        project_id = settings.get("google_project_id")
        processor_id = settings.get("google_processor_id")
        if not (project_id and processor_id):
            raise ProviderNotConfigured("Google Document AI service not configured")

        credentials_path: Optional[Path] = None
        if settings.get("google_credentials_json"):
            credentials_path = stage_google_credentials(
                settings["google_credentials_json"],
                settings.get("credentials_dir") or DEFAULT_CREDENTIALS_DIR,
            )
        elif settings.get("google_credentials_file"):
            credentials_path = Path(settings["google_credentials_file"])
            if not credentials_path.exists():
                raise ProviderNotConfigured(f"Credentials file not found: {credentials_path}")
        else:
            raise ProviderNotConfigured("Google Document AI credentials not configured")

        return cls(
            project_id=project_id,
            processor_id=processor_id,
            location=settings.get("google_location") or "us",
            credentials_path=credentials_path,
            timeout=float(settings.get("document_ai_timeout", 30)),
            **kwargs,
        )

    @property
    def processor_name(self) -> str:
        return f"projects/{self.project_id}/locations/{self.location}/processors/{self.processor_id}"

    def _default_client(self) -> documentai.DocumentProcessorServiceClient:
        client_options = {"api_endpoint": f"{self.location}-documentai.googleapis.com"}
        if self.credentials_path:
            credentials = service_account.Credentials.from_service_account_file(str(self.credentials_path))
            return documentai.DocumentProcessorServiceClient(client_options=client_options, credentials=credentials)
        return documentai.DocumentProcessorServiceClient(client_options=client_options)

    def extract(self, content: bytes, *, filename: str, mime_type: str, document_type: str) -> ExtractionResult:
        client = self._client_factory()
        request = documentai.ProcessRequest(
            name=self.processor_name,
            raw_document=documentai.RawDocument(content=content, mime_type=mime_type),
        )
        logger.info("Sending %s (%s, %d bytes) to %s", filename, mime_type, len(content), self.processor_name)
        try:
            result = self.retry_policy.call(client.process_document, request=request, timeout=self.timeout)
        except gapi_exceptions.GoogleAPIError as exc:
            raise ExtractionError(f"Google Document AI processing failed: {exc}") from exc

        document = documentai.Document.to_dict(result.document)
        return document_from_response(document, document_type)


__all__ = ["GoogleDocumentAIProvider", "PROCESSING_METHOD", "document_from_response"]
