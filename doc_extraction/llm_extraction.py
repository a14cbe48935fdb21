"""Remote LLM extraction provider.

Posts the raw document to an HTTP endpoint that runs an LLM-based extractor.

Expected request JSON:
{
  "document_type": "W2",
  "filename": "...",
  "mime_type": "application/pdf",
  "content_base64": "..."
}

Expected response JSON:
{
  "extracted_data": {...},
  "ocr_text": "...",      # optional
  "confidence": 0.87      # optional
}
"""

from __future__ import annotations

import base64
import logging
from typing import Any, Dict, Optional

import requests

from doc_extraction.errors import ExtractionError, ProviderNotConfigured
from doc_extraction.field_mapping import clean_money, is_monetary
from doc_extraction.results import ExtractionResult
from doc_extraction.retry import RetryPolicy

logger = logging.getLogger(__name__)

PROCESSING_METHOD = "llm"
DEFAULT_CONFIDENCE = 0.8


class RemoteLLMProvider:
    name = "llm"

    def __init__(
        self,
        endpoint: str,
        *,
        api_key: Optional[str] = None,
        timeout: float = 60.0,
        retry_policy: Optional[RetryPolicy] = None,
    ) -> None:
        self.endpoint = endpoint
        self.api_key = api_key
        self.timeout = timeout
        self.retry_policy = (retry_policy or RetryPolicy()).with_retry_on(
            requests.ConnectionError, requests.Timeout
        )

    @classmethod
    def from_settings(cls, settings: Dict[str, Any], **kwargs: Any) -> "RemoteLLMProvider":
        endpoint = settings.get("llm_endpoint")
        if not endpoint:
            raise ProviderNotConfigured("LLM extraction endpoint not configured")
        return cls(
            endpoint,
            api_key=settings.get("llm_api_key"),
            timeout=float(settings.get("http_timeout", 60)),
            **kwargs,
        )

    def _headers(self) -> Dict[str, str]:
        if self.api_key:
            return {"Authorization": f"Bearer {self.api_key}"}
        return {}

    def _post(self, payload: Dict[str, Any]) -> requests.Response:
        resp = requests.post(self.endpoint, json=payload, headers=self._headers(), timeout=self.timeout)
        resp.raise_for_status()
        return resp

    def extract(self, content: bytes, *, filename: str, mime_type: str, document_type: str) -> ExtractionResult:
        payload = {
            "document_type": document_type,
            "filename": filename,
            "mime_type": mime_type,
            "content_base64": base64.b64encode(content).decode("ascii"),
        }
        logger.info("Sending %s (%s, %d bytes) to LLM extractor", filename, mime_type, len(content))
        try:
            resp = self.retry_policy.call(self._post, payload)
        except requests.RequestException as exc:
            raise ExtractionError(f"LLM extraction request failed: {exc}") from exc

        try:
            data = resp.json()
        except ValueError as exc:
            logger.error("LLM extractor returned non-JSON response: %s", resp.text[:500])
            raise ExtractionError("LLM extractor returned invalid JSON") from exc
        if not isinstance(data, dict):
            raise ExtractionError("LLM extractor response must be a JSON object")

        raw_fields = data.get("extracted_data") or {}
        if not isinstance(raw_fields, dict):
            raise ExtractionError("LLM extractor 'extracted_data' must be an object")
        extracted: Dict[str, Any] = {}
        for key, value in raw_fields.items():
            if isinstance(value, str) and is_monetary(key):
                value = clean_money(value)
            extracted[str(key)] = value

        try:
            confidence = float(data.get("confidence", DEFAULT_CONFIDENCE))
        except (TypeError, ValueError):
            logger.warning("Ignoring non-numeric LLM confidence %r", data.get("confidence"))
            confidence = DEFAULT_CONFIDENCE

        return ExtractionResult(
            document_type=document_type,
            ocr_text=str(data.get("ocr_text") or ""),
            extracted_data=extracted,
            confidence=confidence,
            processing_method=PROCESSING_METHOD,
        )


__all__ = ["PROCESSING_METHOD", "RemoteLLMProvider"]
