from __future__ import annotations

import logging
from typing import Optional

from fastapi import APIRouter, Depends, HTTPException, status
from sqlalchemy.orm import Session

from backend.config import get_settings
from backend.db import get_db
from backend.db_models import DocumentORM, TaxReturnORM, UserORM
from backend.deps import get_current_user, require_document
from backend.name_validation import extract_names, validate_names
from backend.schemas import (
    DocumentDetail,
    DocumentMetadata,
    NameReviewRequest,
    NameReviewResponse,
    NameValidationResponse,
    ProcessDocumentRequest,
    ProcessDocumentResponse,
)
from doc_extraction import CredentialsError, ExtractionError, ProviderNotConfigured, build_provider, extract_document

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/documents", tags=["documents"])

OCR_PREVIEW_CHARS = 500


def _preview(text: Optional[str]) -> Optional[str]:
    if not text:
        return None
    if len(text) <= OCR_PREVIEW_CHARS:
        return text
    return text[:OCR_PREVIEW_CHARS] + "..."


def _build_detail(document: DocumentORM) -> DocumentDetail:
    meta = DocumentMetadata.model_validate(document)
    return DocumentDetail(
        **meta.model_dump(),
        extracted_data=document.extracted_data or {},
        name_validation=document.name_validation,
        ocr_text_preview=_preview(document.ocr_text),
    )


@router.get("/{document_id}", response_model=DocumentDetail)
def get_document(
    document_id: str,
    user: UserORM = Depends(get_current_user),
    db: Session = Depends(get_db),
) -> DocumentDetail:
    return _build_detail(require_document(db, document_id, user))


@router.post("/{document_id}/process", response_model=ProcessDocumentResponse)
def process_document(
    document_id: str,
    payload: Optional[ProcessDocumentRequest] = None,
    user: UserORM = Depends(get_current_user),
    db: Session = Depends(get_db),
) -> ProcessDocumentResponse:
    """Run OCR/entity extraction on a stored document and persist the extracted fields."""
    document = require_document(db, document_id, user)
    if document.processing_status == "PROCESSING":
        raise HTTPException(status_code=status.HTTP_409_CONFLICT, detail="Document is already being processed.")

    settings = get_settings()
    provider_name = (payload.provider if payload else None) or settings["default_provider"]
    try:
        provider = build_provider(provider_name, settings)
    except (ProviderNotConfigured, CredentialsError) as exc:
        logger.error("Extraction provider %s unavailable: %s", provider_name, exc)
        raise HTTPException(status_code=status.HTTP_503_SERVICE_UNAVAILABLE, detail=str(exc)) from exc

    document.processing_status = "PROCESSING"
    db.commit()

    try:
        result = extract_document(
            document.content,
            filename=document.filename,
            document_type=document.document_type,
            file_type=document.file_type,
            provider=provider,
        )
    except ExtractionError as exc:
        logger.error("Processing document %s failed: %s", document.id, exc)
        document.processing_status = "FAILED"
        db.commit()
        raise HTTPException(status_code=status.HTTP_502_BAD_GATEWAY, detail=f"Document processing failed: {exc}") from exc
    except Exception:
        document.processing_status = "FAILED"
        db.commit()
        raise

    document.ocr_text = result.ocr_text
    document.extracted_data = result.extracted_data
    document.confidence = result.confidence
    document.processing_method = result.processing_method
    document.processing_status = "COMPLETED"
    # extracted names may have changed; any earlier review no longer applies
    document.name_validation = None
    document.name_review_decision = None
    db.commit()
    logger.info("Document %s processed via %s", document.id, result.processing_method)

    return ProcessDocumentResponse(
        success=True,
        message="Document processed successfully",
        processingMethod=result.processing_method,
        documentType=result.document_type,
        confidence=result.confidence,
        extractedData=result.extracted_data,
        ocrTextPreview=_preview(result.ocr_text),
    )


@router.post("/{document_id}/validate-names", response_model=NameValidationResponse)
def validate_document_names(
    document_id: str,
    user: UserORM = Depends(get_current_user),
    db: Session = Depends(get_db),
) -> NameValidationResponse:
    """Compare names found on the document with the tax return's taxpayer and spouse."""
    document = require_document(db, document_id, user)
    if document.processing_status != "COMPLETED":
        raise HTTPException(status_code=status.HTTP_409_CONFLICT, detail="Document has not been processed yet.")

    tax_return = db.query(TaxReturnORM).filter(TaxReturnORM.id == document.tax_return_id).first()
    result = validate_names(tax_return, extract_names(document.extracted_data or {}))

    document.name_validation = result.to_dict()
    document.name_review_decision = None
    db.commit()
    return NameValidationResponse(**result.to_dict())


@router.post("/{document_id}/name-review", response_model=NameReviewResponse)
def review_document_names(
    document_id: str,
    payload: NameReviewRequest,
    user: UserORM = Depends(get_current_user),
    db: Session = Depends(get_db),
) -> NameReviewResponse:
    """Record the user's decision to keep (or drop) a document after name validation."""
    document = require_document(db, document_id, user)
    if not document.name_validation:
        raise HTTPException(status_code=status.HTTP_409_CONFLICT, detail="Run name validation before reviewing.")

    decision = "proceed" if payload.proceed else "reject"
    document.name_review_decision = decision
    db.commit()
    logger.info(
        "Name review for document %s: %s (confidence=%s)",
        document.id,
        decision,
        document.name_validation.get("confidence"),
    )
    return NameReviewResponse(
        document_id=document.id,
        decision=decision,
        name_validation=NameValidationResponse(**document.name_validation),
    )
