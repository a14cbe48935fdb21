from __future__ import annotations

from datetime import datetime
from typing import Any, Dict, List, Literal, Optional

from pydantic import BaseModel, ConfigDict, EmailStr, Field

FilingStatus = Literal["single", "married_joint", "married_separate", "head_of_household"]
ProviderName = Literal["google", "llm"]


class Token(BaseModel):
    access_token: str
    token_type: str = "bearer"


class RegisterRequest(BaseModel):
    email: EmailStr
    password: str = Field(min_length=6)
    full_name: Optional[str] = None


class LoginRequest(BaseModel):
    email: EmailStr
    password: str


class UserRead(BaseModel):
    id: str
    email: str
    full_name: Optional[str] = None
    is_active: bool


class TaxReturnCreate(BaseModel):
    tax_year: int = Field(ge=2000, le=2100)
    filing_status: FilingStatus = "single"
    first_name: Optional[str] = None
    last_name: Optional[str] = None
    spouse_first_name: Optional[str] = None
    spouse_last_name: Optional[str] = None


class TaxReturnUpdate(BaseModel):
    filing_status: Optional[FilingStatus] = None
    first_name: Optional[str] = None
    last_name: Optional[str] = None
    spouse_first_name: Optional[str] = None
    spouse_last_name: Optional[str] = None


class TaxReturnRead(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: str
    tax_year: int
    filing_status: str
    first_name: Optional[str] = None
    last_name: Optional[str] = None
    spouse_first_name: Optional[str] = None
    spouse_last_name: Optional[str] = None
    created_at: datetime
    updated_at: datetime


class DocumentMetadata(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: str
    tax_return_id: str
    filename: str
    document_type: str
    file_type: Optional[str] = None
    processing_status: str
    processing_method: Optional[str] = None
    confidence: Optional[float] = None
    name_review_decision: Optional[str] = None
    uploaded_at: datetime
    updated_at: datetime


class DocumentDetail(DocumentMetadata):
    extracted_data: Dict[str, Any] = Field(default_factory=dict)
    name_validation: Optional[Dict[str, Any]] = None
    ocr_text_preview: Optional[str] = None


class DocumentListResponse(BaseModel):
    documents: List[DocumentMetadata]


class ProcessDocumentRequest(BaseModel):
    provider: Optional[ProviderName] = None


class ProcessDocumentResponse(BaseModel):
    success: bool
    message: str
    processingMethod: str
    documentType: str
    confidence: float
    extractedData: Dict[str, Any] = Field(default_factory=dict)
    ocrTextPreview: Optional[str] = None


class NameMatches(BaseModel):
    primaryTaxpayer: bool
    spouse: bool


class NameValidationDetails(BaseModel):
    documentNames: List[str] = Field(default_factory=list)
    profileNames: List[str] = Field(default_factory=list)
    reason: str


class NameValidationResponse(BaseModel):
    isValid: bool
    confidence: int
    matches: NameMatches
    details: NameValidationDetails


class NameReviewRequest(BaseModel):
    proceed: bool


class NameReviewResponse(BaseModel):
    document_id: str
    decision: Literal["proceed", "reject"]
    name_validation: Optional[NameValidationResponse] = None
