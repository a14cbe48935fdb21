from __future__ import annotations

from typing import List

from fastapi import APIRouter, Depends, File, Form, HTTPException, UploadFile, status
from sqlalchemy.orm import Session

from backend.db import get_db
from backend.db_models import DocumentORM, TaxReturnORM, UserORM
from backend.deps import get_current_user, require_tax_return
from backend.schemas import DocumentListResponse, DocumentMetadata, TaxReturnCreate, TaxReturnRead, TaxReturnUpdate

router = APIRouter(prefix="/api/tax-returns", tags=["tax-returns"])

MAX_UPLOAD_BYTES = 10 * 1024 * 1024
ALLOWED_UPLOAD_TYPES = {"application/pdf", "image/png", "image/jpeg"}


def _clean_name(value):
    if value is None:
        return None
    return value.strip() or None


@router.post("", response_model=TaxReturnRead, status_code=status.HTTP_201_CREATED)
def create_tax_return(
    payload: TaxReturnCreate,
    user: UserORM = Depends(get_current_user),
    db: Session = Depends(get_db),
) -> TaxReturnRead:
    tax_return = TaxReturnORM(
        user_id=user.id,
        tax_year=payload.tax_year,
        filing_status=payload.filing_status,
        first_name=_clean_name(payload.first_name),
        last_name=_clean_name(payload.last_name),
        spouse_first_name=_clean_name(payload.spouse_first_name),
        spouse_last_name=_clean_name(payload.spouse_last_name),
    )
    db.add(tax_return)
    db.commit()
    db.refresh(tax_return)
    return TaxReturnRead.model_validate(tax_return)


@router.get("", response_model=List[TaxReturnRead])
def list_tax_returns(user: UserORM = Depends(get_current_user), db: Session = Depends(get_db)) -> List[TaxReturnRead]:
    rows = (
        db.query(TaxReturnORM)
        .filter(TaxReturnORM.user_id == user.id)
        .order_by(TaxReturnORM.tax_year.desc())
        .all()
    )
    return [TaxReturnRead.model_validate(r) for r in rows]


@router.get("/{tax_return_id}", response_model=TaxReturnRead)
def get_tax_return(
    tax_return_id: str,
    user: UserORM = Depends(get_current_user),
    db: Session = Depends(get_db),
) -> TaxReturnRead:
    return TaxReturnRead.model_validate(require_tax_return(db, tax_return_id, user))


@router.patch("/{tax_return_id}", response_model=TaxReturnRead)
def update_tax_return(
    tax_return_id: str,
    payload: TaxReturnUpdate,
    user: UserORM = Depends(get_current_user),
    db: Session = Depends(get_db),
) -> TaxReturnRead:
    """Update filing status and profile names; omitted fields are left unchanged."""
    tax_return = require_tax_return(db, tax_return_id, user)
    changes = payload.model_dump(exclude_unset=True)
    for key, value in changes.items():
        if key == "filing_status":
            if value is None:
                raise HTTPException(status_code=400, detail="filing_status cannot be null.")
            tax_return.filing_status = value
        else:
            setattr(tax_return, key, _clean_name(value))
    db.commit()
    db.refresh(tax_return)
    return TaxReturnRead.model_validate(tax_return)


@router.post("/{tax_return_id}/documents", response_model=DocumentMetadata, status_code=status.HTTP_201_CREATED)
async def upload_document(
    tax_return_id: str,
    file: UploadFile = File(...),
    document_type: str = Form("W2"),
    user: UserORM = Depends(get_current_user),
    db: Session = Depends(get_db),
) -> DocumentMetadata:
    """Store an uploaded PDF/image against a tax return; processing is a separate step."""
    tax_return = require_tax_return(db, tax_return_id, user)

    doc_type = document_type.strip().upper().replace("-", "")
    if not doc_type:
        raise HTTPException(status_code=400, detail="Document type is required.")
    if file.content_type and file.content_type not in ALLOWED_UPLOAD_TYPES:
        raise HTTPException(status_code=400, detail=f"Unsupported file type: {file.content_type}")

    raw = await file.read()
    if not raw:
        raise HTTPException(status_code=400, detail="Empty file.")
    if len(raw) > MAX_UPLOAD_BYTES:
        raise HTTPException(status_code=400, detail="File exceeds the 10 MB upload limit.")

    document = DocumentORM(
        tax_return_id=tax_return.id,
        filename=file.filename or "upload",
        document_type=doc_type,
        file_type=file.content_type,
        content=raw,
        processing_status="PENDING",
    )
    db.add(document)
    db.commit()
    db.refresh(document)
    return DocumentMetadata.model_validate(document)


@router.get("/{tax_return_id}/documents", response_model=DocumentListResponse)
def list_documents(
    tax_return_id: str,
    user: UserORM = Depends(get_current_user),
    db: Session = Depends(get_db),
) -> DocumentListResponse:
    tax_return = require_tax_return(db, tax_return_id, user)
    docs = (
        db.query(DocumentORM)
        .filter(DocumentORM.tax_return_id == tax_return.id)
        .order_by(DocumentORM.uploaded_at.desc())
        .all()
    )
    return DocumentListResponse(documents=[DocumentMetadata.model_validate(d) for d in docs])
