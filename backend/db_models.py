from __future__ import annotations

import uuid
from datetime import datetime

from sqlalchemy import Column, DateTime, Float, ForeignKey, Integer, LargeBinary, String, Text
from sqlalchemy.types import JSON

from backend.db import Base


def _uuid_str() -> str:
    return str(uuid.uuid4())


class UserORM(Base):
    __tablename__ = "users"

    id = Column(String, primary_key=True, default=_uuid_str)
    email = Column(String, nullable=False, unique=True, index=True)
    hashed_password = Column(String, nullable=False)
    full_name = Column(String, nullable=True)
    is_active = Column(Integer, nullable=False, default=1)

    created_at = Column(DateTime, nullable=False, default=datetime.utcnow)


class TaxReturnORM(Base):
    __tablename__ = "tax_returns"

    id = Column(String, primary_key=True, default=_uuid_str)
    user_id = Column(String, ForeignKey("users.id"), nullable=False, index=True)
    tax_year = Column(Integer, nullable=False)
    filing_status = Column(String, nullable=False, default="single")
    first_name = Column(String, nullable=True)
    last_name = Column(String, nullable=True)
    spouse_first_name = Column(String, nullable=True)
    spouse_last_name = Column(String, nullable=True)

    created_at = Column(DateTime, nullable=False, default=datetime.utcnow)
    updated_at = Column(DateTime, nullable=False, default=datetime.utcnow, onupdate=datetime.utcnow)


JSONType = JSON


class DocumentORM(Base):
    __tablename__ = "documents"

    id = Column(String, primary_key=True, default=_uuid_str)
    tax_return_id = Column(String, ForeignKey("tax_returns.id"), nullable=False, index=True)
    filename = Column(String, nullable=False)
    document_type = Column(String, nullable=False)
    file_type = Column(String, nullable=True)
    content = Column(LargeBinary, nullable=False)
    processing_status = Column(String, nullable=False, default="PENDING")
    processing_method = Column(String, nullable=True)
    ocr_text = Column(Text, nullable=True)
    extracted_data = Column(JSONType, nullable=True)
    confidence = Column(Float, nullable=True)
    name_validation = Column(JSONType, nullable=True)
    name_review_decision = Column(String, nullable=True)

    uploaded_at = Column(DateTime, nullable=False, default=datetime.utcnow)
    updated_at = Column(DateTime, nullable=False, default=datetime.utcnow, onupdate=datetime.utcnow)
