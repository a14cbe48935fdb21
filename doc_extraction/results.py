from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Dict


@dataclass
class ExtractionResult:
    document_type: str
    ocr_text: str
    extracted_data: Dict[str, Any] = field(default_factory=dict)
    confidence: float = 0.0
    processing_method: str = ""


__all__ = ["ExtractionResult"]
