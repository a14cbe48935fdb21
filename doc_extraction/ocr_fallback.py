"""Regex recovery of W-2 fields from raw OCR text.

Used only when Document AI returns text but no entities (e.g. a generic form
parser that does not know the W-2 layout). Each field is searched for
independently with a list of patterns tried in order; a field that no
pattern yields is simply left out.
"""

from __future__ import annotations

import logging
import re
from typing import Callable, Dict, Iterable, Optional, Pattern

logger = logging.getLogger(__name__)

_AMOUNT = r"\$?\s*([0-9]{1,3}(?:,[0-9]{3})+(?:\.[0-9]{2})?|[0-9]+\.[0-9]{2}|[0-9]{3,})"

# Words that show up in all-caps W-2 lines but never in a person's name.
_NOT_A_PERSON = re.compile(
    r"\b(?:BOX|FORM|WAGES?|TAX|COPY|VOID|20\d\d|EMPLOYER|EMPLOYEE|UNIVERSITY|COLLEGE|CORP|LLC|INC|"
    r"DRIVE|SUITE|STREET|ROAD|AVE|DENTON|TEXAS|CALIFORNIA|FLORIDA|NEW YORK|CHICAGO|DALLAS|HOUSTON|ATLANTA)\b",
    re.IGNORECASE,
)
_NOT_AN_EMPLOYER = re.compile(r"\b(?:BOX|FORM|WAGES?|TAX|COPY|VOID|20\d\d|EMPLOYEE)\b", re.IGNORECASE)

EMPLOYEE_NAME_PATTERNS = [
    re.compile(r"Employee'?s name, address,? and ZIP code[ \t]*\n[ \t]*([A-Za-z][A-Za-z ,.\-]+)", re.IGNORECASE),
    # name line directly above a street address
    re.compile(
        r"^[ \t]*([A-Z][A-Z ]{4,40}?)[ \t]*\n[ \t]*\d+[^\n]*\b(?:APT|SUITE|DRIVE|DR|ST|STREET|ROAD|RD|AVE|AVENUE)\b",
        re.MULTILINE | re.IGNORECASE,
    ),
    re.compile(r"^[ \t]*([A-Z][A-Z ]{4,40}?)[ \t]*$", re.MULTILINE),
]

EMPLOYER_NAME_PATTERNS = [
    re.compile(r"Employer'?s name, address,? and ZIP code[ \t]*\n[ \t]*([A-Za-z][A-Za-z ,.'&\-]+)", re.IGNORECASE),
    re.compile(
        r"^[ \t]*([A-Z][A-Z .&]*\b(?:UNIVERSITY|COLLEGE|COMPANY|CORPORATION|CORP|LLC|INC|GROUP|SYSTEMS|SERVICES|SOLUTIONS)\b[A-Z .]*?)[ \t]*$",
        re.MULTILINE,
    ),
    re.compile(r"^[ \t]*([A-Z][A-Z ]{10,80}?)[ \t]*\n[^\n]*\b(?:DRIVE|STREET|ROAD|AVE|SUITE)\b", re.MULTILINE),
]

WAGES_PATTERNS = [
    re.compile(r"\b1\s+Wages,?\s*tips,?\s*other\s*comp(?:ensation)?\.?[ \t]*\n?[ \t]*" + _AMOUNT, re.IGNORECASE),
    re.compile(r"Wages,?\s*tips,?\s*other\s*comp(?:ensation)?\.?[ \t]*\n?[ \t]*" + _AMOUNT, re.IGNORECASE),
]

FEDERAL_TAX_PATTERNS = [
    re.compile(r"\b2\s+Federal\s*income\s*tax\s*withheld[ \t]*\n?[ \t]*" + _AMOUNT, re.IGNORECASE),
    re.compile(r"Federal\s*income\s*tax\s*withheld[ \t]*\n?[ \t]*" + _AMOUNT, re.IGNORECASE),
]

SOCIAL_SECURITY_WAGES_PATTERNS = [
    re.compile(r"\b3\s+Social\s*security\s*wages[ \t]*\n?[ \t]*" + _AMOUNT, re.IGNORECASE),
]

MEDICARE_WAGES_PATTERNS = [
    re.compile(r"\b5\s+Medicare\s*wages\s*and\s*tips[ \t]*\n?[ \t]*" + _AMOUNT, re.IGNORECASE),
]

EIN_PATTERNS = [
    re.compile(r"Employer(?:'?s)?\s+(?:FED\s+ID|identification)\s+number[^\n\d]*\n?[ \t]*(\d{2}-\d{7})", re.IGNORECASE),
    re.compile(r"FED ID number[ \t]*\n?[ \t]*(\d{2}-\d{7})", re.IGNORECASE),
    re.compile(r"\b(\d{2}-\d{7})\b"),
]

SSN_PATTERNS = [
    re.compile(r"Employee'?s\s+(?:SSA|social security)\s+number[ \t]*\n?[ \t]*(XXX-XX-\d{4})", re.IGNORECASE),
    re.compile(r"SSA number[ \t]*\n?[ \t]*(XXX-XX-\d{4})", re.IGNORECASE),
    re.compile(r"\b(XXX-XX-\d{4})\b", re.IGNORECASE),
    re.compile(r"\b(\d{3}-\d{2}-\d{4})\b"),
]

_EIN_RE = re.compile(r"\d{2}-\d{7}")
_SSN_RE = re.compile(r"(?:XXX-XX-\d{4}|\d{3}-\d{2}-\d{4})", re.IGNORECASE)


def looks_like_person_name(candidate: str) -> bool:
    if not (5 <= len(candidate) <= 50):
        return False
    if not re.fullmatch(r"[A-Z][A-Z\s]+", candidate):
        return False
    if _NOT_A_PERSON.search(candidate):
        return False
    words = candidate.split()
    return len(words) >= 2 and all(len(w) >= 2 for w in words)


def looks_like_employer_name(candidate: str) -> bool:
    return 3 <= len(candidate) <= 100 and not _NOT_AN_EMPLOYER.search(candidate)


def _parse_amount(raw: str) -> Optional[float]:
    try:
        return float(raw.replace(",", ""))
    except ValueError:
        return None


def positive_amount(raw: str) -> bool:
    value = _parse_amount(raw)
    return value is not None and value > 0


def non_negative_amount(raw: str) -> bool:
    value = _parse_amount(raw)
    return value is not None and value >= 0


def _first_match(
    text: str,
    patterns: Iterable[Pattern[str]],
    accept: Callable[[str], bool],
    clean: Callable[[str], str] = str.strip,
) -> Optional[str]:
    for pattern in patterns:
        for match in pattern.finditer(text):
            candidate = clean(match.group(1))
            if candidate and accept(candidate):
                return candidate
    return None


def _clean_amount(raw: str) -> str:
    return raw.replace(",", "").strip()


def _clean_name(raw: str) -> str:
    return " ".join(raw.split()).strip(" ,.")


def extract_w2_fields_from_text(text: str) -> Dict[str, str]:
    """Best-effort W-2 field extraction from OCR text; keys match the Document AI field names."""
    if not text:
        return {}

    searches = {
        "employeeName": (EMPLOYEE_NAME_PATTERNS, looks_like_person_name, _clean_name),
        "employerName": (EMPLOYER_NAME_PATTERNS, looks_like_employer_name, _clean_name),
        "wages": (WAGES_PATTERNS, positive_amount, _clean_amount),
        "federalTaxWithheld": (FEDERAL_TAX_PATTERNS, non_negative_amount, _clean_amount),
        "employerEIN": (EIN_PATTERNS, lambda v: bool(_EIN_RE.fullmatch(v)), str.strip),
        "employeeSSN": (SSN_PATTERNS, lambda v: bool(_SSN_RE.fullmatch(v)), str.strip),
        "socialSecurityWages": (SOCIAL_SECURITY_WAGES_PATTERNS, non_negative_amount, _clean_amount),
        "medicareWages": (MEDICARE_WAGES_PATTERNS, non_negative_amount, _clean_amount),
    }

    extracted: Dict[str, str] = {}
    for field_name, (patterns, accept, clean) in searches.items():
        value = _first_match(text, patterns, accept, clean)
        if value is not None:
            extracted[field_name] = value
            logger.debug("OCR fallback found %s", field_name)
        else:
            logger.debug("OCR fallback did not find %s", field_name)

    logger.info("OCR fallback recovered %d of %d W-2 fields", len(extracted), len(searches))
    return extracted


__all__ = [
    "extract_w2_fields_from_text",
    "looks_like_employer_name",
    "looks_like_person_name",
]
