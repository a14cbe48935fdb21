"""Name reconciliation between extracted tax documents and the filer profile.

A W-2 (or 1099) carries the name of the person it was issued to. Before the
document is attached to a return we compare that name against the primary
taxpayer and spouse stored on the profile and report which of them the
document most likely belongs to.

Every function here is total: malformed input degrades to a zero-confidence
result with a descriptive reason instead of raising.
"""

from __future__ import annotations

import logging
import re
from dataclasses import dataclass, field
from decimal import ROUND_HALF_UP, Decimal
from typing import Any, List, Mapping, Optional, Sequence, Tuple

logger = logging.getLogger(__name__)

VALIDITY_THRESHOLD = 70

# (minimum score, label), checked top to bottom.
REASON_THRESHOLDS: Tuple[Tuple[int, str], ...] = (
    (90, "strong match"),
    (70, "good match"),
    (50, "partial match"),
    (30, "weak match"),
)
NO_MATCH = "no match"

_NON_LATIN = re.compile(r"[^a-z\s]")
_WHITESPACE = re.compile(r"\s+")


@dataclass(frozen=True)
class NameComparison:
    score: int
    reason: str


@dataclass(frozen=True)
class MatchResult:
    score: int
    primary_match: bool
    spouse_match: bool
    reason: str


@dataclass(frozen=True)
class ValidationResult:
    """Best match across all (document name x profile name) pairs."""

    is_valid: bool
    confidence: int
    primary_taxpayer: bool
    spouse: bool
    reason: str
    document_names: List[str] = field(default_factory=list)
    profile_names: List[str] = field(default_factory=list)

    def to_dict(self) -> dict:
        return {
            "isValid": self.is_valid,
            "confidence": self.confidence,
            "matches": {"primaryTaxpayer": self.primary_taxpayer, "spouse": self.spouse},
            "details": {
                "documentNames": list(self.document_names),
                "profileNames": list(self.profile_names),
                "reason": self.reason,
            },
        }


def _clean(value: Any) -> Optional[str]:
    if not isinstance(value, str):
        return None
    value = value.strip()
    return value or None


def extract_names(document_fields: Any) -> List[str]:
    """
    Collect candidate person names from extracted document fields.

    employeeName and recipientName are taken when present. employerName is a
    weak stand-in and is only used when the document carries no employeeName
    value at all; a blank or non-string employeeName still counts as present.
    """
    if not isinstance(document_fields, Mapping):
        logger.warning("extract_names: expected a mapping, got %s", type(document_fields).__name__)
        return []

    names: List[str] = []
    employee = _clean(document_fields.get("employeeName"))
    if employee:
        names.append(employee)
    recipient = _clean(document_fields.get("recipientName"))
    if recipient:
        names.append(recipient)
    if not document_fields.get("employeeName"):
        employer = _clean(document_fields.get("employerName"))
        if employer:
            names.append(employer)
    return names


def _profile_value(profile: Any, camel: str, snake: str) -> str:
    if profile is None:
        return ""
    if isinstance(profile, Mapping):
        raw = profile.get(camel, profile.get(snake))
    else:
        raw = getattr(profile, snake, None)
        if raw is None:
            raw = getattr(profile, camel, None)
    return raw if isinstance(raw, str) else ""


def build_profile_names(profile: Any) -> List[str]:
    """Full names declared on the profile; index 0 is the primary taxpayer, index 1 the spouse."""
    first = _profile_value(profile, "firstName", "first_name")
    last = _profile_value(profile, "lastName", "last_name")
    spouse_first = _profile_value(profile, "spouseFirstName", "spouse_first_name")
    spouse_last = _profile_value(profile, "spouseLastName", "spouse_last_name")
    if spouse_first.strip() and not spouse_last.strip():
        spouse_last = last

    names: List[str] = []
    for full_name in (f"{first} {last}".strip(), f"{spouse_first} {spouse_last}".strip()):
        if full_name:
            names.append(full_name)
    return names


def normalize_name(value: str) -> str:
    lowered = _NON_LATIN.sub("", value.lower())
    return _WHITESPACE.sub(" ", lowered).strip()


def reason_for_score(score: int) -> str:
    for minimum, label in REASON_THRESHOLDS:
        if score >= minimum:
            return label
    return NO_MATCH


def compare_names(a: Any, b: Any) -> NameComparison:
    """Score how closely two person names agree, 0-100."""
    if not _clean(a) or not _clean(b):
        return NameComparison(0, "empty comparison")

    norm_a = normalize_name(a)
    norm_b = normalize_name(b)
    if not norm_a or not norm_b:
        return NameComparison(0, "empty after normalization")
    if norm_a == norm_b:
        return NameComparison(100, "exact match")

    # single letters are initials or OCR noise
    parts_a = [p for p in norm_a.split(" ") if len(p) > 1]
    parts_b = [p for p in norm_b.split(" ") if len(p) > 1]
    if not parts_a or not parts_b:
        return NameComparison(0, "no valid name parts")

    matching = Decimal("0")
    if parts_a[0] == parts_b[0]:
        matching += 1
    if len(parts_a) > 1 and len(parts_b) > 1 and parts_a[-1] == parts_b[-1]:
        matching += 1
    for middle_a in parts_a[1:-1]:
        for middle_b in parts_b[1:-1]:
            if middle_a == middle_b:
                matching += Decimal("0.5")

    ratio = matching / min(len(parts_a), len(parts_b)) * 100
    score = min(int(ratio.quantize(Decimal("1"), rounding=ROUND_HALF_UP)), 100)
    return NameComparison(score, reason_for_score(score))


def _best_match(document_names: Sequence[str], profile_names: Sequence[str]) -> MatchResult:
    best = MatchResult(score=0, primary_match=False, spouse_match=False, reason=NO_MATCH)
    for doc_name in document_names:
        for index, profile_name in enumerate(profile_names):
            comparison = compare_names(doc_name, profile_name)
            if comparison.score > best.score:
                best = MatchResult(
                    score=comparison.score,
                    primary_match=index == 0,
                    spouse_match=index == 1,
                    reason=comparison.reason,
                )
    return best


def validate_names(profile: Any, document_names: Any) -> ValidationResult:
    """Reconcile document names against the profile and decide if they belong together."""
    if isinstance(document_names, str) or not isinstance(document_names, Sequence):
        document_names = []
    doc_names = [n for n in document_names if _clean(n)]
    profile_names = build_profile_names(profile)

    if not doc_names:
        return ValidationResult(
            is_valid=False,
            confidence=0,
            primary_taxpayer=False,
            spouse=False,
            reason="no names found in document",
            document_names=doc_names,
            profile_names=profile_names,
        )
    if not profile_names:
        return ValidationResult(
            is_valid=False,
            confidence=0,
            primary_taxpayer=False,
            spouse=False,
            reason="no names in profile",
            document_names=doc_names,
            profile_names=profile_names,
        )

    best = _best_match(doc_names, profile_names)
    logger.debug(
        "Name validation: %d document name(s) x %d profile name(s) -> score=%s reason=%s",
        len(doc_names),
        len(profile_names),
        best.score,
        best.reason,
    )
    return ValidationResult(
        is_valid=best.score >= VALIDITY_THRESHOLD,
        confidence=best.score,
        primary_taxpayer=best.primary_match,
        spouse=best.spouse_match,
        reason=best.reason,
        document_names=doc_names,
        profile_names=profile_names,
    )


__all__ = [
    "MatchResult",
    "NameComparison",
    "VALIDITY_THRESHOLD",
    "ValidationResult",
    "build_profile_names",
    "compare_names",
    "extract_names",
    "normalize_name",
    "reason_for_score",
    "validate_names",
]
