from __future__ import annotations

from typing import Mapping, Optional

from extraction.vocabulary import canonicalize
from schemas.fields import ENUM_FIELDS, ExtractedValue, IssueField, Provenance

# Ceiling for an enumeration value that could not be canonicalized: kept as a
# hint for question phrasing, never auto-accepted.
DEMOTED_CONFIDENCE = 0.3


def validate(
    field: IssueField,
    value: Optional[str],
    confidence: float,
    provenance: Provenance = Provenance.MODEL_INFERRED,
) -> ExtractedValue:
    """
    Normalize one extracted value.

    Free-text fields pass through. Enumeration values are mapped to their
    canonical form; an unmappable value keeps its raw text with confidence
    demoted to at most DEMOTED_CONFIDENCE and valid=False. Confidence is
    clamped to [0, 1] by ExtractedValue.
    """
    if value is None or field not in ENUM_FIELDS:
        return ExtractedValue(value=value, confidence=confidence, provenance=provenance)

    canonical = canonicalize(field, value)
    if canonical is not None:
        return ExtractedValue(value=canonical, confidence=confidence, provenance=provenance)

    demoted = ExtractedValue(value=value, confidence=confidence, provenance=provenance, valid=False)
    demoted.confidence = min(demoted.confidence, DEMOTED_CONFIDENCE)
    return demoted


def validate_extracted(field: IssueField, extracted: ExtractedValue) -> ExtractedValue:
    """Re-run validation on an ExtractedValue; idempotent."""
    return validate(field, extracted.value, extracted.confidence, extracted.provenance)


def validate_all(extracted: Mapping[IssueField, ExtractedValue]) -> dict[IssueField, ExtractedValue]:
    """Validate every field, filling the ones the extractor did not return with absent values."""
    return {
        field: validate_extracted(field, extracted.get(field) or ExtractedValue.absent())
        for field in IssueField
    }
