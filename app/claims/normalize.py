"""
Normalisation of free-form analyzer values to the stored vocabularies.
"""
import logging
from typing import Any, List, Optional

logger = logging.getLogger(__name__)

SEVERITY_MAP = {
    "minor": "minor",
    "light": "minor",
    "low": "minor",
    "minimal": "minor",
    "slight": "minor",
    "moderate": "moderate",
    "medium": "moderate",
    "average": "moderate",
    "standard": "moderate",
    "unknown": "moderate",
    "severe": "severe",
    "high": "severe",
    "heavy": "severe",
    "critical": "severe",
    "major": "severe",
    "extensive": "severe",
    "total_loss": "total_loss",
    "totalloss": "total_loss",
    "total": "total_loss",
    "totaled": "total_loss",
    "write-off": "total_loss",
    "write off": "total_loss",
    "destroyed": "total_loss",
}

DAMAGE_TYPE_MAP = {
    "collision": "collision",
    "impact": "collision",
    "crash": "collision",
    "accident": "collision",
    "rear-end": "collision",
    "side-impact": "collision",
    "rollover": "collision",
    "comprehensive": "comprehensive",
    "fire": "comprehensive",
    "animal": "comprehensive",
    "weather": "weather",
    "hail": "weather",
    "storm": "weather",
    "flood": "weather",
    "wind": "weather",
    "snow": "weather",
    "vandalism": "vandalism",
    "malicious": "vandalism",
    "intentional": "vandalism",
    "unknown": "unknown",
    "mechanical": "unknown",
    "theft": "unknown",
}

COMPLEXITY_MAP = {
    "simple": "simple",
    "minor": "simple",
    "easy": "simple",
    "basic": "simple",
    "moderate": "moderate",
    "medium": "moderate",
    "average": "moderate",
    "normal": "moderate",
    "complex": "complex",
    "complicated": "complex",
    "difficult": "complex",
    "high": "complex",
    "extensive": "extensive",
    "severe": "extensive",
    "major": "extensive",
    "significant": "extensive",
    "total_loss": "extensive",
}

VERIFICATION_STATUSES = ("matched", "mismatched", "insufficient_data")
ASSESSMENT_STATUSES = ("approved", "denied", "partial", "needs_investigation")


def _key(value: Optional[str]) -> str:
    return (value or "").strip().lower()


def normalize_severity(value: Optional[str]) -> str:
    """Map to minor / moderate / severe / total_loss; unknown values become moderate."""
    mapped = SEVERITY_MAP.get(_key(value))
    if mapped is None:
        logger.warning(f"Unknown severity value {value!r}, defaulting to 'moderate'")
        return "moderate"
    return mapped


def normalize_part_severity(value: Optional[str]) -> str:
    """Per-part severity has no total_loss level."""
    severity = normalize_severity(value)
    return "severe" if severity == "total_loss" else severity


def normalize_damage_type(value: Optional[str]) -> str:
    key = _key(value)
    mapped = DAMAGE_TYPE_MAP.get(key)
    if mapped:
        return mapped

    # Compound terms such as "minor collision damage"
    for keyword in ("collision", "crash", "impact"):
        if keyword in key:
            return "collision"
    for keyword in ("weather", "hail", "storm"):
        if keyword in key:
            return "weather"
    if "vandal" in key:
        return "vandalism"

    if key:
        logger.warning(f"Unknown damage_type value {value!r}, defaulting to 'unknown'")
    return "unknown"


def normalize_repair_complexity(value: Optional[str]) -> str:
    key = _key(value)
    mapped = COMPLEXITY_MAP.get(key)
    if mapped:
        return mapped
    if key:
        logger.warning(f"Unknown repair complexity {value!r}, defaulting to 'moderate'")
    return "moderate"


def normalize_choice(value: Optional[str], allowed: tuple, default: str) -> str:
    key = _key(value)
    return key if key in allowed else default


def to_valid_string(value: Any, max_length: int) -> str:
    """Trim and truncate; None becomes the empty string."""
    if value is None:
        return ""
    return str(value).strip()[:max_length]


def to_valid_string_list(values: Optional[List[Any]], max_length: int) -> List[str]:
    """Keep non-empty strings only, each truncated to max_length."""
    result = []
    for item in values or []:
        if not isinstance(item, str):
            continue
        item = item.strip()[:max_length]
        if item:
            result.append(item)
    return result
