from __future__ import annotations

import math
from collections.abc import Mapping
from typing import Any, NamedTuple

from leaderboard.services.errors import ValidationError


WEIGHT_TOLERANCE = 0.01


class Criterion(NamedTuple):
    name: str
    score_field: str
    weight_field: str
    default_weight: float


CRITERIA: tuple[Criterion, ...] = (
    Criterion("logic", "logic_score", "logic_weight", 0.25),
    Criterion("clarity", "clarity_score", "clarity_weight", 0.30),
    Criterion("testing", "testing_rate", "testing_weight", 0.0),
    Criterion("efficiency", "efficiency_score", "efficiency_weight", 0.0),
    Criterion("api_ui", "api_ui_score", "api_ui_weight", 0.20),
    Criterion("edge_cases", "edge_cases_score", "edge_cases_weight", 0.15),
    Criterion("creativity", "creativity_score", "creativity_weight", 0.10),
)

WEIGHT_FIELDS: tuple[str, ...] = tuple(c.weight_field for c in CRITERIA)
DEFAULT_WEIGHTS: dict[str, float] = {c.weight_field: c.default_weight for c in CRITERIA}

# ai_score and code_quality are recorded and range-checked but carry no weight.
SCORE_FIELDS: tuple[str, ...] = ("ai_score", "code_quality") + tuple(c.score_field for c in CRITERIA)
REQUIRED_SCORE_FIELDS: tuple[str, ...] = (
    "user_id",
    "challenge_id",
    "ai_score",
    "code_quality",
    "testing_rate",
    "logic_score",
    "clarity_score",
)


def _is_number(value: Any) -> bool:
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        return False
    return math.isfinite(value)


def _in_range(value: Any, low: float, high: float) -> bool:
    return _is_number(value) and low <= value <= high


def weight_total(weights: Mapping[str, Any]) -> float:
    """Sum the canonical weights; missing or non-numeric names count as 0."""
    total = 0.0
    for field in WEIGHT_FIELDS:
        value = weights.get(field)
        if _is_number(value):
            total += value
    return total


def validate_criteria(weights: Mapping[str, Any]) -> list[str]:
    """Return every violation in a weight set; an empty list means it is valid."""
    errors: list[str] = []

    for field in WEIGHT_FIELDS:
        value = weights.get(field)
        if value is not None and not _in_range(value, 0.0, 1.0):
            errors.append(f"{field} must be a number between 0 and 1")

    total = weight_total(weights)
    # Rounded so that a sum of exactly 0.99 or 1.01 is not rejected by float noise.
    if round(abs(total - 1.0), 9) > WEIGHT_TOLERANCE:
        errors.append(f"Total weight must equal 1.0, got {total:g}")

    return errors


def validate_raw_score(record: Mapping[str, Any]) -> list[str]:
    """Return every violation in a raw score submission."""
    errors: list[str] = []

    for field in REQUIRED_SCORE_FIELDS:
        if record.get(field) is None:
            errors.append(f"Missing required field: {field}")

    for field in SCORE_FIELDS:
        value = record.get(field)
        if value is not None and not _in_range(value, 0.0, 100.0):
            errors.append(f"{field} must be a number between 0 and 100")

    return errors


def ensure_valid_criteria(weights: Mapping[str, Any]) -> None:
    errors = validate_criteria(weights)
    if errors:
        raise ValidationError(errors, "Invalid criteria")


def ensure_valid_raw_score(record: Mapping[str, Any]) -> None:
    errors = validate_raw_score(record)
    if errors:
        raise ValidationError(errors, "Invalid AI score")


def resolve_weights(weights: Mapping[str, Any] | None) -> dict[str, Any]:
    """Expand a weight set to every canonical weight name.

    A challenge with no weights configured (``None`` or an empty mapping) is
    scored with ``DEFAULT_WEIGHTS``. Otherwise omitted names weigh 0, the same
    way ``validate_criteria`` counts them towards the total.
    """
    if not weights:
        return dict(DEFAULT_WEIGHTS)
    return {field: (0.0 if weights.get(field) is None else weights.get(field)) for field in WEIGHT_FIELDS}
