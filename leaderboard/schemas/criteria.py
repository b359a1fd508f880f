from __future__ import annotations

from typing import Any

from pydantic import BaseModel


class CriteriaIn(BaseModel):
    # Left untyped here: type, range and sum checks happen in validate_criteria so
    # that every violation is reported together.
    logic_weight: Any = None
    clarity_weight: Any = None
    testing_weight: Any = None
    efficiency_weight: Any = None
    api_ui_weight: Any = None
    edge_cases_weight: Any = None
    creativity_weight: Any = None


class CriteriaOut(BaseModel):
    challenge_id: str
    is_default: bool = False

    logic_weight: float
    clarity_weight: float
    testing_weight: float
    efficiency_weight: float
    api_ui_weight: float
    edge_cases_weight: float
    creativity_weight: float
