from __future__ import annotations

import math
import re
from enum import Enum
from typing import Any

"""Known value sets for the materials upload template.

Each vocabulary carries the severity applied when a cell falls outside it:
an unknown category rejects the element header, while unknown element types
and units are accepted as custom values with a warning.
"""

__all__ = [
    "Severity",
    "Category",
    "ElementType",
    "Unit",
    "Included",
    "is_numeric",
    "to_float",
]

NUMERIC_TEXT = re.compile(r"[+-]?(?:\d+(?:\.\d*)?|\.\d+)(?:[eE][+-]?\d+)?", re.ASCII)


class Severity(Enum):
    ERROR = "error"
    WARNING = "warning"


class _Vocabulary(Enum):
    """Case-insensitive lookup shared by the template vocabularies."""

    @classmethod
    def lookup(cls, value: str) -> _Vocabulary | None:
        folded = value.strip().lower()
        for member in cls:
            if member.value.lower() == folded:
                return member
        return None

    @classmethod
    def values(cls) -> list[str]:
        return [m.value for m in cls]

    @classmethod
    def unknown_severity(cls) -> Severity:
        return Severity.WARNING


class Category(_Vocabulary):
    PRODUCTION = "production"
    HIRE = "hire"
    OUTSOURCED = "outsourced"

    @classmethod
    def unknown_severity(cls) -> Severity:
        return Severity.ERROR


class ElementType(_Vocabulary):
    STAGE = "stage"
    BACKDROP = "backdrop"
    SKIRTING = "skirting"
    FLOORING = "flooring"
    TRUSSING = "trussing"
    DECOR = "décor"
    LIGHTING = "lighting"
    SOUND = "sound"
    CHAIRS = "chairs"
    TABLES = "tables"
    SIGNAGE = "signage"
    CUSTOM = "custom"


class Unit(_Vocabulary):
    PCS = "Pcs"
    LTRS = "Ltrs"
    MTRS = "Mtrs"
    SQM = "sqm"
    PKS = "Pks"
    KGS = "Kgs"
    CUSTOM = "custom"


class Included(_Vocabulary):
    YES = "YES"
    NO = "NO"

    @classmethod
    def is_acceptable(cls, value: str) -> bool:
        # blank means "not specified" and is not reported
        return value == "" or value in cls.values()

    @classmethod
    def flag(cls, value: str) -> bool:
        """Only an explicit NO excludes a particular; anything else counts as YES."""
        return value != cls.NO.value


def is_numeric(value: Any) -> bool:
    """Return True for real numbers and strings holding a plain decimal number.

    Strings must look like "12", "-0.5", ".5" or "1e3" (ASCII digits only);
    digit grouping such as "1_000" or "1,000" is rejected.
    """
    if isinstance(value, bool):
        return False
    if isinstance(value, (int, float)):
        return math.isfinite(value)
    if isinstance(value, str):
        text = value.strip()
        if not NUMERIC_TEXT.fullmatch(text):
            return False
        return math.isfinite(float(text))
    return False


def to_float(value: Any) -> float:
    """Coerce a cell to float, using 0.0 for anything non-numeric."""
    if not is_numeric(value):
        return 0.0
    if isinstance(value, str):
        return float(value.strip())
    return float(value)
