from __future__ import annotations

import json
import math
from dataclasses import dataclass
from typing import Any, Optional, Union


@dataclass(frozen=True)
class Parsed:
    data: Any

    def to_body(self) -> Any:
        return self.data


@dataclass(frozen=True)
class RawText:
    text: str

    def to_body(self) -> dict[str, str]:
        return {"raw": self.text}


AnalysisResult = Union[Parsed, RawText]


def _reject_constant(name: str) -> Any:
    # NaN / Infinity literals are not JSON
    raise ValueError(f"Invalid JSON constant: {name}")


def _finite_float(literal: str) -> Optional[float]:
    # 1e400 is valid JSON but overflows to inf; send it back as null
    value = float(literal)
    return value if math.isfinite(value) else None


def parse_analysis(text: str | None) -> AnalysisResult:
    """
    One strict parse of the model text; anything that is not JSON is kept raw.

    Numbers too large for a float come back as ``None`` so the result can
    always be serialised.
    """
    text = text or ""
    try:
        return Parsed(json.loads(text, parse_constant=_reject_constant, parse_float=_finite_float))
    except ValueError:
        return RawText(text)
