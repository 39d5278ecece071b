"""Decoding of library and catalog documents."""

import json
import math
from typing import Any

from src.modules.libraries.domain.exceptions import ParseError


def parse_json_bytes(content: bytes | str, origin: str = "document") -> Any:
    """Decode a JSON body; a UTF-8 BOM is tolerated.

    Raises:
        ParseError: the body is not valid JSON
    """
    try:
        if isinstance(content, bytes):
            content = content.decode("utf-8-sig")
        return json.loads(content)
    except (UnicodeDecodeError, json.JSONDecodeError) as exc:
        raise ParseError(f"{origin} is not valid JSON: {exc}") from exc


def finite_number(value: Any) -> float | None:
    """Return a decoded JSON value as a finite float, or None.

    bool is an int subclass but never a number here. JSON integers beyond
    the float range count as non-finite.
    """
    if isinstance(value, bool) or not isinstance(value, int | float):
        return None
    try:
        number = float(value)
    except OverflowError:
        return None
    return number if math.isfinite(number) else None
