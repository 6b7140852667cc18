"""JSON serialisation for swing events and analyzer stats.

Metric values come out of numpy reductions, so events and stats may carry
numpy scalars or, for degenerate windows, non-finite floats.  Everything
written by this package goes through :func:`safe_json_dumps`, which emits
strict JSON (``NaN``/``Infinity`` become ``null``).
"""

from __future__ import annotations

import json
import math
from collections.abc import Iterable
from pathlib import Path
from typing import Any

from .models import SwingEvent

__all__ = [
    "events_to_jsonl",
    "safe_json_dumps",
    "sanitize_for_json",
    "sanitize_value",
]


def _to_native(value: Any) -> Any:
    if isinstance(value, SwingEvent):
        return value.to_dict()
    if isinstance(value, Path):
        return str(value)
    # numpy arrays expose ndim; numpy scalars only item().
    if hasattr(value, "ndim") and hasattr(value, "tolist"):
        return value.tolist()
    if hasattr(value, "item") and not isinstance(value, (dict, list, tuple, str)):
        return value.item()
    return value


def sanitize_for_json(obj: Any) -> tuple[Any, bool]:
    """Return a plain-Python copy of *obj* and whether a non-finite float was replaced.

    Swing events are expanded through :meth:`SwingEvent.to_dict`, paths
    become strings, numpy values become native types, and tuples become
    lists.
    """
    replaced = False

    def _clean(value: Any) -> Any:
        nonlocal replaced
        value = _to_native(value)
        if isinstance(value, float):
            if math.isfinite(value):
                return value
            replaced = True
            return None
        if isinstance(value, dict):
            return {str(key): _clean(item) for key, item in value.items()}
        if isinstance(value, (list, tuple)):
            return [_clean(item) for item in value]
        return value

    return _clean(obj), replaced


def sanitize_value(value: Any) -> Any:
    return sanitize_for_json(value)[0]


def safe_json_dumps(value: Any) -> str:
    return json.dumps(sanitize_value(value), ensure_ascii=False, allow_nan=False)


def events_to_jsonl(events: Iterable[SwingEvent]) -> str:
    """One JSON object per line, newline-terminated; empty string for no events."""
    return "".join(f"{safe_json_dumps(event)}\n" for event in events)
