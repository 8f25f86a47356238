"""Flattening of backend job warnings into message and code lists."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Dict, List, Mapping, Optional

FALLBACK_MESSAGE = "Warning reported by backend."
MESSAGE_KEYS = ("message", "reason", "detail", "code")


@dataclass
class JobWarnings:
    messages: List[str] = field(default_factory=list)
    codes: List[str] = field(default_factory=list)

    def to_dict(self) -> Dict[str, List[str]]:
        return {"messages": list(self.messages), "codes": list(self.codes)}


def _warning_message(warning: Mapping[str, Any]) -> str:
    for key in MESSAGE_KEYS:
        value = warning.get(key)
        if value is not None:
            return str(value)
    return FALLBACK_MESSAGE


def _warning_code(warning: Mapping[str, Any]) -> Optional[str]:
    code = warning.get("code")
    return code if isinstance(code, str) and code else None


def _dedupe(values: List[str]) -> List[str]:
    return list(dict.fromkeys(values))


def extract_warnings(warnings: Any) -> JobWarnings:
    """
    Collect warning messages and codes from a backend ``warnings`` field.

    Each item may be a plain string or an object with any of
    ``code``/``message``/``reason``/``detail``. Anything that is not a list
    yields empty results.
    """
    if not isinstance(warnings, list):
        return JobWarnings()

    messages: List[str] = []
    codes: List[str] = []
    for warning in warnings:
        if isinstance(warning, str):
            messages.append(warning)
            continue
        if isinstance(warning, Mapping):
            message = _warning_message(warning)
            if message:
                messages.append(message)
            code = _warning_code(warning)
            if code:
                codes.append(code)

    return JobWarnings(messages=_dedupe(messages), codes=_dedupe(codes))
