"""
Validation of inbound JSON payloads before they are forwarded upstream.

Validators collect every violated rule as a human readable issue string
instead of stopping at the first one, so the browser can show them all.
"""

from __future__ import annotations

import json
import logging
import math
from dataclasses import dataclass, field
from typing import Any, List, Mapping

from .errors import BadRequest
from .selection import BBOX_FIELDS, first_present

logger = logging.getLogger(__name__)

SELECTION_TIME_KEYS = ("time_sec", "frame_time_sec")


@dataclass
class ValidationResult:
    issues: List[str] = field(default_factory=list)

    @property
    def valid(self) -> bool:
        return not self.issues


def _is_finite_number(value: Any) -> bool:
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        return False
    return math.isfinite(value)


def _non_blank_string(value: Any) -> bool:
    return isinstance(value, str) and bool(value.strip())


def validate_select_track(payload: Any) -> ValidationResult:
    """
    Check a parsed select-track payload.

    Expected shape::

        {"trackId": "7",
         "selection": {"time_sec": 1.5,
                       "bbox": {"x": 0.1, "y": 0.2, "w": 0.3, "h": 0.4}}}

    ``frame_time_sec`` is accepted in place of ``time_sec``. Checks on the
    nested box are skipped when their parent object is missing.
    """
    record = payload if isinstance(payload, Mapping) else {}
    result = ValidationResult()

    if not _non_blank_string(record.get("trackId")):
        result.issues.append("trackId is required.")

    selection = record.get("selection")
    if not isinstance(selection, Mapping):
        result.issues.append("selection is required.")
        return result

    if not _is_finite_number(first_present(selection, SELECTION_TIME_KEYS)):
        result.issues.append("selection.time_sec must be a finite number.")

    bbox = selection.get("bbox")
    if not isinstance(bbox, Mapping):
        result.issues.append("selection.bbox is required.")
        return result

    for name in BBOX_FIELDS:
        if not _is_finite_number(bbox.get(name)):
            result.issues.append(f"selection.bbox.{name} must be a finite number.")
    return result


def validate_pick_player(payload: Any) -> ValidationResult:
    record = payload if isinstance(payload, Mapping) else {}
    result = ValidationResult()
    if not _non_blank_string(record.get("frame_key")):
        result.issues.append("frame_key is required.")
    if not _non_blank_string(record.get("track_id")):
        result.issues.append("track_id is required.")
    return result


def parse_json_body(body_text: str, route: str) -> Any:
    """
    Parse a raw request body, raising BadRequest for empty or malformed input.

    Args:
        body_text: Decoded request body
        route: Route name used in log lines

    Returns:
        The decoded JSON document
    """
    if not body_text:
        logger.warning(f"[{route}] rejected empty request body")
        raise BadRequest("Missing request body.", issues=["body is required"])
    try:
        return json.loads(body_text)
    except ValueError as e:
        logger.warning(f"[{route}] rejected malformed JSON: {e}")
        raise BadRequest("Invalid JSON payload.", issues=[str(e)]) from e
    except RecursionError as e:
        logger.warning(f"[{route}] rejected JSON nested too deeply")
        raise BadRequest("Invalid JSON payload.", issues=["JSON document is nested too deeply"]) from e


def parse_select_track_body(body_text: str) -> Any:
    """Parse and validate a select-track body, returning the decoded payload."""
    payload = parse_json_body(body_text, "select-track")
    validation = validate_select_track(payload)
    if not validation.valid:
        logger.warning(
            f"[select-track] invalid payload issues={validation.issues} payload={payload!r}"
        )
        raise BadRequest("Invalid select-track payload.", issues=validation.issues)
    return payload


def parse_pick_player_body(body_text: str) -> Any:
    payload = parse_json_body(body_text, "pick-player")
    validation = validate_pick_player(payload)
    if not validation.valid:
        logger.warning(
            f"[pick-player] invalid payload issues={validation.issues} payload={payload!r}"
        )
        raise BadRequest("Invalid pick-player payload.", issues=validation.issues)
    return payload
