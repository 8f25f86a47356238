"""
Normalization of bounding boxes and selections from backend payloads.

The backend's JSON shape for a track or frame selection changes between
versions, so every logical field is looked up through an ordered alias
table. Values that cannot be coerced are reported as ``None``; partial
boxes are never zero-filled.
"""

from __future__ import annotations

import math
from dataclasses import asdict, dataclass
from typing import Any, Dict, Mapping, Optional, Sequence, Union

JsonValue = Any
Number = Union[int, float]

BBOX_SOURCE_KEYS = (
    "bbox_xywh",
    "bbox",
    "box",
    "bounding_box",
    "boundingBox",
    "selection",
    "target",
)
TIME_SEC_KEYS = (
    "timeSec",
    "time_sec",
    "frameTimeSec",
    "frame_time_sec",
    "t",
    "sample_time_sec",
    "sampleTimeSec",
)
FRAME_KEY_KEYS = ("frameKey", "frame_key", "key", "s3_key", "s3Key")
CANDIDATE_TIME_KEYS = ("frameTimeSec", "frame_time_sec", "t")
BBOX_FIELDS = ("x", "y", "w", "h")
RADIX_PREFIXES = ("0x", "0o", "0b")


@dataclass(frozen=True)
class NormalizedBBox:
    x: Number
    y: Number
    w: Number
    h: Number

    def to_dict(self) -> Dict[str, Number]:
        return asdict(self)


@dataclass(frozen=True)
class Selection:
    """A frame key, time point and box chosen by the user. Any part may be missing."""
    frame_key: Optional[str]
    time_sec: Optional[Number]
    bbox: Optional[NormalizedBBox]

    @property
    def is_complete(self) -> bool:
        return self.bbox is not None and self.time_sec is not None

    def to_dict(self) -> Dict[str, Any]:
        return {
            "frameKey": self.frame_key,
            "timeSec": self.time_sec,
            "bbox": self.bbox.to_dict() if self.bbox else None,
        }


def coerce_number(value: JsonValue) -> Optional[Number]:
    """
    Coerce an untyped value into a finite number.

    Args:
        value: Any JSON-decoded value

    Returns:
        The number, or None for booleans, non-finite numbers, blank or
        non-numeric strings and every other type
    """
    if isinstance(value, bool):
        return None
    if isinstance(value, int):
        try:
            float(value)
        except OverflowError:
            return None
        return value
    if isinstance(value, float):
        return value if math.isfinite(value) else None
    if isinstance(value, str):
        trimmed = value.strip()
        # float() also accepts digit separators, JSON numbers do not
        if not trimmed or "_" in trimmed:
            return None
        try:
            parsed = float(trimmed)
        except ValueError:
            return _parse_prefixed_int(trimmed)
        return parsed if math.isfinite(parsed) else None
    return None


def _parse_prefixed_int(text: str) -> Optional[Number]:
    # unsigned 0x/0o/0b literals only
    if text[:2].lower() not in RADIX_PREFIXES:
        return None
    try:
        parsed = int(text, 0)
    except ValueError:
        return None
    try:
        float(parsed)
    except OverflowError:
        return None
    return parsed


def first_present(record: JsonValue, keys: Sequence[str]) -> JsonValue:
    """Return the value of the first key in ``keys`` that is set and not None."""
    if not isinstance(record, Mapping):
        return None
    for key in keys:
        value = record.get(key)
        if value is not None:
            return value
    return None


def extract_bbox(record: JsonValue) -> Optional[NormalizedBBox]:
    if not isinstance(record, Mapping):
        return None
    source = first_present(record, BBOX_SOURCE_KEYS)
    values = []
    for name in BBOX_FIELDS:
        raw = record.get(name)
        if raw is None and isinstance(source, Mapping):
            raw = source.get(name)
        number = coerce_number(raw)
        if number is None:
            return None
        values.append(number)
    return NormalizedBBox(*values)


def extract_time_sec(record: JsonValue) -> Optional[Number]:
    return coerce_number(first_present(record, TIME_SEC_KEYS))


def extract_frame_key(record: JsonValue) -> Optional[str]:
    key = first_present(record, FRAME_KEY_KEYS)
    if isinstance(key, str) and key.strip():
        return key
    return None


def normalize_selection_input(record: JsonValue) -> Selection:
    return Selection(
        frame_key=extract_frame_key(record),
        time_sec=extract_time_sec(record),
        bbox=extract_bbox(record),
    )


def clamp_normalized(value: Number, lo: Number = 0, hi: Number = 1) -> Number:
    return min(hi, max(lo, value))


def build_select_track_payload(track_id: str, candidate: Mapping[str, Any]) -> Dict[str, Any]:
    """
    Build the select-track request body for a track candidate.

    Args:
        track_id: Backend track identifier
        candidate: Candidate record holding a frame time and x/y/w/h

    Returns:
        ``{"trackId", "selection": {"time_sec", "frame_time_sec", "bbox"}}``

    Raises:
        ValueError: The candidate has no frame time or an incomplete box
    """
    frame_time_sec = first_present(candidate, CANDIDATE_TIME_KEYS)
    bbox = {name: candidate.get(name) for name in BBOX_FIELDS}
    if frame_time_sec is None or any(value is None for value in bbox.values()):
        raise ValueError("Missing selection data for track candidate.")
    return {
        "trackId": track_id,
        "selection": {
            "time_sec": frame_time_sec,
            "frame_time_sec": frame_time_sec,
            "bbox": bbox,
        },
    }
