"""Turns raw model output into a typed ExtractionResult.

Parsing is strict about the envelope and lenient about fields: text that is
not a JSON object is Malformed, but inside a valid object every missing or
mistyped field falls back to a default so that one odd value never discards
a whole extraction.
"""

import json
import math
import re
from dataclasses import dataclass
from datetime import date
from typing import Any

from heatsync.extraction.models import ExtractionResult, MeetDateRange, SwimEvent

UNKNOWN_MEET = "Unknown Meet"
UNKNOWN_EVENT = "Unknown Event"
UNKNOWN_SWIMMER = "Unknown"
NO_TIME = "NT"

_NO_TIME_MARKERS = frozenset({"", "NT", "NS"})
_HEAT_TIME_RE = re.compile(r"^([01]?\d|2[0-3]):([0-5]\d)$")


@dataclass(frozen=True)
class WellFormed:
    result: ExtractionResult


@dataclass(frozen=True)
class Malformed:
    raw_text: str
    reason: str


ParseOutcome = WellFormed | Malformed


def parse_model_output(raw: str, today: date | None = None) -> ParseOutcome:
    """Parse the model's JSON text into a ParseOutcome."""
    cleaned = _strip_code_fences(raw)
    try:
        parsed = json.loads(cleaned)
    except json.JSONDecodeError as exc:
        return Malformed(raw_text=raw, reason=f"Invalid JSON response: {exc}")
    if not isinstance(parsed, dict):
        return Malformed(raw_text=raw, reason="JSON response must be an object")
    return WellFormed(result=build_result(parsed, today=today))


def build_result(data: dict[str, Any], today: date | None = None) -> ExtractionResult:
    """Build an ExtractionResult from a decoded JSON object, applying defaults."""
    warnings = _coerce_warnings(data.get("warnings"))

    meet_date_range = _build_date_range(data.get("meetDateRange"))
    session_date = _coerce_iso_date(data.get("sessionDate"))
    if session_date is None:
        if meet_date_range is not None:
            session_date = meet_date_range.start
            warnings.append("Session date not found; using meet start date")
        else:
            session_date = (today or date.today()).isoformat()
            warnings.append("Session date not found; defaulted to today's date")

    raw_events = data.get("events")
    events: list[SwimEvent] = []
    if raw_events is None:
        pass
    elif not isinstance(raw_events, list):
        warnings.append("Model returned a non-list 'events' field; ignored")
    else:
        skipped = 0
        for item in raw_events:
            if isinstance(item, dict):
                events.append(build_event(item))
            else:
                skipped += 1
        if skipped:
            warnings.append(f"Skipped {skipped} malformed event entr{'y' if skipped == 1 else 'ies'}")

    return ExtractionResult(
        meet_name=_coerce_str(data.get("meetName"), UNKNOWN_MEET),
        session_date=session_date,
        meet_date_range=meet_date_range,
        venue=_coerce_optional_str(data.get("venue")),
        events=events,
        warnings=warnings,
    )


def build_event(raw: dict[str, Any]) -> SwimEvent:
    """Build a SwimEvent from a camelCase dict (model output or cached JSONB)."""
    age = _coerce_int(raw.get("age"))
    return SwimEvent(
        event_number=_coerce_int(raw.get("eventNumber")),
        event_name=_coerce_str(raw.get("eventName"), UNKNOWN_EVENT),
        heat_number=_coerce_int(raw.get("heatNumber")),
        lane=_coerce_int(raw.get("lane")),
        swimmer_name=_coerce_str(raw.get("swimmerName"), UNKNOWN_SWIMMER),
        age=age if age > 0 else None,
        team=_coerce_optional_str(raw.get("team")),
        seed_time=_coerce_seed_time(raw.get("seedTime")),
        heat_start_time=_coerce_heat_time(raw.get("heatStartTime")),
    )


def _strip_code_fences(raw: str) -> str:
    cleaned = raw.strip()
    if cleaned.startswith("```"):
        lines = cleaned.splitlines()
        if lines and lines[0].startswith("```"):
            lines = lines[1:]
        if lines and lines[-1].strip() == "```":
            lines = lines[:-1]
        cleaned = "\n".join(lines)
    return cleaned


def _coerce_int(raw: Any) -> int:
    if isinstance(raw, bool) or raw is None:
        return 0
    if isinstance(raw, int):
        return raw
    try:
        value = float(raw) if isinstance(raw, float) else float(str(raw).strip())
    except ValueError:
        return 0
    if math.isnan(value) or math.isinf(value):
        return 0
    return int(value)


def _coerce_str(raw: Any, default: str) -> str:
    value = _coerce_optional_str(raw)
    return value if value is not None else default


def _coerce_optional_str(raw: Any) -> str | None:
    if raw is None or isinstance(raw, (dict, list)):
        return None
    value = str(raw).strip()
    return value or None


def _coerce_seed_time(raw: Any) -> str | None:
    if raw is None:
        return None
    value = str(raw).strip()
    if value.upper() in _NO_TIME_MARKERS:
        return NO_TIME
    return value


def _coerce_heat_time(raw: Any) -> str | None:
    if not isinstance(raw, str):
        return None
    match = _HEAT_TIME_RE.match(raw.strip())
    if match is None:
        return None
    return f"{int(match.group(1)):02d}:{match.group(2)}"


def _coerce_iso_date(raw: Any) -> str | None:
    if not isinstance(raw, str):
        return None
    try:
        return date.fromisoformat(raw.strip()[:10]).isoformat()
    except ValueError:
        return None


def _build_date_range(raw: Any) -> MeetDateRange | None:
    if not isinstance(raw, dict):
        return None
    start = _coerce_iso_date(raw.get("start"))
    end = _coerce_iso_date(raw.get("end"))
    if start is None or end is None:
        return None
    return MeetDateRange(start=start, end=end)


def _coerce_warnings(raw: Any) -> list[str]:
    if not isinstance(raw, list):
        return []
    return [str(w).strip() for w in raw if w is not None and str(w).strip()]
