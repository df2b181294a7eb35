from dataclasses import dataclass, field


@dataclass(frozen=True)
class SwimEvent:
    """One swimmer's entry in one heat of one event."""

    event_number: int
    event_name: str
    heat_number: int
    lane: int
    swimmer_name: str
    age: int | None = None
    team: str | None = None
    seed_time: str | None = None
    heat_start_time: str | None = None

    @property
    def dedup_key(self) -> tuple[int, int, int, str]:
        return (self.event_number, self.heat_number, self.lane, self.swimmer_name)

    @property
    def sort_key(self) -> tuple[int, int, int]:
        return (self.event_number, self.heat_number, self.lane)


@dataclass(frozen=True)
class MeetDateRange:
    """Inclusive meet date range as ISO dates."""

    start: str
    end: str


@dataclass(frozen=True)
class ExtractionResult:
    """Structured heat sheet data for one swimmer."""

    meet_name: str
    session_date: str
    meet_date_range: MeetDateRange | None = None
    venue: str | None = None
    events: list[SwimEvent] = field(default_factory=list)
    warnings: list[str] = field(default_factory=list)


def event_to_payload(event: SwimEvent) -> dict[str, object]:
    """Serialize a SwimEvent to the camelCase shape exposed to the UI."""
    payload: dict[str, object] = {
        "eventNumber": event.event_number,
        "eventName": event.event_name,
        "heatNumber": event.heat_number,
        "lane": event.lane,
        "swimmerName": event.swimmer_name,
    }
    optional = {
        "age": event.age,
        "team": event.team,
        "seedTime": event.seed_time,
        "heatStartTime": event.heat_start_time,
    }
    payload.update({key: value for key, value in optional.items() if value is not None})
    return payload


def result_to_payload(result: ExtractionResult) -> dict[str, object]:
    """Serialize an ExtractionResult to the camelCase shape exposed to the UI."""
    payload: dict[str, object] = {
        "meetName": result.meet_name,
        "sessionDate": result.session_date,
    }
    if result.meet_date_range is not None:
        payload["meetDateRange"] = {
            "start": result.meet_date_range.start,
            "end": result.meet_date_range.end,
        }
    if result.venue is not None:
        payload["venue"] = result.venue
    payload["events"] = [event_to_payload(e) for e in result.events]
    if result.warnings:
        payload["warnings"] = list(result.warnings)
    return payload
