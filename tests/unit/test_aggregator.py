import pytest

from heatsync.extraction.aggregator import aggregate_batch_results
from heatsync.extraction.exceptions import ExtractionError
from heatsync.extraction.models import ExtractionResult, SwimEvent


def _event(number: int, heat: int = 1, lane: int = 4, name: str = "Jane Doe") -> SwimEvent:
    return SwimEvent(
        event_number=number,
        event_name=f"Event {number}",
        heat_number=heat,
        lane=lane,
        swimmer_name=name,
    )


def _batch(events: list[SwimEvent], meet: str = "Meet", warnings: list[str] | None = None):  # type: ignore[no-untyped-def]
    return ExtractionResult(
        meet_name=meet,
        session_date="2025-01-11",
        events=events,
        warnings=warnings or [],
    )


class TestAggregateBatchResults:
    def test_dedups_and_sorts(self) -> None:
        e1, e3, e5 = _event(1), _event(3), _event(5)
        merged = aggregate_batch_results([_batch([e5, e1]), _batch([e1, e3])])
        assert merged.events == [e1, e3, e5]

    def test_keeps_first_occurrence(self) -> None:
        first = SwimEvent(1, "Event 1", 1, 4, "Jane Doe", seed_time="30.00")
        later = SwimEvent(1, "Event 1", 1, 4, "Jane Doe", seed_time="31.00")
        merged = aggregate_batch_results([_batch([first]), _batch([later])])
        assert merged.events == [first]

    def test_sorts_by_event_heat_lane(self) -> None:
        a = _event(2, heat=2, lane=1)
        b = _event(2, heat=1, lane=5)
        c = _event(2, heat=1, lane=3)
        merged = aggregate_batch_results([_batch([a, b, c])])
        assert merged.events == [c, b, a]

    def test_meta_from_first_batch(self) -> None:
        merged = aggregate_batch_results([_batch([], meet="Title Page Meet"), _batch([], meet="Other")])
        assert merged.meet_name == "Title Page Meet"

    def test_warnings_unioned_in_order(self) -> None:
        merged = aggregate_batch_results(
            [_batch([], warnings=["a", "b"]), _batch([], warnings=["b", "c"])]
        )
        assert merged.warnings == ["a", "b", "c"]

    def test_empty_input_raises(self) -> None:
        with pytest.raises(ExtractionError):
            aggregate_batch_results([])
