from heatsync.extraction.models import ExtractionResult, SwimEvent
from heatsync.extraction.post_filter import filter_events_for_swimmer
from heatsync.utils.names import normalize_swimmer_name


def _result(*names: str) -> ExtractionResult:
    return ExtractionResult(
        meet_name="Meet",
        session_date="2025-01-11",
        events=[SwimEvent(i + 1, "50 Free", 1, 4, name) for i, name in enumerate(names)],
    )


class TestFilterEventsForSwimmer:
    def test_removes_similar_name_with_warning(self) -> None:
        filtered = filter_events_for_swimmer(_result("Elsa Liu"), normalize_swimmer_name("Elly Liu"))
        assert filtered.events == []
        assert len(filtered.warnings) == 1
        assert "Elsa Liu" in filtered.warnings[0]
        assert filtered.warnings[0].startswith("Filtered 1 event(s) for different swimmer(s)")

    def test_keeps_either_name_form(self) -> None:
        filtered = filter_events_for_swimmer(
            _result("Doe, Jane", "JANE DOE"), normalize_swimmer_name("Jane Doe")
        )
        assert len(filtered.events) == 2
        assert filtered.warnings == []

    def test_deduplicates_removed_names(self) -> None:
        filtered = filter_events_for_swimmer(
            _result("Jane Doe", "John Doe", "John Doe", "Jan Doe"),
            normalize_swimmer_name("Jane Doe"),
        )
        assert len(filtered.events) == 1
        assert filtered.warnings == ["Filtered 3 event(s) for different swimmer(s): John Doe, Jan Doe"]

    def test_unchanged_when_all_match(self) -> None:
        original = _result("Jane Doe")
        assert filter_events_for_swimmer(original, normalize_swimmer_name("Doe, Jane")) is original
