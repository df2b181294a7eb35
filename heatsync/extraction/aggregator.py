from heatsync.extraction.exceptions import ExtractionError
from heatsync.extraction.models import ExtractionResult, SwimEvent


def aggregate_batch_results(batch_results: list[ExtractionResult]) -> ExtractionResult:
    """Merge per-batch results into one.

    Meet metadata comes from the first batch, which holds the earliest pages
    and so most often the title page. Events are deduplicated on
    (eventNumber, heatNumber, lane, swimmerName) keeping the first seen, then
    sorted by (eventNumber, heatNumber, lane). Warnings are unioned in
    first-seen order.
    """
    if not batch_results:
        raise ExtractionError("No batch results to aggregate")

    first = batch_results[0]

    unique_events: dict[tuple[int, int, int, str], SwimEvent] = {}
    for result in batch_results:
        for event in result.events:
            unique_events.setdefault(event.dedup_key, event)
    events = sorted(unique_events.values(), key=lambda e: e.sort_key)

    warnings: list[str] = []
    for result in batch_results:
        for warning in result.warnings:
            if warning not in warnings:
                warnings.append(warning)

    return ExtractionResult(
        meet_name=first.meet_name,
        session_date=first.session_date,
        meet_date_range=first.meet_date_range,
        venue=first.venue,
        events=events,
        warnings=warnings,
    )
