from dataclasses import replace

from heatsync.extraction.models import ExtractionResult
from heatsync.logging.logger import Log
from heatsync.utils.names import NormalizedName, normalize_swimmer_name


def filter_events_for_swimmer(
    result: ExtractionResult,
    requested: NormalizedName,
) -> ExtractionResult:
    """Drop events whose swimmer name does not normalize to the requested name.

    Removed names are reported once each in a single warning.
    """
    kept = []
    removed_names: list[str] = []
    for event in result.events:
        if normalize_swimmer_name(event.swimmer_name).cache_key == requested.cache_key:
            kept.append(event)
        elif event.swimmer_name not in removed_names:
            removed_names.append(event.swimmer_name)

    removed_count = len(result.events) - len(kept)
    if removed_count == 0:
        return result

    warning = (
        f"Filtered {removed_count} event(s) for different swimmer(s): "
        f"{', '.join(removed_names)}"
    )
    Log.warning(f"Post-filter for '{requested.first_last}': {warning}")
    warnings = list(result.warnings)
    if warning not in warnings:
        warnings.append(warning)
    return replace(result, events=kept, warnings=warnings)
