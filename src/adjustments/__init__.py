"""Per-team stat adjustments: schedule, injuries, weather."""
