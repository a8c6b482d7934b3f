"""Life dashboard: day finalization, habit streaks and life score."""
