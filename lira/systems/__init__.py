"""Journal, statistics and telemetry systems for the colony."""
