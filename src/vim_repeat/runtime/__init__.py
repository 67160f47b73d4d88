"""Runtime services (telemetry) shared by the repeat engine."""
