"""Pet health telemetry normalization and daily report pipeline."""
