"""Command implementations for the metricscan CLI."""
