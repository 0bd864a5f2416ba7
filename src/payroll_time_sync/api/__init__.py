"""HTTP API for the time sync engine."""
