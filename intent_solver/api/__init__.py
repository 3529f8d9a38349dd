"""HTTP API for the intent solver."""
