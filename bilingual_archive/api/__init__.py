"""HTTP API for the archive."""
