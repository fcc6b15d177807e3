"""HTTP API for the portal."""
