"""HTTP API for the carnival directory."""
