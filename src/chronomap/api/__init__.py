"""HTTP API for ChronoMap (FastAPI)."""
