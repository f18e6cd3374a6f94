"""HTTP backend (FastAPI)."""
